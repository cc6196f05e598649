import re
from datetime import date
from pydantic import BaseModel, field_validator, model_validator
from typing import Optional

TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def _check_time(v):
    if v is not None and not TIME_RE.match(v):
        raise ValueError("Time must be HH:MM")
    return v


class VipCreateRequest(BaseModel):
    name:              str
    arrivalDate:       date
    arrivalTime:       str
    arrivalAirport:    str
    arrivalTerminal:   str
    departureDate:     date
    departureTime:     str
    departureAirport:  str
    departureTerminal: str
    remarks:           Optional[str] = None

    @field_validator("name")
    @classmethod
    def check_name(cls, v):
        if not v.strip(): raise ValueError("Name cannot be empty")
        return v.strip()

    @field_validator("arrivalTime", "departureTime")
    @classmethod
    def check_time(cls, v):
        return _check_time(v)

    @model_validator(mode="after")
    def check_dates(self) -> "VipCreateRequest":
        if self.departureDate < self.arrivalDate:
            raise ValueError("departureDate cannot be before arrivalDate")
        return self


class VipUpdateRequest(BaseModel):
    name:              Optional[str] = None
    arrivalDate:       Optional[date] = None
    arrivalTime:       Optional[str] = None
    arrivalAirport:    Optional[str] = None
    arrivalTerminal:   Optional[str] = None
    departureDate:     Optional[date] = None
    departureTime:     Optional[str] = None
    departureAirport:  Optional[str] = None
    departureTerminal: Optional[str] = None
    remarks:           Optional[str] = None

    @field_validator("arrivalTime", "departureTime")
    @classmethod
    def check_time(cls, v):
        return _check_time(v)
