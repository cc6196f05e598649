import re
from datetime import datetime
from pydantic import BaseModel, EmailStr, field_validator, model_validator
from typing import Optional

UK_PHONE_RE = re.compile(r"^(\+44|0)[1-9]\d{8,9}$")


def _check_phone(v: str) -> str:
    compact = re.sub(r"\s", "", v)
    if not UK_PHONE_RE.match(compact):
        raise ValueError("Invalid UK phone number format")
    return compact


class DriverRegisterRequest(BaseModel):
    name:                   str
    email:                  EmailStr
    phone:                  str
    kingschatHandle:        Optional[str] = None
    homeAddress:            Optional[str] = None
    homePostCode:           Optional[str] = None
    church:                 str
    zone:                   str
    group:                  str
    emergencyContactName:   str
    emergencyContactPhone:  str
    yearsDrivingExperience: int
    licenseDurationYears:   int
    availabilityStart:      datetime
    availabilityEnd:        datetime

    @field_validator("name", "church", "zone", "group", "emergencyContactName")
    @classmethod
    def not_empty(cls, v):
        if not v.strip(): raise ValueError("Field cannot be empty")
        return v.strip()

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v):
        return _check_phone(v)

    @field_validator("yearsDrivingExperience", "licenseDurationYears")
    @classmethod
    def non_negative(cls, v):
        if v < 0: raise ValueError("Must not be negative")
        return v

    @model_validator(mode="after")
    def check_availability(self) -> "DriverRegisterRequest":
        if self.availabilityEnd <= self.availabilityStart:
            raise ValueError("availabilityEnd must be after availabilityStart")
        return self


class DriverUpdateRequest(BaseModel):
    name:                   Optional[str] = None
    phone:                  Optional[str] = None
    kingschatHandle:        Optional[str] = None
    homeAddress:            Optional[str] = None
    homePostCode:           Optional[str] = None
    church:                 Optional[str] = None
    zone:                   Optional[str] = None
    group:                  Optional[str] = None
    emergencyContactName:   Optional[str] = None
    emergencyContactPhone:  Optional[str] = None
    yearsDrivingExperience: Optional[int] = None
    licenseDurationYears:   Optional[int] = None
    availabilityStart:      Optional[datetime] = None
    availabilityEnd:        Optional[datetime] = None

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v):
        return _check_phone(v) if v is not None else v


class DriverRejectRequest(BaseModel):
    reason: Optional[str] = None
