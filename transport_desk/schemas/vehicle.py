from datetime import datetime
from pydantic import BaseModel, field_validator
from typing import Optional


def _check_gauge(v):
    if v is not None and not (0 <= v <= 100):
        raise ValueError("Fuel gauge must be between 0 and 100")
    return v


def _check_mileage(v):
    if v is not None and v < 0:
        raise ValueError("Mileage must be a valid positive number")
    return v


# ─── Requests ─────────────────────────────────────────────────────────────────
class VehicleCreateRequest(BaseModel):
    make:            str
    model:           str
    registration:    str
    isHired:         bool = True
    pickupLocation:  str
    pickupMileage:   int
    pickupFuelGauge: int
    pickupPhotos:    list[str] = []
    pickupDate:      datetime

    @field_validator("registration")
    @classmethod
    def check_registration(cls, v):
        if not v.strip(): raise ValueError("Registration cannot be empty")
        return v.strip().upper()

    @field_validator("pickupMileage")
    @classmethod
    def check_mileage(cls, v):
        return _check_mileage(v)

    @field_validator("pickupFuelGauge")
    @classmethod
    def check_gauge(cls, v):
        return _check_gauge(v)


class VehicleUpdateRequest(BaseModel):
    """No currentDriverId: only assignments move it."""
    make:            Optional[str] = None
    model:           Optional[str] = None
    registration:    Optional[str] = None
    isHired:         Optional[bool] = None
    pickupLocation:  Optional[str] = None
    pickupMileage:   Optional[int] = None
    pickupFuelGauge: Optional[int] = None
    pickupPhotos:    Optional[list[str]] = None
    pickupDate:      Optional[datetime] = None

    @field_validator("pickupMileage")
    @classmethod
    def check_mileage(cls, v):
        return _check_mileage(v)

    @field_validator("pickupFuelGauge")
    @classmethod
    def check_gauge(cls, v):
        return _check_gauge(v)


class VehicleReturnRequest(BaseModel):
    dropoffMileage:   int
    dropoffFuelGauge: int
    dropoffPhotos:    list[str] = []
    dropoffDate:      Optional[datetime] = None

    @field_validator("dropoffMileage")
    @classmethod
    def check_mileage(cls, v):
        return _check_mileage(v)

    @field_validator("dropoffFuelGauge")
    @classmethod
    def check_gauge(cls, v):
        return _check_gauge(v)
