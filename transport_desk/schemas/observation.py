from pydantic import BaseModel, field_validator
from typing import Optional

from transport_desk.models.vehicle_observation import ObservationType


class ObservationCreateRequest(BaseModel):
    assignmentId:    int
    vehicleId:       int
    observationType: ObservationType
    mileage:         Optional[int] = None
    fuelLevel:       Optional[int] = None
    damageNotes:     Optional[str] = None
    photos:          Optional[list[str]] = None

    @field_validator("mileage")
    @classmethod
    def check_mileage(cls, v):
        if v is not None and v < 0: raise ValueError("Mileage cannot be negative")
        return v

    @field_validator("fuelLevel")
    @classmethod
    def check_fuel(cls, v):
        if v is not None and not (0 <= v <= 100): raise ValueError("Fuel level must be between 0 and 100")
        return v
