from datetime import datetime
from pydantic import BaseModel, field_validator, model_validator
from typing import Optional

from transport_desk.schemas.common import as_utc


class AssignmentCreateRequest(BaseModel):
    driverId:  int
    vehicleId: int
    vipId:     Optional[int] = None
    startTime: datetime
    endTime:   Optional[datetime] = None

    @field_validator("startTime", "endTime")
    @classmethod
    def naive_is_utc(cls, v):
        return as_utc(v) if v is not None else v

    @model_validator(mode="after")
    def check_times(self) -> "AssignmentCreateRequest":
        if self.endTime is not None and self.endTime <= self.startTime:
            raise ValueError("endTime must be after startTime")
        return self


class AssignmentUpdateRequest(BaseModel):
    """
    Editable fields of a live assignment. driverId is not accepted: to
    change the driver, complete this assignment and create a new one.

    Sending "vipId": null detaches the VIP; omitting vipId leaves it alone
    (see `model_fields_set`).
    """
    vehicleId: Optional[int] = None
    vipId:     Optional[int] = None
    startTime: Optional[datetime] = None
    endTime:   Optional[datetime] = None

    model_config = {"extra": "forbid"}

    @field_validator("startTime", "endTime")
    @classmethod
    def naive_is_utc(cls, v):
        return as_utc(v) if v is not None else v

    @field_validator("vehicleId")
    @classmethod
    def vehicle_not_null(cls, v):
        if v is None: raise ValueError("vehicleId cannot be null")
        return v


class AssignmentStatusRequest(BaseModel):
    # Plain str: unknown values are reported by the service as a 400
    status: str
    reason: Optional[str] = None


class AssignVipRequest(BaseModel):
    vipId:    int
    driverId: int
