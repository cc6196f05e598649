from datetime import date
from pydantic import BaseModel, field_validator, model_validator
from typing import Optional

from transport_desk.models.checkin import CheckinType, CheckinCategory, DEFAULT_SESSION


class CheckinCreateRequest(BaseModel):
    assignmentId: int
    checkinType:  CheckinType
    eventDate:    Optional[date] = None
    sessionId:    Optional[str] = None
    customLabel:  Optional[str] = None
    notes:        Optional[str] = None
    latitude:     Optional[float] = None
    longitude:    Optional[float] = None

    @field_validator("sessionId", "customLabel")
    @classmethod
    def blank_to_none(cls, v):
        if v is None: return v
        return v.strip() or None

    @field_validator("sessionId")
    @classmethod
    def default_session_is_unnamed(cls, v):
        # progress reports an unnamed session as "default"; both are one scope
        return None if v == DEFAULT_SESSION else v

    @field_validator("latitude")
    @classmethod
    def check_lat(cls, v):
        if v is not None and not (-90 <= v <= 90): raise ValueError("Latitude out of range")
        return v

    @field_validator("longitude")
    @classmethod
    def check_lon(cls, v):
        if v is not None and not (-180 <= v <= 180): raise ValueError("Longitude out of range")
        return v

    @model_validator(mode="after")
    def check_category_fields(self) -> "CheckinCreateRequest":
        category = self.checkinType.category
        if category is CheckinCategory.LEGACY:
            raise ValueError(f"{self.checkinType.value} is a legacy check-in type and can no longer be recorded")
        if category is CheckinCategory.DAILY and self.eventDate is None:
            raise ValueError("eventDate is required for daily check-ins")
        if category is CheckinCategory.UNLIMITED and not self.customLabel:
            raise ValueError("customLabel is required for custom check-ins")
        return self
