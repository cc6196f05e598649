import enum
from datetime import date
from sqlalchemy import (
    Column, Integer, String, Text, Boolean, Date, Float, ForeignKey, TIMESTAMP,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from transport_desk.database import Base, str_enum


class CheckinCategory(str, enum.Enum):
    DAILY     = "daily"       # once per event date x session
    ONE_TIME  = "one_time"    # once per assignment
    UNLIMITED = "unlimited"   # custom, never deduplicated
    LEGACY    = "legacy"      # readable only


class CheckinType(str, enum.Enum):
    HOTEL_TO_EVENTS_VENUE   = "hotel_to_events_venue"
    ARRIVED_AT_EVENTS_VENUE = "arrived_at_events_venue"
    DEPARTING_EVENTS_VENUE  = "departing_events_venue"
    ARRIVED_AT_HOTEL        = "arrived_at_hotel"
    AIRPORT_ARRIVAL         = "airport_arrival"
    VIP_PICKUP              = "vip_pickup"
    CUSTOM                  = "custom"
    ENROUTE_HOTEL           = "enroute_hotel"
    HOTEL_ARRIVAL           = "hotel_arrival"
    EVENT_DEPARTURE         = "event_departure"

    @property
    def category(self) -> CheckinCategory:
        return CHECKIN_CATEGORIES[self]

    @property
    def is_daily(self) -> bool:
        return self.category is CheckinCategory.DAILY

    @property
    def is_creatable(self) -> bool:
        return self.category is not CheckinCategory.LEGACY


CHECKIN_CATEGORIES: dict[CheckinType, CheckinCategory] = {
    CheckinType.HOTEL_TO_EVENTS_VENUE:   CheckinCategory.DAILY,
    CheckinType.ARRIVED_AT_EVENTS_VENUE: CheckinCategory.DAILY,
    CheckinType.DEPARTING_EVENTS_VENUE:  CheckinCategory.DAILY,
    CheckinType.ARRIVED_AT_HOTEL:        CheckinCategory.DAILY,
    CheckinType.AIRPORT_ARRIVAL:         CheckinCategory.ONE_TIME,
    CheckinType.VIP_PICKUP:              CheckinCategory.ONE_TIME,
    CheckinType.CUSTOM:                  CheckinCategory.UNLIMITED,
    CheckinType.ENROUTE_HOTEL:           CheckinCategory.LEGACY,
    CheckinType.HOTEL_ARRIVAL:           CheckinCategory.LEGACY,
    CheckinType.EVENT_DEPARTURE:         CheckinCategory.LEGACY,
}

# Declaration order is the itinerary order shown to drivers
DAILY_TYPES    = [t for t in CheckinType if t.category is CheckinCategory.DAILY]
ONE_TIME_TYPES = [t for t in CheckinType if t.category is CheckinCategory.ONE_TIME]

DEFAULT_SESSION = "default"


def dedupe_key(checkin_type: CheckinType, event_date: date | None, session_id: str | None) -> str | None:
    """
    Scope key backing the (assignment, driver, type, key) unique constraint.
    NULL never collides, which is what keeps custom check-ins unbounded.
    """
    category = checkin_type.category
    if category is CheckinCategory.DAILY:
        return f"{event_date.isoformat()}#{session_id or ''}"
    if category is CheckinCategory.ONE_TIME:
        return "once"
    return None


class Checkin(Base):
    __tablename__ = "checkins"

    id             = Column(Integer, primary_key=True, index=True)
    driverId       = Column(Integer, ForeignKey("drivers.id"), nullable=False, index=True)
    assignmentId   = Column(Integer, ForeignKey("assignments.id"), nullable=False, index=True)
    checkinType    = Column(str_enum(CheckinType), nullable=False)
    latitude       = Column(Float, nullable=True)
    longitude      = Column(Float, nullable=True)
    notes          = Column(Text, nullable=True)
    timestamp      = Column(TIMESTAMP(timezone=True), nullable=False)
    isDailyCheckin = Column(Boolean, default=False, nullable=False)
    eventDate      = Column(Date, nullable=True)
    sessionId      = Column(String(50), nullable=True)
    customLabel    = Column(String(150), nullable=True)
    dedupeKey      = Column(String(80), nullable=True)
    createdAt      = Column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        UniqueConstraint("assignmentId", "driverId", "checkinType", "dedupeKey",
                         name="uq_checkins_scope"),
    )

    # ─── Relationships ─────────────────────────────────────────────────────────
    assignment = relationship("Assignment", back_populates="checkins")
    driver     = relationship("Driver")

    @property
    def has_location(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    def __repr__(self):
        return f"<Checkin id={self.id} assignmentId={self.assignmentId} type={self.checkinType}>"
