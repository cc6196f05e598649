import enum
from sqlalchemy import Column, Integer, Float, ForeignKey, TIMESTAMP
from sqlalchemy.sql import func
from transport_desk.database import Base, str_enum


class LocationStatus(str, enum.Enum):
    ENROUTE    = "enroute"
    AT_AIRPORT = "at_airport"
    AT_HOTEL   = "at_hotel"
    AT_VENUE   = "at_venue"
    AVAILABLE  = "available"


class LocationUpdate(Base):
    """Stored position pings. Only read here, to guard driver deletion."""
    __tablename__ = "location_updates"

    id        = Column(Integer, primary_key=True, index=True)
    driverId  = Column(Integer, ForeignKey("drivers.id"), nullable=False, index=True)
    latitude  = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    status    = Column(str_enum(LocationStatus), nullable=False)
    timestamp = Column(TIMESTAMP(timezone=True), nullable=False)
    createdAt = Column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<LocationUpdate id={self.id} driverId={self.driverId} status={self.status}>"
