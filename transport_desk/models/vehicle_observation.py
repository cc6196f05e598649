import enum
from sqlalchemy import Column, Integer, Text, ForeignKey, TIMESTAMP, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from transport_desk.database import Base, str_enum


class ObservationType(str, enum.Enum):
    PICKUP            = "pickup"
    DROPOFF           = "dropoff"
    MAINTENANCE_ISSUE = "maintenance_issue"


class VehicleObservation(Base):
    __tablename__ = "vehicle_observations"

    id              = Column(Integer, primary_key=True, index=True)
    driverId        = Column(Integer, ForeignKey("drivers.id"), nullable=False, index=True)
    vehicleId       = Column(Integer, ForeignKey("vehicles.id"), nullable=False, index=True)
    assignmentId    = Column(Integer, ForeignKey("assignments.id"), nullable=False, index=True)
    observationType = Column(str_enum(ObservationType), nullable=False)
    mileage         = Column(Integer, nullable=True)
    fuelLevel       = Column(Integer, nullable=True)     # percent, 0-100
    damageNotes     = Column(Text, nullable=True)
    photos          = Column(JSON, nullable=True)
    timestamp       = Column(TIMESTAMP(timezone=True), nullable=False)
    createdAt       = Column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False)

    # ─── Relationships ─────────────────────────────────────────────────────────
    assignment = relationship("Assignment", back_populates="observations")
    vehicle    = relationship("Vehicle")
    driver     = relationship("Driver")

    def __repr__(self):
        return f"<VehicleObservation id={self.id} vehicleId={self.vehicleId} type={self.observationType}>"
