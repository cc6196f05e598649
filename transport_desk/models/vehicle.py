from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, TIMESTAMP, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from transport_desk.database import Base


class Vehicle(Base):
    __tablename__ = "vehicles"

    id               = Column(Integer, primary_key=True, index=True)
    make             = Column(String(100), nullable=False)
    model            = Column(String(100), nullable=False)
    registration     = Column(String(20), unique=True, nullable=False, index=True)
    isHired          = Column(Boolean, default=True, nullable=False)
    # ─── Pickup snapshot ───────────────────────────────────────────────────────
    pickupLocation   = Column(String(255), nullable=False)
    pickupMileage    = Column(Integer, nullable=False)
    pickupFuelGauge  = Column(Integer, nullable=False)     # percent, 0-100
    pickupPhotos     = Column(JSON, default=list, nullable=False)
    pickupDate       = Column(TIMESTAMP(timezone=True), nullable=False)
    # ─── Dropoff snapshot (NULL until returned) ────────────────────────────────
    dropoffMileage   = Column(Integer, nullable=True)
    dropoffFuelGauge = Column(Integer, nullable=True)
    dropoffPhotos    = Column(JSON, nullable=True)
    dropoffDate      = Column(TIMESTAMP(timezone=True), nullable=True)
    # Back-reference owned by the assignment write path
    currentDriverId  = Column(Integer, ForeignKey("drivers.id"), nullable=True, index=True)
    createdAt        = Column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False)
    updatedAt        = Column(TIMESTAMP(timezone=True), server_default=func.now(),
                              onupdate=func.now(), nullable=False)

    # ─── Relationships ─────────────────────────────────────────────────────────
    current_driver = relationship("Driver", foreign_keys=[currentDriverId])
    assignments    = relationship("Assignment", back_populates="vehicle")

    @property
    def label(self) -> str:
        return f"{self.make} {self.model} ({self.registration})"

    def __repr__(self):
        return f"<Vehicle id={self.id} registration={self.registration}>"
