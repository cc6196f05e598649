import enum
from sqlalchemy import Column, Integer, ForeignKey, TIMESTAMP
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from transport_desk.database import Base, str_enum


class AssignmentStatus(str, enum.Enum):
    SCHEDULED = "scheduled"
    ACTIVE    = "active"
    COMPLETED = "completed"


# current -> statuses it may move to. COMPLETED is terminal.
# SCHEDULED may skip straight to COMPLETED (cancelled / no-show runs).
ALLOWED_TRANSITIONS: dict[AssignmentStatus, frozenset[AssignmentStatus]] = {
    AssignmentStatus.SCHEDULED: frozenset({AssignmentStatus.ACTIVE, AssignmentStatus.COMPLETED}),
    AssignmentStatus.ACTIVE:    frozenset({AssignmentStatus.COMPLETED}),
    AssignmentStatus.COMPLETED: frozenset(),
}

LIVE_STATUSES = (AssignmentStatus.SCHEDULED, AssignmentStatus.ACTIVE)


def can_transition(current: AssignmentStatus, requested: AssignmentStatus) -> bool:
    """Same-status requests are always allowed (idempotent no-op)."""
    return current == requested or requested in ALLOWED_TRANSITIONS[current]


class Assignment(Base):
    __tablename__ = "assignments"

    id          = Column(Integer, primary_key=True, index=True)
    driverId    = Column(Integer, ForeignKey("drivers.id"), nullable=False, index=True)
    vehicleId   = Column(Integer, ForeignKey("vehicles.id"), nullable=False, index=True)
    vipId       = Column(Integer, ForeignKey("vips.id"), nullable=True, index=True)
    startTime   = Column(TIMESTAMP(timezone=True), nullable=False)
    endTime     = Column(TIMESTAMP(timezone=True), nullable=True)
    status      = Column(str_enum(AssignmentStatus), default=AssignmentStatus.SCHEDULED,
                         nullable=False, index=True)
    activatedAt = Column(TIMESTAMP(timezone=True), nullable=True)
    completedAt = Column(TIMESTAMP(timezone=True), nullable=True)
    createdAt   = Column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False)
    updatedAt   = Column(TIMESTAMP(timezone=True), server_default=func.now(),
                         onupdate=func.now(), nullable=False)

    # ─── Relationships ─────────────────────────────────────────────────────────
    driver       = relationship("Driver", back_populates="assignments")
    vehicle      = relationship("Vehicle", back_populates="assignments")
    vip          = relationship("VIP", back_populates="assignments")
    checkins     = relationship("Checkin", back_populates="assignment")
    observations = relationship("VehicleObservation", back_populates="assignment")

    @property
    def is_live(self) -> bool:
        return self.status in LIVE_STATUSES

    def __repr__(self):
        return f"<Assignment id={self.id} driverId={self.driverId} vehicleId={self.vehicleId} status={self.status}>"
