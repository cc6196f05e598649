import enum
from sqlalchemy import Column, Integer, String, Text, ForeignKey, TIMESTAMP
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from transport_desk.database import Base, str_enum


class DriverStatus(str, enum.Enum):
    PENDING  = "pending"
    APPROVED = "approved"
    ACTIVE   = "active"
    INACTIVE = "inactive"


class Driver(Base):
    __tablename__ = "drivers"

    id                     = Column(Integer, primary_key=True, index=True)
    userId                 = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"),
                                    unique=True, nullable=True)
    name                   = Column(String(150), nullable=False)
    email                  = Column(String(255), unique=True, nullable=False, index=True)
    phone                  = Column(String(20), nullable=False)
    kingschatHandle        = Column(String(100), nullable=True)
    homeAddress            = Column(Text, nullable=True)
    homePostCode           = Column(String(20), nullable=True)
    church                 = Column(String(150), nullable=False)
    zone                   = Column(String(100), nullable=False)
    group                  = Column(String(100), nullable=False)
    emergencyContactName   = Column(String(150), nullable=False)
    emergencyContactPhone  = Column(String(20), nullable=False)
    yearsDrivingExperience = Column(Integer, nullable=False)
    licenseDurationYears   = Column(Integer, nullable=False)
    availabilityStart      = Column(TIMESTAMP(timezone=True), nullable=False)
    availabilityEnd        = Column(TIMESTAMP(timezone=True), nullable=False)
    status                 = Column(str_enum(DriverStatus), default=DriverStatus.PENDING,
                                    nullable=False, index=True)
    createdAt              = Column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False)
    updatedAt              = Column(TIMESTAMP(timezone=True), server_default=func.now(),
                                    onupdate=func.now(), nullable=False)

    # ─── Relationships ─────────────────────────────────────────────────────────
    user        = relationship("User", back_populates="driver_profile")
    assignments = relationship("Assignment", back_populates="driver")

    def __repr__(self):
        return f"<Driver id={self.id} email={self.email} status={self.status}>"
