from sqlalchemy import Column, Integer, String, Text, Date, ForeignKey, TIMESTAMP
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from transport_desk.database import Base


class VIP(Base):
    __tablename__ = "vips"

    id                = Column(Integer, primary_key=True, index=True)
    name              = Column(String(150), nullable=False)
    arrivalDate       = Column(Date, nullable=False)
    arrivalTime       = Column(String(10), nullable=False)     # "HH:MM"
    arrivalAirport    = Column(String(100), nullable=False)
    arrivalTerminal   = Column(String(50), nullable=False)
    departureDate     = Column(Date, nullable=False)
    departureTime     = Column(String(10), nullable=False)
    departureAirport  = Column(String(100), nullable=False)
    departureTerminal = Column(String(50), nullable=False)
    remarks           = Column(Text, nullable=True)
    # Back-reference owned by the assignment write path
    assignedDriverId  = Column(Integer, ForeignKey("drivers.id"), nullable=True, index=True)
    createdAt         = Column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False)
    updatedAt         = Column(TIMESTAMP(timezone=True), server_default=func.now(),
                               onupdate=func.now(), nullable=False)

    # ─── Relationships ─────────────────────────────────────────────────────────
    assigned_driver = relationship("Driver", foreign_keys=[assignedDriverId])
    assignments     = relationship("Assignment", back_populates="vip")

    def __repr__(self):
        return f"<VIP id={self.id} name={self.name}>"
