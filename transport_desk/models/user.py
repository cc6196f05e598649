from sqlalchemy import Column, Integer, String, Boolean, TIMESTAMP
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from transport_desk.database import Base, str_enum
from transport_desk.models.role import RoleName, DepartmentName


class User(Base):
    __tablename__ = "users"

    id         = Column(Integer, primary_key=True, index=True)
    email      = Column(String(255), unique=True, nullable=False, index=True)
    name       = Column(String(150), nullable=False)
    password   = Column(String(255), nullable=False)
    role       = Column(str_enum(RoleName), nullable=False)
    department = Column(str_enum(DepartmentName), nullable=False)
    isActive   = Column(Boolean, default=True, nullable=False)
    createdAt  = Column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False)
    updatedAt  = Column(TIMESTAMP(timezone=True), server_default=func.now(),
                        onupdate=func.now(), nullable=False)

    # ─── Relationships ─────────────────────────────────────────────────────────
    driver_profile      = relationship("Driver", back_populates="user", uselist=False)
    audit_logs          = relationship("AuditLog", back_populates="user")
    password_reset_otps = relationship("PasswordResetOTP", back_populates="user",
                                       cascade="all, delete-orphan")

    def __repr__(self):
        return f"<User id={self.id} email={self.email} role={self.role}>"
