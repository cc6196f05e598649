"""
Import all models here so that:
1. Alembic can auto-detect them when generating migrations
2. Relationships between models resolve correctly

Parent tables are imported before child tables.
"""

from transport_desk.models.user import User
from transport_desk.models.password_reset_otp import PasswordResetOTP
from transport_desk.models.driver import Driver, DriverStatus
from transport_desk.models.vehicle import Vehicle
from transport_desk.models.vip import VIP
from transport_desk.models.assignment import Assignment, AssignmentStatus
from transport_desk.models.checkin import Checkin, CheckinType, CheckinCategory
from transport_desk.models.vehicle_observation import VehicleObservation, ObservationType
from transport_desk.models.location_update import LocationUpdate, LocationStatus
from transport_desk.models.audit_log import AuditLog

__all__ = [
    "User",
    "PasswordResetOTP",
    "Driver",
    "DriverStatus",
    "Vehicle",
    "VIP",
    "Assignment",
    "AssignmentStatus",
    "Checkin",
    "CheckinType",
    "CheckinCategory",
    "VehicleObservation",
    "ObservationType",
    "LocationUpdate",
    "LocationStatus",
    "AuditLog",
]
