import logging
from sqlalchemy.orm import Session

from transport_desk.models.assignment import Assignment, LIVE_STATUSES
from transport_desk.models.checkin import Checkin
from transport_desk.models.driver import Driver, DriverStatus
from transport_desk.models.location_update import LocationUpdate
from transport_desk.models.role import RoleName, DepartmentName
from transport_desk.models.user import User
from transport_desk.models.vehicle import Vehicle
from transport_desk.models.vehicle_observation import VehicleObservation
from transport_desk.models.vip import VIP
from transport_desk.schemas.common import as_utc, iso
from transport_desk.schemas.driver import DriverRegisterRequest, DriverUpdateRequest, DriverRejectRequest
from transport_desk.services.assignment_service import serialize_assignment
from transport_desk.services.checkin_service import serialize_checkin
from transport_desk.utils.audit import log_action
from transport_desk.utils.email import send_driver_credentials_email
from transport_desk.utils.exceptions import (
    NotFoundException, DuplicateEntryException, DriverAlreadyApprovedException,
    DriverInUseException, ValidationException,
)
from transport_desk.utils.security import generate_password, hash_password

logger = logging.getLogger(__name__)


def _serialize(d: Driver) -> dict:
    return {
        "id":                     d.id,
        "userId":                 d.userId,
        "name":                   d.name,
        "email":                  d.email,
        "phone":                  d.phone,
        "kingschatHandle":        d.kingschatHandle,
        "homeAddress":            d.homeAddress,
        "homePostCode":           d.homePostCode,
        "church":                 d.church,
        "zone":                   d.zone,
        "group":                  d.group,
        "emergencyContactName":   d.emergencyContactName,
        "emergencyContactPhone":  d.emergencyContactPhone,
        "yearsDrivingExperience": d.yearsDrivingExperience,
        "licenseDurationYears":   d.licenseDurationYears,
        "availabilityStart":      iso(d.availabilityStart),
        "availabilityEnd":        iso(d.availabilityEnd),
        "status":                 d.status.value,
        "createdAt":              iso(d.createdAt),
        "updatedAt":              iso(d.updatedAt),
    }


class DriverService:

    def _get(self, db: Session, driver_id: int) -> Driver:
        d = db.query(Driver).filter(Driver.id == driver_id).first()
        if not d: raise NotFoundException("Driver")
        return d

    # ─── Self-registration (public) ───────────────────────────────────────────
    def register(self, db: Session, data: DriverRegisterRequest) -> dict:
        email = data.email.lower()
        if db.query(Driver).filter(Driver.email == email).first():
            raise DuplicateEntryException("A driver with this email is already registered", field="email")

        d = Driver(**data.model_dump(exclude={"email"}), email=email, status=DriverStatus.PENDING)
        db.add(d)
        db.flush()
        log_action(db, None, "REGISTER", "Driver", d.id, f"Driver application from {d.name} ({email})")
        db.commit()
        db.refresh(d)
        logger.info(f"Driver application #{d.id} received from {email}")
        return _serialize(d)

    def list_drivers(self, db: Session, page: int, limit: int, status: str | None) -> tuple[list[dict], int]:
        q = db.query(Driver)
        if status:
            try:
                q = q.filter(Driver.status == DriverStatus(status))
            except ValueError:
                allowed = ", ".join(s.value for s in DriverStatus)
                raise ValidationException(f"Invalid status. Must be one of: {allowed}", field="status")
        total = q.count()
        items = q.order_by(Driver.createdAt.desc(), Driver.id.desc()).offset((page - 1) * limit).limit(limit).all()
        return [_serialize(d) for d in items], total

    def get_driver(self, db: Session, driver_id: int) -> dict:
        return _serialize(self._get(db, driver_id))

    def update_driver(self, db: Session, driver_id: int, data: DriverUpdateRequest, actor_id: int) -> dict:
        d = self._get(db, driver_id)
        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        for field, value in changes.items():
            setattr(d, field, value)
        if as_utc(d.availabilityEnd) <= as_utc(d.availabilityStart):
            raise ValidationException("availabilityEnd must be after availabilityStart", field="availabilityEnd")

        log_action(db, actor_id, "UPDATE", "Driver", d.id, f"Updated driver {d.name}")
        db.commit()
        db.refresh(d)
        return _serialize(d)

    # ─── Approval ─────────────────────────────────────────────────────────────
    def approve_driver(self, db: Session, driver_id: int, actor_id: int) -> dict:
        """
        Approve an application and provision its login. An existing account
        with the same email is re-roled to driver rather than duplicated.
        The generated password only ever leaves through the credentials email.
        """
        d = self._get(db, driver_id)
        if d.status in (DriverStatus.APPROVED, DriverStatus.ACTIVE):
            raise DriverAlreadyApprovedException()

        password = generate_password()
        user = db.query(User).filter(User.email == d.email).first()
        if user:
            user.role = RoleName.DRIVER
            user.department = DepartmentName.TRANSPORT
            user.password = hash_password(password)
            user.isActive = True
        else:
            user = User(
                email=d.email,
                name=d.name,
                password=hash_password(password),
                role=RoleName.DRIVER,
                department=DepartmentName.TRANSPORT,
                isActive=True,
            )
            db.add(user)
        db.flush()

        d.userId = user.id
        d.status = DriverStatus.APPROVED
        log_action(db, actor_id, "APPROVE", "Driver", d.id, f"Approved driver {d.name}; login {user.email}")
        db.commit()
        db.refresh(d)
        logger.info(f"Driver #{d.id} approved, linked to user #{user.id}")

        email_sent = send_driver_credentials_email(d.email, d.name, password)
        if not email_sent:
            logger.warning(f"Driver #{d.id}: credentials email to {d.email} failed")
        return {"driver": _serialize(d), "emailSent": email_sent}

    def reject_driver(self, db: Session, driver_id: int, data: DriverRejectRequest, actor_id: int) -> dict:
        d = self._get(db, driver_id)
        d.status = DriverStatus.INACTIVE
        reason = f" - Reason: {data.reason}" if data.reason else ""
        log_action(db, actor_id, "REJECT", "Driver", d.id, f"Rejected driver {d.name}{reason}")
        db.commit()
        db.refresh(d)
        return _serialize(d)

    # ─── Delete ───────────────────────────────────────────────────────────────
    def delete_driver(self, db: Session, driver_id: int, actor_id: int) -> dict:
        d = self._get(db, driver_id)

        references = []
        counts = {
            "assignments":          db.query(Assignment).filter(Assignment.driverId == d.id).count(),
            "check-ins":            db.query(Checkin).filter(Checkin.driverId == d.id).count(),
            "vehicle observations": db.query(VehicleObservation).filter(VehicleObservation.driverId == d.id).count(),
            "location updates":     db.query(LocationUpdate).filter(LocationUpdate.driverId == d.id).count(),
            "vehicles":             db.query(Vehicle).filter(Vehicle.currentDriverId == d.id).count(),
            "VIPs":                 db.query(VIP).filter(VIP.assignedDriverId == d.id).count(),
        }
        for label, count in counts.items():
            if count:
                references.append(f"{count} {label}")
        if references:
            raise DriverInUseException(references)

        name = d.name
        log_action(db, actor_id, "DELETE", "Driver", d.id, f"Deleted driver {name}")
        db.delete(d)
        db.commit()
        logger.info(f"Driver #{driver_id} ({name}) deleted")
        return {"deletedDriverId": driver_id, "message": f"Driver {name} deleted successfully"}

    # ─── Driver's own view ────────────────────────────────────────────────────
    def get_my_assignment(self, db: Session, driver: Driver) -> dict:
        a = db.query(Assignment).filter(
            Assignment.driverId == driver.id,
            Assignment.status.in_(LIVE_STATUSES),
        ).order_by(Assignment.createdAt.desc(), Assignment.id.desc()).first()
        if not a:
            return {"assignment": None, "checkins": []}

        checkins = db.query(Checkin).filter(Checkin.assignmentId == a.id)\
                     .order_by(Checkin.timestamp.desc(), Checkin.id.desc()).all()
        data = serialize_assignment(a)
        data["vehicle"].update({
            "pickupLocation":  a.vehicle.pickupLocation,
            "pickupMileage":   a.vehicle.pickupMileage,
            "pickupFuelGauge": a.vehicle.pickupFuelGauge,
        })
        if a.vip:
            data["vip"].update({
                "arrivalTime":       a.vip.arrivalTime,
                "arrivalAirport":    a.vip.arrivalAirport,
                "arrivalTerminal":   a.vip.arrivalTerminal,
                "departureTime":     a.vip.departureTime,
                "departureAirport":  a.vip.departureAirport,
                "departureTerminal": a.vip.departureTerminal,
                "remarks":           a.vip.remarks,
            })
        return {"assignment": data, "checkins": [serialize_checkin(c) for c in checkins]}


driver_service = DriverService()
