import logging
from datetime import datetime, timezone
from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from transport_desk.models.assignment import (
    Assignment, AssignmentStatus, LIVE_STATUSES, can_transition,
)
from transport_desk.models.checkin import Checkin
from transport_desk.models.driver import Driver, DriverStatus
from transport_desk.models.user import User
from transport_desk.models.vehicle_observation import VehicleObservation
from transport_desk.schemas.assignment import (
    AssignmentCreateRequest, AssignmentUpdateRequest, AssignmentStatusRequest, AssignVipRequest,
)
from transport_desk.schemas.common import as_utc, iso
from transport_desk.services import exclusivity
from transport_desk.utils.audit import log_action
from transport_desk.utils.email import send_assignment_email
from transport_desk.utils.exceptions import (
    NotFoundException, ValidationException, InvalidTransitionException,
)

logger = logging.getLogger(__name__)


def serialize_assignment(a: Assignment) -> dict:
    return {
        "id":     a.id,
        "status": a.status.value,
        "driver": {
            "id":    a.driver.id,
            "name":  a.driver.name,
            "phone": a.driver.phone,
            "email": a.driver.email,
        },
        "vehicle": {
            "id":           a.vehicle.id,
            "make":         a.vehicle.make,
            "model":        a.vehicle.model,
            "registration": a.vehicle.registration,
        },
        "vip": {
            "id":            a.vip.id,
            "name":          a.vip.name,
            "arrivalDate":   iso(a.vip.arrivalDate),
            "departureDate": iso(a.vip.departureDate),
        } if a.vip else None,
        "startTime":   iso(a.startTime),
        "endTime":     iso(a.endTime),
        "activatedAt": iso(a.activatedAt),
        "completedAt": iso(a.completedAt),
        "createdAt":   iso(a.createdAt),
        "updatedAt":   iso(a.updatedAt),
    }


def _parse_status(value: str) -> AssignmentStatus:
    try:
        return AssignmentStatus(value)
    except ValueError:
        allowed = ", ".join(s.value for s in AssignmentStatus)
        raise ValidationException(f"Invalid status. Must be one of: {allowed}", field="status")


class AssignmentService:

    def _get(self, db: Session, assignment_id: int) -> Assignment:
        a = db.query(Assignment).filter(Assignment.id == assignment_id).first()
        if not a:
            raise NotFoundException("Assignment")
        return a

    def list_assignments(
        self, db: Session, page: int, limit: int,
        status: str | None, driver_id: int | None,
    ) -> tuple[list[dict], int]:
        q = db.query(Assignment)
        if status:    q = q.filter(Assignment.status == _parse_status(status))
        if driver_id: q = q.filter(Assignment.driverId == driver_id)
        total = q.count()
        items = q.order_by(Assignment.createdAt.desc(), Assignment.id.desc())\
                 .offset((page - 1) * limit).limit(limit).all()
        return [serialize_assignment(a) for a in items], total

    def get_assignment(self, db: Session, assignment_id: int) -> dict:
        return serialize_assignment(self._get(db, assignment_id))

    # ─── Create ───────────────────────────────────────────────────────────────
    def create_assignment(self, db: Session, data: AssignmentCreateRequest, actor: User) -> dict:
        driver = db.query(Driver).filter(Driver.id == data.driverId).first()
        if not driver:
            raise NotFoundException("Driver")
        if driver.status not in (DriverStatus.APPROVED, DriverStatus.ACTIVE):
            raise ValidationException("Driver must be approved before being assigned", field="driverId")

        vehicle = exclusivity.claim_vehicle(db, data.vehicleId, driver.id)
        vip = exclusivity.claim_vip(db, data.vipId, driver.id) if data.vipId is not None else None

        a = Assignment(
            driverId=driver.id,
            vehicleId=vehicle.id,
            vipId=vip.id if vip else None,
            startTime=data.startTime,
            endTime=data.endTime,
            status=AssignmentStatus.SCHEDULED,
        )
        db.add(a)
        db.flush()
        log_action(db, actor.id, "CREATE", "Assignment", a.id,
                   f"{driver.name} assigned to {vehicle.label}" + (f" with VIP {vip.name}" if vip else ""))
        db.commit()
        db.refresh(a)
        logger.info(f"Assignment #{a.id} created: driver={driver.id} vehicle={vehicle.id} vip={a.vipId}")

        if not send_assignment_email(driver.email, driver.name, a.id, vehicle.label,
                                     a.startTime.isoformat(), vip.name if vip else None):
            logger.warning(f"Assignment #{a.id}: notification to {driver.email} failed")
        return serialize_assignment(a)

    # ─── Edit ─────────────────────────────────────────────────────────────────
    def update_assignment(self, db: Session, assignment_id: int, data: AssignmentUpdateRequest, actor: User) -> dict:
        a = self._get(db, assignment_id)
        if not a.is_live:
            raise ValidationException("Completed assignments cannot be edited")

        changed = data.model_fields_set
        if "vehicleId" in changed:
            exclusivity.switch_vehicle(db, a, data.vehicleId)
        if "vipId" in changed:
            exclusivity.switch_vip(db, a, data.vipId)
        if "startTime" in changed and data.startTime is not None:
            a.startTime = data.startTime
        if "endTime" in changed:
            a.endTime = data.endTime
        if a.endTime is not None and as_utc(a.endTime) <= as_utc(a.startTime):
            raise ValidationException("endTime must be after startTime", field="endTime")

        a.updatedAt = datetime.now(timezone.utc)
        log_action(db, actor.id, "UPDATE", "Assignment", a.id,
                   f"Updated assignment #{a.id} ({', '.join(sorted(changed)) or 'no fields'})")
        db.commit()
        db.refresh(a)
        return serialize_assignment(a)

    # ─── Status ───────────────────────────────────────────────────────────────
    def update_status(self, db: Session, assignment_id: int, data: AssignmentStatusRequest, actor: User) -> dict:
        requested = _parse_status(data.status)
        a = self._get(db, assignment_id)
        previous = a.status

        if not can_transition(previous, requested):
            raise InvalidTransitionException(previous.value, requested.value)

        now = datetime.now(timezone.utc)
        if previous == AssignmentStatus.SCHEDULED and requested == AssignmentStatus.ACTIVE:
            a.activatedAt = now
        if requested == AssignmentStatus.COMPLETED and previous != AssignmentStatus.COMPLETED:
            a.completedAt = now
            exclusivity.release_all(db, a)
        a.status = requested
        a.updatedAt = now

        reason = f" - Reason: {data.reason}" if data.reason else ""
        log_action(db, actor.id, "STATUS_CHANGE", "Assignment", a.id,
                   f"Assignment #{a.id} {previous.value} -> {requested.value}{reason}")
        db.commit()
        db.refresh(a)
        logger.info(f"Assignment {a.id} status changed from {previous.value} to {requested.value}{reason}")
        return {"assignment": serialize_assignment(a), "previousStatus": previous.value}

    def activate_on_first_checkin(self, db: Session, assignment_id: int, driver_id: int) -> bool:
        """
        Move a still-scheduled assignment to active when its first check-in
        lands. Runs after the check-in has been committed; any failure is
        logged and swallowed so the check-in stands. Returns True if the
        assignment was activated by this call.
        """
        try:
            count = db.query(Checkin).filter(
                Checkin.assignmentId == assignment_id,
                Checkin.driverId == driver_id,
            ).count()
            if count != 1:
                return False

            now = datetime.now(timezone.utc)
            result = db.execute(
                update(Assignment)
                .where(Assignment.id == assignment_id, Assignment.status == AssignmentStatus.SCHEDULED)
                .values(status=AssignmentStatus.ACTIVE, activatedAt=now, updatedAt=now)
            )
            if result.rowcount:
                log_action(db, None, "AUTO_ACTIVATE", "Assignment", assignment_id,
                           f"Assignment #{assignment_id} activated by first check-in")
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Auto-activation of assignment {assignment_id} failed: {e}")
            return False

        if result.rowcount:
            logger.info(f"Assignment {assignment_id} auto-activated on first check-in")
            return True
        return False

    # ─── VIP attach ───────────────────────────────────────────────────────────
    def assign_vip(self, db: Session, data: AssignVipRequest, actor: User) -> dict:
        a = db.query(Assignment).filter(
            Assignment.driverId == data.driverId,
            Assignment.status.in_(LIVE_STATUSES),
        ).order_by(Assignment.createdAt.desc(), Assignment.id.desc()).first()
        if not a:
            raise NotFoundException("Active assignment for this driver")

        exclusivity.switch_vip(db, a, data.vipId)
        a.updatedAt = datetime.now(timezone.utc)
        log_action(db, actor.id, "ASSIGN_VIP", "Assignment", a.id,
                   f"VIP #{data.vipId} attached to assignment #{a.id}")
        db.commit()
        db.refresh(a)
        return serialize_assignment(a)

    # ─── Delete ───────────────────────────────────────────────────────────────
    def delete_assignment(self, db: Session, assignment_id: int, actor: User) -> dict:
        a = self._get(db, assignment_id)

        checkins = db.query(Checkin).filter(Checkin.assignmentId == a.id).all()
        observations = db.query(VehicleObservation).filter(VehicleObservation.assignmentId == a.id).all()
        for row in checkins + observations:
            db.delete(row)
        # children go first so the parent delete finds nothing to orphan
        db.flush()
        checkins_deleted, observations_deleted = len(checkins), len(observations)
        # completion already released; the pointers may now belong to a newer assignment
        if a.is_live:
            exclusivity.release_all(db, a)

        log_action(db, actor.id, "DELETE", "Assignment", a.id,
                   f"Deleted assignment #{a.id} with {checkins_deleted} check-ins "
                   f"and {observations_deleted} observations")
        db.delete(a)
        db.commit()
        logger.info(f"Assignment {assignment_id} deleted "
                    f"(checkins={checkins_deleted}, observations={observations_deleted})")
        return {
            "deletedAssignmentId": assignment_id,
            "relatedRecordsDeleted": {
                "checkins":     checkins_deleted,
                "observations": observations_deleted,
            },
        }


assignment_service = AssignmentService()
