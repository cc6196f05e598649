"""
Read-only live view of assignments for coordinators and hospitality staff.

Each row combines the assignment, its driver and VIP, the most recent
check-in and today's progress. Callers from tracking-only departments get
the redacted projection (no vehicle, no session ids, no notes).
"""
import logging
from datetime import date, datetime, time, timedelta, timezone
from sqlalchemy.orm import Session

from transport_desk.models.assignment import Assignment, AssignmentStatus, LIVE_STATUSES
from transport_desk.models.checkin import Checkin, CheckinType
from transport_desk.models.user import User
from transport_desk.schemas.common import iso
from transport_desk.services.checkin_service import build_progress, serialize_checkin, today_utc
from transport_desk.utils.exceptions import ValidationException
from transport_desk.utils.permissions import is_tracking_only

logger = logging.getLogger(__name__)

STATUS_LABELS = {
    CheckinType.AIRPORT_ARRIVAL:         "At Airport",
    CheckinType.VIP_PICKUP:              "With VIP",
    CheckinType.HOTEL_TO_EVENTS_VENUE:   "En Route to Events Venue",
    CheckinType.ARRIVED_AT_EVENTS_VENUE: "At Events Venue",
    CheckinType.DEPARTING_EVENTS_VENUE:  "Departing Events Venue",
    CheckinType.ARRIVED_AT_HOTEL:        "At Hotel",
    CheckinType.CUSTOM:                  "Custom Location",
}


def current_status_label(assignment_status: AssignmentStatus, latest: Checkin | None) -> str:
    if latest is None:
        return "Available" if assignment_status == AssignmentStatus.ACTIVE else "Scheduled"
    return STATUS_LABELS.get(latest.checkinType, "Active")


def _day_start(d: date) -> datetime:
    return datetime.combine(d, time.min, tzinfo=timezone.utc)


def _parse_enum(enum_cls, value: str, field: str):
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValidationException(f"Invalid {field}. Must be one of: {allowed}", field=field)


class TrackingService:

    def get_tracking(
        self,
        db: Session,
        viewer: User,
        status: str | None = None,
        driver_id: int | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
        checkin_type: str | None = None,
    ) -> dict:
        statuses = [_parse_enum(AssignmentStatus, status, "status")] if status else list(LIVE_STATUSES)
        type_filter = _parse_enum(CheckinType, checkin_type, "checkinType") if checkin_type else None
        if start_date and end_date and end_date < start_date:
            raise ValidationException("endDate must not be before startDate", field="endDate")

        q = db.query(Assignment).filter(Assignment.status.in_(statuses))
        if driver_id:  q = q.filter(Assignment.driverId == driver_id)
        if start_date: q = q.filter(Assignment.startTime >= _day_start(start_date))
        if end_date:   q = q.filter(Assignment.startTime < _day_start(end_date + timedelta(days=1)))
        assignments = q.order_by(Assignment.startTime.desc(), Assignment.id.desc()).all()

        redact = is_tracking_only(viewer.role, viewer.department)
        today = today_utc()
        rows = [self._project(db, a, type_filter, today, redact) for a in assignments]
        logger.debug(f"Tracking view for user {viewer.id}: {len(rows)} assignments (redacted={redact})")

        return {
            "trackingInfo": rows,
            "filtersApplied": {
                "status":      [s.value for s in statuses],
                "driverId":    driver_id,
                "startDate":   iso(start_date),
                "endDate":     iso(end_date),
                "checkinType": type_filter.value if type_filter else None,
            },
            "totalCount": len(rows),
        }

    def _project(
        self, db: Session, a: Assignment, type_filter: CheckinType | None, today: date, redact: bool,
    ) -> dict:
        checkins = db.query(Checkin).filter(Checkin.assignmentId == a.id).all()
        candidates = [c for c in checkins if type_filter is None or c.checkinType is type_filter]
        latest = max(candidates, key=lambda c: (c.timestamp, c.id), default=None)

        row = {
            "assignmentId": a.id,
            "status":       a.status.value,
            "driver": {
                "id":    a.driver.id,
                "name":  a.driver.name,
                "phone": a.driver.phone,
            },
            "vipName":       a.vip.name if a.vip else None,
            "startTime":     iso(a.startTime),
            "endTime":       iso(a.endTime),
            "currentStatus": current_status_label(a.status, latest),
            "latestCheckin": serialize_checkin(latest, redact=redact) if latest else None,
            "location": {
                "latitude":  latest.latitude,
                "longitude": latest.longitude,
            } if latest is not None and latest.has_location else None,
            "progress": build_progress(checkins, today, redact=redact),
        }
        if not redact:
            row["vehicle"] = {"id": a.vehicle.id, "label": a.vehicle.label}
        return row


tracking_service = TrackingService()
