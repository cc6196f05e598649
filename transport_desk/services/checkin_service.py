import logging
from datetime import date, datetime, timezone
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from transport_desk.models.assignment import Assignment
from transport_desk.models.checkin import (
    Checkin, CheckinType, CheckinCategory, DAILY_TYPES, ONE_TIME_TYPES, DEFAULT_SESSION, dedupe_key,
)
from transport_desk.models.driver import Driver
from transport_desk.schemas.checkin import CheckinCreateRequest
from transport_desk.schemas.common import iso
from transport_desk.services.assignment_service import assignment_service
from transport_desk.utils.audit import log_action
from transport_desk.utils.exceptions import ForbiddenException, DuplicateCheckinException

logger = logging.getLogger(__name__)

CUSTOM_LABEL_DEFAULT = "Custom Check-in"


def today_utc() -> date:
    return datetime.now(timezone.utc).date()


def serialize_checkin(c: Checkin, redact: bool = False) -> dict:
    data = {
        "id":             c.id,
        "assignmentId":   c.assignmentId,
        "driverId":       c.driverId,
        "checkinType":    c.checkinType.value,
        "category":       c.checkinType.category.value,
        "latitude":       c.latitude,
        "longitude":      c.longitude,
        "timestamp":      iso(c.timestamp),
        "isDailyCheckin": c.isDailyCheckin,
        "eventDate":      iso(c.eventDate),
        "sessionId":      c.sessionId,
        "customLabel":    c.customLabel,
        "notes":          c.notes,
        "createdAt":      iso(c.createdAt),
    }
    if redact:
        data.pop("sessionId")
        data.pop("notes")
    return data


def build_progress(checkins: list[Checkin], event_date: date, redact: bool = False) -> dict:
    """
    Fold an assignment's check-ins into the driver's itinerary view for one
    event date. `checkins` may span several dates; only daily entries for
    `event_date` count toward the daily section. With `redact`, notes are
    left out everywhere.
    """
    ordered = sorted(checkins, key=lambda c: (c.timestamp, c.id))

    def entry(c: Checkin | None) -> dict:
        e = {"completed": c is not None, "timestamp": iso(c.timestamp) if c else None}
        if not redact:
            e["notes"] = c.notes if c else None
        return e

    daily = []
    for t in DAILY_TYPES:
        sessions = {}
        for c in ordered:
            if c.checkinType is t and c.isDailyCheckin and c.eventDate == event_date:
                sessions.setdefault(c.sessionId or DEFAULT_SESSION, entry(c))
        daily.append({"checkinType": t.value, "completed": bool(sessions), "sessions": sessions})

    one_time = {}
    for t in ONE_TIME_TYPES:
        first = next((c for c in ordered if c.checkinType is t and not c.isDailyCheckin), None)
        one_time[t.value] = entry(first)
    # custom is repeatable, so it never reads as done
    one_time[CheckinType.CUSTOM.value] = entry(None)

    custom = []
    for c in ordered:
        if c.checkinType is CheckinType.CUSTOM:
            item = {"id": c.id, "label": c.customLabel or CUSTOM_LABEL_DEFAULT, "timestamp": iso(c.timestamp)}
            if not redact:
                item["notes"] = c.notes
            custom.append(item)

    return {
        "eventDate":       event_date.isoformat(),
        "dailyCheckins":   daily,
        "oneTimeCheckins": one_time,
        "customCheckins":  custom,
    }


class CheckinService:

    def _owned_assignment(self, db: Session, driver: Driver, assignment_id: int) -> Assignment:
        a = db.query(Assignment).filter(
            Assignment.id == assignment_id,
            Assignment.driverId == driver.id,
        ).first()
        if not a:
            raise ForbiddenException("Assignment not found or not authorized")
        return a

    def _find_existing(self, db: Session, driver: Driver, data: CheckinCreateRequest) -> Checkin | None:
        q = db.query(Checkin).filter(
            Checkin.driverId == driver.id,
            Checkin.assignmentId == data.assignmentId,
            Checkin.checkinType == data.checkinType,
        )
        category = data.checkinType.category
        if category is CheckinCategory.DAILY:
            session = Checkin.sessionId.is_(None) if data.sessionId is None else Checkin.sessionId == data.sessionId
            return q.filter(
                Checkin.eventDate == data.eventDate,
                Checkin.isDailyCheckin.is_(True),
                session,
            ).first()
        if category is CheckinCategory.ONE_TIME:
            return q.filter(Checkin.isDailyCheckin.is_(False)).first()
        return None

    @staticmethod
    def _duplicate_message(data: CheckinCreateRequest) -> str:
        if data.checkinType.is_daily:
            return (f"Already checked in for {data.checkinType.value} "
                    f"({data.sessionId or DEFAULT_SESSION}) on {data.eventDate.isoformat()}")
        return f"Already checked in for {data.checkinType.value}"

    # ─── Create ───────────────────────────────────────────────────────────────
    def create_checkin(self, db: Session, driver: Driver, data: CheckinCreateRequest) -> dict:
        self._owned_assignment(db, driver, data.assignmentId)

        if self._find_existing(db, driver, data):
            raise DuplicateCheckinException(self._duplicate_message(data))

        is_daily = data.checkinType.is_daily
        notes = data.notes.strip() if data.notes else None
        c = Checkin(
            driverId=driver.id,
            assignmentId=data.assignmentId,
            checkinType=data.checkinType,
            latitude=data.latitude,
            longitude=data.longitude,
            notes=notes or None,
            timestamp=datetime.now(timezone.utc),
            isDailyCheckin=is_daily,
            eventDate=data.eventDate if is_daily else None,
            sessionId=data.sessionId if is_daily else None,
            customLabel=data.customLabel if data.checkinType is CheckinType.CUSTOM else None,
            dedupeKey=dedupe_key(data.checkinType, data.eventDate, data.sessionId),
        )
        db.add(c)
        try:
            db.flush()
        except IntegrityError:
            # Lost a race with a concurrent insert for the same scope
            db.rollback()
            raise DuplicateCheckinException(self._duplicate_message(data))

        log_action(db, driver.userId, "CHECKIN", "Checkin", c.id,
                   f"{driver.name}: {data.checkinType.value} on assignment #{data.assignmentId}")
        db.commit()
        db.refresh(c)
        logger.info(f"Check-in #{c.id} ({c.checkinType.value}) recorded for assignment {c.assignmentId}")

        assignment_service.activate_on_first_checkin(db, data.assignmentId, driver.id)
        return serialize_checkin(c)

    # ─── Read ─────────────────────────────────────────────────────────────────
    def list_checkins(self, db: Session, driver: Driver, assignment_id: int | None = None) -> list[dict]:
        q = db.query(Checkin).filter(Checkin.driverId == driver.id)
        if assignment_id is not None:
            self._owned_assignment(db, driver, assignment_id)
            q = q.filter(Checkin.assignmentId == assignment_id)
        rows = q.order_by(Checkin.timestamp.desc(), Checkin.id.desc()).all()
        return [serialize_checkin(c) for c in rows]

    def get_progress(self, db: Session, driver: Driver, assignment_id: int, event_date: date | None = None) -> dict:
        self._owned_assignment(db, driver, assignment_id)
        event_date = event_date or today_utc()
        rows = db.query(Checkin).filter(
            Checkin.assignmentId == assignment_id,
            Checkin.driverId == driver.id,
        ).all()
        return {"assignmentId": assignment_id, **build_progress(rows, event_date)}


checkin_service = CheckinService()
