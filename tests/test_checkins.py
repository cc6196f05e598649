from datetime import date, timedelta

import pytest
from pydantic import ValidationError

from transport_desk.models.assignment import Assignment, AssignmentStatus
from transport_desk.models.checkin import Checkin, CheckinType, dedupe_key
from transport_desk.schemas.assignment import AssignmentCreateRequest
from transport_desk.schemas.checkin import CheckinCreateRequest
from transport_desk.services.assignment_service import assignment_service
from transport_desk.services.checkin_service import checkin_service, today_utc
from transport_desk.utils.exceptions import DuplicateCheckinException, ForbiddenException

EVENT_DAY = date(2026, 10, 17)


@pytest.fixture
def driver(make_driver):
    return make_driver()


@pytest.fixture
def assignment_id(db, admin, driver, make_vehicle, start_time):
    data = assignment_service.create_assignment(
        db, AssignmentCreateRequest(driverId=driver.id, vehicleId=make_vehicle().id, startTime=start_time), admin)
    return data["id"]


@pytest.fixture
def checkin(db, driver, assignment_id):
    def _checkin(checkin_type, **kwargs):
        data = CheckinCreateRequest(assignmentId=assignment_id, checkinType=checkin_type, **kwargs)
        return checkin_service.create_checkin(db, driver, data)
    return _checkin


# ─── Request validation ───────────────────────────────────────────────────────
def test_legacy_types_cannot_be_created():
    with pytest.raises(ValidationError):
        CheckinCreateRequest(assignmentId=1, checkinType="hotel_arrival")


def test_daily_type_requires_event_date():
    with pytest.raises(ValidationError):
        CheckinCreateRequest(assignmentId=1, checkinType="arrived_at_hotel")


def test_custom_requires_label():
    with pytest.raises(ValidationError):
        CheckinCreateRequest(assignmentId=1, checkinType="custom", customLabel="   ")


def test_dedupe_key_scopes():
    assert dedupe_key(CheckinType.ARRIVED_AT_HOTEL, EVENT_DAY, None) == "2026-10-17#"
    assert dedupe_key(CheckinType.ARRIVED_AT_HOTEL, EVENT_DAY, "evening") == "2026-10-17#evening"
    assert dedupe_key(CheckinType.VIP_PICKUP, None, None) == "once"
    assert dedupe_key(CheckinType.CUSTOM, None, None) is None


# ─── Create ───────────────────────────────────────────────────────────────────
def test_classification_comes_from_the_type(checkin):
    daily = checkin("hotel_to_events_venue", eventDate=EVENT_DAY, notes="  ")
    assert daily["isDailyCheckin"] is True
    assert daily["eventDate"] == "2026-10-17"
    assert daily["notes"] is None
    assert daily["latitude"] is None

    once = checkin("airport_arrival", eventDate=EVENT_DAY, sessionId="morning", latitude=51.47, longitude=-0.45)
    assert once["isDailyCheckin"] is False
    assert once["eventDate"] is None
    assert once["sessionId"] is None
    assert once["latitude"] == pytest.approx(51.47)


def test_daily_checkin_is_idempotent_per_date_and_session(db, checkin):
    checkin("arrived_at_events_venue", eventDate=EVENT_DAY)

    with pytest.raises(DuplicateCheckinException) as exc:
        checkin("arrived_at_events_venue", eventDate=EVENT_DAY)
    assert exc.value.status_code == 409
    assert exc.value.message == "Already checked in for arrived_at_events_venue (default) on 2026-10-17"

    checkin("arrived_at_events_venue", eventDate=EVENT_DAY, sessionId="evening")
    checkin("arrived_at_events_venue", eventDate=EVENT_DAY + timedelta(days=1))

    with pytest.raises(DuplicateCheckinException) as exc:
        checkin("arrived_at_events_venue", eventDate=EVENT_DAY, sessionId="evening")
    assert "(evening)" in exc.value.message


def test_one_time_checkin_only_once(checkin):
    checkin("vip_pickup")
    with pytest.raises(DuplicateCheckinException) as exc:
        checkin("vip_pickup")
    assert exc.value.message == "Already checked in for vip_pickup"


def test_custom_checkins_never_conflict(db, checkin, assignment_id):
    for label in ("Fuel stop", "Fuel stop", "Car wash"):
        checkin("custom", customLabel=label)
    assert db.query(Checkin).filter(Checkin.assignmentId == assignment_id).count() == 3


def test_store_constraint_backs_the_read_check(db, driver, assignment_id, checkin, monkeypatch):
    checkin("vip_pickup")
    # Simulate a concurrent writer that passed the read check first
    monkeypatch.setattr(type(checkin_service), "_find_existing", lambda *a, **k: None)
    with pytest.raises(DuplicateCheckinException) as exc:
        checkin("vip_pickup")
    assert exc.value.message == "Already checked in for vip_pickup"
    assert db.query(Checkin).filter(Checkin.checkinType == CheckinType.VIP_PICKUP).count() == 1


def test_other_drivers_assignment_is_forbidden(db, make_driver, assignment_id):
    outsider = make_driver()
    with pytest.raises(ForbiddenException) as exc:
        checkin_service.create_checkin(
            db, outsider, CheckinCreateRequest(assignmentId=assignment_id, checkinType="vip_pickup"))
    assert exc.value.message == "Assignment not found or not authorized"


# ─── Auto-activation ──────────────────────────────────────────────────────────
def _status(db, assignment_id) -> AssignmentStatus:
    db.expire_all()
    return db.query(Assignment).filter(Assignment.id == assignment_id).one().status


def test_first_checkin_activates_the_assignment(db, checkin, assignment_id):
    assert _status(db, assignment_id) == AssignmentStatus.SCHEDULED
    checkin("airport_arrival")
    assert _status(db, assignment_id) == AssignmentStatus.ACTIVE
    a = db.query(Assignment).filter(Assignment.id == assignment_id).one()
    assert a.activatedAt is not None


def test_second_checkin_does_not_reactivate(db, admin, driver, checkin, assignment_id):
    checkin("airport_arrival")
    assert _status(db, assignment_id) == AssignmentStatus.ACTIVE

    # Force it back to scheduled; only the very first check-in may flip it
    db.query(Assignment).filter(Assignment.id == assignment_id).update({Assignment.status: AssignmentStatus.SCHEDULED})
    db.commit()
    checkin("vip_pickup")
    assert _status(db, assignment_id) == AssignmentStatus.SCHEDULED
    assert assignment_service.activate_on_first_checkin(db, assignment_id, driver.id) is False


# ─── Progress ─────────────────────────────────────────────────────────────────
def test_progress_reports_every_session(db, driver, checkin, assignment_id):
    checkin("arrived_at_hotel", eventDate=EVENT_DAY, sessionId="morning", notes="Lobby")
    checkin("arrived_at_hotel", eventDate=EVENT_DAY, sessionId="evening")
    checkin("hotel_to_events_venue", eventDate=EVENT_DAY + timedelta(days=1))

    progress = checkin_service.get_progress(db, driver, assignment_id, EVENT_DAY)
    daily = {d["checkinType"]: d for d in progress["dailyCheckins"]}

    assert [d["checkinType"] for d in progress["dailyCheckins"]] == [
        "hotel_to_events_venue", "arrived_at_events_venue", "departing_events_venue", "arrived_at_hotel",
    ]
    hotel = daily["arrived_at_hotel"]
    assert hotel["completed"] is True
    assert set(hotel["sessions"]) == {"morning", "evening"}
    assert hotel["sessions"]["morning"]["notes"] == "Lobby"
    assert hotel["sessions"]["evening"]["completed"] is True
    # Next day's check-in does not count for this date
    assert daily["hotel_to_events_venue"]["completed"] is False
    assert daily["hotel_to_events_venue"]["sessions"] == {}


def test_progress_one_time_and_custom(db, driver, checkin, assignment_id):
    checkin("vip_pickup", notes="Met at arrivals")
    checkin("custom", customLabel="Fuel stop")

    progress = checkin_service.get_progress(db, driver, assignment_id)

    assert progress["eventDate"] == today_utc().isoformat()
    one_time = progress["oneTimeCheckins"]
    assert one_time["vip_pickup"]["completed"] is True
    assert one_time["vip_pickup"]["notes"] == "Met at arrivals"
    assert one_time["airport_arrival"] == {"completed": False, "timestamp": None, "notes": None}
    assert one_time["custom"]["completed"] is False
    assert [c["label"] for c in progress["customCheckins"]] == ["Fuel stop"]


def test_list_checkins_newest_first(db, driver, checkin, assignment_id):
    first = checkin("airport_arrival")
    second = checkin("vip_pickup")
    rows = checkin_service.list_checkins(db, driver, assignment_id)
    assert [r["id"] for r in rows] == [second["id"], first["id"]]


def test_named_default_session_is_the_unnamed_session(db, checkin):
    assert CheckinCreateRequest(
        assignmentId=1, checkinType="arrived_at_hotel", eventDate=EVENT_DAY, sessionId=" default ",
    ).sessionId is None

    first = checkin("arrived_at_hotel", eventDate=EVENT_DAY, sessionId="default")
    assert first["sessionId"] is None
    with pytest.raises(DuplicateCheckinException):
        checkin("arrived_at_hotel", eventDate=EVENT_DAY)
