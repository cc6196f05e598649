import pytest

from transport_desk.models.assignment import AssignmentStatus, can_transition
from transport_desk.schemas.assignment import (
    AssignmentCreateRequest, AssignmentStatusRequest, AssignmentUpdateRequest,
)
from transport_desk.services.assignment_service import assignment_service
from transport_desk.utils.exceptions import (
    InvalidTransitionException, ValidationException, NotFoundException,
)

S, A, C = AssignmentStatus.SCHEDULED, AssignmentStatus.ACTIVE, AssignmentStatus.COMPLETED


@pytest.mark.parametrize("current, requested, allowed", [
    (S, A, True), (S, C, True), (A, C, True),
    (S, S, True), (A, A, True), (C, C, True),
    (A, S, False), (C, A, False), (C, S, False),
])
def test_transition_table(current, requested, allowed):
    assert can_transition(current, requested) is allowed


@pytest.fixture
def assignment(db, admin, make_driver, make_vehicle, start_time):
    driver, vehicle = make_driver(), make_vehicle()
    data = assignment_service.create_assignment(
        db, AssignmentCreateRequest(driverId=driver.id, vehicleId=vehicle.id, startTime=start_time), admin)
    return data


def _set(db, admin, assignment_id, status, reason=None):
    return assignment_service.update_status(
        db, assignment_id, AssignmentStatusRequest(status=status, reason=reason), admin)


def test_new_assignment_starts_scheduled(assignment):
    assert assignment["status"] == "scheduled"
    assert assignment["activatedAt"] is None
    assert assignment["completedAt"] is None


def test_full_lifecycle_sets_timestamps(db, admin, assignment):
    result = _set(db, admin, assignment["id"], "active")
    assert result["previousStatus"] == "scheduled"
    assert result["assignment"]["status"] == "active"
    assert result["assignment"]["activatedAt"] is not None

    result = _set(db, admin, assignment["id"], "completed", reason="Guest dropped at hotel")
    assert result["previousStatus"] == "active"
    assert result["assignment"]["completedAt"] is not None


def test_completed_is_terminal(db, admin, assignment):
    _set(db, admin, assignment["id"], "completed")
    with pytest.raises(InvalidTransitionException) as exc:
        _set(db, admin, assignment["id"], "active")
    assert exc.value.status_code == 400
    assert exc.value.message == "Invalid status transition from completed to active"


def test_scheduled_can_complete_directly(db, admin, assignment):
    result = _set(db, admin, assignment["id"], "completed")
    assert result["assignment"]["status"] == "completed"
    assert result["assignment"]["activatedAt"] is None


def test_same_status_is_a_noop(db, admin, assignment):
    result = _set(db, admin, assignment["id"], "scheduled")
    assert result["previousStatus"] == "scheduled"
    assert result["assignment"]["status"] == "scheduled"


def test_unknown_status_is_a_validation_error(db, admin, assignment):
    with pytest.raises(ValidationException) as exc:
        _set(db, admin, assignment["id"], "cancelled")
    assert exc.value.status_code == 400
    assert "scheduled, active, completed" in exc.value.message


def test_missing_assignment(db, admin):
    with pytest.raises(NotFoundException):
        _set(db, admin, 999, "active")


def test_completed_assignment_cannot_be_edited(db, admin, assignment, start_time):
    _set(db, admin, assignment["id"], "completed")
    with pytest.raises(ValidationException):
        assignment_service.update_assignment(
            db, assignment["id"], AssignmentUpdateRequest(startTime=start_time), admin)


def test_unapproved_driver_cannot_be_assigned(db, admin, make_driver, make_vehicle, start_time):
    from transport_desk.models.driver import DriverStatus
    driver = make_driver(status=DriverStatus.PENDING)
    with pytest.raises(ValidationException):
        assignment_service.create_assignment(
            db, AssignmentCreateRequest(driverId=driver.id, vehicleId=make_vehicle().id, startTime=start_time),
            admin)


def test_status_change_is_audited(db, admin, assignment):
    from transport_desk.models.audit_log import AuditLog
    _set(db, admin, assignment["id"], "active", reason="Driver on the road")
    entry = db.query(AuditLog).filter(AuditLog.action == "STATUS_CHANGE").one()
    assert entry.entityId == assignment["id"]
    assert "Driver on the road" in entry.description
