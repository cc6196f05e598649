from datetime import timedelta

import pytest

from transport_desk.models.checkin import Checkin
from transport_desk.models.role import RoleName, DepartmentName
from transport_desk.schemas.assignment import AssignmentCreateRequest, AssignmentStatusRequest
from transport_desk.schemas.checkin import CheckinCreateRequest
from transport_desk.services.assignment_service import assignment_service
from transport_desk.services.checkin_service import checkin_service, today_utc
from transport_desk.services.tracking_service import tracking_service, current_status_label
from transport_desk.models.assignment import AssignmentStatus
from transport_desk.models.checkin import CheckinType
from transport_desk.utils.exceptions import ValidationException
from transport_desk.utils.permissions import can_view_tracking, is_tracking_only


@pytest.fixture
def setup(db, admin, make_driver, make_vehicle, make_vip, start_time):
    driver = make_driver(name="Ada")
    vehicle = make_vehicle("Toyota", "Alphard")
    vip = make_vip("Pastor Grace")
    a = assignment_service.create_assignment(db, AssignmentCreateRequest(
        driverId=driver.id, vehicleId=vehicle.id, vipId=vip.id, startTime=start_time), admin)
    return driver, vehicle, vip, a


def _checkin(db, driver, assignment_id, checkin_type, **kwargs):
    return checkin_service.create_checkin(
        db, driver, CheckinCreateRequest(assignmentId=assignment_id, checkinType=checkin_type, **kwargs))


@pytest.mark.parametrize("checkin_type, label", [
    (CheckinType.AIRPORT_ARRIVAL, "At Airport"),
    (CheckinType.VIP_PICKUP, "With VIP"),
    (CheckinType.HOTEL_TO_EVENTS_VENUE, "En Route to Events Venue"),
    (CheckinType.ARRIVED_AT_EVENTS_VENUE, "At Events Venue"),
    (CheckinType.DEPARTING_EVENTS_VENUE, "Departing Events Venue"),
    (CheckinType.ARRIVED_AT_HOTEL, "At Hotel"),
    (CheckinType.CUSTOM, "Custom Location"),
    (CheckinType.HOTEL_ARRIVAL, "Active"),
])
def test_status_labels(checkin_type, label):
    assert current_status_label(AssignmentStatus.ACTIVE, Checkin(checkinType=checkin_type)) == label


def test_labels_without_checkins():
    assert current_status_label(AssignmentStatus.ACTIVE, None) == "Available"
    assert current_status_label(AssignmentStatus.SCHEDULED, None) == "Scheduled"


def test_full_view_for_admin(db, admin, setup):
    driver, vehicle, vip, a = setup
    _checkin(db, driver, a["id"], "airport_arrival", latitude=51.47, longitude=-0.45)
    _checkin(db, driver, a["id"], "hotel_to_events_venue", eventDate=today_utc(), sessionId="morning",
             notes="Traffic on M4")

    result = tracking_service.get_tracking(db, admin)

    assert result["totalCount"] == 1
    row = result["trackingInfo"][0]
    assert row["vipName"] == "Pastor Grace"
    assert row["vehicle"]["label"] == vehicle.label
    assert row["status"] == "active"
    assert row["currentStatus"] == "En Route to Events Venue"
    assert row["latestCheckin"]["notes"] == "Traffic on M4"
    assert row["latestCheckin"]["sessionId"] == "morning"
    # latest check-in carries no coordinates
    assert row["location"] is None
    sessions = row["progress"]["dailyCheckins"][0]["sessions"]
    assert sessions["morning"]["notes"] == "Traffic on M4"
    assert result["filtersApplied"]["status"] == ["scheduled", "active"]


def test_location_from_latest_checkin(db, admin, setup):
    driver, _, _, a = setup
    _checkin(db, driver, a["id"], "vip_pickup", latitude=51.5, longitude=-0.12)
    row = tracking_service.get_tracking(db, admin)["trackingInfo"][0]
    assert row["location"] == {"latitude": 51.5, "longitude": -0.12}


def test_redacted_view_for_hospitality(db, make_user, setup):
    driver, _, _, a = setup
    _checkin(db, driver, a["id"], "arrived_at_hotel", eventDate=today_utc(), sessionId="evening", notes="Room 12")
    viewer = make_user(RoleName.COORDINATOR, DepartmentName.HOSPITALITY)

    row = tracking_service.get_tracking(db, viewer)["trackingInfo"][0]

    assert "vehicle" not in row
    assert row["vipName"] == "Pastor Grace"
    assert "notes" not in row["latestCheckin"]
    assert "sessionId" not in row["latestCheckin"]
    hotel = row["progress"]["dailyCheckins"][3]
    assert hotel["completed"] is True
    assert "notes" not in hotel["sessions"]["evening"]


def test_checkin_type_filter_drives_latest_lookup(db, admin, setup):
    driver, _, _, a = setup
    _checkin(db, driver, a["id"], "airport_arrival")
    _checkin(db, driver, a["id"], "vip_pickup")

    row = tracking_service.get_tracking(db, admin, checkin_type="airport_arrival")["trackingInfo"][0]
    assert row["currentStatus"] == "At Airport"


def test_scheduled_without_checkins(db, admin, setup):
    row = tracking_service.get_tracking(db, admin)["trackingInfo"][0]
    assert row["currentStatus"] == "Scheduled"
    assert row["latestCheckin"] is None


def test_completed_hidden_by_default(db, admin, setup):
    _, _, _, a = setup
    assignment_service.update_status(db, a["id"], AssignmentStatusRequest(status="completed"), admin)
    assert tracking_service.get_tracking(db, admin)["totalCount"] == 0
    assert tracking_service.get_tracking(db, admin, status="completed")["totalCount"] == 1


def test_filters(db, admin, setup, make_driver, make_vehicle, start_time):
    driver, _, _, a = setup
    other = assignment_service.create_assignment(db, AssignmentCreateRequest(
        driverId=make_driver().id, vehicleId=make_vehicle().id, startTime=start_time + timedelta(days=2)), admin)

    by_driver = tracking_service.get_tracking(db, admin, driver_id=driver.id)
    assert [r["assignmentId"] for r in by_driver["trackingInfo"]] == [a["id"]]

    everything = tracking_service.get_tracking(db, admin)
    assert [r["assignmentId"] for r in everything["trackingInfo"]] == [other["id"], a["id"]]

    later = tracking_service.get_tracking(db, admin, start_date=(start_time + timedelta(days=2)).date())
    assert [r["assignmentId"] for r in later["trackingInfo"]] == [other["id"]]

    earlier = tracking_service.get_tracking(db, admin, end_date=start_time.date())
    assert [r["assignmentId"] for r in earlier["trackingInfo"]] == [a["id"]]


def test_bad_filters(db, admin):
    with pytest.raises(ValidationException):
        tracking_service.get_tracking(db, admin, status="archived")
    with pytest.raises(ValidationException):
        tracking_service.get_tracking(db, admin, checkin_type="teleported")


@pytest.mark.parametrize("role, department, can_view, redacted", [
    (RoleName.ADMIN,       DepartmentName.OPERATIONS,  True,  False),
    (RoleName.COORDINATOR, DepartmentName.TRANSPORT,   True,  False),
    (RoleName.COORDINATOR, DepartmentName.HOSPITALITY, True,  True),
    (RoleName.TEAM_HEAD,   DepartmentName.LOUNGE,      True,  True),
    (RoleName.TEAM_HEAD,   DepartmentName.ALL,         True,  False),
    (RoleName.COORDINATOR, DepartmentName.OPERATIONS,  False, False),
    (RoleName.DRIVER,      DepartmentName.TRANSPORT,   False, False),
])
def test_tracking_access(role, department, can_view, redacted):
    assert can_view_tracking(role, department) is can_view
    assert is_tracking_only(role, department) is redacted
