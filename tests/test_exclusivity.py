import pytest

from transport_desk.models.vehicle import Vehicle
from transport_desk.models.vip import VIP
from transport_desk.schemas.assignment import (
    AssignmentCreateRequest, AssignmentStatusRequest, AssignmentUpdateRequest, AssignVipRequest,
)
from transport_desk.services import exclusivity
from transport_desk.services.assignment_service import assignment_service
from transport_desk.utils.exceptions import (
    VehicleUnavailableException, VipUnavailableException, NotFoundException,
)


@pytest.fixture
def create(db, admin, start_time):
    def _create(driver, vehicle, vip=None):
        return assignment_service.create_assignment(db, AssignmentCreateRequest(
            driverId=driver.id, vehicleId=vehicle.id, vipId=vip.id if vip else None, startTime=start_time,
        ), admin)
    return _create


def _vehicle(db, vehicle_id) -> Vehicle:
    return db.query(Vehicle).filter(Vehicle.id == vehicle_id).one()


def _vip(db, vip_id) -> VIP:
    return db.query(VIP).filter(VIP.id == vip_id).one()


def test_create_sets_back_references(db, create, make_driver, make_vehicle, make_vip):
    driver, vehicle, vip = make_driver(), make_vehicle(), make_vip()
    create(driver, vehicle, vip)
    assert _vehicle(db, vehicle.id).currentDriverId == driver.id
    assert _vip(db, vip.id).assignedDriverId == driver.id


def test_vehicle_held_by_another_driver_is_refused_until_deleted(db, admin, create, make_driver, make_vehicle):
    d1, d2, v1 = make_driver(), make_driver(), make_vehicle()
    a1 = create(d1, v1)

    with pytest.raises(VehicleUnavailableException) as exc:
        create(d2, v1)
    assert exc.value.status_code == 409
    db.rollback()

    assignment_service.delete_assignment(db, a1["id"], admin)
    assert _vehicle(db, v1.id).currentDriverId is None

    a2 = create(d2, v1)
    assert a2["vehicle"]["id"] == v1.id
    assert _vehicle(db, v1.id).currentDriverId == d2.id


def test_same_driver_cannot_stack_live_assignments_on_one_vehicle(db, create, make_driver, make_vehicle):
    driver, vehicle = make_driver(), make_vehicle()
    create(driver, vehicle)
    with pytest.raises(VehicleUnavailableException):
        create(driver, vehicle)


def test_vip_exclusivity_mirrors_vehicles(db, create, make_driver, make_vehicle, make_vip):
    d1, d2, vip = make_driver(), make_driver(), make_vip()
    create(d1, make_vehicle(), vip)
    with pytest.raises(VipUnavailableException):
        create(d2, make_vehicle(), vip)


def test_completing_releases_back_references(db, admin, create, make_driver, make_vehicle, make_vip):
    d1, d2, vehicle, vip = make_driver(), make_driver(), make_vehicle(), make_vip()
    a1 = create(d1, vehicle, vip)
    assignment_service.update_status(db, a1["id"], AssignmentStatusRequest(status="completed"), admin)

    assert _vehicle(db, vehicle.id).currentDriverId is None
    assert _vip(db, vip.id).assignedDriverId is None
    create(d2, vehicle, vip)


def test_switching_vehicle_moves_the_pointer(db, admin, create, make_driver, make_vehicle):
    driver, old, new = make_driver(), make_vehicle(), make_vehicle()
    a = create(driver, old)

    updated = assignment_service.update_assignment(
        db, a["id"], AssignmentUpdateRequest(vehicleId=new.id), admin)

    assert updated["vehicle"]["id"] == new.id
    assert _vehicle(db, old.id).currentDriverId is None
    assert _vehicle(db, new.id).currentDriverId == driver.id


def test_switching_to_a_taken_vehicle_changes_nothing(db, admin, create, make_driver, make_vehicle):
    d1, d2, v1, v2 = make_driver(), make_driver(), make_vehicle(), make_vehicle()
    a1 = create(d1, v1)
    create(d2, v2)

    with pytest.raises(VehicleUnavailableException):
        assignment_service.update_assignment(db, a1["id"], AssignmentUpdateRequest(vehicleId=v2.id), admin)
    db.rollback()

    assert _vehicle(db, v1.id).currentDriverId == d1.id
    assert _vehicle(db, v2.id).currentDriverId == d2.id


def test_null_vip_detaches_and_omitted_vip_keeps(db, admin, create, make_driver, make_vehicle, make_vip):
    driver, vip = make_driver(), make_vip()
    a = create(driver, make_vehicle(), vip)

    kept = assignment_service.update_assignment(db, a["id"], AssignmentUpdateRequest(endTime=None), admin)
    assert kept["vip"]["id"] == vip.id

    detached = assignment_service.update_assignment(db, a["id"], AssignmentUpdateRequest(vipId=None), admin)
    assert detached["vip"] is None
    assert _vip(db, vip.id).assignedDriverId is None


def test_assign_vip_targets_the_drivers_live_assignment(db, admin, create, make_driver, make_vehicle, make_vip):
    driver, vip = make_driver(), make_vip()
    a = create(driver, make_vehicle())

    result = assignment_service.assign_vip(db, AssignVipRequest(vipId=vip.id, driverId=driver.id), admin)

    assert result["id"] == a["id"]
    assert result["vip"]["name"] == vip.name
    assert _vip(db, vip.id).assignedDriverId == driver.id


def test_assign_vip_without_live_assignment(db, admin, make_driver, make_vip):
    with pytest.raises(NotFoundException):
        assignment_service.assign_vip(db, AssignVipRequest(vipId=make_vip().id, driverId=make_driver().id), admin)


def test_release_leaves_foreign_pointer_alone(db, make_driver, make_vehicle):
    d1, d2, vehicle = make_driver(), make_driver(), make_vehicle()
    vehicle.currentDriverId = d2.id
    db.commit()

    assert exclusivity.release_vehicle(db, vehicle.id, d1.id) is False
    assert _vehicle(db, vehicle.id).currentDriverId == d2.id
    assert exclusivity.release_vehicle(db, vehicle.id, d2.id) is True
    assert _vehicle(db, vehicle.id).currentDriverId is None


def test_missing_vehicle_is_not_found(db, create, make_driver):
    ghost = Vehicle(id=999)
    with pytest.raises(NotFoundException):
        create(make_driver(), ghost)


def test_deleting_completed_history_keeps_newer_live_links(db, admin, create, make_driver, make_vehicle, make_vip):
    driver, vehicle, vip = make_driver(), make_vehicle(), make_vip()
    old = create(driver, vehicle, vip)
    assignment_service.update_status(db, old["id"], AssignmentStatusRequest(status="completed"), admin)
    create(driver, vehicle, vip)

    assignment_service.delete_assignment(db, old["id"], admin)

    db.expire_all()
    assert _vehicle(db, vehicle.id).currentDriverId == driver.id
    assert _vip(db, vip.id).assignedDriverId == driver.id
