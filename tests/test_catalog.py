from datetime import date, datetime, timedelta, timezone

import pytest

from transport_desk.models.assignment import Assignment
from transport_desk.models.vip import VIP
from transport_desk.schemas.assignment import AssignmentCreateRequest, AssignmentStatusRequest
from transport_desk.schemas.driver import DriverUpdateRequest
from transport_desk.schemas.observation import ObservationCreateRequest
from transport_desk.schemas.vehicle import VehicleCreateRequest, VehicleReturnRequest
from transport_desk.schemas.vip import VipUpdateRequest
from transport_desk.services.assignment_service import assignment_service
from transport_desk.services.driver_service import driver_service
from transport_desk.services.observation_service import observation_service
from transport_desk.services.vehicle_service import vehicle_service
from transport_desk.services.vip_service import vip_service
from transport_desk.utils.exceptions import (
    DuplicateEntryException, ForbiddenException, ResourceInUseException, ValidationException,
)


def _vehicle_payload(registration="ab12 xyz"):
    return VehicleCreateRequest(
        make="Mercedes", model="V-Class", registration=registration,
        pickupLocation="Gatwick North", pickupMileage=5400, pickupFuelGauge=90,
        pickupDate=datetime(2026, 10, 16, 9, 0, tzinfo=timezone.utc),
    )


# ─── Vehicles ─────────────────────────────────────────────────────────────────
def test_registration_is_normalised_and_unique(db, admin):
    created = vehicle_service.create_vehicle(db, _vehicle_payload(), admin.id)
    assert created["registration"] == "AB12 XYZ"
    assert created["currentDriver"] is None
    with pytest.raises(DuplicateEntryException):
        vehicle_service.create_vehicle(db, _vehicle_payload("AB12 XYZ "), admin.id)


def test_return_records_dropoff_snapshot(db, admin, make_vehicle):
    vehicle = make_vehicle()
    data = vehicle_service.return_vehicle(
        db, vehicle.id, VehicleReturnRequest(dropoffMileage=12350, dropoffFuelGauge=40), admin.id)
    assert data["dropoffMileage"] == 12350
    assert data["dropoffFuelGauge"] == 40
    assert data["dropoffDate"] is not None


def test_vehicle_with_history_is_kept(db, admin, make_driver, make_vehicle, start_time):
    vehicle = make_vehicle()
    a = assignment_service.create_assignment(db, AssignmentCreateRequest(
        driverId=make_driver().id, vehicleId=vehicle.id, startTime=start_time), admin)
    with pytest.raises(ResourceInUseException):
        vehicle_service.delete_vehicle(db, vehicle.id, admin.id)

    assignment_service.update_status(db, a["id"], AssignmentStatusRequest(status="completed"), admin)
    with pytest.raises(ResourceInUseException) as exc:
        vehicle_service.delete_vehicle(db, vehicle.id, admin.id)
    assert exc.value.message == "Vehicle has assignment history and cannot be deleted"

    spare = make_vehicle()
    vehicle_service.delete_vehicle(db, spare.id, admin.id)


def test_available_filter(db, admin, make_driver, make_vehicle, start_time):
    taken, free = make_vehicle(), make_vehicle()
    assignment_service.create_assignment(db, AssignmentCreateRequest(
        driverId=make_driver().id, vehicleId=taken.id, startTime=start_time), admin)

    rows, total = vehicle_service.list_vehicles(db, 1, 20, None, True)
    assert total == 1 and rows[0]["id"] == free.id
    rows, total = vehicle_service.list_vehicles(db, 1, 20, None, False)
    assert total == 1 and rows[0]["id"] == taken.id


# ─── VIPs ─────────────────────────────────────────────────────────────────────
def test_vip_dates_stay_ordered(db, admin, make_vip):
    vip = make_vip()
    with pytest.raises(ValidationException):
        vip_service.update_vip(db, vip.id, VipUpdateRequest(departureDate=date.today() - timedelta(days=1)), admin.id)


def test_deleting_vip_keeps_completed_assignment(db, admin, make_driver, make_vehicle, make_vip, start_time):
    vip = make_vip()
    a = assignment_service.create_assignment(db, AssignmentCreateRequest(
        driverId=make_driver().id, vehicleId=make_vehicle().id, vipId=vip.id, startTime=start_time), admin)
    assignment_service.update_status(db, a["id"], AssignmentStatusRequest(status="completed"), admin)

    vip_service.delete_vip(db, vip.id, admin.id)

    db.expire_all()
    assert db.query(VIP).filter(VIP.id == vip.id).first() is None
    kept = db.query(Assignment).filter(Assignment.id == a["id"]).one()
    assert kept.vipId is None


# ─── Observations ─────────────────────────────────────────────────────────────
def test_observation_must_match_own_assignment_and_vehicle(db, admin, make_driver, make_vehicle, start_time):
    owner, other = make_driver(), make_driver()
    vehicle = make_vehicle()
    a = assignment_service.create_assignment(db, AssignmentCreateRequest(
        driverId=owner.id, vehicleId=vehicle.id, startTime=start_time), admin)

    with pytest.raises(ForbiddenException):
        observation_service.create_observation(db, other, ObservationCreateRequest(
            assignmentId=a["id"], vehicleId=vehicle.id, observationType="pickup"))
    with pytest.raises(ForbiddenException):
        observation_service.create_observation(db, owner, ObservationCreateRequest(
            assignmentId=a["id"], vehicleId=make_vehicle().id, observationType="pickup"))

    created = observation_service.create_observation(db, owner, ObservationCreateRequest(
        assignmentId=a["id"], vehicleId=vehicle.id, observationType="dropoff",
        mileage=12500, fuelLevel=30, damageNotes="   "))
    assert created["damageNotes"] is None
    assert observation_service.list_observations(db, other) == []
    assert len(observation_service.list_observations(db, None, vehicle_id=vehicle.id)) == 1


# ─── Drivers ──────────────────────────────────────────────────────────────────
def test_driver_availability_stays_ordered(db, admin, make_driver):
    driver = make_driver()
    with pytest.raises(ValidationException):
        driver_service.update_driver(db, driver.id, DriverUpdateRequest(
            availabilityEnd=datetime(2000, 1, 1, tzinfo=timezone.utc)), admin.id)


def test_list_drivers_rejects_unknown_status(db, make_driver):
    make_driver()
    rows, total = driver_service.list_drivers(db, 1, 20, "approved")
    assert total == 1
    with pytest.raises(ValidationException):
        driver_service.list_drivers(db, 1, 20, "banned")
