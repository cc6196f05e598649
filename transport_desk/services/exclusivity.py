"""
Back-reference bookkeeping for vehicles and VIPs.

`Vehicle.currentDriverId` and `VIP.assignedDriverId` are denormalised
pointers owned by the assignment write path. Every helper here works on the
caller's session and never commits, so the pointer changes land in the same
transaction as the assignment row that caused them. Target rows are read
FOR UPDATE so two coordinators editing at once serialise on the row.
"""
import logging
from sqlalchemy.orm import Session

from transport_desk.models.assignment import Assignment, LIVE_STATUSES
from transport_desk.models.vehicle import Vehicle
from transport_desk.models.vip import VIP
from transport_desk.utils.exceptions import (
    NotFoundException, VehicleUnavailableException, VipUnavailableException,
)

logger = logging.getLogger(__name__)


def _lock_vehicle(db: Session, vehicle_id: int) -> Vehicle:
    vehicle = db.query(Vehicle).filter(Vehicle.id == vehicle_id).with_for_update().first()
    if not vehicle:
        raise NotFoundException("Vehicle")
    return vehicle


def _lock_vip(db: Session, vip_id: int) -> VIP:
    vip = db.query(VIP).filter(VIP.id == vip_id).with_for_update().first()
    if not vip:
        raise NotFoundException("VIP")
    return vip


def _other_live_assignment(db: Session, column, target_id: int, exclude_id: int | None):
    q = db.query(Assignment.id).filter(column == target_id, Assignment.status.in_(LIVE_STATUSES))
    if exclude_id is not None:
        q = q.filter(Assignment.id != exclude_id)
    return q.first()


# ─── Vehicle ──────────────────────────────────────────────────────────────────
def claim_vehicle(db: Session, vehicle_id: int, driver_id: int, assignment_id: int | None = None) -> Vehicle:
    """
    Point the vehicle at `driver_id`.

    Raises VehicleUnavailableException when another driver holds it, or when
    some other live assignment already references it.
    """
    vehicle = _lock_vehicle(db, vehicle_id)
    if vehicle.currentDriverId is not None and vehicle.currentDriverId != driver_id:
        raise VehicleUnavailableException()
    if _other_live_assignment(db, Assignment.vehicleId, vehicle_id, assignment_id):
        raise VehicleUnavailableException()
    vehicle.currentDriverId = driver_id
    return vehicle


def release_vehicle(db: Session, vehicle_id: int, driver_id: int) -> bool:
    """Clear the pointer if it still names `driver_id`. Returns True if cleared."""
    vehicle = db.query(Vehicle).filter(Vehicle.id == vehicle_id).with_for_update().first()
    if vehicle is None or vehicle.currentDriverId != driver_id:
        return False
    vehicle.currentDriverId = None
    return True


# ─── VIP ──────────────────────────────────────────────────────────────────────
def claim_vip(db: Session, vip_id: int, driver_id: int, assignment_id: int | None = None) -> VIP:
    """Same rule as claim_vehicle, applied to VIPs."""
    vip = _lock_vip(db, vip_id)
    if vip.assignedDriverId is not None and vip.assignedDriverId != driver_id:
        raise VipUnavailableException()
    if _other_live_assignment(db, Assignment.vipId, vip_id, assignment_id):
        raise VipUnavailableException()
    vip.assignedDriverId = driver_id
    return vip


def release_vip(db: Session, vip_id: int, driver_id: int) -> bool:
    vip = db.query(VIP).filter(VIP.id == vip_id).with_for_update().first()
    if vip is None or vip.assignedDriverId != driver_id:
        return False
    vip.assignedDriverId = None
    return True


# ─── Assignment-level operations ──────────────────────────────────────────────
def switch_vehicle(db: Session, assignment: Assignment, new_vehicle_id: int) -> None:
    if new_vehicle_id == assignment.vehicleId:
        return
    claim_vehicle(db, new_vehicle_id, assignment.driverId, assignment.id)
    release_vehicle(db, assignment.vehicleId, assignment.driverId)
    logger.info(f"Assignment #{assignment.id}: vehicle {assignment.vehicleId} -> {new_vehicle_id}")
    assignment.vehicleId = new_vehicle_id


def switch_vip(db: Session, assignment: Assignment, new_vip_id: int | None) -> None:
    if new_vip_id == assignment.vipId:
        return
    if new_vip_id is not None:
        claim_vip(db, new_vip_id, assignment.driverId, assignment.id)
    if assignment.vipId is not None:
        release_vip(db, assignment.vipId, assignment.driverId)
    logger.info(f"Assignment #{assignment.id}: VIP {assignment.vipId} -> {new_vip_id}")
    assignment.vipId = new_vip_id


def release_all(db: Session, assignment: Assignment) -> None:
    """Drop both pointers held on behalf of this assignment's driver."""
    if assignment.vehicleId is not None:
        release_vehicle(db, assignment.vehicleId, assignment.driverId)
    if assignment.vipId is not None:
        release_vip(db, assignment.vipId, assignment.driverId)
