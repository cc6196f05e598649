import logging
from datetime import datetime, timezone
from sqlalchemy import or_
from sqlalchemy.orm import Session

from transport_desk.models.assignment import Assignment, LIVE_STATUSES
from transport_desk.models.vehicle import Vehicle
from transport_desk.models.vehicle_observation import VehicleObservation
from transport_desk.schemas.common import iso
from transport_desk.schemas.vehicle import VehicleCreateRequest, VehicleUpdateRequest, VehicleReturnRequest
from transport_desk.utils.audit import log_action
from transport_desk.utils.exceptions import NotFoundException, DuplicateEntryException, ResourceInUseException

logger = logging.getLogger(__name__)


def _serialize(v: Vehicle) -> dict:
    return {
        "id":               v.id,
        "make":             v.make,
        "model":            v.model,
        "registration":     v.registration,
        "label":            v.label,
        "isHired":          v.isHired,
        "pickupLocation":   v.pickupLocation,
        "pickupMileage":    v.pickupMileage,
        "pickupFuelGauge":  v.pickupFuelGauge,
        "pickupPhotos":     v.pickupPhotos or [],
        "pickupDate":       iso(v.pickupDate),
        "dropoffMileage":   v.dropoffMileage,
        "dropoffFuelGauge": v.dropoffFuelGauge,
        "dropoffPhotos":    v.dropoffPhotos,
        "dropoffDate":      iso(v.dropoffDate),
        "currentDriver": {
            "id":   v.current_driver.id,
            "name": v.current_driver.name,
        } if v.current_driver else None,
        "createdAt":        iso(v.createdAt),
        "updatedAt":        iso(v.updatedAt),
    }


class VehicleService:

    def _get(self, db: Session, vehicle_id: int) -> Vehicle:
        v = db.query(Vehicle).filter(Vehicle.id == vehicle_id).first()
        if not v:
            raise NotFoundException("Vehicle")
        return v

    def list_vehicles(
        self, db: Session, page: int, limit: int,
        search: str | None, available: bool | None,
    ) -> tuple[list[dict], int]:
        q = db.query(Vehicle)
        if search:
            kw = f"%{search}%"
            q = q.filter(or_(
                Vehicle.registration.ilike(kw),
                Vehicle.make.ilike(kw),
                Vehicle.model.ilike(kw),
            ))
        if available is True:
            q = q.filter(Vehicle.currentDriverId.is_(None))
        elif available is False:
            q = q.filter(Vehicle.currentDriverId.isnot(None))

        total = q.count()
        items = q.order_by(Vehicle.createdAt.desc(), Vehicle.id.desc()).offset((page - 1) * limit).limit(limit).all()
        return [_serialize(v) for v in items], total

    def get_vehicle(self, db: Session, vehicle_id: int) -> dict:
        return _serialize(self._get(db, vehicle_id))

    def create_vehicle(self, db: Session, data: VehicleCreateRequest, actor_id: int) -> dict:
        if db.query(Vehicle).filter(Vehicle.registration == data.registration).first():
            raise DuplicateEntryException("Registration already exists", field="registration")

        vehicle = Vehicle(**data.model_dump())
        db.add(vehicle)
        db.flush()
        log_action(db, actor_id, "CREATE", "Vehicle", vehicle.id, f"Created vehicle {vehicle.label}")
        db.commit()
        db.refresh(vehicle)
        return _serialize(vehicle)

    def update_vehicle(self, db: Session, vehicle_id: int, data: VehicleUpdateRequest, actor_id: int) -> dict:
        v = self._get(db, vehicle_id)

        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        if "registration" in changes:
            changes["registration"] = changes["registration"].strip().upper()
            if db.query(Vehicle).filter(Vehicle.registration == changes["registration"], Vehicle.id != vehicle_id).first():
                raise DuplicateEntryException("Registration already exists", field="registration")
        for field, value in changes.items():
            setattr(v, field, value)

        log_action(db, actor_id, "UPDATE", "Vehicle", v.id, f"Updated vehicle {v.label}")
        db.commit()
        db.refresh(v)
        return _serialize(v)

    def return_vehicle(self, db: Session, vehicle_id: int, data: VehicleReturnRequest, actor_id: int) -> dict:
        """Record the dropoff snapshot when a hired vehicle goes back."""
        v = self._get(db, vehicle_id)
        v.dropoffMileage   = data.dropoffMileage
        v.dropoffFuelGauge = data.dropoffFuelGauge
        v.dropoffPhotos    = data.dropoffPhotos
        v.dropoffDate      = data.dropoffDate or datetime.now(timezone.utc)

        log_action(db, actor_id, "RETURN", "Vehicle", v.id,
                   f"Returned vehicle {v.label} at {data.dropoffMileage} miles")
        db.commit()
        db.refresh(v)
        logger.info(f"Vehicle #{v.id} returned (mileage {v.dropoffMileage})")
        return _serialize(v)

    def delete_vehicle(self, db: Session, vehicle_id: int, actor_id: int) -> None:
        v = self._get(db, vehicle_id)
        live = db.query(Assignment).filter(
            Assignment.vehicleId == vehicle_id,
            Assignment.status.in_(LIVE_STATUSES),
        ).first()
        if live or v.currentDriverId is not None:
            raise ResourceInUseException("Vehicle")
        if db.query(Assignment).filter(Assignment.vehicleId == vehicle_id).first() or \
           db.query(VehicleObservation).filter(VehicleObservation.vehicleId == vehicle_id).first():
            raise ResourceInUseException("Vehicle", "has assignment history and cannot be deleted")

        label = v.label
        log_action(db, actor_id, "DELETE", "Vehicle", v.id, f"Deleted vehicle {label}")
        db.delete(v)
        db.commit()
        logger.info(f"Vehicle #{vehicle_id} ({label}) deleted")


vehicle_service = VehicleService()
