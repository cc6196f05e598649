import logging
from datetime import datetime, timezone
from sqlalchemy.orm import Session

from transport_desk.models.assignment import Assignment
from transport_desk.models.driver import Driver
from transport_desk.models.vehicle_observation import VehicleObservation
from transport_desk.schemas.common import iso
from transport_desk.schemas.observation import ObservationCreateRequest
from transport_desk.utils.audit import log_action
from transport_desk.utils.exceptions import ForbiddenException

logger = logging.getLogger(__name__)


def _serialize(o: VehicleObservation) -> dict:
    return {
        "id":              o.id,
        "driverId":        o.driverId,
        "vehicleId":       o.vehicleId,
        "assignmentId":    o.assignmentId,
        "observationType": o.observationType.value,
        "mileage":         o.mileage,
        "fuelLevel":       o.fuelLevel,
        "damageNotes":     o.damageNotes,
        "photos":          o.photos or [],
        "timestamp":       iso(o.timestamp),
        "createdAt":       iso(o.createdAt),
    }


class ObservationService:

    def create_observation(self, db: Session, driver: Driver, data: ObservationCreateRequest) -> dict:
        a = db.query(Assignment).filter(
            Assignment.id == data.assignmentId,
            Assignment.driverId == driver.id,
            Assignment.vehicleId == data.vehicleId,
        ).first()
        if not a:
            raise ForbiddenException("Assignment not found or not authorized")

        o = VehicleObservation(
            driverId=driver.id,
            vehicleId=data.vehicleId,
            assignmentId=data.assignmentId,
            observationType=data.observationType,
            mileage=data.mileage,
            fuelLevel=data.fuelLevel,
            damageNotes=data.damageNotes.strip() if data.damageNotes and data.damageNotes.strip() else None,
            photos=data.photos or [],
            timestamp=datetime.now(timezone.utc),
        )
        db.add(o)
        db.flush()
        log_action(db, driver.userId, "OBSERVATION", "VehicleObservation", o.id,
                   f"{driver.name}: {o.observationType.value} on vehicle #{o.vehicleId}")
        db.commit()
        db.refresh(o)
        logger.info(f"Observation #{o.id} ({o.observationType.value}) for vehicle {o.vehicleId}")
        return _serialize(o)

    def list_observations(
        self, db: Session, driver: Driver | None = None,
        vehicle_id: int | None = None, assignment_id: int | None = None,
    ) -> list[dict]:
        """Drivers see their own rows; staff pass driver=None to see everything."""
        q = db.query(VehicleObservation)
        if driver is not None:    q = q.filter(VehicleObservation.driverId == driver.id)
        if vehicle_id:            q = q.filter(VehicleObservation.vehicleId == vehicle_id)
        if assignment_id:         q = q.filter(VehicleObservation.assignmentId == assignment_id)
        rows = q.order_by(VehicleObservation.timestamp.desc(), VehicleObservation.id.desc()).all()
        return [_serialize(o) for o in rows]


observation_service = ObservationService()
