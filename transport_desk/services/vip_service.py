import logging
from sqlalchemy.orm import Session

from transport_desk.models.assignment import Assignment, LIVE_STATUSES
from transport_desk.models.vip import VIP
from transport_desk.schemas.common import iso
from transport_desk.schemas.vip import VipCreateRequest, VipUpdateRequest
from transport_desk.utils.audit import log_action
from transport_desk.utils.exceptions import NotFoundException, ResourceInUseException, ValidationException

logger = logging.getLogger(__name__)


def _serialize(v: VIP) -> dict:
    return {
        "id":                v.id,
        "name":              v.name,
        "arrivalDate":       iso(v.arrivalDate),
        "arrivalTime":       v.arrivalTime,
        "arrivalAirport":    v.arrivalAirport,
        "arrivalTerminal":   v.arrivalTerminal,
        "departureDate":     iso(v.departureDate),
        "departureTime":     v.departureTime,
        "departureAirport":  v.departureAirport,
        "departureTerminal": v.departureTerminal,
        "remarks":           v.remarks,
        "assignedDriver": {
            "id":   v.assigned_driver.id,
            "name": v.assigned_driver.name,
        } if v.assigned_driver else None,
        "createdAt":         iso(v.createdAt),
        "updatedAt":         iso(v.updatedAt),
    }


class VipService:

    def _get(self, db: Session, vip_id: int) -> VIP:
        v = db.query(VIP).filter(VIP.id == vip_id).first()
        if not v: raise NotFoundException("VIP")
        return v

    def list_vips(self, db: Session, page: int, limit: int, search: str | None) -> tuple[list[dict], int]:
        q = db.query(VIP)
        if search:
            q = q.filter(VIP.name.ilike(f"%{search}%"))
        total = q.count()
        items = q.order_by(VIP.arrivalDate.asc(), VIP.id.asc()).offset((page - 1) * limit).limit(limit).all()
        return [_serialize(v) for v in items], total

    def get_vip(self, db: Session, vip_id: int) -> dict:
        return _serialize(self._get(db, vip_id))

    def create_vip(self, db: Session, data: VipCreateRequest, actor_id: int) -> dict:
        v = VIP(**data.model_dump())
        db.add(v)
        db.flush()
        log_action(db, actor_id, "CREATE", "VIP", v.id, f"Created VIP {v.name}")
        db.commit()
        db.refresh(v)
        return _serialize(v)

    def update_vip(self, db: Session, vip_id: int, data: VipUpdateRequest, actor_id: int) -> dict:
        v = self._get(db, vip_id)
        for field, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
            setattr(v, field, value)
        if v.departureDate < v.arrivalDate:
            raise ValidationException("departureDate cannot be before arrivalDate", field="departureDate")

        log_action(db, actor_id, "UPDATE", "VIP", v.id, f"Updated VIP {v.name}")
        db.commit()
        db.refresh(v)
        return _serialize(v)

    def delete_vip(self, db: Session, vip_id: int, actor_id: int) -> None:
        v = self._get(db, vip_id)
        live = db.query(Assignment).filter(
            Assignment.vipId == vip_id,
            Assignment.status.in_(LIVE_STATUSES),
        ).first()
        if live or v.assignedDriverId is not None:
            raise ResourceInUseException("VIP")

        # Completed assignments keep their history without the VIP link
        db.query(Assignment).filter(Assignment.vipId == vip_id).update({Assignment.vipId: None})
        name = v.name
        log_action(db, actor_id, "DELETE", "VIP", v.id, f"Deleted VIP {name}")
        db.delete(v)
        db.commit()
        logger.info(f"VIP #{vip_id} ({name}) deleted")


vip_service = VipService()
