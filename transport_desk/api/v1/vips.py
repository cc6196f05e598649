from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Optional

from transport_desk.database import get_db
from transport_desk.dependencies import require_permission
from transport_desk.models.user import User
from transport_desk.schemas.vip import VipCreateRequest, VipUpdateRequest
from transport_desk.schemas.common import success_response, paginated_response
from transport_desk.services.vip_service import vip_service

router = APIRouter(prefix="/vips")


@router.get("", summary="List VIPs by arrival date")
def list_vips(
    page:   int           = Query(1, ge=1),
    limit:  int           = Query(20, ge=1, le=100),
    search: Optional[str] = Query(None),
    db:     Session       = Depends(get_db),
    _:      User          = Depends(require_permission("vips", "read")),
):
    data, total = vip_service.list_vips(db, page, limit, search)
    return paginated_response("VIPs retrieved successfully", data, total, page, limit)


@router.get("/{vip_id}", summary="Get VIP by ID")
def get_vip(vip_id: int, db: Session = Depends(get_db), _: User = Depends(require_permission("vips", "read"))):
    return success_response("VIP retrieved", vip_service.get_vip(db, vip_id))


@router.post("", status_code=status.HTTP_201_CREATED, summary="Create VIP")
def create_vip(
    body: VipCreateRequest,
    db:   Session = Depends(get_db),
    current_user: User = Depends(require_permission("vips", "create")),
):
    return success_response("VIP created successfully", vip_service.create_vip(db, body, current_user.id))


@router.patch("/{vip_id}", summary="Update VIP")
def update_vip(
    vip_id: int,
    body:   VipUpdateRequest,
    db:     Session = Depends(get_db),
    current_user: User = Depends(require_permission("vips", "update")),
):
    return success_response("VIP updated successfully", vip_service.update_vip(db, vip_id, body, current_user.id))


@router.delete("/{vip_id}", summary="Delete VIP")
def delete_vip(
    vip_id: int,
    db:     Session = Depends(get_db),
    current_user: User = Depends(require_permission("vips", "delete")),
):
    vip_service.delete_vip(db, vip_id, current_user.id)
    return success_response("VIP deleted successfully")
