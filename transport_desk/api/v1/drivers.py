from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Optional

from transport_desk.database import get_db
from transport_desk.dependencies import require_permission, get_current_driver
from transport_desk.models.driver import Driver
from transport_desk.models.user import User
from transport_desk.schemas.driver import DriverRegisterRequest, DriverUpdateRequest, DriverRejectRequest
from transport_desk.schemas.common import success_response, paginated_response
from transport_desk.services.driver_service import driver_service

router = APIRouter(prefix="/drivers")


@router.post("/register", status_code=status.HTTP_201_CREATED, summary="Driver self-registration (public)")
def register(body: DriverRegisterRequest, db: Session = Depends(get_db)):
    data = driver_service.register(db, body)
    return success_response("Registration received. You will be emailed once approved.", data)


@router.get("", summary="List drivers")
def list_drivers(
    page:   int           = Query(1, ge=1),
    limit:  int           = Query(20, ge=1, le=100),
    status: Optional[str] = Query(None),
    db:     Session       = Depends(get_db),
    _:      User          = Depends(require_permission("drivers", "read")),
):
    data, total = driver_service.list_drivers(db, page, limit, status)
    return paginated_response("Drivers retrieved successfully", data, total, page, limit)


@router.get("/me/assignment", summary="Current assignment and check-ins (Driver)")
def my_assignment(db: Session = Depends(get_db), driver: Driver = Depends(get_current_driver)):
    return success_response("Assignment retrieved", driver_service.get_my_assignment(db, driver))


@router.get("/{driver_id}", summary="Get driver by ID")
def get_driver(
    driver_id: int,
    db: Session = Depends(get_db),
    _:  User    = Depends(require_permission("drivers", "read")),
):
    return success_response("Driver retrieved", driver_service.get_driver(db, driver_id))


@router.patch("/{driver_id}", summary="Update driver profile")
def update_driver(
    driver_id: int,
    body:      DriverUpdateRequest,
    db:        Session = Depends(get_db),
    current_user: User = Depends(require_permission("drivers", "update")),
):
    data = driver_service.update_driver(db, driver_id, body, current_user.id)
    return success_response("Driver updated successfully", data)


@router.post("/{driver_id}/approve", summary="Approve driver and send login credentials")
def approve_driver(
    driver_id: int,
    db:        Session = Depends(get_db),
    current_user: User = Depends(require_permission("drivers", "approve")),
):
    data = driver_service.approve_driver(db, driver_id, current_user.id)
    return success_response("Driver approved successfully", data)


@router.post("/{driver_id}/reject", summary="Reject driver application")
def reject_driver(
    driver_id: int,
    body:      DriverRejectRequest,
    db:        Session = Depends(get_db),
    current_user: User = Depends(require_permission("drivers", "approve")),
):
    data = driver_service.reject_driver(db, driver_id, body, current_user.id)
    return success_response("Driver rejected", data)


@router.delete("/{driver_id}", summary="Delete driver")
def delete_driver(
    driver_id: int,
    db:        Session = Depends(get_db),
    current_user: User = Depends(require_permission("drivers", "delete")),
):
    data = driver_service.delete_driver(db, driver_id, current_user.id)
    return success_response(data.pop("message"), data)
