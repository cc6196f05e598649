from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Optional

from transport_desk.database import get_db
from transport_desk.dependencies import require_permission
from transport_desk.models.user import User
from transport_desk.schemas.vehicle import VehicleCreateRequest, VehicleUpdateRequest, VehicleReturnRequest
from transport_desk.schemas.common import success_response, paginated_response
from transport_desk.services.vehicle_service import vehicle_service

router = APIRouter(prefix="/vehicles")


@router.get("", summary="List vehicles (paginated)")
def list_vehicles(
    page:      int            = Query(1, ge=1),
    limit:     int            = Query(20, ge=1, le=100),
    search:    Optional[str]  = Query(None),
    available: Optional[bool] = Query(None, description="true = no current driver"),
    db:        Session        = Depends(get_db),
    _:         User           = Depends(require_permission("vehicles", "read")),
):
    data, total = vehicle_service.list_vehicles(db, page, limit, search, available)
    return paginated_response("Vehicles retrieved successfully", data, total, page, limit)


@router.get("/{vehicle_id}", summary="Get vehicle by ID")
def get_vehicle(
    vehicle_id: int,
    db: Session = Depends(get_db),
    _:  User    = Depends(require_permission("vehicles", "read")),
):
    return success_response("Vehicle retrieved", vehicle_service.get_vehicle(db, vehicle_id))


@router.post("", status_code=status.HTTP_201_CREATED, summary="Create vehicle with pickup snapshot")
def create_vehicle(
    body: VehicleCreateRequest,
    db:   Session = Depends(get_db),
    current_user: User = Depends(require_permission("vehicles", "create")),
):
    data = vehicle_service.create_vehicle(db, body, current_user.id)
    return success_response("Vehicle created successfully", data)


@router.patch("/{vehicle_id}", summary="Update vehicle")
def update_vehicle(
    vehicle_id: int,
    body: VehicleUpdateRequest,
    db:   Session = Depends(get_db),
    current_user: User = Depends(require_permission("vehicles", "update")),
):
    data = vehicle_service.update_vehicle(db, vehicle_id, body, current_user.id)
    return success_response("Vehicle updated successfully", data)


@router.post("/{vehicle_id}/return", summary="Record vehicle dropoff")
def return_vehicle(
    vehicle_id: int,
    body: VehicleReturnRequest,
    db:   Session = Depends(get_db),
    current_user: User = Depends(require_permission("vehicles", "update")),
):
    data = vehicle_service.return_vehicle(db, vehicle_id, body, current_user.id)
    return success_response("Vehicle return recorded", data)


@router.delete("/{vehicle_id}", summary="Delete vehicle")
def delete_vehicle(
    vehicle_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("vehicles", "delete")),
):
    vehicle_service.delete_vehicle(db, vehicle_id, current_user.id)
    return success_response("Vehicle deleted successfully")
