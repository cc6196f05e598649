from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Optional

from transport_desk.database import get_db
from transport_desk.dependencies import require_permission, get_current_driver
from transport_desk.models.driver import Driver
from transport_desk.models.role import RoleName
from transport_desk.models.user import User
from transport_desk.schemas.common import success_response
from transport_desk.schemas.observation import ObservationCreateRequest
from transport_desk.services.observation_service import observation_service

router = APIRouter(prefix="/vehicle-observations")


@router.get("", summary="List vehicle observations")
def list_observations(
    vehicleId:    Optional[int] = Query(None),
    assignmentId: Optional[int] = Query(None),
    db:           Session       = Depends(get_db),
    current_user: User          = Depends(require_permission("observations", "read")),
):
    # Drivers only ever see their own reports
    driver = get_current_driver(current_user, db) if current_user.role == RoleName.DRIVER else None
    data = observation_service.list_observations(db, driver, vehicleId, assignmentId)
    return success_response("Observations retrieved", data)


@router.post("", status_code=status.HTTP_201_CREATED, summary="Report vehicle condition (Driver)")
def create_observation(
    body:   ObservationCreateRequest,
    db:     Session = Depends(get_db),
    driver: Driver  = Depends(get_current_driver),
):
    data = observation_service.create_observation(db, driver, body)
    return success_response("Observation recorded", data)
