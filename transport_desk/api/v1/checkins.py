from datetime import date
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Optional

from transport_desk.database import get_db
from transport_desk.dependencies import get_current_driver
from transport_desk.models.driver import Driver
from transport_desk.schemas.checkin import CheckinCreateRequest
from transport_desk.schemas.common import success_response
from transport_desk.services.checkin_service import checkin_service

router = APIRouter(prefix="/checkins")


@router.get("", summary="List own check-ins (Driver)")
def list_checkins(
    assignmentId: Optional[int] = Query(None),
    db:     Session = Depends(get_db),
    driver: Driver  = Depends(get_current_driver),
):
    return success_response("Check-ins retrieved", checkin_service.list_checkins(db, driver, assignmentId))


@router.post("", status_code=status.HTTP_201_CREATED, summary="Record a check-in (Driver)")
def create_checkin(
    body:   CheckinCreateRequest,
    db:     Session = Depends(get_db),
    driver: Driver  = Depends(get_current_driver),
):
    data = checkin_service.create_checkin(db, driver, body)
    return success_response("Check-in recorded", {"checkin": data})


@router.get("/daily-status", summary="Itinerary progress for one event date (Driver)")
def daily_status(
    assignmentId: int            = Query(...),
    eventDate:    Optional[date] = Query(None, description="YYYY-MM-DD, defaults to today (UTC)"),
    db:     Session = Depends(get_db),
    driver: Driver  = Depends(get_current_driver),
):
    data = checkin_service.get_progress(db, driver, assignmentId, eventDate)
    return success_response("Daily status retrieved", data)
