from datetime import date
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional

from transport_desk.database import get_db
from transport_desk.dependencies import get_tracking_viewer
from transport_desk.models.user import User
from transport_desk.schemas.common import success_response
from transport_desk.services.tracking_service import tracking_service

router = APIRouter(prefix="/tracking")


@router.get("", summary="Live tracking view of assignments")
def get_tracking(
    status:      Optional[str]  = Query(None, description="Defaults to scheduled + active"),
    driverId:    Optional[int]  = Query(None),
    startDate:   Optional[date] = Query(None),
    endDate:     Optional[date] = Query(None),
    checkinType: Optional[str]  = Query(None),
    db:          Session        = Depends(get_db),
    viewer:      User           = Depends(get_tracking_viewer),
):
    data = tracking_service.get_tracking(db, viewer, status, driverId, startDate, endDate, checkinType)
    return success_response("Tracking information retrieved", data)
