from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Optional

from transport_desk.database import get_db
from transport_desk.dependencies import require_permission
from transport_desk.models.user import User
from transport_desk.schemas.assignment import (
    AssignmentCreateRequest, AssignmentUpdateRequest, AssignmentStatusRequest, AssignVipRequest,
)
from transport_desk.schemas.common import success_response, paginated_response
from transport_desk.services.assignment_service import assignment_service

router = APIRouter(prefix="/assignments")


@router.get("", summary="List assignments (paginated)")
def list_assignments(
    page:     int           = Query(1, ge=1),
    limit:    int           = Query(20, ge=1, le=100),
    status:   Optional[str] = Query(None, description="scheduled | active | completed"),
    driverId: Optional[int] = Query(None),
    db:       Session       = Depends(get_db),
    _:        User          = Depends(require_permission("assignments", "read")),
):
    data, total = assignment_service.list_assignments(db, page, limit, status, driverId)
    return paginated_response("Assignments retrieved successfully", data, total, page, limit)


@router.post("", status_code=status.HTTP_201_CREATED, summary="Create assignment")
def create_assignment(
    body: AssignmentCreateRequest,
    db:   Session = Depends(get_db),
    current_user: User = Depends(require_permission("assignments", "create")),
):
    data = assignment_service.create_assignment(db, body, current_user)
    return success_response("Assignment created successfully", data)


@router.post("/assign-vip", summary="Attach a VIP to the driver's live assignment")
def assign_vip(
    body: AssignVipRequest,
    db:   Session = Depends(get_db),
    current_user: User = Depends(require_permission("assignments", "update")),
):
    data = assignment_service.assign_vip(db, body, current_user)
    return success_response("VIP assigned successfully", data)


@router.get("/{assignment_id}", summary="Get assignment by ID")
def get_assignment(
    assignment_id: int,
    db: Session = Depends(get_db),
    _:  User    = Depends(require_permission("assignments", "read")),
):
    return success_response("Assignment retrieved", assignment_service.get_assignment(db, assignment_id))


@router.patch("/{assignment_id}", summary="Edit vehicle, VIP or times")
def update_assignment(
    assignment_id: int,
    body: AssignmentUpdateRequest,
    db:   Session = Depends(get_db),
    current_user: User = Depends(require_permission("assignments", "update")),
):
    data = assignment_service.update_assignment(db, assignment_id, body, current_user)
    return success_response("Assignment updated successfully", data)


@router.patch("/{assignment_id}/status", summary="Change assignment status")
def update_status(
    assignment_id: int,
    body: AssignmentStatusRequest,
    db:   Session = Depends(get_db),
    current_user: User = Depends(require_permission("assignments", "update")),
):
    data = assignment_service.update_status(db, assignment_id, body, current_user)
    return success_response(f"Assignment status updated to {data['assignment']['status']}", data)


@router.delete("/{assignment_id}", summary="Delete assignment and its check-ins and observations")
def delete_assignment(
    assignment_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("assignments", "delete")),
):
    data = assignment_service.delete_assignment(db, assignment_id, current_user)
    return success_response("Assignment deleted successfully", data)
