from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Optional

from transport_desk.database import get_db
from transport_desk.dependencies import require_permission
from transport_desk.models.role import RoleName, DepartmentName
from transport_desk.models.user import User
from transport_desk.schemas.user import UserCreateRequest, UserUpdateRequest
from transport_desk.schemas.common import success_response, paginated_response
from transport_desk.services.user_service import user_service

router = APIRouter(prefix="/users")


@router.get("", summary="List staff and driver logins (paginated)")
def list_users(
    page:       int                      = Query(1,    ge=1),
    limit:      int                      = Query(20,   ge=1, le=100),
    search:     Optional[str]            = Query(None, description="Search by name or email"),
    role:       Optional[RoleName]       = Query(None),
    department: Optional[DepartmentName] = Query(None),
    isActive:   Optional[bool]           = Query(None),
    db:         Session                  = Depends(get_db),
    _:          User                     = Depends(require_permission("users", "read")),
):
    data, total = user_service.list_users(db, page, limit, search, role, department, isActive)
    return paginated_response("Users retrieved successfully", data, total, page, limit)


@router.get("/{user_id}", summary="Get user by ID")
def get_user(
    user_id: int,
    db:      Session = Depends(get_db),
    _:       User    = Depends(require_permission("users", "read")),
):
    return success_response("User retrieved", user_service.get_user(db, user_id))


@router.post("", status_code=status.HTTP_201_CREATED, summary="Create staff user")
def create_user(
    body: UserCreateRequest,
    db:   Session = Depends(get_db),
    current_user: User = Depends(require_permission("users", "create")),
):
    data = user_service.create_user(db, body, current_user.id)
    return success_response("User created successfully", data)


@router.put("/{user_id}", summary="Update user")
def update_user(
    user_id: int,
    body:    UserUpdateRequest,
    db:      Session = Depends(get_db),
    current_user: User = Depends(require_permission("users", "update")),
):
    data = user_service.update_user(db, user_id, body, current_user.id)
    return success_response("User updated successfully", data)


@router.patch("/{user_id}/toggle-active", summary="Activate or deactivate a user")
def toggle_active(
    user_id: int,
    db:      Session = Depends(get_db),
    current_user: User = Depends(require_permission("users", "update")),
):
    data = user_service.toggle_active(db, user_id, current_user.id)
    status_str = "activated" if data["isActive"] else "deactivated"
    return success_response(f"User {status_str} successfully", data)


@router.delete("/{user_id}", summary="Delete user")
def delete_user(
    user_id: int,
    db:      Session = Depends(get_db),
    current_user: User = Depends(require_permission("users", "delete")),
):
    user_service.delete_user(db, user_id, current_user.id)
    return success_response("User deleted successfully")
