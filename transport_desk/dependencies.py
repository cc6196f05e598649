from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from transport_desk.database import get_db
from transport_desk.models.driver import Driver
from transport_desk.models.user import User
from transport_desk.models.role import RoleName
from transport_desk.utils.permissions import has_permission, can_view_tracking
from transport_desk.utils.security import verify_access_token
from transport_desk.utils.exceptions import (
    UnauthorizedException,
    ForbiddenException,
    AccountInactiveException,
    NotFoundException,
)

# Bearer token extractor
bearer_scheme = HTTPBearer(auto_error=False)


# ─── Get Current User ─────────────────────────────────────────────────────────
def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    """
    Validate JWT Bearer token and return the current User.
    Raises 401 if token is missing, invalid, or expired.
    Raises 403 if account is inactive.
    """
    if not credentials:
        raise UnauthorizedException("No authentication token provided")

    payload = verify_access_token(credentials.credentials)
    user_id: str | None = payload.get("sub")

    if user_id is None:
        raise UnauthorizedException("Invalid token payload")

    user = db.query(User).filter(User.id == int(user_id)).first()
    if not user:
        raise UnauthorizedException("User no longer exists")

    if not user.isActive:
        raise AccountInactiveException()

    return user


# ─── Permission Guards ────────────────────────────────────────────────────────
def require_permission(resource: str, action: str):
    """
    Factory that returns a FastAPI dependency checking the role matrix in
    utils/permissions.py.

    Usage:
        @router.post("/assignments")
        def create(current_user = Depends(require_permission("assignments", "create"))):
            ...
    """
    def dependency(current_user: User = Depends(get_current_user)) -> User:
        if not has_permission(current_user.role, resource, action):
            raise ForbiddenException("Forbidden: Insufficient permissions")
        return current_user
    return dependency


def get_tracking_viewer(current_user: User = Depends(get_current_user)) -> User:
    if not can_view_tracking(current_user.role, current_user.department):
        raise ForbiddenException("Access denied")
    return current_user


# ─── Driver Context ───────────────────────────────────────────────────────────
def get_current_driver(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Driver:
    """Resolve the Driver record linked to the authenticated account."""
    if current_user.role != RoleName.DRIVER:
        raise ForbiddenException("This action is only available to drivers")
    driver = db.query(Driver).filter(Driver.userId == current_user.id).first()
    if not driver:
        raise NotFoundException("Driver")
    return driver
