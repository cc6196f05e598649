import logging
from sqlalchemy import or_
from sqlalchemy.orm import Session

from transport_desk.models.role import RoleName, DepartmentName
from transport_desk.models.user import User
from transport_desk.schemas.common import iso
from transport_desk.schemas.user import UserCreateRequest, UserUpdateRequest
from transport_desk.services.auth_service import serialize_user
from transport_desk.utils.audit import log_action
from transport_desk.utils.exceptions import (
    NotFoundException, DuplicateEntryException, ForbiddenException,
    ValidationException, ResourceInUseException,
)
from transport_desk.utils.security import hash_password

logger = logging.getLogger(__name__)


def _serialize(u: User) -> dict:
    return {
        **serialize_user(u),
        "createdAt": iso(u.createdAt),
        "updatedAt": iso(u.updatedAt),
    }


class UserService:

    def _get(self, db: Session, user_id: int) -> User:
        u = db.query(User).filter(User.id == user_id).first()
        if not u:
            raise NotFoundException("User")
        return u

    def _check_email_free(self, db: Session, email: str, user_id: int | None = None) -> None:
        q = db.query(User).filter(User.email == email)
        if user_id is not None:
            q = q.filter(User.id != user_id)
        if q.first():
            raise DuplicateEntryException("User with this email already exists", field="email")

    # ─── List ─────────────────────────────────────────────────────────────────
    def list_users(
        self, db: Session,
        page: int, limit: int,
        search: str | None,
        role: RoleName | None,
        department: DepartmentName | None,
        is_active: bool | None,
    ) -> tuple[list[dict], int]:
        q = db.query(User)

        if search:
            kw = f"%{search}%"
            q = q.filter(or_(User.name.ilike(kw), User.email.ilike(kw)))
        if role is not None:
            q = q.filter(User.role == role)
        if department is not None:
            q = q.filter(User.department == department)
        if is_active is not None:
            q = q.filter(User.isActive == is_active)

        total = q.count()
        users = q.order_by(User.createdAt.desc(), User.id.desc()).offset((page - 1) * limit).limit(limit).all()
        return [_serialize(u) for u in users], total

    def get_user(self, db: Session, user_id: int) -> dict:
        return _serialize(self._get(db, user_id))

    # ─── Create ───────────────────────────────────────────────────────────────
    def create_user(self, db: Session, data: UserCreateRequest, actor_id: int) -> dict:
        # driver logins are provisioned by approving a registration
        if data.role == RoleName.DRIVER:
            raise ValidationException("Driver accounts are created by approving a driver", field="role")
        email = str(data.email).lower()
        self._check_email_free(db, email)

        u = User(
            name=data.name,
            email=email,
            password=hash_password(data.password),
            role=data.role,
            department=data.department,
            isActive=True,
        )
        db.add(u)
        db.flush()
        log_action(db, actor_id, "CREATE", "User", u.id,
                   f"Created {u.role.value} {u.name} ({u.email})")
        db.commit()
        db.refresh(u)
        logger.info(f"User {u.id} created with role {u.role.value}")
        return _serialize(u)

    # ─── Update ───────────────────────────────────────────────────────────────
    def update_user(self, db: Session, user_id: int, data: UserUpdateRequest, actor_id: int) -> dict:
        u = self._get(db, user_id)

        if data.role is not None and data.role != u.role:
            if RoleName.DRIVER in (data.role, u.role):
                raise ValidationException("Driver accounts cannot change role", field="role")
            if u.id == actor_id:
                raise ForbiddenException("You cannot change your own role")
        if data.isActive is False and u.id == actor_id:
            raise ForbiddenException("You cannot deactivate your own account")
        if data.email:
            email = str(data.email).lower()
            if email != u.email:
                self._check_email_free(db, email, u.id)
                u.email = email

        if data.name:                   u.name       = data.name
        if data.role is not None:       u.role       = data.role
        if data.department is not None: u.department = data.department
        if data.isActive is not None:   u.isActive   = data.isActive
        if data.password:               u.password   = hash_password(data.password)

        log_action(db, actor_id, "UPDATE", "User", u.id, f"Updated user {u.name}")
        db.commit()
        db.refresh(u)
        return _serialize(u)

    # ─── Toggle Active ────────────────────────────────────────────────────────
    def toggle_active(self, db: Session, user_id: int, actor_id: int) -> dict:
        u = self._get(db, user_id)
        if u.id == actor_id:
            raise ForbiddenException("You cannot deactivate your own account")

        u.isActive = not u.isActive
        action = "ACTIVATE" if u.isActive else "DEACTIVATE"
        log_action(db, actor_id, action, "User", u.id, f"{action.title()}d user {u.name}")
        db.commit()
        db.refresh(u)
        return _serialize(u)

    # ─── Delete ───────────────────────────────────────────────────────────────
    def delete_user(self, db: Session, user_id: int, actor_id: int) -> None:
        u = self._get(db, user_id)
        if u.id == actor_id:
            raise ForbiddenException("You cannot delete your own account")
        if u.role == RoleName.ADMIN:
            raise ForbiddenException("Cannot delete admin users")
        if u.driver_profile is not None:
            raise ResourceInUseException("User", "is the login of a driver; delete the driver instead")

        log_action(db, actor_id, "DELETE", "User", u.id, f"Deleted user {u.name} ({u.email})")
        db.delete(u)
        db.commit()
        logger.info(f"User {user_id} deleted")


user_service = UserService()
