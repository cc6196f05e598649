"""
Bootstrap the first admin account.

    python -m transport_desk.create_admin admin@example.org "Ops Admin"

Prompts for the password. Re-running for an existing email resets that
account to an active admin.
"""
import argparse
import getpass
import logging
import sys

from transport_desk.database import SessionLocal
from transport_desk.models.role import RoleName, DepartmentName
from transport_desk.models.user import User
from transport_desk.schemas.auth import validate_password_strength
from transport_desk.utils.audit import log_action
from transport_desk.utils.security import hash_password

logger = logging.getLogger(__name__)


def create_admin(email: str, name: str, password: str) -> User:
    db = SessionLocal()
    try:
        user = db.query(User).filter(User.email == email.lower()).first()
        if user is None:
            user = User(email=email.lower(), name=name)
            db.add(user)
        user.password = hash_password(password)
        user.role = RoleName.ADMIN
        user.department = DepartmentName.ALL
        user.isActive = True
        db.flush()
        log_action(db, None, "BOOTSTRAP_ADMIN", "User", user.id, f"Admin account ready for {user.email}")
        db.commit()
        db.refresh(user)
        return user
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create or reset an admin account")
    parser.add_argument("email")
    parser.add_argument("name")
    args = parser.parse_args(argv)

    password = getpass.getpass("Password: ")
    try:
        validate_password_strength(password)
    except ValueError as e:
        print(e, file=sys.stderr)
        return 1

    user = create_admin(args.email, args.name, password)
    print(f"Admin #{user.id} ready: {user.email}")
    return 0


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
    sys.exit(main())
