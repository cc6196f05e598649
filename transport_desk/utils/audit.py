from sqlalchemy.orm import Session
from transport_desk.models.audit_log import AuditLog


def log_action(
    db: Session,
    user_id: int | None,
    action: str,
    entity_type: str,
    entity_id: int | None = None,
    description: str | None = None,
) -> None:
    """
    Write an audit log entry.

    Args:
        db:          Active DB session (entry is added, NOT committed; caller commits)
        user_id:     ID of user performing the action (None = system action)
        action:      Verb: CREATE, UPDATE, DELETE, APPROVE, STATUS_CHANGE, CHECKIN, etc.
        entity_type: Model name: "Assignment", "Driver", "Vehicle", etc.
        entity_id:   Primary key of the affected record
        description: Human-readable description (shown in audit log UI)

    Usage:
        log_action(db, current_user.id, "STATUS_CHANGE", "Assignment", a.id,
                   f"Assignment #{a.id} scheduled -> active")
        db.commit()
    """
    entry = AuditLog(
        userId=user_id,
        action=action,
        entityType=entity_type,
        entityId=entity_id,
        description=description,
    )
    db.add(entry)
    # Committed by the caller together with the change it describes
