from pydantic import BaseModel
from typing import TypeVar, Generic, Any
from datetime import date, datetime, timezone

T = TypeVar("T")


# ─── Error Body ───────────────────────────────────────────────────────────────
class ErrorBody(BaseModel):
    code: str
    details: list | None = None
    field: str | None = None


# ─── Standard Success Response ────────────────────────────────────────────────
class SuccessResponse(BaseModel, Generic[T]):
    success: bool = True
    message: str
    data: T | None = None


# ─── Error Response ───────────────────────────────────────────────────────────
class ErrorResponse(BaseModel):
    success: bool = False
    message: str
    error: ErrorBody


# ─── Helper Functions ─────────────────────────────────────────────────────────
def success_response(message: str, data: Any = None) -> dict:
    """Return a standardized success dict (used in route handlers)."""
    return {"success": True, "message": message, "data": data}


def paginated_response(
    message: str,
    data: list,
    total: int,
    page: int,
    limit: int,
) -> dict:
    """Return a standardized paginated dict."""
    total_pages = (total + limit - 1) // limit if limit > 0 else 0
    return {
        "success": True,
        "message": message,
        "data": data,
        "meta": {
            "page": page,
            "limit": limit,
            "total": total,
            "totalPages": total_pages,
            "hasNext": page < total_pages,
            "hasPrev": page > 1,
        }
    }


def iso(value: date | datetime | None) -> str | None:
    """isoformat() that passes NULL columns through."""
    return value.isoformat() if value is not None else None


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes (SQLite drops tzinfo on read)."""
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
