import logging
import traceback
from fastapi import Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import IntegrityError
from transport_desk.utils.exceptions import AppException, ErrorCode

logger = logging.getLogger(__name__)


def _error(status_code: int, message: str, code: str, details: list | None = None,
           field: str | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "message": message,
            "error": {"code": code, "details": details, "field": field},
        }
    )


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Handle all AppException subclasses."""
    detail = exc.detail
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} -> {exc.status_code} {exc.error_code}")
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "success": False,
            "message": detail.get("message", "An error occurred"),
            "error": detail.get("error", {"code": ErrorCode.INTERNAL_SERVER_ERROR}),
        }
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Handle request-shape validation errors (422), flattening pydantic's
    error list into {field, message} pairs.
    """
    details = []
    for error in exc.errors():
        # loc is a tuple like ("body", "checkinType")
        loc = error.get("loc", [])
        field = ".".join(str(l) for l in loc if l != "body") if loc else "unknown"
        details.append({
            "field": field,
            "message": error.get("msg", "Invalid value"),
        })

    return _error(
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "Validation error. Please check your input.",
        ErrorCode.VALIDATION_ERROR,
        details=details,
    )


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    """
    Unique and FK violations that slipped past the service-level checks.
    The raw driver message is logged, never returned.
    """
    logger.warning(f"IntegrityError on {request.method} {request.url.path}: {exc.orig}")
    return _error(
        status.HTTP_409_CONFLICT,
        "The request conflicts with existing data.",
        ErrorCode.DUPLICATE_ENTRY,
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        f"Unhandled exception on {request.method} {request.url.path}\n"
        f"{''.join(traceback.format_exception(exc))}"
    )
    return _error(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "An unexpected error occurred. Please try again later.",
        ErrorCode.INTERNAL_SERVER_ERROR,
    )
