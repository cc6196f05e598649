from fastapi import HTTPException, status


# ═══════════════════════════════════════════════════════════════════════════════
# ERROR CODES: machine-readable constants for frontend switch/case
# ═══════════════════════════════════════════════════════════════════════════════
class ErrorCode:
    VALIDATION_ERROR      = "VALIDATION_ERROR"
    UNAUTHORIZED          = "UNAUTHORIZED"
    TOKEN_EXPIRED         = "TOKEN_EXPIRED"
    FORBIDDEN             = "FORBIDDEN"
    ACCOUNT_INACTIVE      = "ACCOUNT_INACTIVE"
    NOT_FOUND             = "NOT_FOUND"
    DUPLICATE_ENTRY       = "DUPLICATE_ENTRY"
    VEHICLE_UNAVAILABLE   = "VEHICLE_UNAVAILABLE"
    VIP_UNAVAILABLE       = "VIP_UNAVAILABLE"
    RESOURCE_IN_USE       = "RESOURCE_IN_USE"
    DRIVER_IN_USE         = "DRIVER_IN_USE"
    DRIVER_ALREADY_APPROVED = "DRIVER_ALREADY_APPROVED"
    INVALID_TRANSITION    = "INVALID_TRANSITION"
    DUPLICATE_CHECKIN     = "DUPLICATE_CHECKIN"
    OTP_INVALID           = "OTP_INVALID"
    OTP_EXPIRED           = "OTP_EXPIRED"
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"


# ═══════════════════════════════════════════════════════════════════════════════
# BASE EXCEPTION
# ═══════════════════════════════════════════════════════════════════════════════
class AppException(HTTPException):
    """
    Base exception for all application-level errors.
    Carries a machine-readable error_code for frontend handling.
    """
    def __init__(
        self,
        status_code: int,
        message: str,
        error_code: str,
        details: list | None = None,
        field: str | None = None,
    ):
        super().__init__(status_code=status_code, detail={
            "message": message,
            "error": {
                "code": error_code,
                "details": details,
                "field": field,
            }
        })

    @property
    def message(self) -> str:
        return self.detail["message"]

    @property
    def error_code(self) -> str:
        return self.detail["error"]["code"]


# ═══════════════════════════════════════════════════════════════════════════════
# CONCRETE EXCEPTIONS
# ═══════════════════════════════════════════════════════════════════════════════

class ValidationException(AppException):
    def __init__(self, message: str, field: str | None = None):
        super().__init__(status.HTTP_400_BAD_REQUEST, message, ErrorCode.VALIDATION_ERROR, field=field)


class UnauthorizedException(AppException):
    def __init__(self, message: str = "Authentication required"):
        super().__init__(status.HTTP_401_UNAUTHORIZED, message, ErrorCode.UNAUTHORIZED)


class TokenExpiredException(AppException):
    def __init__(self):
        super().__init__(status.HTTP_401_UNAUTHORIZED, "Access token has expired", ErrorCode.TOKEN_EXPIRED)


class ForbiddenException(AppException):
    def __init__(self, message: str = "You do not have permission to perform this action"):
        super().__init__(status.HTTP_403_FORBIDDEN, message, ErrorCode.FORBIDDEN)


class AccountInactiveException(AppException):
    def __init__(self):
        super().__init__(
            status.HTTP_403_FORBIDDEN,
            "Your account has been deactivated. Contact admin.",
            ErrorCode.ACCOUNT_INACTIVE,
        )


class NotFoundException(AppException):
    def __init__(self, resource: str = "Resource"):
        super().__init__(status.HTTP_404_NOT_FOUND, f"{resource} not found", ErrorCode.NOT_FOUND)


class DuplicateEntryException(AppException):
    def __init__(self, message: str = "Record already exists", field: str | None = None):
        super().__init__(status.HTTP_409_CONFLICT, message, ErrorCode.DUPLICATE_ENTRY, field=field)


class VehicleUnavailableException(AppException):
    def __init__(self):
        super().__init__(
            status.HTTP_409_CONFLICT,
            "Vehicle is already assigned to another driver",
            ErrorCode.VEHICLE_UNAVAILABLE,
            field="vehicleId",
        )


class VipUnavailableException(AppException):
    def __init__(self):
        super().__init__(
            status.HTTP_409_CONFLICT,
            "VIP is already assigned to another driver",
            ErrorCode.VIP_UNAVAILABLE,
            field="vipId",
        )


class ResourceInUseException(AppException):
    def __init__(self, resource: str, reason: str = "is referenced by a live assignment"):
        super().__init__(
            status.HTTP_409_CONFLICT,
            f"{resource} {reason}",
            ErrorCode.RESOURCE_IN_USE,
        )


class DriverInUseException(AppException):
    def __init__(self, references: list[str]):
        super().__init__(
            status.HTTP_409_CONFLICT,
            "Driver has related records and cannot be deleted. Deactivate the driver instead.",
            ErrorCode.DRIVER_IN_USE,
            details=references,
        )


class DriverAlreadyApprovedException(AppException):
    def __init__(self):
        super().__init__(
            status.HTTP_400_BAD_REQUEST,
            "Driver is already approved",
            ErrorCode.DRIVER_ALREADY_APPROVED,
        )


class InvalidTransitionException(AppException):
    def __init__(self, current: str, requested: str):
        super().__init__(
            status.HTTP_400_BAD_REQUEST,
            f"Invalid status transition from {current} to {requested}",
            ErrorCode.INVALID_TRANSITION,
            field="status",
        )


class DuplicateCheckinException(AppException):
    def __init__(self, message: str):
        super().__init__(status.HTTP_409_CONFLICT, message, ErrorCode.DUPLICATE_CHECKIN)


class OTPInvalidException(AppException):
    def __init__(self):
        super().__init__(status.HTTP_400_BAD_REQUEST, "OTP code is invalid", ErrorCode.OTP_INVALID)


class OTPExpiredException(AppException):
    def __init__(self):
        super().__init__(status.HTTP_400_BAD_REQUEST, "OTP code has expired", ErrorCode.OTP_EXPIRED)
