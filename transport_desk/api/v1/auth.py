from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from transport_desk.config import settings
from transport_desk.database import get_db
from transport_desk.dependencies import get_current_user
from transport_desk.models.user import User
from transport_desk.schemas.auth import (
    LoginRequest, ChangePasswordRequest,
    ForgotPasswordRequest, VerifyOTPRequest, ResetPasswordRequest,
)
from transport_desk.schemas.common import SuccessResponse, success_response
from transport_desk.services.auth_service import auth_service, serialize_user

router = APIRouter(prefix="/auth")


# ─── POST /auth/login ─────────────────────────────────────────────────────────
@router.post(
    "/login",
    status_code=status.HTTP_200_OK,
    summary="Login and receive an access token",
    response_model=SuccessResponse,
)
def login(data: LoginRequest, db: Session = Depends(get_db)):
    """
    Authenticate staff or an approved driver.
    Returns a bearer accessToken plus the user profile.
    """
    result = auth_service.login(db, data)
    return success_response("Login successful", result)


# ─── GET /auth/me ─────────────────────────────────────────────────────────────
@router.get(
    "/me",
    status_code=status.HTTP_200_OK,
    summary="Get current authenticated user",
    response_model=SuccessResponse,
)
def me(current_user: User = Depends(get_current_user)):
    return success_response("User profile retrieved", serialize_user(current_user))


# ─── POST /auth/change-password ───────────────────────────────────────────────
@router.post(
    "/change-password",
    status_code=status.HTTP_200_OK,
    summary="Change password (authenticated)",
    response_model=SuccessResponse,
)
def change_password(
    data: ChangePasswordRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    auth_service.change_password(db, data, current_user)
    return success_response("Password changed successfully")


# ─── POST /auth/forgot-password ───────────────────────────────────────────────
@router.post(
    "/forgot-password",
    status_code=status.HTTP_200_OK,
    summary="Request an OTP for password reset",
    response_model=SuccessResponse,
)
def forgot_password(data: ForgotPasswordRequest, db: Session = Depends(get_db)):
    """
    Sends an OTP to the registered email address.
    The response is the same whether or not the address exists.
    """
    auth_service.forgot_password(db, data)
    return success_response("If the email exists, an OTP has been sent.")


# ─── POST /auth/verify-otp ────────────────────────────────────────────────────
@router.post(
    "/verify-otp",
    status_code=status.HTTP_200_OK,
    summary="Verify OTP and receive a password reset token",
    response_model=SuccessResponse,
)
def verify_otp(data: VerifyOTPRequest, db: Session = Depends(get_db)):
    reset_token = auth_service.verify_otp(db, str(data.email), data.otpCode)
    return success_response("OTP verified successfully", {
        "resetToken": reset_token,
        "expiresIn":  settings.RESET_TOKEN_EXPIRE_MINUTES * 60,
    })


# ─── POST /auth/reset-password ────────────────────────────────────────────────
@router.post(
    "/reset-password",
    status_code=status.HTTP_200_OK,
    summary="Reset password using the token from OTP verification",
    response_model=SuccessResponse,
)
def reset_password(data: ResetPasswordRequest, db: Session = Depends(get_db)):
    auth_service.reset_password(db, data)
    return success_response("Password reset successfully. Please login with your new password.")
