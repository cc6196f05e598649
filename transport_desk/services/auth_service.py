import logging
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from transport_desk.config import settings
from transport_desk.models.password_reset_otp import PasswordResetOTP
from transport_desk.models.role import ROLE_LABELS
from transport_desk.models.user import User
from transport_desk.schemas.auth import (
    LoginRequest, ChangePasswordRequest, ForgotPasswordRequest, ResetPasswordRequest,
)
from transport_desk.schemas.common import as_utc
from transport_desk.utils.audit import log_action
from transport_desk.utils.email import send_otp_email
from transport_desk.utils.exceptions import (
    UnauthorizedException, AccountInactiveException, OTPInvalidException, OTPExpiredException,
)
from transport_desk.utils.security import (
    verify_password, hash_password, create_access_token,
    create_reset_token, verify_reset_token, generate_otp, otp_expiry,
)

logger = logging.getLogger(__name__)


def serialize_user(user: User) -> dict:
    return {
        "id":         user.id,
        "name":       user.name,
        "email":      user.email,
        "role":       user.role.value,
        "roleLabel":  ROLE_LABELS[user.role],
        "department": user.department.value,
        "driverId":   user.driver_profile.id if user.driver_profile else None,
        "isActive":   user.isActive,
    }


class AuthService:

    # ─── Login ────────────────────────────────────────────────────────────────
    def login(self, db: Session, data: LoginRequest) -> dict:
        user = db.query(User).filter(User.email == data.email.lower()).first()

        if not user or not verify_password(data.password, user.password):
            logger.info(f"Failed login for {data.email}")
            raise UnauthorizedException("Invalid email or password")

        if not user.isActive:
            raise AccountInactiveException()

        access_token = create_access_token(user.id, user.role.value, user.department.value)

        log_action(db, user.id, "LOGIN", "User", user.id, f"{user.name} logged in")
        db.commit()

        return {
            "accessToken": access_token,
            "tokenType":   "Bearer",
            "expiresIn":   settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
            "user":        serialize_user(user),
        }

    # ─── Forgot Password ──────────────────────────────────────────────────────
    def forgot_password(self, db: Session, data: ForgotPasswordRequest) -> None:
        """
        Email a one-time code to an active account. Unknown or inactive
        addresses get the same silent success so the endpoint cannot be
        used to discover accounts.
        """
        user = db.query(User).filter(User.email == str(data.email).lower()).first()
        if not user or not user.isActive:
            logger.info(f"Password reset requested for unknown or inactive {data.email}")
            return

        # one live code per user
        db.query(PasswordResetOTP).filter(
            PasswordResetOTP.userId == user.id,
            PasswordResetOTP.isUsed == False,
        ).update({PasswordResetOTP.isUsed: True})

        otp_code = generate_otp()
        db.add(PasswordResetOTP(
            userId=user.id,
            otpCode=otp_code,
            expiresAt=otp_expiry(),
            isUsed=False,
        ))
        log_action(db, user.id, "FORGOT_PASSWORD", "User", user.id, "Password reset code requested")
        db.commit()

        if not send_otp_email(user.email, user.name, otp_code):
            logger.warning(f"Password reset code for user {user.id} could not be delivered")

    # ─── Verify OTP ───────────────────────────────────────────────────────────
    def verify_otp(self, db: Session, email: str, otp_code: str) -> str:
        user = db.query(User).filter(User.email == email.lower()).first()
        if not user or not user.isActive:
            raise OTPInvalidException()

        otp = db.query(PasswordResetOTP).filter(
            PasswordResetOTP.userId == user.id,
            PasswordResetOTP.otpCode == otp_code,
            PasswordResetOTP.isUsed == False,
        ).order_by(PasswordResetOTP.id.desc()).first()
        if not otp:
            raise OTPInvalidException()

        if as_utc(otp.expiresAt) < datetime.now(timezone.utc):
            raise OTPExpiredException()

        otp.isUsed = True
        db.commit()
        return create_reset_token(user.id)

    # ─── Reset Password ───────────────────────────────────────────────────────
    def reset_password(self, db: Session, data: ResetPasswordRequest) -> None:
        user_id = verify_reset_token(data.resetToken)

        user = db.query(User).filter(User.id == user_id).first()
        if not user or not user.isActive:
            raise UnauthorizedException("Invalid reset token")

        user.password = hash_password(data.newPassword)
        log_action(db, user.id, "RESET_PASSWORD", "User", user.id, "Password reset via OTP")
        db.commit()
        logger.info(f"User {user.id} reset their password")

    # ─── Change Password ──────────────────────────────────────────────────────
    def change_password(self, db: Session, data: ChangePasswordRequest, current_user: User) -> None:
        if not verify_password(data.currentPassword, current_user.password):
            raise UnauthorizedException("Current password is incorrect")

        current_user.password = hash_password(data.newPassword)
        log_action(db, current_user.id, "CHANGE_PASSWORD", "User", current_user.id,
                   f"{current_user.name} changed their password")
        db.commit()


auth_service = AuthService()
