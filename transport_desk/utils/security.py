import secrets
import string
from datetime import datetime, timedelta, timezone

from jose import JWTError, ExpiredSignatureError, jwt
from passlib.context import CryptContext

from transport_desk.config import settings
from transport_desk.utils.exceptions import TokenExpiredException, UnauthorizedException

# ─── Password Hashing ─────────────────────────────────────────────────────────
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

PASSWORD_CHARSET = string.ascii_letters + string.digits + "!@#$%^&*"


def hash_password(plain_password: str) -> str:
    """Hash a plain-text password using bcrypt."""
    return pwd_context.hash(plain_password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain-text password against a bcrypt hash."""
    return pwd_context.verify(plain_password, hashed_password)


def generate_password(length: int | None = None) -> str:
    """Random password for a freshly provisioned driver account."""
    length = length or settings.GENERATED_PASSWORD_LENGTH
    return "".join(secrets.choice(PASSWORD_CHARSET) for _ in range(length))


# ─── JWT ──────────────────────────────────────────────────────────────────────
def create_access_token(user_id: int, role: str, department: str) -> str:
    """
    Create a JWT access token.
    Payload: sub (user_id), role, department, type, exp
    """
    expire = datetime.now(timezone.utc) + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    payload = {
        "sub": str(user_id),
        "role": role,
        "department": department,
        "type": "access",
        "exp": expire,
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def verify_access_token(token: str) -> dict:
    """
    Decode and validate a JWT access token.
    Raises 401 if invalid, 401 (TOKEN_EXPIRED) if expired.
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except ExpiredSignatureError:
        raise TokenExpiredException()
    except JWTError:
        raise UnauthorizedException("Invalid or malformed token")
    if payload.get("type") != "access":
        raise UnauthorizedException("Invalid token type")
    return payload


def create_reset_token(user_id: int) -> str:
    """Short-lived token issued after a verified OTP; only accepted by reset-password."""
    expire = datetime.now(timezone.utc) + timedelta(minutes=settings.RESET_TOKEN_EXPIRE_MINUTES)
    payload = {"sub": str(user_id), "type": "reset", "exp": expire}
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def verify_reset_token(token: str) -> int:
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except ExpiredSignatureError:
        raise UnauthorizedException("Reset token has expired. Request a new OTP.")
    except JWTError:
        raise UnauthorizedException("Invalid reset token")
    if payload.get("type") != "reset" or payload.get("sub") is None:
        raise UnauthorizedException("Invalid reset token")
    return int(payload["sub"])


# ─── OTP ──────────────────────────────────────────────────────────────────────
def generate_otp(length: int | None = None) -> str:
    """Numeric one-time code for password recovery."""
    length = length or settings.OTP_LENGTH
    return "".join(secrets.choice(string.digits) for _ in range(length))


def otp_expiry() -> datetime:
    return datetime.now(timezone.utc) + timedelta(minutes=settings.OTP_EXPIRE_MINUTES)
