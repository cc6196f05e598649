import re
from pydantic import BaseModel, EmailStr, field_validator, model_validator


def validate_password_strength(v: str) -> str:
    if len(v) < 8:
        raise ValueError("Password must be at least 8 characters")
    if not re.search(r"[A-Z]", v):
        raise ValueError("Password must contain at least one uppercase letter")
    if not re.search(r"[0-9]", v):
        raise ValueError("Password must contain at least one digit")
    return v


class LoginRequest(BaseModel):
    email:    EmailStr
    password: str


class ChangePasswordRequest(BaseModel):
    currentPassword: str
    newPassword:     str
    confirmPassword: str

    @field_validator("newPassword")
    @classmethod
    def password_strength(cls, v: str) -> str:
        return validate_password_strength(v)

    @model_validator(mode="after")
    def passwords_match(self) -> "ChangePasswordRequest":
        if self.newPassword != self.confirmPassword:
            raise ValueError("Passwords do not match")
        return self


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class VerifyOTPRequest(BaseModel):
    email:   EmailStr
    otpCode: str

    @field_validator("otpCode")
    @classmethod
    def strip_code(cls, v: str) -> str:
        return v.strip()


class ResetPasswordRequest(BaseModel):
    resetToken:      str
    newPassword:     str
    confirmPassword: str

    @field_validator("newPassword")
    @classmethod
    def password_strength(cls, v: str) -> str:
        return validate_password_strength(v)

    @model_validator(mode="after")
    def passwords_match(self) -> "ResetPasswordRequest":
        if self.newPassword != self.confirmPassword:
            raise ValueError("Passwords do not match")
        return self
