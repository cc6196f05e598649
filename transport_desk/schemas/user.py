from pydantic import BaseModel, EmailStr, field_validator
from typing import Optional

from transport_desk.models.role import RoleName, DepartmentName
from transport_desk.schemas.auth import validate_password_strength


def _check_name(v):
    if v is not None and not v.strip():
        raise ValueError("Name cannot be empty")
    return v.strip() if v else v


class UserCreateRequest(BaseModel):
    name:       str
    email:      EmailStr
    password:   str
    role:       RoleName
    department: DepartmentName

    @field_validator("password")
    @classmethod
    def check_password(cls, v): return validate_password_strength(v)

    @field_validator("name")
    @classmethod
    def check_name(cls, v): return _check_name(v)


class UserUpdateRequest(BaseModel):
    name:       Optional[str] = None
    email:      Optional[EmailStr] = None
    role:       Optional[RoleName] = None
    department: Optional[DepartmentName] = None
    isActive:   Optional[bool] = None
    password:   Optional[str] = None

    @field_validator("password")
    @classmethod
    def check_password(cls, v):
        return validate_password_strength(v) if v is not None else v

    @field_validator("name")
    @classmethod
    def check_name(cls, v): return _check_name(v)
