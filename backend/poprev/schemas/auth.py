"""
Auth Pydantic schemas.
"""

from pydantic import EmailStr, Field, field_validator
from datetime import datetime
from typing import Optional

from poprev.models.user import Role
from poprev.schemas.common import ApiModel, strip_required


def _normalize_email(v):
    return v.strip().lower() if v is not None else v


class RegisterRequest(ApiModel):
    """Self-service registration. New accounts are always viewers."""
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=72)

    @field_validator("email")
    @classmethod
    def lower_email(cls, v):
        return _normalize_email(v)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v):
        return strip_required(v, "name")


class LoginRequest(ApiModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def lower_email(cls, v):
        return _normalize_email(v)


class ProfileUpdate(ApiModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None

    @field_validator("email")
    @classmethod
    def lower_email(cls, v):
        return _normalize_email(v)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v):
        return strip_required(v, "name")


class ChangePasswordRequest(ApiModel):
    current_password: str
    new_password: str = Field(..., min_length=8, max_length=72)


class UserRead(ApiModel):
    """User as exposed to clients; never carries the password hash."""
    id: str
    name: str
    email: str
    role: Role
    is_active: bool
    last_login: Optional[datetime] = None
    created_at: datetime


class UserCredentials(UserRead):
    """User plus stored hash, only handed to the auth service."""
    password_hash: str

    def public(self) -> UserRead:
        return UserRead(**self.model_dump(exclude={"password_hash"}))


class AuthPayload(ApiModel):
    token: str
    user: UserRead
