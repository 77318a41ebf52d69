# app/schemas/user.py
import uuid
from datetime import datetime
from typing import Literal

from pydantic import EmailStr, ConfigDict, field_validator
from sqlmodel import SQLModel, Field

# App-level roles. Guests have no token, so we don't store them.
Role = Literal["user", "admin", "superadmin"]


def _strip_optional(v: str | None) -> str | None:
    if v is None:
        return v
    v = v.strip()
    return v or None


class UserRead(SQLModel):
    """Response schema returned to clients (never includes secrets)."""

    id: uuid.UUID
    email: str
    name: str
    role: Role
    phone: str | None = None
    address: str | None = None
    city: str | None = None
    created_at: datetime


class UserUpdate(SQLModel):
    """
    Partial profile update for authenticated users.

    Blank strings are treated as "not provided" and keep the old value.
    """

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, max_length=50)
    phone: str | None = Field(default=None, max_length=20)
    address: str | None = Field(default=None, max_length=255)
    city: str | None = Field(default=None, max_length=80)

    @field_validator("name", "phone", "address", "city")
    @classmethod
    def normalize(cls, v: str | None) -> str | None:
        return _strip_optional(v)


class UserRoleUpdate(SQLModel):
    """
    Admin-only role update schema.
    """

    model_config = ConfigDict(extra="forbid")
    role: Role


class UserList(SQLModel):
    success: bool = True
    users: list[UserRead]
    total: int


class SignupRequest(SQLModel):
    model_config = ConfigDict(extra="forbid")

    email: EmailStr
    password: str = Field(min_length=6, max_length=128)
    name: str = Field(min_length=2, max_length=50)
    phone: str | None = Field(default=None, max_length=20)
    address: str | None = Field(default=None, max_length=255)
    city: str | None = Field(default=None, max_length=80)

    @field_validator("name")
    @classmethod
    def normalize_name(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 2:
            raise ValueError("name must be at least 2 characters")
        return v

    @field_validator("phone", "address", "city")
    @classmethod
    def normalize_optional(cls, v: str | None) -> str | None:
        return _strip_optional(v)


class LoginRequest(SQLModel):
    model_config = ConfigDict(extra="forbid")

    email: EmailStr
    password: str = Field(min_length=1)


class AuthResponse(SQLModel):
    success: bool = True
    message: str | None = None
    user: UserRead
