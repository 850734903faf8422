"""Authentication and principal schemas."""

from datetime import datetime
from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field, field_validator

_EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"
_BCRYPT_MAX_BYTES = 72


class Role(str, Enum):
    ADMIN = "admin"
    USER = "user"


class RoleRequirement(str, Enum):
    ADMIN = "admin"
    USER = "user"
    ADMIN_OR_USER = "admin_or_user"
    ANONYMOUS = "anonymous"


class AdminPrincipal(BaseModel):
    """Resolved administrator identity. Never carries the credential digest."""

    role: Literal[Role.ADMIN] = Role.ADMIN
    id: str
    username: str
    email: str
    created_at: datetime


class UserPrincipal(BaseModel):
    """Resolved author identity. Never carries the credential digest."""

    role: Literal[Role.USER] = Role.USER
    id: str
    username: str
    email: str
    created_at: datetime


def _check_password_bytes(value: str) -> str:
    if len(value.encode("utf-8")) > _BCRYPT_MAX_BYTES:
        raise ValueError(f"Password must be at most {_BCRYPT_MAX_BYTES} bytes")
    return value


class RegisterRequest(BaseModel):
    username: str = Field(min_length=1, max_length=100)
    email: str = Field(pattern=_EMAIL_PATTERN)
    password: str = Field(min_length=6)

    @field_validator("username", "email", mode="before")
    @classmethod
    def _strip(cls, value: object) -> object:
        # Trim before length and pattern constraints run.
        return value.strip() if isinstance(value, str) else value

    @field_validator("password")
    @classmethod
    def _password_fits_hash(cls, value: str) -> str:
        return _check_password_bytes(value)


class LoginRequest(BaseModel):
    email: str = Field(min_length=1)
    password: str = Field(min_length=1)


class ChangePasswordRequest(BaseModel):
    current_password: str = Field(min_length=1)
    new_password: str = Field(min_length=6)

    @field_validator("new_password")
    @classmethod
    def _password_fits_hash(cls, value: str) -> str:
        return _check_password_bytes(value)


class Account(BaseModel):
    id: str
    username: str
    email: str
    role: Role
    created_at: datetime


class AuthSession(BaseModel):
    token: str
    token_type: Literal["bearer"] = "bearer"
    expires_at: datetime
    account: Account
