"""Pydantic models for authentication domain."""

from __future__ import annotations

import re
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

EMAIL_PATTERN = re.compile(r"^\S+@\S+\.\S+$")
ADMIN_ROLE = "admin"
DEFAULT_ROLE = "user"


class AuthUser(BaseModel):
    """Persisted auth user model."""

    id: str
    email: str
    password_hash: str = ""
    role: str = DEFAULT_ROLE
    created_at: datetime | None = None


class TokenClaims(BaseModel):
    """Identity claims embedded in both tokens of a pair."""

    model_config = ConfigDict(frozen=True)

    id: str
    email: str
    role: str = DEFAULT_ROLE

    @property
    def is_admin(self) -> bool:
        """Return whether the claims carry the admin role."""
        return self.role == ADMIN_ROLE


class TokenPair(BaseModel):
    """Freshly issued access/refresh token pair."""

    access_token: str
    refresh_token: str


class CredentialsRequest(BaseModel):
    """Register and login request payload."""

    email: str = Field(max_length=320)
    password: str = Field(max_length=256)

    @field_validator("email")
    @classmethod
    def _validate_email(cls, value: str) -> str:
        value = value.strip()
        if not EMAIL_PATTERN.match(value):
            raise ValueError("Please enter a valid email address!")
        return value.lower()

    @field_validator("password")
    @classmethod
    def _validate_password(cls, value: str) -> str:
        if len(value) < 6:
            raise ValueError("Password should be at least 6 characters long!")
        return value


class DenylistEntry(BaseModel):
    """Refresh token retired before its natural expiry."""

    token: str
    created_at: datetime


UserRole = Literal["user", "admin"]
