"""Pydantic API response models used in OpenAPI contracts."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ApiErrorResponse(BaseModel):
    """Stable error envelope for API responses."""

    error_code: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error message")


class HealthResponse(BaseModel):
    """Health check response payload."""

    status: Literal["ok"]


class AccessTokenResponse(CamelModel):
    """Access token issued by register, login and refresh."""

    access_token: str


class ProfileResponse(CamelModel):
    """Authenticated user's profile without credential material."""

    id: str
    email: str
    role: str
    created_at: datetime | None = None


class LogoutResponse(BaseModel):
    """Logout response payload."""

    message: str
