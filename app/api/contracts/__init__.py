"""Public API response contracts."""

from app.api.contracts.models import (
    AccessTokenResponse,
    ApiErrorResponse,
    CamelModel,
    HealthResponse,
    LogoutResponse,
    ProfileResponse,
)

__all__ = [
    "AccessTokenResponse",
    "ApiErrorResponse",
    "CamelModel",
    "HealthResponse",
    "LogoutResponse",
    "ProfileResponse",
]
