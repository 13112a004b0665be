"""Application configuration loaded from environment variables."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthConfig:
    """Token signing and session lifetime configuration."""

    access_token_secret: str
    refresh_token_secret: str
    access_token_ttl_seconds: int = 15 * 60
    refresh_token_ttl_seconds: int = 7 * 24 * 60 * 60
    denylist_retention_seconds: int = 2 * 24 * 60 * 60

    @property
    def effective_denylist_retention_seconds(self) -> int:
        """Return retention that covers a refresh token's full lifetime."""
        return max(self.denylist_retention_seconds, self.refresh_token_ttl_seconds)


@dataclass(frozen=True)
class MongoConfig:
    """MongoDB connection settings."""

    uri: str
    database: str


@dataclass(frozen=True)
class StorageConfig:
    """Object storage settings for uploaded PDF files."""

    bucket_name: str
    upload_max_bytes: int
    allowed_mime_types: tuple[str, ...] = ("application/pdf",)


@dataclass(frozen=True)
class LoggingConfig:
    """Structured logging configuration."""

    level: str


@dataclass(frozen=True)
class SecurityConfig:
    """API perimeter security settings."""

    cors_allowed_origins: list[str]
    request_max_bytes: int


@dataclass(frozen=True)
class AppConfig:
    """Top-level application configuration."""

    auth: AuthConfig
    mongo: MongoConfig
    storage: StorageConfig
    logging: LoggingConfig
    security: SecurityConfig

    @staticmethod
    def from_env() -> "AppConfig":
        """Build app config from process environment."""
        refresh_ttl = int(os.getenv("AUTH_REFRESH_TOKEN_TTL_SECONDS", "604800"))
        retention = int(os.getenv("AUTH_DENYLIST_RETENTION_SECONDS", "172800"))
        if retention < refresh_ttl:
            LOGGER.warning(
                "Denylist retention (%ss) is shorter than refresh token lifetime "
                "(%ss); revoked tokens are retained for %ss instead.",
                retention,
                refresh_ttl,
                refresh_ttl,
            )

        cors_allowed_origins = [
            origin.strip()
            for origin in os.getenv(
                "CORS_ALLOWED_ORIGINS",
                "https://mogilev33-b1d4b.web.app,https://mogilev33-admin.web.app",
            ).split(",")
            if origin.strip()
        ]
        if os.getenv("APP_ENV", "").strip().lower() == "development":
            cors_allowed_origins.append("http://localhost:5173")

        return AppConfig(
            auth=AuthConfig(
                access_token_secret=os.getenv("JWT_SECRET", "").strip(),
                refresh_token_secret=os.getenv("JWT_REFRESH_SECRET", "").strip(),
                access_token_ttl_seconds=int(
                    os.getenv("AUTH_ACCESS_TOKEN_TTL_SECONDS", "900")
                ),
                refresh_token_ttl_seconds=refresh_ttl,
                denylist_retention_seconds=retention,
            ),
            mongo=MongoConfig(
                uri=os.getenv("MONGODB_URI", "mongodb://localhost:27017").strip(),
                database=os.getenv("MONGODB_DB", "mogilev33").strip() or "mogilev33",
            ),
            storage=StorageConfig(
                bucket_name=os.getenv("GCS_BUCKET_NAME", "").strip(),
                upload_max_bytes=int(
                    os.getenv("UPLOAD_MAX_BYTES", str(10 * 1024 * 1024))
                ),
            ),
            logging=LoggingConfig(level=os.getenv("LOG_LEVEL", "INFO").strip() or "INFO"),
            security=SecurityConfig(
                cors_allowed_origins=cors_allowed_origins,
                request_max_bytes=int(
                    os.getenv("REQUEST_MAX_BYTES", str(12 * 1024 * 1024))
                ),
            ),
        )
