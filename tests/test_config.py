from __future__ import annotations

import logging

from app.core.config import AppConfig


def test_from_env_reads_secrets_and_defaults(monkeypatch) -> None:
    monkeypatch.setenv("JWT_SECRET", " access ")
    monkeypatch.setenv("JWT_REFRESH_SECRET", "refresh")
    monkeypatch.setenv("GCS_BUCKET_NAME", "bucket")
    monkeypatch.delenv("APP_ENV", raising=False)
    monkeypatch.delenv("CORS_ALLOWED_ORIGINS", raising=False)

    config = AppConfig.from_env()

    assert config.auth.access_token_secret == "access"
    assert config.auth.refresh_token_secret == "refresh"
    assert config.auth.access_token_ttl_seconds == 900
    assert config.auth.refresh_token_ttl_seconds == 604800
    assert config.storage.bucket_name == "bucket"
    assert config.storage.allowed_mime_types == ("application/pdf",)
    assert config.security.cors_allowed_origins == [
        "https://mogilev33-b1d4b.web.app",
        "https://mogilev33-admin.web.app",
    ]


def test_from_env_adds_local_origin_in_development(monkeypatch) -> None:
    monkeypatch.setenv("APP_ENV", "development")
    monkeypatch.setenv("CORS_ALLOWED_ORIGINS", "https://a.example")

    config = AppConfig.from_env()

    assert config.security.cors_allowed_origins == [
        "https://a.example",
        "http://localhost:5173",
    ]


def test_short_denylist_retention_is_widened_to_refresh_lifetime(monkeypatch, caplog) -> None:
    monkeypatch.setenv("AUTH_DENYLIST_RETENTION_SECONDS", "172800")
    monkeypatch.setenv("AUTH_REFRESH_TOKEN_TTL_SECONDS", "604800")

    with caplog.at_level(logging.WARNING, logger="app.core.config"):
        config = AppConfig.from_env()

    assert config.auth.denylist_retention_seconds == 172800
    assert config.auth.effective_denylist_retention_seconds == 604800
    assert "shorter than refresh token lifetime" in caplog.text
