"""FastAPI application assembly around injected collaborators."""

from __future__ import annotations

import logging
from typing import Any, Mapping

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from app.api.contracts import HealthResponse
from app.api.http_setup import register_exception_handlers, register_http_middleware
from app.auth.middleware import AuthGuard
from app.auth.router import create_auth_router
from app.auth.service import AuthRepositoryProtocol, AuthService
from app.core.config import AppConfig
from app.documents.models import RESOURCES
from app.documents.router import create_documents_router
from app.documents.service import (
    DocumentRepositoryProtocol,
    DocumentService,
    FileStorageProtocol,
)

LOGGER = logging.getLogger("app.api")


def build_app(
    config: AppConfig,
    *,
    auth_repo: AuthRepositoryProtocol,
    document_repos: Mapping[str, DocumentRepositoryProtocol],
    storage: FileStorageProtocol,
    lifespan: Any = None,
) -> FastAPI:
    """Wire routers, guards and HTTP plumbing.

    ``auth_repo`` serves both the user store and the token denylist;
    ``document_repos`` is keyed by resource name (``offers``,
    ``invitations``, ``protocols``).
    """
    app = FastAPI(title="Mogilev33 API", version="1.0.0", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.security.cors_allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-Request-ID", "X-Correlation-ID"],
    )
    register_http_middleware(app, config=config, logger=LOGGER)
    register_exception_handlers(app, logger=LOGGER)

    auth_service = AuthService(auth_repo, config.auth)
    guard = AuthGuard(auth_repo, config.auth)
    app.include_router(create_auth_router(auth_service, guard, config.auth))

    for definition in RESOURCES:
        service = DocumentService(
            definition=definition,
            repo=document_repos[definition.name],
            storage=storage,
            config=config.storage,
        )
        app.include_router(create_documents_router(service, guard))

    @app.get("/", response_class=PlainTextResponse, include_in_schema=False)
    def root() -> str:
        return "Mogilev33 API is running!"

    @app.get("/api/health", response_model=HealthResponse)
    def health() -> HealthResponse:
        return HealthResponse(status="ok")

    return app
