from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from dotenv import load_dotenv
from fastapi import FastAPI

from app.api.app_factory import build_app
from app.auth.repository import AuthRepository
from app.core.config import AppConfig
from app.core.logging import setup_logging
from app.core.mongo_migrations import apply_mongo_migrations, create_mongo_client
from app.documents.models import RESOURCES
from app.documents.repository import DocumentRepository
from app.storage.gcs import GCSStorage

load_dotenv()
APP_CONFIG = AppConfig.from_env()
setup_logging(APP_CONFIG.logging.level)
LOGGER = logging.getLogger(__name__)


def create_app() -> FastAPI:
    mongo_client = create_mongo_client(APP_CONFIG.mongo)
    db = mongo_client[APP_CONFIG.mongo.database]

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        applied = await apply_mongo_migrations(
            db,
            denylist_retention_seconds=APP_CONFIG.auth.effective_denylist_retention_seconds,
        )
        LOGGER.info(
            "startup_complete",
            extra={"resource": APP_CONFIG.mongo.database, "resource_id": ",".join(applied)},
        )
        try:
            yield
        finally:
            await mongo_client.close()

    if not APP_CONFIG.auth.access_token_secret or not APP_CONFIG.auth.refresh_token_secret:
        LOGGER.warning("JWT_SECRET or JWT_REFRESH_SECRET is not set; auth endpoints will fail.")

    return build_app(
        APP_CONFIG,
        auth_repo=AuthRepository(db),
        document_repos={
            definition.name: DocumentRepository(db, definition.collection)
            for definition in RESOURCES
        },
        storage=GCSStorage(APP_CONFIG.storage.bucket_name),
        lifespan=lifespan,
    )


app = create_app()
