"""Versioned MongoDB index migrations for runtime collections."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable

from pymongo import AsyncMongoClient

from app.core.config import MongoConfig
from app.core.logging import CORRELATION_ID_CTX

LOGGER = logging.getLogger(__name__)

USERS_COLLECTION = "users"
DENYLIST_COLLECTION = "invalid_tokens"
DENYLIST_TTL_INDEX = "idx_invalid_tokens_created_at_ttl"

MigrationFn = Callable[[Any], Awaitable[None]]


def create_mongo_client(config: MongoConfig) -> AsyncMongoClient:
    """Build the process-wide async MongoDB client."""
    return AsyncMongoClient(config.uri, serverSelectionTimeoutMS=3000, tz_aware=True)


async def _migration_01_core_indexes(db: Any) -> None:
    await db[USERS_COLLECTION].create_index("email", unique=True)
    await db[DENYLIST_COLLECTION].create_index("token")
    for collection in ("offers", "invitations", "protocols"):
        await db[collection].create_index("createdAt")


async def _migration_02_denylist_ttl(db: Any) -> None:
    await db[DENYLIST_COLLECTION].create_index(
        "createdAt",
        expireAfterSeconds=0,
        name=DENYLIST_TTL_INDEX,
    )


MIGRATIONS: list[tuple[str, MigrationFn]] = [
    ("20250601_01_core_indexes", _migration_01_core_indexes),
    ("20250601_02_denylist_ttl", _migration_02_denylist_ttl),
]


async def sync_denylist_retention(db: Any, retention_seconds: int) -> None:
    """Point the denylist TTL index at the configured retention window."""
    await db.command(
        {
            "collMod": DENYLIST_COLLECTION,
            "index": {
                "name": DENYLIST_TTL_INDEX,
                "expireAfterSeconds": int(retention_seconds),
            },
        }
    )


async def apply_mongo_migrations(db: Any, *, denylist_retention_seconds: int) -> list[str]:
    """Apply pending migrations and return the ids applied by this call."""
    migration_collection = db["schema_migrations"]
    await migration_collection.create_index("migration_id", unique=True)

    applied: list[str] = []
    for migration_id, migration_fn in MIGRATIONS:
        if await migration_collection.find_one({"migration_id": migration_id}):
            continue
        await migration_fn(db)
        await migration_collection.insert_one(
            {
                "migration_id": migration_id,
                "applied_at": datetime.now(timezone.utc),
                "correlation_id": CORRELATION_ID_CTX.get(),
            }
        )
        LOGGER.info("Applied Mongo migration %s", migration_id)
        applied.append(migration_id)

    await sync_denylist_retention(db, denylist_retention_seconds)
    return applied
