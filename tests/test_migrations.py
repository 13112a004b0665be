from __future__ import annotations

import asyncio
from typing import Any

from app.core.mongo_migrations import (
    DENYLIST_COLLECTION,
    DENYLIST_TTL_INDEX,
    MIGRATIONS,
    apply_mongo_migrations,
)


class _Collection:
    def __init__(self) -> None:
        self.indexes: list[tuple[Any, dict[str, Any]]] = []
        self.rows: list[dict[str, Any]] = []

    async def create_index(self, keys: Any, **kwargs: Any) -> str:
        self.indexes.append((keys, kwargs))
        return str(keys)

    async def find_one(self, query: dict[str, Any]) -> dict[str, Any] | None:
        for row in self.rows:
            if all(row.get(key) == value for key, value in query.items()):
                return row
        return None

    async def insert_one(self, doc: dict[str, Any]) -> None:
        self.rows.append(doc)


class _Database:
    def __init__(self) -> None:
        self.collections: dict[str, _Collection] = {}
        self.commands: list[dict[str, Any]] = []

    def __getitem__(self, name: str) -> _Collection:
        return self.collections.setdefault(name, _Collection())

    async def command(self, command: dict[str, Any]) -> dict[str, Any]:
        self.commands.append(command)
        return {"ok": 1}


def test_apply_mongo_migrations_creates_unique_email_and_ttl_indexes() -> None:
    db = _Database()

    applied = asyncio.run(apply_mongo_migrations(db, denylist_retention_seconds=604800))

    assert applied == [migration_id for migration_id, _fn in MIGRATIONS]
    assert ("email", {"unique": True}) in db["users"].indexes
    assert (
        "createdAt",
        {"expireAfterSeconds": 0, "name": DENYLIST_TTL_INDEX},
    ) in db[DENYLIST_COLLECTION].indexes
    assert db.commands[-1] == {
        "collMod": DENYLIST_COLLECTION,
        "index": {"name": DENYLIST_TTL_INDEX, "expireAfterSeconds": 604800},
    }


def test_apply_mongo_migrations_is_idempotent_but_resyncs_retention() -> None:
    db = _Database()
    asyncio.run(apply_mongo_migrations(db, denylist_retention_seconds=604800))

    applied = asyncio.run(apply_mongo_migrations(db, denylist_retention_seconds=900000))

    assert applied == []
    assert len(db["schema_migrations"].rows) == len(MIGRATIONS)
    assert db.commands[-1]["index"]["expireAfterSeconds"] == 900000
