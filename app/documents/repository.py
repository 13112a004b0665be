"""MongoDB repository shared by the document resources."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from bson import ObjectId
from pymongo import ReturnDocument


def _with_id(doc: dict[str, Any]) -> dict[str, Any]:
    item = {key: value for key, value in doc.items() if key not in {"_id", "__v"}}
    item["id"] = str(doc["_id"])
    return item


class DocumentRepository:
    """CRUD over one collection; documents use camelCase field names."""

    def __init__(self, db: Any, collection: str) -> None:
        """Bind repository to a collection of an async database handle."""
        self._collection = db[collection]

    async def list_all(self) -> list[dict[str, Any]]:
        """Return every document, newest first."""
        cursor = self._collection.find({}).sort("createdAt", -1)
        return [_with_id(doc) async for doc in cursor]

    async def get(self, item_id: str) -> dict[str, Any] | None:
        """Return a document by id, or ``None``."""
        if not ObjectId.is_valid(item_id):
            return None
        doc = await self._collection.find_one({"_id": ObjectId(item_id)})
        return _with_id(doc) if doc else None

    async def insert(self, fields: dict[str, Any]) -> dict[str, Any]:
        """Insert a document, stamping ``createdAt``."""
        doc = {**fields, "createdAt": datetime.now(timezone.utc)}
        result = await self._collection.insert_one(doc)
        doc["_id"] = result.inserted_id
        return _with_id(doc)

    async def update(self, item_id: str, fields: dict[str, Any]) -> dict[str, Any] | None:
        """Apply ``fields`` and return the updated document, or ``None``."""
        if not ObjectId.is_valid(item_id):
            return None
        doc = await self._collection.find_one_and_update(
            {"_id": ObjectId(item_id)},
            {"$set": fields},
            return_document=ReturnDocument.AFTER,
        )
        return _with_id(doc) if doc else None

    async def delete(self, item_id: str) -> bool:
        """Delete a document and return whether it existed."""
        if not ObjectId.is_valid(item_id):
            return False
        result = await self._collection.delete_one({"_id": ObjectId(item_id)})
        return result.deleted_count > 0
