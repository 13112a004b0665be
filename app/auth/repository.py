"""Repository for auth users and the refresh-token denylist."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from bson import ObjectId

from app.auth.models import DEFAULT_ROLE, AuthUser, DenylistEntry
from app.core.mongo_migrations import DENYLIST_COLLECTION, USERS_COLLECTION
from app.core.security import hash_password


def _user_from_doc(doc: dict[str, Any]) -> AuthUser:
    return AuthUser(
        id=str(doc["_id"]),
        email=str(doc.get("email") or ""),
        password_hash=str(doc.get("password") or ""),
        role=str(doc.get("role") or DEFAULT_ROLE),
        created_at=doc.get("createdAt"),
    )


class AuthRepository:
    """MongoDB-backed user store and token denylist.

    Emails are stored lowercased; uniqueness is enforced by the index created
    in ``app.core.mongo_migrations``. Denylist entries are removed by the
    TTL index on ``createdAt``.
    """

    def __init__(self, db: Any) -> None:
        """Bind repository to an async database handle."""
        self._users = db[USERS_COLLECTION]
        self._denylist = db[DENYLIST_COLLECTION]

    async def get_user_by_email(self, email: str) -> AuthUser | None:
        """Get user by email, including the stored password hash."""
        doc = await self._users.find_one({"email": email.strip().lower()})
        return _user_from_doc(doc) if doc else None

    async def get_user_by_id(self, user_id: str) -> AuthUser | None:
        """Get user by id with the password excluded by the query projection."""
        if not ObjectId.is_valid(user_id):
            return None
        doc = await self._users.find_one({"_id": ObjectId(user_id)}, {"password": 0})
        return _user_from_doc(doc) if doc else None

    async def create_user(
        self, email: str, password: str, *, role: str = DEFAULT_ROLE
    ) -> AuthUser:
        """Insert a user, hashing the password on the way in.

        Raises ``pymongo.errors.DuplicateKeyError`` when the email is taken.
        """
        doc = {
            "email": email.strip().lower(),
            "password": hash_password(password),
            "role": role,
            "createdAt": datetime.now(timezone.utc),
        }
        result = await self._users.insert_one(doc)
        doc["_id"] = result.inserted_id
        return _user_from_doc(doc)

    async def set_user_role(self, email: str, role: str) -> bool:
        """Change a user's role; return whether a user matched."""
        result = await self._users.update_one(
            {"email": email.strip().lower()}, {"$set": {"role": role}}
        )
        return result.matched_count > 0

    async def is_token_denylisted(self, token: str) -> bool:
        """Return whether the exact token string has been retired."""
        doc = await self._denylist.find_one({"token": token}, {"_id": 1})
        return doc is not None

    async def denylist_token(self, token: str) -> DenylistEntry:
        """Retire a refresh token string."""
        entry = DenylistEntry(token=token, created_at=datetime.now(timezone.utc))
        await self._denylist.insert_one(
            {"token": entry.token, "createdAt": entry.created_at}
        )
        return entry
