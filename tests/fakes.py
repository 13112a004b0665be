from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from bson import ObjectId
from fastapi import FastAPI
from pymongo.errors import DuplicateKeyError

from app.api.app_factory import build_app
from app.auth.models import DEFAULT_ROLE, AuthUser, DenylistEntry
from app.core.config import (
    AppConfig,
    AuthConfig,
    LoggingConfig,
    MongoConfig,
    SecurityConfig,
    StorageConfig,
)
from app.core.security import hash_password
from app.documents.models import RESOURCES

BUCKET_PREFIX = "https://storage.googleapis.com/test-bucket/"


def make_config(**security: Any) -> AppConfig:
    return AppConfig(
        auth=AuthConfig(
            access_token_secret="access-secret",
            refresh_token_secret="refresh-secret",
        ),
        mongo=MongoConfig(uri="mongodb://unused", database="test"),
        storage=StorageConfig(bucket_name="test-bucket", upload_max_bytes=1024),
        logging=LoggingConfig(level="INFO"),
        security=SecurityConfig(
            cors_allowed_origins=security.get("cors_allowed_origins", ["http://localhost:5173"]),
            request_max_bytes=security.get("request_max_bytes", 64 * 1024),
        ),
    )


class FakeAuthRepo:
    def __init__(self) -> None:
        self.users: dict[str, AuthUser] = {}
        self.denylist: set[str] = set()

    async def get_user_by_email(self, email: str) -> AuthUser | None:
        return self.users.get(email.strip().lower())

    async def get_user_by_id(self, user_id: str) -> AuthUser | None:
        for user in self.users.values():
            if user.id == user_id:
                return user.model_copy(update={"password_hash": ""})
        return None

    async def create_user(self, email: str, password: str, *, role: str = DEFAULT_ROLE) -> AuthUser:
        key = email.strip().lower()
        if key in self.users:
            raise DuplicateKeyError("E11000 duplicate key error")
        user = AuthUser(
            id=str(ObjectId()),
            email=key,
            password_hash=hash_password(password),
            role=role,
            created_at=datetime.now(timezone.utc),
        )
        self.users[key] = user
        return user

    async def set_user_role(self, email: str, role: str) -> bool:
        key = email.strip().lower()
        if key not in self.users:
            return False
        self.users[key] = self.users[key].model_copy(update={"role": role})
        return True

    async def is_token_denylisted(self, token: str) -> bool:
        return token in self.denylist

    async def denylist_token(self, token: str) -> DenylistEntry:
        self.denylist.add(token)
        return DenylistEntry(token=token, created_at=datetime.now(timezone.utc))


class FakeDocumentRepo:
    def __init__(self) -> None:
        self.docs: dict[str, dict[str, Any]] = {}

    async def list_all(self) -> list[dict[str, Any]]:
        return sorted(self.docs.values(), key=lambda doc: doc["createdAt"], reverse=True)

    async def get(self, item_id: str) -> dict[str, Any] | None:
        doc = self.docs.get(item_id)
        return dict(doc) if doc else None

    async def insert(self, fields: dict[str, Any]) -> dict[str, Any]:
        item_id = str(ObjectId())
        self.docs[item_id] = {**fields, "id": item_id, "createdAt": datetime.now(timezone.utc)}
        return dict(self.docs[item_id])

    async def update(self, item_id: str, fields: dict[str, Any]) -> dict[str, Any] | None:
        if item_id not in self.docs:
            return None
        self.docs[item_id].update(fields)
        return dict(self.docs[item_id])

    async def delete(self, item_id: str) -> bool:
        return self.docs.pop(item_id, None) is not None


class FakeStorage:
    def __init__(self) -> None:
        self.objects: dict[str, bytes] = {}
        self.deleted: list[str] = []

    def object_path_from_url(self, url: str) -> str | None:
        if not url.startswith(BUCKET_PREFIX):
            return None
        return url[len(BUCKET_PREFIX):] or None

    async def upload_file(self, filename: str, content: bytes, content_type: str) -> str:
        object_name = f"{len(self.objects) + len(self.deleted)}-{filename}"
        self.objects[object_name] = content
        return f"{BUCKET_PREFIX}{object_name}"

    async def delete_file(self, object_path: str) -> None:
        self.objects.pop(object_path, None)
        self.deleted.append(object_path)


def build_test_app(**security: Any) -> tuple[FastAPI, FakeAuthRepo, dict[str, FakeDocumentRepo], FakeStorage]:
    auth_repo = FakeAuthRepo()
    document_repos = {definition.name: FakeDocumentRepo() for definition in RESOURCES}
    storage = FakeStorage()
    app = build_app(
        make_config(**security),
        auth_repo=auth_repo,
        document_repos=document_repos,
        storage=storage,
    )
    return app, auth_repo, document_repos, storage
