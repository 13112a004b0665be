"""Business logic for offer, invitation and protocol endpoints."""

from __future__ import annotations

import logging
from typing import Any, Protocol

from app.api.contracts import CamelModel
from app.api.errors import ApiError, ApiErrorCode
from app.core.config import StorageConfig
from app.documents.models import ResourceDefinition, TitledFields, UploadedFile

LOGGER = logging.getLogger(__name__)


class DocumentRepositoryProtocol(Protocol):
    """Protocol describing repository methods used by the document service."""

    async def list_all(self) -> list[dict[str, Any]]:
        """Return every stored document."""

    async def get(self, item_id: str) -> dict[str, Any] | None:
        """Return a document by id, or ``None``."""

    async def insert(self, fields: dict[str, Any]) -> dict[str, Any]:
        """Insert a document and return it with ``id`` and ``createdAt``."""

    async def update(self, item_id: str, fields: dict[str, Any]) -> dict[str, Any] | None:
        """Update a document and return it, or ``None`` when missing."""

    async def delete(self, item_id: str) -> bool:
        """Delete a document and return whether it existed."""


class FileStorageProtocol(Protocol):
    """Protocol describing the object storage used for uploaded files."""

    def object_path_from_url(self, url: str) -> str | None:
        """Return the object path for URLs this storage owns."""

    async def upload_file(self, filename: str, content: bytes, content_type: str) -> str:
        """Store content and return its public URL."""

    async def delete_file(self, object_path: str) -> None:
        """Delete a stored object."""


class DocumentService:
    """CRUD for one document resource, with optional PDF upload."""

    def __init__(
        self,
        *,
        definition: ResourceDefinition,
        repo: DocumentRepositoryProtocol,
        storage: FileStorageProtocol,
        config: StorageConfig,
    ) -> None:
        """Initialize service with explicit collaborators."""
        self._definition = definition
        self._repo = repo
        self._storage = storage
        self._config = config

    @property
    def definition(self) -> ResourceDefinition:
        return self._definition

    async def list_all(self) -> list[CamelModel]:
        """List every document of this resource."""
        return [self._to_response(doc) for doc in await self._repo.list_all()]

    async def get_by_id(self, item_id: str) -> CamelModel:
        """Return one document or raise 404."""
        doc = await self._repo.get(item_id)
        if doc is None:
            raise self._not_found()
        return self._to_response(doc)

    async def create(self, data: CamelModel) -> CamelModel:
        """Create a document whose file URL is supplied by the client."""
        doc = await self._repo.insert(data.model_dump(by_alias=True))
        self._log("document_created", doc["id"])
        return self._to_response(doc)

    async def create_with_file(self, data: TitledFields, file: UploadedFile) -> CamelModel:
        """Upload ``file`` and create a document pointing at it."""
        self.validate_upload(file)
        file_url = await self._storage.upload_file(
            file.filename, file.content, file.content_type
        )
        doc = await self._repo.insert({**data.model_dump(by_alias=True), "fileUrl": file_url})
        self._log("document_created", doc["id"])
        return self._to_response(doc)

    async def edit(self, item_id: str, data: CamelModel) -> CamelModel:
        """Replace a document's fields."""
        doc = await self._repo.update(item_id, data.model_dump(by_alias=True))
        if doc is None:
            raise self._not_found()
        self._log("document_updated", item_id)
        return self._to_response(doc)

    async def edit_with_file(
        self, item_id: str, data: TitledFields, file: UploadedFile
    ) -> CamelModel:
        """Replace a document's fields and swap its stored file."""
        self.validate_upload(file)
        current = await self._repo.get(item_id)
        if current is None:
            raise self._not_found()
        await self._delete_stored_file(current)

        file_url = await self._storage.upload_file(
            file.filename, file.content, file.content_type
        )
        doc = await self._repo.update(
            item_id, {**data.model_dump(by_alias=True), "fileUrl": file_url}
        )
        if doc is None:
            raise self._not_found()
        self._log("document_updated", item_id)
        return self._to_response(doc)

    async def remove(self, item_id: str) -> None:
        """Delete a document and the file it owns in the bucket."""
        current = await self._repo.get(item_id)
        if current is None:
            raise self._not_found()
        await self._delete_stored_file(current)
        if not await self._repo.delete(item_id):
            raise self._not_found()
        self._log("document_deleted", item_id)

    def validate_upload(self, file: UploadedFile) -> None:
        """Reject non-PDF or oversized uploads."""
        if file.content_type not in self._config.allowed_mime_types:
            raise ApiError(
                status_code=400,
                error_code=ApiErrorCode.VALIDATION_ERROR,
                message="Only PDF files are allowed!",
            )
        if len(file.content) > self._config.upload_max_bytes:
            raise ApiError(
                status_code=413,
                error_code=ApiErrorCode.REQUEST_TOO_LARGE,
                message=(
                    "File size should not exceed "
                    f"{self._config.upload_max_bytes // (1024 * 1024)}MB!"
                ),
            )

    async def _delete_stored_file(self, doc: dict[str, Any]) -> None:
        object_path = self._storage.object_path_from_url(str(doc.get("fileUrl") or ""))
        if object_path:
            await self._storage.delete_file(object_path)

    def _to_response(self, doc: dict[str, Any]) -> CamelModel:
        return self._definition.response_model.model_validate(doc)

    def _not_found(self) -> ApiError:
        return ApiError(
            status_code=404,
            error_code=ApiErrorCode.RESOURCE_NOT_FOUND,
            message=self._definition.not_found_message,
        )

    def _log(self, event: str, item_id: str) -> None:
        LOGGER.info(
            event,
            extra={"resource": self._definition.name, "resource_id": item_id},
        )
