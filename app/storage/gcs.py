"""Google Cloud Storage adapter for uploaded PDF files."""

from __future__ import annotations

import asyncio
import logging
import re
import threading
import uuid
from pathlib import Path
from typing import Any
from urllib.parse import unquote

from google.api_core.exceptions import NotFound
from google.cloud import storage

LOGGER = logging.getLogger(__name__)

PUBLIC_HOST = "https://storage.googleapis.com"
_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def safe_object_name(filename: str) -> str:
    """Build a collision-free object name that keeps the original file name."""
    base = _UNSAFE_CHARS.sub("_", Path(filename or "").name).strip("._") or "file"
    return f"{uuid.uuid4().hex}-{base}"


class GCSStorage:
    """Upload and delete objects in a single public bucket.

    The google-cloud-storage client is synchronous, so every call runs in a worker
    thread.
    """

    def __init__(self, bucket_name: str, client: Any | None = None) -> None:
        """Bind to ``bucket_name``; the client is created on first use."""
        if not bucket_name:
            raise ValueError("GCS_BUCKET_NAME environment variable is required")
        self._bucket_name = bucket_name
        self._client = client
        self._bucket: Any | None = None
        self._bucket_lock = threading.Lock()

    @property
    def public_prefix(self) -> str:
        """Return the URL prefix shared by every object in the bucket."""
        return f"{PUBLIC_HOST}/{self._bucket_name}/"

    def _get_bucket(self) -> Any:
        # Called from worker threads only.
        with self._bucket_lock:
            if self._bucket is None:
                if self._client is None:
                    self._client = storage.Client()
                self._bucket = self._client.bucket(self._bucket_name)
            return self._bucket

    def _upload_blob(self, object_name: str, content: bytes, content_type: str) -> None:
        self._get_bucket().blob(object_name).upload_from_string(
            content, content_type=content_type
        )

    def _delete_blob(self, object_path: str) -> None:
        self._get_bucket().blob(object_path).delete()

    def object_path_from_url(self, url: str) -> str | None:
        """Return the object path for URLs inside this bucket, else ``None``."""
        if not url or not url.startswith(self.public_prefix):
            return None
        return unquote(url[len(self.public_prefix):]) or None

    async def upload_file(self, filename: str, content: bytes, content_type: str) -> str:
        """Store ``content`` and return its public URL."""
        object_name = safe_object_name(filename)
        await asyncio.to_thread(self._upload_blob, object_name, content, content_type)
        LOGGER.info("object_uploaded", extra={"object_path": object_name})
        return f"{self.public_prefix}{object_name}"

    async def delete_file(self, object_path: str) -> None:
        """Delete an object; a missing object is logged and ignored."""
        try:
            await asyncio.to_thread(self._delete_blob, object_path)
        except NotFound:
            LOGGER.warning(
                "File not found in GCS: %s", object_path, extra={"object_path": object_path}
            )
            return
        LOGGER.info("object_deleted", extra={"object_path": object_path})
