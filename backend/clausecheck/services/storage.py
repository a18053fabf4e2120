from __future__ import annotations

import abc
import asyncio
import hashlib
import hmac
import logging
import time
from pathlib import Path
from typing import Any
from urllib.parse import quote, urlencode
from uuid import uuid4

from ..config import Settings
from ..errors import StorageError
from .media import safe_filename

logger = logging.getLogger(__name__)


def build_object_key(prefix: str, filename: str | None, now: float | None = None) -> str:
    """Namespace the upload by millisecond timestamp, a random token and its sanitized file name.

    The token keeps same-named uploads within one millisecond on separate objects.
    """
    millis = int((time.time() if now is None else now) * 1000)
    return f"{prefix.strip('/')}/{millis}-{uuid4().hex[:12]}-{safe_filename(filename)}"


class ObjectStorage(abc.ABC):
    name: str = "base"

    @abc.abstractmethod
    async def upload(self, key: str, data: bytes, content_type: str | None = None) -> str:
        """Store *data* under *key* and return the stored key."""

    @abc.abstractmethod
    async def get_signed_url(self, key: str) -> str:
        """Return a time-limited URL for reading *key*."""

    @abc.abstractmethod
    async def delete(self, key: str) -> None:
        """Remove *key*; missing keys are ignored."""


class LocalObjectStorage(ObjectStorage):
    """Filesystem storage whose URLs point at the app's own signed download route."""

    name = "local"

    def __init__(
        self,
        root_dir: str | Path,
        public_base_url: str,
        files_path: str,
        signing_secret: str,
        ttl_seconds: int = 3600,
    ) -> None:
        self.root = Path(root_dir).resolve()
        self.public_base_url = public_base_url.rstrip("/")
        self.files_path = "/" + files_path.strip("/")
        self._secret = signing_secret.encode("utf-8")
        self.ttl_seconds = ttl_seconds

    def path_for(self, key: str) -> Path:
        path = (self.root / key).resolve()
        if not path.is_relative_to(self.root):
            raise StorageError(f"Key escapes storage root: {key}")
        return path

    def sign(self, key: str, expires: int) -> str:
        message = f"{key}:{expires}".encode("utf-8")
        return hmac.new(self._secret, message, hashlib.sha256).hexdigest()

    def verify(self, key: str, expires: int, signature: str, now: float | None = None) -> bool:
        if expires < (time.time() if now is None else now):
            return False
        expected = self.sign(key, expires).encode("ascii")
        return hmac.compare_digest(expected, signature.encode("utf-8"))

    async def upload(self, key: str, data: bytes, content_type: str | None = None) -> str:
        path = self.path_for(key)

        def _write() -> None:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)

        await asyncio.to_thread(_write)
        logger.info("Stored %d bytes at %s", len(data), key)
        return key

    async def get_signed_url(self, key: str) -> str:
        expires = int(time.time()) + self.ttl_seconds
        query = urlencode({"expires": expires, "signature": self.sign(key, expires)})
        return f"{self.public_base_url}{self.files_path}/{quote(key)}?{query}"

    async def delete(self, key: str) -> None:
        await asyncio.to_thread(self.path_for(key).unlink, missing_ok=True)


class SupabaseObjectStorage(ObjectStorage):
    name = "supabase"

    def __init__(self, client: Any, bucket: str, ttl_seconds: int = 3600) -> None:
        self.client = client
        self.bucket = bucket
        self.ttl_seconds = ttl_seconds

    @staticmethod
    def _error_of(result: Any) -> Any:
        if isinstance(result, dict):
            return result.get("error")
        return getattr(result, "error", None)

    async def upload(self, key: str, data: bytes, content_type: str | None = None) -> str:
        options = {"content-type": content_type} if content_type else None
        bucket = self.client.storage.from_(self.bucket)
        result = await asyncio.to_thread(bucket.upload, key, data, options)
        if self._error_of(result):
            raise StorageError(f"Supabase upload failed for {key}")
        return key

    async def get_signed_url(self, key: str) -> str:
        bucket = self.client.storage.from_(self.bucket)
        result = await asyncio.to_thread(bucket.create_signed_url, key, self.ttl_seconds)
        url = None
        if isinstance(result, dict):
            url = result.get("signedURL") or result.get("signedUrl")
        if not url:
            raise StorageError(f"Supabase returned no signed URL for {key}")
        return url

    async def delete(self, key: str) -> None:
        bucket = self.client.storage.from_(self.bucket)
        await asyncio.to_thread(bucket.remove, [key])


def build_storage(settings: Settings) -> ObjectStorage:
    if settings.storage_backend == "supabase":
        if not settings.supabase_url or not settings.supabase_service_role_key:
            raise RuntimeError("SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY must be configured")
        from supabase import create_client

        client = create_client(settings.supabase_url, settings.supabase_service_role_key)
        return SupabaseObjectStorage(client, settings.supabase_bucket, settings.signed_url_ttl_seconds)

    return LocalObjectStorage(
        root_dir=settings.local_storage_dir,
        public_base_url=settings.public_base_url,
        files_path=f"{settings.api_prefix}/files",
        signing_secret=settings.storage_signing_secret,
        ttl_seconds=settings.signed_url_ttl_seconds,
    )
