from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import PurePosixPath

from starlette.datastructures import UploadFile
from starlette.requests import Request
from starlette.types import Message

from ..errors import InvalidUploadError, PayloadTooLargeError

logger = logging.getLogger(__name__)

DEFAULT_MIME_TYPE = "image/jpeg"

# Room for multipart boundaries, part headers and small text fields
MULTIPART_OVERHEAD_BYTES = 64 * 1024

MIME_TYPES_BY_EXTENSION = {
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
    "webp": "image/webp",
}

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]")


@dataclass(frozen=True)
class IngestedImage:
    filename: str
    mime_type: str
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)


def infer_mime_type(filename: str | None) -> str:
    """Map the file extension to an image MIME type; contents are not inspected."""
    name = (filename or "").lower()
    if "." not in name:
        return DEFAULT_MIME_TYPE
    ext = name.rsplit(".", 1)[1]
    return MIME_TYPES_BY_EXTENSION.get(ext, DEFAULT_MIME_TYPE)


def safe_filename(filename: str | None) -> str:
    # Backslashes count as separators too, mobile clients send either
    base = PurePosixPath((filename or "").replace("\\", "/")).name
    cleaned = _UNSAFE_CHARS.sub("_", base).lstrip(".")
    return cleaned or "upload"


async def read_limited(upload: UploadFile, max_bytes: int, chunk_size: int = 1024 * 1024) -> bytes:
    """Read *upload* in chunks, stopping as soon as *max_bytes* is exceeded."""
    chunks: list[bytes] = []
    total = 0
    while True:
        chunk = await upload.read(chunk_size)
        if not chunk:
            break
        total += len(chunk)
        if total > max_bytes:
            logger.warning("Upload %s exceeded %d bytes", upload.filename, max_bytes)
            raise PayloadTooLargeError(max_bytes)
        chunks.append(chunk)
    return b"".join(chunks)


async def ingest_upload(
    uploads: list[UploadFile], max_bytes: int, chunk_size: int = 1024 * 1024
) -> IngestedImage:
    if not uploads:
        raise InvalidUploadError("No image file provided")
    if len(uploads) > 1:
        raise InvalidUploadError("Exactly one image file is expected")

    upload = uploads[0]
    content = await read_limited(upload, max_bytes, chunk_size)
    if not content:
        raise InvalidUploadError("Uploaded file is empty")

    filename = upload.filename or "upload"
    return IngestedImage(filename=filename, mime_type=infer_mime_type(filename), content=content)


def bounded_request(request: Request, max_body_bytes: int) -> Request:
    """Return a view of *request* whose body stream fails once *max_body_bytes* is passed.

    A declared Content-Length above the limit is rejected before anything is read,
    so the form parser never spools more than the limit to disk.
    """
    declared = request.headers.get("content-length", "")
    if declared.isdigit() and int(declared) > max_body_bytes:
        raise PayloadTooLargeError(max_body_bytes)

    receive = request.receive
    received = 0

    async def limited_receive() -> Message:
        nonlocal received
        message = await receive()
        if message["type"] == "http.request":
            received += len(message.get("body", b""))
            if received > max_body_bytes:
                raise PayloadTooLargeError(max_body_bytes)
        return message

    return Request(request.scope, limited_receive)
