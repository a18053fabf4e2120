from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Query
from fastapi.responses import FileResponse

from ...errors import StorageError
from ...services.media import infer_mime_type
from ...services.storage import LocalObjectStorage
from ..deps import ContainerDep

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/files", tags=["files"])


@router.get("/{key:path}")
async def download_file(
    key: str,
    container: ContainerDep,
    expires: int = Query(...),
    signature: str = Query(...),
) -> FileResponse:
    """Serve an object from local storage behind a signed, expiring URL."""
    storage = container.storage
    if not isinstance(storage, LocalObjectStorage):
        raise HTTPException(404, "Not found")

    if not storage.verify(key, expires, signature):
        logger.warning(f"Rejected signed URL for {key}")
        raise HTTPException(403, "Invalid or expired signature")

    try:
        path = storage.path_for(key)
    except StorageError as exc:
        raise HTTPException(404, "Not found") from exc
    if not path.is_file():
        raise HTTPException(404, "Not found")

    return FileResponse(path, media_type=infer_mime_type(path.name))
