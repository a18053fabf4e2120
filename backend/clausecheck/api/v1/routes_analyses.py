from __future__ import annotations

import structlog
from fastapi import APIRouter, HTTPException, Request
from sqlalchemy.exc import SQLAlchemyError
from starlette.datastructures import UploadFile

from ...errors import InvalidUploadError, PayloadTooLargeError, PipelineStageError
from ...schemas.analysis import AnalysisOut
from ...services.media import MULTIPART_OVERHEAD_BYTES, bounded_request, ingest_upload
from ...services.repository import AnalysisRepository
from ..deps import ContainerDep, DbDep, PipelineDep

router = APIRouter(tags=["analyses"])

logger = structlog.get_logger(__name__)


@router.post(
    "/analyze-contract",
    response_model=AnalysisOut,
    summary="Analyze a contract from a screenshot",
    responses={
        400: {"description": "No image file provided"},
        413: {"description": "File size limit exceeded"},
        500: {"description": "Failed to analyze contract"},
    },
)
async def analyze_contract(
    request: Request, pipeline: PipelineDep, container: ContainerDep
) -> AnalysisOut:
    """Multipart upload of one contract image; the form field name is not significant."""
    settings = container.settings
    logger.info("Analyze request received", path=request.url.path)

    body_limit = settings.max_upload_bytes + MULTIPART_OVERHEAD_BYTES
    try:
        async with bounded_request(request, body_limit).form() as form:
            uploads = [value for _, value in form.multi_items() if isinstance(value, UploadFile)]
            image = await ingest_upload(
                uploads, settings.max_upload_bytes, settings.upload_chunk_size
            )
    except InvalidUploadError as exc:
        logger.warning("Rejected upload", reason=str(exc))
        raise HTTPException(400, str(exc)) from exc
    except PayloadTooLargeError as exc:
        logger.warning("Rejected upload", reason="too_large", limit=exc.limit)
        raise HTTPException(413, "File size limit exceeded") from exc

    try:
        analysis = await pipeline.run(image)
    except PipelineStageError as exc:
        logger.error("Failed to analyze contract", stage=exc.stage, filename=image.filename)
        raise HTTPException(500, "Failed to analyze contract") from exc

    return AnalysisOut.from_row(analysis)


@router.get(
    "/analyses/{analysis_id}",
    response_model=AnalysisOut,
    summary="Get a contract analysis by ID",
    responses={404: {"description": "Analysis not found"}},
)
async def get_analysis(analysis_id: str, db: DbDep) -> AnalysisOut:
    log = logger.bind(analysis_id=analysis_id)
    try:
        analysis = await AnalysisRepository(db).get(analysis_id)
    except SQLAlchemyError as exc:
        log.error("Failed to fetch analysis", error=str(exc))
        raise HTTPException(500, "Failed to fetch analysis") from exc

    if analysis is None:
        log.warning("Analysis not found")
        raise HTTPException(404, "Analysis not found")

    log.info("Analysis retrieved")
    return AnalysisOut.from_row(analysis)
