from __future__ import annotations

import asyncio
from collections.abc import Awaitable
from dataclasses import dataclass
from typing import TypeVar

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from ..errors import PipelineStageError
from ..models.analysis import Analysis
from ..schemas.analysis import ContractRiskReport
from .llm import RiskClassifier, TextExtractor
from .media import IngestedImage
from .repository import AnalysisRepository
from .storage import ObjectStorage, build_object_key

logger = structlog.get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class StoredImage:
    key: str
    url: str


class ContractAnalysisPipeline:
    """Extract, upload, classify and persist one contract image.

    The run is all-or-nothing for the caller: a failure in any stage raises
    ``PipelineStageError`` and no row is written.
    """

    def __init__(
        self,
        db: AsyncSession,
        extractor: TextExtractor,
        classifier: RiskClassifier,
        storage: ObjectStorage,
        *,
        key_prefix: str = "contract-analyses",
        parallel_upload: bool = False,
        classify_empty_text: bool = True,
    ) -> None:
        self.repository = AnalysisRepository(db)
        self.extractor = extractor
        self.classifier = classifier
        self.storage = storage
        self.key_prefix = key_prefix
        self.parallel_upload = parallel_upload
        self.classify_empty_text = classify_empty_text

    async def _stage(self, stage: str, call: Awaitable[T], log: structlog.stdlib.BoundLogger) -> T:
        try:
            return await call
        except Exception as exc:
            log.error("Pipeline stage failed", stage=stage, error=str(exc), exc_info=True)
            raise PipelineStageError(stage) from exc

    async def _upload(self, image: IngestedImage) -> StoredImage:
        key = build_object_key(self.key_prefix, image.filename)
        stored_key = await self.storage.upload(key, image.content, image.mime_type)
        url = await self.storage.get_signed_url(stored_key)
        return StoredImage(key=stored_key, url=url)

    async def _discard(self, stored: StoredImage | None, log: structlog.stdlib.BoundLogger) -> None:
        if stored is None:
            return
        try:
            await self.storage.delete(stored.key)
        except Exception:
            log.warning("Failed to remove uploaded image", image_key=stored.key, exc_info=True)

    async def _extract_and_upload(
        self, image: IngestedImage, log: structlog.stdlib.BoundLogger
    ) -> tuple[str, StoredImage]:
        extract = self._stage("extract", self.extractor.extract_text(image.content, image.mime_type), log)

        if not self.parallel_upload:
            text = await extract
            stored = await self._stage("upload", self._upload(image), log)
            return text, stored

        text_or_exc, stored_or_exc = await asyncio.gather(
            extract, self._stage("upload", self._upload(image), log), return_exceptions=True
        )
        if isinstance(stored_or_exc, BaseException):
            raise stored_or_exc
        if isinstance(text_or_exc, BaseException):
            await self._discard(stored_or_exc, log)
            raise text_or_exc
        return text_or_exc, stored_or_exc

    async def _classify(self, text: str, log: structlog.stdlib.BoundLogger) -> ContractRiskReport:
        if not text.strip() and not self.classify_empty_text:
            log.info("Extracted text is empty, skipping classification")
            return ContractRiskReport.empty()
        return await self.classifier.classify(text)

    async def run(self, image: IngestedImage) -> Analysis:
        log = logger.bind(filename=image.filename, mime_type=image.mime_type, size=image.size)
        log.info("Analyzing contract")

        text, stored = await self._extract_and_upload(image, log)
        text = text or ""
        log = log.bind(image_key=stored.key)
        log.info("Text extracted and image uploaded", text_length=len(text))

        try:
            report = await self._stage("classify", self._classify(text, log), log)
            log.info(
                "Contract analysis complete",
                hidden_risks=len(report.hidden_risks),
                money_traps=len(report.money_traps),
                auto_renew_traps=len(report.auto_renew_traps),
                dangerous_clauses=len(report.dangerous_clauses),
            )
            analysis = await self._stage(
                "persist",
                self.repository.create(
                    image_url=stored.url,
                    image_key=stored.key,
                    extracted_text=text,
                    report=report,
                ),
                log,
            )
        except PipelineStageError:
            await self._discard(stored, log)
            raise

        log.info("Analysis saved to database", analysis_id=analysis.id)
        return analysis
