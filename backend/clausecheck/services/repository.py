from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from ..models.analysis import Analysis
from ..schemas.analysis import ContractRiskReport

logger = logging.getLogger(__name__)


class AnalysisRepository:
    """Insert and read contract analyses. There is no update or delete path."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(
        self,
        *,
        image_url: str,
        image_key: str,
        extracted_text: str,
        report: ContractRiskReport,
    ) -> Analysis:
        analysis = Analysis(
            image_url=image_url,
            image_key=image_key,
            extracted_text=extracted_text,
            **report.to_storage(),
        )
        self.db.add(analysis)
        try:
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise
        return analysis

    async def get(self, analysis_id: str) -> Analysis | None:
        return await self.db.get(Analysis, analysis_id)
