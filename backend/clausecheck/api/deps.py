from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from ..container import ServiceContainer
from ..db.session import get_db
from ..services.analysis_service import ContractAnalysisPipeline


def get_container(request: Request) -> ServiceContainer:
    return request.app.state.container


DbDep = Annotated[AsyncSession, Depends(get_db)]
ContainerDep = Annotated[ServiceContainer, Depends(get_container)]


def get_pipeline(db: DbDep, container: ContainerDep) -> ContractAnalysisPipeline:
    settings = container.settings
    return ContractAnalysisPipeline(
        db,
        container.extractor,
        container.classifier,
        container.storage,
        key_prefix=settings.storage_key_prefix,
        parallel_upload=settings.parallel_upload,
        classify_empty_text=settings.classify_empty_text,
    )


PipelineDep = Annotated[ContractAnalysisPipeline, Depends(get_pipeline)]
