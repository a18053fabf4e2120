"""Process-wide services, built once per application and injected into handlers."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from .config import Settings
from .db.session import create_engine, create_session_factory
from .services.llm import RiskClassifier, TextExtractor, build_models
from .services.storage import ObjectStorage, build_storage

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    settings: Settings
    engine: AsyncEngine
    session_factory: async_sessionmaker[AsyncSession]
    extractor: TextExtractor
    classifier: RiskClassifier
    storage: ObjectStorage

    async def aclose(self) -> None:
        await self.engine.dispose()


def build_container(
    settings: Settings,
    *,
    extractor: TextExtractor | None = None,
    classifier: RiskClassifier | None = None,
    storage: ObjectStorage | None = None,
) -> ServiceContainer:
    """Wire the services from *settings*; explicit arguments replace the configured ones."""
    engine = create_engine(settings.database_url)
    if extractor is None or classifier is None:
        default_extractor, default_classifier = build_models(settings)
        extractor = extractor or default_extractor
        classifier = classifier or default_classifier
    storage = storage or build_storage(settings)
    logger.info(
        "Services ready: models=%s/%s storage=%s",
        extractor.name,
        classifier.name,
        storage.name,
    )
    return ServiceContainer(
        settings=settings,
        engine=engine,
        session_factory=create_session_factory(engine),
        extractor=extractor,
        classifier=classifier,
        storage=storage,
    )
