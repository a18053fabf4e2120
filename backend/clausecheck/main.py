from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.v1.routes_analyses import router as analyses_router
from .api.v1.routes_files import router as files_router
from .api.v1.routes_health import router as health_router
from .config import Settings, get_settings
from .container import ServiceContainer, build_container
from .db.session import create_all
from .logging import configure_logging

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None, container: ServiceContainer | None = None
) -> FastAPI:
    """Create and configure FastAPI application."""
    settings = settings or get_settings()
    configure_logging(env=settings.app_env, level=settings.log_level)
    container = container or build_container(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if settings.db_auto_create:
            await create_all(container.engine)
            logger.info("Database tables ensured")
        yield
        await container.aclose()

    app = FastAPI(
        title="ClauseCheck API",
        version="0.1.0",
        docs_url=f"{settings.api_prefix}/docs",
        openapi_url=f"{settings.api_prefix}/openapi.json",
        lifespan=lifespan,
    )
    app.state.container = container

    if settings.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins,
            allow_methods=["GET", "POST", "OPTIONS"],
            allow_headers=["*"],
        )

    # Routers
    app.include_router(health_router, prefix=settings.api_prefix)
    app.include_router(analyses_router, prefix=settings.api_prefix)
    app.include_router(files_router, prefix=settings.api_prefix)

    return app
