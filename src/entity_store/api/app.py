"""
entity_store.api.app

FastAPI app factory.

Responsibilities:
- Single composition root: settings, repository manifest, entity configurations.
- Create the engine/sessionmaker on startup and dispose them on shutdown.
- Register logging middleware and health probes.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from entity_store import __version__
from entity_store.api.routers.health import router as health_router
from entity_store.db.configuration import EntityConfigurationRegistry
from entity_store.db.init_db import init_db
from entity_store.db.session import create_engine, create_sessionmaker
from entity_store.observability.logging import configure_logging, get_logger
from entity_store.observability.middleware import RequestContextMiddleware
from entity_store.repositories.registry import RepositoryRegistry
from entity_store.settings import Settings

log = get_logger(__name__)


def create_app(
    *,
    settings: Settings,
    repositories: RepositoryRegistry | None = None,
    configurations: EntityConfigurationRegistry | None = None,
) -> FastAPI:
    configure_logging(
        service_name=settings.service_name,
        level=settings.log_level,
        json=settings.env != "dev",
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        log.info("startup", env=settings.env, repositories=len(app.state.repositories))
        engine = create_engine(settings)
        app.state.engine = engine
        app.state.sessionmaker = create_sessionmaker(engine)
        if settings.env in ("dev", "test"):
            await init_db(engine, configurations)
        try:
            yield
        finally:
            await engine.dispose()
            log.info("shutdown")

    app = FastAPI(title="Entity Store", version=__version__, lifespan=lifespan)
    app.state.repositories = RepositoryRegistry() if repositories is None else repositories

    app.add_middleware(RequestContextMiddleware)
    app.include_router(health_router, tags=["health"])
    return app


# --- Module Notes -----------------------------------------------------------
# Feature routers are added by the embedding service after create_app returns;
# they obtain repositories through `entity_store.api.deps.repository`.
