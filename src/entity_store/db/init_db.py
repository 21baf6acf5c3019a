"""
entity_store.db.init_db

Schema bootstrap for local development and tests.

Responsibilities:
- Apply registered entity configurations to the model metadata.
- Create missing tables.
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncEngine

from entity_store.db.base import Base
from entity_store.db.configuration import EntityConfigurationRegistry
from entity_store.observability.logging import get_logger

log = get_logger(__name__)


async def init_db(
    engine: AsyncEngine,
    configurations: EntityConfigurationRegistry | None = None,
) -> None:
    # Configurations mutate tables, so they must run before DDL is emitted.
    if configurations is not None:
        configurations.apply(Base.metadata)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    log.info("db.initialized", tables=sorted(Base.metadata.tables))


# --- Module Notes -----------------------------------------------------------
# Production schemas are managed outside this package; this helper is only
# wired into app startup for the dev and test environments.
