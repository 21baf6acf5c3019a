from __future__ import annotations

from collections.abc import AsyncIterator
from pathlib import Path

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from entity_store.db.init_db import init_db
from entity_store.db.session import create_engine, create_sessionmaker
from entity_store.repositories.registry import RepositoryRegistry
from entity_store.settings import Settings
from tests.models import build_configurations, build_repositories


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    # File-backed SQLite: every pooled connection sees the same database.
    return Settings(env="test", database_url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")


@pytest_asyncio.fixture
async def engine(settings: Settings) -> AsyncIterator[AsyncEngine]:
    engine = create_engine(settings)
    await init_db(engine, build_configurations())
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return create_sessionmaker(engine)


@pytest.fixture
def repositories() -> RepositoryRegistry:
    return build_repositories()


@pytest_asyncio.fixture
async def session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncIterator[AsyncSession]:
    async with session_factory() as session:
        yield session
