"""
entity_store.api.deps

FastAPI dependency wiring.

Responsibilities:
- Provide request-scoped sessions and units of work from app.state.
- Turn registry bindings into injectable repository dependencies.

Handlers that share a request get the same session, so a repository injected
with `repository(...)` stages into the same transaction the request's
`unit_of_work` commits:

    @router.post("/notes")
    async def create_note(
        body: NoteIn,
        notes: NoteRepository = Depends(repository(NoteRepository)),
        uow: UnitOfWork = Depends(unit_of_work),
    ) -> dict[str, int]:
        note_id = await notes.create_item(Note(**body.model_dump()))
        await uow.commit()
        return {"id": note_id}
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Callable
from typing import Any, TypeVar

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from entity_store.db.unit_of_work import UnitOfWork
from entity_store.repositories.registry import RepositoryRegistry

R = TypeVar("R")


def sessionmaker_from_app(request: Request) -> async_sessionmaker[AsyncSession]:
    # Created by the lifespan in `entity_store.api.app.create_app`.
    return request.app.state.sessionmaker  # type: ignore[attr-defined]


def registry_from_app(request: Request) -> RepositoryRegistry:
    return request.app.state.repositories  # type: ignore[attr-defined]


async def unit_of_work(
    session_factory: async_sessionmaker[AsyncSession] = Depends(sessionmaker_from_app),
    repositories: RepositoryRegistry = Depends(registry_from_app),
) -> AsyncIterator[UnitOfWork]:
    async with UnitOfWork(session_factory, repositories) as uow:
        yield uow


async def db_session(uow: UnitOfWork = Depends(unit_of_work)) -> AsyncSession:
    return uow.session


def repository(interface: type[R]) -> Callable[..., Any]:
    """Build a dependency resolving `interface` against the request's session."""

    def dependency(uow: UnitOfWork = Depends(unit_of_work)) -> R:
        return uow.repository(interface)

    dependency.__name__ = f"repository_{interface.__name__}"
    return dependency
