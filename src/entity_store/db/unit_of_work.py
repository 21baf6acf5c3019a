"""
entity_store.db.unit_of_work

Unit of work: one session, one transaction boundary.

Responsibilities:
- Open and close the session that repositories stage changes into.
- Resolve registered repositories for that session.
- Commit staged changes and report how many entities the commit touched.
- Roll back automatically when the block exits with an exception.
"""

from __future__ import annotations

from types import TracebackType
from typing import Any, TypeVar

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import Session

from entity_store.observability.logging import get_logger
from entity_store.repositories.registry import RepositoryRegistry

log = get_logger(__name__)

R = TypeVar("R")


class UnitOfWork:
    """
    Usage:

        async with UnitOfWork(session_factory, registry) as uow:
            notes = uow.repository(NoteRepository)
            note_id = await notes.create_item(Note(title="t", user_creator_id="u1"))
            await uow.commit()
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        repositories: RepositoryRegistry | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._repositories = RepositoryRegistry() if repositories is None else repositories
        self._session: AsyncSession | None = None
        self._changes = 0

    @property
    def session(self) -> AsyncSession:
        if self._session is None:
            raise RuntimeError("UnitOfWork is not active; use it with 'async with'")
        return self._session

    async def __aenter__(self) -> UnitOfWork:
        self._session = self._session_factory()
        self._changes = 0
        event.listen(self._session.sync_session, "after_flush", self._count_flushed)
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        session = self.session
        try:
            if exc_type is not None:
                await self.rollback()
        finally:
            event.remove(session.sync_session, "after_flush", self._count_flushed)
            await session.close()
            self._session = None

    def repository(self, interface: type[R]) -> R:
        return self._repositories.resolve(interface, self.session)

    async def commit(self) -> int:
        """Commit the transaction; returns the number of entities written since the last commit."""

        await self.session.commit()
        changes, self._changes = self._changes, 0
        log.debug("uow.committed", changes=changes)
        return changes

    async def rollback(self) -> None:
        await self.session.rollback()
        discarded, self._changes = self._changes, 0
        log.debug("uow.rolled_back", discarded=discarded)

    def _count_flushed(self, session: Session, _flush_context: Any) -> None:
        # after_flush still sees the pre-flush new/dirty/deleted collections.
        self._changes += len(session.new) + len(session.deleted)
        self._changes += sum(
            1 for obj in session.dirty if session.is_modified(obj, include_collections=False)
        )


# --- Module Notes -----------------------------------------------------------
# Repositories flush on create so identities are available before commit; the
# flush counter spans those early flushes and the final one issued by commit().
