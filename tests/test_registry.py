from __future__ import annotations

from abc import ABC, abstractmethod
from unittest.mock import MagicMock

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from entity_store.exceptions import RegistrationError
from entity_store.repositories.base import RepositoryBase
from entity_store.repositories.registry import RepositoryRegistry
from tests.models import INoteRepository, NoteRepository, TagRepository


class IArchive(ABC):
    @abstractmethod
    async def archive(self) -> None: ...


class HalfArchive(RepositoryBase[int, str], IArchive):
    pass


def test_register_and_resolve_transient_instances() -> None:
    registry = RepositoryRegistry()
    registry.register(INoteRepository, NoteRepository)
    session = MagicMock(spec=AsyncSession)

    first = registry.resolve(INoteRepository, session)
    second = registry.resolve(INoteRepository, session)

    assert isinstance(first, NoteRepository)
    assert first is not second
    assert first.session is session
    assert INoteRepository in registry
    assert NoteRepository not in registry
    assert list(registry) == [INoteRepository]
    assert len(registry) == 1


def test_decorator_registration() -> None:
    registry = RepositoryRegistry()

    @registry.repository()
    class LocalRepository(RepositoryBase[int, str]):
        pass

    @registry.repository(IArchive)
    class ArchiveRepository(RepositoryBase[int, str], IArchive):
        async def archive(self) -> None:
            return None

    assert LocalRepository in registry
    assert isinstance(registry.resolve(IArchive, MagicMock(spec=AsyncSession)), ArchiveRepository)


def test_duplicate_interface_is_rejected() -> None:
    registry = RepositoryRegistry()
    registry.register(TagRepository)

    with pytest.raises(RegistrationError, match="already bound"):
        registry.register(TagRepository)


@pytest.mark.parametrize(
    ("interface", "implementation"),
    [
        (dict, dict),
        (INoteRepository, TagRepository),
        (IArchive, HalfArchive),
    ],
)
def test_invalid_bindings_are_rejected(interface: type, implementation: type) -> None:
    with pytest.raises(RegistrationError):
        RepositoryRegistry().register(interface, implementation)


def test_resolving_unknown_interface_fails() -> None:
    with pytest.raises(RegistrationError, match="no repository bound"):
        RepositoryRegistry().resolve(NoteRepository, MagicMock(spec=AsyncSession))
