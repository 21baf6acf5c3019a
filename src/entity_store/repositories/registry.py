"""
entity_store.repositories.registry

Explicit repository manifest.

Responsibilities:
- Bind repository interfaces to concrete `RepositoryBase` subclasses.
- Build a fresh repository for a session on every resolve (transient lifetime).

Bindings are written out at the composition root:

    registry = RepositoryRegistry()
    registry.register(NoteRepository)                 # interface == implementation
    registry.register(INoteRepository, NoteRepository)

or with the decorator form:

    @registry.repository(INoteRepository)
    class NoteRepository(RepositoryBase[int, str], INoteRepository): ...
"""

from __future__ import annotations

import inspect
from collections.abc import Callable, Iterator
from typing import Any, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from entity_store.exceptions import RegistrationError
from entity_store.observability.logging import get_logger
from entity_store.repositories.base import RepositoryBase

log = get_logger(__name__)

R = TypeVar("R")
C = TypeVar("C", bound=type)


class RepositoryRegistry:
    def __init__(self) -> None:
        self._bindings: dict[type, type[RepositoryBase[Any, Any]]] = {}

    def register(self, interface: type, implementation: type | None = None) -> None:
        implementation = interface if implementation is None else implementation

        if not (isinstance(implementation, type) and issubclass(implementation, RepositoryBase)):
            raise RegistrationError(f"{implementation!r} is not a RepositoryBase subclass")
        if not issubclass(implementation, interface):
            raise RegistrationError(
                f"{implementation.__name__} does not implement {interface.__name__}"
            )
        if inspect.isabstract(implementation):
            raise RegistrationError(f"{implementation.__name__} is abstract")
        if interface in self._bindings:
            raise RegistrationError(
                f"{interface.__name__} is already bound to {self._bindings[interface].__name__}"
            )

        self._bindings[interface] = implementation
        log.debug(
            "repository.registered",
            interface=interface.__name__,
            implementation=implementation.__name__,
        )

    def repository(self, interface: type | None = None) -> Callable[[C], C]:
        def decorator(cls: C) -> C:
            self.register(interface or cls, cls)
            return cls

        return decorator

    def resolve(self, interface: type[R], session: AsyncSession) -> R:
        try:
            implementation = self._bindings[interface]
        except KeyError:
            raise RegistrationError(f"no repository bound to {interface.__name__}") from None
        return implementation(session)  # type: ignore[return-value]

    def __contains__(self, interface: object) -> bool:
        return interface in self._bindings

    def __iter__(self) -> Iterator[type]:
        return iter(self._bindings)

    def __len__(self) -> int:
        return len(self._bindings)


# --- Module Notes -----------------------------------------------------------
# Interfaces are plain ABCs (or the implementation class itself); typing.Protocol
# classes without @runtime_checkable cannot be used because binding checks
# issubclass(implementation, interface).
