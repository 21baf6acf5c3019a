"""
entity_store.exceptions

Error taxonomy for the data-access layer.

Responsibilities:
- Argument errors raised before any I/O.
- Not-found errors translated from empty lookups.
- Registration errors for misconfigured manifests.

Backend faults (anything SQLAlchemy or the driver raises) are not wrapped.
"""

from __future__ import annotations

from typing import Any


class RepositoryError(Exception):
    pass


class ArgumentError(RepositoryError, ValueError):
    """A required argument was missing or invalid."""

    def __init__(self, argument: str, message: str | None = None) -> None:
        self.argument = argument
        super().__init__(message or f"{argument} can't be null")


class EntityNotFoundError(RepositoryError, LookupError):
    def __init__(self, entity_type: type, id: Any) -> None:
        self.entity_type = entity_type
        self.id = id
        super().__init__(f"The entity {entity_type.__name__} with id {id} not found")


class RegistrationError(RepositoryError):
    pass


# --- Module Notes -----------------------------------------------------------
# ArgumentError and EntityNotFoundError also subclass the matching builtins so
# callers that only know ValueError/LookupError still catch them.
