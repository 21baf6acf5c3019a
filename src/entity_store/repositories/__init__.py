"""
entity_store.repositories

Repository package.

Responsibilities:
- Generic CRUD base for entities that satisfy the entity contract.
- Explicit registry binding repository interfaces to implementations.
"""

from entity_store.repositories.base import RepositoryBase
from entity_store.repositories.registry import RepositoryRegistry

__all__ = ["RepositoryBase", "RepositoryRegistry"]
