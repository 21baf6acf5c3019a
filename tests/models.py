"""
tests.models

Entities and repositories used across the test suite.
"""

from __future__ import annotations

import uuid
from abc import ABC, abstractmethod

from sqlalchemy import ForeignKey, Integer, String, Table, Text
from sqlalchemy.orm import Mapped, mapped_column

from entity_store.db.base import Base
from entity_store.db.configuration import (
    EntityBaseConfiguration,
    EntityConfigurationRegistry,
)
from entity_store.db.entity import AuditMixin, IntKeyMixin, UUIDKeyMixin
from entity_store.repositories.base import RepositoryBase
from entity_store.repositories.registry import RepositoryRegistry


class Note(IntKeyMixin, AuditMixin, Base):
    __tablename__ = "notes"

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    body: Mapped[str | None] = mapped_column(Text, nullable=True)


class Tag(UUIDKeyMixin, AuditMixin, Base):
    __tablename__ = "tags"

    # Tags are created by numeric user ids.
    user_creator_id: Mapped[int] = mapped_column(Integer, nullable=False)
    label: Mapped[str] = mapped_column(String(64), nullable=False)


class Page(IntKeyMixin, AuditMixin, Base):
    __tablename__ = "pages"

    kind: Mapped[str] = mapped_column(String(20), nullable=False)
    title: Mapped[str] = mapped_column(String(200), nullable=False)

    __mapper_args__ = {"polymorphic_on": "kind", "polymorphic_identity": "page"}


class WikiPage(Page):
    # Joined-table subclass.
    __tablename__ = "wiki_pages"

    id: Mapped[int] = mapped_column(ForeignKey("pages.id"), primary_key=True)
    markup: Mapped[str] = mapped_column(Text, nullable=False, default="")

    __mapper_args__ = {"polymorphic_identity": "wiki"}


class Announcement(Page):
    # Single-table subclass sharing "pages".
    __mapper_args__ = {"polymorphic_identity": "announcement"}


class Setting(Base):
    # Mapped, but without the entity columns.
    __tablename__ = "settings"

    key: Mapped[str] = mapped_column(String(64), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)


class INoteRepository(ABC):
    @abstractmethod
    async def titles(self, state: bool = True) -> list[str]: ...


class NoteRepository(RepositoryBase[int, str], INoteRepository):
    async def titles(self, state: bool = True) -> list[str]:
        return sorted(note.title for note in await self.get_all(Note, state))


class TagRepository(RepositoryBase[uuid.UUID, int]):
    pass


class TagConfiguration(EntityBaseConfiguration):
    def configure(self, table: Table) -> None:
        super().configure(table)
        table.c.label.info["configured"] = True


def build_repositories() -> RepositoryRegistry:
    registry = RepositoryRegistry()
    registry.register(INoteRepository, NoteRepository)
    registry.register(NoteRepository)
    registry.register(TagRepository)
    return registry


def build_configurations() -> EntityConfigurationRegistry:
    registry = EntityConfigurationRegistry()
    registry.register(EntityBaseConfiguration(Note))
    registry.register(TagConfiguration(Tag))
    return registry
