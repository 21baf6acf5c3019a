"""
entity_store.db.entity

The entity contract every repository-managed model satisfies.

Responsibilities:
- Declare the identity/audit shape (`EntityBase`) as a typing protocol.
- Provide declarative column mixins that implement it.
- Recognise mapped classes that satisfy the contract at runtime.

A model opts in by combining a key mixin with `AuditMixin`:

    class Note(IntKeyMixin, AuditMixin, Base):
        __tablename__ = "notes"
        title: Mapped[str] = mapped_column(String(200))

Models whose creator is not identified by a string redeclare `user_creator_id`
with their own column type.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from typing import Any, Protocol, TypeVar

from sqlalchemy import Boolean, DateTime, Integer, String, Uuid as SAUuid
from sqlalchemy import inspect as sa_inspect
from sqlalchemy.orm import Mapped, mapped_column

TKey = TypeVar("TKey")
TUserKey = TypeVar("TUserKey")

ENTITY_FIELDS = ("id", "user_creator_id", "state", "created_date")
# Write-once: updates never persist changes to these.
IMMUTABLE_FIELDS = ("user_creator_id", "created_date")

DEFAULT_USER_MAX_LENGTH = 256


def _utcnow() -> datetime:
    # Naive UTC, matching the default `DateTime` column type.
    return datetime.now(UTC).replace(tzinfo=None)


class EntityBase(Protocol[TKey, TUserKey]):
    id: TKey | None
    user_creator_id: TUserKey
    state: bool
    created_date: datetime


class IntKeyMixin:
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)


class UUIDKeyMixin:
    id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )


class AuditMixin:
    user_creator_id: Mapped[str] = mapped_column(
        String(DEFAULT_USER_MAX_LENGTH), nullable=False
    )
    state: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_date: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=_utcnow)


def is_entity_type(cls: Any) -> bool:
    if not isinstance(cls, type):
        return False
    mapper = sa_inspect(cls, raiseerr=False)
    if mapper is None:
        return False
    return set(ENTITY_FIELDS) <= set(mapper.column_attrs.keys())


# --- Module Notes -----------------------------------------------------------
# `id` defaults are applied by the backend at flush time, so a freshly built
# entity always carries `id is None` until it is created through a repository.
