"""
entity_store.repositories.base

Generic repository over one `AsyncSession`.

Responsibilities:
- Create, update and delete entities by staging them in the session.
- Read untracked snapshots by id or by soft state.
- Keep `user_creator_id` and `created_date` write-once on update.

Contract for callers:
- Commit is never issued here. Creates are flushed so the backend assigns the
  identity; everything else stays staged until the owning unit of work commits.
- `get` and `get_all` return snapshots detached from the session. Mutating a
  snapshot persists nothing until it is passed back to `update_item`.
- A session runs one operation at a time. Await each call before issuing the
  next one on the same repository (or any other repository sharing the session).
- Cancellation is plain asyncio cancellation of the awaiting task.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from sqlalchemy import Select, select
from sqlalchemy import inspect as sa_inspect
from sqlalchemy.exc import NoResultFound
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Mapper
from sqlalchemy.orm.attributes import set_committed_value

from entity_store.db.entity import IMMUTABLE_FIELDS, EntityBase, TKey, TUserKey, is_entity_type
from entity_store.exceptions import ArgumentError, EntityNotFoundError

TEntity = TypeVar("TEntity", bound=EntityBase[Any, Any])


class RepositoryBase(Generic[TKey, TUserKey]):
    """
    CRUD surface for any entity type keyed by `TKey` and created by `TUserKey`.

    Concrete repositories subclass this (usually alongside an interface that
    names their entity-specific queries) and are bound in a `RepositoryRegistry`.
    """

    def __init__(self, session: AsyncSession) -> None:
        if session is None:
            raise ArgumentError("session")
        self._session = session

    @property
    def session(self) -> AsyncSession:
        return self._session

    async def create_item(self, entity: TEntity) -> TKey:
        """Stage `entity` for insert and return the identity the backend assigned."""

        if entity is None:
            raise ArgumentError("entity")
        _require_entity_type(type(entity))
        if entity.id is not None:
            raise ArgumentError("entity", "entity.id is assigned on create and must be empty")

        self._session.add(entity)
        await self._session.flush()
        return entity.id

    async def delete(self, entity_type: type[TEntity], id: TKey) -> None:
        """Stage removal of the first `entity_type` row with `id`."""

        _require_entity_type(entity_type)
        _require_id(id)

        stmt = select(entity_type).where(entity_type.id == id).limit(1)
        entity = (await self._session.execute(stmt)).scalars().first()
        if entity is None:
            raise EntityNotFoundError(entity_type, id)
        await self._session.delete(entity)

    async def update_item(self, entity: TEntity) -> None:
        """
        Stage every change carried by `entity`, except to the write-once fields.

        `entity` may be a snapshot from `get`/`get_all` or any instance carrying
        an existing id. Changes to `user_creator_id` and `created_date` are reset
        to the stored values on the tracked instance before anything is flushed.
        """

        if entity is None:
            raise ArgumentError("entity")
        entity_type = type(entity)
        _require_entity_type(entity_type)
        _require_id(entity.id)

        # An autoflush inside merge() or refresh() would write the audit fields
        # before they are reset.
        with self._session.no_autoflush:
            tracked = await self._session.merge(entity)
            state = sa_inspect(tracked)
            if state.pending:
                # merge() found no stored row and would insert a new one.
                self._session.expunge(tracked)
                raise EntityNotFoundError(entity_type, entity.id)

            for name in IMMUTABLE_FIELDS:
                history = state.attrs[name].history
                if not history.has_changes():
                    continue
                if history.deleted:
                    set_committed_value(tracked, name, history.deleted[0])
                else:
                    # Stored value was never loaded; reload it over the pending change.
                    await self._session.refresh(tracked, [name])

    async def get_all(self, entity_type: type[TEntity], state: bool = True) -> list[TEntity]:
        """Untracked snapshots of every `entity_type` row whose soft state equals `state`."""

        _require_entity_type(entity_type)
        query = _SnapshotQuery.for_mapper(sa_inspect(entity_type))
        stmt = query.statement.where(entity_type.state == state)
        rows = (await self._session.execute(stmt)).all()
        return [query.build(row) for row in rows]

    async def get(self, entity_type: type[TEntity], id: TKey) -> TEntity:
        """Untracked snapshot of the `entity_type` row with `id`."""

        _require_entity_type(entity_type)
        _require_id(id)
        query = _SnapshotQuery.for_mapper(sa_inspect(entity_type))
        stmt = query.statement.where(entity_type.id == id)
        result = await self._session.execute(stmt)
        try:
            # Duplicate ids raise MultipleResultsFound, which is left to propagate.
            row = result.one()
        except NoResultFound as e:
            raise EntityNotFoundError(entity_type, id) from e
        return query.build(row)


def _require_entity_type(entity_type: Any) -> None:
    if not is_entity_type(entity_type):
        raise ArgumentError("entity_type", f"{entity_type!r} is not a mapped entity type")


def _require_id(id: Any) -> None:
    if id is None or id == 0:
        raise ArgumentError("id", "id can't be null or zero")


@dataclass(frozen=True, slots=True)
class _SnapshotQuery:
    """
    Plain column select for a mapped class and the recipe to rebuild instances.

    Column rows never enter the identity map, so reads cannot detach or replace
    instances the session already tracks. Inheritance is handled by selecting
    from the mapper's table join (outer-joining joined-table subclasses) and
    picking the concrete class from the discriminator of each row.
    """

    mapper: Mapper[Any]
    statement: Select[Any]
    layouts: dict[Mapper[Any], tuple[tuple[str, int], ...]]
    discriminator: int | None

    @classmethod
    def for_mapper(cls, mapper: Mapper[Any]) -> _SnapshotQuery:
        columns: list[Any] = []
        positions: dict[Any, int] = {}

        def position(column: Any) -> int:
            if column not in positions:
                positions[column] = len(columns)
                columns.append(column)
            return positions[column]

        family = list(mapper.self_and_descendants)
        layouts = {
            sub: tuple((attr.key, position(attr.columns[0])) for attr in sub.column_attrs)
            for sub in family
        }

        polymorphic_on = mapper.polymorphic_on
        discriminator = position(polymorphic_on) if polymorphic_on is not None else None

        from_clause = mapper.persist_selectable
        for sub in family:
            if sub is not mapper and not sub.single:
                from_clause = from_clause.outerjoin(sub.local_table, sub.inherit_condition)

        statement = select(*columns).select_from(from_clause)
        if mapper.inherits is not None and polymorphic_on is not None:
            # Rows of sibling classes share the parent table; keep only this branch.
            identities = [
                sub.polymorphic_identity for sub in family if sub.polymorphic_identity is not None
            ]
            statement = statement.where(polymorphic_on.in_(identities))

        return cls(mapper, statement, layouts, discriminator)

    def build(self, row: Sequence[Any]) -> Any:
        target = self.mapper
        if self.discriminator is not None:
            target = self.mapper.polymorphic_map.get(row[self.discriminator], self.mapper)
            if target not in self.layouts:
                target = self.mapper

        instance = target.class_manager.new_instance()
        for key, index in self.layouts[target]:
            set_committed_value(instance, key, row[index])
        return instance
