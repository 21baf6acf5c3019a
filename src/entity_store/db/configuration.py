"""
entity_store.db.configuration

Per-entity mapping configuration, applied once at bootstrap.

Responsibilities:
- Configure the shared entity columns on a table before DDL runs.
- Keep an explicit manifest of entity configurations and apply it to metadata.

Configurations are registered by hand at the composition root; nothing here
scans modules for them.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from typing import Protocol

from sqlalchemy import Index, MetaData, String, Table
from sqlalchemy import inspect as sa_inspect

from entity_store.db.entity import DEFAULT_USER_MAX_LENGTH, ENTITY_FIELDS, is_entity_type
from entity_store.exceptions import RegistrationError
from entity_store.observability.logging import get_logger

log = get_logger(__name__)


class EntityConfiguration(Protocol):
    entity: type

    def configure(self, table: Table) -> None: ...


def configure_entity_base(
    table: Table,
    *,
    user_required: bool = True,
    max_length_user: int = DEFAULT_USER_MAX_LENGTH,
) -> None:
    """
    Apply the shared configuration of the entity columns to `table`.

    Must run before `create_all`; column changes made afterwards never reach the
    database. Safe to call more than once on the same table.
    """

    missing = [name for name in ENTITY_FIELDS if name not in table.c]
    if missing:
        raise RegistrationError(f"table {table.name} lacks entity columns: {', '.join(missing)}")

    user = table.c.user_creator_id
    user.nullable = not user_required
    # Only string creator keys carry a length.
    if isinstance(user.type, String):
        user.type = String(max_length_user)

    table.c.state.nullable = False
    table.c.created_date.nullable = False

    # Listings filter on state.
    index_name = f"ix_{table.name}_state"
    if not any(ix.name == index_name for ix in table.indexes):
        Index(index_name, table.c.state)


@dataclass(frozen=True, slots=True)
class EntityBaseConfiguration:
    """Configuration that only applies the shared entity columns; subclass to add more."""

    entity: type
    user_required: bool = True
    max_length_user: int = DEFAULT_USER_MAX_LENGTH

    def configure(self, table: Table) -> None:
        configure_entity_base(
            table,
            user_required=self.user_required,
            max_length_user=self.max_length_user,
        )


class EntityConfigurationRegistry:
    def __init__(self) -> None:
        self._configurations: dict[type, EntityConfiguration] = {}
        self._applied: set[type] = set()

    def register(self, configuration: EntityConfiguration) -> EntityConfiguration:
        entity = configuration.entity
        if not is_entity_type(entity):
            raise RegistrationError(f"{entity!r} is not a mapped entity type")
        if entity in self._configurations:
            raise RegistrationError(f"{entity.__name__} already has a configuration")
        self._configurations[entity] = configuration
        log.debug(
            "entity_configuration.registered",
            entity=entity.__name__,
            configuration=type(configuration).__name__,
        )
        return configuration

    def apply(self, metadata: MetaData) -> int:
        """Run every pending configuration against its table; returns how many ran."""

        applied = 0
        for entity, configuration in self._configurations.items():
            if entity in self._applied:
                continue
            table = sa_inspect(entity).local_table
            if metadata.tables.get(table.key) is not table:
                raise RegistrationError(
                    f"table {table.key} of {entity.__name__} is not part of the given metadata"
                )
            configuration.configure(table)
            self._applied.add(entity)
            applied += 1
        log.info("entity_configurations.applied", count=applied, total=len(self._configurations))
        return applied

    def __contains__(self, entity: object) -> bool:
        return entity in self._configurations

    def __iter__(self) -> Iterator[type]:
        return iter(self._configurations)

    def __len__(self) -> int:
        return len(self._configurations)
