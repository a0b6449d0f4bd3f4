"""SQLAlchemy mapping helpers for record dataclasses.

Applications declare their tables on ``mapper_registry.metadata`` and map each
record class imperatively::

    order_table = Table(
        "order",
        mapper_registry.metadata,
        Column("id", Integer, primary_key=True),
        Column("customer", String, nullable=True),
    )
    map_record(Order, order_table)

Relations stay ``has_many`` declarations on the record class; no ORM
relationship is configured for them.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from sqlalchemy import inspect, orm

if TYPE_CHECKING:
    from sqlalchemy import Table
    from sqlalchemy.engine import Engine

    from relsync.domain.model import BaseRecord

log = logging.getLogger(__name__)

mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


def is_mapped(record_type: type[BaseRecord]) -> bool:
    return inspect(record_type, raiseerr=False) is not None


def map_record(
    record_type: type[BaseRecord],
    table: Table,
    **properties: Any,
) -> orm.Mapper[Any]:
    """Map ``record_type`` onto ``table``; mapping an already mapped class is a no-op."""

    if is_mapped(record_type):
        log.debug("%s is already mapped", record_type.__name__)
        return inspect(record_type)
    log.info("Mapping %s onto table %s", record_type.__name__, table.name)
    return mapper_registry.map_imperatively(record_type, table, properties=properties or None)


def primary_key_columns(record_type: type[BaseRecord]) -> tuple[Any, ...]:
    return tuple(inspect(record_type).primary_key)


def create_all_tables(engine: Engine) -> None:
    """Create database tables for the mapped metadata."""

    log.info("Creating all tables")
    mapper_registry.metadata.create_all(engine)
