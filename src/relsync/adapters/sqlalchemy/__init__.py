"""SQLAlchemy adapter package for relsync."""

from __future__ import annotations

from .engine import create_database_engine
from .mappings import create_all_tables, is_mapped, map_record, mapper_registry
from .store import SqlAlchemyRecordStore
from .unit_of_work import (
    SqlAlchemyUnitOfWork,
    StartupError,
    configured_engine,
    is_started,
    shutdown,
    startup,
)

__all__ = [
    "SqlAlchemyRecordStore",
    "SqlAlchemyUnitOfWork",
    "StartupError",
    "configured_engine",
    "create_all_tables",
    "create_database_engine",
    "is_mapped",
    "map_record",
    "mapper_registry",
    "shutdown",
    "startup",
]
