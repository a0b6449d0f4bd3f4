"""Engine construction."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy import create_engine, event

from relsync.config.storage import get_database_config

if TYPE_CHECKING:
    from sqlalchemy.engine import Connection, Engine


def create_database_engine(database_uri: str | None = None, **kwargs: Any) -> Engine:
    """Create an engine for ``database_uri`` (default: configured database)."""

    uri = database_uri or get_database_config().uri
    engine = create_engine(uri, future=True, **kwargs)
    if engine.dialect.name == "sqlite":
        _enable_sqlite_savepoints(engine)
    return engine


def _enable_sqlite_savepoints(engine: Engine) -> None:
    # pysqlite's implicit transaction handling breaks SAVEPOINT; let SQLAlchemy emit BEGIN
    @event.listens_for(engine, "connect")
    def disable_implicit_transactions(dbapi_connection: Any, connection_record: Any) -> None:
        _ = connection_record
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def emit_begin(connection: Connection) -> None:
        connection.exec_driver_sql("BEGIN")
