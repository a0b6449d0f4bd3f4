from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest

from relsync.adapters.sqlalchemy import create_all_tables, create_database_engine
from relsync.adapters.sqlalchemy.unit_of_work import SqlAlchemyUnitOfWork, shutdown, startup
from relsync.domain.model import configure_store
from tests.helpers import tables as _tables  # noqa: F401  # pyright: ignore[reportUnusedImport]
from tests.helpers.records import InMemoryRecordStore

os.environ.setdefault("RELSYNC_DATABASE_URI", "sqlite+pysqlite:///:memory:")

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from sqlalchemy.engine import Engine


@pytest.fixture(autouse=True)
def isolated_reconcile_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("RELSYNC_VALIDATE_BEFORE_SAVE", raising=False)
    monkeypatch.delenv("RELSYNC_PAYLOAD_IDENTITY_FIELD", raising=False)


@pytest.fixture(autouse=True)
def record_store() -> Iterator[InMemoryRecordStore]:
    store = InMemoryRecordStore()
    configure_store(store)
    try:
        yield store
    finally:
        configure_store(None)


@pytest.fixture
def sqlite_engine() -> Iterator[Engine]:
    engine = create_database_engine("sqlite+pysqlite:///:memory:")
    create_all_tables(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def sqlite_unit_of_work(
    sqlite_engine: Engine,
) -> Iterator[Callable[[], SqlAlchemyUnitOfWork]]:
    startup(engine=sqlite_engine, force=True)

    def factory() -> SqlAlchemyUnitOfWork:
        return SqlAlchemyUnitOfWork()

    try:
        yield factory
    finally:
        shutdown()
