"""SQLAlchemy adapter lifecycle and unit of work."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

from sqlalchemy.orm import Session, scoped_session, sessionmaker

from relsync.adapters.sqlalchemy.engine import create_database_engine
from relsync.adapters.sqlalchemy.mappings import create_all_tables
from relsync.adapters.sqlalchemy.store import SqlAlchemyRecordStore
from relsync.domain.model import configure_store

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)


class StartupError(RuntimeError):
    """Raised when the SQLAlchemy adapter is used before initialisation."""


@dataclass(slots=True)
class _AdapterState:
    _engine: Engine | None = None
    _sessions: scoped_session[Session] | None = None

    @property
    def engine(self) -> Engine | None:
        return self._engine

    @engine.setter
    def engine(self, value: Engine | None) -> None:
        if self._sessions is not None:
            self._sessions.remove()
        self._sessions = None
        self._engine = value

    @property
    def sessions(self) -> scoped_session[Session]:
        """Thread-local session registry; every thread works in its own session."""

        if self._engine is None:
            raise StartupError(
                "SQLAlchemy adapter not initialised. Call relsync.adapters.sqlalchemy."
                "unit_of_work.startup() before requesting a unit of work."
            )
        if self._sessions is None:
            self._sessions = scoped_session(sessionmaker(bind=self._engine, expire_on_commit=False))
        return self._sessions


_STATE = _AdapterState()


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    create_tables: bool = True,
    force: bool = False,
) -> None:
    """Initialise the engine and session registry and install the record store."""

    if _STATE.engine is not None and not force:
        raise StartupError(
            "SQLAlchemy adapter already initialised. Pass force=True to reconfigure."
        )

    resolved_engine = engine or create_database_engine(database_uri)
    if create_tables:
        create_all_tables(resolved_engine)

    _STATE.engine = resolved_engine
    configure_store(SqlAlchemyRecordStore(_STATE.sessions))
    log.info("SQLAlchemy adapter started on %s", resolved_engine.url)


def configured_engine() -> Engine | None:
    """Return the engine currently managed by the adapter (if any)."""

    return _STATE.engine


def is_started() -> bool:
    """Return whether the adapter has been initialised."""

    return _STATE.engine is not None


def shutdown() -> None:
    """Dispose the managed engine, uninstall the store and reset state (primarily for tests)."""

    engine = _STATE.engine
    _STATE.engine = None
    if engine is not None:
        engine.dispose()
    configure_store(None)


class SqlAlchemyUnitOfWork:
    """Transaction scope around the calling thread's session.

    Records saved or deleted inside the block, directly or through relation
    reconciliation, are written on ``commit``. Leaving the block with an
    exception rolls everything back.
    """

    def __init__(self) -> None:
        self._sessions: scoped_session[Session] = _STATE.sessions
        self._session: Session | None = None

    def __enter__(self) -> SqlAlchemyUnitOfWork:
        self.session = self._sessions()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        if exc_type is not None:
            self.rollback()
        self._sessions.remove()
        self.session = None
        return False

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()

    @property
    def store(self) -> SqlAlchemyRecordStore:
        return SqlAlchemyRecordStore(self._sessions)

    @property
    def session(self) -> Session:
        if self._session is None:
            raise StartupError("Unit of work session not initialised")
        return self._session

    @session.setter
    def session(self, session: Session | None) -> None:
        if self._session is not None and session is not None:
            raise StartupError("Unit of work session already initialised")
        self._session = session
