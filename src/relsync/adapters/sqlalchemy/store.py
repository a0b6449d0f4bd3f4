"""Record store backed by SQLAlchemy sessions."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from relsync.adapters.sqlalchemy.mappings import primary_key_columns
from relsync.domain.model import RECORD_ERROR_KEY

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping, Sequence

    from sqlalchemy.orm import Session

    from relsync.domain.model import BaseRecord

log = logging.getLogger(__name__)


class SqlAlchemyRecordStore:
    """Persist records one at a time, each inside its own savepoint.

    A failing record rolls back only its savepoint, so the session stays usable
    for the remaining records of a best-effort save pass. Committing is left
    to the unit of work.

    ``attribute_names`` narrows validation only; the session flushes every
    modified attribute.
    """

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory

    @property
    def session(self) -> Session:
        return self._session_factory()

    def persist(
        self,
        record: BaseRecord,
        attribute_names: Sequence[str] | None = None,
    ) -> bool:
        _ = attribute_names
        session = self.session
        try:
            with session.begin_nested():
                session.add(record)
        except SQLAlchemyError as exc:
            return self._fail("save", record, exc)
        return True

    def remove(self, record: BaseRecord) -> bool:
        session = self.session
        try:
            with session.begin_nested():
                session.delete(record)
        except SQLAlchemyError as exc:
            return self._fail("delete", record, exc)
        return True

    def find_all[TRecord: BaseRecord](
        self,
        record_type: type[TRecord],
        criteria: Mapping[str, object],
    ) -> list[TRecord]:
        stmt = (
            select(record_type)
            .filter_by(**criteria)
            .order_by(*primary_key_columns(record_type))
        )
        return list(self.session.scalars(stmt).all())

    def get[TRecord: BaseRecord](
        self,
        record_type: type[TRecord],
        identity: object,
    ) -> TRecord | None:
        return self.session.get(record_type, identity)

    @staticmethod
    def _fail(operation: str, record: BaseRecord, exc: SQLAlchemyError) -> bool:
        reason = getattr(exc, "orig", None) or exc
        log.warning(
            "Could not %s %s(id=%s): %s",
            operation,
            type(record).__name__,
            record.primary_key,
            reason,
        )
        record.add_error(RECORD_ERROR_KEY, str(reason))
        return False


if TYPE_CHECKING:
    from typing import cast

    from relsync.domain.ports.persistence import RecordStore

    _sessions_stub = cast("Callable[[], Session]", object())
    _store_check: RecordStore = SqlAlchemyRecordStore(_sessions_stub)
