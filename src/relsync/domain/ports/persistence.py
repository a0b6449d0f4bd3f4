"""Ports for persisting records."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from relsync.domain.model.record import BaseRecord


@runtime_checkable
class RecordStore(Protocol):
    """Storage backend used by records to save, delete and query themselves.

    ``persist`` and ``remove`` report failure by returning ``False`` and adding
    an error to the record rather than raising.
    """

    def persist(
        self,
        record: BaseRecord,
        attribute_names: Sequence[str] | None = None,
    ) -> bool: ...

    def remove(self, record: BaseRecord) -> bool: ...

    def find_all[TRecord: BaseRecord](
        self,
        record_type: type[TRecord],
        criteria: Mapping[str, object],
    ) -> list[TRecord]: ...
