"""Copy and filter relation collections without touching storage."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from relsync.domain.model import BaseRecord


def clone_record[TRecord: BaseRecord](record: TRecord) -> TRecord:
    """Return a new unsaved instance carrying every attribute except identity."""

    clone = type(record)()
    clone.set_attributes(record.attributes)
    return clone


def clone_collection[TRecord: BaseRecord](records: Iterable[TRecord]) -> list[TRecord]:
    return [clone_record(record) for record in records]


def matches(record: BaseRecord, criteria: Mapping[str, object]) -> bool:
    attributes = record.attributes
    return all(
        name in attributes and attributes[name] == value for name, value in criteria.items()
    )


def filter_collection[TRecord: BaseRecord](
    records: Iterable[TRecord],
    criteria: Mapping[str, object],
) -> list[TRecord]:
    """Keep, in order, the records whose attributes equal every criterion."""

    return [record for record in records if matches(record, criteria)]
