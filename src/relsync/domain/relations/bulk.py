"""Merge tabular input (forms, API payloads) into a relation's desired collection.

Payload rows are attribute maps, either at the top level or nested under the
child type's input scope::

    {"OrderLine": [{"id": 3, "sku": "A-1"}, {"sku": "B-2"}]}
    {"OrderLine": {"0": {"id": 3, "sku": "A-1"}, "1": {"sku": "B-2"}}}

A row whose identity matches an existing record updates that instance; any
other row becomes a new unsaved record. Existing records no row refers to are
left out of the result and become removal candidates once it is assigned.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, cast

from relsync.config.reconcile import DEFAULT_PAYLOAD_IDENTITY_FIELD
from relsync.domain.model import BaseRecord, is_blank_identity
from relsync.domain.relations.diff import identity_key, index_by_identity

if TYPE_CHECKING:
    from collections.abc import Iterator

    from relsync.domain.model import AttributeMap

log = getLogger(__name__)

type Rows = Sequence[AttributeMap] | Mapping[object, AttributeMap]


@dataclass(frozen=True, slots=True)
class MergeResult[TRecord: BaseRecord]:
    records: list[TRecord]
    # False when the payload carried nothing for this relation; ``records`` is then unchanged
    has_input: bool


def _as_rows(data: object) -> list[object] | None:
    if isinstance(data, Mapping):
        return list(cast("Mapping[object, object]", data).values())
    if isinstance(data, Sequence) and not isinstance(data, str | bytes):
        return list(cast("Sequence[object]", data))
    return None


def scoped_rows(payload: object, scope: str) -> list[object] | None:
    """Return the rows addressed to ``scope`` (``""`` = the payload itself), or ``None``."""

    if scope == "":
        return _as_rows(payload)
    if not isinstance(payload, Mapping):
        return None
    scoped = cast("Mapping[str, object]", payload)
    if scope not in scoped:
        return None
    return _as_rows(scoped[scope])


def merge_from_payload[TRecord: BaseRecord](
    child_type: type[TRecord],
    existing: Sequence[TRecord],
    payload: object,
    *,
    scope: str | None = None,
    identity_field: str = DEFAULT_PAYLOAD_IDENTITY_FIELD,
) -> MergeResult[TRecord]:
    effective_scope = child_type.scope_name() if scope is None else scope
    rows = scoped_rows(payload, effective_scope)
    if rows is None:
        log.debug("No %r input for %s", effective_scope, child_type.__name__)
        return MergeResult(records=list(existing), has_input=False)

    index = index_by_identity(existing)
    merged: list[TRecord] = []
    for row in rows:
        if not isinstance(row, Mapping):
            log.warning("Skipping non-mapping %s row: %r", child_type.__name__, row)
            continue
        attributes = cast("AttributeMap", row)
        key = identity_key(attributes.get(identity_field))
        # duplicate identities in one payload load into the same instance again
        record = index.get(key) if key is not None else None
        if record is None:
            record = child_type()
        record.load(attributes, scope="")
        merged.append(record)

    log.debug(
        "Merged %d %s row(s) into %d existing record(s)",
        len(rows),
        child_type.__name__,
        len(existing),
    )
    return MergeResult(records=merged, has_input=True)


def _positional_rows(rows: Rows) -> Iterator[tuple[int, AttributeMap]]:
    items = rows.items() if isinstance(rows, Mapping) else enumerate(rows)
    for position, row in items:
        if not isinstance(row, Mapping):
            log.warning("Skipping non-mapping identity row at %r", position)
            continue
        try:
            index = int(cast("str | int", position))
        except (TypeError, ValueError):
            log.warning("Skipping identity row with non-positional key %r", position)
            continue
        yield index, row


def merge_identity_only[TRecord: BaseRecord](
    current: Sequence[TRecord],
    rows: Rows,
    *,
    identity_field: str = DEFAULT_PAYLOAD_IDENTITY_FIELD,
) -> list[TRecord]:
    """Back-fill identities onto ``current`` by position, leaving other attributes alone."""

    records = list(current)
    for position, row in _positional_rows(rows):
        identity = row.get(identity_field)
        if is_blank_identity(identity):
            continue
        if not 0 <= position < len(records):
            log.warning(
                "Identity row %d has no counterpart among %d record(s)", position, len(records)
            )
            continue
        record = records[position]
        setattr(record, record.PRIMARY_KEY, identity)
    return records
