"""Identity-based diff of two record collections."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from relsync.domain.model import is_blank_identity

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from relsync.domain.ports.records import RecordLike


def identity_key(value: object) -> str | None:
    """Normalise an identity value for matching; ``None`` for records without one.

    Identities are compared by their string form so that ``"7"`` from a form
    payload matches a stored key ``7``.
    """

    if is_blank_identity(value):
        return None
    return str(value)


def index_by_identity[TRecord: RecordLike](records: Iterable[TRecord]) -> dict[str, TRecord]:
    """Index records by identity; later duplicates replace earlier ones."""

    index: dict[str, TRecord] = {}
    for record in records:
        key = identity_key(record.primary_key)
        if key is not None:
            index[key] = record
    return index


@dataclass(frozen=True, slots=True)
class CollectionDiff[TRecord: RecordLike]:
    upsert: tuple[TRecord, ...]
    remove: tuple[TRecord, ...]


def diff_collections[TRecord: RecordLike](
    old: Sequence[TRecord],
    new: Sequence[TRecord],
) -> CollectionDiff[TRecord]:
    """Partition into everything in ``new`` and the members of ``old`` it no longer holds."""

    new_index = index_by_identity(new)
    # a duplicated identity in ``old`` counts once: its last record, at its first position
    remove = tuple(
        record for key, record in index_by_identity(old).items() if key not in new_index
    )
    return CollectionDiff(upsert=tuple(new), remove=remove)
