"""Diff baselines: the collection each relation held before its last assignment."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from relsync.domain.model import BaseRecord


class SnapshotStore:
    def __init__(self) -> None:
        self._snapshots: dict[str, tuple[BaseRecord, ...]] = {}

    def capture(self, name: str, records: Iterable[BaseRecord]) -> None:
        """Replace the snapshot for ``name`` (last write wins)."""
        self._snapshots[name] = tuple(records)

    def ensure(self, name: str) -> None:
        self._snapshots.setdefault(name, ())

    def get(self, name: str) -> tuple[BaseRecord, ...]:
        return self._snapshots.get(name, ())

    def names(self) -> tuple[str, ...]:
        """Relations assigned at least once, in first-assignment order."""
        return tuple(self._snapshots)

    def __contains__(self, name: object) -> bool:
        return name in self._snapshots
