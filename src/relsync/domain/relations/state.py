"""Relation bookkeeping owned by a single parent record instance."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from relsync.domain.relations.registry import RelationRegistry
from relsync.domain.relations.snapshot import SnapshotStore

if TYPE_CHECKING:
    from relsync.domain.model import BaseRecord


@dataclass(slots=True)
class RelationState:
    registry: RelationRegistry
    snapshots: SnapshotStore = field(default_factory=SnapshotStore)
    # desired collections; absent until first read or assignment
    collections: dict[str, list[BaseRecord]] = field(
        default_factory=dict[str, "list[BaseRecord]"]
    )

    @classmethod
    def for_owner(cls, owner: str) -> RelationState:
        return cls(registry=RelationRegistry(owner))
