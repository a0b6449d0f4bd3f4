"""Per-instance table of registered relations."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from relsync.domain.errors import UnknownRelationError

if TYPE_CHECKING:
    from relsync.domain.model import BaseRecord
    from relsync.domain.relations.link import Link


@dataclass(frozen=True, slots=True)
class RelationEntry:
    name: str
    child_type: type[BaseRecord]
    link: Link
    keep_updated: bool = True


class RelationRegistry:
    """Relation name -> entry, for one parent instance."""

    def __init__(self, owner: str) -> None:
        self._owner = owner
        self._entries: dict[str, RelationEntry] = {}

    def register(
        self,
        name: str,
        child_type: type[BaseRecord],
        link: Link,
        *,
        keep_updated: bool = True,
    ) -> RelationEntry:
        entry = RelationEntry(
            name=name,
            child_type=child_type,
            link=link,
            keep_updated=keep_updated,
        )
        self._entries[name] = entry
        return entry

    def resolve(self, name: str) -> RelationEntry:
        try:
            return self._entries[name]
        except KeyError:
            raise UnknownRelationError(self._owner, name) from None

    def names(self) -> tuple[str, ...]:
        return tuple(self._entries)

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return len(self._entries)
