"""Link descriptor tying a child's foreign key to its parent's local key."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from relsync.domain.errors import InvalidLinkError

if TYPE_CHECKING:
    from relsync.domain.ports.records import RecordLike


@dataclass(frozen=True, slots=True)
class Link:
    foreign_key: str
    local_key: str = "id"

    def check(self, parent_type: type[RecordLike], child_type: type[RecordLike]) -> None:
        if self.foreign_key not in child_type.attribute_names():
            raise InvalidLinkError(
                f"{child_type.__name__} has no attribute {self.foreign_key!r} to link on"
            )
        if self.local_key not in parent_type.attribute_names():
            raise InvalidLinkError(
                f"{parent_type.__name__} has no attribute {self.local_key!r} to link on"
            )

    def parent_value(self, parent: RecordLike) -> object:
        return getattr(parent, self.local_key)

    def bind(self, child: RecordLike, value: object) -> None:
        setattr(child, self.foreign_key, value)
