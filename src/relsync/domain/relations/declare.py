"""Explicit one-to-many relation declarations.

A relation is declared as a class attribute of the parent record::

    @dataclass(eq=False, kw_only=True)
    class Order(Record):
        customer: str | None = None

        lines = has_many(OrderLine, link=Link(foreign_key="order_id"))

The attribute name is the relation name. Reading the attribute returns the live
desired collection; assigning to it snapshots the previous collection and
propagates the parent key (see ``Reconciler.assign``).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Self, overload

from relsync.domain.errors import RelationError
from relsync.domain.model import BaseRecord
from relsync.domain.relations.link import Link

if TYPE_CHECKING:
    from collections.abc import Iterable

    from relsync.domain.record import Record
    from relsync.domain.relations.registry import RelationEntry, RelationRegistry


def _find_record_type(name: str) -> type[BaseRecord]:
    pending: list[type[BaseRecord]] = [BaseRecord]
    matches: list[type[BaseRecord]] = []
    while pending:
        candidate = pending.pop()
        if candidate.__name__ == name or candidate.__qualname__ == name:
            matches.append(candidate)
        pending.extend(candidate.__subclasses__())
    if len(matches) != 1:
        raise RelationError(f"cannot resolve record type {name!r} ({len(matches)} candidates)")
    return matches[0]


class HasMany[TChild: BaseRecord]:
    """Data descriptor declaring a one-to-many relation on a record class."""

    def __init__(
        self,
        child_type: type[TChild] | str,
        *,
        link: Link | str,
        keep_updated: bool = True,
    ) -> None:
        self._child_type = child_type
        self.link = link if isinstance(link, Link) else Link(foreign_key=link)
        self.keep_updated = keep_updated
        self.name = ""

    def __set_name__(self, owner: type[object], name: str) -> None:
        self.name = name

    @property
    def child_type(self) -> type[TChild]:
        if isinstance(self._child_type, str):
            self._child_type = _find_record_type(self._child_type)  # pyright: ignore[reportAttributeAccessIssue]
        return self._child_type  # pyright: ignore[reportReturnType]

    def register(self, registry: RelationRegistry, owner: type[BaseRecord]) -> RelationEntry:
        child_type = self.child_type
        self.link.check(owner, child_type)
        return registry.register(
            self.name,
            child_type,
            self.link,
            keep_updated=self.keep_updated,
        )

    @overload
    def __get__(self, instance: None, owner: type[object]) -> Self: ...

    @overload
    def __get__(self, instance: Record, owner: type[object]) -> list[TChild]: ...

    def __get__(self, instance: Record | None, owner: type[object]) -> Self | list[TChild]:
        if instance is None:
            return self
        return instance.relation(self.name)  # pyright: ignore[reportReturnType]

    def __set__(self, instance: Record, records: Iterable[TChild]) -> None:
        instance.assign_relation(self.name, records)

    def __repr__(self) -> str:
        child = self._child_type if isinstance(self._child_type, str) else self._child_type.__name__
        return f"HasMany({child}, link={self.link!r}, name={self.name!r})"


def has_many[TChild: BaseRecord](
    child_type: type[TChild] | str,
    *,
    link: Link | str,
    keep_updated: bool = True,
) -> HasMany[TChild]:
    return HasMany(child_type, link=link, keep_updated=keep_updated)


def collect_declarations(record_type: type[object]) -> dict[str, HasMany[Any]]:
    """Gather ``HasMany`` declarations across the MRO, subclasses overriding bases."""

    declarations: dict[str, HasMany[Any]] = {}
    for klass in reversed(record_type.__mro__):
        for name, value in vars(klass).items():
            if isinstance(value, HasMany):
                declarations[name] = value
    return declarations
