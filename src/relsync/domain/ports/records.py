"""Structural contract of a single persisted record."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence


@runtime_checkable
class RecordLike(Protocol):
    """Capabilities the relation subsystem relies on, for parents and children alike."""

    @classmethod
    def attribute_names(cls) -> tuple[str, ...]: ...

    @classmethod
    def scope_name(cls) -> str: ...

    @property
    def primary_key(self) -> object: ...

    @property
    def attributes(self) -> dict[str, object]: ...

    @property
    def errors(self) -> dict[str, list[str]]: ...

    def load(self, data: Mapping[str, object], scope: str | None = None) -> bool: ...

    def validate(
        self,
        attribute_names: Sequence[str] | None = None,
        *,
        clear_errors: bool = True,
    ) -> bool: ...

    def save(
        self,
        *,
        run_validation: bool = True,
        attribute_names: Sequence[str] | None = None,
    ) -> bool: ...

    def delete(self) -> bool: ...
