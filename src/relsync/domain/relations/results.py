"""Outcome types for relation reconciliation."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from relsync.domain.model import BaseRecord


class FailureKind(StrEnum):
    VALIDATION = "validation"
    PERSISTENCE = "persistence"


class Operation(StrEnum):
    SAVE = "save"
    DELETE = "delete"


@dataclass(frozen=True, slots=True)
class ChildFailure:
    """A child record that could not be saved or deleted; details live in its ``errors``."""

    record: BaseRecord
    operation: Operation
    kind: FailureKind


@dataclass(slots=True)
class ReconcileResult:
    """Summary of one relation's save pass."""

    relation: str
    saved: list[BaseRecord] = field(default_factory=list["BaseRecord"])
    deleted: list[BaseRecord] = field(default_factory=list["BaseRecord"])
    failures: list[ChildFailure] = field(default_factory=list[ChildFailure])

    @property
    def succeeded(self) -> bool:
        return not self.failures

    def failures_of(self, kind: FailureKind) -> tuple[ChildFailure, ...]:
        return tuple(failure for failure in self.failures if failure.kind is kind)
