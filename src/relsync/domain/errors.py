"""Exceptions raised for structural misuse of records and relations.

Per-record validation and persistence failures are not exceptions; they are
reported through boolean results and each record's ``errors``.
"""

from __future__ import annotations


class RelationError(Exception):
    """Base class for relation misuse."""


class UnknownRelationError(RelationError, KeyError):
    """Raised when a relation name was never declared or registered."""

    def __init__(self, owner: str, name: str) -> None:
        super().__init__(f"{owner} has no relation named {name!r}")
        self.owner = owner
        self.name = name

    def __str__(self) -> str:
        return str(self.args[0])


class InvalidRelationRequestError(RelationError, ValueError):
    """Raised when a caller requests a relation that is not kept updated."""


class InvalidLinkError(RelationError, ValueError):
    """Raised when a link names an attribute the record type does not declare."""


class EmptyPreparedInputError(ValueError):
    """Raised when ``prepare()`` turns non-empty input into nothing usable."""


class StoreNotConfiguredError(RuntimeError):
    """Raised when a record touches storage before a store was configured."""
