"""Per-relation reconciliation of a desired collection against its snapshot.

Saving is best-effort and non-transactional: a failing child is recorded and
processing continues with the remaining children. Nothing already written is
rolled back here; wrap calls in a unit of work when atomicity is required.
"""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from relsync.domain.errors import UnknownRelationError
from relsync.domain.model import RECORD_ERROR_KEY, current_store, is_blank_identity
from relsync.domain.relations.clone import filter_collection
from relsync.domain.relations.diff import diff_collections
from relsync.domain.relations.results import (
    ChildFailure,
    FailureKind,
    Operation,
    ReconcileResult,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence

    from relsync.domain.model import BaseRecord, ErrorMap
    from relsync.domain.record import Record
    from relsync.domain.relations.registry import RelationEntry

log = getLogger(__name__)


class Reconciler:
    """Relation operations for one parent record."""

    def __init__(self, parent: Record) -> None:
        self._parent = parent
        self._state = parent.relation_state

    @property
    def _owner(self) -> str:
        return type(self._parent).__name__

    def entry(self, name: str) -> RelationEntry:
        """Resolve ``name``, registering its declaration on first use."""

        registry = self._state.registry
        if name in registry:
            return registry.resolve(name)
        declaration = type(self._parent).__relations__.get(name)
        if declaration is None:
            raise UnknownRelationError(self._owner, name)
        log.debug("Registering relation %s.%s", self._owner, name)
        return declaration.register(registry, type(self._parent))

    def collection(self, name: str) -> list[BaseRecord]:
        """Return the live desired collection, loading persisted children on first read."""

        entry = self.entry(name)
        records = self._state.collections.get(name)
        if records is None:
            records = self._load_persisted(entry)
            self._state.collections[name] = records
        return records

    def _load_persisted(self, entry: RelationEntry) -> list[BaseRecord]:
        key = entry.link.parent_value(self._parent)
        if is_blank_identity(key):
            return []
        records = current_store().find_all(entry.child_type, {entry.link.foreign_key: key})
        log.debug(
            "Loaded %d %s record(s) for %s.%s",
            len(records),
            entry.child_type.__name__,
            self._owner,
            entry.name,
        )
        return list(records)

    def assign(self, name: str, records: Iterable[BaseRecord]) -> None:
        entry = self.entry(name)
        self._state.snapshots.capture(name, self.collection(name))
        assigned = list(records)
        key = self._parent.primary_key
        for record in assigned:
            entry.link.bind(record, key)
        self._state.collections[name] = assigned

    def populate(self, name: str, records: Iterable[BaseRecord]) -> None:
        """Set the desired collection as-is, without snapshotting or key propagation."""

        self.entry(name)
        self._state.collections[name] = list(records)
        self._state.snapshots.ensure(name)

    def sync_snapshot(self, name: str) -> None:
        self.entry(name)
        self._state.snapshots.capture(name, self.collection(name))

    def filter_by(self, name: str, criteria: Mapping[str, object]) -> None:
        self._state.collections[name] = filter_collection(self.collection(name), criteria)

    def validate(
        self,
        name: str,
        attribute_names: Sequence[str] | None = None,
        *,
        clear_errors: bool = True,
    ) -> bool:
        entry = self.entry(name)
        records = self.collection(name)
        if not records:
            return True

        # the foreign key is system-managed and never user-validated
        candidates = (
            attribute_names if attribute_names is not None else records[0].attribute_names()
        )
        selected = [attribute for attribute in candidates if attribute != entry.link.foreign_key]

        valid = True
        for record in records:
            if not record.validate(selected, clear_errors=clear_errors):
                valid = False
        return valid

    def reconcile(
        self,
        name: str,
        *,
        run_validation: bool = True,
        attribute_names: Sequence[str] | None = None,
    ) -> ReconcileResult:
        entry = self.entry(name)
        plan = diff_collections(self._state.snapshots.get(name), self.collection(name))
        result = ReconcileResult(relation=name)

        for record in plan.upsert:
            # the parent key may only exist now, e.g. right after the parent's insert
            entry.link.bind(record, entry.link.parent_value(self._parent))
            if record.save(run_validation=run_validation, attribute_names=attribute_names):
                result.saved.append(record)
                continue
            kind = (
                FailureKind.PERSISTENCE
                if RECORD_ERROR_KEY in record.errors
                else FailureKind.VALIDATION
            )
            result.failures.append(ChildFailure(record, Operation.SAVE, kind))
            log.warning("Failed to save %r in %s.%s: %s", record, self._owner, name, record.errors)

        for record in plan.remove:
            if record.delete():
                result.deleted.append(record)
                continue
            result.failures.append(ChildFailure(record, Operation.DELETE, FailureKind.PERSISTENCE))
            log.warning(
                "Failed to delete %r in %s.%s: %s", record, self._owner, name, record.errors
            )

        log.info(
            "Reconciled %s.%s: saved=%d, deleted=%d, failed=%d",
            self._owner,
            name,
            len(result.saved),
            len(result.deleted),
            len(result.failures),
        )
        return result

    def save(
        self,
        name: str,
        *,
        run_validation: bool = True,
        attribute_names: Sequence[str] | None = None,
    ) -> bool:
        return self.reconcile(
            name,
            run_validation=run_validation,
            attribute_names=attribute_names,
        ).succeeded

    def delete(self, name: str) -> bool:
        success = True
        for record in list(self.collection(name)):
            if not record.delete():
                success = False
                log.warning("Failed to delete %r in %s.%s", record, self._owner, name)
        return success

    def errors(self, name: str) -> list[ErrorMap]:
        return [record.errors for record in self.collection(name) if record.errors]
