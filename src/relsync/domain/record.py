"""Records with reconciled one-to-many relations.

Typical request flow::

    order = store_lookup(Order, order_id)
    if order.load(payload):
        order.load_relations(payload, ["lines"])
        if order.save() and order.save_relations():
            ...
        else:
            report(order.errors, order.relations_errors())
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, ClassVar, Self, cast

from relsync.config.reconcile import get_reconcile_config
from relsync.domain.errors import InvalidRelationRequestError
from relsync.domain.model import BaseRecord
from relsync.domain.relations import cascade
from relsync.domain.relations.bulk import merge_from_payload, merge_identity_only
from relsync.domain.relations.clone import clone_collection, clone_record
from relsync.domain.relations.declare import collect_declarations
from relsync.domain.relations.reconcile import Reconciler
from relsync.domain.relations.state import RelationState

if TYPE_CHECKING:
    from collections.abc import Iterable

    from relsync.domain.model import AttributeMap, ErrorMap
    from relsync.domain.relations.bulk import Rows
    from relsync.domain.relations.declare import HasMany
    from relsync.domain.relations.results import ReconcileResult


@dataclass(eq=False, kw_only=True)
class Record(BaseRecord):
    """Persisted record that keeps its declared ``has_many`` relations in sync."""

    __relations__: ClassVar[dict[str, HasMany[Any]]] = {}

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        cls.__relations__ = collect_declarations(cls)

    @property
    def relation_state(self) -> RelationState:
        state = vars(self).get("_relation_state")
        if state is None:
            state = RelationState.for_owner(type(self).__name__)
            vars(self)["_relation_state"] = state
        return state

    @property
    def _reconciler(self) -> Reconciler:
        return Reconciler(self)

    @classmethod
    def relations_to_keep_updated(cls) -> dict[str, type[BaseRecord]]:
        """Relation name -> child type for relations loaded from input and cascaded on delete."""

        return {
            name: declaration.child_type
            for name, declaration in cls.__relations__.items()
            if declaration.keep_updated
        }

    # Single relation ---------------------------------------------------------

    def relation(self, name: str) -> list[Any]:
        return self._reconciler.collection(name)

    def assign_relation(self, name: str, records: Iterable[BaseRecord]) -> None:
        self._reconciler.assign(name, records)

    def populate_relation(self, name: str, records: Iterable[BaseRecord]) -> None:
        self._reconciler.populate(name, records)

    def sync_relation_snapshot(self, name: str) -> None:
        """Make the current collection the baseline for the next save."""
        self._reconciler.sync_snapshot(name)

    def validate_relation(
        self,
        name: str,
        attribute_names: Sequence[str] | None = None,
        *,
        clear_errors: bool = True,
    ) -> bool:
        return self._reconciler.validate(name, attribute_names, clear_errors=clear_errors)

    def reconcile_relation(
        self,
        name: str,
        *,
        run_validation: bool = True,
        attribute_names: Sequence[str] | None = None,
    ) -> ReconcileResult:
        return self._reconciler.reconcile(
            name,
            run_validation=run_validation,
            attribute_names=attribute_names,
        )

    def save_relation(
        self,
        name: str,
        *,
        run_validation: bool = True,
        attribute_names: Sequence[str] | None = None,
    ) -> bool:
        return self._reconciler.save(
            name,
            run_validation=run_validation,
            attribute_names=attribute_names,
        )

    def delete_relation(self, name: str) -> bool:
        return self._reconciler.delete(name)

    def relation_errors(self, name: str) -> list[ErrorMap]:
        return self._reconciler.errors(name)

    def clone_relation(self, name: str) -> list[Any]:
        return clone_collection(self._reconciler.collection(name))

    def filter_relation(self, name: str, criteria: Mapping[str, object]) -> None:
        self._reconciler.filter_by(name, criteria)

    # All relations -----------------------------------------------------------

    def validate_relations(self) -> bool:
        return cascade.validate_all(self)

    def save_relations(self, *, run_validation: bool | None = None) -> bool:
        return cascade.save_all(self, run_validation=run_validation)

    def delete_relations(self) -> bool:
        return cascade.delete_all(self)

    def relations_errors(self) -> dict[str, list[ErrorMap]]:
        return cascade.errors_all(self)

    def before_delete(self) -> bool:
        if not super().before_delete():
            return False
        cascade.before_parent_delete(self)
        return True

    # Input -------------------------------------------------------------------

    def load_relations(self, data: AttributeMap, names: Iterable[str]) -> bool:
        """Merge payload rows into the named relations; ``True`` if any relation had input."""

        available = self.relations_to_keep_updated()
        requested = list(names)
        for name in requested:
            if name not in available:
                raise InvalidRelationRequestError(
                    f"{type(self).__name__}.{name} is not declared as kept updated"
                )

        identity_field = get_reconcile_config().payload_identity_field
        loaded = False
        for name in requested:
            result = merge_from_payload(
                available[name],
                self.relation(name),
                data,
                identity_field=identity_field,
            )
            if result.has_input:
                self.assign_relation(name, result.records)
                loaded = True
        return loaded

    def load_relation_primaries(self, data: AttributeMap) -> bool:
        """Back-fill child identities by position for every kept-updated relation."""

        identity_field = get_reconcile_config().payload_identity_field
        loaded = False
        for name, child_type in self.relations_to_keep_updated().items():
            rows = data.get(child_type.scope_name())
            if not isinstance(rows, Mapping | Sequence) or isinstance(rows, str):
                continue
            records = merge_identity_only(
                self.relation(name),
                cast("Rows", rows),
                identity_field=identity_field,
            )
            self.assign_relation(name, records)
            loaded = True
        return loaded

    def deep_clone(self) -> Self:
        """Unsaved copy of this record and of every kept-updated relation's children."""

        clone = clone_record(self)
        for name in self.relations_to_keep_updated():
            clone.populate_relation(name, self.clone_relation(name))
        return clone
