"""One-to-many relation reconciliation.

Flow: payload -> ``merge_from_payload`` -> relation assignment (snapshot) ->
``save_all`` / ``delete_all`` -> ``Reconciler`` per relation
(diff -> foreign-key propagation -> validate/save/delete).
"""

from __future__ import annotations

from .bulk import MergeResult, merge_from_payload, merge_identity_only
from .cascade import before_parent_delete, delete_all, errors_all, save_all, validate_all
from .clone import clone_collection, clone_record, filter_collection
from .declare import HasMany, has_many
from .diff import CollectionDiff, diff_collections, identity_key, index_by_identity
from .link import Link
from .reconcile import Reconciler
from .registry import RelationEntry, RelationRegistry
from .results import ChildFailure, FailureKind, Operation, ReconcileResult
from .snapshot import SnapshotStore
from .state import RelationState

__all__ = [
    "ChildFailure",
    "CollectionDiff",
    "FailureKind",
    "HasMany",
    "Link",
    "MergeResult",
    "Operation",
    "ReconcileResult",
    "Reconciler",
    "RelationEntry",
    "RelationRegistry",
    "RelationState",
    "SnapshotStore",
    "before_parent_delete",
    "clone_collection",
    "clone_record",
    "delete_all",
    "diff_collections",
    "errors_all",
    "filter_collection",
    "has_many",
    "identity_key",
    "index_by_identity",
    "merge_from_payload",
    "merge_identity_only",
    "save_all",
    "validate_all",
]
