"""Record-level fan-out of relation operations.

``validate_all``, ``save_all``, ``delete_all`` and ``errors_all`` cover every
relation that has been assigned at least once (i.e. has a snapshot);
``before_parent_delete`` covers every relation declared as kept updated.
"""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from relsync.config.reconcile import get_reconcile_config
from relsync.domain.relations.reconcile import Reconciler

if TYPE_CHECKING:
    from relsync.domain.model import ErrorMap
    from relsync.domain.record import Record

log = getLogger(__name__)

RELATION_DELETE_FAILED = "Related records could not be deleted."


def assigned_relations(parent: Record) -> tuple[str, ...]:
    return parent.relation_state.snapshots.names()


def validate_all(parent: Record) -> bool:
    reconciler = Reconciler(parent)
    valid = True
    for name in assigned_relations(parent):
        if not reconciler.validate(name):
            valid = False
    return valid


def save_all(parent: Record, *, run_validation: bool | None = None) -> bool:
    if run_validation is None:
        run_validation = get_reconcile_config().validate_before_save
    if run_validation and not validate_all(parent):
        log.info("Relations of %s not saved due to validation errors", type(parent).__name__)
        return False

    reconciler = Reconciler(parent)
    success = True
    for name in assigned_relations(parent):
        if not reconciler.save(name, run_validation=False):
            success = False
    return success


def delete_all(parent: Record) -> bool:
    reconciler = Reconciler(parent)
    success = True
    for name in assigned_relations(parent):
        if not reconciler.delete(name):
            success = False
    return success


def errors_all(parent: Record) -> dict[str, list[ErrorMap]]:
    reconciler = Reconciler(parent)
    errors: dict[str, list[ErrorMap]] = {}
    for name in assigned_relations(parent):
        relation_errors = reconciler.errors(name)
        if relation_errors:
            errors[name] = relation_errors
    return errors


def before_parent_delete(parent: Record) -> bool:
    """Delete the children of every kept-updated relation.

    The aggregate result is advisory: failures are logged and added to the
    parent's errors under the relation name, and callers still go on to
    remove the parent row.
    """

    reconciler = Reconciler(parent)
    success = True
    for name in parent.relations_to_keep_updated():
        if reconciler.delete(name):
            continue
        success = False
        parent.add_error(name, RELATION_DELETE_FAILED)
        log.warning("Could not delete all %s of %s", name, type(parent).__name__)
    return success
