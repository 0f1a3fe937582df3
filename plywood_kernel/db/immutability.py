"""
Append-only enforcement for the plywood kernel (ORM layer).

===============================================================================
WHAT IS PROTECTED
===============================================================================

    Entity              | UPDATE                         | DELETE
    --------------------|--------------------------------|--------
    Stage log rows      | refused                        | refused
    PlywoodSetting      | refused                        | refused
    Warehouse           | refused                        | refused
    Lot                 | structural fields refused      | refused
    FinishedGood        | all but status refused         | refused

Lot quantity is NOT guarded here: the engine debits with a Core UPDATE
statement (``quantity = quantity - :amount WHERE quantity >= :amount``),
which does not pass through mapper events, and the CHECK constraint on the
table is the last line of defence.

Listeners are attached to mapped classes globally.  ``register_immutability_
listeners()`` is idempotent and is called by every LedgerStore on
construction.

To temporarily disable (TESTS ONLY - never in production):

    from plywood_kernel.db.immutability import unregister_immutability_listeners
    unregister_immutability_listeners()
    # ... do forbidden operation ...
    register_immutability_listeners()
"""

from sqlalchemy import event, inspect

from plywood_kernel.exceptions import ImmutabilityViolationError
from plywood_kernel.logging_config import get_logger

logger = get_logger("db.immutability")

_AUDIT_FIELDS = frozenset({"updated_at", "updated_by_id"})

_LOT_MUTABLE_FIELDS = frozenset({"quantity", "status", "note"}) | _AUDIT_FIELDS

_FINISHED_GOOD_MUTABLE_FIELDS = frozenset({"status"})


def _blocked(entity_type: str, target, operation: str, reason: str, field: str | None = None):
    logger.error(
        "immutability_violation_blocked",
        extra={
            "entity_type": entity_type,
            "entity_id": str(target.id),
            "operation": operation,
            "field": field,
        },
    )
    return ImmutabilityViolationError(
        entity_type=entity_type,
        entity_id=str(target.id),
        reason=reason,
    )


def _changed_fields(target) -> list[str]:
    return [attr.key for attr in inspect(target).attrs if attr.history.has_changes()]


def _check_append_only_update(mapper, connection, target):
    """Refuse any field change on an append-only row (audit fields excepted)."""
    for key in _changed_fields(target):
        if key in _AUDIT_FIELDS:
            continue
        entity_type = type(target).__name__
        raise _blocked(
            entity_type,
            target,
            "UPDATE",
            f"Cannot modify field '{key}' on append-only {entity_type}",
            field=key,
        )


def _check_append_only_delete(mapper, connection, target):
    entity_type = type(target).__name__
    raise _blocked(
        entity_type,
        target,
        "DELETE",
        f"{entity_type} records cannot be deleted",
    )


def _check_lot_structural_immutability(mapper, connection, target):
    """
    Allow quantity/status/note to change; refuse everything else.

    Kind, thickness, unit, supplier and warehouse define what the lot IS.
    Moving material between warehouses is done by a stage, which debits
    this lot and credits a new one.
    """
    for key in _changed_fields(target):
        if key in _LOT_MUTABLE_FIELDS:
            continue
        raise _blocked(
            "Lot",
            target,
            "UPDATE",
            f"Cannot modify structural field '{key}' on a lot",
            field=key,
        )


def _check_finished_good_update(mapper, connection, target):
    for key in _changed_fields(target):
        if key in _FINISHED_GOOD_MUTABLE_FIELDS:
            continue
        raise _blocked(
            "FinishedGood",
            target,
            "UPDATE",
            f"Cannot modify field '{key}' on a finished good",
            field=key,
        )


def _listener_table():
    from plywood_kernel.models.finished_good import FinishedGood
    from plywood_kernel.models.lot import Lot
    from plywood_kernel.models.setting import PlywoodSetting
    from plywood_kernel.models.stage_log import STAGE_LOG_MODELS
    from plywood_kernel.models.warehouse import Warehouse

    table = []
    for model in STAGE_LOG_MODELS.values():
        table.append((model, "before_update", _check_append_only_update))
        table.append((model, "before_delete", _check_append_only_delete))

    table.extend([
        (PlywoodSetting, "before_update", _check_append_only_update),
        (PlywoodSetting, "before_delete", _check_append_only_delete),
        (Warehouse, "before_update", _check_append_only_update),
        (Warehouse, "before_delete", _check_append_only_delete),
        (Lot, "before_update", _check_lot_structural_immutability),
        (Lot, "before_delete", _check_append_only_delete),
        (FinishedGood, "before_update", _check_finished_good_update),
        (FinishedGood, "before_delete", _check_append_only_delete),
    ])
    return table


def register_immutability_listeners() -> None:
    """
    Register all append-only enforcement listeners (idempotent).

    Call after all models are imported and before any session is used.
    """
    for target, event_name, listener_fn in _listener_table():
        if not event.contains(target, event_name, listener_fn):
            event.listen(target, event_name, listener_fn)


def unregister_immutability_listeners() -> None:
    """
    Remove append-only enforcement listeners.

    WARNING: Only use this in tests where you need to intentionally
    violate immutability rules to verify detection.
    """
    for target, event_name, listener_fn in _listener_table():
        if event.contains(target, event_name, listener_fn):
            event.remove(target, event_name, listener_fn)
