"""
ORM-level immutability enforcement for status history (layer 1 of 2).

===============================================================================
WHY THIS EXISTS
===============================================================================

A status timeline is an audit log: an accepted transition is recorded once and
never rewritten.  Correcting a status means appending a new entry.

  Layer 1: THIS FILE (ORM event listeners)
    - Catches modifications made through SQLAlchemy objects
    - Fires BEFORE the SQL is sent to the database

  Layer 2: db/triggers.py (database triggers)
    - Catches raw SQL, bulk UPDATE/DELETE statements, direct console access

===============================================================================
HOW IT WORKS
===============================================================================

    session.flush()
         |
         v
    [before_update] --> _check_status_entry_immutability() --> ImmutabilityViolationError
    [before_delete] --> _check_status_entry_delete() ---------> ImmutabilityViolationError
         |
         v
    SQL sent to database (only for INSERTs)

===============================================================================
USAGE
===============================================================================

    from status_recorder.db.immutability import register_immutability_listeners
    register_immutability_listeners()  # once at startup (bootstrap() does it)

Tests that must write around the guard may call
``unregister_immutability_listeners()`` and re-register afterwards.
"""

from sqlalchemy import event

from status_recorder.exceptions import ImmutabilityViolationError
from status_recorder.logging_config import get_logger

logger = get_logger("db.immutability")


def _check_status_entry_immutability(mapper, connection, target):
    """Prevent any update to a StatusHistoryEntry."""
    from status_recorder.models.status import StatusHistoryEntry

    if not isinstance(target, StatusHistoryEntry):
        return

    logger.error(
        "immutability_violation_blocked",
        extra={
            "entity_type": "StatusHistoryEntry",
            "entity_id": str(target.id),
            "operation": "UPDATE",
        },
    )
    raise ImmutabilityViolationError(
        entity_type="StatusHistoryEntry",
        entity_id=str(target.id),
        reason="Status history entries are immutable and cannot be modified",
    )


def _check_status_entry_delete(mapper, connection, target):
    """Prevent deletion of a StatusHistoryEntry."""
    from status_recorder.models.status import StatusHistoryEntry

    if not isinstance(target, StatusHistoryEntry):
        return

    logger.error(
        "immutability_violation_blocked",
        extra={
            "entity_type": "StatusHistoryEntry",
            "entity_id": str(target.id),
            "operation": "DELETE",
        },
    )
    raise ImmutabilityViolationError(
        entity_type="StatusHistoryEntry",
        entity_id=str(target.id),
        reason="Status history entries cannot be deleted",
    )


def register_immutability_listeners():
    """
    Register the immutability listeners (idempotent).

    Call after models are imported and before any database writes.
    """
    from status_recorder.models.status import StatusHistoryEntry

    for event_name, listener_fn in (
        ("before_update", _check_status_entry_immutability),
        ("before_delete", _check_status_entry_delete),
    ):
        if not event.contains(StatusHistoryEntry, event_name, listener_fn):
            event.listen(StatusHistoryEntry, event_name, listener_fn)


def _safe_remove_listener(target, event_name, listener_fn):
    """Remove an event listener, ignoring one that was never registered."""
    if event.contains(target, event_name, listener_fn):
        event.remove(target, event_name, listener_fn)


def unregister_immutability_listeners():
    """
    Remove the immutability listeners.

    WARNING: Only use this in tests that intentionally violate immutability
    to verify detection by the database triggers.
    """
    from status_recorder.models.status import StatusHistoryEntry

    _safe_remove_listener(StatusHistoryEntry, "before_update", _check_status_entry_immutability)
    _safe_remove_listener(StatusHistoryEntry, "before_delete", _check_status_entry_delete)
