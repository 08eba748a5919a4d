"""
ORM-level append-only enforcement for store records.

Every item placement change leaves one StoreRecord behind.  These rows
are the audit trail: once written they are never changed or removed.
SQLAlchemy fires mapper events before UPDATE/DELETE statements reach the
database; the listeners here raise ImmutabilityViolationError so the
flush aborts and the enclosing transaction rolls back.

    session.flush()
         |
         v
    [before_update] --> _check_store_record_update() --> ImmutabilityViolationError
    [before_delete] --> _check_store_record_delete() --> ImmutabilityViolationError

Bulk ``update()``/``delete()`` statements bypass mapper events; the kernel
never issues them against store records.
"""

from sqlalchemy import event

from storage_kernel.exceptions import ImmutabilityViolationError
from storage_kernel.logging_config import get_logger

logger = get_logger("db.immutability")


def _blocked(target, operation: str, reason: str) -> ImmutabilityViolationError:
    logger.error(
        "immutability_violation_blocked",
        extra={
            "entity_type": "StoreRecord",
            "entity_id": str(target.id),
            "operation": operation,
        },
    )
    return ImmutabilityViolationError(
        entity_type="StoreRecord",
        entity_id=str(target.id),
        reason=reason,
    )


def _check_store_record_update(mapper, connection, target):
    raise _blocked(target, "UPDATE", "Store records are append-only and cannot be modified")


def _check_store_record_delete(mapper, connection, target):
    raise _blocked(target, "DELETE", "Store records cannot be deleted")


def register_immutability_listeners():
    """
    Register the append-only listeners.  Idempotent.

    Call during application start-up, before any database work.
    """
    from storage_kernel.models.store_record import StoreRecord

    if not event.contains(StoreRecord, "before_update", _check_store_record_update):
        event.listen(StoreRecord, "before_update", _check_store_record_update)
    if not event.contains(StoreRecord, "before_delete", _check_store_record_delete):
        event.listen(StoreRecord, "before_delete", _check_store_record_delete)


def unregister_immutability_listeners():
    """
    Remove the append-only listeners.

    WARNING: Only for tests that need to tamper with records deliberately.
    """
    from storage_kernel.models.store_record import StoreRecord

    for name, fn in (
        ("before_update", _check_store_record_update),
        ("before_delete", _check_store_record_delete),
    ):
        if event.contains(StoreRecord, name, fn):
            event.remove(StoreRecord, name, fn)
