"""
BaseService -- abstract base for write-side kernel services.

Responsibility:
    Common constructor and session contract for every service: a service
    receives a SQLAlchemy ``Session`` and persists through
    ``session.flush()``, never ``session.commit()``.

Architecture position:
    Kernel > Services -- imperative shell.  The PlacementEngine's
    transaction runner is the only place that commits or rolls back.

Invariants enforced:
    - Services flush within the caller's transaction.  A store, transfer
      or unstore touches items, locations and store records; all of it
      commits or rolls back together.
    - Mutating entry points refuse to run without a RequestContext.
"""

from abc import ABC

from sqlalchemy.orm import Session

from storage_kernel.domain.dtos import RequestContext
from storage_kernel.exceptions import MissingContextError


class BaseService(ABC):
    """
    Contract:
        Accepts a ``Session`` from the caller and flushes changes into the
        active transaction.

    Non-goals:
        - Does NOT commit or roll back.
        - Does NOT provide read-only queries; those live in selectors/.
    """

    def __init__(self, session: Session):
        self.session = session


def require_context(context: RequestContext | None, operation: str) -> RequestContext:
    """Fail fast with MissingContextError when no caller identity is given."""
    if context is None:
        raise MissingContextError(operation)
    return context
