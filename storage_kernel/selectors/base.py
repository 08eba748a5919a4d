"""
Module: storage_kernel.selectors.base
Responsibility: Abstract base class for read-only query selectors, the
    query side of the kernel's command/query split.
Architecture position: Kernel > Selectors.  May import from db/, models/
    and domain/.  MUST NOT import from services/ or outer layers.

Invariants enforced:
    - Read-only access: selectors never call session.add(), delete(),
      commit() or flush().
    - Session ownership: selectors never create sessions; the caller owns
      the session and its transaction, so every query sees the state
      visible inside that transaction (including flushed, uncommitted
      deletes).
    - Selectors used by services inside a transaction return ORM rows so
      services can act on them; results leaving the engine are converted
      to DTOs by the PlacementEngine.
"""

from abc import ABC

from sqlalchemy.orm import Session


class BaseSelector(ABC):
    """
    Abstract base class for all selectors.

    Contract:
        Accept a Session from the caller and perform read-only queries.
    """

    def __init__(self, session: Session):
        self.session = session
