"""
Module: storage_kernel.db.base
Responsibility: Declarative base classes for all SQLAlchemy ORM models.
    Provides the integer primary key convention, the type annotation map
    and the TrackedBase mixin for row timestamps.
Architecture position: Kernel > DB.  Lowest-level import target within the
    kernel.  MUST NOT import from models/, services/, selectors/ or outer layers.

Invariants enforced:
    - Integer autoincrement primary keys.  Tables that need ids never to be
      reused after deletion also set ``sqlite_autoincrement``; PostgreSQL
      sequences never reuse values.
    - datetime maps to DateTime(timezone=True).

Failure modes:
    - IntegrityError on constraint violations surfaces at flush or commit.
"""

from datetime import datetime
from typing import ClassVar

from sqlalchemy import DateTime, Integer, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """
    Declarative base for all storage models.

    Guarantees:
        - ``id`` is an INTEGER primary key assigned by the database.
        - datetime maps to DateTime(timezone=True).
    """

    type_annotation_map: ClassVar[dict] = {
        datetime: DateTime(timezone=True),
        # INTEGER (not BIGINT) so SQLite treats the key as the rowid alias
        int: Integer,
    }

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)


class TrackedBase(Base):
    """
    Abstract base with row timestamps.

    Guarantees:
        - created_at is set to server NOW() on INSERT and never changes.
        - updated_at is set on INSERT and refreshed on every UPDATE.
    """

    __abstract__ = True

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
