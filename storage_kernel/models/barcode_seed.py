"""
Module: storage_kernel.models.barcode_seed
Responsibility: Source of location barcode sequence numbers.

Each allocation inserts one row; its database-assigned id is the sequence
value.  Ids come from the database sequence (PostgreSQL) or an
AUTOINCREMENT rowid (SQLite), so committed values only ever increase and
are never handed out twice.
"""

from datetime import datetime

from sqlalchemy import DateTime, func
from sqlalchemy.orm import Mapped, mapped_column

from storage_kernel.db.base import Base


class BarcodeSeed(Base):
    __tablename__ = "barcode_seeds"

    __table_args__ = ({"sqlite_autoincrement": True},)

    allocated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
