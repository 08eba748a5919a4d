"""
Module: storage_kernel.models.store_record
Responsibility: Append-only audit rows, one per item placement change.
Architecture position: Kernel > Models.  May import from db/base.py and
    domain/values.py only.

Invariants enforced:
    - Rows are never updated or deleted (db/immutability.py listeners).
    - Unstore records carry no address and no location id.
    - location_id is a plain integer, not a foreign key, so history survives
      any later change to the location tree.

Audit relevance:
    The complete placement history of a barcode is the ordered list of its
    store records, each naming the user and consuming application.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Index, String, func
from sqlalchemy.orm import Mapped, mapped_column

from storage_kernel.db.base import Base
from storage_kernel.domain.values import Address


class StoreRecord(Base):
    """One item stored at, moved to, or removed from a location."""

    __tablename__ = "store_records"

    __table_args__ = (
        Index("idx_store_record_barcode", "barcode"),
        Index("idx_store_record_location", "location_id"),
    )

    recorded: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    barcode: Mapped[str] = mapped_column(String(64), nullable=False)

    row_index: Mapped[int | None] = mapped_column(nullable=True)
    col_index: Mapped[int | None] = mapped_column(nullable=True)

    location_id: Mapped[int | None] = mapped_column(nullable=True)

    username: Mapped[str | None] = mapped_column(String(255), nullable=True)
    app: Mapped[str | None] = mapped_column(String(255), nullable=True)

    @property
    def address(self) -> Address | None:
        if self.row_index is None or self.col_index is None:
            return None
        return Address(self.row_index, self.col_index)

    @address.setter
    def address(self, value: Address | None) -> None:
        self.row_index = value.row if value is not None else None
        self.col_index = value.column if value is not None else None
