"""
Module: storage_kernel.models.item
Responsibility: ORM persistence for barcoded items and where they are stored.
Architecture position: Kernel > Models.  May import from db/base.py and
    domain/values.py only.

Invariants enforced:
    - Item barcodes are unique regardless of case (unique index on
      ``upper(barcode)``).
    - (location_id, row_index, col_index) is unique: at most one item per
      address in a location.  When two transactions race for an address
      the later commit fails with IntegrityError.
    - Every item belongs to exactly one location.

Failure modes:
    - IntegrityError on barcode or address collision, or a missing location.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Index, Integer, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from storage_kernel.db.base import Base
from storage_kernel.domain.values import Address

if TYPE_CHECKING:
    from storage_kernel.models.location import Location


class Item(Base):
    """
    A barcoded physical object placed in a location.

    Items are replaced, not moved: storing a barcode again deletes the
    existing row and inserts a new one.
    """

    __tablename__ = "items"

    __table_args__ = (
        UniqueConstraint(
            "location_id", "row_index", "col_index", name="uq_item_location_address"
        ),
        Index("idx_item_location", "location_id"),
    )

    barcode: Mapped[str] = mapped_column(String(64), nullable=False)

    location_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("locations.id"),
        nullable=False,
    )

    row_index: Mapped[int | None] = mapped_column(nullable=True)
    col_index: Mapped[int | None] = mapped_column(nullable=True)

    @property
    def address(self) -> Address | None:
        if self.row_index is None or self.col_index is None:
            return None
        return Address(self.row_index, self.col_index)

    @address.setter
    def address(self, value: Address | None) -> None:
        self.row_index = value.row if value is not None else None
        self.col_index = value.column if value is not None else None

    def address_index(self, location: Location) -> int | None:
        """Sequence index of this item's address within ``location``'s grid."""
        if location.id != self.location_id:
            return None
        return location.address_index(self.address)

    def __repr__(self) -> str:
        return (
            f"<Item id={self.id} barcode={self.barcode!r} "
            f"location_id={self.location_id} address={self.address}>"
        )


Index("uq_item_barcode_ci", func.upper(Item.barcode), unique=True)
