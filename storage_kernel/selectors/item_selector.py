"""
ItemSelector -- stored item lookups.

All barcode matching is case-insensitive.  Queries run inside the caller's
transaction, so items deleted and flushed earlier in the same request are
already gone.
"""

from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import func, select

from storage_kernel.domain.values import Address
from storage_kernel.models.item import Item
from storage_kernel.selectors.base import BaseSelector


class ItemSelector(BaseSelector):
    def find_by_barcode(self, barcode: str) -> Item | None:
        stmt = select(Item).where(func.upper(Item.barcode) == barcode.upper())
        return self.session.scalars(stmt).first()

    def find_by_barcodes(self, barcodes: Iterable[str]) -> list[Item]:
        keys = {bc.upper() for bc in barcodes}
        if not keys:
            return []
        stmt = (
            select(Item)
            .where(func.upper(Item.barcode).in_(keys))
            .order_by(Item.id)
        )
        return list(self.session.scalars(stmt))

    def stored_in(self, location_id: int) -> list[Item]:
        """Items stored directly in a location, oldest first."""
        stmt = select(Item).where(Item.location_id == location_id).order_by(Item.id)
        return list(self.session.scalars(stmt))

    def occupant_at(self, location_id: int, address: Address) -> Item | None:
        stmt = select(Item).where(
            Item.location_id == location_id,
            Item.row_index == address.row,
            Item.col_index == address.column,
        )
        return self.session.scalars(stmt).first()
