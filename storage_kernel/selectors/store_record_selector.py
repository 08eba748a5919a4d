"""
StoreRecordSelector -- read access to the placement audit trail.

Returns StoreRecordInfo DTOs: audit rows are never acted on by services,
so nothing here hands out ORM instances.
"""

from __future__ import annotations

from sqlalchemy import func, select

from storage_kernel.domain.dtos import StoreRecordInfo
from storage_kernel.models.store_record import StoreRecord
from storage_kernel.selectors.base import BaseSelector


class StoreRecordSelector(BaseSelector):
    def history_for_barcode(self, barcode: str) -> list[StoreRecordInfo]:
        """Every record for an item barcode, oldest first."""
        stmt = (
            select(StoreRecord)
            .where(func.upper(StoreRecord.barcode) == barcode.upper())
            .order_by(StoreRecord.id)
        )
        return [StoreRecordInfo.from_model(r) for r in self.session.scalars(stmt)]

    def records_for_location(self, location_id: int) -> list[StoreRecordInfo]:
        """Records of items stored into a location, oldest first."""
        stmt = (
            select(StoreRecord)
            .where(StoreRecord.location_id == location_id)
            .order_by(StoreRecord.id)
        )
        return [StoreRecordInfo.from_model(r) for r in self.session.scalars(stmt)]

    def count(self) -> int:
        return self.session.scalar(select(func.count()).select_from(StoreRecord)) or 0
