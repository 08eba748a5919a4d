"""
StoreRecordService -- writes the append-only placement audit trail.

One StoreRecord per item change, carrying the caller's username and app.
Store records hold the item's final location and address; unstore records
hold neither.
"""

from __future__ import annotations

from collections.abc import Iterable

from storage_kernel.domain.dtos import RequestContext
from storage_kernel.logging_config import get_logger
from storage_kernel.models.item import Item
from storage_kernel.models.store_record import StoreRecord
from storage_kernel.services.base import BaseService

logger = get_logger("services.store_record")


class StoreRecordService(BaseService):
    def record_stores(self, context: RequestContext, items: Iterable[Item]) -> list[StoreRecord]:
        records = [
            StoreRecord(
                barcode=item.barcode,
                address=item.address,
                location_id=item.location_id,
                username=context.username,
                app=context.app,
            )
            for item in items
        ]
        return self._save(records, "store")

    def record_unstores(self, context: RequestContext, items: Iterable[Item]) -> list[StoreRecord]:
        records = [
            StoreRecord(
                barcode=item.barcode,
                address=None,
                location_id=None,
                username=context.username,
                app=context.app,
            )
            for item in items
        ]
        return self._save(records, "unstore")

    def _save(self, records: list[StoreRecord], kind: str) -> list[StoreRecord]:
        if records:
            self.session.add_all(records)
            self.session.flush()
        logger.debug("store_records_written", extra={"kind": kind, "count": len(records)})
        return records
