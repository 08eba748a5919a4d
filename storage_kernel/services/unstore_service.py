"""
UnstoreService -- remove items from storage.

Removes items by barcode or empties a location, writing one unstore
record (no location, no address) per removed item.  Barcodes that match
nothing, and locations with nothing in them, are not errors.
"""

from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy.orm import Session

from storage_kernel.domain.dtos import LocationIdentifier, RequestContext
from storage_kernel.logging_config import get_logger
from storage_kernel.models.item import Item
from storage_kernel.selectors.item_selector import ItemSelector
from storage_kernel.selectors.location_selector import LocationSelector
from storage_kernel.services.base import BaseService, require_context
from storage_kernel.services.store_record_service import StoreRecordService

logger = get_logger("services.unstore")


class UnstoreService(BaseService):
    def __init__(self, session: Session):
        super().__init__(session)
        self._items = ItemSelector(session)
        self._locations = LocationSelector(session)
        self._records = StoreRecordService(session)

    def unstore_barcode(self, context: RequestContext, barcode: str) -> Item | None:
        """Remove one item; None if nothing is stored under ``barcode``."""
        require_context(context, "unstore_barcode")
        item = self._items.find_by_barcode(barcode)
        if item is None:
            return None
        return self.unstore_items(context, [item])[0]

    def unstore_barcodes(self, context: RequestContext, barcodes: Iterable[str]) -> list[Item]:
        require_context(context, "unstore_barcodes")
        return self.unstore_items(context, self._items.find_by_barcodes(barcodes))

    def empty(self, context: RequestContext, identifier: LocationIdentifier) -> list[Item]:
        """Remove everything stored directly in a location."""
        require_context(context, "empty")
        location = self._locations.get(identifier)
        return self.unstore_items(context, self._items.stored_in(location.id))

    def unstore_items(self, context: RequestContext, items: list[Item]) -> list[Item]:
        if not items:
            return []
        for item in items:
            self.session.delete(item)
        self.session.flush()
        self._records.record_unstores(context, items)
        logger.info(
            "items_unstored",
            extra={
                "count": len(items),
                "location_ids": sorted({item.location_id for item in items}),
            },
        )
        return items
