"""Read-only query selectors for the storage kernel."""

from storage_kernel.selectors.item_selector import ItemSelector
from storage_kernel.selectors.location_selector import LocationSelector
from storage_kernel.selectors.store_record_selector import StoreRecordSelector

__all__ = [
    "ItemSelector",
    "LocationSelector",
    "StoreRecordSelector",
]
