"""ORM models for the storage kernel."""

from storage_kernel.models.barcode_seed import BarcodeSeed
from storage_kernel.models.item import Item
from storage_kernel.models.location import Location
from storage_kernel.models.store_record import StoreRecord

__all__ = [
    "BarcodeSeed",
    "Item",
    "Location",
    "StoreRecord",
]
