"""
Pure domain layer.

Grid values, barcode arithmetic, location-tree algorithms and DTOs with
NO dependencies on the database session or any I/O.  Tree algorithms
reach persisted locations only through an injected LocationGraph.
"""

from storage_kernel.domain.barcode_validator import ItemBarcodeValidator
from storage_kernel.domain.barcodes import (
    STORE_PREFIX,
    checksum,
    is_valid_store_barcode,
    store_barcode,
)
from storage_kernel.domain.dtos import (
    ItemInfo,
    LocationEdit,
    LocationIdentifier,
    LocationInfo,
    LocationInput,
    RequestContext,
    SetAddress,
    SetDescription,
    SetParent,
    SetSize,
    StoreInput,
    StoreRecordInfo,
    StoreResult,
    UnstoreResult,
)
from storage_kernel.domain.values import (
    Address,
    AddressRange,
    GridDirection,
    Size,
    address_index,
    all_addresses,
    format_address,
    parse_address,
)

__all__ = [
    "Address",
    "AddressRange",
    "GridDirection",
    "ItemBarcodeValidator",
    "ItemInfo",
    "LocationEdit",
    "LocationIdentifier",
    "LocationInfo",
    "LocationInput",
    "RequestContext",
    "STORE_PREFIX",
    "SetAddress",
    "SetDescription",
    "SetParent",
    "SetSize",
    "Size",
    "StoreInput",
    "StoreRecordInfo",
    "StoreResult",
    "UnstoreResult",
    "address_index",
    "all_addresses",
    "checksum",
    "format_address",
    "is_valid_store_barcode",
    "parse_address",
    "store_barcode",
]
