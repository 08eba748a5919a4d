"""
BarcodeAllocator -- new location barcodes from a database sequence.

Responsibility:
    Allocates the next sequence value by inserting a BarcodeSeed row and
    renders it as a checksummed ``STO-`` barcode.

Architecture position:
    Kernel > Services.  Called by LocationService when a location is created.

Invariants enforced:
    - Sequence values come from the database's own id generator, so
      committed values increase monotonically and are never reused.
    - Every barcode verifies with ``domain.barcodes.is_valid_store_barcode``.

Failure modes:
    - Database errors from the insert propagate to the caller's transaction.
"""

from storage_kernel.domain.barcodes import STORE_PREFIX, store_barcode
from storage_kernel.logging_config import get_logger
from storage_kernel.models.barcode_seed import BarcodeSeed
from storage_kernel.services.base import BaseService

logger = get_logger("services.barcode_allocator")


class BarcodeAllocator(BaseService):
    """
    Contract:
        Each call consumes one sequence value and returns its barcode.

    Guarantees:
        - Two calls never return the same barcode.
    """

    prefix = STORE_PREFIX

    def next_sequence_value(self) -> int:
        seed = BarcodeSeed()
        self.session.add(seed)
        self.session.flush()
        logger.debug("sequence_allocated", extra={"value": seed.id})
        return seed.id

    def next_store_barcode(self) -> str:
        return store_barcode(self.next_sequence_value(), self.prefix)
