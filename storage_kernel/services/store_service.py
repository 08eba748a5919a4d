"""
StoreService -- store and transfer items.

Responsibility:
    Places items into locations: a single barcode with an optional
    address, a batch of unaddressed barcodes into one location, a general
    batch across many locations, and the transfer of a location's whole
    contents into another location.

Architecture position:
    Kernel > Services.  Runs inside the PlacementEngine's transaction and
    only flushes.

Invariants enforced:
    - Storing is replace-by-barcode: any existing item with the same
      barcode (in any location) is deleted and flushed before the new row
      is inserted, so re-storing is idempotent and an item can move to a
      new address in the same location.
    - Every stored item gets exactly one StoreRecord.
    - Validation (barcodes, locations, placements) completes before the
      first write.

Failure modes:
    - InvalidBarcodesError, LocationNotFoundError, UnknownLocationError,
      MissingLocationError, PlacementConflictError, InvalidTransferError,
      MissingContextError.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from sqlalchemy.orm import Session

from storage_kernel.domain.barcode_validator import ItemBarcodeValidator
from storage_kernel.domain.dtos import LocationIdentifier, RequestContext, StoreInput
from storage_kernel.domain.values import Address
from storage_kernel.exceptions import (
    InvalidTransferError,
    MissingLocationError,
    PlacementConflictError,
)
from storage_kernel.logging_config import get_logger
from storage_kernel.models.item import Item
from storage_kernel.selectors.item_selector import ItemSelector
from storage_kernel.selectors.location_selector import LocationSelector
from storage_kernel.services.base import BaseService, require_context
from storage_kernel.services.location_cache import LocationCache
from storage_kernel.services.placement_validator import Placement, PlacementValidator
from storage_kernel.services.store_record_service import StoreRecordService
from storage_kernel.utils.ci_string_set import CaseInsensitiveStringSet

logger = get_logger("services.store")


def _specified(identifier: LocationIdentifier | None) -> bool:
    return identifier is not None and identifier.is_specified


class StoreService(BaseService):
    """
    Contract:
        Each public method validates its whole input, then replaces items
        by barcode and records the change.  Returned Item rows belong to
        the caller's session.

    Non-goals:
        - Does not commit; a failure after a flush is undone by the
          caller's rollback.
    """

    def __init__(
        self,
        session: Session,
        barcode_validator: ItemBarcodeValidator | None = None,
    ):
        super().__init__(session)
        self._barcode_validator = barcode_validator or ItemBarcodeValidator()
        self._locations = LocationSelector(session)
        self._items = ItemSelector(session)
        self._placement_validator = PlacementValidator(self._items)
        self._records = StoreRecordService(session)

    def store_barcode(
        self,
        context: RequestContext,
        barcode: str,
        identifier: LocationIdentifier,
        address: Address | None = None,
    ) -> Item:
        """
        Store one item, optionally at an address.

        Preconditions: ``context`` is not None.
        Postconditions: exactly one item with this barcode exists, in the
            resolved location at ``address``.

        Raises:
            InvalidBarcodesError: barcode fails shape rules.
            LocationNotFoundError: the location does not exist.
            PlacementConflictError: address outside the location's Size,
                or occupied by an item with a different barcode.
        """
        require_context(context, "store_barcode")
        self._barcode_validator.validate([barcode])
        location = self._locations.get(identifier)
        if address is not None:
            size = location.size
            if size is not None and not size.contains(address):
                raise PlacementConflictError(
                    f"The address {address} is outside the listed size {size} "
                    f"for location {identifier}.",
                    out_of_bounds=[f"{address} in location {location.identity_label()} {size}"],
                )
            occupant = self._items.occupant_at(location.id, address)
            if occupant is not None and occupant.barcode.upper() != barcode.upper():
                raise PlacementConflictError(
                    f"There is another item at address {address} in location {identifier}.",
                    occupied=[f"{address} in location {location.identity_label()}"],
                )
        return self.store_items(context, [Placement(barcode, location, address)])[0]

    def store_barcodes(
        self,
        context: RequestContext,
        barcodes: Iterable[str],
        identifier: LocationIdentifier,
    ) -> list[Item]:
        """Store unaddressed items into one location."""
        require_context(context, "store_barcodes")
        barcode_set = self._barcode_validator.validate(barcodes)
        location = self._locations.get(identifier)
        if not barcode_set:
            return []
        return self.store_items(context, [Placement(bc, location) for bc in barcode_set])

    def store(
        self,
        context: RequestContext,
        inputs: Sequence[StoreInput],
        default_location: LocationIdentifier | None = None,
    ) -> list[Item]:
        """
        Store items across any number of locations.

        Each input falls back to ``default_location`` when it names no
        location of its own.  All locations are resolved in one batched
        pass before placements are checked.

        Raises:
            MissingLocationError: an input has no location and there is
                no default.
            UnknownLocationError: some identifiers match no location.
            PlacementConflictError: see PlacementValidator.
        """
        require_context(context, "store")
        if not inputs:
            return []
        barcodes = self._barcode_validator.validate(si.barcode for si in inputs)
        if not _specified(default_location) and any(
            not _specified(si.location) for si in inputs
        ):
            raise MissingLocationError()

        cache = LocationCache(self._locations)
        cache.look_up([default_location, *(si.location for si in inputs)])
        placements = [
            Placement(
                si.barcode,
                cache.get(si.location if _specified(si.location) else default_location),
                si.address,
            )
            for si in inputs
        ]
        self._placement_validator.check(placements, barcodes)
        return self.store_items(context, placements)

    def transfer(
        self,
        context: RequestContext,
        source: LocationIdentifier,
        destination: LocationIdentifier,
    ) -> list[Item]:
        """
        Move everything stored in ``source`` into ``destination``.

        Items keep their addresses.  Source and destination are compared
        by id after resolution, so an id and a barcode naming the same
        location are rejected.

        Raises:
            InvalidTransferError: source and destination are one location.
            PlacementConflictError: an address does not fit, or is taken,
                in the destination.
        """
        require_context(context, "transfer")
        source_location = self._locations.get(source)
        destination_location = self._locations.get(destination)
        if source_location.id == destination_location.id:
            raise InvalidTransferError(source_location.id)

        stored = self._items.stored_in(source_location.id)
        if not stored:
            return []
        placements = [
            Placement(item.barcode, destination_location, item.address) for item in stored
        ]
        barcodes = CaseInsensitiveStringSet(p.barcode for p in placements)
        self._placement_validator.check(placements, barcodes)
        items = self.store_items(context, placements)
        logger.info(
            "transfer_completed",
            extra={
                "source_id": source_location.id,
                "destination_id": destination_location.id,
                "count": len(items),
            },
        )
        return items

    def store_items(self, context: RequestContext, placements: Sequence[Placement]) -> list[Item]:
        """
        Replace items by barcode with the given placements and record them.

        Preconditions: placements are already validated.
        """
        existing = self._items.find_by_barcodes(p.barcode for p in placements)
        for item in existing:
            self.session.delete(item)
        # Deletes must reach the database before inserts reuse their slots
        self.session.flush()

        items = [
            Item(barcode=p.barcode, location_id=p.location.id, address=p.address)
            for p in placements
        ]
        self.session.add_all(items)
        self.session.flush()
        self._records.record_stores(context, items)

        logger.info(
            "items_stored",
            extra={
                "count": len(items),
                "replaced": len(existing),
                "location_ids": sorted({p.location.id for p in placements}),
            },
        )
        return items
