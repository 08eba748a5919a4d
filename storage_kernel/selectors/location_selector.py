"""
LocationSelector -- location lookups and tree navigation.

Responsibility:
    Finds locations by id or barcode (singly or in batches), resolves a
    LocationIdentifier to exactly one location, and navigates the tree by
    id reference.  Implements the LocationGraph protocol consumed by
    domain.location_tree.

Architecture position:
    Kernel > Selectors -- read-only, caller-owned session.

Invariants enforced:
    - Barcode lookups are case-insensitive.
    - Batch lookups issue one query per batch, never one per identifier.
"""

from __future__ import annotations

from collections.abc import Collection, Iterable

from sqlalchemy import exists, func, select

from storage_kernel.domain.dtos import LocationIdentifier
from storage_kernel.domain.values import Address
from storage_kernel.exceptions import (
    InconsistentIdentifierError,
    LocationNotFoundError,
    MissingIdentifierError,
)
from storage_kernel.models.location import Location
from storage_kernel.selectors.base import BaseSelector


class LocationSelector(BaseSelector):
    """Read access to the location tree."""

    def find_by_id(self, location_id: int) -> Location | None:
        return self.session.get(Location, location_id)

    def find_by_ids(self, location_ids: Collection[int]) -> list[Location]:
        if not location_ids:
            return []
        stmt = select(Location).where(Location.id.in_(list(location_ids)))
        return list(self.session.scalars(stmt))

    def find_by_barcode(self, barcode: str) -> Location | None:
        stmt = select(Location).where(func.upper(Location.barcode) == barcode.upper())
        return self.session.scalars(stmt).first()

    def find_by_barcodes(self, barcodes: Iterable[str]) -> list[Location]:
        keys = {bc.upper() for bc in barcodes}
        if not keys:
            return []
        stmt = select(Location).where(func.upper(Location.barcode).in_(keys))
        return list(self.session.scalars(stmt))

    def get(self, identifier: LocationIdentifier | None) -> Location:
        """
        Resolve an identifier to one location.

        The id wins when present; a barcode given alongside it must name
        the same location.

        Raises:
            MissingIdentifierError: neither id nor barcode given.
            LocationNotFoundError: nothing matches.
            InconsistentIdentifierError: id and barcode disagree.
        """
        if identifier is None or not identifier.is_specified:
            raise MissingIdentifierError("No location identifier given.")
        if identifier.id is not None:
            location = self.find_by_id(identifier.id)
            if location is None:
                raise LocationNotFoundError(location_id=identifier.id)
            if (
                identifier.barcode is not None
                and identifier.barcode.upper() != location.barcode.upper()
            ):
                raise InconsistentIdentifierError(identifier)
            return location
        location = self.find_by_barcode(identifier.barcode)
        if location is None:
            raise LocationNotFoundError(barcode=identifier.barcode)
        return location

    # -- LocationGraph ------------------------------------------------------

    def parent_of(self, location: Location) -> Location | None:
        if location.parent_id is None:
            return None
        return self.session.get(Location, location.parent_id)

    def has_children(self, location: Location) -> bool:
        if location.id is None:
            return False
        stmt = select(exists().where(Location.parent_id == location.id))
        return bool(self.session.scalar(stmt))

    def child_at(self, parent: Location, address: Address) -> Location | None:
        stmt = select(Location).where(
            Location.parent_id == parent.id,
            Location.row_index == address.row,
            Location.col_index == address.column,
        )
        return self.session.scalars(stmt).first()

    def children_of(self, location: Location) -> list[Location]:
        stmt = (
            select(Location)
            .where(Location.parent_id == location.id)
            .order_by(Location.id)
        )
        return list(self.session.scalars(stmt))
