"""
DTOs -- Pure domain data transfer objects.

Responsibility:
    The immutable structures exchanged with the API layer: request inputs
    (LocationIdentifier, StoreInput, LocationInput, RequestContext), the
    typed location edit variants (SetDescription, SetParent, SetAddress,
    SetSize) and the results returned by the PlacementEngine (ItemInfo,
    LocationInfo, StoreRecordInfo, StoreResult, UnstoreResult).

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    ``from_model()`` class methods are boundary converters invoked only
    from the service layer, inside the transaction that loaded the rows.

Invariants enforced:
    - Results never expose ORM instances; callers cannot lazy-load or
      mutate persistence state through them.
    - ItemInfo equality compares id, barcode, location id and address;
      its hash uses the id when present, else the upper-cased barcode.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Union

from storage_kernel.domain.values import Address, GridDirection, Size
from storage_kernel.utils.messages import quote

if TYPE_CHECKING:
    from storage_kernel.models.item import Item
    from storage_kernel.models.location import Location
    from storage_kernel.models.store_record import StoreRecord


# ---------------------------------------------------------------------------
# Request inputs
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class LocationIdentifier:
    """
    Names a location by numeric id, by barcode, or both.

    An identifier with neither is "unspecified"; resolution of an
    unspecified identifier fails with MissingIdentifierError.
    """

    id: int | None = None
    barcode: str | None = None

    @classmethod
    def of_id(cls, location_id: int) -> LocationIdentifier:
        return cls(id=location_id)

    @classmethod
    def of_barcode(cls, barcode: str) -> LocationIdentifier:
        return cls(barcode=barcode)

    @property
    def is_specified(self) -> bool:
        return self.id is not None or self.barcode is not None

    def __str__(self) -> str:
        if self.id is not None:
            if self.barcode is not None:
                return f"(id={self.id}, barcode={quote(self.barcode)})"
            return f"(id={self.id})"
        if self.barcode is not None:
            return f"(barcode={quote(self.barcode)})"
        return "(no identifier)"


@dataclass(frozen=True, slots=True)
class RequestContext:
    """Resolved caller identity: consuming application and username."""

    app: str | None
    username: str | None

    def __str__(self) -> str:
        return f"(app={self.app}, user={quote(self.username)})"


@dataclass(frozen=True, slots=True)
class StoreInput:
    """One item to store: barcode, optional location and optional address."""

    barcode: str | None
    location: LocationIdentifier | None = None
    address: Address | None = None


@dataclass(frozen=True, slots=True)
class LocationInput:
    """Fields for a new location."""

    name: str | None = None
    description: str | None = None
    parent_id: int | None = None
    address: Address | None = None
    size: Size | None = None
    direction: GridDirection | None = None


# ---------------------------------------------------------------------------
# Location edits
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class SetDescription:
    value: str | None


@dataclass(frozen=True, slots=True)
class SetParent:
    parent_id: int | None


@dataclass(frozen=True, slots=True)
class SetAddress:
    address: Address | None


@dataclass(frozen=True, slots=True)
class SetSize:
    size: Size | None


LocationEdit = Union[SetDescription, SetParent, SetAddress, SetSize]


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


@dataclass(frozen=True, eq=True)
class ItemInfo:
    """
    Pure snapshot of a stored (or just unstored) item.

    Contract:
        Built inside the transaction that touched the item; safe to hand
        to callers after commit.

    Guarantees:
        - ``address_index`` is the item's sequence index within its
          location's grid, or None when the location has no Size or
          direction, or the item no address.
    """

    id: int | None
    barcode: str
    location_id: int
    address: Address | None = None
    address_index: int | None = field(default=None, compare=False)

    def __hash__(self) -> int:
        if self.id is not None:
            return hash(self.id)
        return hash(self.barcode.upper())

    @classmethod
    def from_model(cls, item: Item, location: Location | None = None) -> ItemInfo:
        index = None
        if location is not None:
            index = item.address_index(location)
        return cls(
            id=item.id,
            barcode=item.barcode,
            location_id=item.location_id,
            address=item.address,
            address_index=index,
        )


@dataclass(frozen=True)
class LocationInfo:
    """Pure snapshot of a location and its immediate surroundings."""

    id: int
    barcode: str
    name: str | None = None
    description: str | None = None
    parent_id: int | None = None
    address: Address | None = None
    size: Size | None = None
    direction: GridDirection | None = None
    qualified_label: str | None = None
    child_ids: tuple[int, ...] = ()
    stored_barcodes: tuple[str, ...] = ()

    @classmethod
    def from_model(
        cls,
        location: Location,
        *,
        qualified_label: str | None = None,
        child_ids: tuple[int, ...] = (),
        stored_barcodes: tuple[str, ...] = (),
    ) -> LocationInfo:
        return cls(
            id=location.id,
            barcode=location.barcode,
            name=location.name,
            description=location.description,
            parent_id=location.parent_id,
            address=location.address,
            size=location.size,
            direction=location.grid_direction,
            qualified_label=qualified_label,
            child_ids=child_ids,
            stored_barcodes=stored_barcodes,
        )


@dataclass(frozen=True)
class StoreRecordInfo:
    """One audit entry; address and location id are None for unstores."""

    id: int
    barcode: str
    address: Address | None
    location_id: int | None
    username: str | None
    app: str | None
    recorded: datetime | None

    @classmethod
    def from_model(cls, record: StoreRecord) -> StoreRecordInfo:
        return cls(
            id=record.id,
            barcode=record.barcode,
            address=record.address,
            location_id=record.location_id,
            username=record.username,
            app=record.app,
            recorded=record.recorded,
        )


@dataclass(frozen=True)
class StoreResult:
    stored: tuple[ItemInfo, ...] = ()

    @property
    def num_stored(self) -> int:
        return len(self.stored)


@dataclass(frozen=True)
class UnstoreResult:
    unstored: tuple[ItemInfo, ...] = ()

    @property
    def num_unstored(self) -> int:
        return len(self.unstored)
