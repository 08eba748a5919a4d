"""
PlacementValidator -- bounds, occupancy and duplicate-destination checks.

Responsibility:
    Given the placements a request wants to make and the barcodes the
    request is (re)placing, decides whether every addressed placement can
    land where asked.  Unaddressed placements are never checked.

Architecture position:
    Kernel > Services.  Reads current contents through ItemSelector inside
    the request's transaction; writes nothing.

Invariants enforced:
    - No two placements in one request target the same (location, address).
    - An address must lie within the location's Size when it declares one.
    - An address already holding an item is only acceptable when that
      item's barcode is part of this request (it is being replaced).

Failure modes:
    - PlacementConflictError with one clause per category present, in the
      order out-of-bounds, occupied, repeated.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from storage_kernel.domain.values import Address
from storage_kernel.exceptions import PlacementConflictError
from storage_kernel.logging_config import get_logger
from storage_kernel.models.item import Item
from storage_kernel.models.location import Location
from storage_kernel.selectors.item_selector import ItemSelector
from storage_kernel.utils.ci_string_set import CaseInsensitiveStringSet
from storage_kernel.utils.messages import pluralise

logger = get_logger("services.placement_validator")


@dataclass(frozen=True, slots=True)
class Placement:
    """An item barcode headed for a resolved location and optional address."""

    barcode: str
    location: Location
    address: Address | None = None


class PlacementValidator:
    """
    Contract:
        ``check`` returns None when every placement is acceptable and
        raises PlacementConflictError otherwise.

    Guarantees:
        - Each location's contents are read at most once per call.
        - A destination repeated several times is reported once.
    """

    def __init__(self, item_selector: ItemSelector):
        self._items = item_selector

    def check(
        self,
        placements: Iterable[Placement],
        barcodes: CaseInsensitiveStringSet,
    ) -> None:
        contents: dict[int, dict[Address, Item]] = {}
        seen: set[tuple[int, Address]] = set()
        repeated: dict[tuple[int, Address], Placement] = {}
        out_of_bounds: dict[tuple[int, Address], Placement] = {}
        occupied: dict[tuple[int, Address], Placement] = {}

        for placement in placements:
            address = placement.address
            if address is None:
                continue
            location = placement.location
            destination = (location.id, address)
            if destination in seen:
                repeated.setdefault(destination, placement)
                continue
            seen.add(destination)
            size = location.size
            if size is not None and not size.contains(address):
                out_of_bounds.setdefault(destination, placement)
                continue
            occupant = self._contents_of(location, contents).get(address)
            if occupant is not None and occupant.barcode not in barcodes:
                occupied.setdefault(destination, placement)

        if not (repeated or out_of_bounds or occupied):
            return

        errors: list[str] = []
        if out_of_bounds:
            errors.append(
                _clause(
                    "Address{es} outside of listed size for location:",
                    out_of_bounds.values(),
                    include_size=True,
                )
            )
        if occupied:
            errors.append(_clause("Address{es} already occupied:", occupied.values()))
        if repeated:
            errors.append(
                _clause("Address{es} repeated in same location:", repeated.values())
            )

        logger.info(
            "placement_rejected",
            extra={
                "out_of_bounds": len(out_of_bounds),
                "occupied": len(occupied),
                "repeated": len(repeated),
            },
        )
        raise PlacementConflictError(
            " ".join(errors),
            out_of_bounds=[_destination(p, True) for p in out_of_bounds.values()],
            occupied=[_destination(p) for p in occupied.values()],
            repeated=[_destination(p) for p in repeated.values()],
        )

    def _contents_of(
        self,
        location: Location,
        contents: dict[int, dict[Address, Item]],
    ) -> dict[Address, Item]:
        if location.id not in contents:
            contents[location.id] = {
                item.address: item
                for item in self._items.stored_in(location.id)
                if item.address is not None
            }
        return contents[location.id]


def _destination(placement: Placement, include_size: bool = False) -> str:
    text = f"{placement.address} in location {placement.location.identity_label()}"
    if include_size:
        text += f" {placement.location.size}"
    return text


def _clause(
    template: str,
    placements: Iterable[Placement],
    include_size: bool = False,
) -> str:
    entries = [_destination(p, include_size) for p in placements]
    return f"{pluralise(template, len(entries))} {', '.join(entries)}."
