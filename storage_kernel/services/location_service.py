"""
LocationService -- create and edit locations.

Responsibility:
    Creates locations (allocating their barcodes) and applies field edits
    to existing ones.  Edits arrive as a generic field map, are validated
    into typed LocationEdit variants, and are applied only where they
    change something.

Architecture position:
    Kernel > Services.  Tree checks come from domain.location_tree with
    LocationSelector as the graph.

Invariants enforced:
    - Root locations have no address.
    - An addressed location fits its parent's Size and does not share its
      address with a sibling.
    - Re-parenting never creates a cycle (checked from the new parent
      upward; skipped for locations without children).
    - Descriptions are trimmed, empty means none, and at most 256 chars.

Failure modes:
    - LocationStructureError carrying every problem found in one edit.
    - LocationNotFoundError for an unknown parent on create, or an unknown
      location on edit.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from sqlalchemy.orm import Session

from storage_kernel.domain.dtos import (
    LocationEdit,
    LocationIdentifier,
    LocationInput,
    RequestContext,
    SetAddress,
    SetDescription,
    SetParent,
    SetSize,
)
from storage_kernel.domain.location_tree import check_cycle, check_parent_with_address
from storage_kernel.domain.values import Address, Size
from storage_kernel.exceptions import (
    InvalidFormatError,
    LocationNotFoundError,
    LocationStructureError,
)
from storage_kernel.logging_config import get_logger
from storage_kernel.models.location import (
    MAX_DESCRIPTION_LENGTH,
    MAX_NAME_LENGTH,
    Location,
)
from storage_kernel.selectors.location_selector import LocationSelector
from storage_kernel.services.barcode_allocator import BarcodeAllocator
from storage_kernel.services.base import BaseService, require_context
from storage_kernel.utils.messages import plain_list, pluralise

logger = get_logger("services.location")

EDITABLE_FIELDS = ("description", "parent_id", "address", "size")


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _type_error(name: str, expected: str, value: Any) -> str:
    return f"Require {name} to be {expected}, but received {type(value).__name__}."


def _clean_text(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


class LocationService(BaseService):
    """
    Contract:
        ``create_location`` and ``edit_location`` either apply the whole
        request or raise before changing anything.

    Guarantees:
        - New locations get a fresh, checksummed barcode.
        - Edits that change nothing leave the row untouched.
    """

    def __init__(self, session: Session, allocator: BarcodeAllocator | None = None):
        super().__init__(session)
        self._locations = LocationSelector(session)
        self._allocator = allocator or BarcodeAllocator(session)

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    def create_location(self, context: RequestContext, data: LocationInput) -> Location:
        """
        Create a location from ``data``.

        Raises:
            LocationStructureError: address without parent, address out of
                the parent's bounds or already taken, text too long.
            LocationNotFoundError: ``data.parent_id`` names no location.
        """
        require_context(context, "create_location")
        address = data.address
        if address is not None and data.parent_id is None:
            raise LocationStructureError("A location with no parent cannot have an address.")

        parent = None
        if data.parent_id is not None:
            parent = self._locations.find_by_id(data.parent_id)
            if parent is None:
                raise LocationNotFoundError(location_id=data.parent_id)

        if parent is not None and address is not None:
            size = parent.size
            if size is not None and not size.contains(address):
                raise LocationStructureError(
                    f"The address {address} is outside the listed size {size} for the parent."
                )
            if self._locations.child_at(parent, address) is not None:
                raise LocationStructureError(
                    f"There is already a location at address {address} in the parent."
                )

        description = _clean_text(data.description)
        if description is not None and len(description) > MAX_DESCRIPTION_LENGTH:
            raise LocationStructureError(
                f"Location description is too long (max length: {MAX_DESCRIPTION_LENGTH})."
            )
        name = _clean_text(data.name)
        if name is not None and len(name) > MAX_NAME_LENGTH:
            raise LocationStructureError(
                f"Location name is too long (max length: {MAX_NAME_LENGTH})."
            )

        location = Location(
            barcode=self._allocator.next_store_barcode(),
            name=name,
            description=description,
            parent_id=parent.id if parent is not None else None,
            address=address,
            size=data.size,
            grid_direction=data.direction,
        )
        self.session.add(location)
        self.session.flush()

        logger.info(
            "location_created",
            extra={
                "location_id": location.id,
                "barcode": location.barcode,
                "parent_id": location.parent_id,
                "address": location.address,
            },
        )
        return location

    # ------------------------------------------------------------------
    # Edit
    # ------------------------------------------------------------------

    def edit_location(
        self,
        context: RequestContext,
        identifier: LocationIdentifier,
        fields: Mapping[str, Any],
    ) -> Location:
        """
        Apply a field map to an existing location.

        A key present with value None clears that field.

        Raises:
            LocationStructureError: any invalid field, type or structure.
        """
        require_context(context, "edit_location")
        location = self._locations.get(identifier)
        edits = self.parse_edits(location, fields)
        if self.apply_edits(location, edits):
            self.session.flush()
            logger.info(
                "location_edited",
                extra={"location_id": location.id, "fields": sorted(fields)},
            )
        return location

    def parse_edits(self, location: Location, fields: Mapping[str, Any]) -> list[LocationEdit]:
        """
        Validate a field map against ``location`` into typed edits.

        Problems with a field's type stop checks on that field only; every
        other problem is collected.  Unknown keys lead the message.
        """
        invalid_fields: list[str] = []
        problems: dict[str, None] = {}
        edits: list[LocationEdit] = []

        parent: Location | None = None
        new_parent = parent_error = False
        address: Address | None = None
        new_address = address_error = False

        for key, value in fields.items():
            if key == "description":
                if value is None:
                    edits.append(SetDescription(None))
                elif not isinstance(value, str):
                    problems[_type_error("description", "a string", value)] = None
                elif len(value.strip()) > MAX_DESCRIPTION_LENGTH:
                    problems[
                        f"Description too long ({len(value.strip())}). "
                        f"Max length is {MAX_DESCRIPTION_LENGTH}."
                    ] = None
                else:
                    edits.append(SetDescription(_clean_text(value)))

            elif key == "parent_id":
                new_parent = True
                if value is None:
                    edits.append(SetParent(None))
                elif not _is_int(value):
                    problems[_type_error("parent_id", "an integer", value)] = None
                    parent_error = True
                elif value == location.id:
                    problems["A location cannot be its own parent."] = None
                    parent_error = True
                else:
                    parent = self._locations.find_by_id(value)
                    if parent is None:
                        problems[f"Invalid parent id: {value}."] = None
                        parent_error = True
                    else:
                        edits.append(SetParent(value))

            elif key == "address":
                new_address = True
                if value is None:
                    edits.append(SetAddress(None))
                    continue
                if isinstance(value, str):
                    try:
                        value = Address.parse(value)
                    except InvalidFormatError as exc:
                        problems[f"{exc}."] = None
                        address_error = True
                        continue
                if not isinstance(value, Address):
                    problems[_type_error("address", "an address", value)] = None
                    address_error = True
                    continue
                address = value
                edits.append(SetAddress(value))

            elif key == "size":
                size = self._parse_size(value, problems)
                if size is not None or value is None:
                    edits.append(SetSize(size))

            else:
                invalid_fields.append(key)

        if (new_address or new_parent) and not parent_error:
            if not new_address:
                address = location.address
            problem = None
            if new_parent and parent is not None:
                problem = check_cycle(location, parent, self._locations)
            if problem is None and address is not None and not address_error:
                if not new_parent:
                    parent = self._locations.parent_of(location)
                problem = check_parent_with_address(location, parent, address, self._locations)
            if problem is not None:
                problems[problem] = None

        if problems or invalid_fields:
            messages = list(problems)
            if invalid_fields:
                messages.insert(
                    0,
                    f"{pluralise('Invalid field{s}:', len(invalid_fields))} "
                    f"{plain_list(sorted(invalid_fields))}.",
                )
            logger.info(
                "location_edit_rejected",
                extra={"location_id": location.id, "problems": messages},
            )
            raise LocationStructureError(messages)
        return edits

    @staticmethod
    def _parse_size(value: Any, problems: dict[str, None]) -> Size | None:
        if value is None:
            return None
        if isinstance(value, Size):
            return value
        if not isinstance(value, Mapping):
            problems[_type_error("size", "a mapping of num_rows and num_columns", value)] = None
            return None
        rows, columns = value.get("num_rows"), value.get("num_columns")
        if len(value) != 2 or not _is_int(rows) or not _is_int(columns):
            problems["Received size with invalid contents."] = None
            return None
        if rows < 1 or columns < 1:
            problems["Fields in size must be greater than zero."] = None
            return None
        return Size(rows, columns)

    @staticmethod
    def apply_edits(location: Location, edits: list[LocationEdit]) -> bool:
        """Apply edits in order; True if anything changed."""
        changed = False
        for edit in edits:
            if isinstance(edit, SetDescription):
                if location.description != edit.value:
                    location.description = edit.value
                    changed = True
            elif isinstance(edit, SetParent):
                if location.parent_id != edit.parent_id:
                    location.parent_id = edit.parent_id
                    changed = True
            elif isinstance(edit, SetAddress):
                if location.address != edit.address:
                    location.address = edit.address
                    changed = True
            elif isinstance(edit, SetSize):
                if location.size != edit.size:
                    location.size = edit.size
                    changed = True
        return changed
