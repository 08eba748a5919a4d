"""
Typed exception hierarchy for the storage kernel.

Every failure the engine reports to a caller is a StorageKernelError
subclass with:
  1. a ``code`` class attribute (machine-readable, API-safe),
  2. structured attributes describing the offending input,
  3. a composite human-readable message that the caller sees verbatim.

Hierarchy:

    StorageKernelError (base)
    |
    +-- InvalidFormatError
    |
    +-- LocationError
    |   +-- MissingIdentifierError
    |   +-- MissingLocationError
    |   +-- UnknownLocationError
    |   +-- LocationNotFoundError
    |   +-- InconsistentIdentifierError
    |   +-- LocationStructureError
    |
    +-- StoreError
    |   +-- InvalidBarcodesError
    |   +-- PlacementConflictError
    |   +-- InvalidTransferError
    |
    +-- MissingContextError
    |
    +-- ImmutabilityViolationError

Category   | Code                  | When Raised
-----------|-----------------------|-------------------------------------------
Format     | INVALID_FORMAT        | Malformed address or identifier text
Location   | MISSING_IDENTIFIER    | Identifier with neither id nor barcode
           | MISSING_LOCATION      | Store input with no location at all
           | UNKNOWN_LOCATION      | Batch resolution left ids/barcodes unmatched
           | LOCATION_NOT_FOUND    | Single-location lookup failed
           | INCONSISTENT_IDENTIFIER | Id and barcode name different locations
           | LOCATION_STRUCTURE    | Invalid create/edit of a location
Store      | INVALID_BARCODES      | Item barcodes fail shape/dedup rules
           | PLACEMENT_CONFLICT    | Bounds, occupancy or repeated destination
           | INVALID_TRANSFER      | Transfer source equals destination
Context    | MISSING_CONTEXT       | Mutation attempted without caller identity
Audit      | IMMUTABILITY_VIOLATION | Store record update or delete attempted

Exceptions inherit from Exception rather than ValueError so domain errors
can be caught as a group without mixing in programming errors.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from storage_kernel.utils.messages import quote


class StorageKernelError(Exception):
    """Base exception for all storage kernel errors."""

    code: str = "STORAGE_KERNEL_ERROR"


class InvalidFormatError(StorageKernelError):
    """Text could not be parsed into the requested value."""

    code: str = "INVALID_FORMAT"

    def __init__(self, kind: str, text: Any):
        self.kind = kind
        self.text = text
        super().__init__(f"Invalid {kind} string: {text}")


# Location-related exceptions


class LocationError(StorageKernelError):
    """Base exception for location resolution and structure errors."""

    code: str = "LOCATION_ERROR"


class MissingIdentifierError(LocationError):
    """A location identifier carried neither an id nor a barcode."""

    code: str = "MISSING_IDENTIFIER"

    def __init__(self, message: str = "Missing location identifier."):
        super().__init__(message)


class MissingLocationError(LocationError):
    """A store input named no location and no default was supplied."""

    code: str = "MISSING_LOCATION"

    def __init__(self, message: str = "A location must be specified for each item."):
        super().__init__(message)


class UnknownLocationError(LocationError):
    """Batch resolution could not match some ids or barcodes."""

    code: str = "UNKNOWN_LOCATION"

    def __init__(self, ids: Sequence[int], barcodes: Sequence[str], message: str):
        self.ids = list(ids)
        self.barcodes = list(barcodes)
        super().__init__(message)


class LocationNotFoundError(LocationError):
    """A single location lookup by id or barcode found nothing."""

    code: str = "LOCATION_NOT_FOUND"

    def __init__(self, location_id: int | None = None, barcode: str | None = None):
        self.location_id = location_id
        self.barcode = barcode
        if location_id is not None:
            message = f"No location found with id {location_id}"
        else:
            message = f"No location found with barcode {quote(barcode)}"
        super().__init__(message)


class InconsistentIdentifierError(LocationError):
    """An identifier's id and barcode refer to different locations."""

    code: str = "INCONSISTENT_IDENTIFIER"

    def __init__(self, identifier: Any):
        self.identifier = identifier
        super().__init__(f"Inconsistent location identifiers given: {identifier}")


class LocationStructureError(LocationError):
    """
    A location create or edit would break the tree's invariants.

    ``problems`` lists each detected problem; the message joins them.
    """

    code: str = "LOCATION_STRUCTURE"

    def __init__(self, problems: Sequence[str] | str):
        self.problems = [problems] if isinstance(problems, str) else list(problems)
        super().__init__(" ".join(self.problems))


# Store-related exceptions


class StoreError(StorageKernelError):
    """Base exception for store, unstore and transfer failures."""

    code: str = "STORE_ERROR"


class InvalidBarcodesError(StoreError):
    """One or more item barcodes failed shape or duplication rules."""

    code: str = "INVALID_BARCODES"

    def __init__(
        self,
        message: str,
        *,
        any_null: bool = False,
        repeated: Sequence[str] = (),
        too_short: Sequence[str] = (),
        too_long: Sequence[str] = (),
        untrimmed: Sequence[str] = (),
        reserved_prefix: Sequence[str] = (),
    ):
        self.any_null = any_null
        self.repeated = list(repeated)
        self.too_short = list(too_short)
        self.too_long = list(too_long)
        self.untrimmed = list(untrimmed)
        self.reserved_prefix = list(reserved_prefix)
        super().__init__(message)


class PlacementConflictError(StoreError):
    """
    Items cannot be placed where requested.

    Structured attributes hold display strings such as
    ``A3 in location (id=2, barcode="STO-2")`` per category.
    """

    code: str = "PLACEMENT_CONFLICT"

    def __init__(
        self,
        message: str,
        *,
        out_of_bounds: Sequence[str] = (),
        occupied: Sequence[str] = (),
        repeated: Sequence[str] = (),
    ):
        self.out_of_bounds = list(out_of_bounds)
        self.occupied = list(occupied)
        self.repeated = list(repeated)
        super().__init__(message)


class InvalidTransferError(StoreError):
    """Transfer source and destination are the same location."""

    code: str = "INVALID_TRANSFER"

    def __init__(self, location_id: int):
        self.location_id = location_id
        super().__init__("The source cannot be the destination.")


# Contract violations


class MissingContextError(StorageKernelError):
    """A mutating operation was invoked without a caller identity."""

    code: str = "MISSING_CONTEXT"

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"No request context given for {operation}.")


class ImmutabilityViolationError(StorageKernelError):
    """Attempted to modify or delete an append-only record."""

    code: str = "IMMUTABILITY_VIOLATION"

    def __init__(self, entity_type: str, entity_id: str, reason: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.reason = reason
        super().__init__(
            f"Immutability violation on {entity_type} {entity_id}: {reason}"
        )
