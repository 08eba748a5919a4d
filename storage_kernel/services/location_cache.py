"""
LocationCache -- request-scoped batch resolution of location identifiers.

Responsibility:
    Resolves many LocationIdentifiers with at most two queries (one by id
    set, one by barcode set) and memoizes the results by id and upper-cased
    barcode for the rest of the request.

Architecture position:
    Kernel > Services.  Built fresh for each PlacementEngine call; never
    shared between requests or threads.

Failure modes:
    - UnknownLocationError naming every unmatched id (first) and barcode.
    - MissingIdentifierError from ``get`` for an unspecified identifier.
"""

from __future__ import annotations

from collections.abc import Iterable

from storage_kernel.domain.dtos import LocationIdentifier
from storage_kernel.exceptions import MissingIdentifierError, UnknownLocationError
from storage_kernel.models.location import Location
from storage_kernel.selectors.location_selector import LocationSelector
from storage_kernel.utils.messages import plain_list, pluralise, quoted_list


class LocationCache:
    """
    Contract:
        After ``look_up`` succeeds, ``get`` answers from memory for every
        identifier that was looked up.

    Guarantees:
        - Identifiers already cached are not queried again.
        - An identifier with an id is resolved by id only.
    """

    def __init__(self, selector: LocationSelector):
        self._selector = selector
        self._by_id: dict[int, Location] = {}
        self._by_barcode: dict[str, Location] = {}

    def cache(self, location: Location) -> None:
        self._by_id[location.id] = location
        self._by_barcode[location.barcode.upper()] = location

    def look_up(self, identifiers: Iterable[LocationIdentifier | None]) -> None:
        ids: dict[int, None] = {}
        barcodes: dict[str, str] = {}
        for identifier in identifiers:
            if identifier is None:
                continue
            if identifier.id is not None:
                if identifier.id not in self._by_id:
                    ids.setdefault(identifier.id)
            elif identifier.barcode is not None:
                key = identifier.barcode.upper()
                if key not in self._by_barcode:
                    barcodes.setdefault(key, identifier.barcode)

        if ids:
            for location in self._selector.find_by_ids(list(ids)):
                self.cache(location)
        pending = {k: v for k, v in barcodes.items() if k not in self._by_barcode}
        if pending:
            for location in self._selector.find_by_barcodes(pending.values()):
                self.cache(location)

        missing_ids = [i for i in ids if i not in self._by_id]
        missing_barcodes = [bc for key, bc in pending.items() if key not in self._by_barcode]
        if missing_ids or missing_barcodes:
            raise UnknownLocationError(
                missing_ids,
                missing_barcodes,
                _unknown_message(missing_ids, missing_barcodes),
            )

    def get(self, identifier: LocationIdentifier | None) -> Location | None:
        """Cached location for ``identifier``, or None if it was never looked up."""
        if identifier is None or not identifier.is_specified:
            raise MissingIdentifierError()
        if identifier.id is not None:
            return self._by_id.get(identifier.id)
        return self._by_barcode.get(identifier.barcode.upper())


def _unknown_message(ids: list[int], barcodes: list[str]) -> str:
    clauses = []
    if ids:
        clauses.append(f"{pluralise('Unknown location id{s}:', len(ids))} {plain_list(ids)}.")
    if barcodes:
        clauses.append(
            f"{pluralise('Unknown location barcode{s}:', len(barcodes))} {quoted_list(barcodes)}."
        )
    return " ".join(clauses)
