"""Tests for PlacementValidator."""

import pytest

from storage_kernel.domain.dtos import LocationIdentifier
from storage_kernel.domain.values import Address
from storage_kernel.exceptions import PlacementConflictError
from storage_kernel.selectors.item_selector import ItemSelector
from storage_kernel.services.placement_validator import Placement, PlacementValidator
from storage_kernel.services.store_service import StoreService
from storage_kernel.utils.ci_string_set import CaseInsensitiveStringSet


class CountingItemSelector(ItemSelector):
    def __init__(self, session):
        super().__init__(session)
        self.reads = []

    def stored_in(self, location_id):
        self.reads.append(location_id)
        return super().stored_in(location_id)


@pytest.fixture
def item_selector(session):
    return CountingItemSelector(session)


@pytest.fixture
def validator(item_selector):
    return PlacementValidator(item_selector)


@pytest.fixture
def plate(make_location):
    return make_location("Plate", size=(2, 2))


@pytest.fixture
def tray(make_location):
    return make_location("Tray")


def _check(validator, *placements):
    validator.check(placements, CaseInsensitiveStringSet(p.barcode for p in placements))


class TestAccepts:
    def test_free_addresses(self, validator, plate):
        _check(validator, Placement("a", plate, Address(1, 1)), Placement("b", plate, Address(2, 2)))

    def test_unaddressed_never_checked(self, validator, item_selector, plate):
        _check(validator, Placement("a", plate), Placement("b", plate))
        assert item_selector.reads == []

    def test_unsized_location_has_no_bounds(self, validator, tray):
        _check(validator, Placement("a", tray, Address(40, 40)))

    def test_same_address_in_different_locations(self, validator, plate, tray):
        _check(validator, Placement("a", plate, Address(1, 1)), Placement("b", tray, Address(1, 1)))

    def test_contents_read_once_per_location(self, validator, item_selector, plate):
        _check(
            validator,
            Placement("a", plate, Address(1, 1)),
            Placement("b", plate, Address(1, 2)),
            Placement("c", plate, Address(2, 1)),
        )
        assert item_selector.reads == [plate.id]


class TestRejects:
    def test_occupied_by_item_outside_request(self, session, context, validator, plate):
        StoreService(session).store_barcode(
            context, "resident", LocationIdentifier.of_id(plate.id), Address(1, 1)
        )
        with pytest.raises(PlacementConflictError) as exc_info:
            _check(validator, Placement("a", plate, Address(1, 1)))
        assert exc_info.value.occupied == [f"A1 in location {plate.identity_label()}"]

    def test_occupant_in_request_is_fine(self, session, context, validator, plate):
        StoreService(session).store_barcode(
            context, "resident", LocationIdentifier.of_id(plate.id), Address(1, 1)
        )
        validator.check(
            [Placement("a", plate, Address(1, 1))],
            CaseInsensitiveStringSet(["a", "RESIDENT"]),
        )

    def test_plural_clauses(self, validator, plate):
        with pytest.raises(PlacementConflictError) as exc_info:
            _check(
                validator,
                Placement("a", plate, Address(3, 1)),
                Placement("b", plate, Address(1, 3)),
            )
        label = plate.identity_label()
        assert str(exc_info.value) == (
            "Addresses outside of listed size for location: "
            f"C1 in location {label} (numRows=2, numColumns=2), "
            f"A3 in location {label} (numRows=2, numColumns=2)."
        )

    def test_repeated_destination_reported_once(self, validator, plate):
        with pytest.raises(PlacementConflictError) as exc_info:
            _check(
                validator,
                Placement("a", plate, Address(1, 1)),
                Placement("b", plate, Address(1, 1)),
                Placement("c", plate, Address(1, 1)),
            )
        assert exc_info.value.repeated == [f"A1 in location {plate.identity_label()}"]
        assert exc_info.value.out_of_bounds == []
        assert exc_info.value.occupied == []

    def test_rejection_logged(self, validator, plate, captured_logs):
        with pytest.raises(PlacementConflictError):
            _check(validator, Placement("a", plate, Address(9, 9)))
        rejected = [r for r in captured_logs() if r["message"] == "placement_rejected"]
        assert rejected[0]["out_of_bounds"] == 1
