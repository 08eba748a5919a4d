"""Tests for StoreService: storing single items, batches and transfers."""

import pytest

from storage_kernel.domain.dtos import LocationIdentifier, StoreInput
from storage_kernel.domain.values import Address, GridDirection
from storage_kernel.exceptions import (
    InvalidBarcodesError,
    InvalidTransferError,
    LocationNotFoundError,
    MissingContextError,
    MissingLocationError,
    PlacementConflictError,
    UnknownLocationError,
)
from storage_kernel.selectors.item_selector import ItemSelector
from storage_kernel.selectors.store_record_selector import StoreRecordSelector
from storage_kernel.services.store_service import StoreService


@pytest.fixture
def service(session):
    return StoreService(session)


@pytest.fixture
def items(session):
    return ItemSelector(session)


@pytest.fixture
def records(session):
    return StoreRecordSelector(session)


@pytest.fixture
def freezer(make_location):
    return make_location("Freezer")


@pytest.fixture
def box(make_location, freezer):
    return make_location(
        "Box", parent=freezer, address="A1", size=(2, 3), direction=GridDirection.RIGHT_DOWN
    )


def _at(location):
    return LocationIdentifier.of_id(location.id)


class TestStoreBarcode:
    def test_stores_at_address_and_records(self, service, context, box, records):
        item = service.store_barcode(context, "tube-1", _at(box), Address(1, 2))
        assert item.location_id == box.id
        assert item.address == Address(1, 2)

        history = records.history_for_barcode("TUBE-1")
        assert len(history) == 1
        assert history[0].location_id == box.id
        assert history[0].address == Address(1, 2)
        assert history[0].username == "alice"
        assert history[0].app == "bench"

    def test_restore_moves_item(self, service, context, box, freezer, items, records):
        service.store_barcode(context, "tube-1", _at(box), Address(1, 1))
        service.store_barcode(context, "TUBE-1", _at(freezer))

        stored = items.find_by_barcodes(["tube-1"])
        assert len(stored) == 1
        assert stored[0].barcode == "TUBE-1"
        assert stored[0].location_id == freezer.id
        assert stored[0].address is None
        assert len(records.history_for_barcode("tube-1")) == 2

    def test_by_barcode_case_insensitive(self, service, context, box):
        item = service.store_barcode(context, "tube-1", LocationIdentifier.of_barcode(box.barcode.lower()))
        assert item.location_id == box.id

    def test_out_of_bounds(self, service, context, box):
        with pytest.raises(PlacementConflictError) as exc_info:
            service.store_barcode(context, "tube-1", _at(box), Address(3, 1))
        assert str(exc_info.value) == (
            f"The address C1 is outside the listed size (numRows=2, numColumns=3) "
            f"for location (id={box.id})."
        )
        assert exc_info.value.out_of_bounds

    def test_occupied_by_other_item(self, service, context, box):
        service.store_barcode(context, "tube-1", _at(box), Address(1, 1))
        with pytest.raises(PlacementConflictError) as exc_info:
            service.store_barcode(context, "tube-2", _at(box), Address(1, 1))
        assert str(exc_info.value) == (
            f"There is another item at address A1 in location (id={box.id})."
        )

    def test_same_barcode_same_address_is_replaced(self, service, context, box, items):
        service.store_barcode(context, "tube-1", _at(box), Address(1, 1))
        item = service.store_barcode(context, "Tube-1", _at(box), Address(1, 1))
        assert item.barcode == "Tube-1"
        assert [i.barcode for i in items.stored_in(box.id)] == ["Tube-1"]

    def test_invalid_barcode(self, service, context, box, records):
        with pytest.raises(InvalidBarcodesError):
            service.store_barcode(context, "STO-123", _at(box))
        assert records.count() == 0

    def test_unknown_location(self, service, context, box):
        with pytest.raises(LocationNotFoundError) as exc_info:
            service.store_barcode(context, "tube-1", LocationIdentifier.of_barcode("STO-FFF0"))
        assert str(exc_info.value) == 'No location found with barcode "STO-FFF0"'

    def test_context_required(self, service, box):
        with pytest.raises(MissingContextError) as exc_info:
            service.store_barcode(None, "tube-1", _at(box))
        assert str(exc_info.value) == "No request context given for store_barcode."


class TestStoreBarcodes:
    def test_unaddressed_batch(self, service, context, freezer, items):
        stored = service.store_barcodes(context, ["a-1", "a-2"], _at(freezer))
        assert [i.barcode for i in stored] == ["a-1", "a-2"]
        assert all(i.address is None for i in items.stored_in(freezer.id))

    def test_empty_batch_still_resolves_location(self, service, context, freezer):
        assert service.store_barcodes(context, [], _at(freezer)) == []
        with pytest.raises(LocationNotFoundError):
            service.store_barcodes(context, [], LocationIdentifier.of_id(999))

    def test_repeats_refused(self, service, context, freezer):
        with pytest.raises(InvalidBarcodesError, match="repeated"):
            service.store_barcodes(context, ["a-1", "A-1"], _at(freezer))


class TestStore:
    def test_default_location_fills_gaps(self, service, context, freezer, box):
        stored = service.store(
            context,
            [
                StoreInput("a-1"),
                StoreInput("a-2", _at(box), Address(2, 1)),
                StoreInput("a-3", LocationIdentifier()),
            ],
            default_location=_at(freezer),
        )
        assert [(i.barcode, i.location_id) for i in stored] == [
            ("a-1", freezer.id),
            ("a-2", box.id),
            ("a-3", freezer.id),
        ]

    def test_missing_location(self, service, context, box):
        with pytest.raises(MissingLocationError) as exc_info:
            service.store(context, [StoreInput("a-1", _at(box)), StoreInput("a-2")])
        assert str(exc_info.value) == "A location must be specified for each item."

    def test_unknown_locations_reported_together(self, service, context, box):
        with pytest.raises(UnknownLocationError) as exc_info:
            service.store(
                context,
                [
                    StoreInput("a-1", LocationIdentifier.of_id(999)),
                    StoreInput("a-2", LocationIdentifier.of_barcode("STO-FFF0")),
                    StoreInput("a-3", LocationIdentifier.of_id(998)),
                ],
            )
        assert str(exc_info.value) == (
            'Unknown location ids: [999, 998]. Unknown location barcode: ["STO-FFF0"].'
        )
        assert exc_info.value.ids == [999, 998]
        assert exc_info.value.barcodes == ["STO-FFF0"]

    def test_conflicts_reported_by_category(self, service, context, box, records):
        service.store_barcode(context, "old-1", _at(box), Address(1, 1))
        label = box.identity_label()
        with pytest.raises(PlacementConflictError) as exc_info:
            service.store(
                context,
                [
                    StoreInput("n-1", _at(box), Address(1, 1)),
                    StoreInput("n-2", _at(box), Address(3, 1)),
                    StoreInput("n-3", _at(box), Address(2, 1)),
                    StoreInput("n-4", _at(box), Address(2, 1)),
                    StoreInput("n-5", _at(box), Address(2, 1)),
                ],
            )
        assert str(exc_info.value) == (
            f"Address outside of listed size for location: C1 in location {label} "
            f"(numRows=2, numColumns=3). "
            f"Address already occupied: A1 in location {label}. "
            f"Address repeated in same location: B1 in location {label}."
        )
        assert len(records.history_for_barcode("n-3")) == 0

    def test_occupant_in_request_may_be_displaced(self, service, context, box, items):
        service.store_barcode(context, "old-1", _at(box), Address(1, 1))
        service.store(
            context,
            [
                StoreInput("new-1", _at(box), Address(1, 1)),
                StoreInput("OLD-1", _at(box), Address(1, 2)),
            ],
        )
        placed = {str(i.address): i.barcode for i in items.stored_in(box.id)}
        assert placed == {"A1": "new-1", "A2": "OLD-1"}

    def test_swap(self, service, context, box, items):
        service.store(
            context,
            [StoreInput("a-1", _at(box), Address(1, 1)), StoreInput("a-2", _at(box), Address(1, 2))],
        )
        service.store(
            context,
            [StoreInput("a-1", _at(box), Address(1, 2)), StoreInput("a-2", _at(box), Address(1, 1))],
        )
        placed = {str(i.address): i.barcode for i in items.stored_in(box.id)}
        assert placed == {"A1": "a-2", "A2": "a-1"}

    def test_empty_input(self, service, context):
        assert service.store(context, []) == []


class TestTransfer:
    @pytest.fixture
    def spare(self, make_location, freezer):
        return make_location("Spare", parent=freezer, address="A2", size=(2, 3))

    def test_moves_contents_keeping_addresses(self, service, context, box, spare, items, records):
        service.store(
            context,
            [StoreInput("a-1", _at(box), Address(1, 1)), StoreInput("a-2", _at(box), Address(2, 2))],
        )
        moved = service.transfer(context, _at(box), LocationIdentifier.of_barcode(spare.barcode))
        assert {i.barcode for i in moved} == {"a-1", "a-2"}
        assert items.stored_in(box.id) == []
        placed = {str(i.address): i.barcode for i in items.stored_in(spare.id)}
        assert placed == {"A1": "a-1", "B2": "a-2"}
        assert len(records.records_for_location(spare.id)) == 2

    def test_same_location_refused(self, service, context, box):
        with pytest.raises(InvalidTransferError) as exc_info:
            service.transfer(context, _at(box), LocationIdentifier.of_barcode(box.barcode))
        assert str(exc_info.value) == "The source cannot be the destination."

    def test_empty_source(self, service, context, box, spare):
        assert service.transfer(context, _at(box), _at(spare)) == []

    def test_destination_too_small(self, service, context, make_location, box):
        vial = make_location("Vial rack", size=(1, 1))
        service.store_barcode(context, "a-1", _at(box), Address(2, 3))
        with pytest.raises(PlacementConflictError, match="outside of listed size"):
            service.transfer(context, _at(box), _at(vial))

    def test_destination_occupied(self, service, context, box, spare):
        service.store_barcode(context, "a-1", _at(box), Address(1, 1))
        service.store_barcode(context, "b-1", _at(spare), Address(1, 1))
        with pytest.raises(PlacementConflictError, match="already occupied"):
            service.transfer(context, _at(box), _at(spare))
