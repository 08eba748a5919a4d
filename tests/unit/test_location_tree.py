"""Tests for tree traversal and structural checks over an in-memory graph."""

from dataclasses import dataclass

import pytest

from storage_kernel.domain.location_tree import (
    check_cycle,
    check_parent_with_address,
    hierarchy,
    qualified_label,
    same_location,
)
from storage_kernel.domain.values import Address, Size


@dataclass(eq=False)
class FakeLocation:
    id: int
    barcode: str
    name: str | None = None
    parent_id: int | None = None
    address: Address | None = None
    size: Size | None = None


class FakeGraph:
    """LocationGraph backed by a dict."""

    def __init__(self, *locations: FakeLocation):
        self.by_id = {loc.id: loc for loc in locations}

    def parent_of(self, location):
        if location.parent_id is None:
            return None
        return self.by_id[location.parent_id]

    def has_children(self, location):
        return any(loc.parent_id == location.id for loc in self.by_id.values())

    def child_at(self, parent, address):
        for loc in self.by_id.values():
            if loc.parent_id == parent.id and loc.address == address:
                return loc
        return None


@pytest.fixture
def tree():
    """Freezer (2x2) > Shelf at A1 > Box at A1; Rack is a separate root."""
    freezer = FakeLocation(1, "STO-001F", "Freezer", size=Size(2, 2))
    shelf = FakeLocation(2, "STO-002E", "Shelf", parent_id=1, address=Address(1, 1))
    box = FakeLocation(3, "STO-003D", None, parent_id=2, address=Address(2, 3))
    rack = FakeLocation(4, "STO-004C", "Rack")
    return FakeGraph(freezer, shelf, box, rack)


class TestHierarchy:
    def test_root_first(self, tree):
        chain = hierarchy(tree.by_id[3], tree)
        assert [loc.id for loc in chain] == [1, 2, 3]

    def test_root_alone(self, tree):
        assert hierarchy(tree.by_id[4], tree) == [tree.by_id[4]]

    def test_terminates_on_corrupt_loop(self):
        a = FakeLocation(1, "STO-001F", parent_id=2)
        b = FakeLocation(2, "STO-002E", parent_id=1)
        graph = FakeGraph(a, b)
        assert [loc.id for loc in hierarchy(a, graph)] == [2, 1]


class TestQualifiedLabel:
    def test_root_barcode_and_names_then_address(self, tree):
        assert qualified_label(tree.by_id[3], tree) == "STO-001F Freezer / Shelf / B3"

    def test_unnamed_root_uses_barcode(self):
        root = FakeLocation(1, "STO-001F")
        child = FakeLocation(2, "STO-002E", parent_id=1)
        assert qualified_label(child, FakeGraph(root, child)) == "STO-001F / STO-002E"


class TestCheckCycle:
    def test_own_parent_refused(self, tree):
        assert check_cycle(tree.by_id[2], tree.by_id[2], tree) == (
            "Location cannot be the parent of itself."
        )

    def test_immediate_child_refused(self, tree):
        assert check_cycle(tree.by_id[1], tree.by_id[2], tree) == (
            "Location cannot be the parent of its own parent."
        )

    def test_deeper_descendant_refused(self, tree):
        assert check_cycle(tree.by_id[1], tree.by_id[3], tree) == (
            "Location cannot be the parent of a location that indirectly contains it."
        )

    def test_unrelated_parent_accepted(self, tree):
        assert check_cycle(tree.by_id[1], tree.by_id[4], tree) is None

    def test_leaf_skips_walk(self, tree):
        class CountingGraph(FakeGraph):
            walked = 0

            def parent_of(self, location):
                CountingGraph.walked += 1
                return super().parent_of(location)

        graph = CountingGraph(*tree.by_id.values())
        assert check_cycle(graph.by_id[3], graph.by_id[4], graph) is None
        assert CountingGraph.walked == 0


class TestCheckParentWithAddress:
    def test_no_address_always_fine(self, tree):
        assert check_parent_with_address(tree.by_id[4], None, None, tree) is None

    def test_root_cannot_have_address(self, tree):
        assert check_parent_with_address(tree.by_id[4], None, Address(1, 1), tree) == (
            "A location without a parent cannot have an address."
        )

    def test_out_of_bounds(self, tree):
        assert check_parent_with_address(tree.by_id[4], tree.by_id[1], Address(3, 1), tree) == (
            "Address C1 is out of bounds for the specified parent."
        )

    def test_occupied_by_sibling(self, tree):
        assert check_parent_with_address(tree.by_id[4], tree.by_id[1], Address(1, 1), tree) == (
            "Address A1 is occupied by another location."
        )

    def test_own_address_is_not_a_collision(self, tree):
        assert check_parent_with_address(tree.by_id[2], tree.by_id[1], Address(1, 1), tree) is None

    def test_unsized_parent_has_no_bounds(self, tree):
        assert check_parent_with_address(tree.by_id[4], tree.by_id[2], Address(9, 9), tree) is None


class TestSameLocation:
    def test_by_id(self):
        assert same_location(FakeLocation(1, "a"), FakeLocation(1, "b"))
        assert not same_location(FakeLocation(1, "a"), FakeLocation(2, "a"))
        assert not same_location(None, FakeLocation(1, "a"))
