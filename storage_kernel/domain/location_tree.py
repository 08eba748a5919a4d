"""
LocationTree -- hierarchy traversal and structural checks.

Responsibility:
    Walks the location tree through parent id references and answers the
    questions edits and creations depend on: the root-to-self chain, the
    human-readable qualified label, whether a re-parent would introduce a
    cycle, and whether an address is legal inside a given parent.

Architecture position:
    Kernel > Domain.  Pure with respect to I/O: all tree navigation goes
    through a LocationGraph supplied by the caller (the LocationSelector
    in production, an in-memory map in unit tests).  Locations are never
    linked by live object pointers.

Invariants enforced:
    - A location is never its own parent.
    - A location is never re-parented under one of its descendants.
      Checked only by walking up from the candidate parent, and skipped
      when the location has no children (a leaf cannot contain anything
      above itself).
    - An addressed location has a parent, fits the parent's Size and does
      not share its address with a sibling.

Failure modes:
    Check functions return a problem string or None; callers decide how
    to collect and raise them.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from storage_kernel.domain.values import Address

if TYPE_CHECKING:
    from storage_kernel.models.location import Location


class LocationGraph(Protocol):
    """Navigation over persisted locations by id reference."""

    def parent_of(self, location: Location) -> Location | None: ...

    def has_children(self, location: Location) -> bool: ...

    def child_at(self, parent: Location, address: Address) -> Location | None: ...


def same_location(a: Location | None, b: Location | None) -> bool:
    if a is None or b is None:
        return False
    return a is b or (a.id is not None and a.id == b.id)


def hierarchy(location: Location, graph: LocationGraph) -> list[Location]:
    """Root first, ``location`` last.  Never empty."""
    chain = [location]
    seen = {id(location)}
    parent = graph.parent_of(location)
    while parent is not None and id(parent) not in seen:
        chain.append(parent)
        seen.add(id(parent))
        parent = graph.parent_of(parent)
    chain.reverse()
    return chain


def qualified_label(location: Location, graph: LocationGraph) -> str:
    """
    ``STO-001F Freezer 1 / Shelf 2 / B3``-style path from the root.

    The root segment is its barcode plus its name; later segments use
    the name, else the address, else the barcode.
    """
    chain = hierarchy(location, graph)
    root = chain[0]
    parts = [f"{root.barcode} {root.name}" if root.name else root.barcode]
    for loc in chain[1:]:
        if loc.name:
            parts.append(loc.name)
        elif loc.address is not None:
            parts.append(str(loc.address))
        else:
            parts.append(loc.barcode)
    return " / ".join(parts)


def check_cycle(
    location: Location,
    candidate_parent: Location,
    graph: LocationGraph,
) -> str | None:
    """Problem text if making ``candidate_parent`` the parent would form a cycle."""
    if same_location(location, candidate_parent):
        return "Location cannot be the parent of itself."
    if not graph.has_children(location):
        return None
    ancestor = graph.parent_of(candidate_parent)
    if ancestor is None:
        return None
    if same_location(ancestor, location):
        return "Location cannot be the parent of its own parent."
    visited = {ancestor.id}
    ancestor = graph.parent_of(ancestor)
    while ancestor is not None and ancestor.id not in visited:
        if same_location(ancestor, location):
            return "Location cannot be the parent of a location that indirectly contains it."
        visited.add(ancestor.id)
        ancestor = graph.parent_of(ancestor)
    return None


def check_parent_with_address(
    location: Location,
    parent: Location | None,
    address: Address | None,
    graph: LocationGraph,
) -> str | None:
    """Problem text if ``location`` may not sit at ``address`` inside ``parent``."""
    if address is None:
        return None
    if parent is None:
        return "A location without a parent cannot have an address."
    size = parent.size
    if size is not None and not size.contains(address):
        return f"Address {address} is out of bounds for the specified parent."
    occupant = graph.child_at(parent, address)
    if occupant is not None and not same_location(occupant, location):
        return f"Address {address} is occupied by another location."
    return None
