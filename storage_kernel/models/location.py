"""
Module: storage_kernel.models.location
Responsibility: ORM persistence for storage locations: freezers, shelves,
    racks, boxes and any other node of the storage hierarchy.
Architecture position: Kernel > Models.  May import from db/base.py and
    domain/values.py only.  MUST NOT import from services/, selectors/ or
    outer layers.

Invariants enforced:
    - barcode is unique and never changes after creation.
    - (parent_id, row_index, col_index) is unique, so two sibling locations
      can never commit at the same address.
    - The parent is an id reference; children and contents are found with
      explicit selector queries, never lazy collections.

Failure modes:
    - IntegrityError on duplicate barcode or sibling address collision.
    - IntegrityError if parent_id names a location that does not exist.
"""

from __future__ import annotations

from sqlalchemy import ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from storage_kernel.db.base import TrackedBase
from storage_kernel.domain.values import Address, GridDirection, Size
from storage_kernel.domain.values import address_index as grid_index
from storage_kernel.utils.messages import quote

MAX_NAME_LENGTH = 64
MAX_DESCRIPTION_LENGTH = 256


class Location(TrackedBase):
    """
    A node in the storage tree, possibly an addressable grid.

    Contract:
        ``address`` is this location's position inside its parent;
        ``size`` and ``grid_direction`` describe its own grid.  Address
        and size are stored as plain integer column pairs and exposed as
        value objects.

    Guarantees:
        - ``address_index(address)`` maps an address inside this grid to
          its 1-based sequence number under ``grid_direction``.

    Non-goals:
        - Tree invariants (cycles, sibling collisions, bounds) are checked
          by LocationService and domain.location_tree, not here.
    """

    __tablename__ = "locations"

    __table_args__ = (
        UniqueConstraint("barcode", name="uq_location_barcode"),
        UniqueConstraint(
            "parent_id", "row_index", "col_index", name="uq_location_parent_address"
        ),
        Index("idx_location_parent", "parent_id"),
        {"sqlite_autoincrement": True},
    )

    barcode: Mapped[str] = mapped_column(String(32), nullable=False)

    name: Mapped[str | None] = mapped_column(String(MAX_NAME_LENGTH), nullable=True)

    description: Mapped[str | None] = mapped_column(
        String(MAX_DESCRIPTION_LENGTH),
        nullable=True,
    )

    parent_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("locations.id"),
        nullable=True,
    )

    # Position inside the parent
    row_index: Mapped[int | None] = mapped_column(nullable=True)
    col_index: Mapped[int | None] = mapped_column(nullable=True)

    # Own grid capacity
    num_rows: Mapped[int | None] = mapped_column(nullable=True)
    num_columns: Mapped[int | None] = mapped_column(nullable=True)

    direction: Mapped[str | None] = mapped_column(String(16), nullable=True)

    @property
    def address(self) -> Address | None:
        if self.row_index is None or self.col_index is None:
            return None
        return Address(self.row_index, self.col_index)

    @address.setter
    def address(self, value: Address | None) -> None:
        self.row_index = value.row if value is not None else None
        self.col_index = value.column if value is not None else None

    @property
    def size(self) -> Size | None:
        if self.num_rows is None or self.num_columns is None:
            return None
        return Size(self.num_rows, self.num_columns)

    @size.setter
    def size(self, value: Size | None) -> None:
        self.num_rows = value.num_rows if value is not None else None
        self.num_columns = value.num_columns if value is not None else None

    @property
    def grid_direction(self) -> GridDirection | None:
        return GridDirection(self.direction) if self.direction is not None else None

    @grid_direction.setter
    def grid_direction(self, value: GridDirection | None) -> None:
        self.direction = value.value if value is not None else None

    def address_index(self, address: Address | None) -> int | None:
        return grid_index(address, self.size, self.grid_direction)

    def identity_label(self) -> str:
        """``(id=2, barcode="STO-0022")`` as used in placement messages."""
        return f"(id={self.id}, barcode={quote(self.barcode)})"

    def __repr__(self) -> str:
        return f"<Location id={self.id} barcode={self.barcode!r}>"
