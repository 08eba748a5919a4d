"""
Values -- Immutable, self-validating grid value objects.

Responsibility:
    Address (a 1-indexed row/column position), Size (a grid's capacity),
    GridDirection (the traversal order mapping an address to a sequence
    index) and AddressRange (the lazy row-major sequence of a Size's
    addresses).  Text form of addresses is parsed and rendered here.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    Imported by models, selectors and services.  No outward dependencies
    except storage_kernel.exceptions.

Invariants enforced:
    - Address row and column are both >= 1.
    - Size rows and columns are both >= 1.
    - format/parse are inverses: ``Address.parse(str(a)) == a``.
    - For any Size and GridDirection, ``index_of`` is a bijection from
      the Size's addresses onto ``1..rows*columns``.

Failure modes:
    - ValueError on constructing an Address or Size with non-positive parts.
    - InvalidFormatError from ``Address.parse`` for malformed text.
"""

from __future__ import annotations

import re
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import overload

from storage_kernel.exceptions import InvalidFormatError

MAX_LETTER_ROW = 26

_LETTER_FORM = re.compile(r"([A-Z])([0-9]+)")
_NUMERIC_FORM = re.compile(r"([0-9]+),([0-9]+)")


@dataclass(frozen=True, slots=True, order=True)
class Address:
    """
    A 1-indexed (row, column) position within a grid.

    Ordering is row-major; ``column_major_key`` gives the secondary
    column-then-row ordering.  Text form is ``B13`` while the row fits
    a letter (row <= 26) and ``27,3`` beyond that.
    """

    row: int
    column: int

    def __post_init__(self) -> None:
        if self.row < 1 or self.column < 1:
            raise ValueError(
                f"Address row and column must be positive: ({self.row}, {self.column})"
            )

    @classmethod
    def parse(cls, text: str) -> Address:
        """
        Parse ``<Letter><digits>`` or ``<digits>,<digits>``.

        Raises:
            InvalidFormatError: for any other shape, or a zero row/column.
        """
        if not isinstance(text, str):
            raise InvalidFormatError("address", text)
        match = _LETTER_FORM.fullmatch(text)
        if match:
            row = ord(match.group(1)) - ord("A") + 1
            column = int(match.group(2))
        else:
            match = _NUMERIC_FORM.fullmatch(text)
            if not match:
                raise InvalidFormatError("address", text)
            row, column = int(match.group(1)), int(match.group(2))
        if row < 1 or column < 1:
            raise InvalidFormatError("address", text)
        return cls(row, column)

    @staticmethod
    def column_major_key(address: Address) -> tuple[int, int]:
        return (address.column, address.row)

    def __str__(self) -> str:
        if self.row <= MAX_LETTER_ROW:
            return f"{chr(ord('A') + self.row - 1)}{self.column}"
        return f"{self.row},{self.column}"


def parse_address(text: str) -> Address:
    return Address.parse(text)


def format_address(address: Address) -> str:
    return str(address)


@dataclass(frozen=True, slots=True)
class Size:
    """Grid capacity of a location: ``num_rows`` by ``num_columns``."""

    num_rows: int
    num_columns: int

    def __post_init__(self) -> None:
        if self.num_rows < 1 or self.num_columns < 1:
            raise ValueError(
                f"Size rows and columns must be positive: "
                f"({self.num_rows}, {self.num_columns})"
            )

    @property
    def capacity(self) -> int:
        return self.num_rows * self.num_columns

    def contains(self, address: Address) -> bool:
        return address.row <= self.num_rows and address.column <= self.num_columns

    def addresses(self) -> AddressRange:
        """Every address in this Size, row-major."""
        return AddressRange(self)

    def __str__(self) -> str:
        return f"(numRows={self.num_rows}, numColumns={self.num_columns})"


def all_addresses(size: Size) -> AddressRange:
    return AddressRange(size)


class AddressRange(Sequence[Address]):
    """
    Lazy, finite, restartable row-major sequence of a Size's addresses.

    Addresses are computed on access; nothing is materialised.  Each
    iteration starts again from ``A1``.
    """

    __slots__ = ("_size",)

    def __init__(self, size: Size):
        self._size = size

    def __len__(self) -> int:
        return self._size.capacity

    @overload
    def __getitem__(self, index: int) -> Address: ...

    @overload
    def __getitem__(self, index: slice) -> list[Address]: ...

    def __getitem__(self, index: int | slice) -> Address | list[Address]:
        if isinstance(index, slice):
            return [self[i] for i in range(*index.indices(len(self)))]
        if index < 0:
            index += len(self)
        if not 0 <= index < len(self):
            raise IndexError("address index out of range")
        row, column = divmod(index, self._size.num_columns)
        return Address(row + 1, column + 1)

    def __iter__(self) -> Iterator[Address]:
        for row in range(1, self._size.num_rows + 1):
            for column in range(1, self._size.num_columns + 1):
                yield Address(row, column)

    def __contains__(self, value: object) -> bool:
        return isinstance(value, Address) and self._size.contains(value)

    def __repr__(self) -> str:
        return f"AddressRange({self._size})"


class GridDirection(str, Enum):
    """
    Order in which a sized location's addresses are numbered.

    RIGHT_DOWN  -- row-major from the top row.
    DOWN_RIGHT  -- column-major from the top row.
    RIGHT_UP    -- row-major from the bottom row.
    UP_RIGHT    -- column-major from the bottom row.
    """

    RIGHT_DOWN = "RightDown"
    DOWN_RIGHT = "DownRight"
    RIGHT_UP = "RightUp"
    UP_RIGHT = "UpRight"

    def index_of(self, address: Address, size: Size) -> int:
        """1-based sequence index of ``address`` within ``size``.

        Preconditions: ``size.contains(address)``.
        """
        rows, columns = size.num_rows, size.num_columns
        r, c = address.row, address.column
        if self is GridDirection.RIGHT_DOWN:
            return (r - 1) * columns + c
        if self is GridDirection.DOWN_RIGHT:
            return (c - 1) * rows + r
        if self is GridDirection.RIGHT_UP:
            return (rows - r) * columns + c
        return (c - 1) * rows + (rows - r + 1)


def address_index(
    address: Address | None,
    size: Size | None,
    direction: GridDirection | None,
) -> int | None:
    """Index of ``address`` under ``direction``, or None unless all three fit."""
    if address is None or size is None or direction is None:
        return None
    if not size.contains(address):
        return None
    return direction.index_of(address, size)
