"""
Insertion-ordered, case-insensitive set of strings.

Membership, insertion and removal compare upper-cased keys; iteration and
display yield the casing of the first insertion of each key.  Used as the
working set of barcodes taking part in a request.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, MutableSet


class CaseInsensitiveStringSet(MutableSet[str]):
    """
    Contract:
        Two strings that differ only by case are the same member.

    Guarantees:
        - Iteration order is first-insertion order.
        - The first supplied casing is kept; later inserts of the same key
          are no-ops.
        - Equality with another set compares upper-cased contents only.

    Non-goals:
        - Hashable: the set is mutable, so instances are unhashable.
    """

    __slots__ = ("_members",)

    def __init__(self, values: Iterable[str] = ()):
        self._members: dict[str, str] = {}
        for value in values:
            self.add(value)

    @classmethod
    def of(cls, *values: str) -> CaseInsensitiveStringSet:
        return cls(values)

    @staticmethod
    def _key(value: str) -> str:
        return value.upper()

    def __contains__(self, value: object) -> bool:
        return isinstance(value, str) and self._key(value) in self._members

    def __iter__(self) -> Iterator[str]:
        return iter(self._members.values())

    def __len__(self) -> int:
        return len(self._members)

    def add(self, value: str) -> None:
        self._members.setdefault(self._key(value), value)

    def discard(self, value: str) -> None:
        self._members.pop(self._key(value), None)

    def add_new(self, value: str) -> bool:
        """Add ``value``; return False if an equal member was already present."""
        key = self._key(value)
        if key in self._members:
            return False
        self._members[key] = value
        return True

    def update(self, values: Iterable[str]) -> None:
        for value in values:
            self.add(value)

    def upper_keys(self) -> list[str]:
        """Upper-cased members, in iteration order (for query parameters)."""
        return list(self._members)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, CaseInsensitiveStringSet):
            return self._members.keys() == other._members.keys()
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"{type(self).__name__}({list(self)!r})"
