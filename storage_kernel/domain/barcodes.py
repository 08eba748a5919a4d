"""
Location barcode arithmetic.

Location barcodes are ``STO-`` followed by the allocated sequence number in
uppercase hexadecimal (at least three digits) and one checksum hex digit.
Walking the hex digits right to left, digits at odd positions are tripled;
the checksum digit brings the weighted sum to a multiple of 16.

The ``STO-`` prefix is reserved: item barcodes may not start with it.
"""

from __future__ import annotations

STORE_PREFIX = "STO-"
MIN_HEX_DIGITS = 3

_HEX_DIGITS = frozenset("0123456789ABCDEF")

MIN_ITEM_BARCODE_LENGTH = 2
MAX_ITEM_BARCODE_LENGTH = 64


def checksum(hex_digits: str) -> str:
    """Checksum character for an uppercase hex string."""
    total = 0
    for position, digit in enumerate(reversed(hex_digits)):
        value = int(digit, 16)
        total += value * 3 if position % 2 else value
    return format(-total % 16, "X")


def store_barcode(sequence_value: int, prefix: str = STORE_PREFIX) -> str:
    """Render a sequence value as a checksummed location barcode."""
    if sequence_value < 0:
        raise ValueError(f"Sequence value must not be negative: {sequence_value}")
    digits = format(sequence_value, "X").zfill(MIN_HEX_DIGITS)
    return f"{prefix}{digits}{checksum(digits)}"


def is_valid_store_barcode(barcode: str, prefix: str = STORE_PREFIX) -> bool:
    """True if ``barcode`` has the prefix, a hex body and a matching checksum."""
    if not barcode.upper().startswith(prefix.upper()):
        return False
    body = barcode[len(prefix):].upper()
    if len(body) < MIN_HEX_DIGITS + 1:
        return False
    digits, check = body[:-1], body[-1]
    if any(ch not in _HEX_DIGITS for ch in body):
        return False
    return checksum(digits) == check


def has_store_prefix(barcode: str) -> bool:
    return barcode.upper().startswith(STORE_PREFIX)
