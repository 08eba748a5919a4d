"""Tests for location barcode rendering and checksum verification."""

import pytest

from storage_kernel.domain.barcodes import (
    checksum,
    has_store_prefix,
    is_valid_store_barcode,
    store_barcode,
)


class TestChecksum:
    """Odd positions from the right are tripled; total plus check is 0 mod 16."""

    @pytest.mark.parametrize(
        "digits, expected",
        [("001", "F"), ("002", "E"), ("00A", "6"), ("010", "D"), ("0FF", "4"), ("000", "0")],
    )
    def test_known_values(self, digits, expected):
        assert checksum(digits) == expected

    @pytest.mark.parametrize("digits", ["001", "ABC", "1F2E", "FFFFF"])
    def test_weighted_sum_closes_to_multiple_of_16(self, digits):
        full = digits + checksum(digits)
        total = sum(
            int(d, 16) * (3 if pos % 2 else 1)
            for pos, d in enumerate(reversed(full[:-1]))
        )
        assert (total + int(full[-1], 16)) % 16 == 0


class TestStoreBarcode:
    def test_zero_padded_to_three_digits(self):
        assert store_barcode(1) == "STO-001F"
        assert store_barcode(16) == "STO-010D"

    def test_wider_values_are_not_truncated(self):
        barcode = store_barcode(0x1234)
        assert barcode.startswith("STO-1234")
        assert len(barcode) == len("STO-1234") + 1

    def test_negative_rejected(self):
        with pytest.raises(ValueError):
            store_barcode(-1)

    @pytest.mark.parametrize("value", [1, 2, 15, 16, 255, 4096, 65535, 10**6])
    def test_generated_barcodes_verify(self, value):
        assert is_valid_store_barcode(store_barcode(value))


class TestValidation:
    def test_rejects_wrong_checksum(self):
        assert not is_valid_store_barcode("STO-0010")

    def test_rejects_missing_prefix(self):
        assert not is_valid_store_barcode("001F")

    def test_rejects_short_body(self):
        assert not is_valid_store_barcode("STO-01")

    def test_rejects_non_hex(self):
        assert not is_valid_store_barcode("STO-00GF")
        assert not is_valid_store_barcode("STO-0X1F")

    def test_case_insensitive(self):
        assert is_valid_store_barcode("sto-00a6")

    def test_prefix_check(self):
        assert has_store_prefix("sto-anything")
        assert not has_store_prefix("STOCK-1")
