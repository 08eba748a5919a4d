"""
Item barcode validation.

Checks a batch of candidate item barcodes in a single pass and reports
every problem at once.  A barcode falls into at most one shape category,
tested in order: too short, too long, reserved ``STO-`` prefix, surrounding
whitespace.  A case-insensitive repeat is reported as repeated and not
checked further.
"""

from __future__ import annotations

from collections.abc import Iterable

from storage_kernel.domain.barcodes import (
    MAX_ITEM_BARCODE_LENGTH,
    MIN_ITEM_BARCODE_LENGTH,
    has_store_prefix,
)
from storage_kernel.exceptions import InvalidBarcodesError
from storage_kernel.utils.ci_string_set import CaseInsensitiveStringSet
from storage_kernel.utils.messages import pluralise, quoted_list


class ItemBarcodeValidator:
    """
    Contract:
        ``validate`` returns the distinct barcodes (first casing kept) or
        raises InvalidBarcodesError describing every offending value.

    Guarantees:
        - Clauses appear in a fixed order: null, repeated, too short,
          too long, surrounding whitespace, reserved prefix.
        - Each clause agrees in number with the values it lists.
    """

    def validate(self, barcodes: Iterable[str | None]) -> CaseInsensitiveStringSet:
        any_null = False
        seen = CaseInsensitiveStringSet()
        repeated = CaseInsensitiveStringSet()
        too_short = CaseInsensitiveStringSet()
        too_long = CaseInsensitiveStringSet()
        reserved = CaseInsensitiveStringSet()
        untrimmed = CaseInsensitiveStringSet()

        for barcode in barcodes:
            if barcode is None:
                any_null = True
                continue
            if not seen.add_new(barcode):
                repeated.add(barcode)
                continue
            if len(barcode) < MIN_ITEM_BARCODE_LENGTH:
                too_short.add(barcode)
            elif len(barcode) > MAX_ITEM_BARCODE_LENGTH:
                too_long.add(barcode)
            elif has_store_prefix(barcode):
                reserved.add(barcode)
            elif barcode.strip() != barcode:
                untrimmed.add(barcode)

        if not (any_null or repeated or too_short or too_long or reserved or untrimmed):
            return seen

        errors: list[str] = []
        if any_null:
            errors.append("Null given as item barcode.")
        if repeated:
            errors.append(_clause("Barcode{s} repeated:", repeated))
        if too_short:
            errors.append(_clause("Barcode{s} too short:", too_short))
        if too_long:
            errors.append(_clause("Barcode{s} too long:", too_long))
        if untrimmed:
            errors.append(_clause("Barcode{s} {has|have} surrounding whitespace:", untrimmed))
        if reserved:
            errors.append(_clause("Barcodes cannot start with STO-:", reserved))

        raise InvalidBarcodesError(
            " ".join(errors),
            any_null=any_null,
            repeated=list(repeated),
            too_short=list(too_short),
            too_long=list(too_long),
            untrimmed=list(untrimmed),
            reserved_prefix=list(reserved),
        )


def _clause(template: str, barcodes: CaseInsensitiveStringSet) -> str:
    return f"{pluralise(template, len(barcodes))} {quoted_list(barcodes)}."
