"""
Message formatting helpers.

Every user-facing failure in the kernel is a composite sentence listing
offending values.  These helpers keep the wording consistent: grammatical
number follows the count, and string values are shown double-quoted with
escapes so surrounding whitespace stays visible.
"""

import json
import re
from collections.abc import Iterable
from typing import Any

_PLACEHOLDER = re.compile(r"\{([^{}]*)\}")


def pluralise(template: str, count: int) -> str:
    """
    Resolve number-dependent placeholders in a message template.

    Placeholders:
        ``{s}``        -- empty when count is 1, otherwise the text inside.
        ``{a|b}``      -- ``a`` when count is 1, otherwise ``b``.
        ``{#}``        -- the count itself.  ``#`` may also be used as
                          either side of ``{a|b}``.

    Examples:
        >>> pluralise("Barcode{s} {has|have} surrounding whitespace:", 2)
        'Barcodes have surrounding whitespace:'
        >>> pluralise("{An|#} item{s} removed.", 1)
        'An item removed.'
    """

    def _resolve(match: re.Match[str]) -> str:
        first, sep, second = match.group(1).partition("|")
        if sep:
            chosen = first if count == 1 else second
        elif first == "#":
            chosen = "#"
        else:
            chosen = "" if count == 1 else first
        return str(count) if chosen == "#" else chosen

    return _PLACEHOLDER.sub(_resolve, template)


def quote(value: Any) -> str:
    """Double-quoted, escaped rendering of a string (``null`` for None)."""
    return json.dumps(value)


def quoted_list(values: Iterable[Any]) -> str:
    """``["A", "B"]`` rendering of string values."""
    return "[" + ", ".join(quote(v) for v in values) + "]"


def plain_list(values: Iterable[Any]) -> str:
    """``[1, 2]`` rendering using each value's ``str()``."""
    return "[" + ", ".join(str(v) for v in values) + "]"
