"""Utility modules for the storage kernel."""

from storage_kernel.utils.ci_string_set import CaseInsensitiveStringSet
from storage_kernel.utils.messages import plain_list, pluralise, quote, quoted_list

__all__ = [
    "CaseInsensitiveStringSet",
    "plain_list",
    "pluralise",
    "quote",
    "quoted_list",
]
