from __future__ import annotations

"""
Listing Flag Classifier.

Maps the per-entry flag string of the query tool onto one of the four
storage buckets.
"""

from boxdu.domain.constants import (
    BUCKET_CURRENT,
    BUCKET_DELETED,
    BUCKET_OLD,
    BUCKET_UNCLEAR,
    FLAG_ATTRIBUTES,
    FLAG_DELETED,
    FLAG_OLD,
    FLAG_REMOVE_ASAP,
)


def classify_flags(flags: str) -> str:
    """
    Select the bucket for an entry from its flags.

    An entry may carry several flags at once. Deletion wins over the
    attributes flag, which wins over the old-version flag; the position of
    the characters in the string is irrelevant.

    Args:
        flags: Raw flag characters of the entry.

    Returns:
        str: One of the bucket names.
    """
    if FLAG_DELETED in flags:
        return BUCKET_DELETED
    if FLAG_ATTRIBUTES in flags:
        return BUCKET_UNCLEAR
    if FLAG_OLD in flags:
        return BUCKET_OLD
    return BUCKET_CURRENT


def has_removal_flag(flags: str) -> bool:
    """Whether the store marked the entry for removal as soon as possible."""
    return FLAG_REMOVE_ASAP in flags
