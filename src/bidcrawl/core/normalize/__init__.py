"""Normalization of extracted listing data."""

from .parsing import fill_template, normalize_whitespace, resolve_url
from .records import (
    TEXT_FIELDS,
    FileLink,
    ListingRecord,
    dedupe_records,
    identity_key,
    unique_by,
)

__all__ = [
    # Parsing
    "fill_template",
    "normalize_whitespace",
    "resolve_url",
    # Records
    "TEXT_FIELDS",
    "FileLink",
    "ListingRecord",
    "dedupe_records",
    "identity_key",
    "unique_by",
]
