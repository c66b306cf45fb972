"""
Header alias column resolution.

Maps logical fields to column indexes by case-insensitive substring
matching of header labels. Pure functions, no document access.
"""

from __future__ import annotations

from typing import Iterable, Sequence

from ..normalize.parsing import normalize_whitespace
from .base import NOT_FOUND, ColumnMapping


def resolve_column(headers: Sequence[str | None], aliases: Iterable[str]) -> int:
    """Index of the first header containing any alias, or NOT_FOUND.

    Headers are scanned left to right; missing or empty header text
    never matches.

        >>> resolve_column(["Bid #", "Title", "Open Date"], ["bid", "#"])
        0
    """
    needles = [a.lower() for a in aliases if a]
    if not needles:
        return NOT_FOUND

    for index, header in enumerate(headers):
        text = normalize_whitespace(header).lower()
        if not text:
            continue
        if any(alias in text for alias in needles):
            return index

    return NOT_FOUND


def resolve_columns(
    headers: Sequence[str | None],
    field_aliases: dict[str, list[str]],
) -> ColumnMapping:
    """Resolve every logical field against one page's headers."""
    return ColumnMapping(
        {field: resolve_column(headers, aliases) for field, aliases in field_aliases.items()}
    )
