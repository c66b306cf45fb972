"""
Row extraction into listing records.
"""

from __future__ import annotations

from typing import Iterable

from ..normalize.parsing import fill_template, normalize_whitespace, resolve_url
from ..normalize.records import TEXT_FIELDS, ListingRecord
from .base import ColumnMapping, RawRow


def build_detail_link(
    identifier: str,
    template: str,
    base_url: str | None = None,
) -> str | None:
    """Bookmarkable detail URL for a row identifier, None when it is empty."""
    identifier = normalize_whitespace(identifier)
    if not identifier:
        return None
    return resolve_url(fill_template(template, identifier), base_url)


def extract_row(
    row: RawRow,
    mapping: ColumnMapping,
    detail_template: str,
    base_url: str | None = None,
) -> ListingRecord | None:
    """Convert one grid row into a normalized record.

    Unmapped or out-of-range columns yield empty strings. Rows with neither
    a contract number nor a title are dropped (None).
    """
    cells = [normalize_whitespace(c) for c in row.cells]
    record = ListingRecord(
        id=normalize_whitespace(row.id),
        **{name: mapping.cell(cells, name) for name in TEXT_FIELDS},
    )
    record.detail_link = build_detail_link(record.id, detail_template, base_url)

    if not record.is_listing:
        return None
    return record


def extract_rows(
    rows: Iterable[RawRow],
    mapping: ColumnMapping,
    detail_template: str,
    base_url: str | None = None,
) -> list[ListingRecord]:
    """Extract every listing row, skipping rows that are not listings."""
    records = []
    for row in rows:
        record = extract_row(row, mapping, detail_template, base_url)
        if record is not None:
            records.append(record)
    return records
