"""
JSON export of crawl results.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Iterable

from bidcrawl.core.normalize.records import ListingRecord

logger = logging.getLogger(__name__)


def records_to_data(records: Iterable[ListingRecord], url_key: str = "Url") -> list[dict[str, Any]]:
    """Serialize records with the output field names."""
    return [record.to_dict(url_key) for record in records]


def write_records(
    records: list[ListingRecord],
    path: Path | str,
    url_key: str = "Url",
    indent: int = 4,
) -> Path:
    """Write records as a pretty-printed UTF-8 JSON array.

    The file is written to a temporary sibling first and moved into place,
    so an interrupted write never leaves a truncated result behind.

    Args:
        records: Records in output order
        path: Destination file
        url_key: Key used for file URLs
        indent: JSON indentation

    Returns:
        The path written
    """
    path = Path(path)
    if path.parent and not path.parent.exists():
        path.parent.mkdir(parents=True, exist_ok=True)

    data = records_to_data(records, url_key)
    tmp_path = path.with_name(f".{path.name}.tmp")
    tmp_path.write_text(
        json.dumps(data, indent=indent or None, ensure_ascii=False),
        encoding="utf-8",
    )
    os.replace(tmp_path, path)

    logger.info(f"Wrote {len(data)} records to {path}")
    return path


def read_records(path: Path | str) -> list[dict[str, Any]]:
    """Load a previously written result file."""
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)
