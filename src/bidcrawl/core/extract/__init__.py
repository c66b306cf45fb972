"""Grid, row and fragment extraction."""

from .base import (
    NOT_FOUND,
    ColumnMapping,
    GridSnapshot,
    NextControl,
    PageSignature,
    RawRow,
)
from .fragments import FragmentData, merge_files, parse_fragment
from .grid import GRID_SNAPSHOT_SCRIPT, GridReader, parse_grid_html
from .resolver import resolve_column, resolve_columns
from .rows import build_detail_link, extract_row, extract_rows

__all__ = [
    "NOT_FOUND",
    "ColumnMapping",
    "GridSnapshot",
    "NextControl",
    "PageSignature",
    "RawRow",
    "FragmentData",
    "merge_files",
    "parse_fragment",
    "GRID_SNAPSHOT_SCRIPT",
    "GridReader",
    "parse_grid_html",
    "resolve_column",
    "resolve_columns",
    "build_detail_link",
    "extract_row",
    "extract_rows",
]
