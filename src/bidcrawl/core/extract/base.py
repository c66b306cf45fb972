"""
Extraction data structures.

A grid snapshot is one structural read of the visible listing page. It is
the single source for row extraction and for the pagination signature.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator

# Column index meaning "field not found on this page"
NOT_FOUND = -1


class ColumnMapping:
    """Logical field name -> column index for one page's grid.

    Unknown fields resolve to NOT_FOUND.
    """

    def __init__(self, indexes: dict[str, int] | None = None):
        self._indexes: dict[str, int] = dict(indexes or {})

    def __getitem__(self, field_name: str) -> int:
        return self._indexes.get(field_name, NOT_FOUND)

    def __iter__(self) -> Iterator[str]:
        return iter(self._indexes)

    def __len__(self) -> int:
        return len(self._indexes)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ColumnMapping):
            return self._indexes == other._indexes
        if isinstance(other, dict):
            return self._indexes == other
        return NotImplemented

    def __repr__(self) -> str:
        return f"ColumnMapping({self._indexes!r})"

    def found(self) -> dict[str, int]:
        """Fields that resolved to a column."""
        return {k: v for k, v in self._indexes.items() if v != NOT_FOUND}

    def missing(self) -> list[str]:
        """Fields with no matching column on this page."""
        return [k for k, v in self._indexes.items() if v == NOT_FOUND]

    def cell(self, cells: list[str], field_name: str) -> str:
        """Cell text for a field, empty when unmapped or out of bounds."""
        index = self[field_name]
        if index < 0 or index >= len(cells):
            return ""
        return cells[index] or ""


@dataclass
class RawRow:
    """One structural row as read from the grid."""

    id: str = ""
    text: str = ""
    cells: list[str] = field(default_factory=list)


@dataclass
class NextControl:
    """The next-page trigger found on the page."""

    selector: str
    disabled: bool = False


@dataclass(frozen=True)
class PageSignature:
    """Observable identity of the visible page.

    Only used to confirm that a pagination advance changed the view.
    """

    first_row_id: str = ""
    first_row_text: str = ""
    page_indicator: str = ""

    def changed_from(self, before: "PageSignature") -> bool:
        """True when any non-empty component differs from ``before``."""
        return any(
            now and now != prev
            for now, prev in (
                (self.first_row_id, before.first_row_id),
                (self.first_row_text, before.first_row_text),
                (self.page_indicator, before.page_indicator),
            )
        )


@dataclass
class GridSnapshot:
    """Headers, rows and pager state of the visible page."""

    layout: str | None = None
    headers: list[str] = field(default_factory=list)
    rows: list[RawRow] = field(default_factory=list)
    page_indicator: str = ""
    next_control: NextControl | None = None

    @property
    def found(self) -> bool:
        """Whether any configured layout matched."""
        return self.layout is not None

    @property
    def signature(self) -> PageSignature:
        first = self.rows[0] if self.rows else RawRow()
        return PageSignature(
            first_row_id=first.id,
            first_row_text=first.text,
            page_indicator=self.page_indicator,
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "GridSnapshot":
        """Build from the structure returned by the snapshot script."""
        if not data:
            return cls()
        control = data.get("next_control")
        return cls(
            layout=data.get("layout"),
            headers=[str(h or "") for h in data.get("headers") or []],
            rows=[
                RawRow(
                    id=str(r.get("id") or ""),
                    text=str(r.get("text") or ""),
                    cells=[str(c or "") for c in r.get("cells") or []],
                )
                for r in data.get("rows") or []
            ],
            page_indicator=str(data.get("page_indicator") or ""),
            next_control=(
                NextControl(selector=control["selector"], disabled=bool(control.get("disabled")))
                if control and control.get("selector")
                else None
            ),
        )
