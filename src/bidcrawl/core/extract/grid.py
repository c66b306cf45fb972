"""
Grid snapshot reading.

Tries the configured grid layouts in order against the visible document;
the first layout whose row selector matches wins. Client-rendered pages
are read with a script run inside the browser, server-rendered HTML with
lxml. Both produce the same GridSnapshot.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from lxml import html as lxml_html
from lxml.cssselect import SelectorError
from lxml.html import HtmlElement

from ..normalize.parsing import normalize_whitespace
from .base import GridSnapshot, NextControl, RawRow

if TYPE_CHECKING:
    from ..backends.base import DocumentSession
    from ..config.models import GridConfig, PaginationConfig


logger = logging.getLogger(__name__)


GRID_SNAPSHOT_SCRIPT = """
(spec) => {
    const norm = (s) => (s || "").replace(/\\s+/g, " ").trim();
    const query = (root, sel) => {
        try { return Array.from(root.querySelectorAll(sel)); } catch (e) { return []; }
    };

    let layout = null;
    let headers = [];
    let rows = [];
    for (const l of spec.layouts) {
        const trs = query(document, l.row_selector);
        if (!trs.length) continue;
        layout = l.name;
        headers = query(document, l.header_selector).map((th) => norm(th.innerText));
        rows = trs.map((tr) => ({
            id: tr.getAttribute(l.id_attribute) || "",
            text: norm(tr.innerText),
            cells: query(tr, l.cell_selector).map((td) => norm(td.innerText)),
        }));
        break;
    }

    let pageIndicator = "";
    for (const sel of spec.indicator_selectors) {
        const el = query(document, sel)[0];
        if (el) { pageIndicator = norm(el.value); break; }
    }

    let nextControl = null;
    for (const sel of spec.next_selectors) {
        const el = query(document, sel)[0];
        if (!el) continue;
        const classes = Array.from(el.classList || []);
        const disabled =
            spec.disabled_markers.some((m) => classes.includes(m)) ||
            el.hasAttribute("disabled") ||
            el.getAttribute("aria-disabled") === "true";
        nextControl = { selector: sel, disabled };
        break;
    }

    return { layout, headers, rows, page_indicator: pageIndicator, next_control: nextControl };
}
"""


def _select(root: HtmlElement, selector: str) -> list[HtmlElement]:
    """CSS select that treats unsupported selectors as no match."""
    try:
        return root.cssselect(selector)
    except SelectorError:
        logger.debug(f"Unsupported selector skipped: {selector}")
        return []


def _text(element: HtmlElement) -> str:
    return normalize_whitespace(element.text_content())


def parse_grid_html(
    html: str,
    layouts: list[dict[str, str]],
    next_selectors: list[str],
    disabled_markers: list[str],
    indicator_selectors: list[str],
) -> GridSnapshot:
    """Read a grid snapshot from serialized HTML."""
    if not html or not html.strip():
        return GridSnapshot()

    doc = lxml_html.fromstring(html)
    snapshot = GridSnapshot()

    for layout in layouts:
        trs = _select(doc, layout["row_selector"])
        if not trs:
            continue
        snapshot.layout = layout["name"]
        snapshot.headers = [_text(th) for th in _select(doc, layout["header_selector"])]
        snapshot.rows = [
            RawRow(
                id=tr.get(layout.get("id_attribute", "id")) or "",
                text=_text(tr),
                cells=[_text(td) for td in _select(tr, layout.get("cell_selector", "td"))],
            )
            for tr in trs
        ]
        break

    for selector in indicator_selectors:
        found = _select(doc, selector)
        if found:
            snapshot.page_indicator = normalize_whitespace(found[0].get("value"))
            break

    for selector in next_selectors:
        found = _select(doc, selector)
        if not found:
            continue
        element = found[0]
        classes = (element.get("class") or "").split()
        disabled = (
            any(marker in classes for marker in disabled_markers)
            or element.get("disabled") is not None
            or element.get("aria-disabled") == "true"
        )
        snapshot.next_control = NextControl(selector=selector, disabled=disabled)
        break

    return snapshot


class GridReader:
    """Reads grid snapshots from a live session.

    Layouts, pager selectors and disabled markers come from configuration
    and are tried in order.
    """

    def __init__(self, grid: GridConfig, pagination: PaginationConfig):
        self.grid = grid
        self.pagination = pagination

    def script_arg(self) -> dict[str, Any]:
        """Argument passed to the snapshot script."""
        return {
            "layouts": [layout.model_dump() for layout in self.grid.layouts],
            "next_selectors": list(self.pagination.next_selectors),
            "disabled_markers": list(self.pagination.disabled_markers),
            "indicator_selectors": list(self.pagination.indicator_selectors),
        }

    async def read(self, session: DocumentSession) -> GridSnapshot:
        """Take one snapshot of the visible page."""
        arg = self.script_arg()

        if session.supports_javascript:
            data = await session.evaluate(GRID_SNAPSHOT_SCRIPT, arg)
            return GridSnapshot.from_dict(data)

        html = await session.content()
        return parse_grid_html(
            html,
            arg["layouts"],
            arg["next_selectors"],
            arg["disabled_markers"],
            arg["indicator_selectors"],
        )
