"""
Code -> full name lookup join.

Builds the agency code map once, before the walk, from a lookup page linked
from the start page. Two strategies are tried in order: a table whose
headers look like code/name columns, then "CODE - Description" lines in the
page text. Any failure yields an empty map; the join is never fatal.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from lxml import html as lxml_html
from lxml.html import HtmlElement
from thefuzz import fuzz

from ..extract.fragments import parse_html_fragment
from ..normalize.parsing import normalize_whitespace, resolve_url

if TYPE_CHECKING:
    from ..backends.base import DocumentSession
    from ..config.models import LookupConfig


logger = logging.getLogger(__name__)

ABBREVIATION_LINE = re.compile(r"^\s*([A-Z][A-Z0-9&]*(?:/[A-Z0-9]+)?)\s*-\s*(.+?)\s*$")


def find_lookup_link(html: str, link_text: str, base_url: str | None = None) -> str | None:
    """Absolute URL of the first anchor whose text contains ``link_text``."""
    if not html or not link_text:
        return None
    doc = lxml_html.fromstring(html)
    needle = link_text.lower()
    for anchor in doc.xpath("//a[@href]"):
        text = normalize_whitespace(anchor.text_content()).lower()
        if needle in text:
            return resolve_url(anchor.get("href"), base_url) or None
    return None


def _table_rows(table: HtmlElement) -> list[list[str]]:
    rows = []
    for tr in table.xpath(".//tr"):
        rows.append([normalize_whitespace(c.text_content()) for c in tr.xpath("./th|./td")])
    return rows


def _best_column(
    headers: list[str],
    candidates: list[str],
    min_score: int,
    exclude: int | None = None,
) -> tuple[int | None, int]:
    """Index and score of the header scoring highest against any candidate."""
    best_index = None
    best_score = 0
    for index, header in enumerate(headers):
        if index == exclude or not header:
            continue
        lowered = header.lower()
        score = max(fuzz.partial_ratio(lowered, c.lower()) for c in candidates)
        if score > best_score and score >= min_score:
            best_index = index
            best_score = score
    return best_index, best_score


def _pairs_to_map(rows: list[list[str]], code_col: int, name_col: int) -> dict[str, str]:
    mapping: dict[str, str] = {}
    for cells in rows:
        if max(code_col, name_col) >= len(cells):
            continue
        code = cells[code_col]
        name = cells[name_col]
        if code and name and code not in mapping:
            mapping[code] = name
    return mapping


def parse_lookup_table(
    tree: HtmlElement,
    code_headers: list[str],
    name_headers: list[str],
    min_score: int = 80,
) -> dict[str, str]:
    """Code map from the table whose headers best match code/name headers.

    Every table is scored by its combined code and name header scores; the
    first table wins ties. Falls back to the first table's first two
    columns when no table has recognizable headers.
    """
    tables = tree.xpath("//table")
    if not tables:
        return {}

    best: tuple[int, list[list[str]], int, int] | None = None
    for table in tables:
        rows = _table_rows(table)
        if len(rows) < 2:
            continue
        headers = rows[0]
        code_col, code_score = _best_column(headers, code_headers, min_score)
        if code_col is None:
            continue
        name_col, name_score = _best_column(headers, name_headers, min_score, exclude=code_col)
        if name_col is None:
            continue
        score = code_score + name_score
        if best is None or score > best[0]:
            best = (score, rows, code_col, name_col)

    if best is not None:
        _, rows, code_col, name_col = best
        logger.debug(f"Lookup table columns: code={rows[0][code_col]!r} name={rows[0][name_col]!r}")
        return _pairs_to_map(rows[1:], code_col, name_col)

    rows = _table_rows(tables[0])
    # Skip a header row when the table has one
    if rows and tables[0].xpath("(.//tr)[1]/th"):
        rows = rows[1:]
    return _pairs_to_map(rows, 0, 1)


def parse_abbreviation_lines(tree: HtmlElement) -> dict[str, str]:
    """Code map from "CODE - Description" lines in the page text."""
    mapping: dict[str, str] = {}
    text = "\n".join(tree.itertext())
    for line in text.splitlines():
        match = ABBREVIATION_LINE.match(line)
        if not match:
            continue
        code = match.group(1)
        name = normalize_whitespace(match.group(2))
        if name and code not in mapping:
            mapping[code] = name
    return mapping


def parse_lookup_page(html: str, config: LookupConfig) -> dict[str, str]:
    """Run the lookup strategies in order; the first non-empty result wins."""
    tree = parse_html_fragment(html)
    if tree is None:
        return {}

    mapping = parse_lookup_table(
        tree, config.code_headers, config.name_headers, config.min_header_score
    )
    if mapping:
        return mapping
    return parse_abbreviation_lines(tree)


class LookupJoin:
    """Builds the code -> full name map for a run."""

    def __init__(self, config: LookupConfig, start_url: str | None = None):
        self.config = config
        self.start_url = start_url

    async def resolve_url(self, session: DocumentSession) -> str | None:
        """Lookup page URL: configured, or discovered from the current page."""
        if self.config.url:
            return resolve_url(self.config.url, session.current_url or self.start_url)
        html = await session.content()
        return find_lookup_link(html, self.config.link_text, session.current_url or self.start_url)

    async def build(self, session: DocumentSession) -> dict[str, str]:
        """Fetch and parse the lookup page.

        Returns:
            Code -> full name map, empty if anything goes wrong
        """
        if not self.config.enabled:
            return {}

        try:
            url = await self.resolve_url(session)
            if not url:
                logger.info(f"No '{self.config.link_text}' link found; agency names left unresolved")
                return {}
            html = await session.fetch_text(url)
            mapping = parse_lookup_page(html, self.config)
        except Exception as e:
            logger.warning(f"Agency lookup failed: {e}")
            return {}

        logger.info(f"Loaded {len(mapping)} agency codes from {url}")
        return mapping
