"""
Shared test fixtures.

FakeSession stands in for the browser: it serves a list of in-memory HTML
pages, moves to the next page on click, and answers sub-requests from a
URL -> HTML dict with optional latency and failures.
"""

from __future__ import annotations

import asyncio
import random
from urllib.parse import urljoin

import pytest
from lxml import html as lxml_html
from lxml.cssselect import SelectorError

from bidcrawl.core.backends.base import BrowserError, DocumentSession, FetchError
from bidcrawl.core.config.models import (
    CrawlConfig,
    EnrichmentConfig,
    GridConfig,
    LookupConfig,
    OutputConfig,
    PaginationConfig,
)

START_URL = "https://bids.example.gov/Bids"

HEADERS = ["Contract Number", "Contract Title", "Open Date", "Deadline Date", "Agency Code", "UNSPSC"]


class FakeSession(DocumentSession):
    """In-memory navigable document."""

    def __init__(
        self,
        pages: list[str] | None = None,
        fragments: dict[str, str] | None = None,
        url: str = START_URL,
        stall_on_click: bool = False,
        fail_urls: set[str] | None = None,
        delays: dict[str, float] | None = None,
        max_latency: float = 0.0,
        navigate_error: Exception | None = None,
        start_error: Exception | None = None,
        seed: int = 7,
    ):
        self.pages = pages or ["<html><body></body></html>"]
        self.fragments = fragments or {}
        self.url = url
        self.stall_on_click = stall_on_click
        self.fail_urls = fail_urls or set()
        self.delays = delays or {}
        self.max_latency = max_latency
        self.navigate_error = navigate_error
        self.start_error = start_error
        self.random = random.Random(seed)

        self.index = 0
        self.clicks: list[str] = []
        self.fetched: list[str] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self.started = False
        self.closed = False

    @property
    def name(self) -> str:
        return "fake"

    @property
    def current_url(self) -> str:
        return self.url

    async def start(self) -> None:
        if self.start_error is not None:
            raise self.start_error
        self.started = True

    async def navigate(self, url: str, wait_until: str | None = None) -> None:
        if self.navigate_error is not None:
            raise self.navigate_error
        self.url = url
        self.index = 0

    def _matches(self, selector: str) -> bool:
        try:
            return bool(lxml_html.fromstring(self.pages[self.index]).cssselect(selector))
        except SelectorError:
            return False

    async def wait_for_selector(self, selector: str, timeout_ms: int | None = None) -> bool:
        return self._matches(selector)

    async def content(self) -> str:
        return self.pages[self.index]

    async def click(self, selector: str, timeout_ms: int | None = None) -> None:
        if not self._matches(selector):
            raise BrowserError(f"No element for {selector}")
        self.clicks.append(selector)
        if not self.stall_on_click:
            self.index = min(self.index + 1, len(self.pages) - 1)

    async def fetch_text(self, url: str) -> str:
        absolute = urljoin(self.url, url)
        self.fetched.append(absolute)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            delay = self.delays.get(absolute)
            if delay is None:
                delay = self.random.uniform(0, self.max_latency)
            await asyncio.sleep(delay)
            if absolute in self.fail_urls:
                raise FetchError(f"Fetch failed 500 for {absolute}", url=absolute, status_code=500)
            if absolute not in self.fragments:
                raise FetchError(f"Fetch failed 404 for {absolute}", url=absolute, status_code=404)
            return self.fragments[absolute]
        finally:
            self.in_flight -= 1

    async def sleep(self, ms: int) -> None:
        await asyncio.sleep(0)

    async def close(self) -> None:
        self.closed = True


def grid_page(
    rows: list[tuple[str, list[str]]],
    page: int = 1,
    last: bool = False,
    headers: list[str] | None = None,
    next_control: bool = True,
) -> str:
    """jqGrid-style listing page.

    Args:
        rows: (row id, cell texts) pairs
        page: Value shown in the page-number input
        last: Mark the next control disabled
        headers: Header labels (defaults to the Delaware column set)
        next_control: Render the next-page control at all
    """
    headers = HEADERS if headers is None else headers
    ths = "".join(f"<th>{h}</th>" for h in headers)
    trs = "".join(
        f'<tr class="jqgrow" id="{row_id}">' + "".join(f"<td>{c}</td>" for c in cells) + "</tr>"
        for row_id, cells in rows
    )
    pager = ""
    if next_control:
        state = " ui-state-disabled" if last else ""
        pager = f'<table><tr><td id="next_jqg1" class="ui-pg-button{state}">Next</td></tr></table>'
    return f"""
<html><body>
<a href="/Bids/AgencyInfo">Agency Info</a>
<div id="gbox_jqGridBids">
  <table class="ui-jqgrid-htable"><tr>{ths}</tr></table>
  <table id="jqGridBids">{trs}</table>
</div>
{pager}
<input class="ui-pg-input" value="{page}">
</body></html>
"""


def bid_row(row_id: str, number: str, title: str = "Road Resurfacing Project", agency: str = "DOT"):
    """Row tuple with a full Delaware column set."""
    return (row_id, [number, title, "01/05/2026", "02/05/2026", agency, "72141100"])


def detail_fragment(email: str = "buyer@state.example.gov", files: list[tuple[str, str]] | None = None, bid_id: str | None = None) -> str:
    links = "".join(f'<a href="{href}">{title}</a>' for title, href in (files or []))
    hidden = f'<input type="hidden" id="bidIdHidden" value="{bid_id}">' if bid_id else ""
    mail = f'<a href="mailto:{email}?subject=Bid">Contact</a>' if email else ""
    return f"<div><p>Contact: {mail}</p>{hidden}<div class='docs'>{links}</div></div>"


@pytest.fixture
def fast_config(tmp_path) -> CrawlConfig:
    """Crawl configuration with short waits and a temp output file."""
    return CrawlConfig(
        start_url=START_URL,
        grid=GridConfig(row_wait_timeout_ms=200, settle_delay_ms=0),
        pagination=PaginationConfig(advance_timeout_ms=500, poll_interval_ms=10),
        enrichment=EnrichmentConfig(max_retries=1, record_timeout_ms=5000),
        lookup=LookupConfig(),
        output=OutputConfig(path=tmp_path / "bids.json"),
    )
