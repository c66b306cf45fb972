"""Tests for the directory walker."""

import pytest

from bidcrawl.core.backends.base import BrowserError
from bidcrawl.core.config.models import GridConfig, PaginationConfig
from bidcrawl.core.crawl.pagination import PaginationDriver
from bidcrawl.core.crawl.walker import DirectoryWalker, StopReason
from bidcrawl.core.extract.grid import GridReader

from .conftest import START_URL, FakeSession, bid_row, grid_page

TEMPLATE = "/Bids/GetBidDetail?id={id}"


def _walker(grid=None, timeout_ms=300):
    grid = grid or GridConfig(row_wait_timeout_ms=100, settle_delay_ms=0)
    pagination = PaginationConfig(advance_timeout_ms=timeout_ms, poll_interval_ms=10)
    reader = GridReader(grid, pagination)
    return DirectoryWalker(reader, PaginationDriver(reader, pagination), grid, TEMPLATE, base_url=START_URL)


def _two_pages():
    return [
        grid_page([bid_row("101", "C-1"), bid_row("102", "C-2"), bid_row("103", "C-3")], page=1),
        grid_page([bid_row("103", "C-3"), bid_row("104", "C-4")], page=2, last=True),
    ]


@pytest.mark.asyncio
async def test_two_pages_with_duplicate_yield_four_records_in_order():
    session = FakeSession(pages=_two_pages())
    walker = _walker()

    records = await walker.walk(session, max_pages=300, max_items=5000)

    assert [r.contract_number for r in records] == ["C-1", "C-2", "C-3", "C-4"]
    assert records[0].detail_link == "https://bids.example.gov/Bids/GetBidDetail?id=101"
    assert walker.stats.pages == 2
    assert walker.stats.duplicates == 1
    assert walker.stats.stop_reason == StopReason.LAST_PAGE


@pytest.mark.asyncio
async def test_agency_names_are_joined():
    session = FakeSession(pages=[grid_page([bid_row("1", "C-1", agency="DOT"), bid_row("2", "C-2", agency="XYZ")], last=True)])

    records = await _walker().walk(session, 300, 5000, agency_names={"DOT": "Department of Transportation"})

    assert records[0].agency_full == "Department of Transportation"
    assert records[1].agency_full is None


@pytest.mark.asyncio
async def test_stall_ends_walk_with_records_so_far():
    session = FakeSession(pages=_two_pages(), stall_on_click=True)
    walker = _walker(timeout_ms=100)

    records = await walker.walk(session, 300, 5000)

    assert [r.contract_number for r in records] == ["C-1", "C-2", "C-3"]
    assert walker.stats.stop_reason == StopReason.STALLED


@pytest.mark.asyncio
async def test_max_items_stops_without_truncating_page():
    session = FakeSession(pages=_two_pages())
    walker = _walker()

    records = await walker.walk(session, 300, max_items=2)

    assert len(records) == 3
    assert session.clicks == []
    assert walker.stats.stop_reason == StopReason.MAX_ITEMS


@pytest.mark.asyncio
async def test_max_pages_stops_before_advancing():
    session = FakeSession(pages=_two_pages())
    walker = _walker()

    records = await walker.walk(session, max_pages=1, max_items=5000)

    assert len(records) == 3
    assert session.clicks == []
    assert walker.stats.stop_reason == StopReason.MAX_PAGES


@pytest.mark.asyncio
async def test_columns_are_resolved_per_page():
    reordered = ["Title", "Contract Number", "Open Date", "Deadline Date", "Agency Code", "UNSPSC"]
    page_two = grid_page(
        [("201", ["Fence Install", "C-9", "03/01/2026", "04/01/2026", "DNREC", "30120000"])],
        page=2,
        last=True,
        headers=reordered,
    )
    session = FakeSession(pages=[grid_page([bid_row("1", "C-1")]), page_two])

    records = await _walker().walk(session, 300, 5000)

    assert records[1].contract_number == "C-9"
    assert records[1].contract_title == "Fence Install"


@pytest.mark.asyncio
async def test_page_without_rows_ends_quietly():
    session = FakeSession(pages=["<html><body><p>No bids posted</p></body></html>"])
    walker = _walker()

    records = await walker.walk(session, 300, 5000)

    assert records == []
    assert walker.stats.empty_pages == 1
    assert walker.stats.stop_reason == StopReason.LAST_PAGE


class BrokenSession(FakeSession):
    async def content(self):
        raise BrowserError("page crashed")


@pytest.mark.asyncio
async def test_first_page_failure_propagates():
    with pytest.raises(BrowserError):
        await _walker().walk(BrokenSession(pages=_two_pages()), 300, 5000)


@pytest.mark.asyncio
async def test_prepare_clicks_first_present_expand_trigger():
    grid = GridConfig(expand_selectors=["#missing", "a"], row_wait_timeout_ms=100, settle_delay_ms=0)
    session = FakeSession(pages=_two_pages())

    await _walker(grid=grid).prepare(session)

    assert session.clicks == ["a"]
