"""
Directory walker.

Walks the listing grid page by page: waits for rows, resolves the column
mapping afresh for each page, extracts and deduplicates records across
pages, joins agency names, and advances until the grid runs out, stalls,
or a safety cap is reached.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..backends.base import BackendError
from ..extract.base import ColumnMapping, GridSnapshot
from ..extract.resolver import resolve_columns
from ..extract.rows import extract_rows
from ..normalize.records import ListingRecord, dedupe_records, identity_key
from .errors import PaginationStalled, StructuralMismatch

if TYPE_CHECKING:
    from ..backends.base import DocumentSession
    from ..config.models import GridConfig
    from ..extract.grid import GridReader
    from .pagination import PaginationDriver


logger = logging.getLogger(__name__)


class StopReason:
    """Why the walk ended."""

    LAST_PAGE = "last_page"
    STALLED = "stalled"
    MAX_ITEMS = "max_items"
    MAX_PAGES = "max_pages"
    ERROR = "error"


@dataclass
class WalkStats:
    """Counters for one walk."""

    pages: int = 0
    rows_seen: int = 0
    duplicates: int = 0
    empty_pages: int = 0
    stop_reason: str | None = None


class DirectoryWalker:
    """Collects listing records across every page of the grid."""

    def __init__(
        self,
        reader: GridReader,
        pagination: PaginationDriver,
        grid: GridConfig,
        detail_template: str,
        base_url: str | None = None,
    ):
        self.reader = reader
        self.pagination = pagination
        self.grid = grid
        self.detail_template = detail_template
        self.base_url = base_url
        self.stats = WalkStats()

    async def prepare(self, session: DocumentSession) -> None:
        """Click the first present "expand" trigger, if any are configured."""
        for selector in self.grid.expand_selectors:
            if await session.wait_for_selector(selector, timeout_ms=2000):
                try:
                    await session.click(selector)
                except BackendError as e:
                    logger.debug(f"Expand trigger {selector} not clickable: {e}")
                    continue
                await session.sleep(600)
                return

    async def wait_for_rows(self, session: DocumentSession) -> GridSnapshot:
        """Wait until the grid shows rendered rows, then snapshot it.

        Row selectors are tried in layout order with a bounded wait each;
        when none matches a fixed settle delay is used instead.
        """
        snapshot = await self.reader.read(session)
        if not snapshot.rows:
            for layout in self.grid.layouts:
                if await session.wait_for_selector(
                    layout.row_selector, timeout_ms=self.grid.row_wait_timeout_ms
                ):
                    logger.debug(f"Rows matched layout '{layout.name}'")
                    break
            else:
                await session.sleep(self.grid.settle_delay_ms)
            snapshot = await self.reader.read(session)

        return await self._wait_for_rendered_text(session, snapshot)

    async def _wait_for_rendered_text(
        self,
        session: DocumentSession,
        snapshot: GridSnapshot,
    ) -> GridSnapshot:
        """Poll until the first row carries meaningful text, bounded."""
        minimum = self.grid.min_row_text_length
        if not snapshot.rows or len(snapshot.rows[0].text) >= minimum:
            return snapshot

        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.grid.row_wait_timeout_ms / 1000
        while loop.time() < deadline:
            await asyncio.sleep(self.pagination.config.poll_interval_ms / 1000)
            snapshot = await self.reader.read(session)
            if not snapshot.rows or len(snapshot.rows[0].text) >= minimum:
                break
        return snapshot

    def resolve_mapping(self, snapshot: GridSnapshot) -> ColumnMapping:
        """Column mapping for this page; unmatched fields resolve empty."""
        mapping = resolve_columns(snapshot.headers, self.grid.field_aliases)
        try:
            self._check_structure(snapshot, mapping)
        except StructuralMismatch as e:
            logger.debug(str(e))
        return mapping

    @staticmethod
    def _check_structure(snapshot: GridSnapshot, mapping: ColumnMapping) -> None:
        if not snapshot.found:
            raise StructuralMismatch("No grid layout matched the page")
        if not mapping.found():
            raise StructuralMismatch(f"No header matched any field: {snapshot.headers}")
        if mapping.missing():
            raise StructuralMismatch(f"Fields without a column on this page: {mapping.missing()}")

    async def walk(
        self,
        session: DocumentSession,
        max_pages: int,
        max_items: int,
        agency_names: dict[str, str] | None = None,
    ) -> list[ListingRecord]:
        """Walk the grid and return deduplicated records in first-seen order.

        Raises:
            BackendError: If the first page cannot be read
        """
        self.stats = WalkStats()
        agency_names = agency_names or {}
        records: list[ListingRecord] = []
        seen: set[str] = set()

        for page_number in range(1, max_pages + 1):
            try:
                snapshot = await self.wait_for_rows(session)
            except BackendError:
                if page_number == 1:
                    raise
                logger.warning(f"Page {page_number} could not be read; stopping", exc_info=True)
                self.stats.stop_reason = StopReason.ERROR
                break

            mapping = self.resolve_mapping(snapshot)
            rows = extract_rows(snapshot.rows, mapping, self.detail_template, self.base_url)

            self.stats.pages += 1
            self.stats.rows_seen += len(rows)
            if not rows:
                self.stats.empty_pages += 1

            added = 0
            for record in rows:
                key = identity_key(record)
                if key in seen:
                    self.stats.duplicates += 1
                    continue
                seen.add(key)
                if record.agency_code in agency_names:
                    record.agency_full = agency_names[record.agency_code]
                records.append(record)
                added += 1

            logger.info(
                f"Page {page_number}: {len(rows)} rows, {added} new ({len(records)} total)",
                extra={"page": page_number},
            )

            if len(records) >= max_items:
                self.stats.stop_reason = StopReason.MAX_ITEMS
                break
            if page_number >= max_pages:
                logger.info(f"Reached page cap ({max_pages})")
                self.stats.stop_reason = StopReason.MAX_PAGES
                break

            try:
                advanced = await self.pagination.advance(session)
            except PaginationStalled as e:
                logger.info(f"Pagination stalled after page {page_number}: {e}")
                self.stats.stop_reason = StopReason.STALLED
                break
            except BackendError:
                logger.warning(f"Pagination failed after page {page_number}; stopping", exc_info=True)
                self.stats.stop_reason = StopReason.ERROR
                break

            if not advanced:
                self.stats.stop_reason = StopReason.LAST_PAGE
                break

        # The per-page key may have come from a different column mapping
        final = dedupe_records(records)
        self.stats.duplicates += len(records) - len(final)
        return final
