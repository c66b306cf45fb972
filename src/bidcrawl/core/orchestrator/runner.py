"""
Crawl runner orchestrator.

Coordinates the full workflow: start session → lookup join → walk →
enrich → write.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable

from bidcrawl.core.backends.base import BackendError, DocumentSession
from bidcrawl.core.backends.playwright_backend import PlaywrightSession
from bidcrawl.core.config.models import CrawlConfig
from bidcrawl.core.crawl.enrich import DetailEnricher
from bidcrawl.core.crawl.errors import FatalStartupFailure
from bidcrawl.core.crawl.lookup import LookupJoin
from bidcrawl.core.crawl.pagination import PaginationDriver
from bidcrawl.core.crawl.walker import DirectoryWalker
from bidcrawl.core.extract.grid import GridReader
from bidcrawl.core.logging import get_contextual_logger
from bidcrawl.core.normalize.records import ListingRecord
from bidcrawl.persistence.export import write_records


logger = logging.getLogger(__name__)

SessionFactory = Callable[[CrawlConfig], DocumentSession]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def default_session_factory(config: CrawlConfig) -> DocumentSession:
    """Playwright session built from the browser settings."""
    return PlaywrightSession.from_config(config.browser)


@dataclass
class RunStats:
    """Statistics for a crawl run."""

    pages_walked: int = 0
    rows_seen: int = 0
    duplicates: int = 0
    records: int = 0
    enriched: int = 0
    failed: int = 0
    skipped: int = 0
    agencies: int = 0
    stop_reason: str | None = None

    started_at: datetime = field(default_factory=_utcnow)
    finished_at: datetime | None = None

    errors: list[str] = field(default_factory=list)

    @property
    def duration_seconds(self) -> float | None:
        """Get run duration in seconds."""
        if self.finished_at:
            return (self.finished_at - self.started_at).total_seconds()
        return None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "pages_walked": self.pages_walked,
            "rows_seen": self.rows_seen,
            "duplicates": self.duplicates,
            "records": self.records,
            "enriched": self.enriched,
            "failed": self.failed,
            "skipped": self.skipped,
            "agencies": self.agencies,
            "stop_reason": self.stop_reason,
            "duration_seconds": self.duration_seconds,
        }


@dataclass
class RunResult:
    """Records and statistics produced by one run."""

    records: list[ListingRecord]
    stats: RunStats
    output_path: Path | None = None


class CrawlRunner:
    """Orchestrates one crawl of a listing site.

    Coordinates:
    - Session start and navigation to the start page
    - The lookup join (once, before the walk)
    - The page-by-page walk with cross-page dedup
    - Bounded-concurrency enrichment
    - Writing the result file
    """

    def __init__(
        self,
        config: CrawlConfig,
        *,
        session_factory: SessionFactory | None = None,
        run_id: str | None = None,
    ) -> None:
        """Initialize the crawl runner.

        Args:
            config: Crawl configuration
            session_factory: Builds the document session (Playwright by default)
            run_id: Identifier attached to log records (generated if omitted)
        """
        self.config = config
        self.session_factory = session_factory or default_session_factory
        self.run_id = run_id or uuid.uuid4().hex[:12]
        self.log = get_contextual_logger(__name__, site=config.name, run_id=self.run_id)

        self.reader = GridReader(config.grid, config.pagination)
        self.pagination = PaginationDriver(self.reader, config.pagination)
        self.walker = DirectoryWalker(
            self.reader,
            self.pagination,
            config.grid,
            config.enrichment.detail_url_template,
            base_url=config.start_url,
        )
        self.enricher = DetailEnricher(config.enrichment, base_url=config.start_url)
        self.lookup = LookupJoin(config.lookup, start_url=config.start_url)

    async def open_session(self) -> DocumentSession:
        """Start a session and load the start page.

        Raises:
            FatalStartupFailure: If the session cannot start or the start page
                cannot be reached
        """
        session = self.session_factory(self.config)
        url = self.config.start_url
        try:
            await session.start()
            await session.navigate(url, wait_until=self.config.browser.wait_until.value)
        except Exception as e:
            await session.close()
            self.log.error(f"Could not load start page {url}: {e}", extra={"url": url})
            raise FatalStartupFailure(f"Could not load start page: {e}", url=url, cause=e) from e

        self.log.info(f"Loaded start page {session.current_url or url}", extra={"url": url})
        return session

    async def build_lookup(self) -> dict[str, str]:
        """Open a session just long enough to build the code -> name map."""
        session = await self.open_session()
        try:
            return await self.lookup.build(session)
        finally:
            await session.close()

    async def run(self, write_output: bool = True) -> RunResult:
        """Execute a complete crawl.

        Args:
            write_output: Write the result file when the run finishes

        Returns:
            RunResult with records and statistics

        Raises:
            FatalStartupFailure: If the start page or the first grid page
                cannot be read
        """
        stats = RunStats()
        records: list[ListingRecord] = []
        config = self.config

        self.log.info(f"Starting crawl of {config.start_url}")
        session = await self.open_session()

        try:
            await self.walker.prepare(session)

            agency_names = await self.lookup.build(session)
            stats.agencies = len(agency_names)

            try:
                records = await self.walker.walk(
                    session,
                    max_pages=config.max_pages,
                    max_items=config.max_items,
                    agency_names=agency_names,
                )
            except BackendError as e:
                self.log.error(f"Could not read the listing grid: {e}")
                raise FatalStartupFailure(
                    f"Could not read the listing grid: {e}", url=config.start_url, cause=e
                ) from e
            finally:
                walk = self.walker.stats
                stats.pages_walked = walk.pages
                stats.rows_seen = walk.rows_seen
                stats.duplicates = walk.duplicates
                stats.stop_reason = walk.stop_reason

            self.log.info(
                f"Walk finished: {len(records)} records over {stats.pages_walked} pages "
                f"(stop: {stats.stop_reason})"
            )

            if config.enrichment.enabled and records:
                try:
                    records = await self.enricher.enrich(session, records)
                except Exception as e:
                    # Keep the walked records; enrichment is best effort
                    self.log.exception("Enrichment stage failed")
                    stats.errors.append(f"Enrichment failed: {e}")
                finally:
                    stats.enriched = self.enricher.stats.enriched
                    stats.failed = self.enricher.stats.failed
                    stats.skipped = self.enricher.stats.skipped
                    stats.errors.extend(self.enricher.stats.errors)

        finally:
            await session.close()
            stats.records = len(records)
            stats.finished_at = _utcnow()

        output_path = None
        if write_output:
            output_path = write_records(
                records,
                config.output.path,
                url_key=config.output.file_url_key,
                indent=config.output.indent,
            )

        self.log.info(
            f"Crawl complete: {stats.records} records, {stats.enriched} enriched, "
            f"{stats.failed} failed in {stats.duration_seconds:.1f}s"
        )
        return RunResult(records=records, stats=stats, output_path=output_path)


async def run_crawl(
    config: CrawlConfig,
    *,
    session_factory: SessionFactory | None = None,
    write_output: bool = True,
) -> RunResult:
    """Convenience function to run one crawl.

    Args:
        config: Crawl configuration
        session_factory: Builds the document session
        write_output: Write the result file

    Returns:
        RunResult with records and statistics
    """
    runner = CrawlRunner(config, session_factory=session_factory)
    return await runner.run(write_output=write_output)
