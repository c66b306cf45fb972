"""
Detail enrichment.

Fetches each record's detail fragment and document-list fragment through
the session's sub-request primitive, then fills in the contact email and
file attachments. Runs a fixed-size worker pool over a shared cursor;
results are written back at the record's original index.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from lxml import etree

from ..extract.fragments import FragmentData, merge_files, parse_fragment
from ..fetch.retries import RetryConfig, retry_async
from ..normalize.parsing import fill_template, resolve_url
from ..normalize.records import ListingRecord
from .errors import EnrichmentFailure

if TYPE_CHECKING:
    from ..backends.base import DocumentSession
    from ..config.models import EnrichmentConfig


logger = logging.getLogger(__name__)


@dataclass
class EnrichmentOutcome:
    """Result of enriching one record."""

    record: ListingRecord
    ok: bool = True
    skipped: bool = False
    error: str | None = None


@dataclass
class EnrichmentStats:
    """Counters for one enrichment pass."""

    enriched: int = 0
    failed: int = 0
    skipped: int = 0
    errors: list[str] = field(default_factory=list)


class DetailEnricher:
    """Bounded-concurrency detail fetcher."""

    def __init__(
        self,
        config: EnrichmentConfig,
        base_url: str | None = None,
        retry: RetryConfig | None = None,
    ):
        self.config = config
        self.base_url = base_url
        self.retry = retry or RetryConfig(max_attempts=config.max_retries)
        self.stats = EnrichmentStats()

    async def enrich(
        self,
        session: DocumentSession,
        records: list[ListingRecord],
    ) -> list[ListingRecord]:
        """Enrich every record, returning them in input order.

        One record failing never affects another; the failure is recorded on
        the record as ``detail_error``.
        """
        self.stats = EnrichmentStats()
        if not records:
            return []

        outcomes: dict[int, EnrichmentOutcome] = {}
        cursor = 0

        async def worker() -> None:
            nonlocal cursor
            while True:
                # Claim without yielding so no index is handed out twice
                index = cursor
                if index >= len(records):
                    return
                cursor += 1
                outcomes[index] = await self.enrich_one(session, records[index])

        workers = min(self.config.concurrency, len(records))
        logger.info(f"Enriching {len(records)} records with {workers} workers")
        await asyncio.gather(*(worker() for _ in range(workers)))

        results = []
        for index in range(len(records)):
            outcome = outcomes[index]
            if outcome.skipped:
                self.stats.skipped += 1
            elif outcome.ok:
                self.stats.enriched += 1
            else:
                self.stats.failed += 1
                self.stats.errors.append(f"{outcome.record.id}: {outcome.error}")
            results.append(outcome.record)

        logger.info(
            f"Enrichment done: {self.stats.enriched} enriched, "
            f"{self.stats.failed} failed, {self.stats.skipped} skipped"
        )
        return results

    async def enrich_one(
        self,
        session: DocumentSession,
        record: ListingRecord,
    ) -> EnrichmentOutcome:
        """Enrich a single record, isolating any failure to it."""
        if not record.id:
            return EnrichmentOutcome(record=record, skipped=True)

        timeout_ms = self.config.record_timeout_ms
        try:
            await asyncio.wait_for(self._fetch_and_merge(session, record), timeout_ms / 1000)
        except asyncio.TimeoutError:
            record.detail_error = f"Timed out after {timeout_ms} ms"
        except Exception as e:
            record.detail_error = f"{type(e).__name__}: {e}"
        else:
            return EnrichmentOutcome(record=record)

        logger.warning(
            f"Enrichment failed for {record.id}: {record.detail_error}",
            extra={"record": record.id},
        )
        return EnrichmentOutcome(record=record, ok=False, error=record.detail_error)

    async def _fetch_and_merge(self, session: DocumentSession, record: ListingRecord) -> None:
        base_url = session.current_url or self.base_url

        detail_url = resolve_url(fill_template(self.config.detail_url_template, record.id), base_url)
        detail = await self._fetch_fragment(session, detail_url, base_url, record)

        docs = FragmentData()
        template = self.config.document_list_url_template
        if template:
            document_id = detail.document_id or record.id
            docs_url = resolve_url(fill_template(template, document_id), base_url)
            docs = await self._fetch_fragment(session, docs_url, base_url, record)

        # Only touch the record once both fragments are in
        record.files = merge_files(detail.files, docs.files)
        record.contact_email = detail.email or docs.email

    async def _fetch_fragment(
        self,
        session: DocumentSession,
        url: str,
        base_url: str,
        record: ListingRecord,
    ) -> FragmentData:
        # Links inside a fragment are relative to the page, not the sub-request
        html = await retry_async(session.fetch_text, url, config=self.retry)
        try:
            return parse_fragment(
                html,
                base_url=base_url,
                extensions=self.config.file_extensions,
                markers=self.config.file_markers,
                document_id_selector=self.config.document_id_selector,
            )
        except (ValueError, etree.LxmlError) as e:
            raise EnrichmentFailure(f"Unparseable fragment: {e}", record.id, url) from e
