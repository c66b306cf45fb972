"""
Crawl error taxonomy.

Only FatalStartupFailure escapes a run; the others are recovered where
they are raised.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..extract.base import PageSignature


class CrawlError(Exception):
    """Base exception for crawl errors."""
    pass


class StructuralMismatch(CrawlError):
    """A header, row or selector pattern was not found."""
    pass


class PaginationStalled(CrawlError):
    """Next page requested but no signal changed before the timeout."""

    def __init__(self, signature: PageSignature, timeout_ms: int):
        super().__init__(f"Page did not change within {timeout_ms} ms")
        self.signature = signature
        self.timeout_ms = timeout_ms


class EnrichmentFailure(CrawlError):
    """Detail sub-request or fragment parse failed for one record."""

    def __init__(self, message: str, record_id: str = "", url: str | None = None):
        super().__init__(message)
        self.record_id = record_id
        self.url = url


class FatalStartupFailure(CrawlError):
    """The session could not be established or the start page not reached."""

    def __init__(self, message: str, url: str | None = None, cause: Exception | None = None):
        super().__init__(message)
        self.url = url
        self.cause = cause
