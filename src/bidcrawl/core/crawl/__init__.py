"""
Crawl-and-enrich pipeline stages.

- pagination: next-page trigger and advance detection
- walker: page-by-page row collection with cross-page dedup
- enrich: bounded-concurrency detail fetching
- lookup: code -> full name join
"""

from .enrich import DetailEnricher, EnrichmentOutcome, EnrichmentStats
from .errors import (
    CrawlError,
    EnrichmentFailure,
    FatalStartupFailure,
    PaginationStalled,
    StructuralMismatch,
)
from .lookup import (
    LookupJoin,
    find_lookup_link,
    parse_abbreviation_lines,
    parse_lookup_page,
    parse_lookup_table,
)
from .pagination import PaginationDriver, PaginationState
from .walker import DirectoryWalker, StopReason, WalkStats

__all__ = [
    # Errors
    "CrawlError",
    "StructuralMismatch",
    "PaginationStalled",
    "EnrichmentFailure",
    "FatalStartupFailure",
    # Pagination
    "PaginationDriver",
    "PaginationState",
    # Walker
    "DirectoryWalker",
    "StopReason",
    "WalkStats",
    # Enrichment
    "DetailEnricher",
    "EnrichmentOutcome",
    "EnrichmentStats",
    # Lookup
    "LookupJoin",
    "find_lookup_link",
    "parse_lookup_page",
    "parse_lookup_table",
    "parse_abbreviation_lines",
]
