"""
Pydantic configuration models for bidcrawl.

These models provide type-safe configuration with validation for:
- Browser session settings
- Grid layouts and header aliases
- Pagination, enrichment and lookup behaviour
- Output and logging
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field, field_validator, model_validator

from .synonyms import (
    CODE_HEADERS,
    FIELD_ALIASES,
    FILE_EXTENSIONS,
    FILE_MARKERS,
    NAME_HEADERS,
    merge_aliases,
)


# =============================================================================
# Enums
# =============================================================================


class BrowserType(str, Enum):
    """Supported Playwright browser engines."""

    CHROMIUM = "chromium"
    FIREFOX = "firefox"
    WEBKIT = "webkit"


class WaitUntil(str, Enum):
    """Navigation readiness conditions."""

    LOAD = "load"
    DOMCONTENTLOADED = "domcontentloaded"
    NETWORKIDLE = "networkidle"
    COMMIT = "commit"


# =============================================================================
# Browser Configuration
# =============================================================================


class BrowserConfig(BaseModel):
    """Rendering session settings."""

    headless: bool = Field(
        default=True,
        description="Run the browser without a visible window",
    )
    browser: BrowserType = Field(
        default=BrowserType.CHROMIUM,
        description="Browser engine to launch",
    )
    navigation_timeout_ms: int = Field(
        default=60000,
        ge=1000,
        le=600000,
        description="Timeout bounding every navigation and blocking wait",
    )
    wait_until: WaitUntil = Field(
        default=WaitUntil.DOMCONTENTLOADED,
        description="Readiness condition for page navigation",
    )
    viewport_width: int = Field(default=1400, ge=320, le=3840)
    viewport_height: int = Field(default=900, ge=240, le=2160)
    user_agent: str | None = Field(
        default=None,
        description="Custom user agent string",
    )
    slow_mo_ms: int = Field(
        default=0,
        ge=0,
        le=5000,
        description="Delay inserted between browser operations (visible demos)",
    )


# =============================================================================
# Grid Configuration
# =============================================================================


class GridLayout(BaseModel):
    """Structural pattern for one kind of listing grid widget."""

    name: str = Field(..., min_length=1)
    header_selector: str = Field(
        ...,
        description="Selector matching header cells, in column order",
    )
    row_selector: str = Field(
        ...,
        description="Selector matching data rows",
    )
    cell_selector: str = Field(
        default="td",
        description="Selector for cells within a row",
    )
    id_attribute: str = Field(
        default="id",
        description="Row attribute holding the opaque listing identifier",
    )


def default_layouts() -> list[GridLayout]:
    """Grid layouts tried in order; the first one with rows wins."""
    return [
        GridLayout(
            name="jqgrid",
            header_selector="#gbox_jqGridBids .ui-jqgrid-htable th",
            row_selector="#jqGridBids tr.jqgrow",
        ),
        GridLayout(
            name="datatables",
            header_selector=".dataTable thead th",
            row_selector=".dataTable tbody tr",
        ),
        GridLayout(
            name="table",
            header_selector="table thead th",
            row_selector="table tbody tr",
        ),
        GridLayout(
            name="aria",
            header_selector="[role='table'] [role='columnheader']",
            row_selector="[role='table'] [role='row']",
            cell_selector="[role='cell']",
        ),
        GridLayout(
            name="reacttable",
            header_selector=".rt-thead .rt-th",
            row_selector=".rt-tbody .rt-tr",
            cell_selector=".rt-td",
        ),
    ]


class GridConfig(BaseModel):
    """Listing grid discovery settings."""

    layouts: list[GridLayout] = Field(
        default_factory=default_layouts,
        min_length=1,
        description="Grid layouts tried in order",
    )
    field_aliases: dict[str, list[str]] = Field(
        default_factory=lambda: {k: list(v) for k, v in FIELD_ALIASES.items()},
        description="Logical field -> header substrings, in priority order",
    )
    extra_aliases: dict[str, list[str]] = Field(
        default_factory=dict,
        description="Aliases appended after field_aliases, per field",
    )
    row_wait_timeout_ms: int = Field(
        default=8000,
        ge=100,
        le=120000,
        description="Bounded wait for each row selector before falling back",
    )
    settle_delay_ms: int = Field(
        default=1500,
        ge=0,
        le=30000,
        description="Fixed delay used when no row selector matched",
    )
    min_row_text_length: int = Field(
        default=10,
        ge=0,
        description="First row must carry at least this much text to count as rendered",
    )
    expand_selectors: list[str] = Field(
        default_factory=list,
        description="Optional 'click to expand' triggers; the first one present is clicked",
    )

    @field_validator("field_aliases")
    @classmethod
    def lowercase_aliases(cls, v: dict[str, list[str]]) -> dict[str, list[str]]:
        """Aliases are compared against lowercased headers."""
        return {field: [a.lower() for a in aliases] for field, aliases in v.items()}

    @model_validator(mode="after")
    def merge_extra_aliases(self) -> "GridConfig":
        if self.extra_aliases:
            self.field_aliases = merge_aliases(self.field_aliases, self.extra_aliases)
        return self


# =============================================================================
# Pagination Configuration
# =============================================================================


class PaginationConfig(BaseModel):
    """Next-page trigger and advance detection settings."""

    next_selectors: list[str] = Field(
        default_factory=lambda: [
            "#next_jqGridBidsPager",
            "#next_pager",
            "td#next_jqg1",
            ".ui-pg-button[id^='next_']",
            ".paginate_button.next",
            "a[rel='next']",
            "[aria-label='Next page']",
        ],
        description="Next-page controls tried in order; the first present wins",
    )
    disabled_markers: list[str] = Field(
        default_factory=lambda: ["disabled", "ui-state-disabled"],
        description="Class names marking the next control as disabled",
    )
    indicator_selectors: list[str] = Field(
        default_factory=lambda: ["input.ui-pg-input", "input[id^='pg_']"],
        description="Inputs holding the current page number",
    )
    advance_timeout_ms: int = Field(
        default=30000,
        ge=100,
        le=300000,
        description="Maximum wait for the visible page to change after a click",
    )
    poll_interval_ms: int = Field(
        default=250,
        ge=10,
        le=5000,
        description="Interval between signature checks while awaiting an advance",
    )


# =============================================================================
# Enrichment Configuration
# =============================================================================


class EnrichmentConfig(BaseModel):
    """Detail and document-list sub-request settings."""

    enabled: bool = Field(default=True)
    concurrency: int = Field(
        default=4,
        ge=1,
        le=32,
        description="Number of concurrent enrichment workers",
    )
    detail_url_template: str = Field(
        default="/Bids/GetBidDetail?id={id}",
        description="Detail fragment URL; also the record's bookmarkable link",
    )
    document_list_url_template: str | None = Field(
        default="/Bids/GetBidDocumentList?id={id}&currentCount=0",
        description="Document-list fragment URL (None to skip)",
    )
    document_id_selector: str | None = Field(
        default="#bidIdHidden",
        description="Input in the detail fragment overriding the document-list id",
    )
    file_extensions: list[str] = Field(default_factory=lambda: list(FILE_EXTENSIONS))
    file_markers: list[str] = Field(default_factory=lambda: list(FILE_MARKERS))
    record_timeout_ms: int = Field(
        default=60000,
        ge=100,
        le=600000,
        description="Upper bound for enriching a single record",
    )
    max_retries: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Attempts per sub-request before the record is marked failed",
    )

    @field_validator("detail_url_template")
    @classmethod
    def template_has_id(cls, v: str) -> str:
        if "{id}" not in v:
            raise ValueError("detail_url_template must contain '{id}'")
        return v


# =============================================================================
# Lookup Configuration
# =============================================================================


class LookupConfig(BaseModel):
    """Code -> full name join settings."""

    enabled: bool = Field(default=True)
    url: str | None = Field(
        default=None,
        description="Explicit lookup page URL (skips link discovery)",
    )
    link_text: str = Field(
        default="agency info",
        description="Text of the start-page link leading to the lookup page",
    )
    code_headers: list[str] = Field(default_factory=lambda: list(CODE_HEADERS))
    name_headers: list[str] = Field(default_factory=lambda: list(NAME_HEADERS))
    min_header_score: int = Field(
        default=80,
        ge=0,
        le=100,
        description="Minimum fuzzy score for a header to count as code/name",
    )


# =============================================================================
# Output Configuration
# =============================================================================


class OutputConfig(BaseModel):
    """JSON output settings."""

    path: Path = Field(default=Path("de_bids.json"))
    file_url_key: str = Field(
        default="Url",
        min_length=1,
        description="Key used for file URLs, written exactly as given",
    )
    indent: int = Field(default=4, ge=0, le=8)


# =============================================================================
# Logging Configuration
# =============================================================================


class LoggingConfig(BaseModel):
    """Logging settings."""

    level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR)",
    )
    file: Path | None = Field(
        default=None,
        description="Log file path",
    )
    json_format: bool = Field(
        default=True,
        description="Use JSON format for file logs",
    )
    rich_console: bool = Field(
        default=True,
        description="Use Rich for console output",
    )


# =============================================================================
# Crawl Configuration
# =============================================================================


class CrawlConfig(BaseModel):
    """Root configuration for one crawl.

    Loaded from crawl.yaml; CLI flags override individual values.
    """

    name: str = Field(
        default="delaware_mmp",
        min_length=1,
        max_length=100,
        description="Site identifier used in logs",
    )
    start_url: str = Field(
        default="https://mmp.delaware.gov/Bids",
        description="Listing page the walk starts from",
    )
    max_pages: int = Field(
        default=300,
        ge=1,
        le=10000,
        description="Soft safety cap on pages walked",
    )
    max_items: int = Field(
        default=5000,
        ge=1,
        description="Soft safety cap on records collected",
    )

    browser: BrowserConfig = Field(default_factory=BrowserConfig)
    grid: GridConfig = Field(default_factory=GridConfig)
    pagination: PaginationConfig = Field(default_factory=PaginationConfig)
    enrichment: EnrichmentConfig = Field(default_factory=EnrichmentConfig)
    lookup: LookupConfig = Field(default_factory=LookupConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @field_validator("start_url")
    @classmethod
    def absolute_start_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://", "file://")):
            raise ValueError("start_url must be an absolute URL")
        return v
