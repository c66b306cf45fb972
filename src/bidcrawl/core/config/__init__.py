"""Configuration loading and validation."""

from .models import (
    BrowserType,
    WaitUntil,
    BrowserConfig,
    GridLayout,
    GridConfig,
    PaginationConfig,
    EnrichmentConfig,
    LookupConfig,
    OutputConfig,
    LoggingConfig,
    CrawlConfig,
)
from .loader import ConfigError, apply_overrides, load_crawl_config, validate_config_file

__all__ = [
    # Enums
    "BrowserType",
    "WaitUntil",
    # Config models
    "BrowserConfig",
    "GridLayout",
    "GridConfig",
    "PaginationConfig",
    "EnrichmentConfig",
    "LookupConfig",
    "OutputConfig",
    "LoggingConfig",
    "CrawlConfig",
    # Loaders
    "ConfigError",
    "apply_overrides",
    "load_crawl_config",
    "validate_config_file",
]
