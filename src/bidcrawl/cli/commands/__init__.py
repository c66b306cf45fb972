"""CLI command modules."""

from . import config, crawl

__all__ = [
    "config",
    "crawl",
]
