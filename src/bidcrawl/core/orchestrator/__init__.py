"""Orchestrator - run coordination from session start to result file."""

from .runner import CrawlRunner, RunResult, RunStats, default_session_factory, run_crawl

__all__ = [
    "CrawlRunner",
    "RunResult",
    "RunStats",
    "default_session_factory",
    "run_crawl",
]
