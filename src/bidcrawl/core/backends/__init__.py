"""Session implementations for navigating and reading rendered pages."""

from .base import (
    DocumentSession,
    BackendError,
    BrowserError,
    FetchError,
    NavigationTimeout,
)
from .playwright_backend import PlaywrightSession

__all__ = [
    # Base classes
    "DocumentSession",
    # Errors
    "BackendError",
    "BrowserError",
    "FetchError",
    "NavigationTimeout",
    # Playwright
    "PlaywrightSession",
]
