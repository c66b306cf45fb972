"""
Document session base class and errors.

Defines the interface contract for the navigable-document capability the
crawl components act on: navigation, bounded waits, extraction scripts
against the live document, clicks, and sub-requests that carry the
session's ambient credentials.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from typing import Any


class DocumentSession(ABC):
    """Abstract base class for a navigable rendered document.

    Every component that reads or acts on the live document receives the
    session explicitly; nothing closes over a shared page object.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Session implementation identifier."""
        pass

    @property
    def supports_javascript(self) -> bool:
        """Whether evaluate() can run scripts against the live document."""
        return False

    @property
    @abstractmethod
    def current_url(self) -> str:
        """URL of the currently loaded document."""
        pass

    async def start(self) -> None:
        """Acquire session resources before first use."""
        pass

    @abstractmethod
    async def navigate(self, url: str, wait_until: str | None = None) -> None:
        """Load a URL into the session.

        Raises:
            NavigationTimeout: If the page did not load in time
            BrowserError: On any other navigation failure
        """
        pass

    @abstractmethod
    async def wait_for_selector(self, selector: str, timeout_ms: int | None = None) -> bool:
        """Wait for an element to appear.

        Returns:
            True if the selector matched, False on timeout
        """
        pass

    async def evaluate(self, script: str, arg: Any = None) -> Any:
        """Run an extraction script against the live document.

        Only available for sessions that execute JavaScript.
        """
        raise NotImplementedError(f"{self.name} session does not execute scripts")

    @abstractmethod
    async def content(self) -> str:
        """Serialized HTML of the current document."""
        pass

    @abstractmethod
    async def click(self, selector: str, timeout_ms: int | None = None) -> None:
        """Click the first element matching a selector.

        Raises:
            BrowserError: If the element is missing or the click fails
        """
        pass

    @abstractmethod
    async def fetch_text(self, url: str) -> str:
        """Issue a GET sub-request with the session's ambient credentials.

        Relative URLs are resolved against the current document.

        Raises:
            FetchError: On transport failure or a non-2xx response
        """
        pass

    async def sleep(self, ms: int) -> None:
        """Fixed delay (used when no readiness signal is available)."""
        await asyncio.sleep(ms / 1000)

    async def close(self) -> None:
        """Release session resources."""
        pass

    async def __aenter__(self) -> "DocumentSession":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()


class BackendError(Exception):
    """Base exception for session errors."""

    def __init__(
        self,
        message: str,
        url: str | None = None,
        status_code: int | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.url = url
        self.status_code = status_code
        self.cause = cause


class FetchError(BackendError):
    """Error during a sub-request."""
    pass


class BrowserError(BackendError):
    """Error driving the rendered document."""
    pass


class NavigationTimeout(BrowserError):
    """Page didn't load in time."""
    pass
