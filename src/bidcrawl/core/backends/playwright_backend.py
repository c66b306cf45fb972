"""
Playwright session implementation.

Provides the navigable-document capability on top of a real browser:
- JavaScript rendering for client-rendered grids
- Bounded selector waits
- Extraction scripts run against the live DOM
- Sub-requests through the browser context (cookies shared with the page)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any
from urllib.parse import urljoin

from .base import (
    BackendError,
    BrowserError,
    DocumentSession,
    FetchError,
    NavigationTimeout,
)

if TYPE_CHECKING:
    from playwright.async_api import Browser, BrowserContext, Page, Playwright

logger = logging.getLogger(__name__)


DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/120.0.0.0 Safari/537.36"
)


class PlaywrightSession(DocumentSession):
    """Playwright-based browser session.

    One browser, one context, one page. The page is shared by the
    sequential walk; sub-requests go through the context's request API so
    concurrent enrichment never navigates the page away.
    """

    def __init__(
        self,
        headless: bool = True,
        timeout_ms: int = 60000,
        browser_type: str = "chromium",
        viewport_width: int = 1400,
        viewport_height: int = 900,
        user_agent: str | None = None,
        slow_mo_ms: int = 0,
        wait_until: str = "domcontentloaded",
    ):
        """Initialize Playwright session.

        Args:
            headless: Run browser in headless mode
            timeout_ms: Default timeout for navigation and waits
            browser_type: Browser to use (chromium, firefox, webkit)
            viewport_width: Browser viewport width
            viewport_height: Browser viewport height
            user_agent: Custom user agent string
            slow_mo_ms: Delay between browser operations
            wait_until: Default navigation readiness condition
        """
        self.headless = headless
        self.timeout_ms = timeout_ms
        self.browser_type = browser_type
        self.viewport_width = viewport_width
        self.viewport_height = viewport_height
        self.user_agent = user_agent or DEFAULT_USER_AGENT
        self.slow_mo_ms = slow_mo_ms
        self.wait_until = wait_until

        # Playwright objects (initialized by start())
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None
        self._context: BrowserContext | None = None
        self._page: Page | None = None

    @classmethod
    def from_config(cls, config: Any) -> "PlaywrightSession":
        """Build a session from a BrowserConfig."""
        return cls(
            headless=config.headless,
            timeout_ms=config.navigation_timeout_ms,
            browser_type=config.browser.value,
            viewport_width=config.viewport_width,
            viewport_height=config.viewport_height,
            user_agent=config.user_agent,
            slow_mo_ms=config.slow_mo_ms,
            wait_until=config.wait_until.value,
        )

    @property
    def name(self) -> str:
        return "playwright"

    @property
    def supports_javascript(self) -> bool:
        return True

    @property
    def current_url(self) -> str:
        return self._page.url if self._page is not None else ""

    async def start(self) -> None:
        """Launch the browser and open the working page.

        Raises:
            BackendError: If Playwright is missing or the browser cannot launch
        """
        if self._page is not None and not self._page.is_closed():
            return

        try:
            from playwright.async_api import async_playwright
        except ImportError as e:
            raise BackendError(
                "Playwright is not installed. Run: playwright install chromium",
                cause=e,
            ) from e

        try:
            self._playwright = await async_playwright().start()

            if self.browser_type == "firefox":
                launcher = self._playwright.firefox
            elif self.browser_type == "webkit":
                launcher = self._playwright.webkit
            else:
                launcher = self._playwright.chromium

            self._browser = await launcher.launch(
                headless=self.headless,
                slow_mo=self.slow_mo_ms,
            )
            self._context = await self._browser.new_context(
                viewport={"width": self.viewport_width, "height": self.viewport_height},
                user_agent=self.user_agent,
            )
            self._context.set_default_timeout(self.timeout_ms)
            self._page = await self._context.new_page()
            self._page.set_default_timeout(self.timeout_ms)
        except Exception as e:
            await self.close()
            raise BackendError(
                f"Failed to start {self.browser_type} browser session: {e}. "
                f"Run: playwright install {self.browser_type}",
                cause=e,
            ) from e

        logger.info(f"Launched {self.browser_type} browser (headless={self.headless})")

    def _require_page(self) -> Page:
        if self._page is None or self._page.is_closed():
            raise BrowserError("Session not started; call start() first")
        return self._page

    async def navigate(self, url: str, wait_until: str | None = None) -> None:
        page = self._require_page()
        try:
            response = await page.goto(
                url,
                timeout=self.timeout_ms,
                wait_until=wait_until or self.wait_until,
            )
        except Exception as e:
            if "timeout" in str(e).lower():
                raise NavigationTimeout(f"Navigation timeout: {url}", url=url, cause=e) from e
            raise BrowserError(f"Navigation failed: {e}", url=url, cause=e) from e

        if response is not None and response.status >= 400:
            raise BrowserError(
                f"Navigation to {url} returned {response.status}",
                url=url,
                status_code=response.status,
            )

    async def wait_for_selector(self, selector: str, timeout_ms: int | None = None) -> bool:
        page = self._require_page()
        try:
            await page.wait_for_selector(
                selector,
                state="attached",
                timeout=timeout_ms or self.timeout_ms,
            )
            return True
        except Exception:
            return False

    async def evaluate(self, script: str, arg: Any = None) -> Any:
        page = self._require_page()
        try:
            return await page.evaluate(script, arg)
        except Exception as e:
            raise BrowserError(f"Script evaluation failed: {e}", url=page.url, cause=e) from e

    async def content(self) -> str:
        return await self._require_page().content()

    async def click(self, selector: str, timeout_ms: int | None = None) -> None:
        page = self._require_page()
        try:
            await page.click(selector, timeout=timeout_ms or self.timeout_ms)
        except Exception as e:
            raise BrowserError(f"Click failed on {selector}: {e}", url=page.url, cause=e) from e

    async def fetch_text(self, url: str) -> str:
        self._require_page()
        absolute = urljoin(self.current_url, url)

        try:
            response = await self._context.request.get(  # type: ignore[union-attr]
                absolute,
                timeout=self.timeout_ms,
            )
        except Exception as e:
            raise FetchError(f"Fetch error for {absolute}: {e}", url=absolute, cause=e) from e

        if not response.ok:
            raise FetchError(
                f"Fetch failed {response.status} for {absolute}",
                url=absolute,
                status_code=response.status,
            )
        return await response.text()

    async def close(self) -> None:
        """Close browser and clean up resources."""
        if self._page and not self._page.is_closed():
            await self._page.close()
        self._page = None

        if self._context:
            await self._context.close()
            self._context = None

        if self._browser:
            await self._browser.close()
            self._browser = None

        if self._playwright:
            await self._playwright.stop()
            self._playwright = None

        logger.debug("Playwright session closed")

    async def __aenter__(self) -> "PlaywrightSession":
        await self.start()
        return self
