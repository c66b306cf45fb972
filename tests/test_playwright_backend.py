"""Tests for Playwright session startup failures."""

import playwright.async_api
import pytest

from bidcrawl.core.backends.base import BackendError
from bidcrawl.core.backends.playwright_backend import PlaywrightSession


class FakeBrowser:
    def __init__(self):
        self.closed = False

    async def new_context(self, **kwargs):
        raise RuntimeError("Target page, context or browser has been closed")

    async def close(self):
        self.closed = True


class FakeLauncher:
    def __init__(self, browser):
        self.browser = browser

    async def launch(self, **kwargs):
        return self.browser


class FakePlaywright:
    def __init__(self, browser):
        self.chromium = FakeLauncher(browser)
        self.stopped = False

    async def stop(self):
        self.stopped = True


class FakeManager:
    def __init__(self, playwright):
        self.playwright = playwright

    async def start(self):
        return self.playwright


@pytest.mark.asyncio
async def test_context_failure_raises_backend_error_and_cleans_up(monkeypatch):
    browser = FakeBrowser()
    driver = FakePlaywright(browser)
    monkeypatch.setattr(playwright.async_api, "async_playwright", lambda: FakeManager(driver))

    session = PlaywrightSession()
    with pytest.raises(BackendError) as excinfo:
        await session.start()

    assert isinstance(excinfo.value.cause, RuntimeError)
    assert browser.closed
    assert driver.stopped
    assert session.current_url == ""
