"""Playwright-based browser wrapper.

This module provides the browser automation wrapper built on Playwright that
implements BrowserProtocol for the selector engine, page objects and CLI.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from playwright.async_api import (
    Browser,
    BrowserContext,
    Page,
    Playwright,
    async_playwright,
)
from playwright.async_api import (
    Error as PlaywrightError,
)
from playwright.async_api import (
    TimeoutError as PlaywrightTimeoutError,
)

from shopcheck.utils.config import BrowserType
from shopcheck.utils.exceptions import (
    BrowserLaunchError,
    ElementNotFound,
    NavigationError,
)

if TYPE_CHECKING:
    from shopcheck.core.locators import Locator
    from shopcheck.core.protocols import ElementHandleProtocol, WaitState

logger = logging.getLogger(__name__)

VIEWPORT = {"width": 1920, "height": 1080}


class PlaywrightBrowser:
    """Playwright browser session on one page.

    Attributes:
        browser_type: Which browser to launch.
        headless: Whether to run browser in headless mode.

    Example:
        >>> browser = PlaywrightBrowser(BrowserType.FIREFOX, headless=True)
        >>> await browser.launch()
        >>> element = await browser.locate(Locator.by_id("Email"), timeout=20000)
    """

    def __init__(
        self,
        browser_type: BrowserType = BrowserType.CHROMIUM,
        headless: bool = True,
    ) -> None:
        self.browser_type = browser_type
        self.headless = headless
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None
        self._context: BrowserContext | None = None
        self._page: Page | None = None

    @property
    def page(self) -> Page:
        """The active page.

        Raises:
            RuntimeError: If browser not launched.
        """
        if not self._page:
            raise RuntimeError("Browser not launched")
        return self._page

    async def launch(self) -> None:
        """Start Playwright and open a page in a fresh context.

        If the browser fails to start, whatever was already started is shut
        down before the error is raised.

        Raises:
            BrowserLaunchError: If the browser could not be started.
        """
        self._playwright = await async_playwright().start()
        launcher = getattr(self._playwright, self.browser_type.engine)
        options: dict = {"headless": self.headless}
        if self.browser_type.channel:
            options["channel"] = self.browser_type.channel

        try:
            self._browser = await launcher.launch(**options)
            self._context = await self._browser.new_context(viewport=VIEWPORT)
            self._page = await self._context.new_page()
        except PlaywrightError as e:
            await self.close()
            raise BrowserLaunchError(self.browser_type.value, str(e)) from e

        logger.info(
            f"Launched {self.browser_type.value} "
            f"({'headless' if self.headless else 'headed'})"
        )

    async def navigate(self, url: str, timeout: int = 30000) -> None:
        """Navigate to URL and wait for load.

        Args:
            url: The URL to navigate to.
            timeout: Maximum time to wait for navigation in milliseconds.

        Raises:
            RuntimeError: If browser not launched.
            NavigationError: If navigation fails.
        """
        page = self.page
        try:
            await page.goto(url, timeout=timeout, wait_until="load")
        except Exception as e:
            raise NavigationError(f"Failed to navigate to {url}: {e}") from e

    async def locate(
        self,
        locator: Locator,
        timeout: int = 5000,
        state: WaitState = "attached",
    ) -> ElementHandleProtocol:
        """Wait for an element matching locator.

        Args:
            locator: How to find the element.
            timeout: Maximum time to wait in milliseconds.
            state: Element state to wait for.

        Returns:
            The element handle.

        Raises:
            RuntimeError: If browser not launched.
            ElementNotFound: If nothing matched within timeout.
        """
        page = self.page
        try:
            element = await page.wait_for_selector(
                locator.to_selector(), timeout=timeout, state=state
            )
        except PlaywrightTimeoutError as e:
            raise ElementNotFound(f"Element not found: {locator}") from e
        if element is None:
            raise ElementNotFound(f"Element not found: {locator}")
        return element

    async def query_all(self, css: str) -> list[ElementHandleProtocol]:
        """Return every element currently matching a CSS selector.

        Raises:
            RuntimeError: If browser not launched.
        """
        return list(await self.page.query_selector_all(css))

    async def locate_all(self, locator: Locator) -> list[ElementHandleProtocol]:
        """Return every element currently matching locator, without waiting.

        Raises:
            RuntimeError: If browser not launched.
        """
        return list(await self.page.query_selector_all(locator.to_selector()))

    async def screenshot(self, path: str | None = None) -> bytes:
        """Capture screenshot. Returns bytes, optionally saves to path.

        Raises:
            RuntimeError: If browser not launched.
        """
        return await self.page.screenshot(path=path, full_page=True)

    async def url(self) -> str:
        return self.page.url

    async def title(self) -> str:
        return await self.page.title()

    async def close(self) -> None:
        """Close whatever has been started, in reverse order.

        Safe to call on a browser that never launched or only half launched.
        """
        if self._context:
            await self._context.close()
        if self._browser:
            await self._browser.close()
        if self._playwright:
            await self._playwright.stop()

        self._page = None
        self._context = None
        self._browser = None
        self._playwright = None
