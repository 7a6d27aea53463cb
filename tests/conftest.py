"""Shared pytest fixtures for shopcheck tests.

This module provides common fixtures used across unit and integration tests:
a mock browser, a small fake DOM browser, session logger, config and a
selector catalog backed by the packaged resources.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from shopcheck.core.locators import Locator
from shopcheck.core.protocols import BrowserProtocol
from shopcheck.selectors.catalog import SelectorCatalog
from shopcheck.utils.config import AppConfig
from shopcheck.utils.exceptions import ElementNotFound
from shopcheck.utils.session import SessionLogger


class FakeElement:
    """Element handle backed by plain attributes."""

    def __init__(
        self,
        tag: str = "input",
        text: str = "",
        visible: bool = True,
        enabled: bool = True,
        **attributes: str,
    ) -> None:
        self.tag = tag
        self.text = text
        self.visible = visible
        self.enabled = enabled
        self.attributes = attributes
        self.clicks = 0
        self.value = ""

    async def is_visible(self) -> bool:
        return self.visible

    async def is_enabled(self) -> bool:
        return self.enabled

    async def click(self, timeout: float | None = None) -> None:
        self.clicks += 1

    async def fill(self, value: str, timeout: float | None = None) -> None:
        self.value = value

    async def select_option(
        self, label: str | None = None, timeout: float | None = None
    ) -> list[str]:
        self.value = label or ""
        return [self.value]

    async def get_attribute(self, name: str) -> str | None:
        return self.attributes.get(name)

    async def inner_text(self) -> str:
        return self.text

    async def evaluate(self, expression: str, arg: Any = None) -> Any:
        return {"tag": self.tag, **self.attributes}


class FakeDomBrowser:
    """Browser whose page is a mapping from locator to elements.

    Every locate call is recorded so tests can assert probe order.
    """

    def __init__(
        self,
        elements: dict[Locator, list[FakeElement]] | None = None,
        css_index: dict[str, list[FakeElement]] | None = None,
    ) -> None:
        self.elements = elements or {}
        self.css_index = css_index or {}
        self.located: list[Locator] = []
        self.current_url = "https://demowebshop.tricentis.com/"
        self.screenshot = AsyncMock(return_value=b"fake_png")
        self.navigate = AsyncMock()

    def add(self, locator: Locator, element: FakeElement) -> FakeElement:
        self.elements.setdefault(locator, []).append(element)
        return element

    async def locate(
        self, locator: Locator, timeout: int = 5000, state: str = "attached"
    ) -> FakeElement:
        self.located.append(locator)
        matches = self.elements.get(locator, [])
        if state == "visible":
            matches = [m for m in matches if m.visible]
        if not matches:
            raise ElementNotFound(f"Element not found: {locator}")
        return matches[0]

    async def locate_all(self, locator: Locator) -> list[FakeElement]:
        return list(self.elements.get(locator, []))

    async def query_all(self, css: str) -> list[FakeElement]:
        return list(self.css_index.get(css, []))

    async def url(self) -> str:
        return self.current_url

    async def title(self) -> str:
        return "Demo Web Shop"


@pytest.fixture
def mock_browser() -> MagicMock:
    """Mock browser for unit tests.

    Creates a MagicMock that conforms to BrowserProtocol with all
    async methods properly configured as AsyncMock.
    """
    browser = MagicMock(spec=BrowserProtocol)
    browser.launch = AsyncMock()
    browser.navigate = AsyncMock()
    browser.locate = AsyncMock()
    browser.locate_all = AsyncMock(return_value=[])
    browser.query_all = AsyncMock(return_value=[])
    browser.screenshot = AsyncMock(return_value=b"fake_screenshot_data")
    browser.url = AsyncMock(return_value="https://demowebshop.tricentis.com/")
    browser.title = AsyncMock(return_value="Demo Web Shop")
    browser.close = AsyncMock()
    return browser


@pytest.fixture
def fake_browser() -> FakeDomBrowser:
    """Empty fake DOM; tests add the elements they need."""
    return FakeDomBrowser()


@pytest.fixture
def app_config(tmp_path: Path) -> AppConfig:
    """Test configuration with short timeouts and no backoff."""
    return AppConfig(
        base_url="https://demowebshop.tricentis.com",
        output_dir=tmp_path / "output",
        explicit_timeout=1,
        page_timeout=5000,
        max_attempts=3,
        retry_backoff=0.0,
    )


@pytest.fixture
def mock_session(tmp_path: Path) -> SessionLogger:
    """Real SessionLogger writing to a temporary directory."""
    return SessionLogger(
        output_dir=tmp_path,
        name="test_run",
        base_url="https://demowebshop.tricentis.com",
    )


@pytest.fixture
def selector_catalog() -> SelectorCatalog:
    """Catalog over the selector files shipped with shopcheck."""
    return SelectorCatalog()


@pytest.fixture
def make_element() -> type[FakeElement]:
    """The FakeElement class, for tests that build their own DOM."""
    return FakeElement
