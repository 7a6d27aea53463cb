"""Browser boundary used by the reliability layer.

The selector engine only needs a narrow capability surface: locate an
element with a timeout, query several by CSS, check visibility and
enabled state, click, fill, pick dropdown options, read attributes and
text, evaluate script and take screenshots. PlaywrightBrowser implements
it; tests use mocks.
"""

from typing import Any, Literal, Protocol

from shopcheck.core.locators import Locator

WaitState = Literal["attached", "detached", "visible", "hidden"]


class ElementHandleProtocol(Protocol):
    """A located element.

    Mirrors the subset of Playwright's ``ElementHandle`` that shopcheck uses.
    """

    async def is_visible(self) -> bool:
        ...

    async def is_enabled(self) -> bool:
        ...

    async def click(self, timeout: float | None = None) -> None:
        ...

    async def fill(self, value: str, timeout: float | None = None) -> None:
        """Clear the element and type value into it."""
        ...

    async def select_option(
        self, label: str | None = None, timeout: float | None = None
    ) -> list[str]:
        """Choose the dropdown option whose visible text is label."""
        ...

    async def get_attribute(self, name: str) -> str | None:
        ...

    async def inner_text(self) -> str:
        ...

    async def evaluate(self, expression: str, arg: Any = None) -> Any:
        ...


class BrowserProtocol(Protocol):
    """Protocol defining the browser automation interface.

    This protocol abstracts browser operations, allowing for different
    implementations (e.g., Playwright, Selenium) or mock implementations
    for testing.
    """

    async def launch(self) -> None:
        """Launch the browser instance."""
        ...

    async def navigate(self, url: str, timeout: int = 30000) -> None:
        """Navigate to the specified URL.

        Args:
            url: The URL to navigate to.
            timeout: Maximum time to wait for navigation in milliseconds.
        """
        ...

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
            state: Element state to wait for. "attached" means present in
                the DOM.

        Raises:
            ElementNotFound: If the wait times out.
        """
        ...

    async def query_all(self, css: str) -> list[ElementHandleProtocol]:
        """Return every element currently matching a CSS selector."""
        ...

    async def locate_all(self, locator: Locator) -> list[ElementHandleProtocol]:
        """Return every element currently matching locator, without waiting."""
        ...

    async def screenshot(self, path: str | None = None) -> bytes:
        """Capture a screenshot of the current page."""
        ...

    async def url(self) -> str:
        """Get the current page URL."""
        ...

    async def title(self) -> str:
        """Get the current page title."""
        ...

    async def close(self) -> None:
        """Close the browser and release resources."""
        ...
