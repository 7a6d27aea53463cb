"""Locator expressions for element lookup.

A Locator is a strategy + value pair (id, class name, CSS selector, XPath
path expression or name attribute). Catalog entries and synthesized
candidates are stored as Locators and only translated into Playwright
selector strings at the browser boundary.
"""

import re
from dataclasses import dataclass
from enum import Enum

from shopcheck.utils.exceptions import InvalidLocator

_ID_PATTERN = re.compile(r"^#([\w-]+)$")
_CLASS_PATTERN = re.compile(r"^\.([\w-]+)$")
_NAME_PATTERN = re.compile(r"""^\w+\[name=(['"])(.*?)\1\]$""")
_PATH_PREFIXES = ("/", "./", "(/", "(./")


class Strategy(Enum):
    """Supported lookup strategies, named after their WebDriver equivalents."""

    ID = "id"
    CLASS_NAME = "class name"
    CSS = "css selector"
    PATH = "xpath"
    NAME = "name"


@dataclass(frozen=True)
class Locator:
    """A single way of finding an element.

    Attributes:
        strategy: How ``value`` is interpreted.
        value: The id, class, selector, path expression or name to match.
    """

    strategy: Strategy
    value: str

    def __post_init__(self) -> None:
        """Reject empty values."""
        if not self.value or not self.value.strip():
            raise InvalidLocator("Locator value cannot be empty")

    @classmethod
    def by_id(cls, value: str) -> "Locator":
        return cls(Strategy.ID, value)

    @classmethod
    def by_class_name(cls, value: str) -> "Locator":
        return cls(Strategy.CLASS_NAME, value)

    @classmethod
    def by_css(cls, value: str) -> "Locator":
        return cls(Strategy.CSS, value)

    @classmethod
    def by_xpath(cls, value: str) -> "Locator":
        return cls(Strategy.PATH, value)

    @classmethod
    def by_name(cls, value: str) -> "Locator":
        return cls(Strategy.NAME, value)

    def to_selector(self) -> str:
        """Translate into a Playwright selector string.

        Returns:
            A selector accepted by ``page.wait_for_selector`` and friends.
        """
        if self.strategy is Strategy.ID:
            return f'[id="{_quote(self.value)}"]'
        if self.strategy is Strategy.CLASS_NAME:
            return f'[class~="{_quote(self.value)}"]'
        if self.strategy is Strategy.NAME:
            return f'[name="{_quote(self.value)}"]'
        if self.strategy is Strategy.PATH:
            return f"xpath={self.value}"
        return f"css={self.value}"

    def to_source(self) -> str:
        """Render back into the raw string form used in catalogs.

        Id, class and name locators come back as CSS shorthand so that
        string-based heuristics see the same shape a catalog author wrote.
        """
        if self.strategy is Strategy.ID:
            return f"#{self.value}"
        if self.strategy is Strategy.CLASS_NAME:
            return f".{self.value}"
        if self.strategy is Strategy.NAME:
            return f"*[name='{self.value}']"
        return self.value

    def __str__(self) -> str:
        return f"By.{self.strategy.name.lower()}: {self.value}"


def parse_locator(raw: str) -> Locator:
    """Parse a raw locator string.

    Precedence: ``#id`` → ID, ``.class`` (single class, no combinator) →
    CLASS_NAME, ``tag[name='x']`` → NAME, a leading ``/``, ``./`` or ``(/``
    → PATH, anything else → CSS.

    Args:
        raw: The locator string as written in a catalog.

    Returns:
        The parsed Locator.

    Raises:
        InvalidLocator: If raw is None, empty or blank.
    """
    if raw is None or not str(raw).strip():
        raise InvalidLocator("Selector cannot be null or empty")

    selector = str(raw).strip()

    match = _ID_PATTERN.match(selector)
    if match:
        return Locator.by_id(match.group(1))

    match = _CLASS_PATTERN.match(selector)
    if match:
        return Locator.by_class_name(match.group(1))

    match = _NAME_PATTERN.match(selector)
    if match:
        return Locator.by_name(match.group(2))

    if selector.startswith(_PATH_PREFIXES):
        return Locator.by_xpath(selector)

    return Locator.by_css(selector)


def _quote(value: str) -> str:
    """Escape a value for use inside a double-quoted CSS attribute selector."""
    return value.replace("\\", "\\\\").replace('"', '\\"')
