"""Selector suggestions from the live DOM, used as a failure diagnostic."""

from __future__ import annotations

import logging
from typing import Any

from shopcheck.core.protocols import BrowserProtocol, ElementHandleProtocol

logger = logging.getLogger(__name__)

CATEGORIES: dict[str, str] = {
    "email_fields": "input[type='email'], input[name*='email' i]",
    "password_fields": "input[type='password']",
    "submit_buttons": "input[type='submit'], button[type='submit']",
    "text_inputs": "input[type='text']",
    "links": "a[href]",
    "navigation_menus": ".header-menu a, nav a",
}

MAX_ELEMENTS_PER_CATEGORY = 5

_ATTRIBUTES_SCRIPT = """
el => ({
    tag: el.tagName.toLowerCase(),
    id: el.getAttribute('id'),
    name: el.getAttribute('name'),
    class: el.getAttribute('class'),
    type: el.getAttribute('type'),
    placeholder: el.getAttribute('placeholder'),
    value: el.getAttribute('value'),
})
"""


def suggest_selectors(attributes: dict[str, Any]) -> list[str]:
    """Build candidate selector strings from an element's attributes.

    Args:
        attributes: Mapping with ``tag`` plus any of id, name, class, type,
            placeholder and value. Missing or empty values are skipped.

    Returns:
        Selector strings in a fixed order: id, name, type, class,
        placeholder, value.
    """
    tag = attributes.get("tag") or "*"
    suggestions: list[str] = []

    element_id = attributes.get("id")
    if element_id:
        suggestions.append(f"#{element_id}")
        suggestions.append(f"{tag}#{element_id}")

    name = attributes.get("name")
    if name:
        suggestions.append(f"[name='{name}']")
        suggestions.append(f"{tag}[name='{name}']")

    input_type = attributes.get("type")
    if input_type and tag == "input":
        suggestions.append(f"input[type='{input_type}']")

    class_name = (attributes.get("class") or "").strip()
    if class_name and " " not in class_name:
        suggestions.append(f".{class_name}")

    placeholder = attributes.get("placeholder")
    if placeholder:
        suggestions.append(f"[placeholder='{placeholder}']")

    value = attributes.get("value")
    if value:
        suggestions.append(f"[value='{value}']")

    return suggestions


class DomAnalyzer:
    """Scans a page for common element categories and suggests selectors."""

    def __init__(self, browser: BrowserProtocol) -> None:
        self.browser = browser

    async def analyze_page_elements(self) -> dict[str, list[str]]:
        """Suggest selectors for every category.

        Never raises. A category whose scan fails maps to an empty list.

        Returns:
            Category name to suggestion strings.
        """
        analysis: dict[str, list[str]] = {}
        for category, css in CATEGORIES.items():
            try:
                analysis[category] = await self._analyze_category(css)
            except Exception as e:
                logger.warning(f"DOM analysis failed for {category}: {e}")
                analysis[category] = []
        return analysis

    async def _analyze_category(self, css: str) -> list[str]:
        elements = await self.browser.query_all(css)
        suggestions: list[str] = []
        for element in elements[:MAX_ELEMENTS_PER_CATEGORY]:
            attributes = await _read_attributes(element)
            suggestions.extend(suggest_selectors(attributes))
        return suggestions


async def _read_attributes(element: ElementHandleProtocol) -> dict[str, Any]:
    result = await element.evaluate(_ATTRIBUTES_SCRIPT)
    return result if isinstance(result, dict) else {}
