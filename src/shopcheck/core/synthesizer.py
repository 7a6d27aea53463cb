"""Runtime selector synthesis for elements the catalog locators miss.

Candidates are assembled in a fixed order: the original failing locator,
then a curated list for the first role keyword found in the element's
description, then generic variations of the original locator string. They
are probed one by one against the live page and the first element that is
present, visible and enabled wins.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from playwright.async_api import Error as PlaywrightError

from shopcheck.core.dom_analyzer import DomAnalyzer
from shopcheck.core.locators import Locator, Strategy
from shopcheck.core.protocols import BrowserProtocol, ElementHandleProtocol
from shopcheck.utils.config import AppConfig
from shopcheck.utils.exceptions import ElementNotFound, ElementRecoveryFailed
from shopcheck.utils.session import SessionLogger

logger = logging.getLogger(__name__)

# Keyword order matters: the first keyword contained in a description wins.
ROLE_CANDIDATES: dict[str, tuple[Locator, ...]] = {
    "email": (
        Locator.by_id("Email"),
        Locator.by_name("Email"),
        Locator.by_css("input[type='email']"),
        Locator.by_css("input[name*='email' i]"),
        Locator.by_css("input[id*='email' i]"),
        Locator.by_xpath(
            "//input[contains(@placeholder,'email') or contains(@placeholder,'Email')]"
        ),
        Locator.by_xpath(
            "//input[@type='email' or contains(@name,'email') or contains(@id,'email')]"
        ),
    ),
    "password": (
        Locator.by_id("Password"),
        Locator.by_name("Password"),
        Locator.by_css("input[type='password']"),
        Locator.by_css("input[name*='password' i]"),
        Locator.by_css("input[id*='password' i]"),
        Locator.by_xpath(
            "//input[contains(@placeholder,'password') "
            "or contains(@placeholder,'Password')]"
        ),
        Locator.by_xpath(
            "//input[@type='password' or contains(@name,'password') "
            "or contains(@id,'password')]"
        ),
    ),
    "login": (
        Locator.by_css("input[value='Log in']"),
        Locator.by_css("button[type='submit']"),
        Locator.by_css("input[type='submit']"),
        Locator.by_xpath(
            "//input[@value='Log in' or @value='LOGIN' or @value='Login']"
        ),
        Locator.by_xpath(
            "//button[contains(text(),'Log in') or contains(text(),'LOGIN') "
            "or contains(text(),'Login')]"
        ),
        Locator.by_css(".login-button"),
        Locator.by_css("#login-button"),
    ),
    "search": (
        Locator.by_id("small-searchterms"),
        Locator.by_name("q"),
        Locator.by_css("input[placeholder*='search' i]"),
        Locator.by_css("input.search-box-text"),
        Locator.by_xpath(
            "//input[contains(@placeholder,'search') "
            "or contains(@placeholder,'Search')]"
        ),
        Locator.by_css("input[type='search']"),
    ),
}

_ID_FRAGMENT = re.compile(r"#([\w-]+)")
_CLASS_FRAGMENT = re.compile(r"\.([\w-]+)")
_BRACKETS = re.compile(r"\[[^\]]*\]")
_COMBINATORS = re.compile(r"[\s>+~,]")
_PATH_ID = re.compile(r"""@id\s*=\s*['"]([^'"]+)['"]""")
_PATH_CLASS = re.compile(r"""@class\s*=\s*['"]([^'"]+)['"]""")


def role_candidates(description: str) -> list[Locator]:
    """Curated candidates for the first role keyword in a description.

    Args:
        description: Free-text description such as "login button".

    Returns:
        The keyword's candidate list, or an empty list when no keyword
        matches.
    """
    lowered = description.lower()
    for keyword, candidates in ROLE_CANDIDATES.items():
        if keyword in lowered:
            return list(candidates)
    return []


def generic_fallbacks(original: Locator) -> list[Locator]:
    """Structural variations of the original locator.

    CSS-style locators contribute id and class variations; path
    expressions contribute loosened ``contains()`` variants of their
    ``@id`` and ``@class`` predicates.
    """
    if original.strategy is Strategy.PATH:
        return _path_fallbacks(original.value)
    return _css_fallbacks(original.to_source())


def _css_fallbacks(selector: str) -> list[Locator]:
    # Attribute values may contain '#' or '.', so only look outside brackets.
    bare = _BRACKETS.sub("", selector)
    fallbacks: list[Locator] = []

    match = _ID_FRAGMENT.search(bare)
    if match:
        element_id = match.group(1)
        fallbacks.append(Locator.by_id(element_id))
        fallbacks.append(Locator.by_css(f"*[id='{element_id}']"))
        fallbacks.append(Locator.by_css(f"*[id*='{element_id}']"))

    classes = _CLASS_FRAGMENT.findall(bare)
    if len(classes) == 1 and not _COMBINATORS.search(bare.strip()):
        class_name = classes[0]
        fallbacks.append(Locator.by_class_name(class_name))
        fallbacks.append(Locator.by_css(f"*[class*='{class_name}']"))

    return fallbacks


def _path_fallbacks(expression: str) -> list[Locator]:
    fallbacks: list[Locator] = []

    match = _PATH_ID.search(expression)
    if match:
        element_id = match.group(1)
        fallbacks.append(Locator.by_xpath(f"//*[contains(@id,'{element_id}')]"))
        fallbacks.append(Locator.by_id(element_id))

    match = _PATH_CLASS.search(expression)
    if match:
        fallbacks.append(
            Locator.by_xpath(f"//*[contains(@class,'{match.group(1)}')]")
        )

    return fallbacks


def build_candidates(original: Locator, description: str) -> list[Locator]:
    """Full candidate list: original, then role candidates, then generic.

    The list is not deduplicated; a candidate equal to the original is
    simply probed twice.
    """
    return [original, *role_candidates(description), *generic_fallbacks(original)]


@dataclass
class ElementProbeResult:
    """Outcome of probing a candidate list.

    Attributes:
        candidates: Every candidate, in probe order.
        outcomes: Found-and-interactable flag for each probed candidate.
            Shorter than candidates when a candidate succeeded early.
        chosen: The winning locator, or None.
        element: Handle of the winning element, or None.
    """

    candidates: list[Locator]
    outcomes: list[bool] = field(default_factory=list)
    chosen: Locator | None = None
    element: ElementHandleProtocol | None = field(default=None, repr=False)

    @property
    def found(self) -> bool:
        return self.chosen is not None


class SelectorSynthesizer:
    """Probes synthesized candidates against the live page."""

    def __init__(self, browser: BrowserProtocol, timeout: int = 20000) -> None:
        """Initialize the synthesizer.

        Args:
            browser: Browser used for probing.
            timeout: Presence wait per candidate in milliseconds.
        """
        self.browser = browser
        self.timeout = timeout

    async def probe(self, original: Locator, description: str) -> ElementProbeResult:
        """Probe candidates in order and stop at the first interactable one.

        Args:
            original: The locator that failed.
            description: Free-text description of the element.

        Returns:
            The probe result; ``found`` is False when every candidate failed.
        """
        result = ElementProbeResult(candidates=build_candidates(original, description))
        logger.info(
            f"Recovering '{description}' with {len(result.candidates)} candidates"
        )

        for candidate in result.candidates:
            element = await self._try_candidate(candidate)
            result.outcomes.append(element is not None)
            if element is not None:
                result.chosen = candidate
                result.element = element
                logger.info(f"Recovered '{description}' with: {candidate}")
                break

        return result

    async def _try_candidate(self, candidate: Locator) -> ElementHandleProtocol | None:
        """Return the element if candidate is present, visible and enabled."""
        try:
            element = await self.browser.locate(
                candidate, timeout=self.timeout, state="attached"
            )
            if await element.is_visible() and await element.is_enabled():
                return element
            logger.debug(f"Candidate not interactable: {candidate}")
        except ElementNotFound:
            logger.debug(f"Candidate not found: {candidate}")
        except PlaywrightError as e:
            logger.debug(f"Candidate failed: {candidate} ({e})")
        return None


class ElementRecovery:
    """Last-resort element lookup with diagnostics on failure.

    Attributes:
        browser: Browser the recovery runs against.
        config: Application configuration.
        session: Optional session logger for recovery records and screenshots.
    """

    def __init__(
        self,
        browser: BrowserProtocol,
        config: AppConfig,
        session: SessionLogger | None = None,
        synthesizer: SelectorSynthesizer | None = None,
        analyzer: DomAnalyzer | None = None,
    ) -> None:
        self.browser = browser
        self.config = config
        self.session = session
        self.synthesizer = synthesizer or SelectorSynthesizer(
            browser, timeout=config.explicit_timeout_ms
        )
        self.analyzer = analyzer or DomAnalyzer(browser)

    async def recover(self, original: Locator, description: str) -> ElementProbeResult:
        """Find an interactable replacement for a failing locator.

        Args:
            original: The locator that failed.
            description: Free-text description of the element.

        Returns:
            A probe result whose ``element`` is the recovered handle.

        Raises:
            ElementRecoveryFailed: If no candidate matched. Diagnostics are
                captured first and attached to the error.
        """
        result = await self.synthesizer.probe(original, description)
        if result.found:
            self._record(original, description, result)
            return result

        logger.error(f"Element recovery failed for: {description}")
        screenshot = await self._capture_screenshot(description)
        analysis = await self.analyzer.analyze_page_elements()
        self._record(original, description, result, screenshot, analysis)

        raise ElementRecoveryFailed(description, probe=result, analysis=analysis)

    async def validate_selector(self, locator: Locator, attempts: int = 5) -> bool:
        """Check that a locator resolves reliably.

        Args:
            locator: Locator to check.
            attempts: Number of lookups to run.

        Returns:
            True if the locator found an element in at least 80% of attempts.
        """
        if attempts < 1:
            raise ValueError("attempts must be at least 1")

        successes = 0
        for _ in range(attempts):
            try:
                await self.browser.locate(
                    locator, timeout=self.config.explicit_timeout_ms
                )
                successes += 1
            except (ElementNotFound, PlaywrightError) as e:
                logger.debug(f"Validation lookup missed: {locator} ({e})")

        rate = successes / attempts
        logger.info(f"Selector {locator} success rate: {rate:.0%}")
        return rate >= 0.8

    async def _capture_screenshot(self, description: str) -> str | None:
        """Take a diagnostic screenshot, returning its file name or None."""
        if not self.config.screenshot_on_failure:
            return None
        name = f"recovery_failed_{description}"
        try:
            image = await self.browser.screenshot()
            if self.session is not None:
                path = self.session.save_screenshot(name, image)
            else:
                path = _fallback_screenshot_path(self.config, name)
                path.write_bytes(image)
            logger.info(f"Screenshot saved: {path}")
            return path.name
        except Exception as e:
            logger.warning(f"Could not capture diagnostic screenshot: {e}")
            return None

    def _record(
        self,
        original: Locator,
        description: str,
        result: ElementProbeResult,
        screenshot: str | None = None,
        analysis: dict[str, list[str]] | None = None,
    ) -> None:
        """Write the recovery to the session log. Write failures only warn."""
        if self.session is None:
            return
        try:
            self.session.log_recovery(
                description=description,
                original=str(original),
                candidates=[str(c) for c in result.candidates],
                outcomes=result.outcomes,
                chosen=str(result.chosen) if result.chosen else None,
                screenshot=screenshot,
            )
            if analysis is not None:
                self.session.log_dom_analysis(description, analysis)
        except Exception as e:
            logger.warning(f"Could not record recovery for {description}: {e}")


def _fallback_screenshot_path(config: AppConfig, name: str) -> Path:
    """Screenshot path for runs without a session logger."""
    config.screenshots_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
    safe = re.sub(r"[^A-Za-z0-9_-]+", "_", name).strip("_")
    return config.screenshots_dir / f"{safe}_{timestamp}.png"
