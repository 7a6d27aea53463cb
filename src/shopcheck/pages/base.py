"""Base page object: catalog lookup, fallback, recovery and retried actions."""

from __future__ import annotations

import logging
from typing import TypeVar, cast

from shopcheck.core.interaction import RetryingInteractor
from shopcheck.core.locators import Locator
from shopcheck.core.protocols import BrowserProtocol, ElementHandleProtocol
from shopcheck.core.synthesizer import ElementRecovery
from shopcheck.selectors.catalog import SelectorCatalog, SelectorDefinition
from shopcheck.selectors.fallback import get_fallback_sequence
from shopcheck.utils.config import AppConfig
from shopcheck.utils.exceptions import ElementNotFound
from shopcheck.utils.session import SessionLogger

logger = logging.getLogger(__name__)

P = TypeVar("P", bound="BasePage")


class BasePage:
    """Common behaviour for every page of the shop.

    Elements are addressed by dotted catalog paths. Lookup walks the
    definition's fallback sequence and, when every catalog locator misses,
    hands the primary locator to element recovery. Clicks and typing go
    through the retrying interactor.

    Attributes:
        catalog_name: Catalog used when a call does not name one.
        url_path: Path of the page relative to the base URL.
        landmark: Catalog path whose visibility means the page has loaded.
    """

    catalog_name: str = "homepage"
    url_path: str = "/"
    landmark: str = "header.logo"

    def __init__(
        self,
        browser: BrowserProtocol,
        catalog: SelectorCatalog,
        config: AppConfig,
        session: SessionLogger | None = None,
        interactor: RetryingInteractor | None = None,
        recovery: ElementRecovery | None = None,
    ) -> None:
        self.browser = browser
        self.catalog = catalog
        self.config = config
        self.session = session
        self.interactor = interactor or RetryingInteractor(
            browser,
            timeout=config.explicit_timeout_ms,
            max_attempts=config.max_attempts,
            backoff=config.retry_backoff,
            session=session,
        )
        self.recovery = recovery or ElementRecovery(browser, config, session=session)

    @property
    def url(self) -> str:
        return f"{self.config.base_url}{self.url_path}"

    async def open(self) -> None:
        """Navigate to this page."""
        logger.info(f"Opening {self.url}")
        await self.browser.navigate(self.url, timeout=self.config.page_timeout)

    def definition(self, path: str, catalog: str | None = None) -> SelectorDefinition:
        return self.catalog.resolve(catalog or self.catalog_name, path)

    async def find(
        self, path: str, catalog: str | None = None
    ) -> tuple[Locator, ElementHandleProtocol]:
        """Find an element by catalog path.

        Args:
            path: Dotted catalog path.
            catalog: Catalog name; defaults to the page's catalog.

        Returns:
            The locator that worked and the element it found.

        Raises:
            SelectorNotFound: If the path is not in the catalog.
            ElementRecoveryFailed: If neither the catalog nor recovery
                found the element.
        """
        definition = self.definition(path, catalog)
        for locator in get_fallback_sequence(definition):
            try:
                element = await self.browser.locate(
                    locator, timeout=self.config.explicit_timeout_ms
                )
                return locator, element
            except ElementNotFound:
                logger.debug(f"Fallback locator missed: {locator}")

        logger.warning(
            f"All catalog locators failed for {definition.catalog}.{definition.path}"
        )
        result = await self.recovery.recover(definition.primary, definition.description)
        # recover() only returns found results
        return (
            cast(Locator, result.chosen),
            cast(ElementHandleProtocol, result.element),
        )

    async def click(self, path: str, catalog: str | None = None) -> None:
        locator, _ = await self.find(path, catalog)
        await self.interactor.click(locator, self.definition(path, catalog).description)

    async def type(self, path: str, text: str, catalog: str | None = None) -> None:
        locator, _ = await self.find(path, catalog)
        await self.interactor.type(
            locator, text, self.definition(path, catalog).description
        )

    async def select(self, path: str, label: str, catalog: str | None = None) -> None:
        locator, _ = await self.find(path, catalog)
        await self.interactor.select(
            locator, label, self.definition(path, catalog).description
        )

    async def text_of(self, path: str, catalog: str | None = None) -> str:
        """Visible text of an element, re-read on stale references."""
        locator, _ = await self.find(path, catalog)

        async def read() -> str:
            element = await self.browser.locate(
                locator, timeout=self.config.explicit_timeout_ms
            )
            return (await element.inner_text()).strip()

        outcome = await self.interactor.perform(
            self.definition(path, catalog).description, read, action="read"
        )
        return outcome.value

    async def texts_of(self, path: str, catalog: str | None = None) -> list[str]:
        """Text of every element matching the first locator that matches any."""
        definition = self.definition(path, catalog)
        for locator in get_fallback_sequence(definition):
            elements = await self.browser.locate_all(locator)
            if elements:
                return [(await element.inner_text()).strip() for element in elements]
        return []

    async def count_of(self, path: str, catalog: str | None = None) -> int:
        definition = self.definition(path, catalog)
        for locator in get_fallback_sequence(definition):
            elements = await self.browser.locate_all(locator)
            if elements:
                return len(elements)
        return 0

    async def is_displayed(
        self, path: str, catalog: str | None = None, timeout: int = 2000
    ) -> bool:
        """Check visibility using catalog locators only, never recovery."""
        for locator in get_fallback_sequence(self.definition(path, catalog)):
            try:
                await self.browser.locate(locator, timeout=timeout, state="visible")
                return True
            except ElementNotFound:
                continue
        return False

    async def title(self) -> str:
        return await self.browser.title()

    async def current_url(self) -> str:
        return await self.browser.url()

    async def is_loaded(self) -> bool:
        """Check that the page's landmark element is visible."""
        return await self.is_displayed(self.landmark)

    def _sibling(self, page_class: type[P]) -> P:
        """Build another page object sharing this page's collaborators."""
        return page_class(
            self.browser,
            self.catalog,
            self.config,
            session=self.session,
            interactor=self.interactor,
            recovery=self.recovery,
        )
