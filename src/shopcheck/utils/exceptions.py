"""Exception hierarchy for shopcheck."""


class ShopCheckError(Exception):
    """Base exception for all shopcheck errors."""


class TransientError(ShopCheckError):
    """Retry-able errors such as timeouts or temporary page states."""


class PermanentError(ShopCheckError):
    """Non-retry-able errors that require configuration or code changes."""


class ConfigurationError(PermanentError):
    """Invalid or missing configuration."""


class InvalidLocator(PermanentError, ValueError):  # noqa: N818
    """A raw locator string could not be parsed."""


class CatalogNotFound(PermanentError):  # noqa: N818
    """No selector resource exists for the requested catalog name."""

    def __init__(self, name: str) -> None:
        """Initialize CatalogNotFound with the catalog name.

        Args:
            name: The catalog name that could not be found.
        """
        self.name = name
        super().__init__(f"Selector catalog not found: {name}")


class CatalogFormatError(PermanentError):
    """A selector resource exists but is not a valid catalog document."""


class SelectorNotFound(PermanentError):  # noqa: N818
    """Dotted path is absent from an otherwise-loaded catalog."""

    def __init__(self, catalog: str, path: str) -> None:
        """Initialize SelectorNotFound with the catalog and path.

        Args:
            catalog: Name of the catalog that was searched.
            path: The dotted path that could not be resolved.
        """
        self.catalog = catalog
        self.path = path
        super().__init__(f"Selector not found: {path} in {catalog}")


class ElementNotFound(TransientError):  # noqa: N818
    """Element not found in page, may succeed on retry."""


class NavigationError(TransientError):
    """Page navigation failed, may succeed on retry."""


class ElementStaleAfterRetries(ShopCheckError):  # noqa: N818
    """Element reference was invalidated on every attempt of the retry budget."""

    def __init__(self, description: str, attempts: int) -> None:
        """Initialize ElementStaleAfterRetries.

        Args:
            description: What was being interacted with.
            attempts: Number of attempts made before giving up.
        """
        self.description = description
        self.attempts = attempts
        super().__init__(
            f"Element '{description}' was stale after {attempts} attempts"
        )


class ElementRecoveryFailed(ShopCheckError):  # noqa: N818
    """No synthesized candidate locator matched an interactable element.

    The probe result and the DOM analysis (when it could be captured) are
    attached for offline debugging.
    """

    def __init__(
        self,
        description: str,
        probe: object | None = None,
        analysis: dict[str, list[str]] | None = None,
    ) -> None:
        """Initialize ElementRecoveryFailed.

        Args:
            description: Free-text description of the element.
            probe: The ElementProbeResult of the exhausted waterfall.
            analysis: Optional DOM analysis captured after the failure.
        """
        self.description = description
        self.probe = probe
        self.analysis = analysis or {}
        super().__init__(f"Element recovery failed for: {description}")


class BrowserLaunchError(PermanentError):
    """The browser process could not be started."""

    def __init__(self, browser: str, reason: str) -> None:
        """Initialize BrowserLaunchError.

        Args:
            browser: Name of the browser that failed to start.
            reason: Error reported by Playwright.
        """
        self.browser = browser
        self.reason = reason
        super().__init__(f"Failed to launch {browser}: {reason}")
