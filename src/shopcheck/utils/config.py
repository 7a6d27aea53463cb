"""Configuration management for shopcheck."""

import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from dotenv import load_dotenv

from shopcheck.utils.exceptions import ConfigurationError

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


class BrowserType(Enum):
    """Browsers the suite can run against.

    Branded browsers run on a Playwright engine through a release channel.
    """

    CHROMIUM = "chromium"
    CHROME = "chrome"
    EDGE = "edge"
    FIREFOX = "firefox"
    WEBKIT = "webkit"

    @property
    def engine(self) -> str:
        """Name of the Playwright engine that drives this browser."""
        if self in (BrowserType.CHROME, BrowserType.EDGE):
            return "chromium"
        return self.value

    @property
    def channel(self) -> str | None:
        """Release channel passed to launch(), or None for the bundled build."""
        return {BrowserType.CHROME: "chrome", BrowserType.EDGE: "msedge"}.get(self)

    @classmethod
    def from_string(cls, name: str) -> "BrowserType":
        """Parse a browser name case-insensitively. ``safari`` maps to WebKit.

        Raises:
            ConfigurationError: If the name is not a supported browser.
        """
        lowered = name.strip().lower()
        if lowered == "safari":
            return cls.WEBKIT
        for member in cls:
            if member.value == lowered:
                return member
        raise ConfigurationError(f"Unknown browser type: {name}")


@dataclass
class AppConfig:
    """Application configuration."""

    base_url: str = "https://demowebshop.tricentis.com"
    output_dir: Path = Path("./target")
    browser: BrowserType = BrowserType.CHROMIUM
    headless: bool = True
    explicit_timeout: int = 20  # seconds
    page_timeout: int = 30000  # ms
    max_attempts: int = 3
    retry_backoff: float = 0.5  # seconds
    screenshot_on_failure: bool = True

    @property
    def explicit_timeout_ms(self) -> int:
        """Explicit-wait timeout in milliseconds, as Playwright expects it."""
        return self.explicit_timeout * 1000

    @property
    def screenshots_dir(self) -> Path:
        """Directory for screenshots taken outside of a session."""
        return self.output_dir / "screenshots"


class ConfigLoader:
    """Loads configuration from environment variables."""

    @staticmethod
    def load() -> AppConfig:
        """Load configuration from environment.

        Raises:
            ConfigurationError: If a value is present but invalid.
        """
        load_dotenv()  # Load .env file if present

        return AppConfig(
            base_url=os.environ.get(
                "SHOPCHECK_BASE_URL", "https://demowebshop.tricentis.com"
            ).rstrip("/"),
            output_dir=Path(os.environ.get("SHOPCHECK_OUTPUT", "./target")),
            browser=BrowserType.from_string(
                os.environ.get("SHOPCHECK_BROWSER", "chromium")
            ),
            headless=ConfigLoader._get_bool_env("SHOPCHECK_HEADLESS", True),
            explicit_timeout=ConfigLoader._get_int_env(
                "SHOPCHECK_EXPLICIT_TIMEOUT", 20
            ),
            page_timeout=ConfigLoader._get_int_env("SHOPCHECK_PAGE_TIMEOUT", 30000),
            max_attempts=ConfigLoader._get_int_env("SHOPCHECK_MAX_ATTEMPTS", 3),
            retry_backoff=ConfigLoader._get_float_env(
                "SHOPCHECK_RETRY_BACKOFF", 0.5
            ),
            screenshot_on_failure=ConfigLoader._get_bool_env(
                "SHOPCHECK_SCREENSHOT_ON_FAILURE", True
            ),
        )

    @staticmethod
    def _get_int_env(name: str, default: int) -> int:
        """Get an integer environment variable.

        Args:
            name: The environment variable name.
            default: The default value if not set.

        Returns:
            The integer value.

        Raises:
            ConfigurationError: If the value is not a valid integer.
        """
        value = os.environ.get(name)
        if value is None:
            return default
        try:
            return int(value)
        except ValueError as e:
            raise ConfigurationError(
                f"Invalid value for {name}: '{value}' is not a valid integer"
            ) from e

    @staticmethod
    def _get_float_env(name: str, default: float) -> float:
        """Get a float environment variable."""
        value = os.environ.get(name)
        if value is None:
            return default
        try:
            return float(value)
        except ValueError as e:
            raise ConfigurationError(
                f"Invalid value for {name}: '{value}' is not a valid number"
            ) from e

    @staticmethod
    def _get_bool_env(name: str, default: bool) -> bool:
        """Get a boolean environment variable (true/false, yes/no, 1/0, on/off)."""
        value = os.environ.get(name)
        if value is None:
            return default
        lowered = value.strip().lower()
        if lowered in _TRUE_VALUES:
            return True
        if lowered in _FALSE_VALUES:
            return False
        raise ConfigurationError(
            f"Invalid value for {name}: '{value}' is not a valid boolean"
        )
