"""Utilities module for shopcheck."""

from .config import AppConfig, BrowserType, ConfigLoader
from .exceptions import (
    BrowserLaunchError,
    CatalogFormatError,
    CatalogNotFound,
    ConfigurationError,
    ElementNotFound,
    ElementRecoveryFailed,
    ElementStaleAfterRetries,
    InvalidLocator,
    NavigationError,
    PermanentError,
    SelectorNotFound,
    ShopCheckError,
    TransientError,
)
from .session import InteractionRecord, RecoveryRecord, SessionLogger

__all__ = [
    "AppConfig",
    "BrowserLaunchError",
    "BrowserType",
    "CatalogFormatError",
    "CatalogNotFound",
    "ConfigLoader",
    "ConfigurationError",
    "ElementNotFound",
    "ElementRecoveryFailed",
    "ElementStaleAfterRetries",
    "InteractionRecord",
    "InvalidLocator",
    "NavigationError",
    "PermanentError",
    "RecoveryRecord",
    "SelectorNotFound",
    "SessionLogger",
    "ShopCheckError",
    "TransientError",
]
