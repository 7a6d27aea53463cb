"""Core module for shopcheck."""

from .browser import PlaywrightBrowser
from .dom_analyzer import DomAnalyzer
from .interaction import (
    InteractionOutcome,
    InteractionStateMachine,
    RetryingInteractor,
    StaleElementError,
    is_stale_error,
)
from .locators import Locator, Strategy, parse_locator
from .protocols import BrowserProtocol, ElementHandleProtocol
from .synthesizer import (
    ElementProbeResult,
    ElementRecovery,
    SelectorSynthesizer,
    build_candidates,
)

__all__ = [
    "BrowserProtocol",
    "DomAnalyzer",
    "ElementHandleProtocol",
    "ElementProbeResult",
    "ElementRecovery",
    "InteractionOutcome",
    "InteractionStateMachine",
    "Locator",
    "PlaywrightBrowser",
    "RetryingInteractor",
    "SelectorSynthesizer",
    "StaleElementError",
    "Strategy",
    "build_candidates",
    "is_stale_error",
    "parse_locator",
]
