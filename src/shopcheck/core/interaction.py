"""Retry-on-stale wrapper for click and type interactions.

Each call runs a small state machine:

- attempting: an attempt (1..max_attempts) to locate the element and act
- succeeded: the action completed (final)
- failed_permanently: a non-stale error, or staleness on the last attempt (final)

A stale element (reference detached between lookup and use) sends the
``stale`` event, which loops back to ``attempting`` after a fixed backoff
while attempts remain. Every other error sends ``fail``.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

from playwright.async_api import Error as PlaywrightError
from statemachine import State, StateMachine

from shopcheck.core.locators import Locator
from shopcheck.core.protocols import BrowserProtocol
from shopcheck.utils.exceptions import ElementStaleAfterRetries
from shopcheck.utils.session import SessionLogger

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_BACKOFF = 0.5  # seconds

# Playwright reports stale handles through its generic Error type.
STALE_MARKERS = (
    "not attached to the dom",
    "element is detached",
    "element handle is detached",
    "execution context was destroyed",
    "stale element",
)


class StaleElementError(Exception):
    """Raised by custom element wrappers whose reference went stale."""


def is_stale_error(error: BaseException) -> bool:
    """Check whether an error means the element reference went stale.

    Args:
        error: The exception raised by a locate-and-act operation.

    Returns:
        True for StaleElementError and Playwright errors about detached
        elements or destroyed execution contexts.
    """
    if isinstance(error, StaleElementError):
        return True
    if isinstance(error, PlaywrightError):
        message = str(error).lower()
        return any(marker in message for marker in STALE_MARKERS)
    return False


class InteractionStateMachine(StateMachine):
    """Attempt bookkeeping for one retried interaction.

    Attributes:
        attempt: Number of the current (or last) attempt, starting at 1.
        max_attempts: Retry budget.
        backoffs: Number of stale failures that led to another attempt.
    """

    attempting = State(initial=True)
    succeeded = State(final=True)
    failed_permanently = State(final=True)

    succeed = attempting.to(succeeded)
    stale = attempting.to.itself(cond="has_attempts_left") | attempting.to(
        failed_permanently
    )
    fail = attempting.to(failed_permanently)

    def __init__(self, max_attempts: int = DEFAULT_MAX_ATTEMPTS) -> None:
        """Initialize with the first attempt under way."""
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.attempt: int = 1
        self.max_attempts = max_attempts
        self.backoffs: int = 0
        super().__init__()

    def has_attempts_left(self) -> bool:
        """Check whether another attempt fits in the budget."""
        return self.attempt < self.max_attempts

    def after_stale(self, target: State) -> None:
        """Advance the attempt counter when staleness loops back."""
        if target.id == "attempting":
            self.attempt += 1
            self.backoffs += 1

    @property
    def should_back_off(self) -> bool:
        """True while another attempt is pending."""
        return self.current_state.id == "attempting"


@dataclass
class InteractionOutcome(Generic[T]):
    """Result of a retried interaction.

    Attributes:
        value: Whatever the operation returned.
        attempts: Number of attempts it took.
    """

    value: T
    attempts: int


class RetryingInteractor:
    """Clicks and types with bounded retry on stale elements.

    Every attempt re-locates the element so that a fresh reference replaces
    the stale one.

    Example:
        >>> interactor = RetryingInteractor(browser, timeout=20000)
        >>> await interactor.click(Locator.by_id("Email"), "email field")
    """

    def __init__(
        self,
        browser: BrowserProtocol,
        timeout: int = 20000,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        backoff: float = DEFAULT_BACKOFF,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        session: SessionLogger | None = None,
    ) -> None:
        """Initialize the interactor.

        Args:
            browser: Browser used to locate elements.
            timeout: Locate timeout per attempt in milliseconds.
            max_attempts: Retry budget per interaction.
            backoff: Pause between attempts in seconds.
            sleep: Awaitable sleep function, replaceable in tests.
            session: Optional session logger for interaction records.
        """
        self.browser = browser
        self.timeout = timeout
        self.max_attempts = max_attempts
        self.backoff = backoff
        self._sleep = sleep
        self.session = session

    async def perform(
        self,
        description: str,
        operation: Callable[[], Awaitable[T]],
        action: str = "interact",
    ) -> InteractionOutcome[T]:
        """Run a locate-and-act operation under the retry state machine.

        Args:
            description: What is being interacted with, for logs and errors.
            operation: Async callable doing one full locate + act attempt.
            action: Interaction kind recorded in the session log.

        Returns:
            The operation's value and the number of attempts used.

        Raises:
            ElementStaleAfterRetries: If every attempt hit a stale element.
            Exception: Any non-stale error from operation, unchanged.
        """
        machine = InteractionStateMachine(max_attempts=self.max_attempts)

        while True:
            try:
                value = await operation()
            except Exception as e:
                if not is_stale_error(e):
                    machine.fail()
                    self._record(action, description, machine.attempt, "failed")
                    raise

                machine.stale()
                if not machine.should_back_off:
                    self._record(action, description, machine.attempt, "failed")
                    raise ElementStaleAfterRetries(description, machine.attempt) from e

                logger.warning(
                    f"Stale element '{description}', retrying... "
                    f"attempt {machine.attempt}/{machine.max_attempts}"
                )
                await self._sleep(self.backoff)
                continue

            machine.succeed()
            self._record(action, description, machine.attempt, "succeeded")
            return InteractionOutcome(value=value, attempts=machine.attempt)

    async def click(
        self, locator: Locator, description: str | None = None
    ) -> InteractionOutcome[None]:
        """Locate a visible element and click it."""

        async def attempt() -> None:
            element = await self.browser.locate(
                locator, timeout=self.timeout, state="visible"
            )
            await element.click(timeout=self.timeout)
            logger.debug(f"Clicked element: {locator}")

        return await self.perform(description or str(locator), attempt, action="click")

    async def type(
        self, locator: Locator, text: str, description: str | None = None
    ) -> InteractionOutcome[None]:
        """Locate a visible element, clear it and type text."""

        async def attempt() -> None:
            element = await self.browser.locate(
                locator, timeout=self.timeout, state="visible"
            )
            await element.fill(text, timeout=self.timeout)
            logger.debug(f"Typed into element: {locator}")

        return await self.perform(description or str(locator), attempt, action="type")

    async def select(
        self, locator: Locator, label: str, description: str | None = None
    ) -> InteractionOutcome[None]:
        """Locate a visible dropdown and choose the option labelled label."""

        async def attempt() -> None:
            element = await self.browser.locate(
                locator, timeout=self.timeout, state="visible"
            )
            await element.select_option(label=label, timeout=self.timeout)
            logger.debug(f"Selected '{label}' in element: {locator}")

        return await self.perform(description or str(locator), attempt, action="select")

    def _record(self, action: str, target: str, attempts: int, outcome: str) -> None:
        if self.session is None:
            return
        try:
            self.session.log_interaction(action, target, attempts, outcome)
        except Exception as e:
            logger.warning(f"Could not record {action} on {target}: {e}")
