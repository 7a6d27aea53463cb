"""Unit tests for the retry-on-stale interaction wrapper.

Tests cover:
- Staleness classification of Playwright errors
- InteractionStateMachine transitions and attempt counting
- RetryingInteractor attempt and backoff counts
- click/type re-locating on every attempt
- Session records
"""

import json
import shutil
from unittest.mock import AsyncMock, MagicMock

import pytest
from playwright.async_api import Error as PlaywrightError
from statemachine.exceptions import TransitionNotAllowed

from shopcheck.core.interaction import (
    InteractionStateMachine,
    RetryingInteractor,
    StaleElementError,
    is_stale_error,
)
from shopcheck.core.locators import Locator
from shopcheck.utils.exceptions import ElementNotFound, ElementStaleAfterRetries


def stale() -> PlaywrightError:
    return PlaywrightError("Element is not attached to the DOM")


class FlakyOperation:
    """Async callable that raises the queued errors, then returns a value."""

    def __init__(self, errors: list[Exception], value: str = "done") -> None:
        self.errors = list(errors)
        self.value = value
        self.calls = 0

    async def __call__(self) -> str:
        self.calls += 1
        if self.errors:
            raise self.errors.pop(0)
        return self.value


@pytest.fixture
def sleep() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def interactor(mock_browser: MagicMock, sleep: AsyncMock) -> RetryingInteractor:
    return RetryingInteractor(mock_browser, timeout=1000, sleep=sleep)


class TestIsStaleError:
    """Tests for is_stale_error."""

    @pytest.mark.parametrize(
        "message",
        [
            "Element is not attached to the DOM",
            "elementHandle.click: Element is detached from document",
            "Execution context was destroyed, most likely because of a navigation",
            "stale element reference",
        ],
    )
    def test_playwright_stale_messages(self, message: str) -> None:
        assert is_stale_error(PlaywrightError(message)) is True

    def test_stale_element_error(self) -> None:
        assert is_stale_error(StaleElementError("gone")) is True

    def test_other_playwright_error(self) -> None:
        assert is_stale_error(PlaywrightError("Target closed")) is False

    def test_not_found_is_not_stale(self) -> None:
        assert is_stale_error(ElementNotFound("Element not found")) is False

    def test_generic_exception(self) -> None:
        assert is_stale_error(RuntimeError("not attached to the dom")) is False


class TestInteractionStateMachine:
    """Tests for InteractionStateMachine."""

    def test_initial_state(self) -> None:
        machine = InteractionStateMachine()
        assert machine.current_state.id == "attempting"
        assert machine.attempt == 1

    def test_stale_with_attempts_left_loops(self) -> None:
        machine = InteractionStateMachine(max_attempts=3)
        machine.stale()
        assert machine.current_state.id == "attempting"
        assert machine.attempt == 2
        assert machine.backoffs == 1

    def test_stale_on_last_attempt_fails(self) -> None:
        machine = InteractionStateMachine(max_attempts=2)
        machine.stale()
        machine.stale()
        assert machine.current_state.id == "failed_permanently"
        assert machine.attempt == 2
        assert machine.backoffs == 1

    def test_succeed_is_final(self) -> None:
        machine = InteractionStateMachine()
        machine.succeed()
        assert machine.current_state.id == "succeeded"
        with pytest.raises(TransitionNotAllowed):
            machine.stale()

    def test_fail_is_final(self) -> None:
        machine = InteractionStateMachine()
        machine.fail()
        assert machine.current_state.id == "failed_permanently"
        assert not machine.should_back_off

    def test_rejects_zero_attempts(self) -> None:
        with pytest.raises(ValueError):
            InteractionStateMachine(max_attempts=0)


class TestPerform:
    """Tests for RetryingInteractor.perform."""

    @pytest.mark.asyncio
    async def test_succeeds_on_third_attempt_after_two_stale(
        self, interactor: RetryingInteractor, sleep: AsyncMock
    ) -> None:
        operation = FlakyOperation([stale(), stale()])

        outcome = await interactor.perform("email field", operation)

        assert outcome.value == "done"
        assert outcome.attempts == 3
        assert operation.calls == 3
        assert sleep.await_count == 2
        sleep.assert_awaited_with(0.5)

    @pytest.mark.asyncio
    async def test_non_stale_error_fails_immediately(
        self, interactor: RetryingInteractor, sleep: AsyncMock
    ) -> None:
        operation = FlakyOperation([ElementNotFound("Element not found")])

        with pytest.raises(ElementNotFound):
            await interactor.perform("email field", operation)

        assert operation.calls == 1
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_non_stale_playwright_error_propagates_unchanged(
        self, interactor: RetryingInteractor, sleep: AsyncMock
    ) -> None:
        error = PlaywrightError("Target page has been closed")
        operation = FlakyOperation([error])

        with pytest.raises(PlaywrightError) as exc_info:
            await interactor.perform("email field", operation)

        assert exc_info.value is error
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_exhausted_budget_raises_stale_after_retries(
        self, interactor: RetryingInteractor, sleep: AsyncMock
    ) -> None:
        operation = FlakyOperation([stale(), stale(), stale(), stale()])

        with pytest.raises(ElementStaleAfterRetries) as exc_info:
            await interactor.perform("login button", operation)

        assert exc_info.value.attempts == 3
        assert exc_info.value.description == "login button"
        assert isinstance(exc_info.value.__cause__, PlaywrightError)
        assert operation.calls == 3
        assert sleep.await_count == 2

    @pytest.mark.asyncio
    async def test_first_attempt_success_has_no_sleep(
        self, interactor: RetryingInteractor, sleep: AsyncMock
    ) -> None:
        outcome = await interactor.perform("x", FlakyOperation([]))
        assert outcome.attempts == 1
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_custom_budget_and_backoff(self, mock_browser: MagicMock) -> None:
        sleep = AsyncMock()
        interactor = RetryingInteractor(
            mock_browser, max_attempts=5, backoff=0.1, sleep=sleep
        )
        operation = FlakyOperation([stale()] * 4)

        outcome = await interactor.perform("x", operation)

        assert outcome.attempts == 5
        assert sleep.await_count == 4
        sleep.assert_awaited_with(0.1)


class TestClickAndType:
    """Tests for click and type."""

    @pytest.mark.asyncio
    async def test_click_relocates_after_stale(
        self, interactor: RetryingInteractor, mock_browser: MagicMock
    ) -> None:
        stale_element = MagicMock()
        stale_element.click = AsyncMock(side_effect=stale())
        fresh_element = MagicMock()
        fresh_element.click = AsyncMock()
        mock_browser.locate.side_effect = [stale_element, fresh_element]
        locator = Locator.by_id("Email")

        outcome = await interactor.click(locator, "email field")

        assert outcome.attempts == 2
        assert mock_browser.locate.await_count == 2
        mock_browser.locate.assert_awaited_with(locator, timeout=1000, state="visible")
        fresh_element.click.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_type_fills_text(
        self, interactor: RetryingInteractor, mock_browser: MagicMock
    ) -> None:
        element = MagicMock()
        element.fill = AsyncMock()
        mock_browser.locate.return_value = element

        outcome = await interactor.type(Locator.by_id("Email"), "a@b.com")

        assert outcome.attempts == 1
        element.fill.assert_awaited_once_with("a@b.com", timeout=1000)

    @pytest.mark.asyncio
    async def test_click_not_found_is_not_retried(
        self, interactor: RetryingInteractor, mock_browser: MagicMock, sleep: AsyncMock
    ) -> None:
        mock_browser.locate.side_effect = ElementNotFound("Element not found")

        with pytest.raises(ElementNotFound):
            await interactor.click(Locator.by_id("missing"))

        assert mock_browser.locate.await_count == 1
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_records_interactions_in_session(
        self, mock_browser: MagicMock, mock_session
    ) -> None:
        element = MagicMock()
        element.click = AsyncMock(side_effect=[stale(), None])
        mock_browser.locate.return_value = element
        interactor = RetryingInteractor(
            mock_browser, sleep=AsyncMock(), session=mock_session
        )

        await interactor.click(Locator.by_id("Email"), "email field")

        data = json.loads((mock_session.session_dir / "session.json").read_text())
        assert data["interactions"][0]["action"] == "click"
        assert data["interactions"][0]["target"] == "email field"
        assert data["interactions"][0]["attempts"] == 2
        assert data["interactions"][0]["outcome"] == "succeeded"

    @pytest.mark.asyncio
    async def test_unwritable_session_keeps_original_errors(
        self, mock_browser: MagicMock, mock_session
    ) -> None:
        shutil.rmtree(mock_session.session_dir)
        interactor = RetryingInteractor(
            mock_browser, sleep=AsyncMock(), session=mock_session
        )

        with pytest.raises(ElementNotFound):
            await interactor.perform(
                "email field", FlakyOperation([ElementNotFound("gone")])
            )
        with pytest.raises(ElementStaleAfterRetries):
            await interactor.perform("login button", FlakyOperation([stale()] * 3))
        outcome = await interactor.perform("search box", FlakyOperation([]))

        assert outcome.value == "done"

    @pytest.mark.asyncio
    async def test_select_picks_option_by_label(
        self, mock_browser: MagicMock, interactor: RetryingInteractor
    ) -> None:
        element = MagicMock()
        element.select_option = AsyncMock(side_effect=[stale(), ["US"]])
        mock_browser.locate.return_value = element

        outcome = await interactor.select(
            Locator.by_id("BillingNewAddress_CountryId"), "United States", "country"
        )

        assert outcome.attempts == 2
        element.select_option.assert_awaited_with(label="United States", timeout=1000)
        mock_browser.locate.assert_awaited_with(
            Locator.by_id("BillingNewAddress_CountryId"), timeout=1000, state="visible"
        )
