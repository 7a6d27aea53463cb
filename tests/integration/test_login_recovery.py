"""Login scenarios where catalog locators miss and recovery takes over."""

import json

import pytest

from shopcheck.core.dom_analyzer import CATEGORIES
from shopcheck.core.locators import Locator
from shopcheck.core.synthesizer import ElementRecovery
from shopcheck.pages.login import LoginPage
from shopcheck.selectors.catalog import SelectorCatalog
from shopcheck.utils.exceptions import ElementRecoveryFailed, ElementStaleAfterRetries

pytestmark = pytest.mark.integration

ORIGINAL = Locator.by_css("input[value='Log in']")
SUBMIT_BUTTON = Locator.by_css("button[type='submit']")


def read_session(session) -> dict:
    return json.loads((session.session_dir / "session.json").read_text())


class TestLoginButtonRecovery:
    """The catalog login button is gone; a plain submit button remains."""

    @pytest.mark.asyncio
    async def test_catalog_sequence_is_tried_before_recovery(self, login_page):
        await login_page.submit()

        tried = login_page.browser.located
        catalog_sequence = [
            Locator.by_css("input[value='Log in']"),
            Locator.by_css("input.login-button"),
            Locator.by_xpath("//input[@value='Log in']"),
        ]
        assert tried[:3] == catalog_sequence

    @pytest.mark.asyncio
    async def test_submit_clicks_recovered_button(self, login_page, login_dom):
        await login_page.submit()
        assert login_dom.submit_button.clicks == 1

    @pytest.mark.asyncio
    async def test_recovery_tries_original_then_role_candidates(
        self, login_page, session
    ):
        await login_page.submit()

        record = read_session(session)["recoveries"][0]
        assert record["description"] == "login button"
        assert record["original"] == "By.css: input[value='Log in']"
        assert record["candidates"][:3] == [
            "By.css: input[value='Log in']",
            "By.css: input[value='Log in']",
            "By.css: button[type='submit']",
        ]
        assert record["outcomes"] == [False, False, True]
        assert record["chosen"] == "By.css: button[type='submit']"

    @pytest.mark.asyncio
    async def test_full_login_succeeds(self, login_page, login_dom):
        succeeded = await login_page.login("jane@example.com", "Secret123!")

        assert succeeded is True
        email = login_dom.elements[Locator.by_id("Email")][0]
        password = login_dom.elements[Locator.by_id("Password")][0]
        assert email.value == "jane@example.com"
        assert password.value == "Secret123!"

    @pytest.mark.asyncio
    async def test_interactions_are_logged(self, login_page, session):
        await login_page.login("jane@example.com", "Secret123!")

        interactions = read_session(session)["interactions"]
        assert [i["action"] for i in interactions] == ["type", "type", "click"]
        assert all(i["outcome"] == "succeeded" for i in interactions)
        assert interactions[-1]["target"] == "login button"

    @pytest.mark.asyncio
    async def test_recovery_is_deterministic(self, login_dom, app_config):
        first = await ElementRecovery(login_dom, app_config).recover(
            ORIGINAL, "login button"
        )
        second = await ElementRecovery(login_dom, app_config).recover(
            ORIGINAL, "login button"
        )

        assert first.candidates == second.candidates
        assert first.outcomes == second.outcomes
        assert first.chosen == second.chosen == SUBMIT_BUTTON


class TestLoginButtonMissing:
    """No interactable submit control exists at all."""

    @pytest.mark.asyncio
    async def test_failure_carries_diagnostics(self, login_dom, login_page, session):
        login_dom.submit_button.enabled = False

        with pytest.raises(ElementRecoveryFailed) as exc_info:
            await login_page.submit()

        error = exc_info.value
        assert error.description == "login button"
        assert not error.probe.found
        assert len(error.probe.outcomes) == len(error.probe.candidates)
        assert set(error.analysis) == set(CATEGORIES)
        # the bare button has no id, name, class or value to suggest from
        assert error.analysis["submit_buttons"] == []

        data = read_session(session)
        assert data["recoveries"][0]["chosen"] is None
        assert data["recoveries"][0]["screenshot"] is not None
        assert len(data["screenshots"]) == 1
        assert data["dom_analyses"][0]["description"] == "login button"

    @pytest.mark.asyncio
    async def test_button_is_not_clicked(self, login_dom, login_page):
        login_dom.submit_button.enabled = False

        with pytest.raises(ElementRecoveryFailed):
            await login_page.submit()

        assert login_dom.submit_button.clicks == 0


class TestStaleElementRetries:
    """Clicks that hit a detached element are retried on a fresh lookup."""

    @pytest.mark.asyncio
    async def test_click_retries_until_fresh_element(
        self, fake_browser, flaky_element, app_config, session
    ):
        fake_browser.current_url = "https://demowebshop.tricentis.com/login"
        button = flaky_element(stale_clicks=2, value="Log in")
        fake_browser.add(ORIGINAL, button)
        page = LoginPage(fake_browser, SelectorCatalog(), app_config, session=session)

        await page.submit()

        assert button.clicks == 1
        interaction = read_session(session)["interactions"][0]
        assert interaction["attempts"] == 3
        assert interaction["outcome"] == "succeeded"

    @pytest.mark.asyncio
    async def test_click_gives_up_after_max_attempts(
        self, fake_browser, flaky_element, app_config, session
    ):
        button = flaky_element(stale_clicks=5, value="Log in")
        fake_browser.add(ORIGINAL, button)
        page = LoginPage(fake_browser, SelectorCatalog(), app_config, session=session)

        with pytest.raises(ElementStaleAfterRetries) as exc_info:
            await page.submit()

        assert exc_info.value.attempts == 3
        assert button.clicks == 0
        assert read_session(session)["interactions"][0]["outcome"] == "failed"
