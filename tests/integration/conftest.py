"""Fixtures for page-level scenarios against a fake login page."""

from __future__ import annotations

import pytest

from shopcheck.core.interaction import StaleElementError
from shopcheck.core.locators import Locator
from shopcheck.pages.login import LoginPage
from shopcheck.selectors.catalog import SelectorCatalog
from shopcheck.utils.config import AppConfig
from shopcheck.utils.session import SessionLogger

LOGIN_URL = "https://demowebshop.tricentis.com/login"
SUBMIT_BUTTON = Locator.by_css("button[type='submit']")
SUBMIT_CATEGORY = "input[type='submit'], button[type='submit']"


@pytest.fixture
def login_dom(fake_browser, make_element):
    """Login page whose submit button has lost its catalog attributes.

    The email and password inputs still match the catalog. The only submit
    control is ``<button type="submit">Login</button>``; clicking it moves
    the browser to the home page.
    """
    browser = fake_browser
    browser.current_url = LOGIN_URL

    class SubmitButton(make_element):
        async def click(self, timeout: float | None = None) -> None:
            await super().click(timeout)
            browser.current_url = "https://demowebshop.tricentis.com/"

    browser.add(Locator.by_id("Email"), make_element(id="Email", name="Email"))
    browser.add(
        Locator.by_id("Password"),
        make_element(id="Password", name="Password", type="password"),
    )
    button = SubmitButton(tag="button", text="Login", type="submit")
    browser.add(SUBMIT_BUTTON, button)
    browser.css_index[SUBMIT_CATEGORY] = [button]
    browser.submit_button = button
    return browser


@pytest.fixture
def flaky_element(make_element):
    """Element whose first clicks hit a detached reference."""

    class FlakyElement(make_element):
        def __init__(self, stale_clicks: int, **kwargs) -> None:
            super().__init__(**kwargs)
            self.stale_clicks = stale_clicks

        async def click(self, timeout: float | None = None) -> None:
            if self.stale_clicks > 0:
                self.stale_clicks -= 1
                raise StaleElementError("element is not attached to the DOM")
            await super().click(timeout)

    return FlakyElement


@pytest.fixture
def session(tmp_path) -> SessionLogger:
    return SessionLogger(
        output_dir=tmp_path / "sessions",
        name="login_scenario",
        base_url="https://demowebshop.tricentis.com",
    )


@pytest.fixture
def login_page(login_dom, app_config: AppConfig, session) -> LoginPage:
    return LoginPage(login_dom, SelectorCatalog(), app_config, session=session)
