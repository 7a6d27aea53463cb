"""pytest plugin: browser fixtures, failure screenshots and session results.

Registered through the ``pytest11`` entry point, so a suite that installs
shopcheck gets these fixtures without a conftest:

- ``shop_config``: configuration loaded from the environment
- ``shop_catalog``: the packaged selector catalogs
- ``shop_session``: a session log named after the test
- ``shop_browser``: a launched browser that, at teardown, screenshots a
  failed test and completes the session with the test's outcome
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Generator
from typing import Any

import pytest
import pytest_asyncio

from shopcheck.core.browser import PlaywrightBrowser
from shopcheck.core.protocols import BrowserProtocol
from shopcheck.selectors.catalog import SelectorCatalog
from shopcheck.utils.config import AppConfig, ConfigLoader
from shopcheck.utils.session import SessionLogger

logger = logging.getLogger(__name__)

PHASE_REPORTS = pytest.StashKey[dict[str, pytest.TestReport]]()


@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(
    item: pytest.Item, call: pytest.CallInfo[None]
) -> Generator[None, Any, None]:
    """Keep each phase's report on the item for fixture teardown."""
    outcome = yield
    report = outcome.get_result()
    item.stash.setdefault(PHASE_REPORTS, {})[report.when] = report


def phase_outcome(item: pytest.Item) -> str:
    """passed, failed, skipped or error (setup failed) for item."""
    reports = item.stash.get(PHASE_REPORTS, {})
    call = reports.get("call")
    if call is not None:
        return call.outcome
    setup = reports.get("setup")
    if setup is not None and setup.skipped:
        return "skipped"
    return "error"


def _failure_summary(item: pytest.Item) -> str | None:
    report = item.stash.get(PHASE_REPORTS, {}).get("call")
    if report is None or not report.failed:
        return None
    lines = [line for line in report.longreprtext.splitlines() if line.strip()]
    return lines[-1].strip() if lines else "failed"


async def record_test_result(
    item: pytest.Item,
    browser: BrowserProtocol,
    session: SessionLogger,
    config: AppConfig,
) -> str | None:
    """Complete the session with item's outcome.

    A failed test gets a screenshot first, when enabled. Errors from the
    screenshot or the session write are logged, not raised.

    Returns:
        File name of the failure screenshot, or None.
    """
    outcome = phase_outcome(item)
    screenshot = None

    if outcome == "failed":
        logger.info(f"Test failed: {item.name}")
        if config.screenshot_on_failure:
            try:
                path = session.save_screenshot(
                    f"{item.name}_failure", await browser.screenshot()
                )
                screenshot = path.name
                logger.info(f"Screenshot captured for failed test: {path}")
            except Exception as e:
                logger.warning(f"Could not capture screenshot for {item.name}: {e}")
    else:
        logger.debug(f"Test {outcome}: {item.name}")

    try:
        session.complete(outcome, _failure_summary(item))
    except Exception as e:
        logger.warning(f"Could not record result for {item.name}: {e}")
    return screenshot


@pytest.fixture(scope="session")
def shop_config() -> AppConfig:
    return ConfigLoader.load()


@pytest.fixture(scope="session")
def shop_catalog() -> SelectorCatalog:
    return SelectorCatalog()


@pytest.fixture
def shop_session(
    request: pytest.FixtureRequest, shop_config: AppConfig
) -> SessionLogger:
    return SessionLogger(
        shop_config.output_dir, request.node.name, shop_config.base_url
    )


@pytest_asyncio.fixture
async def shop_browser(
    request: pytest.FixtureRequest,
    shop_config: AppConfig,
    shop_session: SessionLogger,
) -> AsyncIterator[PlaywrightBrowser]:
    browser = PlaywrightBrowser(shop_config.browser, headless=shop_config.headless)
    try:
        await browser.launch()
        yield browser
        await record_test_result(request.node, browser, shop_session, shop_config)
    finally:
        await browser.close()
