"""Unit tests for CLI commands.

Tests cover:
- Version flag and help
- catalogs listing
- resolve printing fallback sequences and exit codes
- recover exit codes with the browser run mocked out
"""

import re
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest
from typer.testing import CliRunner

from shopcheck import __version__
from shopcheck.cli.main import _recover, app
from shopcheck.core.locators import Locator
from shopcheck.core.synthesizer import ElementProbeResult
from shopcheck.utils.config import AppConfig, BrowserType
from shopcheck.utils.exceptions import (
    BrowserLaunchError,
    ConfigurationError,
    ElementRecoveryFailed,
)

runner = CliRunner()


def strip_ansi(text: str) -> str:
    """Remove ANSI escape codes from text."""
    ansi_pattern = re.compile(r"\x1b\[[0-9;]*m")
    return ansi_pattern.sub("", text)


class TestVersionFlag:
    """Tests for version flag."""

    def test_version(self) -> None:
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert f"shopcheck v{__version__}" in result.output

    def test_help_lists_commands(self) -> None:
        result = runner.invoke(app, ["--help"])
        output = strip_ansi(result.output)
        assert result.exit_code == 0
        for command in ("catalogs", "resolve", "recover"):
            assert command in output


class TestCatalogsCommand:
    """Tests for the catalogs command."""

    def test_lists_packaged_catalogs(self) -> None:
        result = runner.invoke(app, ["catalogs"])
        output = strip_ansi(result.output)
        assert result.exit_code == 0
        for name in ("authentication", "cart", "homepage", "product"):
            assert name in output


class TestResolveCommand:
    """Tests for the resolve command."""

    def test_prints_fallback_sequence(self) -> None:
        result = runner.invoke(app, ["resolve", "homepage", "header.login_link"])
        output = strip_ansi(result.output)
        assert result.exit_code == 0
        assert "1. By.class_name: ico-login" in output
        assert "2. By.css: a[href='/login']" in output
        assert "3. By.path: //a[@class='ico-login']" in output
        assert "High" in output

    def test_unknown_path_exits_4(self) -> None:
        result = runner.invoke(app, ["resolve", "homepage", "header.nonexistent"])
        assert result.exit_code == 4
        assert "Selector not found" in strip_ansi(result.output)

    def test_unknown_catalog_exits_4(self) -> None:
        result = runner.invoke(app, ["resolve", "checkout", "x"])
        assert result.exit_code == 4
        assert "Selector catalog not found" in strip_ansi(result.output)


class TestRecoverCommand:
    """Tests for the recover command."""

    @pytest.fixture
    def config(self, tmp_path: Path) -> AppConfig:
        return AppConfig(output_dir=tmp_path)

    def test_recovered_exits_0(self, config: AppConfig) -> None:
        chosen = Locator.by_css("button[type='submit']")
        result = ElementProbeResult(
            candidates=[Locator.by_css("input[value='Log in']"), chosen],
            outcomes=[False, True],
            chosen=chosen,
        )
        with (
            patch("shopcheck.cli.main.ConfigLoader.load", return_value=config),
            patch("shopcheck.cli.main._recover", AsyncMock(return_value=result)),
        ):
            outcome = runner.invoke(
                app,
                ["recover", "/login", "input[value='Log in']", "-d", "login button"],
            )

        output = strip_ansi(outcome.output)
        assert outcome.exit_code == 0
        assert "Recovered with" in output
        assert "no longer matches" in output

    def test_recovery_failure_exits_1(self, config: AppConfig) -> None:
        error = ElementRecoveryFailed(
            "login button",
            probe=ElementProbeResult(candidates=[Locator.by_id("x")], outcomes=[False]),
            analysis={"submit_buttons": ["input[type='submit']"]},
        )
        with (
            patch("shopcheck.cli.main.ConfigLoader.load", return_value=config),
            patch("shopcheck.cli.main._recover", AsyncMock(side_effect=error)),
        ):
            outcome = runner.invoke(
                app, ["recover", "/login", "#x", "--description", "login button"]
            )

        output = strip_ansi(outcome.output)
        assert outcome.exit_code == 1
        assert "Element recovery failed for: login button" in output
        assert "input[type='submit']" in output

    def test_configuration_error_exits_4(self) -> None:
        with patch(
            "shopcheck.cli.main.ConfigLoader.load",
            side_effect=ConfigurationError("Invalid value for SHOPCHECK_HEADLESS"),
        ):
            outcome = runner.invoke(app, ["recover", "/", "#x", "-d", "widget"])

        assert outcome.exit_code == 4

    def test_description_is_required(self) -> None:
        outcome = runner.invoke(app, ["recover", "/", "#x"])
        assert outcome.exit_code != 0

    def test_relative_url_is_joined_to_base_url(self, config: AppConfig) -> None:
        recover = AsyncMock(
            return_value=ElementProbeResult(
                candidates=[Locator.by_id("x")],
                outcomes=[True],
                chosen=Locator.by_id("x"),
            )
        )
        with (
            patch("shopcheck.cli.main.ConfigLoader.load", return_value=config),
            patch("shopcheck.cli.main._recover", recover),
        ):
            runner.invoke(app, ["recover", "login", "#x", "-d", "widget"])

        assert recover.await_args.args[2] == "https://demowebshop.tricentis.com/login"

    def test_browser_option_sets_config(self, config: AppConfig) -> None:
        recover = AsyncMock(
            return_value=ElementProbeResult(
                candidates=[Locator.by_id("x")],
                outcomes=[True],
                chosen=Locator.by_id("x"),
            )
        )
        with (
            patch("shopcheck.cli.main.ConfigLoader.load", return_value=config),
            patch("shopcheck.cli.main._recover", recover),
        ):
            outcome = runner.invoke(
                app, ["recover", "/", "#x", "-d", "widget", "--browser", "Firefox"]
            )

        assert outcome.exit_code == 0
        assert recover.await_args.args[0].browser is BrowserType.FIREFOX
        assert "no longer matches" not in strip_ansi(outcome.output)

    def test_unknown_browser_exits_4(self, config: AppConfig) -> None:
        with patch("shopcheck.cli.main.ConfigLoader.load", return_value=config):
            outcome = runner.invoke(
                app, ["recover", "/", "#x", "-d", "widget", "-b", "opera"]
            )

        assert outcome.exit_code == 4
        assert "Unknown browser type: opera" in strip_ansi(outcome.output)

    def test_launch_failure_exits_1(self, config: AppConfig) -> None:
        error = BrowserLaunchError("firefox", "Executable doesn't exist")
        with (
            patch("shopcheck.cli.main.ConfigLoader.load", return_value=config),
            patch("shopcheck.cli.main._recover", AsyncMock(side_effect=error)),
        ):
            outcome = runner.invoke(app, ["recover", "/", "#x", "-d", "widget"])

        assert outcome.exit_code == 1
        assert "Failed to launch firefox" in strip_ansi(outcome.output)


class TestRecoverRun:
    """Tests for the browser run behind the recover command."""

    @staticmethod
    def _browser_mock(browser_cls):
        browser = browser_cls.return_value
        browser.launch = AsyncMock()
        browser.navigate = AsyncMock()
        browser.close = AsyncMock()
        return browser

    @pytest.mark.asyncio
    async def test_browser_is_closed_after_failure(
        self, tmp_path: Path, mock_session
    ) -> None:
        config = AppConfig(output_dir=tmp_path, browser=BrowserType.WEBKIT)
        error = ElementRecoveryFailed("widget")
        with (
            patch("shopcheck.cli.main.PlaywrightBrowser") as browser_cls,
            patch("shopcheck.cli.main.ElementRecovery") as recovery_cls,
        ):
            browser = self._browser_mock(browser_cls)
            recovery_cls.return_value.recover = AsyncMock(side_effect=error)

            with pytest.raises(ElementRecoveryFailed):
                await _recover(
                    config,
                    mock_session,
                    "https://demowebshop.tricentis.com/login",
                    Locator.by_id("x"),
                    "widget",
                )

        browser_cls.assert_called_once_with(BrowserType.WEBKIT, headless=True)
        browser.navigate.assert_awaited_once_with(
            "https://demowebshop.tricentis.com/login", timeout=config.page_timeout
        )
        browser.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_browser_is_closed_when_launch_fails(
        self, tmp_path: Path, mock_session
    ) -> None:
        config = AppConfig(output_dir=tmp_path)
        with patch("shopcheck.cli.main.PlaywrightBrowser") as browser_cls:
            browser = self._browser_mock(browser_cls)
            browser.launch.side_effect = BrowserLaunchError("chromium", "boom")

            with pytest.raises(BrowserLaunchError):
                await _recover(
                    config, mock_session, "https://x.test/", Locator.by_id("x"), "x"
                )

        browser.navigate.assert_not_awaited()
        browser.close.assert_awaited_once()
