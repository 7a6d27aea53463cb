"""Main CLI application entry point."""

import asyncio
import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape

from shopcheck import __version__
from shopcheck.cli.output import OutputFormatter
from shopcheck.core.browser import PlaywrightBrowser
from shopcheck.core.locators import Locator, parse_locator
from shopcheck.core.synthesizer import ElementProbeResult, ElementRecovery
from shopcheck.selectors.catalog import SelectorCatalog
from shopcheck.utils.config import AppConfig, BrowserType, ConfigLoader
from shopcheck.utils.exceptions import (
    ElementRecoveryFailed,
    PermanentError,
    ShopCheckError,
)
from shopcheck.utils.session import SessionLogger

console = Console()

app = typer.Typer(
    name="shopcheck",
    help="Selector catalogs and element recovery for demo web shop tests.",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"shopcheck v{__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """shopcheck - selector resolution engine for demo web shop tests."""
    pass


@app.command()
def catalogs(
    verbose: bool = typer.Option(
        False, "--verbose", "-V", help="Show debug logging"
    ),
) -> None:
    """List selector catalogs and their number of entries."""
    _configure_logging(verbose)
    catalog = SelectorCatalog()
    try:
        counts = {
            name: len(catalog.load_catalog(name))
            for name in catalog.available_catalogs()
        }
    except PermanentError as e:
        console.print(f"[red]Catalog error: {escape(str(e))}[/red]")
        raise typer.Exit(code=4)
    OutputFormatter(console).show_catalogs(counts)


@app.command()
def resolve(
    catalog_name: str = typer.Argument(..., help="Catalog name, e.g. authentication"),
    path: str = typer.Argument(..., help="Dotted selector path"),
    verbose: bool = typer.Option(
        False, "--verbose", "-V", help="Show debug logging"
    ),
) -> None:
    """Print the fallback sequence of a catalog entry."""
    _configure_logging(verbose)
    catalog = SelectorCatalog()
    try:
        definition = catalog.resolve(catalog_name, path)
    except PermanentError as e:
        console.print(f"[red]Catalog error: {escape(str(e))}[/red]")
        raise typer.Exit(code=4)
    OutputFormatter(console).show_definition(
        definition, catalog.fallback_sequence(catalog_name, path)
    )


@app.command()
def recover(
    url: str = typer.Argument(..., help="Page URL, absolute or relative to base URL"),
    locator: str = typer.Argument(..., help="The failing locator, e.g. '#Email'"),
    description: str = typer.Option(
        ...,
        "--description",
        "-d",
        help="What the element is, e.g. 'login button'",
    ),
    headless: bool | None = typer.Option(
        None,
        "--headless/--headed",
        help="Override SHOPCHECK_HEADLESS",
    ),
    output_dir: Path | None = typer.Option(
        None,
        "--output-dir",
        "-o",
        help="Directory for session artifacts (screenshots, logs)",
    ),
    browser: str | None = typer.Option(
        None,
        "--browser",
        "-b",
        help="chromium, chrome, edge, firefox or webkit (SHOPCHECK_BROWSER)",
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-V", help="Show candidates that were not probed"
    ),
) -> None:
    """Run element recovery for a locator against a live page."""
    _configure_logging(verbose)
    formatter = OutputFormatter(console, verbose=verbose)

    try:
        config = ConfigLoader.load()
        if output_dir:
            config.output_dir = output_dir
        if headless is not None:
            config.headless = headless
        if browser:
            config.browser = BrowserType.from_string(browser)
        original = parse_locator(locator)
    except PermanentError as e:
        console.print(f"[red]Configuration error: {escape(str(e))}[/red]")
        raise typer.Exit(code=4)

    session = SessionLogger(
        output_dir=config.output_dir,
        name=f"recover_{description}",
        base_url=config.base_url,
    )
    target = url if "://" in url else f"{config.base_url}/{url.lstrip('/')}"

    try:
        result = asyncio.run(_recover(config, session, target, original, description))
    except ElementRecoveryFailed as e:
        session.complete("failed", error=str(e))
        if isinstance(e.probe, ElementProbeResult):
            formatter.show_probe(e.probe)
        formatter.show_failure(str(e), e.analysis)
        console.print(f"Session artifacts: {session.session_dir}")
        raise typer.Exit(code=1)
    except ShopCheckError as e:
        session.complete("error", error=str(e))
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(code=1)

    session.complete("recovered")
    formatter.show_recovered(result)
    if result.chosen != original:
        formatter.show_warning(
            f"{escape(str(original))} no longer matches; update the selector catalog"
        )


async def _recover(
    config: AppConfig,
    session: SessionLogger,
    url: str,
    original: Locator,
    description: str,
) -> ElementProbeResult:
    browser = PlaywrightBrowser(config.browser, headless=config.headless)
    try:
        await browser.launch()
        await browser.navigate(url, timeout=config.page_timeout)
        recovery = ElementRecovery(browser, config, session=session)
        return await recovery.recover(original, description)
    finally:
        await browser.close()


if __name__ == "__main__":
    app()
