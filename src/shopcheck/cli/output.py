"""CLI output formatting utilities for shopcheck.

This module provides the OutputFormatter class used by the CLI commands to
display catalogs, fallback sequences and element-recovery results.
"""

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from shopcheck.core.locators import Locator
from shopcheck.core.synthesizer import ElementProbeResult
from shopcheck.selectors.catalog import SelectorDefinition


class OutputFormatter:
    """Formats and displays CLI output.

    Attributes:
        console: Rich console that receives all output.
        verbose: Whether to enable verbose output mode.
    """

    def __init__(self, console: Console | None = None, verbose: bool = False):
        """Initialize the output formatter.

        Args:
            console: Console to print to. A new one is created if omitted.
            verbose: Enable verbose output mode. Defaults to False.
        """
        self.console = console or Console()
        self.verbose = verbose

    def show_catalogs(self, counts: dict[str, int]) -> None:
        """Show catalog names with their number of entries.

        Args:
            counts: Catalog name to selector count.
        """
        table = Table(title="Selector catalogs")
        table.add_column("Catalog", style="cyan")
        table.add_column("Selectors", justify="right")
        for name, count in counts.items():
            table.add_row(name, str(count))
        self.console.print(table)

    def show_definition(
        self, definition: SelectorDefinition, sequence: list[Locator]
    ) -> None:
        """Show a definition's fallback sequence and stability rating.

        Args:
            definition: The resolved definition.
            sequence: Its fallback sequence, in try order.
        """
        self.console.print(
            f"[bold]{definition.catalog}.{definition.path}[/bold] "
            f"(stability: {definition.stability.value})"
        )
        for position, locator in enumerate(sequence, start=1):
            self.console.print(f"  {position}. {escape(str(locator))}")

    def show_probe(self, result: ElementProbeResult) -> None:
        """Show every candidate with its probe outcome.

        Candidates after the winner were never probed and are shown dimmed.

        Args:
            result: The probe result to display.
        """
        for position, candidate in enumerate(result.candidates, start=1):
            if position <= len(result.outcomes):
                found = result.outcomes[position - 1]
                mark = "[green]✓[/green]" if found else "[red]✗[/red]"
                label = escape(str(candidate))
                self.console.print(f"  {mark} {position}. {label}")
            elif self.verbose:
                label = escape(str(candidate))
                self.console.print(f"  [dim]- {position}. {label}[/dim]")

    def show_recovered(self, result: ElementProbeResult) -> None:
        """Show success message with the chosen locator."""
        self.show_probe(result)
        chosen = escape(str(result.chosen))
        self.console.print(f"\n[green]✓ Recovered with:[/green] {chosen}")

    def show_failure(self, message: str, analysis: dict[str, list[str]]) -> None:
        """Show failure message with DOM analysis suggestions.

        Args:
            message: The error message.
            analysis: Category name to suggested selectors.
        """
        self.console.print(f"\n[red]✗ {escape(message)}[/red]")
        suggestions = {k: v for k, v in analysis.items() if v}
        if not suggestions:
            return
        self.console.print("\nSelectors found on the page:")
        for category, selectors in suggestions.items():
            self.console.print(f"  [cyan]{category}[/cyan]")
            for selector in selectors:
                self.console.print(f"    {escape(selector)}")

    def show_warning(self, message: str) -> None:
        """Show warning message in yellow."""
        self.console.print(f"\n[yellow]⚠ WARNING: {message}[/yellow]\n")
