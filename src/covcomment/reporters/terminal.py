"""Terminal reporter with rich output formatting."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.table import Table

if TYPE_CHECKING:
    from covcomment.models.coverage import CoverageReport

console = Console()

# shields.io color names to Rich styles
_RICH_COLORS = {
    "red": "red",
    "orange": "dark_orange",
    "yellow": "yellow",
    "green": "green",
    "brightgreen": "bright_green",
}


class CLIReporter:
    """Rich terminal output reporter for coverage summaries."""

    def __init__(self, target: Console | None = None) -> None:
        """Initialize the CLI reporter."""
        self.console = target or console

    def print_success(self, message: str) -> None:
        """Print a success message."""
        self.console.print(f"[green]✓[/green] {message}")

    def print_error(self, message: str) -> None:
        """Print an error message."""
        self.console.print(f"[red]✗[/red] {message}")

    def print_warning(self, message: str) -> None:
        """Print a warning message."""
        self.console.print(f"[yellow]⚠[/yellow] {message}")

    def print_info(self, message: str) -> None:
        """Print an info message."""
        self.console.print(f"[dim]{message}[/dim]")

    def print_coverage_summary(self, report: CoverageReport, title: str = "Coverage") -> None:
        """Print the headline numbers as a table."""
        style = _RICH_COLORS.get(report.color, "white")

        table = Table(title=title, show_header=True, header_style="bold cyan")
        table.add_column("Metric")
        table.add_column("%", justify="right")

        table.add_row("Coverage", f"[bold {style}]{report.coverage_pct}%[/bold {style}]")
        table.add_row("Statements", f"{report.statements_pct}%")
        table.add_row("Branches", f"{report.branches_pct}%")
        table.add_row("Functions", f"{report.functions_pct}%")
        table.add_row("Lines", f"{report.lines_pct}%")

        self.console.print(table)


reporter = CLIReporter()
