"""Terminal reporter with rich output formatting."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape
from rich.table import Table

if TYPE_CHECKING:
    from doccov.models.coverage import CoverageReport
    from doccov.utils.file_scanner import DryRunResult

console = Console()
err_console = Console(stderr=True)

_HIGH_COVERAGE = 80.0
_MEDIUM_COVERAGE = 50.0

# Display limits for truncation
_MAX_DRY_RUN_FILES_DISPLAY = 20


def _coverage_color(percentage: float) -> str:
    """Return a Rich color name for a coverage percentage."""
    if percentage >= _HIGH_COVERAGE:
        return "green"
    if percentage >= _MEDIUM_COVERAGE:
        return "yellow"
    return "red"


class CLIReporter:
    """Rich terminal output for the doccov CLI.

    Reports go to stdout; progress and diagnostics go to stderr so that JSON
    output stays machine-readable.
    """

    def __init__(self) -> None:
        """Initialize the CLI reporter."""
        self.console = console
        self.err_console = err_console

    def print_header(self, title: str) -> None:
        """Print a bold header."""
        self.console.print(f"\n[bold cyan]{title}[/bold cyan]\n")

    def print_success(self, message: str) -> None:
        """Print a success message."""
        self.err_console.print(f"[green]✓[/green] {escape(message)}")

    def print_error(self, message: str) -> None:
        """Print an error message."""
        self.err_console.print(f"[red]✗[/red] {escape(message)}", highlight=False)

    def print_warning(self, message: str) -> None:
        """Print a warning message."""
        self.err_console.print(f"[yellow]⚠[/yellow] {escape(message)}", highlight=False)

    def print_info(self, message: str) -> None:
        """Print an info message."""
        self.err_console.print(f"[dim]{escape(message)}[/dim]")

    def print_analysis_progress(self, current: int, total: int, label: str) -> None:
        """Print inline progress for iterative analysis steps."""
        self.err_console.print(f"  [dim]({current}/{total})[/dim] {escape(label)}", highlight=False)

    def print_coverage_summary(self, report: CoverageReport) -> None:
        """Print a per-scope coverage table with the overall total."""
        table = Table(title="Documentation Coverage", title_style="bold cyan")
        table.add_column("Scope", style="bold")
        table.add_column("Lines", justify="right")
        table.add_column("Coverage", justify="right")
        table.add_column("Threshold", justify="right")

        for scope in report.summary.scopes:
            color = _coverage_color(scope.coverage_percentage)
            threshold = f"{scope.threshold:g}%" if scope.threshold is not None else "-"
            table.add_row(
                scope.name,
                f"{scope.covered_lines}/{scope.total_lines}",
                f"[{color}]{scope.coverage_percentage:.2f}%[/{color}]",
                threshold,
            )

        summary = report.summary
        color = _coverage_color(summary.coverage_percentage)
        table.add_section()
        table.add_row(
            "[bold]Overall[/bold]",
            f"{summary.covered_lines}/{summary.total_lines}",
            f"[bold {color}]{summary.coverage_percentage:.2f}%[/bold {color}]",
            "",
        )
        self.console.print(table)

    def print_dry_run(self, result: DryRunResult) -> None:
        """Print what a coverage run would analyze."""
        self.print_header("Dry run")
        self.console.print(f"Files matched: {result.total_files}")
        self.console.print(f"Source files: {len(result.source_files)}")
        self.console.print(f"Excluded files: {len(result.excluded_files)}")
        self.console.print(f"Estimated lines: {result.estimated_lines}")

        shown = result.source_files[:_MAX_DRY_RUN_FILES_DISPLAY]
        for path in shown:
            self.console.print(f"  {path}", highlight=False)
        hidden = len(result.source_files) - len(shown)
        if hidden > 0:
            self.console.print(f"  [dim]... and {hidden} more[/dim]")


# Singleton instance for easy import
reporter = CLIReporter()
