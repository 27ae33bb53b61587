"""Reporting components for connection imports.

This module renders batch results for console output with Rich formatting.

Classes:
    ReportGenerator: Generates summary and per-record issue reports
"""

from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .errors import ParseError
from .messages import format_error, format_issue
from .models import BatchResult


class ReportGenerator:
    """Generates summary and detailed reports for import batches."""

    def __init__(self, console: Console):
        """Initialize report generator.

        Args:
            console: Rich console for output
        """
        self.console = console

    def generate_summary_report(self, result: BatchResult, source: Optional[str] = None):
        """Display a summary of a parsed batch.

        Args:
            result: Parsed batch result
            source: Name of the import file, shown in the panel title
        """
        failed = len(result.failed_indices)

        summary_table = Table(show_header=False, box=None, padding=(0, 1))
        summary_table.add_column("Metric", style="bold cyan")
        summary_table.add_column("Value", style="bold")

        summary_table.add_row("Connections", str(result.total))
        summary_table.add_row("Valid", f"[green]{result.total - failed}[/green]")
        summary_table.add_row("With Errors", f"[red]{failed}[/red]")
        summary_table.add_row("Users Granted", str(len(result.grantee_users)))
        summary_table.add_row("User Groups Granted", str(len(result.grantee_groups)))

        title = "[bold]Connection Import Summary[/bold]"
        if source:
            title = f"[bold]Connection Import Summary: {source}[/bold]"

        self.console.print()
        self.console.print(
            Panel(
                summary_table,
                title=title,
                border_style="red" if result.has_errors else "blue",
            )
        )

    def generate_issue_report(self, result: BatchResult):
        """Display one row per record-local issue, keyed by record number."""
        if not result.has_errors:
            self.console.print("[green]No errors found in the provided connections.[/green]")
            return

        issue_table = Table(
            title="Connection Errors",
            show_header=True,
            header_style="bold magenta",
        )
        issue_table.add_column("Entry", justify="right", style="bold", width=6)
        issue_table.add_column("Connection", style="cyan", width=30)
        issue_table.add_column("Error", style="red")

        for index in result.failed_indices:
            name = result.creation_ops[index].value.name or "N/A"
            for issue in result.issues_by_record[index]:
                issue_table.add_row(str(index + 1), str(name), format_issue(issue))

        self.console.print()
        self.console.print(issue_table)

    def generate_grant_report(self, result: BatchResult):
        """Display which connection entries grant access to each user and user group."""
        if not result.grantee_users and not result.grantee_groups:
            return

        grant_table = Table(title="Access Grants", show_header=True, header_style="bold magenta")
        grant_table.add_column("Type", width=10)
        grant_table.add_column("Identifier", style="cyan")
        grant_table.add_column("Entries", style="green")

        for identifier, indices in result.grantee_users.items():
            grant_table.add_row("User", identifier, ", ".join(str(i + 1) for i in indices))
        for identifier, indices in result.grantee_groups.items():
            grant_table.add_row("Group", identifier, ", ".join(str(i + 1) for i in indices))

        self.console.print()
        self.console.print(grant_table)

    def report_fatal_error(self, error: ParseError):
        """Display a batch-fatal parse error as a single message."""
        self.console.print(f"[red]Error: {format_error(error)}[/red]")
