"""Rich-based logging and display functions for USPS Mail Filter."""

import logging

from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from .models import Disposition, MessageResult, RunSummary

console = Console()


def setup_logging(verbose: bool = False) -> None:
    """Route stdlib logging through Rich on the shared console."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="%H:%M:%S",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )
    # googleapiclient logs every discovery lookup at INFO
    logging.getLogger("googleapiclient").setLevel(logging.WARNING)


def _outcome_text(result: MessageResult) -> str:
    if result.failed:
        return f"[red]failed ({result.failed_stage.value})[/red]"
    if result.disposition is Disposition.KEEP:
        return "[green]kept[/green]"
    return "[yellow]trashed[/yellow]"


def display_run_summary(summary: RunSummary) -> None:
    """Display per-message results and the run totals."""
    if summary.results:
        table = Table(title="Messages")
        table.add_column("#", justify="right", style="dim")
        table.add_column("Subject")
        table.add_column("Found name")
        table.add_column("Outcome")

        for idx, result in enumerate(summary.results, start=1):
            table.add_row(
                str(idx),
                result.subject or f"[dim]{result.message_id}[/dim]",
                result.found_name or "",
                _outcome_text(result),
            )
        console.print(table)

    title = "Summary [DRY RUN]" if summary.dry_run else "Summary"
    console.print(
        Panel(
            f"Processed: {summary.processed}  |  "
            f"[green]Kept: {summary.kept}[/green]  |  "
            f"[yellow]Trashed: {summary.discarded}[/yellow]  |  "
            f"[red]Failed: {summary.failed}[/red]",
            title=title,
        )
    )
