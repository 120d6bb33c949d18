"""Rich console display components for the artwork embedder."""

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Optional

from rich.align import Align
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table
from rich.text import Text

from ..core.config import AppInfo
from ..processing.models import BatchSummary, FileResult, FileStatus

STATUS_STYLES = {
    FileStatus.EMBEDDED: "green",
    FileStatus.SKIPPED: "yellow",
    FileStatus.FAILED: "red",
}


def configure_logging(console: Console, verbose: bool = False) -> None:
    """Route package log records through rich."""
    handler = RichHandler(
        console=console,
        show_time=verbose,
        show_path=verbose,
        markup=False,
        rich_tracebacks=verbose,
    )
    logger = logging.getLogger("artwork_embedder")
    logger.handlers = [handler]
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    logger.propagate = False


class ArtworkDisplay:
    """Handles all rich console output for artwork operations."""

    def __init__(self, console: Optional[Console] = None):
        """Initialize with optional console instance."""
        self.console = console or Console()

    def show_app_header(self) -> None:
        """Display application header with branding."""
        header_text = Text()
        header_text.append(AppInfo.NAME.upper(), style="bold blue")
        header_text.append(f" v{AppInfo.VERSION}", style="dim")
        header_text.append(f"\n{AppInfo.DESCRIPTION}", style="italic")

        panel = Panel(Align.center(header_text), border_style="blue", padding=(1, 2))
        self.console.print(panel)

    def show_run_config(self, path: Path, force_overwrite: bool) -> None:
        """Display the target path and overwrite mode."""
        kind = "Directory" if path.is_dir() else "File"
        mode = "[bold yellow]replace existing[/bold yellow]" if force_overwrite else "skip existing"
        panel = Panel.fit(
            f"[bold blue]Run Configuration[/bold blue]\n{kind}: {escape(str(path))} | Artwork: {mode}",
            border_style="blue",
        )
        self.console.print(panel)

    def show_file_result(self, result: FileResult) -> None:
        """Display a one-line outcome for a processed file."""
        style = STATUS_STYLES[result.status]
        line = (
            f"[{style}]{result.status.symbol} {escape(result.filename)}[/{style}] "
            f"[dim]{escape(result.message)}"
        )
        if result.container_family:
            line += f" ({result.container_family}"
            if result.attempt:
                line += f", {result.attempt}"
            line += ")"
        line += "[/dim]"
        self.console.print(line)

    def show_summary(self, summary: BatchSummary) -> None:
        """Display totals and the list of failed files."""
        table = Table(title="Artwork Summary")
        table.add_column("Status", style="cyan")
        table.add_column("Files", justify="right", style="magenta")

        table.add_row("Embedded", str(summary.embedded))
        table.add_row("Skipped", str(summary.skipped))
        table.add_row("Failed", str(summary.failed))
        table.add_row("Total", str(summary.total))
        self.console.print(table)

        failures = [r for r in summary.results if r.status is FileStatus.FAILED]
        if failures:
            failed_table = Table(title="Failed Files")
            failed_table.add_column("File", style="red")
            failed_table.add_column("Error", style="dim")
            for result in failures:
                failed_table.add_row(escape(str(result.path)), escape(result.message))
            self.console.print(failed_table)

    def show_success_message(self, message: str) -> None:
        """Display a success message."""
        self.console.print(f"[green]✓ {escape(message)}[/green]")

    def show_warning_message(self, message: str) -> None:
        """Display a warning message."""
        self.console.print(f"[yellow]⚠ {escape(message)}[/yellow]")

    def show_error_message(self, message: str) -> None:
        """Display an error message."""
        self.console.print(f"[red]✗ {escape(message)}[/red]")


class ProgressTracker:
    """Manages spinners for blocking operations."""

    def __init__(self, console: Optional[Console] = None):
        """Initialize with optional console instance."""
        self.console = console or Console()

    @contextmanager
    def processing_progress(self, description: str):
        """Context manager showing a spinner while work runs."""
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=self.console,
            transient=True,
        ) as progress:
            task = progress.add_task(description, total=None)
            yield progress, task
