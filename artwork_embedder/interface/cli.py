"""CLI command for the artwork embedder application."""

import sys
from pathlib import Path
from typing import List, Optional

import click
import typer
from rich.console import Console
from rich.markup import escape

from ..core.config import AppInfo, Settings, load_settings
from ..core.exceptions import ArtworkEmbedderError, FileOperationError
from ..media.services import FFmpegTool
from ..processing.services import ArtworkPipeline
from ..spotify.services import SpotifyService, SpotifySession
from ..storage.services import ArtworkDownloader
from .display import ArtworkDisplay, ProgressTracker, configure_logging

# Initialize Rich console and Typer app
console = Console()
app = typer.Typer(
    name=AppInfo.NAME,
    help=AppInfo.DESCRIPTION,
    rich_markup_mode="rich",
    add_completion=False,
    context_settings={"help_option_names": ["-h", "--help"]},
)

# Initialize display components
display = ArtworkDisplay(console)
progress = ProgressTracker(console)


def handle_error(error: Exception) -> None:
    """Centralized error handling."""
    if isinstance(error, ArtworkEmbedderError):
        display.show_error_message(error.message)
        if error.details:
            console.print(f"[dim]Details: {escape(error.details)}[/dim]")
    else:
        display.show_error_message(f"Unexpected error: {str(error)}")

    raise typer.Exit(1)


def build_pipeline(settings: Settings) -> ArtworkPipeline:
    """Check tooling, authenticate with Spotify and wire the pipeline."""
    media_tool = FFmpegTool()
    media_tool.ensure_available()

    session = SpotifySession(settings.spotify_client_id, settings.spotify_client_secret)
    with progress.processing_progress("Authenticating with Spotify..."):
        session.authenticate()

    return ArtworkPipeline(
        media_tool=media_tool,
        spotify=SpotifyService(session),
        downloader=ArtworkDownloader(session.http),
        force_overwrite=settings.force_overwrite,
    )


@app.command()
def embed(
    path: Path = typer.Argument(help="Audio file or directory to process"),
    force: bool = typer.Option(
        False, "--force", "-f", help="Replace artwork that is already embedded"
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable verbose output"
    ),
):
    """Fetch cover artwork from Spotify and embed it into audio files.

    Credentials are read from SPOTIFY_CLIENT_ID and SPOTIFY_CLIENT_SECRET,
    loaded from .env.local or .env when present.
    """
    configure_logging(console, verbose)
    display.show_app_header()

    try:
        settings = load_settings(force_overwrite=force, verbose=verbose)
        pipeline = build_pipeline(settings)

        if not path.exists():
            raise FileOperationError(
                f"Path not found: {path}", file_path=str(path), operation="stat"
            )

        display.show_run_config(path, settings.force_overwrite)
        with pipeline:
            summary = pipeline.process_path(path, on_result=display.show_file_result)

    except ArtworkEmbedderError as e:
        handle_error(e)

    if path.is_dir():
        display.show_summary(summary)
        if summary.failed:
            display.show_warning_message(
                f"{summary.failed} file(s) failed; their originals were left in place"
            )
    display.show_success_message("All processing complete!")


def run(args: Optional[List[str]] = None) -> None:
    """Console entry point; usage errors exit with status 1."""
    try:
        exit_code = app(args=args, standalone_mode=False)
    except click.UsageError as e:
        e.show()
        sys.exit(1)
    except click.Abort:
        console.print("[red]Aborted![/red]")
        sys.exit(1)

    sys.exit(exit_code if isinstance(exit_code, int) else 0)
