"""Command-line interface for m3usieve."""

from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path
from typing import Optional

import click
import structlog
from rich.console import Console
from rich.panel import Panel
from rich.progress import BarColumn, MofNCompleteColumn, Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.table import Table

from m3usieve import __version__
from m3usieve.config.config import Config, load_config
from m3usieve.observability.logging import configure_logging
from m3usieve.observability.metrics import start_metrics_server
from m3usieve.pipeline import PlaylistPipeline
from m3usieve.protocols import RunSummary, ValidationResult
from m3usieve.utils.naming import find_playlists

console = Console()
logger = structlog.get_logger(__name__)


@click.group()
@click.version_option(version=__version__)
@click.option("--config", "-c", type=click.Path(exists=True, dir_okay=False), help="Configuration file path")
@click.option(
    "--log-level",
    default=None,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Logging level (overrides the configuration file)",
)
@click.pass_context
def cli(ctx: click.Context, config: Optional[str], log_level: Optional[str]) -> None:
    """m3usieve - keep only the reachable streams of M3U playlists."""
    ctx.ensure_object(dict)
    try:
        loaded = load_config(Path(config) if config else None)
    except Exception as e:
        console.print(f"[red]❌ Failed to load configuration: {e}[/red]")
        sys.exit(1)

    if log_level:
        loaded.monitoring.log_level = log_level.upper()
    configure_logging(loaded.monitoring)
    ctx.obj["config"] = loaded


@cli.command()
@click.argument("input_dir", type=click.Path(file_okay=False, path_type=Path), required=False)
@click.argument("output_dir", type=click.Path(file_okay=False, path_type=Path), required=False)
@click.option("--concurrency", type=click.IntRange(min=1), help="Maximum probes in flight")
@click.option("--timeout", type=click.FloatRange(min=0, min_open=True), help="Timeout per probe in seconds")
@click.option("--max-redirects", type=click.IntRange(min=0), help="Redirect hops followed per stream")
@click.option("--no-progress", is_flag=True, help="Disable the progress bar")
@click.pass_context
def check(
    ctx: click.Context,
    input_dir: Optional[Path],
    output_dir: Optional[Path],
    concurrency: Optional[int],
    timeout: Optional[float],
    max_redirects: Optional[int],
    no_progress: bool,
) -> None:
    """Check every playlist in INPUT_DIR and write reachable streams to OUTPUT_DIR."""
    config: Config = ctx.obj["config"]
    if concurrency is not None:
        config.checker.concurrency_limit = concurrency
    if timeout is not None:
        config.checker.timeout = timeout
    if max_redirects is not None:
        config.checker.max_redirects = max_redirects

    input_dir = input_dir or config.output.input_dir
    output_dir = output_dir or config.output.output_dir

    if not input_dir.is_dir():
        console.print(f"[red]Error: input directory not found: {input_dir}[/red]")
        sys.exit(1)

    playlists = find_playlists(input_dir, config.output.extensions)
    if not playlists:
        console.print(f"[yellow]No {' or '.join(config.output.extensions)} files found in {input_dir}[/yellow]")
        return

    console.print(
        Panel.fit(
            f"[bold blue]m3usieve[/bold blue]\n"
            f"Input: {input_dir}\n"
            f"Output: {output_dir}\n"
            f"Playlists: {len(playlists)}\n"
            f"Concurrency: {config.checker.concurrency_limit}  "
            f"Timeout: {config.checker.timeout}s  "
            f"Max redirects: {config.checker.max_redirects}",
            title="Starting check",
        )
    )

    if config.monitoring.prometheus_port:
        start_metrics_server(config.monitoring.prometheus_port)

    summary = asyncio.run(_run_check(config, playlists, output_dir, show_progress=not no_progress))
    _print_summary(summary)

    if summary.failures:
        sys.exit(1)


async def _run_check(config: Config, playlists: list[Path], output_dir: Path, show_progress: bool) -> RunSummary:
    progress = Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        TimeElapsedColumn(),
        console=console,
        disable=not show_progress,
    )
    task_id = progress.add_task("Waiting", total=None)

    def on_document(source: Path, total: int) -> None:
        progress.reset(task_id, total=total, description=source.name)

    def on_result(result: ValidationResult) -> None:
        progress.advance(task_id)

    pipeline = PlaylistPipeline(config, on_result=on_result, on_document=on_document)
    with progress:
        return await pipeline.run(playlists, output_dir)


def _print_summary(summary: RunSummary) -> None:
    table = Table(title="Playlist check results")
    table.add_column("Playlist", style="cyan")
    table.add_column("Valid", justify="right", style="green")
    table.add_column("Total", justify="right")
    table.add_column("Output", style="magenta")

    for report in summary.documents:
        output = report.destination or f"[dim]not written ({report.reason})[/dim]"
        table.add_row(Path(report.source).name, str(report.validated_count), str(report.total_count), output)
    for source, error in summary.failures.items():
        table.add_row(Path(source).name, "-", "-", f"[red]{error}[/red]")

    console.print(table)
    console.print(
        f"✅ {summary.validated_total} valid streams out of {summary.checked_total} "
        f"across {len(summary.documents)} playlists ({summary.persisted_count} written)"
    )
    if summary.failures:
        console.print(f"[red]❌ {len(summary.failures)} playlists failed[/red]")


@cli.command()
@click.pass_context
def validate_config(ctx: click.Context) -> None:
    """Show the effective configuration."""
    config: Config = ctx.obj["config"]
    console.print(
        Panel(
            json.dumps(config.model_dump(mode="json"), indent=2),
            title="Effective configuration",
            border_style="green",
        )
    )
    console.print("[green]✅ Configuration is valid![/green]")


def main() -> None:
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
