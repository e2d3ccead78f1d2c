"""CLI entry point for quick-vrt."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Any

import click
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from quick_vrt import __version__
from quick_vrt.errors import UsageError
from quick_vrt.history import HistoryManager
from quick_vrt.models.config import CaptureOptions
from quick_vrt.models.pair import UrlPair
from quick_vrt.models.result import ProgressEvent, RunSummary
from quick_vrt.orchestrator import Orchestrator
from quick_vrt.reporter.report_finder import find_reports, resolve_report_path, time_ago
from quick_vrt.url_utils import load_pairs_file, pairs_from_urls, require_eligible

console = Console()
logger = logging.getLogger(__name__)

EXIT_INTERRUPTED = 130
MAX_LISTED_REPORTS = 10


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def build_options(config: str | None, overrides: dict[str, Any]) -> CaptureOptions:
    """Merge a config file (if any) with explicit flag values. Flags win."""
    try:
        base = CaptureOptions.load(config).model_dump() if config else {}
    except FileNotFoundError as e:
        raise click.UsageError(str(e))
    except (ValueError, ValidationError) as e:
        raise click.UsageError(f"Invalid config file {config}: {e}")
    base.update({k: v for k, v in overrides.items() if v is not None})
    try:
        return CaptureOptions(**base)
    except ValidationError as e:
        raise click.UsageError(f"Invalid options: {e}")


def execute_run(
    pairs: list[UrlPair],
    options: CaptureOptions,
    open_report: bool = True,
    fail_on_error: bool = False,
    record_history: bool = True,
) -> None:
    """Run the pipeline, print the summary, write reports, and exit with the run's status."""
    try:
        require_eligible(pairs)
    except UsageError as e:
        raise click.UsageError(str(e))

    if record_history:
        try:
            HistoryManager().add(pairs, options.model_dump())
        except OSError as e:
            logger.warning("Could not record run history: %s", e)

    with console.status("Starting browser...") as status:
        def _on_progress(event: ProgressEvent) -> None:
            status.update(f"[{event.index}/{event.total}] {event.pair_id}: {event.state.value}")

        orchestrator = Orchestrator(options, on_progress=_on_progress)
        try:
            summary = orchestrator.run(pairs)
        except UsageError as e:
            raise click.UsageError(str(e))
        except KeyboardInterrupt:
            console.print("[yellow]Interrupted before any result could be kept[/yellow]")
            sys.exit(EXIT_INTERRUPTED)
        except Exception as e:
            console.print(f"[red]Run failed: {e}[/red]")
            sys.exit(1)

    reports = orchestrator.report(summary)
    _print_summary(summary, reports)

    if summary.interrupted:
        console.print("[yellow]Run interrupted: the report covers completed pairs only[/yellow]")
        sys.exit(EXIT_INTERRUPTED)

    if open_report and "html" in reports:
        click.launch(reports["html"])

    if fail_on_error and summary.errors:
        sys.exit(1)


def _print_summary(summary: RunSummary, reports: dict[str, str]) -> None:
    console.print("\n[bold green]Comparison Complete[/bold green]")

    table = Table(title="Results")
    table.add_column("Pair", style="bold")
    table.add_column("Before")
    table.add_column("After")
    table.add_column("Difference", justify="right")
    for r in summary.results:
        if r.is_error:
            outcome = f"[red]error: {r.error}[/red]"
        elif r.is_identical:
            outcome = "[green]identical[/green]"
        else:
            outcome = f"[yellow]{r.diff_percentage}%[/yellow]"
            if r.size_warning:
                outcome += " [dim](size mismatch)[/dim]"
        table.add_row(r.id, r.before_url, r.after_url, outcome)
    console.print(table)

    totals = Table(title="Summary")
    totals.add_column("Metric", style="bold")
    totals.add_column("Value")
    totals.add_row("Comparisons", str(summary.total))
    totals.add_row("Identical", f"[green]{summary.identical}[/green]")
    totals.add_row("Different", f"[yellow]{summary.different}[/yellow]")
    totals.add_row("Errors", f"[red]{summary.errors}[/red]")
    totals.add_row("Duration", f"{summary.duration_seconds}s")
    console.print(totals)

    for fmt, path in reports.items():
        console.print(f"  {fmt.upper()} report: [blue]{path}[/blue]")


@click.group()
@click.version_option(__version__, prog_name="quick-vrt")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """Visual regression testing for pairs of web pages."""
    setup_logging(verbose)


@cli.command()
@click.argument("urls", nargs=-1)
@click.option("--file", "-f", "pairs_file", type=click.Path(dir_okay=False), help="File with one URL pair per line")
@click.option("--config", "-c", default=None, help="JSON options file")
@click.option("--output", "-o", default=None, help="Output directory (default ./vrt-results)")
@click.option("--width", type=int, default=None, help="Viewport width")
@click.option("--height", type=int, default=None, help="Viewport height")
@click.option("--user-agent", default=None, help="Custom user agent")
@click.option("--concurrency", type=int, default=None, help="Max pairs in flight with --parallel")
@click.option("--parallel", is_flag=True, help="Process pairs concurrently")
@click.option("--scroll-delay", type=int, default=None, help="Delay between scroll steps in ms")
@click.option("--threshold", type=float, default=None, help="Per-pixel color distance threshold (0-1)")
@click.option("--video-mask-color", default=None, help="Fill color for masked videos")
@click.option("--no-disable-animations", is_flag=True, help="Leave animations running")
@click.option("--no-lazy-loading", is_flag=True, help="Skip the lazy-load scroll sweep")
@click.option("--no-mask-videos", is_flag=True, help="Do not mask videos")
@click.option("--save-dom-snapshots", is_flag=True, help="Save the page HTML next to each screenshot")
@click.option("--headed", is_flag=True, help="Show the browser window")
@click.option("--no-open", is_flag=True, help="Do not open the report when done")
@click.option("--fail-on-error", is_flag=True, help="Exit 1 when any pair failed")
def run(
    urls: tuple[str, ...],
    pairs_file: str | None,
    config: str | None,
    output: str | None,
    width: int | None,
    height: int | None,
    user_agent: str | None,
    concurrency: int | None,
    parallel: bool,
    scroll_delay: int | None,
    threshold: float | None,
    video_mask_color: str | None,
    no_disable_animations: bool,
    no_lazy_loading: bool,
    no_mask_videos: bool,
    save_dom_snapshots: bool,
    headed: bool,
    no_open: bool,
    fail_on_error: bool,
) -> None:
    """Compare URL pairs: quick-vrt run BEFORE AFTER [BEFORE AFTER ...]"""
    try:
        pairs = pairs_from_urls(urls) if urls or not pairs_file else []
        if pairs_file:
            pairs += load_pairs_file(pairs_file)
    except UsageError as e:
        raise click.UsageError(str(e))
    if not pairs:
        raise click.UsageError(f"No URL pairs found in {pairs_file}")

    options = build_options(config, {
        "output_directory": output,
        "viewport_width": width,
        "viewport_height": height,
        "user_agent": user_agent,
        "concurrency": concurrency,
        "parallel": True if parallel else None,
        "scroll_delay": scroll_delay,
        "diff_threshold": threshold,
        "video_mask_color": video_mask_color,
        "disable_animations": False if no_disable_animations else None,
        "lazy_loading": False if no_lazy_loading else None,
        "mask_videos": False if no_mask_videos else None,
        "save_dom_snapshots": True if save_dom_snapshots else None,
        "headless": False if headed else None,
    })
    execute_run(pairs, options, open_report=not no_open, fail_on_error=fail_on_error)


@cli.command()
@click.option("--config", "-c", default=None, help="JSON options file")
@click.option("--output", "-o", default=None, help="Output directory (default ./vrt-results)")
@click.option("--no-open", is_flag=True, help="Do not open the report when done")
def interactive(config: str | None, output: str | None, no_open: bool) -> None:
    """Enter URL pairs at the prompt. An empty before URL ends the list."""
    options = build_options(config, {"output_directory": output})
    pairs: list[UrlPair] = []

    while True:
        n = len(pairs) + 1
        before = click.prompt(f"Pair {n} before URL (empty to finish)", default="", show_default=False).strip()
        if not before:
            break
        after = click.prompt(f"Pair {n} after URL", default="", show_default=False).strip()
        if not after:
            console.print("[yellow]Pair skipped: an after URL is required[/yellow]")
            continue
        pairs.append(UrlPair(before=before, after=after))

    if not pairs:
        console.print("[yellow]No pairs entered[/yellow]")
        return
    execute_run(pairs, options, open_report=not no_open)


@cli.command("open")
@click.argument("path", default="./vrt-results")
@click.option("--list", "-l", "list_reports", is_flag=True, help="List recent reports instead of opening one")
def open_(path: str, list_reports: bool) -> None:
    """Open an existing report (a results directory or report.html)."""
    if list_reports:
        reports = find_reports()
        if not reports:
            console.print("[yellow]No reports found[/yellow]")
            return
        table = Table(title="Recent Reports")
        table.add_column("#", style="bold")
        table.add_column("Report")
        table.add_column("Modified", no_wrap=True)
        table.add_column("Size", justify="right", no_wrap=True)
        for i, report in enumerate(reports[:MAX_LISTED_REPORTS], 1):
            table.add_row(str(i), str(report.path), time_ago(report.modified), f"{report.size_mb} MB")
        console.print(table)
        if len(reports) > MAX_LISTED_REPORTS:
            console.print(f"... and {len(reports) - MAX_LISTED_REPORTS} more")
        return

    report_path = resolve_report_path(path)
    if not report_path.is_file():
        console.print(f"[red]Report not found: {report_path}[/red]")
        console.print("Run a comparison first, or pass the path of an existing report.")
        sys.exit(1)
    console.print(f"Opening report: [blue]{report_path}[/blue]")
    click.launch(str(report_path))


@cli.group()
def history() -> None:
    """View or reuse previous runs."""


@history.command("list")
def history_list() -> None:
    """Show recent runs, newest first."""
    entries = HistoryManager().load().entries
    if not entries:
        console.print("[yellow]No history yet[/yellow]")
        return
    table = Table(title="Run History")
    table.add_column("ID", style="bold", no_wrap=True)
    table.add_column("Run")
    for entry in entries:
        table.add_row(entry.id, entry.display())
    console.print(table)


@history.command("delete")
@click.argument("entry_id")
def history_delete(entry_id: str) -> None:
    """Delete one history entry."""
    if not HistoryManager().delete(entry_id):
        console.print(f"[red]No history entry with id {entry_id}[/red]")
        sys.exit(1)
    console.print(f"[green]Deleted history entry {entry_id}[/green]")


@history.command("clear")
def history_clear() -> None:
    """Delete all history."""
    HistoryManager().clear()
    console.print("[green]History cleared[/green]")


@history.command("rerun")
@click.argument("entry_id")
@click.option("--no-open", is_flag=True, help="Do not open the report when done")
@click.option("--fail-on-error", is_flag=True, help="Exit 1 when any pair failed")
def history_rerun(entry_id: str, no_open: bool, fail_on_error: bool) -> None:
    """Run the pairs of a previous run again with its options."""
    entry = HistoryManager().get(entry_id)
    if entry is None:
        raise click.UsageError(f"No history entry with id {entry_id}")
    try:
        options = CaptureOptions(**entry.options)
    except ValidationError as e:
        raise click.UsageError(f"Stored options are invalid: {e}")
    execute_run(entry.url_pairs, options, open_report=not no_open, fail_on_error=fail_on_error)


@cli.command()
@click.option("--output", "-o", default="quick-vrt.json", help="Where to write the options file")
def init(output: str) -> None:
    """Write a default options file for --config."""
    path = Path(output)
    if path.exists() and not click.confirm(f"{path} already exists. Overwrite?"):
        return
    CaptureOptions().save(path)
    console.print(f"[green]Created {path}[/green]")
    console.print("\nYou can now customize this file and run:")
    console.print(f"  [blue]quick-vrt run --config {path} BEFORE_URL AFTER_URL[/blue]")


if __name__ == "__main__":
    cli()
