"""``hurlbench run`` — benchmark a request file with live terminal output."""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import TYPE_CHECKING

import typer
from rich.console import Console
from rich.live import Live
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from hurlbench._internal.config import RunConfig, load_config
from hurlbench._internal.errors import ConfigError, HurlbenchError
from hurlbench._internal.logging import level_from_flags, setup_logging
from hurlbench.cli.report import print_summary, result_to_dict
from hurlbench.engine.runner import BenchmarkRunner
from hurlbench.workload.loader import load_workload

if TYPE_CHECKING:
    from hurlbench.metrics.models import ProgressSnapshot

console = Console(stderr=True)

_DURATION_RE = re.compile(r"^(\d+)([sm])$", re.IGNORECASE)


def parse_duration(text: str) -> float:
    """Parse a duration such as ``10s`` or ``500m`` into seconds.

    The value is a non-negative integer followed by a case-insensitive unit:
    ``s`` for seconds or ``m`` for milliseconds. A zero duration parses but
    is rejected later by ``RunConfig``.

    Args:
        text: Duration string from the command line.

    Returns:
        Duration in seconds.

    Raises:
        ConfigError: If the string is not a valid duration.
    """
    match = _DURATION_RE.match(text.strip())
    if match is None:
        msg = (
            f"invalid duration {text!r}: expected an integer followed by "
            "s (seconds) or m (milliseconds), e.g. 10s or 500m"
        )
        raise ConfigError(msg)

    value = int(match.group(1))
    if match.group(2).lower() == "s":
        return float(value)
    return value / 1000


def _make_live_table(snapshot: ProgressSnapshot | None) -> Table:
    """Build a Rich table with the progress of the running benchmark.

    Args:
        snapshot: Latest progress snapshot, or None if none arrived yet.

    Returns:
        Formatted Rich Table.
    """
    table = Table(show_header=True, header_style="bold cyan", expand=True)
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")

    if snapshot is None:
        table.add_row("Elapsed", "0s")
        table.add_row("Status", "Starting...")
        return table

    table.add_row(
        "Elapsed",
        f"{snapshot.elapsed_seconds:.0f}s / {snapshot.duration_seconds:g}s",
    )
    table.add_row("Requests/sec", f"{snapshot.requests_per_second:.1f}")
    table.add_row("Total Requests", str(snapshot.total_requests))
    table.add_row("Failures", str(snapshot.failures))
    return table


def run_cmd(
    request_file: Path = typer.Argument(
        ...,
        help="Path to the .hurl request file.",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
    duration: str = typer.Option(
        "10s",
        "--duration",
        "-d",
        help="Run duration: integer with unit s (seconds) or m (milliseconds).",
    ),
    parallelism: int = typer.Option(
        1,
        "--parallelism",
        "-p",
        help="Number of concurrent workers.",
        min=1,
    ),
    fail_on_error_rate: float | None = typer.Option(
        None,
        "--fail-on-error-rate",
        help="Exit non-zero if error rate exceeds this threshold (e.g., 0.05).",
    ),
    as_json: bool = typer.Option(
        False,
        "--json",
        help="Print the result as JSON to stdout instead of tables.",
    ),
    insecure: bool = typer.Option(
        False,
        "--insecure",
        help="Do not verify TLS certificates.",
    ),
    no_progress: bool = typer.Option(
        False,
        "--no-progress",
        help="Disable the live progress table.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose (DEBUG) logging.",
    ),
    log_json: bool = typer.Option(
        False,
        "--log-json",
        help="Emit log lines as JSON.",
    ),
) -> None:
    """Replay a request file for a fixed duration and report the results."""
    try:
        duration_seconds = parse_duration(duration)
    except ConfigError as exc:
        raise typer.BadParameter(str(exc), param_hint="'--duration'") from exc

    # Keep stdout clean for the JSON document
    log_level = level_from_flags(verbose=verbose, quiet=as_json and not verbose)
    setup_logging(log_level, json_format=log_json)

    try:
        run_config = RunConfig(duration_seconds=duration_seconds, parallelism=parallelism)
        config = load_config(verify_ssl=not insecure)
        workload = load_workload(request_file)
    except ConfigError as exc:
        console.print(f"[red]Error:[/red] {escape(str(exc))}", soft_wrap=True)
        raise typer.Exit(code=1) from exc

    if not as_json:
        console.print(
            Panel(
                f"[bold]File:[/bold]        {escape(request_file.name)}\n"
                f"[bold]Requests:[/bold]    {len(workload)}\n"
                f"[bold]Duration:[/bold]    {duration_seconds:g}s\n"
                f"[bold]Parallelism:[/bold] {parallelism}",
                title="hurlbench",
                border_style="cyan",
            )
        )

    show_progress = not (as_json or no_progress)

    try:
        if show_progress:
            with Live(
                _make_live_table(None),
                console=console,
                refresh_per_second=2,
                transient=True,
            ) as live:

                def _on_progress(snapshot: ProgressSnapshot) -> None:
                    live.update(_make_live_table(snapshot))

                result = BenchmarkRunner(
                    run_config,
                    workload,
                    config=config,
                    on_progress=_on_progress,
                    log_level=log_level,
                ).run()
        else:
            result = BenchmarkRunner(
                run_config,
                workload,
                config=config,
                log_level=log_level,
            ).run()
    except HurlbenchError as exc:
        console.print(f"[red]Benchmark failed:[/red] {escape(str(exc))}", soft_wrap=True)
        raise typer.Exit(code=1) from exc

    if as_json:
        typer.echo(json.dumps(result_to_dict(result), indent=2))
    else:
        print_summary(result, console)

    if fail_on_error_rate is not None and result.error_rate > fail_on_error_rate:
        console.print(
            f"[red]FAIL:[/red] Error rate {result.error_rate * 100:.2f}% "
            f"exceeds threshold {fail_on_error_rate * 100:.2f}%"
        )
        raise typer.Exit(code=1)

    if not as_json:
        console.print("[green]Benchmark completed.[/green]")
