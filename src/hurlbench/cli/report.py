"""Rendering of a finished run: rich tables or a JSON document."""

from __future__ import annotations

import dataclasses
from typing import TYPE_CHECKING, Any

from rich.markup import escape
from rich.table import Table

if TYPE_CHECKING:
    from rich.console import Console

    from hurlbench.metrics.models import RunResult


def result_to_dict(result: RunResult) -> dict[str, Any]:
    """Convert a run result to a JSON-serializable dict.

    Derived values (error rate, overshoot, worker completion counts) are
    included so that consumers do not have to recompute them.
    """
    data = dataclasses.asdict(result)
    data["error_rate"] = result.error_rate
    data["overshoot_seconds"] = result.overshoot_seconds
    data["workers_completed"] = result.workers_completed
    data["workers_aborted"] = result.workers_aborted
    return data


def print_summary(result: RunResult, console: Console) -> None:
    """Print the final summary, per-request and failure breakdowns.

    Args:
        result: Completed run result.
        console: Rich console to print to.
    """
    table = Table(
        title="Benchmark Complete",
        show_header=True,
        header_style="bold green",
        expand=True,
    )
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")

    table.add_row("Duration", f"{result.requested_duration_seconds:.3f}s requested")
    table.add_row("Elapsed", f"{result.elapsed_seconds:.3f}s (+{result.overshoot_seconds:.3f}s)")
    table.add_row("Workers", f"{result.workers_completed}/{result.parallelism} completed")
    table.add_row("Total Requests", str(result.total_requests))
    table.add_row("Requests/sec", f"{result.throughput:.1f}")
    table.add_row("Successes", str(result.successes))
    table.add_row("Failures", str(result.failures))
    table.add_row("Error Rate", f"{result.error_rate * 100:.2f}%")
    table.add_row("Min Latency", f"{result.latency_min:.2f}ms")
    table.add_row("Avg Latency", f"{result.latency_avg:.2f}ms")
    table.add_row("p50 Latency", f"{result.latency_p50:.2f}ms")
    table.add_row("p90 Latency", f"{result.latency_p90:.2f}ms")
    table.add_row("p95 Latency", f"{result.latency_p95:.2f}ms")
    table.add_row("p99 Latency", f"{result.latency_p99:.2f}ms")
    table.add_row("p99.9 Latency", f"{result.latency_p999:.2f}ms")
    table.add_row("Max Latency", f"{result.latency_max:.2f}ms")

    if len(result.requests) > 1:
        req_table = Table(
            title="Per-Request Breakdown",
            show_header=True,
            header_style="bold cyan",
            expand=True,
        )
        req_table.add_column("#", justify="right")
        req_table.add_column("Request")
        req_table.add_column("Count", justify="right")
        req_table.add_column("Min", justify="right")
        req_table.add_column("Avg", justify="right")
        req_table.add_column("Max", justify="right")
        req_table.add_column("Errors", justify="right")
        req_table.add_column("Error %", justify="right")

        for req in result.requests:
            req_table.add_row(
                str(req.index + 1),
                escape(req.label),
                str(req.request_count),
                f"{req.latency_min:.2f}ms",
                f"{req.latency_avg:.2f}ms",
                f"{req.latency_max:.2f}ms",
                str(req.failure_count),
                f"{req.error_rate * 100:.2f}%",
            )
        console.print(req_table)

    if result.failures_by_kind:
        fail_table = Table(title="Failures", show_header=True, header_style="bold red")
        fail_table.add_column("Kind")
        fail_table.add_column("Count", justify="right")
        for kind, count in sorted(result.failures_by_kind.items()):
            fail_table.add_row(kind, str(count))
        console.print(fail_table)

    for worker in result.workers:
        if worker.aborted:
            console.print(
                f"[yellow]Worker {worker.worker_id} stopped early after "
                f"{worker.request_count} request(s):[/yellow] {escape(worker.error_message or '')}"
            )

    console.print(table)
