"""Final reduction of worker accumulators into a ``RunResult``."""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

from hurlbench._internal.logging import get_logger
from hurlbench.metrics.models import RequestSummary, RunResult, WorkerSummary

if TYPE_CHECKING:
    from collections.abc import Sequence

    from hurlbench._internal.config import RunConfig
    from hurlbench.engine.protocol import WorkerReport
    from hurlbench.metrics.accumulator import MetricsAccumulator
    from hurlbench.workload.models import Workload

logger = get_logger("metrics.aggregator")

REPORTED_PERCENTILES = (50.0, 90.0, 95.0, 99.0, 99.9)


def _finite_or_zero(value: float) -> float:
    return value if math.isfinite(value) else 0.0


def build_run_result(
    merged: MetricsAccumulator,
    reports: Sequence[WorkerReport],
    run_config: RunConfig,
    elapsed_seconds: float,
    *,
    workload: Workload | None = None,
    percentile_method: str = "linear",
    run_start: float | None = None,
) -> RunResult:
    """Derive the immutable run result from the merged accumulator.

    Throughput uses the actual elapsed wall-clock time, not the requested
    duration, so overshoot from in-flight requests is reflected.

    Args:
        merged: Accumulator holding every sample of the run.
        reports: One report per worker, used for the worker breakdown.
        run_config: Configuration the run was started with.
        elapsed_seconds: Measured wall-clock duration of the run.
        workload: Workload of the run, used to label per-request rows.
        percentile_method: ``"linear"`` or ``"nearest"``.
        run_start: Monotonic timestamp the run started at. When given, the
            earliest and latest request starts are reported relative to it.

    Returns:
        A fully populated RunResult.
    """
    total = merged.total_count
    p50, p90, p95, p99, p999 = merged.latencies.percentiles(
        REPORTED_PERCENTILES, method=percentile_method
    )

    requests: list[RequestSummary] = []
    for index, tally in sorted(merged.requests.items()):
        label = workload.requests[index].label if workload is not None else f"#{index}"
        requests.append(
            RequestSummary(
                index=index,
                label=label,
                request_count=tally.count,
                failure_count=tally.failures,
                latency_min=_finite_or_zero(tally.latency_min),
                latency_max=tally.latency_max,
                latency_avg=tally.latency_total / tally.count if tally.count else 0.0,
            )
        )

    workers = tuple(
        WorkerSummary(
            worker_id=report.worker_id,
            request_count=report.accumulator.total_count,
            failure_count=report.accumulator.failure_count,
            aborted=report.aborted,
            error_message=report.error_message,
        )
        for report in sorted(reports, key=lambda r: r.worker_id)
    )

    throughput = total / elapsed_seconds if elapsed_seconds > 0 else 0.0

    first_offset: float | None = None
    last_offset: float | None = None
    first, last = merged.first_started_at, merged.last_started_at
    if run_start is not None and first is not None and last is not None:
        first_offset = first - run_start
        last_offset = last - run_start

    logger.debug(
        "Reduced %d worker(s): total=%d, failures=%d, elapsed=%.3fs",
        len(reports),
        total,
        merged.failure_count,
        elapsed_seconds,
    )

    return RunResult(
        requested_duration_seconds=run_config.duration_seconds,
        elapsed_seconds=elapsed_seconds,
        parallelism=run_config.parallelism,
        total_requests=total,
        successes=merged.success_count,
        failures=merged.failure_count,
        throughput=throughput,
        latency_min=_finite_or_zero(merged.latency_min),
        latency_max=merged.latency_max,
        latency_avg=merged.latency_avg,
        latency_p50=p50,
        latency_p90=p90,
        latency_p95=p95,
        latency_p99=p99,
        latency_p999=p999,
        percentile_method=percentile_method,
        failures_by_kind=dict(merged.failures_by_kind),
        requests=tuple(requests),
        workers=workers,
        first_request_offset=first_offset,
        last_request_offset=last_offset,
    )
