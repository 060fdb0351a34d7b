"""Outcome samples, per-worker accumulators and the final run result."""

from __future__ import annotations

from hurlbench.metrics.accumulator import MetricsAccumulator, merge, merge_all
from hurlbench.metrics.aggregator import build_run_result
from hurlbench.metrics.models import (
    Failure,
    FailureKind,
    Outcome,
    OutcomeSample,
    ProgressSnapshot,
    RequestSummary,
    RunResult,
    Success,
    WorkerSummary,
)

__all__ = [
    "Failure",
    "FailureKind",
    "MetricsAccumulator",
    "Outcome",
    "OutcomeSample",
    "ProgressSnapshot",
    "RequestSummary",
    "RunResult",
    "Success",
    "WorkerSummary",
    "build_run_result",
    "merge",
    "merge_all",
]
