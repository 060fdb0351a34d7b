"""Outcome and result dataclasses for hurlbench."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

__all__ = [
    "Failure",
    "FailureKind",
    "Outcome",
    "OutcomeSample",
    "ProgressSnapshot",
    "RequestSummary",
    "RunResult",
    "Success",
    "WorkerSummary",
]


class FailureKind(str, Enum):
    """Why a request failed, as classified by the request executor."""

    CONNECTION = "connection"
    TIMEOUT = "timeout"
    ASSERTION = "assertion"
    PROTOCOL = "protocol"
    OTHER = "other"


@dataclass(frozen=True)
class Success:
    """The request completed and every response assertion held.

    Attributes:
        status_code: HTTP status of the response, 0 when not applicable.
    """

    status_code: int = 0


@dataclass(frozen=True)
class Failure:
    """The request did not succeed.

    Attributes:
        kind: Failure category.
        message: Human-readable detail, e.g. ``"expected status 200, got 503"``.
    """

    kind: FailureKind
    message: str = ""


# Closed set of request outcomes.
Outcome = Success | Failure


@dataclass(frozen=True)
class OutcomeSample:
    """One executed request, as observed by the worker that ran it.

    Attributes:
        request_index: Position of the request in the workload.
        started_at: Monotonic timestamp (seconds) when the request started.
        elapsed_ms: Time from start to completed response, in milliseconds.
        outcome: ``Success`` or ``Failure``.
    """

    request_index: int
    started_at: float
    elapsed_ms: float
    outcome: Outcome

    @property
    def success(self) -> bool:
        """Return True if the request succeeded."""
        return isinstance(self.outcome, Success)


@dataclass(frozen=True)
class RequestSummary:
    """Aggregated statistics for one request of the workload.

    Attributes:
        index: Position of the request in the workload.
        label: ``"METHOD URL"`` of the request.
        request_count: How often the request was executed across all workers.
        failure_count: How many of those executions failed.
        latency_min: Minimum response time in milliseconds.
        latency_max: Maximum response time in milliseconds.
        latency_avg: Mean response time in milliseconds.
    """

    index: int
    label: str
    request_count: int = 0
    failure_count: int = 0
    latency_min: float = 0.0
    latency_max: float = 0.0
    latency_avg: float = 0.0

    @property
    def error_rate(self) -> float:
        """Fraction of executions that failed (0.0 to 1.0)."""
        return self.failure_count / self.request_count if self.request_count else 0.0


@dataclass(frozen=True)
class WorkerSummary:
    """What a single worker contributed to a run.

    Attributes:
        worker_id: Worker index, ``0`` to ``parallelism - 1``.
        request_count: Requests executed by the worker.
        failure_count: Failed requests among them.
        aborted: True if the worker stopped early on a fatal executor error.
        error_message: The fatal error, if any.
    """

    worker_id: int
    request_count: int
    failure_count: int
    aborted: bool = False
    error_message: str | None = None


@dataclass(frozen=True)
class RunResult:
    """Final, immutable outcome of a benchmark run.

    Latency values are in milliseconds. ``throughput`` is computed from the
    actual wall-clock run time, which includes the overshoot caused by
    requests still in flight at the deadline.

    Attributes:
        requested_duration_seconds: Duration asked for in the run config.
        elapsed_seconds: Actual wall-clock duration of the run.
        parallelism: Number of workers started.
        total_requests: Requests executed across all workers.
        successes: Successful requests.
        failures: Failed requests.
        throughput: ``total_requests / elapsed_seconds``.
        latency_min: Minimum latency.
        latency_max: Maximum latency.
        latency_avg: Mean latency.
        latency_p50: 50th percentile latency.
        latency_p90: 90th percentile latency.
        latency_p95: 95th percentile latency.
        latency_p99: 99th percentile latency.
        latency_p999: 99.9th percentile latency.
        percentile_method: How percentiles were computed.
        failures_by_kind: Failure count per ``FailureKind`` value.
        requests: Per-request breakdown in workload order.
        workers: Per-worker breakdown ordered by worker id.
        first_request_offset: Seconds from run start to the earliest request
            start, None when unknown.
        last_request_offset: Seconds from run start to the latest request
            start, None when unknown.
    """

    requested_duration_seconds: float
    elapsed_seconds: float
    parallelism: int
    total_requests: int = 0
    successes: int = 0
    failures: int = 0
    throughput: float = 0.0
    latency_min: float = 0.0
    latency_max: float = 0.0
    latency_avg: float = 0.0
    latency_p50: float = 0.0
    latency_p90: float = 0.0
    latency_p95: float = 0.0
    latency_p99: float = 0.0
    latency_p999: float = 0.0
    percentile_method: str = "linear"
    failures_by_kind: dict[str, int] = field(default_factory=dict)
    requests: tuple[RequestSummary, ...] = ()
    workers: tuple[WorkerSummary, ...] = ()
    first_request_offset: float | None = None
    last_request_offset: float | None = None

    @property
    def error_rate(self) -> float:
        """Fraction of requests that failed (0.0 to 1.0)."""
        return self.failures / self.total_requests if self.total_requests else 0.0

    @property
    def overshoot_seconds(self) -> float:
        """How much longer the run took than requested (never negative)."""
        return max(self.elapsed_seconds - self.requested_duration_seconds, 0.0)

    @property
    def workers_aborted(self) -> int:
        """Number of workers that stopped early on a fatal error."""
        return sum(1 for w in self.workers if w.aborted)

    @property
    def workers_completed(self) -> int:
        """Number of workers that ran until the deadline."""
        return len(self.workers) - self.workers_aborted


@dataclass(frozen=True)
class ProgressSnapshot:
    """Point-in-time view of a run in progress, emitted by the monitor.

    Attributes:
        elapsed_seconds: Seconds since the run started.
        duration_seconds: Requested run duration.
        total_requests: Requests completed so far across all workers.
        failures: Failed requests so far.
        requests_per_second: Completion rate over the last interval.
    """

    elapsed_seconds: float
    duration_seconds: float
    total_requests: int
    failures: int
    requests_per_second: float
