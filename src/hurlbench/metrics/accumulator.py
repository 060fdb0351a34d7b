"""Per-worker metric accumulation and lossless merging.

Each worker owns one ``MetricsAccumulator`` and is its only writer, so the
hot path needs no locks. Once every worker has stopped, the runner folds the
frozen accumulators together with ``merge_all``.
"""

from __future__ import annotations

import math
from collections import Counter
from dataclasses import dataclass
from functools import reduce
from typing import TYPE_CHECKING

from hurlbench._internal.errors import EngineError
from hurlbench.metrics.latency import create_latency_store
from hurlbench.metrics.models import Failure, Success

if TYPE_CHECKING:
    from collections.abc import Iterable

    from hurlbench.metrics.latency import LatencyStore
    from hurlbench.metrics.models import OutcomeSample


@dataclass
class RequestTally:
    """Running counters for one request index."""

    count: int = 0
    failures: int = 0
    latency_min: float = math.inf
    latency_max: float = 0.0
    latency_total: float = 0.0

    def add(self, elapsed_ms: float, *, failed: bool) -> None:
        self.count += 1
        if failed:
            self.failures += 1
        self.latency_min = min(self.latency_min, elapsed_ms)
        self.latency_max = max(self.latency_max, elapsed_ms)
        self.latency_total += elapsed_ms

    def combined(self, other: RequestTally) -> RequestTally:
        return RequestTally(
            count=self.count + other.count,
            failures=self.failures + other.failures,
            latency_min=min(self.latency_min, other.latency_min),
            latency_max=max(self.latency_max, other.latency_max),
            latency_total=self.latency_total + other.latency_total,
        )


class MetricsAccumulator:
    """Running statistics over the samples of one worker.

    Attributes:
        success_count: Successful samples recorded.
        failure_count: Failed samples recorded.
        latency_min: Smallest elapsed time (ms), ``inf`` while empty.
        latency_max: Largest elapsed time (ms).
        latency_total: Sum of elapsed times (ms).
        first_started_at: Earliest sample start (monotonic), None while empty.
        last_started_at: Latest sample start (monotonic), None while empty.
        failures_by_kind: Failure count per ``FailureKind`` value.
        latencies: Mergeable latency store used for percentiles.
    """

    def __init__(self, latency_store: str = "exact") -> None:
        self.success_count = 0
        self.failure_count = 0
        self.latency_min = math.inf
        self.latency_max = 0.0
        self.latency_total = 0.0
        self.first_started_at: float | None = None
        self.last_started_at: float | None = None
        self.failures_by_kind: Counter[str] = Counter()
        self.latencies: LatencyStore = create_latency_store(latency_store)
        self._requests: dict[int, RequestTally] = {}
        self._frozen = False

    @property
    def total_count(self) -> int:
        """Total samples recorded."""
        return self.success_count + self.failure_count

    @property
    def frozen(self) -> bool:
        """Return True once the accumulator no longer accepts samples."""
        return self._frozen

    @property
    def latency_avg(self) -> float:
        """Mean elapsed time in milliseconds, 0.0 while empty."""
        return self.latency_total / self.total_count if self.total_count else 0.0

    @property
    def requests(self) -> dict[int, RequestTally]:
        """Per-request tallies keyed by workload index (read-only copy)."""
        return dict(self._requests)

    def record(self, sample: OutcomeSample) -> None:
        """Fold one outcome sample into the running statistics.

        Raises:
            EngineError: If the accumulator is frozen or the outcome is
                neither ``Success`` nor ``Failure``.
        """
        if self._frozen:
            msg = "cannot record into a frozen accumulator"
            raise EngineError(msg)

        elapsed = sample.elapsed_ms
        outcome = sample.outcome
        if isinstance(outcome, Failure):
            failed = True
            self.failure_count += 1
            self.failures_by_kind[outcome.kind.value] += 1
        elif isinstance(outcome, Success):
            failed = False
            self.success_count += 1
        else:
            msg = f"unknown outcome type {type(outcome).__name__}"
            raise EngineError(msg)

        self.latency_min = min(self.latency_min, elapsed)
        self.latency_max = max(self.latency_max, elapsed)
        self.latency_total += elapsed
        self.latencies.record(elapsed)

        if self.first_started_at is None or sample.started_at < self.first_started_at:
            self.first_started_at = sample.started_at
        if self.last_started_at is None or sample.started_at > self.last_started_at:
            self.last_started_at = sample.started_at

        tally = self._requests.get(sample.request_index)
        if tally is None:
            tally = self._requests[sample.request_index] = RequestTally()
        tally.add(elapsed, failed=failed)

    def freeze(self) -> MetricsAccumulator:
        """Stop accepting samples and return self for chaining."""
        self._frozen = True
        return self


def _min_optional(a: float | None, b: float | None) -> float | None:
    if a is None:
        return b
    if b is None:
        return a
    return min(a, b)


def _max_optional(a: float | None, b: float | None) -> float | None:
    if a is None:
        return b
    if b is None:
        return a
    return max(a, b)


def merge(a: MetricsAccumulator, b: MetricsAccumulator) -> MetricsAccumulator:
    """Combine two accumulators into a new, frozen one.

    Neither input is modified. The operation is associative and
    commutative: counts add, extrema combine, latency stores merge.

    Raises:
        ValueError: If the accumulators use different latency store kinds.
    """
    result = MetricsAccumulator(latency_store=a.latencies.kind)
    result.success_count = a.success_count + b.success_count
    result.failure_count = a.failure_count + b.failure_count
    result.latency_min = min(a.latency_min, b.latency_min)
    result.latency_max = max(a.latency_max, b.latency_max)
    result.latency_total = a.latency_total + b.latency_total
    result.first_started_at = _min_optional(a.first_started_at, b.first_started_at)
    result.last_started_at = _max_optional(a.last_started_at, b.last_started_at)
    result.failures_by_kind = a.failures_by_kind + b.failures_by_kind
    result.latencies = a.latencies.merged(b.latencies)

    requests = dict(a._requests)
    for index, tally in b._requests.items():
        existing = requests.get(index)
        requests[index] = tally if existing is None else existing.combined(tally)
    # Copy so the result shares no tallies with its inputs
    result._requests = {i: RequestTally(**vars(t)) for i, t in requests.items()}
    return result.freeze()


def merge_all(
    accumulators: Iterable[MetricsAccumulator],
    *,
    latency_store: str = "exact",
) -> MetricsAccumulator:
    """Fold any number of accumulators with ``merge``.

    Args:
        accumulators: Accumulators to combine, in any order.
        latency_store: Store kind of the empty result when there is nothing
            to merge.

    Returns:
        A frozen accumulator holding every sample of every input.
    """
    empty = MetricsAccumulator(latency_store=latency_store).freeze()
    return reduce(merge, accumulators, empty)
