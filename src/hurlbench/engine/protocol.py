"""Interfaces between the runner, its workers, and request executors."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from hurlbench.metrics.accumulator import MetricsAccumulator
    from hurlbench.metrics.models import Outcome
    from hurlbench.workload.models import RequestSpec


class RequestExecutor(Protocol):
    """Executes a single request and classifies its outcome.

    Implementations must enforce their own timeout and never block
    indefinitely. Ordinary failures are returned as ``Failure``. A condition
    that can never recover is signalled by raising ``FatalExecutionError``.
    Executors that are also async context managers are entered by the runner
    before the run and exited after it.
    """

    async def execute(self, spec: RequestSpec) -> Outcome:
        """Execute ``spec`` and return its outcome."""
        ...


@dataclass(frozen=True)
class WorkerReport:
    """Handed from a worker to the runner when the worker stops.

    Attributes:
        worker_id: Identifier of the worker that produced this report.
        accumulator: The worker's frozen accumulator, partial if aborted.
        aborted: True if a fatal executor error stopped the worker before
            the deadline.
        error_message: Description of the fatal error, if any.
    """

    worker_id: int
    accumulator: MetricsAccumulator
    aborted: bool = False
    error_message: str | None = None
