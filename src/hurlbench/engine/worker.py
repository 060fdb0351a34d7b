"""The worker loop: replay the workload until the deadline."""

from __future__ import annotations

import asyncio
import time
from typing import TYPE_CHECKING

from hurlbench._internal.errors import FatalExecutionError
from hurlbench._internal.logging import get_logger
from hurlbench.engine.protocol import WorkerReport
from hurlbench.metrics.accumulator import MetricsAccumulator
from hurlbench.metrics.models import Failure, FailureKind, OutcomeSample, Success

if TYPE_CHECKING:
    from hurlbench._internal.types import Clock
    from hurlbench.engine.clock import Deadline
    from hurlbench.engine.protocol import RequestExecutor
    from hurlbench.metrics.models import Outcome
    from hurlbench.workload.models import RequestSpec, Workload

logger = get_logger("engine.worker")


class Worker:
    """One concurrent execution unit of a run.

    Cycles through the shared workload in order, wrapping after the last
    request, and records one ``OutcomeSample`` per request into an
    accumulator that only this worker writes to.

    The deadline is checked before each request, never during one: a request
    in flight always completes, so a run overshoots its duration by at most
    the latency of its slowest in-flight request. The first request is
    always issued, so every worker contributes at least one sample.

    Attributes:
        worker_id: Identifier of this worker.
        accumulator: The worker's private accumulator. Other tasks may read
            its counters for progress display but never write to it.
    """

    def __init__(
        self,
        worker_id: int,
        workload: Workload,
        deadline: Deadline,
        executor: RequestExecutor,
        *,
        latency_store: str = "exact",
        clock: Clock = time.monotonic,
    ) -> None:
        """Initialize the worker.

        Args:
            worker_id: Identifier of this worker.
            workload: Shared, read-only workload.
            deadline: Shared run deadline.
            executor: This worker's request executor.
            latency_store: Latency store kind for the accumulator.
            clock: Monotonic time source used to time requests.
        """
        self.worker_id = worker_id
        self.accumulator = MetricsAccumulator(latency_store=latency_store)
        self._workload = workload
        self._deadline = deadline
        self._executor = executor
        self._clock = clock

    async def run(self) -> WorkerReport:
        """Run until the deadline or a fatal executor error.

        Returns:
            A report holding the frozen accumulator.
        """
        requests = self._workload.requests
        index = 0
        aborted = False
        error_message: str | None = None

        logger.debug("Worker %d: starting", self.worker_id, extra={"worker_id": self.worker_id})

        while True:
            spec = requests[index]
            started_at = self._clock()
            try:
                outcome = await self._execute(spec)
            except FatalExecutionError as exc:
                aborted = True
                error_message = str(exc)
                logger.warning(
                    "Worker %d: aborted by fatal error: %s",
                    self.worker_id,
                    exc,
                    extra={"worker_id": self.worker_id},
                )
                break
            elapsed_ms = (self._clock() - started_at) * 1000

            self.accumulator.record(
                OutcomeSample(
                    request_index=index,
                    started_at=started_at,
                    elapsed_ms=elapsed_ms,
                    outcome=outcome,
                )
            )

            index = (index + 1) % len(requests)
            # Let other workers run even if the executor never suspended
            await asyncio.sleep(0)
            if self._deadline.expired():
                break

        self.accumulator.freeze()
        logger.debug(
            "Worker %d: stopped after %d request(s), %d failed",
            self.worker_id,
            self.accumulator.total_count,
            self.accumulator.failure_count,
            extra={
                "worker_id": self.worker_id,
                "requests": self.accumulator.total_count,
                "failures": self.accumulator.failure_count,
            },
        )
        return WorkerReport(
            worker_id=self.worker_id,
            accumulator=self.accumulator,
            aborted=aborted,
            error_message=error_message,
        )

    async def _execute(self, spec: RequestSpec) -> Outcome:
        """Call the executor, turning unexpected exceptions into failures.

        ``FatalExecutionError`` and cancellation propagate; anything else the
        executor raises is a per-request failure. So is a return value that
        is neither ``Success`` nor ``Failure``.
        """
        try:
            outcome = await self._executor.execute(spec)
        except FatalExecutionError:
            raise
        except Exception as exc:
            logger.debug(
                "Worker %d: request failed with %s",
                self.worker_id,
                type(exc).__name__,
                exc_info=True,
                extra={"worker_id": self.worker_id},
            )
            return Failure(FailureKind.OTHER, f"{type(exc).__name__}: {exc}")

        if not isinstance(outcome, (Success, Failure)):
            logger.debug(
                "Worker %d: executor returned %r",
                self.worker_id,
                outcome,
                extra={"worker_id": self.worker_id},
            )
            return Failure(FailureKind.OTHER, f"executor returned {type(outcome).__name__}")
        return outcome
