"""Top-level benchmark orchestrator."""

from __future__ import annotations

import asyncio
import contextlib
import sys
import time
from typing import TYPE_CHECKING

from hurlbench._internal.config import HurlbenchConfig, RunConfig
from hurlbench._internal.errors import ConfigError, EngineError
from hurlbench._internal.logging import get_logger, setup_logging
from hurlbench.engine.clock import deadline
from hurlbench.engine.worker import Worker
from hurlbench.metrics.accumulator import merge_all
from hurlbench.metrics.aggregator import build_run_result
from hurlbench.metrics.models import ProgressSnapshot
from hurlbench.workload.http_client import HttpExecutor
from hurlbench.workload.models import Workload

if TYPE_CHECKING:
    from collections.abc import Callable

    from hurlbench._internal.types import Clock
    from hurlbench.engine.protocol import RequestExecutor, WorkerReport
    from hurlbench.metrics.models import RunResult

logger = get_logger("engine.runner")


def _install_uvloop() -> None:
    """Install uvloop as the default event loop policy if available.

    Falls back silently to the default asyncio event loop on Windows
    or if uvloop is not installed.
    """
    if sys.platform == "win32":
        return

    try:
        import uvloop

        uvloop.install()
        logger.debug("uvloop installed as event loop policy")
    except ImportError:
        logger.debug("uvloop not available, using default asyncio event loop")


class BenchmarkRunner:
    """Drives a single benchmark run end-to-end.

    Computes the deadline, starts ``parallelism`` workers against the shared
    workload, waits for every one of them to stop, and reduces their
    accumulators into a ``RunResult``. Workers share nothing mutable while
    running; the only synchronization point is the final join.

    Attributes:
        run_config: Duration and parallelism of the run.
        workload: Requests replayed by every worker.
    """

    def __init__(
        self,
        run_config: RunConfig,
        workload: Workload,
        *,
        config: HurlbenchConfig | None = None,
        executor_factory: Callable[[int], RequestExecutor] | None = None,
        on_progress: Callable[[ProgressSnapshot], None] | None = None,
        progress_interval: float = 1.0,
        log_level: int = 20,
        clock: Clock = time.monotonic,
    ) -> None:
        """Initialize the runner.

        Args:
            run_config: Validated duration and parallelism.
            workload: Non-empty workload shared by all workers.
            config: Global configuration. Defaults to ``HurlbenchConfig()``.
            executor_factory: Builds one executor per worker id. Defaults to
                an ``HttpExecutor`` configured from ``config``.
            on_progress: Optional callback receiving a ``ProgressSnapshot``
                every ``progress_interval`` seconds.
            progress_interval: Seconds between progress snapshots.
            log_level: Logging level.
            clock: Monotonic time source for the deadline and timings.

        Raises:
            ConfigError: If ``run_config`` or ``workload`` is not usable.
        """
        if not isinstance(run_config, RunConfig):
            msg = f"run_config must be a RunConfig, got {type(run_config).__name__}"
            raise ConfigError(msg)
        if not isinstance(workload, Workload):
            msg = f"workload must be a Workload, got {type(workload).__name__}"
            raise ConfigError(msg)
        if progress_interval <= 0:
            msg = f"progress_interval must be positive, got {progress_interval}"
            raise ConfigError(msg)

        self.run_config = run_config
        self.workload = workload
        self._config = config or HurlbenchConfig()
        self._executor_factory = executor_factory or self._http_executor
        self._on_progress = on_progress
        self._progress_interval = progress_interval
        self._log_level = log_level
        self._clock = clock

    def _http_executor(self, worker_id: int) -> RequestExecutor:
        return HttpExecutor(
            timeout=self._config.request_timeout,
            pool_size=self._config.connection_pool_size,
            verify_ssl=self._config.verify_ssl,
        )

    def run(self) -> RunResult:
        """Execute the benchmark and return its result.

        Blocks until every worker has stopped.

        Returns:
            The final RunResult.

        Raises:
            EngineError: If a worker task died unexpectedly.
        """
        _install_uvloop()
        setup_logging(level=self._log_level)
        return asyncio.run(self.run_async())

    async def run_async(self) -> RunResult:
        """Async entry point; see ``run``."""
        duration = self.run_config.duration_seconds
        parallelism = self.run_config.parallelism
        latency_store = self._config.latency_store

        logger.info(
            "Starting benchmark: source=%s, requests=%d, duration=%.3fs, parallelism=%d",
            self.workload.source,
            len(self.workload),
            duration,
            parallelism,
        )

        async with contextlib.AsyncExitStack() as stack:
            executors: list[RequestExecutor] = []
            for worker_id in range(parallelism):
                executor = self._executor_factory(worker_id)
                if isinstance(executor, contextlib.AbstractAsyncContextManager):
                    executor = await stack.enter_async_context(executor)
                executors.append(executor)

            run_start = self._clock()
            run_deadline = deadline(run_start, duration, self._clock)
            workers = [
                Worker(
                    worker_id,
                    self.workload,
                    run_deadline,
                    executor,
                    latency_store=latency_store,
                    clock=self._clock,
                )
                for worker_id, executor in enumerate(executors)
            ]
            tasks = [
                asyncio.create_task(worker.run(), name=f"hurlbench-worker-{worker.worker_id}")
                for worker in workers
            ]

            monitor: asyncio.Task[None] | None = None
            if self._on_progress is not None:
                monitor = asyncio.create_task(
                    self._monitor(workers, run_start, self._on_progress),
                    name="hurlbench-progress",
                )

            try:
                outcomes = await asyncio.gather(*tasks, return_exceptions=True)
            finally:
                elapsed = self._clock() - run_start
                if monitor is not None:
                    monitor.cancel()
                    with contextlib.suppress(asyncio.CancelledError):
                        await monitor

        reports: list[WorkerReport] = []
        crashed: list[BaseException] = []
        for outcome in outcomes:
            if isinstance(outcome, BaseException):
                crashed.append(outcome)
            else:
                reports.append(outcome)

        if crashed:
            for exc in crashed:
                logger.error("Worker task crashed", exc_info=exc)
            msg = f"{len(crashed)} of {parallelism} worker(s) crashed: {crashed[0]!r}"
            raise EngineError(msg) from crashed[0]

        merged = merge_all(
            (report.accumulator for report in reports),
            latency_store=latency_store,
        )
        result = build_run_result(
            merged,
            reports,
            self.run_config,
            elapsed,
            workload=self.workload,
            percentile_method=self._config.percentile_method,
            run_start=run_start,
        )

        for report in reports:
            if report.aborted:
                logger.warning(
                    "Worker %d stopped early: %s", report.worker_id, report.error_message
                )

        logger.info(
            "Benchmark completed: elapsed=%.3fs, total_requests=%d, rps=%.1f, "
            "p99=%.1fms, error_rate=%.2f%%",
            result.elapsed_seconds,
            result.total_requests,
            result.throughput,
            result.latency_p99,
            result.error_rate * 100,
            extra={
                "requests": result.total_requests,
                "failures": result.failures,
                "elapsed_seconds": result.elapsed_seconds,
            },
        )
        return result

    async def _monitor(
        self,
        workers: list[Worker],
        run_start: float,
        callback: Callable[[ProgressSnapshot], None],
    ) -> None:
        """Emit progress snapshots until cancelled.

        Only reads the workers' counters, so it never slows down the hot loop.
        """
        prev_total = 0
        prev_time = run_start
        while True:
            await asyncio.sleep(self._progress_interval)
            now = self._clock()
            total = sum(w.accumulator.total_count for w in workers)
            failures = sum(w.accumulator.failure_count for w in workers)
            interval = max(now - prev_time, 1e-9)
            snapshot = ProgressSnapshot(
                elapsed_seconds=now - run_start,
                duration_seconds=self.run_config.duration_seconds,
                total_requests=total,
                failures=failures,
                requests_per_second=(total - prev_total) / interval,
            )
            prev_total, prev_time = total, now
            try:
                callback(snapshot)
            except Exception:
                logger.warning("Progress callback failed", exc_info=True)
