"""hurlbench — time-boxed HTTP benchmarking of Hurl-style request files."""

from __future__ import annotations

from hurlbench._internal.config import HurlbenchConfig, RunConfig, load_config
from hurlbench._internal.errors import (
    ConfigError,
    EngineError,
    FatalExecutionError,
    HurlbenchError,
    WorkloadError,
)
from hurlbench.engine.runner import BenchmarkRunner
from hurlbench.metrics.models import Failure, FailureKind, RunResult, Success
from hurlbench.workload.http_client import HttpExecutor
from hurlbench.workload.loader import load_workload
from hurlbench.workload.models import RequestSpec, ResponseSpec, Workload
from hurlbench.workload.parser import parse_workload

__version__ = "0.1.0"

__all__ = [
    "BenchmarkRunner",
    "ConfigError",
    "EngineError",
    "Failure",
    "FailureKind",
    "FatalExecutionError",
    "HttpExecutor",
    "HurlbenchConfig",
    "HurlbenchError",
    "RequestSpec",
    "ResponseSpec",
    "RunConfig",
    "RunResult",
    "Success",
    "Workload",
    "WorkloadError",
    "load_config",
    "load_workload",
    "parse_workload",
]
