"""Request files: parsing, loading, and HTTP execution of their entries."""

from __future__ import annotations

from hurlbench.workload.http_client import HttpExecutor
from hurlbench.workload.loader import load_workload
from hurlbench.workload.models import RequestSpec, ResponseSpec, Workload
from hurlbench.workload.parser import parse_workload

__all__ = [
    "HttpExecutor",
    "RequestSpec",
    "ResponseSpec",
    "Workload",
    "load_workload",
    "parse_workload",
]
