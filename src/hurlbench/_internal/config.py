"""Configuration loading for hurlbench."""

from __future__ import annotations

import math
import os
from dataclasses import dataclass

from hurlbench._internal.errors import ConfigError

PERCENTILE_METHODS = ("linear", "nearest")
LATENCY_STORES = ("exact", "hdr")


@dataclass(frozen=True)
class HurlbenchConfig:
    """Global hurlbench configuration.

    Attributes:
        request_timeout: Total per-request timeout in seconds, enforced by
            the HTTP executor so that no request blocks a worker forever.
        connection_pool_size: Maximum open connections per worker. Workers
            issue requests sequentially, so one connection is enough.
        percentile_method: ``"linear"`` interpolates between samples,
            ``"nearest"`` uses the nearest-rank definition.
        latency_store: ``"exact"`` keeps every sample, ``"hdr"`` keeps a
            bounded HDR histogram.
        verify_ssl: Whether TLS certificates are verified.
    """

    request_timeout: float = 30.0
    connection_pool_size: int = 1
    percentile_method: str = "linear"
    latency_store: str = "exact"
    verify_ssl: bool = True


@dataclass(frozen=True)
class RunConfig:
    """Parameters of a single benchmark run.

    Validated on construction: an invalid run configuration is a
    configuration error and no worker is ever started for it.

    Attributes:
        duration_seconds: How long workers keep starting new requests.
        parallelism: Number of concurrent workers.

    Raises:
        ConfigError: If ``duration_seconds`` is not a positive finite number
            or ``parallelism`` is not an integer >= 1.
    """

    duration_seconds: float
    parallelism: int = 1

    def __post_init__(self) -> None:
        if isinstance(self.duration_seconds, bool) or not isinstance(
            self.duration_seconds, int | float
        ):
            msg = f"duration must be a number of seconds, got: {self.duration_seconds!r}"
            raise ConfigError(msg)
        if not math.isfinite(self.duration_seconds) or self.duration_seconds <= 0:
            msg = f"duration must be positive, got: {self.duration_seconds}"
            raise ConfigError(msg)
        if isinstance(self.parallelism, bool) or not isinstance(self.parallelism, int):
            msg = f"parallelism must be an integer, got: {self.parallelism!r}"
            raise ConfigError(msg)
        if self.parallelism < 1:
            msg = f"parallelism must be >= 1, got: {self.parallelism}"
            raise ConfigError(msg)


def load_config(*, verify_ssl: bool = True) -> HurlbenchConfig:
    """Load configuration from environment variables with defaults.

    Environment variables:
        HURLBENCH_TIMEOUT: Request timeout in seconds (default: 30.0).
        HURLBENCH_POOL_SIZE: Connections per worker (default: 1).
        HURLBENCH_PERCENTILE_METHOD: ``linear`` or ``nearest`` (default: linear).
        HURLBENCH_LATENCY_STORE: ``exact`` or ``hdr`` (default: exact).

    Args:
        verify_ssl: Whether TLS certificates are verified. Set by the CLI.

    Returns:
        Populated HurlbenchConfig instance.

    Raises:
        ConfigError: If an environment variable has an invalid value.
    """
    pool_size_str = os.environ.get("HURLBENCH_POOL_SIZE", "1")
    timeout_str = os.environ.get("HURLBENCH_TIMEOUT", "30.0")
    method = os.environ.get("HURLBENCH_PERCENTILE_METHOD", "linear").strip().lower()
    store = os.environ.get("HURLBENCH_LATENCY_STORE", "exact").strip().lower()

    try:
        pool_size = int(pool_size_str)
    except ValueError:
        msg = f"HURLBENCH_POOL_SIZE must be an integer, got: {pool_size_str!r}"
        raise ConfigError(msg) from None

    if pool_size < 1:
        msg = f"HURLBENCH_POOL_SIZE must be >= 1, got: {pool_size}"
        raise ConfigError(msg)

    try:
        timeout = float(timeout_str)
    except ValueError:
        msg = f"HURLBENCH_TIMEOUT must be a number, got: {timeout_str!r}"
        raise ConfigError(msg) from None

    if not math.isfinite(timeout) or timeout <= 0:
        msg = f"HURLBENCH_TIMEOUT must be positive, got: {timeout}"
        raise ConfigError(msg)

    if method not in PERCENTILE_METHODS:
        msg = (
            f"HURLBENCH_PERCENTILE_METHOD must be one of "
            f"{', '.join(PERCENTILE_METHODS)}, got: {method!r}"
        )
        raise ConfigError(msg)

    if store not in LATENCY_STORES:
        msg = (
            f"HURLBENCH_LATENCY_STORE must be one of "
            f"{', '.join(LATENCY_STORES)}, got: {store!r}"
        )
        raise ConfigError(msg)

    return HurlbenchConfig(
        request_timeout=timeout,
        connection_pool_size=pool_size,
        percentile_method=method,
        latency_store=store,
        verify_ssl=verify_ssl,
    )
