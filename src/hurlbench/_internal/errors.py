"""Custom exception hierarchy for hurlbench."""

from __future__ import annotations


class HurlbenchError(Exception):
    """Base exception for all hurlbench errors.

    All custom exceptions raised by hurlbench inherit from this class,
    making it easy to catch any hurlbench-specific error with a single
    except clause.
    """


class ConfigError(HurlbenchError):
    """Raised when configuration is invalid or missing.

    A configuration error always prevents a run from starting.

    Examples:
        - Requested duration is zero or negative.
        - Parallelism is lower than one.
        - An environment variable has an invalid value.
    """


class WorkloadError(ConfigError):
    """Raised when a request file cannot be turned into a workload.

    Examples:
        - The file does not exist or is not valid UTF-8.
        - A line cannot be parsed, or uses an unsupported Hurl feature.
        - The file contains no requests.
    """


class FatalExecutionError(HurlbenchError):
    """Raised by a request executor for a condition it cannot recover from.

    Aborts the worker that hit it. Other workers keep running and the
    aborted worker's partial results are still reported.
    """


class EngineError(HurlbenchError):
    """Raised when the benchmark engine itself misbehaves.

    Examples:
        - A sample is recorded into a frozen accumulator.
        - A worker task dies with an unexpected exception.
    """
