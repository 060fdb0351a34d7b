"""Structured logging setup for hurlbench."""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from typing import TextIO

# LogRecord attributes passed via ``extra=`` that are copied into JSON output.
_EXTRA_FIELDS = ("worker_id", "requests", "failures", "elapsed_seconds")


class _JsonFormatter(logging.Formatter):
    """Structured JSON log formatter.

    Emits one-line JSON objects with keys: timestamp, level, logger, message,
    plus any of the engine's extra fields (``worker_id``, ``requests`` ...)
    attached to the record.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format a log record as a JSON string.

        Args:
            record: The log record to format.

        Returns:
            A single-line JSON string.
        """
        log_entry: dict[str, object] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in _EXTRA_FIELDS:
            if key in record.__dict__:
                log_entry[key] = record.__dict__[key]
        if record.exc_info and record.exc_info[1] is not None:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry, default=str)


class _StderrHandler(logging.StreamHandler):
    """Stream handler bound to whatever ``sys.stderr`` is at emit time.

    The stream is read from ``sys.stderr`` on every emit, so assigning it
    (including through ``setStream()``) has no effect.
    """

    def __init__(self) -> None:
        logging.Handler.__init__(self)

    @property
    def stream(self) -> TextIO:
        return sys.stderr

    @stream.setter
    def stream(self, value: TextIO) -> None:
        pass


def setup_logging(
    level: int = logging.INFO,
    *,
    json_format: bool = False,
    stream: TextIO | None = None,
) -> logging.Logger:
    """Configure and return the root hurlbench logger.

    Installs a single stream handler on the ``hurlbench`` namespace. Calling
    it again only adjusts levels, so the runner and the CLI can both call it.

    Args:
        level: Logging level (e.g., ``logging.DEBUG``). Defaults to INFO.
        json_format: If True, emit structured JSON logs. If False, emit
            human-readable logs.
        stream: Output stream. Defaults to the current ``sys.stderr`` so
            that log lines never mix with a ``--json`` result on stdout.

    Returns:
        The configured ``hurlbench`` root logger.
    """
    logger = logging.getLogger("hurlbench")
    logger.setLevel(level)

    if logger.handlers:
        for handler in logger.handlers:
            handler.setLevel(level)
        return logger

    handler: logging.Handler = (
        logging.StreamHandler(stream) if stream is not None else _StderrHandler()
    )
    handler.setLevel(level)

    if json_format:
        formatter: logging.Formatter = _JsonFormatter()
    else:
        formatter = logging.Formatter(
            "%(asctime)s [%(levelname)-8s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    handler.setFormatter(formatter)
    logger.addHandler(handler)

    # Keep hurlbench output out of the root logger
    logger.propagate = False

    return logger


def get_logger(name: str) -> logging.Logger:
    """Return a child logger under the ``hurlbench`` namespace.

    Args:
        name: Logger name, appended to ``hurlbench.`` prefix.
            Example: ``get_logger("engine.worker")`` returns
            ``logging.getLogger("hurlbench.engine.worker")``.

    Returns:
        A configured child logger.
    """
    return logging.getLogger(f"hurlbench.{name}")


def level_from_flags(*, verbose: bool, quiet: bool = False) -> int:
    """Map CLI verbosity flags to a logging level.

    ``quiet`` wins over ``verbose``: quiet runs only surface warnings.
    """
    if quiet:
        return logging.WARNING
    return logging.DEBUG if verbose else logging.INFO
