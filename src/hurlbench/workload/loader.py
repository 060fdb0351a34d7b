"""Request-file loading."""

from __future__ import annotations

from pathlib import Path

from hurlbench._internal.errors import WorkloadError
from hurlbench._internal.logging import get_logger
from hurlbench.workload.models import Workload
from hurlbench.workload.parser import parse_workload

logger = get_logger("workload.loader")


def load_workload(file_path: str | Path) -> Workload:
    """Load and parse a request file.

    Any failure here is a configuration error: the run must not start.

    Args:
        file_path: Path to the Hurl-style request file.

    Returns:
        The parsed, non-empty workload.

    Raises:
        WorkloadError: If the file does not exist, cannot be read, is not
            valid UTF-8, fails to parse, or contains no request.
    """
    path = Path(file_path)

    if not path.is_file():
        msg = f"Request file not found: {path}"
        raise WorkloadError(msg)

    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        msg = f"Request file is not valid UTF-8: {path} ({exc.reason})"
        raise WorkloadError(msg) from exc
    except OSError as exc:
        msg = f"Could not read request file {path}: {exc.strerror or exc}"
        raise WorkloadError(msg) from exc

    workload = parse_workload(text, source=str(path))
    logger.debug("Loaded %d request(s) from %s", len(workload), path)
    return workload
