"""Monotonic run deadline."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from hurlbench._internal.types import Clock


@dataclass(frozen=True)
class Deadline:
    """The monotonic instant after which workers stop starting requests.

    Attributes:
        at: Deadline on the ``clock`` timeline, in seconds.
        clock: Monotonic time source. Never wall-clock time, so adjustments
            to the system clock cannot stretch or shrink a run.
    """

    at: float
    clock: Clock = field(default=time.monotonic, compare=False, repr=False)

    def expired(self, now: float | None = None) -> bool:
        """Return True once ``now`` has reached the deadline."""
        if now is None:
            now = self.clock()
        return now >= self.at

    def remaining(self, now: float | None = None) -> float:
        """Seconds left until the deadline, never negative."""
        if now is None:
            now = self.clock()
        return max(self.at - now, 0.0)


def deadline(now: float, duration_seconds: float, clock: Clock = time.monotonic) -> Deadline:
    """Compute the deadline ``duration_seconds`` after ``now``.

    Pure: reads no clock itself. ``clock`` is only stored for later
    ``expired()`` checks and must be the source ``now`` came from.
    """
    return Deadline(at=now + duration_seconds, clock=clock)
