"""Shared type aliases for hurlbench."""

from __future__ import annotations

from collections.abc import Callable

# Ordered (name, value) header pairs; order and duplicates are preserved.
HeaderPairs = tuple[tuple[str, str], ...]

# Monotonic time source returning seconds.
Clock = Callable[[], float]
