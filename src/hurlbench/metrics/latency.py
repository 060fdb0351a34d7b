"""Mergeable latency stores used by the metrics accumulator."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

import numpy as np

from hurlbench.metrics.histogram import HdrLatencies

if TYPE_CHECKING:
    from collections.abc import Sequence

# numpy names for the supported percentile definitions.
_NUMPY_METHODS = {
    "linear": "linear",
    "nearest": "inverted_cdf",
}


class LatencyStore(Protocol):
    """Interface shared by the exact and HDR latency stores."""

    kind: str

    def __len__(self) -> int: ...

    def record(self, latency_ms: float) -> None: ...

    def merged(self, other: LatencyStore) -> LatencyStore: ...

    def percentiles(self, percentiles: Sequence[float], method: str = "linear") -> list[float]: ...


class ExactLatencies:
    """Latency store that keeps every sample.

    Percentiles are computed exactly over the full sample set. Since they
    depend only on the multiset of values, concatenating stores in any
    order gives identical results.
    """

    kind = "exact"

    def __init__(self, values: Sequence[float] = ()) -> None:
        self._values: list[float] = list(values)

    def __len__(self) -> int:
        return len(self._values)

    def record(self, latency_ms: float) -> None:
        self._values.append(latency_ms)

    def merged(self, other: LatencyStore) -> ExactLatencies:
        """Return a new store holding the samples of both stores.

        Raises:
            ValueError: If ``other`` is not an exact store.
        """
        if not isinstance(other, ExactLatencies):
            msg = f"cannot merge latency stores of kind {self.kind!r} and {other.kind!r}"
            raise ValueError(msg)
        return ExactLatencies(self._values + other._values)

    def percentiles(self, percentiles: Sequence[float], method: str = "linear") -> list[float]:
        """Return latency values (ms) at the given percentiles.

        Args:
            percentiles: Percentiles in the range 0 to 100.
            method: ``"linear"`` (interpolated) or ``"nearest"`` (nearest rank).

        Returns:
            One value per requested percentile, all 0.0 if the store is empty.

        Raises:
            ValueError: If ``method`` is unknown.
        """
        try:
            numpy_method = _NUMPY_METHODS[method]
        except KeyError:
            msg = f"unknown percentile method: {method!r}"
            raise ValueError(msg) from None
        if not self._values:
            return [0.0 for _ in percentiles]
        arr = np.array(self._values, dtype=np.float64)
        result = np.percentile(arr, list(percentiles), method=numpy_method)
        return [float(v) for v in result]


def create_latency_store(kind: str = "exact") -> LatencyStore:
    """Build an empty latency store of the given kind.

    Raises:
        ValueError: If ``kind`` is neither ``"exact"`` nor ``"hdr"``.
    """
    if kind == "exact":
        return ExactLatencies()
    if kind == "hdr":
        return HdrLatencies()
    msg = f"unknown latency store: {kind!r}"
    raise ValueError(msg)
