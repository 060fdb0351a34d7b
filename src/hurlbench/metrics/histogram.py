"""HDR histogram latency store.

A bounded, mergeable alternative to keeping every sample. Works in
milliseconds at the API and stores integer microseconds in the
underlying ``hdrh.histogram.HdrHistogram``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from hdrh.histogram import HdrHistogram  # type: ignore[import-untyped]

if TYPE_CHECKING:
    from collections.abc import Sequence

# Range: 1 microsecond to 60 seconds (in microseconds)
_LOWEST_TRACKABLE_US = 1
_HIGHEST_TRACKABLE_US = 60_000_000
_SIGNIFICANT_DIGITS = 3


class HdrLatencies:
    """Latency store backed by an HDR histogram.

    Values outside ``[lowest_us, highest_us]`` are clamped into range.
    Percentiles are accurate to the configured number of significant
    digits, and merging two stores adds their bucket counts, so merge order
    never changes the result.

    Attributes:
        kind: Store identifier, always ``"hdr"``.
        lowest_us: Lowest trackable value in microseconds.
        highest_us: Highest trackable value in microseconds.
    """

    kind = "hdr"

    def __init__(
        self,
        lowest_us: int = _LOWEST_TRACKABLE_US,
        highest_us: int = _HIGHEST_TRACKABLE_US,
        significant_digits: int = _SIGNIFICANT_DIGITS,
    ) -> None:
        self.lowest_us = lowest_us
        self.highest_us = highest_us
        self._significant_digits = significant_digits
        self._histogram: HdrHistogram = HdrHistogram(  # type: ignore[no-any-unimported]
            lowest_us, highest_us, significant_digits
        )

    def __len__(self) -> int:
        return int(self._histogram.total_count)

    def record(self, latency_ms: float) -> None:
        """Record one latency value in milliseconds."""
        value_us = int(latency_ms * 1000)
        value_us = max(self.lowest_us, min(value_us, self.highest_us))
        self._histogram.record_value(value_us)

    def merged(self, other: HdrLatencies) -> HdrLatencies:
        """Return a new store holding the values of both stores.

        Raises:
            ValueError: If ``other`` is not an HDR store.
        """
        if not isinstance(other, HdrLatencies):
            msg = f"cannot merge latency stores of kind {self.kind!r} and {other.kind!r}"
            raise ValueError(msg)
        result = HdrLatencies(self.lowest_us, self.highest_us, self._significant_digits)
        result._histogram.add(self._histogram)
        result._histogram.add(other._histogram)
        return result

    def percentiles(self, percentiles: Sequence[float], method: str = "linear") -> list[float]:
        """Return latency values (ms) at the given percentiles.

        ``method`` is accepted for interface parity and ignored: the
        histogram defines its own quantile semantics.
        """
        if self._histogram.total_count == 0:
            return [0.0 for _ in percentiles]
        return [
            float(self._histogram.get_value_at_percentile(p)) / 1000.0 for p in percentiles
        ]
