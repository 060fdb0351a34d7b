"""Request and workload definitions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from hurlbench._internal.errors import WorkloadError

if TYPE_CHECKING:
    from hurlbench._internal.types import HeaderPairs


@dataclass(frozen=True)
class ResponseSpec:
    """Assertions on the response of a request.

    Attributes:
        status: Expected HTTP status code, or None to accept any status.
        headers: Expected response headers. Names match case-insensitively,
            values must match exactly.
    """

    status: int | None = None
    headers: HeaderPairs = ()


@dataclass(frozen=True)
class RequestSpec:
    """One request of a workload.

    Attributes:
        method: HTTP method in upper case.
        url: Absolute ``http://`` or ``https://`` URL.
        headers: Request headers in file order.
        body: Raw request body, or None.
        expect: Response assertions, or None if any completed response counts
            as a success.
        line: Line of the request in its source file (1-based, 0 if unknown).
    """

    method: str
    url: str
    headers: HeaderPairs = ()
    body: bytes | None = None
    expect: ResponseSpec | None = None
    line: int = 0

    @property
    def label(self) -> str:
        """Short display name: ``"METHOD URL"``."""
        return f"{self.method} {self.url}"

    def describe(self) -> str:
        """Return a one-line human-readable description."""
        body = f"{len(self.body)} byte body" if self.body is not None else "no body"
        parts = [self.label, f"{len(self.headers)} headers", body]
        if self.expect is not None:
            status = "*" if self.expect.status is None else str(self.expect.status)
            parts.append(f"expects HTTP {status}")
        return ", ".join(parts)


@dataclass(frozen=True)
class Workload:
    """Ordered, immutable sequence of requests replayed by every worker.

    Attributes:
        requests: The requests in replay order.
        source: Where the workload came from (file path or ``"<string>"``).

    Raises:
        WorkloadError: If ``requests`` is empty.
    """

    requests: tuple[RequestSpec, ...]
    source: str = "<string>"

    def __post_init__(self) -> None:
        if not isinstance(self.requests, tuple):
            object.__setattr__(self, "requests", tuple(self.requests))
        if not self.requests:
            msg = f"{self.source}: workload contains no requests"
            raise WorkloadError(msg)

    def __len__(self) -> int:
        return len(self.requests)

    def __getitem__(self, index: int) -> RequestSpec:
        return self.requests[index]
