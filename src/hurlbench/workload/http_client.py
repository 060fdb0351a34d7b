"""aiohttp-backed request executor that classifies every outcome."""

from __future__ import annotations

from typing import TYPE_CHECKING

import aiohttp

from hurlbench._internal.errors import FatalExecutionError
from hurlbench.metrics.models import Failure, FailureKind, Success

if TYPE_CHECKING:
    from collections.abc import Mapping

    from hurlbench.metrics.models import Outcome
    from hurlbench.workload.models import RequestSpec, ResponseSpec


def check_response(
    expect: ResponseSpec | None,
    status: int,
    headers: Mapping[str, str],
) -> Outcome:
    """Evaluate response assertions.

    Without assertions, any completed response is a success.

    Args:
        expect: Assertions from the request file, or None.
        status: Response status code.
        headers: Response headers (case-insensitive mapping).

    Returns:
        ``Success`` or ``Failure(ASSERTION, ...)``.
    """
    if expect is None:
        return Success(status_code=status)

    if expect.status is not None and status != expect.status:
        return Failure(FailureKind.ASSERTION, f"expected status {expect.status}, got {status}")

    lowered = {k.lower(): v for k, v in headers.items()}
    for name, value in expect.headers:
        actual = lowered.get(name.lower())
        if actual is None:
            return Failure(FailureKind.ASSERTION, f"missing response header {name}")
        if actual != value:
            return Failure(
                FailureKind.ASSERTION,
                f"expected header {name}: {value!r}, got {actual!r}",
            )

    return Success(status_code=status)


class HttpExecutor:
    """Executes request specs over a private ``aiohttp.ClientSession``.

    One executor belongs to one worker, so connections are reused within a
    worker and never shared across workers. The per-request timeout comes
    from the session's total timeout, which means no call can block forever.

    Transport errors become ``Failure`` values. Only an invalid URL is
    treated as fatal, since retrying it can never succeed.
    """

    def __init__(
        self,
        *,
        timeout: float = 30.0,
        pool_size: int = 1,
        verify_ssl: bool = True,
    ) -> None:
        """Initialize the executor.

        Args:
            timeout: Total per-request timeout in seconds.
            pool_size: Maximum open connections.
            verify_ssl: Whether TLS certificates are verified.
        """
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._pool_size = pool_size
        self._verify_ssl = verify_ssl
        self._session: aiohttp.ClientSession | None = None

    async def __aenter__(self) -> HttpExecutor:
        """Open the underlying aiohttp session."""
        if self._verify_ssl:
            connector = aiohttp.TCPConnector(limit=self._pool_size)
        else:
            connector = aiohttp.TCPConnector(limit=self._pool_size, ssl=False)
        self._session = aiohttp.ClientSession(timeout=self._timeout, connector=connector)
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object | None,
    ) -> None:
        """Close the underlying aiohttp session."""
        if self._session is not None:
            await self._session.close()
            self._session = None

    async def execute(self, spec: RequestSpec) -> Outcome:
        """Send one request, read the full response, and classify it.

        Args:
            spec: The request to send.

        Returns:
            ``Success`` or ``Failure``.

        Raises:
            RuntimeError: If called outside the async context manager.
            FatalExecutionError: If the URL is not usable at all.
        """
        if self._session is None:
            msg = "HttpExecutor must be used as an async context manager"
            raise RuntimeError(msg)

        try:
            async with self._session.request(
                spec.method,
                spec.url,
                headers=list(spec.headers),
                data=spec.body,
            ) as resp:
                # Drain the body so timing covers the whole transfer
                await resp.read()
                return check_response(spec.expect, resp.status, resp.headers)
        except aiohttp.InvalidURL as exc:
            msg = f"invalid URL {spec.url!r}: {exc}"
            raise FatalExecutionError(msg) from exc
        except TimeoutError as exc:
            return Failure(FailureKind.TIMEOUT, f"{type(exc).__name__}: {exc}")
        except aiohttp.ClientConnectionError as exc:
            return Failure(FailureKind.CONNECTION, f"{type(exc).__name__}: {exc}")
        except aiohttp.ClientError as exc:
            return Failure(FailureKind.PROTOCOL, f"{type(exc).__name__}: {exc}")
