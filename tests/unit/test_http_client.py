"""Tests for response checking and the aiohttp request executor."""

from __future__ import annotations

import pytest

from hurlbench.metrics.models import Failure, FailureKind, Success
from hurlbench.workload.http_client import HttpExecutor, check_response
from hurlbench.workload.models import RequestSpec, ResponseSpec


class TestCheckResponse:
    def test_no_expectation_accepts_any_status(self):
        assert check_response(None, 503, {}) == Success(status_code=503)

    def test_matching_status(self):
        assert check_response(ResponseSpec(status=200), 200, {}) == Success(status_code=200)

    def test_wildcard_status(self):
        assert isinstance(check_response(ResponseSpec(status=None), 418, {}), Success)

    def test_status_mismatch(self):
        outcome = check_response(ResponseSpec(status=200), 500, {})
        assert outcome == Failure(FailureKind.ASSERTION, "expected status 200, got 500")

    def test_header_names_are_case_insensitive(self):
        expect = ResponseSpec(status=200, headers=(("content-type", "application/json"),))
        headers = {"Content-Type": "application/json"}
        assert isinstance(check_response(expect, 200, headers), Success)

    def test_missing_header(self):
        expect = ResponseSpec(headers=(("X-Request-Id", "1"),))
        outcome = check_response(expect, 200, {})
        assert isinstance(outcome, Failure)
        assert outcome.kind is FailureKind.ASSERTION
        assert "missing response header X-Request-Id" in outcome.message

    def test_header_value_mismatch(self):
        expect = ResponseSpec(headers=(("X-Mode", "fast"),))
        outcome = check_response(expect, 200, {"x-mode": "slow"})
        assert isinstance(outcome, Failure)
        assert outcome.message == "expected header X-Mode: 'fast', got 'slow'"


class TestHttpExecutor:
    async def test_successful_get(self, echo_server: str):
        spec = RequestSpec(
            method="GET",
            url=f"{echo_server}/echo/items",
            expect=ResponseSpec(status=200, headers=(("X-Echo", "yes"),)),
        )
        async with HttpExecutor() as executor:
            outcome = await executor.execute(spec)
        assert outcome == Success(status_code=200)

    async def test_sends_headers_and_body(self, echo_server: str):
        spec = RequestSpec(
            method="POST",
            url=f"{echo_server}/echo",
            headers=(("Content-Type", "application/json"),),
            body=b'{"a": 1}',
            expect=ResponseSpec(status=200),
        )
        async with HttpExecutor() as executor:
            outcome = await executor.execute(spec)
        assert isinstance(outcome, Success)

    async def test_error_status_without_expectation_is_success(self, echo_server: str):
        spec = RequestSpec(method="GET", url=f"{echo_server}/error?status=500")
        async with HttpExecutor() as executor:
            outcome = await executor.execute(spec)
        assert outcome == Success(status_code=500)

    async def test_error_status_with_expectation_is_assertion_failure(self, echo_server: str):
        spec = RequestSpec(
            method="GET",
            url=f"{echo_server}/error?status=503",
            expect=ResponseSpec(status=200),
        )
        async with HttpExecutor() as executor:
            outcome = await executor.execute(spec)
        assert outcome == Failure(FailureKind.ASSERTION, "expected status 200, got 503")

    @pytest.mark.timeout(30)
    async def test_timeout(self, echo_server: str):
        spec = RequestSpec(method="GET", url=f"{echo_server}/delay?delay=2")
        async with HttpExecutor(timeout=0.2) as executor:
            outcome = await executor.execute(spec)
        assert isinstance(outcome, Failure)
        assert outcome.kind is FailureKind.TIMEOUT

    async def test_connection_refused(self, closed_port_url: str):
        spec = RequestSpec(method="GET", url=closed_port_url)
        async with HttpExecutor(timeout=5.0) as executor:
            outcome = await executor.execute(spec)
        assert isinstance(outcome, Failure)
        assert outcome.kind is FailureKind.CONNECTION

    async def test_execute_outside_context_raises(self):
        executor = HttpExecutor()
        with pytest.raises(RuntimeError, match="async context manager"):
            await executor.execute(RequestSpec(method="GET", url="http://localhost/"))

    async def test_session_is_closed_on_exit(self, echo_server: str):
        executor = HttpExecutor()
        async with executor:
            await executor.execute(RequestSpec(method="GET", url=f"{echo_server}/health"))
        with pytest.raises(RuntimeError):
            await executor.execute(RequestSpec(method="GET", url=f"{echo_server}/health"))
