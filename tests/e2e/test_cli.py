"""End-to-end tests for the hurlbench CLI."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from hurlbench import __version__
from hurlbench.cli.app import app

runner = CliRunner()


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def echo_file(write_hurl, sync_echo_server: str) -> Path:
    """Request file with two passing requests against the echo server."""
    return write_hurl(
        f"""\
# health check
GET {sync_echo_server}/health
HTTP 200

POST {sync_echo_server}/echo
{{"name": "widget"}}
HTTP 200
X-Echo: yes
""",
        name="echo.hurl",
    )


@pytest.fixture
def error_file(write_hurl, sync_echo_server: str) -> Path:
    """Request file whose only request always fails its status assertion."""
    return write_hurl(
        f"GET {sync_echo_server}/error?status=500\nHTTP 200\n",
        name="error.hurl",
    )


# ---------------------------------------------------------------------------
# Tests: version and help
# ---------------------------------------------------------------------------


def test_version_flag():
    """--version prints version and exits 0."""
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_version_short_flag():
    """-V also prints version."""
    result = runner.invoke(app, ["-V"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_help_output():
    """--help shows usage information."""
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    assert "hurlbench" in result.output.lower()
    for command in ("run", "check", "init"):
        assert command in result.output


def test_run_help():
    """hurlbench run --help shows run options."""
    result = runner.invoke(app, ["run", "--help"])
    assert result.exit_code == 0
    assert "--duration" in result.output
    assert "--parallelism" in result.output


# ---------------------------------------------------------------------------
# Tests: hurlbench init
# ---------------------------------------------------------------------------


def test_init_creates_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """hurlbench init creates a request file that check accepts."""
    monkeypatch.chdir(tmp_path)
    result = runner.invoke(app, ["init", "smoke"])
    assert result.exit_code == 0
    generated = tmp_path / "smoke.hurl"
    assert generated.exists()
    assert "hurlbench run smoke.hurl" in generated.read_text()

    check = runner.invoke(app, ["check", str(generated)])
    assert check.exit_code == 0, check.output
    assert "2 request(s)" in check.output


def test_init_default_name(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """hurlbench init with no name uses 'bench'."""
    monkeypatch.chdir(tmp_path)
    result = runner.invoke(app, ["init"])
    assert result.exit_code == 0
    assert (tmp_path / "bench.hurl").exists()


def test_init_rejects_existing_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """hurlbench init refuses to overwrite an existing file."""
    monkeypatch.chdir(tmp_path)
    (tmp_path / "existing.hurl").write_text("# placeholder")
    result = runner.invoke(app, ["init", "existing"])
    assert result.exit_code == 1
    assert (tmp_path / "existing.hurl").read_text() == "# placeholder"


# ---------------------------------------------------------------------------
# Tests: hurlbench check
# ---------------------------------------------------------------------------


def test_check_lists_requests(write_hurl):
    path = write_hurl("GET http://localhost/a\nHTTP 200\n\nDELETE http://localhost/b\n")
    result = runner.invoke(app, ["check", str(path)])
    assert result.exit_code == 0
    assert "1. GET http://localhost/a" in result.output
    assert "2. DELETE http://localhost/b" in result.output


def test_check_reports_parse_errors(write_hurl):
    path = write_hurl("GET http://localhost/\n[Asserts]\n", name="bad.hurl")
    result = runner.invoke(app, ["check", str(path)])
    assert result.exit_code == 1
    assert "unsupported section" in result.output


# ---------------------------------------------------------------------------
# Tests: hurlbench run
# ---------------------------------------------------------------------------


@pytest.mark.timeout(60)
def test_run_basic(echo_file: Path):
    """hurlbench run executes a request file and exits 0."""
    result = runner.invoke(
        app,
        ["run", str(echo_file), "--duration", "500m", "--parallelism", "2", "--no-progress"],
    )
    assert result.exit_code == 0, result.output
    assert "Benchmark Complete" in result.output
    assert "Per-Request Breakdown" in result.output


@pytest.mark.timeout(60)
def test_run_with_live_progress(echo_file: Path):
    result = runner.invoke(app, ["run", str(echo_file), "-d", "300m"])
    assert result.exit_code == 0, result.output


@pytest.mark.timeout(60)
def test_run_json_output(echo_file: Path):
    """--json prints the run result as a JSON document on stdout."""
    result = runner.invoke(
        app,
        ["run", str(echo_file), "-d", "300m", "-p", "2", "--json"],
    )
    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)
    assert data["parallelism"] == 2
    assert data["requested_duration_seconds"] == pytest.approx(0.3)
    assert data["total_requests"] >= 2
    assert data["failures"] == 0
    assert data["total_requests"] == data["successes"] + data["failures"]
    assert data["elapsed_seconds"] >= 0.3
    assert data["workers_completed"] == 2
    assert len(data["requests"]) == 2
    assert 0.0 <= data["first_request_offset"] <= data["last_request_offset"]


def test_run_invalid_duration(echo_file: Path):
    """An unparsable duration is a usage error."""
    result = runner.invoke(app, ["run", str(echo_file), "--duration", "10h"])
    assert result.exit_code == 2


def test_run_zero_duration(echo_file: Path):
    """0s parses but is rejected as a configuration error."""
    result = runner.invoke(app, ["run", str(echo_file), "--duration", "0s"])
    assert result.exit_code == 1
    assert "duration must be positive" in result.output


def test_run_zero_parallelism(echo_file: Path):
    result = runner.invoke(app, ["run", str(echo_file), "--parallelism", "0"])
    assert result.exit_code == 2


def test_run_bad_request_file(write_hurl):
    path = write_hurl("# nothing to send\n")
    result = runner.invoke(app, ["run", str(path), "-d", "100m"])
    assert result.exit_code == 1
    assert "no requests" in result.output


def test_run_nonexistent_file(tmp_path: Path):
    """hurlbench run with a nonexistent file exits non-zero."""
    result = runner.invoke(app, ["run", str(tmp_path / "does_not_exist.hurl")])
    assert result.exit_code != 0


def test_run_bad_env_config(echo_file: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("HURLBENCH_LATENCY_STORE", "sketch")
    result = runner.invoke(app, ["run", str(echo_file), "-d", "100m"])
    assert result.exit_code == 1
    assert "HURLBENCH_LATENCY_STORE" in result.output


# ---------------------------------------------------------------------------
# Tests: --fail-on-error-rate
# ---------------------------------------------------------------------------


@pytest.mark.timeout(60)
def test_fail_on_error_rate_triggers(error_file: Path):
    """--fail-on-error-rate exits 1 when threshold exceeded."""
    result = runner.invoke(
        app,
        ["run", str(error_file), "-d", "300m", "--no-progress", "--fail-on-error-rate", "0.01"],
    )
    assert result.exit_code == 1
    assert "exceeds threshold" in result.output


@pytest.mark.timeout(60)
def test_fail_on_error_rate_passes(echo_file: Path):
    """--fail-on-error-rate exits 0 when error rate is below threshold."""
    result = runner.invoke(
        app,
        ["run", str(echo_file), "-d", "300m", "--no-progress", "--fail-on-error-rate", "0.5"],
    )
    assert result.exit_code == 0, result.output
