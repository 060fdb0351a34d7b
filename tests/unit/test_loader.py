"""Tests for request-file loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from hurlbench._internal.errors import WorkloadError
from hurlbench.workload.loader import load_workload


class TestLoadWorkload:
    def test_loads_file(self, write_hurl):
        path = write_hurl("GET http://localhost/a\n\nGET http://localhost/b\n")
        workload = load_workload(path)
        assert len(workload) == 2
        assert workload.source == str(path)

    def test_accepts_string_path(self, write_hurl):
        path = write_hurl("GET http://localhost/\n")
        assert len(load_workload(str(path))) == 1

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(WorkloadError, match="Request file not found"):
            load_workload(tmp_path / "nope.hurl")

    def test_directory_is_not_a_file(self, tmp_path: Path):
        with pytest.raises(WorkloadError, match="Request file not found"):
            load_workload(tmp_path)

    def test_invalid_utf8(self, tmp_path: Path):
        path = tmp_path / "binary.hurl"
        path.write_bytes(b"GET http://localhost/\n\xff\xfe\n")
        with pytest.raises(WorkloadError, match="not valid UTF-8"):
            load_workload(path)

    def test_empty_file(self, write_hurl):
        with pytest.raises(WorkloadError, match="no requests"):
            load_workload(write_hurl(""))

    def test_parse_error_names_the_file(self, write_hurl):
        path = write_hurl("GET http://localhost/\nHTTP 200\nHTTP 200\n", name="dup.hurl")
        with pytest.raises(WorkloadError, match=r"dup\.hurl:3: duplicate response"):
            load_workload(path)


class TestBundledExamples:
    @pytest.mark.parametrize(
        "path",
        sorted((Path(__file__).parents[2] / "examples").glob("*.hurl")),
        ids=lambda p: p.name,
    )
    def test_example_parses(self, path: Path):
        assert len(load_workload(path)) >= 1
