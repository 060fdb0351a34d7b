"""Parser for the subset of the Hurl file format that hurlbench replays.

Supported per entry::

    # comment
    POST https://api.example.com/items
    Authorization: Bearer abc
    {
      "name": "widget"
    }
    HTTP 201
    Content-Type: application/json

A request line, optional request headers, an optional raw or fenced
(```` ``` ````) body, and an optional response section with a status
(``HTTP 200`` or ``HTTP *``) and exact-match response headers. Sections such
as ``[Asserts]`` and ``{{ placeholders }}`` are rejected.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from urllib.parse import urlsplit

from hurlbench._internal.errors import WorkloadError
from hurlbench.workload.models import RequestSpec, ResponseSpec, Workload

METHODS = ("GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS")

_REQUEST_LINE = re.compile(rf"^({'|'.join(METHODS)})\s+(\S+)$")
_RESPONSE_LINE = re.compile(r"^HTTP(?:/[0-9.]+)?\s+([0-9]{3}|\*)$")
_HEADER_LINE = re.compile(r"^([!#$%&'*+.^_`|~0-9A-Za-z-]+)\s*:\s*(.*)$")
_SECTION_LINE = re.compile(r"^\[[A-Za-z]+\]$")
_FENCE_OPEN = re.compile(r"^```[A-Za-z]*$")
_FENCE_CLOSE = "```"
_PLACEHOLDER = "{{"


@dataclass
class _Entry:
    """Mutable state of the entry being parsed."""

    method: str
    url: str
    line: int
    state: str = "headers"  # headers -> body -> response
    headers: list[tuple[str, str]] = field(default_factory=list)
    body_lines: list[str] = field(default_factory=list)
    fence_line: int | None = None
    fenced: bool = False
    in_fence: bool = False
    status: int | None = None
    response_headers: list[tuple[str, str]] = field(default_factory=list)
    has_response: bool = False


def _error(source: str, line: int, message: str) -> WorkloadError:
    return WorkloadError(f"{source}:{line}: {message}")


def _check_no_placeholder(value: str, source: str, line: int) -> None:
    if _PLACEHOLDER in value:
        raise _error(source, line, f"placeholders are not supported: {value!r}")


def _finish(entry: _Entry, source: str) -> RequestSpec:
    """Validate a parsed entry and freeze it into a RequestSpec."""
    if entry.in_fence:
        raise _error(source, entry.fence_line or entry.line, "unterminated multiline body")

    _check_no_placeholder(entry.url, source, entry.line)
    parts = urlsplit(entry.url)
    if parts.scheme not in ("http", "https") or not parts.netloc:
        raise _error(source, entry.line, f"expected an absolute http(s) URL, got {entry.url!r}")

    for name, value in entry.headers + entry.response_headers:
        _check_no_placeholder(f"{name}: {value}", source, entry.line)

    headers = list(entry.headers)
    body: bytes | None = None
    text = "\n".join(entry.body_lines).strip("\n")
    if text.strip():
        _check_no_placeholder(text, source, entry.line)
        has_content_type = any(name.lower() == "content-type" for name, _ in headers)
        if not entry.fenced and text.lstrip()[0] in "{[" and not has_content_type:
            headers.append(("Content-Type", "application/json"))
        body = text.encode("utf-8")

    expect = None
    if entry.has_response:
        expect = ResponseSpec(status=entry.status, headers=tuple(entry.response_headers))

    return RequestSpec(
        method=entry.method,
        url=entry.url,
        headers=tuple(headers),
        body=body,
        expect=expect,
        line=entry.line,
    )


def parse_workload(text: str, *, source: str = "<string>") -> Workload:
    """Parse request-file text into a workload.

    Args:
        text: File contents.
        source: Name used in error messages and stored on the workload.

    Returns:
        The workload, with requests in file order.

    Raises:
        WorkloadError: On the first syntax error, on an unsupported feature,
            or if the text contains no request.
    """
    specs: list[RequestSpec] = []
    entry: _Entry | None = None

    for lineno, raw in enumerate(text.splitlines(), start=1):
        line = raw.strip()

        if entry is not None and entry.in_fence:
            if line == _FENCE_CLOSE:
                entry.in_fence = False
            else:
                entry.body_lines.append(raw)
            continue

        if not line or line.startswith("#"):
            if entry is not None and entry.state == "body" and not line:
                entry.body_lines.append("")
            continue

        match = _REQUEST_LINE.match(line)
        if match:
            if entry is not None:
                specs.append(_finish(entry, source))
            entry = _Entry(method=match.group(1), url=match.group(2), line=lineno)
            continue

        if entry is None:
            raise _error(source, lineno, f"expected a request line (METHOD URL), got {line!r}")

        match = _RESPONSE_LINE.match(line)
        if match:
            if entry.has_response:
                raise _error(source, lineno, "duplicate response section")
            entry.state = "response"
            entry.has_response = True
            status = match.group(1)
            entry.status = None if status == "*" else int(status)
            continue

        if _SECTION_LINE.match(line):
            raise _error(source, lineno, f"unsupported section {line}")

        if entry.state == "response":
            match = _HEADER_LINE.match(line)
            if match is None:
                raise _error(source, lineno, f"expected a response header, got {line!r}")
            entry.response_headers.append((match.group(1), match.group(2).strip()))
            continue

        if entry.state == "headers":
            match = _HEADER_LINE.match(line)
            if match:
                entry.headers.append((match.group(1), match.group(2).strip()))
                continue
            entry.state = "body"

        if _FENCE_OPEN.match(line):
            if entry.body_lines or entry.fenced:
                raise _error(source, lineno, "a multiline body must be the whole body")
            entry.fenced = True
            entry.in_fence = True
            entry.fence_line = lineno
            continue
        if entry.fenced:
            raise _error(source, lineno, f"unexpected line after multiline body: {line!r}")
        entry.body_lines.append(raw)

    if entry is not None:
        specs.append(_finish(entry, source))

    return Workload(requests=tuple(specs), source=source)
