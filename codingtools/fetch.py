"""The fetch tool: make a raw HTTP request and report status, headers and body."""

from __future__ import annotations

import http.client
import threading
import time
import urllib.request
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional
from urllib.error import HTTPError, URLError

from codingtools.results import (
    AgentTool,
    TextContent,
    ToolError,
    ToolResult,
    UpdateCallback,
)
from codingtools.truncate import format_size, truncate_head

USER_AGENT = "gcode/1.0"
DEFAULT_TIMEOUT = 30
MAX_REDIRECTS = 10
_POLL_INTERVAL = 0.01

_TEXTUAL_APPLICATION_TYPES = frozenset(
    {
        "application/json",
        "application/xml",
        "application/xhtml+xml",
        "application/javascript",
        "application/x-www-form-urlencoded",
    }
)

FETCH_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "url": {"type": "string", "description": "URL to fetch"},
        "method": {"type": "string", "description": "HTTP method. Default: GET"},
        "headers": {
            "type": "object",
            "description": "Request headers",
            "additionalProperties": {"type": "string"},
        },
        "body": {"type": "string", "description": "Request body"},
        "timeout": {
            "type": "integer",
            "description": "Timeout in seconds. Default: 30",
        },
    },
    "required": ["url"],
}


def _string(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ToolError(f"params: {key} must be a string")
    return value


@dataclass(frozen=True)
class FetchParams:
    """Arguments of the fetch tool."""

    url: str
    method: str = ""
    headers: Mapping[str, str] = field(default_factory=dict)
    body: str = ""
    timeout: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FetchParams":
        """Build parameters from decoded tool arguments."""
        raw_headers = data.get("headers") or {}
        if not isinstance(raw_headers, Mapping):
            raise ToolError("params: headers must be an object")
        headers: dict[str, str] = {}
        for name, value in raw_headers.items():
            if not isinstance(name, str) or not isinstance(value, str):
                raise ToolError("params: header names and values must be strings")
            headers[name] = value
        timeout = data.get("timeout")
        if timeout is not None:
            if isinstance(timeout, bool):
                raise ToolError("params: timeout must be an integer")
            if isinstance(timeout, float) and timeout.is_integer():
                timeout = int(timeout)
            if not isinstance(timeout, int):
                raise ToolError("params: timeout must be an integer")
        return cls(
            url=_string(data, "url"),
            method=_string(data, "method"),
            headers=headers,
            body=_string(data, "body"),
            timeout=timeout,
        )


def is_binary_content_type(content_type: str) -> bool:
    """Tell whether a Content-Type names something other than text."""
    media = content_type.lower()
    if not media:
        return False
    media = media.split(";", 1)[0].strip()
    if media.startswith("text/"):
        return False
    if media in _TEXTUAL_APPLICATION_TYPES:
        return False
    if media.endswith("+json") or media.endswith("+xml"):
        return False
    return True


def _canonical_header(name: str) -> str:
    return "-".join(part[:1].upper() + part[1:].lower() for part in name.split("-"))


@dataclass(frozen=True)
class _Response:
    version: int
    status: int
    reason: str
    headers: list[tuple[str, str]]
    body: bytes

    @property
    def proto(self) -> str:
        return "HTTP/1.0" if self.version == 10 else "HTTP/1.1"

    def header(self, name: str) -> str:
        wanted = _canonical_header(name)
        for key, value in self.headers:
            if _canonical_header(key) == wanted:
                return value
        return ""


class _RedirectHandler(urllib.request.HTTPRedirectHandler):
    max_repeats = MAX_REDIRECTS
    max_redirections = MAX_REDIRECTS

    def http_error_302(self, req, fp, code, msg, headers):  # noqa: D401 - urllib hook
        followed = sum(getattr(req, "redirect_dict", {}).values())
        if followed + 1 >= MAX_REDIRECTS:
            fp.close()
            raise ToolError(f"fetch: http: stopped after {followed + 1} redirects")
        return super().http_error_302(req, fp, code, msg, headers)

    http_error_301 = http_error_303 = http_error_307 = http_error_308 = http_error_302


def _read_body(source) -> bytes:
    try:
        return source.read()
    except (OSError, http.client.HTTPException) as exc:
        raise ToolError(f"fetch: read body: {exc}") from exc
    finally:
        source.close()


def _perform(request: urllib.request.Request, timeout: float) -> _Response:
    opener = urllib.request.build_opener(_RedirectHandler)
    try:
        response = opener.open(request, timeout=timeout)
    except HTTPError as exc:
        headers = list(exc.headers.items()) if exc.headers is not None else []
        return _Response(
            version=getattr(exc.fp, "version", 11),
            status=exc.code,
            reason=str(exc.reason),
            headers=headers,
            body=_read_body(exc),
        )
    except (URLError, OSError, http.client.HTTPException, ValueError) as exc:
        raise ToolError(f"fetch: http: {exc}") from exc
    return _Response(
        version=getattr(response, "version", 11),
        status=response.status,
        reason=response.reason,
        headers=list(response.headers.items()),
        body=_read_body(response),
    )


def _perform_bounded(
    request: urllib.request.Request,
    timeout: float,
    signal: Optional[threading.Event],
) -> _Response:
    outcome: dict[str, Any] = {}
    done = threading.Event()

    def run() -> None:
        try:
            outcome["response"] = _perform(request, timeout)
        except Exception as exc:  # re-raised in the calling thread
            outcome["error"] = exc
        finally:
            done.set()

    threading.Thread(target=run, name="fetch", daemon=True).start()

    deadline = time.monotonic() + timeout
    while True:
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            raise ToolError("fetch: http: context deadline exceeded")
        wait = min(remaining, _POLL_INTERVAL) if signal is not None else remaining
        if done.wait(wait):
            break
        if signal is not None and signal.is_set():
            raise ToolError("fetch: http: context canceled")

    error = outcome.get("error")
    if error is not None:
        raise error
    return outcome["response"]


def _format_result(response: _Response, body: str, truncated_hint: str, binary_hint: str) -> str:
    grouped: dict[str, list[str]] = {}
    for name, value in response.headers:
        grouped.setdefault(_canonical_header(name), []).append(value)

    lines = [f"{response.proto} {response.status} {response.reason}"]
    lines.extend(
        f"{name}: {value}" for name in sorted(grouped) for value in grouped[name]
    )
    head = "\n".join(lines) + "\n\n"
    if binary_hint:
        return head + binary_hint
    return head + body + truncated_hint


def execute_fetch(params: FetchParams, signal: Optional[threading.Event] = None) -> ToolResult:
    """Make the request described by params and render the response."""
    if not params.url:
        raise ToolError("fetch: url is empty")
    method = params.method.strip().upper() or "GET"
    timeout = params.timeout if params.timeout is not None and params.timeout > 0 else DEFAULT_TIMEOUT

    data = params.body.encode("utf-8") if params.body else None
    try:
        request = urllib.request.Request(params.url, data=data, method=method)
    except ValueError as exc:
        raise ToolError(f"fetch: build request: {exc}") from exc
    request.add_header("User-Agent", USER_AGENT)
    request.add_header("Accept", "*/*")
    for name, value in params.headers.items():
        request.add_header(name, value)

    if signal is not None and signal.is_set():
        raise ToolError("fetch: http: context canceled")

    response = _perform_bounded(request, timeout, signal)

    content_type = response.header("Content-Type")
    binary = is_binary_content_type(content_type)
    body_text = truncated_hint = binary_hint = ""
    if binary:
        binary_hint = (
            f"[Binary content ({content_type}, {format_size(len(response.body))}). Body omitted.]"
        )
    else:
        tr = truncate_head(response.body.decode("utf-8", errors="replace"))
        body_text = tr.content
        if tr.truncated:
            truncated_hint = (
                f"\n\n[Body truncated: showing {tr.output_lines} of {tr.total_lines} lines, "
                f"{format_size(tr.output_bytes)} of {format_size(tr.total_bytes)}]"
            )

    return ToolResult(
        content=[TextContent(_format_result(response, body_text, truncated_hint, binary_hint))],
        details={
            "url": params.url,
            "status": response.status,
            "contentType": content_type,
            "bytes": len(response.body),
            "binary": binary,
        },
    )


def new_fetch_tool() -> AgentTool:
    """Return the fetch tool."""

    def execute(
        tool_call_id: str,
        params: dict,
        signal: Optional[threading.Event],
        on_update: Optional[UpdateCallback],
    ) -> ToolResult:
        return execute_fetch(FetchParams.from_dict(params), signal)

    return AgentTool(
        name="fetch",
        description=(
            "Fetch a URL. Returns status, headers, and body "
            "(truncated to 50KB / 2000 lines)."
        ),
        parameters=FETCH_SCHEMA,
        execute=execute,
        label="fetch",
    )