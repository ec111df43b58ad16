"""The read tool: text files with paging and truncation, images as base64."""

from __future__ import annotations

import base64
import os
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional

from codingtools.paths import resolve_to_cwd
from codingtools.results import (
    AgentTool,
    ImageContent,
    TextContent,
    ToolError,
    ToolResult,
    UpdateCallback,
)
from codingtools.truncate import format_size, truncate_head

READ_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "path": {
            "type": "string",
            "description": "Path to the file to read (relative or absolute)",
        },
        "offset": {
            "type": "integer",
            "description": "1-indexed line number to start reading from",
        },
        "limit": {"type": "integer", "description": "Maximum number of lines to read"},
    },
    "required": ["path"],
}

_IMAGE_MIME_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
}


def _optional_int(data: Mapping[str, Any], key: str) -> Optional[int]:
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, bool):
        raise ToolError(f"params: {key} must be an integer")
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if not isinstance(value, int):
        raise ToolError(f"params: {key} must be an integer")
    return value


@dataclass(frozen=True)
class ReadParams:
    """Arguments of the read tool."""

    path: str
    offset: Optional[int] = None
    limit: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ReadParams":
        """Build parameters from decoded tool arguments."""
        path = data.get("path") or ""
        if not isinstance(path, str):
            raise ToolError("params: path must be a string")
        return cls(
            path=path,
            offset=_optional_int(data, "offset"),
            limit=_optional_int(data, "limit"),
        )


def is_image_path(path: str) -> bool:
    """Tell whether the extension of path marks a supported image."""
    return os.path.splitext(path)[1].lower() in _IMAGE_MIME_TYPES


def mime_for_ext(ext: str) -> str:
    """Return the MIME type for an image extension such as ".png"."""
    return _IMAGE_MIME_TYPES.get(ext.lower(), "application/octet-stream")


def _read_bytes(path: str) -> bytes:
    try:
        return Path(path).read_bytes()
    except OSError as exc:
        raise ToolError(f"read: {exc}") from exc


def _read_image(path: str, size: int) -> ToolResult:
    data = _read_bytes(path)
    return ToolResult(
        content=[
            TextContent(f"[Image attached: {os.path.basename(path)}, {format_size(size)}]"),
            ImageContent(
                data=base64.b64encode(data).decode("ascii"),
                mime_type=mime_for_ext(os.path.splitext(path)[1]),
            ),
        ]
    )


def _read_text(target: str, params: ReadParams) -> ToolResult:
    content = _read_bytes(target).decode("utf-8", errors="replace")
    lines = content.split("\n")
    total_lines = len(lines)

    start = 0
    if params.offset is not None:
        if params.offset < 1:
            raise ToolError("read: offset must be >= 1")
        start = params.offset - 1
        if start >= total_lines:
            raise ToolError(
                f"read: offset {params.offset} exceeds file length ({total_lines} lines)"
            )

    user_limit = None
    if params.limit is not None:
        if params.limit <= 0:
            raise ToolError("read: limit must be > 0")
        user_limit = params.limit
        selected = lines[start:start + user_limit]
    else:
        selected = lines[start:]

    tr = truncate_head("\n".join(selected))

    if tr.first_line_exceeds_limit:
        message = (
            f'First line of "{params.path}" exceeds the {tr.max_bytes}-byte limit. '
            f"Use bash with `sed -n '{start + 1}p' '{target}' | head -c {tr.max_bytes}` "
            "to read it in chunks."
        )
        return ToolResult(content=[TextContent(message)])

    shown_from = start + 1
    shown_to = start + tr.output_lines
    suffix = ""
    if tr.truncated:
        suffix = (
            f"\n\n[Showing lines {shown_from}-{shown_to} of {total_lines}. "
            f"Use offset={shown_to + 1} to continue.]"
        )
    elif user_limit is not None and shown_to < total_lines:
        suffix = (
            f"\n\n[{total_lines - shown_to} more lines in file. "
            f"Use offset={shown_to + 1} to continue.]"
        )

    return ToolResult(
        content=[TextContent(tr.content + suffix)],
        details={
            "path": target,
            "total_lines": total_lines,
            "output_lines": tr.output_lines,
            "offset": start + 1,
        },
    )


def execute_read(cwd: str, params: ReadParams) -> ToolResult:
    """Read a text or image file relative to cwd."""
    target = resolve_to_cwd(params.path, cwd)
    try:
        info = os.stat(target)
    except OSError as exc:
        raise ToolError(f"read: {exc}") from exc
    if os.path.isdir(target):
        raise ToolError(f"read: {params.path!r} is a directory")
    if is_image_path(target):
        return _read_image(target, info.st_size)
    return _read_text(target, params)


def new_read_tool(cwd: str) -> AgentTool:
    """Return the read tool bound to cwd."""

    def execute(
        tool_call_id: str,
        params: dict,
        signal: Optional[threading.Event],
        on_update: Optional[UpdateCallback],
    ) -> ToolResult:
        return execute_read(cwd, ReadParams.from_dict(params))

    return AgentTool(
        name="read",
        description="Read the contents of a file. Supports text and image files.",
        parameters=READ_SCHEMA,
        execute=execute,
        label="read",
    )