"""The write tool: create or overwrite a file under the working directory."""

from __future__ import annotations

import os
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional

from codingtools.mutation_queue import file_mutation_lock
from codingtools.paths import resolve_to_cwd
from codingtools.results import (
    AgentTool,
    TextContent,
    ToolError,
    ToolResult,
    UpdateCallback,
)
from codingtools.truncate import format_size

WRITE_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "path": {"type": "string", "description": "Path to the file to write"},
        "content": {"type": "string", "description": "Full content to write to the file"},
    },
    "required": ["path", "content"],
}


@dataclass(frozen=True)
class WriteParams:
    """Arguments of the write tool."""

    path: str
    content: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "WriteParams":
        """Build parameters from decoded tool arguments."""
        path = data.get("path", "")
        content = data.get("content", "")
        if not isinstance(path, str):
            raise ToolError("params: path must be a string")
        if not isinstance(content, str):
            raise ToolError("params: content must be a string")
        return cls(path=path, content=content)


def execute_write(cwd: str, params: WriteParams) -> ToolResult:
    """Write params.content to params.path, creating parent directories."""
    if not params.path:
        raise ToolError("write: path is empty")
    target = resolve_to_cwd(params.path, cwd)
    data = params.content.encode("utf-8")

    with file_mutation_lock(target):
        try:
            os.makedirs(os.path.dirname(target), mode=0o755, exist_ok=True)
        except OSError as exc:
            raise ToolError(f"write: mkdir: {exc}") from exc
        try:
            Path(target).write_bytes(data)
        except OSError as exc:
            raise ToolError(f"write: {exc}") from exc

    size = len(data)
    message = f"Wrote {size} bytes ({format_size(size)}) to {params.path}"
    return ToolResult(
        content=[TextContent(message)],
        details={"path": target, "bytes": size},
    )


def new_write_tool(cwd: str) -> AgentTool:
    """Return the write tool bound to cwd."""

    def execute(
        tool_call_id: str,
        params: dict,
        signal: Optional[threading.Event],
        on_update: Optional[UpdateCallback],
    ) -> ToolResult:
        return execute_write(cwd, WriteParams.from_dict(params))

    return AgentTool(
        name="write",
        description="Write or overwrite a file. Creates parent directories automatically.",
        parameters=WRITE_SCHEMA,
        execute=execute,
        label="write",
    )