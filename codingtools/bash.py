"""The bash tool: run a shell command and capture its combined output."""

from __future__ import annotations

import os
import subprocess
import threading
import time
from dataclasses import dataclass
from signal import SIGKILL
from typing import Any, BinaryIO, Mapping, Optional

from codingtools.results import (
    AgentTool,
    TextContent,
    ToolError,
    ToolResult,
    UpdateCallback,
)
from codingtools.truncate import DEFAULT_MAX_BYTES, format_size, truncate_tail

BASH_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "command": {"type": "string", "description": "Bash command to execute"},
        "timeout": {
            "type": "integer",
            "description": "Timeout in seconds. Default: no timeout",
        },
    },
    "required": ["command"],
}

_ROLLING_LIMIT = DEFAULT_MAX_BYTES * 2
_CHUNK_SIZE = 4096
_POLL_INTERVAL = 0.01


class _CommandFailed(ToolError):
    """A command failure that still carries the output captured so far."""

    def __init__(self, message: str, result: ToolResult) -> None:
        super().__init__(message)
        self.result = result


@dataclass(frozen=True)
class BashParams:
    """Arguments of the bash tool."""

    command: str
    timeout: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "BashParams":
        """Build parameters from decoded tool arguments."""
        command = data.get("command") or ""
        if not isinstance(command, str):
            raise ToolError("params: command must be a string")
        timeout = data.get("timeout")
        if timeout is not None:
            if isinstance(timeout, bool):
                raise ToolError("params: timeout must be an integer")
            if isinstance(timeout, float) and timeout.is_integer():
                timeout = int(timeout)
            if not isinstance(timeout, int):
                raise ToolError("params: timeout must be an integer")
        return cls(command=command, timeout=timeout)


class _RollingBuffer:
    """Thread-safe byte buffer that drops its oldest bytes past a limit."""

    def __init__(self, max_bytes: int) -> None:
        self._data = bytearray()
        self._max_bytes = max_bytes
        self._lock = threading.Lock()

    def write(self, chunk: bytes) -> None:
        with self._lock:
            self._data += chunk
            overflow = len(self._data) - self._max_bytes
            if overflow > 0:
                del self._data[:overflow]

    def text(self) -> str:
        with self._lock:
            return bytes(self._data).decode("utf-8", errors="replace")


def _text_result(text: str) -> ToolResult:
    return ToolResult(content=[TextContent(text)])


def _pump(stream: BinaryIO, buffer: _RollingBuffer, on_update: Optional[UpdateCallback]) -> None:
    try:
        fd = stream.fileno()
        while True:
            try:
                chunk = os.read(fd, _CHUNK_SIZE)
            except OSError:
                return
            if not chunk:
                return
            buffer.write(chunk)
            if on_update is not None:
                on_update(_text_result(truncate_tail(buffer.text()).content))
    finally:
        stream.close()


def _kill_process_tree(proc: subprocess.Popen) -> None:
    try:
        os.killpg(proc.pid, SIGKILL)
    except (ProcessLookupError, PermissionError):
        pass
    try:
        proc.kill()
    except ProcessLookupError:
        pass


def _exit_code(returncode: Optional[int]) -> int:
    if returncode is None or returncode < 0:
        return -1
    return returncode


def execute_bash(
    cwd: str,
    params: BashParams,
    signal: Optional[threading.Event] = None,
    on_update: Optional[UpdateCallback] = None,
) -> ToolResult:
    """Run params.command with bash in cwd, streaming partial output to on_update.

    A command that exits non-zero, times out or cannot start raises a
    ToolError whose ``result`` attribute holds the captured output.
    Setting signal aborts the command; the result then says so.
    """
    if not params.command:
        raise _CommandFailed("bash: command is empty", _text_result(""))
    if signal is not None and signal.is_set():
        raise _CommandFailed(
            "bash: start: context canceled", _text_result("[Command aborted.]")
        )

    try:
        proc = subprocess.Popen(
            ["bash", "-c", params.command],
            cwd=cwd,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            start_new_session=True,
        )
    except OSError as exc:
        raise _CommandFailed(f"bash: start: {exc}", _text_result(str(exc))) from exc

    buffer = _RollingBuffer(_ROLLING_LIMIT)
    pumps = [
        threading.Thread(target=_pump, args=(stream, buffer, on_update), daemon=True)
        for stream in (proc.stdout, proc.stderr)
    ]
    for pump in pumps:
        pump.start()

    timeout = params.timeout if params.timeout is not None and params.timeout > 0 else None
    deadline = time.monotonic() + timeout if timeout is not None else None
    timed_out = cancelled = False
    while proc.poll() is None or any(pump.is_alive() for pump in pumps):
        if signal is not None and signal.is_set():
            cancelled = True
            _kill_process_tree(proc)
            break
        if deadline is not None and time.monotonic() >= deadline:
            timed_out = True
            _kill_process_tree(proc)
            break
        time.sleep(_POLL_INTERVAL)

    for pump in pumps:
        pump.join()
    returncode = proc.wait()
    exit_code = _exit_code(returncode)

    tr = truncate_tail(buffer.text())
    suffix = ""
    if tr.truncated:
        suffix = (
            f"\n\n[Showing last {tr.output_lines} lines of {tr.total_lines} total "
            f"({format_size(tr.output_bytes)} of {format_size(tr.total_bytes)}).]"
        )
    if timed_out:
        suffix += f"\n\n[Command timed out after {timeout} seconds.]"
    elif cancelled:
        suffix += "\n\n[Command aborted.]"

    result = ToolResult(
        content=[TextContent(tr.content + suffix)],
        details={"command": params.command, "exitCode": exit_code},
    )
    if cancelled:
        return result
    if timed_out or returncode != 0:
        raise _CommandFailed(f"bash: exit {exit_code}", result)
    return result


def new_bash_tool(cwd: str) -> AgentTool:
    """Return the bash tool with its working directory pinned to cwd."""

    def execute(
        tool_call_id: str,
        params: dict,
        signal: Optional[threading.Event],
        on_update: Optional[UpdateCallback],
    ) -> ToolResult:
        return execute_bash(cwd, BashParams.from_dict(params), signal, on_update)

    return AgentTool(
        name="bash",
        description=(
            "Execute a bash command. Output is streamed and truncated to the "
            "last 50KB / 2000 lines."
        ),
        parameters=BASH_SCHEMA,
        execute=execute,
        label="bash",
    )