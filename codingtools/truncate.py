"""Head and tail truncation of tool output by line count and byte size."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

DEFAULT_MAX_LINES = 2000
DEFAULT_MAX_BYTES = 50 * 1024
GREP_MAX_LINE_LENGTH = 500

_KB = 1024
_MB = 1024 * 1024


@dataclass(frozen=True)
class TruncationOptions:
    """Limit overrides; values of zero or less fall back to the defaults."""

    max_lines: int = 0
    max_bytes: int = 0


@dataclass(frozen=True)
class TruncationResult:
    """Everything needed to describe how content was truncated."""

    content: str
    truncated: bool
    truncated_by: Optional[str]  # "lines", "bytes" or None
    total_lines: int
    total_bytes: int
    output_lines: int
    output_bytes: int
    max_lines: int
    max_bytes: int
    last_line_partial: bool = False
    first_line_exceeds_limit: bool = False


def _resolve(options: Optional[TruncationOptions]) -> tuple[int, int]:
    max_lines, max_bytes = DEFAULT_MAX_LINES, DEFAULT_MAX_BYTES
    if options is not None:
        if options.max_lines > 0:
            max_lines = options.max_lines
        if options.max_bytes > 0:
            max_bytes = options.max_bytes
    return max_lines, max_bytes


def _byte_len(text: str) -> int:
    return len(text.encode("utf-8"))


def _split_lines(text: str) -> list[str]:
    return text.split("\n") if text else []


def _untouched(content: str, lines: list[str], total_bytes: int,
               max_lines: int, max_bytes: int) -> TruncationResult:
    return TruncationResult(
        content=content,
        truncated=False,
        truncated_by=None,
        total_lines=len(lines),
        total_bytes=total_bytes,
        output_lines=len(lines),
        output_bytes=total_bytes,
        max_lines=max_lines,
        max_bytes=max_bytes,
    )


def truncate_head(content: str, options: Optional[TruncationOptions] = None) -> TruncationResult:
    """Keep whole lines from the start until a limit is reached."""
    max_lines, max_bytes = _resolve(options)
    total_bytes = _byte_len(content)
    lines = _split_lines(content)
    total_lines = len(lines)

    if total_lines <= max_lines and total_bytes <= max_bytes:
        return _untouched(content, lines, total_bytes, max_lines, max_bytes)

    if lines and _byte_len(lines[0]) > max_bytes:
        return TruncationResult(
            content="",
            truncated=True,
            truncated_by="bytes",
            total_lines=total_lines,
            total_bytes=total_bytes,
            output_lines=0,
            output_bytes=0,
            max_lines=max_lines,
            max_bytes=max_bytes,
            first_line_exceeds_limit=True,
        )

    collected: list[str] = []
    used = 0
    truncated_by: Optional[str] = None
    last_index = total_lines - 1
    for index, line in enumerate(lines):
        if index >= max_lines:
            truncated_by = "lines"
            break
        projected = used + _byte_len(line) + (1 if index < last_index else 0)
        if projected > max_bytes:
            truncated_by = "bytes"
            break
        collected.append(line)
        used = projected

    out = "\n".join(collected)
    return TruncationResult(
        content=out,
        truncated=True,
        truncated_by=truncated_by,
        total_lines=total_lines,
        total_bytes=total_bytes,
        output_lines=len(collected),
        output_bytes=_byte_len(out),
        max_lines=max_lines,
        max_bytes=max_bytes,
    )


def _utf8_start(data: bytes, start: int) -> int:
    if start >= len(data):
        return len(data)
    while start > 0 and (data[start] & 0xC0) == 0x80:
        start -= 1
    return start


def truncate_tail(content: str, options: Optional[TruncationOptions] = None) -> TruncationResult:
    """Keep whole lines from the end; cut the last line itself if it alone is too big."""
    max_lines, max_bytes = _resolve(options)
    total_bytes = _byte_len(content)
    lines = _split_lines(content)
    total_lines = len(lines)

    if total_lines <= max_lines and total_bytes <= max_bytes:
        return _untouched(content, lines, total_bytes, max_lines, max_bytes)

    reversed_kept: list[str] = []
    used = 0
    truncated_by: Optional[str] = None
    for line in reversed(lines):
        if len(reversed_kept) >= max_lines:
            truncated_by = "lines"
            break
        add = _byte_len(line) + (1 if reversed_kept else 0)
        if used + add > max_bytes:
            truncated_by = "bytes"
            break
        reversed_kept.append(line)
        used += add

    if not reversed_kept and lines:
        last = lines[-1].encode("utf-8")
        start = _utf8_start(last, max(len(last) - max_bytes, 0))
        partial = last[start:].decode("utf-8")
        return TruncationResult(
            content=partial,
            truncated=True,
            truncated_by="bytes",
            total_lines=total_lines,
            total_bytes=total_bytes,
            output_lines=1,
            output_bytes=_byte_len(partial),
            max_lines=max_lines,
            max_bytes=max_bytes,
            last_line_partial=True,
        )

    out = "\n".join(reversed(reversed_kept))
    return TruncationResult(
        content=out,
        truncated=True,
        truncated_by=truncated_by,
        total_lines=total_lines,
        total_bytes=total_bytes,
        output_lines=len(reversed_kept),
        output_bytes=_byte_len(out),
        max_lines=max_lines,
        max_bytes=max_bytes,
    )


def truncate_line(line: str, max_chars: int = GREP_MAX_LINE_LENGTH) -> str:
    """Cut a line to max_chars characters, marking it when cut."""
    if max_chars <= 0 or len(line) <= max_chars:
        return line
    return line[:max_chars] + "... [truncated]"


def format_size(size: int) -> str:
    """Return a human-readable size such as 512B, 1.5KB or 2.0MB."""
    if size >= _MB:
        return f"{size / _MB:.1f}MB"
    if size >= _KB:
        return f"{size / _KB:.1f}KB"
    return f"{size}B"