"""The edit tool: targeted search-and-replace edits to an existing file."""

from __future__ import annotations

import os
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Optional

from codingtools.diff import (
    EditPair,
    apply_edits,
    detect_line_ending,
    generate_diff,
    normalize_to_lf,
    restore_line_endings,
    strip_bom,
)
from codingtools.mutation_queue import file_mutation_lock
from codingtools.paths import resolve_to_cwd
from codingtools.results import (
    AgentTool,
    TextContent,
    ToolError,
    ToolResult,
    UpdateCallback,
)

DIFF_CONTEXT_LINES = 4

EDIT_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "path": {"type": "string", "description": "Path to the file to edit"},
        "edits": {
            "type": "array",
            "description": "One or more targeted oldText/newText replacements",
            "items": {
                "type": "object",
                "properties": {
                    "oldText": {"type": "string"},
                    "newText": {"type": "string"},
                },
                "required": ["oldText", "newText"],
            },
        },
    },
    "required": ["path", "edits"],
}


def _string_field(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key, "")
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ToolError(f"params: {key} must be a string")
    return value


@dataclass(frozen=True)
class EditParams:
    """Arguments of the edit tool."""

    path: str
    edits: tuple[EditPair, ...] = field(default_factory=tuple)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "EditParams":
        """Build parameters from decoded tool arguments."""
        path = _string_field(data, "path")
        raw_edits = data.get("edits") or []
        if not isinstance(raw_edits, (list, tuple)):
            raise ToolError("params: edits must be an array")
        edits = []
        for item in raw_edits:
            if not isinstance(item, Mapping):
                raise ToolError("params: each edit must be an object")
            edits.append(
                EditPair(
                    old_text=_string_field(item, "oldText"),
                    new_text=_string_field(item, "newText"),
                )
            )
        return cls(path=path, edits=tuple(edits))


def prepare_edit_arguments(args: Optional[dict]) -> Optional[dict]:
    """Turn the legacy {oldText, newText} shape into {edits: [...]}."""
    if args is None or "edits" in args:
        return args
    old_text = args.get("oldText")
    if not isinstance(old_text, str):
        return args
    new_text = args.get("newText")
    if not isinstance(new_text, str):
        new_text = ""
    args["edits"] = [{"oldText": old_text, "newText": new_text}]
    args.pop("oldText", None)
    args.pop("newText", None)
    return args


def _apply_to_file(target: str, params: EditParams) -> ToolResult:
    try:
        if os.path.isdir(target):
            raise ToolError(f"edit: {params.path!r} is a directory")
        os.stat(target)
    except OSError as exc:
        raise ToolError(f"edit: {exc}") from exc

    try:
        raw = Path(target).read_bytes()
    except OSError as exc:
        raise ToolError(f"edit: read: {exc}") from exc
    raw_content = raw.decode("utf-8", errors="surrogateescape")

    bom = strip_bom(raw_content)
    ending = detect_line_ending(bom.text)
    normalized = normalize_to_lf(bom.text)

    result = apply_edits(normalized, params.edits, params.path)

    final = bom.bom + restore_line_endings(result.new_content, ending)
    try:
        Path(target).write_bytes(final.encode("utf-8", errors="surrogateescape"))
    except OSError as exc:
        raise ToolError(f"edit: write: {exc}") from exc

    diff = generate_diff(result.base_content, result.new_content, DIFF_CONTEXT_LINES)
    count = len(params.edits)
    summary = f"Applied {count} edit{'' if count == 1 else 's'} to {params.path}"
    if diff.first_changed_line is not None:
        summary += f" (first change at line {diff.first_changed_line})"
    body = f"{summary}\n\n{diff.diff}" if diff.diff else summary

    details: dict[str, Any] = {"path": target, "editCount": count, "diff": diff.diff}
    if diff.first_changed_line is not None:
        details["firstChangedLine"] = diff.first_changed_line
    return ToolResult(content=[TextContent(body)], details=details)


def execute_edit(cwd: str, params: EditParams) -> ToolResult:
    """Apply params.edits to the file, keeping its BOM and line endings."""
    if not params.edits:
        raise ToolError("edit: edits array is empty")
    target = resolve_to_cwd(params.path, cwd)
    with file_mutation_lock(target):
        return _apply_to_file(target, params)


def new_edit_tool(cwd: str) -> AgentTool:
    """Return the edit tool bound to cwd."""

    def execute(
        tool_call_id: str,
        params: dict,
        signal: Optional[threading.Event],
        on_update: Optional[UpdateCallback],
    ) -> ToolResult:
        return execute_edit(cwd, EditParams.from_dict(params))

    return AgentTool(
        name="edit",
        description=(
            "Apply one or more search-and-replace edits to a file. "
            "Preserves line endings and BOM."
        ),
        parameters=EDIT_SCHEMA,
        execute=execute,
        label="edit",
        prepare_arguments=prepare_edit_arguments,
    )