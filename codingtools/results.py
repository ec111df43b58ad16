"""Result and tool types shared by every built-in tool."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Union


class ToolError(Exception):
    """Raised when a tool cannot carry out its request."""


@dataclass(frozen=True)
class TextContent:
    """A block of plain text returned by a tool."""

    text: str


@dataclass(frozen=True)
class ImageContent:
    """A base64-encoded image returned by a tool."""

    data: str
    mime_type: str


Content = Union[TextContent, ImageContent]


@dataclass
class ToolResult:
    """What a tool hands back: content blocks plus structured details."""

    content: list[Content] = field(default_factory=list)
    details: dict[str, Any] = field(default_factory=dict)

    def text(self) -> str:
        """Return the text blocks joined by newlines, skipping images."""
        return "\n".join(
            block.text for block in self.content if isinstance(block, TextContent)
        )


UpdateCallback = Callable[[ToolResult], None]
ExecuteFunc = Callable[
    [str, dict, Optional[threading.Event], Optional[UpdateCallback]], ToolResult
]
PrepareFunc = Callable[[dict], dict]


@dataclass
class AgentTool:
    """A named tool with a parameter schema and an execute function."""

    name: str
    description: str
    parameters: dict[str, Any]
    execute: ExecuteFunc
    label: str = ""
    prepare_arguments: Optional[PrepareFunc] = None

    def run(
        self,
        tool_call_id: str,
        params: Optional[dict],
        signal: Optional[threading.Event] = None,
        on_update: Optional[UpdateCallback] = None,
    ) -> ToolResult:
        """Prepare the arguments if the tool asks for it, then execute."""
        args = dict(params or {})
        if self.prepare_arguments is not None:
            args = self.prepare_arguments(args)
        return self.execute(tool_call_id, args, signal, on_update)