"""The ask_user tool: put a question to the user and wait for the answer."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Mapping, Optional, Protocol, Union, runtime_checkable

from codingtools.results import AgentTool, TextContent, ToolError, ToolResult, UpdateCallback

_POLL_INTERVAL = 0.01

ASK_USER_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "question": {"type": "string", "description": "The question to ask the user"},
        "options": {
            "type": "array",
            "description": "Optional list of choices",
            "items": {
                "type": "object",
                "properties": {
                    "title": {"type": "string"},
                    "description": {"type": "string"},
                },
                "required": ["title"],
            },
        },
        "allowFreeform": {
            "type": "boolean",
            "description": "Allow a freeform text answer. Default: true",
        },
        "allowMultiple": {
            "type": "boolean",
            "description": "Allow selecting multiple options. Default: false",
        },
        "allowComment": {
            "type": "boolean",
            "description": "Collect an optional comment. Default: false",
        },
        "context": {
            "type": "string",
            "description": "Relevant context to show before the question",
        },
    },
    "required": ["question"],
}


def _string(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ToolError(f"params: {key} must be a string")
    return value


def _optional_bool(data: Mapping[str, Any], key: str) -> Optional[bool]:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, bool):
        raise ToolError(f"params: {key} must be a boolean")
    return value


@dataclass(frozen=True)
class AskOption:
    """A single choice offered to the user."""

    title: str
    description: str = ""


@dataclass(frozen=True)
class AskUserParams:
    """Arguments of the ask_user tool."""

    question: str
    options: tuple[AskOption, ...] = ()
    allow_freeform: Optional[bool] = None
    allow_multiple: Optional[bool] = None
    allow_comment: Optional[bool] = None
    context: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AskUserParams":
        """Build parameters from decoded tool arguments."""
        raw_options = data.get("options") or []
        if not isinstance(raw_options, (list, tuple)):
            raise ToolError("params: options must be an array")
        options = []
        for item in raw_options:
            if not isinstance(item, Mapping):
                raise ToolError("params: each option must be an object")
            options.append(
                AskOption(title=_string(item, "title"), description=_string(item, "description"))
            )
        return cls(
            question=_string(data, "question"),
            options=tuple(options),
            allow_freeform=_optional_bool(data, "allowFreeform"),
            allow_multiple=_optional_bool(data, "allowMultiple"),
            allow_comment=_optional_bool(data, "allowComment"),
            context=_string(data, "context"),
        )


@dataclass(frozen=True)
class AskUserResult:
    """The user's answer as handed back by the interface."""

    selected: tuple[str, ...] = field(default_factory=tuple)
    freeform: str = ""
    comment: str = ""
    cancelled: bool = False


@runtime_checkable
class QuestionHandler(Protocol):
    """Something that shows a question to the user and blocks for the answer."""

    def ask_user(self, params: AskUserParams) -> AskUserResult:
        """Ask the question and return the user's answer."""
        ...


HandlerLike = Union[QuestionHandler, Callable[[AskUserParams], AskUserResult]]


def format_ask_result(result: AskUserResult) -> ToolResult:
    """Render the user's answer as tool output."""
    if result.cancelled:
        return ToolResult(
            content=[TextContent("[User cancelled the question.]")],
            details={"cancelled": True},
        )
    parts = []
    if result.selected:
        parts.append("Selected: " + ", ".join(result.selected))
    if result.freeform:
        parts.append("Response: " + result.freeform)
    if result.comment:
        parts.append("Comment: " + result.comment)
    text = "\n".join(parts) or "[User responded with no content.]"
    return ToolResult(
        content=[TextContent(text)],
        details={
            "selected": list(result.selected),
            "freeform": result.freeform,
            "comment": result.comment,
            "cancelled": False,
        },
    )


def execute_ask_user(
    handler: Optional[HandlerLike],
    params: AskUserParams,
    signal: Optional[threading.Event] = None,
) -> ToolResult:
    """Ask the question through handler; a set signal yields a cancelled answer.

    handler may be a QuestionHandler or a plain callable taking the params.
    """
    if handler is None:
        raise ToolError("ask_user: no question handler registered")
    if not params.question:
        raise ToolError("ask_user: question is empty")
    if params.allow_freeform is None:
        params = replace(params, allow_freeform=True)

    ask = handler.ask_user if isinstance(handler, QuestionHandler) else handler
    outcome: dict[str, Any] = {}
    done = threading.Event()

    def run() -> None:
        try:
            outcome["result"] = ask(params)
        except Exception as exc:  # reported to the caller below
            outcome["error"] = exc
        finally:
            done.set()

    threading.Thread(target=run, name="ask-user", daemon=True).start()

    if signal is None:
        done.wait()
    else:
        while not done.wait(_POLL_INTERVAL):
            if signal.is_set():
                return format_ask_result(AskUserResult(cancelled=True))

    error = outcome.get("error")
    if error is not None:
        raise ToolError(f"ask_user: {error}") from error
    return format_ask_result(outcome["result"])


def new_ask_user_tool(handler: Optional[HandlerLike]) -> AgentTool:
    """Return the ask_user tool bound to handler."""

    def execute(
        tool_call_id: str,
        params: dict,
        signal: Optional[threading.Event],
        on_update: Optional[UpdateCallback],
    ) -> ToolResult:
        return execute_ask_user(handler, AskUserParams.from_dict(params), signal)

    return AgentTool(
        name="ask_user",
        description=(
            "Ask the user a question with optional multiple-choice answers. "
            "Blocks until the user responds."
        ),
        parameters=ASK_USER_SCHEMA,
        execute=execute,
        label="ask_user",
    )