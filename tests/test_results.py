import threading

import pytest

from codingtools.results import (
    AgentTool,
    ImageContent,
    TextContent,
    ToolError,
    ToolResult,
)


def _recording_tool(prepare=None):
    calls = []

    def execute(tool_call_id, params, signal, on_update):
        calls.append((tool_call_id, params, signal, on_update))
        return ToolResult(content=[TextContent(text=params.get("msg", ""))])

    tool = AgentTool(
        name="echo",
        description="echo back",
        parameters={"type": "object"},
        execute=execute,
        label="echo",
        prepare_arguments=prepare,
    )
    return tool, calls


def test_text_joins_text_blocks_and_skips_images():
    result = ToolResult(
        content=[
            TextContent(text="first"),
            ImageContent(data="AAAA", mime_type="image/png"),
            TextContent(text="second"),
        ]
    )
    assert result.text() == "first\nsecond"


def test_text_of_empty_result_is_empty():
    assert ToolResult().text() == ""
    assert ToolResult().details == {}


def test_run_passes_arguments_through():
    tool, calls = _recording_tool()
    signal = threading.Event()
    updates = []
    result = tool.run("call-1", {"msg": "hi"}, signal, updates.append)
    assert result.text() == "hi"
    assert calls == [("call-1", {"msg": "hi"}, signal, updates.append)]


def test_run_applies_prepare_arguments():
    def prepare(args):
        args["msg"] = args.pop("legacy")
        return args

    tool, calls = _recording_tool(prepare)
    original = {"legacy": "value"}
    result = tool.run("call-2", original)
    assert result.text() == "value"
    assert calls[0][1] == {"msg": "value"}
    assert original == {"legacy": "value"}


def test_run_with_no_params_gives_empty_dict():
    tool, calls = _recording_tool()
    tool.run("call-3", None)
    assert calls[0][1] == {}


def test_run_propagates_tool_error():
    def execute(tool_call_id, params, signal, on_update):
        raise ToolError("boom")

    tool = AgentTool(
        name="failing",
        description="always fails",
        parameters={"type": "object"},
        execute=execute,
        label="failing",
    )
    with pytest.raises(ToolError, match="boom") as excinfo:
        tool.run("call-4", {})
    assert str(excinfo.value) == "boom"