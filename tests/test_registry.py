import pytest

from codingtools.ask_user import AskUserResult
from codingtools.registry import coding_tools
from codingtools.results import ToolError


def by_name(tools):
    return {tool.name: tool for tool in tools}


def test_tool_names_in_order(tmp_path):
    tools = coding_tools(str(tmp_path), None)
    assert [tool.name for tool in tools] == ["read", "bash", "edit", "write", "ask_user", "fetch"]
    assert all(tool.label == tool.name for tool in tools)


def test_write_then_read_in_cwd(tmp_path):
    tools = by_name(coding_tools(str(tmp_path), None))
    tools["write"].run("1", {"path": "a.txt", "content": "hi there"})
    assert (tmp_path / "a.txt").read_text() == "hi there"
    result = tools["read"].run("2", {"path": "a.txt"})
    assert result.text() == "hi there"


def test_edit_accepts_legacy_arguments(tmp_path):
    (tmp_path / "f.txt").write_text("hello world")
    tools = by_name(coding_tools(str(tmp_path), None))
    tools["edit"].run("1", {"path": "f.txt", "oldText": "world", "newText": "there"})
    assert (tmp_path / "f.txt").read_text() == "hello there"


def test_ask_user_uses_handler(tmp_path):
    tools = by_name(coding_tools(str(tmp_path), lambda params: AskUserResult(freeform="ok")))
    result = tools["ask_user"].run("1", {"question": "Proceed?"})
    assert "Response: ok" in result.text()
    assert result.details["cancelled"] is False


def test_ask_user_without_handler_fails(tmp_path):
    tools = by_name(coding_tools(str(tmp_path), None))
    with pytest.raises(ToolError, match="no question handler"):
        tools["ask_user"].run("1", {"question": "?"})


def test_bash_runs_in_cwd(tmp_path):
    tools = by_name(coding_tools(str(tmp_path), None))
    result = tools["bash"].run("1", {"command": "pwd"})
    assert str(tmp_path) in result.text()
    assert result.details["exitCode"] == 0