import os

import pytest

from codingtools.results import ToolError
from codingtools.write import WriteParams, execute_write, new_write_tool


def _write_file(directory, name, content):
    path = directory / name
    path.write_text(content, encoding="utf-8")
    return path


def test_write_new_file(tmp_path):
    r = execute_write(str(tmp_path), WriteParams(path="new.txt", content="hello"))
    assert (tmp_path / "new.txt").read_text(encoding="utf-8") == "hello"
    assert r.details["bytes"] == 5
    assert r.details["path"] == str(tmp_path / "new.txt")
    assert r.text() == "Wrote 5 bytes (5B) to new.txt"


def test_write_overwrites(tmp_path):
    p = _write_file(tmp_path, "f.txt", "original")
    execute_write(str(tmp_path), WriteParams(path="f.txt", content="replaced"))
    assert p.read_text(encoding="utf-8") == "replaced"


def test_write_creates_parent_dirs(tmp_path):
    execute_write(str(tmp_path), WriteParams(path="deep/nested/file.txt", content="x"))
    assert (tmp_path / "deep" / "nested" / "file.txt").read_text(encoding="utf-8") == "x"


def test_write_large_content(tmp_path):
    content = "x" * (1024 * 1024)
    r = execute_write(str(tmp_path), WriteParams(path="big.txt", content=content))
    assert os.path.getsize(tmp_path / "big.txt") == len(content)
    assert "(1.0MB)" in r.text()


def test_write_counts_utf8_bytes(tmp_path):
    r = execute_write(str(tmp_path), WriteParams(path="u.txt", content="é"))
    assert r.details["bytes"] == 2
    assert (tmp_path / "u.txt").read_bytes() == "é".encode("utf-8")


def test_write_empty_path(tmp_path):
    with pytest.raises(ToolError, match="path is empty"):
        execute_write(str(tmp_path), WriteParams(path="", content="x"))


def test_write_path_traversal_blocked(tmp_path):
    with pytest.raises(ToolError, match="escapes"):
        execute_write(str(tmp_path), WriteParams(path="../escape.txt", content="x"))
    assert not (tmp_path.parent / "escape.txt").exists()


def test_write_params_from_dict():
    assert WriteParams.from_dict({"path": "a.txt", "content": "b"}) == WriteParams("a.txt", "b")
    assert WriteParams.from_dict({"path": "a.txt"}) == WriteParams("a.txt", "")


def test_write_params_from_dict_rejects_wrong_type():
    with pytest.raises(ToolError):
        WriteParams.from_dict({"path": 3, "content": "b"})


def test_write_tool_run(tmp_path):
    tool = new_write_tool(str(tmp_path))
    assert tool.name == "write"
    assert tool.parameters["required"] == ["path", "content"]
    r = tool.run("call-1", {"path": "t.txt", "content": "abc"})
    assert r.details["bytes"] == 3
    assert (tmp_path / "t.txt").read_text(encoding="utf-8") == "abc"