"""The default set of coding tools."""

from __future__ import annotations

from typing import Optional

from codingtools.ask_user import HandlerLike, new_ask_user_tool
from codingtools.bash import new_bash_tool
from codingtools.edit import new_edit_tool
from codingtools.fetch import new_fetch_tool
from codingtools.read import new_read_tool
from codingtools.results import AgentTool
from codingtools.write import new_write_tool


def coding_tools(cwd: str, question_handler: Optional[HandlerLike] = None) -> list[AgentTool]:
    """Return read, bash, edit, write, ask_user and fetch, configured for cwd."""
    return [
        new_read_tool(cwd),
        new_bash_tool(cwd),
        new_edit_tool(cwd),
        new_write_tool(cwd),
        new_ask_user_tool(question_handler),
        new_fetch_tool(),
    ]