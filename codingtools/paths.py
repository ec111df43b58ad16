"""Resolution of tool paths against a working directory."""

from __future__ import annotations

import os

from codingtools.results import ToolError


def resolve_to_cwd(path: str, cwd: str) -> str:
    """Return an absolute path for path.

    Absolute paths are accepted as they are, cleaned. Relative paths are
    joined with cwd and must not climb out of it.
    """
    if not path:
        raise ToolError("path: empty path")
    if os.path.isabs(path):
        return os.path.normpath(path)
    abs_cwd = os.path.abspath(cwd)
    joined = os.path.normpath(os.path.join(abs_cwd, path))
    try:
        rel = os.path.relpath(joined, abs_cwd)
    except ValueError as exc:
        raise ToolError(f"path: rel: {exc}") from exc
    if rel == os.pardir or rel.startswith(os.pardir + os.sep):
        raise ToolError(f"path: {path!r} escapes working directory")
    return joined