# codingtools

A set of built-in tools for a coding agent. Each tool has a name, a
description, a parameter schema and an executor that takes a plain
dictionary of parameters and returns a `ToolResult`.

| Tool       | What it does                                                                   |
|------------|--------------------------------------------------------------------------------|
| `read`     | Reads a text file, with optional `offset`/`limit`. Images come back as base64. |
| `write`    | Writes or overwrites a file and creates parent directories.                    |
| `edit`     | Applies one or more exact or fuzzy search-and-replace edits and returns a diff. |
| `bash`     | Runs a shell command and streams its output, keeping only the tail.            |
| `ask_user` | Asks the user a question through a `QuestionHandler` you supply.               |
| `fetch`    | Makes an HTTP request and returns the status, headers and a truncated body.    |

Relative paths are resolved against the working directory you give. A
relative path that escapes that directory is refused.

## Installation

```
pip install .
```

To also install the test dependencies:

```
pip install ".[test]"
```

## Usage

```python
from codingtools.registry import coding_tools
from codingtools.ask_user import AskUserResult, QuestionHandler


class ConsoleHandler(QuestionHandler):
    def ask_user(self, params):
        answer = input(params.question + " ")
        return AskUserResult(freeform=answer)


tools = {tool.name: tool for tool in coding_tools("/path/to/project", ConsoleHandler())}

result = tools["read"].run("call-1", {"path": "README.md", "limit": 20}, None, None)
print(result.text())
```

A tool that fails raises `ToolError`. An `edit` whose `oldText` is not
found, or is not unique, raises `EditError`.

### Standalone helpers

```python
from codingtools.truncate import truncate_head, TruncationOptions, format_size
from codingtools.diff import apply_edits, generate_diff, EditPair

result = truncate_head(big_text, TruncationOptions(max_lines=100))
edited = apply_edits("hello world", [EditPair("world", "there")], "greeting.txt")
print(generate_diff(edited.base_content, edited.new_content, 4).diff)
print(format_size(1536))  # 1.5KB
```

Output is limited to 2000 lines or 50KB, whichever limit is reached first.
`read` and `fetch` keep the head of the output. `bash` keeps the tail.

## Running the tests

```
pytest
```