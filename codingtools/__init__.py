"""Built-in tools for a coding agent: read, write, edit, bash, ask_user and fetch."""

__version__ = "0.1.0"