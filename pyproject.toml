[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "codingtools"
version = "0.1.0"
description = "Built-in tools for a coding agent: read, write, edit, bash, ask_user and fetch."
requires-python = ">=3.10"
dependencies = []
keywords = ["agent", "tools", "llm", "edit", "diff", "truncation"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["codingtools"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
