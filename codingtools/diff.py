"""Line endings, BOM handling, fuzzy matching, multi-edit application and diffs."""

from __future__ import annotations

from dataclasses import dataclass
from itertools import groupby
from typing import Optional, Sequence

from codingtools.results import ToolError

UTF8_BOM = "\ufeff"

_FUZZY_TABLE = str.maketrans(
    {
        "\u201c": '"',  # left double quotation mark
        "\u201d": '"',  # right double quotation mark
        "\u2018": "'",  # left single quotation mark
        "\u2019": "'",  # right single quotation mark
        "\u201a": "'",  # single low-9 quotation mark
        "\u201e": '"',  # double low-9 quotation mark
        "\u2013": "-",  # en dash
        "\u2014": "-",  # em dash
        "\u2212": "-",  # minus sign
        "\u2010": "-",  # hyphen
        "\u2011": "-",  # non-breaking hyphen
        "\u00a0": " ",  # no-break space
        "\u2000": " ",  # en quad
        "\u2001": " ",  # em quad
        "\u2002": " ",  # en space
        "\u2003": " ",  # em space
        "\u2009": " ",  # thin space
        "\u202f": " ",  # narrow no-break space
    }
)


class EditError(ToolError):
    """Raised when a set of edits cannot be applied."""


@dataclass(frozen=True)
class BomResult:
    """A byte-order mark (possibly empty) and the text that follows it."""

    bom: str
    text: str


@dataclass(frozen=True)
class FuzzyMatchResult:
    """Outcome of fuzzy_find_text."""

    found: bool
    index: int = -1
    content_for_replacement: str = ""


@dataclass(frozen=True)
class EditPair:
    """A single search-and-replace entry."""

    old_text: str
    new_text: str


@dataclass(frozen=True)
class EditResult:
    """The content edits were matched against and the content after them."""

    base_content: str
    new_content: str


@dataclass(frozen=True)
class DiffResult:
    """A numbered line diff and the first changed line, if any."""

    diff: str
    first_changed_line: Optional[int] = None


def detect_line_ending(content: str) -> str:
    """Return "\\r\\n" if the first line break is CRLF, otherwise "\\n"."""
    index = content.find("\n")
    if index > 0 and content[index - 1] == "\r":
        return "\r\n"
    return "\n"


def normalize_to_lf(text: str) -> str:
    """Convert CRLF and bare CR line breaks to LF."""
    return text.replace("\r\n", "\n").replace("\r", "\n")


def restore_line_endings(text: str, ending: str) -> str:
    """Convert LF line breaks to the given ending."""
    if ending in ("\n", ""):
        return text
    return text.replace("\n", ending)


def strip_bom(content: str) -> BomResult:
    """Split a leading UTF-8 byte-order mark off content."""
    if content.startswith(UTF8_BOM):
        return BomResult(bom=UTF8_BOM, text=content[len(UTF8_BOM):])
    return BomResult(bom="", text=content)


def normalize_for_fuzzy_match(text: str) -> str:
    """Strip trailing blanks per line and fold smart quotes, dashes and odd spaces to ASCII."""
    stripped = "\n".join(line.rstrip(" \t") for line in text.split("\n"))
    return stripped.translate(_FUZZY_TABLE)


def fuzzy_find_text(content: str, old_text: str) -> FuzzyMatchResult:
    """Find old_text exactly, or failing that in the normalised content."""
    index = content.find(old_text)
    if index >= 0:
        return FuzzyMatchResult(found=True, index=index, content_for_replacement=content)
    norm_content = normalize_for_fuzzy_match(content)
    index = norm_content.find(normalize_for_fuzzy_match(old_text))
    if index >= 0:
        return FuzzyMatchResult(found=True, index=index, content_for_replacement=norm_content)
    return FuzzyMatchResult(found=False)


@dataclass(frozen=True)
class _Match:
    index: int
    length: int
    new_text: str
    edit_number: int


def apply_edits(
    normalized_content: str, edits: Sequence[EditPair], file_path: str
) -> EditResult:
    """Apply every edit against the original content at once.

    Raises EditError when an oldText is empty, missing, ambiguous, overlaps
    another match, or when the edits change nothing.
    """
    if not edits:
        raise EditError("edit: no edits supplied")
    for number, edit in enumerate(edits, start=1):
        if not edit.old_text:
            raise EditError(f"edit {number}: oldText is empty")

    base = normalized_content
    needs_fuzzy = any(edit.old_text not in base for edit in edits)
    if needs_fuzzy:
        norm_base = normalize_for_fuzzy_match(normalized_content)
        if all(normalize_for_fuzzy_match(edit.old_text) in norm_base for edit in edits):
            base = norm_base

    matches: list[_Match] = []
    for number, edit in enumerate(edits, start=1):
        old = normalize_for_fuzzy_match(edit.old_text) if needs_fuzzy else edit.old_text
        first = base.find(old)
        if first < 0:
            raise EditError(f"edit {number} in {file_path}: oldText not found")
        if base.find(old, first + 1) >= 0:
            raise EditError(f"edit {number} in {file_path}: oldText is not unique")
        matches.append(_Match(first, len(old), edit.new_text, number))

    matches.sort(key=lambda m: m.index)
    for previous, current in zip(matches, matches[1:]):
        if previous.index + previous.length > current.index:
            raise EditError(
                f"edits {previous.edit_number} and {current.edit_number} in {file_path} overlap"
            )

    out = base
    for match in reversed(matches):
        out = out[: match.index] + match.new_text + out[match.index + match.length:]

    if out == base:
        raise EditError(f"edit in {file_path}: no changes")
    return EditResult(base_content=base, new_content=out)


@dataclass(frozen=True)
class _DiffOp:
    kind: str  # "+", "-" or " "
    text: str
    old_line: int = 0
    new_line: int = 0

    @property
    def line_number(self) -> int:
        return self.old_line if self.kind == "-" else self.new_line


def _split_lines(text: str) -> list[str]:
    return text.split("\n") if text else []


def _lcs_diff(a: list[str], b: list[str]) -> list[_DiffOp]:
    n, m = len(a), len(b)
    lcs = [[0] * (m + 1) for _ in range(n + 1)]
    for i in range(n - 1, -1, -1):
        row, below = lcs[i], lcs[i + 1]
        for j in range(m - 1, -1, -1):
            if a[i] == b[j]:
                row[j] = below[j + 1] + 1
            else:
                row[j] = max(below[j], row[j + 1])

    ops: list[_DiffOp] = []
    i = j = 0
    while i < n and j < m:
        if a[i] == b[j]:
            ops.append(_DiffOp(" ", a[i], i + 1, j + 1))
            i += 1
            j += 1
        elif lcs[i + 1][j] >= lcs[i][j + 1]:
            ops.append(_DiffOp("-", a[i], old_line=i + 1))
            i += 1
        else:
            ops.append(_DiffOp("+", b[j], new_line=j + 1))
            j += 1
    ops.extend(_DiffOp("-", a[k], old_line=k + 1) for k in range(i, n))
    ops.extend(_DiffOp("+", b[k], new_line=k + 1) for k in range(j, m))
    return ops


def generate_diff(old_content: str, new_content: str, context_lines: int = 4) -> DiffResult:
    """Return a numbered diff with '+', '-' and ' ' markers and context around changes."""
    context_lines = max(context_lines, 0)
    ops = _lcs_diff(_split_lines(old_content), _split_lines(new_content))

    regions: list[tuple[int, int]] = []
    for is_context, group in groupby(enumerate(ops), key=lambda item: item[1].kind == " "):
        if not is_context:
            indices = [index for index, _ in group]
            regions.append((indices[0], indices[-1]))

    if not regions:
        return DiffResult(diff="")

    merged: list[list[int]] = []
    last = len(ops) - 1
    for start, end in regions:
        start = max(start - context_lines, 0)
        end = min(end + context_lines, last)
        if merged and start <= merged[-1][1] + 1:
            merged[-1][1] = end
        else:
            merged.append([start, end])

    parts: list[str] = []
    first_changed: Optional[int] = None
    for number, (start, end) in enumerate(merged):
        if number > 0:
            parts.append("...\n")
        for op in ops[start:end + 1]:
            if first_changed is None and op.kind != " ":
                first_changed = op.line_number
            parts.append(f"{op.kind}{op.line_number:4d} {op.text}\n")

    return DiffResult(diff="".join(parts), first_changed_line=first_changed)