import pytest

from codingtools.diff import (
    BomResult,
    EditError,
    EditPair,
    apply_edits,
    detect_line_ending,
    fuzzy_find_text,
    generate_diff,
    normalize_for_fuzzy_match,
    normalize_to_lf,
    restore_line_endings,
    strip_bom,
)
from codingtools.results import ToolError


def test_detect_line_ending_lf():
    assert detect_line_ending("line1\nline2\n") == "\n"


def test_detect_line_ending_crlf():
    assert detect_line_ending("line1\r\nline2\r\n") == "\r\n"


def test_detect_line_ending_mixed_prefers_first():
    assert detect_line_ending("line1\r\nline2\nmore") == "\r\n"
    assert detect_line_ending("line1\nline2\r\n") == "\n"


def test_detect_line_ending_without_breaks():
    assert detect_line_ending("single") == "\n"


def test_normalize_to_lf():
    assert normalize_to_lf("a\r\nb\rc\nd") == "a\nb\nc\nd"


def test_restore_line_endings():
    assert restore_line_endings("a\nb", "\r\n") == "a\r\nb"
    assert restore_line_endings("a\nb", "\n") == "a\nb"


def test_line_ending_round_trip():
    original = "x\r\ny\r\nz\r\n"
    ending = detect_line_ending(original)
    assert restore_line_endings(normalize_to_lf(original), ending) == original


def test_strip_bom_with_bom():
    assert strip_bom("\ufeffhello") == BomResult(bom="\ufeff", text="hello")


def test_strip_bom_without():
    assert strip_bom("hello") == BomResult(bom="", text="hello")


def test_fuzzy_find_exact():
    r = fuzzy_find_text("hello world", "world")
    assert r.found
    assert r.index == 6
    assert r.content_for_replacement == "hello world"


def test_fuzzy_find_smart_quotes():
    r = fuzzy_find_text("hello \u201cworld\u201d", '"world"')
    assert r.found
    assert r.content_for_replacement == 'hello "world"'


def test_fuzzy_find_unicode_dashes():
    assert fuzzy_find_text("hello\u2014world", "hello-world").found


def test_fuzzy_find_trailing_whitespace():
    assert fuzzy_find_text("line1   \nline2", "line1\nline2").found


def test_fuzzy_find_nbsp():
    assert fuzzy_find_text("hello\u00a0world", "hello world").found


def test_fuzzy_find_miss():
    assert not fuzzy_find_text("hello", "missing").found


def test_normalize_for_fuzzy_match_values():
    assert normalize_for_fuzzy_match("a \u2018b\u2019 \t\nc\u2013d\u202fe") == "a 'b'\nc-d e"


def test_apply_edits_single():
    result = apply_edits("hello world", [EditPair("world", "gcode")], "test.txt")
    assert result.new_content == "hello gcode"
    assert result.base_content == "hello world"


def test_apply_edits_multiple_non_overlapping():
    result = apply_edits(
        "one two three",
        [EditPair("one", "ONE"), EditPair("three", "THREE")],
        "test.txt",
    )
    assert result.new_content == "ONE two THREE"


def test_apply_edits_overlap():
    with pytest.raises(EditError, match="overlap"):
        apply_edits("abcdef", [EditPair("abc", "X"), EditPair("bcd", "Y")], "test.txt")


def test_apply_edits_not_found():
    with pytest.raises(EditError, match="not found"):
        apply_edits("hello", [EditPair("world", "gcode")], "test.txt")


def test_apply_edits_not_unique():
    with pytest.raises(EditError, match="not unique"):
        apply_edits("hello hello", [EditPair("hello", "hi")], "test.txt")


def test_apply_edits_empty_old_text():
    with pytest.raises(EditError, match="oldText is empty"):
        apply_edits("hello", [EditPair("", "x")], "test.txt")


def test_apply_edits_no_changes():
    with pytest.raises(EditError, match="no changes"):
        apply_edits("hello", [EditPair("hello", "hello")], "test.txt")


def test_apply_edits_empty():
    with pytest.raises(EditError):
        apply_edits("hello", [], "test.txt")


def test_edit_error_is_tool_error():
    with pytest.raises(ToolError):
        apply_edits("hello", [], "test.txt")


def test_apply_edits_fuzzy_uses_normalized_base():
    result = apply_edits("say \u201chello\u201d", [EditPair('say "hello"', 'say "world"')], "f.txt")
    assert result.base_content == 'say "hello"'
    assert result.new_content == 'say "world"'


def test_generate_diff_single_change():
    r = generate_diff("line1\nline2\nline3", "line1\nCHANGED\nline3", 2)
    assert r.diff == "    1 line1\n-   2 line2\n+   2 CHANGED\n    3 line3\n"
    assert r.first_changed_line == 2


def test_generate_diff_no_change():
    r = generate_diff("same", "same", 2)
    assert r.diff == ""
    assert r.first_changed_line is None


def test_generate_diff_additions():
    r = generate_diff("a", "a\nb\nc", 0)
    assert r.diff == "+   2 b\n+   3 c\n"
    assert r.first_changed_line == 2


def test_generate_diff_deletions():
    r = generate_diff("a\nb\nc", "a", 0)
    assert r.diff == "-   2 b\n-   3 c\n"


def test_generate_diff_context_lines():
    r = generate_diff("one\ntwo\nthree\nfour\nfive", "one\ntwo\nCHANGED\nfour\nfive", 1)
    assert r.diff.splitlines() == [
        "    2 two",
        "-   3 three",
        "+   3 CHANGED",
        "    4 four",
    ]


def test_generate_diff_separates_distant_regions():
    r = generate_diff("a\nb\nc", "X\nb\nY", 0)
    assert r.diff == "-   1 a\n+   1 X\n...\n-   3 c\n+   3 Y\n"
    assert r.first_changed_line == 1


def test_generate_diff_negative_context_is_zero():
    assert generate_diff("a\nb", "a\nc", -3).diff == "-   2 b\n+   2 c\n"