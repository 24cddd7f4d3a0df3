"""
Tests for autofix application.
"""

from spacelint.engine.autofix import (
    apply_edits, apply_findings, count_applicable_edits, fix_files, unified_diff,
)
from spacelint.engine.types import Edit, Finding


def _finding(file_path, edits):
    return Finding(
        rule="style.no_multiple_empty_lines",
        message="More than 1 blank line not allowed.",
        file=file_path,
        start_byte=edits[0].start_byte if edits else 0,
        end_byte=edits[0].end_byte if edits else 0,
        severity="warn",
        autofix=edits,
    )


class TestApplyEdits:
    """Test cases for apply_edits."""

    def test_no_edits(self):
        assert apply_edits("abc", []) == "abc"

    def test_deletion(self):
        assert apply_edits("hello world", [Edit(5, 11, "")]) == "hello"

    def test_insertion_at_end(self):
        assert apply_edits("foo();", [Edit(6, 6, "\n")]) == "foo();\n"

    def test_edits_applied_in_offset_order(self):
        edits = [Edit(4, 5, "X"), Edit(0, 1, "Y")]
        assert apply_edits("abcdef", edits) == "YbcdXf"

    def test_overlapping_edit_skipped(self):
        edits = [Edit(2, 4, "Z"), Edit(0, 3, "")]
        assert apply_edits("abcdef", edits) == "def"
        assert count_applicable_edits(edits) == 1

    def test_out_of_range_edit_skipped(self):
        assert apply_edits("abc", [Edit(2, 10, "")]) == "abc"

    def test_offsets_are_utf8_bytes(self):
        text = "\u00e9\n\n\nx"
        # The accented letter occupies bytes 0-1, the newlines bytes 2-4
        assert apply_edits(text, [Edit(3, 5, "")]) == "\u00e9\nx"


class TestFixFiles:

    def test_apply_findings(self):
        findings = [_finding("a.js", [Edit(2, 4, "")]), _finding("a.js", None)]
        assert apply_findings("a\n\n\nb\n", findings) == "a\nb\n"

    def test_fix_files_groups_by_file(self):
        findings = [
            _finding("b.js", [Edit(0, 1, "")]),
            _finding("a.js", [Edit(2, 3, "")]),
            _finding("b.js", [Edit(3, 4, "")]),
        ]
        text_cache = {"a.js": "a\n\nb\n", "b.js": "\nx\n\n"}

        fixed = fix_files(findings, text_cache)

        assert [f.path for f in fixed] == ["b.js", "a.js"]
        assert fixed[0].content == "x\n"
        assert fixed[0].edits_applied == 2
        assert fixed[1].content == "a\nb\n"
        assert all(f.changed for f in fixed)

    def test_fix_files_skips_uncached(self):
        assert fix_files([_finding("gone.js", [Edit(0, 1, "")])], {}) == []

    def test_unified_diff(self):
        fixed = fix_files([_finding("a.js", [Edit(2, 3, "")])], {"a.js": "a\n\nb\n"})
        diff = unified_diff(fixed)

        assert "--- a/a.js" in diff
        assert "+++ b/a.js" in diff
        assert "\n-\n" in diff
