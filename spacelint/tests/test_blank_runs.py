"""
Tests for blank run detection and patch building.
"""

import pytest

from spacelint.engine.autofix import apply_edits
from spacelint.engine.blank_runs import (
    LineClassifier, RunCategory, ThresholdPolicy,
    analyze, build_diagnostics, scan_blank_runs,
)
from spacelint.engine.lines import LineIndex
from spacelint.engine.messages import render_message
from spacelint.engine.types import Edit


def _doc(lines):
    return "\n".join(lines) + "\n"


def _fix(text, policy, protected=frozenset()):
    index = LineIndex(text)
    diagnostics = build_diagnostics(index, analyze(index, protected, policy))
    edits = [Edit(d.patch.start_offset, d.patch.end_offset, d.patch.replacement) for d in diagnostics]
    return apply_edits(text, edits)


class TestThresholdPolicy:

    def test_limits_inherit_max(self):
        policy = ThresholdPolicy.resolve(2)
        assert (policy.max, policy.max_bof, policy.max_eof) == (2, 2, 2)

    def test_explicit_limits(self):
        policy = ThresholdPolicy.resolve(2, max_bof=0, max_eof=1)
        assert policy.limit(RunCategory.BOF) == 0
        assert policy.limit(RunCategory.EOF) == 1
        assert policy.limit(RunCategory.MIDDLE) == 2

    def test_zero_is_not_unset(self):
        assert ThresholdPolicy.resolve(3, max_eof=0).max_eof == 0


class TestLineClassifier:

    def test_requires_frozen_set(self):
        with pytest.raises(TypeError):
            LineClassifier({1, 2})

    def test_whitespace_and_bom_are_blank(self):
        classifier = LineClassifier(frozenset())
        index = LineIndex("  \t\n\ufeff\nx\n")
        assert [classifier.is_blank(line) for line in index] == [True, True, False]

    def test_only_javascript_whitespace_is_blank(self):
        classifier = LineClassifier(frozenset())
        index = LineIndex("\u00a0\u3000\n\x85\n\x1c\n\x1f\n")
        assert [classifier.is_blank(line) for line in index] == [True, False, False, False]

    def test_protected_line_is_not_blank(self):
        classifier = LineClassifier(frozenset({1}))
        assert not classifier.is_blank(LineIndex("\n").line(1))


class TestAnalyze:
    """Test cases for the blank run scan."""

    def test_middle_run_over_limit(self):
        text = _doc(["a", "", "", "", "b"])
        violations = analyze(LineIndex(text), frozenset(), ThresholdPolicy.resolve(1))

        assert len(violations) == 1
        violation = violations[0]
        assert violation.run.category is RunCategory.MIDDLE
        assert (violation.first_excess_line, violation.last_excess_line) == (3, 4)
        assert len(violation.run) == 3

    def test_middle_run_fix(self):
        text = _doc(["a", "", "", "", "b"])
        assert _fix(text, ThresholdPolicy.resolve(1)) == _doc(["a", "", "b"])

    def test_run_within_limit(self):
        text = _doc(["a", "", "", "b"])
        assert analyze(LineIndex(text), frozenset(), ThresholdPolicy.resolve(5)) == []

    def test_beginning_of_file(self):
        text = _doc(["", "", "a"])
        policy = ThresholdPolicy.resolve(2, max_bof=0)
        violations = analyze(LineIndex(text), frozenset(), policy)

        assert len(violations) == 1
        assert violations[0].run.category is RunCategory.BOF
        assert (violations[0].first_excess_line, violations[0].last_excess_line) == (1, 2)
        assert _fix(text, policy) == _doc(["a"])

    def test_end_of_file(self):
        text = "a\n\n\n\n"
        policy = ThresholdPolicy.resolve(2, max_eof=1)
        violations = analyze(LineIndex(text), frozenset(), policy)

        assert len(violations) == 1
        assert violations[0].run.category is RunCategory.EOF
        assert _fix(text, policy) == "a\n\n"

    def test_single_terminating_newline_is_not_a_run(self):
        policy = ThresholdPolicy.resolve(0, max_bof=0, max_eof=0)
        assert analyze(LineIndex("a\n"), frozenset(), policy) == []

    def test_fully_blank_document_reports_one_bof_violation(self):
        for max_eof in (0, 1, 10):
            policy = ThresholdPolicy.resolve(0, max_bof=1, max_eof=max_eof)
            violations = analyze(LineIndex("\n\n\n"), frozenset(), policy)
            assert len(violations) == 1
            assert violations[0].run.category is RunCategory.BOF

    def test_empty_document(self):
        policy = ThresholdPolicy.resolve(0, max_bof=0, max_eof=0)
        assert analyze(LineIndex(""), frozenset(), policy) == []

    def test_one_violation_per_run(self):
        text = _doc(["a", "", "", "", "b", "", "", "", "c"])
        violations = analyze(LineIndex(text), frozenset(), ThresholdPolicy.resolve(1))
        assert [v.run.first_line for v in violations] == [2, 6]

    def test_whitespace_lines_join_the_run(self):
        text = _doc(["a", "  ", "\t", "", "b"])
        violations = analyze(LineIndex(text), frozenset(), ThresholdPolicy.resolve(1))
        assert len(violations) == 1
        assert violations[0].run.first_line == 2

    def test_control_separators_end_a_run(self):
        text = _doc(["a", "\x85", "\x1c", "b"])
        assert analyze(LineIndex(text), frozenset(), ThresholdPolicy.resolve(0)) == []

    def test_protected_lines_split_runs(self):
        text = _doc(["a", "", "", "", "b"])
        violations = analyze(LineIndex(text), frozenset({2, 3}), ThresholdPolicy.resolve(1))
        assert violations == []

    def test_crlf_fix(self):
        text = "a\r\n\r\n\r\n\r\nb\r\n"
        assert _fix(text, ThresholdPolicy.resolve(1)) == "a\r\n\r\nb\r\n"

    def test_fix_is_idempotent(self):
        policy = ThresholdPolicy.resolve(1, max_bof=0, max_eof=0)
        documents = [
            "\n\n\nfoo();\n\n\n\nbar();\n\n\n",
            "\n\n\n",
            "a\r\n\r\n\r\nb",
            "x\n\n \n\t\ny\n",
        ]
        for text in documents:
            fixed = _fix(text, policy)
            assert analyze(LineIndex(fixed), frozenset(), policy) == []

    def test_scan_blank_runs_without_lines(self):
        assert scan_blank_runs(0, lambda i: True, ThresholdPolicy.resolve(0)) == []


class TestBuildDiagnostics:

    def test_middle_diagnostic(self):
        text = _doc(["a", "", "", "", "b"])
        index = LineIndex(text)
        (diagnostic,) = build_diagnostics(index, analyze(index, frozenset(), ThresholdPolicy.resolve(1)))

        assert diagnostic.message_id == "consecutiveBlank"
        assert diagnostic.start == (3, 0)
        assert diagnostic.end == (5, 0)
        assert diagnostic.data == {"max": 1, "pluralizedLines": "line"}
        assert (diagnostic.patch.start_offset, diagnostic.patch.end_offset) == (3, 5)
        assert diagnostic.patch.replacement == ""

    def test_beginning_of_file_diagnostic(self):
        text = _doc(["", "", "a"])
        index = LineIndex(text)
        policy = ThresholdPolicy.resolve(2, max_bof=0)
        (diagnostic,) = build_diagnostics(index, analyze(index, frozenset(), policy))

        assert diagnostic.message_id == "blankBeginningOfFile"
        assert diagnostic.start == (1, 0)
        assert diagnostic.end == (3, 0)
        assert diagnostic.data == {"max": 0, "pluralizedLines": "lines"}

    def test_end_of_file_patch_runs_to_document_end(self):
        text = "a\n\n\n"
        index = LineIndex(text)
        policy = ThresholdPolicy.resolve(2, max_eof=0)
        (diagnostic,) = build_diagnostics(index, analyze(index, frozenset(), policy))

        assert diagnostic.message_id == "blankEndOfFile"
        assert diagnostic.patch.end_offset == index.byte_length


class TestMessages:

    def test_render_pluralized(self):
        assert render_message(
            "style.no_multiple_empty_lines", "consecutiveBlank", {"max": 2, "pluralizedLines": "lines"}
        ) == "More than 2 blank lines not allowed."

    def test_render_beginning_of_file(self):
        assert render_message(
            "style.no_multiple_empty_lines", "blankBeginningOfFile", {"max": 0}
        ) == "Too many blank lines at the beginning of file. Max of 0 allowed."

    def test_unknown_message(self):
        with pytest.raises(KeyError):
            render_message("style.no_multiple_empty_lines", "nope")
