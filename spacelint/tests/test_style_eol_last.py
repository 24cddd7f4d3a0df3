"""
Tests for style.eol_last rule.
"""

import pytest

from spacelint.engine.autofix import apply_findings
from spacelint.engine.javascript_adapter import JavaScriptAdapter
from spacelint.engine.options import ConfigError
from spacelint.engine.types import RuleContext
from spacelint.rules.style_eol_last import StyleEolLastRule

RULE_ID = "style.eol_last"


class TestStyleEolLastRule:
    """Test cases for the newline at end of file rule."""

    def setup_method(self):
        """Set up test fixtures."""
        self.rule = StyleEolLastRule()
        self.adapter = JavaScriptAdapter()

    def _run_rule(self, code: str, mode=None):
        """Helper to run the rule on code and return findings."""
        # Works on raw text only, no syntax tree needed
        ctx = RuleContext(
            file_path="test.js",
            text=code,
            tree=None,
            adapter=self.adapter,
            config={RULE_ID: {"mode": mode}} if mode else {}
        )
        return list(self.rule.visit(ctx))

    def _apply_autofix(self, code: str, findings) -> str:
        return apply_findings(code, findings)

    def test_missing_newline(self):
        code = "foo();"
        findings = self._run_rule(code)

        assert len(findings) == 1
        finding = findings[0]
        assert finding.rule == RULE_ID
        assert finding.message == "Newline required at end of file but not found."
        assert finding.message_id == "missing"
        assert finding.severity == "info"
        assert finding.loc == (1, 6, 1, 6)
        assert self._apply_autofix(code, findings) == "foo();\n"

    def test_missing_newline_on_later_line(self):
        findings = self._run_rule("a();\nbb();")
        assert findings[0].loc == (2, 5, 2, 5)

    def test_newline_present(self):
        assert self._run_rule("foo();\n") == []
        assert self._run_rule("foo();\r\n") == []

    def test_empty_file_is_valid(self):
        for mode in ("always", "never", "unix", "windows"):
            assert self._run_rule("", mode) == []

    def test_unix_mode_behaves_as_always(self):
        code = "foo();"
        assert self._apply_autofix(code, self._run_rule(code, "unix")) == "foo();\n"

    def test_windows_mode_appends_crlf(self):
        code = "foo();"
        findings = self._run_rule(code, "windows")

        assert len(findings) == 1
        assert self._apply_autofix(code, findings) == "foo();\r\n"

    def test_trailing_carriage_return_only(self):
        code = "foo();\r"
        findings = self._run_rule(code)

        assert len(findings) == 1
        assert findings[0].loc == (2, 0, 2, 0)
        assert self._apply_autofix(code, findings) == "foo();\r\n"

    def test_never_reports_trailing_newline(self):
        code = "foo();\n"
        findings = self._run_rule(code, "never")

        assert len(findings) == 1
        finding = findings[0]
        assert finding.message == "Newline not allowed at end of file."
        assert finding.message_id == "unexpected"
        assert finding.loc == (1, 6, 2, 0)
        assert (finding.start_byte, finding.end_byte) == (6, 7)
        assert self._apply_autofix(code, findings) == "foo();"

    def test_never_removes_every_trailing_newline(self):
        code = "foo();\r\n\n"
        findings = self._run_rule(code, "never")

        assert len(findings) == 1
        assert findings[0].loc == (2, 0, 3, 0)
        assert self._apply_autofix(code, findings) == "foo();"

    def test_never_without_newline(self):
        assert self._run_rule("foo();", "never") == []

    def test_never_on_newline_only_file(self):
        code = "\n"
        findings = self._run_rule(code, "never")
        assert self._apply_autofix(code, findings) == ""

    def test_invalid_mode(self):
        with pytest.raises(ConfigError):
            self._run_rule("foo();", "sometimes")
