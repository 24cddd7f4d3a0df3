"""
Suppression system for spacelint rules.

Two comment forms are recognised in JavaScript sources::

    foo();  // spacelint: ignore[style.eol_last]
    /* spacelint: ignore-file[style.no_multiple_empty_lines, style.*] */

``ignore`` silences findings that start on the same line. A finding that
starts on a blank line, as every ``style.no_multiple_empty_lines`` finding
does, is matched against the nearest non-blank line above it instead, so the
comment goes at the end of the line before the run::

    foo();  // spacelint: ignore[style.no_multiple_empty_lines]



    bar();

``ignore-file`` silences matching findings anywhere in the file. Patterns are
rule ids or fnmatch globs.
"""

import fnmatch
import re
from typing import Dict, List, Set, Tuple

from .blank_runs import is_whitespace_only
from .lines import LineIndex

_SUPPRESSION = re.compile(
    r'(?://|/\*)\s*spacelint:\s*(ignore(?:-file)?)\s*\[\s*([^\]]*)\]',
    re.IGNORECASE,
)


class SuppressionParser:
    """Parser for spacelint suppression comments."""

    def __init__(self, text: str):
        self.text = text
        self.index = LineIndex(text)
        self._parse_suppressions()

    def _parse_suppressions(self):
        """Parse all suppression comments in the text."""
        self.line_suppressions: Dict[int, Set[str]] = {}  # line_number -> {rule_patterns}
        self.file_suppressions: Set[str] = set()

        for line in self.index:
            for kind, patterns in self._extract_suppression_patterns(line.text):
                if kind == "ignore-file":
                    self.file_suppressions.update(patterns)
                else:
                    self.line_suppressions.setdefault(line.index, set()).update(patterns)

    def _extract_suppression_patterns(self, line: str) -> List[Tuple[str, Set[str]]]:
        """Extract (kind, patterns) pairs from a line."""
        found = []
        for match in _SUPPRESSION.finditer(line):
            patterns = {p.strip() for p in match.group(2).split(',') if p.strip()}
            if patterns:
                found.append((match.group(1).lower(), patterns))
        return found

    def is_suppressed(self, rule_id: str, start_byte: int) -> bool:
        """Check if a rule finding should be suppressed."""
        if any(self._matches_pattern(rule_id, p) for p in self.file_suppressions):
            return True

        line_num = self._anchor_line(self.index.line_at(start_byte))
        for pattern in self.line_suppressions.get(line_num, ()):
            if self._matches_pattern(rule_id, pattern):
                return True

        return False

    def _anchor_line(self, line_num: int) -> int:
        """Walk up from a blank line to the closest line with content."""
        while line_num > 1 and line_num <= len(self.index) and is_whitespace_only(self.index.line(line_num).text):
            line_num -= 1
        return line_num

    def _matches_pattern(self, rule_id: str, pattern: str) -> bool:
        """Check if a rule ID matches a suppression pattern."""
        return rule_id == pattern or fnmatch.fnmatch(rule_id, pattern)


def filter_suppressed_findings(findings: List, text: str) -> List:
    """Filter out suppressed findings from a list."""
    if not findings:
        return findings

    parser = SuppressionParser(text)
    return [
        finding for finding in findings
        if not parser.is_suppressed(getattr(finding, 'rule', ''), getattr(finding, 'start_byte', 0))
    ]

