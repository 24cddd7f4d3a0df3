"""
Blank line run detection.

The analysis is a two step pipeline::

    protected = collect(spans)                        # protected.py
    violations = analyze(index, protected, policy)
    diagnostics = build_diagnostics(index, violations)

``analyze`` classifies every line once, then walks the gaps between non-blank
lines. Each gap is a maximal run of blank lines; runs touching the start of
the document are BOF, runs touching the end are EOF, everything else is
MIDDLE. A run longer than its category's limit yields one violation, and the
matching patch deletes exactly the excess lines.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple

from .lines import Line, LineIndex
from .protected import ProtectedLineSet


class RunCategory(str, Enum):
    BOF = "BOF"
    EOF = "EOF"
    MIDDLE = "MIDDLE"


MESSAGE_IDS: Dict[RunCategory, str] = {
    RunCategory.BOF: "blankBeginningOfFile",
    RunCategory.EOF: "blankEndOfFile",
    RunCategory.MIDDLE: "consecutiveBlank",
}


@dataclass(frozen=True)
class ThresholdPolicy:
    """Maximum blank lines allowed per run category."""
    max: int
    max_bof: int
    max_eof: int

    @classmethod
    def resolve(cls, max: int, max_bof: Optional[int] = None, max_eof: Optional[int] = None) -> 'ThresholdPolicy':
        """Build a policy; unset start/end limits inherit ``max``."""
        return cls(
            max=max,
            max_bof=max if max_bof is None else max_bof,
            max_eof=max if max_eof is None else max_eof,
        )

    def limit(self, category: RunCategory) -> int:
        if category is RunCategory.BOF:
            return self.max_bof
        if category is RunCategory.EOF:
            return self.max_eof
        return self.max


@dataclass(frozen=True)
class BlankRun:
    first_line: int
    last_line: int
    category: RunCategory

    def __len__(self) -> int:
        return self.last_line - self.first_line + 1


@dataclass(frozen=True)
class Violation:
    run: BlankRun
    allowed: int

    @property
    def first_excess_line(self) -> int:
        return self.run.first_line + self.allowed

    @property
    def last_excess_line(self) -> int:
        return self.run.last_line


@dataclass(frozen=True)
class Patch:
    """Half-open byte range to replace, always with the empty string here."""
    start_offset: int
    end_offset: int
    replacement: str = ""


@dataclass(frozen=True)
class Diagnostic:
    message_id: str
    start: Tuple[int, int]  # (line, column)
    end: Tuple[int, int]
    data: Dict[str, object] = field(default_factory=dict)
    patch: Optional[Patch] = None


# Characters JavaScript's String.prototype.trim() removes: WhiteSpace (with the
# BOM and every Zs space) and LineTerminator.
JS_WHITESPACE = frozenset(
    "\t\n\v\f\r \u00a0\u1680\u2000\u2001\u2002\u2003\u2004\u2005\u2006"
    "\u2007\u2008\u2009\u200a\u2028\u2029\u202f\u205f\u3000\ufeff"
)


def is_whitespace_only(text: str) -> bool:
    return all(ch in JS_WHITESPACE for ch in text)


class LineClassifier:
    """Decides which lines count as blank once protected lines are known."""

    def __init__(self, protected: ProtectedLineSet):
        if not isinstance(protected, frozenset):
            raise TypeError("LineClassifier needs the finalized (frozen) protected line set")
        self.protected = protected

    def is_blank(self, line: Line) -> bool:
        return line.index not in self.protected and is_whitespace_only(line.text)


def scan_blank_runs(line_count: int, is_blank: Callable[[int], bool],
                    policy: ThresholdPolicy) -> List[Violation]:
    """
    Find blank runs that exceed ``policy``.

    Args:
        line_count: number of lines in the document
        is_blank: predicate over 1-based line indices
        policy: limits per category

    Returns:
        Violations ordered by line, at most one per run
    """
    boundaries = [0]
    boundaries.extend(i for i in range(1, line_count + 1) if not is_blank(i))
    boundaries.append(line_count + 1)

    violations = []
    for prev, nxt in zip(boundaries, boundaries[1:]):
        gap = nxt - prev - 1
        if prev == 0:
            category = RunCategory.BOF
        elif nxt == line_count + 1:
            category = RunCategory.EOF
        else:
            category = RunCategory.MIDDLE

        allowed = policy.limit(category)
        if gap > allowed:
            violations.append(Violation(BlankRun(prev + 1, nxt - 1, category), allowed))

    return violations


def analyze(index: LineIndex, protected: ProtectedLineSet, policy: ThresholdPolicy) -> List[Violation]:
    """Classify the document's lines and return the runs violating ``policy``."""
    classifier = LineClassifier(protected)
    blank = [classifier.is_blank(line) for line in index]
    return scan_blank_runs(len(blank), lambda i: blank[i - 1], policy)


def build_patch(index: LineIndex, violation: Violation) -> Patch:
    """Deletion that trims the violating run down to ``allowed`` lines."""
    start = index.line_start(violation.first_excess_line)
    # line_start() past the last line is the document length
    end = index.line_start(violation.run.last_line + 1)
    return Patch(start, end)


def build_diagnostic(index: LineIndex, violation: Violation) -> Diagnostic:
    allowed = violation.allowed
    return Diagnostic(
        message_id=MESSAGE_IDS[violation.run.category],
        start=(violation.first_excess_line, 0),
        end=(violation.last_excess_line + 1, 0),
        data={"max": allowed, "pluralizedLines": "line" if allowed == 1 else "lines"},
        patch=build_patch(index, violation),
    )


def build_diagnostics(index: LineIndex, violations: List[Violation]) -> List[Diagnostic]:
    return [build_diagnostic(index, v) for v in violations]
