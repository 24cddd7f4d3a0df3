"""
Protected line collection.

Lines inside the body of a template literal carry meaning even when they are
empty, so they must never be counted as blank. Spans are fed in any order
while the syntax tree is walked; ``finalize`` closes collection and hands out
the frozen set the classifier works from.
"""

from typing import FrozenSet, Iterable, Set, Tuple

ProtectedLineSet = FrozenSet[int]


class ProtectedRangeCollector:
    """Accumulates protected line indices for a single document."""

    def __init__(self):
        self._lines: Set[int] = set()
        self._finalized = False

    @property
    def finalized(self) -> bool:
        return self._finalized

    def add_span(self, start_line: int, end_line: int) -> None:
        """
        Protect lines ``start_line`` up to, but not including, ``end_line``.

        The closing line is left alone because code may resume after the
        closing delimiter.
        """
        if self._finalized:
            raise RuntimeError("cannot add spans after the collector was finalized")
        self._lines.update(range(start_line, end_line))

    def finalize(self) -> ProtectedLineSet:
        """Close collection and return the protected line set."""
        self._finalized = True
        return frozenset(self._lines)


def collect(spans: Iterable[Tuple[int, int]]) -> ProtectedLineSet:
    """Collect every ``(start_line, end_line)`` span and finalize."""
    collector = ProtectedRangeCollector()
    for start_line, end_line in spans:
        collector.add_span(start_line, end_line)
    return collector.finalize()
