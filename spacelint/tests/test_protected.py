"""
Tests for protected line collection.
"""

import pytest

from spacelint.engine.protected import ProtectedRangeCollector, collect


class TestProtectedRangeCollector:
    """Test cases for ProtectedRangeCollector."""

    def test_end_line_is_excluded(self):
        assert collect([(2, 5)]) == frozenset({2, 3, 4})

    def test_single_line_span_protects_nothing(self):
        assert collect([(3, 3)]) == frozenset()

    def test_order_does_not_matter(self):
        spans = [(7, 9), (1, 3), (2, 4)]
        assert collect(spans) == collect(list(reversed(spans))) == frozenset({1, 2, 3, 7, 8})

    def test_finalize_returns_frozenset(self):
        collector = ProtectedRangeCollector()
        collector.add_span(1, 2)
        assert not collector.finalized

        protected = collector.finalize()
        assert isinstance(protected, frozenset)
        assert collector.finalized

    def test_add_after_finalize_raises(self):
        collector = ProtectedRangeCollector()
        collector.finalize()
        with pytest.raises(RuntimeError):
            collector.add_span(1, 3)
