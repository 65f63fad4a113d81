"""Tests for the span model: construction, merging, containment, ordering."""

import pytest
from hypothesis import given
from hypothesis import strategies as st

from parsekit.core.errors import CrossUnitSpanError, IncomparableSpanError, SpanError
from parsekit.core.span import Span
from parsekit.enums import UnitKind
from tests.strategies import same_unit_span_pairs, spans, unit_names

# ============================================================================
# CONSTRUCTION
# ============================================================================


class TestSpanConstruction:
    """Span validation and factory methods."""

    def test_text_factory_sets_hints(self) -> None:
        """Span.text records line/column hints and TEXT kind."""
        span = Span.text("a.txt", 2, 5, 1, 3, 1, 6)
        assert span.kind is UnitKind.TEXT
        assert (span.start_line, span.start_column) == (1, 3)
        assert (span.end_line, span.end_column) == (1, 6)

    def test_stream_factory_has_no_hints(self) -> None:
        """Span.stream is a token-index span without line hints."""
        span = Span.stream("macro", 0, 3)
        assert span.kind is UnitKind.STREAM
        assert span.start_line is None

    def test_negative_start_rejected(self) -> None:
        """Negative start offsets raise ValueError."""
        with pytest.raises(ValueError, match="start"):
            Span("u", -1, 0)

    def test_end_before_start_rejected(self) -> None:
        """End before start raises ValueError."""
        with pytest.raises(ValueError, match="end"):
            Span("u", 5, 4)

    def test_zero_width_is_empty(self) -> None:
        """A zero-width span is empty with length 0."""
        span = Span("u", 3, 3)
        assert span.is_empty
        assert span.length == 0

    def test_spans_are_immutable(self) -> None:
        """Spans are frozen value types."""
        span = Span("u", 0, 1)
        with pytest.raises(AttributeError):
            span.start = 2  # type: ignore[misc]


# ============================================================================
# MERGE
# ============================================================================


class TestSpanMerge:
    """Union of spans within one unit."""

    def test_merge_covers_both(self) -> None:
        """Merging disjoint spans yields the minimal covering span."""
        a = Span.text("main.cfg", 0, 5, 1, 1, 1, 6)
        b = Span.text("main.cfg", 6, 9, 1, 7, 1, 10)
        merged = a.merge(b)
        assert (merged.start, merged.end) == (0, 9)
        assert merged.render() == "main.cfg:1:1-1:10"

    def test_merge_is_order_independent(self) -> None:
        """a.merge(b) == b.merge(a)."""
        a = Span("u", 0, 2)
        b = Span("u", 5, 7)
        assert a.merge(b) == b.merge(a)

    def test_merge_with_contained_returns_container(self) -> None:
        """Merging with a nested span returns the outer span unchanged."""
        outer = Span("u", 0, 10)
        inner = Span("u", 2, 4)
        assert outer.merge(inner) is outer

    def test_cross_unit_merge_raises(self) -> None:
        """Spans from different units never merge."""
        with pytest.raises(CrossUnitSpanError):
            Span("a.txt", 0, 1).merge(Span("b.txt", 0, 1))

    def test_cross_unit_error_is_span_error(self) -> None:
        """CrossUnitSpanError belongs to the SpanError family."""
        assert issubclass(CrossUnitSpanError, SpanError)

    def test_cover_requires_spans(self) -> None:
        """Span.cover() of nothing raises ValueError."""
        with pytest.raises(ValueError, match="at least one"):
            Span.cover([])

    def test_cover_many(self) -> None:
        """Span.cover merges every span."""
        covered = Span.cover([Span("u", 4, 5), Span("u", 1, 2), Span("u", 8, 9)])
        assert (covered.start, covered.end) == (1, 9)

    @given(spans())
    def test_self_merge_is_identity(self, span: Span) -> None:
        """PROPERTY: the union of a span with itself equals itself."""
        assert span.merge(span) == span

    @given(same_unit_span_pairs())
    def test_merge_contains_both(self, pair: tuple[Span, Span]) -> None:
        """PROPERTY: a merge contains both inputs."""
        a, b = pair
        merged = a.merge(b)
        assert merged.contains(a)
        assert merged.contains(b)

    @given(spans(unit="first.txt"), spans(unit="second.txt"))
    def test_distinct_units_never_merge(self, a: Span, b: Span) -> None:
        """PROPERTY: merging spans from two distinct units always fails."""
        with pytest.raises(CrossUnitSpanError):
            a.merge(b)


# ============================================================================
# ORDERING AND CONTAINMENT
# ============================================================================


class TestSpanOrdering:
    """Comparison within and across units."""

    def test_ordered_by_start_then_end(self) -> None:
        """Spans order by (start, end)."""
        assert Span("u", 0, 3) < Span("u", 1, 2)
        assert Span("u", 1, 2) < Span("u", 1, 3)
        assert Span("u", 1, 3) >= Span("u", 1, 3)

    def test_cross_unit_ordering_raises(self) -> None:
        """Spans from different units are incomparable."""
        with pytest.raises(IncomparableSpanError):
            _ = Span("a", 0, 1) < Span("b", 0, 1)

    def test_contains_other_unit_is_false(self) -> None:
        """contains() is False across units rather than raising."""
        assert not Span("a", 0, 10).contains(Span("b", 1, 2))

    def test_sorted_within_unit(self) -> None:
        """sorted() works for spans of one unit."""
        items = [Span("u", 5, 6), Span("u", 0, 1), Span("u", 2, 4)]
        assert [s.start for s in sorted(items)] == [0, 2, 5]


# ============================================================================
# RENDERING AND POINTS
# ============================================================================


class TestSpanRendering:
    """render(), points and extraction."""

    def test_render_text(self) -> None:
        """Text spans render as unit:line:col-line:col."""
        assert str(Span.text("in.txt", 0, 1, 2, 3, 2, 4)) == "in.txt:2:3-2:4"

    def test_render_stream(self) -> None:
        """Stream spans render as token index ranges."""
        assert Span.stream("tokens", 2, 5).render() == "tokens:2..5"

    @given(
        unit_names,
        st.integers(min_value=0, max_value=500),
        st.integers(min_value=0, max_value=50),
    )
    def test_render_stream_names_unit(self, unit: str, start: int, width: int) -> None:
        """PROPERTY: a stream span renders as its unit then the index range."""
        span = Span.stream(unit, start, start + width)
        assert span.render() == f"{unit}:{start}..{start + width}"

    def test_render_text_without_hints(self) -> None:
        """Text spans without hints fall back to offsets."""
        assert Span("in.txt", 3, 7).render() == "in.txt:@3..7"

    def test_start_and_end_points(self) -> None:
        """Points are zero-width spans at either end."""
        span = Span.text("u", 2, 6, 1, 3, 2, 2)
        start, end = span.start_point(), span.end_point()
        assert (start.start, start.end, start.start_line, start.start_column) == (2, 2, 1, 3)
        assert (end.start, end.end, end.end_line, end.end_column) == (6, 6, 2, 2)

    def test_extract(self) -> None:
        """extract() slices the covered text."""
        assert Span("u", 6, 11).extract("hello world") == "world"
