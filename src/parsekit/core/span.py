"""Immutable source spans.

A span is a half-open range ``[start, end)`` inside exactly one source unit.
Text units measure offsets in code points (Python string indices) and carry
1-based line/column hints; stream units measure offsets in token indices.

Spans from different units are never merged and never ordered: both are
programming errors and raise :class:`~parsekit.core.errors.SpanError`
subclasses.

Python 3.13+. Zero external dependencies.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from parsekit.core.errors import CrossUnitSpanError, IncomparableSpanError
from parsekit.enums import UnitKind

__all__ = ["Span"]


@dataclass(frozen=True, slots=True)
class Span:
    """Source location of an atom, token, node or diagnostic.

    Attributes:
        unit: Source unit identifier (file path, buffer or macro-stream name)
        start: Starting offset (0-indexed, inclusive)
        end: Ending offset (exclusive)
        kind: Whether offsets index characters or tokens
        start_line: Line of ``start`` (1-indexed), text units only
        start_column: Column of ``start`` (1-indexed), text units only
        end_line: Line of ``end`` (1-indexed), text units only
        end_column: Column of ``end`` (1-indexed), text units only

    Example:
        >>> a = Span.text("main.cfg", 0, 5, 1, 1, 1, 6)
        >>> b = Span.text("main.cfg", 6, 9, 1, 7, 1, 10)
        >>> a.merge(b).render()
        'main.cfg:1:1-1:10'
    """

    unit: str
    start: int
    end: int
    kind: UnitKind = UnitKind.TEXT
    start_line: int | None = None
    start_column: int | None = None
    end_line: int | None = None
    end_column: int | None = None

    def __post_init__(self) -> None:
        """Validate Span invariants.

        Raises:
            ValueError: If start is negative or end precedes start.
        """
        if self.start < 0:
            msg = f"Span.start must be >= 0, got {self.start}"
            raise ValueError(msg)
        if self.end < self.start:
            msg = f"Span.end ({self.end}) must be >= start ({self.start})"
            raise ValueError(msg)

    @classmethod
    def text(
        cls,
        unit: str,
        start: int,
        end: int,
        start_line: int,
        start_column: int,
        end_line: int,
        end_column: int,
    ) -> Span:
        """Create a text span with line/column hints."""
        return cls(unit, start, end, UnitKind.TEXT, start_line, start_column, end_line, end_column)

    @classmethod
    def stream(cls, unit: str, start: int, end: int) -> Span:
        """Create a token-index span in a stream unit."""
        return cls(unit, start, end, UnitKind.STREAM)

    @classmethod
    def cover(cls, spans: Iterable[Span]) -> Span:
        """Minimal span covering every span in ``spans``.

        Raises:
            ValueError: If ``spans`` is empty
            CrossUnitSpanError: If the spans belong to different units
        """
        iterator = iter(spans)
        try:
            result = next(iterator)
        except StopIteration:
            msg = "Span.cover() requires at least one span"
            raise ValueError(msg) from None
        for span in iterator:
            result = result.merge(span)
        return result

    @property
    def length(self) -> int:
        """Number of characters (or tokens) covered."""
        return self.end - self.start

    @property
    def is_empty(self) -> bool:
        """True for zero-width spans."""
        return self.start == self.end

    def merge(self, other: Span) -> Span:
        """Return the minimal span covering both spans.

        Raises:
            CrossUnitSpanError: If the spans belong to different units
        """
        if self.unit != other.unit:
            msg = f"Cannot merge spans from different units: {self.unit!r} and {other.unit!r}"
            raise CrossUnitSpanError(msg)
        first = self if self.start <= other.start else other
        last = self if self.end >= other.end else other
        if first is last:
            return first
        return Span(
            self.unit,
            first.start,
            last.end,
            self.kind,
            first.start_line,
            first.start_column,
            last.end_line,
            last.end_column,
        )

    def contains(self, other: Span) -> bool:
        """Check whether ``other`` lies entirely within this span."""
        return (
            self.unit == other.unit
            and self.start <= other.start
            and other.end <= self.end
        )

    def start_point(self) -> Span:
        """Zero-width span at this span's start."""
        return Span(
            self.unit,
            self.start,
            self.start,
            self.kind,
            self.start_line,
            self.start_column,
            self.start_line,
            self.start_column,
        )

    def end_point(self) -> Span:
        """Zero-width span at this span's end."""
        return Span(
            self.unit,
            self.end,
            self.end,
            self.kind,
            self.end_line,
            self.end_column,
            self.end_line,
            self.end_column,
        )

    def extract(self, source: str) -> str:
        """Slice the covered text out of ``source``."""
        return source[self.start : self.end]

    def render(self) -> str:
        """Format the location for diagnostics.

        Returns:
            ``unit:line:col-line:col`` for text units,
            ``unit:start..end`` (token indices) for stream units.
        """
        if self.kind is UnitKind.STREAM:
            return f"{self.unit}:{self.start}..{self.end}"
        if self.start_line is None or self.start_column is None:
            return f"{self.unit}:@{self.start}..{self.end}"
        return (
            f"{self.unit}:{self.start_line}:{self.start_column}"
            f"-{self.end_line}:{self.end_column}"
        )

    def __str__(self) -> str:
        return self.render()

    def _ordering_key(self, other: Span) -> tuple[tuple[int, int], tuple[int, int]]:
        if self.unit != other.unit:
            msg = f"Cannot order spans from different units: {self.unit!r} and {other.unit!r}"
            raise IncomparableSpanError(msg)
        return (self.start, self.end), (other.start, other.end)

    def __lt__(self, other: Span) -> bool:
        mine, theirs = self._ordering_key(other)
        return mine < theirs

    def __le__(self, other: Span) -> bool:
        mine, theirs = self._ordering_key(other)
        return mine <= theirs

    def __gt__(self, other: Span) -> bool:
        mine, theirs = self._ordering_key(other)
        return mine > theirs

    def __ge__(self, other: Span) -> bool:
        mine, theirs = self._ordering_key(other)
        return mine >= theirs
