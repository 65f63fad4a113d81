"""Cursor: the single mutable position over an InputSource.

The Cursor pulls atoms from its source lazily and stores them in an arena,
so any earlier position can be restored in O(1) without asking the source
again. Positions are plain ordered values; the Cursor never holds a
reference to a caller's position.

The Cursor also carries the per-parse state that combinators share: the
active diagnostic accumulator and the depth guard for recursive grammars.
A Cursor is owned by one parse; grammars are shared, cursors are not.

Python 3.13+.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

from parsekit.constants import MAX_DEPTH
from parsekit.core.depth_guard import DepthGuard
from parsekit.core.span import Span
from parsekit.diagnostics.accumulator import ErrorAccumulator
from parsekit.diagnostics.codes import Diagnostic

from .source import Atom, InputSource

__all__ = ["Cursor", "CursorPosition"]


@dataclass(frozen=True, slots=True, order=True)
class CursorPosition:
    """Index into the cursor's atom arena."""

    index: int


class Cursor:
    """Position, backtracking and per-parse state over one input source.

    Example:
        >>> cursor = Cursor(TextSource("ab"))
        >>> mark = cursor.position()
        >>> cursor.advance().value
        'a'
        >>> cursor.restore(mark)
        >>> cursor.peek().value
        'a'
    """

    __slots__ = ("_atoms", "_depth", "_diagnostics", "_exhausted", "_index", "_source")

    def __init__(self, source: InputSource, *, max_depth: int = MAX_DEPTH) -> None:
        self._source = source
        self._atoms: list[Atom[object]] = []
        self._index = 0
        self._exhausted = False
        self._diagnostics = ErrorAccumulator()
        self._depth = DepthGuard(max_depth=max_depth)

    # ------------------------------------------------------------------
    # Position
    # ------------------------------------------------------------------

    def _fill(self, index: int) -> bool:
        """Pull atoms until ``index`` is in the arena. False at end of input."""
        while len(self._atoms) <= index:
            if self._exhausted:
                return False
            atom = self._source.advance()
            if atom is None:
                self._exhausted = True
                return False
            self._atoms.append(atom)
        return True

    @property
    def source(self) -> InputSource:
        return self._source

    @property
    def unit_id(self) -> str:
        return self._source.source_unit_id()

    @property
    def is_eof(self) -> bool:
        return not self._fill(self._index)

    def peek(self, n: int = 0) -> Atom[object] | None:
        """Atom ``n`` places ahead of the current position, or None."""
        if n < 0:
            msg = f"peek offset must be >= 0, got {n}"
            raise ValueError(msg)
        if not self._fill(self._index + n):
            return None
        return self._atoms[self._index + n]

    def advance(self) -> Atom[object] | None:
        """Consume one atom. At end of input returns None and does not move."""
        atom = self.peek()
        if atom is not None:
            self._index += 1
        return atom

    def position(self) -> CursorPosition:
        return CursorPosition(self._index)

    def restore(self, position: CursorPosition) -> None:
        """Return to an earlier (or already visited) position.

        Raises:
            TypeError: If ``position`` did not come from a Cursor
            ValueError: If ``position`` was never reached
        """
        if not isinstance(position, CursorPosition):
            msg = f"Cursor cannot restore {type(position).__name__}"
            raise TypeError(msg)
        if not 0 <= position.index <= len(self._atoms):
            msg = f"Position {position.index} was never reached (arena holds {len(self._atoms)})"
            raise ValueError(msg)
        self._index = position.index

    def _point_at(self, index: int) -> Span:
        if self._fill(index):
            return self._atoms[index].span.start_point()
        # Index is at the end of input, where the source itself now sits
        return self._source.point_span()

    def point_span(self) -> Span:
        """Zero-width span at the current position."""
        return self._point_at(self._index)

    def span_since(self, position: CursorPosition) -> Span:
        """Span from ``position`` to the current position.

        Zero-width at ``position`` when nothing was consumed.
        """
        if position.index >= self._index:
            return self._point_at(position.index)
        first = self._atoms[position.index].span
        last = self._atoms[self._index - 1].span
        return first.merge(last)

    def atoms_since(self, position: CursorPosition) -> tuple[Atom[object], ...]:
        return tuple(self._atoms[position.index : self._index])

    def text_since(self, position: CursorPosition) -> str:
        """Concatenated atom values consumed since ``position``."""
        return "".join(str(atom.value) for atom in self._atoms[position.index : self._index])

    # ------------------------------------------------------------------
    # Per-parse state
    # ------------------------------------------------------------------

    @property
    def diagnostics(self) -> ErrorAccumulator:
        """The active accumulator (a scratch child during speculative attempts)."""
        return self._diagnostics

    @property
    def depth(self) -> DepthGuard:
        return self._depth

    @contextmanager
    def scratch(self) -> Iterator[ErrorAccumulator]:
        """Route reports into a fresh child accumulator for one attempt.

        The caller commits or discards the yielded child on the parent
        (``cursor.diagnostics`` after the block exits).
        """
        parent = self._diagnostics
        child = parent.child()
        self._diagnostics = child
        try:
            yield child
        finally:
            self._diagnostics = parent

    def report(self, diagnostic: Diagnostic) -> None:
        """Record a non-fatal diagnostic in the active accumulator."""
        self._diagnostics.add(diagnostic)

    def __repr__(self) -> str:
        return f"Cursor(unit={self.unit_id!r}, index={self._index}, buffered={len(self._atoms)})"
