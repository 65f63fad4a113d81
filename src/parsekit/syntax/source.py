"""Input sources: raw text and pre-tokenized streams behind one contract.

Both variants satisfy the structural :class:`InputSource` protocol. Neither
inherits from it; the Cursor and the grammar layer depend only on the
protocol.

Text sources yield grapheme-level atoms (a base character plus everything
that renders with it), so no span ever splits one visual character. Stream
sources wrap an externally produced token sequence and yield one atom per
token without re-tokenizing.

Line Ending Support:
    - LF (Unix, \\n), CRLF (Windows, \\r\\n) and CR-only (\\r) all end a line
    - CRLF is a single atom (it is one grapheme cluster)

Python 3.13+. Grapheme clusters come from the regex module (\\X, UAX #29).
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

import regex

from parsekit.constants import DEFAULT_STREAM_UNIT, DEFAULT_TEXT_UNIT
from parsekit.core.span import Span

__all__ = [
    "Atom",
    "LINE_TERMINATORS",
    "InputSource",
    "StreamPosition",
    "TextPosition",
    "TextSource",
    "TokenStreamSource",
    "cluster_end",
]

LINE_TERMINATORS: frozenset[str] = frozenset({"\n", "\r\n", "\r"})

# Extended grapheme cluster
_GRAPHEME = regex.compile(r"\X")


@dataclass(frozen=True, slots=True)
class Atom[T]:
    """Smallest unit a cursor yields, paired with its span.

    Attributes:
        value: Grapheme string (text sources) or token (stream sources)
        span: Location of the atom
    """

    value: T
    span: Span


@dataclass(frozen=True, slots=True, order=True)
class TextPosition:
    """Checkpoint of a TextSource: offset plus line/column at that offset."""

    offset: int
    line: int
    column: int


@dataclass(frozen=True, slots=True, order=True)
class StreamPosition:
    """Checkpoint of a TokenStreamSource: index of the next token."""

    index: int


@runtime_checkable
class InputSource(Protocol):
    """Capability set shared by every input domain.

    After end of input, ``peek_atom()`` and ``advance()`` return None forever.
    """

    def source_unit_id(self) -> str:
        """Identifier of the source unit, used for span labeling."""
        ...

    def peek_atom(self) -> Atom[object] | None:
        """Next atom without consuming it."""
        ...

    def advance(self) -> Atom[object] | None:
        """Consume and return the next atom."""
        ...

    def checkpoint(self) -> object:
        """Opaque, cheaply copyable position."""
        ...

    def restore(self, position: object) -> None:
        """Return to a position obtained from checkpoint()."""
        ...

    def point_span(self) -> Span:
        """Zero-width span at the current position."""
        ...


def cluster_end(text: str, offset: int) -> int:
    """End offset of the grapheme cluster starting at ``offset``.

    Example:
        >>> cluster_end("e\\u0301x", 0)  # e + combining acute
        2
        >>> cluster_end("\\r\\nx", 0)
        2
    """
    match = _GRAPHEME.match(text, offset)
    if match is None:
        return offset
    return match.end()


class TextSource:
    """Grapheme-level atoms over raw text.

    Tracks line and column incrementally while scanning: a line-terminator
    atom moves to the next line and resets the column to 1. Columns count
    atoms, so a combining sequence occupies one column.

    Example:
        >>> source = TextSource("ab\\nc", "demo")
        >>> source.advance().span.render()
        'demo:1:1-1:2'
        >>> source.advance(); source.advance().span.render()
        'demo:1:3-2:1'
    """

    __slots__ = ("_column", "_line", "_offset", "_peeked", "_text", "_unit")

    def __init__(self, text: str, unit: str = DEFAULT_TEXT_UNIT) -> None:
        self._text = text
        self._unit = unit
        self._offset = 0
        self._line = 1
        self._column = 1
        self._peeked: Atom[str] | None = None

    @property
    def text(self) -> str:
        """The full source text."""
        return self._text

    def source_unit_id(self) -> str:
        return self._unit

    def peek_atom(self) -> Atom[str] | None:
        if self._peeked is not None:
            return self._peeked
        if self._offset >= len(self._text):
            return None
        end = cluster_end(self._text, self._offset)
        value = self._text[self._offset : end]
        if value in LINE_TERMINATORS:
            end_line, end_column = self._line + 1, 1
        else:
            end_line, end_column = self._line, self._column + 1
        self._peeked = Atom(
            value,
            Span.text(
                self._unit, self._offset, end, self._line, self._column, end_line, end_column
            ),
        )
        return self._peeked

    def advance(self) -> Atom[str] | None:
        atom = self.peek_atom()
        if atom is None:
            return None
        self._offset = atom.span.end
        self._line = atom.span.end_line or self._line
        self._column = atom.span.end_column or self._column
        self._peeked = None
        return atom

    def checkpoint(self) -> TextPosition:
        return TextPosition(self._offset, self._line, self._column)

    def restore(self, position: object) -> None:
        if not isinstance(position, TextPosition):
            msg = f"TextSource cannot restore {type(position).__name__}"
            raise TypeError(msg)
        if not 0 <= position.offset <= len(self._text):
            msg = f"Position {position.offset} outside source of length {len(self._text)}"
            raise ValueError(msg)
        self._offset = position.offset
        self._line = position.line
        self._column = position.column
        self._peeked = None

    def point_span(self) -> Span:
        line, column = self._line, self._column
        return Span.text(self._unit, self._offset, self._offset, line, column, line, column)

    def __repr__(self) -> str:
        return f"TextSource(unit={self._unit!r}, offset={self._offset}, length={len(self._text)})"


class TokenStreamSource:
    """One atom per externally produced token.

    A token whose ``span`` attribute is a Span keeps it (the engine treats it
    as opaque but comparable within its unit). Any other token is assigned a
    stream span ``[i, i+1)`` in this source's unit.

    Example:
        >>> source = TokenStreamSource(["let", "x"], "macro")
        >>> source.advance().span.render()
        'macro:0..1'
    """

    __slots__ = ("_atoms", "_index", "_unit")

    def __init__(self, tokens: Iterable[object], unit: str = DEFAULT_STREAM_UNIT) -> None:
        self._unit = unit
        self._index = 0
        atoms: list[Atom[object]] = []
        for i, token in enumerate(tokens):
            span = getattr(token, "span", None)
            if not isinstance(span, Span):
                span = Span.stream(unit, i, i + 1)
            atoms.append(Atom(token, span))
        self._atoms: tuple[Atom[object], ...] = tuple(atoms)

    def __len__(self) -> int:
        return len(self._atoms)

    def source_unit_id(self) -> str:
        return self._unit

    def peek_atom(self) -> Atom[object] | None:
        if self._index >= len(self._atoms):
            return None
        return self._atoms[self._index]

    def advance(self) -> Atom[object] | None:
        atom = self.peek_atom()
        if atom is not None:
            self._index += 1
        return atom

    def checkpoint(self) -> StreamPosition:
        return StreamPosition(self._index)

    def restore(self, position: object) -> None:
        if not isinstance(position, StreamPosition):
            msg = f"TokenStreamSource cannot restore {type(position).__name__}"
            raise TypeError(msg)
        if not 0 <= position.index <= len(self._atoms):
            msg = f"Position {position.index} outside stream of length {len(self._atoms)}"
            raise ValueError(msg)
        self._index = position.index

    def point_span(self) -> Span:
        if self._index < len(self._atoms):
            return self._atoms[self._index].span.start_point()
        if self._atoms:
            return self._atoms[-1].span.end_point()
        return Span.stream(self._unit, 0, 0)

    def __repr__(self) -> str:
        return (
            f"TokenStreamSource(unit={self._unit!r}, index={self._index}, "
            f"length={len(self._atoms)})"
        )
