"""Atom-level primitives for text sources.

Each primitive consumes at most one grapheme atom, except :func:`literal`,
which matches a whole string atomically (on mismatch the cursor is rewound
to where the literal started). Composite helpers such as :func:`identifier`
and :func:`integer` are ordinary combinations of the primitives.

Matching is on grapheme atoms: ``char("e")`` does not match ``"e\u0301"`` written
as ``e`` plus a combining accent, since that is a single atom.

Python 3.13+.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from parsekit.core.errors import GrammarError
from parsekit.diagnostics.templates import ErrorTemplate
from parsekit.syntax.cursor import Cursor
from parsekit.syntax.result import Failure, ParseResult, Success
from parsekit.syntax.source import cluster_end

from .node import Grammar, describe_atom

__all__ = [
    "Literal",
    "Satisfy",
    "char",
    "digit",
    "identifier",
    "integer",
    "letter",
    "lexeme",
    "literal",
    "none_of",
    "one_of",
    "satisfy",
    "unexpected_here",
    "whitespace",
]

_ASCII_DIGITS: frozenset[str] = frozenset("0123456789")


def unexpected_here(cursor: Cursor, expected: tuple[str, ...]) -> Failure:
    """Failure for the atom under the cursor not being any of ``expected``."""
    atom = cursor.peek()
    if atom is None:
        return Failure.of(ErrorTemplate.unexpected_eof(cursor.point_span(), expected))
    return Failure.of(
        ErrorTemplate.unexpected_atom(describe_atom(atom.value), atom.span, expected)
    )


def _text_predicate(predicate: Callable[[str], bool]) -> Callable[[object], bool]:
    """Lift a predicate on grapheme strings to one on arbitrary atom values."""

    def check(value: object) -> bool:
        return isinstance(value, str) and bool(value) and predicate(value)

    return check


@dataclass(frozen=True, slots=True, eq=False, repr=False)
class Satisfy[T](Grammar[T]):
    """Consume one atom whose value satisfies ``predicate``.

    Attributes:
        predicate: Test applied to the atom value
        description: Name of what is expected, for diagnostics
        expected: Alternatives listed in "expected one of" messages;
            defaults to ``(description,)``
    """

    predicate: Callable[[object], bool]
    description: str
    expected: tuple[str, ...] = ()

    def attempt(self, cursor: Cursor) -> ParseResult[T]:
        atom = cursor.peek()
        if atom is None or not self.predicate(atom.value):
            return unexpected_here(cursor, self.expected or (self.description,))
        cursor.advance()
        return Success(atom.value, atom.span)  # type: ignore[arg-type]

    def describe(self) -> str:
        return self.description


@dataclass(frozen=True, slots=True, eq=False, repr=False)
class Literal(Grammar[str]):
    """Match ``text`` exactly, atom by atom."""

    text: str

    def __post_init__(self) -> None:
        if not self.text:
            msg = "literal() requires non-empty text"
            raise GrammarError(msg)

    def attempt(self, cursor: Cursor) -> ParseResult[str]:
        start = cursor.position()
        offset = 0
        while offset < len(self.text):
            end = cluster_end(self.text, offset)
            atom = cursor.peek()
            if atom is None or atom.value != self.text[offset:end]:
                failure = unexpected_here(cursor, (self.describe(),))
                cursor.restore(start)
                return failure
            cursor.advance()
            offset = end
        return Success(self.text, cursor.span_since(start))

    def describe(self) -> str:
        return repr(self.text)


def satisfy(predicate: Callable[[str], bool], description: str) -> Satisfy[str]:
    """One text atom accepted by ``predicate``."""
    return Satisfy(_text_predicate(predicate), description)


def char(expected: str) -> Satisfy[str]:
    """Exactly the atom ``expected``."""
    return Satisfy(lambda value: value == expected, repr(expected))


def one_of(chars: str) -> Satisfy[str]:
    """Any single character from ``chars``."""
    options = frozenset(chars)
    listed = tuple(repr(c) for c in dict.fromkeys(chars))
    return Satisfy(
        _text_predicate(options.__contains__),
        f"one of {chars!r}",
        listed,
    )


def none_of(chars: str) -> Satisfy[str]:
    """Any single atom not in ``chars``."""
    excluded = frozenset(chars)
    return Satisfy(
        _text_predicate(lambda value: value not in excluded),
        f"any character except {chars!r}",
    )


def literal(text: str) -> Literal:
    return Literal(text)


def digit() -> Satisfy[str]:
    """One ASCII digit ``0``-``9``."""
    return Satisfy(_text_predicate(_ASCII_DIGITS.__contains__), "digit")


def letter() -> Satisfy[str]:
    """One alphabetic atom (Unicode letters, with any combining marks)."""
    return satisfy(lambda value: value[0].isalpha(), "letter")


def whitespace() -> Satisfy[str]:
    """One whitespace atom; ``\\r\\n`` counts as one."""
    return satisfy(str.isspace, "whitespace")


def _join_identifier(parts: tuple[object, ...]) -> str:
    head, tail = parts
    return str(head) + "".join(tail)  # type: ignore[arg-type]


def identifier() -> Grammar[str]:
    """Letter or underscore followed by letters, digits or underscores."""
    head = satisfy(lambda value: value[0] == "_" or value[0].isalpha(), "letter or '_'")
    tail = satisfy(lambda value: value[0] == "_" or value[0].isalnum(), "letter, digit or '_'")
    return (head + tail.many()).map(_join_identifier).named("identifier")


def _to_int(parts: tuple[object, ...]) -> int:
    sign, digits = parts
    return int(str(sign) + "".join(digits))  # type: ignore[arg-type]


def integer() -> Grammar[int]:
    """Optionally signed ASCII decimal integer."""
    return (one_of("+-").optional("") + digit().many1()).map(_to_int).named("integer")


def lexeme[T](inner: Grammar[T]) -> Grammar[T]:
    """``inner`` followed by any amount of whitespace, which is dropped."""
    return inner.terminated(whitespace().many())
