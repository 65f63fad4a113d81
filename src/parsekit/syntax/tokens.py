"""Text tokenizer producing Token atoms for stream-mode parsing.

Token shapes:
    - Identifiers: letter or underscore, then letters, digits, underscores
    - Punctuation: one character per token; ``Spacing.JOINT`` when the next
      character is also punctuation, so ``->`` arrives as ``-`` (joint)
      followed by ``>`` (alone)
    - Integer literals ``42`` and float literals ``4.2``
    - String literals ``"..."`` and character literals ``'c'`` with escapes
      ``\\n \\r \\t \\0 \\\\ \\' \\"``

Whitespace separates tokens and is dropped, unless ``keep_whitespace`` is
set: then each whitespace atom becomes a WHITESPACE token (CRLF is one).
:func:`remove_whitespace` strips them again, and :func:`render_tokens`
turns a stream back into text.

Tokenizing does not stop at the first problem: every unknown character,
unterminated or over-long literal and invalid escape becomes a diagnostic,
and the scan continues.

Python 3.13+.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from parsekit.constants import DEFAULT_TEXT_UNIT
from parsekit.core.span import Span
from parsekit.diagnostics.accumulator import ErrorAccumulator
from parsekit.diagnostics.templates import ErrorTemplate
from parsekit.enums import Spacing, TokenKind

from .result import Failure, ParseResult, Success
from .source import LINE_TERMINATORS, Atom, TextSource

__all__ = [
    "ESCAPES",
    "PUNCTUATION",
    "Token",
    "Tokenizer",
    "remove_whitespace",
    "render_tokens",
    "tokenize",
]

logger = logging.getLogger(__name__)

PUNCTUATION: frozenset[str] = frozenset("!#$%&()*+,-./:;<=>?@[\\]^`{|}~\u00ac\u00a3")

ESCAPES: dict[str, str] = {
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "0": "\0",
    "\\": "\\",
    "'": "'",
    '"': '"',
}

_REVERSE_ESCAPES: dict[str, str] = {v: f"\\{k}" for k, v in ESCAPES.items()}

_ASCII_DIGITS: frozenset[str] = frozenset("0123456789")


@dataclass(frozen=True, slots=True)
class Token:
    """One lexical token.

    Attributes:
        kind: Token category
        value: Identifier name, punctuation character, or literal value
            (``int``, ``float`` or unescaped ``str``)
        span: Location in the tokenized text
        spacing: Joint when immediately followed by more punctuation
    """

    kind: TokenKind
    value: str | int | float
    span: Span
    spacing: Spacing = Spacing.ALONE

    def describe(self) -> str:
        """Short description used in diagnostics."""
        match self.kind:
            case TokenKind.IDENT:
                return f"identifier `{self.value}`"
            case TokenKind.PUNCT:
                return f"`{self.value}`"
            case TokenKind.INT:
                return f"integer literal `{self.value}`"
            case TokenKind.FLOAT:
                return f"float literal `{self.value}`"
            case TokenKind.STRING:
                return "string literal"
            case TokenKind.WHITESPACE:
                return "newline" if self.value in LINE_TERMINATORS else "whitespace"
            case _:
                return "character literal"

    @property
    def is_whitespace(self) -> bool:
        return self.kind is TokenKind.WHITESPACE

    def __str__(self) -> str:
        match self.kind:
            case TokenKind.STRING:
                return '"' + "".join(_REVERSE_ESCAPES.get(c, c) for c in str(self.value)) + '"'
            case TokenKind.CHAR:
                return "'" + _REVERSE_ESCAPES.get(str(self.value), str(self.value)) + "'"
            case _:
                return str(self.value)


def _is_ident_start(value: str) -> bool:
    return value[0] == "_" or value[0].isalpha()


def _is_ident_continue(value: str) -> bool:
    return value[0] == "_" or value[0].isalnum()


def _is_digit(value: str) -> bool:
    return value in _ASCII_DIGITS


class Tokenizer:
    """Single-use tokenizer over one text unit.

    Example:
        >>> result = Tokenizer("a -> 1.5", "demo").run()
        >>> [str(t) for t in result.value]
        ['a', '-', '>', '1.5']
    """

    __slots__ = ("_errors", "_keep_whitespace", "_source", "_tokens")

    def __init__(
        self, text: str, unit: str = DEFAULT_TEXT_UNIT, *, keep_whitespace: bool = False
    ) -> None:
        self._source = TextSource(text, unit)
        self._keep_whitespace = keep_whitespace
        self._tokens: list[Token] = []
        self._errors = ErrorAccumulator()

    def _peek_value(self) -> str | None:
        atom = self._source.peek_atom()
        return None if atom is None else atom.value

    def _peek_second(self) -> str | None:
        """Value of the atom after the next one, without consuming."""
        mark = self._source.checkpoint()
        self._source.advance()
        value = self._peek_value()
        self._source.restore(mark)
        return value

    def run(self) -> ParseResult[tuple[Token, ...]]:
        start = self._source.point_span()
        while (atom := self._source.peek_atom()) is not None:
            char = atom.value
            if char.isspace():
                self._whitespace()
            elif _is_ident_start(char):
                self._identifier()
            elif _is_digit(char):
                self._number()
            elif char == '"':
                self._string()
            elif char == "'":
                self._char()
            elif char in PUNCTUATION:
                self._punct()
            else:
                self._source.advance()
                self._errors.add(ErrorTemplate.unknown_character(char, atom.span))

        span = start.merge(self._source.point_span())
        logger.debug(
            "Tokenized %s: %d tokens, %d errors",
            span.unit,
            len(self._tokens),
            len(self._errors),
        )
        if self._errors.has_errors:
            return Failure(tuple(self._errors.diagnostics))
        return Success(tuple(self._tokens), span)

    def _consume_while(self, predicate: Callable[[str], bool]) -> list[Atom[str]]:
        atoms: list[Atom[str]] = []
        while (atom := self._source.peek_atom()) is not None and predicate(atom.value):
            atoms.append(atom)
            self._source.advance()
        return atoms

    def _emit(self, kind: TokenKind, value: str | int | float, atoms: list[Atom[str]]) -> None:
        span = atoms[0].span.merge(atoms[-1].span)
        self._tokens.append(Token(kind, value, span))

    def _whitespace(self) -> None:
        atom = self._source.advance()
        assert atom is not None  # caller peeked
        if self._keep_whitespace:
            self._tokens.append(Token(TokenKind.WHITESPACE, atom.value, atom.span))

    def _identifier(self) -> None:
        atoms = self._consume_while(_is_ident_continue)
        self._emit(TokenKind.IDENT, "".join(a.value for a in atoms), atoms)

    def _number(self) -> None:
        atoms = self._consume_while(_is_digit)
        second = self._peek_second() if self._peek_value() == "." else None
        if second is not None and _is_digit(second):
            dot = self._source.advance()
            assert dot is not None  # peeked above
            atoms.append(dot)
            atoms.extend(self._consume_while(_is_digit))
            self._emit(TokenKind.FLOAT, float("".join(a.value for a in atoms)), atoms)
        else:
            self._emit(TokenKind.INT, int("".join(a.value for a in atoms)), atoms)

    def _punct(self) -> None:
        atom = self._source.advance()
        assert atom is not None  # caller peeked
        following = self._peek_value()
        joint = following is not None and following in PUNCTUATION
        spacing = Spacing.JOINT if joint else Spacing.ALONE
        self._tokens.append(Token(TokenKind.PUNCT, atom.value, atom.span, spacing))

    def _escape(self, backslash: Atom[str]) -> str:
        """Decode the escape after a consumed backslash."""
        atom = self._source.advance()
        if atom is None:
            return ""
        decoded = ESCAPES.get(atom.value)
        if decoded is None:
            span = backslash.span.merge(atom.span)
            self._errors.add(ErrorTemplate.invalid_escape(atom.value, span))
            return atom.value
        return decoded

    def _string(self) -> None:
        opening = self._source.advance()
        assert opening is not None  # caller peeked
        chars: list[str] = []
        last = opening
        while (atom := self._source.advance()) is not None:
            last = atom
            if atom.value == '"':
                self._emit(TokenKind.STRING, "".join(chars), [opening, atom])
                return
            if atom.value == "\\":
                chars.append(self._escape(atom))
            else:
                chars.append(atom.value)
        self._errors.add(ErrorTemplate.unterminated_string(opening.span.merge(last.span)))

    def _char(self) -> None:
        opening = self._source.advance()
        assert opening is not None  # caller peeked
        body = self._source.advance()
        if body is None or body.value in LINE_TERMINATORS:
            self._errors.add(ErrorTemplate.unterminated_char(opening.span))
            return
        value = self._escape(body) if body.value == "\\" else body.value
        closing = self._source.peek_atom()
        if closing is not None and closing.value == "'":
            self._source.advance()
            self._emit(TokenKind.CHAR, value, [opening, closing])
            return
        # Either an over-long literal closed later on the same line, or unterminated
        mark = self._source.checkpoint()
        while (atom := self._source.advance()) is not None and atom.value not in LINE_TERMINATORS:
            if atom.value == "'":
                self._errors.add(ErrorTemplate.long_char(opening.span.merge(atom.span)))
                return
        self._source.restore(mark)
        self._errors.add(ErrorTemplate.unterminated_char(opening.span.merge(body.span)))


def tokenize(
    text: str, unit: str = DEFAULT_TEXT_UNIT, *, keep_whitespace: bool = False
) -> ParseResult[tuple[Token, ...]]:
    """Split ``text`` into tokens.

    Args:
        text: Source text
        unit: Source unit name used in token spans
        keep_whitespace: Emit WHITESPACE tokens instead of dropping them

    Returns:
        Success with the token tuple, or Failure with every tokenizing
        error found (not only the first)

    Example:
        >>> tokenize("x += 1").value[1].spacing
        <Spacing.JOINT: 'joint'>
    """
    return Tokenizer(text, unit, keep_whitespace=keep_whitespace).run()


def remove_whitespace(tokens: Iterable[Token]) -> tuple[Token, ...]:
    """Drop WHITESPACE tokens, keeping everything else in order."""
    return tuple(token for token in tokens if not token.is_whitespace)


def render_tokens(tokens: Iterable[Token]) -> str:
    """Turn a token stream back into source text.

    Gaps between consecutive token spans are filled with spaces, so a
    stream that lost its whitespace still renders with tokens apart. A
    stream tokenized with ``keep_whitespace`` renders back to the original
    text as long as its literals were written in canonical form (``1.5``
    rather than ``1.50``).

    Example:
        >>> render_tokens(tokenize("a  ->b").value)
        'a  ->b'
        >>> render_tokens(tokenize("f(x)\\n", keep_whitespace=True).value)
        'f(x)\\n'
    """
    parts: list[str] = []
    last_end: int | None = None
    for token in tokens:
        if last_end is not None and token.span.start > last_end:
            parts.append(" " * (token.span.start - last_end))
        parts.append(str(token))
        last_end = token.span.end
    return "".join(parts)
