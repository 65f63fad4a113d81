"""Primitives for token streams produced by :func:`parsekit.syntax.tokens.tokenize`.

Punctuation arrives one character per token. :func:`punct` rebuilds
multi-character operators from joint tokens, so ``->`` matches ``-`` (joint)
then ``>``, but ``- >`` does not.

:func:`group` and its shorthands match a balanced delimiter pair around an
inner grammar. Groups also work over text, where each delimiter is a
single-character atom.

Python 3.13+.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from parsekit.core.errors import GrammarError
from parsekit.core.span import Span
from parsekit.diagnostics.templates import ErrorTemplate
from parsekit.enums import Spacing, TokenKind
from parsekit.syntax.cursor import Cursor, CursorPosition
from parsekit.syntax.result import Failure, ParseResult, Success
from parsekit.syntax.source import LINE_TERMINATORS
from parsekit.syntax.tokens import PUNCTUATION, Token

from .node import Grammar
from .primitives import Satisfy, unexpected_here

__all__ = [
    "Group",
    "Punct",
    "braces",
    "brackets",
    "char_literal",
    "float_literal",
    "group",
    "ident",
    "int_literal",
    "keyword",
    "newline",
    "parens",
    "punct",
    "space",
    "string_literal",
    "token_of",
]

_KIND_NAMES: dict[TokenKind, str] = {
    TokenKind.IDENT: "identifier",
    TokenKind.PUNCT: "punctuation",
    TokenKind.INT: "integer literal",
    TokenKind.FLOAT: "float literal",
    TokenKind.STRING: "string literal",
    TokenKind.CHAR: "character literal",
    TokenKind.WHITESPACE: "whitespace",
}


def _is_kind(kind: TokenKind) -> Callable[[object], bool]:
    def check(value: object) -> bool:
        return isinstance(value, Token) and value.kind is kind

    return check


def _token_value(token: Token) -> object:
    return token.value


def token_of(kind: TokenKind) -> Satisfy[Token]:
    """One token of ``kind``; the value is the Token itself."""
    return Satisfy(_is_kind(kind), _KIND_NAMES[kind])


def ident() -> Grammar[str]:
    """Identifier token; the value is its name."""
    return token_of(TokenKind.IDENT).map(_token_value)  # type: ignore[return-value]


def keyword(word: str) -> Grammar[str]:
    """Identifier token spelled ``word``."""

    def check(value: object) -> bool:
        return isinstance(value, Token) and value.kind is TokenKind.IDENT and value.value == word

    return Satisfy(check, f"`{word}`").map(_token_value)  # type: ignore[return-value]


def int_literal() -> Grammar[int]:
    return token_of(TokenKind.INT).map(_token_value)  # type: ignore[return-value]


def float_literal() -> Grammar[float]:
    return token_of(TokenKind.FLOAT).map(_token_value)  # type: ignore[return-value]


def string_literal() -> Grammar[str]:
    """String literal token; the value is the unescaped text."""
    return token_of(TokenKind.STRING).map(_token_value)  # type: ignore[return-value]


def char_literal() -> Grammar[str]:
    return token_of(TokenKind.CHAR).map(_token_value)  # type: ignore[return-value]


def _is_newline(value: object) -> bool:
    return (
        isinstance(value, Token)
        and value.kind is TokenKind.WHITESPACE
        and value.value in LINE_TERMINATORS
    )


def _is_space(value: object) -> bool:
    return (
        isinstance(value, Token)
        and value.kind is TokenKind.WHITESPACE
        and value.value not in LINE_TERMINATORS
    )


def space() -> Grammar[str]:
    """One non-newline whitespace token (from ``tokenize(keep_whitespace=True)``)."""
    return Satisfy(_is_space, "whitespace").map(_token_value)  # type: ignore[return-value]


def newline() -> Grammar[str]:
    """One line-terminator token (from ``tokenize(keep_whitespace=True)``)."""
    return Satisfy(_is_newline, "newline").map(_token_value)  # type: ignore[return-value]


@dataclass(frozen=True, slots=True, eq=False, repr=False)
class Punct(Grammar[str]):
    """Punctuation ``symbol``, one or more characters long.

    Every character but the last must be a joint token. The match is atomic:
    on mismatch the cursor is rewound and the diagnostic points at the
    first token.
    """

    symbol: str

    def __post_init__(self) -> None:
        if not self.symbol or any(c not in PUNCTUATION for c in self.symbol):
            msg = f"Invalid punctuation symbol {self.symbol!r}"
            raise GrammarError(msg)

    def attempt(self, cursor: Cursor) -> ParseResult[str]:
        start = cursor.position()
        last = len(self.symbol) - 1
        for i, expected in enumerate(self.symbol):
            atom = cursor.peek()
            token = None if atom is None else atom.value
            matches = (
                isinstance(token, Token)
                and token.kind is TokenKind.PUNCT
                and token.value == expected
                and (i == last or token.spacing is Spacing.JOINT)
            )
            if not matches:
                cursor.restore(start)
                return unexpected_here(cursor, (self.describe(),))
            cursor.advance()
        return Success(self.symbol, cursor.span_since(start))

    def describe(self) -> str:
        return f"`{self.symbol}`"


def punct(symbol: str) -> Punct:
    """Punctuation such as ``+``, ``->`` or ``::=``."""
    return Punct(symbol)


# ============================================================================
# GROUPS
# ============================================================================


def _is_delimiter(value: object, symbol: str) -> bool:
    if isinstance(value, Token):
        return value.kind is TokenKind.PUNCT and value.value == symbol
    return value == symbol


@dataclass(frozen=True, slots=True, eq=False, repr=False)
class Group[T](Grammar[T]):
    """``inner`` between a balanced pair of delimiters.

    After the opener, the closer that balances it is located by counting
    nested delimiter pairs ahead of the cursor. Without one the group fails
    with UNTERMINATED_GROUP at the end of input, labelled at the opener.
    Otherwise ``inner`` runs and must stop exactly at that closer. The
    value is the value of ``inner``; the span covers both delimiters.
    """

    open_delim: str
    close_delim: str
    inner: Grammar[T]

    def __post_init__(self) -> None:
        for symbol in (self.open_delim, self.close_delim):
            if len(symbol) != 1 or symbol not in PUNCTUATION:
                msg = f"Group delimiters must be single punctuation characters, got {symbol!r}"
                raise GrammarError(msg)
        if self.open_delim == self.close_delim:
            msg = f"Group delimiters must differ, got {self.open_delim!r} twice"
            raise GrammarError(msg)

    def _closer_offset(self, cursor: Cursor) -> int | Span:
        """Lookahead distance to the balancing closer, or the end-of-input point."""
        depth = 1
        offset = 0
        last: Span | None = None
        while (atom := cursor.peek(offset)) is not None:
            if _is_delimiter(atom.value, self.open_delim):
                depth += 1
            elif _is_delimiter(atom.value, self.close_delim):
                depth -= 1
                if depth == 0:
                    return offset
            last = atom.span
            offset += 1
        return cursor.point_span() if last is None else last.end_point()

    def attempt(self, cursor: Cursor) -> ParseResult[T]:
        start = cursor.position()
        opener = cursor.peek()
        if opener is None or not _is_delimiter(opener.value, self.open_delim):
            return unexpected_here(cursor, (f"`{self.open_delim}`",))
        cursor.advance()

        found = self._closer_offset(cursor)
        if isinstance(found, Span):
            cursor.restore(start)
            return Failure.of(
                ErrorTemplate.unterminated_group(
                    self.open_delim, self.close_delim, opener.span, found
                )
            )
        closer_at = CursorPosition(cursor.position().index + found)

        result = self.inner.attempt(cursor)
        if isinstance(result, Failure):
            return result
        if cursor.position() != closer_at:
            return unexpected_here(cursor, (f"`{self.close_delim}`",))
        cursor.advance()
        return Success(result.value, cursor.span_since(start))

    def describe(self) -> str:
        return f"`{self.open_delim}` {self.inner.describe()} `{self.close_delim}`"


def group[T](open_delim: str, close_delim: str, inner: Grammar[T]) -> Group[T]:
    """``inner`` enclosed in ``open_delim`` ... ``close_delim``."""
    return Group(open_delim, close_delim, inner)


def parens[T](inner: Grammar[T]) -> Group[T]:
    return Group("(", ")", inner)


def brackets[T](inner: Grammar[T]) -> Group[T]:
    return Group("[", "]", inner)


def braces[T](inner: Grammar[T]) -> Group[T]:
    return Group("{", "}", inner)
