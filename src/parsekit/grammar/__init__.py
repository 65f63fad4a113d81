"""Combinator layer: grammar nodes, primitives and parse entry points.

Text primitives (``char``, ``digit``, ``literal`` ...) match grapheme atoms
of a TextSource. Stream primitives (``ident``, ``punct`` ...) match Token
atoms produced by :func:`parsekit.syntax.tokens.tokenize`. ``locale_decimal``
needs the optional Babel extra.

Python 3.13+.
"""

from .node import (
    Alternative,
    Empty,
    EndOfInput,
    Forward,
    Grammar,
    Lookahead,
    Map,
    Named,
    NegativeLookahead,
    Nothing,
    Optional,
    Repetition,
    Sequence,
    Spanned,
    TryMap,
    Validate,
    WarnIf,
    WithSpan,
    alt,
    delimited,
    empty,
    end_of_input,
    not_followed_by,
    nothing,
    peek,
    preceded,
    separated,
    seq,
    terminated,
)
from .numbers import LocaleDecimal, locale_decimal
from .parser import ParseOutcome, Parser, parse_text, parse_tokens
from .primitives import (
    Literal,
    Satisfy,
    char,
    digit,
    identifier,
    integer,
    letter,
    lexeme,
    literal,
    none_of,
    one_of,
    satisfy,
    whitespace,
)
from .tokens import (
    Group,
    Punct,
    braces,
    brackets,
    char_literal,
    float_literal,
    group,
    ident,
    int_literal,
    keyword,
    newline,
    parens,
    punct,
    space,
    string_literal,
    token_of,
)

__all__ = [
    "Alternative",
    "Empty",
    "EndOfInput",
    "Forward",
    "Grammar",
    "Group",
    "Literal",
    "LocaleDecimal",
    "Lookahead",
    "Map",
    "Named",
    "NegativeLookahead",
    "Nothing",
    "Optional",
    "ParseOutcome",
    "Parser",
    "Punct",
    "Repetition",
    "Satisfy",
    "Sequence",
    "Spanned",
    "TryMap",
    "Validate",
    "WarnIf",
    "WithSpan",
    "alt",
    "braces",
    "brackets",
    "char",
    "char_literal",
    "delimited",
    "digit",
    "empty",
    "end_of_input",
    "float_literal",
    "group",
    "ident",
    "identifier",
    "int_literal",
    "integer",
    "keyword",
    "letter",
    "lexeme",
    "literal",
    "locale_decimal",
    "newline",
    "none_of",
    "not_followed_by",
    "nothing",
    "one_of",
    "parens",
    "parse_text",
    "parse_tokens",
    "peek",
    "preceded",
    "punct",
    "satisfy",
    "separated",
    "seq",
    "space",
    "string_literal",
    "terminated",
    "token_of",
    "whitespace",
]
