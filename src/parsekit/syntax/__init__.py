"""Input layer: sources, cursor, parse results and the text tokenizer.

Python 3.13+.
"""

from .cursor import Cursor, CursorPosition
from .position import LineOffsetCache
from .result import Failure, ParseResult, Success, is_success
from .source import (
    Atom,
    InputSource,
    StreamPosition,
    TextPosition,
    TextSource,
    TokenStreamSource,
)
from .tokens import Token, Tokenizer, remove_whitespace, render_tokens, tokenize

__all__ = [
    "Atom",
    "Cursor",
    "CursorPosition",
    "Failure",
    "InputSource",
    "LineOffsetCache",
    "ParseResult",
    "StreamPosition",
    "Success",
    "TextPosition",
    "TextSource",
    "Token",
    "TokenStreamSource",
    "Tokenizer",
    "is_success",
    "remove_whitespace",
    "render_tokens",
    "tokenize",
]
