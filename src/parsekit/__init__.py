"""parsekit - composable parser combinators with span-located diagnostics.

Grammars are built from small immutable nodes and run over raw text
(grapheme atoms with line/column tracking) or over pre-tokenized streams.
Every atom and every result carries a Span; failures carry diagnostics that
render into source-annotated reports.

Public API:
    parse_text - Run a grammar over text
    parse_tokens - Run a grammar over a token sequence
    tokenize - Split text into Token atoms for stream parsing
    Parser - Entry point with configurable size and depth limits
    Span - Half-open source range

Exceptions:
    ParseKitError - Base exception class
    ParseFailedError - Value requested from a failed parse
    GrammarError - Malformed grammar (zero-width repetition, recursion limit)
    SpanError - Spans combined across source units

Submodules:
    parsekit.grammar - Grammar nodes and primitives
    parsekit.syntax - Sources, cursor, results and tokenizer
    parsekit.diagnostics - Diagnostics, accumulator, reporter and formatter
"""

# ruff: noqa: I001 - diagnostics must load before syntax
from .core import (
    CrossUnitSpanError,
    GrammarError,
    IncomparableSpanError,
    ParseKitError,
    RecursionLimitExceededError,
    Span,
    SpanError,
    UndefinedForwardError,
    ZeroWidthRepetitionError,
)
from .diagnostics import Diagnostic, DiagnosticFormatter, ParseFailedError
from .syntax import Failure, Success, Token, tokenize
from .grammar import ParseOutcome, Parser, parse_text, parse_tokens

# Version information - Auto-populated from package metadata
try:
    from importlib.metadata import PackageNotFoundError
    from importlib.metadata import version as _get_version
except ImportError as e:
    raise RuntimeError("importlib.metadata unavailable - Python version too old? " + str(e)) from e

try:
    __version__ = _get_version("parsekit")
except PackageNotFoundError:
    # Development mode: package not installed yet
    __version__ = "0.0.0+dev"

__all__ = [
    "CrossUnitSpanError",
    "Diagnostic",
    "DiagnosticFormatter",
    "Failure",
    "GrammarError",
    "IncomparableSpanError",
    "ParseFailedError",
    "ParseKitError",
    "ParseOutcome",
    "Parser",
    "RecursionLimitExceededError",
    "Span",
    "SpanError",
    "Success",
    "Token",
    "UndefinedForwardError",
    "ZeroWidthRepetitionError",
    "__version__",
    "parse_text",
    "parse_tokens",
    "tokenize",
]
