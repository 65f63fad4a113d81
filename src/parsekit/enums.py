"""Enumerations for parsekit type-safe constants.

Uses StrEnum (Python 3.11+) for automatic string conversion.
StrEnum members are strings themselves, eliminating boilerplate __str__ methods.

Python 3.13+.
"""

from enum import StrEnum


class Severity(StrEnum):
    """Severity of a diagnostic.

    StrEnum provides automatic string conversion: str(Severity.ERROR) == "error"
    """

    ERROR = "error"
    """Parse cannot succeed at this point."""

    WARNING = "warning"
    """Parse succeeded, but the input is suspicious."""

    NOTE = "note"
    """Supplementary information attached to a parse."""


class UnitKind(StrEnum):
    """Kind of source unit a span points into."""

    TEXT = "text"
    """Raw text: offsets are code-point offsets, line/column hints present."""

    STREAM = "stream"
    """Pre-tokenized stream: offsets are token indices."""


class Spacing(StrEnum):
    """Whether a punctuation token is immediately followed by another one.

    Multi-character punctuation such as ``->`` or ``::=`` is matched from
    single-character tokens where every token but the last is JOINT.
    """

    ALONE = "alone"
    JOINT = "joint"


class TokenKind(StrEnum):
    """Kind of token produced by the text tokenizer."""

    IDENT = "ident"
    PUNCT = "punct"
    INT = "int"
    FLOAT = "float"
    STRING = "string"
    CHAR = "char"
    WHITESPACE = "whitespace"


__all__ = [
    "Severity",
    "Spacing",
    "TokenKind",
    "UnitKind",
]
