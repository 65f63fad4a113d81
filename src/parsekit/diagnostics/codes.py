"""Diagnostic codes and data structures.

Defines error codes, secondary labels, and diagnostic messages.
Python 3.13+. Zero external dependencies.
"""

from dataclasses import dataclass, replace
from enum import Enum

from parsekit.core.span import Span
from parsekit.enums import Severity

__all__ = [
    "Diagnostic",
    "DiagnosticCode",
    "Label",
]


class DiagnosticCode(Enum):
    """Error codes with unique identifiers.

    Organized by category:
        1000-1999: Syntax errors (a grammar node could not match)
        2000-2999: Semantic validation (a valid parse was rejected)
        3000-3999: Grammar construction errors (always fatal)
        4000-4999: Tokenizer errors (text to token stream)
    """

    # Syntax errors (1000-1999)
    UNEXPECTED_EOF = 1001
    UNEXPECTED_ATOM = 1002
    EXPECTED = 1003
    UNEXPECTED_MATCH = 1004
    TRAILING_INPUT = 1005
    NO_MATCH = 1006
    UNTERMINATED_GROUP = 1007

    # Semantic validation (2000-2999)
    VALIDATION_FAILED = 2001
    CONVERSION_FAILED = 2002
    INVALID_NUMBER = 2003
    VALIDATION_WARNING = 2101

    # Grammar construction errors (3000-3999)
    ZERO_WIDTH_REPETITION = 3001
    RECURSION_LIMIT_EXCEEDED = 3002
    UNDEFINED_FORWARD = 3003

    # Tokenizer errors (4000-4999)
    UNKNOWN_CHARACTER = 4001
    UNTERMINATED_STRING = 4002
    UNTERMINATED_CHAR = 4003
    LONG_CHAR = 4004
    INVALID_ESCAPE = 4005


@dataclass(frozen=True, slots=True)
class Label:
    """Secondary annotation pointing at a related span.

    Attributes:
        span: Location being annotated
        message: Short text shown next to the span
    """

    span: Span
    message: str


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """Structured diagnostic message.

    Inspired by Rust compiler diagnostics. Immutable: "adding" a label
    returns a new Diagnostic, so a diagnostic stored in an accumulator never
    changes afterwards.

    Attributes:
        code: Unique error code
        message: Human-readable description
        span: Primary source location
        severity: error, warning or note
        labels: Secondary (span, message) annotations
        hint: Suggestion for fixing the problem
        expected: Descriptions of what would have matched
    """

    code: DiagnosticCode
    message: str
    span: Span
    severity: Severity = Severity.ERROR
    labels: tuple[Label, ...] = ()
    hint: str | None = None
    expected: tuple[str, ...] = ()

    def __str__(self) -> str:
        """Return human-readable error description."""
        return self.message

    @property
    def is_error(self) -> bool:
        """True for error severity."""
        return self.severity is Severity.ERROR

    def with_label(self, span: Span, message: str) -> "Diagnostic":
        """Return a copy with one more secondary label."""
        return replace(self, labels=(*self.labels, Label(span, message)))

    def with_hint(self, hint: str) -> "Diagnostic":
        """Return a copy with the hint replaced."""
        return replace(self, hint=hint)

    def format_error(self) -> str:
        """Format diagnostic like Rust compiler.

        Delegates to DiagnosticFormatter for consistent output.

        Example output:
            error[UNEXPECTED_ATOM]: Unexpected 'x', expected digit
              --> input.txt:1:3-1:4

        Returns:
            Formatted error message
        """
        from .formatter import DiagnosticFormatter  # noqa: PLC0415 - circular

        return DiagnosticFormatter().format(self)
