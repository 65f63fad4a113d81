"""Exception hierarchy for fatal parsekit errors.

Ordinary parse failures are values (:class:`~parsekit.syntax.result.Failure`)
and never raised. The exceptions here signal programming errors: a malformed
grammar, or spans combined across source units. They terminate a parse
attempt immediately and pass through every combinator, including
Alternative's rewind-and-retry.

Provided at the bottom of the import graph so that the span model, the depth
guard and the grammar layer can all raise them without circular imports.

Python 3.13+.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from parsekit.diagnostics.codes import Diagnostic

__all__ = [
    "CrossUnitSpanError",
    "GrammarError",
    "IncomparableSpanError",
    "ParseKitError",
    "RecursionLimitExceededError",
    "SpanError",
    "UndefinedForwardError",
    "ZeroWidthRepetitionError",
]


class ParseKitError(Exception):
    """Base exception for all parsekit errors.

    Attributes:
        diagnostic: Structured diagnostic information (optional)
    """

    def __init__(self, message: str | Diagnostic) -> None:
        """Initialize ParseKitError.

        Args:
            message: Error message string OR Diagnostic object
        """
        if isinstance(message, str):
            self.diagnostic: Diagnostic | None = None
            super().__init__(message)
        else:
            self.diagnostic = message
            super().__init__(message.format_error())


class SpanError(ParseKitError):
    """Spans were combined in a way that has no meaning."""


class CrossUnitSpanError(SpanError):
    """Two spans from different source units were merged."""


class IncomparableSpanError(SpanError):
    """Two spans from different source units were ordered."""


class GrammarError(ParseKitError):
    """The grammar definition itself is broken.

    Never caused by bad input alone; retrying on another branch cannot help.
    """


class ZeroWidthRepetitionError(GrammarError):
    """A repeated node succeeded without consuming any atom.

    Example:
        zero_or_more(optional(x)) would loop forever once x stops matching.
    """


class RecursionLimitExceededError(GrammarError):
    """Recursive grammar nesting exceeded the configured depth."""


class UndefinedForwardError(GrammarError):
    """A Forward node was attempted before define() was called."""
