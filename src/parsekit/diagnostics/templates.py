"""Error message templates.

Centralized error message templates for testable, consistent error messages.
Python 3.13+. Zero external dependencies.
"""

from collections.abc import Sequence

from parsekit.core.span import Span
from parsekit.enums import Severity

from .codes import Diagnostic, DiagnosticCode

__all__ = ["ErrorTemplate", "expected_message"]


def expected_message(expected: Sequence[str]) -> str:
    """Join expectations into ``expected a``/``expected one of a, b or c``.

    Duplicates are dropped, first occurrence wins.
    """
    unique = list(dict.fromkeys(expected))
    if not unique:
        return ""
    if len(unique) == 1:
        return f"expected {unique[0]}"
    return f"expected one of {', '.join(unique[:-1])} or {unique[-1]}"


class ErrorTemplate:
    """Centralized error message templates.

    All diagnostics are created here. NO f-strings in exception constructors!
    This provides:
        - Testable error messages
        - Consistent formatting
        - Documentation of all error cases
    """

    # ------------------------------------------------------------------
    # Syntax errors
    # ------------------------------------------------------------------

    @staticmethod
    def unexpected_eof(span: Span, expected: Sequence[str] = ()) -> Diagnostic:
        """Input ended while a node still needed atoms.

        Args:
            span: Zero-width span at the end of input
            expected: What would have matched

        Returns:
            Diagnostic for UNEXPECTED_EOF
        """
        msg = "Unexpected end of input"
        if expected:
            msg = f"{msg}, {expected_message(expected)}"
        return Diagnostic(
            code=DiagnosticCode.UNEXPECTED_EOF,
            message=msg,
            span=span,
            expected=tuple(expected),
        )

    @staticmethod
    def unexpected_atom(found: str, span: Span, expected: Sequence[str] = ()) -> Diagnostic:
        """An atom did not match.

        Args:
            found: Display form of the offending atom
            span: Span of the offending atom
            expected: What would have matched

        Returns:
            Diagnostic for UNEXPECTED_ATOM
        """
        msg = f"Unexpected {found}"
        if expected:
            msg = f"{msg}, {expected_message(expected)}"
        return Diagnostic(
            code=DiagnosticCode.UNEXPECTED_ATOM,
            message=msg,
            span=span,
            expected=tuple(expected),
        )

    @staticmethod
    def expected(name: str, span: Span) -> Diagnostic:
        """A named grammar node failed without making progress.

        Args:
            name: Human-readable name of the node
            span: Failure point

        Returns:
            Diagnostic for EXPECTED
        """
        msg = f"Expected {name}"
        return Diagnostic(
            code=DiagnosticCode.EXPECTED,
            message=msg,
            span=span,
            expected=(name,),
        )

    @staticmethod
    def unexpected_match(description: str, span: Span) -> Diagnostic:
        """A negative lookahead saw the node it forbids.

        Args:
            description: Description of the forbidden node
            span: Span the forbidden node would have consumed

        Returns:
            Diagnostic for UNEXPECTED_MATCH
        """
        msg = f"Unexpected {description}"
        return Diagnostic(
            code=DiagnosticCode.UNEXPECTED_MATCH,
            message=msg,
            span=span,
        )

    @staticmethod
    def trailing_input(found: str, span: Span) -> Diagnostic:
        """Input remained after a complete parse.

        Args:
            found: Display form of the first unconsumed atom
            span: Span of the first unconsumed atom

        Returns:
            Diagnostic for TRAILING_INPUT
        """
        msg = f"Unexpected {found}, expected end of input"
        return Diagnostic(
            code=DiagnosticCode.TRAILING_INPUT,
            message=msg,
            span=span,
            expected=("end of input",),
            hint="Remove the trailing input or extend the grammar to accept it",
        )

    @staticmethod
    def unterminated_group(
        open_delim: str, close_delim: str, opener: Span, span: Span
    ) -> Diagnostic:
        """A group opener has no matching closer.

        Args:
            open_delim: The opening delimiter, e.g. ``(``
            close_delim: The closer that was never found
            opener: Span of the unmatched opener
            span: Where the closer was still missing (end of input)

        Returns:
            Diagnostic for UNTERMINATED_GROUP, labelled at the opener
        """
        msg = f"Unmatched '{open_delim}', expected '{close_delim}'"
        return Diagnostic(
            code=DiagnosticCode.UNTERMINATED_GROUP,
            message=msg,
            span=span,
            expected=(f"`{close_delim}`",),
        ).with_label(opener, f"unclosed '{open_delim}' opened here")

    @staticmethod
    def no_match(span: Span) -> Diagnostic:
        """The never-matching node was attempted.

        Returns:
            Diagnostic for NO_MATCH
        """
        return Diagnostic(
            code=DiagnosticCode.NO_MATCH,
            message="No match possible here",
            span=span,
        )

    # ------------------------------------------------------------------
    # Semantic validation
    # ------------------------------------------------------------------

    @staticmethod
    def validation_failed(message: str, span: Span) -> Diagnostic:
        """A parsed value failed a post-condition.

        Args:
            message: Caller-supplied description of the violated condition
            span: Span consumed by the rejected parse

        Returns:
            Diagnostic for VALIDATION_FAILED
        """
        return Diagnostic(
            code=DiagnosticCode.VALIDATION_FAILED,
            message=message,
            span=span,
        )

    @staticmethod
    def conversion_failed(reason: str, span: Span, message: str | None = None) -> Diagnostic:
        """A mapping function rejected the parsed value.

        Args:
            reason: Error text raised by the mapping function
            span: Span consumed by the rejected parse
            message: Caller-supplied message replacing the default

        Returns:
            Diagnostic for CONVERSION_FAILED
        """
        msg = message if message is not None else f"Invalid value: {reason}"
        return Diagnostic(
            code=DiagnosticCode.CONVERSION_FAILED,
            message=msg,
            span=span,
            hint=reason if message is not None else None,
        )

    @staticmethod
    def invalid_number(text: str, locale_code: str, reason: str, span: Span) -> Diagnostic:
        """A locale-formatted number could not be parsed.

        Args:
            text: The scanned number text
            locale_code: Locale used for parsing
            reason: Error text from the number parser
            span: Span of the scanned text

        Returns:
            Diagnostic for INVALID_NUMBER
        """
        msg = f"Invalid number '{text}' for locale '{locale_code}'"
        return Diagnostic(
            code=DiagnosticCode.INVALID_NUMBER,
            message=msg,
            span=span,
            hint=reason,
        )

    @staticmethod
    def validation_warning(message: str, span: Span) -> Diagnostic:
        """A parsed value is accepted but suspicious.

        Returns:
            Warning-severity Diagnostic for VALIDATION_WARNING
        """
        return Diagnostic(
            code=DiagnosticCode.VALIDATION_WARNING,
            message=message,
            span=span,
            severity=Severity.WARNING,
        )

    # ------------------------------------------------------------------
    # Grammar construction errors
    # ------------------------------------------------------------------

    @staticmethod
    def zero_width_repetition(description: str, span: Span) -> Diagnostic:
        """A repeated node succeeded without consuming input.

        Args:
            description: Description of the repeated node
            span: Position where the empty iteration happened

        Returns:
            Diagnostic for ZERO_WIDTH_REPETITION
        """
        msg = f"Repeated node {description} matched without consuming input"
        return Diagnostic(
            code=DiagnosticCode.ZERO_WIDTH_REPETITION,
            message=msg,
            span=span,
            hint="Repeated nodes must consume at least one atom per iteration",
        )

    @staticmethod
    def recursion_limit_exceeded(max_depth: int, span: Span, name: str) -> Diagnostic:
        """Recursive grammar nesting exceeded the limit.

        Args:
            max_depth: The configured limit
            span: Position where the limit was hit
            name: Name of the recursive node

        Returns:
            Diagnostic for RECURSION_LIMIT_EXCEEDED
        """
        msg = f"Maximum grammar nesting depth ({max_depth}) exceeded in {name}"
        return Diagnostic(
            code=DiagnosticCode.RECURSION_LIMIT_EXCEEDED,
            message=msg,
            span=span,
            hint="Increase max_nesting_depth or check for left recursion",
        )

    @staticmethod
    def stack_exhausted(recursion_limit: int, span: Span) -> Diagnostic:
        """The interpreter stack ran out before the grammar nesting limit.

        Args:
            recursion_limit: Value of sys.getrecursionlimit() at the time
            span: Position the cursor had reached
        """
        msg = f"Interpreter recursion limit ({recursion_limit}) reached while parsing"
        return Diagnostic(
            code=DiagnosticCode.RECURSION_LIMIT_EXCEEDED,
            message=msg,
            span=span,
            hint="Lower max_nesting_depth or raise sys.setrecursionlimit()",
        )

    @staticmethod
    def undefined_forward(name: str, span: Span) -> Diagnostic:
        """A Forward node was used before being defined.

        Returns:
            Diagnostic for UNDEFINED_FORWARD
        """
        msg = f"Forward grammar node {name} attempted before define()"
        return Diagnostic(
            code=DiagnosticCode.UNDEFINED_FORWARD,
            message=msg,
            span=span,
        )

    # ------------------------------------------------------------------
    # Tokenizer errors
    # ------------------------------------------------------------------

    @staticmethod
    def unknown_character(char: str, span: Span) -> Diagnostic:
        """Returns: Diagnostic for UNKNOWN_CHARACTER."""
        msg = f"Unrecognised character {char!r}"
        return Diagnostic(code=DiagnosticCode.UNKNOWN_CHARACTER, message=msg, span=span)

    @staticmethod
    def unterminated_string(span: Span) -> Diagnostic:
        """Returns: Diagnostic for UNTERMINATED_STRING."""
        return Diagnostic(
            code=DiagnosticCode.UNTERMINATED_STRING,
            message="Expect '\"' at end of string literal",
            span=span,
        )

    @staticmethod
    def unterminated_char(span: Span) -> Diagnostic:
        """Returns: Diagnostic for UNTERMINATED_CHAR."""
        return Diagnostic(
            code=DiagnosticCode.UNTERMINATED_CHAR,
            message="Expect \"'\" after character literal",
            span=span,
        )

    @staticmethod
    def long_char(span: Span) -> Diagnostic:
        """Returns: Diagnostic for LONG_CHAR."""
        return Diagnostic(
            code=DiagnosticCode.LONG_CHAR,
            message="Character literals must be exactly one character long",
            span=span,
        )

    @staticmethod
    def invalid_escape(sequence: str, span: Span) -> Diagnostic:
        """Returns: Diagnostic for INVALID_ESCAPE."""
        msg = f"Invalid escape sequence '\\{sequence}'"
        return Diagnostic(
            code=DiagnosticCode.INVALID_ESCAPE,
            message=msg,
            span=span,
            hint="Valid escapes are \\n, \\r, \\t, \\0, \\\\, \\' and \\\"",
        )
