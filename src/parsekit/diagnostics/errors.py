"""Exception raised when a caller insists on the value of a failed parse.

Fatal grammar and span errors live in :mod:`parsekit.core.errors`.

Python 3.13+.
"""

from parsekit.core.errors import ParseKitError

from .codes import Diagnostic

__all__ = ["ParseFailedError"]


class ParseFailedError(ParseKitError):
    """A parse failed and its value was requested.

    The exception message is the rendered report, so an uncaught
    ParseFailedError prints every surviving diagnostic with its location.

    Attributes:
        diagnostics: Surviving diagnostics in source order
    """

    def __init__(self, report_text: str, diagnostics: tuple[Diagnostic, ...]) -> None:
        """Initialize ParseFailedError.

        Args:
            report_text: Rendered report
            diagnostics: Surviving diagnostics in source order
        """
        super().__init__(report_text)
        self.diagnostics = diagnostics
