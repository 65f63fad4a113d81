"""Parse entry points.

:class:`Parser` holds the limits for a family of parses and runs a grammar
over text, a token sequence, or any :class:`~parsekit.syntax.source.InputSource`.
Every run gets a fresh Cursor, so one Parser (and one grammar) may be used
from several threads at once.

Results come back as :class:`ParseOutcome`: the raw ParseResult plus every
surviving diagnostic, including warnings from successful parses, and the
source views needed to render a report.

Python 3.13+.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterable
from dataclasses import dataclass

from parsekit.constants import (
    DEFAULT_STREAM_UNIT,
    DEFAULT_TEXT_UNIT,
    MAX_DEPTH,
    MAX_SOURCE_SIZE,
)
from parsekit.core.errors import RecursionLimitExceededError
from parsekit.diagnostics.accumulator import source_order
from parsekit.diagnostics.codes import Diagnostic
from parsekit.diagnostics.errors import ParseFailedError
from parsekit.diagnostics.report import (
    DiagnosticReporter,
    PlainTextRenderer,
    Report,
    ReportRenderer,
    SourceView,
)
from parsekit.diagnostics.templates import ErrorTemplate
from parsekit.enums import Severity
from parsekit.syntax.cursor import Cursor
from parsekit.syntax.result import Failure, ParseResult, Success
from parsekit.syntax.source import InputSource, TextSource, TokenStreamSource

from .node import Grammar, end_of_input, terminated

__all__ = ["ParseOutcome", "Parser", "parse_text", "parse_tokens"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ParseOutcome[T]:
    """Result of one parse plus what is needed to report on it.

    Attributes:
        result: Success or Failure from the grammar
        diagnostics: Every surviving diagnostic in source order; warnings
            committed during the parse plus the failure's diagnostics
        sources: Views of the parsed units, for excerpts
    """

    result: ParseResult[T]
    diagnostics: tuple[Diagnostic, ...]
    sources: tuple[SourceView, ...] = ()

    @property
    def is_success(self) -> bool:
        return isinstance(self.result, Success)

    @property
    def errors(self) -> tuple[Diagnostic, ...]:
        return tuple(d for d in self.diagnostics if d.severity is Severity.ERROR)

    @property
    def warnings(self) -> tuple[Diagnostic, ...]:
        return tuple(d for d in self.diagnostics if d.severity is Severity.WARNING)

    def unwrap(self) -> T:
        """Value of a successful parse.

        Raises:
            ParseFailedError: If the parse failed; the message is the plain
                rendered report
        """
        if isinstance(self.result, Failure):
            raise ParseFailedError(self.render(PlainTextRenderer()), self.diagnostics)
        return self.result.value

    def report(self) -> Report:
        return DiagnosticReporter(self.sources).build(self.diagnostics)

    def render(self, renderer: ReportRenderer | None = None) -> str:
        """Render the report (plain text unless a renderer is given)."""
        return DiagnosticReporter(self.sources).render(self.diagnostics, renderer)


class Parser:
    """Runs grammars under fixed resource limits.

    Args:
        max_source_size: Maximum text length in characters
        max_nesting_depth: Maximum Forward nesting per parse, clamped to
            what the interpreter recursion limit allows

    Example:
        >>> parser = Parser(max_nesting_depth=20)
        >>> parser.parse_text(integer(), "42").unwrap()
        42
    """

    __slots__ = ("_max_nesting_depth", "_max_source_size")

    def __init__(
        self,
        *,
        max_source_size: int = MAX_SOURCE_SIZE,
        max_nesting_depth: int = MAX_DEPTH,
    ) -> None:
        self._max_source_size = max_source_size
        self._max_nesting_depth = max_nesting_depth

    @property
    def max_source_size(self) -> int:
        return self._max_source_size

    @property
    def max_nesting_depth(self) -> int:
        return self._max_nesting_depth

    def parse_text[T](
        self,
        grammar: Grammar[T],
        text: str,
        unit: str = DEFAULT_TEXT_UNIT,
        *,
        complete: bool = True,
    ) -> ParseOutcome[T]:
        """Parse raw text.

        Args:
            grammar: Grammar to run
            text: Source text
            unit: Source unit name used in spans and reports
            complete: Require the grammar to consume all input

        Raises:
            ValueError: If ``text`` exceeds max_source_size
        """
        if len(text) > self._max_source_size:
            msg = (
                f"Source exceeds maximum size ({len(text):,} > "
                f"{self._max_source_size:,} characters)"
            )
            raise ValueError(msg)
        return self.parse_source(
            grammar,
            TextSource(text, unit),
            (SourceView.from_text(unit, text),),
            complete=complete,
        )

    def parse_tokens[T](
        self,
        grammar: Grammar[T],
        tokens: Iterable[object],
        unit: str = DEFAULT_STREAM_UNIT,
        *,
        complete: bool = True,
        sources: Iterable[SourceView] = (),
    ) -> ParseOutcome[T]:
        """Parse a token sequence.

        Args:
            grammar: Grammar to run
            tokens: Tokens; their own ``span`` is kept when it is a Span
            unit: Stream unit name for tokens without a span
            complete: Require the grammar to consume all tokens
            sources: Extra views, e.g. the text the tokens were read from
        """
        listing = tuple(tokens)
        return self.parse_source(
            grammar,
            TokenStreamSource(listing, unit),
            (SourceView.from_tokens(unit, listing), *sources),
            complete=complete,
        )

    def parse_source[T](
        self,
        grammar: Grammar[T],
        source: InputSource,
        sources: Iterable[SourceView] = (),
        *,
        complete: bool = True,
    ) -> ParseOutcome[T]:
        """Parse from any InputSource.

        Raises:
            RecursionLimitExceededError: If nesting passes max_nesting_depth,
                or the interpreter stack runs out first
        """
        target = terminated(grammar, end_of_input()) if complete else grammar
        cursor = Cursor(source, max_depth=self._max_nesting_depth)
        unit = source.source_unit_id()
        logger.debug("Parsing %s with %r", unit, grammar)

        try:
            result = target.attempt(cursor)
        except RecursionError as e:
            logger.warning("Interpreter stack exhausted while parsing %s", unit)
            raise RecursionLimitExceededError(
                ErrorTemplate.stack_exhausted(sys.getrecursionlimit(), cursor.point_span())
            ) from e

        collected = list(cursor.diagnostics.diagnostics)
        if isinstance(result, Failure):
            collected.extend(result.diagnostics)
        diagnostics = tuple(source_order(collected))
        logger.debug(
            "Parsed %s: %s, %d diagnostics (%d abandoned)",
            unit,
            "success" if isinstance(result, Success) else "failure",
            len(diagnostics),
            len(cursor.diagnostics.abandoned),
        )
        return ParseOutcome(result, diagnostics, tuple(sources))


_DEFAULT_PARSER = Parser()


def parse_text[T](
    grammar: Grammar[T],
    text: str,
    unit: str = DEFAULT_TEXT_UNIT,
    *,
    complete: bool = True,
) -> ParseOutcome[T]:
    """Parse text with default limits.

    Example:
        >>> parse_text(digit().many1(), "12").unwrap()
        ['1', '2']
    """
    return _DEFAULT_PARSER.parse_text(grammar, text, unit, complete=complete)


def parse_tokens[T](
    grammar: Grammar[T],
    tokens: Iterable[object],
    unit: str = DEFAULT_STREAM_UNIT,
    *,
    complete: bool = True,
    sources: Iterable[SourceView] = (),
) -> ParseOutcome[T]:
    """Parse a token sequence with default limits."""
    return _DEFAULT_PARSER.parse_tokens(
        grammar, tokens, unit, complete=complete, sources=sources
    )
