"""Diagnostic reporter: diagnostics in, structured report out.

The reporter only consults spans already recorded on diagnostics; it never
re-parses. Turning a :class:`Report` into text is delegated to a
:class:`ReportRenderer`. :class:`PlainTextRenderer` is the required
dependency-free fallback; :class:`~parsekit.diagnostics.formatter.DiagnosticFormatter`
renders the same information with source excerpts and optional color.

Python 3.13+.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

from parsekit.core.span import Span
from parsekit.enums import Severity, UnitKind
from parsekit.syntax.position import LineOffsetCache

from .accumulator import source_order
from .codes import Diagnostic

__all__ = [
    "DiagnosticReporter",
    "PlainTextRenderer",
    "Report",
    "ReportEntry",
    "ReportLabel",
    "ReportRenderer",
    "SourceView",
]


@dataclass(frozen=True, slots=True)
class SourceView:
    """Read-only view of one source unit for excerpts.

    Exactly one of ``text`` (text units) or ``tokens`` (stream units) is set.

    Attributes:
        unit: Source unit identifier, matching ``Span.unit``
        text: Original source text
        tokens: Original token listing
    """

    unit: str
    text: str | None = None
    tokens: tuple[object, ...] | None = None
    _lines: LineOffsetCache | None = field(default=None, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if (self.text is None) == (self.tokens is None):
            msg = "SourceView requires exactly one of text or tokens"
            raise ValueError(msg)
        if self.text is not None:
            object.__setattr__(self, "_lines", LineOffsetCache(self.text))

    @classmethod
    def from_text(cls, unit: str, text: str) -> SourceView:
        """View over raw text."""
        return cls(unit, text=text)

    @classmethod
    def from_tokens(cls, unit: str, tokens: Iterable[object]) -> SourceView:
        """View over a token listing."""
        return cls(unit, tokens=tuple(tokens))

    def line_col(self, offset: int) -> tuple[int, int]:
        """1-based (line, column) of a character offset in a text view.

        Raises:
            TypeError: If this view holds tokens
        """
        if self._lines is None:
            msg = f"Source unit {self.unit!r} is a token listing, not text"
            raise TypeError(msg)
        return self._lines.get_line_col(offset)

    def excerpt(self, span: Span, context_lines: int = 0) -> list[tuple[int, str]]:
        """Numbered source lines covering ``span`` plus context.

        Returns:
            List of (1-based line number, line text) pairs; empty for token views
        """
        if self.text is None or self._lines is None:
            return []
        first, _ = self.line_col(span.start)
        last, _ = self.line_col(span.end)
        start = max(1, first - context_lines)
        end = min(self._lines.line_count, last + context_lines)
        lines = self.text.split("\n")
        return [(n, lines[n - 1].removesuffix("\r")) for n in range(start, end + 1)]

    def token_listing(self, span: Span) -> str:
        """Display form of the tokens covered by a stream span."""
        if self.tokens is None or span.kind is not UnitKind.STREAM:
            return ""
        return " ".join(str(token) for token in self.tokens[span.start : span.end])


@dataclass(frozen=True, slots=True)
class ReportLabel:
    """Secondary labeled span of a report entry."""

    span: Span
    location: str
    message: str


@dataclass(frozen=True, slots=True)
class ReportEntry:
    """One reportable diagnostic with rendered locations.

    Attributes:
        severity: error, warning or note
        code: Diagnostic code name
        message: Human-readable description
        span: Primary span
        location: Rendered primary location
        labels: Secondary labeled spans
        hint: Suggestion for fixing the problem
    """

    severity: Severity
    code: str
    message: str
    span: Span
    location: str
    labels: tuple[ReportLabel, ...] = ()
    hint: str | None = None

    @classmethod
    def from_diagnostic(cls, diagnostic: Diagnostic) -> ReportEntry:
        """Build an entry from a diagnostic."""
        return cls(
            severity=diagnostic.severity,
            code=diagnostic.code.name,
            message=diagnostic.message,
            span=diagnostic.span,
            location=diagnostic.span.render(),
            labels=tuple(
                ReportLabel(label.span, label.span.render(), label.message)
                for label in diagnostic.labels
            ),
            hint=diagnostic.hint,
        )


@dataclass(frozen=True, slots=True)
class Report:
    """Ordered, structured report of a parse's surviving diagnostics."""

    entries: tuple[ReportEntry, ...]
    sources: Mapping[str, SourceView] = field(default_factory=dict)

    @property
    def error_count(self) -> int:
        """Number of error entries."""
        return sum(1 for entry in self.entries if entry.severity is Severity.ERROR)

    @property
    def warning_count(self) -> int:
        """Number of warning entries."""
        return sum(1 for entry in self.entries if entry.severity is Severity.WARNING)

    @property
    def has_errors(self) -> bool:
        """True if any entry is an error."""
        return self.error_count > 0

    def source_for(self, span: Span) -> SourceView | None:
        """Source view for a span's unit, if one was supplied."""
        return self.sources.get(span.unit)

    def summary(self) -> str:
        """One-line count of errors and warnings."""
        return f"{self.error_count} error(s), {self.warning_count} warning(s)"

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[ReportEntry]:
        return iter(self.entries)


@runtime_checkable
class ReportRenderer(Protocol):
    """Anything that turns a Report into human-facing text."""

    def render(self, report: Report) -> str:
        """Render the report."""
        ...


class PlainTextRenderer:
    """Minimal renderer without styling or source excerpts.

    Example output:
        error[UNEXPECTED_ATOM]: Unexpected ';', expected ','
          --> input.txt:1:3-1:4
        1 error(s), 0 warning(s)
    """

    def render(self, report: Report) -> str:
        """Render every entry followed by the summary line."""
        parts: list[str] = []
        for entry in report.entries:
            parts.append(f"{entry.severity}[{entry.code}]: {entry.message}")
            parts.append(f"  --> {entry.location}")
            for label in entry.labels:
                parts.append(f"  = {label.location}: {label.message}")
            if entry.hint:
                parts.append(f"  = help: {entry.hint}")
        parts.append(report.summary())
        return "\n".join(parts)


class DiagnosticReporter:
    """Builds reports from failures or diagnostic lists.

    Example:
        >>> reporter = DiagnosticReporter(SourceView.from_text("input.txt", text))
        >>> report = reporter.build(failure)
        >>> print(reporter.render(failure))
    """

    __slots__ = ("_sources",)

    def __init__(self, sources: SourceView | Iterable[SourceView] = ()) -> None:
        views = (sources,) if isinstance(sources, SourceView) else tuple(sources)
        self._sources: dict[str, SourceView] = {view.unit: view for view in views}

    @property
    def sources(self) -> Mapping[str, SourceView]:
        """Source views keyed by unit."""
        return dict(self._sources)

    def build(self, diagnostics: object) -> Report:
        """Build a report.

        Args:
            diagnostics: A Failure (anything with a ``diagnostics`` attribute)
                or an iterable of Diagnostic

        Returns:
            Report with entries in source order of primary span
        """
        items: Sequence[Diagnostic] | Iterable[Diagnostic] = getattr(
            diagnostics, "diagnostics", diagnostics
        )
        ordered = source_order(items)
        return Report(
            entries=tuple(ReportEntry.from_diagnostic(d) for d in ordered),
            sources=dict(self._sources),
        )

    def render(self, diagnostics: object, renderer: ReportRenderer | None = None) -> str:
        """Build and render a report, falling back to plain text."""
        report = self.build(diagnostics)
        return (renderer or PlainTextRenderer()).render(report)
