"""Diagnostic formatting service.

Centralizes diagnostic output formatting with configurable options. Also the
styled :class:`~parsekit.diagnostics.report.ReportRenderer`: Rust-style
entries with numbered source excerpts, underlines and optional ANSI color.

Python 3.13+. Zero external dependencies.
"""

import json
from collections.abc import Iterable
from dataclasses import dataclass
from enum import StrEnum

from parsekit.constants import DEFAULT_CONTEXT_LINES, DEFAULT_MAX_CONTENT_LENGTH
from parsekit.core.span import Span
from parsekit.enums import Severity, UnitKind

from .codes import Diagnostic
from .report import Report, ReportEntry, SourceView

__all__ = [
    "DiagnosticFormatter",
    "OutputFormat",
]

_SEVERITY_COLORS: dict[Severity, str] = {
    Severity.ERROR: "\033[1;31m",  # Bold red
    Severity.WARNING: "\033[1;33m",  # Bold yellow
    Severity.NOTE: "\033[1;36m",  # Bold cyan
}
_LABEL_COLOR = "\033[1;34m"  # Bold blue
_RESET = "\033[0m"


class OutputFormat(StrEnum):
    """Output format options for diagnostic formatting."""

    RUST = "rust"  # Rust compiler-style output with excerpts (default)
    SIMPLE = "simple"  # Single-line format
    JSON = "json"  # JSON format for tooling integration


@dataclass(frozen=True, slots=True)
class DiagnosticFormatter:
    """Diagnostic formatting service.

    Attributes:
        output_format: Output style (rust, simple, json)
        sanitize: Truncate content to prevent information leakage
        color: Enable ANSI color codes (for terminal output)
        context_lines: Source lines shown around each excerpt
        max_content_length: Maximum content length when sanitizing

    Example:
        >>> formatter = DiagnosticFormatter()
        >>> print(formatter.render(report))
        error[UNEXPECTED_ATOM]: Unexpected ';', expected ','
          --> input.txt:1:3-1:4
           |
         1 | 12;34
           |   ^
        1 error(s), 0 warning(s)

        >>> formatter = DiagnosticFormatter(output_format=OutputFormat.SIMPLE)
        >>> print(formatter.format(diagnostic))
        input.txt:1:3-1:4: error[UNEXPECTED_ATOM]: Unexpected ';', expected ','
    """

    output_format: OutputFormat = OutputFormat.RUST
    sanitize: bool = False
    color: bool = False
    context_lines: int = DEFAULT_CONTEXT_LINES
    max_content_length: int = DEFAULT_MAX_CONTENT_LENGTH

    # ------------------------------------------------------------------
    # Single diagnostics (no source available)
    # ------------------------------------------------------------------

    def format(self, diagnostic: Diagnostic) -> str:
        """Format a single diagnostic without source excerpts."""
        entry = ReportEntry.from_diagnostic(diagnostic)
        match self.output_format:
            case OutputFormat.RUST:
                return self._format_rust(entry, None)
            case OutputFormat.SIMPLE:
                return self._format_simple(entry)
            case OutputFormat.JSON:
                return json.dumps(self._entry_data(entry), ensure_ascii=False)

    def format_all(self, diagnostics: Iterable[Diagnostic]) -> str:
        """Format multiple diagnostics separated by blank lines."""
        return "\n\n".join(self.format(d) for d in diagnostics)

    # ------------------------------------------------------------------
    # Reports (ReportRenderer protocol)
    # ------------------------------------------------------------------

    def render(self, report: Report) -> str:
        """Render a report, using its source views for excerpts."""
        match self.output_format:
            case OutputFormat.RUST:
                parts = [
                    self._format_rust(entry, report.source_for(entry.span))
                    for entry in report.entries
                ]
                parts.append(report.summary())
                return "\n\n".join(parts)
            case OutputFormat.SIMPLE:
                lines = [self._format_simple(entry) for entry in report.entries]
                lines.append(report.summary())
                return "\n".join(lines)
            case OutputFormat.JSON:
                data = {
                    "diagnostics": [self._entry_data(entry) for entry in report.entries],
                    "errors": report.error_count,
                    "warnings": report.warning_count,
                }
                return json.dumps(data, ensure_ascii=False)

    def _paint(self, text: str, code: str) -> str:
        if not self.color:
            return text
        return f"{code}{text}{_RESET}"

    def _format_rust(self, entry: ReportEntry, source: SourceView | None) -> str:
        """Format entry in Rust compiler style.

        Example output:
            error[UNEXPECTED_ATOM]: Unexpected 'x', expected digit
              --> calc:1:5-1:6
               |
             1 | 1 + x
               |     ^ expected digit
              = help: ...
        """
        severity = self._paint(str(entry.severity), _SEVERITY_COLORS[entry.severity])
        parts = [f"{severity}[{entry.code}]: {self._maybe_sanitize(entry.message)}"]
        parts.append(f"  --> {entry.location}")
        if source is not None:
            parts.extend(self._excerpt(source, entry.span, "^", None))
        for label in entry.labels:
            if source is not None and label.span.unit == source.unit:
                parts.extend(self._excerpt(source, label.span, "-", label.message))
            else:
                parts.append(f"  = {label.location}: {label.message}")
        if entry.hint:
            parts.append(f"  = help: {self._maybe_sanitize(entry.hint)}")
        return "\n".join(parts)

    def _excerpt(
        self, source: SourceView, span: Span, marker: str, message: str | None
    ) -> list[str]:
        if span.kind is UnitKind.STREAM:
            listing = source.token_listing(span)
            line = f"     | {listing}" if listing else "     |"
            if message:
                line = f"{line}  {self._paint(message, _LABEL_COLOR)}"
            return [line]
        if source.text is None:
            return []
        lines = source.excerpt(span, self.context_lines)
        if not lines:
            return []
        width = max(len(str(number)) for number, _ in lines)
        gutter = " " * width
        start_line, start_col = source.line_col(span.start)
        end_line, end_col = source.line_col(span.end)
        out = [f" {gutter} |"]
        for number, text in lines:
            out.append(f" {number:>{width}} | {self._maybe_sanitize(text)}")
            if start_line <= number <= end_line:
                first = start_col if number == start_line else 1
                last = end_col if number == end_line else len(text) + 1
                underline = " " * (first - 1) + marker * max(1, last - first)
                if message and number == end_line:
                    underline = f"{underline} {message}"
                out.append(f" {gutter} | {self._paint(underline, _LABEL_COLOR)}")
        return out

    def _format_simple(self, entry: ReportEntry) -> str:
        """Format entry in single-line format.

        Example output:
            input.txt:1:3-1:4: error[UNEXPECTED_ATOM]: Unexpected ';'
        """
        message = self._maybe_sanitize(entry.message)
        line = f"{entry.location}: {entry.severity}[{entry.code}]: {message}"
        for label in entry.labels:
            line = f"{line} ({label.location}: {label.message})"
        if entry.hint:
            line = f"{line} [help: {self._maybe_sanitize(entry.hint)}]"
        return line

    def _entry_data(self, entry: ReportEntry) -> dict[str, object]:
        data: dict[str, object] = {
            "code": entry.code,
            "message": self._maybe_sanitize(entry.message),
            "severity": str(entry.severity),
            "location": entry.location,
            "unit": entry.span.unit,
            "start": entry.span.start,
            "end": entry.span.end,
        }
        if entry.span.start_line is not None:
            data["line"] = entry.span.start_line
            data["column"] = entry.span.start_column
        if entry.labels:
            data["labels"] = [
                {"location": label.location, "message": label.message} for label in entry.labels
            ]
        if entry.hint:
            data["hint"] = self._maybe_sanitize(entry.hint)
        return data

    def _maybe_sanitize(self, text: str) -> str:
        """Truncate text if sanitization is enabled."""
        if self.sanitize and len(text) > self.max_content_length:
            return text[: self.max_content_length] + "..."
        return text
