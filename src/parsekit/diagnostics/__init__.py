"""Diagnostic system for parsekit.

Provides structured diagnostics with codes, spans, labels and hints, the
append-only accumulator used during parsing, and the reporter that turns
surviving diagnostics into rendered, source-annotated reports.
Inspired by Rust compiler diagnostics.

Python 3.13+. Zero external dependencies.
"""

# ruff: noqa: I001 - accumulator must load before report (report pulls in parsekit.syntax)
from .codes import Diagnostic, DiagnosticCode, Label
from .templates import ErrorTemplate
from .accumulator import ErrorAccumulator
from .errors import ParseFailedError
from .report import (
    DiagnosticReporter,
    PlainTextRenderer,
    Report,
    ReportEntry,
    ReportLabel,
    ReportRenderer,
    SourceView,
)
from .formatter import DiagnosticFormatter, OutputFormat

__all__ = [
    "Diagnostic",
    "DiagnosticCode",
    "DiagnosticFormatter",
    "DiagnosticReporter",
    "ErrorAccumulator",
    "ErrorTemplate",
    "Label",
    "OutputFormat",
    "ParseFailedError",
    "PlainTextRenderer",
    "Report",
    "ReportEntry",
    "ReportLabel",
    "ReportRenderer",
    "SourceView",
]
