"""Core utilities shared across syntax, grammar and diagnostics layers.

This package provides the foundations every other layer depends on:

    core <- diagnostics <- syntax <- grammar

Exports:
    Span: Immutable source location with merge/contains/ordering
    DepthGuard: Context manager for recursion depth limiting
    ParseKitError and subclasses: Fatal (non-recoverable) errors

Python 3.13+.
"""

from .depth_guard import DepthGuard
from .errors import (
    CrossUnitSpanError,
    GrammarError,
    IncomparableSpanError,
    ParseKitError,
    RecursionLimitExceededError,
    SpanError,
    UndefinedForwardError,
    ZeroWidthRepetitionError,
)
from .span import Span

__all__ = [
    "CrossUnitSpanError",
    "DepthGuard",
    "GrammarError",
    "IncomparableSpanError",
    "ParseKitError",
    "RecursionLimitExceededError",
    "Span",
    "SpanError",
    "UndefinedForwardError",
    "ZeroWidthRepetitionError",
]
