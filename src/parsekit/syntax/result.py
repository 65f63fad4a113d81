"""Parse results as values.

Every combinator returns either :class:`Success` (a value plus the span it
covers) or :class:`Failure` (one or more diagnostics). Recoverable failures
never raise; only grammar-construction and span-invariant violations do.

Python 3.13+. Zero external dependencies.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TypeIs

from parsekit.core.span import Span
from parsekit.diagnostics.codes import Diagnostic
from parsekit.enums import Severity

__all__ = ["Failure", "ParseResult", "Success", "is_success"]


@dataclass(frozen=True, slots=True)
class Success[T]:
    """Successful parse: the produced value and the span it covers."""

    value: T
    span: Span


@dataclass(frozen=True, slots=True)
class Failure:
    """Failed parse carrying at least one diagnostic.

    Attributes:
        diagnostics: Diagnostics in the order they were produced
    """

    diagnostics: tuple[Diagnostic, ...]

    def __post_init__(self) -> None:
        if not self.diagnostics:
            msg = "Failure requires at least one diagnostic"
            raise ValueError(msg)

    @classmethod
    def of(cls, diagnostic: Diagnostic) -> Failure:
        return cls((diagnostic,))

    @property
    def span(self) -> Span:
        """Primary span of the furthest diagnostic (first one on ties)."""
        return max(self.diagnostics, key=lambda d: d.span.start).span

    @property
    def errors(self) -> tuple[Diagnostic, ...]:
        return tuple(d for d in self.diagnostics if d.severity is Severity.ERROR)

    def merge(self, other: Failure) -> Failure:
        """Concatenate diagnostics, self first. Duplicates are kept."""
        return Failure(self.diagnostics + other.diagnostics)


type ParseResult[T] = Success[T] | Failure


def is_success[T](result: ParseResult[T]) -> TypeIs[Success[T]]:
    """Narrow a ParseResult to Success."""
    return isinstance(result, Success)
