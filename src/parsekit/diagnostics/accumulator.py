"""Append-only diagnostic accumulator with speculative scratch scopes.

Every combinator attempt that may be abandoned (an Alternative option, a
Repetition iteration, a Lookahead) runs against a child accumulator. When the
attempt's outcome is known, the parent either commits the child (its
diagnostics become part of the parse's report) or discards it (its
diagnostics are kept in ``abandoned`` for inspection but never reported).

No global state: one accumulator tree per Cursor.

Python 3.13+.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator

from parsekit.enums import Severity

from .codes import Diagnostic

__all__ = ["ErrorAccumulator", "source_order"]

logger = logging.getLogger(__name__)


def source_order(diagnostics: Iterable[Diagnostic]) -> list[Diagnostic]:
    """Sort diagnostics by primary span, stable.

    Units keep the order in which they first appear; within a unit,
    diagnostics are ordered by (start, end).
    """
    items = list(diagnostics)
    unit_rank: dict[str, int] = {}
    for diagnostic in items:
        unit_rank.setdefault(diagnostic.span.unit, len(unit_rank))
    return sorted(
        items,
        key=lambda d: (unit_rank[d.span.unit], d.span.start, d.span.end),
    )


class ErrorAccumulator:
    """Insertion-ordered, append-only collection of diagnostics.

    Example:
        >>> parent = ErrorAccumulator()
        >>> child = parent.child()
        >>> child.add(warning)
        >>> parent.commit(child)     # warning now reported
        >>> other = parent.child()
        >>> other.add(noise)
        >>> parent.discard(other)    # noise only in parent.abandoned
    """

    __slots__ = ("_abandoned", "_entries")

    def __init__(self, diagnostics: Iterable[Diagnostic] = ()) -> None:
        self._entries: list[Diagnostic] = list(diagnostics)
        self._abandoned: list[Diagnostic] = []

    def add(self, diagnostic: Diagnostic) -> None:
        """Append one diagnostic."""
        self._entries.append(diagnostic)

    def extend(self, diagnostics: Iterable[Diagnostic]) -> None:
        """Append diagnostics in order."""
        self._entries.extend(diagnostics)

    def child(self) -> ErrorAccumulator:
        """Create an empty scratch accumulator for one speculative attempt."""
        return ErrorAccumulator()

    def commit(self, child: ErrorAccumulator) -> None:
        """Adopt a child's diagnostics as part of this accumulator's report."""
        self._entries.extend(child._entries)
        self._abandoned.extend(child._abandoned)

    def discard(self, child: ErrorAccumulator) -> None:
        """Drop a child's diagnostics from the report, keeping them as abandoned."""
        if child._entries:
            logger.debug("Discarding %d diagnostic(s) from abandoned branch", len(child._entries))
        self._abandoned.extend(child._entries)
        self._abandoned.extend(child._abandoned)

    def abandon(self, diagnostics: Iterable[Diagnostic]) -> None:
        """Record diagnostics of a failed attempt that will not be reported."""
        self._abandoned.extend(diagnostics)

    @property
    def diagnostics(self) -> tuple[Diagnostic, ...]:
        """Committed diagnostics in insertion order."""
        return tuple(self._entries)

    @property
    def abandoned(self) -> tuple[Diagnostic, ...]:
        """Diagnostics produced on branches that did not determine the outcome."""
        return tuple(self._abandoned)

    @property
    def errors(self) -> tuple[Diagnostic, ...]:
        """Committed error-severity diagnostics."""
        return tuple(d for d in self._entries if d.severity is Severity.ERROR)

    @property
    def warnings(self) -> tuple[Diagnostic, ...]:
        """Committed warning-severity diagnostics."""
        return tuple(d for d in self._entries if d.severity is Severity.WARNING)

    @property
    def has_errors(self) -> bool:
        """True if any committed diagnostic is an error."""
        return any(d.severity is Severity.ERROR for d in self._entries)

    def sorted(self) -> list[Diagnostic]:
        """Committed diagnostics in source order of primary span."""
        return source_order(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(tuple(self._entries))

    def __repr__(self) -> str:
        return f"ErrorAccumulator(committed={len(self._entries)}, abandoned={len(self._abandoned)})"
