"""Grammar nodes and the composition operators.

Every node is an immutable value with one operation, ``attempt(cursor)``,
returning a :class:`~parsekit.syntax.result.ParseResult`. Nodes hold no
per-invocation state: all progress lives in the Cursor, so one grammar can
serve any number of parses, including parses on other threads.

Backtracking policy by operator:
    - Sequence: short-circuits on the first failure and leaves the cursor
      where that failure happened. Never retries.
    - Alternative: rewinds between options; the first success wins. When
      every option fails, the failure whose span starts latest wins; exact
      ties merge diagnostics in declaration order. On total failure the
      cursor is back at the start.
    - Repetition: an iteration that fails is rewound and ends the loop. An
      iteration that succeeds without consuming input raises
      ZeroWidthRepetitionError.
    - Lookahead: always rewinds; diagnostics raised inside never reach the
      parent.

Speculative attempts run against a scratch accumulator
(:meth:`Cursor.scratch`). Diagnostics from branches that end up unused are
discarded, so only the branch that decides the outcome reports anything.

Python 3.13+.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from operator import itemgetter

from parsekit.core.errors import (
    GrammarError,
    RecursionLimitExceededError,
    UndefinedForwardError,
    ZeroWidthRepetitionError,
)
from parsekit.core.span import Span
from parsekit.diagnostics.accumulator import ErrorAccumulator
from parsekit.diagnostics.templates import ErrorTemplate
from parsekit.syntax.cursor import Cursor
from parsekit.syntax.result import Failure, ParseResult, Success

__all__ = [
    "Alternative",
    "EndOfInput",
    "Empty",
    "Forward",
    "Grammar",
    "Lookahead",
    "Map",
    "Named",
    "NegativeLookahead",
    "Nothing",
    "Optional",
    "Repetition",
    "Sequence",
    "Spanned",
    "TryMap",
    "Validate",
    "WarnIf",
    "WithSpan",
    "alt",
    "delimited",
    "describe_atom",
    "empty",
    "end_of_input",
    "not_followed_by",
    "nothing",
    "peek",
    "preceded",
    "separated",
    "seq",
    "terminated",
]

# Exceptions a try_map conversion may raise to reject a value
CONVERSION_ERRORS: tuple[type[Exception], ...] = (
    ValueError,
    TypeError,
    ArithmeticError,
    LookupError,
)


def describe_atom(value: object) -> str:
    """Display form of an atom value for "Unexpected ..." messages."""
    describe = getattr(value, "describe", None)
    if callable(describe):
        return str(describe())
    return repr(value)


@dataclass(frozen=True, slots=True)
class Spanned[T]:
    """A parsed value together with the span it was parsed from."""

    value: T
    span: Span


class Grammar[T](ABC):
    """Base class for grammar nodes.

    Subclasses implement :meth:`attempt` and :meth:`describe`. The remaining
    methods build new nodes around this one; building never copies the
    wrapped nodes.

    Example:
        >>> number = digit().many1().map("".join).map(int)
        >>> pair = number.terminated(char(",")).then(number)
        >>> parse_text(pair, "12,34").unwrap()
        (12, 34)
    """

    __slots__ = ()

    @abstractmethod
    def attempt(self, cursor: Cursor) -> ParseResult[T]:
        """Match at the cursor's position."""

    @abstractmethod
    def describe(self) -> str:
        """Human-readable description used in diagnostics."""

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.describe()}>"

    # Composition -----------------------------------------------------

    def __add__(self, other: Grammar[object]) -> Sequence:
        return Sequence((self, other))

    def __or__[U](self, other: Grammar[U]) -> Alternative[T | U]:
        return Alternative((self, other))

    def then(self, other: Grammar[object]) -> Sequence:
        """Same as ``self + other``."""
        return self + other

    def terminated(self, other: Grammar[object]) -> Grammar[T]:
        """Match ``self`` then ``other``, keeping only ``self``'s value."""
        return terminated(self, other)

    def separated_by(
        self, separator: Grammar[object], *, allow_empty: bool = True
    ) -> Grammar[list[T]]:
        return separated(self, separator, allow_empty=allow_empty)

    def many(self) -> Repetition[T]:
        """Zero or more."""
        return Repetition(self, 0, None)

    def many1(self) -> Repetition[T]:
        """One or more."""
        return Repetition(self, 1, None)

    def repeat(self, min_count: int, max_count: int | None = None) -> Repetition[T]:
        """Between ``min_count`` and ``max_count`` (inclusive, None for unbounded)."""
        return Repetition(self, min_count, max_count)

    def optional[D](self, default: D = None) -> Optional[T, D]:  # type: ignore[assignment]
        return Optional(self, default)

    def map[U](self, fn: Callable[[T], U]) -> Map[T, U]:
        return Map(self, fn)

    def try_map[U](self, fn: Callable[[T], U], message: str | None = None) -> TryMap[T, U]:
        """Map with a conversion that may reject the value by raising.

        ValueError, TypeError, ArithmeticError and LookupError raised by
        ``fn`` turn into a CONVERSION_FAILED diagnostic over the consumed span.
        """
        return TryMap(self, fn, message)

    def validate(self, predicate: Callable[[T], bool], message: str) -> Validate[T]:
        """Fail with ``message`` when ``predicate`` rejects the value."""
        return Validate(self, predicate, message)

    def warn_if(self, predicate: Callable[[T], bool], message: str) -> WarnIf[T]:
        """Keep the value but report a warning when ``predicate`` holds."""
        return WarnIf(self, predicate, message)

    def named(self, name: str) -> Named[T]:
        return Named(self, name)

    def spanned(self) -> WithSpan[T]:
        return WithSpan(self)


# ============================================================================
# SEQUENCE AND ALTERNATIVE
# ============================================================================


@dataclass(frozen=True, slots=True, eq=False, repr=False)
class Sequence(Grammar[tuple[object, ...]]):
    """Match every part in order; the value is the tuple of part values.

    ``a + b + c`` builds one three-part sequence.
    """

    parts: tuple[Grammar[object], ...]

    def __add__(self, other: Grammar[object]) -> Sequence:
        return Sequence((*self.parts, other))

    def attempt(self, cursor: Cursor) -> ParseResult[tuple[object, ...]]:
        start = cursor.position()
        values: list[object] = []
        for part in self.parts:
            result = part.attempt(cursor)
            if isinstance(result, Failure):
                return result
            values.append(result.value)
        return Success(tuple(values), cursor.span_since(start))

    def describe(self) -> str:
        return " ".join(part.describe() for part in self.parts)


@dataclass(frozen=True, slots=True, eq=False, repr=False)
class Alternative[T](Grammar[T]):
    """Ordered choice with furthest-progress failure reporting."""

    options: tuple[Grammar[T], ...]

    def __or__[U](self, other: Grammar[U]) -> Alternative[T | U]:
        return Alternative((*self.options, other))

    def attempt(self, cursor: Cursor) -> ParseResult[T]:
        start = cursor.position()
        attempts: list[tuple[Failure, ErrorAccumulator]] = []
        for option in self.options:
            with cursor.scratch() as scratch:
                result = option.attempt(cursor)
            if isinstance(result, Success):
                for failure, abandoned in attempts:
                    cursor.diagnostics.discard(abandoned)
                    cursor.diagnostics.abandon(failure.diagnostics)
                cursor.diagnostics.commit(scratch)
                return result
            attempts.append((result, scratch))
            cursor.restore(start)

        furthest = max(failure.span.start for failure, _ in attempts)
        merged: Failure | None = None
        for failure, scratch in attempts:
            if failure.span.start == furthest:
                merged = failure if merged is None else merged.merge(failure)
                cursor.diagnostics.commit(scratch)
            else:
                cursor.diagnostics.discard(scratch)
                cursor.diagnostics.abandon(failure.diagnostics)
        assert merged is not None  # at least one option always reaches furthest
        return merged

    def describe(self) -> str:
        return " | ".join(option.describe() for option in self.options)


# ============================================================================
# REPETITION AND OPTIONAL
# ============================================================================


@dataclass(frozen=True, slots=True, eq=False, repr=False)
class Repetition[T](Grammar[list[T]]):
    """Match ``inner`` between ``min_count`` and ``max_count`` times.

    Raises:
        GrammarError: On construction, for a negative or inverted range
        ZeroWidthRepetitionError: When an iteration succeeds without
            consuming input
    """

    inner: Grammar[T]
    min_count: int = 0
    max_count: int | None = None

    def __post_init__(self) -> None:
        if self.min_count < 0:
            msg = f"Repetition minimum must be >= 0, got {self.min_count}"
            raise GrammarError(msg)
        if self.max_count is not None and self.max_count < self.min_count:
            msg = f"Repetition maximum ({self.max_count}) is below minimum ({self.min_count})"
            raise GrammarError(msg)

    def attempt(self, cursor: Cursor) -> ParseResult[list[T]]:
        start = cursor.position()
        values: list[T] = []
        while self.max_count is None or len(values) < self.max_count:
            mark = cursor.position()
            with cursor.scratch() as scratch:
                result = self.inner.attempt(cursor)
            if isinstance(result, Failure):
                cursor.restore(mark)
                cursor.diagnostics.discard(scratch)
                if len(values) < self.min_count:
                    return result
                cursor.diagnostics.abandon(result.diagnostics)
                break
            if cursor.position() == mark:
                raise ZeroWidthRepetitionError(
                    ErrorTemplate.zero_width_repetition(self.inner.describe(), result.span)
                )
            cursor.diagnostics.commit(scratch)
            values.append(result.value)
        return Success(values, cursor.span_since(start))

    def describe(self) -> str:
        inner = self.inner.describe()
        if self.max_count is None and self.min_count in {0, 1}:
            return f"{inner}{'*' if self.min_count == 0 else '+'}"
        upper = "" if self.max_count is None else str(self.max_count)
        return f"{inner}{{{self.min_count},{upper}}}"


@dataclass(frozen=True, slots=True, eq=False, repr=False)
class Optional[T, D](Grammar[T | D]):
    """Match ``inner`` or succeed with ``default`` consuming nothing."""

    inner: Grammar[T]
    default: D

    def attempt(self, cursor: Cursor) -> ParseResult[T | D]:
        mark = cursor.position()
        with cursor.scratch() as scratch:
            result = self.inner.attempt(cursor)
        if isinstance(result, Success):
            cursor.diagnostics.commit(scratch)
            return result
        cursor.restore(mark)
        cursor.diagnostics.discard(scratch)
        cursor.diagnostics.abandon(result.diagnostics)
        return Success(self.default, cursor.point_span())

    def describe(self) -> str:
        return f"{self.inner.describe()}?"


# ============================================================================
# LOOKAHEAD
# ============================================================================


@dataclass(frozen=True, slots=True, eq=False, repr=False)
class Lookahead[T](Grammar[T]):
    """Succeed when ``inner`` would match here, without consuming."""

    inner: Grammar[T]

    def attempt(self, cursor: Cursor) -> ParseResult[T]:
        mark = cursor.position()
        with cursor.scratch() as scratch:
            result = self.inner.attempt(cursor)
        cursor.restore(mark)
        cursor.diagnostics.discard(scratch)
        if isinstance(result, Failure):
            return result
        return Success(result.value, cursor.point_span())

    def describe(self) -> str:
        return f"&{self.inner.describe()}"


@dataclass(frozen=True, slots=True, eq=False, repr=False)
class NegativeLookahead(Grammar[None]):
    """Succeed when ``inner`` would NOT match here, without consuming."""

    inner: Grammar[object]

    def attempt(self, cursor: Cursor) -> ParseResult[None]:
        mark = cursor.position()
        with cursor.scratch() as scratch:
            result = self.inner.attempt(cursor)
        cursor.restore(mark)
        cursor.diagnostics.discard(scratch)
        if isinstance(result, Success):
            return Failure.of(ErrorTemplate.unexpected_match(self.inner.describe(), result.span))
        cursor.diagnostics.abandon(result.diagnostics)
        return Success(None, cursor.point_span())

    def describe(self) -> str:
        return f"!{self.inner.describe()}"


# ============================================================================
# MAPPING AND VALIDATION
# ============================================================================


@dataclass(frozen=True, slots=True, eq=False, repr=False)
class Map[T, U](Grammar[U]):
    inner: Grammar[T]
    fn: Callable[[T], U]

    def attempt(self, cursor: Cursor) -> ParseResult[U]:
        result = self.inner.attempt(cursor)
        if isinstance(result, Failure):
            return result
        return Success(self.fn(result.value), result.span)

    def describe(self) -> str:
        return self.inner.describe()


@dataclass(frozen=True, slots=True, eq=False, repr=False)
class TryMap[T, U](Grammar[U]):
    """Map whose conversion can reject the value.

    The cursor stays after the consumed input when the conversion fails,
    matching Sequence's "fail where you stopped" rule.
    """

    inner: Grammar[T]
    fn: Callable[[T], U]
    message: str | None = None

    def attempt(self, cursor: Cursor) -> ParseResult[U]:
        result = self.inner.attempt(cursor)
        if isinstance(result, Failure):
            return result
        try:
            value = self.fn(result.value)
        except CONVERSION_ERRORS as e:
            return Failure.of(ErrorTemplate.conversion_failed(str(e), result.span, self.message))
        return Success(value, result.span)

    def describe(self) -> str:
        return self.inner.describe()


@dataclass(frozen=True, slots=True, eq=False, repr=False)
class Validate[T](Grammar[T]):
    inner: Grammar[T]
    predicate: Callable[[T], bool]
    message: str

    def attempt(self, cursor: Cursor) -> ParseResult[T]:
        result = self.inner.attempt(cursor)
        if isinstance(result, Success) and not self.predicate(result.value):
            return Failure.of(ErrorTemplate.validation_failed(self.message, result.span))
        return result

    def describe(self) -> str:
        return self.inner.describe()


@dataclass(frozen=True, slots=True, eq=False, repr=False)
class WarnIf[T](Grammar[T]):
    inner: Grammar[T]
    predicate: Callable[[T], bool]
    message: str

    def attempt(self, cursor: Cursor) -> ParseResult[T]:
        result = self.inner.attempt(cursor)
        if isinstance(result, Success) and self.predicate(result.value):
            cursor.report(ErrorTemplate.validation_warning(self.message, result.span))
        return result

    def describe(self) -> str:
        return self.inner.describe()


# ============================================================================
# LABELLING
# ============================================================================


@dataclass(frozen=True, slots=True, eq=False, repr=False)
class Named[T](Grammar[T]):
    """Give a node a name for diagnostics.

    A failure that made no progress past the starting point is replaced by a
    single ``Expected <name>`` diagnostic; deeper failures pass through, as
    they say more than the name would.
    """

    inner: Grammar[T]
    name: str

    def attempt(self, cursor: Cursor) -> ParseResult[T]:
        origin = cursor.point_span()
        result = self.inner.attempt(cursor)
        if isinstance(result, Success):
            return result
        failed_at = result.span
        if failed_at.unit == origin.unit and failed_at.start <= origin.start:
            return Failure.of(ErrorTemplate.expected(self.name, failed_at))
        return result

    def describe(self) -> str:
        return self.name


@dataclass(frozen=True, slots=True, eq=False, repr=False)
class WithSpan[T](Grammar[Spanned[T]]):
    """Wrap the value of ``inner`` in :class:`Spanned`."""

    inner: Grammar[T]

    def attempt(self, cursor: Cursor) -> ParseResult[Spanned[T]]:
        result = self.inner.attempt(cursor)
        if isinstance(result, Failure):
            return result
        return Success(Spanned(result.value, result.span), result.span)

    def describe(self) -> str:
        return self.inner.describe()


# ============================================================================
# LEAVES
# ============================================================================


@dataclass(frozen=True, slots=True, eq=False, repr=False)
class EndOfInput(Grammar[None]):
    def attempt(self, cursor: Cursor) -> ParseResult[None]:
        atom = cursor.peek()
        if atom is None:
            return Success(None, cursor.point_span())
        return Failure.of(ErrorTemplate.trailing_input(describe_atom(atom.value), atom.span))

    def describe(self) -> str:
        return "end of input"


@dataclass(frozen=True, slots=True, eq=False, repr=False)
class Empty(Grammar[None]):
    """Always succeeds, consuming nothing."""

    def attempt(self, cursor: Cursor) -> ParseResult[None]:
        return Success(None, cursor.point_span())

    def describe(self) -> str:
        return "empty"


@dataclass(frozen=True, slots=True, eq=False, repr=False)
class Nothing(Grammar[None]):
    """Never succeeds."""

    def attempt(self, cursor: Cursor) -> ParseResult[None]:
        return Failure.of(ErrorTemplate.no_match(cursor.point_span()))

    def describe(self) -> str:
        return "nothing"


class Forward[T](Grammar[T]):
    """Placeholder for a recursive grammar, defined after construction.

    Each entry counts one level on the cursor's depth guard; nesting past
    the limit raises RecursionLimitExceededError. Grammars with many layers
    per level can run out of interpreter stack first; Parser reports that
    as RecursionLimitExceededError too.

    Example:
        >>> expr = Forward[int]("expr")
        >>> atom = integer() | delimited(char("("), expr, char(")"))
        >>> expr.define(atom)
    """

    __slots__ = ("_name", "_target")

    def __init__(self, name: str = "forward") -> None:
        self._name = name
        self._target: Grammar[T] | None = None

    @property
    def is_defined(self) -> bool:
        return self._target is not None

    def define(self, grammar: Grammar[T]) -> None:
        """Bind the grammar this node stands for. Allowed once.

        Raises:
            GrammarError: If already defined
        """
        if self._target is not None:
            msg = f"Forward grammar node {self._name} is already defined"
            raise GrammarError(msg)
        self._target = grammar

    def attempt(self, cursor: Cursor) -> ParseResult[T]:
        if self._target is None:
            raise UndefinedForwardError(
                ErrorTemplate.undefined_forward(self._name, cursor.point_span())
            )
        if cursor.depth.is_exceeded():
            raise RecursionLimitExceededError(
                ErrorTemplate.recursion_limit_exceeded(
                    cursor.depth.max_depth, cursor.point_span(), self._name
                )
            )
        with cursor.depth:
            return self._target.attempt(cursor)

    def describe(self) -> str:
        return self._name


# ============================================================================
# CONSTRUCTORS
# ============================================================================


def seq(*parts: Grammar[object]) -> Sequence:
    """Sequence of ``parts``; the value is a tuple with one entry per part."""
    if not parts:
        msg = "seq() requires at least one part"
        raise GrammarError(msg)
    return Sequence(parts)


def alt[T](*options: Grammar[T]) -> Alternative[T]:
    """Ordered choice between ``options``."""
    if not options:
        msg = "alt() requires at least one option"
        raise GrammarError(msg)
    return Alternative(options)


def peek[T](inner: Grammar[T]) -> Lookahead[T]:
    return Lookahead(inner)


def not_followed_by(inner: Grammar[object]) -> NegativeLookahead:
    return NegativeLookahead(inner)


def preceded[T](prefix: Grammar[object], inner: Grammar[T]) -> Grammar[T]:
    """Match ``prefix`` then ``inner``, keeping ``inner``'s value."""
    return Map(Sequence((prefix, inner)), itemgetter(1))


def terminated[T](inner: Grammar[T], suffix: Grammar[object]) -> Grammar[T]:
    """Match ``inner`` then ``suffix``, keeping ``inner``'s value."""
    return Map(Sequence((inner, suffix)), itemgetter(0))


def delimited[T](open_: Grammar[object], inner: Grammar[T], close: Grammar[object]) -> Grammar[T]:
    """Match ``open_ inner close``, keeping ``inner``'s value."""
    return Map(Sequence((open_, inner, close)), itemgetter(1))


def _collect(pair: tuple[object, ...]) -> list[object]:
    first, rest = pair
    return [first, *rest]  # type: ignore[misc]


def separated[T](
    item: Grammar[T], separator: Grammar[object], *, allow_empty: bool = True
) -> Grammar[list[T]]:
    """Items separated by ``separator``; a trailing separator is not consumed."""
    items: Grammar[list[T]] = Map(
        Sequence((item, Repetition(preceded(separator, item)))), _collect  # type: ignore[arg-type]
    )
    if allow_empty:
        return Map(Optional(items, ()), list)
    return items


def end_of_input() -> EndOfInput:
    return EndOfInput()


def empty() -> Empty:
    return Empty()


def nothing() -> Nothing:
    return Nothing()
