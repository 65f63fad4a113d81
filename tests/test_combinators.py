"""Tests for the combinator layer: backtracking policy and failure reporting.

Covers the behaviors that diagnostic output depends on: sequence
short-circuiting, alternative furthest-progress tie-breaking, repetition
rewinding and zero-width detection, lookahead, mapping and validation.
"""

from concurrent.futures import ThreadPoolExecutor

import pytest
from hypothesis import given

from parsekit.core.errors import (
    GrammarError,
    RecursionLimitExceededError,
    UndefinedForwardError,
    ZeroWidthRepetitionError,
)
from parsekit.diagnostics.codes import Diagnostic, DiagnosticCode
from parsekit.enums import Severity
from parsekit.grammar.node import (
    Alternative,
    Forward,
    Grammar,
    Sequence,
    Spanned,
    alt,
    delimited,
    empty,
    end_of_input,
    not_followed_by,
    nothing,
    peek,
    preceded,
    seq,
    terminated,
)
from parsekit.grammar.parser import Parser, parse_text
from parsekit.grammar.primitives import char, digit, identifier, integer, letter, literal
from parsekit.syntax.cursor import Cursor, CursorPosition
from parsekit.syntax.result import Failure, ParseResult, Success
from parsekit.syntax.source import TextSource
from tests.strategies import grapheme_text


def run[T](grammar: Grammar[T], text: str) -> tuple[ParseResult[T], Cursor]:
    cursor = Cursor(TextSource(text, "test"))
    return grammar.attempt(cursor), cursor


def always(_: object) -> bool:
    return True


class _FailsHere(Grammar[None]):
    """Fails in place with one diagnostic of a chosen severity."""

    def __init__(self, severity: Severity, message: str) -> None:
        self.severity = severity
        self.message = message

    def attempt(self, cursor: Cursor) -> ParseResult[None]:
        diagnostic = Diagnostic(
            code=DiagnosticCode.VALIDATION_FAILED,
            message=self.message,
            span=cursor.point_span(),
            severity=self.severity,
        )
        return Failure.of(diagnostic)

    def describe(self) -> str:
        return self.message


# ============================================================================
# SEQUENCE
# ============================================================================


class TestSequence:
    """Sequence short-circuits and never retries."""

    def test_values_are_tuple(self) -> None:
        """A sequence yields one value per part."""
        result, _ = run(char("a") + char("b") + char("c"), "abc")
        assert isinstance(result, Success)
        assert result.value == ("a", "b", "c")
        assert (result.span.start, result.span.end) == (0, 3)

    def test_plus_flattens(self) -> None:
        """a + b + c is one three-part Sequence."""
        grammar = char("a") + char("b") + char("c")
        assert isinstance(grammar, Sequence)
        assert len(grammar.parts) == 3

    def test_failure_leaves_cursor_at_failure_point(self) -> None:
        """After a later part fails, the cursor is not rewound."""
        result, cursor = run(seq(char("a"), char("b"), char("c")), "abx")
        assert isinstance(result, Failure)
        assert result.span.start == 2
        assert cursor.position() == CursorPosition(2)

    def test_short_circuit(self) -> None:
        """Parts after a failure are not attempted."""
        result, _ = run(seq(char("x"), Forward("never-defined")), "a")
        assert isinstance(result, Failure)

    def test_seq_requires_parts(self) -> None:
        """seq() with no parts is a grammar error."""
        with pytest.raises(GrammarError):
            seq()

    def test_preceded_terminated_delimited(self) -> None:
        """Helpers keep the inner value only."""
        assert run(preceded(char("$"), digit()), "$1")[0].value == "1"  # type: ignore[union-attr]
        assert run(terminated(digit(), char(";")), "1;")[0].value == "1"  # type: ignore[union-attr]
        wrapped = delimited(char("("), digit(), char(")"))
        assert run(wrapped, "(7)")[0].value == "7"  # type: ignore[union-attr]


# ============================================================================
# ALTERNATIVE
# ============================================================================


class TestAlternative:
    """Ordered choice and furthest-progress failure reporting."""

    def test_first_success_wins(self) -> None:
        """"foo" | "foobar" over "foobar" commits to "foo"."""
        result, cursor = run(literal("foo") | literal("foobar"), "foobar")
        assert isinstance(result, Success)
        assert result.value == "foo"
        assert (result.span.start, result.span.end) == (0, 3)
        assert cursor.position() == CursorPosition(3)

    def test_rewinds_between_options(self) -> None:
        """The second option starts from the original position."""
        grammar = seq(char("a"), char("x")) | seq(char("a"), char("b"))
        result, _ = run(grammar, "ab")
        assert isinstance(result, Success)
        assert result.value == ("a", "b")

    def test_furthest_progress_wins(self) -> None:
        """A failure after three atoms beats one after a single atom."""
        deep = seq(char("a"), char("b"), char("c"), char("x"))
        shallow = seq(char("a"), char("y"))
        for grammar in (deep | shallow, shallow | deep):
            result, cursor = run(grammar, "abcd")
            assert isinstance(result, Failure)
            assert result.span.start == 3
            assert [d.message for d in result.diagnostics] == ["Unexpected 'd', expected 'x'"]
            assert cursor.position() == CursorPosition(0)

    def test_exact_tie_merges_in_declaration_order(self) -> None:
        """Failures at the same point merge, first option first."""
        result, _ = run(char("x") | char("y"), "z")
        assert isinstance(result, Failure)
        assert [d.message for d in result.diagnostics] == [
            "Unexpected 'z', expected 'x'",
            "Unexpected 'z', expected 'y'",
        ]

    @pytest.mark.parametrize(
        ("first", "second"),
        [(Severity.WARNING, Severity.ERROR), (Severity.ERROR, Severity.WARNING)],
    )
    def test_exact_tie_ignores_severity(self, first: Severity, second: Severity) -> None:
        """Tied failures keep declaration order whatever their severity."""
        grammar = _FailsHere(first, "first") | _FailsHere(second, "second")
        result, cursor = run(grammar, "z")
        assert isinstance(result, Failure)
        assert [(d.message, d.severity) for d in result.diagnostics] == [
            ("first", first),
            ("second", second),
        ]
        assert result.span.start == 0
        assert cursor.position() == CursorPosition(0)

    def test_only_winner_diagnostics_committed(self) -> None:
        """Warnings from abandoned options never reach the report."""
        loser = char("a").warn_if(always, "from loser") + char("x")
        winner = char("a").warn_if(always, "from winner") + char("b")
        result, cursor = run(loser | winner, "ab")
        assert isinstance(result, Success)
        assert [d.message for d in cursor.diagnostics] == ["from winner"]
        abandoned = [d.message for d in cursor.diagnostics.abandoned]
        assert "from loser" in abandoned
        assert "Unexpected 'b', expected 'x'" in abandoned

    def test_or_flattens(self) -> None:
        """a | b | c is one three-option Alternative."""
        grammar = char("a") | char("b") | char("c")
        assert isinstance(grammar, Alternative)
        assert len(grammar.options) == 3

    def test_grammar_errors_bypass_alternative(self) -> None:
        """Fatal grammar errors are not caught by rewind-and-retry."""
        with pytest.raises(UndefinedForwardError):
            run(alt(Forward("undefined"), char("a")), "a")

    def test_alt_requires_options(self) -> None:
        """alt() with no options is a grammar error."""
        with pytest.raises(GrammarError):
            alt()


# ============================================================================
# REPETITION
# ============================================================================


class TestRepetition:
    """many, many1, repeat."""

    def test_digits_then_letter(self) -> None:
        """digit+ over "12a" stops before "a" without consuming it."""
        result, cursor = run(digit().many1(), "12a")
        assert isinstance(result, Success)
        assert result.value == ["1", "2"]
        assert (result.span.start, result.span.end) == (0, 2)
        assert cursor.position() == CursorPosition(2)
        assert not cursor.is_eof

    def test_failed_iteration_is_rewound(self) -> None:
        """Partial consumption of the failing iteration is discarded."""
        result, cursor = run((char("a") + char("b")).many(), "ababac")
        assert isinstance(result, Success)
        assert result.value == [("a", "b"), ("a", "b")]
        assert cursor.position() == CursorPosition(4)

    def test_many_matches_zero(self) -> None:
        """many() succeeds with an empty list and a zero-width span."""
        result, _ = run(digit().many(), "x")
        assert isinstance(result, Success)
        assert result.value == []
        assert result.span.is_empty

    def test_many1_zero_matches_fails(self) -> None:
        """one-or-more surfaces the first attempt's diagnostics."""
        result, _ = run(digit().many1(), "x")
        assert isinstance(result, Failure)
        assert result.diagnostics[0].message == "Unexpected 'x', expected digit"

    def test_bounded_repeat_stops_at_max(self) -> None:
        """repeat(2, 3) takes at most three."""
        result, cursor = run(digit().repeat(2, 3), "12345")
        assert isinstance(result, Success)
        assert result.value == ["1", "2", "3"]
        assert cursor.position() == CursorPosition(3)

    def test_bounded_repeat_below_min_fails(self) -> None:
        """repeat(2, 3) with one match fails."""
        result, _ = run(digit().repeat(2, 3), "1x")
        assert isinstance(result, Failure)

    def test_invalid_ranges(self) -> None:
        """Negative or inverted bounds are grammar errors."""
        with pytest.raises(GrammarError):
            digit().repeat(-1)
        with pytest.raises(GrammarError):
            digit().repeat(3, 2)

    def test_zero_width_repetition_fails_fast(self) -> None:
        """many(optional(nothing)) raises instead of looping."""
        with pytest.raises(ZeroWidthRepetitionError) as exc_info:
            run(nothing().optional().many(), "abc")
        assert exc_info.value.diagnostic is not None
        assert exc_info.value.diagnostic.code is DiagnosticCode.ZERO_WIDTH_REPETITION

    def test_zero_width_repetition_passes_through_alternative(self) -> None:
        """The zero-width error is fatal even inside an Alternative."""
        with pytest.raises(ZeroWidthRepetitionError):
            run(alt(empty().many(), char("a")), "a")

    def test_describe(self) -> None:
        """Repetitions describe themselves with suffix notation."""
        assert digit().many().describe() == "digit*"
        assert repr(digit().many1()) == "<Repetition digit+>"
        assert digit().repeat(2, 4).describe() == "digit{2,4}"


# ============================================================================
# OPTIONAL AND LOOKAHEAD
# ============================================================================


class TestOptionalAndLookahead:
    """optional, peek, not_followed_by."""

    def test_optional_default(self) -> None:
        """A missing optional yields its default at a zero-width span."""
        result, cursor = run(char("a").optional("none"), "b")
        assert isinstance(result, Success)
        assert result.value == "none"
        assert result.span.is_empty
        assert cursor.position() == CursorPosition(0)

    def test_peek_does_not_consume(self) -> None:
        """peek succeeds without moving the cursor."""
        result, cursor = run(peek(char("a")), "ab")
        assert isinstance(result, Success)
        assert result.value == "a"
        assert cursor.position() == CursorPosition(0)

    def test_peek_failure(self) -> None:
        """peek fails when the inner node fails, still without consuming."""
        result, cursor = run(peek(seq(char("a"), char("b"))), "ax")
        assert isinstance(result, Failure)
        assert cursor.position() == CursorPosition(0)

    def test_peek_drops_inner_warnings(self) -> None:
        """Diagnostics raised inside a lookahead are never committed."""
        _, cursor = run(peek(char("a").warn_if(always, "inside")), "a")
        assert len(cursor.diagnostics) == 0

    def test_not_followed_by(self) -> None:
        """Negative lookahead inverts the sense."""
        result, cursor = run(not_followed_by(char("a")), "ab")
        assert isinstance(result, Failure)
        assert result.diagnostics[0].code is DiagnosticCode.UNEXPECTED_MATCH
        assert cursor.position() == CursorPosition(0)

        result, _ = run(not_followed_by(char("a")), "b")
        assert isinstance(result, Success)

    def test_keyword_boundary(self) -> None:
        """Lookahead keeps a keyword from matching an identifier prefix."""
        keyword = literal("if").terminated(not_followed_by(letter()))
        assert isinstance(run(keyword, "if x")[0], Success)
        assert isinstance(run(keyword, "iffy")[0], Failure)


# ============================================================================
# MAPPING AND VALIDATION
# ============================================================================


class TestMappingAndValidation:
    """map, try_map, validate, warn_if, named, spanned."""

    def test_map(self) -> None:
        """map transforms the value and keeps the span."""
        result, _ = run(digit().map(int), "7")
        assert isinstance(result, Success)
        assert result.value == 7

    def test_try_map_rejects(self) -> None:
        """A conversion error becomes CONVERSION_FAILED over the consumed span."""
        grammar = digit().many1().map("".join).try_map(lambda s: 10 // int(s))
        result, _ = run(grammar, "0")
        assert isinstance(result, Failure)
        diagnostic = result.diagnostics[0]
        assert diagnostic.code is DiagnosticCode.CONVERSION_FAILED
        assert diagnostic.message.startswith("Invalid value:")
        assert (diagnostic.span.start, diagnostic.span.end) == (0, 1)

    def test_try_map_custom_message(self) -> None:
        """A caller message replaces the default, the reason becomes the hint."""
        grammar = letter().try_map(int, "not a number")
        result, _ = run(grammar, "z")
        assert isinstance(result, Failure)
        assert result.diagnostics[0].message == "not a number"
        assert result.diagnostics[0].hint is not None

    def test_try_map_propagates_other_exceptions(self) -> None:
        """Only conversion-style exceptions are turned into failures."""

        def explode(_: str) -> str:
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError, match="boom"):
            run(digit().try_map(explode), "1")

    def test_validate_range(self) -> None:
        """A semantic check downgrades Success to Failure."""
        byte = integer().validate(lambda n: 0 <= n < 256, "value out of range")
        result, _ = run(byte, "300")
        assert isinstance(result, Failure)
        diagnostic = result.diagnostics[0]
        assert diagnostic.code is DiagnosticCode.VALIDATION_FAILED
        assert diagnostic.message == "value out of range"
        assert (diagnostic.span.start, diagnostic.span.end) == (0, 3)
        assert isinstance(run(byte, "255")[0], Success)

    def test_warn_if(self) -> None:
        """warn_if keeps the value and records a warning."""
        result, cursor = run(integer().warn_if(lambda n: n == 0, "zero"), "0")
        assert isinstance(result, Success)
        [warning] = cursor.diagnostics.diagnostics
        assert warning.severity is Severity.WARNING
        assert warning.code is DiagnosticCode.VALIDATION_WARNING

    def test_named_replaces_no_progress_failure(self) -> None:
        """A named node that fails at its start reports "Expected <name>"."""
        result, _ = run(digit().named("number"), "x")
        assert isinstance(result, Failure)
        [diagnostic] = result.diagnostics
        assert diagnostic.code is DiagnosticCode.EXPECTED
        assert diagnostic.message == "Expected number"
        assert diagnostic.expected == ("number",)

    def test_named_keeps_deeper_failure(self) -> None:
        """Failures past the start are more specific than the name."""
        result, _ = run(seq(char("a"), char("b")).named("pair"), "ax")
        assert isinstance(result, Failure)
        assert result.diagnostics[0].message == "Unexpected 'x', expected 'b'"

    def test_identifier_then_optional_comma(self) -> None:
        """identifier over "hello," yields "hello" spanning [0, 5)."""
        grammar = identifier().spanned().terminated(char(",").optional())
        value = parse_text(grammar, "hello,").unwrap()
        assert isinstance(value, Spanned)
        assert value.value == "hello"
        assert (value.span.start, value.span.end) == (0, 5)


# ============================================================================
# LEAVES
# ============================================================================


class TestLeaves:
    """end_of_input, empty, nothing."""

    def test_end_of_input(self) -> None:
        """end_of_input fails with TRAILING_INPUT before the end."""
        assert isinstance(run(end_of_input(), "")[0], Success)
        result, _ = run(end_of_input(), "a")
        assert isinstance(result, Failure)
        assert result.diagnostics[0].code is DiagnosticCode.TRAILING_INPUT

    def test_empty(self) -> None:
        """empty always succeeds with None and a zero-width span."""
        result, _ = run(empty(), "abc")
        assert isinstance(result, Success)
        assert result.value is None
        assert result.span.is_empty

    def test_nothing(self) -> None:
        """nothing always fails."""
        result, _ = run(nothing(), "abc")
        assert isinstance(result, Failure)
        assert result.diagnostics[0].code is DiagnosticCode.NO_MATCH


# ============================================================================
# RECURSION
# ============================================================================


def _nested() -> Forward[str]:
    expr: Forward[str] = Forward("expr")
    expr.define(digit() | delimited(char("("), expr, char(")")))
    return expr


class TestForward:
    """Recursive grammars and the depth guard."""

    def test_recursive_grammar(self) -> None:
        """Forward nodes allow self-reference."""
        assert parse_text(_nested(), "((1))").unwrap() == "1"

    def test_depth_limit(self) -> None:
        """Nesting past max_nesting_depth raises RecursionLimitExceededError."""
        parser = Parser(max_nesting_depth=10)
        assert parser.parse_text(_nested(), "(" * 5 + "1" + ")" * 5).unwrap() == "1"
        with pytest.raises(RecursionLimitExceededError) as exc_info:
            parser.parse_text(_nested(), "(" * 20 + "1" + ")" * 20)
        assert exc_info.value.diagnostic is not None
        assert exc_info.value.diagnostic.code is DiagnosticCode.RECURSION_LIMIT_EXCEEDED

    def test_depth_released_after_parse(self) -> None:
        """The depth guard is back at zero after a successful run."""
        result, cursor = run(_nested(), "((2))")
        assert isinstance(result, Success)
        assert cursor.depth.current_depth == 0

    def test_undefined_forward(self) -> None:
        """Attempting an undefined Forward is a grammar error."""
        with pytest.raises(UndefinedForwardError):
            run(Forward("missing"), "a")

    def test_define_twice(self) -> None:
        """A Forward can be defined once."""
        forward: Forward[str] = Forward("x")
        forward.define(digit())
        with pytest.raises(GrammarError, match="already defined"):
            forward.define(letter())


# ============================================================================
# DETERMINISM AND REUSE
# ============================================================================


class TestDeterminismAndReuse:
    """Grammars are pure functions of the cursor position."""

    @given(grapheme_text())
    def test_same_input_same_result(self, text: str) -> None:
        """PROPERTY: running a grammar twice on the same input is identical."""
        grammar = (identifier() | digit().many1().map("".join) | char(" ")).many()
        first, _ = run(grammar, text)
        second, _ = run(grammar, text)
        assert first == second

    @given(grapheme_text())
    def test_backtracking_replays_identically(self, text: str) -> None:
        """PROPERTY: after restore, re-running a grammar gives identical results."""
        grammar = (letter() | digit()).many()
        cursor = Cursor(TextSource(text))
        mark = cursor.position()
        first = grammar.attempt(cursor)
        end = cursor.position()
        cursor.restore(mark)
        second = grammar.attempt(cursor)
        assert first == second
        assert cursor.position() == end

    def test_shared_grammar_across_threads(self) -> None:
        """One grammar serves concurrent parses on independent cursors."""
        numbers = integer().separated_by(char(","))
        inputs = [",".join(str(i * j) for j in range(20)) for i in range(40)]

        def parse(text: str) -> list[int]:
            return parse_text(numbers, text).unwrap()

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(parse, inputs))
        assert results == [[i * j for j in range(20)] for i in range(40)]
