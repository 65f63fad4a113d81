"""Calculator Example - Token-Stream Parsing With Diagnostics.

Demonstrates:

1. Tokenizing text and parsing the token stream
2. Recursive grammars with Forward
3. Multi-character operators built from joint punctuation
4. Rejecting values with try_map (division by zero)
5. Rendering reports with source excerpts

Grammar:
    expr   = term (("+" | "-") term)*
    term   = unary (("*" | "/" | "//") unary)*
    unary  = "-" unary | power
    power  = atom ("**" unary)?
    atom   = INT | FLOAT | "(" expr ")"

Python 3.13+.
"""

from __future__ import annotations

import operator
from collections.abc import Callable

from parsekit import DiagnosticFormatter, parse_tokens, tokenize
from parsekit.diagnostics.report import SourceView
from parsekit.grammar import (
    Forward,
    Grammar,
    float_literal,
    int_literal,
    parens,
    preceded,
    punct,
)
from parsekit.syntax import Failure

type Number = int | float

_BINARY: dict[str, Callable[[Number, Number], Number]] = {
    "+": operator.add,
    "-": operator.sub,
    "*": operator.mul,
    "/": operator.truediv,
    "//": operator.floordiv,
    "**": operator.pow,
}


def _fold(parts: tuple[object, ...]) -> Number:
    first, rest = parts
    value: Number = first  # type: ignore[assignment]
    for symbol, operand in rest:  # type: ignore[attr-defined]
        value = _BINARY[symbol](value, operand)
    return value


def _power(parts: tuple[object, ...]) -> Number:
    base, exponent = parts
    if exponent is None:
        return base  # type: ignore[return-value]
    return _BINARY["**"](base, exponent)  # type: ignore[arg-type]


def build_grammar() -> Grammar[Number]:
    """Build the calculator grammar over tokens."""
    expr: Forward[Number] = Forward("expression")
    unary: Forward[Number] = Forward("operand")

    atom = (int_literal() | float_literal() | parens(expr)).named("number or '('")
    power = (atom + preceded(punct("**"), unary).optional()).try_map(_power, "invalid power")
    unary.define(preceded(punct("-"), unary).map(operator.neg) | power)

    # Longer operators first: "//" must win over "/"
    mul_op = punct("*") | punct("//") | punct("/")
    term = (unary + (mul_op + unary).many()).try_map(_fold, "division by zero")
    add_op = punct("+") | punct("-")
    expr.define((term + (add_op + term).many()).map(_fold))
    return expr


def evaluate(text: str, unit: str = "calc") -> Number:
    """Evaluate an expression, raising ParseFailedError on bad input."""
    tokens = tokenize(text, unit)
    if isinstance(tokens, Failure):
        raise ValueError(DiagnosticFormatter().format_all(tokens.diagnostics))
    outcome = parse_tokens(
        build_grammar(),
        tokens.value,
        sources=[SourceView.from_text(unit, text)],
    )
    return outcome.unwrap()


def example_1_evaluate() -> None:
    """Evaluate well-formed expressions."""
    print("=" * 60)
    print("Example 1: Evaluation")
    print("=" * 60)
    for text in ["1 + 2 * 3", "(1 + 2) * 3", "2 ** 3 ** 2", "-4 // 3", "7 / 2"]:
        print(f"{text:>14} = {evaluate(text)}")


def example_2_errors() -> None:
    """Show rendered reports for bad input."""
    print("=" * 60)
    print("Example 2: Error Reports")
    print("=" * 60)
    grammar = build_grammar()
    formatter = DiagnosticFormatter()
    for text in ["1 + * 2", "(1 + 2", "8 / (4 - 4)", "2 * * 3"]:
        tokens = tokenize(text, "calc")
        assert not isinstance(tokens, Failure)
        outcome = parse_tokens(
            grammar, tokens.value, sources=[SourceView.from_text("calc", text)]
        )
        print(outcome.render(formatter))
        print()


if __name__ == "__main__":
    example_1_evaluate()
    example_2_errors()
