"""Lox Example - Statements, Blocks and Groups Over a Token Stream.

Demonstrates:

1. Tokenizing with whitespace kept, then stripping it for the parser
2. Rendering a token stream back to text
3. Delimited groups: parenthesised conditions and argument lists, braced blocks
4. Reserved words rejected with validate() and reported by name
5. Runtime errors pointing back at source spans

Grammar (a subset of Lox):
    program    = statement*
    statement  = varDecl | funDecl | print | if | while | return | block | exprStmt
    varDecl    = "var" NAME ("=" expression)? ";"
    funDecl    = "fun" NAME "(" (NAME ("," NAME)*)? ")" "{" statement* "}"
    if         = "if" "(" expression ")" statement ("else" statement)?
    while      = "while" "(" expression ")" statement
    expression = NAME "=" expression | or
    or         = and ("or" and)*
    and        = equality ("and" equality)*
    equality   = comparison (("==" | "!=") comparison)*
    comparison = term ((">=" | ">" | "<=" | "<") term)*
    term       = factor (("+" | "-") factor)*
    factor     = unary (("*" | "/") unary)*
    unary      = ("!" | "-") unary | call
    call       = primary ("(" arguments? ")")*
    primary    = NUMBER | STRING | "true" | "false" | "nil" | NAME | "(" expression ")"

Python 3.13+.
"""

from __future__ import annotations

import operator
from collections.abc import Callable
from dataclasses import dataclass, field

from parsekit import DiagnosticFormatter, Span, parse_tokens, tokenize
from parsekit.diagnostics.report import SourceView
from parsekit.grammar import (
    Forward,
    Grammar,
    Spanned,
    alt,
    braces,
    end_of_input,
    float_literal,
    ident,
    int_literal,
    keyword,
    parens,
    preceded,
    punct,
    string_literal,
)
from parsekit.syntax import Failure, Token, remove_whitespace, render_tokens

KEYWORDS: frozenset[str] = frozenset(
    {"and", "else", "false", "fun", "if", "nil", "or", "print", "return", "true", "var", "while"}
)

type Value = bool | int | float | str | LoxFunction | None


# ============================================================================
# SYNTAX TREE
# ============================================================================


@dataclass(frozen=True, slots=True)
class Constant:
    value: Value


@dataclass(frozen=True, slots=True)
class Variable:
    name: Spanned[str]


@dataclass(frozen=True, slots=True)
class Assign:
    name: Spanned[str]
    value: Expr


@dataclass(frozen=True, slots=True)
class Unary:
    op: str
    operand: Expr


@dataclass(frozen=True, slots=True)
class Binary:
    left: Expr
    op: str
    right: Expr


@dataclass(frozen=True, slots=True)
class Logical:
    left: Expr
    op: str
    right: Expr


@dataclass(frozen=True, slots=True)
class Call:
    callee: Expr
    arguments: tuple[Expr, ...]


type Expr = Constant | Variable | Assign | Unary | Binary | Logical | Call


@dataclass(frozen=True, slots=True)
class Print:
    value: Expr


@dataclass(frozen=True, slots=True)
class ExprStmt:
    value: Expr


@dataclass(frozen=True, slots=True)
class VarDecl:
    name: Spanned[str]
    initializer: Expr | None


@dataclass(frozen=True, slots=True)
class Block:
    body: tuple[Stmt, ...]


@dataclass(frozen=True, slots=True)
class If:
    condition: Expr
    then_branch: Stmt
    else_branch: Stmt | None


@dataclass(frozen=True, slots=True)
class While:
    condition: Expr
    body: Stmt


@dataclass(frozen=True, slots=True)
class FunDecl:
    name: Spanned[str]
    params: tuple[Spanned[str], ...]
    body: tuple[Stmt, ...]


@dataclass(frozen=True, slots=True)
class Return:
    value: Expr | None


type Stmt = Print | ExprStmt | VarDecl | Block | If | While | FunDecl | Return


# ============================================================================
# GRAMMAR
# ============================================================================


def _constant(value: Value) -> Callable[[object], Constant]:
    def build(_: object) -> Constant:
        return Constant(value)

    return build


def _fold_into(node: type[Binary] | type[Logical]) -> Callable[[tuple[object, ...]], Expr]:
    """Left-associative fold of ``operand (op operand)*``."""

    def fold(parts: tuple[object, ...]) -> Expr:
        left, rest = parts
        expr: Expr = left  # type: ignore[assignment]
        for op, right in rest:  # type: ignore[attr-defined]
            expr = node(expr, op, right)
        return expr

    return fold


def _calls(parts: tuple[object, ...]) -> Expr:
    callee, argument_lists = parts
    expr: Expr = callee  # type: ignore[assignment]
    for arguments in argument_lists:  # type: ignore[attr-defined]
        expr = Call(expr, tuple(arguments))
    return expr


def _unary(parts: tuple[object, ...]) -> Unary:
    op, operand = parts
    return Unary(op, operand)  # type: ignore[arg-type]


def _assign(parts: tuple[object, ...]) -> Assign:
    name, _, value = parts
    return Assign(name, value)  # type: ignore[arg-type]


def _var(parts: tuple[object, ...]) -> VarDecl:
    name, initializer = parts
    return VarDecl(name, initializer)  # type: ignore[arg-type]


def _if(parts: tuple[object, ...]) -> If:
    condition, then_branch, else_branch = parts
    return If(condition, then_branch, else_branch)  # type: ignore[arg-type]


def _while(parts: tuple[object, ...]) -> While:
    condition, body = parts
    return While(condition, body)  # type: ignore[arg-type]


def _function(parts: tuple[object, ...]) -> FunDecl:
    name, params, body = parts
    return FunDecl(name, tuple(params), tuple(body))  # type: ignore[arg-type]


def _block(body: list[Stmt]) -> Block:
    return Block(tuple(body))


def _program(parts: tuple[object, ...]) -> list[Stmt]:
    statements, _ = parts
    return statements  # type: ignore[return-value]


def _not_keyword(word: str) -> bool:
    return word not in KEYWORDS


def build_grammar() -> Grammar[list[Stmt]]:
    """Build the Lox grammar over whitespace-free tokens."""
    expression: Forward[Expr] = Forward("expression")
    unary: Forward[Expr] = Forward("unary")
    statement: Forward[Stmt] = Forward("statement")

    name = ident().named("name").validate(_not_keyword, "reserved word").spanned()
    primary = alt(
        (int_literal() | float_literal() | string_literal()).map(Constant),
        keyword("true").map(_constant(True)),
        keyword("false").map(_constant(False)),
        keyword("nil").map(_constant(None)),
        name.map(Variable),
        parens(expression),
    ).named("expression")
    call = (primary + parens(expression.separated_by(punct(","))).many()).map(_calls)
    unary.define(((punct("!") | punct("-")) + unary).map(_unary) | call)

    def level(operand: Grammar[Expr], *symbols: str) -> Grammar[Expr]:
        op = alt(*(punct(symbol) for symbol in symbols))
        return (operand + (op + operand).many()).map(_fold_into(Binary))

    factor = level(unary, "*", "/")
    term = level(factor, "+", "-")
    # Two-character operators first: punct(">") also matches the head of ">="
    comparison = level(term, ">=", ">", "<=", "<")
    equality = level(comparison, "==", "!=")
    logic_and = (equality + (keyword("and") + equality).many()).map(_fold_into(Logical))
    logic_or = (logic_and + (keyword("or") + logic_and).many()).map(_fold_into(Logical))
    expression.define((name + punct("=") + expression).map(_assign) | logic_or)

    semicolon = punct(";")
    body = braces(statement.many())
    var_decl = (
        preceded(keyword("var"), name) + preceded(punct("="), expression).optional()
    ).terminated(semicolon)
    fun_decl = preceded(keyword("fun"), name) + parens(name.separated_by(punct(","))) + body
    if_stmt = (
        preceded(keyword("if"), parens(expression))
        + statement
        + preceded(keyword("else"), statement).optional()
    )
    while_stmt = preceded(keyword("while"), parens(expression)) + statement
    statement.define(
        alt(
            var_decl.map(_var),
            fun_decl.map(_function),
            preceded(keyword("print"), expression).terminated(semicolon).map(Print),
            if_stmt.map(_if),
            while_stmt.map(_while),
            preceded(keyword("return"), expression.optional()).terminated(semicolon).map(Return),
            body.map(_block),
            expression.terminated(semicolon).map(ExprStmt),
        )
    )
    # A statement that fails ends the repetition silently; attempting it once
    # more beside end_of_input lets its own diagnostic win on furthest progress.
    return (statement.many() + (end_of_input() | statement)).map(_program)


# ============================================================================
# INTERPRETER
# ============================================================================


class LoxRuntimeError(Exception):
    """A runtime error, located at the span that caused it."""

    def __init__(self, message: str, span: Span) -> None:
        super().__init__(f"{span}: {message}")
        self.span = span


class _ReturnSignal(Exception):
    def __init__(self, value: Value) -> None:
        super().__init__()
        self.value = value


@dataclass(slots=True)
class Environment:
    parent: Environment | None = None
    values: dict[str, Value] = field(default_factory=dict)

    def _owner(self, name: Spanned[str]) -> Environment:
        scope: Environment | None = self
        while scope is not None:
            if name.value in scope.values:
                return scope
            scope = scope.parent
        raise LoxRuntimeError(f"Undefined variable '{name.value}'", name.span)

    def get(self, name: Spanned[str]) -> Value:
        return self._owner(name).values[name.value]

    def assign(self, name: Spanned[str], value: Value) -> None:
        self._owner(name).values[name.value] = value


@dataclass(frozen=True, slots=True)
class LoxFunction:
    declaration: FunDecl
    closure: Environment

    def __str__(self) -> str:
        return f"<fn {self.declaration.name.value}>"


_ARITHMETIC: dict[str, Callable[[float, float], Value]] = {
    "-": operator.sub,
    "*": operator.mul,
    "/": operator.truediv,
    ">": operator.gt,
    ">=": operator.ge,
    "<": operator.lt,
    "<=": operator.le,
}


def _is_number(value: Value) -> bool:
    return isinstance(value, int | float) and not isinstance(value, bool)


def _truthy(value: Value) -> bool:
    return value is not None and value is not False


def _equal(left: Value, right: Value) -> bool:
    if isinstance(left, bool) or isinstance(right, bool):
        return left is right
    return left == right


def stringify(value: Value) -> str:
    """Lox display form: ``nil``, ``true``, and whole floats without ``.0``."""
    match value:
        case None:
            return "nil"
        case bool():
            return "true" if value else "false"
        case float() if value.is_integer():
            return str(int(value))
        case _:
            return str(value)


def _span_of(expr: Expr) -> Span | None:
    match expr:
        case Variable(name) | Assign(name, _):
            return name.span
        case Unary(_, operand):
            return _span_of(operand)
        case Binary(left, _, _) | Logical(left, _, _):
            return _span_of(left)
        case Call(callee, _):
            return _span_of(callee)
        case _:
            return None


class Interpreter:
    """Tree-walking interpreter; printed lines collect in ``output``."""

    def __init__(self, unit: str = "lox") -> None:
        self.globals = Environment()
        self.output: list[str] = []
        self._unit = unit

    def run(self, statements: list[Stmt]) -> list[str]:
        for stmt in statements:
            self.execute(stmt, self.globals)
        return self.output

    def _fail(self, message: str, expr: Expr) -> LoxRuntimeError:
        span = _span_of(expr) or Span(self._unit, 0, 0)
        return LoxRuntimeError(message, span)

    def execute(self, stmt: Stmt, env: Environment) -> None:
        match stmt:
            case Print(value):
                self.output.append(stringify(self.evaluate(value, env)))
            case ExprStmt(value):
                self.evaluate(value, env)
            case VarDecl(name, initializer):
                value = None if initializer is None else self.evaluate(initializer, env)
                env.values[name.value] = value
            case Block(body):
                self.execute_block(body, Environment(env))
            case If(condition, then_branch, else_branch):
                if _truthy(self.evaluate(condition, env)):
                    self.execute(then_branch, env)
                elif else_branch is not None:
                    self.execute(else_branch, env)
            case While(condition, body):
                while _truthy(self.evaluate(condition, env)):
                    self.execute(body, env)
            case FunDecl(name):
                env.values[name.value] = LoxFunction(stmt, env)
            case Return(value):
                raise _ReturnSignal(None if value is None else self.evaluate(value, env))

    def execute_block(self, body: tuple[Stmt, ...], env: Environment) -> None:
        for stmt in body:
            self.execute(stmt, env)

    def evaluate(self, expr: Expr, env: Environment) -> Value:
        match expr:
            case Constant(value):
                return value
            case Variable(name):
                return env.get(name)
            case Assign(name, value_expr):
                value = self.evaluate(value_expr, env)
                env.assign(name, value)
                return value
            case Unary("-", operand):
                value = self.evaluate(operand, env)
                if not _is_number(value):
                    raise self._fail("Operand must be a number", expr)
                return -value  # type: ignore[operator]
            case Unary(_, operand):
                return not _truthy(self.evaluate(operand, env))
            case Logical(left, op, right):
                value = self.evaluate(left, env)
                if _truthy(value) == (op == "or"):
                    return value
                return self.evaluate(right, env)
            case Binary(left, op, right):
                return self._binary(expr, op, self.evaluate(left, env), self.evaluate(right, env))
            case Call(callee, arguments):
                function = self.evaluate(callee, env)
                args = [self.evaluate(argument, env) for argument in arguments]
                return self._call(expr, function, args)
        msg = f"Unknown expression {expr!r}"
        raise TypeError(msg)

    def _binary(self, expr: Expr, op: str, left: Value, right: Value) -> Value:
        if op == "==":
            return _equal(left, right)
        if op == "!=":
            return not _equal(left, right)
        if op == "+":
            if _is_number(left) and _is_number(right):
                return left + right  # type: ignore[operator]
            if isinstance(left, str) and isinstance(right, str):
                return left + right
            raise self._fail("Operands must be two numbers or two strings", expr)
        if not (_is_number(left) and _is_number(right)):
            raise self._fail("Operands must be numbers", expr)
        if op == "/" and right == 0:
            raise self._fail("Division by zero", expr)
        return _ARITHMETIC[op](left, right)  # type: ignore[arg-type]

    def _call(self, expr: Expr, function: Value, args: list[Value]) -> Value:
        if not isinstance(function, LoxFunction):
            raise self._fail("Can only call functions", expr)
        params = function.declaration.params
        if len(args) != len(params):
            raise self._fail(f"Expected {len(params)} arguments but got {len(args)}", expr)
        scope = Environment(function.closure)
        for param, arg in zip(params, args, strict=True):
            scope.values[param.value] = arg
        try:
            self.execute_block(function.declaration.body, scope)
        except _ReturnSignal as signal:
            return signal.value
        return None


# ============================================================================
# ENTRY POINTS
# ============================================================================


def lex(text: str, unit: str = "lox") -> tuple[Token, ...]:
    """Tokenize keeping whitespace, raising ValueError on tokenizer errors."""
    tokens = tokenize(text, unit, keep_whitespace=True)
    if isinstance(tokens, Failure):
        raise ValueError(DiagnosticFormatter().format_all(tokens.diagnostics))
    return tokens.value


def parse_program(text: str, unit: str = "lox") -> list[Stmt]:
    """Parse a program, raising ParseFailedError on bad input."""
    outcome = parse_tokens(
        build_grammar(),
        remove_whitespace(lex(text, unit)),
        sources=[SourceView.from_text(unit, text)],
    )
    return outcome.unwrap()


def run(text: str, unit: str = "lox") -> list[str]:
    """Parse and run a program; returns the printed lines."""
    return Interpreter(unit).run(parse_program(text, unit))


_PROGRAM = """\
fun fib(n) {
    if (n < 2) return n;
    return fib(n - 1) + fib(n - 2);
}
var i = 0;
while (i < 8) {
    print fib(i);
    i = i + 1;
}
print "done" + "!";
"""


def example_1_run() -> None:
    """Run a small program."""
    print("=" * 60)
    print("Example 1: Running Lox")
    print("=" * 60)
    print(" ".join(run(_PROGRAM)))


def example_2_layout() -> None:
    """Render the token stream with and without its whitespace."""
    print("=" * 60)
    print("Example 2: Token Stream Layout")
    print("=" * 60)
    tokens = lex(_PROGRAM)
    print(render_tokens(tokens) == _PROGRAM)
    print(render_tokens(remove_whitespace(tokens)))


def example_3_errors() -> None:
    """Show rendered reports for bad programs."""
    print("=" * 60)
    print("Example 3: Error Reports")
    print("=" * 60)
    grammar = build_grammar()
    formatter = DiagnosticFormatter()
    for text in ["print (1 + 2;", "var print = 1;", "while (true { }", "if (x) print x"]:
        tokens = remove_whitespace(lex(text))
        outcome = parse_tokens(grammar, tokens, sources=[SourceView.from_text("lox", text)])
        print(outcome.render(formatter))
        print()


if __name__ == "__main__":
    example_1_run()
    example_2_layout()
    example_3_errors()
