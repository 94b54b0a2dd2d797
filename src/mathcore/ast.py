"""AST nodes for parsed math expressions."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Union


@dataclass(frozen=True)
class Number:
    value: float


@dataclass(frozen=True)
class Variable:
    name: str


@dataclass(frozen=True)
class Binary:
    op: str
    left: "Expr"
    right: "Expr"


@dataclass(frozen=True)
class Unary:
    op: str
    operand: "Expr"


@dataclass(frozen=True)
class Call:
    name: str
    args: tuple["Expr", ...]


@dataclass(frozen=True)
class ListLiteral:
    elements: tuple["Expr", ...]


@dataclass(frozen=True)
class Derivative:
    """Ordinary derivative of ``operand``; ``variable`` is bound inside the node."""

    variable: str
    operand: "Expr"


@dataclass(frozen=True)
class Partial:
    """Partial derivative of ``operand``; ``variable`` is bound inside the node."""

    variable: str
    operand: "Expr"


Expr = Union[
    Number,
    Variable,
    Binary,
    Unary,
    Call,
    ListLiteral,
    Derivative,
    Partial,
]


@dataclass(frozen=True)
class FunctionDefinition:
    name: str
    params: tuple[str, ...]
    body: Expr


def children(expr: Expr) -> tuple[Expr, ...]:
    if isinstance(expr, Binary):
        return (expr.left, expr.right)
    if isinstance(expr, Unary):
        return (expr.operand,)
    if isinstance(expr, Call):
        return expr.args
    if isinstance(expr, ListLiteral):
        return expr.elements
    if isinstance(expr, (Derivative, Partial)):
        return (expr.operand,)
    return ()


def substitute(expr: Expr, replacements: dict[str, Expr]) -> Expr:
    """Replace free variable references; derivative variables shadow replacements."""
    if isinstance(expr, Variable):
        return replacements.get(expr.name, expr)
    if isinstance(expr, Number):
        return expr
    if isinstance(expr, Binary):
        return Binary(expr.op, substitute(expr.left, replacements), substitute(expr.right, replacements))
    if isinstance(expr, Unary):
        return Unary(expr.op, substitute(expr.operand, replacements))
    if isinstance(expr, Call):
        return Call(expr.name, tuple(substitute(arg, replacements) for arg in expr.args))
    if isinstance(expr, ListLiteral):
        return ListLiteral(tuple(substitute(item, replacements) for item in expr.elements))
    if isinstance(expr, (Derivative, Partial)):
        inner = {name: value for name, value in replacements.items() if name != expr.variable}
        return type(expr)(expr.variable, substitute(expr.operand, inner))
    raise TypeError(f"Unsupported AST node {type(expr).__name__}")


def _format_number(value: float) -> str:
    if float(value).is_integer() and abs(value) < 1e16:
        return str(int(value))
    # positional notation only; the lexer has no exponent syntax
    return format(Decimal(repr(float(value))), "f")


def to_source(expr: Expr) -> str:
    """Render an AST back to fully parenthesized source text the parser accepts."""
    if isinstance(expr, Number):
        text = _format_number(expr.value)
        return f"({text})" if expr.value < 0 else text
    if isinstance(expr, Variable):
        return expr.name
    if isinstance(expr, Binary):
        return f"({to_source(expr.left)} {expr.op} {to_source(expr.right)})"
    if isinstance(expr, Unary):
        return f"{expr.op}{to_source(expr.operand)}"
    if isinstance(expr, Call):
        return f"{expr.name}({', '.join(to_source(arg) for arg in expr.args)})"
    if isinstance(expr, ListLiteral):
        return f"[{', '.join(to_source(item) for item in expr.elements)}]"
    if isinstance(expr, Derivative):
        return f"d/d{expr.variable}({to_source(expr.operand)})"
    if isinstance(expr, Partial):
        return f"∂/∂{expr.variable}({to_source(expr.operand)})"
    raise TypeError(f"Unsupported AST node {type(expr).__name__}")
