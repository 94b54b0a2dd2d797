"""Trigonometric functions and their inverses."""

from __future__ import annotations

import math
from typing import Callable, Final

from ..ast import Binary, Call, Expr, Number, Unary
from ..registry import Category, OperationRegistry, OuterDerivative
from ..values import NumberValue
from ._common import N, function, number_arg, rule, sig


def _square(u: Expr) -> Expr:
    return Binary("^", u, Number(2.0))


def _one_minus_square_root(u: Expr) -> Expr:
    return Call("sqrt", (Binary("-", Number(1.0), _square(u)),))


_OUTER_DERIVATIVES: Final[dict[str, OuterDerivative]] = {
    "sin": lambda u: Call("cos", (u,)),
    "cos": lambda u: Unary("-", Call("sin", (u,))),
    "tan": lambda u: Binary("/", Number(1.0), _square(Call("cos", (u,)))),
    "asin": lambda u: Binary("/", Number(1.0), _one_minus_square_root(u)),
    "acos": lambda u: Unary("-", Binary("/", Number(1.0), _one_minus_square_root(u))),
    "atan": lambda u: Binary("/", Number(1.0), Binary("+", Number(1.0), _square(u))),
}

_TRIG: Final[tuple[tuple[str, Callable[[float], float], str, str], ...]] = (
    ("sin", math.sin, "Sine function", "sin(\\pi/2) = 1"),
    ("cos", math.cos, "Cosine function", "cos(0) = 1"),
    ("tan", math.tan, "Tangent function", "tan(\\pi/4) = 1"),
    ("asin", math.asin, "Inverse sine (arcsin)", "asin(1) = \\pi/2"),
    ("acos", math.acos, "Inverse cosine (arccos)", "acos(0) = \\pi/2"),
    ("atan", math.atan, "Inverse tangent (arctan)", "atan(1) = \\pi/4"),
)


def _evaluator(name: str, fn: Callable[[float], float]):
    def evaluate(args, context):
        # math.asin/acos raise "math domain error" outside [-1, 1]
        return NumberValue(fn(number_arg(args[0], name)))

    return evaluate


def register(registry: OperationRegistry) -> None:
    for name, fn, description, example in _TRIG:
        registry.register(
            function(
                name,
                latex=f"\\{name}(#0)",
                insert_template=f"\\{name}(#0)",
                aliases=(
                    rule(rf"\\{name}\{{([^}}]+)\}}", rf"{name}(\1)", 20),
                    rule(rf"(?i)\\{name}\s+([a-z0-9]+)", rf"{name}(\1)", 30),
                    rule(rf"\\{name}\b", name, 40),
                ),
                signatures=(sig(N, out=N, symbolic=True),),
                evaluate=_evaluator(name, fn),
                description=description,
                category=Category.TRIGONOMETRIC,
                example=example,
                derivative=_OUTER_DERIVATIVES[name],
            )
        )
