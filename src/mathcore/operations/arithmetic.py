"""Arithmetic operators: + - * / % ^ and the unary signs."""

from __future__ import annotations

from ..operators import apply_binary, apply_unary
from ..registry import OperationRegistry, ParseRole
from ._common import C, L, N, P, P3, V3, operator, rule, sig


def _binary(symbol: str):
    return lambda args, context: apply_binary(symbol, args[0], args[1])


def _unary(symbol: str):
    return lambda args, context: apply_unary(symbol, args[0])


def register(registry: OperationRegistry) -> None:
    binary = ParseRole.BINARY
    registry.register(
        operator(
            "add",
            "+",
            role=binary,
            precedence=1,
            signatures=(
                sig(N, N, out=N, symbolic=True),
                sig(P, P, out=P),
                sig(P3, P3, out=P3),
                sig(V3, V3, out=V3),
                sig(C, C, out=C),
                sig(L, L, out=L),
            ),
            evaluate=_binary("+"),
            description="Addition",
            example="2 + 3 = 5",
        )
    )
    registry.register(
        operator(
            "subtract",
            "-",
            role=binary,
            precedence=1,
            signatures=(
                sig(N, N, out=N, symbolic=True),
                sig(P, P, out=P),
                sig(P3, P3, out=P3),
                sig(V3, V3, out=V3),
                sig(C, C, out=C),
            ),
            evaluate=_binary("-"),
            description="Subtraction",
            example="5 - 3 = 2",
        )
    )
    registry.register(
        operator(
            "multiply",
            "*",
            role=binary,
            precedence=2,
            latex="#0 \\cdot #1",
            normalized="#0 * #1",
            aliases=(rule(r"\\cdot", "*", 10), rule(r"\\times", "*", 10)),
            signatures=(
                sig(N, N, out=N, symbolic=True),
                sig(P, N, out=P),
                sig(N, P, out=P),
                sig(L, N, out=L),
                sig(N, L, out=L),
                sig(C, C, out=C),
            ),
            evaluate=_binary("*"),
            description="Multiplication",
            example="2 \\cdot 3 = 6",
            hidden=False,
        )
    )
    registry.register(
        operator(
            "divide",
            "/",
            role=binary,
            precedence=2,
            latex="\\frac{#0}{#1}",
            normalized="(#0)/(#1)",
            aliases=(rule(r"\\frac\{([^{}]+)\}\{([^{}]+)\}", r"(\1)/(\2)", 5),),
            signatures=(
                sig(N, N, out=N, symbolic=True),
                sig(P, N, out=P),
                sig(C, C, out=C),
            ),
            evaluate=_binary("/"),
            description="Division",
            example="\\frac{6}{3} = 2",
            hidden=False,
        )
    )
    registry.register(
        operator(
            "modulo",
            "%",
            role=binary,
            precedence=2,
            aliases=(rule(r"\\bmod\b", "%", 10), rule(r"\\mod\b", "%", 10)),
            signatures=(sig(N, N, out=N, symbolic=True),),
            evaluate=_binary("%"),
            description="Remainder after division",
            example="7 % 3 = 1",
        )
    )
    registry.register(
        operator(
            "power",
            "^",
            role=binary,
            precedence=3,
            associativity="right",
            latex="#0^{#1}",
            normalized="#0^(#1)",
            signatures=(
                sig(N, N, out=N, symbolic=True),
                sig(C, C, out=C),
            ),
            evaluate=_binary("^"),
            description="Exponentiation",
            example="2^{3} = 8",
            hidden=False,
        )
    )
    registry.register(
        operator(
            "negate",
            "-",
            role=ParseRole.UNARY,
            signatures=(sig(N, out=N, symbolic=True), sig(C, out=C)),
            evaluate=_unary("-"),
            description="Negation",
            example="-5",
        )
    )
    registry.register(
        operator(
            "positive",
            "+",
            role=ParseRole.UNARY,
            signatures=(sig(N, out=N, symbolic=True), sig(C, out=C)),
            evaluate=_unary("+"),
            description="Unary plus",
            example="+5",
        )
    )
