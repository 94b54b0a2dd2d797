"""Roots, magnitudes, exponentials, logarithms, rounding and special functions."""

from __future__ import annotations

import math

import jax.numpy as jnp
import jax.scipy.special as jsp

from .. import complex_math
from ..ast import Binary, Call, Expr, Number, Variable
from ..errors import DomainError
from ..registry import Category, OperationRegistry
from ..values import ComplexValue, NumberValue, Value, complex_result
from ._common import C, N, function, number_arg, rule, sig

_LN10 = math.log(10.0)


def _sqrt(args: tuple[Value, ...], context) -> Value:
    arg = args[0]
    if isinstance(arg, ComplexValue):
        return complex_result(complex_math.sqrt(arg.to_complex()))
    x = number_arg(arg, "sqrt")
    if x < 0:
        return ComplexValue(0.0, math.sqrt(-x))
    return NumberValue(math.sqrt(x))


def _abs(args: tuple[Value, ...], context) -> Value:
    arg = args[0]
    if isinstance(arg, ComplexValue):
        return NumberValue(complex_math.magnitude(arg.to_complex()))
    return NumberValue(abs(number_arg(arg, "abs")))


def _exp(args: tuple[Value, ...], context) -> Value:
    arg = args[0]
    if isinstance(arg, ComplexValue):
        return complex_result(complex_math.exp(arg.to_complex()))
    try:
        return NumberValue(math.exp(number_arg(arg, "exp")))
    except OverflowError:
        return NumberValue(math.inf)


def _natural_log(value: Value, where: str) -> Value:
    if isinstance(value, ComplexValue):
        return complex_result(complex_math.log(value.to_complex()))
    x = number_arg(value, where)
    if x == 0:
        raise DomainError(f"{where} of zero is undefined")
    if x < 0:
        return ComplexValue(math.log(-x), math.pi)
    return NumberValue(math.log(x))


def _ln(args: tuple[Value, ...], context) -> Value:
    return _natural_log(args[0], "ln")


def _log10(args: tuple[Value, ...], context) -> Value:
    result = _natural_log(args[0], "log")
    if isinstance(result, ComplexValue):
        return ComplexValue(result.real / _LN10, result.imag / _LN10)
    return NumberValue(result.value / _LN10)  # type: ignore[union-attr]


def _round_half_up(x: float) -> float:
    return float(math.floor(x + 0.5))


def _rounding(name: str, fn):
    return lambda args, context: NumberValue(float(fn(number_arg(args[0], name))))


def _erf(args: tuple[Value, ...], context) -> Value:
    return NumberValue(float(jsp.erf(jnp.asarray(number_arg(args[0], "erf")))))


def _gamma(args: tuple[Value, ...], context) -> Value:
    x = number_arg(args[0], "gamma")
    if x <= 0 and float(x).is_integer():
        raise DomainError(f"gamma has a pole at {x:g}")
    return NumberValue(float(jsp.gamma(jnp.asarray(x))))


def _square(u: Expr) -> Expr:
    return Binary("^", u, Number(2.0))


def _zero(u: Expr) -> Expr:
    return Number(0.0)


def register(registry: OperationRegistry) -> None:
    registry.register(
        function(
            "sqrt",
            latex="\\sqrt{#0}",
            aliases=(rule(r"\\sqrt\{([^}]+)\}", r"sqrt(\1)", 20), rule(r"\\sqrt\b", "sqrt", 40)),
            signatures=(sig(N, out=N, symbolic=True), sig(C, out=C)),
            evaluate=_sqrt,
            description="Square root (complex for negative input)",
            category=Category.MATHEMATICAL,
            example="\\sqrt{16} = 4",
            derivative=lambda u: Binary("/", Number(1.0), Binary("*", Number(2.0), Call("sqrt", (u,)))),
        )
    )
    registry.register(
        function(
            "abs",
            latex="\\left|#0\\right|",
            aliases=(
                rule(r"\\left\|([^\\]+?)\\right\|", r"abs(\1)", 15),
                rule(r"\\abs\{([^}]+)\}", r"abs(\1)", 20),
                rule(r"(?<!\|)\|([^|]+)\|(?!\|)", r"abs(\1)", 25),
                rule(r"\\abs\b", "abs", 40),
            ),
            signatures=(sig(N, out=N, symbolic=True), sig(C, out=N)),
            evaluate=_abs,
            description="Absolute value or complex magnitude",
            category=Category.MATHEMATICAL,
            example="|-5| = 5",
            derivative=lambda u: Binary("/", u, Call("abs", (u,))),
        )
    )
    registry.register(
        function(
            "exp",
            latex="\\exp(#0)",
            aliases=(rule(r"\\exp\{([^}]+)\}", r"exp(\1)", 20), rule(r"\\exp\b", "exp", 40)),
            signatures=(sig(N, out=N, symbolic=True), sig(C, out=C)),
            evaluate=_exp,
            description="Exponential function",
            category=Category.MATHEMATICAL,
            example="\\exp(0) = 1",
            derivative=lambda u: Call("exp", (u,)),
        )
    )
    registry.register(
        function(
            "ln",
            latex="\\ln(#0)",
            aliases=(rule(r"\\ln\{([^}]+)\}", r"ln(\1)", 20), rule(r"\\ln\b", "ln", 40)),
            signatures=(sig(N, out=N, symbolic=True), sig(C, out=C)),
            evaluate=_ln,
            description="Natural logarithm",
            category=Category.MATHEMATICAL,
            example="\\ln(e) = 1",
            derivative=lambda u: Binary("/", Number(1.0), u),
        )
    )
    registry.register(
        function(
            "log",
            latex="\\log(#0)",
            aliases=(rule(r"\\log\{([^}]+)\}", r"log(\1)", 20), rule(r"\\log\b", "log", 40)),
            signatures=(sig(N, out=N, symbolic=True), sig(C, out=C)),
            evaluate=_log10,
            description="Base-10 logarithm",
            category=Category.MATHEMATICAL,
            example="\\log(100) = 2",
            derivative=lambda u: Binary("/", Number(1.0), Binary("*", u, Call("ln", (Number(10.0),)))),
        )
    )
    for name, fn, latex, alias, description, example in (
        ("floor", math.floor, "\\lfloor #0 \\rfloor", r"\\lfloor\s*([^\\]+?)\s*\\rfloor", "Round down", "floor(2.7) = 2"),
        ("ceil", math.ceil, "\\lceil #0 \\rceil", r"\\lceil\s*([^\\]+?)\s*\\rceil", "Round up", "ceil(2.1) = 3"),
        ("round", _round_half_up, "round(#0)", None, "Round to nearest integer", "round(2.5) = 3"),
    ):
        registry.register(
            function(
                name,
                latex=latex,
                aliases=(rule(alias, rf"{name}(\1)", 15),) if alias else (),
                signatures=(sig(N, out=N, symbolic=True),),
                evaluate=_rounding(name, fn),
                description=description,
                category=Category.MATHEMATICAL,
                example=example,
                derivative=_zero,
            )
        )
    registry.register(
        function(
            "erf",
            signatures=(sig(N, out=N, symbolic=True),),
            evaluate=_erf,
            description="Gauss error function",
            category=Category.MATHEMATICAL,
            example="erf(0) = 0",
            derivative=lambda u: Binary(
                "*",
                Binary("/", Number(2.0), Call("sqrt", (Variable("pi"),))),
                Call("exp", (Binary("*", Number(-1.0), _square(u)),)),
            ),
        )
    )
    registry.register(
        function(
            "gamma",
            signatures=(sig(N, out=N, symbolic=True),),
            evaluate=_gamma,
            description="Gamma function",
            category=Category.MATHEMATICAL,
            example="gamma(5) = 24",
        )
    )
