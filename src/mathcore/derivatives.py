"""Symbolic differentiation as an AST-to-AST rewrite."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

from .ast import (
    Binary,
    Call,
    Derivative,
    Expr,
    ListLiteral,
    Number,
    Partial,
    Unary,
    Variable,
    children,
    substitute,
)
from .errors import DifferentiationError, InvalidParameterCountError, NestingDepthError
from .parser import MAX_DEPTH
from .registry import OperationRegistry, ParseRole, default_registry

if TYPE_CHECKING:
    from .context import DefinitionContext

_COMPONENTWISE: Final[frozenset[str]] = frozenset({"point", "point3d", "vector"})
_ZERO: Final = Number(0.0)
_ONE: Final = Number(1.0)


def _is_number(expr: Expr, value: float) -> bool:
    return isinstance(expr, Number) and expr.value == value


def _add(a: Expr, b: Expr) -> Expr:
    if _is_number(a, 0.0):
        return b
    if _is_number(b, 0.0):
        return a
    if isinstance(a, Number) and isinstance(b, Number):
        return Number(a.value + b.value)
    return Binary("+", a, b)


def _sub(a: Expr, b: Expr) -> Expr:
    if _is_number(b, 0.0):
        return a
    if _is_number(a, 0.0):
        return _neg(b)
    if isinstance(a, Number) and isinstance(b, Number):
        return Number(a.value - b.value)
    return Binary("-", a, b)


def _mul(a: Expr, b: Expr) -> Expr:
    if _is_number(a, 0.0) or _is_number(b, 0.0):
        return _ZERO
    if _is_number(a, 1.0):
        return b
    if _is_number(b, 1.0):
        return a
    if isinstance(a, Number) and isinstance(b, Number):
        return Number(a.value * b.value)
    return Binary("*", a, b)


def _div(a: Expr, b: Expr) -> Expr:
    if _is_number(a, 0.0):
        return _ZERO
    if _is_number(b, 1.0):
        return a
    return Binary("/", a, b)


def _pow(a: Expr, b: Expr) -> Expr:
    if _is_number(b, 1.0):
        return a
    if _is_number(b, 0.0):
        return _ONE
    return Binary("^", a, b)


def _neg(a: Expr) -> Expr:
    if isinstance(a, Number):
        return Number(-a.value)
    if isinstance(a, Unary) and a.op == "-":
        return a.operand
    return Unary("-", a)


@dataclass
class _Differentiator:
    variable: str
    registry: OperationRegistry
    context: "DefinitionContext | None" = None
    depth: int = 0

    def depends(self, expr: Expr) -> bool:
        if isinstance(expr, Variable):
            return expr.name == self.variable
        if isinstance(expr, Call) and self.context is not None and expr.name in self.context.functions:
            return any(self.depends(arg) for arg in expr.args) or self.depends(self._inline(expr))
        return any(self.depends(child) for child in children(expr))

    def _inline(self, call: Call) -> Expr:
        definition = self.context.functions[call.name]  # type: ignore[union-attr]
        if len(call.args) > len(definition.params):
            raise InvalidParameterCountError(call.name, len(definition.params), len(call.args))
        return substitute(definition.body, dict(zip(definition.params, call.args)))

    def __call__(self, expr: Expr) -> Expr:
        self.depth += 1
        if self.depth > MAX_DEPTH:
            raise NestingDepthError(f"Expression nested deeper than {MAX_DEPTH} levels")
        try:
            return self._rule(expr)
        finally:
            self.depth -= 1

    def _rule(self, expr: Expr) -> Expr:
        if isinstance(expr, Number):
            return _ZERO
        if isinstance(expr, Variable):
            return _ONE if expr.name == self.variable else _ZERO
        if isinstance(expr, Unary):
            if expr.op == "-":
                return _neg(self(expr.operand))
            if expr.op == "+":
                return self(expr.operand)
            raise DifferentiationError(f"Cannot differentiate unary operator {expr.op}")
        if isinstance(expr, Binary):
            return self._binary(expr)
        if isinstance(expr, ListLiteral):
            return ListLiteral(tuple(self(item) for item in expr.elements))
        if isinstance(expr, (Derivative, Partial)):
            inner = differentiate(expr.operand, expr.variable, context=self.context, registry=self.registry)
            return self(inner)
        if isinstance(expr, Call):
            return self._call(expr)
        raise DifferentiationError(f"Cannot differentiate {type(expr).__name__}")

    def _binary(self, expr: Binary) -> Expr:
        u, v = expr.left, expr.right
        if expr.op == "+":
            return _add(self(u), self(v))
        if expr.op == "-":
            return _sub(self(u), self(v))
        if expr.op == "*":
            return _add(_mul(self(u), v), _mul(u, self(v)))
        if expr.op == "/":
            if not self.depends(v):
                return _div(self(u), v)
            numerator = _sub(_mul(self(u), v), _mul(u, self(v)))
            return _div(numerator, _pow(v, Number(2.0)))
        if expr.op == "^":
            return self._power(u, v)
        if expr.op == "%" and not self.depends(v):
            return self(u)
        raise DifferentiationError(f"Cannot differentiate operator {expr.op}")

    def _power(self, base: Expr, exponent: Expr) -> Expr:
        base_varies = self.depends(base)
        exponent_varies = self.depends(exponent)
        if not base_varies and not exponent_varies:
            return _ZERO
        if not exponent_varies:
            # d(u^n) = n * u^(n-1) * u'
            lowered = Number(exponent.value - 1.0) if isinstance(exponent, Number) else Binary("-", exponent, _ONE)
            return _mul(_mul(exponent, _pow(base, lowered)), self(base))
        if not base_varies:
            # d(a^v) = a^v * ln(a) * v'
            return _mul(_mul(Binary("^", base, exponent), Call("ln", (base,))), self(exponent))
        # d(u^v) = u^v * (v' * ln(u) + v * u' / u)
        inner = _add(_mul(self(exponent), Call("ln", (base,))), _div(_mul(exponent, self(base)), base))
        return _mul(Binary("^", base, exponent), inner)

    def _call(self, call: Call) -> Expr:
        if self.context is not None and call.name in self.context.functions:
            return self(self._inline(call))
        if call.name == "if" and len(call.args) == 3:
            condition, when_true, when_false = call.args
            return Call("if", (condition, self(when_true), self(when_false)))
        if call.name == "piecewise":
            args = list(call.args)
            for index in range(1, len(args) - 1, 2):
                args[index] = self(args[index])
            if args:
                args[-1] = self(args[-1])
            return Call("piecewise", tuple(args))
        if call.name in _COMPONENTWISE:
            return Call(call.name, tuple(self(arg) for arg in call.args))
        descriptor = self.registry.get_by_name(call.name)
        if descriptor is None or descriptor.parse.role != ParseRole.FUNCTION:
            raise DifferentiationError(f"Unknown function {call.name}")
        if descriptor.derivative is None or len(call.args) != 1:
            if not any(self.depends(arg) for arg in call.args):
                return _ZERO
            raise DifferentiationError(f"No derivative rule for {call.name}")
        (argument,) = call.args
        inner = self(argument)
        if _is_number(inner, 0.0):
            return _ZERO
        # chain rule: f'(u) * u'
        return _mul(descriptor.derivative(argument), inner)


def differentiate(
    expr: Expr,
    variable: str,
    *,
    context: "DefinitionContext | None" = None,
    registry: OperationRegistry | None = None,
) -> Expr:
    """Derivative of ``expr`` with respect to ``variable``; never evaluates numerically."""
    active = registry if registry is not None else default_registry()
    return _Differentiator(variable, active, context)(expr)


def partial_derivative(
    expr: Expr,
    variable: str,
    *,
    context: "DefinitionContext | None" = None,
    registry: OperationRegistry | None = None,
) -> Expr:
    """Partial derivative; every name other than ``variable`` is held constant."""
    return differentiate(expr, variable, context=context, registry=registry)
