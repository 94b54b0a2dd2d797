"""Calculus and control-flow descriptors: D, integrate, curve, if, piecewise."""

from __future__ import annotations

from .. import integration
from ..ast import Call, FunctionDefinition, Number, substitute
from ..errors import DomainError, TypeMismatchError
from ..registry import Category, OperationRegistry
from ..values import (
    Curve3DValue,
    FunctionValue,
    MathType,
    NumberValue,
    PartialValue,
    Value,
)
from ._common import B, F, N, U, function, number_arg, sig
from .logical import truthy


def _function_arg(value: Value, where: str) -> FunctionValue:
    if isinstance(value, FunctionValue):
        return value
    if isinstance(value, PartialValue):
        # bound arguments become constants in the body
        replacements = {name: Number(number_arg(bound, where)) for name, bound in value.bound}
        definition = value.function.definition
        return FunctionValue(
            FunctionDefinition(definition.name, value.remaining_params, substitute(definition.body, replacements))
        )
    raise TypeMismatchError(f"{where} expects a Function, got {value.kind.value}")


def _derivative(args: tuple[Value, ...], context) -> Value:
    from ..derivatives import differentiate

    fn = _function_arg(args[0], "D")
    if not fn.params:
        raise TypeMismatchError("D expects a function of at least one variable")
    variable = fn.params[0]
    body = differentiate(fn.body, variable, context=context)
    return FunctionValue(FunctionDefinition(f"D({fn.name or 'f'})", fn.params, body))


def _integrate(args: tuple[Value, ...], context) -> Value:
    from ..evaluator import apply_function

    fn = _function_arg(args[0], "integrate")
    if len(fn.params) != 1:
        raise TypeMismatchError(f"integrate expects a function of one variable, got {len(fn.params)}")
    lower = number_arg(args[1], "integrate")
    upper = number_arg(args[2], "integrate")

    def sample(x: float) -> float:
        result = apply_function(fn, (NumberValue(x),), context)
        return number_arg(result, "integrand")

    return NumberValue(integration.integrate(sample, lower, upper))


def _curve(args: tuple[Value, ...], context) -> Value:
    fn = _function_arg(args[0], "curve")
    body = fn.body
    if isinstance(body, Call) and body.name == "point3d" and len(body.args) == 3:
        parameter = fn.params[0] if fn.params else "t"
        components = tuple(
            FunctionValue(FunctionDefinition(f"curve_{axis}", (parameter,), component))
            for axis, component in zip("xyz", body.args)
        )
        return Curve3DValue(parameter, components)  # type: ignore[arg-type]
    return FunctionValue(FunctionDefinition("curve", fn.params, body))


def _if(args: tuple[Value, ...], context) -> Value:
    condition, when_true, when_false = args
    return when_true if truthy(condition, "if") else when_false


def _piecewise(args: tuple[Value, ...], context) -> Value:
    check_piecewise_arity(len(args))
    for index in range(0, len(args) - 1, 2):
        if truthy(args[index], "piecewise"):
            return args[index + 1]
    return args[-1]


def check_piecewise_arity(count: int) -> None:
    if count < 3 or count % 2 == 0:
        raise DomainError(f"piecewise expects condition/value pairs and a default, got {count} arguments")


def register(registry: OperationRegistry) -> None:
    registry.register(
        function(
            "derivative",
            name="D",
            signatures=(sig(F, out=F),),
            evaluate=_derivative,
            description="Derivative of a function",
            category=Category.CALCULUS,
            example="D(x^2)",
            binds_variables=True,
        )
    )
    registry.register(
        function(
            "integrate",
            signatures=(sig(F, N, N, out=N),),
            evaluate=_integrate,
            description="Definite integral by adaptive Simpson quadrature",
            category=Category.CALCULUS,
            example="integrate(x^2, 0, 3) = 9",
            insert_template="integrate(#0, #1, #2)",
            binds_variables=True,
        )
    )
    registry.register(
        function(
            "curve",
            signatures=(sig(F, out=F),),
            evaluate=_curve,
            description="Parametric curve in one parameter",
            category=Category.CALCULUS,
            example="curve((cos(t), sin(t), t))",
            binds_variables=True,
        )
    )
    registry.register(
        function(
            "if",
            signatures=(sig(B, U, U, out=U), sig(N, U, U, out=U)),
            evaluate=_if,
            description="Conditional: if(condition, then, else)",
            category=Category.CONDITIONAL,
            example="if(x > 0, x, -x)",
        )
    )
    registry.register(
        function(
            "piecewise",
            signatures=(sig(U, U, U, out=MathType.UNKNOWN, variadic=True),),
            evaluate=_piecewise,
            description="Piecewise: piecewise(c1, v1, c2, v2, ..., default)",
            category=Category.CONDITIONAL,
            example="piecewise(x < 0, -x, x)",
            insert_template="piecewise(#0, #1, #2)",
        )
    )
