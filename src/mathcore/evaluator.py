"""Tree-walking evaluator with symbolic/numeric duality."""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Final

from .ast import (
    Binary,
    Call,
    Derivative,
    Expr,
    FunctionDefinition,
    ListLiteral,
    Number,
    Partial,
    Unary,
    Variable,
    substitute,
)
from .derivatives import differentiate, partial_derivative
from .errors import (
    CircularDependencyError,
    InvalidParameterCountError,
    MathError,
    NestingDepthError,
    TypeMismatchError,
    UndefinedIdentifierError,
    classify_runtime_exception,
)
from .free_vars import extract_variables, has_free_variables
from .operators import apply_binary, apply_unary
from .parser import MAX_DEPTH
from .registry import OperationDescriptor, OperationRegistry, ParseRole, default_registry
from .validation import get_suggestions
from .values import (
    ComplexValue,
    FunctionValue,
    ListValue,
    NumberValue,
    PartialValue,
    Value,
    is_value,
    to_value,
)
from . import complex_math

if TYPE_CHECKING:
    from .context import DefinitionContext

_CONSTANTS: Final[dict[str, Value]] = {
    "pi": NumberValue(math.pi),
    "e": NumberValue(math.e),
    "i": ComplexValue(0.0, 1.0),
}
_CALLABLE_VALUES: Final = (FunctionValue, PartialValue)
_ARITHMETIC_FAILURES: Final = (ArithmeticError, ValueError, TypeError, RecursionError)


@dataclass
class _Evaluation:
    registry: OperationRegistry
    context: "DefinitionContext | None"
    bindings: dict[str, Value] = field(default_factory=dict)
    resolving: set[str] = field(default_factory=set)

    def with_bindings(self, bindings: dict[str, Value]) -> "_Evaluation":
        return _Evaluation(self.registry, self.context, bindings, self.resolving)


def _guarded(fn, *args) -> Value:
    try:
        return fn(*args)
    except MathError:
        raise
    except _ARITHMETIC_FAILURES as err:
        raise classify_runtime_exception(err) from err


def _undefined(name: str, env: _Evaluation) -> UndefinedIdentifierError:
    return UndefinedIdentifierError(name, get_suggestions(name, env.context, registry=env.registry))


def _lookup_variable(name: str, env: _Evaluation, depth: int) -> Value:
    if name in env.bindings:
        return env.bindings[name]
    context = env.context
    if context is not None and name in context.variables:
        stored = context.variables[name]
        if isinstance(stored, (int, float)) and not isinstance(stored, bool):
            return NumberValue(float(stored))
        if is_value(stored):
            return stored  # type: ignore[return-value]
        if name in env.resolving:
            raise CircularDependencyError(name)
        env.resolving.add(name)
        try:
            return _eval_expr(stored, env.with_bindings({}), depth + 1)  # type: ignore[arg-type]
        finally:
            env.resolving.discard(name)
    if name in _CONSTANTS:
        return _CONSTANTS[name]
    if context is not None and name in context.functions:
        return FunctionValue(context.functions[name])
    raise _undefined(name, env)


def _bound_callable(name: str, env: _Evaluation) -> Value | None:
    candidate = env.bindings.get(name)
    if candidate is None and env.context is not None:
        candidate = env.context.variables.get(name)  # type: ignore[assignment]
    if isinstance(candidate, _CALLABLE_VALUES):
        return candidate
    return None


def _apply_definition(definition: FunctionDefinition, args: Sequence[Value], env: _Evaluation, depth: int) -> Value:
    params = definition.params
    if len(args) > len(params):
        raise InvalidParameterCountError(definition.name, len(params), len(args))
    bound = dict(zip(params, args))
    if len(args) == len(params):
        return _eval_expr(definition.body, env.with_bindings(bound), depth + 1)
    remaining = params[len(args) :]
    if all(param in env.bindings for param in remaining):
        # remaining parameters come from the caller's scope; explicit arguments win
        scope = {param: env.bindings[param] for param in remaining}
        scope.update(bound)
        return _eval_expr(definition.body, env.with_bindings(scope), depth + 1)
    return PartialValue(FunctionValue(definition), tuple(bound.items()))


def _apply_value(callee: Value, args: Sequence[Value], env: _Evaluation, depth: int) -> Value:
    if isinstance(callee, PartialValue):
        bound = tuple(value for _, value in callee.bound)
        return _apply_definition(callee.function.definition, bound + tuple(args), env, depth)
    if isinstance(callee, FunctionValue):
        return _apply_definition(callee.definition, args, env, depth)
    raise TypeMismatchError(f"{callee.kind.value} is not callable")


def _truthy(value: Value, where: str) -> bool:
    from .operations.logical import truthy

    return truthy(value, where)


def _eval_conditional(call: Call, env: _Evaluation, depth: int) -> Value:
    args = call.args
    if call.name == "if":
        if len(args) != 3:
            raise InvalidParameterCountError("if", 3, len(args))
        condition = _eval_expr(args[0], env, depth + 1)
        chosen = args[1] if _truthy(condition, "if") else args[2]
        return _eval_expr(chosen, env, depth + 1)
    from .operations.calculus import check_piecewise_arity

    check_piecewise_arity(len(args))
    for index in range(0, len(args) - 1, 2):
        if _truthy(_eval_expr(args[index], env, depth + 1), "piecewise"):
            return _eval_expr(args[index + 1], env, depth + 1)
    return _eval_expr(args[-1], env, depth + 1)


def _function_from_argument(arg: Expr, env: _Evaluation) -> FunctionValue:
    if isinstance(arg, Variable):
        named = _bound_callable(arg.name, env)
        if isinstance(named, FunctionValue):
            return named
        if env.context is not None and arg.name in env.context.functions:
            return FunctionValue(env.context.functions[arg.name])
    params = extract_variables(arg, env.context, registry=env.registry) or ("x",)
    return FunctionValue(FunctionDefinition("f", params, arg))


def _literal(value: Value) -> Expr | None:
    """Expression that rebuilds ``value``, or None when there is no literal form."""
    if isinstance(value, NumberValue):
        return Number(value.value)
    if isinstance(value, ComplexValue):
        return Binary("+", Number(value.real), Binary("*", Number(value.imag), Variable("i")))
    if isinstance(value, ListValue):
        items = [_literal(item) for item in value.elements]
        if any(item is None for item in items):
            return None
        return ListLiteral(tuple(items))  # type: ignore[arg-type]
    return None


def _eval_builtin(call: Call, descriptor: OperationDescriptor, env: _Evaluation, depth: int) -> Value:
    if descriptor.binds_variables and call.args:
        head: list[Value] = [_function_from_argument(call.args[0], env)]
        rest = call.args[1:]
    else:
        head = []
        rest = call.args
        if (
            len(call.args) == 1
            and descriptor.symbolic_capable
            and has_free_variables(call.args[0], env.context, env.bindings, registry=env.registry)
        ):
            captured = {name: _literal(value) for name, value in env.bindings.items()}
            body = substitute(call, {name: node for name, node in captured.items() if node is not None})
            params = extract_variables(body, env.context, env.bindings, registry=env.registry)
            return FunctionValue(FunctionDefinition(call.name, params, body))
    args = head + [_eval_expr(arg, env, depth + 1) for arg in rest]
    return _guarded(env.registry.execute, descriptor.id, tuple(args), env.context)


def _eval_call(call: Call, env: _Evaluation, depth: int) -> Value:
    context = env.context
    user_function = context.functions.get(call.name) if context is not None else None
    if user_function is None and call.name in {"if", "piecewise"}:
        return _eval_conditional(call, env, depth)

    if user_function is not None:
        if len(call.args) > len(user_function.params):
            raise InvalidParameterCountError(call.name, len(user_function.params), len(call.args))
        args = [_eval_expr(arg, env, depth + 1) for arg in call.args]
        return _apply_definition(user_function, args, env, depth)

    callee = _bound_callable(call.name, env)
    if callee is not None:
        args = [_eval_expr(arg, env, depth + 1) for arg in call.args]
        return _apply_value(callee, args, env, depth)

    descriptor = env.registry.get_by_name(call.name)
    if descriptor is None or descriptor.parse.role != ParseRole.FUNCTION:
        raise _undefined(call.name, env)
    return _eval_builtin(call, descriptor, env, depth)


def _eval_derivative(expr: Derivative | Partial, env: _Evaluation) -> Value:
    if isinstance(expr, Partial):
        body = partial_derivative(expr.operand, expr.variable, context=env.context, registry=env.registry)
        name = f"∂/∂{expr.variable}"
    else:
        body = differentiate(expr.operand, expr.variable, context=env.context, registry=env.registry)
        name = f"d/d{expr.variable}"
    return FunctionValue(FunctionDefinition(name, (expr.variable,), body))


def _eval_expr(expr: Expr, env: _Evaluation, depth: int) -> Value:
    if depth > MAX_DEPTH:
        raise NestingDepthError(f"Expression nested deeper than {MAX_DEPTH} levels")

    if isinstance(expr, Number):
        return NumberValue(float(expr.value))

    if isinstance(expr, Variable):
        return _lookup_variable(expr.name, env, depth)

    if isinstance(expr, Binary):
        left = _eval_expr(expr.left, env, depth + 1)
        right = _eval_expr(expr.right, env, depth + 1)
        return _guarded(apply_binary, expr.op, left, right)

    if isinstance(expr, Unary):
        operand = _eval_expr(expr.operand, env, depth + 1)
        return _guarded(apply_unary, expr.op, operand)

    if isinstance(expr, Call):
        return _eval_call(expr, env, depth)

    if isinstance(expr, ListLiteral):
        return ListValue(tuple(_eval_expr(item, env, depth + 1) for item in expr.elements))

    if isinstance(expr, (Derivative, Partial)):
        return _eval_derivative(expr, env)

    raise TypeError(f"Unsupported expression node: {type(expr)!r}")


def _coerce_bindings(bindings: Mapping[str, object] | None) -> dict[str, Value]:
    if not bindings:
        return {}
    return {name: to_value(value, where=f"bindings[{name!r}]") for name, value in bindings.items()}


def evaluate(
    expr: Expr,
    bindings: Mapping[str, object] | None = None,
    context: "DefinitionContext | None" = None,
    *,
    registry: OperationRegistry | None = None,
) -> Value:
    """Evaluate ``expr`` with local ``bindings`` over an optional definition context."""
    active = registry if registry is not None else default_registry()
    env = _Evaluation(active, context, _coerce_bindings(bindings))
    try:
        return _eval_expr(expr, env, 0)
    except RecursionError as err:
        raise NestingDepthError("Maximum evaluation depth exceeded") from err


def apply_function(
    fn: Value,
    args: Sequence[object],
    context: "DefinitionContext | None" = None,
    *,
    registry: OperationRegistry | None = None,
) -> Value:
    """Apply a function or partial value to positional arguments."""
    active = registry if registry is not None else default_registry()
    values = [to_value(arg, where=f"args[{index}]") for index, arg in enumerate(args)]
    return _apply_value(fn, values, _Evaluation(active, context), 0)


def evaluate_to_number(
    expr: Expr,
    x: float,
    context: "DefinitionContext | None" = None,
    *,
    registry: OperationRegistry | None = None,
) -> float:
    """Evaluate at ``x``; single-parameter function results are applied to ``x``."""
    result = evaluate(expr, {"x": x}, context, registry=registry)
    if isinstance(result, FunctionValue) and len(result.params) == 1:
        result = apply_function(result, (x,), context, registry=registry)
    elif isinstance(result, PartialValue) and len(result.remaining_params) == 1:
        result = apply_function(result, (x,), context, registry=registry)
    if isinstance(result, NumberValue):
        return result.value
    if isinstance(result, ComplexValue) and complex_math.is_approximately_real(result.to_complex()):
        return result.real
    raise TypeMismatchError(f"Expected a Number result, got {result.kind.value}")
