"""Logical connectives; numbers are read as booleans (nonzero is true)."""

from __future__ import annotations

from ..errors import TypeMismatchError
from ..registry import OperationRegistry, ParseRole
from .. import complex_math
from ..values import BooleanValue, ComplexValue, NumberValue, Value
from ._common import B, N, operator, rule, sig


def truthy(value: Value, where: str) -> bool:
    if isinstance(value, BooleanValue):
        return value.value
    if isinstance(value, NumberValue):
        return value.value != 0
    if isinstance(value, ComplexValue) and complex_math.is_approximately_real(value.to_complex()):
        return value.real != 0
    raise TypeMismatchError(f"{where} expects a Boolean condition, got {value.kind.value}")


def _and(args: tuple[Value, ...], context) -> Value:
    return BooleanValue(truthy(args[0], "and") and truthy(args[1], "and"))


def _or(args: tuple[Value, ...], context) -> Value:
    return BooleanValue(truthy(args[0], "or") or truthy(args[1], "or"))


def _not(args: tuple[Value, ...], context) -> Value:
    return BooleanValue(not truthy(args[0], "not"))


def register(registry: OperationRegistry) -> None:
    registry.register(
        operator(
            "and",
            "&&",
            role=ParseRole.BINARY,
            precedence=-1,
            aliases=(rule(r"\\land\b", "&&", 10), rule(r"\\wedge\b", "&&", 10)),
            signatures=(sig(B, B, out=B), sig(N, N, out=B)),
            evaluate=_and,
            description="Logical AND",
            example="x > 0 \\land x < 1",
            hidden=False,
        )
    )
    registry.register(
        operator(
            "or",
            "||",
            role=ParseRole.BINARY,
            precedence=-2,
            aliases=(rule(r"\\lor\b", "||", 10), rule(r"\\vee\b", "||", 10)),
            signatures=(sig(B, B, out=B), sig(N, N, out=B)),
            evaluate=_or,
            description="Logical OR",
            example="x < 0 \\lor x > 1",
            hidden=False,
        )
    )
    registry.register(
        operator(
            "not",
            "!",
            role=ParseRole.UNARY,
            aliases=(rule(r"\\neg\b", "!", 10), rule(r"\\lnot\b", "!", 10)),
            signatures=(sig(B, out=B), sig(N, out=B)),
            evaluate=_not,
            description="Logical NOT",
            example="\\neg (x > 0)",
            hidden=False,
        )
    )
