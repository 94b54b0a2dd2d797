"""Binary and unary operator dispatch keyed by ``(left kind, operator, right kind)``."""

from __future__ import annotations

import math
from typing import Callable, Final

from . import complex_math
from .errors import DivisionByZeroError, TypeMismatchError
from .values import (
    BooleanValue,
    ComplexValue,
    ListValue,
    NumberValue,
    Point3DValue,
    PointValue,
    Value,
    ValueKind,
    Vector3DValue,
    as_complex,
    complex_result,
)

OperatorKey = tuple[ValueKind, str, ValueKind]
BinaryImpl = Callable[[Value, Value], Value]
UnaryImpl = Callable[[Value], Value]

_N = ValueKind.NUMBER
_C = ValueKind.COMPLEX
_B = ValueKind.BOOLEAN
_P = ValueKind.POINT
_P3 = ValueKind.POINT3D
_V3 = ValueKind.VECTOR3D
_L = ValueKind.LIST


def _real_power(base: float, exponent: float) -> Value:
    if base < 0 and not float(exponent).is_integer():
        return complex_result(complex_math.power(complex(base, 0.0), complex(exponent, 0.0)))
    if base == 0 and exponent < 0:
        raise DivisionByZeroError("Zero raised to a negative power")
    try:
        return NumberValue(math.pow(base, exponent))
    except OverflowError:
        sign = -1.0 if base < 0 and float(exponent).is_integer() and int(exponent) % 2 else 1.0
        return NumberValue(sign * math.inf)


def _real_divide(left: float, right: float) -> float:
    if right == 0:
        raise DivisionByZeroError()
    return left / right


def _real_modulo(left: float, right: float) -> float:
    if right == 0:
        raise DivisionByZeroError("Modulo by zero")
    # remainder takes the sign of the dividend
    return math.fmod(left, right)


def _number_op(fn: Callable[[float, float], float]) -> BinaryImpl:
    return lambda l, r: NumberValue(fn(l.value, r.value))  # type: ignore[union-attr]


def _compare(fn: Callable[[float, float], bool]) -> BinaryImpl:
    return lambda l, r: BooleanValue(fn(l.value, r.value))  # type: ignore[union-attr]


def _complex_op(fn: Callable[[complex, complex], complex]) -> BinaryImpl:
    return lambda l, r: complex_result(fn(as_complex(l), as_complex(r)))


def _complex_power(left: Value, right: Value) -> Value:
    base = as_complex(left)
    exponent = as_complex(right)
    if exponent.imag == 0 and float(exponent.real).is_integer() and abs(exponent.real) <= 1 << 20:
        return complex_result(complex_math.int_power(base, int(exponent.real)))
    return complex_result(complex_math.power(base, exponent))


def _complex_equal(left: Value, right: Value) -> Value:
    return BooleanValue(as_complex(left) == as_complex(right))


def _complex_not_equal(left: Value, right: Value) -> Value:
    return BooleanValue(as_complex(left) != as_complex(right))


def _point_scale(point: Value, factor: float) -> Value:
    if isinstance(point, PointValue):
        return PointValue(point.x * factor, point.y * factor)
    if isinstance(point, Point3DValue):
        return Point3DValue(point.x * factor, point.y * factor, point.z * factor)
    if isinstance(point, Vector3DValue):
        return Vector3DValue(point.x * factor, point.y * factor, point.z * factor)
    raise TypeMismatchError(f"Cannot scale {point.kind.value}")


def _componentwise(fn: Callable[[float, float], float]) -> BinaryImpl:
    def apply(left: Value, right: Value) -> Value:
        if isinstance(left, PointValue) and isinstance(right, PointValue):
            return PointValue(fn(left.x, right.x), fn(left.y, right.y))
        cls = type(left)
        return cls(fn(left.x, right.x), fn(left.y, right.y), fn(left.z, right.z))  # type: ignore[call-arg,union-attr]

    return apply


def _components_equal(left: Value, right: Value) -> Value:
    return BooleanValue(left == right)


def _list_concat(left: Value, right: Value) -> Value:
    return ListValue(left.elements + right.elements)  # type: ignore[union-attr]


def _list_scale_right(left: Value, right: Value) -> Value:
    return ListValue(tuple(apply_binary("*", item, right) for item in left.elements))  # type: ignore[union-attr]


def _list_scale_left(left: Value, right: Value) -> Value:
    return ListValue(tuple(apply_binary("*", left, item) for item in right.elements))  # type: ignore[union-attr]


_BINARY_OPERATORS: Final[dict[OperatorKey, BinaryImpl]] = {
    (_N, "+", _N): _number_op(lambda a, b: a + b),
    (_N, "-", _N): _number_op(lambda a, b: a - b),
    (_N, "*", _N): _number_op(lambda a, b: a * b),
    (_N, "/", _N): _number_op(_real_divide),
    (_N, "%", _N): _number_op(_real_modulo),
    (_N, "^", _N): lambda l, r: _real_power(l.value, r.value),  # type: ignore[union-attr]
    (_N, "<", _N): _compare(lambda a, b: a < b),
    (_N, ">", _N): _compare(lambda a, b: a > b),
    (_N, "<=", _N): _compare(lambda a, b: a <= b),
    (_N, ">=", _N): _compare(lambda a, b: a >= b),
    (_N, "==", _N): _compare(lambda a, b: a == b),
    (_N, "!=", _N): _compare(lambda a, b: a != b),
    (_B, "==", _B): lambda l, r: BooleanValue(l.value == r.value),  # type: ignore[union-attr]
    (_B, "!=", _B): lambda l, r: BooleanValue(l.value != r.value),  # type: ignore[union-attr]
    (_L, "+", _L): _list_concat,
    (_L, "*", _N): _list_scale_right,
    (_N, "*", _L): _list_scale_left,
}

for _kind in (_P, _P3, _V3):
    _BINARY_OPERATORS[(_kind, "+", _kind)] = _componentwise(lambda a, b: a + b)
    _BINARY_OPERATORS[(_kind, "-", _kind)] = _componentwise(lambda a, b: a - b)
    _BINARY_OPERATORS[(_kind, "*", _N)] = lambda l, r: _point_scale(l, r.value)  # type: ignore[union-attr]
    _BINARY_OPERATORS[(_N, "*", _kind)] = lambda l, r: _point_scale(r, l.value)  # type: ignore[union-attr]
    _BINARY_OPERATORS[(_kind, "/", _N)] = lambda l, r: _point_scale(l, _real_divide(1.0, r.value))  # type: ignore[union-attr]
    _BINARY_OPERATORS[(_kind, "==", _kind)] = _components_equal


def _truth(value: Value) -> bool:
    if isinstance(value, BooleanValue):
        return value.value
    return value.value != 0  # type: ignore[union-attr]


for _left, _right in ((_B, _B), (_B, _N), (_N, _B), (_N, _N)):
    _BINARY_OPERATORS[(_left, "&&", _right)] = lambda l, r: BooleanValue(_truth(l) and _truth(r))
    _BINARY_OPERATORS[(_left, "||", _right)] = lambda l, r: BooleanValue(_truth(l) or _truth(r))

_COMPLEX_BINARY: Final[dict[str, BinaryImpl]] = {
    "+": _complex_op(lambda a, b: a + b),
    "-": _complex_op(lambda a, b: a - b),
    "*": _complex_op(complex_math.multiply),
    "/": _complex_op(complex_math.divide),
    "^": _complex_power,
    "==": _complex_equal,
    "!=": _complex_not_equal,
}

for _op, _impl in _COMPLEX_BINARY.items():
    for _left, _right in ((_C, _C), (_C, _N), (_N, _C)):
        _BINARY_OPERATORS[(_left, _op, _right)] = _impl


def _negate(value: Value) -> Value:
    if isinstance(value, NumberValue):
        return NumberValue(-value.value)
    if isinstance(value, ComplexValue):
        return ComplexValue(-value.real, -value.imag)
    raise TypeMismatchError(f"Unary minus not supported for {value.kind.value}")


def _logical_not(value: Value) -> Value:
    value = _demote_real_complex(value)
    if isinstance(value, BooleanValue):
        return BooleanValue(not value.value)
    if isinstance(value, NumberValue):
        return BooleanValue(value.value == 0)
    raise TypeMismatchError(f"Logical not not supported for {value.kind.value}")


_UNARY_OPERATORS: Final[dict[str, UnaryImpl]] = {
    "-": _negate,
    "+": lambda value: value,
    "!": _logical_not,
}


def lookup_binary(left: ValueKind, op: str, right: ValueKind) -> BinaryImpl | None:
    return _BINARY_OPERATORS.get((left, op, right))


def _demote_real_complex(value: Value) -> Value:
    if isinstance(value, ComplexValue) and complex_math.is_approximately_real(value.to_complex()):
        return NumberValue(value.real)
    return value


def apply_binary(op: str, left: Value, right: Value) -> Value:
    impl = lookup_binary(left.kind, op, right.kind)
    if impl is None:
        # complex values with a zero imaginary part also match number-only entries
        demoted_left = _demote_real_complex(left)
        demoted_right = _demote_real_complex(right)
        if demoted_left is not left or demoted_right is not right:
            impl = lookup_binary(demoted_left.kind, op, demoted_right.kind)
            left, right = demoted_left, demoted_right
    if impl is None:
        raise TypeMismatchError(f"Cannot perform {op} on {left.kind.value} and {right.kind.value}")
    return impl(left, right)


def apply_unary(op: str, operand: Value) -> Value:
    impl = _UNARY_OPERATORS.get(op)
    if impl is None:
        raise TypeMismatchError(f"Unknown unary operator {op}")
    return impl(operand)
