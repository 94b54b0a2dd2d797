"""Shared builders and argument coercions for descriptor modules."""

from __future__ import annotations

import re
from collections.abc import Sequence

from ..errors import DomainError, TypeMismatchError
from ..registry import (
    Category,
    Evaluate,
    OperationDescriptor,
    OuterDerivative,
    ParseRole,
    ParseSpec,
    RewriteRule,
    Signature,
    Syntax,
    UiMetadata,
    VariableDetector,
)
from ..values import ComplexValue, ListValue, MathType, NumberValue, Value, as_complex

N = MathType.NUMBER
C = MathType.COMPLEX
B = MathType.BOOLEAN
P = MathType.POINT
P3 = MathType.POINT3D
V3 = MathType.VECTOR3D
L = MathType.LIST
F = MathType.FUNCTION
U = MathType.UNKNOWN

_PLACEHOLDER = re.compile(r"#(\d+)")


def call_template(name: str, arity: int) -> str:
    return f"{name}({', '.join(f'#{index}' for index in range(max(1, arity)))})"


def sig(*inputs: MathType, out: MathType, symbolic: bool = False, variadic: bool = False) -> Signature:
    return Signature(inputs=tuple(inputs), output=out, symbolic=symbolic, variadic=variadic)


def rule(pattern: str, replacement: str, priority: int) -> RewriteRule:
    return RewriteRule(pattern=pattern, replacement=replacement, priority=priority)


def function(
    id: str,
    *,
    signatures: Sequence[Signature],
    evaluate: Evaluate,
    description: str,
    category: Category,
    example: str = "",
    name: str | None = None,
    latex: str | None = None,
    aliases: Sequence[RewriteRule] = (),
    insert_template: str | None = None,
    hidden: bool = False,
    binds_variables: bool = False,
    variable_detector: VariableDetector | None = None,
    derivative: OuterDerivative | None = None,
) -> OperationDescriptor:
    display = name if name is not None else id
    template = call_template(display, len(signatures[0].inputs) if signatures else 1)
    if latex is not None:
        template = call_template(display, len(set(_PLACEHOLDER.findall(latex))))
    return OperationDescriptor(
        id=id,
        name=display,
        syntax=Syntax(
            latex=latex if latex is not None else template,
            normalized=template,
            aliases=tuple(aliases),
            insert_template=insert_template,
        ),
        parse=ParseSpec(role=ParseRole.FUNCTION),
        signatures=tuple(signatures),
        evaluate=evaluate,
        ui=UiMetadata(description=description, category=category, example=example, hidden=hidden),
        binds_variables=binds_variables,
        variable_detector=variable_detector,
        derivative=derivative,
    )


def operator(
    id: str,
    symbol: str,
    *,
    role: ParseRole,
    signatures: Sequence[Signature],
    evaluate: Evaluate,
    description: str,
    example: str = "",
    precedence: int | None = None,
    associativity: str = "left",
    latex: str | None = None,
    normalized: str | None = None,
    aliases: Sequence[RewriteRule] = (),
    category: Category = Category.OPERATORS,
    hidden: bool = True,
) -> OperationDescriptor:
    if role == ParseRole.BINARY:
        default = f"#0 {symbol} #1"
        # binary operators share their symbol with unary ones, so the id names them
        name = symbol
    else:
        default = f"{symbol}#0"
        name = id
    return OperationDescriptor(
        id=id,
        name=name,
        syntax=Syntax(
            latex=latex if latex is not None else default,
            normalized=normalized if normalized is not None else default,
            aliases=tuple(aliases),
        ),
        parse=ParseSpec(role=role, symbol=symbol, precedence=precedence, associativity=associativity),
        signatures=tuple(signatures),
        evaluate=evaluate,
        ui=UiMetadata(description=description, category=category, example=example, hidden=hidden),
    )


def number_arg(value: Value, where: str) -> float:
    if isinstance(value, NumberValue):
        return value.value
    if isinstance(value, ComplexValue) and value.imag == 0:
        return value.real
    raise TypeMismatchError(f"{where} expects a Number, got {value.kind.value}")


def list_arg(value: Value, where: str) -> ListValue:
    if not isinstance(value, ListValue):
        raise TypeMismatchError(f"{where} expects a List, got {value.kind.value}")
    return value


def numbers_of(value: Value, where: str) -> list[float]:
    return [number_arg(item, f"{where} element") for item in list_arg(value, where).elements]


def non_empty_numbers(value: Value, where: str) -> list[float]:
    numbers = numbers_of(value, where)
    if not numbers:
        raise DomainError(f"{where} of an empty list")
    return numbers


def complex_samples(value: Value, where: str) -> list[complex]:
    out: list[complex] = []
    for item in list_arg(value, where).elements:
        try:
            out.append(as_complex(item))
        except TypeError as err:
            raise TypeMismatchError(f"{where} expects a list of numbers") from err
    return out
