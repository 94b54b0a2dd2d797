"""Runtime value model and validators for the evaluator."""

from __future__ import annotations

import numbers
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Union

from .ast import Expr, FunctionDefinition


class ValueKind(str, Enum):
    NUMBER = "number"
    COMPLEX = "complex"
    BOOLEAN = "boolean"
    POINT = "point"
    POINT3D = "point3d"
    VECTOR3D = "vector3d"
    CURVE3D = "curve3d"
    LIST = "list"
    FUNCTION = "function"
    PARTIAL = "partial"
    POLYGON = "polygon"
    DISTRIBUTION = "distribution"
    ACTION = "action"


class MathType(str, Enum):
    """Static type names used by descriptor signatures and the definition context."""

    NUMBER = "Number"
    COMPLEX = "Complex"
    BOOLEAN = "Boolean"
    POINT = "Point"
    POINT3D = "Point3D"
    VECTOR3D = "Vector3D"
    CURVE3D = "Curve3D"
    LIST = "List"
    FUNCTION = "Function"
    POLYGON = "Polygon"
    DISTRIBUTION = "Distribution"
    ACTION = "Action"
    UNKNOWN = "Unknown"
    ERROR = "Error"


@dataclass(frozen=True)
class NumberValue:
    value: float
    kind: ClassVar[ValueKind] = ValueKind.NUMBER


@dataclass(frozen=True)
class ComplexValue:
    real: float
    imag: float
    kind: ClassVar[ValueKind] = ValueKind.COMPLEX

    @classmethod
    def from_complex(cls, z: complex) -> "ComplexValue":
        return cls(float(z.real), float(z.imag))

    def to_complex(self) -> complex:
        return complex(self.real, self.imag)


@dataclass(frozen=True)
class BooleanValue:
    value: bool
    kind: ClassVar[ValueKind] = ValueKind.BOOLEAN


@dataclass(frozen=True)
class PointValue:
    x: float
    y: float
    kind: ClassVar[ValueKind] = ValueKind.POINT


@dataclass(frozen=True)
class Point3DValue:
    x: float
    y: float
    z: float
    kind: ClassVar[ValueKind] = ValueKind.POINT3D


@dataclass(frozen=True)
class Vector3DValue:
    x: float
    y: float
    z: float
    kind: ClassVar[ValueKind] = ValueKind.VECTOR3D


@dataclass(frozen=True)
class ListValue:
    elements: tuple["Value", ...]
    element_type: MathType | None = None
    kind: ClassVar[ValueKind] = ValueKind.LIST


@dataclass(frozen=True)
class FunctionValue:
    definition: FunctionDefinition
    kind: ClassVar[ValueKind] = ValueKind.FUNCTION

    @property
    def name(self) -> str:
        return self.definition.name

    @property
    def params(self) -> tuple[str, ...]:
        return self.definition.params

    @property
    def body(self) -> Expr:
        return self.definition.body


@dataclass(frozen=True)
class PartialValue:
    """A user function with its leading parameters already bound."""

    function: FunctionValue
    bound: tuple[tuple[str, "Value"], ...]
    kind: ClassVar[ValueKind] = ValueKind.PARTIAL

    @property
    def remaining_params(self) -> tuple[str, ...]:
        return self.function.params[len(self.bound) :]


@dataclass(frozen=True)
class Curve3DValue:
    parameter: str
    components: tuple[FunctionValue, FunctionValue, FunctionValue]
    kind: ClassVar[ValueKind] = ValueKind.CURVE3D


@dataclass(frozen=True)
class PolygonValue:
    vertices: tuple[PointValue, ...]
    kind: ClassVar[ValueKind] = ValueKind.POLYGON


@dataclass(frozen=True)
class DistributionValue:
    family: str
    params: tuple[tuple[str, float], ...]
    kind: ClassVar[ValueKind] = ValueKind.DISTRIBUTION

    def param(self, name: str) -> float:
        for key, value in self.params:
            if key == name:
                return value
        raise KeyError(name)


@dataclass(frozen=True)
class ActionValue:
    name: str
    expression: Expr | None = None
    kind: ClassVar[ValueKind] = ValueKind.ACTION


Value = Union[
    NumberValue,
    ComplexValue,
    BooleanValue,
    PointValue,
    Point3DValue,
    Vector3DValue,
    Curve3DValue,
    ListValue,
    FunctionValue,
    PartialValue,
    PolygonValue,
    DistributionValue,
    ActionValue,
]

_VALUE_TYPES = (
    NumberValue,
    ComplexValue,
    BooleanValue,
    PointValue,
    Point3DValue,
    Vector3DValue,
    Curve3DValue,
    ListValue,
    FunctionValue,
    PartialValue,
    PolygonValue,
    DistributionValue,
    ActionValue,
)

_KIND_TO_TYPE: dict[ValueKind, MathType] = {
    ValueKind.NUMBER: MathType.NUMBER,
    ValueKind.COMPLEX: MathType.COMPLEX,
    ValueKind.BOOLEAN: MathType.BOOLEAN,
    ValueKind.POINT: MathType.POINT,
    ValueKind.POINT3D: MathType.POINT3D,
    ValueKind.VECTOR3D: MathType.VECTOR3D,
    ValueKind.CURVE3D: MathType.CURVE3D,
    ValueKind.LIST: MathType.LIST,
    ValueKind.FUNCTION: MathType.FUNCTION,
    ValueKind.PARTIAL: MathType.FUNCTION,
    ValueKind.POLYGON: MathType.POLYGON,
    ValueKind.DISTRIBUTION: MathType.DISTRIBUTION,
    ValueKind.ACTION: MathType.ACTION,
}


def is_value(value: object) -> bool:
    return isinstance(value, _VALUE_TYPES)


def kind_to_math_type(kind: ValueKind) -> MathType:
    return _KIND_TO_TYPE.get(kind, MathType.UNKNOWN)


def math_type_of(value: Value) -> MathType:
    return kind_to_math_type(value.kind)


def promote_to_complex(value: Value) -> ComplexValue:
    if isinstance(value, ComplexValue):
        return value
    if isinstance(value, NumberValue):
        return ComplexValue(value.value, 0.0)
    raise TypeError(f"Cannot promote {value.kind.value} to complex")


def as_complex(value: Value) -> complex:
    return promote_to_complex(value).to_complex()


def complex_result(z: complex) -> ComplexValue:
    return ComplexValue.from_complex(z)


def to_value(obj: object, *, where: str = "value") -> Value:
    """Coerce plain Python numbers, booleans and sequences into runtime values."""
    if is_value(obj):
        return obj  # type: ignore[return-value]
    if isinstance(obj, bool):
        return BooleanValue(obj)
    if isinstance(obj, numbers.Real):
        return NumberValue(float(obj))
    if isinstance(obj, numbers.Complex):
        return ComplexValue(float(obj.real), float(obj.imag))
    if isinstance(obj, (list, tuple)):
        return ListValue(tuple(to_value(item, where=f"{where}[{idx}]") for idx, item in enumerate(obj)))
    raise TypeError(f"{where} has unsupported runtime type {type(obj).__name__}")


def to_python(value: Value) -> object:
    if isinstance(value, NumberValue):
        return value.value
    if isinstance(value, ComplexValue):
        return value.to_complex()
    if isinstance(value, BooleanValue):
        return value.value
    if isinstance(value, PointValue):
        return (value.x, value.y)
    if isinstance(value, (Point3DValue, Vector3DValue)):
        return (value.x, value.y, value.z)
    if isinstance(value, ListValue):
        return [to_python(item) for item in value.elements]
    return value


def validate_value(value: object, *, where: str = "value") -> None:
    if isinstance(value, ListValue):
        for idx, item in enumerate(value.elements):
            validate_value(item, where=f"{where}[{idx}]")
        return
    if is_value(value):
        return
    raise TypeError(f"{where} has unsupported runtime type {type(value).__name__}")
