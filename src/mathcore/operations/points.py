"""Point and vector constructors plus dot/cross products and distances."""

from __future__ import annotations

import math

from ..errors import DomainError, TypeMismatchError
from ..registry import Category, OperationRegistry
from ..values import MathType, NumberValue, Point3DValue, PointValue, PolygonValue, Value, Vector3DValue
from ._common import N, P, P3, V3, function, number_arg, sig

_SPATIAL = (Point3DValue, Vector3DValue)


def _point(args: tuple[Value, ...], context) -> Value:
    return PointValue(number_arg(args[0], "point"), number_arg(args[1], "point"))


def _point3d(args: tuple[Value, ...], context) -> Value:
    x, y, z = (number_arg(arg, "point3d") for arg in args)
    return Point3DValue(x, y, z)


def _vector(args: tuple[Value, ...], context) -> Value:
    x, y, z = (number_arg(arg, "vector") for arg in args)
    return Vector3DValue(x, y, z)


def _pair(args: tuple[Value, ...], where: str) -> tuple[Value, Value]:
    a, b = args
    if isinstance(a, PointValue) and isinstance(b, PointValue):
        return a, b
    if isinstance(a, _SPATIAL) and isinstance(b, _SPATIAL):
        return a, b
    raise TypeMismatchError(f"{where} expects two Points or two 3D Points/Vectors")


def _dot(args: tuple[Value, ...], context) -> Value:
    a, b = _pair(args, "dot")
    if isinstance(a, PointValue):
        return NumberValue(a.x * b.x + a.y * b.y)  # type: ignore[union-attr]
    return NumberValue(a.x * b.x + a.y * b.y + a.z * b.z)  # type: ignore[union-attr]


def _cross(args: tuple[Value, ...], context) -> Value:
    a, b = _pair(args, "cross")
    if isinstance(a, PointValue):
        return NumberValue(a.x * b.y - a.y * b.x)  # type: ignore[union-attr]
    return Vector3DValue(
        a.y * b.z - a.z * b.y,  # type: ignore[union-attr]
        a.z * b.x - a.x * b.z,  # type: ignore[union-attr]
        a.x * b.y - a.y * b.x,  # type: ignore[union-attr]
    )


def _distance(args: tuple[Value, ...], context) -> Value:
    a, b = _pair(args, "distance")
    if isinstance(a, PointValue):
        return NumberValue(math.hypot(a.x - b.x, a.y - b.y))  # type: ignore[union-attr]
    return NumberValue(math.hypot(a.x - b.x, a.y - b.y, a.z - b.z))  # type: ignore[union-attr]


def _polygon(args: tuple[Value, ...], context) -> Value:
    if len(args) < 3:
        raise DomainError(f"polygon needs at least 3 vertices, got {len(args)}")
    vertices = []
    for arg in args:
        if not isinstance(arg, PointValue):
            raise TypeMismatchError(f"polygon expects Points, got {arg.kind.value}")
        vertices.append(arg)
    return PolygonValue(tuple(vertices))


_PAIRWISE = (sig(P, P, out=N), sig(P3, P3, out=N), sig(V3, V3, out=N), sig(P3, V3, out=N), sig(V3, P3, out=N))


def register(registry: OperationRegistry) -> None:
    registry.register(
        function(
            "point",
            latex="point(#0, #1)",
            signatures=(sig(N, N, out=P),),
            evaluate=_point,
            description="2D point",
            category=Category.POINTS,
            example="(1, 2)",
            insert_template="(#0, #1)",
        )
    )
    registry.register(
        function(
            "point3d",
            latex="point3d(#0, #1, #2)",
            signatures=(sig(N, N, N, out=P3),),
            evaluate=_point3d,
            description="3D point",
            category=Category.POINTS,
            example="(1, 2, 3)",
            insert_template="(#0, #1, #2)",
        )
    )
    registry.register(
        function(
            "vector",
            latex="vector(#0, #1, #2)",
            signatures=(sig(N, N, N, out=V3),),
            evaluate=_vector,
            description="3D vector",
            category=Category.POINTS,
            example="vector(1, 0, 0)",
            insert_template="vector(#0, #1, #2)",
        )
    )
    registry.register(
        function(
            "dot",
            latex="dot(#0, #1)",
            signatures=_PAIRWISE,
            evaluate=_dot,
            description="Dot product of two vectors",
            category=Category.POINTS,
            example="dot((1,2), (3,4)) = 11",
        )
    )
    registry.register(
        function(
            "cross",
            latex="cross(#0, #1)",
            signatures=(
                sig(P, P, out=N),
                sig(P3, P3, out=V3),
                sig(V3, V3, out=V3),
                sig(P3, V3, out=V3),
                sig(V3, P3, out=V3),
            ),
            evaluate=_cross,
            description="Cross product (scalar for 2D points)",
            category=Category.POINTS,
            example="cross((1,0), (0,1)) = 1",
        )
    )
    registry.register(
        function(
            "distance",
            latex="distance(#0, #1)",
            signatures=_PAIRWISE,
            evaluate=_distance,
            description="Euclidean distance between two points",
            category=Category.POINTS,
            example="distance((0,0), (3,4)) = 5",
        )
    )
    registry.register(
        function(
            "polygon",
            latex="polygon(#0, #1, #2)",
            signatures=(sig(P, P, P, out=MathType.POLYGON, variadic=True),),
            evaluate=_polygon,
            description="Polygon through three or more points",
            category=Category.POINTS,
            example="polygon((0,0), (1,0), (0,1))",
        )
    )
