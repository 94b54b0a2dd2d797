"""Reductions and statistics over number lists."""

from __future__ import annotations

import jax.numpy as jnp

from ..registry import Category, OperationRegistry
from ..values import ListValue, NumberValue, Point3DValue, PointValue, Value, Vector3DValue
from ._common import L, N, P, P3, function, non_empty_numbers, numbers_of, sig


def _array(numbers: list[float]) -> jnp.ndarray:
    return jnp.asarray(numbers, dtype=jnp.float64)


def _sum(args: tuple[Value, ...], context) -> Value:
    numbers = numbers_of(args[0], "sum")
    if not numbers:
        return NumberValue(0.0)
    return NumberValue(float(jnp.sum(_array(numbers))))


def _mean(args: tuple[Value, ...], context) -> Value:
    return NumberValue(float(jnp.mean(_array(non_empty_numbers(args[0], "mean")))))


def _min(args: tuple[Value, ...], context) -> Value:
    return NumberValue(float(jnp.min(_array(non_empty_numbers(args[0], "min")))))


def _max(args: tuple[Value, ...], context) -> Value:
    return NumberValue(float(jnp.max(_array(non_empty_numbers(args[0], "max")))))


def _variance(args: tuple[Value, ...], context) -> Value:
    # population variance (divides by n)
    return NumberValue(float(jnp.var(_array(non_empty_numbers(args[0], "variance")))))


def _stdev(args: tuple[Value, ...], context) -> Value:
    return NumberValue(float(jnp.std(_array(non_empty_numbers(args[0], "stdev")))))


def _length(args: tuple[Value, ...], context) -> Value:
    arg = args[0]
    if isinstance(arg, ListValue):
        return NumberValue(float(len(arg.elements)))
    if isinstance(arg, PointValue):
        return NumberValue(2.0)
    if isinstance(arg, (Point3DValue, Vector3DValue)):
        return NumberValue(3.0)
    return NumberValue(1.0)


_REDUCTIONS = (
    ("sum", _sum, "Sum of list elements", "sum([1,2,3]) = 6"),
    ("mean", _mean, "Arithmetic mean", "mean([1,2,3]) = 2"),
    ("min", _min, "Smallest element", "min([3,1,2]) = 1"),
    ("max", _max, "Largest element", "max([3,1,2]) = 3"),
    ("variance", _variance, "Population variance", "variance([1,2,3,4])"),
    ("stdev", _stdev, "Population standard deviation", "stdev([2,4,4,4,5,5,7,9]) = 2"),
)


def register(registry: OperationRegistry) -> None:
    for name, evaluate, description, example in _REDUCTIONS:
        registry.register(
            function(
                name,
                signatures=(sig(L, out=N),),
                evaluate=evaluate,
                description=description,
                category=Category.LISTS,
                example=example,
            )
        )
    registry.register(
        function(
            "length",
            signatures=(sig(L, out=N), sig(P, out=N), sig(P3, out=N)),
            evaluate=_length,
            description="Number of elements in a list or point",
            category=Category.LISTS,
            example="length([1,2,3]) = 3",
        )
    )
