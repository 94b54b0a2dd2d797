"""Probability distributions and their density/cumulative functions."""

from __future__ import annotations

import math

import jax.numpy as jnp
import jax.scipy.special as jsp

from ..errors import DomainError, TypeMismatchError
from ..registry import Category, OperationRegistry
from ..values import DistributionValue, MathType, NumberValue, Value
from ._common import N, function, number_arg, sig

D = MathType.DISTRIBUTION


def _normal(args: tuple[Value, ...], context) -> Value:
    mean = number_arg(args[0], "normal")
    stdev = number_arg(args[1], "normal")
    if stdev <= 0:
        raise DomainError(f"normal standard deviation must be positive, got {stdev:g}")
    return DistributionValue("normal", (("mean", mean), ("stdev", stdev)))


def _distribution(value: Value, where: str) -> DistributionValue:
    if not isinstance(value, DistributionValue):
        raise TypeMismatchError(f"{where} expects a Distribution, got {value.kind.value}")
    if value.family != "normal":
        raise TypeMismatchError(f"{where} does not support the {value.family} family")
    return value


def _pdf(args: tuple[Value, ...], context) -> Value:
    dist = _distribution(args[0], "pdf")
    x = number_arg(args[1], "pdf")
    mean, stdev = dist.param("mean"), dist.param("stdev")
    z = (x - mean) / stdev
    return NumberValue(math.exp(-0.5 * z * z) / (stdev * math.sqrt(2.0 * math.pi)))


def _cdf(args: tuple[Value, ...], context) -> Value:
    dist = _distribution(args[0], "cdf")
    x = number_arg(args[1], "cdf")
    z = (x - dist.param("mean")) / (dist.param("stdev") * math.sqrt(2.0))
    return NumberValue(float(0.5 * (1.0 + jsp.erf(jnp.asarray(z)))))


def register(registry: OperationRegistry) -> None:
    registry.register(
        function(
            "normal",
            signatures=(sig(N, N, out=D),),
            evaluate=_normal,
            description="Normal distribution with mean and standard deviation",
            category=Category.STATISTICS,
            example="normal(0, 1)",
        )
    )
    registry.register(
        function(
            "pdf",
            signatures=(sig(D, N, out=N),),
            evaluate=_pdf,
            description="Probability density of a distribution at x",
            category=Category.STATISTICS,
            example="pdf(normal(0, 1), 0)",
        )
    )
    registry.register(
        function(
            "cdf",
            signatures=(sig(D, N, out=N),),
            evaluate=_cdf,
            description="Cumulative probability of a distribution up to x",
            category=Category.STATISTICS,
            example="cdf(normal(0, 1), 0) = 0.5",
        )
    )
