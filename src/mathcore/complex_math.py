"""Complex arithmetic primitives on Python ``complex`` numbers."""

from __future__ import annotations

import math
from typing import Final

COMPLEX_ZERO_EPSILON: Final[float] = 1e-12
REAL_EPSILON: Final[float] = 1e-9


class ComplexArithmeticError(ArithmeticError):
    """Raised when a complex operation has no defined result."""


def magnitude(z: complex) -> float:
    return math.hypot(z.real, z.imag)


def phase(z: complex) -> float:
    return math.atan2(z.imag, z.real)


def scale(z: complex, factor: float) -> complex:
    return complex(z.real * factor, z.imag * factor)


def multiply(a: complex, b: complex) -> complex:
    return complex(a.real * b.real - a.imag * b.imag, a.real * b.imag + a.imag * b.real)


def divide(a: complex, b: complex) -> complex:
    denom = b.real * b.real + b.imag * b.imag
    if abs(denom) < COMPLEX_ZERO_EPSILON:
        raise ZeroDivisionError("Division by zero")
    return complex(
        (a.real * b.real + a.imag * b.imag) / denom,
        (a.imag * b.real - a.real * b.imag) / denom,
    )


def inverse(z: complex) -> complex:
    denom = z.real * z.real + z.imag * z.imag
    if denom == 0:
        raise ZeroDivisionError("Cannot invert zero complex number")
    return complex(z.real / denom, -z.imag / denom)


def int_power(base: complex, exponent: int) -> complex:
    """Binary exponentiation; negative exponents go through the reciprocal."""
    if exponent == 0:
        return complex(1.0, 0.0)
    if exponent < 0:
        return inverse(int_power(base, -exponent))
    result = complex(1.0, 0.0)
    factor = base
    remaining = exponent
    while remaining > 0:
        if remaining & 1:
            result = multiply(result, factor)
        factor = multiply(factor, factor)
        remaining >>= 1
    return result


def exp(z: complex) -> complex:
    radius = math.exp(z.real)
    return complex(radius * math.cos(z.imag), radius * math.sin(z.imag))


def power(base: complex, exponent: complex) -> complex:
    """Principal-branch power in polar form."""
    mag = magnitude(base)
    angle = phase(base)
    if mag < COMPLEX_ZERO_EPSILON and abs(angle) < COMPLEX_ZERO_EPSILON:
        if abs(exponent.real) < COMPLEX_ZERO_EPSILON and abs(exponent.imag) < COMPLEX_ZERO_EPSILON:
            return complex(1.0, 0.0)
        if abs(exponent.imag) < COMPLEX_ZERO_EPSILON and exponent.real > 0:
            return complex(0.0, 0.0)
        raise ComplexArithmeticError("0 cannot be raised to a complex exponent")
    ln_mag = math.log(mag)
    new_mag = math.exp(exponent.real * ln_mag - exponent.imag * angle)
    new_angle = exponent.real * angle + exponent.imag * ln_mag
    return complex(new_mag * math.cos(new_angle), new_mag * math.sin(new_angle))


def sqrt(z: complex) -> complex:
    # half-angle form keeps the result in the right half-plane
    mag = magnitude(z)
    real = math.sqrt((mag + z.real) / 2)
    imag = math.copysign(math.sqrt(max(0.0, (mag - z.real) / 2)), z.imag)
    return complex(real, imag)


def log(z: complex) -> complex:
    mag = magnitude(z)
    if mag == 0:
        raise ValueError("math domain error: logarithm of zero")
    return complex(math.log(mag), phase(z))


def is_approximately_real(z: complex, epsilon: float = REAL_EPSILON) -> bool:
    return abs(z.imag) <= epsilon
