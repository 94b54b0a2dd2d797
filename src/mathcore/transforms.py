"""FFT-based signal transforms and direct Z/Laplace evaluators."""

from __future__ import annotations

from collections.abc import Sequence

import jax.numpy as jnp

from . import complex_math


def next_power_of_two(n: int) -> int:
    size = 1
    while size < max(1, n):
        size <<= 1
    return size


def _padded(samples: Sequence[complex], size: int) -> jnp.ndarray:
    data = jnp.zeros((size,), dtype=jnp.complex128)
    if samples:
        data = data.at[: len(samples)].set(jnp.asarray(list(samples), dtype=jnp.complex128))
    return data


def _to_complex_list(arr: jnp.ndarray) -> list[complex]:
    return [complex(v) for v in arr.tolist()]


def fft(samples: Sequence[complex]) -> list[complex]:
    """Forward FFT after zero-padding to the next power of two."""
    size = next_power_of_two(len(samples))
    return _to_complex_list(jnp.fft.fft(_padded(samples, size)))


def ifft(samples: Sequence[complex]) -> list[complex]:
    """Normalized inverse FFT after zero-padding to the next power of two."""
    size = next_power_of_two(len(samples))
    return _to_complex_list(jnp.fft.ifft(_padded(samples, size)))


def convolve(a: Sequence[float], b: Sequence[float]) -> list[float]:
    """Linear convolution via spectrum multiplication, truncated to ``len(a) + len(b) - 1``."""
    if not a or not b:
        return []
    out_len = len(a) + len(b) - 1
    size = next_power_of_two(out_len)
    spectrum = jnp.fft.fft(_padded(a, size)) * jnp.fft.fft(_padded(b, size))
    result = jnp.real(jnp.fft.ifft(spectrum))[:out_len]
    return [float(v) for v in result.tolist()]


def z_transform(samples: Sequence[float], z: complex) -> complex:
    """Evaluate ``sum(x[n] * z**-n)`` directly."""
    total = complex(0.0, 0.0)
    for n, x in enumerate(samples):
        total += complex_math.scale(complex_math.int_power(z, -n), float(x))
    return total


def laplace_transform(samples: Sequence[float], s: complex, step: float = 1.0) -> complex:
    """Evaluate the discrete Laplace sum ``sum(x[n] * exp(-s*n*dt) * dt)``."""
    if step <= 0:
        raise ValueError("math domain error: Laplace step must be positive")
    total = complex(0.0, 0.0)
    for n, x in enumerate(samples):
        kernel = complex_math.exp(complex_math.scale(s, -n * step))
        total += complex_math.scale(kernel, float(x) * step)
    return total
