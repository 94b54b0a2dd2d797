"""Adaptive Simpson quadrature."""

from __future__ import annotations

import math
import os
from typing import Callable, Final

DEFAULT_TOLERANCE: Final[float] = float(os.environ.get("MATHCORE_INTEGRATE_TOLERANCE", "1e-6"))
DEFAULT_MAX_DEPTH: Final[int] = max(1, int(os.environ.get("MATHCORE_INTEGRATE_MAX_DEPTH", "40")))


def _simpson(fa: float, fm: float, fb: float, width: float) -> float:
    return width / 6.0 * (fa + 4.0 * fm + fb)


def integrate(
    f: Callable[[float], float],
    a: float,
    b: float,
    *,
    tolerance: float = DEFAULT_TOLERANCE,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> float:
    """Integrate ``f`` over ``[a, b]``; reversed bounds flip the sign."""
    if a == b:
        return 0.0
    if not (math.isfinite(a) and math.isfinite(b)):
        raise ValueError("math domain error: integration bounds must be finite")
    fa = f(a)
    fb = f(b)
    m = (a + b) / 2.0
    fm = f(m)
    whole = _simpson(fa, fm, fb, b - a)
    return _refine(f, a, b, fa, fm, fb, whole, tolerance, max_depth)


def _refine(
    f: Callable[[float], float],
    a: float,
    b: float,
    fa: float,
    fm: float,
    fb: float,
    whole: float,
    tolerance: float,
    depth: int,
) -> float:
    m = (a + b) / 2.0
    lm = (a + m) / 2.0
    rm = (m + b) / 2.0
    flm = f(lm)
    frm = f(rm)
    left = _simpson(fa, flm, fm, m - a)
    right = _simpson(fm, frm, fb, b - m)
    delta = left + right - whole
    if depth <= 0 or abs(delta) <= 15.0 * tolerance:
        # Richardson extrapolation of the two Simpson estimates
        return left + right + delta / 15.0
    return _refine(f, a, m, fa, flm, fm, left, tolerance / 2.0, depth - 1) + _refine(
        f, m, b, fm, frm, fb, right, tolerance / 2.0, depth - 1
    )
