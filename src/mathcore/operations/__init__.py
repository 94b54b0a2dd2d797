"""Built-in operation descriptors, grouped by keyboard category."""

from __future__ import annotations

from ..registry import OperationRegistry
from . import (
    arithmetic,
    calculus,
    comparison,
    complex_ops,
    lists,
    logical,
    mathematical,
    points,
    signal,
    statistics,
    trigonometric,
)

_MODULES = (
    arithmetic,
    comparison,
    logical,
    trigonometric,
    mathematical,
    lists,
    complex_ops,
    points,
    signal,
    calculus,
    statistics,
)


def register_all(registry: OperationRegistry) -> None:
    for module in _MODULES:
        module.register(registry)


__all__ = ["register_all"]
