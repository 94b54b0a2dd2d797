"""Free-variable analysis over expression trees."""

from __future__ import annotations

from collections.abc import Collection
from typing import TYPE_CHECKING, Final

from .ast import Binary, Call, Derivative, Expr, ListLiteral, Number, Partial, Unary, Variable
from .errors import NestingDepthError
from .parser import MAX_DEPTH
from .registry import OperationRegistry, default_registry

if TYPE_CHECKING:
    from .context import DefinitionContext

BUILTIN_CONSTANTS: Final[frozenset[str]] = frozenset({"pi", "e", "i"})


def _is_bound(name: str, context: "DefinitionContext | None", bound: Collection[str], builtins: frozenset[str]) -> bool:
    if name in bound or name in BUILTIN_CONSTANTS or name in builtins:
        return True
    if context is None:
        return False
    return name in context.variables or name in context.functions


def extract_variables(
    expr: Expr,
    context: "DefinitionContext | None" = None,
    bound: Collection[str] = (),
    *,
    registry: OperationRegistry | None = None,
) -> tuple[str, ...]:
    """Free variable names in first-appearance order."""
    active = registry if registry is not None else default_registry()
    builtins = active.builtin_function_names()
    found: dict[str, None] = {}

    def visit(node: Expr, scope: frozenset[str], depth: int) -> None:
        if depth > MAX_DEPTH:
            raise NestingDepthError(f"Expression nested deeper than {MAX_DEPTH} levels")
        if isinstance(node, Number):
            return
        if isinstance(node, Variable):
            if not _is_bound(node.name, context, scope, builtins):
                found.setdefault(node.name)
            return
        if isinstance(node, Binary):
            visit(node.left, scope, depth + 1)
            visit(node.right, scope, depth + 1)
            return
        if isinstance(node, Unary):
            visit(node.operand, scope, depth + 1)
            return
        if isinstance(node, ListLiteral):
            for item in node.elements:
                visit(item, scope, depth + 1)
            return
        if isinstance(node, (Derivative, Partial)):
            visit(node.operand, scope | {node.variable}, depth + 1)
            return
        if isinstance(node, Call):
            args = node.args
            descriptor = None
            if context is None or node.name not in context.functions:
                descriptor = active.get_by_name(node.name)
            if descriptor is not None and descriptor.variable_detector is not None:
                args = descriptor.variable_detector(args)
            elif descriptor is not None and descriptor.binds_variables:
                # the first argument is turned into a function of its own variables
                args = args[1:]
            for arg in args:
                visit(arg, scope, depth + 1)
            return
        raise TypeError(f"Unsupported AST node {type(node).__name__}")

    visit(expr, frozenset(bound), 0)
    return tuple(found)


def has_free_variables(
    expr: Expr,
    context: "DefinitionContext | None" = None,
    bound: Collection[str] = (),
    *,
    registry: OperationRegistry | None = None,
) -> bool:
    return bool(extract_variables(expr, context, bound, registry=registry))
