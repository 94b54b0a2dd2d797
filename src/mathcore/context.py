"""Definition context: variables and functions accumulated across a list of definitions."""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Final, Union

from .ast import Binary, Call, Expr, FunctionDefinition, ListLiteral, Number, Unary, Variable
from .errors import MathError
from .parser import ParseError, parse
from .registry import OperationRegistry, ParseRole, default_registry
from .values import MathType, NumberValue, Value

logger = logging.getLogger(__name__)

RESERVED_NAMES: Final[tuple[str, ...]] = ("x", "y", "z", "pi", "e", "i")
CONSTANTS: Final[dict[str, float]] = {"pi": math.pi, "e": math.e}

_FUNCTION_LHS: Final = re.compile(r"^([a-zA-Z][a-zA-Z0-9_]*)\(([^)]+)\)$")
_VARIABLE_LHS: Final = re.compile(r"^([a-zA-Z][a-zA-Z0-9_]*)$")
_LIST_RHS: Final = re.compile(r"^\[.*\]$")
_RELATION_OPERATORS: Final = re.compile(r"[+\-*/^<>]")
_CALL_LHS_PREFIX: Final = re.compile(r"^[a-z_][a-z0-9_]*\(", re.IGNORECASE)
IDENTIFIER_RE: Final = re.compile(r"\b([a-zA-Z][a-zA-Z0-9_]*)\b")

ContextVariable = Union[float, Expr, Value]
DefinitionSource = Union[str, Mapping[str, str]]


def _base_types() -> dict[str, MathType]:
    return {name: MathType.NUMBER for name in ("pi", "e", "x", "y", "z")}


@dataclass
class DefinitionContext:
    variables: dict[str, ContextVariable] = field(default_factory=lambda: dict(CONSTANTS))
    functions: dict[str, FunctionDefinition] = field(default_factory=dict)
    types: dict[str, MathType] = field(default_factory=_base_types)

    def type_of(self, name: str) -> MathType | None:
        return self.types.get(name)


def definition_text(item: DefinitionSource) -> str:
    if isinstance(item, str):
        return item
    if isinstance(item, Mapping):
        return str(item.get("normalized", ""))
    return str(getattr(item, "normalized", ""))


def is_implicit_relation(normalized: str) -> bool:
    """True for relations such as ``x^2 + y^2 = 1`` that are not definitions."""
    if "=" not in normalized or "==" in normalized:
        return False
    lhs = normalized.split("=")[0].strip()
    if _RELATION_OPERATORS.search(lhs):
        return True
    return "(" in lhs and _CALL_LHS_PREFIX.match(lhs) is None


def split_definition(normalized: str) -> tuple[str, str] | None:
    text = normalized.strip()
    if not text or "=" not in text or is_implicit_relation(text):
        return None
    parts = text.split("=")
    if len(parts) != 2:
        return None
    return parts[0].strip(), parts[1].strip()


def _numeric_constants(context: DefinitionContext) -> dict[str, float]:
    out = dict(CONSTANTS)
    for name, value in context.variables.items():
        if isinstance(value, float):
            out[name] = value
    return out


def evaluate_constant(expr: Expr, context: DefinitionContext, registry: OperationRegistry) -> float:
    """Evaluate literals, known constants and arithmetic/call nodes over them."""
    constants = _numeric_constants(context)

    def walk(node: Expr) -> float:
        if isinstance(node, Number):
            return float(node.value)
        if isinstance(node, Variable):
            if node.name in constants:
                return constants[node.name]
            raise ValueError(f"Non-constant variable: {node.name}")
        if isinstance(node, Unary):
            operand = walk(node.operand)
            if node.op == "-":
                return -operand
            if node.op == "+":
                return operand
            raise ValueError(f"Unknown unary operator: {node.op}")
        if isinstance(node, Binary):
            left = walk(node.left)
            right = walk(node.right)
            if node.op == "+":
                return left + right
            if node.op == "-":
                return left - right
            if node.op == "*":
                return left * right
            if node.op == "/":
                return left / right
            if node.op == "^":
                return math.pow(left, right)
            if node.op == "%":
                return math.fmod(left, right)
            raise ValueError(f"Unknown operator: {node.op}")
        if isinstance(node, Call):
            descriptor = registry.get_by_name(node.name)
            if descriptor is None or descriptor.parse.role != ParseRole.FUNCTION:
                raise ValueError(f"Unknown function: {node.name}")
            args = tuple(NumberValue(walk(arg)) for arg in node.args)
            result = registry.execute(descriptor.id, args, context)
            if not isinstance(result, NumberValue):
                raise ValueError(f"{node.name} did not produce a number")
            return result.value
        raise ValueError(f"Unsupported constant expression: {type(node).__name__}")

    return walk(expr)


def _references(name: str, rhs: str) -> bool:
    return any(match.group(1) == name for match in IDENTIFIER_RE.finditer(rhs))


def _add_function(context: DefinitionContext, name: str, params: tuple[str, ...], rhs: str, registry: OperationRegistry) -> None:
    body = parse(rhs, context, registry=registry)
    context.functions[name] = FunctionDefinition(name=name, params=params, body=body)
    context.types[name] = MathType.FUNCTION


def _add_variable(context: DefinitionContext, name: str, rhs: str, registry: OperationRegistry) -> None:
    if _LIST_RHS.match(rhs):
        ast = parse(rhs, context, registry=registry)
        if isinstance(ast, ListLiteral):
            context.variables[name] = ast
            context.types[name] = MathType.LIST
            return
    ast = parse(rhs, context, registry=registry)
    value = evaluate_constant(ast, context, registry)
    if math.isfinite(value):
        context.variables[name] = value
        context.types[name] = MathType.NUMBER
    else:
        logger.debug("Skipping non-finite definition of %r", name)


def build_context(
    definitions: Iterable[DefinitionSource],
    *,
    registry: OperationRegistry | None = None,
) -> DefinitionContext:
    """Build a context from normalized definitions; malformed entries are skipped."""
    active = registry if registry is not None else default_registry()
    context = DefinitionContext()
    for item in definitions:
        text = definition_text(item)
        split = split_definition(text)
        if split is None:
            continue
        lhs, rhs = split
        function_match = _FUNCTION_LHS.match(lhs)
        variable_match = None if function_match else _VARIABLE_LHS.match(lhs)
        if function_match is None and variable_match is None:
            logger.debug("Skipping definition with unsupported left side: %r", text)
            continue
        name = (function_match or variable_match).group(1)
        if name in RESERVED_NAMES:
            logger.warning("Ignoring definition of reserved name %r", name)
            continue
        if _references(name, rhs):
            logger.warning("Ignoring self-referencing definition of %r", name)
            continue
        try:
            if function_match is not None:
                params = tuple(param.strip() for param in function_match.group(2).split(","))
                _add_function(context, name, params, rhs, active)
            else:
                _add_variable(context, name, rhs, active)
        except (ParseError, MathError, ArithmeticError, ValueError) as err:
            logger.debug("Skipping definition %r: %s", text, err)
    return context
