"""Identifier validation, suggestions and cross-definition cycle detection."""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Final

from .context import (
    CONSTANTS,
    IDENTIFIER_RE,
    RESERVED_NAMES,
    DefinitionContext,
    DefinitionSource,
    definition_text,
    is_implicit_relation,
)
from .registry import OperationRegistry, default_registry

MAX_DISTANCE: Final[int] = 3
MAX_SUGGESTIONS: Final[int] = 3

_DEFINED_NAME: Final = re.compile(r"^([a-zA-Z][a-zA-Z0-9_]*)\s*(?:\(([^)]*)\))?\s*=")


@dataclass(frozen=True)
class ValidationIssue:
    kind: str
    message: str
    identifier: str | None = None
    suggestions: tuple[str, ...] = ()


def levenshtein(a: str, b: str) -> int:
    if len(a) < len(b):
        a, b = b, a
    previous = list(range(len(b) + 1))
    for i, ca in enumerate(a, start=1):
        current = [i]
        for j, cb in enumerate(b, start=1):
            cost = 0 if ca == cb else 1
            current.append(min(previous[j] + 1, current[j - 1] + 1, previous[j - 1] + cost))
        previous = current
    return previous[-1]


def known_identifiers(
    context: DefinitionContext | None = None,
    *,
    registry: OperationRegistry | None = None,
) -> list[str]:
    active = registry if registry is not None else default_registry()
    names: list[str] = sorted(active.builtin_function_names())
    names.extend(RESERVED_NAMES)
    names.extend(CONSTANTS)
    if context is not None:
        names.extend(context.variables)
        names.extend(context.functions)
    return list(dict.fromkeys(names))


def get_suggestions(
    identifier: str,
    context: DefinitionContext | None = None,
    *,
    registry: OperationRegistry | None = None,
) -> tuple[str, ...]:
    """Up to three known names within edit distance 3, closest first."""
    target = identifier.lower()
    scored = [
        (levenshtein(target, name.lower()), name)
        for name in known_identifiers(context, registry=registry)
        if name != identifier
    ]
    ranked = sorted((item for item in scored if item[0] <= MAX_DISTANCE), key=lambda item: item[0])
    return tuple(name for _, name in ranked[:MAX_SUGGESTIONS])


def validate_expression(
    normalized: str,
    context: DefinitionContext,
    *,
    registry: OperationRegistry | None = None,
) -> list[ValidationIssue]:
    """Report identifiers that are neither builtin, reserved, constant nor defined."""
    active = registry if registry is not None else default_registry()
    if not normalized.strip():
        return []
    target = normalized
    skip: set[str] = set()
    if "=" in normalized and "==" not in normalized and not is_implicit_relation(normalized):
        parts = normalized.split("=")
        if len(parts) == 2:
            target = parts[1]
            match = _DEFINED_NAME.match(normalized)
            if match is not None:
                skip.add(match.group(1))
                if match.group(2):
                    skip.update(param.strip() for param in match.group(2).split(","))

    builtins = active.builtin_function_names()
    issues: list[ValidationIssue] = []
    seen: set[str] = set()
    for match in IDENTIFIER_RE.finditer(target):
        name = match.group(1)
        if name in seen or name in skip:
            continue
        seen.add(name)
        if name in builtins or name in RESERVED_NAMES or name in CONSTANTS:
            continue
        if name in context.variables or name in context.functions:
            continue
        issues.append(
            ValidationIssue(
                kind="undefined_identifier",
                message=f"'{name}' is not defined",
                identifier=name,
                suggestions=get_suggestions(name, context, registry=active),
            )
        )
    return issues


def _dependency_graph(definitions: Sequence[DefinitionSource], builtins: frozenset[str]) -> dict[str, set[str]]:
    graph: dict[str, set[str]] = {}
    for item in definitions:
        text = definition_text(item).strip()
        match = _DEFINED_NAME.match(text)
        if match is None or text.count("=") != 1:
            continue
        params = {param.strip() for param in (match.group(2) or "").split(",") if param.strip()}
        rhs = text.split("=", 1)[1]
        used = {
            ident.group(1)
            for ident in IDENTIFIER_RE.finditer(rhs)
            if ident.group(1) not in builtins and ident.group(1) not in RESERVED_NAMES and ident.group(1) not in params
        }
        graph.setdefault(match.group(1), set()).update(used)
    return graph


def detect_circular_dependency(
    definitions: Sequence[DefinitionSource],
    *,
    registry: OperationRegistry | None = None,
) -> str | None:
    """Return a name that transitively depends on itself, or ``None``."""
    active = registry if registry is not None else default_registry()
    graph = _dependency_graph(definitions, active.builtin_function_names())
    done: set[str] = set()

    def visit(name: str, path: list[str]) -> str | None:
        if name in path:
            return name
        if name in done or name not in graph:
            return None
        path.append(name)
        for dependency in sorted(graph[name]):
            found = visit(dependency, path)
            if found is not None:
                return found
        path.pop()
        done.add(name)
        return None

    for name in graph:
        found = visit(name, [])
        if found is not None:
            return found
    return None
