"""Expression engine facade: normalization chain, cached parsing, evaluation."""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import Final

from .ast import Expr
from .context import DefinitionContext, DefinitionSource, build_context
from .errors import MathError
from .evaluator import evaluate, evaluate_to_number
from .free_vars import has_free_variables
from .lexer import Token, tokenize
from .normalize import normalize
from .parser import CALLABLE_TYPES, ParseError, parse
from .registry import KeyboardItem, OperationRegistry, default_registry
from .values import Value

logger = logging.getLogger(__name__)

PARSE_CACHE_MAX: Final[int] = max(1, int(os.environ.get("MATHCORE_PARSE_CACHE_MAX", "200")))

Middleware = Callable[[str], str]
ContextAugmenter = Callable[[DefinitionContext], None]


@dataclass(frozen=True)
class EngineModule:
    id: str
    description: str = ""
    middlewares: tuple[Middleware, ...] = ()
    augment_context: ContextAugmenter | None = None
    setup: Callable[["ExpressionEngine"], None] | None = None


@dataclass(frozen=True)
class Inspection:
    normalized: str
    tokens: tuple[Token, ...]
    ast: Expr | None
    has_free_variables: bool
    error: str | None = None


def _callable_names(context: DefinitionContext | None) -> frozenset[str]:
    if context is None:
        return frozenset()
    typed = {name for name, kind in context.types.items() if kind in CALLABLE_TYPES}
    return frozenset(context.functions) | frozenset(typed)


class ExpressionEngine:
    """Normalize, parse and evaluate expressions against a sealed registry.

    Parsed trees are cached by normalized text and the set of callable names
    the context declares, since those decide between call and implicit
    multiplication. The cache evicts in insertion order once it holds more
    than ``cache_size`` entries.
    """

    def __init__(self, registry: OperationRegistry | None = None, *, cache_size: int = PARSE_CACHE_MAX) -> None:
        self.registry = registry if registry is not None else default_registry()
        self._middlewares: list[Middleware] = []
        self._augmenters: list[ContextAugmenter] = []
        self._modules: dict[str, EngineModule] = {}
        self._cache: dict[tuple[str, frozenset[str]], Expr] = {}
        self._cache_size = max(1, int(cache_size))
        self._stats: dict[str, int] = {"hits": 0, "misses": 0, "evictions": 0}

    # -- extension points ------------------------------------------------

    def use_middleware(self, middleware: Middleware) -> None:
        self._middlewares.append(middleware)
        self.clear_cache()

    def register_context_augmenter(self, augmenter: ContextAugmenter) -> None:
        self._augmenters.append(augmenter)

    def register_module(self, module: EngineModule) -> bool:
        if module.id in self._modules:
            logger.debug("Engine module %r already registered; ignoring", module.id)
            return False
        self._modules[module.id] = module
        for middleware in module.middlewares:
            self.use_middleware(middleware)
        if module.augment_context is not None:
            self.register_context_augmenter(module.augment_context)
        if module.setup is not None:
            module.setup(self)
        return True

    def registered_modules(self) -> tuple[EngineModule, ...]:
        return tuple(self._modules.values())

    # -- text pipeline ---------------------------------------------------

    def normalize(self, text: str) -> str:
        normalized = normalize(text, registry=self.registry)
        for middleware in self._middlewares:
            normalized = middleware(normalized)
        return normalized

    def build_context(self, definitions: Iterable[DefinitionSource]) -> DefinitionContext:
        context = build_context(definitions, registry=self.registry)
        for augmenter in self._augmenters:
            augmenter(context)
        return context

    def parse(self, text: str, context: DefinitionContext | None = None) -> Expr:
        return self.parse_normalized(self.normalize(text), context)

    def parse_normalized(self, normalized: str, context: DefinitionContext | None = None) -> Expr:
        key = (normalized, _callable_names(context))
        cached = self._cache.get(key)
        if cached is not None:
            self._stats["hits"] += 1
            return cached
        self._stats["misses"] += 1
        expr = parse(normalized, context, registry=self.registry)
        self._cache[key] = expr
        self._evict()
        return expr

    def _evict(self) -> None:
        while len(self._cache) > self._cache_size:
            oldest = next(iter(self._cache))
            del self._cache[oldest]
            self._stats["evictions"] += 1

    # -- evaluation ------------------------------------------------------

    def evaluate(
        self,
        expr: Expr,
        bindings: Mapping[str, object] | None = None,
        context: DefinitionContext | None = None,
    ) -> Value:
        return evaluate(expr, bindings, context, registry=self.registry)

    def evaluate_expression(
        self,
        text: str,
        bindings: Mapping[str, object] | None = None,
        context: DefinitionContext | None = None,
    ) -> Value:
        return self.evaluate(self.parse(text, context), bindings, context)

    def evaluate_to_number(self, expr: Expr, x: float, context: DefinitionContext | None = None) -> float:
        return evaluate_to_number(expr, x, context, registry=self.registry)

    def has_free_variables(self, expr: Expr, context: DefinitionContext | None = None) -> bool:
        return has_free_variables(expr, context, registry=self.registry)

    def inspect(self, text: str, context: DefinitionContext | None = None) -> Inspection:
        """Normalize, tokenize and try to parse ``text`` without evaluating it."""
        normalized = self.normalize(text)
        tokens = tuple(tokenize(normalized))
        try:
            expr = self.parse_normalized(normalized, context)
            free = self.has_free_variables(expr, context)
        except (ParseError, MathError) as err:
            return Inspection(normalized, tokens, None, False, str(err))
        return Inspection(normalized, tokens, expr, free)

    def keyboard_items(self) -> list[KeyboardItem]:
        return self.registry.keyboard_items()

    # -- cache management ------------------------------------------------

    def clear_cache(self) -> None:
        self._cache.clear()

    def set_cache_size(self, size: int) -> None:
        self._cache_size = max(1, int(size))
        self._evict()

    def cache_info(self, *, reset: bool = False) -> dict[str, float | int]:
        hits = self._stats["hits"]
        misses = self._stats["misses"]
        total = hits + misses
        info: dict[str, float | int] = {
            "hits": hits,
            "misses": misses,
            "evictions": self._stats["evictions"],
            "size": len(self._cache),
            "max_size": self._cache_size,
            "hit_rate": float(hits / total) if total else 0.0,
        }
        if reset:
            self._cache.clear()
            for key in self._stats:
                self._stats[key] = 0
        return info
