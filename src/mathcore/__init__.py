"""mathcore public API."""

import os

import jax

if os.environ.get("MATHCORE_DISABLE_X64", "0") != "1":
    jax.config.update("jax_enable_x64", True)

from .ast import Expr, FunctionDefinition
from .context import DefinitionContext, build_context
from .derivatives import differentiate, partial_derivative
from .engine import EngineModule, ExpressionEngine, Inspection
from .errors import (
    CircularDependencyError,
    DifferentiationError,
    DivisionByZeroError,
    DomainError,
    InvalidParameterCountError,
    MathError,
    MathRuntimeError,
    NestingDepthError,
    RegistrySealedError,
    TypeMismatchError,
    UndefinedIdentifierError,
    UnknownOperationError,
)
from .evaluator import apply_function, evaluate, evaluate_to_number
from .free_vars import extract_variables, has_free_variables
from .lexer import Token, tokenize
from .normalize import normalize
from .parser import ParseError, parse
from .registry import OperationRegistry, default_registry
from .validation import detect_circular_dependency, get_suggestions, validate_expression

__all__ = [
    "CircularDependencyError",
    "DefinitionContext",
    "DifferentiationError",
    "DivisionByZeroError",
    "DomainError",
    "EngineModule",
    "Expr",
    "ExpressionEngine",
    "FunctionDefinition",
    "Inspection",
    "InvalidParameterCountError",
    "MathError",
    "MathRuntimeError",
    "NestingDepthError",
    "OperationRegistry",
    "ParseError",
    "RegistrySealedError",
    "Token",
    "TypeMismatchError",
    "UndefinedIdentifierError",
    "UnknownOperationError",
    "apply_function",
    "build_context",
    "default_registry",
    "detect_circular_dependency",
    "differentiate",
    "evaluate",
    "evaluate_to_number",
    "extract_variables",
    "get_suggestions",
    "has_free_variables",
    "normalize",
    "parse",
    "partial_derivative",
    "tokenize",
    "validate_expression",
]
