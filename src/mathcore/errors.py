"""Structured error types for parser/runtime separation."""

from __future__ import annotations

from dataclasses import dataclass, field


class MathError(Exception):
    """Base class for structured mathcore errors."""


class RegistrySealedError(MathError):
    """Registration attempted after the registry was sealed."""


class MathRuntimeError(MathError):
    """Generic runtime failure after successful parse."""


class DivisionByZeroError(MathRuntimeError):
    def __init__(self, message: str = "Division by zero") -> None:
        super().__init__(message)


class DomainError(MathRuntimeError):
    """Input outside the domain of an operation with no complex fallback."""


class TypeMismatchError(MathRuntimeError):
    """No signature or operator accepts the evaluated argument types."""


class UnknownOperationError(MathRuntimeError):
    """Registry lookup by id or name failed."""


class NestingDepthError(MathRuntimeError):
    """Expression nesting exceeded the configured depth bound."""


class DifferentiationError(MathRuntimeError):
    """The differentiator has no rule for a node."""


@dataclass(eq=False)
class UndefinedIdentifierError(MathRuntimeError):
    identifier: str
    suggestions: tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        super().__init__(str(self))

    def __str__(self) -> str:
        message = f"'{self.identifier}' is not defined"
        if self.suggestions:
            message += f"; did you mean {', '.join(self.suggestions)}?"
        return message


class CircularDependencyError(MathRuntimeError):
    def __init__(self, identifier: str) -> None:
        super().__init__(f"Circular dependency detected: {identifier}")
        self.identifier = identifier


class InvalidParameterCountError(MathRuntimeError):
    def __init__(self, function: str, expected: int, received: int) -> None:
        plural = "" if expected == 1 else "s"
        super().__init__(f"`{function}` expects {expected} parameter{plural}, but received {received}")
        self.function = function
        self.expected = expected
        self.received = received


def classify_runtime_exception(err: Exception) -> MathRuntimeError:
    """Map Python arithmetic failures onto the runtime error taxonomy."""
    if isinstance(err, MathRuntimeError):
        return err
    message = str(err)
    if isinstance(err, ZeroDivisionError):
        return DivisionByZeroError(message or "Division by zero")
    if isinstance(err, RecursionError):
        return NestingDepthError(message)
    if isinstance(err, (OverflowError, ArithmeticError)):
        return DomainError(message)
    if isinstance(err, ValueError) and "domain" in message.lower():
        return DomainError(message)
    if isinstance(err, TypeError):
        return TypeMismatchError(message)
    return MathRuntimeError(message)
