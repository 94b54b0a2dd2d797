"""Comparison operators."""

from __future__ import annotations

from typing import Final

from ..operators import apply_binary
from ..registry import OperationRegistry, ParseRole
from ._common import B, C, N, operator, rule, sig

# id, symbol, description, LaTeX spellings
_COMPARISONS: Final[tuple[tuple[str, str, str, tuple[str, ...]], ...]] = (
    ("less_than", "<", "Less than", ()),
    ("greater_than", ">", "Greater than", ()),
    ("less_equal", "<=", "Less than or equal", ("le", "leq")),
    ("greater_equal", ">=", "Greater than or equal", ("ge", "geq")),
    ("equal", "==", "Equal to", ()),
    ("not_equal", "!=", "Not equal to", ("ne", "neq")),
)


def _compare(symbol: str):
    return lambda args, context: apply_binary(symbol, args[0], args[1])


def register(registry: OperationRegistry) -> None:
    for op_id, symbol, description, commands in _COMPARISONS:
        signatures = [sig(N, N, out=B)]
        if symbol in {"==", "!="}:
            signatures.extend((sig(C, C, out=B), sig(B, B, out=B)))
        registry.register(
            operator(
                op_id,
                symbol,
                role=ParseRole.BINARY,
                precedence=0,
                signatures=signatures,
                evaluate=_compare(symbol),
                aliases=tuple(rule(rf"\\{command}\b", symbol, 10) for command in commands),
                description=description,
                example=f"2 {symbol} 3",
                hidden=not commands,
            )
        )
