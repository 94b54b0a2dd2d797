"""LaTeX to canonical-text normalization."""

from __future__ import annotations

import re
from typing import Final

from .lexer import PARTIAL_SYMBOL
from .registry import OperationRegistry, RewriteRule, default_registry

MAX_PASSES: Final[int] = 64

GREEK_LETTERS: Final[frozenset[str]] = frozenset(
    {
        "alpha",
        "beta",
        "gamma",
        "delta",
        "epsilon",
        "zeta",
        "eta",
        "theta",
        "iota",
        "kappa",
        "lambda",
        "mu",
        "nu",
        "xi",
        "pi",
        "rho",
        "sigma",
        "tau",
        "phi",
        "chi",
        "psi",
        "omega",
    }
)

_GRAPH_PREFIX: Final = re.compile(r"^y\s*=\s*")
_CASES: Final = re.compile(r"\\begin\{cases\}(.+?)\\end\{cases\}", re.DOTALL)
_DERIVATIVE_FRAC: Final = re.compile(r"\\frac\{d\}\{d\s*([a-zA-Z][a-zA-Z0-9_]*)\}")
_PARTIAL_FRAC: Final = re.compile(r"\\frac\{\\partial\}\{\\partial\s*([a-zA-Z][a-zA-Z0-9_]*)\}")
_OPERATORNAME: Final = re.compile(r"\\operatorname\{([a-zA-Z]+)\}")
_GREEK: Final = re.compile(r"\\(" + "|".join(sorted(GREEK_LETTERS, key=len, reverse=True)) + r")\b")
_POWER_GROUP: Final = re.compile(r"\^\{([^{}]+)\}")
_SUBSCRIPT_GROUP: Final = re.compile(r"_\{([a-zA-Z0-9]+)\}")
_SPACING: Final = re.compile(r"\\left|\\right|\\[,;:!]|\\ ")
_NUMBER_IDENT: Final = re.compile(r"\b(\d+(?:\.\d+)?)([a-zA-Z])")
_CLOSE_OPEN: Final = re.compile(r"\)\(")
_CLOSE_IDENT: Final = re.compile(r"\)([a-zA-Z])")
# a derivative operator's ``dx`` must survive the two-letter split
_TWO_LETTERS: Final = re.compile(rf"(?<!d/)(?<!{PARTIAL_SYMBOL}/{PARTIAL_SYMBOL})\b([a-zA-Z])([a-zA-Z])\b")


def _cases_to_piecewise(match: re.Match[str]) -> str:
    args: list[str] = []
    for row in match.group(1).split("\\\\"):
        row = row.strip()
        if not row:
            continue
        parts = [part.strip() for part in row.split("&")]
        if len(parts) == 2:
            value, condition = parts
            args.extend((condition, value))
        elif len(parts) == 1:
            args.append(parts[0])
    return f"piecewise({','.join(args)})"


def _split_two_letters(protected: frozenset[str]):
    def replace(match: re.Match[str]) -> str:
        word = match.group(0)
        if word in protected:
            return word
        return f"{match.group(1)}*{match.group(2)}"

    return replace


def _apply_rules(text: str, rules: tuple[RewriteRule, ...]) -> str:
    for rule in rules:
        text = rule.apply(text)
    return text


def _normalize_once(text: str, rules: tuple[RewriteRule, ...], protected: frozenset[str]) -> str:
    out = _GRAPH_PREFIX.sub("", text)
    out = _CASES.sub(_cases_to_piecewise, out)
    out = _DERIVATIVE_FRAC.sub(r"d/d\1", out)
    out = _PARTIAL_FRAC.sub(rf"{PARTIAL_SYMBOL}/{PARTIAL_SYMBOL}\1", out)
    out = _OPERATORNAME.sub(r"\1", out)
    out = _GREEK.sub(r"\1", out)
    out = _apply_rules(out, rules)
    out = _POWER_GROUP.sub(r"^(\1)", out)
    out = _SUBSCRIPT_GROUP.sub(r"_\1", out)
    out = _SPACING.sub("", out)
    out = out.strip()
    out = _NUMBER_IDENT.sub(r"\1*\2", out)
    out = _CLOSE_OPEN.sub(")*(", out)
    out = _CLOSE_IDENT.sub(r")*\1", out)
    return _TWO_LETTERS.sub(_split_two_letters(protected), out)


def protected_names(registry: OperationRegistry) -> frozenset[str]:
    """Multi-letter names the implicit-multiplication split must leave intact."""
    return registry.builtin_function_names() | GREEK_LETTERS | {"pi"}


def normalize(text: str, *, registry: OperationRegistry | None = None) -> str:
    """Rewrite LaTeX-flavoured input into the canonical text the parser reads.

    Passes repeat until the text stops changing, so the result is a fixed
    point and ``normalize(normalize(s)) == normalize(s)``.
    """
    if not text:
        return ""
    active = registry if registry is not None else default_registry()
    rules = active.normalization_rules()
    protected = protected_names(active)
    current = text
    for _ in range(MAX_PASSES):
        updated = _normalize_once(current, rules, protected)
        if updated == current:
            return updated
        current = updated
    return current
