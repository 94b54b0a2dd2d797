"""Tokenization for normalized math expressions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final


@dataclass(frozen=True)
class Token:
    kind: str
    text: str
    pos: int
    end: int


_SINGLE_TOKENS: Final[dict[str, str]] = {
    "(": "LPAREN",
    ")": "RPAREN",
    "[": "LBRACK",
    "]": "RBRACK",
    "{": "LBRACE",
    "}": "RBRACE",
    ",": "COMMA",
}

_MULTI_CHAR_OPERATORS: Final[tuple[str, ...]] = ("<=", ">=", "==", "!=", "&&", "||")
IMAGINARY_UNIT: Final[str] = "i"
PARTIAL_SYMBOL: Final[str] = "∂"

_ATOM_END_KINDS: Final[frozenset[str]] = frozenset({"NUMBER", "IDENT", "IMAGINARY", "RPAREN", "RBRACK", "RBRACE"})
_ATOM_START_KINDS: Final[frozenset[str]] = frozenset({"NUMBER", "IDENT", "IMAGINARY", "LPAREN", "LBRACK", "LBRACE"})


def _is_ident_start(ch: str) -> bool:
    return ch == "_" or ch == PARTIAL_SYMBOL or ch.isalpha()


def _is_ident_continue(ch: str) -> bool:
    return _is_ident_start(ch) or ch.isdigit() or ch == "."


def _scan_number(source: str, start: int) -> int:
    i = start
    seen_dot = False
    while i < len(source):
        ch = source[i]
        if ch == "." and not seen_dot:
            seen_dot = True
        elif not ch.isdigit():
            break
        i += 1
    return i


def _scan_identifier(source: str, start: int) -> int:
    i = start
    while i < len(source) and _is_ident_continue(source[i]):
        i += 1
    return i


def _implicit_multiply(pos: int) -> Token:
    return Token("OP", "*", pos, pos)


def _scan(source: str) -> list[Token]:
    tokens: list[Token] = []
    i = 0
    n = len(source)
    while i < n:
        ch = source[i]
        if ch.isspace():
            i += 1
            continue
        if ch.isdigit() or (ch == "." and i + 1 < n and source[i + 1].isdigit()):
            end = _scan_number(source, i)
            tokens.append(Token("NUMBER", source[i:end], i, end))
            i = end
            continue
        if _is_ident_start(ch):
            end = _scan_identifier(source, i)
            text = source[i:end]
            kind = "IMAGINARY" if text == IMAGINARY_UNIT else "IDENT"
            tokens.append(Token(kind, text, i, end))
            i = end
            continue
        two = source[i : i + 2]
        if two in _MULTI_CHAR_OPERATORS:
            tokens.append(Token("OP", two, i, i + 2))
            i += 2
            continue
        # unrecognized characters become operators; the parser reports them
        tokens.append(Token(_SINGLE_TOKENS.get(ch, "OP"), ch, i, i + 1))
        i += 1
    return tokens


def _split_imaginary_prefix(tokens: list[Token]) -> list[Token]:
    out: list[Token] = []
    for idx, tok in enumerate(tokens):
        following = tokens[idx + 1] if idx + 1 < len(tokens) else None
        if (
            tok.kind == "IDENT"
            and len(tok.text) == 2
            and tok.text[0] == IMAGINARY_UNIT
            and tok.text[1].isalpha()
            and (following is None or following.kind != "LPAREN")
        ):
            split = tok.pos + 1
            out.append(Token("IMAGINARY", IMAGINARY_UNIT, tok.pos, split))
            out.append(_implicit_multiply(split))
            out.append(Token("IDENT", tok.text[1], split, tok.end))
            continue
        out.append(tok)
    return out


def _insert_implicit_multiplication(tokens: list[Token]) -> list[Token]:
    out: list[Token] = []
    for tok in tokens:
        if out:
            prev = out[-1]
            if prev.kind in _ATOM_END_KINDS and tok.kind in _ATOM_START_KINDS:
                call_syntax = prev.kind == "IDENT" and tok.kind == "LPAREN"
                name_run = prev.kind == "IDENT" and tok.kind == "IDENT"
                if not call_syntax and not name_run:
                    out.append(_implicit_multiply(tok.pos))
        out.append(tok)
    return out


def tokenize(source: str) -> list[Token]:
    """Tokenize ``source``; never fails, unknown characters become ``OP`` tokens."""
    tokens = _scan(source)
    tokens = _split_imaginary_prefix(tokens)
    tokens = _insert_implicit_multiplication(tokens)
    tokens.append(Token("EOF", "", len(source), len(source)))
    return tokens
