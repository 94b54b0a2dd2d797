"""Precedence-climbing parser for normalized math expressions."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Final

from .ast import Binary, Call, Derivative, Expr, ListLiteral, Number, Partial, Unary, Variable
from .lexer import PARTIAL_SYMBOL, Token, tokenize
from .registry import OperationRegistry, ParseSpec, default_registry
from .values import MathType

if TYPE_CHECKING:
    from .context import DefinitionContext

MAX_DEPTH: Final[int] = max(8, int(os.environ.get("MATHCORE_MAX_DEPTH", "200")))
CALLABLE_TYPES: Final[frozenset[MathType]] = frozenset({MathType.FUNCTION, MathType.DISTRIBUTION, MathType.ACTION})

_TUPLE_CONSTRUCTORS: Final[dict[int, str]] = {2: "point", 3: "point3d"}
_OPEN_TO_CLOSE: Final[dict[str, str]] = {"LPAREN": "RPAREN", "LBRACE": "RBRACE"}


class ParseError(SyntaxError):
    def __init__(
        self,
        message: str,
        start: int,
        end: int,
        expected: tuple[str, ...] = (),
        found: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.start = start
        self.end = end
        self.expected = expected
        self.found = found

    def __str__(self) -> str:
        expected_text = ""
        if self.expected:
            expected_text = f"; expected {', '.join(self.expected)}"
        found_text = ""
        if self.found is not None:
            found_text = f"; found {self.found}"
        return f"{self.message} at span [{self.start}, {self.end}){expected_text}{found_text}"


def can_call(name: str, context: "DefinitionContext | None", registry: OperationRegistry) -> bool:
    if name in registry.builtin_function_names():
        return True
    if context is None:
        return False
    if name in context.functions:
        return True
    return context.types.get(name) in CALLABLE_TYPES


@dataclass
class _Parser:
    tokens: list[Token]
    registry: OperationRegistry
    context: "DefinitionContext | None" = None
    index: int = 0
    depth: int = 0
    binary_ops: dict[str, ParseSpec] = field(default_factory=dict)
    unary_ops: frozenset[str] = frozenset()
    builtin_names: frozenset[str] = frozenset()

    def __post_init__(self) -> None:
        self.binary_ops = self.registry.binary_operators()
        self.unary_ops = self.registry.unary_operators()
        self.builtin_names = self.registry.builtin_function_names()
        self._lowest = min((spec.precedence or 0 for spec in self.binary_ops.values()), default=0)

    def parse_expression_only(self) -> Expr:
        expr = self._parse_expression()
        self._expect("EOF")
        return expr

    def _peek(self) -> Token:
        return self.tokens[self.index]

    def _peek_next(self) -> Token:
        return self.tokens[min(self.index + 1, len(self.tokens) - 1)]

    def _advance(self) -> Token:
        tok = self.tokens[self.index]
        self.index += 1
        return tok

    def _expect(self, kind: str) -> Token:
        tok = self._peek()
        if tok.kind != kind:
            self._error(tok, expected=(kind,))
        return self._advance()

    def _error(self, tok: Token | None = None, *, message: str | None = None, expected: tuple[str, ...] = ()) -> None:
        token = tok if tok is not None else self._peek()
        detail = message if message is not None else "Unexpected token"
        normalized_expected = tuple(dict.fromkeys(expected))
        if token.kind == "EOF":
            found = "EOF"
        elif token.text:
            found = f"{token.kind}({token.text})"
        else:
            found = token.kind
        raise ParseError(detail, token.pos, token.end, expected=normalized_expected, found=found)

    def _match(self, kind: str) -> bool:
        if self._peek().kind == kind:
            self._advance()
            return True
        return False

    def _enter(self) -> None:
        self.depth += 1
        if self.depth > MAX_DEPTH:
            self._error(message=f"Expression nested deeper than {MAX_DEPTH} levels")

    def _leave(self) -> None:
        self.depth -= 1

    def _parse_expression(self) -> Expr:
        self._enter()
        try:
            return self._parse_binary(self._lowest)
        finally:
            self._leave()

    def _binary_spec(self, left: Expr) -> tuple[str, ParseSpec] | None:
        tok = self._peek()
        if tok.kind == "OP" and tok.text in self.binary_ops:
            return tok.text, self.binary_ops[tok.text]
        # a variable directly followed by "(" multiplies
        if tok.kind == "LPAREN" and isinstance(left, Variable) and "*" in self.binary_ops:
            return "*", self.binary_ops["*"]
        return None

    def _parse_binary(self, min_precedence: int) -> Expr:
        left = self._parse_unary()
        while True:
            found = self._binary_spec(left)
            if found is None:
                return left
            op, spec = found
            precedence = spec.precedence or 0
            if precedence < min_precedence:
                return left
            if self._peek().kind == "OP":
                self._advance()
            next_min = precedence if spec.associativity == "right" else precedence + 1
            right = self._parse_binary(next_min)
            left = Binary(op, left, right)

    def _parse_unary(self) -> Expr:
        tok = self._peek()
        if tok.kind == "OP" and tok.text in self.unary_ops:
            self._advance()
            self._enter()
            try:
                return Unary(tok.text, self._parse_unary())
            finally:
                self._leave()
        return self._parse_primary()

    def _parse_primary(self) -> Expr:
        tok = self._peek()
        if tok.kind == "NUMBER":
            self._advance()
            return Number(float(tok.text))
        if tok.kind == "IMAGINARY":
            self._advance()
            return Variable(tok.text)
        if tok.kind in _OPEN_TO_CLOSE:
            return self._parse_group()
        if tok.kind == "LBRACK":
            self._advance()
            return ListLiteral(self._parse_arguments("RBRACK"))
        if tok.kind == "IDENT":
            return self._parse_identifier()
        self._error(tok, expected=("NUMBER", "IDENT", "LPAREN", "LBRACK"))
        raise AssertionError("unreachable")

    def _parse_group(self) -> Expr:
        open_tok = self._advance()
        close_kind = _OPEN_TO_CLOSE[open_tok.kind]
        items = self._parse_arguments(close_kind)
        if len(items) == 1:
            return items[0]
        constructor = _TUPLE_CONSTRUCTORS.get(len(items))
        if constructor is None:
            self._error(open_tok, message=f"Tuples of {len(items)} items are not supported")
        return Call(constructor, items)

    def _parse_arguments(self, close_kind: str) -> tuple[Expr, ...]:
        args: list[Expr] = []
        if self._match(close_kind):
            return ()
        args.append(self._parse_expression())
        while self._match("COMMA"):
            args.append(self._parse_expression())
        self._expect(close_kind)
        return tuple(args)

    def _parse_identifier(self) -> Expr:
        tok = self._advance()
        name = tok.text
        derivative = self._parse_derivative_operator(name)
        if derivative is not None:
            return derivative
        if self._peek().kind == "LPAREN":
            if can_call(name, self.context, self.registry):
                self._advance()
                return Call(name, self._parse_arguments("RPAREN"))
            return Variable(name)
        if name in self.builtin_names and self._implicit_multiply_before_primary():
            self._advance()
        if name in self.builtin_names and self._starts_primary(self._peek()):
            self._enter()
            try:
                return Call(name, (self._parse_primary(),))
            finally:
                self._leave()
        return Variable(name)

    def _implicit_multiply_before_primary(self) -> bool:
        tok = self._peek()
        if tok.kind != "OP" or tok.text != "*" or tok.pos != tok.end:
            return False
        return self._starts_primary(self._peek_next())

    def _starts_primary(self, tok: Token) -> bool:
        return tok.kind in {"NUMBER", "IDENT", "IMAGINARY", "LPAREN", "LBRACK", "LBRACE"}

    def _parse_derivative_operator(self, name: str) -> Expr | None:
        """Recognize ``d/dv(expr)`` and ``∂/∂v(expr)``."""
        if name not in {"d", PARTIAL_SYMBOL}:
            return None
        slash = self._peek()
        target = self._peek_next()
        if slash.kind != "OP" or slash.text != "/" or target.kind != "IDENT":
            return None
        if not target.text.startswith(name) or len(target.text) <= len(name):
            return None
        after = self.tokens[min(self.index + 2, len(self.tokens) - 1)]
        if after.kind != "LPAREN":
            return None
        variable = target.text[len(name) :]
        self._advance()
        self._advance()
        self._advance()
        operand = self._parse_expression()
        self._expect("RPAREN")
        if name == PARTIAL_SYMBOL:
            return Partial(variable, operand)
        return Derivative(variable, operand)


def parse(
    source: str,
    context: "DefinitionContext | None" = None,
    *,
    registry: OperationRegistry | None = None,
) -> Expr:
    """Parse normalized source text into an AST."""
    active = registry if registry is not None else default_registry()
    parser = _Parser(tokenize(source), active, context)
    try:
        return parser.parse_expression_only()
    except RecursionError as err:
        raise ParseError(f"Expression nested deeper than {MAX_DEPTH} levels", 0, len(source)) from err
