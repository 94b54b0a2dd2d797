"""Operation descriptors and the registry that serves parsing, normalization, typing and evaluation."""

from __future__ import annotations

import re
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from enum import Enum
from functools import lru_cache
from typing import TYPE_CHECKING, Callable, Final

from .ast import Expr
from .errors import RegistrySealedError, TypeMismatchError, UnknownOperationError
from .values import MathType, Value, math_type_of, validate_value

if TYPE_CHECKING:
    from .context import DefinitionContext

DEFAULT_RULE_PRIORITY: Final[int] = 50
_PLACEHOLDER_RE: Final = re.compile(r"#(\d+)")


class ParseRole(str, Enum):
    FUNCTION = "function"
    BINARY = "binary"
    UNARY = "unary"
    SPECIAL = "special"


class Category(str, Enum):
    OPERATORS = "Operators"
    TRIGONOMETRIC = "Trigonometric"
    MATHEMATICAL = "Mathematical"
    LISTS = "Lists"
    COMPLEX = "Complex"
    POINTS = "Points"
    CONDITIONAL = "Conditional"
    SIGNAL = "Signal Processing"
    CALCULUS = "Calculus"
    STATISTICS = "Statistics"
    CONSTANTS = "Constants"
    VARIABLES = "Variables"
    DATA_TYPES = "Data Types"


@dataclass(frozen=True)
class RewriteRule:
    pattern: str
    replacement: str
    priority: int = DEFAULT_RULE_PRIORITY

    def apply(self, text: str) -> str:
        return re.sub(self.pattern, self.replacement, text)


@dataclass(frozen=True)
class Syntax:
    latex: str
    normalized: str
    aliases: tuple[RewriteRule, ...] = ()
    insert_template: str | None = None


@dataclass(frozen=True)
class ParseSpec:
    role: ParseRole
    symbol: str | None = None
    precedence: int | None = None
    associativity: str = "left"


@dataclass(frozen=True)
class Signature:
    inputs: tuple[MathType, ...]
    output: MathType
    symbolic: bool = False
    variadic: bool = False


@dataclass(frozen=True)
class UiMetadata:
    description: str
    category: Category
    example: str = ""
    hidden: bool = False


Evaluate = Callable[[tuple[Value, ...], "DefinitionContext | None"], Value]
VariableDetector = Callable[[tuple[Expr, ...]], tuple[Expr, ...]]
OuterDerivative = Callable[[Expr], Expr]


@dataclass(frozen=True)
class OperationDescriptor:
    """Complete metadata and behaviour record for one operator or function."""

    id: str
    name: str
    syntax: Syntax
    parse: ParseSpec
    signatures: tuple[Signature, ...]
    evaluate: Evaluate
    ui: UiMetadata
    binds_variables: bool = False
    variable_detector: VariableDetector | None = None
    derivative: OuterDerivative | None = None

    @property
    def symbolic_capable(self) -> bool:
        return any(sig.symbolic and len(sig.inputs) == 1 for sig in self.signatures)


@dataclass(frozen=True)
class SignatureMatch:
    descriptor: OperationDescriptor
    index: int

    @property
    def signature(self) -> Signature:
        return self.descriptor.signatures[self.index]


@dataclass(frozen=True)
class KeyboardItem:
    id: str
    display_template: str
    insert_template: str
    normalized: str
    description: str
    category: Category
    example: str


_SUBTYPES: Final[dict[MathType, frozenset[MathType]]] = {
    MathType.COMPLEX: frozenset({MathType.NUMBER}),
    MathType.LIST: frozenset({MathType.POINT, MathType.POINT3D}),
}


def is_type_compatible(actual: MathType, expected: MathType) -> bool:
    if actual == expected:
        return True
    if actual == MathType.UNKNOWN or expected == MathType.UNKNOWN:
        return True
    return actual in _SUBTYPES.get(expected, frozenset())


def _signature_accepts(signature: Signature, arg_types: Sequence[MathType]) -> bool:
    inputs = signature.inputs
    if signature.variadic:
        if len(arg_types) < len(inputs):
            return False
        expanded = list(inputs[:-1]) + [inputs[-1]] * (len(arg_types) - len(inputs) + 1)
    else:
        if len(arg_types) != len(inputs):
            return False
        expanded = list(inputs)
    return all(is_type_compatible(actual, expected) for actual, expected in zip(arg_types, expanded))


def _template_rule(latex: str, normalized: str) -> RewriteRule:
    pieces: list[str] = []
    last = 0
    seen: set[str] = set()
    for match in _PLACEHOLDER_RE.finditer(latex):
        pieces.append(re.escape(latex[last : match.start()]))
        index = match.group(1)
        # a repeated placeholder must match the same text again
        pieces.append(f"(?P=arg{index})" if index in seen else rf"(?P<arg{index}>[^{{}}]+?)")
        seen.add(index)
        last = match.end()
    pieces.append(re.escape(latex[last:]))
    replacement = _PLACEHOLDER_RE.sub(lambda m: f"\\g<arg{m.group(1)}>", normalized.replace("\\", "\\\\"))
    return RewriteRule(pattern="".join(pieces), replacement=replacement, priority=DEFAULT_RULE_PRIORITY)


@dataclass
class OperationRegistry:
    """Holds one descriptor per operation id; sealed once all modules have registered."""

    _operations: dict[str, OperationDescriptor] = field(default_factory=dict)
    _by_name: dict[str, str] = field(default_factory=dict)
    _sealed: bool = False

    def register(self, descriptor: OperationDescriptor) -> None:
        if self._sealed:
            raise RegistrySealedError(f"Cannot register {descriptor.id!r}: registry is sealed")
        self._operations[descriptor.id] = descriptor
        self._by_name[descriptor.name] = descriptor.id

    def seal(self) -> None:
        self._sealed = True

    @property
    def sealed(self) -> bool:
        return self._sealed

    def get(self, operation_id: str) -> OperationDescriptor | None:
        return self._operations.get(operation_id)

    def get_by_name(self, name: str) -> OperationDescriptor | None:
        operation_id = self._by_name.get(name)
        if operation_id is None:
            return None
        return self._operations.get(operation_id)

    def __contains__(self, operation_id: object) -> bool:
        return operation_id in self._operations

    def __iter__(self) -> Iterator[OperationDescriptor]:
        return iter(self._operations.values())

    def __len__(self) -> int:
        return len(self._operations)

    def builtin_function_names(self) -> frozenset[str]:
        return frozenset(op.name for op in self._operations.values() if op.parse.role == ParseRole.FUNCTION)

    def binary_operators(self) -> dict[str, ParseSpec]:
        return {
            op.parse.symbol: op.parse
            for op in self._operations.values()
            if op.parse.role == ParseRole.BINARY and op.parse.symbol is not None
        }

    def unary_operators(self) -> frozenset[str]:
        return frozenset(
            op.parse.symbol
            for op in self._operations.values()
            if op.parse.role == ParseRole.UNARY and op.parse.symbol is not None
        )

    def normalization_rules(self) -> tuple[RewriteRule, ...]:
        rules: list[RewriteRule] = []
        for op in self._operations.values():
            rules.extend(op.syntax.aliases)
            if op.syntax.latex != op.syntax.normalized:
                rules.append(_template_rule(op.syntax.latex, op.syntax.normalized))
        # stable sort keeps registration order among equal priorities
        return tuple(sorted(rules, key=lambda rule: rule.priority))

    def keyboard_items(self) -> list[KeyboardItem]:
        items: list[KeyboardItem] = []
        for op in self._operations.values():
            if op.ui.hidden:
                continue
            items.append(
                KeyboardItem(
                    id=op.id,
                    display_template=op.syntax.latex,
                    insert_template=op.syntax.insert_template or op.syntax.latex,
                    normalized=op.name,
                    description=op.ui.description,
                    category=op.ui.category,
                    example=op.ui.example,
                )
            )
        return items

    def find_signature(self, operation_id: str, arg_types: Sequence[MathType]) -> SignatureMatch | None:
        op = self._operations.get(operation_id)
        if op is None:
            return None
        for index, signature in enumerate(op.signatures):
            if _signature_accepts(signature, arg_types):
                return SignatureMatch(descriptor=op, index=index)
        return None

    def execute(
        self,
        operation_id: str,
        args: Sequence[Value],
        context: "DefinitionContext | None" = None,
    ) -> Value:
        op = self._operations.get(operation_id)
        if op is None:
            raise UnknownOperationError(f"Unknown operation: {operation_id}")
        arg_types = [math_type_of(arg) for arg in args]
        if self.find_signature(operation_id, arg_types) is None:
            shown = ", ".join(t.value for t in arg_types) or "no arguments"
            raise TypeMismatchError(f"No signature of '{op.name}' accepts ({shown})")
        result = op.evaluate(tuple(args), context)
        validate_value(result, where=f"{op.name} result")
        return result


@lru_cache(maxsize=1)
def default_registry() -> OperationRegistry:
    """Process-wide registry populated with every built-in descriptor and sealed."""
    from .operations import register_all

    registry = OperationRegistry()
    register_all(registry)
    registry.seal()
    return registry
