"""Normalize, parse and evaluate one expression against optional definitions."""

from __future__ import annotations

import argparse
import json
import logging

from mathcore import DefinitionContext, ExpressionEngine, MathError, ParseError
from mathcore.ast import to_source
from mathcore.values import FunctionValue, PartialValue, to_python


def _parse_binding(raw: str) -> tuple[str, float]:
    name, sep, value = raw.partition("=")
    if not sep or not name.strip():
        raise argparse.ArgumentTypeError(f"expected NAME=NUMBER, got {raw!r}")
    try:
        return name.strip(), float(value)
    except ValueError as err:
        raise argparse.ArgumentTypeError(f"binding {name.strip()!r} is not a number") from err


def _build_context(engine: ExpressionEngine, definitions: list[str]) -> DefinitionContext:
    return engine.build_context([engine.normalize(text) for text in definitions])


def _describe(value: object) -> object:
    if isinstance(value, FunctionValue):
        return f"{value.name}({', '.join(value.params)}) = {to_source(value.body)}"
    if isinstance(value, PartialValue):
        return f"{value.function.name} awaiting ({', '.join(value.remaining_params)})"
    converted = to_python(value)  # type: ignore[arg-type]
    if isinstance(converted, complex):
        return {"real": converted.real, "imag": converted.imag}
    if isinstance(converted, list):
        return [_describe_item(item) for item in converted]
    if isinstance(converted, (int, float, bool, tuple)):
        return converted
    return repr(converted)


def _describe_item(item: object) -> object:
    if isinstance(item, complex):
        return {"real": item.real, "imag": item.imag}
    return item


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("expression", help="expression in LaTeX-flavoured or plain text")
    parser.add_argument(
        "--define",
        action="append",
        default=[],
        help="definition such as 'a = 2' or 'f(x) = x^2'; may be repeated",
    )
    parser.add_argument(
        "--bind",
        action="append",
        default=[],
        type=_parse_binding,
        help="local binding NAME=NUMBER; may be repeated",
    )
    parser.add_argument("--at", type=float, default=None, help="evaluate to a number at x")
    parser.add_argument("--inspect", action="store_true", help="print normalized text, tokens and tree")
    parser.add_argument("--verbose", action="store_true", help="enable debug logging")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)
    engine = ExpressionEngine()
    context = _build_context(engine, args.define)

    if args.inspect:
        report = engine.inspect(args.expression, context)
        print(f"normalized: {report.normalized}")
        print(f"tokens: {' '.join(tok.text or tok.kind for tok in report.tokens)}")
        if report.error is not None:
            print(f"error: {report.error}")
            return 1
        print(f"tree: {to_source(report.ast)}")  # type: ignore[arg-type]
        print(f"free variables: {report.has_free_variables}")
        return 0

    try:
        if args.at is not None:
            result: object = engine.evaluate_to_number(engine.parse(args.expression, context), args.at, context)
        else:
            value = engine.evaluate_expression(args.expression, dict(args.bind), context)
            result = _describe(value)
    except (ParseError, MathError) as err:
        print(f"error: {err}")
        return 1
    print(json.dumps(result))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
