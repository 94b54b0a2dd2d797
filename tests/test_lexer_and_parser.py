from __future__ import annotations

import importlib.util
import unittest


JAX_AVAILABLE = importlib.util.find_spec("jax") is not None


@unittest.skipUnless(JAX_AVAILABLE, "jax is required for the mathcore package")
class LexerTests(unittest.TestCase):
    def _tokens(self, source: str, *, with_spans: bool = False):
        from mathcore.lexer import tokenize

        if with_spans:
            return [(tok.kind, tok.text, tok.pos, tok.end) for tok in tokenize(source) if tok.kind != "EOF"]
        return [(tok.kind, tok.text) for tok in tokenize(source) if tok.kind != "EOF"]

    def test_token_golden_with_implicit_multiplication(self) -> None:
        self.assertEqual(
            self._tokens("2x+sin(y)"),
            [
                ("NUMBER", "2"),
                ("OP", "*"),
                ("IDENT", "x"),
                ("OP", "+"),
                ("IDENT", "sin"),
                ("LPAREN", "("),
                ("IDENT", "y"),
                ("RPAREN", ")"),
            ],
        )

    def test_spans_are_half_open(self) -> None:
        self.assertEqual(
            self._tokens("ab <= 1.5", with_spans=True),
            [("IDENT", "ab", 0, 2), ("OP", "<=", 3, 5), ("NUMBER", "1.5", 6, 9)],
        )

    def test_two_character_operators_take_priority(self) -> None:
        kinds = [text for _, text in self._tokens("a>=b==c!=d&&e||f")]
        self.assertEqual(kinds, ["a", ">=", "b", "==", "c", "!=", "d", "&&", "e", "||", "f"])

    def test_imaginary_unit_and_prefix_split(self) -> None:
        self.assertEqual(self._tokens("i"), [("IMAGINARY", "i")])
        self.assertEqual(self._tokens("ix"), [("IMAGINARY", "i"), ("OP", "*"), ("IDENT", "x")])
        # followed by a parenthesis the pair stays one name
        self.assertEqual(self._tokens("if(")[0], ("IDENT", "if"))

    def test_call_syntax_and_name_runs_get_no_implicit_operator(self) -> None:
        self.assertEqual(self._tokens("f(x)")[:2], [("IDENT", "f"), ("LPAREN", "(")])
        self.assertEqual(self._tokens("a b"), [("IDENT", "a"), ("IDENT", "b")])
        self.assertEqual(
            self._tokens("(1)(2)"),
            [
                ("LPAREN", "("),
                ("NUMBER", "1"),
                ("RPAREN", ")"),
                ("OP", "*"),
                ("LPAREN", "("),
                ("NUMBER", "2"),
                ("RPAREN", ")"),
            ],
        )

    def test_unknown_characters_become_operator_tokens(self) -> None:
        self.assertEqual(self._tokens("1 $ 2"), [("NUMBER", "1"), ("OP", "$"), ("NUMBER", "2")])

    def test_partial_symbol_starts_identifiers(self) -> None:
        self.assertEqual(self._tokens("∂/∂x"), [("IDENT", "∂"), ("OP", "/"), ("IDENT", "∂x")])


@unittest.skipUnless(JAX_AVAILABLE, "jax is required for the mathcore package")
class ParserTests(unittest.TestCase):
    def test_multiplicative_binds_tighter_than_additive(self) -> None:
        from mathcore.ast import Binary, Number
        from mathcore.parser import parse

        self.assertEqual(
            parse("2+3*4"),
            Binary("+", Number(2.0), Binary("*", Number(3.0), Number(4.0))),
        )

    def test_power_is_right_associative(self) -> None:
        from mathcore.ast import Binary, Number
        from mathcore.parser import parse

        self.assertEqual(
            parse("2^3^2"),
            Binary("^", Number(2.0), Binary("^", Number(3.0), Number(2.0))),
        )

    def test_subtraction_is_left_associative(self) -> None:
        from mathcore.ast import Binary, Number
        from mathcore.parser import parse

        self.assertEqual(
            parse("5-2-1"),
            Binary("-", Binary("-", Number(5.0), Number(2.0)), Number(1.0)),
        )

    def test_logical_levels_sit_below_comparison(self) -> None:
        from mathcore.ast import Binary, Number, Variable
        from mathcore.parser import parse

        self.assertEqual(
            parse("a && b || x < 1"),
            Binary(
                "||",
                Binary("&&", Variable("a"), Variable("b")),
                Binary("<", Variable("x"), Number(1.0)),
            ),
        )

    def test_unary_prefixes(self) -> None:
        from mathcore.ast import Unary, Variable
        from mathcore.parser import parse

        self.assertEqual(parse("-x"), Unary("-", Variable("x")))
        self.assertEqual(parse("!x"), Unary("!", Variable("x")))

    def test_list_and_tuple_literals(self) -> None:
        from mathcore.ast import Call, ListLiteral, Number
        from mathcore.parser import parse

        self.assertEqual(parse("[1, 2]"), ListLiteral((Number(1.0), Number(2.0))))
        self.assertEqual(parse("[]"), ListLiteral(()))
        self.assertEqual(parse("(1, 2)"), Call("point", (Number(1.0), Number(2.0))))
        self.assertEqual(parse("(1, 2, 3)"), Call("point3d", (Number(1.0), Number(2.0), Number(3.0))))

    def test_braces_group_like_parentheses(self) -> None:
        from mathcore.parser import parse

        self.assertEqual(parse("{1+2}*3"), parse("(1+2)*3"))

    def test_derivative_and_partial_syntax(self) -> None:
        from mathcore.ast import Binary, Derivative, Number, Partial, Variable
        from mathcore.parser import parse

        self.assertEqual(parse("d/dx(x^2)"), Derivative("x", Binary("^", Variable("x"), Number(2.0))))
        self.assertEqual(parse("∂/∂y(x*y)"), Partial("y", Binary("*", Variable("x"), Variable("y"))))

    def test_unknown_name_before_parenthesis_multiplies(self) -> None:
        from mathcore.ast import Binary, Number, Variable
        from mathcore.parser import parse

        self.assertEqual(parse("a(2)"), Binary("*", Variable("a"), Number(2.0)))

    def test_context_functions_become_calls(self) -> None:
        from mathcore.ast import Call, Number
        from mathcore.context import build_context
        from mathcore.parser import parse

        context = build_context(["f(x) = x^2"])
        self.assertEqual(parse("f(3)", context), Call("f", (Number(3.0),)))

    def test_bare_builtin_application(self) -> None:
        from mathcore.ast import Call, Variable
        from mathcore.parser import parse

        self.assertEqual(parse("sin x"), Call("sin", (Variable("x"),)))

    def test_bare_builtin_takes_any_primary(self) -> None:
        from mathcore.ast import Binary, Call, ListLiteral, Number, Variable
        from mathcore.parser import parse

        cases = [
            ("sin 2", Call("sin", (Number(2.0),))),
            ("sqrt [4]", Call("sqrt", (ListLiteral((Number(4.0),)),))),
            ("sum [1, 2]", Call("sum", (ListLiteral((Number(1.0), Number(2.0))),))),
            ("sin 2x", Binary("*", Call("sin", (Number(2.0),)), Variable("x"))),
            ("x 2", Binary("*", Variable("x"), Number(2.0))),
        ]
        for source, expected in cases:
            with self.subTest(source=source):
                self.assertEqual(parse(source), expected)

    def test_parse_errors_carry_spans(self) -> None:
        from mathcore.parser import ParseError, parse

        for source in ("1 +", "(1", "1 )", "()", "(1, 2, 3, 4)", "$"):
            with self.subTest(source=source):
                with self.assertRaises(ParseError) as ctx:
                    parse(source)
                self.assertIn("at span [", str(ctx.exception))

    def test_nesting_limit_is_a_parse_error(self) -> None:
        from mathcore.parser import MAX_DEPTH, ParseError, parse

        source = "(" * (MAX_DEPTH + 5) + "1" + ")" * (MAX_DEPTH + 5)
        with self.assertRaises(ParseError):
            parse(source)


if __name__ == "__main__":
    unittest.main()
