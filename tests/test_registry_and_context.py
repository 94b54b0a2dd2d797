from __future__ import annotations

import importlib.util
import unittest


JAX_AVAILABLE = importlib.util.find_spec("jax") is not None


@unittest.skipUnless(JAX_AVAILABLE, "jax is required for the mathcore package")
class RegistryTests(unittest.TestCase):
    def test_default_registry_is_sealed_singleton(self) -> None:
        from mathcore.errors import RegistrySealedError
        from mathcore.registry import default_registry

        registry = default_registry()
        self.assertIs(registry, default_registry())
        self.assertTrue(registry.sealed)
        with self.assertRaises(RegistrySealedError):
            registry.register(registry.get("sin"))

    def test_execute_rejects_results_that_are_not_values(self) -> None:
        from mathcore.operations._common import N, function, sig
        from mathcore.registry import Category, OperationRegistry
        from mathcore.values import NumberValue

        registry = OperationRegistry()
        registry.register(
            function(
                "raw_float",
                signatures=(sig(N, out=N),),
                evaluate=lambda args, context: args[0].value * 2,
                description="Returns a bare float",
                category=Category.MATHEMATICAL,
            )
        )
        with self.assertRaisesRegex(TypeError, "raw_float result"):
            registry.execute("raw_float", (NumberValue(1.5),))

    def test_catalogue_covers_every_category(self) -> None:
        from mathcore.registry import default_registry

        registry = default_registry()
        for operation_id in (
            "add",
            "negate",
            "less_than",
            "and",
            "not",
            "atan",
            "gamma",
            "stdev",
            "conj",
            "polygon",
            "laplace_transform",
            "derivative",
            "piecewise",
            "cdf",
        ):
            with self.subTest(operation_id=operation_id):
                self.assertIn(operation_id, registry)

    def test_builtin_function_names_use_display_names(self) -> None:
        from mathcore.registry import default_registry

        names = default_registry().builtin_function_names()
        self.assertIn("D", names)
        self.assertIn("sin", names)
        self.assertIn("point3d", names)
        self.assertNotIn("derivative", names)
        self.assertNotIn("+", names)

    def test_first_matching_signature_wins(self) -> None:
        from mathcore.registry import default_registry
        from mathcore.values import MathType

        registry = default_registry()
        self.assertEqual(registry.find_signature("sqrt", [MathType.NUMBER]).index, 0)
        self.assertEqual(registry.find_signature("sqrt", [MathType.COMPLEX]).index, 1)
        self.assertIsNone(registry.find_signature("sqrt", [MathType.LIST]))
        self.assertIsNone(registry.find_signature("missing", [MathType.NUMBER]))

    def test_variadic_signatures(self) -> None:
        from mathcore.registry import default_registry
        from mathcore.values import MathType

        registry = default_registry()
        points = [MathType.POINT] * 4
        self.assertIsNotNone(registry.find_signature("polygon", points))
        self.assertIsNone(registry.find_signature("polygon", points[:2]))
        self.assertIsNotNone(registry.find_signature("piecewise", [MathType.BOOLEAN, MathType.NUMBER, MathType.NUMBER]))

    def test_type_compatibility_table(self) -> None:
        from mathcore.registry import is_type_compatible
        from mathcore.values import MathType

        self.assertTrue(is_type_compatible(MathType.NUMBER, MathType.COMPLEX))
        self.assertFalse(is_type_compatible(MathType.COMPLEX, MathType.NUMBER))
        self.assertTrue(is_type_compatible(MathType.POINT, MathType.LIST))
        self.assertTrue(is_type_compatible(MathType.POINT3D, MathType.LIST))
        self.assertTrue(is_type_compatible(MathType.FUNCTION, MathType.UNKNOWN))
        self.assertFalse(is_type_compatible(MathType.BOOLEAN, MathType.NUMBER))

    def test_registering_twice_keeps_matching_stable(self) -> None:
        from mathcore.registry import OperationRegistry, default_registry
        from mathcore.values import MathType

        descriptor = default_registry().get("abs")
        registry = OperationRegistry()
        registry.register(descriptor)
        before = registry.find_signature("abs", [MathType.COMPLEX])
        registry.register(descriptor)
        self.assertEqual(len(registry), 1)
        self.assertEqual(registry.find_signature("abs", [MathType.COMPLEX]), before)

    def test_execute_checks_signatures(self) -> None:
        from mathcore.errors import TypeMismatchError, UnknownOperationError
        from mathcore.registry import default_registry
        from mathcore.values import BooleanValue, NumberValue

        registry = default_registry()
        self.assertEqual(registry.execute("sqrt", [NumberValue(16.0)]), NumberValue(4.0))
        with self.assertRaises(TypeMismatchError):
            registry.execute("sqrt", [BooleanValue(True)])
        with self.assertRaises(UnknownOperationError):
            registry.execute("missing", [])

    def test_normalization_rules_sorted_by_priority(self) -> None:
        from mathcore.registry import default_registry

        priorities = [rule.priority for rule in default_registry().normalization_rules()]
        self.assertTrue(priorities)
        self.assertEqual(priorities, sorted(priorities))

    def test_keyboard_items_skip_hidden_operators(self) -> None:
        from mathcore.registry import Category, default_registry

        items = {item.id: item for item in default_registry().keyboard_items()}
        self.assertIn("sin", items)
        self.assertNotIn("add", items)
        self.assertEqual(items["sin"].category, Category.TRIGONOMETRIC)
        self.assertEqual(items["point"].insert_template, "(#0, #1)")
        self.assertEqual(items["derivative"].normalized, "D")

    def test_symbolic_capability_is_per_descriptor(self) -> None:
        from mathcore.registry import default_registry

        registry = default_registry()
        self.assertTrue(registry.get("abs").symbolic_capable)
        self.assertTrue(registry.get("sin").symbolic_capable)
        self.assertFalse(registry.get("fft").symbolic_capable)


@unittest.skipUnless(JAX_AVAILABLE, "jax is required for the mathcore package")
class DefinitionContextTests(unittest.TestCase):
    def test_variables_functions_and_types(self) -> None:
        from mathcore.context import build_context
        from mathcore.values import MathType

        context = build_context(["a = 2", "f(x) = x^2 + a", "b = a * 3", {"normalized": "c = pi"}])
        self.assertEqual(context.variables["a"], 2.0)
        self.assertEqual(context.variables["b"], 6.0)
        self.assertAlmostEqual(context.variables["c"], 3.141592653589793, places=12)
        self.assertEqual(context.functions["f"].params, ("x",))
        self.assertEqual(context.type_of("f"), MathType.FUNCTION)
        self.assertEqual(context.type_of("a"), MathType.NUMBER)

    def test_multi_parameter_function(self) -> None:
        from mathcore.context import build_context

        context = build_context(["g(a, b) = a + b"])
        self.assertEqual(context.functions["g"].params, ("a", "b"))

    def test_list_definitions_stay_as_trees(self) -> None:
        from mathcore.ast import ListLiteral
        from mathcore.context import build_context
        from mathcore.values import MathType

        context = build_context(["L = [1, 2, 3]"])
        self.assertIsInstance(context.variables["L"], ListLiteral)
        self.assertEqual(context.type_of("L"), MathType.LIST)

    def test_reserved_and_self_referencing_names_are_dropped_with_warning(self) -> None:
        from mathcore.context import build_context

        with self.assertLogs("mathcore.context", level="WARNING") as logs:
            context = build_context(["x = 5", "pi = 3", "g(t) = g(t) + 1"])
        self.assertNotIn("x", context.variables)
        self.assertEqual(context.variables["pi"], 3.141592653589793)
        self.assertNotIn("g", context.functions)
        self.assertEqual(len(logs.records), 3)

    def test_malformed_and_non_constant_definitions_are_skipped(self) -> None:
        from mathcore.context import build_context

        context = build_context(["c = ", "d = 1/0", "e2 = q + 1", "k = 4", "x^2 + y^2 = 1", "a == b"])
        self.assertEqual(set(context.variables) - {"pi", "e"}, {"k"})

    def test_implicit_relations_and_splitting(self) -> None:
        from mathcore.context import is_implicit_relation, split_definition

        self.assertTrue(is_implicit_relation("x^2 + y^2 = 1"))
        self.assertFalse(is_implicit_relation("f(x) = x"))
        self.assertFalse(is_implicit_relation("x == 1"))
        self.assertEqual(split_definition("a = 1"), ("a", "1"))
        self.assertIsNone(split_definition("a = b = 1"))


@unittest.skipUnless(JAX_AVAILABLE, "jax is required for the mathcore package")
class ValidationTests(unittest.TestCase):
    def test_levenshtein(self) -> None:
        from mathcore.validation import levenshtein

        self.assertEqual(levenshtein("kitten", "sitting"), 3)
        self.assertEqual(levenshtein("", "abc"), 3)
        self.assertEqual(levenshtein("sin", "sin"), 0)

    def test_suggestions_rank_closest_first(self) -> None:
        from mathcore.validation import get_suggestions

        suggestions = get_suggestions("sinn")
        self.assertLessEqual(len(suggestions), 3)
        self.assertEqual(suggestions[0], "sin")

    def test_validate_expression_reports_undefined_identifiers(self) -> None:
        from mathcore.context import build_context
        from mathcore.validation import validate_expression

        context = build_context(["a = 1"])
        issues = validate_expression("sinn(x) + a + q", context)
        self.assertEqual([issue.identifier for issue in issues], ["sinn", "q"])
        self.assertIn("sin", issues[0].suggestions)
        self.assertEqual(issues[1].kind, "undefined_identifier")

    def test_definition_parameters_are_not_reported(self) -> None:
        from mathcore.context import build_context
        from mathcore.validation import validate_expression

        self.assertEqual(validate_expression("h(t) = t^2", build_context([])), [])

    def test_circular_dependencies(self) -> None:
        from mathcore.validation import detect_circular_dependency

        self.assertEqual(detect_circular_dependency(["a = b + 1", "b = a * 2"]), "a")
        self.assertIsNone(detect_circular_dependency(["a = 1", "b = a + 1", "f(x) = b * x"]))


if __name__ == "__main__":
    unittest.main()
