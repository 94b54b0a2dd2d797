from __future__ import annotations

import importlib.util
import math
import unittest


JAX_AVAILABLE = importlib.util.find_spec("jax") is not None


def _run(source: str, bindings=None, definitions=()):
    from mathcore.context import build_context
    from mathcore.evaluator import evaluate
    from mathcore.parser import parse

    context = build_context(list(definitions)) if definitions else None
    return evaluate(parse(source, context), bindings, context)


@unittest.skipUnless(JAX_AVAILABLE, "jax is required for evaluator tests")
class EvaluatorScenarioTests(unittest.TestCase):
    def test_precedence_scenario(self) -> None:
        from mathcore.values import NumberValue

        self.assertEqual(_run("2+3*4"), NumberValue(14.0))

    def test_trig_scenario(self) -> None:
        self.assertAlmostEqual(_run("sin(pi/2)").value, 1.0, places=9)

    def test_sqrt_of_negative_widens_to_complex(self) -> None:
        from mathcore.values import ComplexValue

        result = _run("sqrt(-4)")
        self.assertIsInstance(result, ComplexValue)
        self.assertAlmostEqual(result.real, 0.0, places=12)
        self.assertAlmostEqual(result.imag, 2.0, places=12)

    def test_fft_magnitude_scenario(self) -> None:
        from mathcore.values import ListValue, NumberValue

        result = _run("magnitude(fft([1,0,1,0]))")
        self.assertIsInstance(result, ListValue)
        self.assertEqual(len(result.elements), 4)
        self.assertTrue(all(isinstance(item, NumberValue) for item in result.elements))
        magnitudes = [item.value for item in result.elements]
        # an alternating sequence puts its energy in the DC and Nyquist bins
        for got, expected in zip(magnitudes, (2.0, 0.0, 2.0, 0.0)):
            self.assertAlmostEqual(got, expected, places=9)

    def test_user_function_scenario(self) -> None:
        from mathcore.values import NumberValue

        self.assertEqual(_run("f(3)", definitions=["f(x)=x^2"]), NumberValue(9.0))

    def test_derivative_function_scenario(self) -> None:
        from mathcore.evaluator import apply_function
        from mathcore.values import FunctionValue

        derivative = _run("D(sin(x))")
        self.assertIsInstance(derivative, FunctionValue)
        self.assertEqual(derivative.params, ("x",))
        self.assertAlmostEqual(apply_function(derivative, [0.0]).value, 1.0, places=9)


@unittest.skipUnless(JAX_AVAILABLE, "jax is required for evaluator tests")
class EvaluatorSemanticsTests(unittest.TestCase):
    def test_symbolic_numeric_duality(self) -> None:
        from mathcore.evaluator import apply_function
        from mathcore.values import FunctionValue, NumberValue

        self.assertEqual(_run("abs(3)"), NumberValue(3.0))
        symbolic = _run("abs(x)")
        self.assertIsInstance(symbolic, FunctionValue)
        self.assertEqual(symbolic.params, ("x",))
        self.assertEqual(apply_function(symbolic, [-2.5]), NumberValue(2.5))
        self.assertEqual(_run("abs(x)", {"x": -4}), NumberValue(4.0))

    def test_symbolic_call_keeps_bound_values(self) -> None:
        from mathcore.evaluator import apply_function
        from mathcore.values import FunctionValue

        symbolic = _run("sin(a*x)", {"a": 2.0})
        self.assertIsInstance(symbolic, FunctionValue)
        self.assertEqual(symbolic.params, ("x",))
        self.assertAlmostEqual(apply_function(symbolic, [1.0]).value, math.sin(2.0), places=9)

        from_parameter = _run("g(3)", definitions=("g(a) = sin(a*x)",))
        self.assertIsInstance(from_parameter, FunctionValue)
        self.assertEqual(from_parameter.params, ("x",))
        self.assertAlmostEqual(apply_function(from_parameter, [0.5]).value, math.sin(1.5), places=9)

    def test_constants_and_imaginary_unit(self) -> None:
        from mathcore.values import ComplexValue

        self.assertAlmostEqual(_run("e").value, math.e, places=12)
        self.assertEqual(_run("(1+2i)*(3-i)"), ComplexValue(5.0, 5.0))
        self.assertEqual(_run("1 + (2+3i)"), ComplexValue(3.0, 3.0))

    def test_bindings_shadow_context(self) -> None:
        from mathcore.values import NumberValue

        self.assertEqual(_run("a * 2", {"a": 5}, definitions=["a = 1"]), NumberValue(10.0))
        self.assertEqual(_run("a * 2", definitions=["a = 1"]), NumberValue(2.0))

    def test_list_variables_are_evaluated_on_demand(self) -> None:
        from mathcore.values import NumberValue

        self.assertEqual(_run("sum(L)", definitions=["L = [1, 2, 3]"]), NumberValue(6.0))

    def test_partial_application(self) -> None:
        from mathcore.evaluator import apply_function
        from mathcore.values import NumberValue, PartialValue

        definitions = ["g(a, b) = a - b"]
        partial = _run("g(10)", definitions=definitions)
        self.assertIsInstance(partial, PartialValue)
        self.assertEqual(partial.remaining_params, ("b",))
        self.assertEqual(apply_function(partial, [4]), NumberValue(6.0))
        # remaining parameters may come from the caller's bindings
        self.assertEqual(_run("g(10)", {"b": 3}, definitions=definitions), NumberValue(7.0))
        # explicit arguments win over a colliding binding
        self.assertEqual(_run("g(10)", {"a": 1, "b": 3}, definitions=definitions), NumberValue(7.0))

    def test_function_values_in_context_are_callable(self) -> None:
        from mathcore.values import NumberValue

        self.assertEqual(_run("h(2) + 1", definitions=["h(t) = 3*t"]), NumberValue(7.0))

    def test_parameter_count_errors(self) -> None:
        from mathcore.errors import InvalidParameterCountError

        with self.assertRaises(InvalidParameterCountError) as ctx:
            _run("f(1, 2)", definitions=["f(x) = x"])
        self.assertEqual((ctx.exception.expected, ctx.exception.received), (1, 2))
        self.assertIn("`f` expects 1 parameter, but received 2", str(ctx.exception))

    def test_conditionals_short_circuit(self) -> None:
        from mathcore.values import NumberValue

        self.assertEqual(_run("if(1 > 0, 2, 1/0)"), NumberValue(2.0))
        self.assertEqual(_run("if(0, 1/0, 3)"), NumberValue(3.0))
        rule = "piecewise(x < 0, -1, x > 0, 1, 0)"
        for x, expected in ((-3.0, -1.0), (0.0, 0.0), (2.0, 1.0)):
            with self.subTest(x=x):
                self.assertEqual(_run(rule, {"x": x}), NumberValue(expected))

    def test_real_valued_complex_conditions(self) -> None:
        from mathcore.errors import TypeMismatchError
        from mathcore.values import BooleanValue, NumberValue

        self.assertEqual(_run("!((1+i)-i)"), BooleanValue(False))
        self.assertEqual(_run("if((1+i)-i, 1, 0)"), NumberValue(1.0))
        self.assertEqual(_run("piecewise((2+i)-(2+i), 5, 7)"), NumberValue(7.0))
        with self.assertRaises(TypeMismatchError):
            _run("!(i)")
        with self.assertRaises(TypeMismatchError):
            _run("if(i, 1, 0)")

    def test_piecewise_arity(self) -> None:
        from mathcore.errors import DomainError

        with self.assertRaises(DomainError):
            _run("piecewise(1, 2)")

    def test_integrate_and_curve(self) -> None:
        from mathcore.evaluator import apply_function
        from mathcore.values import Curve3DValue, FunctionValue, NumberValue

        self.assertAlmostEqual(_run("integrate(x^2, 0, 3)").value, 9.0, places=6)
        self.assertAlmostEqual(_run("integrate(sin(t), 0, pi)").value, 2.0, places=6)
        self.assertAlmostEqual(_run("integrate(f, 0, 1)", definitions=["f(x) = 2*x"]).value, 1.0, places=6)
        curve = _run("curve(2*t-1)")
        self.assertIsInstance(curve, FunctionValue)
        self.assertEqual(apply_function(curve, [3]), NumberValue(5.0))
        helix = _run("curve((cos(t), sin(t), t))")
        self.assertIsInstance(helix, Curve3DValue)
        self.assertEqual(helix.parameter, "t")
        self.assertEqual(apply_function(helix.components[2], [1.5]), NumberValue(1.5))

    def test_derivative_nodes_become_functions(self) -> None:
        from mathcore.evaluator import apply_function
        from mathcore.values import FunctionValue, NumberValue

        result = _run("d/dx(x^3)")
        self.assertIsInstance(result, FunctionValue)
        self.assertEqual(result.name, "d/dx")
        self.assertEqual(apply_function(result, [2]), NumberValue(12.0))

    def test_points_lists_and_statistics(self) -> None:
        from mathcore.values import NumberValue, PointValue, PolygonValue, Vector3DValue

        self.assertEqual(_run("(1, 2) + (3, 4)"), PointValue(4.0, 6.0))
        self.assertEqual(_run("dot((1,2), (3,4))"), NumberValue(11.0))
        self.assertEqual(_run("cross((1,0,0), (0,1,0))"), Vector3DValue(0.0, 0.0, 1.0))
        self.assertEqual(_run("distance((0,0), (3,4))"), NumberValue(5.0))
        polygon = _run("polygon((0,0), (1,0), (0,1))")
        self.assertIsInstance(polygon, PolygonValue)
        self.assertEqual(len(polygon.vertices), 3)
        self.assertEqual(_run("length([1, 2, 3])"), NumberValue(3.0))
        self.assertEqual(_run("mean([1, 2, 3])"), NumberValue(2.0))
        self.assertAlmostEqual(_run("variance([1, 2, 3])").value, 2.0 / 3.0, places=9)
        self.assertEqual(_run("sum([])"), NumberValue(0.0))

    def test_runtime_errors_are_classified(self) -> None:
        from mathcore.errors import DivisionByZeroError, DomainError, TypeMismatchError, UndefinedIdentifierError

        with self.assertRaises(DivisionByZeroError):
            _run("1/0")
        with self.assertRaises(DomainError):
            _run("ln(0)")
        with self.assertRaises(DomainError):
            _run("mean([])")
        with self.assertRaises(TypeMismatchError):
            _run("sqrt([1, 2])")
        with self.assertRaises(UndefinedIdentifierError) as ctx:
            _run("q + 1")
        self.assertEqual(ctx.exception.identifier, "q")

    def test_undefined_function_suggestions(self) -> None:
        from mathcore.errors import UndefinedIdentifierError
        from mathcore.evaluator import evaluate
        from mathcore.ast import Call, Number

        with self.assertRaises(UndefinedIdentifierError) as ctx:
            evaluate(Call("sinn", (Number(1.0),)))
        self.assertIn("sin", ctx.exception.suggestions)

    def test_circular_context_variable(self) -> None:
        from mathcore.ast import Variable
        from mathcore.context import DefinitionContext
        from mathcore.errors import CircularDependencyError
        from mathcore.evaluator import evaluate

        context = DefinitionContext()
        context.variables["a"] = Variable("a")
        with self.assertRaises(CircularDependencyError):
            evaluate(Variable("a"), context=context)

    def test_nesting_depth_is_bounded(self) -> None:
        from mathcore.ast import Number, Unary
        from mathcore.errors import NestingDepthError
        from mathcore.evaluator import evaluate
        from mathcore.parser import MAX_DEPTH

        expr = Number(1.0)
        for _ in range(MAX_DEPTH + 10):
            expr = Unary("-", expr)
        with self.assertRaises(NestingDepthError):
            evaluate(expr)

    def test_evaluation_is_deterministic(self) -> None:
        first = _run("fft([1, 2, 3, 4])")
        second = _run("fft([1, 2, 3, 4])")
        self.assertEqual(first, second)

    def test_evaluate_to_number(self) -> None:
        from mathcore.errors import TypeMismatchError
        from mathcore.evaluator import evaluate_to_number
        from mathcore.parser import parse

        self.assertEqual(evaluate_to_number(parse("x^2"), 3.0), 9.0)
        self.assertEqual(evaluate_to_number(parse("abs(x)"), -2.0), 2.0)
        self.assertEqual(evaluate_to_number(parse("D(x^3)"), 2.0), 12.0)
        with self.assertRaises(TypeMismatchError):
            evaluate_to_number(parse("[1, 2]"), 0.0)

    def test_bindings_must_be_values(self) -> None:
        from mathcore.ast import Variable
        from mathcore.evaluator import evaluate

        with self.assertRaises(TypeError):
            evaluate(Variable("x"), {"x": object()})


if __name__ == "__main__":
    unittest.main()
