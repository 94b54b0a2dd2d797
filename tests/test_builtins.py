from __future__ import annotations

import importlib.util
import math
import unittest


JAX_AVAILABLE = importlib.util.find_spec("jax") is not None


def _run(source: str):
    from mathcore.evaluator import evaluate
    from mathcore.parser import parse

    return evaluate(parse(source))


def _numbers(value) -> list[float]:
    return [item.value for item in value.elements]


@unittest.skipUnless(JAX_AVAILABLE, "jax is required for signal and statistics builtins")
class SignalBuiltinTests(unittest.TestCase):
    def test_fft_bins_collapse_to_numbers_when_real(self) -> None:
        from mathcore.values import ComplexValue, NumberValue

        spectrum = _run("fft([1, 0, 1, 0])")
        self.assertTrue(all(isinstance(item, NumberValue) for item in spectrum.elements))
        shifted = _run("fft([0, 1, 0, 0])")
        self.assertIsInstance(shifted.elements[1], ComplexValue)
        self.assertAlmostEqual(shifted.elements[1].imag, -1.0, places=9)

    def test_fft_complex_keeps_every_bin_complex(self) -> None:
        from mathcore.values import ComplexValue, MathType

        spectrum = _run("fft_complex([1, 2, 3, 4])")
        self.assertEqual(spectrum.element_type, MathType.COMPLEX)
        self.assertTrue(all(isinstance(item, ComplexValue) for item in spectrum.elements))
        self.assertAlmostEqual(spectrum.elements[0].real, 10.0, places=9)

    def test_ifft_restores_samples(self) -> None:
        restored = _numbers(_run("ifft(fft([1, 2, 3, 4]))"))
        for got, expected in zip(restored, (1.0, 2.0, 3.0, 4.0)):
            self.assertAlmostEqual(got, expected, places=9)

    def test_magnitude_and_phase(self) -> None:
        self.assertAlmostEqual(_run("magnitude(3+4i)").value, 5.0, places=12)
        phases = _numbers(_run("phase([1, i, -1])"))
        for got, expected in zip(phases, (0.0, math.pi / 2, math.pi)):
            self.assertAlmostEqual(got, expected, places=12)

    def test_convolve(self) -> None:
        result = _numbers(_run("convolve([1, 1], [1, 1])"))
        self.assertEqual(len(result), 3)
        for got, expected in zip(result, (1.0, 2.0, 1.0)):
            self.assertAlmostEqual(got, expected, places=9)

    def test_z_and_laplace_transforms(self) -> None:
        from mathcore.errors import DomainError

        self.assertAlmostEqual(_run("z_transform([1, 2, 3], 2)").value, 2.75, places=12)
        self.assertAlmostEqual(_run("laplace_transform([1, 1, 1], 0)").value, 3.0, places=12)
        self.assertAlmostEqual(_run("laplace_transform([1, 1, 1], 0, 0.5)").value, 1.5, places=12)
        with self.assertRaises(DomainError):
            _run("laplace_transform([1, 1, 1], 0, 0)")


@unittest.skipUnless(JAX_AVAILABLE, "jax is required for signal and statistics builtins")
class StatisticsBuiltinTests(unittest.TestCase):
    def test_list_reductions(self) -> None:
        cases = [
            ("sum([1, 2, 3])", 6.0),
            ("mean([1, 2, 3])", 2.0),
            ("min([3, 1, 2])", 1.0),
            ("max([3, 1, 2])", 3.0),
            ("stdev([2, 4, 4, 4, 5, 5, 7, 9])", 2.0),
            ("sum([])", 0.0),
        ]
        for source, expected in cases:
            with self.subTest(source=source):
                self.assertAlmostEqual(_run(source).value, expected, places=9)

    def test_empty_reductions_are_domain_errors(self) -> None:
        from mathcore.errors import DomainError

        for name in ("mean", "min", "max", "variance", "stdev"):
            with self.subTest(name=name):
                with self.assertRaises(DomainError):
                    _run(f"{name}([])")

    def test_normal_distribution(self) -> None:
        from mathcore.errors import DomainError
        from mathcore.values import DistributionValue

        dist = _run("normal(0, 1)")
        self.assertIsInstance(dist, DistributionValue)
        self.assertEqual(dist.param("stdev"), 1.0)
        self.assertAlmostEqual(_run("pdf(normal(0, 1), 0)").value, 0.3989422804, places=9)
        self.assertAlmostEqual(_run("cdf(normal(0, 1), 0)").value, 0.5, places=12)
        self.assertAlmostEqual(_run("cdf(normal(1, 2), 1 + 2*1.959963984540054)").value, 0.975, places=6)
        with self.assertRaises(DomainError):
            _run("normal(0, -1)")


@unittest.skipUnless(JAX_AVAILABLE, "jax is required for special functions")
class MathematicalBuiltinTests(unittest.TestCase):
    def test_special_functions(self) -> None:
        from mathcore.errors import DomainError

        self.assertAlmostEqual(_run("erf(0)").value, 0.0, places=12)
        self.assertAlmostEqual(_run("gamma(5)").value, 24.0, places=9)
        self.assertAlmostEqual(_run("gamma(0.5)").value, math.sqrt(math.pi), places=9)
        with self.assertRaises(DomainError):
            _run("gamma(0)")

    def test_rounding_logs_and_exponentials(self) -> None:
        cases = [
            ("floor(2.7)", 2.0),
            ("ceil(2.1)", 3.0),
            ("round(2.5)", 3.0),
            ("log(100)", 2.0),
            ("ln(e)", 1.0),
            ("exp(0)", 1.0),
            ("abs(-3)", 3.0),
        ]
        for source, expected in cases:
            with self.subTest(source=source):
                self.assertAlmostEqual(_run(source).value, expected, places=12)
        self.assertEqual(_run("exp(1000)").value, math.inf)

    def test_negative_logarithm_widens_to_complex(self) -> None:
        from mathcore.values import ComplexValue

        result = _run("ln(-1)")
        self.assertIsInstance(result, ComplexValue)
        self.assertAlmostEqual(result.imag, math.pi, places=12)


@unittest.skipUnless(JAX_AVAILABLE, "jax is required for the mathcore package")
class ComplexAndPointBuiltinTests(unittest.TestCase):
    def test_complex_accessors(self) -> None:
        from mathcore.values import ComplexValue, NumberValue

        self.assertEqual(_run("real(3+4i)"), NumberValue(3.0))
        self.assertEqual(_run("imag(3+4i)"), NumberValue(4.0))
        self.assertEqual(_run("conj(3+4i)"), ComplexValue(3.0, -4.0))
        self.assertEqual(_run("conj(2)"), NumberValue(2.0))
        self.assertAlmostEqual(_run("arg(i)").value, math.pi / 2, places=12)

    def test_points_and_vectors(self) -> None:
        from mathcore.errors import TypeMismatchError
        from mathcore.values import NumberValue, Vector3DValue

        self.assertEqual(_run("dot((1,2), (3,4))"), NumberValue(11.0))
        self.assertEqual(_run("cross((1,0), (0,1))"), NumberValue(1.0))
        self.assertEqual(_run("cross(vector(1,0,0), vector(0,1,0))"), Vector3DValue(0.0, 0.0, 1.0))
        self.assertEqual(_run("distance((1,2,2), (0,0,0))"), NumberValue(3.0))
        self.assertEqual(_run("length((1, 2, 3))"), NumberValue(3.0))
        with self.assertRaises(TypeMismatchError):
            _run("dot((1,2), (1,2,3))")

    def test_polygon_needs_three_points(self) -> None:
        from mathcore.errors import TypeMismatchError
        from mathcore.values import PolygonValue

        square = _run("polygon((0,0), (1,0), (1,1), (0,1))")
        self.assertIsInstance(square, PolygonValue)
        self.assertEqual(len(square.vertices), 4)
        with self.assertRaises(TypeMismatchError):
            _run("polygon((0,0), (1,0))")


if __name__ == "__main__":
    unittest.main()
