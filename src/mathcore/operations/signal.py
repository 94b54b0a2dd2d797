"""Signal-processing functions backed by :mod:`mathcore.transforms`."""

from __future__ import annotations

from .. import complex_math, transforms
from ..errors import DomainError, TypeMismatchError
from ..registry import Category, OperationRegistry
from ..values import ComplexValue, ListValue, NumberValue, Value, as_complex, complex_result
from ._common import C, L, N, complex_samples, function, number_arg, numbers_of, sig


def _bin(z: complex) -> Value:
    if complex_math.is_approximately_real(z):
        return NumberValue(float(z.real))
    return complex_result(z)


def _bins(values: list[complex]) -> ListValue:
    return ListValue(tuple(_bin(z) for z in values))


def _fft(args: tuple[Value, ...], context) -> Value:
    return _bins(transforms.fft(complex_samples(args[0], "fft")))


def _ifft(args: tuple[Value, ...], context) -> Value:
    return _bins(transforms.ifft(complex_samples(args[0], "ifft")))


def _fft_complex(args: tuple[Value, ...], context) -> Value:
    spectrum = transforms.fft(complex_samples(args[0], "fft_complex"))
    return ListValue(tuple(complex_result(z) for z in spectrum), element_type=C)


def _pointwise(where: str, fn):
    def evaluate(args: tuple[Value, ...], context) -> Value:
        arg = args[0]
        if isinstance(arg, ListValue):
            return ListValue(tuple(NumberValue(fn(z)) for z in complex_samples(arg, where)), element_type=N)
        if isinstance(arg, (NumberValue, ComplexValue)):
            return NumberValue(fn(as_complex(arg)))
        raise TypeMismatchError(f"{where} expects a List, Complex or Number")

    return evaluate


def _convolve(args: tuple[Value, ...], context) -> Value:
    result = transforms.convolve(numbers_of(args[0], "convolve"), numbers_of(args[1], "convolve"))
    return ListValue(tuple(NumberValue(v) for v in result), element_type=N)


def _z_transform(args: tuple[Value, ...], context) -> Value:
    samples = numbers_of(args[0], "z_transform")
    return _bin(transforms.z_transform(samples, as_complex(args[1])))


def _laplace_transform(args: tuple[Value, ...], context) -> Value:
    samples = numbers_of(args[0], "laplace_transform")
    step = number_arg(args[2], "laplace_transform") if len(args) > 2 else 1.0
    if step <= 0:
        raise DomainError(f"laplace_transform step must be positive, got {step:g}")
    return _bin(transforms.laplace_transform(samples, as_complex(args[1]), step))


def register(registry: OperationRegistry) -> None:
    registry.register(
        function(
            "fft",
            signatures=(sig(L, out=L),),
            evaluate=_fft,
            description="Fast Fourier Transform",
            category=Category.SIGNAL,
            example="fft([1,0,1,0])",
        )
    )
    registry.register(
        function(
            "ifft",
            signatures=(sig(L, out=L),),
            evaluate=_ifft,
            description="Inverse Fast Fourier Transform",
            category=Category.SIGNAL,
            example="ifft(fft([1,2,3,4]))",
        )
    )
    registry.register(
        function(
            "fft_complex",
            signatures=(sig(L, out=L),),
            evaluate=_fft_complex,
            description="FFT returning every bin as a complex number",
            category=Category.SIGNAL,
            example="fft_complex([1,2,3,4])",
        )
    )
    registry.register(
        function(
            "magnitude",
            signatures=(sig(L, out=L), sig(C, out=N)),
            evaluate=_pointwise("magnitude", complex_math.magnitude),
            description="Magnitude of each spectrum bin",
            category=Category.SIGNAL,
            example="magnitude(fft([1,0,1,0]))",
        )
    )
    registry.register(
        function(
            "phase",
            signatures=(sig(L, out=L), sig(C, out=N)),
            evaluate=_pointwise("phase", complex_math.phase),
            description="Phase angle of each spectrum bin",
            category=Category.SIGNAL,
            example="phase(fft([0,1,0,0]))",
        )
    )
    registry.register(
        function(
            "convolve",
            signatures=(sig(L, L, out=L),),
            evaluate=_convolve,
            description="Linear convolution of two sequences",
            category=Category.SIGNAL,
            example="convolve([1,1], [1,1]) = [1,2,1]",
        )
    )
    registry.register(
        function(
            "z_transform",
            latex="Z(#0, #1)",
            signatures=(sig(L, C, out=C),),
            evaluate=_z_transform,
            description="Z-transform of a sequence evaluated at z",
            category=Category.SIGNAL,
            example="z_transform([1,2,3], 2) = 2.75",
        )
    )
    registry.register(
        function(
            "laplace_transform",
            latex="\\mathcal{L}(#0, #1)",
            signatures=(sig(L, C, out=C), sig(L, C, N, out=C)),
            evaluate=_laplace_transform,
            description="Discrete Laplace transform evaluated at s with optional step dt",
            category=Category.SIGNAL,
            example="laplace_transform([1,1,1], 0) = 3",
        )
    )
