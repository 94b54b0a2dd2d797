"""Complex-number accessors: argument, real and imaginary parts, conjugate."""

from __future__ import annotations

from .. import complex_math
from ..registry import Category, OperationRegistry
from ..values import ComplexValue, NumberValue, Value, promote_to_complex
from ._common import C, N, function, sig


def _arg(args: tuple[Value, ...], context) -> Value:
    return NumberValue(complex_math.phase(promote_to_complex(args[0]).to_complex()))


def _real(args: tuple[Value, ...], context) -> Value:
    return NumberValue(promote_to_complex(args[0]).real)


def _imag(args: tuple[Value, ...], context) -> Value:
    return NumberValue(promote_to_complex(args[0]).imag)


def _conj(args: tuple[Value, ...], context) -> Value:
    arg = args[0]
    if isinstance(arg, NumberValue):
        return arg
    z = promote_to_complex(arg)
    return ComplexValue(z.real, -z.imag)


def register(registry: OperationRegistry) -> None:
    registry.register(
        function(
            "arg",
            signatures=(sig(C, out=N),),
            evaluate=_arg,
            description="Argument (angle) of a complex number",
            category=Category.COMPLEX,
            example="arg(i) = \\pi/2",
        )
    )
    registry.register(
        function(
            "real",
            latex="\\Re(#0)",
            signatures=(sig(C, out=N),),
            evaluate=_real,
            description="Real part",
            category=Category.COMPLEX,
            example="real(3+4i) = 3",
        )
    )
    registry.register(
        function(
            "imag",
            latex="\\Im(#0)",
            signatures=(sig(C, out=N),),
            evaluate=_imag,
            description="Imaginary part",
            category=Category.COMPLEX,
            example="imag(3+4i) = 4",
        )
    )
    registry.register(
        function(
            "conj",
            latex="\\overline{#0}",
            signatures=(sig(N, out=N), sig(C, out=C)),
            evaluate=_conj,
            description="Complex conjugate",
            category=Category.COMPLEX,
            example="conj(3+4i) = 3-4i",
        )
    )
