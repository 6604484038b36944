"""
Numerical integration over finite intervals.
"""

from typing import Optional

from ._core.quadrature import (
    DEFAULT_ABSOLUTE_ACCURACY,
    DEFAULT_MIN_ITERATIONS,
    DEFAULT_RELATIVE_ACCURACY,
    SimpsonIntegrator,
    TrapezoidIntegrator,
    trapezoid_stage,
)


def simpson(function, lo: float, hi: float,
            relative_accuracy: float = DEFAULT_RELATIVE_ACCURACY,
            absolute_accuracy: float = DEFAULT_ABSOLUTE_ACCURACY,
            min_iterations: int = DEFAULT_MIN_ITERATIONS,
            max_iterations: Optional[int] = None) -> float:
    """
    Integrate ``function`` over ``[lo, hi]`` with Simpson's rule.

    Examples
    --------
    >>> simpson(lambda x: x ** 3, 0.0, 2.0)
    4.0
    """
    integrator = SimpsonIntegrator(relative_accuracy, absolute_accuracy,
                                   min_iterations, max_iterations)
    return integrator.integrate(function, lo, hi)


def trapezoid(function, lo: float, hi: float,
              relative_accuracy: float = DEFAULT_RELATIVE_ACCURACY,
              absolute_accuracy: float = DEFAULT_ABSOLUTE_ACCURACY,
              min_iterations: int = DEFAULT_MIN_ITERATIONS,
              max_iterations: Optional[int] = None) -> float:
    """Integrate ``function`` over ``[lo, hi]`` with the trapezoid rule."""
    integrator = TrapezoidIntegrator(relative_accuracy, absolute_accuracy,
                                     min_iterations, max_iterations)
    return integrator.integrate(function, lo, hi)


__all__ = [
    'simpson',
    'trapezoid',
    'SimpsonIntegrator',
    'TrapezoidIntegrator',
    'trapezoid_stage',
]
