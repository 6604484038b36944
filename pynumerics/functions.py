"""
Function contracts consumed by the solvers, integrators and optimizers.

Plain callables work everywhere; the wrappers here add the few extra
capabilities some callers need (most notably remembering the last argument
a vector function was evaluated at).
"""

from typing import Callable, Optional

import numpy as np


class UnivariateFunction:
    """Scalar-to-scalar function ``f(x) -> float``."""

    def __init__(self, function: Callable[[float], float]):
        self.function = function

    def value(self, x: float) -> float:
        return float(self.function(x))

    def __call__(self, x: float) -> float:
        return self.value(x)


class MultivariateFunction:
    """
    Vector-to-scalar function ``f(point) -> float``.

    Keeps an explicit copy of the most recent argument in
    ``last_argument`` so a caller holding only a value can recover the
    point that produced it.
    """

    def __init__(self, function: Callable[[np.ndarray], float]):
        self.function = function
        self.last_argument: Optional[np.ndarray] = None

    def value(self, point) -> float:
        point = np.array(point, dtype=np.float64, copy=True)
        self.last_argument = point.copy()
        return float(self.function(point))

    def __call__(self, point) -> float:
        return self.value(point)


class BivariateFunction:
    """Two-argument scalar function ``f(x, y) -> float``."""

    def __init__(self, function: Callable[[float, float], float]):
        self.function = function

    def value(self, x: float, y: float) -> float:
        return float(self.function(x, y))

    def __call__(self, x: float, y: float) -> float:
        return self.value(x, y)

    def fix_first(self, x: float) -> UnivariateFunction:
        """Curry the first argument: ``y -> f(x, y)``."""
        return UnivariateFunction(lambda y: self.value(x, y))

    def fix_second(self, y: float) -> UnivariateFunction:
        """Curry the second argument: ``x -> f(x, y)``."""
        return UnivariateFunction(lambda x: self.value(x, y))


def as_univariate(function) -> UnivariateFunction:
    """Wrap a plain callable (no-op for an existing wrapper)."""
    if isinstance(function, UnivariateFunction):
        return function
    if not callable(function):
        raise TypeError("function must be callable")
    return UnivariateFunction(function)


def as_multivariate(function) -> MultivariateFunction:
    """Wrap a plain callable (no-op for an existing wrapper)."""
    if isinstance(function, MultivariateFunction):
        return function
    if not callable(function):
        raise TypeError("function must be callable")
    return MultivariateFunction(function)


__all__ = [
    'UnivariateFunction',
    'MultivariateFunction',
    'BivariateFunction',
    'as_univariate',
    'as_multivariate',
]
