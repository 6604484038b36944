"""
Derivative-free minimization and maximization with simplex methods.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np

from ._core.simplex import (
    UNEVALUATED,
    DirectSearchSimplex,
    GoalType,
    MultiDirectionalSimplex,
    NelderMeadSimplex,
    PointValuePair,
    Simplex,
)
from .exceptions import MaxIterationsExceededError
from .functions import MultivariateFunction, as_multivariate

logger = logging.getLogger(__name__)

EPS = np.finfo(np.float64).eps
SAFE_MIN = np.finfo(np.float64).tiny

DEFAULT_RELATIVE_THRESHOLD = 100 * EPS
DEFAULT_ABSOLUTE_THRESHOLD = 100 * SAFE_MIN
DEFAULT_MAX_ITERATIONS = 1000


class SimpleValueChecker:
    """
    Convergence test on objective values.

    Two successive values p and c have converged when
    ``|p - c| <= relative_threshold * max(|p|, |c|)`` or
    ``|p - c| <= absolute_threshold``.
    """

    def __init__(self, relative_threshold: float = DEFAULT_RELATIVE_THRESHOLD,
                 absolute_threshold: float = DEFAULT_ABSOLUTE_THRESHOLD):
        self.relative_threshold = relative_threshold
        self.absolute_threshold = absolute_threshold

    def converged(self, iteration: int, previous: PointValuePair,
                  current: PointValuePair) -> bool:
        p = previous.value
        c = current.value
        difference = abs(p - c)
        size = max(abs(p), abs(c))
        return difference <= size * self.relative_threshold or difference <= self.absolute_threshold


@dataclass
class OptimizationResult:
    """Optimum found by :class:`SimplexOptimizer`."""
    point: np.ndarray
    value: float
    iterations: int
    evaluations: int


class _CountingFunction(MultivariateFunction):
    """Objective wrapper enforcing an evaluation budget."""

    def __init__(self, function: MultivariateFunction, max_evaluations: Optional[int]):
        super().__init__(function.value)
        self.max_evaluations = max_evaluations
        self.count = 0

    def value(self, point) -> float:
        if self.max_evaluations is not None and self.count >= self.max_evaluations:
            raise MaxIterationsExceededError(self.max_evaluations)
        self.count += 1
        return super().value(point)


class SimplexOptimizer:
    """
    Drive a :class:`DirectSearchSimplex` until its vertex values stop changing.

    Parameters
    ----------
    checker : SimpleValueChecker, optional
        Per-vertex convergence test between successive iterations
    max_iterations : int, default=1000
        Simplex iterations allowed
    max_evaluations : int, optional
        Objective evaluations allowed (unbounded when None)
    """

    def __init__(self, checker: Optional[SimpleValueChecker] = None,
                 max_iterations: int = DEFAULT_MAX_ITERATIONS,
                 max_evaluations: Optional[int] = None):
        self.checker = checker if checker is not None else SimpleValueChecker()
        self.max_iterations = max_iterations
        self.max_evaluations = max_evaluations

    def optimize(self, function, start_point: Sequence[float], simplex: DirectSearchSimplex,
                 goal: GoalType = GoalType.MINIMIZE) -> OptimizationResult:
        """
        Optimize ``function`` starting from ``start_point``.

        Raises
        ------
        DimensionMismatchError
            If ``start_point`` does not match the simplex dimension
        MaxIterationsExceededError
            If the iteration or evaluation budget is spent
        """
        f = _CountingFunction(as_multivariate(function), self.max_evaluations)

        simplex.build(start_point)
        simplex.evaluate(f, goal)

        previous = None
        iteration = 0
        while True:
            if previous is not None:
                converged = all(
                    self.checker.converged(iteration, previous[i], simplex.get_point(i))
                    for i in range(simplex.size)
                )
                if converged:
                    best = simplex.get_point(0)
                    logger.debug("simplex converged after %d iterations (%d evaluations)",
                                 iteration, f.count)
                    return OptimizationResult(
                        point=best.point.copy(),
                        value=best.value,
                        iterations=iteration,
                        evaluations=f.count,
                    )

            if iteration >= self.max_iterations:
                raise MaxIterationsExceededError(self.max_iterations)

            previous = simplex.points
            simplex.iterate(f, goal)
            iteration += 1


def nelder_mead(function, x0, step: float = 1.0, goal: GoalType = GoalType.MINIMIZE,
                relative_threshold: float = DEFAULT_RELATIVE_THRESHOLD,
                absolute_threshold: float = DEFAULT_ABSOLUTE_THRESHOLD,
                max_iterations: int = DEFAULT_MAX_ITERATIONS,
                max_evaluations: Optional[int] = None, **coefficients) -> OptimizationResult:
    """
    Nelder-Mead search from ``x0`` on a hypercube simplex of side ``step``.

    Examples
    --------
    >>> result = nelder_mead(lambda p: (p[0] - 1) ** 2 + (p[1] + 2) ** 2, [0.0, 0.0],
    ...                      relative_threshold=1e-12, absolute_threshold=1e-14)
    >>> result.point  # close to [1, -2]
    """
    x0 = np.asarray(x0, dtype=np.float64)
    simplex = NelderMeadSimplex.hypercube(len(x0), step, **coefficients)
    optimizer = SimplexOptimizer(SimpleValueChecker(relative_threshold, absolute_threshold),
                                 max_iterations, max_evaluations)
    return optimizer.optimize(function, x0, simplex, goal)


def multi_directional(function, x0, step: float = 1.0, goal: GoalType = GoalType.MINIMIZE,
                      relative_threshold: float = DEFAULT_RELATIVE_THRESHOLD,
                      absolute_threshold: float = DEFAULT_ABSOLUTE_THRESHOLD,
                      max_iterations: int = DEFAULT_MAX_ITERATIONS,
                      max_evaluations: Optional[int] = None, **coefficients) -> OptimizationResult:
    """Multi-directional search from ``x0`` on a hypercube simplex of side ``step``."""
    x0 = np.asarray(x0, dtype=np.float64)
    simplex = MultiDirectionalSimplex.hypercube(len(x0), step, **coefficients)
    optimizer = SimplexOptimizer(SimpleValueChecker(relative_threshold, absolute_threshold),
                                 max_iterations, max_evaluations)
    return optimizer.optimize(function, x0, simplex, goal)


__all__ = [
    'GoalType',
    'PointValuePair',
    'UNEVALUATED',
    'Simplex',
    'DirectSearchSimplex',
    'NelderMeadSimplex',
    'MultiDirectionalSimplex',
    'SimpleValueChecker',
    'SimplexOptimizer',
    'OptimizationResult',
    'nelder_mead',
    'multi_directional',
]
