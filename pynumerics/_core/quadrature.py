"""
Composite trapezoid and Simpson quadrature.

Both integrators refine the same sequence of trapezoid stages: stage k uses
2^k equal sub-intervals and reuses every function value of stage k - 1.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional

from .convergence import ConvergenceState
from ..exceptions import InvalidIntervalError
from ..functions import as_univariate

logger = logging.getLogger(__name__)

DEFAULT_RELATIVE_ACCURACY = 1e-6
DEFAULT_ABSOLUTE_ACCURACY = 1e-15
DEFAULT_MIN_ITERATIONS = 3

# Stage k needs 2^(k-1) new evaluations
TRAPEZOID_MAX_ITERATIONS = 64
SIMPSON_MAX_ITERATIONS = 64


def trapezoid_stage(function, lo: float, hi: float, k: int, previous: float = 0.0) -> float:
    """
    Trapezoid estimate of stage ``k`` over ``[lo, hi]``.

    Parameters
    ----------
    function : callable
        Integrand ``f(x) -> float``
    lo, hi : float
        Integration bounds
    k : int
        Stage number; stage 0 is the plain trapezoid rule
    previous : float
        Estimate of stage ``k - 1`` (ignored for ``k == 0``)

    Returns
    -------
    float
        Estimate using 2^k sub-intervals
    """
    if k == 0:
        return 0.5 * (hi - lo) * (function(lo) + function(hi))

    count = 1 << (k - 1)
    spacing = (hi - lo) / count
    x = lo + 0.5 * spacing
    total = 0.0
    for _ in range(count):
        total += function(x)
        x += spacing
    return 0.5 * (previous + total * spacing)


def _converged(current: float, previous: float, state: ConvergenceState) -> bool:
    delta = abs(current - previous)
    r_limit = state.relative_accuracy * (abs(previous) + abs(current)) * 0.5
    return delta <= r_limit or delta <= state.absolute_accuracy


class BaseIntegrator(ABC):
    """
    Shared configuration and bookkeeping of the stage-based integrators.

    Parameters
    ----------
    relative_accuracy : float, default=1e-6
    absolute_accuracy : float, default=1e-15
    min_iterations : int, default=3
        Stages computed before convergence is tested
    max_iterations : int
        Stage budget, capped by the integrator's ceiling

    Raises
    ------
    InvalidIterationBoundsError
        Unless ``0 < min_iterations < max_iterations <= ceiling``
    """

    ceiling: int

    def __init__(self, relative_accuracy: float = DEFAULT_RELATIVE_ACCURACY,
                 absolute_accuracy: float = DEFAULT_ABSOLUTE_ACCURACY,
                 min_iterations: int = DEFAULT_MIN_ITERATIONS,
                 max_iterations: Optional[int] = None):
        if max_iterations is None:
            max_iterations = self.ceiling
        self.state = ConvergenceState(
            min_iterations=min_iterations,
            max_iterations=max_iterations,
            relative_accuracy=relative_accuracy,
            absolute_accuracy=absolute_accuracy,
            ceiling=self.ceiling,
        )
        self.evaluations = 0

    @property
    def result(self) -> float:
        return self.state.result

    @property
    def iterations(self) -> int:
        return self.state.iteration_count

    def integrate(self, function, lo: float, hi: float) -> float:
        """
        Integrate ``function`` over ``[lo, hi]``.

        Raises
        ------
        InvalidIntervalError
            If ``lo >= hi``
        MaxIterationsExceededError
            If the stage budget is spent before convergence
        """
        lo = float(lo)
        hi = float(hi)
        if lo >= hi:
            raise InvalidIntervalError(lo, hi)

        f = as_univariate(function)
        self.evaluations = 0
        self.state = self.state.reset()

        def evaluate(x):
            self.evaluations += 1
            return f.value(x)

        value = self._integrate(evaluate, lo, hi)
        self.state = self.state.with_result(value)
        logger.debug("%s converged to %r after %d stages (%d evaluations)",
                     type(self).__name__, value, self.state.iteration_count,
                     self.evaluations)
        return value

    @abstractmethod
    def _integrate(self, function, lo: float, hi: float) -> float:
        pass


class TrapezoidIntegrator(BaseIntegrator):
    """Trapezoid rule refined by interval halving."""

    ceiling = TRAPEZOID_MAX_ITERATIONS

    def _integrate(self, function, lo, hi):
        old_t = trapezoid_stage(function, lo, hi, 0)
        while True:
            self.state = self.state.advance()
            k = self.state.iteration_count
            t = trapezoid_stage(function, lo, hi, k, old_t)
            if k >= self.state.min_iterations and _converged(t, old_t, self.state):
                return t
            old_t = t


class SimpsonIntegrator(BaseIntegrator):
    """
    Simpson's rule, S_k = (4 T_k - T_(k-1)) / 3, over trapezoid stages.

    With ``min_iterations == 1`` the single estimate S_1 is returned
    without a convergence test.
    """

    ceiling = SIMPSON_MAX_ITERATIONS

    def _integrate(self, function, lo, hi):
        t0 = trapezoid_stage(function, lo, hi, 0)
        if self.state.min_iterations == 1:
            self.state = self.state.advance()
            t1 = trapezoid_stage(function, lo, hi, 1, t0)
            return (4.0 * t1 - t0) / 3.0

        old_t = t0
        old_s = t0
        while True:
            self.state = self.state.advance()
            k = self.state.iteration_count
            t = trapezoid_stage(function, lo, hi, k, old_t)
            s = (4.0 * t - old_t) / 3.0
            if k >= self.state.min_iterations and _converged(s, old_s, self.state):
                return s
            old_s = s
            old_t = t
