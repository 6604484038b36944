"""
Ridders' method for bracketed root finding.

Each step halves the bracket, fits an exponential through the two ends and
the midpoint, and moves to the root of the fitted curve. The new estimate
always ends up as one endpoint of the updated bracket, so the sign change
is never lost.
"""

import logging
import math
from typing import NamedTuple

from .convergence import ConvergenceState
from ..exceptions import InvalidIntervalError, NoBracketingError
from ..functions import as_univariate

logger = logging.getLogger(__name__)

DEFAULT_ABSOLUTE_ACCURACY = 1e-6
DEFAULT_RELATIVE_ACCURACY = 1e-14
DEFAULT_FUNCTION_VALUE_ACCURACY = 1e-15
DEFAULT_MAX_ITERATIONS = 100


class Bracket(NamedTuple):
    """Interval [lo, hi] with the function values at both ends."""
    lo: float
    hi: float
    f_lo: float
    f_hi: float

    @property
    def width(self) -> float:
        return self.hi - self.lo


class RiddersStep(NamedTuple):
    """Outcome of one Ridders iteration."""
    bracket: Bracket
    x: float
    y: float


def _sign(v: float) -> float:
    return math.copysign(1.0, v) if v != 0.0 else 0.0


def ridders_step(function, bracket: Bracket,
                 function_value_accuracy: float = 0.0) -> RiddersStep:
    """
    Perform one Ridders iteration.

    Parameters
    ----------
    function : callable
        Scalar function ``f(x) -> float``
    bracket : Bracket
        Current bracket; ``f_lo`` and ``f_hi`` must have opposite signs
    function_value_accuracy : float, default=0.0
        If the midpoint value is within this of zero, the midpoint is
        returned as the estimate and the bracket is left unchanged

    Returns
    -------
    RiddersStep
        New bracket, estimate and function value at the estimate
    """
    x1, x2, y1, y2 = bracket

    x3 = 0.5 * (x1 + x2)
    y3 = function(x3)
    if abs(y3) <= function_value_accuracy:
        return RiddersStep(bracket, x3, y3)

    # y1 and y2 have opposite signs, so delta > 1; ratios keep tiny values
    # from underflowing
    delta = 1.0 - (y1 / y3) * (y2 / y3)
    correction = _sign(y2) * _sign(y3) * (x3 - x1) / math.sqrt(delta)
    x = x3 - correction
    y = function(x)

    if correction > 0.0:
        # x < x3
        if _sign(y1) + _sign(y) == 0.0:
            new = Bracket(x1, x, y1, y)
        else:
            new = Bracket(x, x3, y, y3)
    else:
        # x >= x3
        if _sign(y2) + _sign(y) == 0.0:
            new = Bracket(x, x2, y, y2)
        else:
            new = Bracket(x3, x, y3, y)

    return RiddersStep(new, x, y)


class RiddersSolver:
    """
    Bracketing root finder using Ridders' method.

    Parameters
    ----------
    absolute_accuracy : float, default=1e-6
        Absolute tolerance on the root
    relative_accuracy : float, default=1e-14
        Relative tolerance on the root
    function_value_accuracy : float, default=1e-15
        A point whose function value is within this of zero is a root
    max_iterations : int, default=100
        Iteration budget per call to :meth:`solve`

    Attributes
    ----------
    state : ConvergenceState
        Bookkeeping of the last :meth:`solve` call
    evaluations : int
        Function evaluations used by the last :meth:`solve` call
    """

    def __init__(self, absolute_accuracy: float = DEFAULT_ABSOLUTE_ACCURACY,
                 relative_accuracy: float = DEFAULT_RELATIVE_ACCURACY,
                 function_value_accuracy: float = DEFAULT_FUNCTION_VALUE_ACCURACY,
                 max_iterations: int = DEFAULT_MAX_ITERATIONS):
        self.function_value_accuracy = function_value_accuracy
        self.state = ConvergenceState(
            min_iterations=1,
            max_iterations=max_iterations,
            relative_accuracy=relative_accuracy,
            absolute_accuracy=absolute_accuracy,
        )
        self.evaluations = 0

    @property
    def result(self) -> float:
        """Root found by the last :meth:`solve` call."""
        return self.state.result

    def solve(self, function, lo: float, hi: float) -> float:
        """
        Find a root of ``function`` in ``[lo, hi]``.

        Raises
        ------
        InvalidIntervalError
            If ``lo >= hi``
        NoBracketingError
            If ``function(lo)`` and ``function(hi)`` have the same sign
        MaxIterationsExceededError
            If the budget is spent before convergence
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

        f_lo = evaluate(lo)
        if f_lo == 0.0:
            return self._finish(lo)
        f_hi = evaluate(hi)
        if f_hi == 0.0:
            return self._finish(hi)
        if _sign(f_lo) == _sign(f_hi):
            raise NoBracketingError(lo, hi, f_lo, f_hi)

        state = self.state
        bracket = Bracket(lo, hi, f_lo, f_hi)
        old_x = math.inf
        while True:
            state = state.advance()
            self.state = state

            step = ridders_step(evaluate, bracket, self.function_value_accuracy)
            x, y = step.x, step.y
            if step.bracket is bracket:
                # Midpoint hit the root
                return self._finish(x)

            tolerance = max(state.relative_accuracy * abs(x), state.absolute_accuracy)
            if abs(x - old_x) <= tolerance or abs(y) <= self.function_value_accuracy:
                return self._finish(x)

            bracket = step.bracket
            if bracket.width <= tolerance:
                return self._finish(x)
            old_x = x

    def _finish(self, x: float) -> float:
        self.state = self.state.with_result(x)
        logger.debug("Ridders converged to %r after %d iterations (%d evaluations)",
                     x, self.state.iteration_count, self.evaluations)
        return x
