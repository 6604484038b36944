"""
Test Ridders root finding.
"""

import math

import pytest
import numpy as np

from pynumerics.roots import Bracket, RiddersSolver, ridders, ridders_step
from pynumerics.exceptions import (
    InvalidIntervalError,
    MaxIterationsExceededError,
    NoBracketingError,
    NoDataError,
)


ROOT_TOL = 1e-9


def cubic(x):
    """(x - 3)(x - 2)(x + 1)."""
    return x ** 3 - 4 * x ** 2 + x + 6


class TestRidders:
    """Test RiddersSolver on a cubic with three known roots."""

    @pytest.mark.parametrize("lo, hi, root", [
        (2.2, 4.0, 3.0),
        (1.5, 2.7, 2.0),
        (-1.7, 1.3, -1.0),
        (1.5, 2.5, 2.0),
        (-1.5, 0.5, -1.0),
    ])
    def test_cubic_roots(self, lo, hi, root):
        """Each root is found from a bracket containing only it."""
        solver = RiddersSolver(absolute_accuracy=1e-12, max_iterations=10000)
        x = solver.solve(cubic, lo, hi)
        np.testing.assert_allclose(x, root, atol=ROOT_TOL)
        assert solver.result == x
        assert 0 < solver.state.iteration_count <= 10000

    def test_midpoint_root(self):
        """A root at the midpoint is returned exactly."""
        solver = RiddersSolver()
        assert solver.solve(cubic, 2.5, 3.5) == 3.0
        assert solver.state.iteration_count == 1

    def test_endpoint_root(self):
        """A root at an endpoint is returned without iterating."""
        solver = RiddersSolver()
        assert solver.solve(cubic, 3.0, 3.5) == 3.0
        assert solver.solve(cubic, 2.5, 3.0) == 3.0
        assert solver.state.iteration_count == 0

    def test_transcendental(self):
        """exp(x) = 2 is solved to the requested accuracy."""
        x = ridders(lambda x: math.exp(x) - 2.0, 0.0, 5.0, absolute_accuracy=1e-14)
        np.testing.assert_allclose(x, math.log(2.0), atol=1e-12)

    def test_no_bracketing(self):
        """Endpoints with equal signs are rejected."""
        with pytest.raises(NoBracketingError, match="different signs") as excinfo:
            ridders(cubic, 3.5, 4.0)
        assert excinfo.value.lo == 3.5
        assert excinfo.value.hi == 4.0

    def test_no_bracketing_tiny_values(self):
        """Same-sign endpoints are rejected even when their product underflows."""
        f = lambda x: 1e-170 * (x - 5.0)
        with pytest.raises(NoBracketingError):
            ridders(f, 0.0, 1.0)

    def test_tiny_function_values(self):
        """A root is found when the function values are near underflow."""
        f = lambda x: 1e-170 * (x - 0.3)
        solver = RiddersSolver(function_value_accuracy=0.0)
        np.testing.assert_allclose(solver.solve(f, 0.0, 1.0), 0.3, atol=ROOT_TOL)

    def test_invalid_interval(self):
        """Reversed endpoints are rejected."""
        with pytest.raises(InvalidIntervalError):
            ridders(cubic, 4.0, 2.0)

    def test_max_iterations(self):
        """Exact tolerances cannot be met within two iterations."""
        solver = RiddersSolver(absolute_accuracy=0.0, relative_accuracy=0.0,
                               function_value_accuracy=0.0, max_iterations=2)
        with pytest.raises(MaxIterationsExceededError, match=r"maximal count \(2\)"):
            solver.solve(lambda x: math.exp(x) - 2.0, 0.0, 5.0)

    def test_result_before_solve(self):
        """No result is available before the first solve."""
        with pytest.raises(NoDataError):
            RiddersSolver().result


class TestRiddersStep:
    """Test the single-iteration step function."""

    def test_step_keeps_sign_change(self):
        """The new bracket still brackets the root and ends at the estimate."""
        bracket = Bracket(2.2, 4.0, cubic(2.2), cubic(4.0))
        step = ridders_step(cubic, bracket)
        new = step.bracket
        assert new.lo < new.hi
        assert new.f_lo * new.f_hi <= 0
        assert step.x in (new.lo, new.hi)
        assert new.lo <= 3.0 <= new.hi
        assert new.width < bracket.width

    def test_step_midpoint_hit(self):
        """A root at the midpoint leaves the bracket unchanged."""
        bracket = Bracket(2.5, 3.5, cubic(2.5), cubic(3.5))
        step = ridders_step(cubic, bracket)
        assert step.bracket is bracket
        assert step.x == 3.0
        assert step.y == 0.0

    def test_step_tiny_values(self):
        """The step stays finite when squared function values underflow."""
        f = lambda x: 1e-170 * (x - 0.3)
        step = ridders_step(f, Bracket(0.0, 1.0, f(0.0), f(1.0)))
        assert math.isfinite(step.x)
        np.testing.assert_allclose(step.x, 0.3, atol=1e-12)
        assert step.bracket.lo <= 0.3 <= step.bracket.hi
