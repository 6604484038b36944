"""
Iteration bookkeeping shared by the iterative algorithms.

State is an immutable value: steps receive one and hand back a new one.
"""

import math
from dataclasses import dataclass, replace
from typing import Optional

from ..exceptions import (
    InvalidIterationBoundsError,
    MaxIterationsExceededError,
    NoDataError,
)


@dataclass(frozen=True)
class ConvergenceState:
    """Iteration counters, accuracy settings and the last result."""
    min_iterations: int
    max_iterations: int
    relative_accuracy: float
    absolute_accuracy: float
    iteration_count: int = 0
    result_computed: bool = False
    last_result: float = math.nan
    ceiling: Optional[int] = None   # Algorithm-specific cap on max_iterations

    def __post_init__(self):
        verify_iteration_bounds(self.min_iterations, self.max_iterations, self.ceiling)

    def advance(self) -> "ConvergenceState":
        """Count one more iteration; fails once the budget is spent."""
        if self.iteration_count >= self.max_iterations:
            raise MaxIterationsExceededError(self.max_iterations)
        return replace(self, iteration_count=self.iteration_count + 1)

    def with_result(self, value: float) -> "ConvergenceState":
        return replace(self, result_computed=True, last_result=value)

    def reset(self) -> "ConvergenceState":
        return replace(self, iteration_count=0, result_computed=False,
                       last_result=math.nan)

    @property
    def result(self) -> float:
        if not self.result_computed:
            raise NoDataError()
        return self.last_result


def verify_iteration_bounds(min_iterations: int, max_iterations: int,
                            ceiling: Optional[int] = None) -> None:
    """Check ``0 < min < max`` (and ``max <= ceiling`` when given)."""
    if min_iterations <= 0 or max_iterations <= min_iterations:
        raise InvalidIterationBoundsError(min_iterations, max_iterations)
    if ceiling is not None and max_iterations > ceiling:
        raise InvalidIterationBoundsError(min_iterations, max_iterations)
