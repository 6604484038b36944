"""
Root finding.
"""

from ._core.ridders import (
    DEFAULT_ABSOLUTE_ACCURACY,
    DEFAULT_FUNCTION_VALUE_ACCURACY,
    DEFAULT_MAX_ITERATIONS,
    DEFAULT_RELATIVE_ACCURACY,
    Bracket,
    RiddersSolver,
    ridders_step,
)


def ridders(function, lo: float, hi: float,
            absolute_accuracy: float = DEFAULT_ABSOLUTE_ACCURACY,
            relative_accuracy: float = DEFAULT_RELATIVE_ACCURACY,
            function_value_accuracy: float = DEFAULT_FUNCTION_VALUE_ACCURACY,
            max_iterations: int = DEFAULT_MAX_ITERATIONS) -> float:
    """
    Root of ``function`` in ``[lo, hi]`` by Ridders' method.

    Examples
    --------
    >>> ridders(lambda x: x * x - 2.0, 0.0, 2.0, absolute_accuracy=1e-12)
    1.414213562373095...
    """
    solver = RiddersSolver(
        absolute_accuracy=absolute_accuracy,
        relative_accuracy=relative_accuracy,
        function_value_accuracy=function_value_accuracy,
        max_iterations=max_iterations,
    )
    return solver.solve(function, lo, hi)


__all__ = ['ridders', 'RiddersSolver', 'ridders_step', 'Bracket']
