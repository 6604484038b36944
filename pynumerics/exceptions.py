"""
Structured errors raised by the numerical kernels.

Every error carries a kind tag and the numeric context of the failure,
nothing else. Turning an error into text is done by
:func:`pynumerics.messages.render`.
"""

from enum import Enum
from typing import Tuple


class ErrorKind(Enum):
    """Failure categories."""
    DIMENSION_MISMATCH = "dimension_mismatch"
    NOT_POSITIVE_DEFINITE = "not_positive_definite"
    NON_SYMMETRIC_MATRIX = "non_symmetric_matrix"
    SINGULAR_MATRIX = "singular_matrix"
    NO_BRACKETING = "no_bracketing"
    INVALID_INTERVAL = "invalid_interval"
    DEGENERATE_SIMPLEX = "degenerate_simplex"
    INVALID_ITERATION_BOUNDS = "invalid_iteration_bounds"
    MAX_ITERATIONS_EXCEEDED = "max_iterations_exceeded"
    NO_DATA = "no_data"


class NumericsError(Exception):
    """Base class for all pynumerics errors."""

    kind: ErrorKind

    @property
    def context(self) -> dict:
        """Numeric fields describing the failure."""
        return {}

    def __str__(self):
        from .messages import render
        return render(self)


class DimensionMismatchError(NumericsError, ValueError):
    """Operand shapes are incompatible."""
    kind = ErrorKind.DIMENSION_MISMATCH

    def __init__(self, expected: int, actual: int):
        super().__init__(expected, actual)
        self.expected = expected
        self.actual = actual

    @property
    def context(self) -> dict:
        return {'expected': self.expected, 'actual': self.actual}


class NotPositiveDefiniteError(NumericsError, ArithmeticError):
    """A pivot (or eigenvalue) at ``row`` is not strictly positive."""
    kind = ErrorKind.NOT_POSITIVE_DEFINITE

    def __init__(self, row: int):
        super().__init__(row)
        self.row = row

    @property
    def context(self) -> dict:
        return {'row': self.row}


class NonSymmetricMatrixError(NumericsError, ArithmeticError):
    """Entries (row, column) and (column, row) differ beyond tolerance."""
    kind = ErrorKind.NON_SYMMETRIC_MATRIX

    def __init__(self, row: int, column: int):
        super().__init__(row, column)
        self.row = row
        self.column = column

    @property
    def context(self) -> dict:
        return {'row': self.row, 'column': self.column}


class SingularMatrixError(NumericsError, ArithmeticError):
    """The decomposed matrix is singular or rank deficient."""
    kind = ErrorKind.SINGULAR_MATRIX


class NoBracketingError(NumericsError, ValueError):
    """Function values at the interval ends share a sign."""
    kind = ErrorKind.NO_BRACKETING

    def __init__(self, lo: float, hi: float, f_lo: float, f_hi: float):
        super().__init__(lo, hi, f_lo, f_hi)
        self.lo = lo
        self.hi = hi
        self.f_lo = f_lo
        self.f_hi = f_hi

    @property
    def context(self) -> dict:
        return {'lo': self.lo, 'hi': self.hi, 'f_lo': self.f_lo, 'f_hi': self.f_hi}


class InvalidIntervalError(NumericsError, ValueError):
    """Lower bound is not strictly below the upper bound."""
    kind = ErrorKind.INVALID_INTERVAL

    def __init__(self, lower: float, upper: float):
        super().__init__(lower, upper)
        self.lower = lower
        self.upper = upper

    @property
    def context(self) -> dict:
        return {'lower': self.lower, 'upper': self.upper}


class DegenerateSimplexError(NumericsError, ValueError):
    """Simplex vertices coincide (or a step is zero)."""
    kind = ErrorKind.DEGENERATE_SIMPLEX

    def __init__(self, indices: Tuple[int, ...] = ()):
        super().__init__(*indices)
        self.indices = tuple(indices)

    @property
    def context(self) -> dict:
        return {'indices': self.indices}


class InvalidIterationBoundsError(NumericsError, ValueError):
    """Iteration bounds violate ``0 < min < max <= ceiling``."""
    kind = ErrorKind.INVALID_ITERATION_BOUNDS

    def __init__(self, min_iterations: int, max_iterations: int):
        super().__init__(min_iterations, max_iterations)
        self.min_iterations = min_iterations
        self.max_iterations = max_iterations

    @property
    def context(self) -> dict:
        return {
            'min_iterations': self.min_iterations,
            'max_iterations': self.max_iterations,
        }


class MaxIterationsExceededError(NumericsError, RuntimeError):
    """Iteration budget exhausted before convergence."""
    kind = ErrorKind.MAX_ITERATIONS_EXCEEDED

    def __init__(self, iterations: int):
        super().__init__(iterations)
        self.iterations = iterations

    @property
    def context(self) -> dict:
        return {'iterations': self.iterations}


class NoDataError(NumericsError, RuntimeError):
    """A result was requested before anything was computed."""
    kind = ErrorKind.NO_DATA


__all__ = [
    'ErrorKind',
    'NumericsError',
    'DimensionMismatchError',
    'NotPositiveDefiniteError',
    'NonSymmetricMatrixError',
    'SingularMatrixError',
    'NoBracketingError',
    'InvalidIntervalError',
    'DegenerateSimplexError',
    'InvalidIterationBoundsError',
    'MaxIterationsExceededError',
    'NoDataError',
]
