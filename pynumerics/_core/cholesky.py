"""
Cholesky decomposition of symmetric positive-definite matrices.

A = L L', with L lower triangular.
"""

import logging

import numpy as np
from scipy.linalg import solve_triangular

from .base import Decomposition, DecompositionSolver
from .._utils import check_square, readonly
from ..exceptions import NonSymmetricMatrixError, NotPositiveDefiniteError

logger = logging.getLogger(__name__)

DEFAULT_RELATIVE_SYMMETRY_THRESHOLD = 1.0e-15
DEFAULT_ABSOLUTE_POSITIVITY_THRESHOLD = 1.0e-10


class CholeskyDecomposition(Decomposition):
    """
    Cholesky decomposition A = L L'.

    Parameters
    ----------
    matrix : array_like, shape (n, n)
        Symmetric positive-definite matrix (copied, never modified)
    relative_symmetry_threshold : float
        Largest relative difference tolerated between a_ij and a_ji
    absolute_positivity_threshold : float
        Pivots at or below this value are rejected

    Raises
    ------
    DimensionMismatchError
        If the matrix is not square
    NonSymmetricMatrixError
        If the matrix is not symmetric within tolerance
    NotPositiveDefiniteError
        If a pivot is not above ``absolute_positivity_threshold``

    Notes
    -----
    The factor is built row by row on L' in place: the diagonal pivot is
    replaced by its square root, the rest of the row is scaled by its
    inverse and the trailing upper triangle is updated.
    """

    def __init__(
        self,
        matrix,
        relative_symmetry_threshold: float = DEFAULT_RELATIVE_SYMMETRY_THRESHOLD,
        absolute_positivity_threshold: float = DEFAULT_ABSOLUTE_POSITIVITY_THRESHOLD,
    ):
        lt = check_square(matrix, name='matrix')
        n = lt.shape[0]

        # Check symmetry and clear the strict lower triangle
        for i in range(n):
            for j in range(i + 1, n):
                a_ij = lt[i, j]
                a_ji = lt[j, i]
                max_delta = relative_symmetry_threshold * max(abs(a_ij), abs(a_ji))
                if abs(a_ij - a_ji) > max_delta:
                    raise NonSymmetricMatrixError(i, j)
                lt[j, i] = 0.0

        # Transform in place
        for i in range(n):
            if lt[i, i] <= absolute_positivity_threshold:
                raise NotPositiveDefiniteError(i)

            lt[i, i] = np.sqrt(lt[i, i])
            inverse = 1.0 / lt[i, i]

            row = lt[i, i + 1:]
            row *= inverse
            lt[i + 1:, i + 1:] -= np.triu(np.outer(row, row))

        self._lt = readonly(lt)
        self.n = n
        logger.debug("Cholesky factor computed for %dx%d matrix", n, n)

    @property
    def LT(self) -> np.ndarray:
        """Upper triangular factor L'."""
        return self._lt

    @property
    def L(self) -> np.ndarray:
        """Lower triangular factor L (strict upper triangle is zero)."""
        return self._lt.T.copy()

    @property
    def determinant(self) -> float:
        """det(A) = prod(l_ii^2)."""
        diag = np.diag(self._lt)
        return float(np.prod(diag * diag))

    @property
    def is_non_singular(self) -> bool:
        # Construction already rejected every non-positive pivot
        return True

    def get_solver(self) -> "CholeskySolver":
        return CholeskySolver(self._lt)


class CholeskySolver(DecompositionSolver):
    """Forward then back substitution through L and L'."""

    def __init__(self, lt: np.ndarray):
        self._lt = lt
        self.rows = lt.shape[0]

    @property
    def is_non_singular(self) -> bool:
        return True

    def _solve(self, b: np.ndarray) -> np.ndarray:
        # L y = b
        y = solve_triangular(self._lt, b, trans='T', lower=False)
        # L' x = y
        return solve_triangular(self._lt, y, lower=False)
