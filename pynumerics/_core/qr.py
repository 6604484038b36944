"""
QR decomposition via Householder reflections.

A = Q R with Q orthogonal (m x m) and R upper triangular (m x n).
"""

import logging
from typing import Optional

import numpy as np
from scipy.linalg import solve_triangular

from .base import Decomposition, DecompositionSolver
from .._utils import check_array, readonly
from ..exceptions import DimensionMismatchError, SingularMatrixError

logger = logging.getLogger(__name__)


class QRDecomposition(Decomposition):
    """
    Householder QR decomposition.

    Parameters
    ----------
    matrix : array_like, shape (m, n), m >= n
        Matrix to decompose (copied)
    tol : float, optional
        Relative tolerance for rank determination. Diagonal entries of R
        with ``|R_ii| <= tol * max|R_ii|`` count as zero. Defaults to
        ``max(m, n) * eps``.

    Notes
    -----
    The factorisation is stored packed and transposed (``qrt``, n x m):
    the part of row k left of the diagonal holds row k of R, the rest
    holds the k-th Householder vector. The diagonal of R is kept in
    ``rdiag``.

    For each minor the reflector is chosen so that the first column of the
    minor becomes (a, 0, ..., 0)' with a of opposite sign to its first
    entry. Deficient columns (a == 0) are skipped and leave a zero on the
    diagonal of R, which shows up as rank deficiency.
    """

    def __init__(self, matrix, tol: Optional[float] = None):
        A = check_array(matrix, name='matrix', copy=True)
        m, n = A.shape
        if m < n:
            raise DimensionMismatchError(n, m)

        qrt = A.T.copy()
        rdiag = np.zeros(n, dtype=np.float64)

        for minor in range(n):
            v = qrt[minor, minor:]
            x_norm_sqr = float(v @ v)
            a = -np.sqrt(x_norm_sqr) if v[0] > 0 else np.sqrt(x_norm_sqr)
            rdiag[minor] = a

            if a != 0.0:
                # v = x - a e, |v|^2 = -2 a v[0] after the update
                v[0] -= a

                # H x = x - alpha v with alpha = -<x, v> / (a v[0])
                if minor + 1 < n:
                    rest = qrt[minor + 1:, minor:]
                    alpha = -(rest @ v) / (a * v[0])
                    rest -= np.outer(alpha, v)

        if tol is None:
            tol = max(m, n) * np.finfo(np.float64).eps

        abs_diag = np.abs(rdiag)
        largest = abs_diag.max() if n > 0 else 0.0
        if largest == 0:
            rank = 0
        else:
            rank = int(np.sum(abs_diag > tol * largest))

        self._qrt = readonly(qrt)
        self._rdiag = readonly(rdiag)
        self.m = m
        self.n = n
        self.tol = tol
        self.rank = rank

        if rank < n:
            logger.debug("QR rank %d < %d columns (tol=%g)", rank, n, tol)

    @property
    def is_full_rank(self) -> bool:
        return self.rank == self.n

    @property
    def is_non_singular(self) -> bool:
        return self.is_full_rank

    @property
    def R(self) -> np.ndarray:
        """Upper triangular factor, shape (m, n)."""
        R = np.zeros((self.m, self.n), dtype=np.float64)
        for row in range(self.n):
            R[row, row] = self._rdiag[row]
            R[row, row + 1:] = self._qrt[row + 1:, row]
        return R

    @property
    def QT(self) -> np.ndarray:
        """Transpose of the orthogonal factor, shape (m, m)."""
        m, n = self.m, self.n
        qt = np.eye(m, dtype=np.float64)

        # Q = Q_1 Q_2 ... Q_n: start from the identity and apply the
        # reflectors from the last to the first
        for minor in range(n - 1, -1, -1):
            v = self._qrt[minor, minor:]
            if v[0] != 0.0:
                block = qt[minor:, minor:]
                alpha = -(block @ v) / (self._rdiag[minor] * v[0])
                block -= np.outer(alpha, v)
        return qt

    @property
    def Q(self) -> np.ndarray:
        """Orthogonal factor, shape (m, m)."""
        return self.QT.T.copy()

    @property
    def H(self) -> np.ndarray:
        """Householder vectors as columns (lower trapezoidal, shape (m, n))."""
        H = np.zeros((self.m, self.n), dtype=np.float64)
        for j in range(self.n):
            if self._rdiag[j] != 0.0:
                H[j:, j] = self._qrt[j, j:] / -self._rdiag[j]
        return H

    def get_solver(self) -> "QRSolver":
        return QRSolver(self._qrt, self._rdiag, self.is_non_singular)


class QRSolver(DecompositionSolver):
    """
    Least-squares solver on a Householder QR factorisation.

    Has no truncation mechanism: solving a rank-deficient system raises
    SingularMatrixError.
    """

    def __init__(self, qrt: np.ndarray, rdiag: np.ndarray, non_singular: bool):
        self._qrt = qrt
        self._rdiag = rdiag
        self._non_singular = non_singular
        self.rows = qrt.shape[1]
        self.cols = qrt.shape[0]

    @property
    def is_non_singular(self) -> bool:
        return self._non_singular

    def _solve(self, b: np.ndarray) -> np.ndarray:
        if not self._non_singular:
            raise SingularMatrixError()

        vector = b.ndim == 1
        y = b.reshape(self.rows, -1)

        # Apply the reflectors: y <- Q' y
        for minor in range(self.cols):
            v = self._qrt[minor, minor:]
            dot = (v @ y[minor:]) / (self._rdiag[minor] * v[0])
            y[minor:] += np.outer(v, dot)

        # Back-solve R x = Q' y
        R = np.triu(self._qrt.T[:self.cols, :self.cols], k=1)
        R[np.diag_indices(self.cols)] = self._rdiag
        x = solve_triangular(R, y[:self.cols], lower=False)

        return x[:, 0] if vector else x
