"""
Singular value decomposition.

A = U S V' with U (m x p) and V (n x p) having orthonormal columns and
S = diag(singular values) sorted in decreasing order, p = min(m, n).
"""

import logging
import warnings
from typing import Optional

import numpy as np

from .base import Decomposition, DecompositionSolver
from .._utils import check_array, readonly
from ..exceptions import MaxIterationsExceededError

logger = logging.getLogger(__name__)

EPS = 2.0 ** -52
TINY = 2.0 ** -966
SAFE_MIN = np.finfo(np.float64).tiny

DEFAULT_MAX_ITERATIONS = 75


def _golub_kahan(A: np.ndarray, max_iterations: int):
    """
    Bidiagonalise A (m >= n) with Householder reflections on alternating
    sides, then chase the bidiagonal to diagonal form with implicit-shift
    QR steps.

    Returns U (m x n), s (n,), V (n x n). ``A`` is overwritten.
    """
    m, n = A.shape
    s = np.zeros(n, dtype=np.float64)
    U = np.zeros((m, n), dtype=np.float64)
    V = np.zeros((n, n), dtype=np.float64)
    e = np.zeros(n, dtype=np.float64)
    work = np.zeros(m, dtype=np.float64)

    # Reduce A to bidiagonal form, storing the diagonal in s and the
    # super-diagonal in e
    nct = min(m - 1, n)
    nrt = max(0, n - 2)
    for k in range(max(nct, nrt)):
        if k < nct:
            # Left reflector zeroing A[k+1:, k]
            s[k] = np.sqrt(A[k:, k] @ A[k:, k])
            if s[k] != 0.0:
                if A[k, k] < 0.0:
                    s[k] = -s[k]
                A[k:, k] /= s[k]
                A[k, k] += 1.0
            s[k] = -s[k]

        if k < nct and s[k] != 0.0 and k + 1 < n:
            t = -(A[k:, k] @ A[k:, k + 1:]) / A[k, k]
            A[k:, k + 1:] += np.outer(A[k:, k], t)
        e[k + 1:] = A[k, k + 1:]

        if k < nct:
            U[k:, k] = A[k:, k]

        if k < nrt:
            # Right reflector zeroing e[k+2:]
            e[k] = np.sqrt(e[k + 1:] @ e[k + 1:])
            if e[k] != 0.0:
                if e[k + 1] < 0.0:
                    e[k] = -e[k]
                e[k + 1:] /= e[k]
                e[k + 1] += 1.0
            e[k] = -e[k]
            if k + 1 < m and e[k] != 0.0:
                work[k + 1:] = A[k + 1:, k + 1:] @ e[k + 1:]
                A[k + 1:, k + 1:] += np.outer(work[k + 1:], -e[k + 1:] / e[k + 1])
            V[k + 1:, k] = e[k + 1:]

    # Final bidiagonal matrix of order p
    p = n
    if nct < n:
        s[nct] = A[nct, nct]
    if nrt + 1 < p:
        e[nrt] = A[nrt, p - 1]
    e[p - 1] = 0.0

    # Generate U
    for j in range(nct, n):
        U[:, j] = 0.0
        U[j, j] = 1.0
    for k in range(nct - 1, -1, -1):
        if s[k] != 0.0:
            if k + 1 < n:
                t = -(U[k:, k] @ U[k:, k + 1:]) / U[k, k]
                U[k:, k + 1:] += np.outer(U[k:, k], t)
            U[k:, k] = -U[k:, k]
            U[k, k] += 1.0
            U[:k, k] = 0.0
        else:
            U[:, k] = 0.0
            U[k, k] = 1.0

    # Generate V
    for k in range(n - 1, -1, -1):
        if k < nrt and e[k] != 0.0:
            t = -(V[k + 1:, k] @ V[k + 1:, k + 1:]) / V[k + 1, k]
            V[k + 1:, k + 1:] += np.outer(V[k + 1:, k], t)
        V[:, k] = 0.0
        V[k, k] = 1.0

    # Main iteration loop for the singular values
    pp = p - 1
    sweeps = 0
    while p > 0:
        # kase = 1: s[p-1] is negligible, deflate
        # kase = 2: s[k] is negligible, split
        # kase = 3: e[k-1] is negligible, one QR step on s[k..p-1]
        # kase = 4: e[p-2] is negligible, s[p-1] has converged
        k = p - 2
        while k >= 0:
            threshold = TINY + EPS * (abs(s[k]) + abs(s[k + 1]))
            if abs(e[k]) <= threshold:
                e[k] = 0.0
                break
            k -= 1

        if k == p - 2:
            kase = 4
        else:
            ks = p - 1
            while ks > k:
                t = (abs(e[ks]) if ks != p else 0.0) + (abs(e[ks - 1]) if ks != k + 1 else 0.0)
                if abs(s[ks]) <= TINY + EPS * t:
                    s[ks] = 0.0
                    break
                ks -= 1
            if ks == k:
                kase = 3
            elif ks == p - 1:
                kase = 1
            else:
                kase = 2
                k = ks
        k += 1

        if kase == 1:
            f = e[p - 2]
            e[p - 2] = 0.0
            for j in range(p - 2, k - 1, -1):
                t = np.hypot(s[j], f)
                cs = s[j] / t
                sn = f / t
                s[j] = t
                if j != k:
                    f = -sn * e[j - 1]
                    e[j - 1] = cs * e[j - 1]
                _rotate(V, j, p - 1, cs, sn)

        elif kase == 2:
            f = e[k - 1]
            e[k - 1] = 0.0
            for j in range(k, p):
                t = np.hypot(s[j], f)
                cs = s[j] / t
                sn = f / t
                s[j] = t
                f = -sn * e[j]
                e[j] = cs * e[j]
                _rotate(U, j, k - 1, cs, sn)

        elif kase == 3:
            if sweeps >= max_iterations:
                raise MaxIterationsExceededError(max_iterations)
            sweeps += 1

            scale = max(abs(s[p - 1]), abs(s[p - 2]), abs(e[p - 2]), abs(s[k]), abs(e[k]))
            sp = s[p - 1] / scale
            spm1 = s[p - 2] / scale
            epm1 = e[p - 2] / scale
            sk = s[k] / scale
            ek = e[k] / scale
            b = ((spm1 + sp) * (spm1 - sp) + epm1 * epm1) / 2.0
            c = (sp * epm1) * (sp * epm1)
            shift = 0.0
            if b != 0.0 or c != 0.0:
                shift = np.sqrt(b * b + c)
                if b < 0.0:
                    shift = -shift
                shift = c / (b + shift)
            f = (sk + sp) * (sk - sp) + shift
            g = sk * ek

            # Chase zeros
            for j in range(k, p - 1):
                t = np.hypot(f, g)
                cs = f / t
                sn = g / t
                if j != k:
                    e[j - 1] = t
                f = cs * s[j] + sn * e[j]
                e[j] = cs * e[j] - sn * s[j]
                g = sn * s[j + 1]
                s[j + 1] = cs * s[j + 1]
                _rotate(V, j, j + 1, cs, sn)

                t = np.hypot(f, g)
                cs = f / t
                sn = g / t
                s[j] = t
                f = cs * e[j] + sn * s[j + 1]
                s[j + 1] = -sn * e[j] + cs * s[j + 1]
                g = sn * e[j + 1]
                e[j + 1] = cs * e[j + 1]
                if j < m - 1:
                    _rotate(U, j, j + 1, cs, sn)
            e[p - 2] = f

        else:
            # Make the singular value positive
            if s[k] <= 0.0:
                s[k] = -s[k] if s[k] < 0.0 else 0.0
                V[:pp + 1, k] = -V[:pp + 1, k]

            # Order the singular values
            while k < pp:
                if s[k] >= s[k + 1]:
                    break
                s[k], s[k + 1] = s[k + 1], s[k]
                if k < n - 1:
                    V[:, [k, k + 1]] = V[:, [k + 1, k]]
                if k < m - 1:
                    U[:, [k, k + 1]] = U[:, [k + 1, k]]
                k += 1

            logger.debug("singular value %d converged after %d sweeps", p - 1, sweeps)
            sweeps = 0
            p -= 1

    return U, s, V


def _rotate(X, j, k, cs, sn):
    """Apply a Givens rotation to columns j and k of X in place."""
    x_j = X[:, j].copy()
    x_k = X[:, k].copy()
    X[:, j] = cs * x_j + sn * x_k
    X[:, k] = -sn * x_j + cs * x_k


class SingularValueDecomposition(Decomposition):
    """
    Singular value decomposition A = U S V'.

    Parameters
    ----------
    matrix : array_like, shape (m, n)
        Matrix to decompose (copied)
    tol : float, optional
        Relative truncation tolerance: singular values at or below
        ``max(tol * s_max, sqrt(SAFE_MIN))`` are treated as zero when
        computing rank and least-squares solutions. Defaults to
        ``max(m, n) * eps``.
    max_iterations : int, default=75
        QR sweeps allowed per singular value

    Raises
    ------
    MaxIterationsExceededError
        If the bidiagonal iteration fails to converge
    """

    def __init__(self, matrix, tol: Optional[float] = None,
                 max_iterations: int = DEFAULT_MAX_ITERATIONS):
        A = check_array(matrix, name='matrix', copy=True)
        m, n = A.shape
        self.m = m
        self.n = n

        # Work on the tall orientation
        transposed = m < n
        if transposed:
            A = A.T.copy()

        if min(m, n) == 0:
            rows, cols = A.shape
            U, s, V = np.zeros((rows, 0)), np.zeros(0), np.zeros((cols, 0))
        else:
            U, s, V = _golub_kahan(A, max_iterations)

        if transposed:
            U, V = V, U

        if tol is None:
            tol = max(m, n) * np.finfo(np.float64).eps
        largest = s[0] if len(s) > 0 else 0.0

        self.tol = tol
        self.threshold = max(tol * largest, np.sqrt(SAFE_MIN))
        self._U = readonly(U)
        self._s = readonly(s)
        self._V = readonly(V)

    @property
    def U(self) -> np.ndarray:
        return self._U.copy()

    @property
    def UT(self) -> np.ndarray:
        return self._U.T.copy()

    @property
    def V(self) -> np.ndarray:
        return self._V.copy()

    @property
    def VT(self) -> np.ndarray:
        return self._V.T.copy()

    @property
    def S(self) -> np.ndarray:
        """Diagonal matrix of singular values."""
        return np.diag(self._s)

    @property
    def singular_values(self) -> np.ndarray:
        return self._s

    @property
    def norm(self) -> float:
        """L2 norm (largest singular value)."""
        return float(self._s[0]) if len(self._s) else 0.0

    @property
    def condition_number(self) -> float:
        if len(self._s) == 0 or self._s[-1] == 0.0:
            return np.inf
        return float(self._s[0] / self._s[-1])

    @property
    def inverse_condition_number(self) -> float:
        if len(self._s) == 0 or self._s[0] == 0.0:
            return 0.0
        return float(self._s[-1] / self._s[0])

    @property
    def rank(self) -> int:
        return int(np.sum(self._s > self.threshold))

    @property
    def is_non_singular(self) -> bool:
        return self.m == self.n and self.rank == self.n

    def get_covariance(self, min_singular_value: float) -> np.ndarray:
        """
        (J'J)^-1 for a Jacobian J = A, ignoring singular values below
        ``min_singular_value``; zero singular values are always ignored.
        """
        keep = (self._s > 0.0) & (self._s >= min_singular_value)
        W = self._V[:, keep] / self._s[keep]
        return W @ W.T

    def get_solver(self) -> "SVDSolver":
        return SVDSolver(self._U, self._s, self._V, self.threshold, self.is_non_singular)


class SVDSolver(DecompositionSolver):
    """
    Pseudo-inverse solver.

    Singular values at or below the truncation threshold are dropped, so
    rank-deficient systems get the minimum-norm least-squares solution
    instead of an error.
    """

    def __init__(self, U: np.ndarray, s: np.ndarray, V: np.ndarray,
                 threshold: float, non_singular: bool):
        keep = s > threshold
        self.rows = U.shape[0]
        self.dropped = int(np.sum(~keep))
        self._non_singular = non_singular
        # pinv = V diag(1/s) U' over the retained singular values
        self._pseudo_inverse = readonly((V[:, keep] / s[keep]) @ U[:, keep].T)

    @property
    def is_non_singular(self) -> bool:
        return self._non_singular

    @property
    def pseudo_inverse(self) -> np.ndarray:
        return self._pseudo_inverse.copy()

    def _solve(self, b: np.ndarray) -> np.ndarray:
        if self.dropped:
            warnings.warn(
                f"Rank-deficient system: {self.dropped} singular value(s) "
                f"truncated, returning the minimum-norm least-squares solution.",
                UserWarning
            )
        return self._pseudo_inverse @ b
