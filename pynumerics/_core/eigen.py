"""
Eigen decomposition of real square matrices.

Symmetric matrices are reduced to tridiagonal form with Householder
reflections and diagonalised with implicit-shift QL sweeps. General
matrices are handed to LAPACK and may report complex conjugate pairs.
"""

import logging

import numpy as np
from scipy import linalg

from .base import Decomposition, DecompositionSolver
from .._utils import check_square, readonly
from ..exceptions import (
    MaxIterationsExceededError,
    NonSymmetricMatrixError,
    NotPositiveDefiniteError,
    SingularMatrixError,
)

logger = logging.getLogger(__name__)

EPS = np.finfo(np.float64).eps

DEFAULT_SPLIT_TOLERANCE = 0.0
DEFAULT_MAX_ITERATIONS = 30


def find_asymmetry(A: np.ndarray):
    """
    First pair (i, j), i < j, where a_ij and a_ji differ by more than
    10 * n * n * eps relative to the larger of the two; None if symmetric.
    """
    n = A.shape[0]
    tol = 10 * n * n * EPS
    scale = np.maximum(np.abs(A), np.abs(A.T))
    bad = np.triu(np.abs(A - A.T) > tol * scale, k=1)
    if not bad.any():
        return None
    i, j = np.argwhere(bad)[0]
    return int(i), int(j)


def tridiagonalize(A: np.ndarray):
    """
    Householder reduction of a symmetric matrix to tridiagonal form.

    Parameters
    ----------
    A : ndarray, shape (n, n)
        Symmetric matrix (not modified)

    Returns
    -------
    main : ndarray, shape (n,)
        Diagonal of T
    secondary : ndarray, shape (n - 1,)
        Off-diagonal of T
    Q : ndarray, shape (n, n)
        Orthogonal transform with A = Q T Q'
    """
    n = A.shape[0]
    T = A.copy()
    Q = np.eye(n, dtype=np.float64)

    for k in range(n - 2):
        x = T[k + 1:, k]
        alpha = np.sqrt(x @ x)
        if alpha == 0.0:
            continue
        if x[0] > 0:
            alpha = -alpha

        v = x.copy()
        v[0] -= alpha
        v_norm_sqr = v @ v
        if v_norm_sqr == 0.0:
            continue
        beta = 2.0 / v_norm_sqr

        # T <- P T P with P = I - beta v v'
        rows = T[k + 1:, :]
        rows -= beta * np.outer(v, v @ rows)
        cols = T[:, k + 1:]
        cols -= beta * np.outer(cols @ v, v)
        # Q <- Q P
        q_cols = Q[:, k + 1:]
        q_cols -= beta * np.outer(q_cols @ v, v)

    return np.diag(T).copy(), np.diag(T, 1).copy(), Q


def tridiagonal_ql(main, secondary, z, split_tolerance=DEFAULT_SPLIT_TOLERANCE,
                   max_iterations=DEFAULT_MAX_ITERATIONS):
    """
    Implicit-shift QL iteration on a symmetric tridiagonal matrix.

    Parameters
    ----------
    main : ndarray, shape (n,)
        Diagonal
    secondary : ndarray, shape (n - 1,)
        Off-diagonal
    z : ndarray, shape (n, n)
        Starting transform; its columns are rotated into eigenvectors
        (identity for T itself, Q from :func:`tridiagonalize` for A)
    split_tolerance : float
        Off-diagonal e_m is treated as zero when
        ``|e_m| <= split_tolerance * (|d_m| + |d_m+1|)``, or when adding
        it to that sum does not change the sum
    max_iterations : int
        Sweeps allowed per eigenvalue

    Returns
    -------
    d : ndarray, shape (n,)
        Eigenvalues (unsorted)
    z : ndarray, shape (n, n)
        Eigenvectors as columns

    Raises
    ------
    MaxIterationsExceededError
        If an eigenvalue needs more than ``max_iterations`` sweeps
    """
    n = len(main)
    d = np.array(main, dtype=np.float64, copy=True)
    e = np.zeros(n, dtype=np.float64)
    e[:n - 1] = secondary
    z = np.array(z, dtype=np.float64, copy=True)

    for j in range(n):
        its = 0
        while True:
            # Look for a small off-diagonal element to split the matrix
            m = j
            while m < n - 1:
                delta = abs(d[m]) + abs(d[m + 1])
                if abs(e[m]) <= split_tolerance * delta or abs(e[m]) + delta == delta:
                    break
                m += 1
            if m == j:
                break

            if its == max_iterations:
                raise MaxIterationsExceededError(max_iterations)
            its += 1

            # Wilkinson-style shift
            q = (d[j + 1] - d[j]) / (2 * e[j])
            t = np.sqrt(1 + q * q)
            if q < 0.0:
                q = d[m] - d[j] + e[j] / (q - t)
            else:
                q = d[m] - d[j] + e[j] / (q + t)

            u = 0.0
            s = 1.0
            c = 1.0
            underflow = False
            i = m - 1
            while i >= j:
                p = s * e[i]
                h = c * e[i]
                if abs(p) >= abs(q):
                    c = q / p
                    t = np.sqrt(c * c + 1.0)
                    e[i + 1] = p * t
                    s = 1.0 / t
                    c *= s
                else:
                    s = p / q
                    t = np.sqrt(s * s + 1.0)
                    e[i + 1] = q * t
                    c = 1.0 / t
                    s *= c

                if e[i + 1] == 0.0:
                    d[i + 1] -= u
                    e[m] = 0.0
                    underflow = True
                    break

                q = d[i + 1] - u
                t = (d[i] - q) * s + 2.0 * c * h
                u = s * t
                d[i + 1] = q + u
                q = c * t - h

                z_i = z[:, i].copy()
                z_next = z[:, i + 1].copy()
                z[:, i + 1] = s * z_i + c * z_next
                z[:, i] = c * z_i - s * z_next
                i -= 1

            if underflow:
                continue

            d[j] -= u
            e[j] = q
            e[m] = 0.0

        logger.debug("eigenvalue %d converged after %d sweeps", j, its)

    return d, z


class EigenDecomposition(Decomposition):
    """
    Eigen decomposition A = V D V^-1.

    Parameters
    ----------
    matrix : array_like, shape (n, n)
        Square matrix (copied)
    split_tolerance : float, default=0.0
        Relative size below which a tridiagonal off-diagonal entry is
        deflated (see :func:`tridiagonal_ql`)
    max_iterations : int, default=30
        QL sweeps allowed per eigenvalue

    Notes
    -----
    Only the symmetric path is computed here; eigenvalues come out
    real, sorted in decreasing order, with values below eps * max|lambda|
    flushed to zero. Non-symmetric input is decomposed by LAPACK
    (``scipy.linalg.eig``) and may have complex eigenvalues; the solver
    and square root are not available in that case.
    """

    def __init__(self, matrix, split_tolerance: float = DEFAULT_SPLIT_TOLERANCE,
                 max_iterations: int = DEFAULT_MAX_ITERATIONS):
        A = check_square(matrix, name='matrix')
        n = A.shape[0]
        self.n = n
        self.split_tolerance = split_tolerance
        self._asymmetry = find_asymmetry(A)
        self.is_symmetric = self._asymmetry is None

        if self.is_symmetric:
            main, secondary, Q = tridiagonalize(A)
            d, z = tridiagonal_ql(main, secondary, Q, split_tolerance, max_iterations)

            order = np.argsort(-d, kind='stable')
            d = d[order]
            z = z[:, order]

            max_abs = np.max(np.abs(d)) if n > 0 else 0.0
            d[np.abs(d) <= EPS * max_abs] = 0.0

            self._real = readonly(d)
            self._imag = readonly(np.zeros(n))
            self._vectors = readonly(z)
        else:
            logger.debug("non-symmetric %dx%d matrix, using LAPACK", n, n)
            w, vr = linalg.eig(A)
            order = np.argsort(-w.real, kind='stable')
            w = w[order]
            vr = vr[:, order]
            self._real = readonly(w.real)
            self._imag = readonly(w.imag)
            if np.any(w.imag != 0.0):
                vr = vr.copy()
                vr.flags.writeable = False
                self._vectors = vr
            else:
                self._vectors = readonly(vr.real)

    @classmethod
    def from_tridiagonal(cls, main, secondary,
                         split_tolerance: float = DEFAULT_SPLIT_TOLERANCE,
                         max_iterations: int = DEFAULT_MAX_ITERATIONS):
        """Decompose the symmetric tridiagonal matrix given by its two diagonals."""
        main = np.asarray(main, dtype=np.float64)
        secondary = np.asarray(secondary, dtype=np.float64)
        n = len(main)
        T = np.diag(main)
        if n > 1:
            T += np.diag(secondary, 1) + np.diag(secondary, -1)
        return cls(T, split_tolerance=split_tolerance, max_iterations=max_iterations)

    @property
    def real_eigenvalues(self) -> np.ndarray:
        return self._real

    @property
    def imag_eigenvalues(self) -> np.ndarray:
        return self._imag

    def get_real_eigenvalue(self, i: int) -> float:
        return float(self._real[i])

    def get_imag_eigenvalue(self, i: int) -> float:
        return float(self._imag[i])

    def has_complex_eigenvalues(self) -> bool:
        return bool(np.any(self._imag != 0.0))

    def get_eigenvector(self, i: int) -> np.ndarray:
        return self._vectors[:, i].copy()

    @property
    def V(self) -> np.ndarray:
        """Eigenvectors as columns."""
        return self._vectors.copy()

    @property
    def VT(self) -> np.ndarray:
        return self._vectors.T.copy()

    @property
    def D(self) -> np.ndarray:
        """Block diagonal eigenvalue matrix (2x2 blocks for complex pairs)."""
        D = np.diag(self._real)
        for i, im in enumerate(self._imag):
            if im > 0:
                D[i, i + 1] = im
            elif im < 0:
                D[i, i - 1] = im
        return D

    @property
    def determinant(self) -> float:
        """Product of the eigenvalues."""
        if self.has_complex_eigenvalues():
            return float(np.prod(self._real + 1j * self._imag).real)
        return float(np.prod(self._real))

    def get_square_root(self) -> np.ndarray:
        """
        Matrix square root V sqrt(D) V' of a symmetric positive-definite matrix.

        Raises
        ------
        NonSymmetricMatrixError
            If the decomposed matrix was not symmetric
        NotPositiveDefiniteError
            If an eigenvalue is not strictly positive
        """
        self._require_symmetric()
        for i, eigenvalue in enumerate(self._real):
            if eigenvalue <= 0:
                raise NotPositiveDefiniteError(i)
        V = self._vectors
        return (V * np.sqrt(self._real)) @ V.T

    @property
    def is_non_singular(self) -> bool:
        norms = np.hypot(self._real, self._imag)
        largest = norms.max() if self.n > 0 else 0.0
        if largest == 0.0:
            return False
        return bool(np.all(norms / largest > EPS))

    def get_solver(self) -> "EigenSolver":
        self._require_symmetric()
        return EigenSolver(self._real, self._vectors, self.is_non_singular)

    def _require_symmetric(self):
        if not self.is_symmetric:
            raise NonSymmetricMatrixError(*self._asymmetry)


class EigenSolver(DecompositionSolver):
    """x = V diag(1/lambda) V' b for symmetric matrices; fails fast when singular."""

    def __init__(self, eigenvalues: np.ndarray, vectors: np.ndarray, non_singular: bool):
        self._eigenvalues = eigenvalues
        self._vectors = vectors
        self._non_singular = non_singular
        self.rows = vectors.shape[0]

    @property
    def is_non_singular(self) -> bool:
        return self._non_singular

    def _solve(self, b: np.ndarray) -> np.ndarray:
        if not self._non_singular:
            raise SingularMatrixError()
        V = self._vectors
        coeffs = V.T @ b
        if b.ndim == 1:
            return V @ (coeffs / self._eigenvalues)
        return V @ (coeffs / self._eigenvalues[:, np.newaxis])
