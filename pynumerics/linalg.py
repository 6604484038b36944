"""
Matrix decompositions and linear solves.

This is the user-facing entry point: pick a decomposition by name, or use
the shortcuts for the common one-off solves.
"""

from typing import Optional

import numpy as np

from ._core import (
    CholeskyDecomposition,
    Decomposition,
    EigenDecomposition,
    QRDecomposition,
    SingularValueDecomposition,
)

_DECOMPOSITIONS = {
    'cholesky': CholeskyDecomposition,
    'qr': QRDecomposition,
    'eigen': EigenDecomposition,
    'svd': SingularValueDecomposition,
}


def get_decomposition(name: str):
    """
    Look up a decomposition class.

    Parameters
    ----------
    name : str
        One of 'cholesky', 'qr', 'eigen', 'svd'

    Returns
    -------
    type
        Decomposition class; call it with the matrix (and options)

    Examples
    --------
    >>> QR = get_decomposition('qr')
    >>> x = QR(A).get_solver().solve(b)
    """
    try:
        return _DECOMPOSITIONS[name.lower()]
    except KeyError:
        raise ValueError(
            f"Unknown decomposition: '{name}'\n"
            f"Valid options: {', '.join(repr(k) for k in _DECOMPOSITIONS)}"
        ) from None


def list_decompositions() -> list:
    """Names accepted by :func:`get_decomposition`."""
    return list(_DECOMPOSITIONS)


def decompose(matrix, method: str = 'qr', **options) -> Decomposition:
    """Decompose ``matrix`` with the named method."""
    return get_decomposition(method)(matrix, **options)


def cholesky(matrix, **options) -> CholeskyDecomposition:
    return CholeskyDecomposition(matrix, **options)


def qr(matrix, tol: Optional[float] = None) -> QRDecomposition:
    return QRDecomposition(matrix, tol=tol)


def eig(matrix, **options) -> EigenDecomposition:
    return EigenDecomposition(matrix, **options)


def svd(matrix, tol: Optional[float] = None, **options) -> SingularValueDecomposition:
    return SingularValueDecomposition(matrix, tol=tol, **options)


def solve(matrix, b, method: str = 'qr', **options) -> np.ndarray:
    """
    Solve ``A x = b`` through a decomposition.

    Parameters
    ----------
    matrix : array_like, shape (m, n)
    b : array_like, shape (m,) or (m, k)
    method : str, default='qr'
        Decomposition to use (see :func:`list_decompositions`)

    Raises
    ------
    SingularMatrixError
        If the chosen decomposition cannot solve a singular system
    """
    return decompose(matrix, method, **options).get_solver().solve(b)


def lstsq(matrix, b, tol: Optional[float] = None) -> np.ndarray:
    """
    Minimum-norm least-squares solution via the SVD.

    Rank-deficient systems are solved with truncated singular values
    (a ``UserWarning`` is issued).
    """
    return SingularValueDecomposition(matrix, tol=tol).get_solver().solve(b)


def inv(matrix, method: str = 'qr', **options) -> np.ndarray:
    """Inverse of a square non-singular matrix."""
    return decompose(matrix, method, **options).get_solver().get_inverse()


__all__ = [
    'get_decomposition',
    'list_decompositions',
    'decompose',
    'cholesky',
    'qr',
    'eig',
    'svd',
    'solve',
    'lstsq',
    'inv',
]
