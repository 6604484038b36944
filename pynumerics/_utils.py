"""
Utility functions.
"""

import numpy as np

from .exceptions import DimensionMismatchError


def check_array(X, name='X', dtype=np.float64, copy=False):
    """Validate array input."""
    X = np.array(X, dtype=dtype, copy=True) if copy else np.asarray(X, dtype=dtype)
    if X.ndim != 2:
        raise ValueError(f"{name} must be 2-dimensional")
    if not np.all(np.isfinite(X)):
        raise ValueError(f"{name} contains NaN or Inf")
    return X


def check_vector(y, name='y', dtype=np.float64, copy=False):
    """Validate vector input."""
    y = np.array(y, dtype=dtype, copy=True) if copy else np.asarray(y, dtype=dtype)
    if y.ndim != 1:
        raise ValueError(f"{name} must be 1-dimensional")
    if not np.all(np.isfinite(y)):
        raise ValueError(f"{name} contains NaN or Inf")
    return y


def check_square(X, name='X'):
    """Validate a square matrix and return a private float64 copy."""
    X = check_array(X, name=name, copy=True)
    if X.shape[0] != X.shape[1]:
        raise DimensionMismatchError(X.shape[0], X.shape[1])
    return X


def check_rhs(b, rows, name='b'):
    """
    Validate a right-hand side against the row count of a decomposed matrix.

    Accepts a vector (n,) or a matrix (n, k); returns a float64 copy.
    """
    b = np.array(b, dtype=np.float64, copy=True)
    if b.ndim not in (1, 2):
        raise ValueError(f"{name} must be 1- or 2-dimensional")
    if b.shape[0] != rows:
        raise DimensionMismatchError(rows, b.shape[0])
    if not np.all(np.isfinite(b)):
        raise ValueError(f"{name} contains NaN or Inf")
    return b


def readonly(a):
    """Return a copy of ``a`` that cannot be written through."""
    a = np.array(a, dtype=np.float64, copy=True)
    a.flags.writeable = False
    return a
