"""
Abstract base classes for decompositions and their solvers.

Defines the interface every decomposition must implement.
"""

from abc import ABC, abstractmethod
import numpy as np

from .._utils import check_rhs
from ..exceptions import SingularMatrixError


class DecompositionSolver(ABC):
    """
    Solve linear systems against stored factors.

    ``solve`` returns the X minimising ||A X - B||_2; for a square
    non-singular A that is the exact solution. Solvers only read the
    factors they were built from.
    """

    #: Number of rows a right-hand side must have.
    rows: int

    @property
    @abstractmethod
    def is_non_singular(self) -> bool:
        """Whether the decomposed matrix is invertible."""
        pass

    @abstractmethod
    def _solve(self, b: np.ndarray) -> np.ndarray:
        """
        Solve for a validated right-hand side.

        Parameters
        ----------
        b : ndarray, shape (rows,) or (rows, k)
            Private copy of the right-hand side

        Returns
        -------
        ndarray
            Solution with the same number of dimensions as ``b``
        """
        pass

    def solve(self, b) -> np.ndarray:
        """
        Solve A x = b (vector) or A X = B (matrix).

        Parameters
        ----------
        b : array_like, shape (rows,) or (rows, k)
            Right-hand side

        Returns
        -------
        ndarray, shape (cols,) or (cols, k)
            Least-squares solution
        """
        return self._solve(check_rhs(b, self.rows))

    def get_inverse(self) -> np.ndarray:
        """
        Inverse (or least-squares pseudo-inverse) of the decomposed matrix.

        Raises
        ------
        SingularMatrixError
            If the matrix is singular
        """
        if not self.is_non_singular:
            raise SingularMatrixError()
        return self._solve(np.eye(self.rows))


class Decomposition(ABC):
    """A matrix factorisation computed once at construction."""

    @abstractmethod
    def get_solver(self) -> DecompositionSolver:
        """Solver bound to this decomposition's factors."""
        pass

    @property
    @abstractmethod
    def is_non_singular(self) -> bool:
        """Rank / singularity flag derived from the factors."""
        pass
