"""
Core algorithms (decompositions and iterative kernels).
"""

from .base import Decomposition, DecompositionSolver
from .cholesky import CholeskyDecomposition, CholeskySolver
from .qr import QRDecomposition, QRSolver
from .eigen import EigenDecomposition, EigenSolver
from .svd import SingularValueDecomposition, SVDSolver
from .convergence import ConvergenceState, verify_iteration_bounds
from .ridders import Bracket, RiddersSolver, ridders_step
from .quadrature import SimpsonIntegrator, TrapezoidIntegrator, trapezoid_stage
from .simplex import (
    UNEVALUATED,
    DirectSearchSimplex,
    GoalType,
    MultiDirectionalSimplex,
    NelderMeadSimplex,
    PointValuePair,
    Simplex,
)

__all__ = [
    "Decomposition",
    "DecompositionSolver",
    "CholeskyDecomposition",
    "CholeskySolver",
    "QRDecomposition",
    "QRSolver",
    "EigenDecomposition",
    "EigenSolver",
    "SingularValueDecomposition",
    "SVDSolver",
    "ConvergenceState",
    "verify_iteration_bounds",
    "Bracket",
    "RiddersSolver",
    "ridders_step",
    "SimpsonIntegrator",
    "TrapezoidIntegrator",
    "trapezoid_stage",
    "UNEVALUATED",
    "GoalType",
    "PointValuePair",
    "Simplex",
    "DirectSearchSimplex",
    "NelderMeadSimplex",
    "MultiDirectionalSimplex",
]
