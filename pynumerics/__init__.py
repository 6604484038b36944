"""
PyNumerics: matrix decompositions, root finding, quadrature and simplex search.

Copyright (C) 2024 SGCX
Licensed under GPL-3.0
"""

__version__ = "1.0.0"

# Import main user-facing API
from .linalg import (
    get_decomposition,
    list_decompositions,
    solve,
    lstsq,
    inv,
)
from .roots import ridders
from .integrate import simpson, trapezoid
from .optimize import nelder_mead, multi_directional, GoalType

# Import core classes (for advanced users)
from ._core import (
    CholeskyDecomposition,
    QRDecomposition,
    EigenDecomposition,
    SingularValueDecomposition,
    RiddersSolver,
    SimpsonIntegrator,
    TrapezoidIntegrator,
    Simplex,
    DirectSearchSimplex,
    NelderMeadSimplex,
    MultiDirectionalSimplex,
    PointValuePair,
)
from .exceptions import NumericsError

__all__ = [
    'get_decomposition',
    'list_decompositions',
    'solve',
    'lstsq',
    'inv',
    'ridders',
    'simpson',
    'trapezoid',
    'nelder_mead',
    'multi_directional',
    'GoalType',
    'CholeskyDecomposition',
    'QRDecomposition',
    'EigenDecomposition',
    'SingularValueDecomposition',
    'RiddersSolver',
    'SimpsonIntegrator',
    'TrapezoidIntegrator',
    'Simplex',
    'DirectSearchSimplex',
    'NelderMeadSimplex',
    'MultiDirectionalSimplex',
    'PointValuePair',
    'NumericsError',
]
