"""
Simplex vertex sets for direct-search optimization.

A simplex in n dimensions is n + 1 vertices, each a point and (once
evaluated) its objective value. Vertices are kept sorted from best to
worst and are only ever replaced whole.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
import math
from typing import Optional, Sequence

import numpy as np
import pandas as pd

from .._utils import check_vector, readonly
from ..exceptions import DegenerateSimplexError, DimensionMismatchError, NoDataError
from ..functions import as_multivariate

#: Value of a vertex that has not been evaluated yet.
UNEVALUATED = None


class GoalType(Enum):
    """Direction of optimization."""
    MINIMIZE = "minimize"
    MAXIMIZE = "maximize"


@dataclass(frozen=True, eq=False)
class PointValuePair:
    """
    A vertex: a read-only point and its objective value.

    ``value`` is ``UNEVALUATED`` until the objective has been computed.
    """
    point: np.ndarray
    value: Optional[float] = UNEVALUATED

    def __post_init__(self):
        object.__setattr__(self, 'point', readonly(self.point))
        if self.value is not None:
            object.__setattr__(self, 'value', float(self.value))

    @property
    def is_evaluated(self) -> bool:
        return self.value is not UNEVALUATED


def rank_key(goal: GoalType):
    """
    Sort key ordering vertices from best to worst for ``goal``.

    Unevaluated and NaN values rank after every number.
    """
    sign = 1.0 if goal == GoalType.MINIMIZE else -1.0

    def key(pair: PointValuePair):
        value = pair.value
        if value is UNEVALUATED or math.isnan(value):
            return (1, 0.0)
        return (0, sign * value)

    return key


def compare(a: PointValuePair, b: PointValuePair, goal: GoalType) -> int:
    """-1, 0 or 1 as ``a`` is better than, tied with or worse than ``b``."""
    key = rank_key(goal)
    ka, kb = key(a), key(b)
    return (ka > kb) - (ka < kb)


class Simplex:
    """
    Simplex defined by per-axis steps.

    This is a vertex container only; the search steps live in
    :class:`DirectSearchSimplex` subclasses.

    Vertex i (i >= 1) of the built simplex is the start point plus
    ``(steps[0], ..., steps[i-1], 0, ..., 0)``.

    Parameters
    ----------
    steps : sequence of float
        Non-zero step along each axis; its length is the dimension

    Raises
    ------
    DegenerateSimplexError
        If ``steps`` is empty or contains a zero
    """

    def __init__(self, steps: Sequence[float]):
        steps = np.asarray(steps, dtype=np.float64)
        if steps.ndim != 1 or len(steps) == 0:
            raise DegenerateSimplexError(())
        zeros = np.flatnonzero(steps == 0.0)
        if len(zeros):
            raise DegenerateSimplexError(tuple(int(i) for i in zeros))

        n = len(steps)
        # Row i holds the offset of vertex i + 1
        self._offsets = np.tril(np.tile(steps, (n, 1)))
        self._vertices = None

    @classmethod
    def hypercube(cls, dimension: int, side_length: float = 1.0, **kwargs):
        """Simplex whose offsets span a hypercube corner of the given side."""
        return cls(np.full(dimension, side_length, dtype=np.float64), **kwargs)

    @classmethod
    def from_reference(cls, points, **kwargs):
        """
        Simplex with the shape of a reference vertex set.

        The offsets are ``points[i] - points[0]``; only the shape is kept,
        the simplex is positioned by :meth:`build`.

        Raises
        ------
        DegenerateSimplexError
            If fewer than two points are given, or two points coincide
        DimensionMismatchError
            If a point does not have ``len(points) - 1`` coordinates
        """
        points = [np.asarray(p, dtype=np.float64) for p in points]
        if len(points) < 2:
            raise DegenerateSimplexError(())
        n = len(points) - 1
        for p in points:
            if p.shape != (n,):
                raise DimensionMismatchError(n, p.size)
        for i in range(1, len(points)):
            for j in range(i):
                if np.array_equal(points[i], points[j]):
                    raise DegenerateSimplexError((i, j))

        simplex = cls(np.ones(n), **kwargs)
        simplex._offsets = np.array([p - points[0] for p in points[1:]])
        return simplex

    @property
    def dimension(self) -> int:
        return self._offsets.shape[1]

    @property
    def size(self) -> int:
        """Number of vertices."""
        return self.dimension + 1

    def build(self, start_point) -> None:
        """
        Place the simplex at ``start_point``; every vertex is unevaluated.

        Raises
        ------
        DimensionMismatchError
            If ``start_point`` does not have ``dimension`` coordinates
        """
        start = check_vector(start_point, name='start_point', copy=True)
        if len(start) != self.dimension:
            raise DimensionMismatchError(self.dimension, len(start))
        self._vertices = [PointValuePair(start)]
        self._vertices.extend(PointValuePair(start + offset) for offset in self._offsets)

    def evaluate(self, function, goal: GoalType = GoalType.MINIMIZE) -> None:
        """
        Evaluate every unevaluated vertex, then sort best to worst.

        Ties keep their current order.
        """
        f = as_multivariate(function)
        vertices = self._require_vertices()
        for i, vertex in enumerate(vertices):
            if not vertex.is_evaluated:
                vertices[i] = PointValuePair(vertex.point, f.value(vertex.point))
        vertices.sort(key=rank_key(goal))

    def replace_worst_point(self, vertex: PointValuePair,
                            goal: GoalType = GoalType.MINIMIZE) -> None:
        """
        Insert ``vertex`` in order and drop the worst vertex.

        Assumes the simplex is sorted and ``vertex`` is evaluated.
        """
        vertices = self._require_vertices()
        n = self.dimension
        for i in range(n):
            if compare(vertices[i], vertex, goal) > 0:
                vertices[i], vertex = vertex, vertices[i]
        vertices[n] = vertex

    def get_point(self, index: int) -> PointValuePair:
        vertices = self._require_vertices()
        return vertices[index]

    def set_point(self, index: int, vertex: PointValuePair) -> None:
        vertices = self._require_vertices()
        if len(vertex.point) != self.dimension:
            raise DimensionMismatchError(self.dimension, len(vertex.point))
        vertices[index] = vertex

    @property
    def points(self):
        """Copy of the vertex list."""
        return list(self._require_vertices())

    def set_points(self, vertices: Sequence[PointValuePair]) -> None:
        if len(vertices) != self.size:
            raise DimensionMismatchError(self.size, len(vertices))
        self._vertices = list(vertices)

    def to_frame(self) -> pd.DataFrame:
        """Vertices as a DataFrame: one row per vertex, ``x0..xn-1`` and ``value``."""
        vertices = self._require_vertices()
        columns = [f"x{j}" for j in range(self.dimension)]
        frame = pd.DataFrame([v.point for v in vertices], columns=columns)
        frame['value'] = [np.nan if v.value is UNEVALUATED else v.value for v in vertices]
        return frame

    def _require_vertices(self):
        if self._vertices is None:
            raise NoDataError()
        return self._vertices


class DirectSearchSimplex(Simplex, ABC):
    """Simplex that knows how to take one step of a direct-search method."""

    @abstractmethod
    def iterate(self, function, goal: GoalType = GoalType.MINIMIZE) -> None:
        """Replace vertices according to the method; the simplex stays sorted."""
        pass


class NelderMeadSimplex(DirectSearchSimplex):
    """
    Nelder-Mead reflection, expansion, contraction and shrink.

    Parameters
    ----------
    steps : sequence of float
    rho : float, default=1.0
        Reflection coefficient
    khi : float, default=2.0
        Expansion coefficient
    gamma : float, default=0.5
        Contraction coefficient
    sigma : float, default=0.5
        Shrinkage coefficient
    """

    def __init__(self, steps, rho: float = 1.0, khi: float = 2.0,
                 gamma: float = 0.5, sigma: float = 0.5):
        super().__init__(steps)
        self.rho = rho
        self.khi = khi
        self.gamma = gamma
        self.sigma = sigma

    def iterate(self, function, goal: GoalType = GoalType.MINIMIZE) -> None:
        f = as_multivariate(function)
        n = self.dimension
        best = self.get_point(0)
        second_worst = self.get_point(n - 1)
        worst = self.get_point(n)
        x_worst = worst.point

        # Centroid of the n best vertices
        centroid = np.mean([self.get_point(i).point for i in range(n)], axis=0)

        x_r = centroid + self.rho * (centroid - x_worst)
        reflected = PointValuePair(x_r, f.value(x_r))

        if compare(best, reflected, goal) <= 0 and compare(reflected, second_worst, goal) < 0:
            self.replace_worst_point(reflected, goal)
            return

        if compare(reflected, best, goal) < 0:
            x_e = centroid + self.khi * (x_r - centroid)
            expanded = PointValuePair(x_e, f.value(x_e))
            if compare(expanded, reflected, goal) < 0:
                self.replace_worst_point(expanded, goal)
            else:
                self.replace_worst_point(reflected, goal)
            return

        if compare(reflected, worst, goal) < 0:
            # Outside contraction
            x_c = centroid + self.gamma * (x_r - centroid)
            contracted = PointValuePair(x_c, f.value(x_c))
            if compare(contracted, reflected, goal) <= 0:
                self.replace_worst_point(contracted, goal)
                return
        else:
            # Inside contraction
            x_c = centroid - self.gamma * (centroid - x_worst)
            contracted = PointValuePair(x_c, f.value(x_c))
            if compare(contracted, worst, goal) < 0:
                self.replace_worst_point(contracted, goal)
                return

        # Shrink towards the best vertex
        x_best = self.get_point(0).point
        for i in range(1, n + 1):
            x = self.get_point(i).point
            self.set_point(i, PointValuePair(x_best + self.sigma * (x - x_best)))
        self.evaluate(f, goal)


class MultiDirectionalSimplex(DirectSearchSimplex):
    """
    Torczon's multi-directional search: every vertex except the best is
    reflected, expanded or contracted through the best one.

    Parameters
    ----------
    steps : sequence of float
    khi : float, default=2.0
        Expansion coefficient
    gamma : float, default=0.5
        Contraction coefficient
    """

    def __init__(self, steps, khi: float = 2.0, gamma: float = 0.5):
        super().__init__(steps)
        self.khi = khi
        self.gamma = gamma

    def iterate(self, function, goal: GoalType = GoalType.MINIMIZE) -> None:
        f = as_multivariate(function)
        original = self.points
        best = original[0]

        reflected = self._transform(f, original, 1.0, goal)
        if compare(reflected, best, goal) < 0:
            reflected_vertices = self.points
            expanded = self._transform(f, original, self.khi, goal)
            if compare(reflected, expanded, goal) <= 0:
                self.set_points(reflected_vertices)
            return

        # Contract the other vertices halfway back towards the best one
        self._transform(f, original, -self.gamma, goal)

    def _transform(self, f, original, coefficient, goal) -> PointValuePair:
        """
        Replace vertex i by ``x0 + coefficient * (x0 - xi)``, evaluate and
        sort; returns the new best vertex.
        """
        x_best = original[0].point
        self.set_point(0, original[0])
        for i in range(1, self.size):
            x = original[i].point
            self.set_point(i, PointValuePair(x_best + coefficient * (x_best - x)))
        self.evaluate(f, goal)
        return self.get_point(0)
