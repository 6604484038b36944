"""
Test matrix decompositions against closed forms and NumPy/SciPy references.

Covers:
- Cholesky factor values, reconstruction and error detection
- Householder QR reconstruction, orthogonality and rank
- Symmetric and general eigen decompositions
- Singular value decomposition and its pseudo-inverse solver
"""

import pytest
import numpy as np

from pynumerics._core import (
    CholeskyDecomposition,
    EigenDecomposition,
    QRDecomposition,
    SingularValueDecomposition,
)
from pynumerics.exceptions import (
    DimensionMismatchError,
    MaxIterationsExceededError,
    NonSymmetricMatrixError,
    NotPositiveDefiniteError,
    SingularMatrixError,
)


# Tolerances
FACTOR_TOL = 1e-10
ORTHO_TOL = 1e-12
SVD_TOL = 1e-13

SPD = np.array([
    [10.0, 2.0, -1.0],
    [2.0, 5.0, -2.0],
    [-1.0, -2.0, 15.0],
])

SVD_SYMMETRIC = np.array([
    [4.75, 3.0, 5.5, 3.25],
    [3.0, 3.125, 2.75, 4.25],
    [5.5, 2.75, 20.5, 0.0],
    [3.25, 4.25, 0.0, 17.75],
])


def random_spd(n, seed=42):
    rng = np.random.RandomState(seed)
    M = rng.randn(n, n)
    return M @ M.T + n * np.eye(n)


class TestCholesky:
    """Test Cholesky decomposition."""

    def test_known_factor(self):
        """Upper factor of a 3x3 SPD matrix matches hand-computed values."""
        expected = np.array([
            [3.1622776601683795, 0.6324555320336759, -0.31622776601683794],
            [0.0, 2.1447610589527217, -0.8392543274162825],
            [0.0, 0.0, 3.7677117954951176],
        ])
        chol = CholeskyDecomposition(SPD)
        np.testing.assert_array_equal(chol.LT, expected)

    def test_reconstruction(self):
        """L L' reproduces the input."""
        A = random_spd(6)
        chol = CholeskyDecomposition(A)
        L = chol.L
        np.testing.assert_allclose(L @ L.T, A, atol=FACTOR_TOL)

    def test_strict_upper_triangle_is_zero(self):
        """L is exactly lower triangular."""
        L = CholeskyDecomposition(random_spd(5)).L
        assert np.all(np.triu(L, k=1) == 0.0)

    def test_input_not_modified(self):
        """The caller's matrix is left untouched."""
        A = SPD.copy()
        CholeskyDecomposition(A)
        np.testing.assert_array_equal(A, SPD)

    def test_determinant(self):
        """Determinant matches NumPy."""
        chol = CholeskyDecomposition(SPD)
        np.testing.assert_allclose(chol.determinant, np.linalg.det(SPD), rtol=1e-12)

    def test_solve(self):
        """Solver matches a direct solve."""
        A = random_spd(5)
        b = np.arange(1.0, 6.0)
        x = CholeskyDecomposition(A).get_solver().solve(b)
        np.testing.assert_allclose(x, np.linalg.solve(A, b), atol=FACTOR_TOL)

    def test_not_positive_definite(self):
        """A negative pivot is reported with its row."""
        A = np.array([[1.0, 2.0], [2.0, 1.0]])
        with pytest.raises(NotPositiveDefiniteError) as excinfo:
            CholeskyDecomposition(A)
        assert excinfo.value.row == 1

    def test_non_symmetric(self):
        """Asymmetry is reported with its position."""
        A = SPD.copy()
        A[0, 2] = 3.0
        with pytest.raises(NonSymmetricMatrixError) as excinfo:
            CholeskyDecomposition(A)
        assert (excinfo.value.row, excinfo.value.column) == (0, 2)

    def test_not_square(self):
        """Rectangular input is rejected."""
        with pytest.raises(DimensionMismatchError, match="expected 2, got 3"):
            CholeskyDecomposition(np.ones((2, 3)))

    def test_factor_is_read_only(self):
        """Stored factor cannot be written through."""
        chol = CholeskyDecomposition(SPD)
        with pytest.raises(ValueError):
            chol.LT[0, 0] = 1.0


class TestQR:
    """Test Householder QR decomposition."""

    def setup_method(self):
        np.random.seed(42)
        self.A = np.random.randn(7, 4)

    def test_reconstruction(self):
        """Q R reproduces the input."""
        qr = QRDecomposition(self.A)
        np.testing.assert_allclose(qr.Q @ qr.R, self.A, atol=ORTHO_TOL)

    def test_q_orthogonal(self):
        """Q' Q is the identity."""
        Q = QRDecomposition(self.A).Q
        np.testing.assert_allclose(Q.T @ Q, np.eye(7), atol=ORTHO_TOL)

    def test_r_upper_triangular(self):
        """R has nothing below the diagonal."""
        R = QRDecomposition(self.A).R
        assert np.all(np.tril(R, k=-1) == 0.0)

    def test_householder_vectors(self):
        """H is lower trapezoidal."""
        H = QRDecomposition(self.A).H
        assert H.shape == (7, 4)
        assert np.all(np.triu(H, k=1) == 0.0)

    def test_least_squares(self):
        """Solver gives the least-squares solution of a tall system."""
        b = np.random.randn(7)
        x = QRDecomposition(self.A).get_solver().solve(b)
        expected = np.linalg.lstsq(self.A, b, rcond=None)[0]
        np.testing.assert_allclose(x, expected, atol=ORTHO_TOL)

    def test_matrix_rhs(self):
        """A matrix right-hand side is solved column by column."""
        B = np.random.randn(7, 2)
        X = QRDecomposition(self.A).get_solver().solve(B)
        assert X.shape == (4, 2)
        expected = np.linalg.lstsq(self.A, B, rcond=None)[0]
        np.testing.assert_allclose(X, expected, atol=ORTHO_TOL)

    def test_inverse(self):
        """Inverse of a square matrix."""
        A = random_spd(4)
        inv = QRDecomposition(A).get_solver().get_inverse()
        np.testing.assert_allclose(inv @ A, np.eye(4), atol=ORTHO_TOL)

    def test_rank_deficient(self):
        """Dependent columns lower the rank and block solving."""
        A = self.A.copy()
        A[:, 3] = A[:, 0] + A[:, 1]
        qr = QRDecomposition(A, tol=1e-10)
        assert qr.rank == 3
        assert not qr.is_full_rank
        solver = qr.get_solver()
        assert not solver.is_non_singular
        with pytest.raises(SingularMatrixError):
            solver.solve(np.ones(7))

    def test_zero_matrix_rank(self):
        """An all-zero matrix has rank 0."""
        assert QRDecomposition(np.zeros((3, 2))).rank == 0

    def test_wide_matrix_rejected(self):
        """More columns than rows is rejected."""
        with pytest.raises(DimensionMismatchError):
            QRDecomposition(np.ones((2, 3)))

    def test_rhs_length_checked(self):
        """Right-hand side must match the row count."""
        solver = QRDecomposition(self.A).get_solver()
        with pytest.raises(DimensionMismatchError, match="expected 7, got 3"):
            solver.solve(np.ones(3))


class TestEigen:
    """Test eigen decomposition."""

    def test_two_by_two(self):
        """Eigenvalues of [[1, 2], [2, 1]] are 3 and -1."""
        eig = EigenDecomposition([[1.0, 2.0], [2.0, 1.0]])
        np.testing.assert_allclose(eig.real_eigenvalues, [3.0, -1.0], atol=1e-14)
        np.testing.assert_allclose(eig.determinant, -3.0, rtol=1e-12)
        assert not eig.has_complex_eigenvalues()

    def test_reconstruction(self):
        """V D V' reproduces a symmetric matrix."""
        A = random_spd(6)
        eig = EigenDecomposition(A)
        np.testing.assert_allclose(eig.V @ eig.D @ eig.VT, A, atol=FACTOR_TOL)
        np.testing.assert_allclose(eig.VT @ eig.V, np.eye(6), atol=FACTOR_TOL)

    def test_sorted_descending(self):
        """Eigenvalues come out largest first and match LAPACK."""
        A = random_spd(5, seed=7)
        values = EigenDecomposition(A).real_eigenvalues
        assert np.all(np.diff(values) <= 0)
        np.testing.assert_allclose(values, np.linalg.eigvalsh(A)[::-1], rtol=1e-12)

    def test_eigenvector(self):
        """A v = lambda v for each pair."""
        A = random_spd(4)
        eig = EigenDecomposition(A)
        for i in range(4):
            v = eig.get_eigenvector(i)
            np.testing.assert_allclose(A @ v, eig.get_real_eigenvalue(i) * v, atol=FACTOR_TOL)

    def test_from_tridiagonal(self):
        """Tridiagonal input given by its diagonals."""
        eig = EigenDecomposition.from_tridiagonal([2.0, 2.0, 2.0], [-1.0, -1.0])
        expected = 2.0 - 2.0 * np.cos(np.pi * np.array([3, 2, 1]) / 4.0)
        np.testing.assert_allclose(eig.real_eigenvalues, expected, atol=1e-14)

    def test_square_root(self):
        """Square root squares back to the input."""
        root = EigenDecomposition(SPD).get_square_root()
        np.testing.assert_allclose(root @ root, SPD, atol=FACTOR_TOL)

    def test_square_root_requires_positive(self):
        """Indefinite matrices have no square root."""
        eig = EigenDecomposition([[1.0, 2.0], [2.0, 1.0]])
        with pytest.raises(NotPositiveDefiniteError):
            eig.get_square_root()

    def test_solve(self):
        """Solver matches a direct solve."""
        A = random_spd(5)
        b = np.linspace(-1.0, 1.0, 5)
        x = EigenDecomposition(A).get_solver().solve(b)
        np.testing.assert_allclose(x, np.linalg.solve(A, b), atol=FACTOR_TOL)

    def test_singular_solver(self):
        """A zero eigenvalue makes the solver fail fast."""
        eig = EigenDecomposition([[1.0, 1.0], [1.0, 1.0]])
        assert not eig.is_non_singular
        with pytest.raises(SingularMatrixError):
            eig.get_solver().solve([1.0, 2.0])

    def test_complex_pair(self):
        """A rotation has eigenvalues +/- i."""
        eig = EigenDecomposition([[0.0, -1.0], [1.0, 0.0]])
        assert not eig.is_symmetric
        assert eig.has_complex_eigenvalues()
        np.testing.assert_allclose(eig.real_eigenvalues, [0.0, 0.0], atol=1e-14)
        np.testing.assert_allclose(sorted(eig.imag_eigenvalues), [-1.0, 1.0], atol=1e-14)

    def test_non_symmetric_solver_rejected(self):
        """Solver is only available for symmetric input."""
        eig = EigenDecomposition([[2.0, 0.0], [1.0, 3.0]])
        np.testing.assert_allclose(eig.real_eigenvalues, [3.0, 2.0], atol=1e-14)
        with pytest.raises(NonSymmetricMatrixError) as excinfo:
            eig.get_solver()
        assert (excinfo.value.row, excinfo.value.column) == (0, 1)

    def test_iteration_limit(self):
        """No sweeps allowed means no convergence."""
        with pytest.raises(MaxIterationsExceededError):
            EigenDecomposition([[1.0, 2.0], [2.0, 1.0]], max_iterations=0)


class TestSVD:
    """Test singular value decomposition."""

    def setup_method(self):
        np.random.seed(42)

    @pytest.mark.parametrize("shape", [(6, 4), (4, 4), (3, 5)])
    def test_reconstruction(self, shape):
        """U S V' reproduces the input for tall, square and wide shapes."""
        A = np.random.randn(*shape)
        svd = SingularValueDecomposition(A)
        p = min(shape)
        assert svd.U.shape == (shape[0], p)
        assert svd.V.shape == (shape[1], p)
        np.testing.assert_allclose(svd.U @ svd.S @ svd.VT, A, atol=SVD_TOL)
        np.testing.assert_allclose(svd.UT @ svd.U, np.eye(p), atol=ORTHO_TOL)
        np.testing.assert_allclose(svd.VT @ svd.V, np.eye(p), atol=ORTHO_TOL)

    def test_singular_values_sorted(self):
        """Singular values are non-negative, descending and match LAPACK."""
        A = np.random.randn(8, 5)
        s = SingularValueDecomposition(A).singular_values
        assert np.all(s >= 0)
        assert np.all(np.diff(s) <= 0)
        np.testing.assert_allclose(s, np.linalg.svd(A, compute_uv=False), rtol=1e-12)

    def test_known_singular_values(self):
        """Singular values of a symmetric positive-definite 4x4 matrix."""
        expected = [23.567495561769917, 18.785576308145938,
                    3.126363155561169, 0.6455649745229703]
        svd = SingularValueDecomposition(SVD_SYMMETRIC)
        np.testing.assert_allclose(svd.singular_values, expected, rtol=1e-12)
        np.testing.assert_allclose(svd.norm, expected[0], rtol=1e-12)
        np.testing.assert_allclose(svd.condition_number, expected[0] / expected[3], rtol=1e-12)
        np.testing.assert_allclose(svd.inverse_condition_number, expected[3] / expected[0],
                                   rtol=1e-12)
        assert svd.rank == 4

    def test_solve_matches_least_squares(self):
        """Solver agrees with numpy.linalg.lstsq."""
        A = np.random.randn(8, 3)
        b = np.random.randn(8)
        x = SingularValueDecomposition(A).get_solver().solve(b)
        expected = np.linalg.lstsq(A, b, rcond=None)[0]
        np.testing.assert_allclose(x, expected, atol=SVD_TOL)

    def test_rank_deficient_solve_warns(self):
        """Truncated solve returns the minimum-norm solution with a warning."""
        A = np.random.randn(6, 3)
        A[:, 2] = A[:, 0] + A[:, 1]
        b = np.random.randn(6)
        svd = SingularValueDecomposition(A, tol=1e-10)
        assert svd.rank == 2
        solver = svd.get_solver()
        with pytest.warns(UserWarning, match="truncated"):
            x = solver.solve(b)
        expected = np.linalg.lstsq(A, b, rcond=1e-10)[0]
        np.testing.assert_allclose(x, expected, atol=FACTOR_TOL)

    def test_pseudo_inverse(self):
        """Pseudo-inverse matches numpy.linalg.pinv."""
        A = np.random.randn(5, 3)
        pinv = SingularValueDecomposition(A).get_solver().pseudo_inverse
        np.testing.assert_allclose(pinv, np.linalg.pinv(A), atol=FACTOR_TOL)

    def test_inverse_requires_square_full_rank(self):
        """Only square full-rank matrices have an inverse."""
        solver = SingularValueDecomposition(np.random.randn(5, 3)).get_solver()
        with pytest.raises(SingularMatrixError):
            solver.get_inverse()

        A = random_spd(4)
        inv = SingularValueDecomposition(A).get_solver().get_inverse()
        np.testing.assert_allclose(inv @ A, np.eye(4), atol=FACTOR_TOL)

    def test_covariance(self):
        """Covariance equals (A'A)^-1 when no value is dropped."""
        A = np.random.randn(10, 3)
        cov = SingularValueDecomposition(A).get_covariance(0.0)
        np.testing.assert_allclose(cov, np.linalg.inv(A.T @ A), atol=FACTOR_TOL)

    def test_covariance_skips_zero_singular_values(self):
        """A zero singular value is left out even with no threshold."""
        A = np.array([[3.0, 0.0], [0.0, 0.0], [0.0, 0.0]])
        cov = SingularValueDecomposition(A).get_covariance(0.0)
        assert np.all(np.isfinite(cov))
        np.testing.assert_allclose(cov, [[1.0 / 9.0, 0.0], [0.0, 0.0]], atol=FACTOR_TOL)

    def test_iteration_limit(self):
        """No QR sweeps allowed means no convergence."""
        with pytest.raises(MaxIterationsExceededError):
            SingularValueDecomposition(np.random.randn(4, 4), max_iterations=0)

    def test_zero_matrix(self):
        """All singular values of the zero matrix are zero."""
        svd = SingularValueDecomposition(np.zeros((3, 2)))
        np.testing.assert_array_equal(svd.singular_values, [0.0, 0.0])
        assert svd.rank == 0
