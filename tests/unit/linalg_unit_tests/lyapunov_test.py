# Copyright (C) 2025 Gil Benezer
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.

"""
Unit Tests for the Bartels-Stewart Lyapunov Solver

Tests cover:
- Residual of X·A + A'·X + Q = 0 for real and complex spectra
- Agreement with scipy.linalg.solve_continuous_lyapunov
- Symmetry of the solution for symmetric right-hand sides
- Direct quasi-triangular back-substitution
- Singular equations and shape errors
"""

import unittest

import numpy as np
from numpy.testing import assert_allclose
from scipy import linalg

from carelqr.linalg.lyapunov import (
    lyapunov,
    lyapunov_residual,
    solve_quasi_triangular_sylvester,
)


def _stable_matrix(rng, n, margin=1.0):
    """Random matrix shifted so every eigenvalue has Re(λ) ≤ -margin."""
    M = rng.standard_normal((n, n))
    abscissa = np.max(np.real(np.linalg.eigvals(M)))
    return M - (abscissa + margin) * np.eye(n)


class LyapunovTestCase(unittest.TestCase):
    """Base class with common fixtures."""

    def setUp(self):
        self.rng = np.random.default_rng(0)

    def assertSolves(self, A, Q, X, atol=1e-9):
        scale = 1.0 + np.linalg.norm(Q)
        assert_allclose(lyapunov_residual(A, Q, X), 0.0, atol=atol * scale)


class TestRealSpectrum(LyapunovTestCase):
    """Matrices whose real Schur form is triangular."""

    def test_upper_triangular(self):
        A = np.array([[-1.0, 2.0], [0.0, -3.0]])
        Q = np.eye(2)
        X = lyapunov(A, Q)
        self.assertSolves(A, Q, X)

    def test_diagonal_closed_form(self):
        """For diagonal A, X[i, j] = -Q[i, j] / (a_i + a_j)."""
        a = np.array([-1.0, -2.0, -4.0])
        A = np.diag(a)
        Q = np.arange(9.0).reshape(3, 3)
        expected = -Q / (a[:, None] + a[None, :])
        assert_allclose(lyapunov(A, Q), expected, atol=1e-12)

    def test_unstable_but_nonsingular(self):
        """Only λᵢ + λⱼ ≠ 0 is needed, not stability."""
        A = np.array([[1.0, 0.5], [0.0, 2.0]])
        Q = np.eye(2)
        self.assertSolves(A, Q, lyapunov(A, Q))

    def test_scalar_equation(self):
        X = lyapunov(np.array([[-2.0]]), np.array([[8.0]]))
        assert_allclose(X, [[2.0]])


class TestComplexSpectrum(LyapunovTestCase):
    """Matrices with 2×2 blocks in their real Schur form."""

    def test_rotation_block(self):
        A = np.array([[-1.0, 2.0], [-2.0, -1.0]])
        Q = np.eye(2)
        X = lyapunov(A, Q)
        self.assertSolves(A, Q, X)
        assert_allclose(X, X.T, atol=1e-12)

    def test_mixed_blocks(self):
        """One complex pair and one real eigenvalue under an orthogonal change of basis."""
        core = np.array([
            [-0.5, 3.0, 1.0],
            [-3.0, -0.5, 0.2],
            [0.0, 0.0, -2.0],
        ])
        V, _ = np.linalg.qr(self.rng.standard_normal((3, 3)))
        A = V @ core @ V.T
        Q = self.rng.standard_normal((3, 3))
        self.assertSolves(A, Q, lyapunov(A, Q))

    def test_random_stable_matrices(self):
        for n in (2, 4, 7):
            with self.subTest(n=n):
                A = _stable_matrix(self.rng, n)
                Q = self.rng.standard_normal((n, n))
                Q = Q @ Q.T
                X = lyapunov(A, Q)
                self.assertSolves(A, Q, X)
                assert_allclose(X, X.T, atol=1e-9 * (1.0 + np.linalg.norm(X)))

    def test_positive_definite_for_stable_matrix(self):
        """Stable A with Q ≻ 0 gives X ≻ 0."""
        A = _stable_matrix(self.rng, 5, margin=0.5)
        X = lyapunov(A, np.eye(5))
        eigenvalues = np.linalg.eigvalsh(0.5 * (X + X.T))
        self.assertTrue(np.all(eigenvalues > 0))


class TestScipyAgreement(LyapunovTestCase):
    """Cross-check against SciPy's solver (A·X + X·Aᴴ = Q convention)."""

    def test_matches_solve_continuous_lyapunov(self):
        A = _stable_matrix(self.rng, 6)
        Q = self.rng.standard_normal((6, 6))
        expected = linalg.solve_continuous_lyapunov(A.T, -Q)
        assert_allclose(lyapunov(A, Q), expected, atol=1e-9)


class TestQuasiTriangularSylvester(LyapunovTestCase):
    """Direct back-substitution T·Y + Y·T' = Q1."""

    def test_triangular(self):
        T = np.array([[-1.0, 0.3, 2.0], [0.0, -2.0, 1.0], [0.0, 0.0, -3.0]])
        Q1 = self.rng.standard_normal((3, 3))
        Y = solve_quasi_triangular_sylvester(T, Q1)
        assert_allclose(T @ Y + Y @ T.T, Q1, atol=1e-12)

    def test_quasi_triangular(self):
        T, _ = linalg.schur(
            np.array([[-1.0, 4.0, 0.0], [-4.0, -1.0, 1.0], [0.0, 0.0, -2.0]]),
            output="real",
        )
        Q1 = self.rng.standard_normal((3, 3))
        Y = solve_quasi_triangular_sylvester(T, Q1)
        assert_allclose(T @ Y + Y @ T.T, Q1, atol=1e-10)


class TestErrors(LyapunovTestCase):
    """Singular equations and incompatible shapes."""

    def test_singular_equation_raises(self):
        with self.assertRaises(np.linalg.LinAlgError):
            lyapunov(np.zeros((2, 2)), np.eye(2))

    def test_non_square_a(self):
        with self.assertRaises(ValueError):
            lyapunov(np.ones((2, 3)), np.eye(2))

    def test_mismatched_q(self):
        with self.assertRaises(ValueError):
            lyapunov(-np.eye(2), np.eye(3))

    def test_empty_system(self):
        X = lyapunov(np.zeros((0, 0)), np.zeros((0, 0)))
        self.assertEqual(X.shape, (0, 0))


if __name__ == "__main__":
    unittest.main()
