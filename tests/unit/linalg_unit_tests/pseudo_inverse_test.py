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
Unit Tests for the Regularized Pseudo-Inverse

Tests cover:
- Agreement with the inverse for well-conditioned square matrices
- Moore-Penrose identities for rectangular and rank-deficient matrices
- Absolute singular-value cutoff
- Degenerate and invalid inputs
"""

import unittest

import numpy as np
from numpy.testing import assert_allclose

from carelqr.linalg.pseudo_inverse import DEFAULT_PINV_THRESHOLD, pinv


class TestPseudoInverse(unittest.TestCase):
    """Values of pinv on regular matrices."""

    def setUp(self):
        self.rng = np.random.default_rng(42)

    def test_matches_inverse_for_invertible_matrix(self):
        M = np.array([[4.0, 1.0], [2.0, 3.0]])
        assert_allclose(pinv(M), np.linalg.inv(M), atol=1e-12)

    def test_tall_full_rank_matches_numpy(self):
        M = self.rng.standard_normal((5, 2))
        assert_allclose(pinv(M), np.linalg.pinv(M), atol=1e-10)

    def test_penrose_identities(self):
        """M·M⁺·M = M and M⁺·M·M⁺ = M⁺ for a rank-2 (3, 5) matrix."""
        M = self.rng.standard_normal((3, 2)) @ self.rng.standard_normal((2, 5))
        P = pinv(M)

        self.assertEqual(P.shape, (5, 3))
        assert_allclose(M @ P @ M, M, atol=1e-10)
        assert_allclose(P @ M @ P, P, atol=1e-10)
        assert_allclose((M @ P).T, M @ P, atol=1e-10)
        assert_allclose((P @ M).T, P @ M, atol=1e-10)

    def test_symmetric_input_gives_symmetric_output(self):
        S = self.rng.standard_normal((4, 4))
        S = S + S.T
        P = pinv(S)
        assert_allclose(P, P.T, atol=1e-10)


class TestThreshold(unittest.TestCase):
    """Absolute cutoff of small singular values."""

    def test_default_threshold_value(self):
        self.assertEqual(DEFAULT_PINV_THRESHOLD, 1e-6)

    def test_small_singular_value_dropped(self):
        M = np.diag([2.0, 1e-9])
        assert_allclose(pinv(M), np.diag([0.5, 0.0]))

    def test_zero_threshold_keeps_small_singular_value(self):
        M = np.diag([2.0, 1e-9])
        assert_allclose(pinv(M, threshold=0.0), np.diag([0.5, 1e9]))

    def test_cutoff_is_not_relative(self):
        """A uniformly small matrix is truncated to zero."""
        M = 1e-7 * np.eye(3)
        assert_allclose(pinv(M), np.zeros((3, 3)))

    def test_custom_threshold(self):
        M = np.diag([10.0, 0.5, 0.01])
        assert_allclose(pinv(M, threshold=0.1), np.diag([0.1, 2.0, 0.0]))


class TestDegenerateInputs(unittest.TestCase):
    """Zero, empty and malformed matrices."""

    def test_zero_matrix(self):
        P = pinv(np.zeros((2, 3)))
        self.assertEqual(P.shape, (3, 2))
        assert_allclose(P, 0.0)

    def test_empty_matrix(self):
        P = pinv(np.zeros((0, 3)))
        self.assertEqual(P.shape, (3, 0))

    def test_accepts_nested_lists(self):
        assert_allclose(pinv([[2.0, 0.0], [0.0, 4.0]]), np.diag([0.5, 0.25]))

    def test_vector_rejected(self):
        with self.assertRaises(ValueError):
            pinv(np.ones(3))

    def test_negative_threshold_rejected(self):
        with self.assertRaises(ValueError):
            pinv(np.eye(2), threshold=-1.0)


if __name__ == "__main__":
    unittest.main()
