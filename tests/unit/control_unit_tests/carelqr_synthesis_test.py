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
Unit Tests for the ControlSynthesis Wrapper

Tests cover:
- Wrapper initialization and configuration
- Delegation to the pure solver functions
- Configuration propagation
- Backend conversion of returned arrays

The ControlSynthesis class is a thin wrapper, so tests focus on:
1. Correct delegation and argument passing
2. Backend parameter handling
3. No state mutation between calls
"""

import unittest
from unittest.mock import patch

import numpy as np
from numpy.testing import assert_allclose

# Optional backends for testing
try:
    import torch
    HAS_TORCH = True
except ImportError:
    HAS_TORCH = False

try:
    import jax.numpy as jnp
    HAS_JAX = True
except ImportError:
    HAS_JAX = False

from carelqr.config import DEFAULT_CONFIG, SolverConfig
from carelqr.control.care_solver import care
from carelqr.control.control_synthesis import ControlSynthesis
from carelqr.control.linear_system import LinearSystem
from carelqr.control.lqr import lqr
from carelqr.types.riccati import SolverStatus


class SynthesisTestCase(unittest.TestCase):
    """Base class with common test utilities."""

    def setUp(self):
        self.F = np.array([[0.0, 1.0], [-2.0, -3.0]])
        self.G = np.array([[0.0], [1.0]])
        self.Q = np.eye(2)
        self.R = np.array([[1.0]])
        self.synthesis = ControlSynthesis()


class TestControlSynthesisInit(SynthesisTestCase):
    """Initialization and configuration."""

    def test_defaults(self):
        self.assertEqual(self.synthesis.backend, "numpy")
        self.assertIs(self.synthesis.config, DEFAULT_CONFIG)

    def test_custom_config(self):
        config = SolverConfig(tolerance=1e-8)
        synthesis = ControlSynthesis(config=config)
        self.assertIs(synthesis.config, config)

    def test_invalid_backend(self):
        with self.assertRaises(ValueError):
            ControlSynthesis(backend="tensorflow")

    def test_repr(self):
        self.assertIn("backend='numpy'", repr(self.synthesis))


class TestDelegation(SynthesisTestCase):
    """Methods route to the pure functions with the stored configuration."""

    def test_care_matches_function(self):
        A = np.array([[0.0, 1.0], [0.0, 0.0]])
        wrapped = self.synthesis.care(A, np.eye(2), np.eye(2))
        direct = care(A, np.eye(2), np.eye(2))
        assert_allclose(wrapped["solution"], direct["solution"])

    def test_lqr_matches_function(self):
        system = LinearSystem(F=self.F, G=self.G)
        wrapped = self.synthesis.lqr(system, self.Q, self.R)
        direct = lqr(system, self.Q, self.R)
        assert_allclose(wrapped["gain"], direct["gain"])

    def test_design_lqr_matches_lqr(self):
        system = LinearSystem(F=self.F, G=self.G)
        assert_allclose(
            self.synthesis.design_lqr(self.F, self.G, self.Q, self.R)["gain"],
            self.synthesis.lqr(system, self.Q, self.R)["gain"],
        )

    def test_config_passed_to_care(self):
        config = SolverConfig(tolerance=1e-9)
        synthesis = ControlSynthesis(config=config)
        with patch("carelqr.control.care_solver.care", wraps=care) as mocked:
            synthesis.care(np.array([[0.0, 1.0], [0.0, 0.0]]), np.eye(2), np.eye(2))
        self.assertIs(mocked.call_args.kwargs["config"], config)

    def test_config_controls_iteration_cap(self):
        synthesis = ControlSynthesis(config=SolverConfig(max_iterations=0))
        with self.assertWarns(RuntimeWarning):
            result = synthesis.design_lqr(self.F, self.G, self.Q, self.R)
        self.assertIs(result["status"], SolverStatus.MAX_ITERATIONS_EXCEEDED)
        self.assertEqual(result["iterations"], 0)

    def test_pinv_uses_configured_threshold(self):
        synthesis = ControlSynthesis(config=SolverConfig(pinv_threshold=0.1))
        assert_allclose(synthesis.pinv(np.diag([1.0, 0.05])), np.diag([1.0, 0.0]))

    def test_lyapunov(self):
        A = np.array([[-1.0, 2.0], [0.0, -3.0]])
        X = self.synthesis.lyapunov(A, np.eye(2))
        assert_allclose(X @ A + A.T @ X + np.eye(2), 0.0, atol=1e-12)

    def test_repeated_calls_independent(self):
        first = self.synthesis.design_lqr(self.F, self.G, self.Q, self.R)["gain"]
        first_copy = first.copy()
        self.synthesis.design_lqr(self.F, self.G, 10 * self.Q, self.R)
        assert_allclose(first, first_copy)


class TestBackendConsistency(SynthesisTestCase):
    """Returned arrays follow the wrapper backend."""

    def test_numpy_outputs(self):
        result = self.synthesis.design_lqr(self.F, self.G, self.Q, self.R)
        self.assertIsInstance(result["gain"], np.ndarray)
        self.assertIsInstance(result["cost_to_go"], np.ndarray)

    def test_failed_care_keeps_none(self):
        with self.assertWarns(RuntimeWarning):
            result = self.synthesis.care(np.diag([1.0, -1.0]), np.diag([0.0, 1.0]), np.eye(2))
        self.assertIsNone(result["solution"])

    @unittest.skipIf(not HAS_TORCH, "PyTorch not available")
    def test_torch_outputs(self):
        synthesis = ControlSynthesis(backend="torch")
        result = synthesis.design_lqr(
            torch.tensor(self.F), torch.tensor(self.G), torch.tensor(self.Q), torch.tensor(self.R)
        )
        self.assertIsInstance(result["gain"], torch.Tensor)
        self.assertIsInstance(synthesis.pinv(torch.eye(2, dtype=torch.float64)), torch.Tensor)

    @unittest.skipIf(not HAS_TORCH, "PyTorch not available")
    def test_torch_lqr_with_linear_system(self):
        synthesis = ControlSynthesis(backend="torch")
        system = LinearSystem(F=torch.tensor(self.F), G=torch.tensor(self.G), backend="torch")
        result = synthesis.lqr(system, torch.tensor(self.Q), torch.tensor(self.R))
        self.assertIsInstance(result["gain"], torch.Tensor)

    @unittest.skipIf(not HAS_JAX, "JAX not available")
    def test_jax_outputs(self):
        synthesis = ControlSynthesis(backend="jax")
        result = synthesis.design_lqr(
            jnp.array(self.F), jnp.array(self.G), jnp.array(self.Q), jnp.array(self.R)
        )
        self.assertIn("jax", type(result["gain"]).__module__)
        K_numpy = ControlSynthesis().design_lqr(self.F, self.G, self.Q, self.R)["gain"]
        assert_allclose(np.asarray(result["gain"]), K_numpy, atol=1e-5)


if __name__ == "__main__":
    unittest.main()
