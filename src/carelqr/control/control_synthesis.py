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
Control Synthesis Wrapper

Thin wrapper around the pure Riccati/LQR functions.

Holds a backend and a solver configuration so repeated designs share the
same settings. It keeps no other state: every call routes to a stateless
function and returns fresh arrays.

Usage
-----
>>> from carelqr.control import ControlSynthesis
>>> from carelqr.config import SolverConfig
>>>
>>> synthesis = ControlSynthesis(config=SolverConfig(tolerance=1e-10))
>>> result = synthesis.design_lqr(
...     np.array([[0, 1], [-2, -3]]), np.array([[0], [1]]),
...     np.eye(2), np.array([[1.0]]),
... )
>>> K = result['gain']
"""

from typing import Optional

from carelqr.config import DEFAULT_CONFIG, SolverConfig
from carelqr.types.backends import Backend, validate_backend
from carelqr.types.core import CostMatrix, InputMatrix, StateMatrix
from carelqr.types.riccati import CAREResult, LQRResult
from carelqr.utils.backend_utils import from_numpy, to_numpy

from .linear_system import LinearSystem


class ControlSynthesis:
    """
    Control synthesis wrapper with a fixed backend and solver configuration.

    Attributes
    ----------
    backend : Backend
        Backend of accepted and returned arrays ('numpy', 'torch', 'jax')
    config : SolverConfig
        Settings passed to every solve

    Examples
    --------
    >>> synthesis = ControlSynthesis()
    >>> system = LinearSystem(F=[[0, 1], [-2, -3]], G=[[0], [1]])
    >>> synthesis.lqr(system, np.eye(2), np.array([[1.0]]))['gain']
    """

    def __init__(self, backend: Backend = "numpy", config: Optional[SolverConfig] = None):
        """
        Initialize control synthesis wrapper.

        Args:
            backend: Backend of accepted and returned arrays
            config: Solver settings, defaults to DEFAULT_CONFIG

        Raises:
            ValueError: If backend is unknown
        """
        self.backend = validate_backend(backend)
        self.config = config or DEFAULT_CONFIG

    def __repr__(self) -> str:
        return f"ControlSynthesis(backend='{self.backend}', config={self.config})"

    def pinv(self, M: StateMatrix):
        """Pseudo-inverse with the configured singular-value cutoff."""
        from carelqr.linalg.pseudo_inverse import pinv

        return from_numpy(pinv(to_numpy(M, self.backend), self.config.pinv_threshold), self.backend)

    def lyapunov(self, A: StateMatrix, Q: StateMatrix):
        """Solve X·A + A'·X + Q = 0."""
        from carelqr.linalg.lyapunov import lyapunov

        X = lyapunov(to_numpy(A, self.backend), to_numpy(Q, self.backend))
        return from_numpy(X, self.backend)

    def care(
        self,
        A: StateMatrix,
        B: StateMatrix,
        C: StateMatrix,
        check: bool = True,
    ) -> CAREResult:
        """
        Solve S·A + A'·S - (S·B)·S + C = 0.

        Routes to care_solver.care() with the stored configuration and
        converts the solution to the stored backend.
        """
        from carelqr.control.care_solver import care

        result = care(
            to_numpy(A, self.backend),
            to_numpy(B, self.backend),
            to_numpy(C, self.backend),
            config=self.config,
            check=check,
        )
        result["solution"] = from_numpy(result["solution"], self.backend)
        return result

    def lqr(
        self,
        system: LinearSystem,
        Q: CostMatrix,
        R: CostMatrix,
        M: Optional[InputMatrix] = None,
        check: bool = True,
    ) -> LQRResult:
        """
        LQR gain for a LinearSystem.

        Routes to lqr.lqr() with the stored configuration.
        """
        from carelqr.control.lqr import lqr

        result = lqr(
            system,
            to_numpy(Q, self.backend),
            to_numpy(R, self.backend),
            to_numpy(M, self.backend),
            check=check,
            config=self.config,
        )
        for key in ("gain", "cost_to_go", "closed_loop_eigenvalues"):
            result[key] = from_numpy(result[key], self.backend)
        return result

    def design_lqr(
        self,
        F: StateMatrix,
        G: InputMatrix,
        Q: CostMatrix,
        R: CostMatrix,
        M: Optional[InputMatrix] = None,
        check: bool = True,
    ) -> LQRResult:
        """
        LQR gain from raw matrices.

        Routes to lqr.design_lqr() with the stored backend and configuration.
        """
        from carelqr.control.lqr import design_lqr

        return design_lqr(F, G, Q, R, M, check=check, config=self.config, backend=self.backend)
