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
Solver Configuration

Numerical settings for the Newton-Kleinman CARE solver, the exact line
search and the regularized pseudo-inverse.

Usage
-----
>>> from carelqr.config import SolverConfig
>>>
>>> config = SolverConfig(tolerance=1e-10, max_iterations=50)
>>> result = care(A, B, C, config=config)
>>>
>>> # Modified copy
>>> loose = config.replace(tolerance=1e-4)
"""

import dataclasses
from dataclasses import dataclass


@dataclass(frozen=True)
class SolverConfig:
    """
    Immutable numerical settings shared by all solver components.

    Attributes
    ----------
    tolerance : float
        Convergence threshold on the Frobenius norm of the Riccati residual
    max_iterations : int
        Cap on the number of Newton steps
    pinv_threshold : float
        Absolute singular-value cutoff of the pseudo-inverse. Singular values
        at or below it are treated as zero. Not scaled by the largest
        singular value.
    symmetry_tolerance : float
        ‖X - X'‖ above which the initial guess is recomputed from a
        symmetric Lyapunov solve
    init_shift_margin : float
        Margin added to the spectral shift of the stabilizing initialization
    line_search_lower : float
        Smallest admissible Newton step length
    line_search_upper : float
        Largest admissible Newton step length
    positivity_tolerance : float
        Eigenvalues of Q - M·R⁺·M' above -positivity_tolerance count as
        non-negative in the LQR weight check

    Examples
    --------
    >>> SolverConfig()
    SolverConfig(tolerance=1e-05, max_iterations=20, ...)
    """

    tolerance: float = 1e-5
    max_iterations: int = 20
    pinv_threshold: float = 1e-6
    symmetry_tolerance: float = 1e-12
    init_shift_margin: float = 0.5
    line_search_lower: float = 1e-5
    line_search_upper: float = 2.0
    positivity_tolerance: float = 1e-10

    def __post_init__(self):
        if self.tolerance <= 0:
            raise ValueError(f"tolerance must be positive, got {self.tolerance}")
        if int(self.max_iterations) != self.max_iterations or self.max_iterations < 0:
            raise ValueError(
                f"max_iterations must be a non-negative integer, got {self.max_iterations}",
            )
        if self.pinv_threshold < 0:
            raise ValueError(f"pinv_threshold must be non-negative, got {self.pinv_threshold}")
        if self.symmetry_tolerance < 0:
            raise ValueError(
                f"symmetry_tolerance must be non-negative, got {self.symmetry_tolerance}",
            )
        if self.init_shift_margin <= 0:
            raise ValueError(
                f"init_shift_margin must be positive, got {self.init_shift_margin}",
            )
        if not 0 < self.line_search_lower < self.line_search_upper:
            raise ValueError(
                "line search bounds must satisfy 0 < lower < upper, got "
                f"({self.line_search_lower}, {self.line_search_upper})",
            )
        if self.positivity_tolerance < 0:
            raise ValueError(
                f"positivity_tolerance must be non-negative, got {self.positivity_tolerance}",
            )

    def replace(self, **changes) -> "SolverConfig":
        """Return a copy with the given fields changed (validated again)."""
        return dataclasses.replace(self, **changes)


DEFAULT_CONFIG = SolverConfig()
