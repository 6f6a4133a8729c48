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
Continuous-time linear system ẋ = F·x + G·u.
"""

from dataclasses import dataclass, field

import numpy as np

from carelqr.types.backends import Backend
from carelqr.utils.backend_utils import to_numpy

from .system_analysis import analyze_controllability, analyze_stabilizability


@dataclass(frozen=True, eq=False)
class LinearSystem:
    """
    Linear time-invariant system ẋ = F·x + G·u.

    Matrices are stored as float64 NumPy copies, so later changes to the
    caller's arrays do not reach the system.

    Attributes
    ----------
    F : np.ndarray
        State matrix (nx, nx)
    G : np.ndarray
        Input matrix (nx, nu). A 1-D array is read as a single input column.
    backend : Backend
        Backend of the F and G passed in. They are converted to NumPy on
        construction.

    Examples
    --------
    >>> system = LinearSystem(F=[[0, 1], [-2, -3]], G=[[0], [1]])
    >>> system.nx, system.nu
    (2, 1)
    >>> system.is_controllable()
    True
    """

    F: np.ndarray
    G: np.ndarray
    backend: Backend = field(default="numpy", repr=False)

    def __post_init__(self):
        F = np.array(to_numpy(self.F, self.backend), dtype=float)
        G = np.array(to_numpy(self.G, self.backend), dtype=float)
        if G.ndim == 1:
            G = G.reshape(-1, 1)

        if F.ndim != 2 or F.shape[0] != F.shape[1]:
            raise ValueError(f"F must be square, got shape {F.shape}")
        if G.ndim != 2 or G.shape[0] != F.shape[0]:
            raise ValueError(f"G must have {F.shape[0]} rows, got shape {G.shape}")

        F.setflags(write=False)
        G.setflags(write=False)
        object.__setattr__(self, "F", F)
        object.__setattr__(self, "G", G)

    @property
    def nx(self) -> int:
        """State dimension."""
        return self.F.shape[0]

    @property
    def nu(self) -> int:
        """Input dimension."""
        return self.G.shape[1]

    def is_controllable(self, tolerance: float = 1e-10) -> bool:
        """Controllability-matrix rank test of (F, G)."""
        return analyze_controllability(self.F, self.G, tolerance=tolerance)["is_controllable"]

    def is_stabilizable(self) -> bool:
        """PBH test: every non-stable mode of F is controllable through G."""
        return analyze_stabilizability(self.F, self.G)["is_stabilizable"]
