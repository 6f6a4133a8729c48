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
Riccati and LQR Result Types

Result types for the Newton-Kleinman CARE solver and LQR synthesis:
- Solver status (converged, iteration cap hit, precondition failed)
- CARE solve result with convergence diagnostics
- LQR design result
- Stability, controllability and stabilizability analysis

These types replace printed progress with structured return values, so a
caller can tell a converged solution from a best-effort one.

Mathematical Background
----------------------
CARE (as solved here):
    S·A + A'·S - (S·B)·S + C = 0

LQR with cross term, cost J = ∫(x'Qx + 2x'Mu + u'Ru)dt:
    A = F - G·R⁺·M',  B = G·R⁺·G',  C = Q - M·R⁺·M'
    K = R⁺·(G'·S + M'),  u = -K·x

Usage
-----
>>> from carelqr.types.riccati import CAREResult, SolverStatus
>>>
>>> result: CAREResult = care(A, B, C)
>>> if result['status'] is SolverStatus.CONVERGED:
...     S = result['solution']
"""

from enum import Enum
from typing import List, Optional

import numpy as np
from typing_extensions import TypedDict

from .core import (
    ControllabilityMatrix,
    GainMatrix,
    RiccatiSolution,
)


# ============================================================================
# Solver Status
# ============================================================================


class SolverStatus(Enum):
    """
    Outcome of a CARE solve or LQR synthesis.

    Attributes
    ----------
    CONVERGED : str
        Residual norm reached the configured tolerance
    MAX_ITERATIONS_EXCEEDED : str
        Iteration cap hit; the best available iterate is still returned
    PRECONDITION_FAILED : str
        Input check failed (weights not positive, pair not stabilizable);
        no solution is returned
    DIVERGED : str
        Residual became non-finite; the last finite iterate is returned
    """

    CONVERGED = "converged"
    MAX_ITERATIONS_EXCEEDED = "max_iterations_exceeded"
    PRECONDITION_FAILED = "precondition_failed"
    DIVERGED = "diverged"


# ============================================================================
# CARE Types
# ============================================================================


class CAREResult(TypedDict):
    """
    Newton-Kleinman CARE solve result.

    Fields
    ------
    solution : Optional[RiccatiSolution]
        Final iterate S (nx, nx), None if a precondition failed
    status : SolverStatus
        Outcome of the solve
    converged : bool
        Shorthand for status is SolverStatus.CONVERGED
    iterations : int
        Number of Newton steps taken
    residual_norm : float
        Frobenius norm of C + S·A + A'·S - S·B·S at the returned S
        (inf when no iteration was run)
    residual_history : List[float]
        Residual norm before each step, followed by the final residual
    step_history : List[float]
        Line-search step length of each Newton step
    initial_closed_loop_eigenvalues : Optional[np.ndarray]
        Eigenvalues of A - B·X0 for the starting guess X0

    Examples
    --------
    >>> result = care(A, B, C)
    >>> print(result['iterations'], result['residual_norm'])
    >>> S = result['solution']
    """

    solution: Optional[RiccatiSolution]
    status: SolverStatus
    converged: bool
    iterations: int
    residual_norm: float
    residual_history: List[float]
    step_history: List[float]
    initial_closed_loop_eigenvalues: Optional[np.ndarray]


# ============================================================================
# LQR Types
# ============================================================================


class LQRResult(TypedDict):
    """
    Linear Quadratic Regulator design result.

    Fields
    ------
    gain : Optional[GainMatrix]
        Feedback gain K (nu, nx), None if the positivity check failed
    cost_to_go : Optional[RiccatiSolution]
        Riccati solution S (nx, nx), None if the positivity check failed
    status : SolverStatus
        Outcome of the synthesis
    closed_loop_eigenvalues : Optional[np.ndarray]
        Eigenvalues of F - G·K
    stability_margin : float
        -max(Re(λ)) of the closed loop (positive = stable), nan if no gain
    iterations : int
        Newton iterations used by the CARE solve
    residual_norm : float
        Final CARE residual norm

    Examples
    --------
    >>> result = lqr(system, Q, R)
    >>> if result['gain'] is not None:
    ...     u = -result['gain'] @ x
    """

    gain: Optional[GainMatrix]
    cost_to_go: Optional[RiccatiSolution]
    status: SolverStatus
    closed_loop_eigenvalues: Optional[np.ndarray]
    stability_margin: float
    iterations: int
    residual_norm: float


# ============================================================================
# Analysis Types
# ============================================================================


class StabilityInfo(TypedDict):
    """
    Continuous-time stability analysis result.

    Fields
    ------
    eigenvalues : np.ndarray
        Eigenvalues of the system matrix (complex)
    max_real_part : float
        Largest real part (spectral abscissa)
    stability_margin : float
        -max_real_part (positive = stable)
    is_stable : bool
        True if all Re(λ) < 0
    is_marginally_stable : bool
        True if max Re(λ) ≈ 0
    """

    eigenvalues: np.ndarray
    max_real_part: float
    stability_margin: float
    is_stable: bool
    is_marginally_stable: bool


class ControllabilityInfo(TypedDict):
    """
    Controllability analysis result.

    Fields
    ------
    controllability_matrix : ControllabilityMatrix
        [G, FG, ..., F^(n-1)G] of shape (nx, nx*nu)
    rank : int
        Numerical rank of the controllability matrix
    is_controllable : bool
        True if rank == nx
    """

    controllability_matrix: ControllabilityMatrix
    rank: int
    is_controllable: bool


class StabilizabilityInfo(TypedDict):
    """
    Stabilizability (PBH) analysis result.

    Fields
    ------
    is_stabilizable : bool
        True if every eigenvalue with Re(λ) ≥ 0 is controllable
    unstable_eigenvalues : np.ndarray
        Eigenvalues of A with Re(λ) ≥ 0
    uncontrollable_modes : np.ndarray
        Subset of unstable_eigenvalues failing the rank test
    """

    is_stabilizable: bool
    unstable_eigenvalues: np.ndarray
    uncontrollable_modes: np.ndarray


__all__ = [
    "SolverStatus",
    "CAREResult",
    "LQRResult",
    "StabilityInfo",
    "ControllabilityInfo",
    "StabilizabilityInfo",
]
