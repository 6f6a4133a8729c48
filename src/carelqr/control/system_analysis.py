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
System Analysis Functions

Pure functions for the structural checks around Riccati synthesis:

- Stability - eigenvalue real parts (continuous time)
- Controllability - rank of [B, AB, ..., Aⁿ⁻¹B]
- Stabilizability - PBH rank test on the non-stable modes

Stabilizability of (A, B) is what the Newton-Kleinman iteration needs: a
stabilizing starting point exists only if every eigenvalue with
Re(λ) ≥ 0 is controllable, i.e.

    rank [A - λI, B] = n    for all λ ∈ σ(A), Re(λ) ≥ 0

Usage
-----
>>> A = np.array([[0, 1], [-2, -3]])
>>> B = np.array([[0], [1]])
>>> analyze_stability(A)['is_stable']
True
>>> analyze_controllability(A, B)['rank']
2
"""

from typing import Optional

import numpy as np

from carelqr.types.core import InputMatrix, StateMatrix
from carelqr.types.riccati import (
    ControllabilityInfo,
    StabilityInfo,
    StabilizabilityInfo,
)


def _check_pair(A_np: np.ndarray, B_np: np.ndarray):
    nx = A_np.shape[0]
    if A_np.ndim != 2 or A_np.shape != (nx, nx):
        raise ValueError(f"A must be square, got shape {A_np.shape}")
    if B_np.ndim != 2 or B_np.shape[0] != nx:
        raise ValueError(f"B must have {nx} rows, got shape {B_np.shape}")


# ============================================================================
# Stability Analysis
# ============================================================================


def analyze_stability(A: StateMatrix, tolerance: float = 1e-10) -> StabilityInfo:
    """
    Eigenvalue-based stability of the continuous-time system ẋ = A·x.

    Args:
        A: State matrix (nx, nx)
        tolerance: Band around Re(λ) = 0 treated as marginal

    Returns:
        StabilityInfo with eigenvalues, spectral abscissa and flags

    Raises:
        ValueError: If A is not square

    Examples:
        >>> info = analyze_stability(np.array([[0, 1], [-2, -3]]))
        >>> info['stability_margin']  # 1.0
    """
    A_np = np.asarray(A, dtype=float)

    if A_np.ndim != 2 or A_np.shape[0] != A_np.shape[1]:
        raise ValueError(f"A must be square matrix, got shape {A_np.shape}")

    eigenvalues = np.linalg.eigvals(A_np)
    max_real = float(np.max(np.real(eigenvalues)))

    result: StabilityInfo = {
        "eigenvalues": eigenvalues,
        "max_real_part": max_real,
        "stability_margin": -max_real,
        "is_stable": bool(max_real < -tolerance),
        "is_marginally_stable": bool(abs(max_real) <= tolerance),
    }
    return result


# ============================================================================
# Controllability Analysis
# ============================================================================


def controllability_matrix(A: StateMatrix, B: InputMatrix) -> np.ndarray:
    """
    Build C = [B, AB, A²B, ..., Aⁿ⁻¹B] of shape (nx, nx*nu).

    Raises:
        ValueError: If shapes are incompatible
    """
    A_np = np.asarray(A, dtype=float)
    B_np = np.asarray(B, dtype=float)
    _check_pair(A_np, B_np)

    nx = A_np.shape[0]
    nu = B_np.shape[1]

    C = np.zeros((nx, nx * nu))
    AB = B_np.copy()
    C[:, :nu] = AB
    for i in range(1, nx):
        AB = A_np @ AB
        C[:, i * nu : (i + 1) * nu] = AB
    return C


def analyze_controllability(
    A: StateMatrix,
    B: InputMatrix,
    tolerance: float = 1e-10,
) -> ControllabilityInfo:
    """
    Test controllability of (A, B) with the controllability-matrix rank.

    Args:
        A: State matrix (nx, nx)
        B: Input matrix (nx, nu)
        tolerance: Singular-value threshold for the rank

    Returns:
        ControllabilityInfo

    Examples:
        >>> A = np.array([[1, 0], [0, 2]])
        >>> B = np.array([[1], [1]])
        >>> analyze_controllability(A, B)['is_controllable']
        True
        >>> analyze_controllability(np.eye(2), B)['is_controllable']
        False
    """
    C = controllability_matrix(A, B)
    nx = C.shape[0]
    rank = int(np.linalg.matrix_rank(C, tol=tolerance)) if C.size else 0

    result: ControllabilityInfo = {
        "controllability_matrix": C,
        "rank": rank,
        "is_controllable": rank == nx,
    }
    return result


def analyze_stabilizability(
    A: StateMatrix,
    B: InputMatrix,
    tolerance: Optional[float] = None,
    stability_tolerance: float = 1e-10,
) -> StabilizabilityInfo:
    """
    PBH stabilizability test of (A, B).

    Every eigenvalue λ of A with Re(λ) ≥ -stability_tolerance must satisfy
    rank [A - λI, B] = nx.

    Args:
        A: State matrix (nx, nx)
        B: Input matrix (nx, nu)
        tolerance: Rank threshold (None uses the NumPy default, relative
            to the largest singular value)
        stability_tolerance: Eigenvalues this close to the imaginary axis
            count as not stable

    Returns:
        StabilizabilityInfo

    Examples:
        >>> A = np.array([[1.0, 0.0], [0.0, -1.0]])
        >>> analyze_stabilizability(A, np.array([[1.0], [0.0]]))['is_stabilizable']
        True
        >>> analyze_stabilizability(A, np.array([[0.0], [1.0]]))['is_stabilizable']
        False
    """
    A_np = np.asarray(A, dtype=float)
    B_np = np.asarray(B, dtype=float)
    _check_pair(A_np, B_np)

    nx = A_np.shape[0]
    eigenvalues = np.linalg.eigvals(A_np)
    unstable = eigenvalues[np.real(eigenvalues) >= -stability_tolerance]

    uncontrollable = []
    for lam in unstable:
        pbh = np.hstack([A_np - lam * np.eye(nx), B_np.astype(complex)])
        if np.linalg.matrix_rank(pbh, tol=tolerance) < nx:
            uncontrollable.append(lam)

    result: StabilizabilityInfo = {
        "is_stabilizable": len(uncontrollable) == 0,
        "unstable_eigenvalues": unstable,
        "uncontrollable_modes": np.array(uncontrollable, dtype=complex),
    }
    return result
