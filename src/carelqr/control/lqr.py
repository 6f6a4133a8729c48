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
Linear Quadratic Regulator Synthesis

Continuous-time LQR for ẋ = F·x + G·u minimizing

    J = ∫₀^∞ (x'Qx + 2x'Mu + u'Ru) dt

The problem is mapped onto the Riccati equation solved by
``carelqr.control.care_solver``:

    S·A + A'·S - (S·B)·S + C = 0

    A = F - G·R⁺·M'
    B = G·R⁺·G'
    C = Q - M·R⁺·M'

and the optimal law is u = -K·x with

    K = R⁺·(G'·S + M')

R⁺ is the regularized pseudo-inverse, so a singular R does not raise; its
null directions are simply dropped.

Cross-term convention
---------------------
``legacy_cross_term=True`` reproduces an older formulation,

    A = F - M·R⁺·G',   C = M·R⁺·M + Q

which only type-checks for nx == nu and does not correspond to the cost
above unless M = 0. Both conventions agree when M is zero.

Usage
-----
>>> system = LinearSystem(F=[[0, 1], [-2, -3]], G=[[0], [1]])
>>> result = lqr(system, np.eye(2), np.array([[1.0]]))
>>> K = result['gain']
>>> result['stability_margin'] > 0
True
"""

import logging
import warnings
from typing import Optional, Tuple

import numpy as np

from carelqr.config import DEFAULT_CONFIG, SolverConfig
from carelqr.linalg.pseudo_inverse import pinv
from carelqr.types.backends import Backend, validate_backend
from carelqr.types.core import CostMatrix, InputMatrix, NumpyArray, StateMatrix
from carelqr.types.riccati import LQRResult, SolverStatus
from carelqr.utils.backend_utils import from_numpy, to_numpy

from .care_solver import care
from .linear_system import LinearSystem

logger = logging.getLogger(__name__)


def _validate_weights(nx: int, nu: int, Q, R, M) -> Tuple[NumpyArray, NumpyArray, NumpyArray]:
    Q_np = np.asarray(Q, dtype=float)
    R_np = np.asarray(R, dtype=float)
    if R_np.ndim == 0:
        R_np = R_np.reshape(1, 1)

    if Q_np.shape != (nx, nx):
        raise ValueError(f"Q must be ({nx}, {nx}), got {Q_np.shape}")
    if R_np.shape != (nu, nu):
        raise ValueError(f"R must be ({nu}, {nu}), got {R_np.shape}")

    if M is None:
        M_np = np.zeros((nx, nu))
    else:
        M_np = np.asarray(M, dtype=float)
        if M_np.shape != (nx, nu):
            raise ValueError(f"M must be ({nx}, {nu}), got {M_np.shape}")
    return Q_np, R_np, M_np


def _precondition_failed() -> LQRResult:
    result: LQRResult = {
        "gain": None,
        "cost_to_go": None,
        "status": SolverStatus.PRECONDITION_FAILED,
        "closed_loop_eigenvalues": None,
        "stability_margin": float("nan"),
        "iterations": 0,
        "residual_norm": float("inf"),
    }
    return result


def weights_are_positive(
    Q: CostMatrix,
    R: CostMatrix,
    M: Optional[InputMatrix] = None,
    config: Optional[SolverConfig] = None,
) -> bool:
    """
    Positivity check of the LQR weights.

    The cost is well posed when Q - M·R⁺·M' is positive semi-definite.
    Eigenvalues down to -config.positivity_tolerance are accepted.

    Args:
        Q: State weight (nx, nx)
        R: Input weight (nu, nu)
        M: Cross weight (nx, nu), None for zero
        config: Solver settings (pinv_threshold, positivity_tolerance)

    Returns:
        True if no eigenvalue of Q - M·R⁺·M' is negative
    """
    config = config or DEFAULT_CONFIG
    Q_np = np.asarray(Q, dtype=float)
    R_np = np.atleast_2d(np.asarray(R, dtype=float))
    M_np = np.zeros((Q_np.shape[0], R_np.shape[0])) if M is None else np.asarray(M, dtype=float)

    QR = Q_np - M_np @ pinv(R_np, config.pinv_threshold) @ M_np.T
    eigenvalues = np.real(np.linalg.eigvals(QR))
    return not bool(np.any(eigenvalues < -config.positivity_tolerance))


def riccati_coefficients(
    F: StateMatrix,
    G: InputMatrix,
    Q: CostMatrix,
    R: CostMatrix,
    M: Optional[InputMatrix] = None,
    legacy_cross_term: bool = False,
    pinv_threshold: float = DEFAULT_CONFIG.pinv_threshold,
) -> Tuple[NumpyArray, NumpyArray, NumpyArray, NumpyArray]:
    """
    Map LQR data onto the Riccati coefficients (A, B, C).

    Args:
        F: State matrix (nx, nx)
        G: Input matrix (nx, nu)
        Q: State weight (nx, nx)
        R: Input weight (nu, nu)
        M: Cross weight (nx, nu), None for zero
        legacy_cross_term: Use A = F - M·R⁺·G', C = M·R⁺·M + Q instead of
            the textbook A = F - G·R⁺·M', C = Q - M·R⁺·M'
        pinv_threshold: Singular-value cutoff for R⁺

    Returns:
        (A, B, C, R⁺)

    Raises:
        ValueError: If shapes are incompatible, or legacy_cross_term is
            requested with a non-square M
    """
    F_np = np.asarray(F, dtype=float)
    G_np = np.asarray(G, dtype=float)
    nx, nu = G_np.shape
    Q_np, R_np, M_np = _validate_weights(nx, nu, Q, R, M)

    invR = pinv(R_np, pinv_threshold)
    B = G_np @ invR @ G_np.T

    if legacy_cross_term:
        if nx != nu:
            raise ValueError(
                "legacy_cross_term needs a square cross weight M, "
                f"got shape {M_np.shape}",
            )
        A = F_np - M_np @ invR @ G_np.T
        C = M_np @ invR @ M_np + Q_np
    else:
        A = F_np - G_np @ invR @ M_np.T
        C = Q_np - M_np @ invR @ M_np.T

    return A, B, C, invR


def lqr(
    system: LinearSystem,
    Q: CostMatrix,
    R: CostMatrix,
    M: Optional[InputMatrix] = None,
    check: bool = True,
    config: Optional[SolverConfig] = None,
    legacy_cross_term: bool = False,
) -> LQRResult:
    """
    Design a continuous-time LQR gain for a LinearSystem.

    Args:
        system: Plant ẋ = F·x + G·u
        Q: State weight (nx, nx), symmetric
        R: Input weight (nu, nu), symmetric positive (semi)definite
        M: Cross weight (nx, nu), None for zero
        check: Verify Q - M·R⁺·M' ⪰ 0 and stabilizability of the Riccati
            pair first. On failure a RuntimeWarning is issued and the
            result has status PRECONDITION_FAILED with gain None.
        config: Solver settings, defaults to DEFAULT_CONFIG
        legacy_cross_term: See ``riccati_coefficients``

    Returns:
        LQRResult with gain K (nu, nx), cost-to-go S and closed-loop
        eigenvalues of F - G·K

    Raises:
        ValueError: If shapes are incompatible

    Examples:
        >>> system = LinearSystem(F=[[0, 1], [-2, -3]], G=[[0], [1]])
        >>> result = lqr(system, np.eye(2), np.array([[1.0]]))
        >>> result['gain'].shape
        (1, 2)
    """
    config = config or DEFAULT_CONFIG
    Q_np, R_np, M_np = _validate_weights(system.nx, system.nu, Q, R, M)

    if check and not weights_are_positive(Q_np, R_np, M_np, config):
        logger.warning("weight matrices did not pass positivity check")
        warnings.warn(
            "Weight matrices did not pass positivity check: "
            "Q - M·R⁺·M' has a negative eigenvalue",
            RuntimeWarning,
            stacklevel=2,
        )
        return _precondition_failed()

    A, B, C, invR = riccati_coefficients(
        system.F,
        system.G,
        Q_np,
        R_np,
        M_np,
        legacy_cross_term=legacy_cross_term,
        pinv_threshold=config.pinv_threshold,
    )
    logger.debug("Riccati coefficients\nA:\n%s\nB:\n%s\nC:\n%s", A, B, C)

    solution = care(A, B, C, config=config, check=check)
    if solution["status"] is SolverStatus.PRECONDITION_FAILED:
        return _precondition_failed()
    S = solution["solution"]
    logger.debug("CARE solution S:\n%s", S)

    K = invR @ (system.G.T @ S + M_np.T)

    closed_loop_eigenvalues = np.linalg.eigvals(system.F - system.G @ K)

    result: LQRResult = {
        "gain": K,
        "cost_to_go": S,
        "status": solution["status"],
        "closed_loop_eigenvalues": closed_loop_eigenvalues,
        "stability_margin": float(-np.max(np.real(closed_loop_eigenvalues))),
        "iterations": solution["iterations"],
        "residual_norm": solution["residual_norm"],
    }
    return result


def design_lqr(
    F: StateMatrix,
    G: InputMatrix,
    Q: CostMatrix,
    R: CostMatrix,
    M: Optional[InputMatrix] = None,
    check: bool = True,
    config: Optional[SolverConfig] = None,
    backend: Backend = "numpy",
    legacy_cross_term: bool = False,
) -> LQRResult:
    """
    Functional LQR interface on raw matrices in any backend.

    Converts inputs to NumPy, runs ``lqr`` and converts the gain, the
    cost-to-go and the eigenvalues back to the requested backend.

    Args:
        F: State matrix (nx, nx)
        G: Input matrix (nx, nu)
        Q: State weight (nx, nx)
        R: Input weight (nu, nu)
        M: Cross weight (nx, nu), None for zero
        check: Verify Q - M·R⁺·M' ⪰ 0 first
        config: Solver settings
        backend: 'numpy', 'torch' or 'jax'
        legacy_cross_term: See ``riccati_coefficients``

    Returns:
        LQRResult with arrays in the requested backend

    Raises:
        ValueError: If shapes are incompatible or backend is unknown

    Examples:
        >>> result = design_lqr(
        ...     np.array([[0, 1], [0, 0]]), np.array([[0], [1]]),
        ...     np.diag([10, 1]), np.array([[0.1]]),
        ... )
        >>> result['gain'].shape
        (1, 2)
    """
    backend = validate_backend(backend)

    system = LinearSystem(F=to_numpy(F, backend), G=to_numpy(G, backend))
    result = lqr(
        system,
        to_numpy(Q, backend),
        to_numpy(R, backend),
        to_numpy(M, backend),
        check=check,
        config=config,
        legacy_cross_term=legacy_cross_term,
    )

    for key in ("gain", "cost_to_go", "closed_loop_eigenvalues"):
        result[key] = from_numpy(result[key], backend)
    return result
