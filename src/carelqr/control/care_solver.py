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
Newton-Kleinman CARE Solver

Stabilizing solution of the continuous-time algebraic Riccati equation

    R(X) = C + X·A + A'·X - (X·B)·X = 0

for square A and symmetric B, C (nx, nx).

Mathematical Background
-----------------------
Newton's method on R linearizes around the current iterate X. The Fréchet
derivative of R at X in direction H is

    R'(X)[H] = (A - B·X)'·H + H·(A - B·X)

so each Newton step solves the Lyapunov equation

    (A - B·X)'·H + H·(A - B·X) + R(X) = 0

and the update X ← X + t·H uses the step length t minimizing ‖R(X + t·H)‖
(exact line search, see ``carelqr.linalg.line_search``). The iteration
converges to the stabilizing solution if A - B·X₀ is stable, so the
starting guess comes from a shifted Lyapunov solve (Bass' method):

    (T + β·I)·Z + Z·(T + β·I)' = 2·D·D',    A = U·T·U',  D = U'·B
    X₀ = D'·Z⁺·U'

with β = max(0, -min Re λ(A)) + margin, which places the spectrum of
A - B·X₀ left of -β when Z is positive definite.

Usage
-----
>>> A = np.array([[0.0, 1.0], [0.0, 0.0]])
>>> result = care(A, np.eye(2), np.eye(2))
>>> result['converged']
True
>>> S = result['solution']
"""

import logging
import warnings
from typing import List, Optional

import numpy as np
from scipy import linalg

from carelqr.config import DEFAULT_CONFIG, SolverConfig
from carelqr.linalg.line_search import line_search_care
from carelqr.linalg.lyapunov import lyapunov
from carelqr.linalg.pseudo_inverse import pinv
from carelqr.types.core import NumpyArray, StateMatrix
from carelqr.types.riccati import CAREResult, SolverStatus

from .system_analysis import analyze_stabilizability

logger = logging.getLogger(__name__)


def _validate_coefficients(A, B, C=None):
    A_np = np.asarray(A, dtype=float)
    B_np = np.asarray(B, dtype=float)

    if A_np.ndim != 2 or A_np.shape[0] != A_np.shape[1]:
        raise ValueError(f"A must be square, got shape {A_np.shape}")
    nx = A_np.shape[0]
    if B_np.shape != (nx, nx):
        raise ValueError(f"B must be ({nx}, {nx}), got {B_np.shape}")
    if C is None:
        return A_np, B_np, None

    C_np = np.asarray(C, dtype=float)
    if C_np.shape != (nx, nx):
        raise ValueError(f"C must be ({nx}, {nx}), got {C_np.shape}")
    return A_np, B_np, C_np


def care_residual(
    A: StateMatrix,
    B: StateMatrix,
    C: StateMatrix,
    X: StateMatrix,
) -> NumpyArray:
    """
    Riccati residual C + X·A + A'·X - (X·B)·X.

    Args:
        A, B, C: Riccati coefficients (nx, nx)
        X: Candidate solution (nx, nx)

    Returns:
        Residual matrix (nx, nx)
    """
    A_np, B_np, C_np = _validate_coefficients(A, B, C)
    X_np = np.asarray(X, dtype=float)
    return C_np + X_np @ A_np + A_np.T @ X_np - (X_np @ B_np) @ X_np


def init_newton_care(
    A: StateMatrix,
    B: StateMatrix,
    config: Optional[SolverConfig] = None,
) -> NumpyArray:
    """
    Starting guess X₀ making A - B·X₀ stable.

    The guess is stabilizing, not optimal. If the Bass solution comes out
    non-symmetric (beyond config.symmetry_tolerance) it is replaced by the
    symmetric solution of

        (A - B·X)'·X₀ + X₀·(A - B·X) + X'·B·X + ½·I = 0

    Args:
        A: Riccati drift coefficient (nx, nx)
        B: Riccati quadratic coefficient (nx, nx)
        config: Solver settings (pinv_threshold, symmetry_tolerance,
            init_shift_margin)

    Returns:
        Initial iterate X₀ (nx, nx)

    Raises:
        ValueError: If shapes are incompatible
    """
    config = config or DEFAULT_CONFIG
    A_np, B_np, _ = _validate_coefficients(A, B)
    nx = A_np.shape[0]
    E = np.eye(nx)

    TA, U = linalg.schur(A_np, output="real")
    TD = U.T @ B_np

    eig_real = np.real(linalg.eigvals(TA))
    shift = max(-float(np.min(eig_real)), 0.0) + config.init_shift_margin

    # (TA + βI)·Z + Z·(TA + βI)' = 2·TD·TD'
    Z = lyapunov((TA + shift * E).T, -2.0 * TD @ TD.T)
    X = (TD.T @ pinv(Z, config.pinv_threshold)) @ U.T

    asymmetry = linalg.norm(X - X.T)
    if asymmetry > config.symmetry_tolerance:
        logger.debug("initial guess asymmetry %.3e, re-solving symmetric guess", asymmetry)
        M = (X.T @ B_np) @ X + 0.5 * E
        X = lyapunov(A_np - B_np @ X, M)

    return X


def newton_ls_care(
    A: StateMatrix,
    B: StateMatrix,
    C: StateMatrix,
    X0: StateMatrix,
    config: Optional[SolverConfig] = None,
) -> CAREResult:
    """
    Newton-Kleinman iteration with exact line search.

    Each iteration computes the residual R(X) of the current iterate and
    stops if ‖R(X)‖_F ≤ config.tolerance or config.max_iterations steps have
    been taken. Otherwise it solves (A - B·X)'·H + H·(A - B·X) = -R(X),
    picks the step t from the residual quartic and sets X ← X + t·H.
    The reported residual is always that of the returned iterate.

    Args:
        A, B, C: Riccati coefficients (nx, nx)
        X0: Starting guess, A - B·X0 should be stable
        config: Solver settings (tolerance, max_iterations, line search bounds)

    Returns:
        CAREResult. Hitting the iteration cap is not an error: the last
        iterate is returned with status MAX_ITERATIONS_EXCEEDED and a
        RuntimeWarning is issued.

    Raises:
        ValueError: If shapes are incompatible
        LinAlgError: If a Newton step hits a singular Lyapunov equation
    """
    config = config or DEFAULT_CONFIG
    A_np, B_np, C_np = _validate_coefficients(A, B, C)
    X = np.array(X0, dtype=float)
    if X.shape != A_np.shape:
        raise ValueError(f"X0 must be {A_np.shape}, got {X.shape}")

    initial_eigenvalues = np.linalg.eigvals(A_np - B_np @ X)
    logger.debug("initial closed-loop eigenvalues: %s", initial_eigenvalues)
    if initial_eigenvalues.size and np.max(np.real(initial_eigenvalues)) >= 0:
        warnings.warn(
            "Initial guess does not stabilize A - B·X0 "
            f"(max Re(λ) = {np.max(np.real(initial_eigenvalues)):.3e}); "
            "Newton iteration may not converge to the stabilizing solution",
            RuntimeWarning,
            stacklevel=2,
        )

    residual_history: List[float] = []
    step_history: List[float] = []
    X_last = X
    k = 0

    while True:
        RX = C_np + X @ A_np + A_np.T @ X - (X @ B_np) @ X
        err = float(np.linalg.norm(RX))

        if not np.isfinite(err):
            status = SolverStatus.DIVERGED
            X = X_last
            break
        residual_history.append(err)

        if err <= config.tolerance:
            status = SolverStatus.CONVERGED
            break
        if k >= config.max_iterations:
            status = SolverStatus.MAX_ITERATIONS_EXCEEDED
            break

        # Newton direction: (A - B·X)'·H + H·(A - B·X) + RX = 0
        H = lyapunov(A_np - B_np @ X, RX)

        V = H @ B_np @ H
        a = float(np.sum(RX * RX))
        b = float(np.sum(RX * V))
        c = float(np.sum(V * V))
        tk = line_search_care(
            a, b, c, lower=config.line_search_lower, upper=config.line_search_upper
        )

        X_last = X
        X = X + tk * H
        step_history.append(tk)
        k += 1
        logger.debug("iteration %d: residual %.3e, step %.4f", k, err, tk)

    logger.info("CARE solve took %d iterations", k)

    if status is SolverStatus.MAX_ITERATIONS_EXCEEDED:
        warnings.warn(
            f"CARE cannot be solved to specified precision: residual {err:.3e} "
            f"after {k} iterations (max_iterations={config.max_iterations} exceeded)",
            RuntimeWarning,
            stacklevel=2,
        )
    elif status is SolverStatus.DIVERGED:
        warnings.warn(
            f"CARE iteration diverged after {k} iterations; "
            "returning the last finite iterate",
            RuntimeWarning,
            stacklevel=2,
        )

    result: CAREResult = {
        "solution": X,
        "status": status,
        "converged": status is SolverStatus.CONVERGED,
        "iterations": k,
        "residual_norm": residual_history[-1] if residual_history else float("inf"),
        "residual_history": residual_history,
        "step_history": step_history,
        "initial_closed_loop_eigenvalues": initial_eigenvalues,
    }
    return result


def care(
    A: StateMatrix,
    B: StateMatrix,
    C: StateMatrix,
    config: Optional[SolverConfig] = None,
    check: bool = True,
) -> CAREResult:
    """
    Solve S·A + A'·S - (S·B)·S + C = 0 for the stabilizing S.

    Args:
        A: Drift coefficient (nx, nx)
        B: Quadratic coefficient (nx, nx), symmetric positive semi-definite
        C: Constant coefficient (nx, nx), symmetric
        config: Solver settings, defaults to DEFAULT_CONFIG
        check: Run the PBH stabilizability test on (A, B) first. A failing
            pair is reported with status PRECONDITION_FAILED instead of
            running the iteration to its cap.

    Returns:
        CAREResult

    Raises:
        ValueError: If shapes are incompatible

    Examples:
        >>> A = np.array([[0.0, 1.0], [0.0, 0.0]])
        >>> result = care(A, np.eye(2), np.eye(2))
        >>> result['status']
        <SolverStatus.CONVERGED: 'converged'>
    """
    config = config or DEFAULT_CONFIG
    A_np, B_np, C_np = _validate_coefficients(A, B, C)

    if check:
        info = analyze_stabilizability(A_np, B_np)
        if not info["is_stabilizable"]:
            modes = info["uncontrollable_modes"]
            logger.warning("(A, B) not stabilizable, uncontrollable modes: %s", modes)
            warnings.warn(
                f"(A, B) is not stabilizable; uncontrollable non-stable modes {modes}",
                RuntimeWarning,
                stacklevel=2,
            )
            failed: CAREResult = {
                "solution": None,
                "status": SolverStatus.PRECONDITION_FAILED,
                "converged": False,
                "iterations": 0,
                "residual_norm": float("inf"),
                "residual_history": [],
                "step_history": [],
                "initial_closed_loop_eigenvalues": None,
            }
            return failed

    X0 = init_newton_care(A_np, B_np, config)
    return newton_ls_care(A_np, B_np, C_np, X0, config)
