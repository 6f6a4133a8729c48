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
Continuous Lyapunov Equation Solver

Solves

    X·A + A'·X + Q = 0

with a Bartels-Stewart back-substitution on the real Schur form.

Algorithm
---------
Writing Ã = A', the equation is Ã·X + X·Ã' = -Q. With the real Schur
decomposition Ã = U·T·U' (T upper quasi-triangular) and Y = U'·X·U:

    T·Y + Y·T' = Q₁,    Q₁ = -U'·Q·U

Column k of Y·T' only involves columns j ≥ k of Y (j ≥ k-1 inside a 2×2
block), so Y is recovered from the last column to the first:

- 1×1 block at column i (real eigenvalue):
      (T + T[i,i]·I)·yᵢ = q₁ᵢ - Σ_{j>i} T[i,j]·yⱼ
- 2×2 block at columns (i, i+1) (complex-conjugate pair), S = T[i:i+2, i:i+2]:
      (I₂ ⊗ T + S ⊗ I)·[yᵢ; yᵢ₊₁] = [rhsᵢ; rhsᵢ₊₁]

Finally X = U·Y·U'.

A unique solution exists iff λᵢ(A) + λⱼ(A) ≠ 0 for every pair of
eigenvalues, which holds in particular for stable A. Otherwise one of the
block systems is singular and scipy raises LinAlgError.

Examples
--------
>>> A = np.array([[-1.0, 2.0], [0.0, -3.0]])
>>> X = lyapunov(A, np.eye(2))
>>> np.allclose(X @ A + A.T @ X + np.eye(2), 0)
True
"""

import numpy as np
from scipy import linalg

from carelqr.types.core import NumpyArray


def _check_square_pair(A: NumpyArray, Q: NumpyArray):
    if A.ndim != 2 or A.shape[0] != A.shape[1]:
        raise ValueError(f"A must be square, got shape {A.shape}")
    if Q.shape != A.shape:
        raise ValueError(f"Q must be {A.shape}, got {Q.shape}")


def solve_quasi_triangular_sylvester(T: NumpyArray, Q1: NumpyArray) -> NumpyArray:
    """
    Solve T·Y + Y·T' = Q1 for upper quasi-triangular T.

    T must be in real Schur form: 1×1 diagonal blocks have an exactly zero
    subdiagonal entry, 2×2 blocks a nonzero one (the LAPACK convention).

    Args:
        T: Upper quasi-triangular matrix (m, m)
        Q1: Right-hand side (m, m)

    Returns:
        Y (m, m)
    """
    m = T.shape[0]
    Y = np.zeros((m, m))
    eye = np.eye(m)

    i = m - 1
    while i >= 0:
        if i > 0 and T[i, i - 1] != 0.0:
            # 2×2 block occupying columns (i-1, i)
            j = i - 1
            rhs = Q1[:, j : i + 1] - Y[:, i + 1 :] @ T[j : i + 1, i + 1 :].T
            S = T[j : i + 1, j : i + 1]
            lhs = np.kron(np.eye(2), T) + np.kron(S, eye)
            y = linalg.solve(lhs, rhs.T.reshape(-1))
            Y[:, j : i + 1] = y.reshape(2, m).T
            i -= 2
        else:
            rhs = Q1[:, i] - Y[:, i + 1 :] @ T[i, i + 1 :]
            Y[:, i] = linalg.solve(T + T[i, i] * eye, rhs)
            i -= 1

    return Y


def lyapunov(A: NumpyArray, Q: NumpyArray) -> NumpyArray:
    """
    Solve the continuous Lyapunov equation X·A + A'·X + Q = 0.

    Args:
        A: Square matrix (m, m)
        Q: Matrix (m, m), usually symmetric

    Returns:
        X (m, m), symmetric when Q is symmetric

    Raises:
        ValueError: If shapes are incompatible
        LinAlgError: If A and -A share an eigenvalue (no unique solution)
    """
    A_np = np.asarray(A, dtype=float)
    Q_np = np.asarray(Q, dtype=float)
    _check_square_pair(A_np, Q_np)

    if A_np.shape[0] == 0:
        return np.zeros_like(A_np)

    T, U = linalg.schur(A_np.T, output="real")
    Q1 = -(U.T @ Q_np @ U)

    Y = solve_quasi_triangular_sylvester(T, Q1)
    return U @ Y @ U.T


def lyapunov_residual(A: NumpyArray, Q: NumpyArray, X: NumpyArray) -> NumpyArray:
    """Residual X·A + A'·X + Q of a candidate Lyapunov solution."""
    A_np = np.asarray(A, dtype=float)
    X_np = np.asarray(X, dtype=float)
    return X_np @ A_np + A_np.T @ X_np + np.asarray(Q, dtype=float)
