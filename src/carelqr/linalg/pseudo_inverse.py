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
Regularized Moore-Penrose pseudo-inverse.

    M = U·Σ·V'   →   M⁺ = V·Σ⁺·U'

where Σ⁺ inverts every singular value above a fixed threshold and zeroes
the rest. The cutoff is absolute: a matrix whose singular values are all
below the threshold maps to the zero matrix of transposed shape.
"""

import numpy as np
from scipy import linalg

from carelqr.types.core import NumpyArray

DEFAULT_PINV_THRESHOLD = 1e-6


def pinv(M: NumpyArray, threshold: float = DEFAULT_PINV_THRESHOLD) -> NumpyArray:
    """
    Moore-Penrose pseudo-inverse with absolute singular-value truncation.

    Args:
        M: Real matrix (n, m)
        threshold: Singular values σ ≤ threshold are discarded

    Returns:
        Pseudo-inverse (m, n)

    Raises:
        ValueError: If M is not two-dimensional or threshold is negative

    Examples:
        >>> pinv(np.diag([2.0, 1e-9]))
        array([[0.5, 0. ],
               [0. , 0. ]])
    """
    M_np = np.asarray(M, dtype=float)
    if M_np.ndim != 2:
        raise ValueError(f"pinv expects a 2-D matrix, got shape {M_np.shape}")
    if threshold < 0:
        raise ValueError(f"threshold must be non-negative, got {threshold}")

    n, m = M_np.shape
    if n == 0 or m == 0:
        return np.zeros((m, n))

    U, s, Vh = linalg.svd(M_np, full_matrices=True)

    s_inv = np.zeros_like(s)
    keep = s > threshold
    s_inv[keep] = 1.0 / s[keep]

    k = s.shape[0]
    return (Vh[:k, :].T * s_inv) @ U[:, :k].T
