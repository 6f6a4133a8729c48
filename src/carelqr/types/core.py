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
Core Types - Fundamental Building Blocks

Defines the array and matrix types moved between the Riccati components:
- Multi-backend array types (NumPy, PyTorch, JAX)
- Matrix types named by their role (state, input, gain, cost, solution)

Every numerical routine works on dense float64 NumPy arrays internally.
The multi-backend aliases only appear at the public entry points, where
arrays are converted on the way in and on the way out.

Usage
-----
>>> from carelqr.types.core import StateMatrix, InputMatrix, GainMatrix
>>>
>>> def apply_feedback(x, K: GainMatrix):
...     return -K @ x
"""

from typing import TYPE_CHECKING, Union

import numpy as np

if TYPE_CHECKING:
    import jax.numpy as jnp
    import torch


# ============================================================================
# Basic Array Types - Multi-Backend Support
# ============================================================================

ArrayLike = Union[np.ndarray, "torch.Tensor", "jnp.ndarray"]
"""
Array-like type supporting multiple backends.

Can be NumPy array, PyTorch tensor, or JAX array.
"""

NumpyArray = np.ndarray
"""
Pure NumPy array.

Use when the backend is definitely NumPy (no conversion needed). All
linear-algebra kernels in ``carelqr.linalg`` take and return this type.
"""

ScalarLike = Union[float, int, np.number]
"""Scalar value (step lengths, traces, tolerances)."""


# ============================================================================
# Matrix Types - Semantic Naming by Role
# ============================================================================

StateMatrix = ArrayLike
"""
State matrix (nx, nx).

Uses:
- F: system dynamics in ẋ = F·x + G·u
- A: drift coefficient of the Riccati equation
- Q: state cost weight in LQR

Examples
--------
>>> F: StateMatrix = np.array([[0, 1], [-2, -3]])
>>> Q: StateMatrix = np.eye(2)
"""

InputMatrix = ArrayLike
"""
Input matrix G (nx, nu).

Maps the control vector to state derivatives: ẋ = F·x + G·u.
Also used for the LQR cross term M (nx, nu).

Examples
--------
>>> G: InputMatrix = np.array([[0], [1]])
"""

CostMatrix = ArrayLike
"""
Quadratic cost weight.

Defines J = ∫ (x'Qx + 2x'Mu + u'Ru) dt.
Q is (nx, nx) and symmetric, R is (nu, nu) and positive (semi)definite.
"""

GainMatrix = ArrayLike
"""
Feedback gain K (nu, nx).

Control law: u = -K·x.
"""

RiccatiSolution = ArrayLike
"""
Solution S (nx, nx) of the continuous algebraic Riccati equation

    S·A + A'·S - (S·B)·S + C = 0

Symmetric for symmetric B and C. Also the LQR cost-to-go: J* = x₀'·S·x₀.
"""

ControllabilityMatrix = ArrayLike
"""
Controllability matrix (nx, nx*nu).

C = [G, FG, F²G, ..., F^(n-1)G]

System is controllable iff rank(C) = nx.
"""
