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
Backend conversion helpers.

The solver kernels run on NumPy/SciPy. Public entry points accept PyTorch
and JAX arrays as well, convert them here, and convert results back.
PyTorch and JAX are optional and only imported when actually used.
"""

from typing import Any, Optional

import numpy as np

from carelqr.types.backends import Backend


def detect_backend(arr: Any) -> str:
    """
    Auto-detect backend from array type.

    Args:
        arr: Array-like object

    Returns:
        Backend name: 'torch', 'jax', 'numpy', or 'unknown'
    """
    module = type(arr).__module__
    if module.startswith("torch"):
        return "torch"
    if module.startswith("jax"):
        return "jax"
    if isinstance(arr, np.ndarray):
        return "numpy"
    return "unknown"


def to_numpy(arr: Any, backend: Backend = "numpy") -> Optional[np.ndarray]:
    """
    Convert an array from any backend to a float64 NumPy array.

    Args:
        arr: Array in any backend (or a nested list), None passes through
        backend: Source backend identifier (tensors are detected by type, so
            nested lists are accepted for any backend)

    Returns:
        NumPy array of dtype float64, or None
    """
    if arr is None:
        return None
    if isinstance(arr, np.ndarray):
        return arr.astype(float, copy=False)

    if detect_backend(arr) == "torch":
        return arr.detach().cpu().numpy().astype(float, copy=False)
    return np.asarray(arr, dtype=float)


def from_numpy(arr: Optional[np.ndarray], backend: Backend):
    """
    Convert a NumPy array to the target backend.

    Args:
        arr: NumPy array, None passes through
        backend: Target backend

    Returns:
        Array in the target backend
    """
    if arr is None or backend == "numpy":
        return arr
    if backend == "torch":
        import torch

        return torch.from_numpy(np.ascontiguousarray(arr))
    if backend == "jax":
        import jax.numpy as jnp

        return jnp.asarray(arr)
    return arr
