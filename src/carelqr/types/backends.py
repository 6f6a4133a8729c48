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
Backend Types

Identifiers for the array libraries accepted at the public entry points.

Usage
-----
>>> from carelqr.types.backends import Backend, DEFAULT_BACKEND
>>>
>>> def design(..., backend: Backend = DEFAULT_BACKEND):
...     pass
"""

from typing import Literal, Tuple

Backend = Literal["numpy", "torch", "jax"]
"""
Backend identifier for inputs and returned arrays.

Valid values:
- 'numpy': NumPy arrays (default, no conversion)
- 'torch': PyTorch tensors (converted to NumPy for the solve, back on return)
- 'jax': JAX arrays (converted to NumPy for the solve, back on return)

The Riccati and Lyapunov kernels always run on NumPy/SciPy.
"""

VALID_BACKENDS: Tuple[str, ...] = ("numpy", "torch", "jax")

DEFAULT_BACKEND: Backend = "numpy"


def validate_backend(backend: str) -> Backend:
    """
    Check a backend identifier.

    Args:
        backend: Backend name to check

    Returns:
        The same name, typed as Backend

    Raises:
        ValueError: If the name is not one of VALID_BACKENDS
    """
    if backend not in VALID_BACKENDS:
        raise ValueError(
            f"backend must be one of {VALID_BACKENDS}, got '{backend}'",
        )
    return backend  # type: ignore[return-value]
