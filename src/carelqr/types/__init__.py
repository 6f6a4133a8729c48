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

"""Type definitions shared by the solver components."""

from .backends import DEFAULT_BACKEND, VALID_BACKENDS, Backend, validate_backend
from .core import (
    ArrayLike,
    ControllabilityMatrix,
    CostMatrix,
    GainMatrix,
    InputMatrix,
    NumpyArray,
    RiccatiSolution,
    ScalarLike,
    StateMatrix,
)
from .riccati import (
    CAREResult,
    ControllabilityInfo,
    LQRResult,
    SolverStatus,
    StabilityInfo,
    StabilizabilityInfo,
)

__all__ = [
    # Backends
    "Backend",
    "DEFAULT_BACKEND",
    "VALID_BACKENDS",
    "validate_backend",
    # Arrays
    "ArrayLike",
    "NumpyArray",
    "ScalarLike",
    "StateMatrix",
    "InputMatrix",
    "CostMatrix",
    "GainMatrix",
    "RiccatiSolution",
    "ControllabilityMatrix",
    # Results
    "SolverStatus",
    "CAREResult",
    "LQRResult",
    "StabilityInfo",
    "ControllabilityInfo",
    "StabilizabilityInfo",
]
