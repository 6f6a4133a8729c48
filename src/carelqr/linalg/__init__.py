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
Dense Linear Algebra Kernels
============================

Building blocks of the Newton-Kleinman CARE solver:

- ``pinv``: pseudo-inverse with an absolute singular-value cutoff
- ``lyapunov``: Bartels-Stewart solver for X·A + A'·X + Q = 0
- ``line_search_care``: exact minimization of the residual quartic

>>> from carelqr.linalg import lyapunov, pinv, line_search_care
"""

from .line_search import line_search_care, line_search_cost
from .lyapunov import lyapunov, lyapunov_residual, solve_quasi_triangular_sylvester
from .pseudo_inverse import DEFAULT_PINV_THRESHOLD, pinv

__all__ = [
    "pinv",
    "DEFAULT_PINV_THRESHOLD",
    "lyapunov",
    "lyapunov_residual",
    "solve_quasi_triangular_sylvester",
    "line_search_care",
    "line_search_cost",
]
