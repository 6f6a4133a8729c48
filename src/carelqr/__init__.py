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
carelqr
=======

Stabilizing solutions of the continuous-time algebraic Riccati equation

    S·A + A'·S - (S·B)·S + C = 0

by Newton-Kleinman iteration with exact line search, and continuous-time
LQR synthesis on top of it.

>>> import numpy as np
>>> from carelqr import LinearSystem, lqr
>>>
>>> system = LinearSystem(F=[[0, 1], [-2, -3]], G=[[0], [1]])
>>> result = lqr(system, Q=np.eye(2), R=np.array([[1.0]]))
>>> K = result['gain']

Authors
-------
Gil Benezer

License
-------
GNU Affero General Public License v3.0
"""

from .config import DEFAULT_CONFIG, SolverConfig
from .control import (
    ControlSynthesis,
    LinearSystem,
    care,
    design_lqr,
    init_newton_care,
    lqr,
    newton_ls_care,
)
from .linalg import line_search_care, lyapunov, pinv
from .types import CAREResult, LQRResult, SolverStatus

__version__ = "0.1.0"

__all__ = [
    "SolverConfig",
    "DEFAULT_CONFIG",
    "SolverStatus",
    "CAREResult",
    "LQRResult",
    "LinearSystem",
    "ControlSynthesis",
    "pinv",
    "lyapunov",
    "line_search_care",
    "init_newton_care",
    "newton_ls_care",
    "care",
    "lqr",
    "design_lqr",
]
