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
Riccati Synthesis and System Analysis
=====================================

Continuous-time LQR built on a Newton-Kleinman CARE solver.

Riccati Equation
----------------
>>> from carelqr.control import care
>>>
>>> result = care(A, B, C)          # S·A + A'·S - (S·B)·S + C = 0
>>> S = result['solution']

LQR Synthesis
-------------
>>> from carelqr.control import LinearSystem, lqr, design_lqr
>>>
>>> # Object interface
>>> system = LinearSystem(F, G)
>>> result = lqr(system, Q, R, M)
>>>
>>> # Functional interface
>>> result = design_lqr(F, G, Q, R)
>>> K = result['gain']

System Analysis
---------------
>>> from carelqr.control import analyze_stability, analyze_stabilizability
"""

from .care_solver import care, care_residual, init_newton_care, newton_ls_care
from .control_synthesis import ControlSynthesis
from .linear_system import LinearSystem
from .lqr import design_lqr, lqr, riccati_coefficients, weights_are_positive
from .system_analysis import (
    analyze_controllability,
    analyze_stability,
    analyze_stabilizability,
    controllability_matrix,
)

__all__ = [
    # Classes
    "ControlSynthesis",
    "LinearSystem",
    # Riccati
    "care",
    "care_residual",
    "init_newton_care",
    "newton_ls_care",
    # LQR
    "lqr",
    "design_lqr",
    "riccati_coefficients",
    "weights_are_positive",
    # Analysis
    "analyze_stability",
    "analyze_controllability",
    "analyze_stabilizability",
    "controllability_matrix",
]
