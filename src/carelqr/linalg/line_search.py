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
Exact line search along a Newton direction of the Riccati equation.

For a Newton step H from X, the Riccati residual along X + t·H is

    R(X + t·H) = (1 - t)·R(X) - t²·V,    V = H·B·H

so its squared Frobenius norm is the quartic

    J(t) = a·(1 - t)² - 2b·t²·(1 - t) + c·t⁴
         = a - 2a·t + (a - 2b)·t² + 2b·t³ + c·t⁴

with a = tr(R'R), b = tr(R'V), c = tr(V'V). The minimizer over
[lower, upper] is found exactly: the admissible real roots of the cubic
J'(t) are compared against both interval endpoints.
"""

import numpy as np
from numpy.polynomial import polynomial as P

DEFAULT_LOWER = 1e-5
DEFAULT_UPPER = 2.0

# Relative size of an imaginary part still considered a real root.
_REAL_ROOT_TOLERANCE = 1e-10


def _cost_coefficients(a: float, b: float, c: float) -> np.ndarray:
    # Ascending powers of t
    return np.array([a, -2.0 * a, a - 2.0 * b, 2.0 * b, c])


def _derivative_coefficients(a: float, b: float, c: float) -> np.ndarray:
    return np.array([-2.0 * a, 2.0 * (a - 2.0 * b), 6.0 * b, 4.0 * c])


def line_search_cost(a: float, b: float, c: float, t: float) -> float:
    """Evaluate J(t) = a(1-t)² - 2b·t²(1-t) + c·t⁴."""
    return float(P.polyval(t, _cost_coefficients(a, b, c)))


def _real_roots(coefficients: np.ndarray) -> np.ndarray:
    trimmed = np.trim_zeros(coefficients, "b")
    if trimmed.size <= 1:
        return np.empty(0)
    roots = P.polyroots(trimmed)
    is_real = np.abs(roots.imag) <= _REAL_ROOT_TOLERANCE * (1.0 + np.abs(roots.real))
    return roots.real[is_real]


def line_search_care(
    a: float,
    b: float,
    c: float,
    lower: float = DEFAULT_LOWER,
    upper: float = DEFAULT_UPPER,
) -> float:
    """
    Step length minimizing the Riccati residual norm along a Newton direction.

    Args:
        a: tr(R'·R), R the current residual
        b: tr(R'·V), V = H·B·H
        c: tr(V'·V)
        lower: Smallest admissible step
        upper: Largest admissible step

    Returns:
        Minimizing step length t* in [lower, upper]

    Raises:
        ValueError: If the bounds are not ordered

    Examples:
        >>> t = line_search_care(1.0, 0.0, 1.0)
        >>> round(t, 2)
        0.59
    """
    if not lower < upper:
        raise ValueError(f"lower bound {lower} must be below upper bound {upper}")

    cost = _cost_coefficients(a, b, c)
    derivative = _derivative_coefficients(a, b, c)

    # Same minimizer, better conditioned roots
    if c != 0.0:
        cost = cost / c
        derivative = derivative / (4.0 * c)

    # Endpoint tie goes to the longer step
    upper_value = P.polyval(upper, cost)
    lower_value = P.polyval(lower, cost)
    if lower_value < upper_value:
        argmin, minimum = lower, lower_value
    else:
        argmin, minimum = upper, upper_value

    for root in _real_roots(derivative):
        if lower <= root <= upper:
            candidate = P.polyval(root, cost)
            if candidate < minimum:
                argmin, minimum = float(root), candidate

    return float(argmin)
