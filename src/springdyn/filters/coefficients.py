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
Coefficient Derivation

Maps the interpretable parameters (f, ζ, r) to the coefficients of

    k2·y'' + k1·y' + y = x + k3·x'

and back to the natural frequency and damping ratio they encode.

Pure stateless functions.
"""

import math
from typing import Tuple

from springdyn.filters.validation import (
    validate_damping,
    validate_frequency,
    validate_response,
)
from springdyn.types.core import ScalarLike
from springdyn.types.dynamics import DynamicsCoefficients, DynamicsParameters


def derive_coefficients(
    frequency: ScalarLike, damping: ScalarLike, response: ScalarLike
) -> DynamicsCoefficients:
    """
    Derive k1, k2, k3 from frequency, damping ratio and initial response.

        k1 = ζ / (π f)
        k2 = 1 / (2π f)²
        k3 = r ζ / (2π f)

    Parameters
    ----------
    frequency : float
        Natural frequency f > 0 (cycles per unit time)
    damping : float
        Damping ratio ζ, any finite value
    response : float
        Initial response r, any finite value

    Returns
    -------
    DynamicsCoefficients
        Derived coefficients, with k2 > 0

    Raises
    ------
    InvalidParameter
        If f <= 0 or any parameter is not finite

    Examples
    --------
    >>> c = derive_coefficients(1.0, 0.5, 2.0)
    >>> round(c["k2"], 6)
    0.025330
    >>> c["k3"] == c["k1"]  # r·ζ/(2πf) == ζ/(πf) when r == 2
    True
    """
    f = validate_frequency(frequency)
    zeta = validate_damping(damping)
    r = validate_response(response)

    omega = 2.0 * math.pi * f
    coefficients: DynamicsCoefficients = {
        "k1": zeta / (math.pi * f),
        "k2": 1.0 / (omega * omega),
        "k3": r * zeta / omega,
    }
    return coefficients


def coefficients_from_parameters(parameters: DynamicsParameters) -> DynamicsCoefficients:
    """Derive coefficients from a DynamicsParameters dictionary."""
    return derive_coefficients(
        parameters["frequency"], parameters["damping"], parameters["response"]
    )


def natural_frequency_and_damping(coefficients: DynamicsCoefficients) -> Tuple[float, float]:
    """
    Recover (ω, ζ) from coefficients.

    ω = 1/√k2 and ζ = k1·ω/2.
    """
    omega = 1.0 / math.sqrt(coefficients["k2"])
    zeta = 0.5 * coefficients["k1"] * omega
    return omega, zeta


def critical_timestep(coefficients: DynamicsCoefficients) -> float:
    """
    Largest time step for which the stability clamp leaves k2 unchanged.

    The clamp is inactive while both

        dt²/2 + dt·k1/2 <= k2
        dt·k1          <= k2

    hold. The first bound is the positive root of dt² + k1·dt - 2·k2 = 0;
    the second only applies when k1 > 0.

    Examples
    --------
    >>> c = derive_coefficients(1.0, 0.0, 0.0)
    >>> round(critical_timestep(c), 6)  # √(2·k2) for an undamped system
    0.225079
    """
    k1 = coefficients["k1"]
    k2 = coefficients["k2"]
    dt_max = -0.5 * k1 + math.sqrt(0.25 * k1 * k1 + 2.0 * k2)
    if k1 > 0.0:
        dt_max = min(dt_max, k2 / k1)
    return dt_max


__all__ = [
    "derive_coefficients",
    "coefficients_from_parameters",
    "natural_frequency_and_damping",
    "critical_timestep",
]
