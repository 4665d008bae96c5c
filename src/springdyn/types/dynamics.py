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
Second-Order Dynamics Types

Parameter, coefficient and analysis result types for the second-order
filter.

Mathematical Background
----------------------
The filter integrates

    k2·y'' + k1·y' + y = x + k3·x'

where x is the (possibly discontinuous) target and y the filtered value.
The user-facing parametrization (f, ζ, r) maps to the coefficients by

    k1 = ζ / (π f)
    k2 = 1 / (2π f)²
    k3 = r ζ / (2π f)

With ω = 2π f the continuous poles are p = -ζω ± ω√(ζ² - 1).

Usage
-----
>>> from springdyn.filters.coefficients import derive_coefficients
>>> from springdyn.types.dynamics import DynamicsParameters, DynamicsCoefficients
>>>
>>> params: DynamicsParameters = {"frequency": 2.0, "damping": 0.5, "response": 2.0}
>>> coeffs: DynamicsCoefficients = derive_coefficients(**params)
>>> coeffs["k2"] > 0
True
"""

from typing import Literal

import numpy as np
from typing_extensions import TypedDict

from .backends import StabilizationName

# ============================================================================
# Parameter and Coefficient Types
# ============================================================================


class DynamicsParameters(TypedDict):
    """
    User-facing filter parameters.

    Fields
    ------
    frequency : float
        Natural frequency f in cycles per unit time (must be > 0)
    damping : float
        Damping ratio ζ (0 undamped, < 1 underdamped, >= 1 no oscillation)
    response : float
        Initial response r (1 immediate, > 1 overshoot, < 0 anticipation)

    Examples
    --------
    >>> import numpy as np
    >>> from springdyn.filters import SecondOrderFilter
    >>>
    >>> camera: DynamicsParameters = {"frequency": 1.5, "damping": 0.8, "response": 0.0}
    >>> f = SecondOrderFilter.from_parameters(camera, initial_value=np.zeros(3))
    """

    frequency: float
    damping: float
    response: float


class DynamicsCoefficients(TypedDict):
    """
    Coefficients of k2·y'' + k1·y' + y = x + k3·x'.

    Fields
    ------
    k1 : float
        Velocity (damping) coefficient, ζ / (π f)
    k2 : float
        Acceleration (inertia) coefficient, 1 / (2π f)², always > 0
    k3 : float
        Target velocity feed-forward coefficient, r ζ / (2π f)
    """

    k1: float
    k2: float
    k3: float


GainMode = Literal["exact", "clamped", "pole_matched"]
"""
How the gains of one update step were obtained.

- 'exact': k2 used unchanged
- 'clamped': k2 raised for stability
- 'pole_matched': (k1, k2) replaced by pole-matched gains
"""

DampingRegime = Literal["unstable", "undamped", "underdamped", "critically_damped", "overdamped"]


# ============================================================================
# Analysis Result Types
# ============================================================================


class ResponseCharacteristics(TypedDict):
    """
    Continuous-time response characteristics of a parameter set.

    Fields
    ------
    natural_frequency : float
        ω = 2π f in radians per unit time
    damping_regime : DampingRegime
        Qualitative damping classification
    poles : np.ndarray
        Continuous poles (complex, shape (2,))
    damped_frequency : float
        ω√(1 - ζ²) for 0 <= ζ < 1, else 0.0
    time_constant : float
        1 / (ζω), inf when ζ <= 0
    settling_time : float
        2% settling time estimate 4 / (ζω), inf when ζ <= 0
    percent_overshoot : float
        Step overshoot in percent for r = 0; 0.0 when ζ >= 1
    anticipates : bool
        True when r < 0 (response first moves away from the target)
    critical_timestep : float
        Largest dt for which the clamp leaves k2 unchanged
    coefficients : DynamicsCoefficients
        Derived k1, k2, k3
    """

    natural_frequency: float
    damping_regime: DampingRegime
    poles: np.ndarray
    damped_frequency: float
    time_constant: float
    settling_time: float
    percent_overshoot: float
    anticipates: bool
    critical_timestep: float
    coefficients: DynamicsCoefficients


class StepStabilityInfo(TypedDict):
    """
    Stability of the discrete update for a fixed time step.

    The homogeneous update (constant target) is linear in the state
    [y - x, y']:

        A = [[1,         dt                        ],
             [-dt/k2e,   1 - dt²/k2e - dt·k1e/k2e  ]]

    Fields
    ------
    dt : float
        Time step analysed
    eigenvalues : np.ndarray
        Eigenvalues of A (complex, shape (2,))
    spectral_radius : float
        max |λ|
    is_stable : bool
        spectral radius < 1
    is_marginally_stable : bool
        spectral radius == 1 within tolerance
    k1_effective : float
        Velocity gain used by the step
    k2_effective : float
        Acceleration gain used by the step
    mode : GainMode
        How the gains were obtained
    stabilization : StabilizationName
        Strategy analysed
    """

    dt: float
    eigenvalues: np.ndarray
    spectral_radius: float
    is_stable: bool
    is_marginally_stable: bool
    k1_effective: float
    k2_effective: float
    mode: GainMode
    stabilization: StabilizationName


class FilterStats(TypedDict):
    """
    Update statistics of a filter instance.

    Fields
    ------
    total_steps : int
        Updates that advanced the state (dt > 0)
    skipped_steps : int
        Updates that were no-ops (dt == 0, or negative dt under 'clamp')
    clamped_steps : int
        Steps whose k2 was raised by the clamp
    pole_matched_steps : int
        Steps that used pole-matched gains
    estimated_velocity_steps : int
        Steps that estimated the target velocity by finite difference
    total_time : float
        Simulated time consumed by advancing steps
    """

    total_steps: int
    skipped_steps: int
    clamped_steps: int
    pole_matched_steps: int
    estimated_velocity_steps: int
    total_time: float


__all__ = [
    "DynamicsParameters",
    "DynamicsCoefficients",
    "GainMode",
    "DampingRegime",
    "ResponseCharacteristics",
    "StepStabilityInfo",
    "FilterStats",
]
