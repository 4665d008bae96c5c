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
Response Analysis

Pure stateless functions describing a parameter set:

**Continuous response:**
- Damping regime, poles, damped frequency
- Time constant, settling time, step overshoot

**Discrete step:**
- Eigenvalues and spectral radius of one stabilized update step

Mathematical Background
-----------------------
With ω = 2πf the continuous poles of k2·y'' + k1·y' + y = x are

    p = -ζω ± ω√(ζ² - 1)

Step overshoot (r = 0, 0 < ζ < 1):

    OS = 100·exp(-ζπ / √(1 - ζ²))  percent

Discrete stability of one step (constant target):

    All |λ(A)| < 1, A from springdyn.filters.stabilization.discrete_update_matrix
"""

import math
from typing import Optional, Union

import numpy as np

from springdyn.filters.coefficients import (
    critical_timestep,
    derive_coefficients,
)
from springdyn.filters.second_order_filter import SecondOrderFilter
from springdyn.filters.stabilization import (
    StabilizationMethod,
    discrete_update_matrix,
    stable_gains,
)
from springdyn.filters.validation import InvalidParameter, validate_timestep
from springdyn.types.core import ScalarLike
from springdyn.types.dynamics import (
    DampingRegime,
    DynamicsCoefficients,
    ResponseCharacteristics,
    StepStabilityInfo,
)

_REGIME_TOLERANCE = 1e-12


def classify_damping(damping: float) -> DampingRegime:
    """
    Qualitative damping regime of a damping ratio.

    Examples
    --------
    >>> classify_damping(0.5)
    'underdamped'
    >>> classify_damping(-0.1)
    'unstable'
    """
    if damping < -_REGIME_TOLERANCE:
        return "unstable"
    if abs(damping) <= _REGIME_TOLERANCE:
        return "undamped"
    if abs(damping - 1.0) <= _REGIME_TOLERANCE:
        return "critically_damped"
    if damping < 1.0:
        return "underdamped"
    return "overdamped"


def analyze_response(
    frequency: ScalarLike, damping: ScalarLike, response: ScalarLike
) -> ResponseCharacteristics:
    """
    Continuous-time response characteristics of (f, ζ, r).

    Args:
        frequency: Natural frequency f > 0
        damping: Damping ratio ζ
        response: Initial response r

    Returns:
        ResponseCharacteristics containing:
            - natural_frequency: ω = 2πf
            - damping_regime: 'unstable', 'undamped', 'underdamped',
              'critically_damped' or 'overdamped'
            - poles: continuous poles (complex, (2,))
            - damped_frequency, time_constant, settling_time
            - percent_overshoot: step overshoot with r = 0
            - anticipates: r < 0
            - critical_timestep: largest dt left unclamped
            - coefficients: k1, k2, k3

    Raises:
        InvalidParameter: If f <= 0 or a parameter is not finite

    Examples
    --------
    >>> info = analyze_response(1.0, 0.5, 2.0)
    >>> info['damping_regime']
    'underdamped'
    >>> round(info['percent_overshoot'], 1)
    16.3
    """
    coefficients = derive_coefficients(frequency, damping, response)
    f = float(frequency)
    zeta = float(damping)
    r = float(response)

    omega = 2.0 * math.pi * f
    root = np.sqrt(complex(zeta * zeta - 1.0))
    poles = np.array([-zeta * omega + omega * root, -zeta * omega - omega * root])

    regime = classify_damping(zeta)

    if 0.0 <= zeta < 1.0:
        damped_frequency = omega * math.sqrt(1.0 - zeta * zeta)
        percent_overshoot = 100.0 * math.exp(-zeta * math.pi / math.sqrt(1.0 - zeta * zeta))
    elif zeta < 0.0:
        damped_frequency = omega * math.sqrt(max(0.0, 1.0 - zeta * zeta))
        percent_overshoot = math.inf
    else:
        damped_frequency = 0.0
        percent_overshoot = 0.0

    if zeta > 0.0:
        time_constant = 1.0 / (zeta * omega)
        settling_time = 4.0 * time_constant
    else:
        time_constant = math.inf
        settling_time = math.inf

    result: ResponseCharacteristics = {
        "natural_frequency": omega,
        "damping_regime": regime,
        "poles": poles,
        "damped_frequency": damped_frequency,
        "time_constant": time_constant,
        "settling_time": settling_time,
        "percent_overshoot": percent_overshoot,
        "anticipates": r < 0.0,
        "critical_timestep": critical_timestep(coefficients),
        "coefficients": coefficients,
    }

    return result


def analyze_step_stability(
    source: Union[SecondOrderFilter, DynamicsCoefficients],
    dt: ScalarLike,
    stabilization: Optional[Union[str, StabilizationMethod]] = None,
    tolerance: float = 1e-10,
) -> StepStabilityInfo:
    """
    Stability of one stabilized update step of length dt.

    Args:
        source: A filter, or coefficients from derive_coefficients
        dt: Step length, > 0
        stabilization: Strategy to analyse. Defaults to the filter's
            strategy, or 'clamp' for bare coefficients.
        tolerance: Tolerance for marginal stability detection

    Returns:
        StepStabilityInfo with eigenvalues, spectral radius, stability
        flags and the effective gains

    Raises:
        InvalidParameter: If dt <= 0 or the strategy is unknown

    Examples
    --------
    >>> f = SecondOrderFilter(10.0, 0.5, 1.0, initial_value=0.0)
    >>> info = analyze_step_stability(f, dt=5.0)
    >>> info['mode'], info['is_stable']
    ('clamped', True)
    """
    step = validate_timestep(dt)
    if step <= 0.0:
        raise InvalidParameter(f"dt must be positive for stability analysis, got {step}")

    if isinstance(source, SecondOrderFilter):
        coefficients = source.coefficients
        default_method = source.stabilization
    else:
        coefficients = source
        default_method = StabilizationMethod.CLAMP

    if stabilization is None:
        method = default_method
    else:
        try:
            method = StabilizationMethod(getattr(stabilization, "value", stabilization))
        except ValueError as e:
            raise InvalidParameter(f"Unknown stabilization '{stabilization}'") from e

    k1_eff, k2_eff, mode = stable_gains(coefficients, step, method)
    A = discrete_update_matrix(k1_eff, k2_eff, step)

    eigenvalues = np.linalg.eigvals(A)
    spectral_radius = float(np.max(np.abs(eigenvalues)))

    result: StepStabilityInfo = {
        "dt": step,
        "eigenvalues": eigenvalues,
        "spectral_radius": spectral_radius,
        "is_stable": bool(spectral_radius < 1.0 - tolerance),
        "is_marginally_stable": bool(abs(spectral_radius - 1.0) <= tolerance),
        "k1_effective": k1_eff,
        "k2_effective": k2_eff,
        "mode": mode,
        "stabilization": method.value,
    }

    return result


__all__ = [
    "classify_damping",
    "analyze_response",
    "analyze_step_stability",
]
