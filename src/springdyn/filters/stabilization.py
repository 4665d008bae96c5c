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
Step Stabilization - Gains for One Semi-Implicit Euler Step

Naive semi-implicit Euler integration of

    k2·y'' + k1·y' + y = x + k3·x'

oscillates with growing amplitude once dt is large compared to the natural
period or the damping time constant. Instead of sub-stepping, the gains of
each step are adjusted so that the step is stable for any dt > 0.

Strategies
----------
CLAMP
    Raise k2 to

        k2_stable = max(k2, dt²/2 + dt·k1/2, dt·k1)

    The first bound keeps the discrete oscillator inside the unit circle,
    the second keeps the per-step velocity damping factor non-negative so
    the step never flips the sign of the velocity on its own.

POLE_MATCHING
    While ω·dt < ζ the clamp is used. For longer steps (k1, k2) are
    replaced by gains whose discrete poles equal exp(p·dt) for the
    continuous poles p = -ζω ± ω√(ζ² - 1):

        t1    = exp(-ζ ω dt)
        α     = 2 t1 cos(d dt)     (|ζ| < 1),   2 t1 cosh(d dt)  (|ζ| >= 1)
        β     = t1²
        t2    = dt / (1 + β - α)
        k1'   = (1 - β)·t2
        k2'   = dt·t2

    with d = ω√|ζ² - 1|. When 1 + β - α is not positive (an undamped step
    spanning a whole number of periods) the clamp is used instead.

Discrete Update
---------------
For a constant target x the step is linear in e = [y - x, y']:

    e_next = A e,   A = [[1,        dt                       ],
                         [-dt/k2e,  1 - dt²/k2e - dt·k1e/k2e ]]

so det(A) = 1 - dt·k1e/k2e and trace(A) = 2 - dt²/k2e - dt·k1e/k2e.
"""

import math
from enum import Enum
from typing import Optional, Tuple

import numpy as np

from springdyn.filters.coefficients import natural_frequency_and_damping
from springdyn.types.core import GainPair
from springdyn.types.dynamics import DynamicsCoefficients, GainMode


class StabilizationMethod(Enum):
    """
    Stabilization strategy for one update step.

    Attributes
    ----------
    CLAMP : str
        Clamp k2 upward. Unconditionally stable for ζ >= 0, responds a
        little slower than the continuous system at large dt.

    POLE_MATCHING : str
        Clamp for short steps, exact discrete poles for long steps.
        Tracks the continuous decay rate at large dt.
    """

    CLAMP = "clamp"
    POLE_MATCHING = "pole_matching"


def clamp_k2(k1: float, k2: float, dt: float) -> float:
    """
    Stabilized k2 for a step of length dt.

    Examples
    --------
    >>> clamp_k2(k1=0.0, k2=0.01, dt=1.0)  # dt²/2 dominates
    0.5
    >>> clamp_k2(k1=0.1, k2=1.0, dt=0.01)  # small step, unchanged
    1.0
    """
    return max(k2, dt * dt / 2.0 + dt * k1 / 2.0, dt * k1)


def pole_matched_gains(coefficients: DynamicsCoefficients, dt: float) -> Optional[GainPair]:
    """
    Gains (k1', k2') whose discrete poles match the continuous ones.

    Parameters
    ----------
    coefficients : DynamicsCoefficients
        Derived coefficients
    dt : float
        Step length, > 0

    Returns
    -------
    Optional[Tuple[float, float]]
        (k1', k2'), or None when no finite positive gains exist for this
        step (the caller falls back to the clamp)
    """
    omega, zeta = natural_frequency_and_damping(coefficients)
    d = omega * math.sqrt(abs(zeta * zeta - 1.0))

    try:
        beta = math.exp(-2.0 * zeta * omega * dt)
        if abs(zeta) < 1.0:
            alpha = 2.0 * math.exp(-zeta * omega * dt) * math.cos(d * dt)
        else:
            # 2·t1·cosh(d·dt) as a sum of exponentials to avoid overflow
            alpha = math.exp(-(zeta * omega - d) * dt) + math.exp(-(zeta * omega + d) * dt)
    except OverflowError:
        return None

    denominator = 1.0 + beta - alpha
    if not (denominator > 0.0 and math.isfinite(denominator)):
        return None

    t2 = dt / denominator
    return (1.0 - beta) * t2, dt * t2


def stable_gains(
    coefficients: DynamicsCoefficients,
    dt: float,
    method: StabilizationMethod = StabilizationMethod.CLAMP,
) -> Tuple[float, float, GainMode]:
    """
    Effective (k1, k2) for one update step.

    Parameters
    ----------
    coefficients : DynamicsCoefficients
        Derived coefficients
    dt : float
        Step length, > 0
    method : StabilizationMethod
        Strategy to apply

    Returns
    -------
    Tuple[float, float, GainMode]
        (k1_effective, k2_effective, mode) where mode is 'exact',
        'clamped' or 'pole_matched'

    Examples
    --------
    >>> from springdyn.filters.coefficients import derive_coefficients
    >>> c = derive_coefficients(10.0, 0.5, 1.0)
    >>> k1, k2, mode = stable_gains(c, dt=5.0)
    >>> mode
    'clamped'
    """
    k1 = coefficients["k1"]
    k2 = coefficients["k2"]

    if method == StabilizationMethod.POLE_MATCHING:
        omega, zeta = natural_frequency_and_damping(coefficients)
        if omega * dt >= zeta:
            gains = pole_matched_gains(coefficients, dt)
            if gains is not None:
                return gains[0], gains[1], "pole_matched"

    k2_stable = clamp_k2(k1, k2, dt)
    mode: GainMode = "clamped" if k2_stable > k2 else "exact"
    return k1, k2_stable, mode


def discrete_update_matrix(k1_effective: float, k2_effective: float, dt: float) -> np.ndarray:
    """
    Homogeneous update matrix of one step acting on [y - x, y'].

    Examples
    --------
    >>> A = discrete_update_matrix(0.0, 1.0, 0.1)
    >>> round(float(np.linalg.det(A)), 12)  # undamped: area preserving
    1.0
    """
    return np.array(
        [
            [1.0, dt],
            [
                -dt / k2_effective,
                1.0 - dt * dt / k2_effective - dt * k1_effective / k2_effective,
            ],
        ]
    )


__all__ = [
    "StabilizationMethod",
    "clamp_k2",
    "pole_matched_gains",
    "stable_gains",
    "discrete_update_matrix",
]
