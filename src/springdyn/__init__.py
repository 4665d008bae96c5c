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
springdyn - Second-Order Dynamics for Animated Signals

A stateful filter that gives any scalar or vector signal spring-like
motion with tunable frequency, damping and initial response, stable for
any time step.

Usage
-----
>>> import numpy as np
>>> from springdyn import SecondOrderFilter
>>>
>>> camera = SecondOrderFilter(frequency=1.5, damping=0.8, response=0.0,
...                            initial_value=np.zeros(3))
>>> # once per frame
>>> position = camera.update(dt, target=player_position)
"""

from springdyn.analysis import (
    analyze_response,
    analyze_step_stability,
    classify_damping,
    reference_response,
)
from springdyn.filters import (
    InvalidParameter,
    SecondOrderFilter,
    StabilizationMethod,
    critical_timestep,
    derive_coefficients,
    stable_gains,
)
from springdyn.simulation import simulate_response, step_response

__version__ = "0.1.0"

__all__ = [
    "SecondOrderFilter",
    "InvalidParameter",
    "StabilizationMethod",
    "derive_coefficients",
    "critical_timestep",
    "stable_gains",
    "analyze_response",
    "analyze_step_stability",
    "classify_damping",
    "reference_response",
    "simulate_response",
    "step_response",
]
