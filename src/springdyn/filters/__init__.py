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
Filters Module

- SecondOrderFilter: stateful second-order dynamics filter
- derive_coefficients: (f, ζ, r) → (k1, k2, k3)
- StabilizationMethod and stable_gains: per-step stabilization
- InvalidParameter: precondition violations
"""

from .coefficients import (
    coefficients_from_parameters,
    critical_timestep,
    derive_coefficients,
    natural_frequency_and_damping,
)
from .second_order_filter import SecondOrderFilter
from .stabilization import (
    StabilizationMethod,
    clamp_k2,
    discrete_update_matrix,
    pole_matched_gains,
    stable_gains,
)
from .validation import (
    InvalidParameter,
    validate_damping,
    validate_filter_options,
    validate_frequency,
    validate_response,
    validate_timestep,
)

__all__ = [
    "SecondOrderFilter",
    "derive_coefficients",
    "coefficients_from_parameters",
    "natural_frequency_and_damping",
    "critical_timestep",
    "StabilizationMethod",
    "clamp_k2",
    "pole_matched_gains",
    "stable_gains",
    "discrete_update_matrix",
    "InvalidParameter",
    "validate_frequency",
    "validate_damping",
    "validate_response",
    "validate_timestep",
    "validate_filter_options",
]
