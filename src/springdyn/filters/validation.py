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
Parameter Validation

Precondition checks shared by coefficient derivation, filter construction
and the update step. Every violation raises InvalidParameter, a ValueError,
so callers that already handle ValueError keep working.
"""

import math
from typing import Tuple

from springdyn.types.backends import (
    DtPolicy,
    StabilizationName,
    validate_dt_policy,
    validate_stabilization,
)
from springdyn.types.core import ScalarLike


class InvalidParameter(ValueError):
    """
    Raised when a filter parameter or time step violates its precondition.

    Examples
    --------
    >>> validate_frequency(0.0)
    Traceback (most recent call last):
        ...
    springdyn.filters.validation.InvalidParameter: frequency must be positive, got 0.0
    """


def _as_real(value: ScalarLike, name: str) -> float:
    try:
        result = float(value)
    except (TypeError, ValueError) as e:
        raise InvalidParameter(f"{name} must be a real number, got {value!r}") from e
    if not math.isfinite(result):
        raise InvalidParameter(f"{name} must be finite, got {result}")
    return result


def validate_frequency(frequency: ScalarLike) -> float:
    """Return frequency as float, rejecting f <= 0 and non-finite values."""
    f = _as_real(frequency, "frequency")
    if f <= 0.0:
        raise InvalidParameter(f"frequency must be positive, got {f}")
    return f


def validate_damping(damping: ScalarLike) -> float:
    """Any finite damping ratio is accepted, including zero and negative values."""
    return _as_real(damping, "damping")


def validate_response(response: ScalarLike) -> float:
    """Any finite initial response is accepted."""
    return _as_real(response, "response")


def validate_timestep(dt: ScalarLike) -> float:
    """
    Return dt as float.

    Negative values are returned unchanged; the caller applies its
    dt policy to them.

    Raises
    ------
    InvalidParameter
        If dt is not a finite real number
    """
    return _as_real(dt, "dt")


def validate_filter_options(stabilization, dt_policy: str) -> Tuple[StabilizationName, DtPolicy]:
    """
    Validate the configuration options of a filter.

    ``stabilization`` may be a name or a StabilizationMethod member.

    Raises
    ------
    InvalidParameter
        If either option is not recognised
    """
    name = getattr(stabilization, "value", stabilization)
    try:
        return validate_stabilization(name), validate_dt_policy(dt_policy)
    except ValueError as e:
        raise InvalidParameter(str(e)) from e


__all__ = [
    "InvalidParameter",
    "validate_frequency",
    "validate_damping",
    "validate_response",
    "validate_timestep",
    "validate_filter_options",
]
