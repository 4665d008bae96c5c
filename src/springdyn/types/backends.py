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
Backend and Configuration Types

Defines types related to:
- Computational backends (NumPy, PyTorch, JAX, plain Python)
- Stabilization strategies for the filter update
- Policies for invalid (negative) time steps
- Filter configuration dictionaries

Usage
-----
>>> from springdyn.types.backends import FilterConfig, validate_stabilization
>>>
>>> config: FilterConfig = {"stabilization": "pole_matching", "dt_policy": "clamp"}
>>> validate_stabilization(config["stabilization"])
'pole_matching'
"""

from typing import Literal

from typing_extensions import TypedDict

# ============================================================================
# Backend Types
# ============================================================================

Backend = Literal["numpy", "torch", "jax", "python"]
"""
Backend identifier for a filtered value.

Valid values:
- 'numpy': NumPy arrays and NumPy scalars
- 'torch': PyTorch tensors
- 'jax': JAX arrays
- 'python': Python floats/ints and user-defined vector types
"""

VALID_BACKENDS = ("numpy", "torch", "jax", "python")


# ============================================================================
# Filter Configuration Types
# ============================================================================

StabilizationName = Literal["clamp", "pole_matching"]
"""
Stabilization strategy for one update step.

- 'clamp': Raise k2 to max(k2, dt²/2 + dt·k1/2, dt·k1). Unconditionally
  stable for damping >= 0, at the cost of some lag at large dt.
- 'pole_matching': Same clamp while the step is short compared to the
  system's response; for longer steps choose gains whose discrete poles
  equal the exact exponentials of the continuous poles.
"""

DtPolicy = Literal["raise", "clamp"]
"""
What to do with a negative time step.

- 'raise': Reject it with InvalidParameter.
- 'clamp': Treat it as dt = 0 (no-op) and emit a RuntimeWarning.
"""

VALID_STABILIZATIONS = ("clamp", "pole_matching")
VALID_DT_POLICIES = ("raise", "clamp")

DEFAULT_STABILIZATION: StabilizationName = "clamp"
DEFAULT_DT_POLICY: DtPolicy = "raise"


class FilterConfig(TypedDict, total=False):
    """
    Optional filter configuration.

    Attributes
    ----------
    stabilization : StabilizationName
        Stabilization strategy (default 'clamp')
    dt_policy : DtPolicy
        Negative time step handling (default 'raise')

    Examples
    --------
    >>> from springdyn.filters import SecondOrderFilter
    >>> config: FilterConfig = {"dt_policy": "clamp"}
    >>> f = SecondOrderFilter(2.0, 0.7, 1.0, 0.0, **config)
    """

    stabilization: StabilizationName
    dt_policy: DtPolicy


def validate_stabilization(name: str) -> StabilizationName:
    """
    Validate a stabilization strategy name.

    Parameters
    ----------
    name : str
        Strategy name to validate

    Returns
    -------
    StabilizationName
        Validated name

    Raises
    ------
    ValueError
        If the name is not one of VALID_STABILIZATIONS

    Examples
    --------
    >>> validate_stabilization('clamp')
    'clamp'
    >>> validate_stabilization('substep')
    Traceback (most recent call last):
        ...
    ValueError: Invalid stabilization 'substep'. Choose from: ('clamp', 'pole_matching')
    """
    if name not in VALID_STABILIZATIONS:
        raise ValueError(
            f"Invalid stabilization '{name}'. " f"Choose from: {VALID_STABILIZATIONS}"
        )
    return name


def validate_dt_policy(policy: str) -> DtPolicy:
    """
    Validate a negative time step policy.

    Raises
    ------
    ValueError
        If the policy is not one of VALID_DT_POLICIES
    """
    if policy not in VALID_DT_POLICIES:
        raise ValueError(f"Invalid dt_policy '{policy}'. " f"Choose from: {VALID_DT_POLICIES}")
    return policy


__all__ = [
    "Backend",
    "VALID_BACKENDS",
    "StabilizationName",
    "DtPolicy",
    "VALID_STABILIZATIONS",
    "VALID_DT_POLICIES",
    "DEFAULT_STABILIZATION",
    "DEFAULT_DT_POLICY",
    "FilterConfig",
    "validate_stabilization",
    "validate_dt_policy",
]
