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
Types Module - Type Definitions for springdyn

Central import point for all type definitions.

Module Organization
------------------
- core: Array, scalar and vector-space types
- backends: Backend literals, stabilization and dt policy configuration
- dynamics: Parameters, coefficients, analysis results, statistics
- trajectories: Simulation and reference solution results
- utilities: Type guards and value helpers
"""

from .backends import (
    DEFAULT_DT_POLICY,
    DEFAULT_STABILIZATION,
    VALID_BACKENDS,
    VALID_DT_POLICIES,
    VALID_STABILIZATIONS,
    Backend,
    DtPolicy,
    FilterConfig,
    StabilizationName,
    validate_dt_policy,
    validate_stabilization,
)
from .core import ArrayLike, GainPair, ScalarLike, SignalValue, VectorSpaceLike
from .dynamics import (
    DampingRegime,
    DynamicsCoefficients,
    DynamicsParameters,
    FilterStats,
    GainMode,
    ResponseCharacteristics,
    StepStabilityInfo,
)
from .trajectories import FilterTrajectory, ReferenceResult, TimePoints, TimeSpan
from .utilities import (
    clone_value,
    ensure_numpy,
    get_backend,
    is_finite_value,
    is_jax,
    is_numpy,
    is_torch,
    stack_values,
    zeros_like_value,
)

__all__ = [
    # Core
    "ArrayLike",
    "ScalarLike",
    "VectorSpaceLike",
    "SignalValue",
    "GainPair",
    # Backends and configuration
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
    # Dynamics
    "DynamicsParameters",
    "DynamicsCoefficients",
    "GainMode",
    "DampingRegime",
    "ResponseCharacteristics",
    "StepStabilityInfo",
    "FilterStats",
    # Trajectories
    "TimePoints",
    "TimeSpan",
    "FilterTrajectory",
    "ReferenceResult",
    # Utilities
    "is_numpy",
    "is_torch",
    "is_jax",
    "get_backend",
    "clone_value",
    "zeros_like_value",
    "is_finite_value",
    "ensure_numpy",
    "stack_values",
]
