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
Trajectory and Result Types

Time series produced by driving a filter over a target sequence, and by
solving the underlying continuous equation for comparison.

Shape Convention
----------------
Time-major ordering throughout:
- t: (T,) time points, including the initial time
- y: (T, ...) filtered value at each time point, trailing shape equal to
  the shape of one value (empty for scalars)
"""

from typing import Any, Tuple

from typing_extensions import TypedDict

from .backends import StabilizationName
from .core import ArrayLike

TimePoints = ArrayLike
"""
Monotonically non-decreasing time points (T,).

Examples
--------
>>> import numpy as np
>>> t: TimePoints = np.linspace(0.0, 5.0, 301)
"""

TimeSpan = Tuple[float, float]
"""(t_start, t_end) interval."""


class FilterTrajectory(TypedDict, total=False):
    """
    Result of driving a filter over a target sequence.

    Attributes
    ----------
    t : np.ndarray
        Time points (T+1,), starting at t = 0
    y : ArrayLike
        Filtered values (T+1, ...), y[0] is the value before the first step
    y_dot : ArrayLike
        Filtered velocities (T+1, ...)
    targets : ArrayLike
        Targets fed at each step (T, ...)
    success : bool
        True if every value stayed finite
    message : str
        Status message
    nsteps : int
        Number of update calls
    simulation_time : float
        Wall-clock time in seconds
    solver : str
        Name of the update scheme
    stabilization : StabilizationName
        Stabilization strategy of the driven filter

    Examples
    --------
    >>> import numpy as np
    >>> from springdyn.filters import SecondOrderFilter
    >>> from springdyn.simulation import simulate_response
    >>>
    >>> f = SecondOrderFilter(2.0, 1.0, 1.0, initial_value=0.0)
    >>> result = simulate_response(f, targets=np.ones(300), dt=1 / 60)
    >>> result["y"].shape
    (301,)
    """

    t: ArrayLike
    y: ArrayLike
    y_dot: ArrayLike
    targets: ArrayLike
    success: bool
    message: str
    nsteps: int
    simulation_time: float
    solver: str
    stabilization: StabilizationName


class ReferenceResult(TypedDict, total=False):
    """
    Continuous reference solution of k2·y'' + k1·y' + y = x + k3·x'.

    Attributes
    ----------
    t : np.ndarray
        Time points (T,)
    y : np.ndarray
        Value trajectory (T, ...) with the trailing shape of the target
    y_dot : np.ndarray
        Velocity trajectory (T, ...)
    success : bool
        Whether the solver succeeded
    message : str
        Solver status message
    nfev : int
        Number of right-hand side evaluations
    integration_time : float
        Wall-clock time in seconds
    solver : str
        Name of the SciPy method
    sol : Any
        Dense output object (if requested)
    """

    t: ArrayLike
    y: ArrayLike
    y_dot: ArrayLike
    success: bool
    message: str
    nfev: int
    integration_time: float
    solver: str
    sol: Any


__all__ = [
    "TimePoints",
    "TimeSpan",
    "FilterTrajectory",
    "ReferenceResult",
]
