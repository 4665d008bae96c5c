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
Response Simulator

Drives a SecondOrderFilter over a whole target sequence and collects the
trajectory, the way a host loop would call it once per tick. Useful for
tuning parameters offline and for tests.

Results are FilterTrajectory TypedDicts with time-major arrays in the
filter's backend.
"""

import math
import time
from typing import Any, Optional, Sequence, Union

import numpy as np

from springdyn.filters.second_order_filter import SecondOrderFilter
from springdyn.types.backends import DEFAULT_STABILIZATION
from springdyn.types.core import ScalarLike
from springdyn.types.dynamics import DynamicsParameters
from springdyn.types.trajectories import FilterTrajectory, TimePoints
from springdyn.types.utilities import is_finite_value, stack_values


def _time_steps(
    n_steps: int,
    dt: Optional[Union[ScalarLike, Sequence[ScalarLike]]],
    times: Optional[TimePoints],
) -> np.ndarray:
    if (dt is None) == (times is None):
        raise ValueError("Specify exactly one of dt or times")

    if times is not None:
        t_points = np.asarray(times, dtype=float)
        if t_points.shape != (n_steps + 1,):
            raise ValueError(
                f"times must have shape ({n_steps + 1},) for {n_steps} targets, "
                f"got {t_points.shape}"
            )
        return np.diff(t_points)

    steps = np.asarray(dt, dtype=float)
    if steps.ndim == 0:
        return np.full(n_steps, float(steps))
    if steps.shape != (n_steps,):
        raise ValueError(f"dt must be a scalar or have shape ({n_steps},), got {steps.shape}")
    return steps


def simulate_response(
    filt: SecondOrderFilter,
    targets: Sequence[Any],
    dt: Optional[Union[ScalarLike, Sequence[ScalarLike]]] = None,
    times: Optional[TimePoints] = None,
    target_velocities: Optional[Sequence[Any]] = None,
) -> FilterTrajectory:
    """
    Feed a target sequence through a filter.

    The filter is advanced in place; pass ``filt.copy()`` to keep the
    original untouched.

    Parameters
    ----------
    filt : SecondOrderFilter
        Filter to drive
    targets : Sequence
        T targets, one per update (iterated along the first axis)
    dt : float or Sequence[float], optional
        Fixed step, or T individual steps
    times : ArrayLike, optional
        T+1 time points; steps are their differences. Exclusive with dt.
    target_velocities : Sequence, optional
        T known target velocities. Estimated by the filter if None.

    Returns
    -------
    FilterTrajectory
        TypedDict containing:
        - t: Time points (T+1,)
        - y: Filtered values (T+1, ...), y[0] before the first update
        - y_dot: Filtered velocities (T+1, ...)
        - targets: Targets fed (T, ...)
        - success: All values stayed finite
        - message, nsteps, simulation_time, solver, stabilization

    Raises
    ------
    ValueError
        If neither or both of dt and times are given, or lengths disagree
    InvalidParameter
        If a step is negative under the filter's 'raise' dt policy

    Examples
    --------
    >>> f = SecondOrderFilter(1.0, 0.5, 2.0, initial_value=0.0)
    >>> result = simulate_response(f, targets=np.ones(300), dt=0.016)
    >>> result["y"].shape
    (301,)
    """
    target_list = list(targets)
    n_steps = len(target_list)
    steps = _time_steps(n_steps, dt, times)

    if target_velocities is not None:
        velocity_list = list(target_velocities)
        if len(velocity_list) != n_steps:
            raise ValueError(
                f"target_velocities must have {n_steps} entries, got {len(velocity_list)}"
            )
    else:
        velocity_list = [None] * n_steps

    start_time = time.time()

    values = [filt.value]
    velocities = [filt.velocity]
    success = True

    for x, v, step in zip(target_list, velocity_list, steps):
        y = filt.update(float(step), x, v)
        values.append(y)
        velocities.append(filt.velocity)
        if success and not is_finite_value(y):
            success = False

    elapsed = time.time() - start_time

    if times is not None:
        t_points = np.asarray(times, dtype=float)
    else:
        t_points = np.concatenate([[0.0], np.cumsum(steps)])

    backend = filt.backend
    result: FilterTrajectory = {
        "t": t_points,
        "y": stack_values(values, backend),
        "y_dot": stack_values(velocities, backend),
        "targets": stack_values(target_list, backend) if target_list else target_list,
        "success": success,
        "message": "Simulation completed" if success else "Non-finite value encountered",
        "nsteps": n_steps,
        "simulation_time": elapsed,
        "solver": "Semi-Implicit Euler",
        "stabilization": filt.stabilization.value,
    }

    return result


def step_response(
    parameters: DynamicsParameters,
    step: Any = 1.0,
    initial_value: Any = 0.0,
    duration: float = 5.0,
    dt: float = 1.0 / 60.0,
    stabilization=DEFAULT_STABILIZATION,
) -> FilterTrajectory:
    """
    Response of a fresh filter to a target that jumps to ``step`` at t = 0.

    Parameters
    ----------
    parameters : DynamicsParameters
        Filter parameters
    step : SignalValue
        Target held for the whole run
    initial_value : SignalValue
        Value the filter starts at rest from
    duration : float
        Simulated time span, > 0
    dt : float
        Fixed update step, > 0
    stabilization : str or StabilizationMethod
        Stabilization strategy

    Examples
    --------
    >>> params = {"frequency": 1.0, "damping": 0.5, "response": 2.0}
    >>> result = step_response(params, duration=5.0, dt=0.016)
    >>> float(result["y"].max()) > 1.0  # overshoot
    True
    """
    if not (duration > 0.0 and dt > 0.0):
        raise ValueError(f"duration and dt must be positive, got duration={duration}, dt={dt}")

    filt = SecondOrderFilter.from_parameters(
        parameters, initial_value, stabilization=stabilization
    )
    n_steps = int(math.ceil(duration / dt - 1e-9))
    return simulate_response(filt, [step] * n_steps, dt=dt)


__all__ = ["simulate_response", "step_response"]
