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
Continuous Reference Solution

Solves the continuous equation the filter discretizes,

    k2·y'' + k1·y' + y = x(t) + k3·x'(t)

with scipy.integrate.solve_ivp, for checking the filter against the exact
dynamics at small time steps and for plotting the ideal response of a
parameter set.

The target must be given as a function of time. This is a verification
tool, not a general ODE solver: the right-hand side is fixed.
"""

import time
import warnings
from typing import Any, Callable, Optional, Union

import numpy as np
from scipy.integrate import solve_ivp

from springdyn.filters.coefficients import coefficients_from_parameters
from springdyn.types.dynamics import DynamicsCoefficients, DynamicsParameters
from springdyn.types.trajectories import ReferenceResult, TimePoints, TimeSpan

TargetFunction = Callable[[float], Any]


def _central_difference(target: TargetFunction, step: float) -> TargetFunction:
    def derivative(t: float) -> np.ndarray:
        forward = np.asarray(target(t + step), dtype=float)
        backward = np.asarray(target(t - step), dtype=float)
        return (forward - backward) / (2.0 * step)

    return derivative


def reference_response(
    parameters: Union[DynamicsParameters, DynamicsCoefficients],
    target: TargetFunction,
    t_span: TimeSpan,
    t_eval: Optional[TimePoints] = None,
    target_velocity: Optional[TargetFunction] = None,
    initial_value: Optional[Any] = None,
    initial_velocity: Optional[Any] = None,
    method: str = "RK45",
    rtol: float = 1e-8,
    atol: float = 1e-10,
    dense_output: bool = False,
    max_step: float = np.inf,
) -> ReferenceResult:
    """
    Solve the continuous second-order dynamics for a target signal.

    Parameters
    ----------
    parameters : DynamicsParameters or DynamicsCoefficients
        Either (frequency, damping, response) or derived (k1, k2, k3)
    target : Callable[[float], ArrayLike]
        Target x(t); scalar or array valued
    t_span : Tuple[float, float]
        (t_start, t_end)
    t_eval : Optional[ArrayLike]
        Times at which to store the solution (solver's own points if None)
    target_velocity : Optional[Callable[[float], ArrayLike]]
        Target velocity x'(t). Estimated by central differences if None.
    initial_value : Optional[ArrayLike]
        y(t_start); defaults to x(t_start)
    initial_velocity : Optional[ArrayLike]
        y'(t_start); defaults to zero
    method : str
        solve_ivp method ('RK45', 'DOP853', 'Radau', ...)
    rtol, atol : float
        Solver tolerances
    dense_output : bool
        Attach the dense solution object as result['sol']
    max_step : float
        Largest solver step. Set it below the width of any sharp feature
        in the target so the solver does not step over it.

    Returns
    -------
    ReferenceResult
        TypedDict with t (T,), y (T, ...), y_dot (T, ...), success,
        message, nfev, integration_time, solver

    Examples
    --------
    >>> params = {"frequency": 1.0, "damping": 0.5, "response": 0.0}
    >>> ref = reference_response(params, target=lambda t: 1.0, t_span=(0.0, 5.0),
    ...                          initial_value=0.0)
    >>> abs(ref["y"][-1] - 1.0) < 0.01
    True
    """
    if "k2" in parameters:
        coefficients = parameters
    else:
        coefficients = coefficients_from_parameters(parameters)
    k1 = coefficients["k1"]
    k2 = coefficients["k2"]
    k3 = coefficients["k3"]

    t0, tf = float(t_span[0]), float(t_span[1])
    x0 = np.asarray(target(t0), dtype=float)
    shape = x0.shape
    n = x0.size

    if target_velocity is None:
        target_velocity = _central_difference(target, 1e-6 * max(1.0, abs(tf - t0)))

    y0 = x0 if initial_value is None else np.asarray(initial_value, dtype=float)
    yd0 = np.zeros(shape) if initial_velocity is None else np.asarray(initial_velocity, dtype=float)
    state0 = np.concatenate(
        [np.broadcast_to(y0, shape).ravel(), np.broadcast_to(yd0, shape).ravel()]
    )

    def ode_func(t: float, state: np.ndarray) -> np.ndarray:
        """Right-hand side in scipy's signature: f(t, [y, y']) → [y', y'']"""
        y = state[:n]
        yd = state[n:]
        x = np.asarray(target(t), dtype=float).ravel()
        xd = np.asarray(target_velocity(t), dtype=float).ravel()
        ydd = (x + k3 * xd - y - k1 * yd) / k2
        return np.concatenate([yd, ydd])

    start_time = time.time()
    sol = solve_ivp(
        fun=ode_func,
        t_span=(t0, tf),
        y0=state0,
        method=method,
        t_eval=t_eval,
        dense_output=dense_output,
        rtol=rtol,
        atol=atol,
        max_step=max_step,
    )
    elapsed = time.time() - start_time

    if not sol.success:
        warnings.warn(f"Reference solution failed: {sol.message}", RuntimeWarning, stacklevel=2)

    # scipy returns (2n, T), we want time-major (T, ...)
    n_times = sol.t.shape[0]
    result: ReferenceResult = {
        "t": sol.t,
        "y": sol.y[:n].T.reshape((n_times,) + shape),
        "y_dot": sol.y[n:].T.reshape((n_times,) + shape),
        "success": bool(sol.success),
        "message": sol.message,
        "nfev": sol.nfev,
        "integration_time": elapsed,
        "solver": f"scipy.{method}",
    }

    if dense_output:
        result["sol"] = sol.sol

    return result


__all__ = ["reference_response"]
