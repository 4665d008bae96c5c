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
Second-Order Filter - Spring-Like Smoothing of a Moving Target

Adds second-order dynamics to any scalar or vector signal. The filter
tracks a raw, possibly discontinuous target x and produces a smoothly
animated value y governed by

    k2·y'' + k1·y' + y = x + k3·x'

The target may be redirected at any time; the filter continues from its
current value and velocity. One instance tracks one channel. Use one
instance per independent channel.

Parameters
----------
- frequency f: how fast the value responds (cycles per unit time)
- damping ζ: 0 oscillates forever, 0 < ζ < 1 decaying oscillation,
  ζ >= 1 no oscillation
- response r: 1 responds immediately, r > 1 overshoots at the onset of
  motion, r < 0 anticipates, r = 0 accelerates from rest

Update Rule
-----------
Each call to update() performs one semi-implicit Euler step

    y  ← y + dt·y'
    y' ← y' + dt·(x + k3·x' - y - k1·y') / k2_stable

with k2_stable from springdyn.filters.stabilization, which keeps the step
stable for any dt > 0 without sub-stepping.

Thread Safety
-------------
Not internally synchronized. Update a given instance from one thread at a
time.
"""

import copy
import math
import warnings
from typing import Generic, Optional

from springdyn.filters.coefficients import derive_coefficients
from springdyn.filters.stabilization import StabilizationMethod, stable_gains
from springdyn.filters.validation import (
    InvalidParameter,
    validate_filter_options,
    validate_timestep,
)
from springdyn.types.backends import (
    DEFAULT_DT_POLICY,
    DEFAULT_STABILIZATION,
    Backend,
    DtPolicy,
)
from springdyn.types.core import ScalarLike, SignalValue
from springdyn.types.dynamics import DynamicsCoefficients, DynamicsParameters, FilterStats
from springdyn.types.utilities import clone_value, get_backend, zeros_like_value


class SecondOrderFilter(Generic[SignalValue]):
    """
    Stateful second-order dynamics filter.

    Works with Python floats, NumPy arrays, PyTorch tensors, JAX arrays and
    any user type supporting +, - and multiplication by a real scalar.

    Attributes
    ----------
    stabilization : StabilizationMethod
        Strategy used to stabilize each step
    dt_policy : DtPolicy
        Handling of negative time steps ('raise' or 'clamp')

    Examples
    --------
    >>> import numpy as np
    >>> from springdyn.filters import SecondOrderFilter
    >>>
    >>> # Scalar
    >>> f = SecondOrderFilter(frequency=1.0, damping=0.5, response=2.0, initial_value=0.0)
    >>> for _ in range(60):
    ...     y = f.update(1.0 / 60.0, 1.0)
    >>>
    >>> # 3-D position with a known target velocity
    >>> f = SecondOrderFilter(2.5, 1.0, 1.0, initial_value=np.zeros(3))
    >>> y = f.update(0.016, target=np.array([1.0, 0.0, 0.0]), target_velocity=np.zeros(3))
    >>>
    >>> # Retune a live filter without resetting its trajectory
    >>> f.set_parameters(frequency=4.0)
    """

    def __init__(
        self,
        frequency: ScalarLike,
        damping: ScalarLike,
        response: ScalarLike,
        initial_value: SignalValue,
        stabilization=DEFAULT_STABILIZATION,
        dt_policy: DtPolicy = DEFAULT_DT_POLICY,
    ):
        """
        Initialize filter at rest at initial_value.

        Parameters
        ----------
        frequency : float
            Natural frequency f > 0
        damping : float
            Damping ratio ζ
        response : float
            Initial response r
        initial_value : SignalValue
            Seeds both the previous target and the filtered value; the
            filtered velocity starts at zero
        stabilization : str or StabilizationMethod
            'clamp' (default) or 'pole_matching'
        dt_policy : str
            'raise' (default) rejects negative dt, 'clamp' treats it as 0

        Raises
        ------
        InvalidParameter
            If frequency <= 0, a parameter is not finite, or an option is
            not recognised
        TypeError
            If initial_value does not support the required arithmetic
        """
        stabilization_name, self.dt_policy = validate_filter_options(stabilization, dt_policy)
        self.stabilization = StabilizationMethod(stabilization_name)

        self._coefficients: DynamicsCoefficients = derive_coefficients(
            frequency, damping, response
        )
        self._parameters: DynamicsParameters = {
            "frequency": float(frequency),
            "damping": float(damping),
            "response": float(response),
        }

        self._backend: Backend = get_backend(initial_value)
        self._x_prev = clone_value(initial_value)
        self._y = clone_value(initial_value)
        self._y_dot = zeros_like_value(initial_value)

        self._stats: FilterStats = self._empty_stats()

    @classmethod
    def from_parameters(
        cls, parameters: DynamicsParameters, initial_value: SignalValue, **options
    ) -> "SecondOrderFilter[SignalValue]":
        """
        Construct from a DynamicsParameters dictionary.

        Examples
        --------
        >>> import numpy as np
        >>> params = {"frequency": 3.0, "damping": 0.5, "response": 2.0}
        >>> f = SecondOrderFilter.from_parameters(params, np.zeros(2), dt_policy="clamp")
        """
        return cls(
            parameters["frequency"],
            parameters["damping"],
            parameters["response"],
            initial_value,
            **options,
        )

    # ========================================================================
    # Properties
    # ========================================================================

    @property
    def value(self) -> SignalValue:
        """Copy of the current filtered value y"""
        return clone_value(self._y)

    @property
    def velocity(self) -> SignalValue:
        """Copy of the current filtered velocity y'"""
        return clone_value(self._y_dot)

    @property
    def previous_target(self) -> SignalValue:
        """Copy of the last target used for finite-difference velocity estimation"""
        return clone_value(self._x_prev)

    @property
    def coefficients(self) -> DynamicsCoefficients:
        """Copy of the derived coefficients k1, k2, k3"""
        return dict(self._coefficients)

    @property
    def parameters(self) -> DynamicsParameters:
        """Copy of the parameters the coefficients were derived from"""
        return dict(self._parameters)

    @property
    def backend(self) -> Backend:
        """Backend of the tracked value"""
        return self._backend

    # ========================================================================
    # Update
    # ========================================================================

    def update(
        self,
        dt: ScalarLike,
        target: SignalValue,
        target_velocity: Optional[SignalValue] = None,
    ) -> SignalValue:
        """
        Advance the filter by dt toward target.

        Parameters
        ----------
        dt : float
            Elapsed time since the previous update. dt == 0, or a dt so
            small that 1/dt overflows, is a no-op.
        target : SignalValue
            Current target value x
        target_velocity : Optional[SignalValue]
            Known target velocity x'. If None it is estimated as
            (x - x_prev) / dt and x is remembered for the next call.

        Returns
        -------
        SignalValue
            Copy of the updated filtered value y

        Raises
        ------
        InvalidParameter
            If dt < 0 under dt_policy 'raise', or dt is not finite

        Notes
        -----
        If evaluating the step raises (for example on mismatched array
        shapes), the filter state is left unchanged.

        Examples
        --------
        >>> f = SecondOrderFilter(1.0, 1.0, 0.0, initial_value=0.0)
        >>> f.update(0.0, 5.0)  # no-op
        0.0
        >>> y = f.update(0.1, 5.0)
        """
        dt = validate_timestep(dt)
        if dt < 0.0:
            if self.dt_policy == "raise":
                raise InvalidParameter(f"dt must be non-negative, got {dt}")
            warnings.warn(
                f"Negative time step dt={dt} treated as dt=0 (dt_policy='clamp')",
                RuntimeWarning,
                stacklevel=2,
            )
            dt = 0.0

        # A step too short to invert (subnormal dt) carries no elapsed time
        if dt == 0.0 or not math.isfinite(1.0 / dt):
            self._stats["skipped_steps"] += 1
            return clone_value(self._y)

        estimated = target_velocity is None
        if estimated:
            target_velocity = (1.0 / dt) * (target - self._x_prev)
            x_prev = clone_value(target)
        else:
            x_prev = self._x_prev

        k1, k2, mode = stable_gains(self._coefficients, dt, self.stabilization)
        k3 = self._coefficients["k3"]

        # Position first, with the old velocity. State is committed only
        # once both expressions have been evaluated.
        y = self._y + dt * self._y_dot
        y_dot = self._y_dot + (dt / k2) * (target + k3 * target_velocity - y - k1 * self._y_dot)

        self._x_prev = x_prev
        self._y = y
        self._y_dot = y_dot

        if estimated:
            self._stats["estimated_velocity_steps"] += 1
        self._stats["total_steps"] += 1
        self._stats["total_time"] += dt
        if mode == "clamped":
            self._stats["clamped_steps"] += 1
        elif mode == "pole_matched":
            self._stats["pole_matched_steps"] += 1

        return clone_value(self._y)

    # ========================================================================
    # Re-derivation and Reset
    # ========================================================================

    def set_parameters(
        self,
        frequency: Optional[ScalarLike] = None,
        damping: Optional[ScalarLike] = None,
        response: Optional[ScalarLike] = None,
    ) -> DynamicsCoefficients:
        """
        Re-derive coefficients on a live filter.

        Parameters not given keep their current values. The filtered
        value, velocity and previous target are preserved, so the
        trajectory stays continuous and only its future dynamics change.

        Returns
        -------
        DynamicsCoefficients
            The new coefficients

        Raises
        ------
        InvalidParameter
            If the merged parameters are invalid. The filter is unchanged.

        Examples
        --------
        >>> f = SecondOrderFilter(1.0, 0.5, 1.0, initial_value=0.0)
        >>> _ = f.update(0.1, 1.0)
        >>> y_before = f.value
        >>> _ = f.set_parameters(damping=1.0)
        >>> f.value == y_before
        True
        """
        merged: DynamicsParameters = {
            "frequency": self._parameters["frequency"] if frequency is None else frequency,
            "damping": self._parameters["damping"] if damping is None else damping,
            "response": self._parameters["response"] if response is None else response,
        }
        coefficients = derive_coefficients(
            merged["frequency"], merged["damping"], merged["response"]
        )

        self._coefficients = coefficients
        self._parameters = {key: float(value) for key, value in merged.items()}
        return dict(coefficients)

    def reset(self, value: SignalValue) -> None:
        """
        Place the filter at rest at value.

        Both the previous target and the filtered value are set to value and
        the velocity to zero. Coefficients and statistics are kept.
        """
        self._backend = get_backend(value)
        self._x_prev = clone_value(value)
        self._y = clone_value(value)
        self._y_dot = zeros_like_value(value)

    # ========================================================================
    # Copying
    # ========================================================================

    def copy(self) -> "SecondOrderFilter[SignalValue]":
        """
        Independent copy with identical state.

        Updating the copy never affects the original and vice versa.
        """
        return copy.copy(self)

    def __copy__(self) -> "SecondOrderFilter[SignalValue]":
        new = self.__class__.__new__(self.__class__)
        new.__dict__.update(self.__dict__)
        new._coefficients = dict(self._coefficients)
        new._parameters = dict(self._parameters)
        new._stats = dict(self._stats)
        new._x_prev = clone_value(self._x_prev)
        new._y = clone_value(self._y)
        new._y_dot = clone_value(self._y_dot)
        return new

    def __deepcopy__(self, memo) -> "SecondOrderFilter[SignalValue]":
        return self.__copy__()

    # ========================================================================
    # Statistics
    # ========================================================================

    @staticmethod
    def _empty_stats() -> FilterStats:
        return {
            "total_steps": 0,
            "skipped_steps": 0,
            "clamped_steps": 0,
            "pole_matched_steps": 0,
            "estimated_velocity_steps": 0,
            "total_time": 0.0,
        }

    def get_stats(self) -> FilterStats:
        """
        Get update statistics.

        Examples
        --------
        >>> f = SecondOrderFilter(10.0, 0.5, 1.0, initial_value=0.0)
        >>> _ = f.update(5.0, 1.0)
        >>> f.get_stats()["clamped_steps"]
        1
        """
        return dict(self._stats)

    def reset_stats(self) -> None:
        """Reset update statistics to zero."""
        self._stats = self._empty_stats()

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"frequency={self._parameters['frequency']}, "
            f"damping={self._parameters['damping']}, "
            f"response={self._parameters['response']}, "
            f"stabilization='{self.stabilization.value}', "
            f"dt_policy='{self.dt_policy}')"
        )


__all__ = ["SecondOrderFilter"]
