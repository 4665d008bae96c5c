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
Core Types - Fundamental Building Blocks

Defines the most basic types used throughout the package:
- Multi-backend array types (NumPy, PyTorch, JAX)
- Scalar types for time steps and coefficients
- The vector-space protocol every filtered signal must satisfy

A filtered signal can be a plain Python float, a NumPy array, a PyTorch
tensor, a JAX array, or any user type that supports addition, subtraction
and multiplication by a real scalar (a 2-D point, a 3-D vector, a
quaternion stored as four components, ...).

Usage
-----
>>> from springdyn.types.core import SignalValue, ScalarLike
>>>
>>> def blend(a: SignalValue, b: SignalValue, w: ScalarLike) -> SignalValue:
...     return a + w * (b - a)
"""

from typing import TYPE_CHECKING, Tuple, TypeVar, Union

import numpy as np
from typing_extensions import Protocol, runtime_checkable

if TYPE_CHECKING:
    import jax.numpy as jnp
    import torch


# ============================================================================
# Basic Array Types - Multi-Backend Support
# ============================================================================

ArrayLike = Union[np.ndarray, "torch.Tensor", "jnp.ndarray"]
"""
Array-like type supporting multiple backends.

Can be NumPy array, PyTorch tensor, or JAX array.

Examples
--------
>>> def double(data: ArrayLike) -> ArrayLike:
...     return data * 2
"""

ScalarLike = Union[float, int, np.number]
"""
Real scalar value.

Used for time steps, frequencies, damping ratios and derived coefficients.
Values are converted with ``float()`` before entering the update rule.

Examples
--------
>>> dt: ScalarLike = 1.0 / 60.0
>>> frequency: ScalarLike = 2.5
"""


@runtime_checkable
class VectorSpaceLike(Protocol):
    """
    Minimal arithmetic capability set of a filtered signal.

    A value ``v`` qualifies when ``v + w``, ``v - w`` and ``s * v`` are
    defined for another value ``w`` of the same type and a real scalar
    ``s``. No ordering, hashing or identity is required.

    Examples
    --------
    >>> class Point2:
    ...     def __init__(self, x, y):
    ...         self.x, self.y = x, y
    ...     def __add__(self, o):
    ...         return Point2(self.x + o.x, self.y + o.y)
    ...     def __sub__(self, o):
    ...         return Point2(self.x - o.x, self.y - o.y)
    ...     def __mul__(self, s):
    ...         return Point2(self.x * s, self.y * s)
    ...     __rmul__ = __mul__
    >>> isinstance(Point2(0.0, 1.0), VectorSpaceLike)
    True
    """

    def __add__(self, other): ...

    def __sub__(self, other): ...

    def __rmul__(self, scalar): ...


SignalValue = TypeVar("SignalValue", bound=VectorSpaceLike)
"""
Type variable for the value tracked by a filter.

A filter constructed with a value of some type returns values of that
same type from every update.
"""

GainPair = Tuple[float, float]
"""Effective (k1, k2) pair used for a single integration step."""


__all__ = [
    "ArrayLike",
    "ScalarLike",
    "VectorSpaceLike",
    "SignalValue",
    "GainPair",
]
