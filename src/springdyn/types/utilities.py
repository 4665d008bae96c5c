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
Type Utilities - Backend Guards and Value Helpers

Helpers used by the filter and the simulation tools to handle values of
any backend without importing optional libraries eagerly:
- Type guards (is_numpy, is_torch, is_jax)
- Backend detection (get_backend)
- Independent copies (clone_value)
- Zero of a value's type (zeros_like_value)
- Finiteness checks and trajectory stacking
"""

import copy
import math
import numbers
from typing import Any, List, Sequence

import numpy as np

from .backends import Backend
from .core import ArrayLike, VectorSpaceLike

# ============================================================================
# Type Guards
# ============================================================================


def is_numpy(x: Any) -> bool:
    """
    Check if value is a NumPy array or NumPy scalar.

    Examples
    --------
    >>> is_numpy(np.array([1.0, 2.0]))
    True
    >>> is_numpy(np.float64(1.0))
    True
    >>> is_numpy(1.0)
    False
    """
    return isinstance(x, (np.ndarray, np.generic))


def is_torch(x: Any) -> bool:
    """
    Check if value is a PyTorch tensor.

    Returns False when PyTorch is not installed.
    """
    try:
        import torch

        return isinstance(x, torch.Tensor)
    except ImportError:
        return False


def is_jax(x: Any) -> bool:
    """
    Check if value is a JAX array.

    Returns False when JAX is not installed.
    """
    try:
        import jax.numpy as jnp

        return isinstance(x, jnp.ndarray)
    except ImportError:
        return False


def get_backend(x: Any) -> Backend:
    """
    Detect backend from value type.

    Parameters
    ----------
    x : Any
        Value to check

    Returns
    -------
    Backend
        'numpy', 'torch', 'jax', or 'python' for real numbers and
        user-defined vector types

    Raises
    ------
    TypeError
        If the value supports neither real arithmetic nor the
        VectorSpaceLike protocol

    Examples
    --------
    >>> get_backend(np.zeros(3))
    'numpy'
    >>> get_backend(0.5)
    'python'
    >>> get_backend("abc")  # TypeError
    """
    if is_numpy(x):
        return "numpy"
    elif is_torch(x):
        return "torch"
    elif is_jax(x):
        return "jax"
    elif isinstance(x, numbers.Real) or isinstance(x, VectorSpaceLike):
        return "python"
    else:
        raise TypeError(
            f"Unsupported value type {type(x)}. Expected a real number, an array, "
            f"or a type supporting +, - and multiplication by a scalar"
        )


# ============================================================================
# Value Helpers
# ============================================================================


def clone_value(x: Any) -> Any:
    """
    Return an independent copy of a value.

    NumPy arrays are copied and torch tensors cloned so that later
    in-place changes by the caller cannot leak into filter state. JAX
    arrays and Python numbers are immutable and returned as-is.
    User-defined types fall back to ``copy.deepcopy``.

    Examples
    --------
    >>> a = np.array([1.0, 2.0])
    >>> b = clone_value(a)
    >>> b[0] = 5.0
    >>> a[0]
    1.0
    """
    if isinstance(x, np.ndarray):
        return x.copy()
    if is_numpy(x) or isinstance(x, numbers.Number):
        return x
    if is_torch(x):
        return x.detach().clone()
    if is_jax(x):
        return x
    return copy.deepcopy(x)


def zeros_like_value(x: Any) -> Any:
    """
    Zero element of the vector space a value belongs to.

    Computed as ``0.0 * x`` so that only scalar multiplication is needed.
    """
    return 0.0 * x


def is_finite_value(x: Any) -> bool:
    """
    Check that every component of a value is finite.

    User-defined types that cannot be converted to an array are assumed
    finite.
    """
    if isinstance(x, numbers.Real):
        return math.isfinite(x)
    if is_torch(x):
        import torch

        return bool(torch.isfinite(x).all())
    try:
        return bool(np.all(np.isfinite(np.asarray(x, dtype=float))))
    except (TypeError, ValueError):
        return True


def ensure_numpy(x: ArrayLike) -> np.ndarray:
    """
    Convert to NumPy array regardless of backend.

    Examples
    --------
    >>> import torch
    >>> ensure_numpy(torch.tensor([1.0, 2.0]))
    array([1., 2.])
    """
    if is_torch(x):
        return x.detach().cpu().numpy()
    return np.asarray(x)


def stack_values(values: Sequence[Any], backend: Backend) -> Any:
    """
    Stack a sequence of values along a new leading (time) axis.

    Parameters
    ----------
    values : Sequence
        Values of one backend
    backend : Backend
        Backend of the values

    Returns
    -------
    ArrayLike or list
        np.ndarray for 'numpy' and real 'python' values, torch.Tensor for
        'torch', jax array for 'jax'. User-defined types that are not real
        numbers are returned as a list.
    """
    if backend == "numpy":
        return np.stack([np.asarray(v) for v in values])
    elif backend == "torch":
        import torch

        return torch.stack(list(values))
    elif backend == "jax":
        import jax.numpy as jnp

        return jnp.stack(list(values))
    elif all(isinstance(v, numbers.Real) for v in values):
        return np.asarray(values, dtype=float)
    else:
        items: List[Any] = list(values)
        return items


__all__ = [
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
