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
Unit tests for SecondOrderFilter

Tests cover:
1. Construction, coefficients and parameter validation
2. Single update steps against the update rule
3. Target velocity estimation vs. explicit target velocity
4. dt == 0 no-op and negative dt policies
5. Stability over a parameter grid, including dt up to 10x the period
6. Convergence, fixed point and determinism
7. Overshoot, undamped and large-dt scenarios
8. Vector, user-defined and optional backend values
9. Re-derivation, reset, copying and statistics
"""

import copy
import math
import warnings

import numpy as np
import pytest

from springdyn.filters.second_order_filter import SecondOrderFilter
from springdyn.filters.stabilization import StabilizationMethod
from springdyn.filters.validation import InvalidParameter

# Conditional imports
torch_available = True
try:
    import torch
except ImportError:
    torch_available = False

jax_available = True
try:
    import jax.numpy as jnp
except ImportError:
    jax_available = False


# ============================================================================
# Helpers
# ============================================================================


class Vec2:
    """Minimal user-defined vector type (no NumPy)"""

    def __init__(self, x, y):
        self.x = x
        self.y = y

    def __add__(self, other):
        return Vec2(self.x + other.x, self.y + other.y)

    def __sub__(self, other):
        return Vec2(self.x - other.x, self.y - other.y)

    def __mul__(self, s):
        return Vec2(self.x * s, self.y * s)

    __rmul__ = __mul__


def run_constant_target(filt, target, dt, n_steps):
    """Update n_steps times toward a fixed target, return outputs as array"""
    return np.array([filt.update(dt, target) for _ in range(n_steps)])


# ============================================================================
# Test Class 1: Construction
# ============================================================================


class TestConstruction:
    """Test filter construction and parameter validation"""

    def test_initial_state(self):
        """Value and previous target seeded by initial value, velocity zero"""
        f = SecondOrderFilter(1.0, 0.5, 2.0, initial_value=3.0)

        assert f.value == 3.0
        assert f.previous_target == 3.0
        assert f.velocity == 0.0
        assert f.backend == "python"

    def test_coefficients(self):
        """k1 = ζ/(πf), k2 = 1/(2πf)², k3 = rζ/(2πf)"""
        f = SecondOrderFilter(2.0, 0.7, 1.5, initial_value=0.0)
        c = f.coefficients

        assert np.isclose(c["k1"], 0.7 / (math.pi * 2.0))
        assert np.isclose(c["k2"], 1.0 / (2.0 * math.pi * 2.0) ** 2)
        assert np.isclose(c["k3"], 1.5 * 0.7 / (2.0 * math.pi * 2.0))
        assert c["k2"] > 0

    def test_parameters_retained(self):
        f = SecondOrderFilter(2.0, 0.7, 1.5, initial_value=0.0)
        assert f.parameters == {"frequency": 2.0, "damping": 0.7, "response": 1.5}

    @pytest.mark.parametrize("frequency", [0.0, -1.0, float("nan"), float("inf")])
    def test_invalid_frequency_raises(self, frequency):
        """f <= 0 and non-finite f are rejected"""
        with pytest.raises(InvalidParameter):
            SecondOrderFilter(frequency, 0.5, 1.0, initial_value=0.0)

    def test_invalid_parameter_is_value_error(self):
        with pytest.raises(ValueError):
            SecondOrderFilter(0.0, 0.5, 1.0, initial_value=0.0)

    @pytest.mark.parametrize("damping,response", [(0.0, 0.0), (-0.5, 1.0), (5.0, -3.0)])
    def test_any_finite_damping_and_response_accepted(self, damping, response):
        f = SecondOrderFilter(1.0, damping, response, initial_value=0.0)
        assert f.coefficients["k2"] > 0

    def test_non_finite_damping_raises(self):
        with pytest.raises(InvalidParameter):
            SecondOrderFilter(1.0, float("nan"), 1.0, initial_value=0.0)

    def test_unknown_stabilization_raises(self):
        with pytest.raises(InvalidParameter, match="stabilization"):
            SecondOrderFilter(1.0, 0.5, 1.0, initial_value=0.0, stabilization="substep")

    def test_unknown_dt_policy_raises(self):
        with pytest.raises(InvalidParameter, match="dt_policy"):
            SecondOrderFilter(1.0, 0.5, 1.0, initial_value=0.0, dt_policy="ignore")

    def test_stabilization_accepts_enum(self):
        f = SecondOrderFilter(
            1.0, 0.5, 1.0, initial_value=0.0, stabilization=StabilizationMethod.POLE_MATCHING
        )
        assert f.stabilization == StabilizationMethod.POLE_MATCHING

    def test_unsupported_value_type_raises(self):
        with pytest.raises(TypeError):
            SecondOrderFilter(1.0, 0.5, 1.0, initial_value="abc")

    def test_from_parameters(self):
        params = {"frequency": 3.0, "damping": 0.5, "response": 2.0}
        f = SecondOrderFilter.from_parameters(params, np.zeros(2), dt_policy="clamp")

        assert f.parameters == params
        assert f.dt_policy == "clamp"
        assert np.array_equal(f.value, np.zeros(2))

    def test_initial_array_is_copied(self):
        """Mutating the caller's array does not leak into filter state"""
        x0 = np.array([1.0, 2.0])
        f = SecondOrderFilter(1.0, 0.5, 1.0, initial_value=x0)
        x0[0] = 100.0

        assert f.value[0] == 1.0
        assert f.previous_target[0] == 1.0

    def test_repr(self):
        f = SecondOrderFilter(1.0, 0.5, 2.0, initial_value=0.0)
        text = repr(f)
        assert "SecondOrderFilter" in text
        assert "damping=0.5" in text
        assert "clamp" in text


# ============================================================================
# Test Class 2: Update Rule
# ============================================================================


class TestUpdate:
    """Test single steps against the semi-implicit Euler rule"""

    def test_first_two_steps_match_update_rule(self):
        """Position uses old velocity, velocity uses new position"""
        f = SecondOrderFilter(1.0, 0.5, 2.0, initial_value=0.0)
        c = f.coefficients
        dt = 0.016

        y1 = f.update(dt, 1.0)

        # x_dot = (1 - 0) / dt, no clamp needed at this dt
        x_dot = 1.0 / dt
        yd1 = dt * (1.0 + c["k3"] * x_dot) / c["k2"]
        assert y1 == 0.0
        assert np.isclose(f.velocity, yd1)

        y2 = f.update(dt, 1.0)

        expected_y2 = dt * yd1
        expected_yd2 = yd1 + dt * (1.0 - expected_y2 - c["k1"] * yd1) / c["k2"]
        assert np.isclose(y2, expected_y2)
        assert np.isclose(f.velocity, expected_yd2)

    def test_returns_current_value(self):
        f = SecondOrderFilter(1.0, 0.5, 1.0, initial_value=0.0)
        f.update(0.1, 1.0)
        y = f.update(0.1, 1.0)
        assert y == f.value

    def test_estimated_velocity_updates_previous_target(self):
        f = SecondOrderFilter(1.0, 0.5, 1.0, initial_value=0.0)
        f.update(0.1, 2.0)
        assert f.previous_target == 2.0

    def test_explicit_velocity_bypasses_estimate(self):
        """Supplying x' leaves x_prev untouched and uses x' directly"""
        f = SecondOrderFilter(1.0, 0.5, 2.0, initial_value=0.0)
        c = f.coefficients
        dt = 0.01

        f.update(dt, 1.0, target_velocity=0.5)

        assert f.previous_target == 0.0
        assert np.isclose(f.velocity, dt * (1.0 + c["k3"] * 0.5) / c["k2"])

    def test_estimated_and_explicit_velocity_agree_for_ramp(self):
        """On a ramp target the finite difference equals the true slope"""
        dt = 0.01
        slope = 2.0
        estimated = SecondOrderFilter(2.0, 0.6, 1.5, initial_value=0.0)
        explicit = SecondOrderFilter(2.0, 0.6, 1.5, initial_value=0.0)

        for k in range(1, 200):
            x = slope * k * dt
            y_est = estimated.update(dt, x)
            y_exp = explicit.update(dt, x, target_velocity=slope)

        assert np.isclose(y_est, y_exp, atol=1e-9)

    def test_failed_update_leaves_state_unchanged(self):
        """A step that raises mid-evaluation does not move y, y' or x_prev"""
        f = SecondOrderFilter(1.0, 0.5, 2.0, initial_value=np.zeros(3))
        f.update(0.1, np.ones(3))
        f.update(0.1, np.ones(3))
        y, yd, xp = f.value, f.velocity, f.previous_target
        stats = f.get_stats()

        with pytest.raises(ValueError):
            f.update(0.1, np.ones(3), target_velocity=np.ones(2))

        assert np.array_equal(f.value, y)
        assert np.array_equal(f.velocity, yd)
        assert np.array_equal(f.previous_target, xp)
        assert f.get_stats() == stats

    def test_mismatched_target_shape_leaves_state_unchanged(self):
        f = SecondOrderFilter(1.0, 0.5, 2.0, initial_value=np.zeros(3))
        f.update(0.1, np.ones(3))
        y, yd, xp = f.value, f.velocity, f.previous_target

        with pytest.raises(ValueError):
            f.update(0.1, np.ones(2))

        assert np.array_equal(f.value, y)
        assert np.array_equal(f.velocity, yd)
        assert np.array_equal(f.previous_target, xp)
        assert f.get_stats()["estimated_velocity_steps"] == 1


# ============================================================================
# Test Class 3: Time Step Edge Cases
# ============================================================================


class TestTimeStep:
    """Test dt == 0 and negative dt handling"""

    def test_zero_dt_is_noop(self):
        """dt == 0 returns y and leaves x_prev and y' unchanged"""
        f = SecondOrderFilter(1.0, 0.5, 2.0, initial_value=0.0)
        for _ in range(5):
            f.update(0.016, 1.0)

        y, yd, xp = f.value, f.velocity, f.previous_target
        result = f.update(0.0, 7.0)

        assert result == y
        assert f.value == y
        assert f.velocity == yd
        assert f.previous_target == xp

    def test_zero_dt_with_explicit_velocity_is_noop(self):
        f = SecondOrderFilter(1.0, 0.5, 2.0, initial_value=0.0)
        assert f.update(0.0, 1.0, target_velocity=3.0) == 0.0
        assert f.velocity == 0.0

    def test_negative_dt_raises(self):
        f = SecondOrderFilter(1.0, 0.5, 2.0, initial_value=0.0)
        f.update(0.1, 1.0)
        y, yd = f.value, f.velocity

        with pytest.raises(InvalidParameter, match="non-negative"):
            f.update(-0.1, 1.0)

        assert f.value == y
        assert f.velocity == yd

    def test_negative_dt_clamp_policy_warns_and_skips(self):
        f = SecondOrderFilter(1.0, 0.5, 2.0, initial_value=0.0, dt_policy="clamp")
        f.update(0.1, 1.0)
        y, yd, xp = f.value, f.velocity, f.previous_target

        with pytest.warns(RuntimeWarning, match="Negative time step"):
            result = f.update(-0.1, 5.0)

        assert result == y
        assert f.velocity == yd
        assert f.previous_target == xp
        assert f.get_stats()["skipped_steps"] == 1

    @pytest.mark.parametrize("dt", [float("nan"), float("inf")])
    def test_non_finite_dt_raises(self, dt):
        f = SecondOrderFilter(1.0, 0.5, 2.0, initial_value=0.0)
        with pytest.raises(InvalidParameter):
            f.update(dt, 1.0)

    def test_numpy_scalar_dt(self):
        f = SecondOrderFilter(1.0, 0.5, 2.0, initial_value=0.0)
        y = f.update(np.float32(0.016), 1.0)
        assert math.isfinite(y)

    def test_subnormal_dt_is_noop(self):
        """A dt whose reciprocal overflows leaves the state finite and unchanged"""
        f = SecondOrderFilter(1.0, 0.5, 1.0, initial_value=1.0)

        y = f.update(1e-310, 1.0)

        assert y == 1.0
        assert f.velocity == 0.0
        assert math.isfinite(f.velocity)
        assert f.get_stats()["skipped_steps"] == 1
        assert f.get_stats()["total_steps"] == 0
        assert math.isfinite(f.update(0.016, 1.0))

    def test_subnormal_dt_after_target_moves(self):
        f = SecondOrderFilter(1.0, 0.5, 1.0, initial_value=np.zeros(2))
        for _ in range(3):
            f.update(0.016, np.ones(2))
        y, yd, xp = f.value, f.velocity, f.previous_target

        result = f.update(5e-324, np.array([4.0, -4.0]))

        assert np.array_equal(result, y)
        assert np.array_equal(f.velocity, yd)
        assert np.array_equal(f.previous_target, xp)
        assert np.all(np.isfinite(f.update(0.016, np.array([4.0, -4.0]))))


# ============================================================================
# Test Class 4: Stability
# ============================================================================


class TestStability:
    """y stays bounded for any f > 0, ζ >= 0, r and dt up to 10 periods"""

    @pytest.mark.parametrize("frequency", [0.5, 1.0, 10.0])
    @pytest.mark.parametrize("damping", [0.0, 0.3, 1.0, 2.0])
    @pytest.mark.parametrize("response", [-2.0, 0.0, 1.0, 3.0])
    @pytest.mark.parametrize("periods", [0.001, 0.1, 1.0, 10.0])
    def test_bounded_for_constant_target(self, frequency, damping, response, periods):
        dt = periods / frequency
        f = SecondOrderFilter(frequency, damping, response, initial_value=0.0)

        y = run_constant_target(f, 1.0, dt, 500)

        assert np.all(np.isfinite(y))
        assert np.max(np.abs(y)) < 50.0

    @pytest.mark.parametrize("damping", [0.0, 0.5, 1.0])
    @pytest.mark.parametrize("response", [1.0, 2.0])
    def test_large_dt_does_not_diverge(self, damping, response):
        """dt = 5 with f = 10 exercises the k2 clamp on every step"""
        f = SecondOrderFilter(10.0, damping, response, initial_value=0.0)

        y = run_constant_target(f, 1.0, 5.0, 200)

        assert np.all(np.isfinite(y))
        assert np.max(np.abs(y)) < 10.0
        assert f.get_stats()["clamped_steps"] == 200

    def test_irregular_dt_stays_bounded(self):
        """Frame-rate drops mixed with normal frames"""
        rng = np.random.default_rng(7)
        f = SecondOrderFilter(4.0, 0.4, 1.5, initial_value=0.0)
        outputs = []
        for k in range(2000):
            dt = rng.choice([1.0 / 60.0, 1.0 / 30.0, 0.5, 2.0])
            target = 1.0 if (k // 100) % 2 == 0 else -1.0
            outputs.append(f.update(dt, target))

        assert np.all(np.isfinite(outputs))
        assert np.max(np.abs(outputs)) < 1e3

    def test_trajectory_continuous_across_target_jump(self):
        """A target jump moves y' immediately but not y"""
        f = SecondOrderFilter(2.0, 0.5, 2.0, initial_value=0.0)
        for _ in range(200):
            f.update(0.01, 0.0)
        y_before = f.value
        yd_before = f.velocity

        y_after = f.update(0.01, 10.0)

        assert y_after == pytest.approx(y_before + 0.01 * yd_before)
        assert f.velocity > 1.0


# ============================================================================
# Test Class 5: Convergence, Fixed Point, Determinism
# ============================================================================


class TestConvergence:
    """Test convergence to a constant target"""

    @pytest.mark.parametrize("damping", [1.0, 1.5, 3.0])
    def test_monotone_convergence_without_oscillation(self, damping):
        dt = 0.016
        f = SecondOrderFilter(1.0, damping, 0.0, initial_value=0.0)

        y = run_constant_target(f, 1.0, dt, int(15.0 / dt))
        t = dt * np.arange(1, len(y) + 1)
        error = np.abs(y - 1.0)

        settled = error[t >= 1.0]
        assert np.all(np.diff(settled) <= 1e-12)
        assert error[-1] < 1e-3
        assert np.all(y <= 1.0 + 1e-12)

    def test_fixed_point_when_at_target(self):
        """initial == target and k3 == 0: y never moves"""
        f = SecondOrderFilter(3.0, 0.7, 0.0, initial_value=2.5)
        rng = np.random.default_rng(0)

        for dt in rng.uniform(0.001, 2.0, size=500):
            assert f.update(dt, 2.5) == 2.5
        assert f.velocity == 0.0

    def test_fixed_point_undamped_vector(self):
        """ζ == 0 gives k3 == 0 regardless of r"""
        x = np.array([1.0, -2.0, 0.5])
        f = SecondOrderFilter(1.0, 0.0, 5.0, initial_value=x)

        for _ in range(300):
            y = f.update(0.02, x)

        assert np.array_equal(y, x)

    def test_determinism(self):
        """Identical parameters and inputs give identical outputs"""
        rng = np.random.default_rng(42)
        dts = rng.uniform(0.0, 0.2, size=1000)
        targets = rng.normal(size=1000)

        a = SecondOrderFilter(2.0, 0.3, -1.0, initial_value=0.0)
        b = SecondOrderFilter(2.0, 0.3, -1.0, initial_value=0.0)

        out_a = [a.update(dt, x) for dt, x in zip(dts, targets)]
        out_b = [b.update(dt, x) for dt, x in zip(dts, targets)]

        assert out_a == out_b


# ============================================================================
# Test Class 6: Concrete Scenarios
# ============================================================================


class TestScenarios:
    """Characteristic responses of (f, ζ, r)"""

    def test_overshoot_then_decaying_oscillation(self):
        """f=1, ζ=0.5, r=2: overshoot early, settle within 1% by 3-5 s"""
        dt = 0.016
        f = SecondOrderFilter(1.0, 0.5, 2.0, initial_value=0.0)

        y = run_constant_target(f, 1.0, dt, int(6.0 / dt))
        t = dt * np.arange(1, len(y) + 1)

        assert y[t <= 0.5].max() > 1.0
        assert y[(t > 0.7) & (t < 2.0)].min() < 1.0
        assert y[(t > 0.7) & (t < 2.0)].max() < y[t <= 0.7].max()
        assert np.all(np.abs(y[t >= 4.0] - 1.0) < 0.01)

    def test_undamped_oscillates_indefinitely(self):
        """f=1, ζ=0, r=1: amplitude does not decay"""
        dt = 0.016
        f = SecondOrderFilter(1.0, 0.0, 1.0, initial_value=0.0)

        y = run_constant_target(f, 1.0, dt, int(20.0 / dt))
        t = dt * np.arange(1, len(y) + 1)

        late = y[t >= 19.0]
        assert late.max() > 1.9
        assert late.min() < 0.1
        assert y.max() < 2.1
        assert y.min() > -0.1

    def test_anticipation_with_negative_response(self):
        """r < 0: y first moves away from the target"""
        f = SecondOrderFilter(1.0, 0.5, -1.0, initial_value=0.0)

        y = run_constant_target(f, 1.0, 0.016, 20)

        assert y.min() < 0.0

    def test_zero_response_starts_from_rest(self):
        """r = 0: no initial velocity kick"""
        f = SecondOrderFilter(1.0, 0.5, 0.0, initial_value=0.0)
        dt = 0.016

        f.update(dt, 1.0)

        assert np.isclose(f.velocity, dt / f.coefficients["k2"])


# ============================================================================
# Test Class 7: Value Types
# ============================================================================


class TestValueTypes:
    """Filter is generic over the tracked value type"""

    def test_numpy_vector_converges(self):
        target = np.array([1.0, -2.0, 3.0])
        f = SecondOrderFilter(2.0, 1.0, 1.0, initial_value=np.zeros(3))

        for _ in range(1000):
            y = f.update(0.01, target)

        assert isinstance(y, np.ndarray)
        assert y.shape == (3,)
        assert np.allclose(y, target, atol=1e-4)

    def test_numpy_components_are_independent(self):
        """Each component matches a scalar filter"""
        vec = SecondOrderFilter(1.5, 0.4, 2.0, initial_value=np.array([0.0, 5.0]))
        sx = SecondOrderFilter(1.5, 0.4, 2.0, initial_value=0.0)
        sy = SecondOrderFilter(1.5, 0.4, 2.0, initial_value=5.0)

        for k in range(100):
            target = np.array([math.sin(0.1 * k), math.cos(0.1 * k)])
            v = vec.update(0.02, target)
            x = sx.update(0.02, target[0])
            y = sy.update(0.02, target[1])

        assert np.allclose(v, [x, y])

    def test_user_defined_vector_type(self):
        f = SecondOrderFilter(2.0, 1.0, 0.0, initial_value=Vec2(0.0, 0.0))

        for _ in range(1000):
            v = f.update(0.01, Vec2(1.0, -1.0))

        assert isinstance(v, Vec2)
        assert abs(v.x - 1.0) < 1e-4
        assert abs(v.y + 1.0) < 1e-4

    @pytest.mark.skipif(not torch_available, reason="PyTorch not installed")
    def test_torch_matches_numpy(self):
        f_np = SecondOrderFilter(1.0, 0.5, 2.0, initial_value=np.zeros(3))
        f_t = SecondOrderFilter(1.0, 0.5, 2.0, initial_value=torch.zeros(3, dtype=torch.float64))
        target = np.array([1.0, 2.0, 3.0])

        for _ in range(100):
            y_np = f_np.update(0.016, target)
            y_t = f_t.update(0.016, torch.tensor(target))

        assert isinstance(y_t, torch.Tensor)
        assert f_t.backend == "torch"
        assert np.allclose(y_t.numpy(), y_np)

    @pytest.mark.skipif(not jax_available, reason="JAX not installed")
    def test_jax_matches_numpy(self):
        f_np = SecondOrderFilter(1.0, 0.5, 2.0, initial_value=np.zeros(2))
        f_j = SecondOrderFilter(1.0, 0.5, 2.0, initial_value=jnp.zeros(2))
        target = np.array([1.0, -1.0])

        for _ in range(50):
            y_np = f_np.update(0.016, target)
            y_j = f_j.update(0.016, jnp.asarray(target))

        assert f_j.backend == "jax"
        assert np.allclose(np.asarray(y_j), y_np, atol=1e-5)


# ============================================================================
# Test Class 8: Re-derivation and Reset
# ============================================================================


class TestSetParameters:
    """Runtime retuning preserves the trajectory state"""

    def test_state_preserved(self):
        f = SecondOrderFilter(1.0, 0.5, 2.0, initial_value=0.0)
        for _ in range(10):
            f.update(0.016, 1.0)
        y, yd, xp = f.value, f.velocity, f.previous_target

        f.set_parameters(frequency=3.0, damping=1.0, response=0.0)

        assert f.value == y
        assert f.velocity == yd
        assert f.previous_target == xp

    def test_coefficients_rederived(self):
        f = SecondOrderFilter(1.0, 0.5, 2.0, initial_value=0.0)
        new = f.set_parameters(frequency=2.0)

        assert np.isclose(new["k2"], 1.0 / (4.0 * math.pi) ** 2)
        assert f.coefficients == new
        assert f.parameters == {"frequency": 2.0, "damping": 0.5, "response": 2.0}

    def test_dynamics_change(self):
        fast = SecondOrderFilter(1.0, 1.0, 0.0, initial_value=0.0)
        slow = fast.copy()
        fast.set_parameters(frequency=5.0)

        for _ in range(30):
            y_fast = fast.update(0.016, 1.0)
            y_slow = slow.update(0.016, 1.0)

        assert y_fast > y_slow

    def test_invalid_leaves_filter_unchanged(self):
        f = SecondOrderFilter(1.0, 0.5, 2.0, initial_value=0.0)
        before = f.coefficients

        with pytest.raises(InvalidParameter):
            f.set_parameters(frequency=-1.0)

        assert f.coefficients == before
        assert f.parameters["frequency"] == 1.0

    def test_reset_places_filter_at_rest(self):
        f = SecondOrderFilter(1.0, 0.5, 2.0, initial_value=0.0)
        for _ in range(10):
            f.update(0.016, 1.0)

        f.reset(np.array([4.0, 5.0]))

        assert np.array_equal(f.value, [4.0, 5.0])
        assert np.array_equal(f.previous_target, [4.0, 5.0])
        assert np.array_equal(f.velocity, [0.0, 0.0])
        assert f.backend == "numpy"


# ============================================================================
# Test Class 9: Copying and Statistics
# ============================================================================


class TestCopyAndStats:
    """Value semantics and update statistics"""

    def test_copy_is_independent(self):
        f = SecondOrderFilter(1.0, 0.5, 2.0, initial_value=np.zeros(2))
        for _ in range(5):
            f.update(0.016, np.ones(2))

        g = f.copy()
        y_f = f.update(0.016, np.ones(2))

        assert not np.array_equal(g.value, y_f)
        y_g = g.update(0.016, np.ones(2))
        assert np.array_equal(y_f, y_g)

    def test_copy_module_functions(self):
        f = SecondOrderFilter(1.0, 0.5, 2.0, initial_value=np.zeros(2))
        shallow = copy.copy(f)
        deep = copy.deepcopy(f)

        f.update(0.1, np.ones(2))

        assert np.array_equal(shallow.value, np.zeros(2))
        assert np.array_equal(deep.value, np.zeros(2))
        assert shallow.get_stats()["total_steps"] == 0

    def test_stats_counts(self):
        f = SecondOrderFilter(1.0, 0.5, 2.0, initial_value=0.0)
        f.update(0.016, 1.0)
        f.update(0.0, 1.0)
        f.update(0.016, 1.0, target_velocity=0.0)
        f.update(10.0, 1.0)

        stats = f.get_stats()
        assert stats["total_steps"] == 3
        assert stats["skipped_steps"] == 1
        assert stats["estimated_velocity_steps"] == 2
        assert stats["clamped_steps"] == 1
        assert stats["pole_matched_steps"] == 0
        assert np.isclose(stats["total_time"], 10.032)

    def test_reset_stats(self):
        f = SecondOrderFilter(1.0, 0.5, 2.0, initial_value=0.0)
        f.update(0.016, 1.0)
        f.reset_stats()
        assert f.get_stats()["total_steps"] == 0

    def test_no_warnings_on_regular_updates(self):
        f = SecondOrderFilter(1.0, 0.5, 2.0, initial_value=0.0)
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            for _ in range(10):
                f.update(0.016, 1.0)

    def test_returned_value_is_a_copy(self):
        f = SecondOrderFilter(1.0, 0.5, 2.0, initial_value=np.zeros(2))
        y = f.update(0.1, np.ones(2))
        expected = y.copy()

        y += 100.0

        assert np.array_equal(f.value, expected)

    def test_state_properties_are_copies(self):
        f = SecondOrderFilter(1.0, 0.5, 2.0, initial_value=np.zeros(2))
        f.update(0.1, np.ones(2))
        y, yd, xp = f.value.copy(), f.velocity.copy(), f.previous_target.copy()

        f.value[0] = 5.0
        f.velocity[0] = 5.0
        f.previous_target[0] = 5.0

        assert np.array_equal(f.value, y)
        assert np.array_equal(f.velocity, yd)
        assert np.array_equal(f.previous_target, xp)

    def test_mutating_output_does_not_change_next_step(self):
        a = SecondOrderFilter(1.0, 0.5, 2.0, initial_value=np.zeros(2))
        b = SecondOrderFilter(1.0, 0.5, 2.0, initial_value=np.zeros(2))

        y = a.update(0.1, np.ones(2))
        b.update(0.1, np.ones(2))
        y += 1.0

        assert np.array_equal(a.update(0.1, np.ones(2)), b.update(0.1, np.ones(2)))


# ============================================================================
# Test Class 10: Pole Matching Strategy
# ============================================================================


class TestPoleMatchingFilter:
    """Filter-level behaviour of the pole matching strategy"""

    def test_long_steps_use_pole_matching(self):
        f = SecondOrderFilter(10.0, 0.5, 1.0, initial_value=0.0, stabilization="pole_matching")

        y = run_constant_target(f, 1.0, 0.1, 100)

        assert f.get_stats()["pole_matched_steps"] == 100
        assert np.all(np.isfinite(y))
        assert abs(y[-1] - 1.0) < 1e-3

    def test_short_steps_use_clamp_branch(self):
        """ω·dt < ζ keeps the clamp"""
        f = SecondOrderFilter(1.0, 2.0, 1.0, initial_value=0.0, stabilization="pole_matching")

        run_constant_target(f, 1.0, 0.01, 50)

        assert f.get_stats()["pole_matched_steps"] == 0

    @pytest.mark.parametrize("damping", [0.0, 0.5, 1.0, 2.0])
    def test_bounded_at_large_dt(self, damping):
        f = SecondOrderFilter(10.0, damping, 1.0, initial_value=0.0, stabilization="pole_matching")

        y = run_constant_target(f, 1.0, 5.0, 200)

        assert np.all(np.isfinite(y))
        assert np.max(np.abs(y)) < 10.0
