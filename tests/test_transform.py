"""Tests for astroframes.frames.transform."""

from __future__ import annotations

import math

import jax.numpy as jnp
import pytest

from astroframes.attitude_representations import Quaternion, Rx, Rz
from astroframes.config import get_dtype
from astroframes.epoch import Epoch
from astroframes.frames import Transform

DATE = Epoch(2017, 9, 20, 3, 25, 17.0)


def _general_transform() -> Transform:
    return Transform(
        DATE,
        Quaternion.from_rotation_matrix(Rz(0.3) @ Rx(-0.7)),
        jnp.array([1.0e-4, -2.0e-5, 7.292115e-5]),
        jnp.array([100.0, 200.0, -300.0]),
        jnp.array([1.0, 2.0, 3.0]),
    )


def _other_transform() -> Transform:
    return Transform(
        DATE,
        Quaternion.from_rotation_vector(jnp.array([0.1, -0.2, 0.3])),
        jnp.array([1.0e-4, 2.0e-4, -3.0e-5]),
        jnp.array([-50.0, 10.0, 5.0]),
        jnp.array([0.1, 0.0, -0.2]),
    )


STATE = jnp.array([7.0e6, 1.0e5, -2.0e5, 10.0, 7500.0, 1.0])


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------


class TestConstruction:
    """Tests for Transform constructors and properties."""

    def test_identity(self):
        """The identity maps any state onto itself."""
        t = Transform.identity(DATE)
        assert jnp.allclose(t.transform_state(STATE), STATE, rtol=0.0, atol=1e-9)
        assert t.date == DATE

    def test_defaults_are_zero(self):
        """Omitted components are zero vectors of the configured dtype."""
        t = Transform(None)
        assert t.date is None
        assert t.rotation == Quaternion.identity()
        for vector in (t.rotation_rate, t.translation, t.velocity):
            assert vector.shape == (3,)
            assert vector.dtype == get_dtype()
            assert jnp.all(vector == 0.0)

    def test_translation(self):
        """A pure translation adds the offset to positions only."""
        t = Transform.from_translation(DATE, jnp.array([1.0, 2.0, 3.0]), jnp.array([0.5, 0.0, 0.0]))
        out = t.transform_state(jnp.array([0.0, 0.0, 0.0, 1.0, 1.0, 1.0]))
        assert jnp.allclose(out, jnp.array([1.0, 2.0, 3.0, 1.5, 1.0, 1.0]), atol=1e-15)

    def test_rotation_matrix_round_trip(self):
        """A rotation built from a matrix gives the same matrix back."""
        matrix = Rz(0.3) @ Rx(-0.7)
        t = Transform.from_rotation_matrix(DATE, matrix)
        assert jnp.allclose(t.rotation_matrix(), matrix, rtol=0.0, atol=1e-14)

    def test_passive_rotation(self):
        """Rz(pi/2) expresses the x-axis as minus the new y-axis."""
        t = Transform.from_rotation_matrix(DATE, Rz(math.pi / 2))
        out = t.transform_position(jnp.array([1.0, 0.0, 0.0]))
        assert jnp.allclose(out, jnp.array([0.0, -1.0, 0.0]), atol=1e-15)

    def test_transform_vector_ignores_translation(self):
        """Free vectors are rotated but never translated."""
        t = Transform(DATE, Quaternion.identity(), translation=jnp.array([1.0, 2.0, 3.0]))
        out = t.transform_vector(jnp.array([1.0, 0.0, 0.0]))
        assert jnp.allclose(out, jnp.array([1.0, 0.0, 0.0]), atol=1e-15)

    def test_with_date(self):
        """with_date only changes the date."""
        t = _general_transform()
        other = t.with_date(None)
        assert other.date is None
        assert other.rotation == t.rotation
        assert jnp.array_equal(other.translation, t.translation)
        assert jnp.array_equal(other.velocity, t.velocity)
        assert jnp.array_equal(other.rotation_rate, t.rotation_rate)

    def test_repr(self):
        assert repr(Transform.identity()).startswith("Transform(date=None")


# ---------------------------------------------------------------------------
# Composition and inversion
# ---------------------------------------------------------------------------


class TestCompose:
    """Tests for Transform.compose."""

    def test_order(self):
        """compose(first, second) applies first, then second."""
        shift = Transform.from_translation(DATE, jnp.array([1.0, 0.0, 0.0]))
        turn = Transform.from_rotation_matrix(DATE, Rz(math.pi / 2))
        combined = Transform.compose(DATE, shift, turn)
        out = combined.transform_position(jnp.array([0.0, 0.0, 0.0]))
        assert jnp.allclose(out, jnp.array([0.0, -1.0, 0.0]), atol=1e-15)

    def test_matches_sequential_application(self):
        """Composed transform equals applying both transforms in turn."""
        first = _general_transform()
        second = _other_transform()
        combined = Transform.compose(DATE, first, second)
        expected = second.transform_state(first.transform_state(STATE))
        assert jnp.allclose(combined.transform_state(STATE), expected, rtol=1e-12, atol=1e-7)

    def test_associativity(self):
        """Grouping of three compositions does not matter."""
        a = _general_transform()
        b = _other_transform()
        c = Transform.from_rotation_matrix(DATE, Rx(1.1), jnp.array([0.0, 3.0e-5, 0.0]))
        left = Transform.compose(DATE, Transform.compose(DATE, a, b), c)
        right = Transform.compose(DATE, a, Transform.compose(DATE, b, c))
        assert jnp.allclose(left.transform_state(STATE), right.transform_state(STATE), rtol=1e-12, atol=1e-7)

    def test_identity_is_neutral(self):
        t = _general_transform()
        combined = Transform.compose(DATE, Transform.identity(DATE), t)
        assert jnp.allclose(combined.transform_state(STATE), t.transform_state(STATE), rtol=1e-14, atol=1e-8)

    def test_long_chain_stays_normalized(self):
        """Repeated composition keeps the quaternion on the unit sphere."""
        step = Transform(DATE, Quaternion.from_rotation_vector(jnp.array([1e-3, -2e-3, 3e-3])))
        t = Transform.identity(DATE)
        for _ in range(200):
            t = Transform.compose(DATE, t, step)
        assert abs(float(jnp.linalg.norm(t.rotation.to_vector())) - 1.0) < 1e-14
        expected = Quaternion.from_rotation_vector(200 * jnp.array([1e-3, -2e-3, 3e-3]))
        assert float(t.rotation.angle_to(expected)) < 1e-12


class TestInverse:
    """Tests for Transform.inverse."""

    def test_round_trip(self):
        """Applying a transform and its inverse restores the state."""
        t = _general_transform()
        back = t.inverse().transform_state(t.transform_state(STATE))
        assert jnp.allclose(back[:3], STATE[:3], rtol=0.0, atol=1e-6)
        assert jnp.allclose(back[3:], STATE[3:], rtol=0.0, atol=1e-9)

    def test_compose_with_inverse_is_identity(self):
        t = _other_transform()
        combined = Transform.compose(DATE, t, t.inverse())
        assert float(combined.rotation.angle()) < 1e-14
        assert jnp.allclose(combined.translation, jnp.zeros(3), atol=1e-12)
        assert jnp.allclose(combined.velocity, jnp.zeros(3), atol=1e-12)
        assert jnp.allclose(combined.rotation_rate, jnp.zeros(3), atol=1e-18)

    def test_double_inverse(self):
        t = _general_transform()
        twice = t.inverse().inverse()
        assert jnp.allclose(twice.transform_state(STATE), t.transform_state(STATE), rtol=1e-12, atol=1e-7)

    def test_date_is_kept(self):
        assert _general_transform().inverse().date == DATE


class TestRotatingFrame:
    """Velocity of points seen from a rotating frame."""

    @pytest.mark.parametrize("angle", [0.0, 0.5, 2.0])
    def test_fixed_point_velocity(self, angle):
        """A point fixed in the source frame moves backwards in a rotating frame."""
        omega = 7.292115e-5
        r = 6378137.0
        t = Transform.from_rotation_matrix(DATE, Rz(angle), jnp.array([0.0, 0.0, omega]))
        out = t.transform_state(jnp.array([r, 0.0, 0.0, 0.0, 0.0, 0.0]))
        # d/dt of Rz(angle + omega t) @ [r, 0, 0]
        expected = omega * r * jnp.array([-math.sin(angle), -math.cos(angle), 0.0])
        assert jnp.allclose(out[3:], expected, rtol=1e-12, atol=1e-9)
