"""Rigid, time-stamped transforms between two reference frames.

A :class:`Transform` from frame A to frame B maps position and velocity
expressed in A to the same physical quantities expressed in B::

    p_B = R (p_A + t)
    v_B = R (v_A + v) - w x p_B

where ``R`` is the passive rotation matrix of :attr:`Transform.rotation`,
``t`` the translation, ``v`` its rate and ``w`` the angular velocity of B
with respect to A, expressed in B.

Transforms are immutable. Composition renormalizes the rotation
quaternion, so long chains of frames do not drift off the unit sphere.
"""

from __future__ import annotations

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from astroframes.attitude_representations import Quaternion
from astroframes.attitude_representations.conversions import quaternion_multiply
from astroframes.config import get_dtype
from astroframes.epoch import Epoch


def _vector(value: ArrayLike | None) -> Array:
    if value is None:
        return jnp.zeros(3, dtype=get_dtype())
    return jnp.asarray(value, dtype=get_dtype())


class Transform:
    """Rotation, translation and their rates between two frames at a date.

    Args:
        date: Date of the transform. ``None`` for date-independent
            transforms.
        rotation: Passive rotation from A to B. Defaults to identity.
        rotation_rate: Angular velocity of B with respect to A, expressed
            in B [rad/s]. Defaults to zero.
        translation: Translation applied before the rotation [m].
            Defaults to zero.
        velocity: Rate of the translation [m/s]. Defaults to zero.
    """

    __slots__ = ('_date', '_rotation', '_rotation_rate', '_translation', '_velocity')

    def __init__(
        self,
        date: Epoch | None,
        rotation: Quaternion | None = None,
        rotation_rate: ArrayLike | None = None,
        translation: ArrayLike | None = None,
        velocity: ArrayLike | None = None,
    ) -> None:
        self._date = date
        self._rotation = Quaternion.identity() if rotation is None else rotation
        self._rotation_rate = _vector(rotation_rate)
        self._translation = _vector(translation)
        self._velocity = _vector(velocity)

    # Factory methods

    @classmethod
    def identity(cls, date: Epoch | None = None) -> Transform:
        """Return the identity transform."""
        return cls(date)

    @classmethod
    def from_rotation_matrix(
        cls,
        date: Epoch | None,
        matrix: ArrayLike,
        rotation_rate: ArrayLike | None = None,
    ) -> Transform:
        """Create a pure rotation from a passive 3x3 rotation matrix.

        Args:
            date: Date of the transform.
            matrix: Rotation matrix from A to B.
            rotation_rate: Angular velocity of B, expressed in B [rad/s].

        Returns:
            Transform: Rotation-only transform.
        """
        return cls(date, Quaternion.from_rotation_matrix(matrix), rotation_rate)

    @classmethod
    def from_translation(
        cls,
        date: Epoch | None,
        translation: ArrayLike,
        velocity: ArrayLike | None = None,
    ) -> Transform:
        """Create a pure translation.

        Args:
            date: Date of the transform.
            translation: Translation [m].
            velocity: Translation rate [m/s].

        Returns:
            Transform: Translation-only transform.
        """
        return cls(date, translation=translation, velocity=velocity)

    @classmethod
    def compose(cls, date: Epoch | None, first: Transform, second: Transform) -> Transform:
        """Combine two transforms, applying *first* then *second*.

        If *first* maps A to B and *second* maps B to C, the result maps A
        to C.

        Args:
            date: Date of the combined transform.
            first: Transform applied first.
            second: Transform applied second.

        Returns:
            Transform: Combined transform.
        """
        r1 = first._rotation.to_rotation_matrix()
        r2 = second._rotation.to_rotation_matrix()

        rotation = Quaternion._from_internal(
            quaternion_multiply(first._rotation.to_vector(), second._rotation.to_vector())
        )
        rotation_rate = second._rotation_rate + r2 @ first._rotation_rate
        translation = first._translation + r1.T @ second._translation
        velocity = first._velocity + r1.T @ (
            second._velocity + jnp.cross(first._rotation_rate, second._translation)
        )
        return cls(date, rotation, rotation_rate, translation, velocity)

    # Properties

    @property
    def date(self) -> Epoch | None:
        """Date of the transform."""
        return self._date

    @property
    def rotation(self) -> Quaternion:
        """Passive rotation from the source to the destination frame."""
        return self._rotation

    @property
    def rotation_rate(self) -> Array:
        """Angular velocity of the destination frame, in that frame [rad/s]."""
        return self._rotation_rate

    @property
    def translation(self) -> Array:
        """Translation applied before the rotation [m]."""
        return self._translation

    @property
    def velocity(self) -> Array:
        """Rate of the translation [m/s]."""
        return self._velocity

    # Methods

    def rotation_matrix(self) -> Array:
        """Return the passive rotation matrix of shape ``(3, 3)``."""
        return self._rotation.to_rotation_matrix()

    def inverse(self) -> Transform:
        """Return the transform from the destination back to the source frame."""
        r = self.rotation_matrix()
        rt = r @ self._translation
        return Transform(
            self._date,
            self._rotation.conjugate(),
            -(r.T @ self._rotation_rate),
            -rt,
            jnp.cross(self._rotation_rate, rt) - r @ self._velocity,
        )

    def with_date(self, date: Epoch | None) -> Transform:
        """Return a copy of the transform stamped with *date*."""
        return Transform(date, self._rotation, self._rotation_rate, self._translation, self._velocity)

    def transform_position(self, position: ArrayLike) -> Array:
        """Transform a position vector.

        Args:
            position: Position in the source frame [m], shape ``(3,)``.

        Returns:
            Position in the destination frame [m].
        """
        return self.rotation_matrix() @ (jnp.asarray(position, dtype=get_dtype()) + self._translation)

    def transform_vector(self, vector: ArrayLike) -> Array:
        """Rotate a free vector (no translation applied).

        Args:
            vector: Vector in the source frame, shape ``(3,)``.

        Returns:
            Vector in the destination frame.
        """
        return self.rotation_matrix() @ jnp.asarray(vector, dtype=get_dtype())

    def transform_state(self, state: ArrayLike) -> Array:
        """Transform a position/velocity state.

        Args:
            state: ``[x, y, z, vx, vy, vz]`` in the source frame [m, m/s].

        Returns:
            State in the destination frame, shape ``(6,)``.
        """
        state = jnp.asarray(state, dtype=get_dtype())
        r = self.rotation_matrix()
        p = r @ (state[:3] + self._translation)
        v = r @ (state[3:6] + self._velocity) - jnp.cross(self._rotation_rate, p)
        return jnp.concatenate([p, v])

    # String representations

    def __repr__(self) -> str:
        return (
            f"Transform(date={self._date}, rotation={self._rotation!r}, "
            f"rotation_rate={self._rotation_rate.tolist()}, "
            f"translation={self._translation.tolist()}, "
            f"velocity={self._velocity.tolist()})"
        )
