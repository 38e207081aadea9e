"""Quaternion attitude representation.

Provides the ``Quaternion`` class representing a rotation as a unit
quaternion in scalar-first convention ``[w, x, y, z]``. It is the rotation
part of every frame ``Transform``.

The quaternion is normalized on construction. Products are renormalized,
so long chains of compositions stay on the unit sphere.
"""

from __future__ import annotations

import jax
import jax.numpy as jnp

from astroframes.attitude_representations._tolerance import get_attitude_epsilon
from astroframes.attitude_representations.conversions import (
    quaternion_conjugate,
    quaternion_multiply,
    quaternion_to_rotation_matrix,
    quaternion_to_rotation_vector,
    rotation_matrix_to_quaternion,
    rotation_vector_to_quaternion,
)
from astroframes.config import get_dtype


class Quaternion:
    """Unit quaternion representing a 3D rotation.

    Internal storage is a shape ``(4,)`` array in scalar-first order
    ``[w, x, y, z]``. The quaternion is normalized on construction.

    This class is registered as a JAX pytree with the data array as
    the sole leaf and no auxiliary data.

    Args:
        s (float): Scalar (real) component.
        v1 (float): First vector (imaginary) component.
        v2 (float): Second vector (imaginary) component.
        v3 (float): Third vector (imaginary) component.
    """

    __slots__ = ('_data',)

    def __init__(self, s: float, v1: float, v2: float, v3: float) -> None:
        q = jnp.array([s, v1, v2, v3], dtype=get_dtype())
        self._data = q / jnp.linalg.norm(q)

    @classmethod
    def _from_internal(cls, data: jax.Array) -> Quaternion:
        """Create from a raw JAX array without normalization."""
        obj = object.__new__(cls)
        obj._data = data
        return obj

    # Properties

    @property
    def w(self) -> jax.Array:
        """Scalar component."""
        return self._data[0]

    @property
    def x(self) -> jax.Array:
        """First vector component."""
        return self._data[1]

    @property
    def y(self) -> jax.Array:
        """Second vector component."""
        return self._data[2]

    @property
    def z(self) -> jax.Array:
        """Third vector component."""
        return self._data[3]

    # Factory methods

    @classmethod
    def identity(cls) -> Quaternion:
        """Return the identity rotation ``[1, 0, 0, 0]``."""
        return cls._from_internal(jnp.array([1.0, 0.0, 0.0, 0.0], dtype=get_dtype()))

    @classmethod
    def from_vector(cls, v: jax.Array) -> Quaternion:
        """Create from a scalar-first 4-element vector.

        Args:
            v (jax.Array): Array-like of shape ``(4,)``.

        Returns:
            Quaternion: New normalized quaternion.
        """
        v = jnp.asarray(v, dtype=get_dtype())
        return cls._from_internal(v / jnp.linalg.norm(v))

    @classmethod
    def from_rotation_matrix(cls, R: jax.Array) -> Quaternion:
        """Create from a passive 3x3 rotation matrix.

        Args:
            R (jax.Array): Rotation matrix of shape ``(3, 3)``.

        Returns:
            Quaternion: Equivalent quaternion.
        """
        return cls._from_internal(rotation_matrix_to_quaternion(jnp.asarray(R, dtype=get_dtype())))

    @classmethod
    def from_rotation_vector(cls, v: jax.Array) -> Quaternion:
        """Create from a rotation vector ``angle * axis`` (radians).

        Args:
            v (jax.Array): Rotation vector of shape ``(3,)``.

        Returns:
            Quaternion: Equivalent quaternion.
        """
        return cls._from_internal(rotation_vector_to_quaternion(jnp.asarray(v, dtype=get_dtype())))

    def to_vector(self) -> jax.Array:
        """Return the quaternion as a scalar-first array of shape ``(4,)``."""
        return self._data

    def to_rotation_matrix(self) -> jax.Array:
        """Return the equivalent passive rotation matrix of shape ``(3, 3)``."""
        return quaternion_to_rotation_matrix(self._data)

    def to_rotation_vector(self) -> jax.Array:
        """Return the rotation vector ``angle * axis`` with angle in ``[0, pi]``."""
        return quaternion_to_rotation_vector(self._data)

    # Methods

    def conjugate(self) -> Quaternion:
        """Return the conjugate quaternion, which is the inverse rotation.

        Returns:
            Quaternion: Conjugate quaternion ``[w, -x, -y, -z]``.
        """
        return Quaternion._from_internal(quaternion_conjugate(self._data))

    def angle(self) -> jax.Array:
        """Return the rotation angle in ``[0, pi]`` radians."""
        return jnp.linalg.norm(self.to_rotation_vector())

    def angle_to(self, other: Quaternion) -> jax.Array:
        """Return the angle of the rotation taking ``self`` to ``other``.

        Args:
            other (Quaternion): Second rotation.

        Returns:
            jax.Array: Angle in radians.
        """
        return (self.conjugate() * other).angle()

    # Operators

    def __mul__(self, other: Quaternion) -> Quaternion:
        """Hamilton product: ``self`` is applied first, then ``other``."""
        if not isinstance(other, Quaternion):
            return NotImplemented
        return Quaternion._from_internal(quaternion_multiply(self._data, other._data))

    def __neg__(self) -> Quaternion:
        return Quaternion._from_internal(-self._data)

    def __getitem__(self, idx: int) -> jax.Array:
        return self._data[idx]

    def __eq__(self, other: object) -> bool:
        """Compare rotations, treating ``q`` and ``-q`` as equal."""
        if not isinstance(other, Quaternion):
            return NotImplemented
        eps = get_attitude_epsilon()
        same = jnp.all(jnp.abs(self._data - other._data) < eps)
        opposite = jnp.all(jnp.abs(self._data + other._data) < eps)
        return bool(same | opposite)

    def __ne__(self, other: object) -> bool:
        if not isinstance(other, Quaternion):
            return NotImplemented
        return not self.__eq__(other)

    # String representations

    def __str__(self) -> str:
        return (
            f"Quaternion(w={float(self._data[0]):.6f}, "
            f"x={float(self._data[1]):.6f}, "
            f"y={float(self._data[2]):.6f}, "
            f"z={float(self._data[3]):.6f})"
        )

    def __repr__(self) -> str:
        return (
            f"Quaternion(w={float(self._data[0])}, "
            f"x={float(self._data[1])}, "
            f"y={float(self._data[2])}, "
            f"z={float(self._data[3])})"
        )


# Register as JAX pytree
jax.tree_util.register_pytree_node(
    Quaternion,
    lambda q: ((q._data,), None),
    lambda _, children: Quaternion._from_internal(children[0]),
)
