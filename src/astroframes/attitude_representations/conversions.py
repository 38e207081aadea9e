"""Pure rotation kernels on raw JAX arrays.

All functions operate on raw JAX arrays (no class instances) so that the
``Quaternion`` class, the ``Transform`` algebra and the interpolation code
can share them without circular imports.

Convention:
    Quaternion layout is scalar-first: ``[w, x, y, z]`` (shape ``(4,)``).
    Rotation matrices are passive direction cosine matrices, shape ``(3, 3)``.
    With the Hamilton product, ``A(q1 * q2) = A(q2) @ A(q1)``: the product
    applies ``q1`` first.
    A rotation vector ``v = angle * axis`` maps to the quaternion
    ``[cos(angle/2), axis * sin(angle/2)]``.
"""

from __future__ import annotations

import jax
import jax.numpy as jnp

# Below this angle the closed forms are replaced by their Taylor series
_SMALL_ANGLE = 1e-2


# ---------------------------------------------------------------------------
# Quaternion <-> Rotation Matrix
# ---------------------------------------------------------------------------

def quaternion_to_rotation_matrix(q: jax.Array) -> jax.Array:
    """Convert a unit quaternion to a 3x3 rotation matrix.

    Uses the bilinear product form (Diebel eq. 125).

    Args:
        q (jax.Array): Quaternion array of shape ``(4,)`` in scalar-first order ``[w, x, y, z]``.

    Returns:
        jnp.ndarray: Rotation matrix of shape ``(3, 3)``.
    """
    qs, q1, q2, q3 = q[0], q[1], q[2], q[3]

    return jnp.array([
        [qs*qs + q1*q1 - q2*q2 - q3*q3,  2.0*q1*q2 + 2.0*qs*q3,          2.0*q1*q3 - 2.0*qs*q2],
        [2.0*q1*q2 - 2.0*qs*q3,           qs*qs - q1*q1 + q2*q2 - q3*q3,  2.0*q2*q3 + 2.0*qs*q1],
        [2.0*q1*q3 + 2.0*qs*q2,           2.0*q2*q3 - 2.0*qs*q1,          qs*qs - q1*q1 - q2*q2 + q3*q3],
    ])


def rotation_matrix_to_quaternion(R: jax.Array) -> jax.Array:
    """Convert a 3x3 rotation matrix to a unit quaternion.

    Uses Shepperd's method: the largest of the four candidate diagonal
    combinations is used as the pivot, which keeps the division well
    conditioned for every rotation.

    Args:
        R (jax.Array): Rotation matrix of shape ``(3, 3)``.

    Returns:
        jnp.ndarray: Quaternion of shape ``(4,)`` in scalar-first order,
            with a non-negative scalar part.
    """
    # Diebel eqs. 131-134: the four candidate traces
    qvec = jnp.array([
        1.0 + R[0, 0] + R[1, 1] + R[2, 2],
        1.0 + R[0, 0] - R[1, 1] - R[2, 2],
        1.0 - R[0, 0] + R[1, 1] - R[2, 2],
        1.0 - R[0, 0] - R[1, 1] + R[2, 2],
    ])
    ind_max = jnp.argmax(qvec)
    sq = jnp.sqrt(qvec[ind_max])

    a = (R[1, 2] - R[2, 1]) / sq
    b = (R[2, 0] - R[0, 2]) / sq
    c = (R[0, 1] - R[1, 0]) / sq
    d = (R[0, 1] + R[1, 0]) / sq
    e = (R[2, 0] + R[0, 2]) / sq
    f = (R[1, 2] + R[2, 1]) / sq

    candidates = 0.5 * jnp.array([
        [sq, a, b, c],
        [a, sq, d, e],
        [b, d, sq, f],
        [c, e, f, sq],
    ])
    q = candidates[ind_max]
    q = jnp.where(q[0] < 0.0, -q, q)
    return q / jnp.linalg.norm(q)


# ---------------------------------------------------------------------------
# Quaternion algebra
# ---------------------------------------------------------------------------

def quaternion_multiply(q1: jax.Array, q2: jax.Array) -> jax.Array:
    """Hamilton product of two quaternions, renormalized.

    Args:
        q1 (jax.Array): First quaternion of shape ``(4,)`` in scalar-first order.
        q2 (jax.Array): Second quaternion of shape ``(4,)`` in scalar-first order.

    Returns:
        jnp.ndarray: Unit product quaternion of shape ``(4,)``.
    """
    s1, v1 = q1[0], q1[1:]
    s2, v2 = q2[0], q2[1:]

    s = s1 * s2 - jnp.dot(v1, v2)
    v = s1 * v2 + s2 * v1 + jnp.cross(v1, v2)

    result = jnp.concatenate([jnp.array([s]), v])
    return result / jnp.linalg.norm(result)


def quaternion_conjugate(q: jax.Array) -> jax.Array:
    """Return the conjugate ``[w, -x, -y, -z]``, the inverse of a unit quaternion."""
    return q * jnp.array([1.0, -1.0, -1.0, -1.0])


def skew(v: jax.Array) -> jax.Array:
    """Return the cross-product matrix ``[v x]`` of a 3-vector."""
    return jnp.array([
        [0.0, -v[2], v[1]],
        [v[2], 0.0, -v[0]],
        [-v[1], v[0], 0.0],
    ])


# ---------------------------------------------------------------------------
# Rotation vectors
# ---------------------------------------------------------------------------

def quaternion_to_rotation_vector(q: jax.Array) -> jax.Array:
    """Logarithm map: unit quaternion to rotation vector ``angle * axis``.

    The sign of ``q`` is chosen so the returned angle lies in ``[0, pi]``.

    Args:
        q (jax.Array): Unit quaternion of shape ``(4,)``.

    Returns:
        jnp.ndarray: Rotation vector of shape ``(3,)``.
    """
    q = jnp.where(q[0] < 0.0, -q, q)
    v = q[1:]
    n = jnp.linalg.norm(v)
    n_safe = jnp.where(n > 1e-12, n, 1.0)
    scale = jnp.where(n > 1e-12, 2.0 * jnp.arctan2(n, q[0]) / n_safe, 2.0 / q[0])
    return scale * v


def rotation_vector_to_quaternion(v: jax.Array) -> jax.Array:
    """Exponential map: rotation vector ``angle * axis`` to unit quaternion.

    Args:
        v (jax.Array): Rotation vector of shape ``(3,)``.

    Returns:
        jnp.ndarray: Unit quaternion of shape ``(4,)``.
    """
    theta = jnp.linalg.norm(v)
    # sin(theta/2) / theta, finite at zero
    half_sinc = 0.5 * jnp.sinc(theta / (2.0 * jnp.pi))
    q = jnp.concatenate([jnp.array([jnp.cos(0.5 * theta)]), half_sinc * v])
    return q / jnp.linalg.norm(q)


def rotation_vector_right_jacobian(v: jax.Array) -> jax.Array:
    """Right Jacobian of the passive rotation ``exp(v)``.

    If ``A(t) = A(exp(v(t))) @ A0`` then the angular velocity of ``A``,
    expressed in the rotated frame, is ``J_r(v) @ dv/dt``.

    Args:
        v (jax.Array): Rotation vector of shape ``(3,)``.

    Returns:
        jnp.ndarray: Jacobian matrix of shape ``(3, 3)``.
    """
    theta = jnp.linalg.norm(v)
    theta2 = theta * theta
    # (1 - cos(theta)) / theta^2
    a = 0.5 * jnp.sinc(theta / (2.0 * jnp.pi)) ** 2
    theta_safe = jnp.where(theta > _SMALL_ANGLE, theta, 1.0)
    b = jnp.where(
        theta > _SMALL_ANGLE,
        (theta_safe - jnp.sin(theta_safe)) / theta_safe**3,
        1.0 / 6.0 - theta2 / 120.0 + theta2 * theta2 / 5040.0,
    )
    k = skew(v)
    return jnp.eye(3) - a * k + b * (k @ k)
