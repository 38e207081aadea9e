"""Polynomial interpolation kernels on small sample grids.

The kernels work on a handful of nodes (typically 4 to 8) and return both
the interpolated value and its first derivative. Nodes are expected in a
normalized abscissa (for example time divided by the sampling step) so the
products stay well conditioned. All kernels are ``jax.jit`` compiled.

Basis values are computed from masked products rather than divisions by
``x - x_j``, so evaluating exactly on a node is safe.
"""

from __future__ import annotations

import jax
import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike


def _basis(nodes: Array, x: Array) -> tuple[Array, Array]:
    """Lagrange basis values and derivatives at *x*.

    Returns:
        tuple[Array, Array]: ``(L, dL)`` each of shape ``(n,)``.
    """
    n = nodes.shape[0]
    eye = jnp.eye(n, dtype=bool)
    denom = jnp.where(eye, 1.0, nodes[:, None] - nodes[None, :])
    factors = jnp.where(eye, 1.0, (x - nodes)[None, :] / denom)
    values = jnp.prod(factors, axis=1)

    # partial[i, k] = prod over j not in {i, k} of factors[i, j]
    drop_k = jnp.broadcast_to(eye[None, :, :], (n, n, n))
    partial = jnp.prod(jnp.where(drop_k, 1.0, factors[:, None, :]), axis=2)
    derivs = jnp.sum(jnp.where(eye, 0.0, partial / denom), axis=1)
    return values, derivs


@jax.jit
def lagrange_interpolate(
    nodes: ArrayLike, values: ArrayLike, x: ArrayLike
) -> tuple[Array, Array]:
    """Interpolate samples with a Lagrange polynomial.

    Args:
        nodes: Abscissae of the samples, shape ``(n,)``.
        values: Sample values, shape ``(n, d)``.
        x: Abscissa to evaluate at.

    Returns:
        tuple[Array, Array]: Interpolated value and first derivative, each
            of shape ``(d,)``.
    """
    nodes = jnp.asarray(nodes)
    values = jnp.asarray(values)
    basis, dbasis = _basis(nodes, jnp.asarray(x))
    return basis @ values, dbasis @ values


@jax.jit
def hermite_interpolate(
    nodes: ArrayLike, values: ArrayLike, derivatives: ArrayLike, x: ArrayLike
) -> tuple[Array, Array]:
    """Interpolate samples and their derivatives with a Hermite polynomial.

    The polynomial has degree ``2n - 1`` and matches both the value and the
    first derivative at every node.

    Args:
        nodes: Abscissae of the samples, shape ``(n,)``.
        values: Sample values, shape ``(n, d)``.
        derivatives: Sample derivatives with respect to the abscissa,
            shape ``(n, d)``.
        x: Abscissa to evaluate at.

    Returns:
        tuple[Array, Array]: Interpolated value and first derivative, each
            of shape ``(d,)``.
    """
    nodes = jnp.asarray(nodes)
    values = jnp.asarray(values)
    derivatives = jnp.asarray(derivatives)
    x = jnp.asarray(x)

    basis, dbasis = _basis(nodes, x)
    n = nodes.shape[0]
    eye = jnp.eye(n, dtype=bool)
    denom = jnp.where(eye, 1.0, nodes[:, None] - nodes[None, :])
    # L_i'(x_i)
    slope = jnp.sum(jnp.where(eye, 0.0, 1.0 / denom), axis=1)

    dx = x - nodes
    sq = basis * basis
    dsq = 2.0 * basis * dbasis
    h_val = (1.0 - 2.0 * slope * dx) * sq
    h_der = dx * sq
    dh_val = -2.0 * slope * sq + (1.0 - 2.0 * slope * dx) * dsq
    dh_der = sq + dx * dsq

    value = h_val @ values + h_der @ derivatives
    rate = dh_val @ values + dh_der @ derivatives
    return value, rate
