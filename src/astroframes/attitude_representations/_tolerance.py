"""Dtype-adaptive tolerance for rotation comparisons."""

from __future__ import annotations

import jax.numpy as jnp

from astroframes.config import get_dtype


def get_attitude_epsilon() -> float:
    """Return the dtype-adaptive tolerance for quaternion comparisons.

    - ``float64``: 1e-12
    - ``float32``: 1e-6

    Returns:
        float: Absolute tolerance for element-wise comparisons.
    """
    if get_dtype() == jnp.float64:
        return 1e-12
    return 1e-6
