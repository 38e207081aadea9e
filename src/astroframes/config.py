"""Module-wide configuration for astroframes.

Provides getter/setter pairs for the few process-wide knobs of the frame
engine:

- ``set_dtype`` / ``get_dtype``: the float dtype used for all JAX arrays.
  Frame transforms need double precision, so the default is
  ``jnp.float64`` and JAX's 64-bit mode (``jax_enable_x64``) is switched on
  when this module is imported.
- ``set_cache_slots_number`` / ``get_cache_slots_number``: the number of
  sample windows each interpolating transform provider may retain. The
  initial value can be set with the ``ASTROFRAMES_CACHE_SLOTS`` environment
  variable.
- ``set_eop_max_gap`` / ``get_eop_max_gap``: the largest gap (seconds)
  allowed between consecutive EOP entries before a history is rejected.

Call ``set_dtype`` **before** any JIT compilation; under JIT the dtype is
baked into the compiled program.
"""

from __future__ import annotations

import os

import jax
import jax.numpy as jnp

_VALID_DTYPES = (jnp.float32, jnp.float64)

_CACHE_SLOTS_ENV_VAR = "ASTROFRAMES_CACHE_SLOTS"

_DEFAULT_CACHE_SLOTS = 100

_DEFAULT_EOP_MAX_GAP = 5 * 86400.0

_dtype = jnp.float64
jax.config.update("jax_enable_x64", True)

_cache_slots = int(os.environ.get(_CACHE_SLOTS_ENV_VAR, _DEFAULT_CACHE_SLOTS))

_eop_max_gap = _DEFAULT_EOP_MAX_GAP


def set_dtype(dtype) -> None:
    """Set the module-wide float dtype for astroframes.

    Must be called **before** any ``jax.jit`` compilation.  If *dtype* is
    ``jnp.float64``, JAX's 64-bit mode is enabled via
    ``jax.config.update("jax_enable_x64", True)``.

    Single precision is accepted for experimentation only: the interpolation
    accuracy guarantees of the frame engine assume ``jnp.float64``.

    Args:
        dtype: One of ``jnp.float32`` or ``jnp.float64``.

    Raises:
        ValueError: If *dtype* is not a supported float type.
    """
    global _dtype
    if dtype not in _VALID_DTYPES:
        raise ValueError(
            f"Unsupported dtype {dtype}. Must be one of: jnp.float32, jnp.float64"
        )
    if dtype == jnp.float64:
        jax.config.update("jax_enable_x64", True)
    _dtype = dtype


def get_dtype():
    """Return the current module-wide float dtype.

    Returns:
        The active float dtype (default ``jnp.float64``).
    """
    return _dtype


def set_cache_slots_number(slots: int) -> None:
    """Set the number of sample slots retained by interpolating providers.

    Only providers created after the call are affected.

    Args:
        slots: Maximum number of independent sample windows per provider.

    Raises:
        ValueError: If *slots* is lower than 1.
    """
    global _cache_slots
    if slots < 1:
        raise ValueError(f"Cache slots number must be at least 1, got {slots}")
    _cache_slots = int(slots)


def get_cache_slots_number() -> int:
    """Return the number of sample slots retained by interpolating providers.

    Returns:
        int: Slot count (default 100, or ``$ASTROFRAMES_CACHE_SLOTS``).
    """
    return _cache_slots


def set_eop_max_gap(max_gap: float) -> None:
    """Set the maximum gap allowed between consecutive EOP entries.

    Args:
        max_gap: Maximum gap in seconds.

    Raises:
        ValueError: If *max_gap* is not strictly positive.
    """
    global _eop_max_gap
    if max_gap <= 0.0:
        raise ValueError(f"EOP maximum gap must be positive, got {max_gap}")
    _eop_max_gap = float(max_gap)


def get_eop_max_gap() -> float:
    """Return the maximum gap allowed between consecutive EOP entries.

    Returns:
        float: Gap in seconds (default five days).
    """
    return _eop_max_gap
