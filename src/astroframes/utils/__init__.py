"""Shared utility functions for astroframes.

Provides angle conversion, filesystem cache management and the polynomial
interpolation kernels used by the interpolating transform provider.
"""

from astroframes.utils._angle import from_radians
from astroframes.utils.caching import (
    file_age_days,
    get_cache_dir,
    get_eop_cache_dir,
    is_file_stale,
)
from astroframes.utils.interpolation import hermite_interpolate, lagrange_interpolate

__all__ = [
    "file_age_days",
    "from_radians",
    "get_cache_dir",
    "get_eop_cache_dir",
    "hermite_interpolate",
    "is_file_stale",
    "lagrange_interpolate",
]
