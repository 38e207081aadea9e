"""Time scale offsets and calendar conversions.

Leap second lookup (TAI-UTC), the TT-TAI constant and Gregorian calendar to
Modified Julian Date conversions. The lookups accept scalars or arrays and
are traceable under ``jax.jit``.
"""

from __future__ import annotations

import jax
import jax.numpy as jnp
from jax.typing import ArrayLike

from .config import get_dtype
from .constants import JD_MJD_OFFSET

# TT - TAI offset in seconds (constant by definition)
TT_TAI: float = 32.184

# Leap second table: (MJD of introduction, TAI-UTC in seconds)
# Source: IERS Bulletin C (1972-01-01 through 2017-01-01).
_LEAP_SECOND_TABLE: tuple[tuple[float, float], ...] = (
    (41317.0, 10.0),  # 1972-01-01
    (41499.0, 11.0),  # 1972-07-01
    (41683.0, 12.0),  # 1973-01-01
    (42048.0, 13.0),  # 1974-01-01
    (42413.0, 14.0),  # 1975-01-01
    (42778.0, 15.0),  # 1976-01-01
    (43144.0, 16.0),  # 1977-01-01
    (43509.0, 17.0),  # 1978-01-01
    (43874.0, 18.0),  # 1979-01-01
    (44239.0, 19.0),  # 1980-01-01
    (44786.0, 20.0),  # 1981-07-01
    (45151.0, 21.0),  # 1982-01-01
    (45516.0, 22.0),  # 1983-07-01
    (46247.0, 23.0),  # 1985-07-01
    (47161.0, 24.0),  # 1988-01-01
    (47892.0, 25.0),  # 1990-01-01
    (48257.0, 26.0),  # 1991-01-01
    (48804.0, 27.0),  # 1992-07-01
    (49169.0, 28.0),  # 1993-07-01
    (49534.0, 29.0),  # 1994-07-01
    (50083.0, 30.0),  # 1996-01-01
    (50630.0, 31.0),  # 1997-07-01
    (51179.0, 32.0),  # 1999-01-01
    (53736.0, 33.0),  # 2006-01-01
    (54832.0, 34.0),  # 2009-01-01
    (56109.0, 35.0),  # 2012-07-01
    (57204.0, 36.0),  # 2015-07-01
    (57754.0, 37.0),  # 2017-01-01
)


def leap_seconds_tai_utc(mjd: ArrayLike) -> jax.Array:
    """Return TAI-UTC (cumulative leap seconds) for a given UTC MJD.

    Dates before 1972 return 10.0 and dates after the last table entry
    return the most recent value (37.0).

    Args:
        mjd: Modified Julian Date (UTC), scalar or array.

    Returns:
        TAI-UTC in seconds.
    """
    mjd = jnp.asarray(mjd, dtype=get_dtype())
    mjd_breaks = jnp.array([m for m, _ in _LEAP_SECOND_TABLE], dtype=get_dtype())
    tai_utc_vals = jnp.array([v for _, v in _LEAP_SECOND_TABLE], dtype=get_dtype())

    # idx - 1 is the last entry <= mjd
    idx = jnp.searchsorted(mjd_breaks, mjd, side="right")
    return jnp.where(idx == 0, get_dtype()(10.0), tai_utc_vals[idx - 1])


def tt_minus_utc(mjd: ArrayLike) -> jax.Array:
    """Return TT-UTC in seconds for a given UTC MJD.

    Args:
        mjd: Modified Julian Date (UTC), scalar or array.

    Returns:
        TT-UTC in seconds (leap seconds plus 32.184 s).
    """
    return leap_seconds_tai_utc(mjd) + TT_TAI


def caldate_to_mjd(
    year: ArrayLike,
    month: ArrayLike,
    day: ArrayLike,
    hour: ArrayLike = 0,
    minute: ArrayLike = 0,
    second: ArrayLike = 0.0,
) -> jax.Array:
    """Convert a Gregorian calendar date to Modified Julian Date.

    Only valid from year 1583 onward.

    Args:
        year (ArrayLike): Year of the calendar date.
        month (ArrayLike): Month of the calendar date.
        day (ArrayLike): Day of the calendar date.
        hour (ArrayLike): Hour of the calendar date. Default: ``0``
        minute (ArrayLike): Minute of the calendar date. Default: ``0``
        second (ArrayLike): Second of the calendar date. Default: ``0.0``

    Returns:
        Modified Julian Date.

    References:

        1. Montenbruck, O., & Gill, E. (2012). *Satellite Orbits: Models, Methods and Applications*. Springer Science & Business Media.
    """
    is_jan_or_feb = month <= 2
    year = jnp.where(is_jan_or_feb, year - 1, year)
    month = jnp.where(is_jan_or_feb, month + 12, month)

    leap_days = jnp.floor(year / 400) - jnp.floor(year / 100) + jnp.floor(year / 4)
    mjd = 365 * year - 679004 + leap_days + jnp.floor(30.6001 * (month + 1)) + day

    frac_day = (hour + (minute + second / 60.0) / 60.0) / 24.0
    return jnp.asarray(mjd, dtype=get_dtype()) + frac_day


def mjd_to_caldate(mjd: ArrayLike) -> tuple[jax.Array, jax.Array, jax.Array]:
    """Convert the integer part of a Modified Julian Date to a calendar day.

    Args:
        mjd (ArrayLike): Modified Julian Date. The fraction of day is ignored.

    Returns:
        tuple[jax.Array, jax.Array, jax.Array]: ``(year, month, day)`` as int32.

    References:

        1. O. Montenbruck, and E. Gill, *Satellite Orbits: Models, Methods and
           Applications*, 2012, p. 322.
    """
    # Integer arithmetic on the civil day number avoids float rounding
    z = jnp.floor(jnp.asarray(mjd)).astype(jnp.int32) + jnp.int32(
        int(JD_MJD_OFFSET + 0.5)
    )
    alpha = (100 * z - 186721625) // 3652425
    a = jnp.where(z < 2299161, z, z + 1 + alpha - alpha // 4)

    b = a + 1524
    c = (100 * b - 12210) // 36525
    d = (36525 * c) // 100
    e = ((b - d) * 10000) // 306001

    day = b - d - (306001 * e) // 10000
    month = jnp.where(e < 14, e - 1, e - 13)
    year = jnp.where(month > 2, c - 4716, c - 4715)
    return year, month, day
