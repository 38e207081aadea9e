"""Nutation series coefficient tables.

A :class:`NutationSeries` is plain data: integer multipliers of the
fundamental arguments plus the amplitude columns of every term. The
nutation routines in :mod:`astroframes.sofa` evaluate whichever series is
installed for a theory.

Row layout follows the SOFA tables:

- luni-solar rows have 11 columns, the multipliers of
  ``(l, l', F, D, Om)`` followed by ``(sp, spt, cp, ce, cet, se)`` so that
  ``dpsi = (sp + spt*t)*sin(a) + cp*cos(a)`` and
  ``deps = (ce + cet*t)*cos(a) + se*sin(a)``;
- planetary rows have 17 columns, 13 argument multipliers followed by
  ``(sp, cp, se, ce)``.

The built-in tables carry only the dominant luni-solar terms of each
theory. They reproduce the full models to a few tens of milliarcseconds
(0.1 arcsecond at worst). Install the complete IERS tables with
:meth:`NutationSeries.from_file` and :func:`set_nutation_series` when
milliarcsecond accuracy matters.
"""

from __future__ import annotations

import enum
import logging
import threading
from dataclasses import dataclass
from pathlib import Path

import jax.numpy as jnp
from jax import Array

from astroframes.config import get_dtype
from astroframes.constants import AS2RAD

logger = logging.getLogger(__name__)

_LUNI_SOLAR_COLUMNS = 11
_PLANETARY_COLUMNS = 17


class NutationTheory(enum.Enum):
    """Nutation theories with a pluggable coefficient table."""

    IAU_1980 = "IAU_1980"
    IAU_2000 = "IAU_2000"


@dataclass(frozen=True)
class NutationSeries:
    """Coefficient table of a nutation theory.

    Attributes:
        luni_solar: Rows of 11 numbers (5 multipliers, 6 amplitudes).
        planetary: Rows of 17 numbers (13 multipliers, 4 amplitudes).
        unit: Radians per amplitude unit.
    """

    luni_solar: tuple[tuple[float, ...], ...]
    planetary: tuple[tuple[float, ...], ...] = ()
    unit: float = AS2RAD * 1e-7

    def __post_init__(self) -> None:
        for row in self.luni_solar:
            if len(row) != _LUNI_SOLAR_COLUMNS:
                raise ValueError(
                    f"Luni-solar nutation rows need {_LUNI_SOLAR_COLUMNS} columns, got {len(row)}"
                )
        for row in self.planetary:
            if len(row) != _PLANETARY_COLUMNS:
                raise ValueError(
                    f"Planetary nutation rows need {_PLANETARY_COLUMNS} columns, got {len(row)}"
                )

    @property
    def size(self) -> int:
        """Total number of terms."""
        return len(self.luni_solar) + len(self.planetary)

    @classmethod
    def from_file(cls, filepath: str | Path, unit: float = AS2RAD * 1e-7) -> NutationSeries:
        """Read a coefficient table from a whitespace-separated text file.

        Blank lines and lines starting with ``#`` are ignored. Rows with 11
        values are luni-solar terms, rows with 17 values planetary terms.

        Args:
            filepath: Path to the table.
            unit: Radians per amplitude unit (default 0.1 microarcsecond).

        Returns:
            NutationSeries: The parsed table.

        Raises:
            FileNotFoundError: If *filepath* does not exist.
            ValueError: If a row has an unexpected number of columns.
        """
        filepath = Path(filepath)
        luni_solar = []
        planetary = []
        with open(filepath) as f:
            for lineno, line in enumerate(f, start=1):
                line = line.strip()
                if not line or line.startswith("#"):
                    continue
                values = tuple(float(v) for v in line.split())
                if len(values) == _LUNI_SOLAR_COLUMNS:
                    luni_solar.append(values)
                elif len(values) == _PLANETARY_COLUMNS:
                    planetary.append(values)
                else:
                    raise ValueError(
                        f"{filepath}:{lineno}: expected {_LUNI_SOLAR_COLUMNS} or "
                        f"{_PLANETARY_COLUMNS} columns, got {len(values)}"
                    )
        logger.info(
            "Read nutation series from %s (%d luni-solar, %d planetary terms)",
            filepath, len(luni_solar), len(planetary),
        )
        return cls(tuple(luni_solar), tuple(planetary), unit)

    def evaluate(self, t: Array, delaunay: Array, planetary_args: Array | None = None) -> tuple[Array, Array]:
        """Sum the series.

        Args:
            t: TT Julian centuries since J2000.0.
            delaunay: Fundamental arguments ``(l, l', F, D, Om)`` in radians.
            planetary_args: The 13 planetary arguments in radians. Ignored
                when the table has no planetary terms.

        Returns:
            tuple[Array, Array]: ``(dpsi, deps)`` in radians.
        """
        dtype = get_dtype()
        ls = jnp.array(self.luni_solar, dtype=dtype)
        args = ls[:, :5] @ delaunay
        sin_a = jnp.sin(args)
        cos_a = jnp.cos(args)
        dpsi = jnp.sum((ls[:, 5] + ls[:, 6] * t) * sin_a + ls[:, 7] * cos_a)
        deps = jnp.sum((ls[:, 8] + ls[:, 9] * t) * cos_a + ls[:, 10] * sin_a)

        if self.planetary and planetary_args is not None:
            pl = jnp.array(self.planetary, dtype=dtype)
            pl_args = pl[:, :13] @ planetary_args
            pl_sin = jnp.sin(pl_args)
            pl_cos = jnp.cos(pl_args)
            dpsi = dpsi + jnp.sum(pl[:, 13] * pl_sin + pl[:, 14] * pl_cos)
            deps = deps + jnp.sum(pl[:, 15] * pl_sin + pl[:, 16] * pl_cos)

        return dpsi * self.unit, deps * self.unit


# fmt: off
# IAU 1980 theory, ten largest terms. Amplitudes in 0.0001 arcsec, stored as
# (sp, spt, cp, ce, cet, se) with the unused cosine/sine columns set to zero.
_IAU_1980_TERMS = (
    (0, 0, 0,  0, 1, -171996.0, -174.2, 0.0, 92025.0,  8.9, 0.0),
    (0, 0, 2, -2, 2,  -13187.0,   -1.6, 0.0,  5736.0, -3.1, 0.0),
    (0, 0, 2,  0, 2,   -2274.0,   -0.2, 0.0,   977.0, -0.5, 0.0),
    (0, 0, 0,  0, 2,    2062.0,    0.2, 0.0,  -895.0,  0.5, 0.0),
    (0, 1, 0,  0, 0,    1426.0,   -3.4, 0.0,    54.0, -0.1, 0.0),
    (1, 0, 0,  0, 0,     712.0,    0.1, 0.0,    -7.0,  0.0, 0.0),
    (0, 1, 2, -2, 2,    -517.0,    1.2, 0.0,   224.0, -0.6, 0.0),
    (0, 0, 2,  0, 1,    -386.0,   -0.4, 0.0,   200.0,  0.0, 0.0),
    (1, 0, 2,  0, 2,    -301.0,    0.0, 0.0,   129.0, -0.1, 0.0),
    (0, -1, 2, -2, 2,    217.0,   -0.5, 0.0,   -95.0,  0.3, 0.0),
)

# IAU 2000A luni-solar theory, ten largest terms. Amplitudes in 0.1 microarcsec.
_IAU_2000_TERMS = (
    (0, 0, 0,  0, 1, -172064161.0, -174666.0,  33386.0, 92052331.0,  9086.0, 15377.0),
    (0, 0, 2, -2, 2,  -13170906.0,   -1675.0, -13696.0,  5730336.0, -3015.0, -4587.0),
    (0, 0, 2,  0, 2,   -2276413.0,    -234.0,   2796.0,   978459.0,  -485.0,  1374.0),
    (0, 0, 0,  0, 2,    2074554.0,     207.0,   -698.0,  -897492.0,   470.0,  -291.0),
    (0, 1, 0,  0, 0,    1475877.0,   -3633.0,  11817.0,    73871.0,  -184.0, -1924.0),
    (0, 1, 2, -2, 2,    -516821.0,    1226.0,   -524.0,   224386.0,  -677.0,  -174.0),
    (1, 0, 0,  0, 0,     711159.0,      73.0,   -872.0,    -6750.0,     0.0,   358.0),
    (0, 0, 2,  0, 1,    -387298.0,    -367.0,    380.0,   200728.0,    18.0,   318.0),
    (1, 0, 2,  0, 2,    -301461.0,     -36.0,    816.0,   129025.0,   -63.0,   367.0),
    (0, -1, 2, -2, 2,    215829.0,    -494.0,    111.0,   -95929.0,   299.0,   132.0),
)
# fmt: on

_DEFAULT_SERIES = {
    NutationTheory.IAU_1980: NutationSeries(_IAU_1980_TERMS, unit=AS2RAD * 1e-4),
    NutationTheory.IAU_2000: NutationSeries(_IAU_2000_TERMS, unit=AS2RAD * 1e-7),
}

_lock = threading.Lock()
_installed = dict(_DEFAULT_SERIES)


def get_nutation_series(theory: NutationTheory) -> NutationSeries:
    """Return the coefficient table currently installed for *theory*."""
    with _lock:
        return _installed[theory]


def set_nutation_series(theory: NutationTheory, series: NutationSeries | None) -> None:
    """Install a coefficient table for *theory*.

    Frames already built keep the values they have cached; install tables
    before requesting frames.

    Args:
        theory: Nutation theory to replace.
        series: New table, or ``None`` to restore the built-in truncated one.
    """
    with _lock:
        _installed[theory] = series if series is not None else _DEFAULT_SERIES[theory]
    logger.info("Installed %s nutation series for %s",
                "built-in" if series is None else f"{series.size}-term", theory.value)
