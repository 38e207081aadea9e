"""Short-period tidal corrections to Earth Orientation Parameters.

Published EOP series are smoothed daily values: the diurnal and
semi-diurnal ocean tide effects on polar motion and UT1 are removed and
must be added back when interpolating (``simple_eop=False``). Each term
of the model is a sinusoid of an argument built from ``GMST + pi`` and the
five Delaunay arguments.

The built-in table carries only the four principal constituents (O1, K1,
M2, S2) with amplitudes of the right order of magnitude (tenths of a
milliarcsecond, tens of microseconds). Build a :class:`TidalCorrection`
from the full IERS table and install it with :func:`set_tidal_correction`
for precise work.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import TYPE_CHECKING

import jax
import jax.numpy as jnp
from jax import Array

from astroframes import sofa
from astroframes.config import get_dtype
from astroframes.constants import AS2RAD
from astroframes.time import tt_minus_utc

if TYPE_CHECKING:
    from astroframes.conventions import IERSConventions

logger = logging.getLogger(__name__)

# Amplitude units
_UAS2RAD = AS2RAD * 1e-6
_US2S = 1e-6


@dataclass(frozen=True)
class TidalTerm:
    """One constituent of the tidal EOP model.

    Attributes:
        multipliers: Multipliers of ``(GMST + pi, l, l', F, D, Om)``.
        x_sin: Polar motion x sine amplitude [uas].
        x_cos: Polar motion x cosine amplitude [uas].
        y_sin: Polar motion y sine amplitude [uas].
        y_cos: Polar motion y cosine amplitude [uas].
        ut1_sin: UT1 sine amplitude [us].
        ut1_cos: UT1 cosine amplitude [us].
    """

    multipliers: tuple[int, int, int, int, int, int]
    x_sin: float
    x_cos: float
    y_sin: float
    y_cos: float
    ut1_sin: float
    ut1_cos: float


def _arguments(mjd: Array, tt_offset: float) -> Array:
    """Tidal arguments ``(GMST + pi, l, l', F, D, Om)`` at a UTC MJD."""
    mjd_tt = mjd + tt_offset
    t = ((sofa.MJD_ZERO - sofa.DJ00) + mjd_tt) / sofa.DJC
    return jnp.array([
        sofa.gmst82(sofa.MJD_ZERO, mjd) + jnp.pi,
        sofa.fal03(t),
        sofa.falp03(t),
        sofa.faf03(t),
        sofa.fad03(t),
        sofa.faom03(t),
    ])


class TidalCorrection:
    """Diurnal and semi-diurnal tidal model for polar motion and UT1.

    Args:
        terms: Model constituents.
    """

    def __init__(self, terms: tuple[TidalTerm, ...]) -> None:
        self._terms = tuple(terms)
        self._multipliers = tuple(term.multipliers for term in self._terms)
        self._amplitudes = tuple(
            (term.x_sin, term.x_cos, term.y_sin, term.y_cos, term.ut1_sin, term.ut1_cos)
            for term in self._terms
        )

    @property
    def terms(self) -> tuple[TidalTerm, ...]:
        """Model constituents."""
        return self._terms

    def corrections(self, mjd: float) -> tuple[float, float, float, float]:
        """Evaluate the tidal corrections at a date.

        Args:
            mjd: UTC Modified Julian Date.

        Returns:
            tuple: ``(dx_p [rad], dy_p [rad], dut1 [s], dlod [s])``.
        """
        if not self._terms:
            return 0.0, 0.0, 0.0, 0.0

        dtype = get_dtype()
        mjd = jnp.asarray(mjd, dtype=dtype)
        tt_offset = float(tt_minus_utc(mjd)) / 86400.0
        args, args_rate = jax.jvp(
            lambda m: _arguments(m, tt_offset), (mjd,), (jnp.ones_like(mjd),)
        )

        mult = jnp.array(self._multipliers, dtype=dtype)
        amp = jnp.array(self._amplitudes, dtype=dtype)
        theta = mult @ args
        theta_rate = mult @ args_rate  # rad/day
        s = jnp.sin(theta)
        c = jnp.cos(theta)

        dx = jnp.sum(amp[:, 0] * s + amp[:, 1] * c) * _UAS2RAD
        dy = jnp.sum(amp[:, 2] * s + amp[:, 3] * c) * _UAS2RAD
        dut1 = jnp.sum(amp[:, 4] * s + amp[:, 5] * c) * _US2S
        # LOD excess is minus the UT1 drift per day
        dlod = -jnp.sum((amp[:, 4] * c - amp[:, 5] * s) * theta_rate) * _US2S
        return float(dx), float(dy), float(dut1), float(dlod)


# fmt: off
_PRINCIPAL_TERMS = (
    TidalTerm((1, 0, 0, -2, 0, -2), -26.0,   6.0,  -6.0, -26.0,  -8.0,  22.0),  # O1
    TidalTerm((1, 0, 0,  0, 0,  0),  -7.0, -29.0,  29.0,  -7.0,  -6.0,  19.0),  # K1
    TidalTerm((2, 0, 0, -2, 0, -2),  50.0, 260.0, -60.0, 240.0, -18.0,  -5.0),  # M2
    TidalTerm((2, 0, 0, -2, 2, -2),  10.0, 100.0, -20.0,  90.0,  -8.0,  -1.0),  # S2
)
# fmt: on

_lock = threading.Lock()
_default = TidalCorrection(_PRINCIPAL_TERMS)
_installed: dict[object, TidalCorrection] = {}


def get_tidal_correction(conventions: IERSConventions) -> TidalCorrection:
    """Return the tidal model installed for *conventions* (built-in by default)."""
    with _lock:
        return _installed.get(conventions, _default)


def set_tidal_correction(conventions: IERSConventions, correction: TidalCorrection | None) -> None:
    """Install a tidal model for *conventions*.

    Histories already built keep the model they were built with.

    Args:
        conventions: Convention to configure.
        correction: Model to use, or ``None`` to restore the built-in one.
    """
    with _lock:
        if correction is None:
            _installed.pop(conventions, None)
        else:
            _installed[conventions] = correction
    logger.info("Installed tidal EOP model for %s", conventions.value)
