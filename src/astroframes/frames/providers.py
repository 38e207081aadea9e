"""Transform providers realizing the physical models between frames.

A transform provider computes, for any date, the :class:`Transform` from
a frame's parent to the frame itself. Each provider here is a pure
function of the date plus an optional bound
:class:`~astroframes.eop.EOPHistory`:

- **EME2000Provider**: GCRF -> EME2000, constant frame bias.
- **MODProvider**: EME2000 (or GCRF) -> MOD, precession.
- **TODProvider**: MOD -> TOD, nutation.
- **GTODProvider**: TOD -> GTOD, Greenwich apparent sidereal time.
- **TEMEProvider**: TOD -> TEME, equation of the equinoxes.
- **VEISProvider**: GTOD -> Veis 1950, Veis sidereal time.
- **EclipticProvider**: MOD -> mean ecliptic of date, mean obliquity.
- **CIRFProvider**: GCRF -> CIRF, CIP coordinates and CIO locator.
- **TIRFProvider**: CIRF -> TIRF, Earth Rotation Angle.
- **ITRFProvider**: TIRF -> ITRF, polar motion and TIO locator.
- **ITRFEquinoxProvider**: GTOD -> ITRF, polar motion only.
- **FixedTransformProvider**: any constant transform.

Slow models (precession, nutation, polar motion) return a zero rotation
rate: the interpolating provider wrapping them derives the rate from its
samples. EOP corrections are read with ``EOPExtrapolation.ZERO``, so a
date outside the EOP data range uses uncorrected models. A provider built
without EOP history uses zero corrections and UT1 = UTC.

Uses routines and computations derived from software provided by SOFA
under license. Does not itself constitute software provided by and/or
endorsed by SOFA.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, Protocol, runtime_checkable

import jax.numpy as jnp

from astroframes import sofa
from astroframes.attitude_representations import Rx, Rz
from astroframes.config import get_dtype
from astroframes.constants import JULIAN_DAY, OMEGA_EARTH
from astroframes.conventions import IERSConventions
from astroframes.epoch import Epoch
from astroframes.eop._history import EOPHistory
from astroframes.eop._types import EOPExtrapolation
from astroframes.frames.transform import Transform
from astroframes.sofa import MJD_ZERO

if TYPE_CHECKING:
    from jax import Array

# Veis sidereal time model, from the 1950-01-01 UTC reference
_VST0 = 1.746647708617871
_VST1 = 0.17202179573714597e-1
_VSTD = 7.292115146705209e-5
_VEIS_REFERENCE = Epoch(1950, 1, 1)


@runtime_checkable
class TransformProvider(Protocol):
    """Protocol for objects computing a parent-to-frame transform."""

    def get_transform(self, date: Epoch) -> Transform:
        """Return the transform from the parent frame to the frame at *date*."""
        ...


def _z_rate(rate: float) -> Array:
    return jnp.array([0.0, 0.0, rate], dtype=get_dtype())


class _EOPBoundProvider:
    """Shared time scale handling for providers reading EOP data."""

    def __init__(self, conventions: IERSConventions, eop_history: EOPHistory | None = None) -> None:
        self._conventions = conventions
        self._eop_history = eop_history

    @property
    def conventions(self) -> IERSConventions:
        """IERS convention of the models."""
        return self._conventions

    @property
    def eop_history(self) -> EOPHistory | None:
        """Bound EOP history, ``None`` when corrections are ignored."""
        return self._eop_history

    def _ut1(self, date: Epoch) -> tuple[float, float]:
        """Return ``(mjd_ut1, lod)`` at *date*."""
        if self._eop_history is None:
            return date.mjd(), 0.0
        entry = self._eop_history.get_entry(date, EOPExtrapolation.ZERO)
        return date.mjd() + entry.ut1_utc / JULIAN_DAY, entry.lod

    def _corrected_nutation(self, date: Epoch, mjd_tt: float) -> tuple[Array, Array]:
        dpsi, deps = self._conventions.nutation(mjd_tt)
        if self._eop_history is not None:
            ddpsi, ddeps = self._eop_history.get_equinox_nutation_correction(
                date, EOPExtrapolation.ZERO
            )
            dpsi = dpsi + ddpsi
            deps = deps + ddeps
        return dpsi, deps


class FixedTransformProvider:
    """Provider returning the same transform at every date.

    Args:
        transform: Constant transform. Its date is replaced by the query
            date.
    """

    def __init__(self, transform: Transform) -> None:
        self._transform = transform

    def get_transform(self, date: Epoch) -> Transform:
        return self._transform.with_date(date)


class EME2000Provider(FixedTransformProvider):
    """GCRF to EME2000: the IAU 2000 frame bias."""

    def __init__(self) -> None:
        super().__init__(Transform.from_rotation_matrix(None, sofa.bias_matrix()))


class MODProvider:
    """Mean equator and equinox of date: precession.

    Args:
        conventions: Convention selecting the precession model.
    """

    def __init__(self, conventions: IERSConventions) -> None:
        self._conventions = conventions

    @property
    def conventions(self) -> IERSConventions:
        return self._conventions

    def get_transform(self, date: Epoch) -> Transform:
        matrix = self._conventions.precession_matrix(date.mjd_tt())
        return Transform.from_rotation_matrix(date, matrix)


class TODProvider(_EOPBoundProvider):
    """True equator and equinox of date: nutation, with EOP corrections.

    Args:
        conventions: Convention selecting the nutation model.
        eop_history: EOP history providing ``ddpsi``/``ddeps``, or ``None``.
    """

    def get_transform(self, date: Epoch) -> Transform:
        mjd_tt = date.mjd_tt()
        dpsi, deps = self._corrected_nutation(date, mjd_tt)
        eps = self._conventions.mean_obliquity(mjd_tt)
        return Transform.from_rotation_matrix(date, sofa.numat(eps, dpsi, deps))


class GTODProvider(_EOPBoundProvider):
    """Greenwich true of date: rotation by the apparent sidereal time.

    Args:
        conventions: Convention selecting GMST and the equation of the
            equinoxes.
        eop_history: EOP history providing UT1-UTC, LOD and nutation
            corrections, or ``None``.
    """

    def gast(self, date: Epoch) -> Array:
        """Greenwich apparent sidereal time at *date* [rad]."""
        mjd_tt = date.mjd_tt()
        mjd_ut1, _ = self._ut1(date)
        dpsi, _ = self._corrected_nutation(date, mjd_tt)
        gmst = self._conventions.gmst(mjd_ut1, mjd_tt)
        return sofa.anp(gmst + self._conventions.equation_of_equinoxes(mjd_tt, dpsi))

    def get_transform(self, date: Epoch) -> Transform:
        _, lod = self._ut1(date)
        rate = OMEGA_EARTH * (1.0 - lod / JULIAN_DAY)
        return Transform.from_rotation_matrix(date, Rz(self.gast(date)), _z_rate(rate))


class TEMEProvider(_EOPBoundProvider):
    """True equator, mean equinox: rotation by the equation of the equinoxes.

    Args:
        conventions: Convention selecting the nutation model.
        eop_history: EOP history providing nutation corrections, or ``None``.
    """

    def get_transform(self, date: Epoch) -> Transform:
        mjd_tt = date.mjd_tt()
        dpsi, _ = self._corrected_nutation(date, mjd_tt)
        eqe = self._conventions.equation_of_equinoxes(mjd_tt, dpsi)
        return Transform.from_rotation_matrix(date, Rz(eqe))


class VEISProvider:
    """Veis 1950 frame, from GTOD without EOP corrections.

    The frame rotates from GTOD by the Veis sidereal time, a linear model
    of UTC days since 1950-01-01.
    """

    def vst(self, date: Epoch) -> float:
        """Veis sidereal time at *date* [rad]."""
        ttd = (date - _VEIS_REFERENCE) / JULIAN_DAY
        tut = ttd - math.floor(ttd)
        return math.fmod(_VST0 + _VST1 * ttd + 2.0 * math.pi * tut, 2.0 * math.pi)

    def get_transform(self, date: Epoch) -> Transform:
        return Transform.from_rotation_matrix(date, Rz(-self.vst(date)), _z_rate(-_VSTD))


class EclipticProvider:
    """Mean ecliptic and equinox of date, from MOD.

    Args:
        conventions: Convention selecting the mean obliquity model.
    """

    def __init__(self, conventions: IERSConventions) -> None:
        self._conventions = conventions

    @property
    def conventions(self) -> IERSConventions:
        return self._conventions

    def get_transform(self, date: Epoch) -> Transform:
        eps = self._conventions.mean_obliquity(date.mjd_tt())
        return Transform.from_rotation_matrix(date, Rx(eps))


class CIRFProvider(_EOPBoundProvider):
    """Celestial Intermediate Reference Frame, from GCRF.

    Args:
        conventions: Convention selecting the bias-precession-nutation model.
        eop_history: EOP history providing celestial pole offsets, or ``None``.
    """

    def get_transform(self, date: Epoch) -> Transform:
        mjd_tt = date.mjd_tt()
        x, y, s = self._conventions.cip_xys(mjd_tt)
        if self._eop_history is not None:
            dx, dy = self._eop_history.get_nonrotating_origin_nutation_correction(
                date, EOPExtrapolation.ZERO
            )
            x = x + dx
            y = y + dy
        return Transform.from_rotation_matrix(date, sofa.c2ixys(x, y, s))


class TIRFProvider(_EOPBoundProvider):
    """Terrestrial Intermediate Reference Frame: Earth Rotation Angle.

    Args:
        conventions: IERS convention of the frame chain.
        eop_history: EOP history providing UT1-UTC and LOD, or ``None``.
    """

    def era(self, date: Epoch) -> Array:
        """Earth Rotation Angle at *date* [rad]."""
        mjd_ut1, _ = self._ut1(date)
        return sofa.era00(MJD_ZERO, mjd_ut1)

    def get_transform(self, date: Epoch) -> Transform:
        _, lod = self._ut1(date)
        rate = OMEGA_EARTH * (1.0 - lod / JULIAN_DAY)
        return Transform.from_rotation_matrix(date, Rz(self.era(date)), _z_rate(rate))


class ITRFProvider(_EOPBoundProvider):
    """International Terrestrial Reference Frame, from TIRF: polar motion.

    Args:
        conventions: Convention providing the TIO locator.
        eop_history: EOP history providing the pole coordinates, or ``None``.
    """

    def _tio_locator(self, mjd_tt: float) -> Array:
        return self._conventions.tio_locator(mjd_tt)

    def get_transform(self, date: Epoch) -> Transform:
        if self._eop_history is None:
            x_p, y_p = 0.0, 0.0
        else:
            x_p, y_p = self._eop_history.get_pole_correction(date, EOPExtrapolation.ZERO)
        matrix = sofa.pom00(x_p, y_p, self._tio_locator(date.mjd_tt()))
        return Transform.from_rotation_matrix(date, matrix)


class ITRFEquinoxProvider(ITRFProvider):
    """Equinox-based ITRF, from GTOD: polar motion without TIO locator."""

    def _tio_locator(self, mjd_tt: float) -> float:
        return 0.0
