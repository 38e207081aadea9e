"""Conversion between the two bases of celestial pole corrections.

EOP files for the equinox-based IAU 1980 theory publish corrections to the
nutation angles (``ddpsi``, ``ddeps``); files for the CIO-based IAU 2000
theory publish offsets of the Celestial Intermediate Pole (``dX``,
``dY``). Each history stores both, so loaders convert whichever pair they
read with the converter of the history's convention.

References:

    1. G. Petit and B. Luzum, *IERS Technical Note 36*, 2010, eq. 5.25.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

from astroframes.time import tt_minus_utc

if TYPE_CHECKING:
    from astroframes.conventions import IERSConventions


class NutationCorrectionConverter:
    """Convert nutation corrections for one IERS convention.

    The relation used, with ``c = psi_A cos(eps_0) - chi_A`` evaluated at
    the entry date::

        dX = ddpsi sin(eps_A) + c ddeps
        dY = ddeps - c ddpsi sin(eps_A)

    Args:
        conventions: Convention providing the precession angles and the
            mean obliquity.
    """

    def __init__(self, conventions: IERSConventions) -> None:
        self._conventions = conventions

    @property
    def conventions(self) -> IERSConventions:
        """Convention the converter was built for."""
        return self._conventions

    def _coefficients(self, mjd: float) -> tuple[float, float]:
        mjd_tt = mjd + float(tt_minus_utc(mjd)) / 86400.0
        psia, _, chia, eps0 = self._conventions.precession_angles(mjd_tt)
        sin_eps = math.sin(float(self._conventions.mean_obliquity(mjd_tt)))
        c = float(psia) * math.cos(eps0) - float(chia)
        return sin_eps, c

    def to_nonrotating(self, mjd: float, ddpsi: float, ddeps: float) -> tuple[float, float]:
        """Convert equinox-based corrections to CIP offsets.

        Args:
            mjd: UTC Modified Julian Date of the correction.
            ddpsi: Correction to nutation in longitude [rad].
            ddeps: Correction to nutation in obliquity [rad].

        Returns:
            tuple[float, float]: ``(dX, dY)`` [rad].
        """
        sin_eps, c = self._coefficients(mjd)
        return sin_eps * ddpsi + c * ddeps, ddeps - c * sin_eps * ddpsi

    def to_equinox(self, mjd: float, dx: float, dy: float) -> tuple[float, float]:
        """Convert CIP offsets to equinox-based corrections.

        Args:
            mjd: UTC Modified Julian Date of the correction.
            dx: Celestial pole offset dX [rad].
            dy: Celestial pole offset dY [rad].

        Returns:
            tuple[float, float]: ``(ddpsi, ddeps)`` [rad].
        """
        sin_eps, c = self._coefficients(mjd)
        det = 1.0 + c * c
        return (dx - c * dy) / (sin_eps * det), (c * dx + dy) / det
