"""IERS conventions and the Earth orientation models they select.

:class:`IERSConventions` dispatches every precession, nutation and
sidereal-time computation the frame providers need to the SOFA-derived
routine of the chosen convention:

- **IERS 1996**: IAU 1976 precession, IAU 1980 nutation, GMST82 and the
  1994 equation of the equinoxes.
- **IERS 2003**: IAU 1976 precession with the IAU 2000 rate corrections,
  IAU 2000A nutation, GMST00 and the IAU 2000 equation of the equinoxes.
- **IERS 2010**: IAU 2006 precession, IAU 2006/2000A nutation and GMST06.

All dates are Modified Julian Dates; ``mjd_tt`` is in TT and ``mjd_ut1``
in UT1. Results are radians.
"""

from __future__ import annotations

import enum
from typing import TYPE_CHECKING

from jax import Array

from astroframes import sofa
from astroframes.nutation import NutationTheory
from astroframes.sofa import MJD_ZERO
from astroframes.utils import from_radians

if TYPE_CHECKING:
    from astroframes.eop._converters import NutationCorrectionConverter
    from astroframes.eop._tidal import TidalCorrection


class IERSConventions(enum.Enum):
    """IERS conventions selecting the Earth orientation models."""

    IERS_1996 = "IERS_1996"
    IERS_2003 = "IERS_2003"
    IERS_2010 = "IERS_2010"

    def nutation_theory(self) -> NutationTheory:
        """Return the nutation theory whose coefficient table this convention uses."""
        if self is IERSConventions.IERS_1996:
            return NutationTheory.IAU_1980
        return NutationTheory.IAU_2000

    def mean_obliquity(self, mjd_tt: float, use_degrees: bool = False) -> Array:
        """Mean obliquity of the ecliptic of date.

        Args:
            mjd_tt: TT Modified Julian Date.
            use_degrees: Return degrees instead of radians.

        Returns:
            Mean obliquity.
        """
        if self is IERSConventions.IERS_1996:
            eps = sofa.obl80(MJD_ZERO, mjd_tt)
        elif self is IERSConventions.IERS_2003:
            _, depspr = sofa.pr00(MJD_ZERO, mjd_tt)
            eps = sofa.obl80(MJD_ZERO, mjd_tt) + depspr
        else:
            eps = sofa.obl06(MJD_ZERO, mjd_tt)
        return from_radians(eps, use_degrees)

    def precession_angles(self, mjd_tt: float) -> tuple[Array, Array, Array, float]:
        """Canonical precession angles ``(psi_A, omega_A, chi_A, eps_0)``.

        Args:
            mjd_tt: TT Modified Julian Date.

        Returns:
            tuple: Luni-solar precession, inclination of the mean equator on
                the J2000 ecliptic, planetary precession and J2000 obliquity.
        """
        if self is IERSConventions.IERS_2010:
            psia, oma, chia = sofa.pa03(MJD_ZERO, mjd_tt)
            return psia, oma, chia, sofa.EPS0_2006
        psia, oma, chia = sofa.pa77(MJD_ZERO, mjd_tt)
        return psia, oma, chia, sofa.EPS0_1977

    def precession_matrix(self, mjd_tt: float) -> Array:
        """Precession matrix, mean equator of J2000 to mean equator of date.

        Args:
            mjd_tt: TT Modified Julian Date.

        Returns:
            3x3 rotation matrix (EME2000 -> MOD).
        """
        if self is IERSConventions.IERS_1996:
            return sofa.pmat76(MJD_ZERO, mjd_tt)
        if self is IERSConventions.IERS_2003:
            return sofa.pmat00(MJD_ZERO, mjd_tt)
        return sofa.pmat06(MJD_ZERO, mjd_tt)

    def nutation(self, mjd_tt: float) -> tuple[Array, Array]:
        """Nutation in longitude and obliquity ``(dpsi, deps)``.

        Args:
            mjd_tt: TT Modified Julian Date.

        Returns:
            tuple[Array, Array]: Nutation angles in radians.
        """
        if self is IERSConventions.IERS_1996:
            return sofa.nut80(MJD_ZERO, mjd_tt)
        if self is IERSConventions.IERS_2003:
            return sofa.nut00a(MJD_ZERO, mjd_tt)
        return sofa.nut06a(MJD_ZERO, mjd_tt)

    def equation_of_equinoxes(self, mjd_tt: float, dpsi: Array) -> Array:
        """Equation of the equinoxes for a given nutation in longitude.

        Args:
            mjd_tt: TT Modified Julian Date.
            dpsi: Nutation in longitude, possibly EOP-corrected [radians].

        Returns:
            Equation of the equinoxes in radians.
        """
        if self is IERSConventions.IERS_1996:
            return sofa.eqeq94(MJD_ZERO, mjd_tt, dpsi)
        return sofa.ee00(MJD_ZERO, mjd_tt, self.mean_obliquity(mjd_tt), dpsi)

    def gmst(self, mjd_ut1: float, mjd_tt: float) -> Array:
        """Greenwich mean sidereal time.

        Args:
            mjd_ut1: UT1 Modified Julian Date.
            mjd_tt: TT Modified Julian Date.

        Returns:
            GMST in radians (0 to 2*pi).
        """
        if self is IERSConventions.IERS_1996:
            return sofa.gmst82(MJD_ZERO, mjd_ut1)
        if self is IERSConventions.IERS_2003:
            return sofa.gmst00(MJD_ZERO, mjd_ut1, MJD_ZERO, mjd_tt)
        return sofa.gmst06(MJD_ZERO, mjd_ut1, MJD_ZERO, mjd_tt)

    def bpn_matrix(self, mjd_tt: float) -> Array:
        """Bias-precession-nutation matrix, GCRF to true equator of date.

        Args:
            mjd_tt: TT Modified Julian Date.

        Returns:
            3x3 rotation matrix.
        """
        if self is IERSConventions.IERS_2010:
            return sofa.pnm06a(MJD_ZERO, mjd_tt)
        dpsi, deps = self.nutation(mjd_tt)
        rn = sofa.numat(self.mean_obliquity(mjd_tt), dpsi, deps)
        return rn @ self.precession_matrix(mjd_tt) @ sofa.bias_matrix()

    def cip_xys(self, mjd_tt: float) -> tuple[Array, Array, Array]:
        """Celestial Intermediate Pole coordinates and CIO locator.

        Args:
            mjd_tt: TT Modified Julian Date.

        Returns:
            tuple: ``(X, Y, s)`` in radians.
        """
        if self is IERSConventions.IERS_2010:
            return sofa.xys06a(MJD_ZERO, mjd_tt)
        x, y = sofa.bpn2xy(self.bpn_matrix(mjd_tt))
        return x, y, sofa.s06(MJD_ZERO, mjd_tt, x, y)

    def tio_locator(self, mjd_tt: float) -> Array:
        """TIO locator s' in radians."""
        return sofa.sp00(MJD_ZERO, mjd_tt)

    def nutation_correction_converter(self) -> NutationCorrectionConverter:
        """Return the converter between dX/dY and ddpsi/ddeps for this convention."""
        from astroframes.eop._converters import NutationCorrectionConverter

        return NutationCorrectionConverter(self)

    def tidal_correction(self) -> TidalCorrection:
        """Return the short-period tidal EOP correction model for this convention."""
        from astroframes.eop._tidal import get_tidal_correction

        return get_tidal_correction(self)
