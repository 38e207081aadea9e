"""Tests for astroframes.sofa, astroframes.nutation and astroframes.conventions.

Reference values are those of the SOFA test suite (t_sofa_c.c). Nutation
dependent values carry a looser tolerance: the built-in nutation tables
keep only the dominant terms of each theory.
"""

from __future__ import annotations

import jax.numpy as jnp
import pytest

from astroframes import sofa
from astroframes.constants import AS2RAD
from astroframes.conventions import IERSConventions
from astroframes.nutation import (
    NutationSeries,
    NutationTheory,
    get_nutation_series,
    set_nutation_series,
)
from astroframes.time import leap_seconds_tai_utc, tt_minus_utc

MJD_ZERO = sofa.MJD_ZERO

# Truncated nutation tables reproduce the full theories to well within 0.2 arcsec
NUTATION_TOL = 1e-6


# ---------------------------------------------------------------------------
# SOFA routines
# ---------------------------------------------------------------------------


class TestSiderealTime:
    """Earth rotation angle and sidereal time routines."""

    def test_era00(self):
        assert float(sofa.era00(MJD_ZERO, 54388.0)) == pytest.approx(0.4022837240028158102, abs=1e-12)

    def test_gmst82(self):
        assert float(sofa.gmst82(MJD_ZERO, 53736.0)) == pytest.approx(1.754174981860675096, abs=1e-12)

    def test_gmst00(self):
        value = sofa.gmst00(MJD_ZERO, 53736.0, MJD_ZERO, 53736.0)
        assert float(value) == pytest.approx(1.754174972210740592, abs=1e-12)

    def test_gmst06(self):
        value = sofa.gmst06(MJD_ZERO, 53736.0, MJD_ZERO, 53736.0)
        assert float(value) == pytest.approx(1.754174971870091203, abs=1e-12)

    def test_eqeq94(self):
        assert float(sofa.eqeq94(MJD_ZERO, 41234.0)) == pytest.approx(0.5357758254609256894e-4, abs=NUTATION_TOL)

    def test_eqeq94_uses_given_nutation(self):
        """A supplied nutation in longitude replaces the modelled one."""
        base = sofa.eqeq94(MJD_ZERO, 41234.0, 0.0)
        shifted = sofa.eqeq94(MJD_ZERO, 41234.0, 1e-6)
        eps = sofa.obl80(MJD_ZERO, 41234.0)
        assert float(shifted - base) == pytest.approx(1e-6 * float(jnp.cos(eps)), abs=1e-18)


class TestObliquity:
    def test_obl80(self):
        assert float(sofa.obl80(MJD_ZERO, 54388.0)) == pytest.approx(0.4090751347643816218, abs=1e-14)

    def test_obl06(self):
        assert float(sofa.obl06(MJD_ZERO, 54388.0)) == pytest.approx(0.4090749229387258204, abs=1e-14)


class TestPrecessionNutation:
    """Precession, nutation and CIO-based routines."""

    def test_pmat76(self):
        rmatp = sofa.pmat76(MJD_ZERO, 50123.9999)
        expected = jnp.array([
            [0.9999995504328350733, 0.8696632209480960785e-3, 0.3779153474959888345e-3],
            [-0.8696632209485112192e-3, 0.9999996218428560614, -0.1643284776111886407e-6],
            [-0.3779153474950335077e-3, -0.1643306746147366896e-6, 0.9999999285899790119],
        ])
        assert jnp.allclose(rmatp, expected, rtol=0.0, atol=1e-12)

    def test_numat(self):
        rmatn = sofa.numat(0.4090789763356509900, -0.9630909107115582393e-5, 0.4063239174001678826e-4)
        expected = jnp.array([
            [0.9999999999536227949, 0.8836239320236250577e-5, 0.3830833447458251908e-5],
            [-0.8836083657016688588e-5, 0.9999999991354654959, -0.4063240865361857698e-4],
            [-0.3831192481833385226e-5, 0.4063237480216934159e-4, 0.9999999991671660407],
        ])
        assert jnp.allclose(rmatn, expected, rtol=0.0, atol=1e-12)

    def test_nut80(self):
        dpsi, deps = sofa.nut80(MJD_ZERO, 53736.0)
        assert float(dpsi) == pytest.approx(-0.9643658353226563966e-5, abs=NUTATION_TOL)
        assert float(deps) == pytest.approx(0.4060051006879713322e-4, abs=NUTATION_TOL)

    def test_nut00a(self):
        dpsi, deps = sofa.nut00a(MJD_ZERO, 53736.0)
        assert float(dpsi) == pytest.approx(-0.9630909107115518431e-5, abs=NUTATION_TOL)
        assert float(deps) == pytest.approx(0.4063239174001678710e-4, abs=NUTATION_TOL)

    def test_s06(self):
        s = sofa.s06(MJD_ZERO, 53736.0, 0.5791308486706011e-3, 0.4020579816732961219e-4)
        assert float(s) == pytest.approx(-0.1220032213076463117e-7, abs=1e-16)

    def test_c2ixys(self):
        rc2i = sofa.c2ixys(0.5791308486706011e-3, 0.4020579816732961219e-4, -0.1220040848472271978e-7)
        expected = jnp.array([
            [0.9999998323037157138, 0.5581984869168499149e-9, -0.5791308491611282180e-3],
            [-0.2384261642670440317e-7, 0.9999999991917468964, -0.4020579110169668931e-4],
            [0.5791308486706011e-3, 0.4020579816732961219e-4, 0.9999998314954627590],
        ])
        assert jnp.allclose(rc2i, expected, rtol=0.0, atol=1e-12)

    def test_sp00(self):
        assert float(sofa.sp00(MJD_ZERO, 52541.0)) == pytest.approx(-0.6216698469981019309e-11, abs=1e-20)

    def test_pom00(self):
        rpom = sofa.pom00(2.55060238e-7, 1.860359247e-6, -0.1367174580728891460e-10)
        expected = jnp.array([
            [0.9999999999999674721, -0.1367174580728846989e-10, 0.2550602379999972345e-6],
            [0.1414624947957029801e-10, 0.9999999999982695317, -0.1860359246998866389e-5],
            [-0.2550602379741215021e-6, 0.1860359247002414021e-5, 0.9999999999982370039],
        ])
        assert jnp.allclose(rpom, expected, rtol=0.0, atol=1e-12)

    def test_bias_matrix_is_rotation(self):
        b = sofa.bias_matrix()
        assert jnp.allclose(b @ b.T, jnp.eye(3), atol=1e-15)
        # Frame bias is a few tens of milliarcseconds
        assert float(jnp.max(jnp.abs(b - jnp.eye(3)))) < 0.1 * AS2RAD


class TestAngles:
    def test_anp(self):
        assert float(sofa.anp(-0.1)) == pytest.approx(6.183185307179586477, abs=1e-12)

    def test_anpm(self):
        assert float(sofa.anpm(-4.0)) == pytest.approx(2.283185307179586477, abs=1e-12)


class TestLeapSeconds:
    def test_table(self):
        assert float(leap_seconds_tai_utc(57754.0)) == 37.0
        assert float(leap_seconds_tai_utc(57753.5)) == 36.0
        assert float(leap_seconds_tai_utc(40000.0)) == 10.0

    def test_tt_minus_utc(self):
        assert float(tt_minus_utc(58016.0)) == pytest.approx(69.184, abs=1e-12)


# ---------------------------------------------------------------------------
# Nutation tables
# ---------------------------------------------------------------------------


class TestNutationSeries:
    """Pluggable nutation coefficient tables."""

    def test_bad_row_length(self):
        with pytest.raises(ValueError):
            NutationSeries(((0, 0, 0, 0, 1, 1.0),))

    def test_from_file(self, tmp_path):
        path = tmp_path / "nutation.txt"
        path.write_text(
            "# single luni-solar term\n"
            "\n"
            "0 0 0 0 1  -171996.0 -174.2 0.0  92025.0 8.9 0.0\n"
        )
        series = NutationSeries.from_file(path, unit=AS2RAD * 1e-4)
        assert series.size == 1
        assert series.luni_solar[0][5] == -171996.0

    def test_from_file_bad_columns(self, tmp_path):
        path = tmp_path / "nutation.txt"
        path.write_text("0 0 0 0 1 1.0 2.0\n")
        with pytest.raises(ValueError):
            NutationSeries.from_file(path)

    def test_install_and_restore(self):
        """An installed table replaces the built-in one until restored."""
        builtin = get_nutation_series(NutationTheory.IAU_1980)
        reference, _ = sofa.nut80(MJD_ZERO, 54388.0)
        try:
            set_nutation_series(
                NutationTheory.IAU_1980,
                NutationSeries(((0, 0, 0, 0, 1, -171996.0, -174.2, 0.0, 92025.0, 8.9, 0.0),), unit=AS2RAD * 1e-4),
            )
            single, _ = sofa.nut80(MJD_ZERO, 54388.0)
            assert float(single) != float(reference)
            # The other built-in terms add up to less than 2.5 arcsec
            assert float(single) == pytest.approx(float(reference), abs=2.5 * AS2RAD)
        finally:
            set_nutation_series(NutationTheory.IAU_1980, None)
        assert get_nutation_series(NutationTheory.IAU_1980) is builtin


# ---------------------------------------------------------------------------
# IERS conventions
# ---------------------------------------------------------------------------

MJD_TT = 58016.143  # 2017-09-20


class TestConventions:
    """Dispatch of the Earth orientation models by IERS convention."""

    def test_nutation_theory(self):
        assert IERSConventions.IERS_1996.nutation_theory() is NutationTheory.IAU_1980
        assert IERSConventions.IERS_2003.nutation_theory() is NutationTheory.IAU_2000
        assert IERSConventions.IERS_2010.nutation_theory() is NutationTheory.IAU_2000

    @pytest.mark.parametrize("conventions", list(IERSConventions))
    def test_precession_matrix_at_j2000(self, conventions):
        assert jnp.allclose(conventions.precession_matrix(51544.5), jnp.eye(3), atol=1e-15)

    @pytest.mark.parametrize("conventions", list(IERSConventions))
    def test_precession_matrix_orthonormal(self, conventions):
        p = conventions.precession_matrix(MJD_TT)
        assert jnp.allclose(p @ p.T, jnp.eye(3), atol=1e-14)

    def test_mean_obliquity_at_j2000(self):
        assert float(IERSConventions.IERS_1996.mean_obliquity(51544.5)) == pytest.approx(84381.448 * AS2RAD, abs=1e-15)
        assert float(IERSConventions.IERS_2010.mean_obliquity(51544.5)) == pytest.approx(84381.406 * AS2RAD, abs=1e-15)

    def test_mean_obliquity_degrees(self):
        eps = IERSConventions.IERS_2010.mean_obliquity(51544.5, use_degrees=True)
        assert float(eps) == pytest.approx(84381.406 / 3600.0, abs=1e-12)

    def test_bpn_matrices_agree(self):
        """IAU 2000 and IAU 2006 based matrices describe the same pole."""
        b03 = IERSConventions.IERS_2003.bpn_matrix(MJD_TT)
        b10 = IERSConventions.IERS_2010.bpn_matrix(MJD_TT)
        assert jnp.allclose(b03, b10, rtol=0.0, atol=1e-7)

    @pytest.mark.parametrize("conventions", list(IERSConventions))
    def test_cip_is_third_row_of_bpn(self, conventions):
        """The CIRF pole is the true pole of date."""
        x, y, s = conventions.cip_xys(MJD_TT)
        bpn = conventions.bpn_matrix(MJD_TT)
        c = sofa.c2ixys(x, y, s)
        assert jnp.allclose(c[2], bpn[2], rtol=0.0, atol=1e-15)
        assert abs(float(s)) < 1e-6

    def test_gmst_agree(self):
        mjd_ut1 = MJD_TT - 69.184 / 86400.0
        g96 = float(IERSConventions.IERS_1996.gmst(mjd_ut1, MJD_TT))
        g03 = float(IERSConventions.IERS_2003.gmst(mjd_ut1, MJD_TT))
        g10 = float(IERSConventions.IERS_2010.gmst(mjd_ut1, MJD_TT))
        assert g03 == pytest.approx(g10, abs=1e-8)
        assert g96 == pytest.approx(g10, abs=5e-7)

    def test_equation_of_equinoxes_agree(self):
        dpsi = -1.5e-5
        e96 = float(IERSConventions.IERS_1996.equation_of_equinoxes(MJD_TT, dpsi))
        e10 = float(IERSConventions.IERS_2010.equation_of_equinoxes(MJD_TT, dpsi))
        assert e96 == pytest.approx(e10, abs=1e-8)

    def test_nutation_correction_round_trip(self):
        converter = IERSConventions.IERS_2010.nutation_correction_converter()
        dx, dy = converter.to_nonrotating(58016.0, 1.0e-9, -0.5e-9)
        ddpsi, ddeps = converter.to_equinox(58016.0, dx, dy)
        assert ddpsi == pytest.approx(1.0e-9, rel=1e-12)
        assert ddeps == pytest.approx(-0.5e-9, rel=1e-12)
        # dX is roughly ddpsi * sin(eps)
        assert dx == pytest.approx(1.0e-9 * 0.3978, rel=2e-2)

    def test_tio_locator_is_tiny(self):
        assert abs(float(IERSConventions.IERS_2010.tio_locator(MJD_TT))) < 1e-10
