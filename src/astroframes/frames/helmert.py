"""Helmert transformations between ITRF realizations.

A :class:`HelmertTransformation` maps one realization of the International
Terrestrial Reference Frame to another with a time-dependent translation
and a small time-dependent rotation. Published parameters are referenced
to epoch 2000.0, with translations in millimetres, rotations in
milliarcseconds and their rates per Julian year.

The scale parameter is carried for reference but not applied: a
:class:`~astroframes.frames.transform.Transform` is rigid.

References:

    1. Z. Altamimi, X. Collilieux and L. Métivier, *ITRF2008: an improved
       solution of the International Terrestrial Reference Frame*,
       J. Geod. 85, 2011. Transformation parameters published at
       https://itrf.ign.fr/en/solutions/transformations.
"""

from __future__ import annotations

import enum

import jax.numpy as jnp

from astroframes.attitude_representations import Quaternion
from astroframes.config import get_dtype
from astroframes.constants import JULIAN_YEAR, MAS2RAD
from astroframes.epoch import J2000_EPOCH, Epoch
from astroframes.frames.transform import Transform


class HelmertTransformation:
    """Time-dependent rigid shift between two ITRF realizations.

    Args:
        epoch: Reference epoch of the parameters.
        t1, t2, t3: Translation at *epoch* [mm].
        r1, r2, r3: Rotation at *epoch* [mas].
        t1_dot, t2_dot, t3_dot: Translation rate [mm/yr].
        r1_dot, r2_dot, r3_dot: Rotation rate [mas/yr].
        scale: Scale difference at *epoch* [ppb], not applied.
        scale_dot: Scale rate [ppb/yr], not applied.
    """

    def __init__(
        self,
        epoch: Epoch,
        t1: float, t2: float, t3: float,
        r1: float, r2: float, r3: float,
        t1_dot: float, t2_dot: float, t3_dot: float,
        r1_dot: float, r2_dot: float, r3_dot: float,
        scale: float = 0.0,
        scale_dot: float = 0.0,
    ) -> None:
        dtype = get_dtype()
        self._epoch = epoch
        self._translation = jnp.array([t1, t2, t3], dtype=dtype) * 1.0e-3
        self._translation_rate = jnp.array([t1_dot, t2_dot, t3_dot], dtype=dtype) * 1.0e-3 / JULIAN_YEAR
        self._rotation = jnp.array([r1, r2, r3], dtype=dtype) * MAS2RAD
        self._rotation_rate = jnp.array([r1_dot, r2_dot, r3_dot], dtype=dtype) * MAS2RAD / JULIAN_YEAR
        self._scale = scale
        self._scale_dot = scale_dot

    @property
    def epoch(self) -> Epoch:
        """Reference epoch of the parameters."""
        return self._epoch

    @property
    def scale(self) -> tuple[float, float]:
        """Tabulated scale difference and rate ``(ppb, ppb/yr)``."""
        return self._scale, self._scale_dot

    def get_transform(self, date: Epoch) -> Transform:
        """Return the parent-to-realization transform at *date*."""
        dt = date - self._epoch
        translation = self._translation + dt * self._translation_rate
        rotation = self._rotation + dt * self._rotation_rate

        shift = Transform.from_translation(date, translation, self._translation_rate)
        turn = Transform(date, Quaternion.from_rotation_vector(rotation), self._rotation_rate)
        return Transform.compose(date, shift, turn)


class HelmertPredefined(enum.Enum):
    """Published transformations from ITRF2008 to earlier realizations.

    Each value is ``(t1, t2, t3, r1, r2, r3, t1_dot, t2_dot, t3_dot,
    r1_dot, r2_dot, r3_dot, scale, scale_dot)`` at epoch 2000.0.
    """

    ITRF_2008_TO_ITRF_2005 = (
        -2.0, -0.9, -4.7, 0.00, 0.00, 0.00,
        0.3, 0.0, 0.0, 0.00, 0.00, 0.00,
        0.94, 0.00,
    )
    ITRF_2008_TO_ITRF_2000 = (
        -1.9, -1.7, -10.5, 0.00, 0.00, 0.00,
        0.1, 0.1, -1.8, 0.00, 0.00, 0.00,
        1.34, 0.08,
    )
    ITRF_2008_TO_ITRF_97 = (
        4.8, 2.6, -33.2, 0.00, 0.00, 0.06,
        0.1, -0.5, -3.2, 0.00, 0.00, 0.02,
        2.92, 0.09,
    )
    ITRF_2008_TO_ITRF_93 = (
        -24.0, 2.4, -38.6, -1.71, -1.48, -0.30,
        -2.8, -0.1, -2.4, -0.11, -0.19, 0.07,
        3.41, 0.09,
    )

    def transformation(self) -> HelmertTransformation:
        """Build the transformation with the tabulated parameters."""
        (t1, t2, t3, r1, r2, r3,
         t1_dot, t2_dot, t3_dot, r1_dot, r2_dot, r3_dot,
         scale, scale_dot) = self.value
        return HelmertTransformation(
            J2000_EPOCH,
            t1, t2, t3, r1, r2, r3,
            t1_dot, t2_dot, t3_dot, r1_dot, r2_dot, r3_dot,
            scale, scale_dot,
        )
