"""Type definitions for Earth Orientation Parameters (EOP).

- :class:`EOPEntry`: one dated sample of all EOP fields, with nutation
  corrections held in both the equinox-based and the CIO-based basis.
- :class:`EOPExtrapolation`: controls behavior when querying outside the
  data range.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass


@dataclass(frozen=True)
class EOPEntry:
    """Earth Orientation Parameters at a single date.

    Attributes:
        mjd: UTC Modified Julian Date of the sample (normally 0h).
        ut1_utc: UT1-UTC offset [s].
        lod: Length of day excess [s].
        x_p: Polar motion x-component [rad].
        y_p: Polar motion y-component [rad].
        ddpsi: Correction to nutation in longitude [rad].
        ddeps: Correction to nutation in obliquity [rad].
        dx: Celestial pole offset dX [rad].
        dy: Celestial pole offset dY [rad].
    """

    mjd: float
    ut1_utc: float
    lod: float
    x_p: float
    y_p: float
    ddpsi: float
    ddeps: float
    dx: float
    dy: float


class EOPExtrapolation(enum.Enum):
    """Extrapolation mode for EOP queries outside the data range.

    Attributes:
        HOLD: Clamp to the nearest boundary value.
        ZERO: Return zero for out-of-range queries.
    """

    HOLD = "hold"
    ZERO = "zero"
