"""Earth Orientation Parameter histories.

- :class:`EOPEntrySet`: the chronologically ordered, duplicate-free set
  that loaders fill. When two loaders supply the same date, the entry
  added first is kept.
- :class:`EOPHistory`: an immutable, interpolating time series of
  :class:`~astroframes.eop.EOPEntry` for one IERS convention.

Each field is interpolated with a 4-point Lagrange polynomial through the
entries nearest to the query date (fewer points close to the data
boundaries). UT1-UTC is interpolated as UT1-TAI so leap seconds do not
create spurious jumps between samples.
"""

from __future__ import annotations

import bisect
import logging
from collections.abc import Iterable, Iterator
from typing import TYPE_CHECKING

import jax.numpy as jnp

from astroframes.config import get_dtype
from astroframes.epoch import Epoch
from astroframes.eop._tidal import TidalCorrection
from astroframes.eop._types import EOPEntry, EOPExtrapolation
from astroframes.errors import EOPContinuityError, EOPDataUnavailableError
from astroframes.time import leap_seconds_tai_utc
from astroframes.utils.interpolation import lagrange_interpolate

if TYPE_CHECKING:
    from astroframes.conventions import IERSConventions

logger = logging.getLogger(__name__)

# Number of entries used by the interpolation polynomial
_INTERPOLATION_POINTS = 4

_SECONDS_PER_DAY = 86400.0


class EOPEntrySet:
    """Chronologically ordered set of EOP entries keyed by date.

    Adding an entry for a date that is already present leaves the set
    unchanged, so the loader registered first takes precedence.

    Args:
        entries: Optional initial entries.
    """

    def __init__(self, entries: Iterable[EOPEntry] = ()) -> None:
        self._dates: list[float] = []
        self._entries: dict[float, EOPEntry] = {}
        for entry in entries:
            self.add(entry)

    def add(self, entry: EOPEntry) -> bool:
        """Insert *entry* unless its date is already present.

        Args:
            entry: Entry to insert.

        Returns:
            bool: ``True`` if the entry was inserted.
        """
        if entry.mjd in self._entries:
            return False
        bisect.insort(self._dates, entry.mjd)
        self._entries[entry.mjd] = entry
        return True

    def __contains__(self, mjd: object) -> bool:
        return mjd in self._entries

    def __len__(self) -> int:
        return len(self._dates)

    def __iter__(self) -> Iterator[EOPEntry]:
        return (self._entries[mjd] for mjd in self._dates)

    def __repr__(self) -> str:
        if not self._dates:
            return "EOPEntrySet()"
        return f"EOPEntrySet({len(self)} entries, MJD {self._dates[0]} to {self._dates[-1]})"


class EOPHistory:
    """Interpolating Earth Orientation Parameter series for one convention.

    Args:
        conventions: IERS convention the entries were loaded for.
        entries: EOP entries, in any order. Duplicated dates keep the
            first entry.
        simple_eop: If ``True``, tidal effects are ignored when
            interpolating. Otherwise the tidal model is added to UT1, LOD
            and polar motion.
        tidal_correction: Tidal model to use when *simple_eop* is
            ``False``. Defaults to the model of *conventions*.

    Raises:
        EOPDataUnavailableError: If *entries* is empty.
    """

    def __init__(
        self,
        conventions: IERSConventions,
        entries: Iterable[EOPEntry],
        simple_eop: bool = True,
        tidal_correction: TidalCorrection | None = None,
    ) -> None:
        entry_set = entries if isinstance(entries, EOPEntrySet) else EOPEntrySet(entries)
        if len(entry_set) == 0:
            raise EOPDataUnavailableError(f"No EOP entries for {conventions.value}")

        self._conventions = conventions
        self._simple_eop = simple_eop
        self._entries = tuple(entry_set)
        self._dates = [entry.mjd for entry in self._entries]

        if simple_eop:
            self._tidal = None
        else:
            self._tidal = tidal_correction if tidal_correction is not None else conventions.tidal_correction()

        dtype = get_dtype()
        self._mjd = jnp.array(self._dates, dtype=dtype)
        leaps = leap_seconds_tai_utc(self._mjd)
        self._values = jnp.stack([
            jnp.array([e.ut1_utc for e in self._entries], dtype=dtype) - leaps,
            jnp.array([e.lod for e in self._entries], dtype=dtype),
            jnp.array([e.x_p for e in self._entries], dtype=dtype),
            jnp.array([e.y_p for e in self._entries], dtype=dtype),
            jnp.array([e.ddpsi for e in self._entries], dtype=dtype),
            jnp.array([e.ddeps for e in self._entries], dtype=dtype),
            jnp.array([e.dx for e in self._entries], dtype=dtype),
            jnp.array([e.dy for e in self._entries], dtype=dtype),
        ], axis=1)

        logger.info(
            "Built %s EOP history: %d entries, MJD %s to %s",
            conventions.value, len(self._entries), self._dates[0], self._dates[-1],
        )

    # Properties

    @property
    def conventions(self) -> IERSConventions:
        """IERS convention of the history."""
        return self._conventions

    @property
    def simple_eop(self) -> bool:
        """``True`` if tidal effects are ignored."""
        return self._simple_eop

    @property
    def entries(self) -> tuple[EOPEntry, ...]:
        """Entries in chronological order."""
        return self._entries

    @property
    def start_date(self) -> Epoch:
        """Date of the first entry."""
        return Epoch.from_mjd(self._dates[0])

    @property
    def end_date(self) -> Epoch:
        """Date of the last entry."""
        return Epoch.from_mjd(self._dates[-1])

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return (
            f"EOPHistory({self._conventions.value}, simple_eop={self._simple_eop}, "
            f"{len(self)} entries, MJD {self._dates[0]} to {self._dates[-1]})"
        )

    # Validation

    def check_eop_continuity(self, max_gap: float) -> None:
        """Check that consecutive entries are never too far apart.

        Args:
            max_gap: Maximum allowed gap between consecutive entries [s].

        Raises:
            EOPContinuityError: If a gap exceeds *max_gap*.
        """
        for before, after in zip(self._dates, self._dates[1:]):
            gap = (after - before) * _SECONDS_PER_DAY
            if gap > max_gap:
                raise EOPContinuityError(before, after, gap)

    # Queries

    def _interpolate(self, mjd: float, extrapolation: EOPExtrapolation):
        """Interpolate all stored fields, or return ``None`` for a zeroed date."""
        start, end = self._dates[0], self._dates[-1]
        if not start <= mjd <= end:
            if extrapolation == EOPExtrapolation.ZERO:
                return None
            mjd = min(max(mjd, start), end)

        n = len(self._dates)
        idx = bisect.bisect_right(self._dates, mjd)
        lo = max(0, min(idx - _INTERPOLATION_POINTS // 2, n - _INTERPOLATION_POINTS))
        hi = min(lo + _INTERPOLATION_POINTS, n)

        origin = self._dates[lo]
        nodes = self._mjd[lo:hi] - origin
        values, _ = lagrange_interpolate(nodes, self._values[lo:hi], mjd - origin)
        return mjd, values

    def get_entry(
        self,
        date: Epoch,
        extrapolation: EOPExtrapolation = EOPExtrapolation.HOLD,
    ) -> EOPEntry:
        """Interpolate every EOP field at *date*.

        Args:
            date: Query date (UTC).
            extrapolation: Behavior outside ``[start_date, end_date]``.

        Returns:
            EOPEntry: Interpolated values, dated at *date*. All fields are
                zero for an out-of-range date with ``EOPExtrapolation.ZERO``.
        """
        mjd = date.mjd()
        result = self._interpolate(mjd, extrapolation)
        if result is None:
            return EOPEntry(mjd, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0)

        clamped, values = result
        ut1_tai, lod, x_p, y_p, ddpsi, ddeps, dx, dy = (float(v) for v in values)
        ut1_utc = ut1_tai + float(leap_seconds_tai_utc(clamped))

        if self._tidal is not None:
            tx, ty, tut1, tlod = self._tidal.corrections(mjd)
            x_p += tx
            y_p += ty
            ut1_utc += tut1
            lod += tlod

        return EOPEntry(mjd, ut1_utc, lod, x_p, y_p, ddpsi, ddeps, dx, dy)

    def get_ut1_utc(
        self, date: Epoch, extrapolation: EOPExtrapolation = EOPExtrapolation.HOLD
    ) -> float:
        """UT1-UTC offset at *date* [s]."""
        return self.get_entry(date, extrapolation).ut1_utc

    def get_lod(
        self, date: Epoch, extrapolation: EOPExtrapolation = EOPExtrapolation.HOLD
    ) -> float:
        """Length of day excess at *date* [s]."""
        return self.get_entry(date, extrapolation).lod

    def get_pole_correction(
        self, date: Epoch, extrapolation: EOPExtrapolation = EOPExtrapolation.HOLD
    ) -> tuple[float, float]:
        """Polar motion ``(x_p, y_p)`` at *date* [rad]."""
        entry = self.get_entry(date, extrapolation)
        return entry.x_p, entry.y_p

    def get_equinox_nutation_correction(
        self, date: Epoch, extrapolation: EOPExtrapolation = EOPExtrapolation.HOLD
    ) -> tuple[float, float]:
        """Nutation corrections ``(ddpsi, ddeps)`` at *date* [rad]."""
        entry = self.get_entry(date, extrapolation)
        return entry.ddpsi, entry.ddeps

    def get_nonrotating_origin_nutation_correction(
        self, date: Epoch, extrapolation: EOPExtrapolation = EOPExtrapolation.HOLD
    ) -> tuple[float, float]:
        """Celestial pole offsets ``(dX, dY)`` at *date* [rad]."""
        entry = self.get_entry(date, extrapolation)
        return entry.dx, entry.dy
