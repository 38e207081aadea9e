"""The epoch module provides the ``Epoch`` class for representing UTC instants.

The Epoch class uses an internal representation of integer Julian Day number,
seconds within the (noon-based) Julian day, and a Kahan summation
compensator for maintaining precision during arithmetic operations.

The Kahan compensator tracks floating-point rounding errors that accumulate
during repeated additions (e.g., sampling a transform on a regular grid),
preventing error growth from O(N) to O(1) machine epsilon.

Frame transforms are keyed and cached by date, so Epoch values are plain
Python numbers: instances are immutable, hashable and totally ordered, and
the split representation resolves time to well below a microsecond.
"""

from __future__ import annotations

import functools
import math
import re

from .time import caldate_to_mjd, mjd_to_caldate, tt_minus_utc

# Seconds in a day
_SECONDS_PER_DAY = 86400.0

# Julian days start at noon: JD = _jd + seconds / 86400
_MJD_JD_INT_OFFSET = 2400000

# Valid ISO 8601 epoch string patterns
_EPOCH_PATTERNS = [
    # YYYY-MM-DD
    re.compile(r'^(\d{4})-(\d{2})-(\d{2})$'),
    # YYYY-MM-DDTHH:MM:SSZ
    re.compile(r'^(\d{4})-(\d{2})-(\d{2})T(\d{2}):(\d{2}):(\d{2})Z$'),
    # YYYY-MM-DDTHH:MM:SS.fffZ
    re.compile(r'^(\d{4})-(\d{2})-(\d{2})T(\d{2}):(\d{2}):(\d{2})\.(\d+)Z$'),
]


@functools.total_ordering
class Epoch:
    """Represents a single UTC instant with high-precision arithmetic.

    The internal representation uses three private components:
        ``_jd`` (int), ``_seconds`` (float in ``[0, 86400)``),
        ``_kahan_c`` (float).
    Use ``jd()``, ``mjd()`` and ``mjd_tt()`` to access the absolute time.

    Constructors:
        Epoch(2018, 1, 1)
        Epoch(2018, 1, 1, 12, 0, 0.0)
        Epoch("2018-01-01T12:00:00Z")
        Epoch(other_epoch)
        Epoch.from_mjd(58119.5)
    """

    __slots__ = ('_jd', '_seconds', '_kahan_c')

    def __init__(self, *args: int | float | str | Epoch) -> None:
        """Initialize Epoch. Supports multiple constructor forms.

        Args:
            *args: Either (year, month, day[, hour, minute, second]),
                a string in ISO 8601 format, or another Epoch instance.

        Raises:
            ValueError: If the arguments do not match a constructor form.
        """
        if len(args) == 1:
            if isinstance(args[0], str):
                self._init_string(args[0])
            elif isinstance(args[0], Epoch):
                self._set(args[0]._jd, args[0]._seconds, args[0]._kahan_c)
            else:
                raise ValueError(f"Cannot construct Epoch from {type(args[0])}")
        elif 3 <= len(args) <= 6:
            self._init_date(*args)
        else:
            raise ValueError(
                "Epoch requires date components (3-6 args), a string, or an Epoch"
            )

    @classmethod
    def _from_internal(cls, jd: int, seconds: float, kahan_c: float = 0.0) -> Epoch:
        """Create an Epoch from raw components, normalizing the seconds."""
        obj = object.__new__(cls)
        day_offset = math.floor(seconds / _SECONDS_PER_DAY)
        obj._set(jd + day_offset, seconds - day_offset * _SECONDS_PER_DAY, kahan_c)
        return obj

    @classmethod
    def from_mjd(cls, mjd: float) -> Epoch:
        """Create an Epoch from a UTC Modified Julian Date.

        Args:
            mjd (float): Modified Julian Date (UTC).

        Returns:
            Epoch: The corresponding instant.
        """
        day = math.floor(mjd)
        seconds = (mjd - day) * _SECONDS_PER_DAY + _SECONDS_PER_DAY / 2.0
        return cls._from_internal(_MJD_JD_INT_OFFSET + int(day), seconds)

    def _set(self, jd: int, seconds: float, kahan_c: float) -> None:
        object.__setattr__(self, '_jd', int(jd))
        object.__setattr__(self, '_seconds', float(seconds))
        object.__setattr__(self, '_kahan_c', float(kahan_c))

    def __setattr__(self, name, value):
        raise AttributeError("Epoch instances are immutable")

    def _init_date(self, year, month, day, hour=0, minute=0, second=0.0):
        mjd_day = int(round(float(caldate_to_mjd(year, month, day))))
        seconds = (_SECONDS_PER_DAY / 2.0
                   + hour * 3600.0 + minute * 60.0 + second)
        day_offset = math.floor(seconds / _SECONDS_PER_DAY)
        self._set(
            _MJD_JD_INT_OFFSET + mjd_day + day_offset,
            seconds - day_offset * _SECONDS_PER_DAY,
            0.0,
        )

    def _init_string(self, string):
        """Initialize from an ISO 8601 string.

        Supported formats:
            - ``YYYY-MM-DD``
            - ``YYYY-MM-DDTHH:MM:SSZ``
            - ``YYYY-MM-DDTHH:MM:SS.fffZ``
        """
        for pattern in _EPOCH_PATTERNS:
            m = pattern.match(string)
            if m:
                groups = m.groups()
                hour, minute, second = 0, 0, 0.0
                if len(groups) >= 6:
                    hour = int(groups[3])
                    minute = int(groups[4])
                    second = float(groups[5])
                if len(groups) == 7:
                    second += float(f"0.{groups[6]}")
                self._init_date(int(groups[0]), int(groups[1]), int(groups[2]),
                                hour, minute, second)
                return

        raise ValueError(
            f'Invalid Epoch string: "{string}" is not ISO 8601 compliant'
        )

    def _compensated_seconds(self) -> float:
        return self._seconds - self._kahan_c

    def _key(self) -> tuple[int, float]:
        return self._jd, self._compensated_seconds()

    # Arithmetic operators

    def __add__(self, delta: float) -> Epoch:
        """Return a new Epoch advanced by *delta* seconds (Kahan summation)."""
        delta = float(delta)
        y = delta - self._kahan_c
        t = self._seconds + y
        new_kahan_c = (t - self._seconds) - y
        return Epoch._from_internal(self._jd, t, new_kahan_c)

    def __sub__(self, other: Epoch | float) -> Epoch | float:
        """Subtract seconds or compute the difference between Epochs.

        Args:
            other: If Epoch, returns the time difference in seconds.
                If numeric, returns a new Epoch with seconds subtracted.

        Returns:
            float or Epoch: Time difference in seconds, or new Epoch.
        """
        if isinstance(other, Epoch):
            return ((self._jd - other._jd) * _SECONDS_PER_DAY
                    + (self._compensated_seconds() - other._compensated_seconds()))
        return self.__add__(-float(other))

    # Comparison operators

    def __eq__(self, other):
        if not isinstance(other, Epoch):
            return NotImplemented
        return self._key() == other._key()

    def __lt__(self, other):
        if not isinstance(other, Epoch):
            return NotImplemented
        return self._key() < other._key()

    def __hash__(self):
        return hash(self._key())

    # Time properties

    def jd(self) -> float:
        """Return the Julian Date (UTC)."""
        return self._jd + self._compensated_seconds() / _SECONDS_PER_DAY

    def mjd(self) -> float:
        """Return the Modified Julian Date (UTC).

        The integer day offset is removed before the fraction is added so the
        result keeps the full float64 resolution of an MJD value.
        """
        return ((self._jd - _MJD_JD_INT_OFFSET)
                + (self._compensated_seconds() - _SECONDS_PER_DAY / 2.0) / _SECONDS_PER_DAY)

    def mjd_tt(self) -> float:
        """Return the Modified Julian Date in the TT time scale.

        Returns:
            float: TT Modified Julian Date, UTC plus leap seconds and 32.184 s.
        """
        mjd = self.mjd()
        return mjd + float(tt_minus_utc(mjd)) / _SECONDS_PER_DAY

    def caldate(self) -> tuple[int, int, int, int, int, float]:
        """Return the UTC calendar date components.

        Returns:
            tuple: (year, month, day, hour, minute, second) where second
                includes fractional part.
        """
        # JD day starts at noon; shift by half a day to get civil time of day
        civil = self._compensated_seconds() + _SECONDS_PER_DAY / 2.0
        day_offset = math.floor(civil / _SECONDS_PER_DAY)
        civil -= day_offset * _SECONDS_PER_DAY
        mjd_day = self._jd - _MJD_JD_INT_OFFSET - 1 + day_offset

        year, month, day = (int(v) for v in mjd_to_caldate(mjd_day))

        hour = int(civil // 3600)
        civil -= hour * 3600
        minute = int(civil // 60)
        second = civil - minute * 60
        return year, month, day, hour, minute, second

    # String representations

    def __str__(self):
        year, month, day, hour, minute, second = self.caldate()
        return (f'{year:04d}-{month:02d}-{day:02d}T'
                f'{hour:02d}:{minute:02d}:{second:06.3f}Z')

    def __repr__(self):
        return f'Epoch({str(self)!r})'


"""
Reference epoch J2000.0, 2000-01-01T12:00:00 UTC.
"""
J2000_EPOCH = Epoch(2000, 1, 1, 12, 0, 0.0)

