"""Exceptions raised by the frame engine.

All errors derive from :class:`AstroFramesError` so callers can catch the
whole family at once. Errors raised by a physical model while evaluating a
transform (degenerate geometry, non-finite input) are not wrapped: they
propagate unchanged through the frame walk.
"""

from __future__ import annotations


class AstroFramesError(Exception):
    """Base class for all astroframes errors."""


class EOPDataUnavailableError(AstroFramesError):
    """No loader could supply Earth Orientation Parameters for a convention."""


class EOPContinuityError(AstroFramesError):
    """Consecutive EOP entries are separated by more than the allowed gap.

    Attributes:
        mjd_before: MJD of the entry preceding the gap.
        mjd_after: MJD of the entry following the gap.
        gap: Gap length in seconds.
    """

    def __init__(self, mjd_before: float, mjd_after: float, gap: float) -> None:
        self.mjd_before = mjd_before
        self.mjd_after = mjd_after
        self.gap = gap
        super().__init__(
            f"Missing EOP data between MJD {mjd_before} and MJD {mjd_after} "
            f"(gap of {gap / 86400.0:.3f} days)"
        )


class FrameInternalError(AstroFramesError):
    """An internal invariant of the frame tree or frame registry was violated.

    This signals a bug in astroframes rather than bad input.
    """


class DataOutOfRangeError(AstroFramesError):
    """A date lies outside the range a cache or data set can serve."""
