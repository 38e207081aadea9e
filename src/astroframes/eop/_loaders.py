"""Loaders that fill an :class:`~astroframes.eop.EOPEntrySet`.

A loader is any object with a ``fill_history(converter, history)`` method
(:class:`EOPHistoryLoader`). The frame registry calls every loader
registered for a convention, in registration order, against the same
entry set, so the first loader to supply a date wins.

- :class:`InMemoryEOPLoader`: pre-built entries or raw tuples.
- :class:`StandardFileLoader`: one IERS standard ("finals") file.
- :class:`DirectoryEOPLoader`: every file of a directory whose name
  matches a pattern.

Missing optional columns (LOD, pole corrections) are read as zero.
"""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Iterable
from pathlib import Path
from typing import Protocol, runtime_checkable

from astroframes.eop._converters import NutationCorrectionConverter
from astroframes.eop._history import EOPEntrySet
from astroframes.eop._parsers import parse_standard_file
from astroframes.eop._types import EOPEntry
from astroframes.errors import EOPDataUnavailableError

logger = logging.getLogger(__name__)

FINALS_1980_PATTERN: str = r"^finals\.(all|daily|data)$"
"""Default file name pattern for IAU 1980 (ddpsi/ddeps) finals files."""

FINALS_2000_PATTERN: str = r"^(finals2000A\.(all|daily|data)|finals\.all\.iau2000\.txt)$"
"""Default file name pattern for IAU 2000 (dX/dY) finals files."""


@runtime_checkable
class EOPHistoryLoader(Protocol):
    """Protocol for sources of EOP entries."""

    def fill_history(self, converter: NutationCorrectionConverter, history: EOPEntrySet) -> None:
        """Add entries to *history*.

        Args:
            converter: Converter of the convention being loaded, used to
                derive the missing pole correction pair.
            history: Entry set to fill. Dates already present are kept.

        Raises:
            EOPDataUnavailableError: If the loader has no data at all.
        """
        ...


def _zero_nan(value: float) -> float:
    return 0.0 if math.isnan(value) else value


def make_entry(
    converter: NutationCorrectionConverter,
    row: tuple[float, float, float, float, float, float, float],
    nonrotating: bool,
) -> EOPEntry:
    """Build an :class:`EOPEntry` holding both pole correction pairs.

    Args:
        converter: Convention converter between the two correction bases.
        row: ``(mjd, ut1_utc, lod, x_p, y_p, c1, c2)`` in seconds and
            radians. NaN values are read as zero.
        nonrotating: ``True`` if ``(c1, c2)`` is ``(dX, dY)``, ``False``
            if it is ``(ddpsi, ddeps)``.

    Returns:
        EOPEntry: Entry with all nine fields set.
    """
    mjd, ut1_utc, lod, x_p, y_p, c1, c2 = row
    lod, c1, c2 = _zero_nan(lod), _zero_nan(c1), _zero_nan(c2)
    if nonrotating:
        dx, dy = c1, c2
        ddpsi, ddeps = converter.to_equinox(mjd, dx, dy)
    else:
        ddpsi, ddeps = c1, c2
        dx, dy = converter.to_nonrotating(mjd, ddpsi, ddeps)
    return EOPEntry(mjd, ut1_utc, lod, x_p, y_p, ddpsi, ddeps, dx, dy)


class InMemoryEOPLoader:
    """Loader serving entries already held in memory.

    Args:
        entries: :class:`EOPEntry` objects, or
            ``(mjd, ut1_utc, lod, x_p, y_p, c1, c2)`` tuples.
        nonrotating: Meaning of ``(c1, c2)`` for tuple rows, see
            :func:`make_entry`.
    """

    def __init__(
        self,
        entries: Iterable[EOPEntry | tuple[float, ...]],
        nonrotating: bool = True,
    ) -> None:
        self._rows = list(entries)
        self._nonrotating = nonrotating

    def fill_history(self, converter: NutationCorrectionConverter, history: EOPEntrySet) -> None:
        if not self._rows:
            raise EOPDataUnavailableError("In-memory EOP loader holds no entries")
        for row in self._rows:
            if isinstance(row, EOPEntry):
                history.add(row)
            else:
                history.add(make_entry(converter, tuple(row), self._nonrotating))

    def __repr__(self) -> str:
        return f"InMemoryEOPLoader({len(self._rows)} rows, nonrotating={self._nonrotating})"


class StandardFileLoader:
    """Loader reading one IERS standard format file.

    Args:
        filepath: Path to the finals file.
        nonrotating: ``True`` for IAU 2000 files (dX/dY columns), ``False``
            for IAU 1980 files (ddpsi/ddeps columns).
    """

    def __init__(self, filepath: str | Path, nonrotating: bool = True) -> None:
        self._filepath = Path(filepath)
        self._nonrotating = nonrotating

    @property
    def filepath(self) -> Path:
        """Path of the file read by this loader."""
        return self._filepath

    def fill_history(self, converter: NutationCorrectionConverter, history: EOPEntrySet) -> None:
        if not self._filepath.exists():
            raise EOPDataUnavailableError(f"EOP file not found: {self._filepath}")
        try:
            rows = parse_standard_file(self._filepath)
        except ValueError as e:
            raise EOPDataUnavailableError(str(e)) from e

        added = 0
        for mjd, pm_x, pm_y, ut1_utc, lod, c1, c2 in rows:
            entry = make_entry(converter, (mjd, ut1_utc, lod, pm_x, pm_y, c1, c2), self._nonrotating)
            added += history.add(entry)
        logger.debug("Read %d EOP entries from %s (%d new)", len(rows), self._filepath, added)

    def __repr__(self) -> str:
        return f"StandardFileLoader({str(self._filepath)!r}, nonrotating={self._nonrotating})"


class DirectoryEOPLoader:
    """Loader reading every matching file of a directory.

    Files are read in name order.

    Args:
        directory: Directory to scan.
        pattern: Regular expression matched against file names.
        nonrotating: Meaning of the pole correction columns, see
            :class:`StandardFileLoader`.
    """

    def __init__(self, directory: str | Path, pattern: str, nonrotating: bool = True) -> None:
        self._directory = Path(directory)
        self._pattern = re.compile(pattern)
        self._nonrotating = nonrotating

    def matching_files(self) -> list[Path]:
        """Return the files of the directory whose name matches the pattern."""
        if not self._directory.is_dir():
            return []
        return sorted(
            p for p in self._directory.iterdir()
            if p.is_file() and self._pattern.match(p.name)
        )

    def fill_history(self, converter: NutationCorrectionConverter, history: EOPEntrySet) -> None:
        files = self.matching_files()
        if not files:
            raise EOPDataUnavailableError(
                f"No file matching {self._pattern.pattern!r} in {self._directory}"
            )
        for path in files:
            StandardFileLoader(path, self._nonrotating).fill_history(converter, history)

    def __repr__(self) -> str:
        return (
            f"DirectoryEOPLoader({str(self._directory)!r}, {self._pattern.pattern!r}, "
            f"nonrotating={self._nonrotating})"
        )
