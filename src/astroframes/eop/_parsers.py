"""Parsers for IERS Earth Orientation Parameter data files.

Supports the IERS standard "finals" format (Bulletin A/B columns), in both
its IAU 1980 flavour (``finals.all``, ``finals.data``: nutation corrections
``ddpsi``/``ddeps``) and its IAU 2000 flavour (``finals2000A.all``,
``finals.all.iau2000.txt``: celestial pole offsets ``dX``/``dY``). The two
flavours share the same column layout, so the parser returns the pole
correction pair without interpreting it.
"""

from __future__ import annotations

import math
from pathlib import Path

from astroframes.constants import AS2RAD, MAS2RAD

# Column ranges for IERS standard format (0-indexed Python slices)
_MJD_RANGE = slice(6, 15)
_PM_X_RANGE = slice(17, 27)
_PM_Y_RANGE = slice(36, 46)
_UT1_UTC_RANGE = slice(58, 68)
_LOD_RANGE = slice(78, 86)
_C1_RANGE = slice(96, 106)
_C2_RANGE = slice(115, 125)
_STANDARD_LINE_LENGTH = 187


def _optional(field: str, scale: float) -> float:
    try:
        return float(field.strip()) * scale
    except ValueError:
        return math.nan


def parse_standard_line(
    line: str,
) -> tuple[float, float, float, float, float, float, float] | None:
    """Parse a single line from an IERS standard format EOP file.

    Lines shorter than 187 characters are padded with spaces (prediction
    lines may have trailing whitespace trimmed). Lines longer than 187
    characters or lines where required fields (MJD, PM_X, PM_Y, UT1-UTC)
    cannot be parsed are skipped (returns None).

    Args:
        line: A single line from the IERS standard format file.

    Returns:
        Tuple of (mjd, pm_x [rad], pm_y [rad], ut1_utc [s], lod [s] or NaN,
        c1 [rad] or NaN, c2 [rad] or NaN), where ``(c1, c2)`` is
        ``(ddpsi, ddeps)`` or ``(dX, dY)`` depending on the file flavour,
        or None if the line cannot be parsed.
    """
    if len(line) > _STANDARD_LINE_LENGTH:
        return None

    line = line.ljust(_STANDARD_LINE_LENGTH)

    try:
        mjd = float(line[_MJD_RANGE].strip())
        pm_x = float(line[_PM_X_RANGE].strip()) * AS2RAD
        pm_y = float(line[_PM_Y_RANGE].strip()) * AS2RAD
        ut1_utc = float(line[_UT1_UTC_RANGE].strip())
    except ValueError:
        return None

    lod = _optional(line[_LOD_RANGE], 1.0e-3)  # ms -> s
    c1 = _optional(line[_C1_RANGE], MAS2RAD)
    c2 = _optional(line[_C2_RANGE], MAS2RAD)

    return mjd, pm_x, pm_y, ut1_utc, lod, c1, c2


def parse_standard_file(
    filepath: str | Path,
) -> list[tuple[float, float, float, float, float, float, float]]:
    """Parse an entire IERS standard format EOP file.

    Lines that cannot be parsed (e.g. empty prediction lines at the end of
    the file) are silently skipped.

    Args:
        filepath: Path to the IERS standard format file.

    Returns:
        List of tuples as returned by :func:`parse_standard_line`, in file
        order.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If no valid lines were parsed.
    """
    rows = []
    with open(filepath) as f:
        for line in f:
            result = parse_standard_line(line.rstrip("\n"))
            if result is not None:
                rows.append(result)

    if not rows:
        raise ValueError(f"No valid EOP data found in {filepath}")

    return rows
