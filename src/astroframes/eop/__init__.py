"""Earth Orientation Parameters (EOP).

Holds the interpolating EOP time series used by the Earth-fixed frames,
the loaders that fill it and the helpers that keep the cached IERS files
up to date.

Typical usage::

    from astroframes.conventions import IERSConventions
    from astroframes.eop import EOPHistory, StandardFileLoader, EOPEntrySet

    conventions = IERSConventions.IERS_2010
    entries = EOPEntrySet()
    StandardFileLoader("finals.all.iau2000.txt").fill_history(
        conventions.nutation_correction_converter(), entries
    )
    history = EOPHistory(conventions, entries)
    ut1_utc = history.get_ut1_utc(date)
"""

from astroframes.eop._converters import NutationCorrectionConverter
from astroframes.eop._download import (
    IERS_STANDARD_URL,
    STANDARD_FILENAME,
    download_standard_eop_file,
    refresh_cached_eop,
)
from astroframes.eop._history import EOPEntrySet, EOPHistory
from astroframes.eop._loaders import (
    FINALS_1980_PATTERN,
    FINALS_2000_PATTERN,
    DirectoryEOPLoader,
    EOPHistoryLoader,
    InMemoryEOPLoader,
    StandardFileLoader,
    make_entry,
)
from astroframes.eop._parsers import parse_standard_file, parse_standard_line
from astroframes.eop._tidal import (
    TidalCorrection,
    TidalTerm,
    get_tidal_correction,
    set_tidal_correction,
)
from astroframes.eop._types import EOPEntry, EOPExtrapolation

__all__ = [
    "DirectoryEOPLoader",
    "EOPEntry",
    "EOPEntrySet",
    "EOPExtrapolation",
    "EOPHistory",
    "EOPHistoryLoader",
    "FINALS_1980_PATTERN",
    "FINALS_2000_PATTERN",
    "IERS_STANDARD_URL",
    "InMemoryEOPLoader",
    "NutationCorrectionConverter",
    "STANDARD_FILENAME",
    "StandardFileLoader",
    "TidalCorrection",
    "TidalTerm",
    "download_standard_eop_file",
    "get_tidal_correction",
    "make_entry",
    "parse_standard_file",
    "parse_standard_line",
    "refresh_cached_eop",
    "set_tidal_correction",
]
