"""Keys of the frames built by the frame registry.

Each :class:`Predefined` member names one frame; its value is the
human-readable frame name. Legacy keys are Enum aliases of their
canonical member, so both resolve to the same cached frame.
"""

from __future__ import annotations

import enum


class Predefined(enum.Enum):
    """Predefined frames, keyed by frame name."""

    GCRF = "GCRF"
    EME2000 = "EME2000"

    ECLIPTIC_CONVENTIONS_1996 = "Ecliptic/1996"
    ECLIPTIC_CONVENTIONS_2003 = "Ecliptic/2003"
    ECLIPTIC_CONVENTIONS_2010 = "Ecliptic/2010"

    MOD_WITHOUT_EOP_CORRECTIONS = "MOD without EOP corrections"
    MOD_CONVENTIONS_1996 = "MOD/1996"
    MOD_CONVENTIONS_2003 = "MOD/2003"
    MOD_CONVENTIONS_2010 = "MOD/2010"

    TOD_WITHOUT_EOP_CORRECTIONS = "TOD without EOP corrections"
    TOD_CONVENTIONS_1996_SIMPLE_EOP = "TOD/1996 simple EOP"
    TOD_CONVENTIONS_1996_ACCURATE_EOP = "TOD/1996 accurate EOP"
    TOD_CONVENTIONS_2003_SIMPLE_EOP = "TOD/2003 simple EOP"
    TOD_CONVENTIONS_2003_ACCURATE_EOP = "TOD/2003 accurate EOP"
    TOD_CONVENTIONS_2010_SIMPLE_EOP = "TOD/2010 simple EOP"
    TOD_CONVENTIONS_2010_ACCURATE_EOP = "TOD/2010 accurate EOP"

    GTOD_WITHOUT_EOP_CORRECTIONS = "GTOD without EOP corrections"
    GTOD_CONVENTIONS_1996_SIMPLE_EOP = "GTOD/1996 simple EOP"
    GTOD_CONVENTIONS_1996_ACCURATE_EOP = "GTOD/1996 accurate EOP"
    GTOD_CONVENTIONS_2003_SIMPLE_EOP = "GTOD/2003 simple EOP"
    GTOD_CONVENTIONS_2003_ACCURATE_EOP = "GTOD/2003 accurate EOP"
    GTOD_CONVENTIONS_2010_SIMPLE_EOP = "GTOD/2010 simple EOP"
    GTOD_CONVENTIONS_2010_ACCURATE_EOP = "GTOD/2010 accurate EOP"

    TEME = "TEME"
    VEIS_1950 = "VEIS1950"

    CIRF_CONVENTIONS_1996_SIMPLE_EOP = "CIRF/1996 simple EOP"
    CIRF_CONVENTIONS_1996_ACCURATE_EOP = "CIRF/1996 accurate EOP"
    CIRF_CONVENTIONS_2003_SIMPLE_EOP = "CIRF/2003 simple EOP"
    CIRF_CONVENTIONS_2003_ACCURATE_EOP = "CIRF/2003 accurate EOP"
    CIRF_CONVENTIONS_2010_SIMPLE_EOP = "CIRF/2010 simple EOP"
    CIRF_CONVENTIONS_2010_ACCURATE_EOP = "CIRF/2010 accurate EOP"

    TIRF_CONVENTIONS_1996_SIMPLE_EOP = "TIRF/1996 simple EOP"
    TIRF_CONVENTIONS_1996_ACCURATE_EOP = "TIRF/1996 accurate EOP"
    TIRF_CONVENTIONS_2003_SIMPLE_EOP = "TIRF/2003 simple EOP"
    TIRF_CONVENTIONS_2003_ACCURATE_EOP = "TIRF/2003 accurate EOP"
    TIRF_CONVENTIONS_2010_SIMPLE_EOP = "TIRF/2010 simple EOP"
    TIRF_CONVENTIONS_2010_ACCURATE_EOP = "TIRF/2010 accurate EOP"

    ITRF_CIO_CONV_1996_SIMPLE_EOP = "CIO/1996-based ITRF simple EOP"
    ITRF_CIO_CONV_1996_ACCURATE_EOP = "CIO/1996-based ITRF accurate EOP"
    ITRF_CIO_CONV_2003_SIMPLE_EOP = "CIO/2003-based ITRF simple EOP"
    ITRF_CIO_CONV_2003_ACCURATE_EOP = "CIO/2003-based ITRF accurate EOP"
    ITRF_CIO_CONV_2010_SIMPLE_EOP = "CIO/2010-based ITRF simple EOP"
    ITRF_CIO_CONV_2010_ACCURATE_EOP = "CIO/2010-based ITRF accurate EOP"

    ITRF_EQUINOX_CONV_1996_SIMPLE_EOP = "Equinox/1996-based ITRF simple EOP"
    ITRF_EQUINOX_CONV_1996_ACCURATE_EOP = "Equinox/1996-based ITRF accurate EOP"
    ITRF_EQUINOX_CONV_2003_SIMPLE_EOP = "Equinox/2003-based ITRF simple EOP"
    ITRF_EQUINOX_CONV_2003_ACCURATE_EOP = "Equinox/2003-based ITRF accurate EOP"
    ITRF_EQUINOX_CONV_2010_SIMPLE_EOP = "Equinox/2010-based ITRF simple EOP"
    ITRF_EQUINOX_CONV_2010_ACCURATE_EOP = "Equinox/2010-based ITRF accurate EOP"

    ITRF_2005_WITHOUT_TIDAL_EFFECTS = "ITRF2005 without tidal effects"
    ITRF_2005_WITH_TIDAL_EFFECTS = "ITRF2005 with tidal effects"
    ITRF_2000_WITHOUT_TIDAL_EFFECTS = "ITRF2000 without tidal effects"
    ITRF_2000_WITH_TIDAL_EFFECTS = "ITRF2000 with tidal effects"
    ITRF_97_WITHOUT_TIDAL_EFFECTS = "ITRF97 without tidal effects"
    ITRF_97_WITH_TIDAL_EFFECTS = "ITRF97 with tidal effects"
    ITRF_93_WITHOUT_TIDAL_EFFECTS = "ITRF93 without tidal effects"
    ITRF_93_WITH_TIDAL_EFFECTS = "ITRF93 with tidal effects"

    # Legacy names
    MOD_WITH_EOP_CORRECTIONS = "MOD/1996"
    TOD_WITH_EOP_CORRECTIONS = "TOD/1996 accurate EOP"
    GTOD_WITH_EOP_CORRECTIONS = "GTOD/1996 accurate EOP"
    ITRF_EQUINOX = "Equinox/1996-based ITRF simple EOP"
    CIRF_2000_CONV_2003 = "CIRF/2003 accurate EOP"
    CIRF_2000_CONV_2010 = "CIRF/2010 accurate EOP"
    TIRF_2000_CONV_2003_WITHOUT_TIDAL_EFFECTS = "TIRF/2003 simple EOP"
    TIRF_2000_CONV_2003_WITH_TIDAL_EFFECTS = "TIRF/2003 accurate EOP"
    TIRF_2000_CONV_2010_WITHOUT_TIDAL_EFFECTS = "TIRF/2010 simple EOP"
    TIRF_2000_CONV_2010_WITH_TIDAL_EFFECTS = "TIRF/2010 accurate EOP"
    ITRF_2008_WITHOUT_TIDAL_EFFECTS = "CIO/2010-based ITRF simple EOP"
    ITRF_2008_WITH_TIDAL_EFFECTS = "CIO/2010-based ITRF accurate EOP"

    @classmethod
    def resolve(cls, key: Predefined | str) -> Predefined:
        """Return the canonical member for a member, a member name or a frame name.

        Raises:
            KeyError: If *key* names no frame.
        """
        if isinstance(key, cls):
            return key
        if key in cls.__members__:
            return cls.__members__[key]
        try:
            return cls(key)
        except ValueError:
            raise KeyError(f"Unknown frame: {key!r}") from None
