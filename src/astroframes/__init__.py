"""
astroframes is a tree of astronomical and terrestrial reference frames implemented in JAX.
"""

from .constants import (
    DEG2RAD,
    RAD2DEG,
    AS2RAD,
    RAD2AS,
    MAS2RAD,
    JD_MJD_OFFSET,
    MJD2000,
    JULIAN_DAY,
    JULIAN_YEAR,
    OMEGA_EARTH,
)

from .config import (
    set_dtype,
    get_dtype,
    set_cache_slots_number,
    get_cache_slots_number,
    set_eop_max_gap,
    get_eop_max_gap,
)

from .errors import (
    AstroFramesError,
    EOPDataUnavailableError,
    EOPContinuityError,
    FrameInternalError,
    DataOutOfRangeError,
)

from .epoch import Epoch, J2000_EPOCH
from .conventions import IERSConventions

from .attitude_representations import (
    Rx,
    Ry,
    Rz,
    Quaternion,
)

from .eop import (
    EOPEntry,
    EOPExtrapolation,
    EOPHistory,
    InMemoryEOPLoader,
    StandardFileLoader,
    DirectoryEOPLoader,
)

from .frames import (
    Transform,
    Frame,
    FrameRegistry,
    Predefined,
    InterpolatingTransformProvider,
    get_frame,
    get_eop_history,
    add_eop_history_loader,
    clear_eop_history_loaders,
    get_non_interpolating_transform,
)
