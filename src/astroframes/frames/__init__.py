"""Reference frames.

This sub-module provides the frame tree and everything needed to move
positions and velocities between frames:

- **Transform**: immutable rotation + translation with their rates.
- **Providers**: physical models giving the transform from a frame's
  parent to the frame (precession, nutation, sidereal time, polar motion,
  Helmert shifts between ITRF realizations).
- **InterpolatingTransformProvider**: caches samples of an expensive
  provider on a time grid and interpolates between them.
- **Frame** and **FrameRegistry**: the lazily built tree of predefined
  frames rooted at GCRF.
"""

from .transform import Transform
from .providers import (
    CIRFProvider,
    EclipticProvider,
    EME2000Provider,
    FixedTransformProvider,
    GTODProvider,
    ITRFEquinoxProvider,
    ITRFProvider,
    MODProvider,
    TEMEProvider,
    TIRFProvider,
    TODProvider,
    TransformProvider,
    VEISProvider,
)
from .helmert import HelmertPredefined, HelmertTransformation
from .interpolating import InterpolatingTransformProvider, TimeStampedCache
from .frame import Frame, get_non_interpolating_transform
from .predefined import Predefined
from .registry import (
    FrameRegistry,
    add_eop_history_loader,
    clear_eop_history_loaders,
    get_default_registry,
    get_eop_history,
    get_frame,
    reset_default_registry,
    set_default_registry,
)
