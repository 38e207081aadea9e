"""Thread-safe registry building predefined frames and EOP histories on demand.

:class:`FrameRegistry` builds each :class:`~astroframes.frames.predefined.Predefined`
frame the first time it is requested, from a declarative recipe table
giving its parent, the factory of its transform provider and whether it is
pseudo-inertial. Parents are built recursively. Frames and EOP histories
are cached, so every later request returns the same object.

Builds are single-flight: the first thread requesting a key registers a
:class:`concurrent.futures.Future` and builds; other threads wait on that
future. The table lock is only held to check and insert futures, never
while loaders run or providers are constructed. A failed build propagates
its exception to every waiter and leaves the key unbuilt, so a later
request retries.

A module-level default registry backs the convenience functions
:func:`get_frame`, :func:`get_eop_history`, :func:`add_eop_history_loader`
and :func:`clear_eop_history_loaders`.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from concurrent.futures import Future
from pathlib import Path
from typing import NamedTuple

from astroframes.config import get_eop_max_gap
from astroframes.constants import JULIAN_DAY
from astroframes.conventions import IERSConventions
from astroframes.epoch import Epoch
from astroframes.eop._history import EOPEntrySet, EOPHistory
from astroframes.eop._loaders import (
    FINALS_1980_PATTERN,
    FINALS_2000_PATTERN,
    DirectoryEOPLoader,
    EOPHistoryLoader,
)
from astroframes.errors import EOPDataUnavailableError, FrameInternalError
from astroframes.frames.frame import Frame, get_non_interpolating_transform
from astroframes.frames.helmert import HelmertPredefined
from astroframes.frames.interpolating import InterpolatingTransformProvider
from astroframes.frames.predefined import Predefined
from astroframes.frames.providers import (
    CIRFProvider,
    EclipticProvider,
    EME2000Provider,
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
from astroframes.frames.transform import Transform
from astroframes.utils.caching import get_eop_cache_dir

logger = logging.getLogger(__name__)

# Interpolation grids
_GRID_POINTS = 6
_EOP_STEP = JULIAN_DAY / 24
_NO_EOP_STEP = JULIAN_DAY / 8


class _Recipe(NamedTuple):
    """How to build one predefined frame."""

    parent: Predefined
    factory: Callable[[FrameRegistry, Frame], TransformProvider]
    pseudo_inertial: bool


def _year(conventions: IERSConventions) -> str:
    return conventions.value[-4:]


def _eop_key(prefix: str, conventions: IERSConventions, simple_eop: bool) -> Predefined:
    accuracy = "SIMPLE" if simple_eop else "ACCURATE"
    return Predefined[f"{prefix}_{_year(conventions)}_{accuracy}_EOP"]


def _check_eop_application(conventions: IERSConventions, apply_eop: bool) -> None:
    if not apply_eop and conventions is not IERSConventions.IERS_1996:
        raise FrameInternalError(
            f"EOP corrections can only be omitted with IERS 1996 conventions, not {conventions.value}"
        )


def _raw(frame: Frame) -> TransformProvider:
    provider = frame.provider
    while isinstance(provider, InterpolatingTransformProvider):
        provider = provider.raw_provider
    return provider


def _await(table: dict, key, lock: threading.Lock, build: Callable[[], object]):
    """Return the cached value of *key*, building it once across threads."""
    with lock:
        future = table.get(key)
        owner = future is None
        if owner:
            future = Future()
            table[key] = future

    if not owner:
        return future.result()

    try:
        value = build()
    except Exception as e:
        with lock:
            if table.get(key) is future:
                del table[key]
        future.set_exception(e)
        raise
    future.set_result(value)
    return value


class FrameRegistry:
    """Lazily built, cached tree of predefined frames and EOP histories."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._frames: dict[Predefined, Future] = {}
        self._histories: dict[tuple[IERSConventions, bool], Future] = {}
        self._loaders: dict[IERSConventions, list[EOPHistoryLoader]] = {c: [] for c in IERSConventions}

    # EOP loaders and histories

    def add_eop_history_loader(self, conventions: IERSConventions, loader: EOPHistoryLoader) -> None:
        """Register a loader for *conventions*, after those already registered.

        Cached EOP histories are discarded.
        """
        with self._lock:
            self._loaders[conventions].append(loader)
            self._histories.clear()

    def clear_eop_history_loaders(self) -> None:
        """Remove every loader and discard cached EOP histories."""
        with self._lock:
            for loaders in self._loaders.values():
                loaders.clear()
            self._histories.clear()

    def add_default_eop_history_loaders(self, data_dir: str | Path | None = None) -> None:
        """Register directory loaders for the standard IERS file names.

        IERS 1996 reads ``finals.*`` files (nutation corrections), then the
        IAU 2000 files converted to nutation corrections. IERS 2003 and 2010
        read ``finals2000A.*`` and ``finals.all.iau2000.txt`` files.

        Args:
            data_dir: Directory holding the files. Defaults to the EOP cache
                directory.
        """
        directory = get_eop_cache_dir() if data_dir is None else Path(data_dir)
        with self._lock:
            self._add_default_loaders(directory)
            self._histories.clear()

    def _add_default_loaders(self, directory: Path) -> None:
        self._loaders[IERSConventions.IERS_1996].extend([
            DirectoryEOPLoader(directory, FINALS_1980_PATTERN, nonrotating=False),
            DirectoryEOPLoader(directory, FINALS_2000_PATTERN, nonrotating=True),
        ])
        for conventions in (IERSConventions.IERS_2003, IERSConventions.IERS_2010):
            self._loaders[conventions].append(
                DirectoryEOPLoader(directory, FINALS_2000_PATTERN, nonrotating=True)
            )

    def _snapshot_loaders(self, conventions: IERSConventions) -> list[EOPHistoryLoader]:
        with self._lock:
            if not any(self._loaders.values()):
                self._add_default_loaders(get_eop_cache_dir())
            return list(self._loaders[conventions])

    def get_eop_history(self, conventions: IERSConventions, simple_eop: bool = True) -> EOPHistory:
        """Return the EOP history of *conventions*, loading it on first use.

        Every loader registered for the convention fills the same entry
        set, in registration order; the first loader supplying a date wins.

        Raises:
            EOPDataUnavailableError: If no loader supplied any entry.
            EOPContinuityError: If the merged entries have a gap larger than
                :func:`~astroframes.config.get_eop_max_gap`.
        """
        return _await(
            self._histories,
            (conventions, simple_eop),
            self._lock,
            lambda: self._load_history(conventions, simple_eop),
        )

    def _load_history(self, conventions: IERSConventions, simple_eop: bool) -> EOPHistory:
        loaders = self._snapshot_loaders(conventions)
        converter = conventions.nutation_correction_converter()
        entries = EOPEntrySet()
        failure = None
        for loader in loaders:
            try:
                loader.fill_history(converter, entries)
            except (EOPDataUnavailableError, OSError) as e:
                logger.warning("EOP loader %r failed for %s: %s", loader, conventions.value, e)
                failure = e

        if not entries:
            raise EOPDataUnavailableError(
                f"No EOP data available for {conventions.value} from {len(loaders)} loader(s)"
            ) from failure

        history = EOPHistory(conventions, entries, simple_eop)
        history.check_eop_continuity(get_eop_max_gap())
        return history

    # Frames

    def get_gcrf(self) -> Frame:
        """Return the root frame (GCRF)."""
        return Frame.get_root()

    get_root = get_gcrf

    def get_frame(self, key: Predefined | str) -> Frame:
        """Return the predefined frame *key*, building it on first use.

        Args:
            key: Member of :class:`Predefined`, its name or its frame name.

        Raises:
            KeyError: If *key* names no frame.
            EOPDataUnavailableError: If the frame needs EOP data and none
                can be loaded.
        """
        key = Predefined.resolve(key)
        if key is Predefined.GCRF:
            return Frame.get_root()
        return _await(self._frames, key, self._lock, lambda: self._build(key))

    def _build(self, key: Predefined) -> Frame:
        recipe = _RECIPES.get(key)
        if recipe is None:
            raise FrameInternalError(f"No recipe for frame {key.name}")
        parent = self.get_frame(recipe.parent)
        provider = recipe.factory(self, parent)
        logger.debug("Built frame %s", key.value)
        return Frame(parent, provider, key.value, recipe.pseudo_inertial)

    def get_eme2000(self) -> Frame:
        return self.get_frame(Predefined.EME2000)

    def get_mod(self, conventions: IERSConventions, apply_eop: bool = True) -> Frame:
        """Mean of date frame.

        Args:
            conventions: IERS conventions.
            apply_eop: If ``False`` (IERS 1996 only), the frame derives from
                EME2000 instead of GCRF.
        """
        _check_eop_application(conventions, apply_eop)
        if not apply_eop:
            return self.get_frame(Predefined.MOD_WITHOUT_EOP_CORRECTIONS)
        return self.get_frame(Predefined[f"MOD_CONVENTIONS_{_year(conventions)}"])

    def get_tod(self, conventions: IERSConventions, apply_eop: bool = True, simple_eop: bool = True) -> Frame:
        """True of date frame.

        Args:
            conventions: IERS conventions.
            apply_eop: If ``False`` (IERS 1996 only), nutation corrections
                are ignored.
            simple_eop: If ``True``, tidal effects on EOP are ignored.
        """
        _check_eop_application(conventions, apply_eop)
        if not apply_eop:
            return self.get_frame(Predefined.TOD_WITHOUT_EOP_CORRECTIONS)
        return self.get_frame(_eop_key("TOD_CONVENTIONS", conventions, simple_eop))

    def get_gtod(self, conventions: IERSConventions, apply_eop: bool = True, simple_eop: bool = True) -> Frame:
        """Greenwich true of date frame, see :meth:`get_tod` for the arguments."""
        _check_eop_application(conventions, apply_eop)
        if not apply_eop:
            return self.get_frame(Predefined.GTOD_WITHOUT_EOP_CORRECTIONS)
        return self.get_frame(_eop_key("GTOD_CONVENTIONS", conventions, simple_eop))

    def get_teme(self) -> Frame:
        return self.get_frame(Predefined.TEME)

    def get_veis1950(self) -> Frame:
        return self.get_frame(Predefined.VEIS_1950)

    def get_ecliptic(self, conventions: IERSConventions) -> Frame:
        return self.get_frame(Predefined[f"ECLIPTIC_CONVENTIONS_{_year(conventions)}"])

    def get_cirf(self, conventions: IERSConventions, simple_eop: bool = True) -> Frame:
        return self.get_frame(_eop_key("CIRF_CONVENTIONS", conventions, simple_eop))

    def get_tirf(self, conventions: IERSConventions, simple_eop: bool = True) -> Frame:
        return self.get_frame(_eop_key("TIRF_CONVENTIONS", conventions, simple_eop))

    def get_itrf(self, conventions: IERSConventions, simple_eop: bool = True) -> Frame:
        """CIO-based ITRF.

        Args:
            conventions: IERS conventions.
            simple_eop: If ``True``, tidal effects on EOP are ignored.
        """
        return self.get_frame(_eop_key("ITRF_CIO_CONV", conventions, simple_eop))

    def get_itrf_equinox(self, conventions: IERSConventions, simple_eop: bool = True) -> Frame:
        """Equinox-based ITRF, derived from GTOD."""
        return self.get_frame(_eop_key("ITRF_EQUINOX_CONV", conventions, simple_eop))

    def _as_frame(self, frame: Frame | Predefined | str) -> Frame:
        return frame if isinstance(frame, Frame) else self.get_frame(frame)

    def get_transform(
        self, source: Frame | Predefined | str, destination: Frame | Predefined | str, date: Epoch
    ) -> Transform:
        """Return the transform between two frames at *date*."""
        return self._as_frame(source).get_transform_to(self._as_frame(destination), date)

    def get_non_interpolating_transform(
        self, source: Frame | Predefined | str, destination: Frame | Predefined | str, date: Epoch
    ) -> Transform:
        """Return the transform between two frames at *date*, bypassing interpolation."""
        return get_non_interpolating_transform(self._as_frame(source), self._as_frame(destination), date)

    # Provider factories

    def _mod_provider(self, conventions: IERSConventions, apply_eop: bool) -> MODProvider:
        _check_eop_application(conventions, apply_eop)
        return MODProvider(conventions)

    def _tod_provider(
        self, conventions: IERSConventions, apply_eop: bool, simple_eop: bool
    ) -> InterpolatingTransformProvider:
        _check_eop_application(conventions, apply_eop)
        if apply_eop:
            eop_history = self.get_eop_history(conventions, simple_eop)
            step = _EOP_STEP
        else:
            logger.info("Building %s TOD frame without EOP corrections", conventions.value)
            eop_history = None
            step = _NO_EOP_STEP
        return InterpolatingTransformProvider(TODProvider(conventions, eop_history), _GRID_POINTS, step)

    def _gtod_provider(self, tod: Frame) -> InterpolatingTransformProvider:
        tod_provider = tod.provider
        raw = _raw(tod)
        return InterpolatingTransformProvider(
            GTODProvider(raw.conventions, raw.eop_history),
            tod_provider.grid_points,
            tod_provider.step,
        )

    def _teme_provider(self, tod: Frame) -> InterpolatingTransformProvider:
        tod_provider = tod.provider
        return InterpolatingTransformProvider(
            TEMEProvider(IERSConventions.IERS_1996, None),
            tod_provider.grid_points,
            tod_provider.step,
        )

    def _cirf_provider(self, conventions: IERSConventions, simple_eop: bool) -> InterpolatingTransformProvider:
        eop_history = self.get_eop_history(conventions, simple_eop)
        return InterpolatingTransformProvider(CIRFProvider(conventions, eop_history), _GRID_POINTS, _EOP_STEP)

    def _tirf_provider(self, cirf: Frame) -> TIRFProvider:
        raw = _raw(cirf)
        return TIRFProvider(raw.conventions, raw.eop_history)

    def _itrf_provider(self, tirf: Frame) -> ITRFProvider:
        raw = _raw(tirf)
        return ITRFProvider(raw.conventions, raw.eop_history)

    def _itrf_equinox_provider(self, gtod: Frame) -> ITRFEquinoxProvider:
        raw = _raw(gtod)
        return ITRFEquinoxProvider(raw.conventions, raw.eop_history)


def _build_recipes() -> dict[Predefined, _Recipe]:
    recipes = {
        Predefined.EME2000: _Recipe(Predefined.GCRF, lambda r, p: EME2000Provider(), True),
        Predefined.MOD_WITHOUT_EOP_CORRECTIONS: _Recipe(
            Predefined.EME2000,
            lambda r, p: r._mod_provider(IERSConventions.IERS_1996, False),
            True,
        ),
        Predefined.TOD_WITHOUT_EOP_CORRECTIONS: _Recipe(
            Predefined.MOD_WITHOUT_EOP_CORRECTIONS,
            lambda r, p: r._tod_provider(IERSConventions.IERS_1996, False, True),
            True,
        ),
        Predefined.GTOD_WITHOUT_EOP_CORRECTIONS: _Recipe(
            Predefined.TOD_WITHOUT_EOP_CORRECTIONS, lambda r, p: r._gtod_provider(p), False
        ),
        Predefined.TEME: _Recipe(
            Predefined.TOD_WITHOUT_EOP_CORRECTIONS, lambda r, p: r._teme_provider(p), True
        ),
        Predefined.VEIS_1950: _Recipe(
            Predefined.GTOD_WITHOUT_EOP_CORRECTIONS, lambda r, p: VEISProvider(), True
        ),
    }

    for conventions in IERSConventions:
        year = _year(conventions)
        mod = Predefined[f"MOD_CONVENTIONS_{year}"]
        # IERS 1996 precession is applied to GCRF, the EOP nutation
        # corrections absorbing the frame bias
        mod_parent = Predefined.GCRF if conventions is IERSConventions.IERS_1996 else Predefined.EME2000
        recipes[mod] = _Recipe(mod_parent, lambda r, p, c=conventions: r._mod_provider(c, True), True)
        recipes[Predefined[f"ECLIPTIC_CONVENTIONS_{year}"]] = _Recipe(
            mod, lambda r, p, c=conventions: EclipticProvider(c), True
        )

        for simple_eop in (True, False):
            tod = _eop_key("TOD_CONVENTIONS", conventions, simple_eop)
            gtod = _eop_key("GTOD_CONVENTIONS", conventions, simple_eop)
            cirf = _eop_key("CIRF_CONVENTIONS", conventions, simple_eop)
            tirf = _eop_key("TIRF_CONVENTIONS", conventions, simple_eop)
            recipes[tod] = _Recipe(
                mod, lambda r, p, c=conventions, s=simple_eop: r._tod_provider(c, True, s), True
            )
            recipes[gtod] = _Recipe(tod, lambda r, p: r._gtod_provider(p), False)
            recipes[cirf] = _Recipe(
                Predefined.GCRF, lambda r, p, c=conventions, s=simple_eop: r._cirf_provider(c, s), True
            )
            recipes[tirf] = _Recipe(cirf, lambda r, p: r._tirf_provider(p), False)
            recipes[_eop_key("ITRF_CIO_CONV", conventions, simple_eop)] = _Recipe(
                tirf, lambda r, p: r._itrf_provider(p), False
            )
            recipes[_eop_key("ITRF_EQUINOX_CONV", conventions, simple_eop)] = _Recipe(
                gtod, lambda r, p: r._itrf_equinox_provider(p), False
            )

    for realization in ("2005", "2000", "97", "93"):
        helmert = HelmertPredefined[f"ITRF_2008_TO_ITRF_{realization}"]
        for tidal, parent in (
            ("WITHOUT", Predefined.ITRF_CIO_CONV_2010_SIMPLE_EOP),
            ("WITH", Predefined.ITRF_CIO_CONV_2010_ACCURATE_EOP),
        ):
            recipes[Predefined[f"ITRF_{realization}_{tidal}_TIDAL_EFFECTS"]] = _Recipe(
                parent, lambda r, p, h=helmert: h.transformation(), False
            )

    return recipes


_RECIPES = _build_recipes()


# Default registry

_default_registry: FrameRegistry | None = None
_default_lock = threading.Lock()


def get_default_registry() -> FrameRegistry:
    """Return the process-wide registry, creating it on first use."""
    global _default_registry
    with _default_lock:
        if _default_registry is None:
            _default_registry = FrameRegistry()
        return _default_registry


def set_default_registry(registry: FrameRegistry) -> None:
    """Replace the process-wide registry."""
    global _default_registry
    with _default_lock:
        _default_registry = registry


def reset_default_registry() -> None:
    """Drop the process-wide registry; the next use creates a fresh one."""
    global _default_registry
    with _default_lock:
        _default_registry = None


def get_frame(key: Predefined | str) -> Frame:
    """Return a predefined frame from the default registry."""
    return get_default_registry().get_frame(key)


def get_eop_history(conventions: IERSConventions, simple_eop: bool = True) -> EOPHistory:
    """Return an EOP history from the default registry."""
    return get_default_registry().get_eop_history(conventions, simple_eop)


def add_eop_history_loader(conventions: IERSConventions, loader: EOPHistoryLoader) -> None:
    """Register an EOP loader with the default registry."""
    get_default_registry().add_eop_history_loader(conventions, loader)


def clear_eop_history_loaders() -> None:
    """Remove every EOP loader from the default registry."""
    get_default_registry().clear_eop_history_loaders()
