"""Filesystem cache directory helpers.

Locates the astroframes cache directory used for downloaded Earth
Orientation Parameter files and checks whether a cached file needs to be
refreshed. These are pure-Python utilities with no JAX dependency.

The cache root is determined by the ``ASTROFRAMES_CACHE`` environment
variable. If unset, it defaults to ``~/.cache/astroframes``.
"""

from __future__ import annotations

import os
import time
from pathlib import Path

_ENV_VAR = "ASTROFRAMES_CACHE"
_DEFAULT_SUBDIR = ".cache/astroframes"


def get_cache_dir(subdirectory: str | None = None) -> Path:
    """Return the astroframes cache directory, creating it if needed.

    The root is ``$ASTROFRAMES_CACHE`` if set, otherwise
    ``~/.cache/astroframes``. An optional *subdirectory* is appended and
    also created.

    Args:
        subdirectory: Optional subdirectory to append (e.g. ``"eop"``).

    Returns:
        Resolved :class:`~pathlib.Path` to the cache directory.
    """
    env = os.environ.get(_ENV_VAR)
    root = Path(env) if env is not None else Path.home() / _DEFAULT_SUBDIR

    if subdirectory is not None:
        root = root / subdirectory

    root.mkdir(parents=True, exist_ok=True)
    return root


def get_eop_cache_dir() -> Path:
    """Return the EOP cache directory (``<cache>/eop``)."""
    return get_cache_dir("eop")


def file_age_days(filepath: str | Path) -> float:
    """Return the age of *filepath* in days since last modification.

    Args:
        filepath: Path to the file.

    Returns:
        Days elapsed since the file was last modified.

    Raises:
        FileNotFoundError: If *filepath* does not exist.
    """
    filepath = Path(filepath)
    if not filepath.exists():
        raise FileNotFoundError(f"No such file: '{filepath}'")
    return max(0.0, time.time() - filepath.stat().st_mtime) / 86400.0


def is_file_stale(filepath: str | Path, max_age_days: float) -> bool:
    """Check whether *filepath* is missing or older than *max_age_days*.

    Args:
        filepath: Path to the file.
        max_age_days: Maximum acceptable age in days.

    Returns:
        ``True`` if the file is missing or should be downloaded again.
    """
    filepath = Path(filepath)
    if not filepath.exists():
        return True
    return file_age_days(filepath) > max_age_days
