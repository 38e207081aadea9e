"""Download IERS Earth Orientation Parameter files.

Fetches ``finals.all.iau2000.txt`` from the IERS data centre into the
astroframes cache directory, where the default directory loaders of the
frame registry look for it. Network errors are propagated to the caller.
"""

from __future__ import annotations

import logging
from pathlib import Path

import httpx

from astroframes.utils.caching import get_eop_cache_dir, is_file_stale

logger = logging.getLogger(__name__)

IERS_STANDARD_URL: str = (
    "https://datacenter.iers.org/data/latestVersion/finals.all.iau2000.txt"
)
"""Default URL for the IERS Standard Bulletin A finals file."""

STANDARD_FILENAME: str = "finals.all.iau2000.txt"
"""Canonical filename used for cached EOP data."""

_DEFAULT_TIMEOUT: float = 120.0
"""Default HTTP timeout in seconds."""

_DEFAULT_MAX_AGE_DAYS: float = 7.0
"""Default maximum age for cached EOP data in days."""


def download_standard_eop_file(
    filepath: str | Path,
    *,
    url: str = IERS_STANDARD_URL,
    timeout: float = _DEFAULT_TIMEOUT,
) -> Path:
    """Download an IERS standard EOP file to *filepath*.

    Creates parent directories if they do not exist.  On success the
    downloaded text is written to *filepath* and the resolved path is
    returned.

    Args:
        filepath: Destination path for the downloaded file.
        url: URL to fetch.  Defaults to :data:`IERS_STANDARD_URL`.
        timeout: HTTP timeout in seconds.  Defaults to 120.

    Returns:
        Resolved :class:`~pathlib.Path` to the written file.

    Raises:
        httpx.HTTPStatusError: If the server returns a non-2xx status.
        httpx.TransportError: On network-level failures (DNS, timeout, etc.).
    """
    filepath = Path(filepath)
    filepath.parent.mkdir(parents=True, exist_ok=True)

    logger.info("Downloading EOP data from %s", url)
    with httpx.Client(timeout=timeout, follow_redirects=True) as client:
        response = client.get(url)
        response.raise_for_status()

    filepath.write_text(response.text, encoding="utf-8")
    logger.info("EOP data written to %s", filepath)
    return filepath.resolve()


def refresh_cached_eop(
    max_age_days: float = _DEFAULT_MAX_AGE_DAYS,
    *,
    directory: str | Path | None = None,
    url: str = IERS_STANDARD_URL,
) -> Path:
    """Download the finals file into the cache when it is missing or stale.

    Args:
        max_age_days: Maximum acceptable age of the cached file in days.
        directory: Cache directory. Defaults to ``<cache>/eop``.
        url: URL to fetch when a download is needed.

    Returns:
        Path to the cached file.

    Raises:
        httpx.HTTPError: If a download was needed and failed.
    """
    directory = get_eop_cache_dir() if directory is None else Path(directory)
    filepath = directory / STANDARD_FILENAME
    if is_file_stale(filepath, max_age_days):
        return download_standard_eop_file(filepath, url=url)
    logger.debug("Cached EOP file %s is up to date", filepath)
    return filepath
