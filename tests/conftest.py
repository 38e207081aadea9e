import jax.numpy as jnp
import pytest

from astroframes.config import set_dtype
from astroframes.constants import AS2RAD, MAS2RAD
from astroframes.conventions import IERSConventions
from astroframes.eop import InMemoryEOPLoader
from astroframes.frames import FrameRegistry, reset_default_registry, set_default_registry

# Synthetic EOP series: one entry per day, no leap second in the range
EOP_FIRST_MJD = 58000
EOP_DAYS = 61


def synthetic_eop_rows(first_mjd: int = EOP_FIRST_MJD, days: int = EOP_DAYS) -> list[tuple]:
    """Daily ``(mjd, ut1_utc, lod, x_p, y_p, dX, dY)`` rows varying linearly."""
    rows = []
    for d in range(days):
        rows.append((
            float(first_mjd + d),
            0.35 - 0.0012 * d,
            0.0012,
            (0.05 + 0.001 * d) * AS2RAD,
            (0.30 + 0.0005 * d) * AS2RAD,
            0.1 * MAS2RAD,
            -0.05 * MAS2RAD,
        ))
    return rows


@pytest.fixture(autouse=True)
def _ensure_float64():
    """Set float64 precision before every test.

    With pytest-xdist, each worker process starts with a fresh interpreter.
    This fixture ensures all tests get float64 unless they explicitly override
    it.
    """
    set_dtype(jnp.float64)


@pytest.fixture(autouse=True)
def registry(monkeypatch, tmp_path):
    """Fresh default frame registry fed with the synthetic EOP series.

    The cache directory points to an empty temporary directory so no test
    reads EOP files installed on the machine.
    """
    monkeypatch.setenv("ASTROFRAMES_CACHE", str(tmp_path / "cache"))
    frames = FrameRegistry()
    for conventions in IERSConventions:
        frames.add_eop_history_loader(conventions, InMemoryEOPLoader(synthetic_eop_rows()))
    set_default_registry(frames)
    yield frames
    reset_default_registry()


@pytest.fixture
def eop_rows():
    """The synthetic EOP rows served by the default registry."""
    return synthetic_eop_rows()
