"""Tests for astroframes.frames.interpolating."""

from __future__ import annotations

import threading
from collections import Counter
from concurrent.futures import ThreadPoolExecutor

import jax.numpy as jnp
import pytest

from astroframes.attitude_representations import Quaternion
from astroframes.constants import JULIAN_DAY, OMEGA_EARTH
from astroframes.conventions import IERSConventions
from astroframes.epoch import J2000_EPOCH, Epoch
from astroframes.errors import DataOutOfRangeError
from astroframes.frames import InterpolatingTransformProvider, TimeStampedCache, Transform

DATE = Epoch(2017, 9, 20, 3, 25, 17.0)
STEP = 3600.0

# Spin model: theta = THETA0 + W dt + A dt^2
THETA0 = 0.3
W = 7.29e-5
A = 1e-12


class _SpinningProvider:
    """Analytic provider: quadratic spin about z, cubic translation."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.calls: Counter = Counter()

    @staticmethod
    def expected(date: Epoch) -> Transform:
        dt = date - DATE
        theta = THETA0 + W * dt + A * dt * dt
        rate = W + 2.0 * A * dt
        translation = jnp.array([1000.0 + 0.02 * dt, -500.0 + 1e-6 * dt * dt, 1e-10 * dt**3])
        velocity = jnp.array([0.02, 2e-6 * dt, 3e-10 * dt * dt])
        return Transform(
            date,
            Quaternion.from_rotation_vector(jnp.array([0.0, 0.0, theta])),
            jnp.array([0.0, 0.0, rate]),
            translation,
            velocity,
        )

    def get_transform(self, date: Epoch) -> Transform:
        with self._lock:
            self.calls[date] += 1
        return self.expected(date)


@pytest.fixture
def spin():
    return _SpinningProvider()


@pytest.fixture
def provider(spin):
    return InterpolatingTransformProvider(spin, 6, STEP)


# ---------------------------------------------------------------------------
# Interpolation accuracy
# ---------------------------------------------------------------------------


class TestInterpolation:
    """Interpolated transforms against the analytic model."""

    @pytest.mark.parametrize("offset", [0.0, 123.4, 1800.0, 3599.0, -7000.0])
    def test_matches_model(self, provider, offset):
        date = DATE + offset
        actual = provider.get_transform(date)
        expected = _SpinningProvider.expected(date)
        assert actual.date == date
        assert float(actual.rotation.angle_to(expected.rotation)) < 1e-12
        assert jnp.allclose(actual.rotation_rate, expected.rotation_rate, rtol=0.0, atol=1e-16)
        assert jnp.allclose(actual.translation, expected.translation, rtol=0.0, atol=1e-6)
        assert jnp.allclose(actual.velocity, expected.velocity, rtol=0.0, atol=1e-8)

    def test_exact_at_grid_points(self, provider):
        grid = J2000_EPOCH + STEP * round((DATE - J2000_EPOCH) / STEP)
        actual = provider.get_transform(grid)
        expected = _SpinningProvider.expected(grid)
        assert float(actual.rotation.angle_to(expected.rotation)) < 1e-14
        assert jnp.allclose(actual.translation, expected.translation, rtol=0.0, atol=1e-9)

    def test_raw_provider_sampled_on_grid(self, provider, spin):
        provider.get_transform(DATE)
        assert len(spin.calls) == 6
        for date in spin.calls:
            k = (date - J2000_EPOCH) / STEP
            assert k == pytest.approx(round(k), abs=1e-9)

    def test_properties(self, provider, spin):
        assert provider.raw_provider is spin
        assert provider.grid_points == 6
        assert provider.step == STEP
        assert provider.cache.neighbors == 6

    def test_too_few_points(self, spin):
        with pytest.raises(ValueError):
            InterpolatingTransformProvider(spin, 1, STEP)


class TestRealFrames:
    """Interpolation error of the registry frames."""

    def test_tod(self, registry):
        tod = registry.get_tod(IERSConventions.IERS_2010)
        for offset in (0.0, 1234.5, 2 * JULIAN_DAY + 17.0):
            date = DATE + offset
            interpolated = tod.provider.get_transform(date)
            raw = tod.provider.raw_provider.get_transform(date)
            assert float(interpolated.rotation.angle_to(raw.rotation)) < 1e-10

    def test_gtod(self, registry):
        gtod = registry.get_gtod(IERSConventions.IERS_2010)
        date = DATE + 1234.5
        interpolated = gtod.provider.get_transform(date)
        raw = gtod.provider.raw_provider.get_transform(date)
        assert float(interpolated.rotation.angle_to(raw.rotation)) < 1e-9
        rate = interpolated.rotation_rate
        assert float(rate[2]) == pytest.approx(OMEGA_EARTH, abs=1e-10)
        assert abs(float(rate[0])) < 1e-10
        assert abs(float(rate[1])) < 1e-10

    @pytest.mark.parametrize("getter", ["get_tod", "get_gtod"])
    def test_grid_points(self, registry, getter):
        frame = getattr(registry, getter)(IERSConventions.IERS_2010)
        grid = J2000_EPOCH + STEP * round((DATE - J2000_EPOCH) / STEP)
        interpolated = frame.provider.get_transform(grid)
        raw = frame.provider.raw_provider.get_transform(grid)
        assert float(interpolated.rotation.angle_to(raw.rotation)) < 1e-12

    def test_slow_raw_provider_has_no_rate(self, registry):
        """Raw precession-nutation samples carry no rate; the interpolation supplies it."""
        tod = registry.get_tod(IERSConventions.IERS_2010)
        raw = tod.provider.raw_provider.get_transform(DATE)
        assert jnp.all(raw.rotation_rate == 0.0)
        interpolated = tod.provider.get_transform(DATE)
        # Nutation rates are below 1e-10 rad/s
        assert 0.0 < float(jnp.linalg.norm(interpolated.rotation_rate)) < 1e-10


# ---------------------------------------------------------------------------
# Sample cache
# ---------------------------------------------------------------------------


class TestCacheSlots:
    """Slot reuse, extension, creation and eviction."""

    def test_reuse(self, provider):
        provider.get_transform(DATE)
        provider.get_transform(DATE + 600.0)
        assert provider.cache.generate_calls == 1
        assert provider.cache.slots_number == 1

    def test_extend(self, provider, spin):
        provider.get_transform(DATE)
        provider.get_transform(DATE + 3600.0)
        assert provider.cache.generate_calls == 2
        assert provider.cache.slots_number == 1
        assert len(spin.calls) == 7

    def test_new_slot(self, provider):
        provider.get_transform(DATE)
        provider.get_transform(DATE + 100 * JULIAN_DAY)
        assert provider.cache.slots_number == 2
        assert provider.cache.generate_calls == 2

    def test_least_recently_used_eviction(self, spin):
        provider = InterpolatingTransformProvider(spin, 6, STEP, max_slots=2)
        provider.get_transform(DATE)
        provider.get_transform(DATE + 100 * JULIAN_DAY)
        provider.get_transform(DATE)
        provider.get_transform(DATE + 200 * JULIAN_DAY)
        assert provider.cache.slots_number == 2
        calls = provider.cache.generate_calls

        # The slot around DATE was used last and is kept
        provider.get_transform(DATE)
        assert provider.cache.generate_calls == calls
        provider.get_transform(DATE + 100 * JULIAN_DAY)
        assert provider.cache.generate_calls == calls + 1

    def test_max_span_drops_far_samples(self):
        cache = TimeStampedCache(lambda d: d, 2, 60.0, 10, 600.0, 3600.0)
        cache.get_neighbors(J2000_EPOCH + 30.0)
        first, samples = cache.get_neighbors(J2000_EPOCH + 20 * 60.0 + 30.0)
        assert first == 20
        assert samples == [J2000_EPOCH + 1200.0, J2000_EPOCH + 1260.0]
        calls = cache.generate_calls

        # The start of the slot was dropped and must be generated again
        first, samples = cache.get_neighbors(J2000_EPOCH + 30.0)
        assert first == 0
        assert samples == [J2000_EPOCH, J2000_EPOCH + 60.0]
        assert cache.generate_calls == calls + 1
        assert cache.slots_number == 1

    def test_extends_nearest_slot(self):
        generated = []

        def generate(date):
            generated.append(date)
            return date

        cache = TimeStampedCache(generate, 2, 60.0, 10, 3600.0, 1200.0)
        cache.get_neighbors(J2000_EPOCH + 30.0)
        cache.get_neighbors(J2000_EPOCH + 30 * 60.0 + 30.0)
        assert cache.slots_number == 2
        del generated[:]

        # Both slots are within reach, the one starting at sample 30 is closer
        first, samples = cache.get_neighbors(J2000_EPOCH + 20 * 60.0 + 30.0)
        assert first == 20
        assert samples == [J2000_EPOCH + 1200.0, J2000_EPOCH + 1260.0]
        assert generated == [J2000_EPOCH + 60.0 * k for k in range(20, 30)]
        assert cache.slots_number == 2

    def test_neighbors_window(self):
        cache = TimeStampedCache(lambda d: d, 4, 60.0, 10, 3600.0, 3600.0)
        first, samples = cache.get_neighbors(J2000_EPOCH + 150.0)
        # floor(2.5) - (4 - 1) // 2
        assert first == 1
        assert samples == [J2000_EPOCH + 60.0 * k for k in range(1, 5)]
        assert cache.grid_date(first) == samples[0]


class TestCacheErrors:
    def test_before_earliest(self, spin):
        provider = InterpolatingTransformProvider(spin, 6, STEP, earliest=DATE)
        with pytest.raises(DataOutOfRangeError):
            provider.get_transform(DATE - 1.0)

    def test_after_latest(self, spin):
        provider = InterpolatingTransformProvider(spin, 6, STEP, latest=DATE)
        provider.get_transform(DATE)
        with pytest.raises(DataOutOfRangeError):
            provider.get_transform(DATE + 1.0)

    @pytest.mark.parametrize(
        "neighbors, step, max_slots",
        [(0, 60.0, 10), (2, 0.0, 10), (2, 60.0, 0)],
    )
    def test_invalid_arguments(self, neighbors, step, max_slots):
        with pytest.raises(ValueError):
            TimeStampedCache(lambda d: d, neighbors, step, max_slots, 3600.0, 3600.0)


class TestConcurrency:
    """Concurrent queries share the cache."""

    def test_each_grid_date_generated_once(self, provider, spin):
        dates = [DATE + 60.0 * k for k in range(64)]
        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(provider.get_transform, dates))
        assert len(results) == len(dates)
        assert set(spin.calls.values()) == {1}

    def test_concurrent_results_match_serial(self, spin):
        shared = InterpolatingTransformProvider(spin, 6, STEP)
        dates = [DATE + 97.0 * k for k in range(32)]
        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(shared.get_transform, dates))
        serial = InterpolatingTransformProvider(_SpinningProvider(), 6, STEP)
        for date, result in zip(dates, results):
            expected = serial.get_transform(date)
            assert float(result.rotation.angle_to(expected.rotation)) < 1e-14
