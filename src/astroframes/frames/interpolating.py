"""Interpolating transform provider backed by a sliding-window sample cache.

Precession-nutation and sidereal-time series are expensive to evaluate but
vary smoothly. :class:`InterpolatingTransformProvider` evaluates its raw
provider only on a fixed time grid ``J2000 + k * step`` and interpolates
between the samples nearest to each query date:

- **Rotation**: the rotation vectors of the samples relative to the middle
  sample are fitted with a Lagrange polynomial. The rotation rate follows
  from the derivative of the fit through the right Jacobian of the
  exponential map.
- **Translation**: Hermite interpolation of translation and velocity.

Samples live in a :class:`TimeStampedCache` made of slots: runs of
consecutive grid samples. A query reuses the slot covering it, extends a
slot lying close enough, or opens a new slot (evicting the least recently
used one when all slots are taken). Slots are only mutated under the cache
lock, so a given grid sample is computed once even under concurrent
queries; interpolation itself runs outside the lock.
"""

from __future__ import annotations

import logging
import math
import threading
from collections.abc import Callable

import jax
import jax.numpy as jnp
from jax import Array

from astroframes.attitude_representations import Quaternion
from astroframes.attitude_representations.conversions import (
    quaternion_conjugate,
    quaternion_multiply,
    quaternion_to_rotation_vector,
    rotation_vector_right_jacobian,
    rotation_vector_to_quaternion,
)
from astroframes.config import get_cache_slots_number
from astroframes.constants import JULIAN_DAY, JULIAN_YEAR
from astroframes.epoch import J2000_EPOCH, Epoch
from astroframes.errors import DataOutOfRangeError
from astroframes.frames.providers import TransformProvider
from astroframes.frames.transform import Transform
from astroframes.utils.interpolation import hermite_interpolate, lagrange_interpolate

logger = logging.getLogger(__name__)


class _Slot:
    """Run of consecutive grid samples starting at grid index ``first``."""

    __slots__ = ('first', 'samples', 'last_access')

    def __init__(self, first: int, samples: list, last_access: int) -> None:
        self.first = first
        self.samples = samples
        self.last_access = last_access

    @property
    def last(self) -> int:
        return self.first + len(self.samples) - 1


class TimeStampedCache:
    """Thread-safe cache of samples taken on the grid ``J2000 + k * step``.

    Args:
        generate: Callable returning the sample at a grid date.
        neighbors: Number of consecutive samples returned per query.
        step: Grid step [s].
        max_slots: Maximum number of slots retained.
        max_span: Maximum time span covered by one slot [s]. A slot growing
            beyond it drops samples at its far end.
        new_slot_interval: A query farther than this from every slot opens
            a new slot instead of extending one [s].
        earliest: Earliest date the cache may serve, ``None`` for no bound.
        latest: Latest date the cache may serve, ``None`` for no bound.

    Raises:
        ValueError: If *neighbors*, *step* or *max_slots* is not positive.
    """

    def __init__(
        self,
        generate: Callable[[Epoch], object],
        neighbors: int,
        step: float,
        max_slots: int,
        max_span: float,
        new_slot_interval: float,
        earliest: Epoch | None = None,
        latest: Epoch | None = None,
    ) -> None:
        if neighbors < 1:
            raise ValueError(f"Number of neighbors must be positive, got {neighbors}")
        if step <= 0.0:
            raise ValueError(f"Grid step must be positive, got {step}")
        if max_slots < 1:
            raise ValueError(f"Number of slots must be positive, got {max_slots}")

        self._generate = generate
        self._neighbors = neighbors
        self._step = float(step)
        self._max_slots = max_slots
        self._max_samples = max(int(max_span // self._step) + 1, neighbors)
        self._new_slot_samples = int(new_slot_interval // self._step)
        self._earliest = earliest
        self._latest = latest

        self._lock = threading.Lock()
        self._slots: list[_Slot] = []
        self._access_counter = 0
        self._generate_calls = 0

    @property
    def neighbors(self) -> int:
        """Number of samples returned per query."""
        return self._neighbors

    @property
    def step(self) -> float:
        """Grid step [s]."""
        return self._step

    @property
    def generate_calls(self) -> int:
        """Number of batches of samples generated so far."""
        return self._generate_calls

    @property
    def slots_number(self) -> int:
        """Number of slots currently held."""
        with self._lock:
            return len(self._slots)

    def grid_date(self, index: int) -> Epoch:
        """Date of the grid sample *index*."""
        return J2000_EPOCH + index * self._step

    def _generate_range(self, first: int, last: int) -> list:
        self._generate_calls += 1
        return [self._generate(self.grid_date(k)) for k in range(first, last + 1)]

    def _check_range(self, date: Epoch) -> None:
        if self._earliest is not None and date < self._earliest:
            raise DataOutOfRangeError(f"{date} is before the earliest date {self._earliest}")
        if self._latest is not None and date > self._latest:
            raise DataOutOfRangeError(f"{date} is after the latest date {self._latest}")

    def _new_slot(self, first: int, last: int) -> _Slot:
        if len(self._slots) >= self._max_slots:
            oldest = min(self._slots, key=lambda s: s.last_access)
            self._slots.remove(oldest)
            logger.debug("Evicted cache slot %s to %s", self.grid_date(oldest.first), self.grid_date(oldest.last))
        slot = _Slot(first, self._generate_range(first, last), self._access_counter)
        self._slots.append(slot)
        logger.debug("Created cache slot at %s", self.grid_date(first))
        return slot

    def _extend(self, slot: _Slot, first: int, last: int) -> None:
        grew_forward = last > slot.last
        if first < slot.first:
            slot.samples[:0] = self._generate_range(first, slot.first - 1)
            slot.first = first
        if last > slot.last:
            slot.samples.extend(self._generate_range(slot.last + 1, last))

        excess = len(slot.samples) - self._max_samples
        if excess > 0:
            if grew_forward:
                del slot.samples[:excess]
                slot.first += excess
            else:
                del slot.samples[-excess:]

    def get_neighbors(self, date: Epoch) -> tuple[int, list]:
        """Return the samples surrounding *date*.

        Args:
            date: Query date.

        Returns:
            tuple: Grid index of the first sample and the list of
                ``neighbors`` consecutive samples around *date*.

        Raises:
            DataOutOfRangeError: If *date* lies outside the allowed range.
        """
        self._check_range(date)
        x = (date - J2000_EPOCH) / self._step
        first = math.floor(x) - (self._neighbors - 1) // 2
        last = first + self._neighbors - 1

        with self._lock:
            self._access_counter += 1
            slot = next((s for s in self._slots if s.first <= first and last <= s.last), None)
            if slot is None:
                candidates = [
                    s for s in self._slots
                    if s.first - self._new_slot_samples <= last
                    and first <= s.last + self._new_slot_samples
                ]
                # Closest slot, measured in grid samples
                slot = min(candidates, key=lambda s: max(s.first - last, first - s.last), default=None)
                if slot is None:
                    slot = self._new_slot(first, last)
                else:
                    self._extend(slot, first, last)
            slot.last_access = self._access_counter
            offset = first - slot.first
            samples = slot.samples[offset:offset + self._neighbors]

        return first, samples


@jax.jit
def _interpolate_window(
    quaternions: Array, translations: Array, velocities: Array, x: Array, step: Array
) -> tuple[Array, Array, Array, Array]:
    """Interpolate a window of samples at the normalized abscissa *x*."""
    n = quaternions.shape[0]
    nodes = jnp.arange(n, dtype=quaternions.dtype)

    reference = quaternions[n // 2]
    reference_conj = quaternion_conjugate(reference)
    offsets = jax.vmap(
        lambda q: quaternion_to_rotation_vector(quaternion_multiply(reference_conj, q))
    )(quaternions)
    v, dv = lagrange_interpolate(nodes, offsets, x)
    rotation = quaternion_multiply(reference, rotation_vector_to_quaternion(v))
    rotation_rate = rotation_vector_right_jacobian(v) @ dv / step

    translation, dtranslation = hermite_interpolate(nodes, translations, velocities * step, x)
    return rotation, rotation_rate, translation, dtranslation / step


class InterpolatingTransformProvider:
    """Provider interpolating a raw provider sampled on a regular grid.

    Args:
        raw_provider: Provider evaluated at the grid dates.
        grid_points: Number of samples used per interpolation.
        step: Grid step [s].
        max_slots: Maximum number of cache slots. Defaults to
            :func:`~astroframes.config.get_cache_slots_number`.
        max_span: Maximum time span of one cache slot [s].
        new_slot_interval: Distance beyond which a query opens a new cache
            slot [s].
        earliest: Earliest date served, ``None`` for no bound.
        latest: Latest date served, ``None`` for no bound.

    Raises:
        ValueError: If *grid_points* is lower than 2.
    """

    def __init__(
        self,
        raw_provider: TransformProvider,
        grid_points: int,
        step: float,
        max_slots: int | None = None,
        max_span: float = JULIAN_YEAR,
        new_slot_interval: float = 30 * JULIAN_DAY,
        earliest: Epoch | None = None,
        latest: Epoch | None = None,
    ) -> None:
        if grid_points < 2:
            raise ValueError(f"At least 2 grid points are needed, got {grid_points}")
        self._raw_provider = raw_provider
        self._cache = TimeStampedCache(
            raw_provider.get_transform,
            grid_points,
            step,
            get_cache_slots_number() if max_slots is None else max_slots,
            max_span,
            new_slot_interval,
            earliest,
            latest,
        )

    @property
    def raw_provider(self) -> TransformProvider:
        """Underlying provider evaluated on the grid."""
        return self._raw_provider

    @property
    def grid_points(self) -> int:
        """Number of samples used per interpolation."""
        return self._cache.neighbors

    @property
    def step(self) -> float:
        """Grid step [s]."""
        return self._cache.step

    @property
    def cache(self) -> TimeStampedCache:
        """Sample cache of the provider."""
        return self._cache

    def get_transform(self, date: Epoch) -> Transform:
        _, samples = self._cache.get_neighbors(date)
        x = (date - samples[0].date) / self._cache.step
        rotation, rotation_rate, translation, velocity = _interpolate_window(
            jnp.stack([s.rotation.to_vector() for s in samples]),
            jnp.stack([s.translation for s in samples]),
            jnp.stack([s.velocity for s in samples]),
            x,
            self._cache.step,
        )
        return Transform(date, Quaternion._from_internal(rotation), rotation_rate, translation, velocity)
