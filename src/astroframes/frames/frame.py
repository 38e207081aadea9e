"""Reference frame tree.

Every :class:`Frame` but the root has a parent and a transform provider
giving the transform from the parent to the frame. The root is the
Geocentric Celestial Reference Frame (GCRF), a single process-wide node
returned by :meth:`Frame.get_root`.

Transforms between any two frames are obtained by walking both frames up
to their lowest common ancestor and composing the provider transforms
along the way.
"""

from __future__ import annotations

from astroframes.epoch import Epoch
from astroframes.errors import FrameInternalError
from astroframes.frames.interpolating import InterpolatingTransformProvider
from astroframes.frames.providers import TransformProvider
from astroframes.frames.transform import Transform

_ROOT_NAME = "GCRF"


class Frame:
    """Node of the reference frame tree.

    Args:
        parent: Parent frame.
        provider: Provider of the parent-to-frame transform.
        name: Frame name.
        pseudo_inertial: ``True`` if the frame is suitable for integrating
            equations of motion.

    Raises:
        ValueError: If *parent* is ``None``. Only the root has no parent.
    """

    __slots__ = ('_parent', '_provider', '_name', '_pseudo_inertial', '_depth')

    def __init__(
        self,
        parent: Frame,
        provider: TransformProvider,
        name: str,
        pseudo_inertial: bool = False,
    ) -> None:
        if parent is None:
            raise ValueError(f"Frame {name} needs a parent frame")
        self._parent = parent
        self._provider = provider
        self._name = name
        self._pseudo_inertial = pseudo_inertial
        self._depth = parent._depth + 1

    @classmethod
    def _make_root(cls) -> Frame:
        root = object.__new__(cls)
        root._parent = None
        root._provider = None
        root._name = _ROOT_NAME
        root._pseudo_inertial = True
        root._depth = 0
        return root

    @staticmethod
    def get_root() -> Frame:
        """Return the root frame (GCRF)."""
        return _ROOT

    # Properties

    @property
    def name(self) -> str:
        return self._name

    @property
    def parent(self) -> Frame | None:
        """Parent frame, ``None`` for the root."""
        return self._parent

    @property
    def provider(self) -> TransformProvider | None:
        """Provider of the parent-to-frame transform, ``None`` for the root."""
        return self._provider

    @property
    def pseudo_inertial(self) -> bool:
        return self._pseudo_inertial

    @property
    def depth(self) -> int:
        """Number of edges between the frame and the root."""
        return self._depth

    # Tree navigation

    def get_ancestor(self, n: int) -> Frame:
        """Return the ancestor *n* levels up (``0`` is the frame itself).

        Raises:
            ValueError: If *n* is negative or exceeds the frame depth.
        """
        if n < 0 or n > self._depth:
            raise ValueError(f"Frame {self._name} has no ancestor {n} levels up (depth {self._depth})")
        frame = self
        for _ in range(n):
            frame = frame._parent
        return frame

    def is_child_of(self, other: Frame) -> bool:
        """Return ``True`` if *other* is a strict ancestor of this frame."""
        frame = self._parent
        while frame is not None:
            if frame is other:
                return True
            frame = frame._parent
        return False

    def get_transform_to(self, destination: Frame, date: Epoch) -> Transform:
        """Return the transform from this frame to *destination* at *date*.

        Raises:
            FrameInternalError: If the two frames share no ancestor.
        """
        return _walk(self, destination, date, interpolate=True)

    def __repr__(self) -> str:
        return f"Frame({self._name!r})"

    def __str__(self) -> str:
        return self._name


_ROOT = Frame._make_root()


def _common_ancestor(a: Frame, b: Frame) -> Frame:
    while a.depth > b.depth:
        a = a.parent
    while b.depth > a.depth:
        b = b.parent
    while a is not b:
        if a.parent is None:
            raise FrameInternalError(f"Frames {a.name} and {b.name} have no common ancestor")
        a = a.parent
        b = b.parent
    return a


def _provider_transform(frame: Frame, date: Epoch, interpolate: bool) -> Transform:
    provider = frame.provider
    if not interpolate:
        while isinstance(provider, InterpolatingTransformProvider):
            provider = provider.raw_provider
    return provider.get_transform(date)


def _from_ancestor(ancestor: Frame, frame: Frame, date: Epoch, interpolate: bool) -> Transform:
    """Transform from *ancestor* down to *frame*."""
    transform = Transform.identity(date)
    while frame is not ancestor:
        transform = Transform.compose(date, _provider_transform(frame, date, interpolate), transform)
        frame = frame.parent
    return transform


def _walk(source: Frame, destination: Frame, date: Epoch, interpolate: bool) -> Transform:
    if source is destination:
        return Transform.identity(date)
    common = _common_ancestor(source, destination)
    common_to_source = _from_ancestor(common, source, date, interpolate)
    common_to_destination = _from_ancestor(common, destination, date, interpolate)
    return Transform.compose(date, common_to_source.inverse(), common_to_destination)


def get_non_interpolating_transform(source: Frame, destination: Frame, date: Epoch) -> Transform:
    """Return the transform from *source* to *destination* without interpolation.

    Every interpolating provider on the path between the frames is replaced
    by its raw provider. Much slower than
    :meth:`Frame.get_transform_to`, this is the reference the interpolated
    transforms are checked against.

    Raises:
        FrameInternalError: If the two frames share no ancestor.
    """
    return _walk(source, destination, date, interpolate=False)
