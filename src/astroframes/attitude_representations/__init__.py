"""Rotation representations used by frame transforms.

Provides the :class:`Quaternion` rotation type, the elementary passive
rotations :func:`Rx`, :func:`Ry`, :func:`Rz`, and the raw quaternion
kernels (logarithm and exponential maps, right Jacobian) used when
interpolating rotations.
"""

from .rotation_matrices import (
    Rx,
    Ry,
    Rz,
)

from .quaternion import Quaternion

__all__ = [
    # Elementary rotations
    "Rx",
    "Ry",
    "Rz",
    # Attitude representations
    "Quaternion",
]
