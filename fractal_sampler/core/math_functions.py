"""
Core mathematical functions for fractal iteration.

This module provides the viewport mapping between image coordinates and
the complex plane, and the escape-time iteration shared by all fractal
render functions.
"""

import math
from typing import Tuple
import logging

from numba import njit

logger = logging.getLogger(__name__)

# Result of a point that never escaped within the iteration budget
INTERIOR = -1.0

ESCAPE_RADIUS_SQ = 4.0


class Viewport:
    """Affine mapping from continuous image coordinates to the complex plane."""

    def __init__(self, center: complex, scale: float, width: int, height: int):
        """
        Initialize viewport.

        Args:
            center: Complex plane point at the center of the image
            scale: Horizontal half-extent of a landscape view in plane units
            width, height: Image resolution in pixels
        """
        if scale <= 0:
            raise ValueError("scale must be positive")
        if width <= 0 or height <= 0:
            raise ValueError("Width and height must be positive")

        self.center = complex(center)
        self.scale = scale
        self.width = width
        self.height = height

        aspect_ratio = width / height
        if aspect_ratio >= 1.0:
            aspect_x, aspect_y = 1.0, 1.0 / aspect_ratio
        else:
            aspect_x, aspect_y = 1.0 / aspect_ratio, 1.0

        self.min_plane = complex(self.center.real - scale * aspect_x,
                                 self.center.imag - scale * aspect_y)
        self.max_plane = complex(self.center.real + scale * aspect_x,
                                 self.center.imag + scale * aspect_y)

        self.scale_real = (self.max_plane.real - self.min_plane.real) / width
        self.scale_imag = (self.max_plane.imag - self.min_plane.imag) / height

    @property
    def bounds(self) -> Tuple[float, float, float, float]:
        """Plane bounds as (xmin, xmax, ymin, ymax)."""
        return (self.min_plane.real, self.max_plane.real,
                self.min_plane.imag, self.max_plane.imag)

    def to_plane(self, x: float, y: float) -> complex:
        """Map an image coordinate to the complex plane (row 0 is the top edge)."""
        return complex(self.min_plane.real + x * self.scale_real,
                       self.max_plane.imag - y * self.scale_imag)

    def __repr__(self) -> str:
        return (f"Viewport(center={self.center}, scale={self.scale}, "
                f"width={self.width}, height={self.height})")


@njit(cache=True)
def _escape_time(z0_real, z0_imag, c_real, c_imag, max_iterations):
    """JIT-compiled escape-time loop on split real and imaginary parts."""
    zr = z0_real
    zi = z0_imag
    i = 0
    while zr * zr + zi * zi <= ESCAPE_RADIUS_SQ and i < max_iterations:
        # z = z^2 + c
        zr, zi = zr * zr - zi * zi + c_real, 2.0 * zr * zi + c_imag
        i += 1

    if i < max_iterations:
        return (i - math.log2(math.log2(math.sqrt(zr * zr + zi * zi)))) / max_iterations
    return INTERIOR


def escape_time(z0: complex, c: complex, max_iterations: int) -> float:
    """
    Iterate z = z^2 + c and return a smooth escape value.

    Args:
        z0: Starting value of the orbit
        c: Additive constant
        max_iterations: Iteration budget

    Returns:
        (i - log2(log2(|z|))) / max_iterations for escaped orbits,
        INTERIOR when the budget is exhausted
    """
    return _escape_time(z0.real, z0.imag, c.real, c.imag, max_iterations)


def interpolate(t: float, left: float, right: float) -> float:
    """Linear interpolation between left (t=0) and right (t=1)."""
    return left * (1.0 - t) + right * t
