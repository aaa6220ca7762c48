"""
Palette management for fractal rendering.

A palette maps one reconstructed pixel value (normally in [0, 1], or the
interior sentinel -1) to an 8-bit RGB color.
"""

import numpy as np
from typing import Dict, List, Sequence, Tuple
from dataclasses import dataclass
from abc import ABC, abstractmethod
import logging

from ..core.math_functions import interpolate

logger = logging.getLogger(__name__)

RGB = Tuple[int, int, int]

BLACK: RGB = (0, 0, 0)


class Palette(ABC):
    """Abstract base class for palettes."""

    name = "Palette"

    @abstractmethod
    def evaluate(self, t: float) -> RGB:
        """
        Map a pixel value to a color.

        Args:
            t: Normalized pixel value

        Returns:
            (r, g, b) tuple with components in 0-255
        """
        pass


@dataclass(frozen=True)
class PaletteEntry:
    """A color stop of a table palette."""
    stop: float
    color: RGB


def _clamp_channel(value: float) -> int:
    return int(min(255.0, max(0.0, value)))


class TablePalette(Palette):
    """Linear gradient through sorted color stops."""

    def __init__(self, entries: Sequence[PaletteEntry], name: str = "Table"):
        """
        Initialize table palette.

        Args:
            entries: Color stops, in any order; entries sharing a stop keep
                their given order and form a hard edge
            name: Human-readable name for the palette
        """
        if not entries:
            raise ValueError("Palette table must contain at least one entry")
        self.entries: List[PaletteEntry] = sorted(entries, key=lambda e: e.stop)
        self.name = name

    def evaluate(self, t: float) -> RGB:
        first, last = self.entries[0], self.entries[-1]
        if t < first.stop or t > last.stop:
            return BLACK
        if t == last.stop:
            return last.color

        index = 1
        while t > self.entries[index].stop:
            index += 1

        left = self.entries[index - 1]
        right = self.entries[index]

        span = right.stop - left.stop
        if span == 0.0:
            # Coincident stops mark a hard edge
            return right.color

        # Translate and scale to interval 0..1
        local_t = (t - left.stop) / span

        return tuple(_clamp_channel(interpolate(local_t, l, r))
                     for l, r in zip(left.color, right.color))

    @classmethod
    def from_list(cls, stops: Sequence[Tuple[float, Sequence[int]]], name: str = "Table") -> 'TablePalette':
        """Create a palette from (stop, (r, g, b)) pairs."""
        return cls([PaletteEntry(float(stop), tuple(int(c) for c in color))
                    for stop, color in stops], name=name)


class GrayscalePalette(Palette):
    """Linear black-to-white ramp."""

    name = "Grayscale"

    def evaluate(self, t: float) -> RGB:
        if 0.0 <= t <= 1.0:
            v = int(t * 255.0)
            return (v, v, v)
        return BLACK


class RainbowPalette(Palette):
    """Six-band hue sweep: blue, cyan, green, yellow, red, magenta."""

    name = "Rainbow"

    def evaluate(self, t: float) -> RGB:
        if t < 0.0 or t > 1.0:
            return BLACK
        if t < 0.2:
            # [0.0, 0.2): blue-cyan
            return (0x00, int(t * 1275.0), 0xFF)
        if t < 0.4:
            # [0.2, 0.4): cyan-green
            return (0x00, 0xFF, int((0.4 - t) * 1275.0))
        if t < 0.6:
            # [0.4, 0.6): green-yellow
            return (int((t - 0.4) * 1275.0), 0xFF, 0x00)
        if t < 0.8:
            # [0.6, 0.8): yellow-red
            return (0xFF, int((0.8 - t) * 1275.0), 0x00)
        # [0.8, 1.0]: red-magenta
        return (0xFF, 0x00, _clamp_channel((t - 0.8) * 1275.0))


def _create_builtin_palettes() -> Dict[str, Palette]:
    """Create built-in color palettes."""
    palettes: Dict[str, Palette] = {}

    palettes['default'] = TablePalette([
        PaletteEntry(0.000, (0x00, 0x00, 0x66)),
        PaletteEntry(0.010, (0x19, 0x19, 0x19)),
        PaletteEntry(0.018, (0xFF, 0xFF, 0x4C)),
        PaletteEntry(0.022, (0x00, 0x66, 0x00)),
        PaletteEntry(0.040, (0xFF, 0xFF, 0xFF)),
        PaletteEntry(0.200, (0x00, 0x00, 0x99)),
        PaletteEntry(0.500, (0x00, 0x00, 0x00)),
        PaletteEntry(1.000, (0xFF, 0xFF, 0xFF)),
    ], name="Default")

    palettes['fire'] = TablePalette([
        PaletteEntry(0.0, (0, 0, 0)),          # Black
        PaletteEntry(0.2, (128, 0, 0)),        # Dark red
        PaletteEntry(0.4, (255, 0, 0)),        # Red
        PaletteEntry(0.6, (255, 128, 0)),      # Orange
        PaletteEntry(0.8, (255, 255, 0)),      # Yellow
        PaletteEntry(1.0, (255, 255, 255)),    # White
    ], name="Fire")

    palettes['gray'] = GrayscalePalette()
    palettes['rainbow'] = RainbowPalette()

    return palettes


_PALETTES = _create_builtin_palettes()


def add_palette(name: str, palette: Palette) -> None:
    """Add a custom color palette."""
    _PALETTES[name] = palette
    logger.info(f"Added color palette: {name}")


def get_palette(name: str) -> Palette:
    """Get color palette by name."""
    if name not in _PALETTES:
        available = ', '.join(_PALETTES.keys())
        raise ValueError(f"Unknown color palette '{name}'. Available: {available}")
    return _PALETTES[name]


def list_palettes() -> List[str]:
    """Get list of available color palettes."""
    return list(_PALETTES.keys())


def apply_palette(values: np.ndarray, palette: Palette) -> np.ndarray:
    """
    Map a raster of pixel values to an RGB image.

    Args:
        values: Array of shape (height, width)
        palette: Palette to apply

    Returns:
        RGB array of shape (height, width, 3), dtype uint8
    """
    height, width = values.shape
    rgb_image = np.zeros((height, width, 3), dtype=np.uint8)
    for i in range(height):
        for j in range(width):
            rgb_image[i, j] = palette.evaluate(float(values[i, j]))
    return rgb_image
