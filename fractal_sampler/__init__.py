"""
Supersampled escape-time fractal rendering.

This library renders Mandelbrot and Julia sets by sampling every pixel
footprint several times, evaluating the escape-time iteration at each
sample and reconstructing one value per pixel with a weighting filter.

Key Features:
- Simple, stratified (optionally jittered) and random sub-pixel sampling
- Box and Mitchell-Netravali reconstruction filters
- Smooth escape-time values for banding-free gradients
- Tile-based parallel rendering on all CPU cores
- Table, grayscale and rainbow palettes; PNG/TIFF/JPEG export

Example usage:
    >>> from fractal_sampler import FractalRenderer, RenderConfig
    >>> config = RenderConfig(width=640, height=360, samples_per_pixel=4)
    >>> image = FractalRenderer(config).render()
"""

__version__ = "1.0.0"
__author__ = "Fractal Sampler Team"

from fractal_sampler.core.sampling import (
    Sample, Sampler, SimpleSampler, StratifiedSampler, RandomSampler, SamplerFactory,
)
from fractal_sampler.core.filters import Filter, BoxFilter, MitchellFilter, create_filter
from fractal_sampler.core.fractal_types import (
    RenderFunction, MandelbrotFunction, JuliaFunction, FractalRegistry, JULIA_PRESETS,
)
from fractal_sampler.core.math_functions import Viewport, INTERIOR
from fractal_sampler.core.reconstruction import Reconstructor
from fractal_sampler.acceleration.multiprocessing import PixelDriver, render_pixel
from fractal_sampler.rendering.coloring import (
    Palette, PaletteEntry, TablePalette, GrayscalePalette, RainbowPalette, get_palette,
)
from fractal_sampler.rendering.image_output import ImageExporter, RenderMetadata

# Main API classes
from fractal_sampler.api import FractalRenderer, RenderConfig, load_config

__all__ = [
    "FractalRenderer",
    "RenderConfig",
    "load_config",
    "Sample",
    "Sampler",
    "SimpleSampler",
    "StratifiedSampler",
    "RandomSampler",
    "SamplerFactory",
    "Filter",
    "BoxFilter",
    "MitchellFilter",
    "create_filter",
    "RenderFunction",
    "MandelbrotFunction",
    "JuliaFunction",
    "FractalRegistry",
    "JULIA_PRESETS",
    "Viewport",
    "INTERIOR",
    "Reconstructor",
    "PixelDriver",
    "render_pixel",
    "Palette",
    "PaletteEntry",
    "TablePalette",
    "GrayscalePalette",
    "RainbowPalette",
    "get_palette",
    "ImageExporter",
    "RenderMetadata",
]
