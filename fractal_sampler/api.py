"""
Main API classes for fractal generation.

This module provides the high-level interface for fractal rendering,
combining sampling, evaluation, reconstruction, coloring and export into
easy-to-use classes.
"""

import numpy as np
from typing import Optional, Dict, Any, Tuple, Callable
from dataclasses import dataclass, asdict, fields
from pathlib import Path
import json
import logging
import time

from .core.filters import FILTERS, Filter, create_filter
from .core.fractal_types import FractalRegistry, RenderFunction
from .core.sampling import SamplerFactory, SAMPLER_KINDS
from .acceleration.multiprocessing import PixelDriver
from .rendering.coloring import Palette, apply_palette, get_palette
from .rendering.image_output import ImageExporter, RenderMetadata

logger = logging.getLogger(__name__)


@dataclass
class RenderConfig:
    """Configuration for fractal rendering."""

    # Image parameters
    width: int = 1920
    height: int = 1080

    # Fractal parameters
    fractal: str = 'mandelbrot'
    center: Tuple[float, float] = (-0.743643, 0.131825)
    scale: float = 0.00006
    max_iterations: int = 10_000
    julia_c: Tuple[float, float] = (-0.4, -0.59)

    # Sampling and reconstruction
    sampler: str = 'stratified'
    samples_per_pixel: int = 16
    jitter: bool = True
    filter: str = 'mitchell'
    filter_radius: Optional[Tuple[float, float]] = None  # None for the filter's default
    mitchell_b: float = 1.0 / 3.0
    mitchell_c: float = 1.0 / 3.0

    # Coloring
    palette: str = 'default'

    # Performance
    num_processes: Optional[int] = None
    tile_size: int = 64
    seed: Optional[int] = None

    # Output
    jpeg_quality: int = 95
    save_metadata: bool = True
    save_raw_data: bool = False

    def validate(self):
        """Validate configuration parameters."""
        if self.width <= 0 or self.height <= 0:
            raise ValueError("Width and height must be positive")

        if self.max_iterations <= 0:
            raise ValueError("max_iterations must be positive")

        if self.scale <= 0:
            raise ValueError("scale must be positive")

        if len(self.center) != 2:
            raise ValueError("center must be (real, imag)")

        if len(self.julia_c) != 2:
            raise ValueError("julia_c must be (real, imag)")

        FractalRegistry.get(self.fractal)

        if self.sampler not in SAMPLER_KINDS:
            available = ', '.join(SAMPLER_KINDS)
            raise ValueError(f"Unknown sampler '{self.sampler}'. Available: {available}")

        if self.samples_per_pixel < 1:
            raise ValueError("samples_per_pixel must be >= 1")

        if self.filter.lower() not in FILTERS:
            available = ', '.join(FILTERS)
            raise ValueError(f"Unknown filter '{self.filter}'. Available: {available}")

        if self.filter_radius is not None:
            if len(self.filter_radius) != 2:
                raise ValueError("filter_radius must be (radius_x, radius_y)")
            if min(self.filter_radius) <= 0:
                raise ValueError("filter_radius must be positive")

        get_palette(self.palette)

        if self.num_processes is not None and self.num_processes < 1:
            raise ValueError("num_processes must be >= 1")

        if self.tile_size < 1:
            raise ValueError("tile_size must be >= 1")

        if not 1 <= self.jpeg_quality <= 100:
            raise ValueError("jpeg_quality must be between 1 and 100")

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RenderConfig':
        """Create configuration from dictionary."""
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")

        data = dict(data)
        for key in ('center', 'julia_c', 'filter_radius'):
            if data.get(key) is not None:
                data[key] = tuple(data[key])
        return cls(**data)


def load_config(filepath: Path) -> RenderConfig:
    """
    Load a render configuration from a JSON file.

    Args:
        filepath: Path to a JSON object whose keys are RenderConfig fields

    Returns:
        Validated RenderConfig
    """
    with open(filepath, 'r') as f:
        data = json.load(f)

    if not isinstance(data, dict):
        raise ValueError(f"Configuration file {filepath} must contain a JSON object")

    config = RenderConfig.from_dict(data)
    config.validate()
    logger.info(f"Loaded configuration: {filepath}")
    return config


class FractalRenderer:
    """Main fractal rendering engine."""

    def __init__(self, config: Optional[RenderConfig] = None):
        """
        Initialize fractal renderer.

        Args:
            config: Rendering configuration (uses defaults if None)
        """
        self.config = config or RenderConfig()
        self.config.validate()

        self.sampler_factory = self._create_sampler_factory()
        self.render_function = self._create_render_function()
        self.pixel_filter = self._create_filter()
        self.palette: Palette = get_palette(self.config.palette)
        self.driver = PixelDriver(self.config.num_processes, self.config.tile_size, self.config.seed)
        self.image_exporter = ImageExporter()

        logger.info(f"FractalRenderer initialized: {self.config.width}x{self.config.height}, "
                    f"{self.config.fractal}, {self.config.sampler} sampling, "
                    f"{self.config.filter} filter")

    def _create_sampler_factory(self) -> SamplerFactory:
        return SamplerFactory(self.config.sampler, self.config.samples_per_pixel, self.config.jitter)

    def _create_render_function(self) -> RenderFunction:
        kwargs = {}
        if self.config.fractal.lower() == 'julia':
            kwargs['c'] = complex(*self.config.julia_c)

        return FractalRegistry.create(
            self.config.fractal,
            center=complex(*self.config.center),
            scale=self.config.scale,
            max_iterations=self.config.max_iterations,
            width=self.config.width,
            height=self.config.height,
            **kwargs
        )

    def _create_filter(self) -> Filter:
        params: Dict[str, Any] = {}
        if self.config.filter_radius is not None:
            params['radius_x'], params['radius_y'] = self.config.filter_radius
        if self.config.filter.lower() == 'mitchell':
            params['b'] = self.config.mitchell_b
            params['c'] = self.config.mitchell_c
        return create_filter(self.config.filter, **params)

    def render_values(self, progress_callback: Optional[Callable[[int, int], None]] = None) -> np.ndarray:
        """
        Render the reconstructed value of every pixel.

        Returns:
            Array of shape (height, width)
        """
        return self.driver.render_values(self.sampler_factory, self.render_function,
                                         self.pixel_filter, progress_callback)

    def render(self, progress_callback: Optional[Callable[[int, int], None]] = None) -> np.ndarray:
        """
        Render the fractal as an RGB image.

        Returns:
            RGB image array (height, width, 3), dtype uint8
        """
        logger.info(f"Starting render: {self.render_function.name} fractal")
        return self.driver.render_image(self.sampler_factory, self.render_function,
                                        self.pixel_filter, self.palette, progress_callback)

    def render_to_file(self, output_path: Path,
                       progress_callback: Optional[Callable[[int, int], None]] = None) -> np.ndarray:
        """
        Render the fractal and save it.

        With ``save_raw_data`` the value raster is rendered and kept as a
        ``.npy`` file next to the image, and the palette is applied to it.

        Args:
            output_path: Output image path (.png, .tif, .tiff, .jpg, .jpeg)
            progress_callback: Optional (completed_tiles, total_tiles) callback

        Returns:
            RGB image array that was saved
        """
        output_path = Path(output_path)
        start_time = time.time()

        values = None
        if self.config.save_raw_data:
            values = self.render_values(progress_callback)
            rgb_image = apply_palette(values, self.palette)
        else:
            rgb_image = self.render(progress_callback)

        metadata = self.create_metadata(time.time() - start_time)

        if self.config.save_metadata:
            self.image_exporter.save_image(rgb_image, output_path, metadata, self.config.jpeg_quality)
        else:
            self.image_exporter.save_image(rgb_image, output_path, quality=self.config.jpeg_quality)

        if values is not None:
            self.image_exporter.save_raw_data(values, output_path.with_suffix('.npy'), metadata)

        return rgb_image

    def create_metadata(self, render_time: float = 0.0) -> RenderMetadata:
        """Describe the current configuration as render metadata."""
        return RenderMetadata(
            fractal_type=self.render_function.name,
            center=tuple(self.config.center),
            scale=self.config.scale,
            resolution=(self.config.width, self.config.height),
            max_iterations=self.config.max_iterations,
            sampler=self.config.sampler,
            samples_per_pixel=self.sampler_factory.effective_samples,
            jitter=self.config.jitter,
            filter=repr(self.pixel_filter),
            palette=self.config.palette,
            render_time_seconds=render_time,
            fractal_parameters=self.render_function.parameters(),
        )
