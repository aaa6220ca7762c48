"""
Multiprocessing pixel driver for parallel fractal rendering.

This module splits the raster into disjoint tiles and renders them with
Python's multiprocessing pool. Every pixel is sampled, evaluated and
reconstructed independently; each tile writes only its own slice of the
output buffers.
"""

import numpy as np
from typing import Any, Callable, List, Optional, Tuple
import multiprocessing as mp
import logging
import time
from dataclasses import dataclass
from concurrent.futures import ProcessPoolExecutor, as_completed

from ..core.filters import Filter
from ..core.fractal_types import RenderFunction
from ..core.reconstruction import Reconstructor
from ..core.sampling import RandomSource, SamplerFactory

logger = logging.getLogger(__name__)


@dataclass
class TileSpec:
    """Specification for a single tile in parallel rendering."""
    tile_id: int
    x_start: int
    x_end: int
    y_start: int
    y_end: int

    @property
    def width(self) -> int:
        return self.x_end - self.x_start

    @property
    def height(self) -> int:
        return self.y_end - self.y_start


@dataclass
class TileResult:
    """Result from processing a single tile."""
    tile_id: int
    values: np.ndarray
    colors: Optional[np.ndarray]
    x_start: int
    y_start: int
    processing_time: float


@dataclass(frozen=True)
class RenderJob:
    """Everything a worker needs to render pixels; shared read-only."""
    sampler_factory: SamplerFactory
    render_function: RenderFunction
    pixel_filter: Filter
    palette: Any = None


def create_tile_grid(width: int, height: int, tile_size: int = 64) -> List[TileSpec]:
    """
    Create a grid of tiles for parallel processing.

    Args:
        width: Total image width
        height: Total image height
        tile_size: Target tile size (pixels)

    Returns:
        List of TileSpec objects covering the image without overlap
    """
    if tile_size < 1:
        raise ValueError("tile_size must be positive")

    tiles = []
    tile_id = 0

    for y in range(0, height, tile_size):
        for x in range(0, width, tile_size):
            tiles.append(TileSpec(
                tile_id=tile_id,
                x_start=x,
                x_end=min(x + tile_size, width),
                y_start=y,
                y_end=min(y + tile_size, height),
            ))
            tile_id += 1

    logger.debug(f"Created {len(tiles)} tiles of target size {tile_size}x{tile_size}")
    return tiles


def render_pixel(x: int, y: int, sampler_factory: SamplerFactory,
                 render_function: RenderFunction, pixel_filter: Filter,
                 random_source: Optional[RandomSource] = None) -> float:
    """
    Sample, evaluate and reconstruct a single pixel.

    Args:
        x, y: Pixel coordinates
        sampler_factory: Builds the pixel's sampler
        render_function: Fractal evaluated at each sample
        pixel_filter: Reconstruction filter
        random_source: Randomness for jittered or random sampling

    Returns:
        Reconstructed pixel value
    """
    sampler = sampler_factory.create(x, y, random_source)
    reconstructor = Reconstructor(pixel_filter)
    for sample in sampler:
        reconstructor.accumulate(sample, render_function.evaluate(sample))
    return reconstructor.value()


def process_tile(job: RenderJob, tile: TileSpec,
                 seed: Optional[np.random.SeedSequence] = None) -> TileResult:
    """
    Render every pixel of a tile.

    Args:
        job: Shared render components
        tile: Tile to render
        seed: Seed for the tile's random generator

    Returns:
        TileResult holding the tile's values (and colors when a palette is set)
    """
    start_time = time.time()

    random_source = None
    if job.sampler_factory.uses_randomness:
        random_source = np.random.default_rng(seed)

    values = np.empty((tile.height, tile.width), dtype=np.float64)
    colors = None
    if job.palette is not None:
        colors = np.empty((tile.height, tile.width, 3), dtype=np.uint8)

    for y in range(tile.y_start, tile.y_end):
        row = y - tile.y_start
        for x in range(tile.x_start, tile.x_end):
            col = x - tile.x_start
            value = render_pixel(x, y, job.sampler_factory, job.render_function,
                                 job.pixel_filter, random_source)
            values[row, col] = value
            if colors is not None:
                colors[row, col] = job.palette.evaluate(value)

    return TileResult(
        tile_id=tile.tile_id,
        values=values,
        colors=colors,
        x_start=tile.x_start,
        y_start=tile.y_start,
        processing_time=time.time() - start_time,
    )


def assemble_tiles(tile_results: List[TileResult], total_width: int,
                   total_height: int) -> Tuple[np.ndarray, Optional[np.ndarray]]:
    """
    Assemble tile results into complete value and color buffers.

    Args:
        tile_results: List of TileResult objects
        total_width: Total image width
        total_height: Total image height

    Returns:
        Tuple of (values, colors); colors is None when no palette was applied
    """
    values = np.zeros((total_height, total_width), dtype=np.float64)
    colors = None
    if tile_results and tile_results[0].colors is not None:
        colors = np.zeros((total_height, total_width, 3), dtype=np.uint8)

    for tile_result in tile_results:
        x_start = tile_result.x_start
        y_start = tile_result.y_start
        tile_height, tile_width = tile_result.values.shape

        values[y_start:y_start + tile_height, x_start:x_start + tile_width] = tile_result.values
        if colors is not None:
            colors[y_start:y_start + tile_height, x_start:x_start + tile_width] = tile_result.colors

    return values, colors


class PixelDriver:
    """Data-parallel loop over all pixels of a render."""

    def __init__(self, num_processes: Optional[int] = None, tile_size: int = 64,
                 seed: Optional[int] = None):
        """
        Initialize pixel driver.

        Args:
            num_processes: Number of worker processes (None for optimal count,
                1 to render in the calling process)
            tile_size: Size of tiles for parallel processing
            seed: Seed for jittered sampling (None for fresh entropy)
        """
        if num_processes is None:
            num_processes = get_optimal_process_count()
        if num_processes < 1:
            raise ValueError("num_processes must be >= 1")
        if tile_size < 1:
            raise ValueError("tile_size must be positive")

        self.num_processes = num_processes
        self.tile_size = tile_size
        self.seed = seed
        logger.debug(f"Pixel driver: {self.num_processes} processes, {tile_size}x{tile_size} tiles")

    def render_values(self, sampler_factory: SamplerFactory, render_function: RenderFunction,
                      pixel_filter: Filter,
                      progress_callback: Optional[Callable[[int, int], None]] = None) -> np.ndarray:
        """
        Render the reconstructed value of every pixel.

        Returns:
            Array of shape (height, width)
        """
        job = RenderJob(sampler_factory, render_function, pixel_filter)
        values, _ = self._render(job, progress_callback)
        return values

    def render_image(self, sampler_factory: SamplerFactory, render_function: RenderFunction,
                     pixel_filter: Filter, palette,
                     progress_callback: Optional[Callable[[int, int], None]] = None) -> np.ndarray:
        """
        Render every pixel and map it through a palette.

        Returns:
            RGB array of shape (height, width, 3), dtype uint8
        """
        job = RenderJob(sampler_factory, render_function, pixel_filter, palette)
        _, colors = self._render(job, progress_callback)
        return colors

    def _render(self, job: RenderJob,
                progress_callback: Optional[Callable[[int, int], None]]) -> Tuple[np.ndarray, Optional[np.ndarray]]:
        start_time = time.time()

        width = job.render_function.viewport.width
        height = job.render_function.viewport.height
        samples = job.sampler_factory.effective_samples

        logger.info(f"Size:                    {width} x {height}")
        logger.info(f"Samples per pixel:       {samples}")
        logger.info(f"Total number of samples: {width * height * samples}")

        tiles = create_tile_grid(width, height, self.tile_size)
        seeds = np.random.SeedSequence(self.seed).spawn(len(tiles))

        if self.num_processes == 1:
            tile_results = self._render_serial(job, tiles, seeds, progress_callback)
        else:
            tile_results = self._render_parallel(job, tiles, seeds, progress_callback)

        values, colors = assemble_tiles(tile_results, width, height)

        total_time = time.time() - start_time
        total_processing_time = sum(tr.processing_time for tr in tile_results)
        logger.info(f"Rendering complete: {total_time:.2f}s total, "
                    f"{total_processing_time:.2f}s processing time")

        return values, colors

    def _render_serial(self, job, tiles, seeds, progress_callback) -> List[TileResult]:
        tile_results = []
        for tile, seed in zip(tiles, seeds):
            tile_results.append(process_tile(job, tile, seed))
            self._report_progress(len(tile_results), len(tiles), progress_callback)
        return tile_results

    def _render_parallel(self, job, tiles, seeds, progress_callback) -> List[TileResult]:
        logger.info(f"Processing {len(tiles)} tiles with {self.num_processes} processes")

        tile_results = [None] * len(tiles)
        with ProcessPoolExecutor(max_workers=self.num_processes) as executor:
            future_to_tile = {executor.submit(process_tile, job, tile, seed): i
                              for i, (tile, seed) in enumerate(zip(tiles, seeds))}

            completed = 0
            for future in as_completed(future_to_tile):
                tile_idx = future_to_tile[future]
                try:
                    tile_results[tile_idx] = future.result()
                except Exception as e:
                    logger.error(f"Tile {tile_idx} failed: {e}")
                    for pending in future_to_tile:
                        pending.cancel()
                    raise
                completed += 1
                self._report_progress(completed, len(tiles), progress_callback)

        return tile_results

    @staticmethod
    def _report_progress(completed: int, total: int,
                         progress_callback: Optional[Callable[[int, int], None]]) -> None:
        if completed % max(1, total // 10) == 0:
            progress = (completed / total) * 100
            logger.info(f"Completed {completed}/{total} tiles ({progress:.1f}%)")
        if progress_callback is not None:
            progress_callback(completed, total)


def get_optimal_process_count() -> int:
    """Get optimal number of processes for fractal computation."""
    # Leave one core for system
    return max(1, mp.cpu_count() - 1)
