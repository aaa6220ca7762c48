"""
Sub-pixel sampling strategies.

A sampler produces the finite sequence of sample positions used to probe
the footprint of a single pixel. Samplers are one-shot iterators: once a
sampler is exhausted it stays exhausted, and a fresh sampler is built for
every pixel through a SamplerFactory.
"""

import math
from enum import Enum
from typing import Dict, Iterator, Optional, Protocol, Tuple
from abc import ABC, abstractmethod
from dataclasses import dataclass
import logging

logger = logging.getLogger(__name__)


class RandomSource(Protocol):
    """Anything that yields uniform floats in [0, 1).

    ``numpy.random.Generator`` and ``random.Random`` both qualify.
    """

    def random(self) -> float:
        ...


@dataclass(frozen=True)
class Sample:
    """One sub-pixel probe location."""
    pixel_x: int
    pixel_y: int
    offset_x: float
    offset_y: float

    def location(self) -> Tuple[float, float]:
        """Continuous image-plane coordinate of the sample."""
        return self.pixel_x + self.offset_x, self.pixel_y + self.offset_y


class SamplerState(Enum):
    PRODUCING = "producing"
    EXHAUSTED = "exhausted"


class Sampler(ABC):
    """
    Base class for per-pixel samplers.

    Subclasses implement ``_produce`` (return the next sample) and
    ``remaining`` (exact number of samples still to come). The base class
    owns the one-way PRODUCING -> EXHAUSTED transition.
    """

    def __init__(self, pixel_x: int, pixel_y: int):
        self.pixel_x = pixel_x
        self.pixel_y = pixel_y
        self._state = SamplerState.PRODUCING

    @property
    def state(self) -> SamplerState:
        return self._state

    @property
    def exhausted(self) -> bool:
        return self._state is SamplerState.EXHAUSTED

    @abstractmethod
    def remaining(self) -> int:
        """Number of samples this sampler will still produce."""
        pass

    @abstractmethod
    def _produce(self) -> Sample:
        pass

    def __iter__(self) -> Iterator[Sample]:
        return self

    def __next__(self) -> Sample:
        if self._state is SamplerState.EXHAUSTED:
            raise StopIteration
        sample = self._produce()
        if self.remaining() == 0:
            self._state = SamplerState.EXHAUSTED
        return sample

    def __len__(self) -> int:
        if self._state is SamplerState.EXHAUSTED:
            return 0
        return self.remaining()

    def __length_hint__(self) -> int:
        return len(self)


class SimpleSampler(Sampler):
    """Single sample at the pixel center."""

    def __init__(self, pixel_x: int, pixel_y: int):
        super().__init__(pixel_x, pixel_y)
        self._fresh = True

    def remaining(self) -> int:
        return 1 if self._fresh else 0

    def _produce(self) -> Sample:
        self._fresh = False
        return Sample(self.pixel_x, self.pixel_y, 0.5, 0.5)


def stratified_grid(samples_per_pixel: int) -> Tuple[int, int]:
    """
    Compute the stratification grid for a requested sample count.

    The grid is ``round(sqrt(n))`` columns by ``n // columns`` rows, so counts
    that do not factor that way yield fewer samples than requested
    (3 -> 2x1, 5 -> 2x2).

    Args:
        samples_per_pixel: Requested number of samples per pixel

    Returns:
        Tuple of (grid_x, grid_y)
    """
    if samples_per_pixel < 1:
        raise ValueError("samples_per_pixel must be at least 1")
    grid_x = int(round(math.sqrt(samples_per_pixel)))
    grid_y = samples_per_pixel // grid_x
    return grid_x, grid_y


class StratifiedSampler(Sampler):
    """Jittered (or centered) grid of sub-samples, enumerated row by row."""

    def __init__(self, pixel_x: int, pixel_y: int, samples_per_pixel: int,
                 jitter: bool = True, random_source: Optional[RandomSource] = None):
        """
        Initialize stratified sampler.

        Args:
            pixel_x, pixel_y: Pixel being sampled
            samples_per_pixel: Requested sample count (see stratified_grid)
            jitter: Randomize the position inside each grid cell
            random_source: Source of uniform floats, required when jitter is on
        """
        super().__init__(pixel_x, pixel_y)
        self.grid_x, self.grid_y = stratified_grid(samples_per_pixel)
        self.jitter = jitter
        if jitter and random_source is None:
            raise ValueError("random_source is required for jittered sampling")
        self.random_source = random_source
        self._index_x = 0
        self._index_y = 0

    def remaining(self) -> int:
        if self._index_y >= self.grid_y:
            return 0
        rows_left = self.grid_y - self._index_y - 1
        return rows_left * self.grid_x + (self.grid_x - self._index_x)

    def _produce(self) -> Sample:
        if self.jitter:
            jitter_x = self.random_source.random()
            jitter_y = self.random_source.random()
        else:
            jitter_x, jitter_y = 0.5, 0.5

        offset_x = (self._index_x + jitter_x) / self.grid_x
        offset_y = (self._index_y + jitter_y) / self.grid_y
        sample = Sample(self.pixel_x, self.pixel_y, offset_x, offset_y)

        self._index_x += 1
        if self._index_x >= self.grid_x:
            self._index_x = 0
            self._index_y += 1

        return sample


class RandomSampler(Sampler):
    """Independent uniformly distributed samples over the pixel."""

    def __init__(self, pixel_x: int, pixel_y: int, samples_per_pixel: int,
                 random_source: RandomSource):
        super().__init__(pixel_x, pixel_y)
        if samples_per_pixel < 1:
            raise ValueError("samples_per_pixel must be at least 1")
        if random_source is None:
            raise ValueError("random_source is required for random sampling")
        self.random_source = random_source
        self._left = samples_per_pixel

    def remaining(self) -> int:
        return self._left

    def _produce(self) -> Sample:
        self._left -= 1
        return Sample(self.pixel_x, self.pixel_y,
                      self.random_source.random(), self.random_source.random())


@dataclass(frozen=True)
class SamplerFactory:
    """
    Picklable description of a sampling strategy.

    Worker processes receive the factory and build one sampler per pixel.
    """

    kind: str = 'stratified'
    samples_per_pixel: int = 16
    jitter: bool = True

    def __post_init__(self):
        if self.kind not in SAMPLER_KINDS:
            available = ', '.join(SAMPLER_KINDS)
            raise ValueError(f"Unknown sampler '{self.kind}'. Available: {available}")
        if self.samples_per_pixel < 1:
            raise ValueError("samples_per_pixel must be at least 1")
        if self.kind == 'stratified' and self.effective_samples != self.samples_per_pixel:
            logger.debug(f"Stratified grid yields {self.effective_samples} samples "
                         f"for {self.samples_per_pixel} requested")

    @property
    def effective_samples(self) -> int:
        """Samples actually produced per pixel."""
        if self.kind == 'simple':
            return 1
        if self.kind == 'stratified':
            grid_x, grid_y = stratified_grid(self.samples_per_pixel)
            return grid_x * grid_y
        return self.samples_per_pixel

    @property
    def uses_randomness(self) -> bool:
        return self.kind == 'random' or (self.kind == 'stratified' and self.jitter)

    def create(self, pixel_x: int, pixel_y: int,
               random_source: Optional[RandomSource] = None) -> Sampler:
        """Build a fresh sampler for one pixel."""
        if self.kind == 'simple':
            return SimpleSampler(pixel_x, pixel_y)
        if self.kind == 'stratified':
            return StratifiedSampler(pixel_x, pixel_y, self.samples_per_pixel,
                                     self.jitter, random_source)
        return RandomSampler(pixel_x, pixel_y, self.samples_per_pixel, random_source)


SAMPLER_KINDS: Dict[str, str] = {
    'simple': "one sample at the pixel center",
    'stratified': "jittered grid of sub-samples",
    'random': "independent uniform sub-samples",
}
