"""
Filter-weighted reconstruction of pixel values from samples.
"""

from typing import Generic, Protocol, TypeVar
import logging

from .filters import Filter
from .sampling import Sample

logger = logging.getLogger(__name__)


class RenderResult(Protocol):
    """Value produced by a render function.

    Must support addition, scaling by a float and division by a float.
    Floats and numpy arrays both qualify.
    """

    def __add__(self, other): ...

    def __mul__(self, weight: float): ...

    def __truediv__(self, weight: float): ...


R = TypeVar('R', bound=RenderResult)


class Reconstructor(Generic[R]):
    """
    Accumulates weighted render results for one pixel.

    The filter is borrowed and may be shared by many reconstructors at once;
    the accumulator itself belongs to a single pixel.
    """

    def __init__(self, pixel_filter: Filter, zero: R = 0.0):
        """
        Initialize reconstructor.

        Args:
            pixel_filter: Filter used to weight samples
            zero: Zero value of the render result type
        """
        self.filter = pixel_filter
        self._zero = zero
        self._weighted_sum = zero
        self._total_weight = 0.0
        self._count = 0

    @property
    def total_weight(self) -> float:
        return self._total_weight

    @property
    def count(self) -> int:
        return self._count

    def accumulate(self, sample: Sample, result: R) -> None:
        """Add one sample's result, weighted by its offset from the pixel center."""
        weight = self.filter.evaluate(sample.offset_x - 0.5, sample.offset_y - 0.5)
        self._weighted_sum = self._weighted_sum + result * weight
        self._total_weight += weight
        self._count += 1

    def value(self) -> R:
        """Weighted mean of the accumulated results, or zero if no weight was collected."""
        if self._total_weight != 0.0:
            return self._weighted_sum / self._total_weight
        return self._zero
