"""
Reconstruction filter kernels.

Filters weight each sample by its offset from the pixel center when the
samples of a pixel are combined into a single value.
"""

from typing import Dict, Tuple
from abc import ABC, abstractmethod
import logging

logger = logging.getLogger(__name__)


class Filter(ABC):
    """Abstract base class for symmetric, finite-support filter kernels."""

    def __init__(self, radius_x: float, radius_y: float):
        """
        Initialize filter support.

        Args:
            radius_x, radius_y: Half-width of the support rectangle per axis
        """
        if radius_x <= 0 or radius_y <= 0:
            raise ValueError("Filter radius must be positive")
        self.radius_x = float(radius_x)
        self.radius_y = float(radius_y)

    def radius(self) -> Tuple[float, float]:
        """Get the support radius (rx, ry)."""
        return self.radius_x, self.radius_y

    @abstractmethod
    def evaluate(self, dx: float, dy: float) -> float:
        """
        Weight of a sample at offset (dx, dy) from the pixel center.

        Args:
            dx, dy: Sample offset minus 0.5 on each axis

        Returns:
            Filter weight, 0 outside the support
        """
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(radius_x={self.radius_x}, radius_y={self.radius_y})"


class BoxFilter(Filter):
    """Constant weight over the support rectangle."""

    def __init__(self, radius_x: float = 0.5, radius_y: float = 0.5):
        super().__init__(radius_x, radius_y)

    def evaluate(self, dx: float, dy: float) -> float:
        if abs(dx) <= self.radius_x and abs(dy) <= self.radius_y:
            return 1.0
        return 0.0


class MitchellFilter(Filter):
    """
    Mitchell-Netravali separable cubic filter.

    The kernel has negative lobes near the edge of its support, which
    sharpens the reconstruction at the cost of slight ringing.
    """

    def __init__(self, radius_x: float = 2.0, radius_y: float = 2.0,
                 b: float = 1.0 / 3.0, c: float = 1.0 / 3.0):
        """
        Initialize Mitchell-Netravali filter.

        Args:
            radius_x, radius_y: Support radius per axis
            b, c: Shape parameters of the cubic family
        """
        super().__init__(radius_x, radius_y)
        self.b = b
        self.c = c

        # Polynomial coefficients for |x| in [0, 1] and (1, 2]
        self._p1 = (1.0 - b / 3.0, 0.0, -3.0 + 2.0 * b + c, 2.0 - 1.5 * b - c)
        self._p2 = (4.0 / 3.0 * b + 4.0 * c, -2.0 * b - 8.0 * c, b + 5.0 * c, -b / 6.0 - c)

    def _mitchell(self, v: float) -> float:
        x = 2.0 * abs(v)
        if x <= 1.0:
            p = self._p1
        elif x <= 2.0:
            p = self._p2
        else:
            return 0.0
        return p[0] + p[1] * x + p[2] * x * x + p[3] * x * x * x

    def evaluate(self, dx: float, dy: float) -> float:
        return self._mitchell(dx / self.radius_x) * self._mitchell(dy / self.radius_y)

    def __repr__(self) -> str:
        return (f"MitchellFilter(radius_x={self.radius_x}, radius_y={self.radius_y}, "
                f"b={self.b}, c={self.c})")


FILTERS: Dict[str, type] = {
    'box': BoxFilter,
    'mitchell': MitchellFilter,
}


def create_filter(name: str, **params) -> Filter:
    """
    Create a filter by name.

    Args:
        name: Filter identifier ('box' or 'mitchell')
        **params: Constructor parameters of the filter

    Returns:
        Configured filter instance
    """
    filter_class = FILTERS.get(name.lower())
    if filter_class is None:
        available = ', '.join(FILTERS.keys())
        raise ValueError(f"Unknown filter '{name}'. Available: {available}")
    pixel_filter = filter_class(**params)
    logger.debug(f"Created filter: {pixel_filter!r}")
    return pixel_filter
