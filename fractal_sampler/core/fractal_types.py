"""
Fractal render function definitions.

A render function maps a continuous image coordinate to the smooth
escape value of the fractal at the corresponding complex plane point.
Render functions are immutable once built and are shared read-only by
every pixel of a render.
"""

from typing import Dict, Any, Tuple
from abc import ABC, abstractmethod
from dataclasses import dataclass
import logging

from .math_functions import Viewport, escape_time
from .sampling import Sample

logger = logging.getLogger(__name__)


class RenderFunction(ABC):
    """Abstract base class for escape-time render functions."""

    def __init__(self, name: str, center: complex, scale: float, max_iterations: int,
                 width: int, height: int):
        """
        Initialize render function.

        Args:
            name: Human-readable name for the fractal
            center: Complex plane point at the image center
            scale: Horizontal half-extent of a landscape view in plane units
            max_iterations: Iteration budget per sample
            width, height: Image resolution in pixels
        """
        if max_iterations < 1:
            raise ValueError("max_iterations must be positive")
        self.name = name
        self.max_iterations = max_iterations
        self.viewport = Viewport(center, scale, width, height)

    def evaluate(self, sample: Sample) -> float:
        """Evaluate the fractal at the plane point of a sample."""
        x, y = sample.location()
        return self.evaluate_point(self.viewport.to_plane(x, y))

    @abstractmethod
    def evaluate_point(self, point: complex) -> float:
        """
        Evaluate the fractal at a complex plane point.

        Returns:
            Smooth escape value, or INTERIOR if the orbit stays bounded
        """
        pass

    def parameters(self) -> Dict[str, Any]:
        """Fractal-specific parameters, for metadata."""
        return {}


class MandelbrotFunction(RenderFunction):
    """Mandelbrot set: z0 = 0, c is the plane point."""

    def __init__(self, center: complex, scale: float, max_iterations: int,
                 width: int, height: int):
        super().__init__("Mandelbrot", center, scale, max_iterations, width, height)

    def evaluate_point(self, point: complex) -> float:
        return escape_time(0j, point, self.max_iterations)


class JuliaFunction(RenderFunction):
    """Julia set: c is fixed, z0 is the plane point."""

    def __init__(self, c: complex, center: complex, scale: float, max_iterations: int,
                 width: int, height: int):
        super().__init__("Julia", center, scale, max_iterations, width, height)
        self.c = complex(c)

    def evaluate_point(self, point: complex) -> float:
        # TODO: the log-log smoothing is derived for the Mandelbrot set; check a Julia-specific estimate
        return escape_time(point, self.c, self.max_iterations)

    def parameters(self) -> Dict[str, Any]:
        return {'c_real': self.c.real, 'c_imag': self.c.imag}


@dataclass(frozen=True)
class JuliaParameters:
    """Julia constant with a recommended view."""

    c_real: float = -0.4
    c_imag: float = -0.59
    center: Tuple[float, float] = (0.0, 0.0)
    scale: float = 2.0

    @property
    def c(self) -> complex:
        """Get the Julia constant as a complex number."""
        return complex(self.c_real, self.c_imag)


# Predefined interesting Julia set constants
JULIA_PRESETS = {
    'default': JuliaParameters(c_real=-0.4, c_imag=-0.59),
    'dragon': JuliaParameters(c_real=-0.75, c_imag=0.1),
    'spiral': JuliaParameters(c_real=-0.4, c_imag=0.6),
    'dendrite': JuliaParameters(c_real=-0.235125, c_imag=0.827215),
    'lightning': JuliaParameters(c_real=-0.8, c_imag=0.156),
    'rabbit': JuliaParameters(c_real=-0.123, c_imag=0.745),
    'airplane': JuliaParameters(c_real=-1.25, c_imag=0.0),
    'san_marco': JuliaParameters(c_real=-0.75, c_imag=0.0),
    'siegel_disk': JuliaParameters(c_real=-0.391, c_imag=-0.587),
}


class FractalRegistry:
    """Registry for managing available render functions."""

    _fractals: Dict[str, type] = {
        'mandelbrot': MandelbrotFunction,
        'julia': JuliaFunction,
    }

    @classmethod
    def register(cls, name: str, fractal_class: type) -> None:
        """
        Register a new render function type.

        Args:
            name: Unique identifier for the fractal
            fractal_class: Class implementing RenderFunction
        """
        if not issubclass(fractal_class, RenderFunction):
            raise ValueError("Fractal class must inherit from RenderFunction")
        cls._fractals[name.lower()] = fractal_class
        logger.info(f"Registered fractal type: {name}")

    @classmethod
    def get(cls, name: str) -> type:
        fractal_class = cls._fractals.get(name.lower())
        if fractal_class is None:
            available = ', '.join(cls._fractals.keys())
            raise ValueError(f"Unknown fractal type '{name}'. Available: {available}")
        return fractal_class

    @classmethod
    def list_fractals(cls) -> Dict[str, str]:
        """Get a dictionary of available fractals and their class docstrings."""
        return {name: (fractal_class.__doc__ or "").strip()
                for name, fractal_class in cls._fractals.items()}

    @classmethod
    def create(cls, name: str, center: complex, scale: float, max_iterations: int,
               width: int, height: int, **kwargs) -> RenderFunction:
        """
        Create a render function with the given view.

        Args:
            name: Fractal type name
            center, scale: View of the complex plane
            max_iterations: Iteration budget
            width, height: Image resolution
            **kwargs: Fractal-specific parameters (``c`` for Julia)

        Returns:
            Configured render function
        """
        fractal_class = cls.get(name)
        if fractal_class is JuliaFunction and 'c' not in kwargs:
            raise ValueError("Julia fractal requires the 'c' parameter")
        return fractal_class(center=center, scale=scale, max_iterations=max_iterations,
                             width=width, height=height, **kwargs)
