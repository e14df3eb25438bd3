"""
Raster and obstacle data models for Plan Vision.

This module defines the core data structures shared by the obstacle filter
and the raster codec.

Classes:
    Raster: Row-major 8-bit RGB pixel buffer with known width and height
    ColorMatcher: Reference obstacle color with a tolerance-based match test
    ObstacleGrid: Row-major boolean grid where True marks an impassable pixel

Type Aliases:
    RgbColor: A tuple of 3 integers representing RGB color values (0-255)
"""

from dataclasses import dataclass, field
from typing import List, Sequence, Tuple

import numpy as np

from PV_Libs.constants import BYTES_PER_PIXEL, CHANNEL_MAX, CHANNEL_MIN

RgbColor = Tuple[int, int, int]


@dataclass
class Raster:
    """Decoded image as a flat, row-major RGB buffer.

    Attributes:
        width: Image width in pixels
        height: Image height in pixels
        pixels: Mutable buffer of ``width * height * 3`` bytes (R, G, B)
    """
    width: int
    height: int
    pixels: bytearray

    @property
    def expected_length(self) -> int:
        return self.width * self.height * BYTES_PER_PIXEL

    def validate(self) -> None:
        """
        Check that the buffer length matches the declared dimensions.

        Raises:
            ValueError: If dimensions are negative or the buffer has the wrong size
        """
        if self.width < 0 or self.height < 0:
            raise ValueError(f"Raster dimensions must be non-negative, got {self.width}x{self.height}")
        if len(self.pixels) != self.expected_length:
            raise ValueError(
                f"Raster buffer holds {len(self.pixels)} bytes but "
                f"{self.width}x{self.height} RGB needs {self.expected_length}"
            )

    def offset(self, x: int, y: int) -> int:
        return (y * self.width + x) * BYTES_PER_PIXEL

    def pixel(self, x: int, y: int) -> RgbColor:
        start = self.offset(x, y)
        r, g, b = self.pixels[start:start + BYTES_PER_PIXEL]
        return r, g, b

    def set_pixel(self, x: int, y: int, color: RgbColor) -> None:
        start = self.offset(x, y)
        self.pixels[start:start + BYTES_PER_PIXEL] = bytes(color)

    def copy(self) -> "Raster":
        return Raster(self.width, self.height, bytearray(self.pixels))

    @classmethod
    def filled(cls, width: int, height: int, color: RgbColor) -> "Raster":
        """Create a raster where every pixel has the same color."""
        return cls(width, height, bytearray(bytes(color) * (width * height)))


def _check_channel(name: str, value: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} channel must be an integer, got {value!r}")
    if not (CHANNEL_MIN <= value <= CHANNEL_MAX):
        raise ValueError(f"{name} channel must be 0-255, got {value}")


@dataclass(frozen=True)
class ColorMatcher:
    """One obstacle color signature.

    A sampled pixel matches when every channel differs from the reference
    by at most the tolerance given at match time.
    """
    red: int
    green: int
    blue: int

    def __post_init__(self) -> None:
        _check_channel("red", self.red)
        _check_channel("green", self.green)
        _check_channel("blue", self.blue)

    @classmethod
    def from_sequence(cls, values: Sequence[int]) -> "ColorMatcher":
        """Build a matcher from an ``[r, g, b]`` list (e.g. parsed JSON)."""
        if len(values) != 3:
            raise ValueError(f"Expected 3 channel values, got {len(values)}")
        r, g, b = values
        return cls(r, g, b)

    @property
    def rgb(self) -> RgbColor:
        return self.red, self.green, self.blue

    def matches(self, red: int, green: int, blue: int, tolerance: int) -> bool:
        return (
            abs(red - self.red) <= tolerance
            and abs(green - self.green) <= tolerance
            and abs(blue - self.blue) <= tolerance
        )


@dataclass
class ObstacleGrid:
    """Row-major obstacle map, ``cells[y * width + x]`` is True for obstacles."""
    width: int
    height: int
    cells: List[bool] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.cells:
            self.cells = [False] * (self.width * self.height)
        elif len(self.cells) != self.width * self.height:
            raise ValueError(
                f"Grid of {self.width}x{self.height} needs {self.width * self.height} cells, "
                f"got {len(self.cells)}"
            )

    def __len__(self) -> int:
        return len(self.cells)

    def index(self, x: int, y: int) -> int:
        return y * self.width + x

    def is_obstacle(self, x: int, y: int) -> bool:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"Cell ({x}, {y}) is outside {self.width}x{self.height} grid")
        return self.cells[self.index(x, y)]

    @property
    def obstacle_count(self) -> int:
        return sum(self.cells)

    def as_array(self) -> np.ndarray:
        """Return the grid as a ``(height, width)`` boolean NumPy array."""
        return np.array(self.cells, dtype=bool).reshape(self.height, self.width)
