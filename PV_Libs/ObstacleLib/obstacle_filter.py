"""
Obstacle classification for Plan Vision.

Scans every pixel of a decoded raster and decides whether it is impassable.
A pixel is an obstacle when all three channels are above the white threshold
(background paper) or when any configured ColorMatcher accepts it within the
shared tolerance.

The scan can optionally recolor the raster in place (obstacles black, free
space white) so the classification can be inspected as an image. Recoloring
is destructive: callers that still need the original pixels must pass a copy.

Classes:
    ObstacleFilterConfig: Serializable obstacle color and tolerance settings

Functions:
    is_near_white: Background-paper rule
    classify_pixel: Classify one RGB sample
    classify_raster: Classify a whole raster into an ObstacleGrid
    classify_image: Convenience wrapper around classify_raster for PIL Images
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple
import concurrent.futures
import logging

from PV_Libs.constants import (
    BYTES_PER_PIXEL,
    DEFAULT_OBSTACLE_COLORS,
    DEFAULT_TOLERANCE,
    FREE_RGB,
    OBSTACLE_RGB,
    WHITE_THRESHOLD,
)
from PV_Libs.ObstacleLib.raster_models import ColorMatcher, ObstacleGrid, Raster, RgbColor
from PV_Libs.ObstacleLib.raster_codec import raster_from_image, raster_to_image

logger = logging.getLogger(__name__)

_OBSTACLE_BYTES = bytes(OBSTACLE_RGB)
_FREE_BYTES = bytes(FREE_RGB)


@dataclass
class ObstacleFilterConfig:
    """Configuration for obstacle classification.

    Attributes:
        obstacle_colors: Reference RGB colors treated as obstacles
        tolerance: Per-channel match tolerance shared by all colors (default: 15)
        white_threshold: Channels strictly above this value on all of R, G and B
                         mark background paper as obstacle (default: 250)
        recolor: Overwrite the raster with a black/white visualization
        max_workers: Number of threads scanning row bands (1 = sequential)
    """
    obstacle_colors: List[RgbColor] = field(default_factory=lambda: list(DEFAULT_OBSTACLE_COLORS))
    tolerance: int = DEFAULT_TOLERANCE
    white_threshold: int = WHITE_THRESHOLD
    recolor: bool = False
    max_workers: int = 1

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        data = asdict(self)
        data["obstacle_colors"] = [list(color) for color in self.obstacle_colors]
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ObstacleFilterConfig":
        """Create from dictionary."""
        normalized = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        colors = normalized.get("obstacle_colors")
        if colors is not None:
            normalized["obstacle_colors"] = [tuple(color) for color in colors]
        return cls(**normalized)

    def get_matchers(self) -> List[ColorMatcher]:
        """Build ColorMatchers for the configured colors."""
        return [ColorMatcher.from_sequence(color) for color in self.obstacle_colors]

    def apply(self, raster: Raster) -> ObstacleGrid:
        """Classify ``raster`` with these settings."""
        return classify_raster(
            raster,
            self.get_matchers(),
            tolerance=self.tolerance,
            recolor=self.recolor,
            white_threshold=self.white_threshold,
            max_workers=self.max_workers,
        )


def is_near_white(red: int, green: int, blue: int, threshold: int = WHITE_THRESHOLD) -> bool:
    return red > threshold and green > threshold and blue > threshold


def classify_pixel(
    red: int,
    green: int,
    blue: int,
    matchers: Sequence[ColorMatcher],
    tolerance: int = DEFAULT_TOLERANCE,
    white_threshold: int = WHITE_THRESHOLD,
) -> bool:
    """
    Decide whether a single RGB sample is an obstacle.

    Args:
        red, green, blue: Sampled channel values (0-255)
        matchers: Obstacle color signatures, checked in order until one matches
        tolerance: Per-channel tolerance for every matcher
        white_threshold: Threshold of the near-white rule

    Returns:
        True if the sample is near-white or matches any obstacle color
    """
    if is_near_white(red, green, blue, white_threshold):
        return True
    return any(matcher.matches(red, green, blue, tolerance) for matcher in matchers)


def _classify_rows(
    raster: Raster,
    matchers: Sequence[ColorMatcher],
    tolerance: int,
    recolor: bool,
    white_threshold: int,
    cells: List[bool],
    row_start: int,
    row_stop: int,
) -> None:
    pixels = raster.pixels
    width = raster.width

    for y in range(row_start, row_stop):
        for x in range(width):
            index = y * width + x
            offset = index * BYTES_PER_PIXEL
            # Sample before any recolor write touches this pixel
            red = pixels[offset]
            green = pixels[offset + 1]
            blue = pixels[offset + 2]

            obstacle = classify_pixel(red, green, blue, matchers, tolerance, white_threshold)
            cells[index] = obstacle

            if recolor:
                pixels[offset:offset + BYTES_PER_PIXEL] = _OBSTACLE_BYTES if obstacle else _FREE_BYTES


def _row_bands(height: int, band_count: int) -> List[Tuple[int, int]]:
    band_count = max(1, min(band_count, height))
    base, extra = divmod(height, band_count)
    bands = []
    start = 0
    for band in range(band_count):
        stop = start + base + (1 if band < extra else 0)
        bands.append((start, stop))
        start = stop
    return bands


def classify_raster(
    raster: Raster,
    matchers: Sequence[ColorMatcher],
    tolerance: int = DEFAULT_TOLERANCE,
    recolor: bool = False,
    white_threshold: int = WHITE_THRESHOLD,
    max_workers: int = 1,
) -> ObstacleGrid:
    """
    Classify every pixel of a raster as obstacle or free space.

    Pixels are visited in row-major order. Each pixel is classified from its
    original channel values; when ``recolor`` is set the same pixel is then
    overwritten with pure black (obstacle) or pure white (free). Nothing
    else in the raster is touched.

    Args:
        raster: Decoded RGB raster (mutated in place only if recolor is True)
        matchers: Obstacle color signatures (logical OR, order irrelevant)
        tolerance: Non-negative per-channel tolerance (default: 15)
        recolor: Overwrite the raster with a black/white visualization
        white_threshold: Threshold of the near-white rule (default: 250)
        max_workers: Threads used to scan disjoint row bands (default: 1)

    Returns:
        ObstacleGrid of ``width * height`` cells

    Raises:
        ValueError: If the buffer does not match the raster dimensions or
                    tolerance is negative
    """
    raster.validate()
    if tolerance < 0:
        raise ValueError(f"tolerance must be non-negative, got {tolerance}")

    matchers = list(matchers)
    cells = [False] * (raster.width * raster.height)

    if max_workers > 1 and raster.height > 1:
        bands = _row_bands(raster.height, max_workers)
        with concurrent.futures.ThreadPoolExecutor(max_workers=len(bands)) as executor:
            futures = [
                executor.submit(
                    _classify_rows,
                    raster,
                    matchers,
                    tolerance,
                    recolor,
                    white_threshold,
                    cells,
                    start,
                    stop,
                )
                for start, stop in bands
            ]
            for future in concurrent.futures.as_completed(futures):
                future.result()
    else:
        _classify_rows(raster, matchers, tolerance, recolor, white_threshold, cells, 0, raster.height)

    grid = ObstacleGrid(raster.width, raster.height, cells)
    logger.debug(
        f"Classified {raster.width}x{raster.height} raster: "
        f"{grid.obstacle_count} obstacle pixels, {len(matchers)} obstacle colors"
    )
    return grid


def classify_image(
    image: Any,
    matchers: Sequence[ColorMatcher],
    tolerance: int = DEFAULT_TOLERANCE,
    recolor: bool = False,
    white_threshold: int = WHITE_THRESHOLD,
    max_workers: int = 1,
) -> Tuple[ObstacleGrid, Optional[Any]]:
    """
    Classify a PIL Image.

    The image itself is never modified.

    Args:
        image: PIL Image (any mode, normalized to RGB)
        matchers: Obstacle color signatures
        tolerance: Per-channel tolerance
        recolor: If True, also return the black/white visualization
        white_threshold: Threshold of the near-white rule
        max_workers: Threads used to scan row bands

    Returns:
        Tuple of (grid, filtered_image) where filtered_image is None unless
        recolor is True

    Raises:
        TypeError: If image is not a PIL Image
    """
    raster = raster_from_image(image)
    grid = classify_raster(
        raster,
        matchers,
        tolerance=tolerance,
        recolor=recolor,
        white_threshold=white_threshold,
        max_workers=max_workers,
    )
    filtered = raster_to_image(raster) if recolor else None
    return grid, filtered
