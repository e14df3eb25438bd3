"""
ObstacleLib - Raster models and obstacle classification

This module provides the raster buffer, obstacle color matching and the
obstacle filter that turns a decoded image into an ObstacleGrid.
"""

from PV_Libs.ObstacleLib.raster_models import ColorMatcher, ObstacleGrid, Raster, RgbColor
from PV_Libs.ObstacleLib.raster_codec import (
    decode_raster,
    encode_raster,
    grid_to_image,
    raster_from_image,
    raster_to_image,
)
from PV_Libs.ObstacleLib.obstacle_filter import (
    ObstacleFilterConfig,
    classify_image,
    classify_pixel,
    classify_raster,
    is_near_white,
)

__all__ = [
    "ColorMatcher",
    "ObstacleGrid",
    "Raster",
    "RgbColor",
    "decode_raster",
    "encode_raster",
    "grid_to_image",
    "raster_from_image",
    "raster_to_image",
    "ObstacleFilterConfig",
    "classify_image",
    "classify_pixel",
    "classify_raster",
    "is_near_white",
]
