"""
Pytest configuration and shared fixtures for Plan Vision tests.

This module provides shared test fixtures and configuration
used across multiple test modules.
"""

import pytest

from PV_Libs.ObstacleLib.raster_models import Raster


@pytest.fixture
def white_raster():
    """
    Provide a 4x4 all-white raster with a single black pixel at (2, 2).

    Returns:
        Raster of 4x4 RGB pixels
    """
    raster = Raster.filled(4, 4, (255, 255, 255))
    raster.set_pixel(2, 2, (0, 0, 0))
    return raster


@pytest.fixture
def filtered_colors():
    """
    Provide the obstacle and free-space colors of a recolored raster.

    Returns:
        Tuple of (obstacle, free) RGB tuples
    """
    return (0, 0, 0), (255, 255, 255)
