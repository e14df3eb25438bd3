"""
Raster encoding and decoding for Plan Vision.

Thin adapter between Pillow images and the flat RGB Raster buffer used by
the obstacle filter. Palette, grayscale, 16-bit and alpha images are all
normalized to 8-bit RGB with the alpha channel dropped.

Functions:
    raster_from_image: Convert a PIL Image to a Raster
    raster_to_image: Convert a Raster back to a PIL Image
    decode_raster: Load an image file as a Raster
    encode_raster: Save a Raster as an 8-bit RGB image file
    grid_to_image: Render an ObstacleGrid as a black/white image
"""

from pathlib import Path
from typing import Any, Union

from PIL import Image

from PV_Libs.constants import DEFAULT_OUTPUT_FORMAT, FREE_RGB, OBSTACLE_RGB
from PV_Libs.ObstacleLib.raster_models import ObstacleGrid, Raster


def _to_rgb(image: Any) -> Any:
    if image.mode == "RGB":
        return image
    # 16-bit grayscale modes do not convert straight to RGB
    if image.mode.startswith("I;16"):
        image = image.convert("I").point(lambda value: value * (1 / 256)).convert("L")
    return image.convert("RGB")


def raster_from_image(image: Any) -> Raster:
    """
    Convert a PIL Image to a Raster.

    Args:
        image: PIL Image in any mode

    Returns:
        Raster holding a copy of the image's RGB bytes

    Raises:
        TypeError: If image is not a PIL Image
    """
    if not hasattr(image, "convert") or not hasattr(image, "tobytes"):
        raise TypeError(f"Expected PIL Image, got {type(image)}")

    rgb = _to_rgb(image)
    width, height = rgb.size
    return Raster(width, height, bytearray(rgb.tobytes()))


def raster_to_image(raster: Raster) -> Any:
    """Convert a Raster to a new RGB PIL Image."""
    raster.validate()
    return Image.frombytes("RGB", (raster.width, raster.height), bytes(raster.pixels))


def decode_raster(file_path: Union[str, Path]) -> Raster:
    """
    Load an image file as a Raster.

    Args:
        file_path: Path to image file (PNG, JPG, etc.)

    Returns:
        8-bit RGB Raster

    Raises:
        ValueError: If the file is missing, unreadable or not a supported image
    """
    try:
        with Image.open(file_path) as image:
            image.load()
            return raster_from_image(image)
    except Exception as e:
        raise ValueError(f"Failed to load image: {e}") from e


def encode_raster(raster: Raster, file_path: Union[str, Path]) -> Path:
    """
    Save a Raster as an 8-bit RGB image.

    Args:
        raster: Raster to write
        file_path: Destination file; its parent directory must exist

    Returns:
        Path where the image was saved

    Raises:
        ValueError: If the raster buffer does not match its dimensions
        OSError: If the file cannot be written
    """
    image = raster_to_image(raster)
    output_file = Path(file_path)
    try:
        image.save(output_file, format=DEFAULT_OUTPUT_FORMAT)
    except Exception as e:
        raise OSError(f"Failed to save image to {output_file}: {str(e)}") from e
    return output_file


def grid_to_image(grid: ObstacleGrid) -> Any:
    """
    Render an ObstacleGrid as an RGB image.

    Obstacles are black and free cells white, matching the recolored
    output of the obstacle filter.
    """
    obstacle = bytes(OBSTACLE_RGB)
    free = bytes(FREE_RGB)
    data = b"".join(obstacle if cell else free for cell in grid.cells)
    return Image.frombytes("RGB", (grid.width, grid.height), data)
