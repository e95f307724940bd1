"""
Helpers that turn the 64x32 display buffer into something a person can look
at: text rows for the terminal, a scaled greyscale array, or a PNG file.
"""

import os
from typing import Union

import numpy as np
from PIL import Image

from .constants import DISPLAY_HEIGHT, DISPLAY_WIDTH


def as_2d(display: np.ndarray) -> np.ndarray:
    """Accept either the flat row-major vram or a (32, 64) array"""
    return np.asarray(display, dtype=np.uint8).reshape(DISPLAY_HEIGHT, DISPLAY_WIDTH)


def render_text(display: np.ndarray, on: str = '██', off: str = '  ') -> str:
    return '\n'.join(''.join(on if pixel else off for pixel in row) for row in as_2d(display))


def scale_display(display: np.ndarray, scale: int = 8) -> np.ndarray:
    """Get display as a scaled 0-255 image array"""
    if scale < 1:
        raise ValueError(f"scale must be positive, got {scale}")
    image = (as_2d(display) * 255).astype(np.uint8)
    return np.repeat(np.repeat(image, scale, axis=0), scale, axis=1)


def save_display_png(display: np.ndarray, path: Union[str, os.PathLike], scale: int = 8) -> str:
    """Save the display as a greyscale PNG, returns the path written"""
    directory = os.path.dirname(os.fspath(path))
    if directory:
        os.makedirs(directory, exist_ok=True)
    img = Image.fromarray(scale_display(display, scale))
    img.save(path)
    return os.fspath(path)
