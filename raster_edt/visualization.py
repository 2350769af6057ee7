"""
Downstream rendering of distance fields.

Maps a field to 8-bit grayscale (max-normalized, unreached pixels white)
and writes PNG files through matplotlib. Nothing here feeds back into the
engines.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import numpy as np
from matplotlib import image as mpimg

if TYPE_CHECKING:
    from numpy.typing import ArrayLike, NDArray


def to_grayscale(field: ArrayLike, width: int, height: int) -> NDArray[np.uint8]:
    """
    Scale a flat distance field to a (height, width) uint8 image.

    The largest finite distance maps to 255; ``inf`` maps to 255 as well.
    A field with no positive finite value renders black apart from ``inf``.
    """
    values = np.asarray(field, dtype=np.float64).reshape(height, width)
    finite = np.isfinite(values)
    peak = values[finite].max() if finite.any() else 0.0

    image = np.zeros((height, width), dtype=np.uint8)
    if peak > 0:
        image[finite] = (values[finite] / peak * 255.0).astype(np.uint8)
    image[~finite] = 255
    return image


def nearest_to_rgb(
    field: ArrayLike,
    nearest_x: ArrayLike,
    nearest_y: ArrayLike,
    width: int,
    height: int,
) -> NDArray[np.uint8]:
    """
    Encode distance and the offset to the nearest feature as an RGB image.

    Red is the grayscale distance, green and blue the horizontal and vertical
    offsets to the nearest feature pixel, centred on 127.
    """
    gray = to_grayscale(field, width, height)
    nx = np.asarray(nearest_x, dtype=np.int64).reshape(height, width)
    ny = np.asarray(nearest_y, dtype=np.int64).reshape(height, width)
    found = nx >= 0

    xs = np.arange(width)[None, :]
    ys = np.arange(height)[:, None]
    dx = np.where(found, nx - xs, 0)
    dy = np.where(found, ny - ys, 0)
    span = max(int(np.abs(dx).max()), int(np.abs(dy).max()), 1)

    rgb = np.empty((height, width, 3), dtype=np.uint8)
    rgb[..., 0] = gray
    rgb[..., 1] = (127 + dx * 127 // span).astype(np.uint8)
    rgb[..., 2] = (127 + dy * 127 // span).astype(np.uint8)
    return rgb


def save_png(path: str | Path, field: ArrayLike, width: int, height: int) -> Path:
    """Write the grayscale rendering of ``field`` to ``path``."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    mpimg.imsave(path, to_grayscale(field, width, height), cmap="gray", vmin=0, vmax=255)
    return path


def save_rgb_png(path: str | Path, rgb: NDArray[np.uint8]) -> Path:
    """Write an RGB uint8 image to ``path``."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    mpimg.imsave(path, rgb)
    return path
