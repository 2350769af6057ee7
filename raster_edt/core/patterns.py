"""
Synthetic rasters for demos, benchmarks and tests.

All generators return a (size, size) boolean array that is True inside the
shape.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray


def cross(size: int) -> NDArray[np.bool_]:
    """Plus-shaped band of half-width size/4 centred in the raster."""
    half = size // 2
    quarter = size // 4
    offsets = np.abs(np.arange(size) - half)
    return (offsets[None, :] < quarter) | (offsets[:, None] < quarter)


def circle(size: int) -> NDArray[np.bool_]:
    """Disc of radius size/2 centred in the raster."""
    half = size // 2
    offsets = np.arange(size) - half
    return offsets[None, :] ** 2 + offsets[:, None] ** 2 < half * half


def random_features(width: int, height: int, density: float = 0.1, seed: int | None = None) -> NDArray[np.bool_]:
    """Independent Bernoulli feature pixels, reproducible with ``seed``."""
    rng = np.random.default_rng(seed)
    return rng.random((height, width)) < density


PATTERNS = {
    "cross": cross,
    "circle": circle,
}
