"""
Structured result object for the distance-transform engines.

The plain ``compute_*`` functions return the flat distance field directly;
the engine classes return a TransformResult so callers also get the
nearest-feature arrays, timing and engine metadata.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import numpy as np

if TYPE_CHECKING:
    from numpy.typing import NDArray


@dataclass
class TransformResult:
    """
    Output of one distance-transform invocation.

    Attributes:
        distances: Flat float64 field, row-major, length width*height.
            ``inf`` marks pixels with no reachable feature pixel.
        width: Raster width in pixels
        height: Raster height in pixels
        method: ``"exact"`` or ``"fmm"``
        squared: True when ``distances`` holds squared distances
        nearest_x: Column of the nearest feature pixel per cell (-1 if none)
        nearest_y: Row of the nearest feature pixel per cell (-1 if none)
        execution_time: Wall time of the transform in seconds
        metadata: Engine-specific information (worker count, freeze count, ...)
    """

    distances: NDArray[np.float64]
    width: int
    height: int
    method: str
    squared: bool = False
    nearest_x: NDArray[np.int64] | None = None
    nearest_y: NDArray[np.int64] | None = None
    execution_time: float | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def __len__(self) -> int:
        return self.distances.size

    def __iter__(self):
        # Tuple-style unpacking: distances, nearest_x, nearest_y
        return iter((self.distances, self.nearest_x, self.nearest_y))

    @property
    def has_nearest(self) -> bool:
        return self.nearest_x is not None and self.nearest_y is not None

    @property
    def reached(self) -> NDArray[np.bool_]:
        """Boolean mask of pixels that received a finite distance."""
        return np.isfinite(self.distances)

    def as_image(self) -> NDArray[np.float64]:
        """Return the field as a (height, width) view."""
        return self.distances.reshape(self.height, self.width)

    def nearest_feature(self, x: int, y: int) -> tuple[int, int] | None:
        """Coordinates of the feature pixel nearest to (x, y), or None."""
        if not self.has_nearest:
            raise ValueError("Result was computed without nearest-feature tracking")
        idx = y * self.width + x
        nx, ny = int(self.nearest_x[idx]), int(self.nearest_y[idx])
        if nx < 0:
            return None
        return nx, ny

    def summary(self) -> dict[str, Any]:
        """Summary statistics over the reached pixels."""
        reached = self.distances[self.reached]
        return {
            "method": self.method,
            "shape": (self.width, self.height),
            "reached": int(reached.size),
            "unreached": int(self.distances.size - reached.size),
            "max_distance": float(reached.max()) if reached.size else float("inf"),
            "mean_distance": float(reached.mean()) if reached.size else float("inf"),
            "execution_time": self.execution_time,
        }
