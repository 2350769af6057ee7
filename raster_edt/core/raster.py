"""
Raster input model shared by both distance-transform engines.

A raster is an immutable row-major view of ``width x height`` samples
(``index = y * width + x``). Every sample reduces to a boolean "is-feature"
predicate: non-zero samples are features unless the raster is inverted, in
which case zero samples are.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import numpy as np

from raster_edt.utils.exceptions import ShapeMismatchError, validate_dimensions, validate_sample_count

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence

    from numpy.typing import ArrayLike, NDArray

# Distance assigned to pixels that no feature pixel can reach
UNREACHED = np.inf


@dataclass(frozen=True, eq=False)
class Raster:
    """
    Validated, read-only feature mask of a 2D image.

    Use :meth:`from_samples` for flat buffers and :meth:`from_array` for 2D
    arrays; both validate before anything is allocated for the transform.

    Attributes:
        width: Number of columns
        height: Number of rows
        mask: Read-only (height, width) boolean array, True at feature pixels
    """

    width: int
    height: int
    mask: NDArray[np.bool_]

    @classmethod
    def from_samples(
        cls,
        samples: Sequence[Any] | ArrayLike,
        width: int,
        height: int,
        invert: bool = False,
        engine_name: str | None = None,
    ) -> Raster:
        """
        Build a raster from a flat row-major sample buffer.

        Args:
            samples: Flat sequence of bool-like values (bool, int or float), or
                an array already shaped (height, width)
            width: Raster width, must be >= 1
            height: Raster height, must be >= 1
            invert: Treat zero samples as features instead of non-zero ones
            engine_name: Name reported in validation errors

        Raises:
            EmptyDimensionError: width or height is not a positive integer
            ShapeMismatchError: len(samples) != width * height, or a
                multi-dimensional array whose shape is not (height, width)
        """
        width, height = validate_dimensions(width, height, engine_name=engine_name)

        array = np.asarray(samples)
        if array.ndim > 1 and array.shape != (height, width):
            raise ShapeMismatchError(array.size, width, height, engine_name=engine_name, sample_shape=array.shape)
        validate_sample_count(array.size, width, height, engine_name=engine_name)

        return cls._from_flat(array.reshape(-1), width, height, invert)

    @classmethod
    def from_array(cls, image: ArrayLike, invert: bool = False, engine_name: str | None = None) -> Raster:
        """Build a raster from a 2D (height, width) array."""
        array = np.asarray(image)
        if array.ndim != 2:
            raise ValueError(f"Expected a 2D (height, width) array, got shape {array.shape}")
        height, width = array.shape
        width, height = validate_dimensions(width, height, engine_name=engine_name)
        return cls._from_flat(array.reshape(-1), width, height, invert)

    @classmethod
    def _from_flat(cls, flat: NDArray[Any], width: int, height: int, invert: bool) -> Raster:
        mask = flat != 0
        if invert:
            mask = ~mask
        # Fresh array, so freezing it never touches the caller's buffer
        mask = np.array(mask, dtype=bool).reshape(height, width)
        mask.setflags(write=False)
        return cls(width=width, height=height, mask=mask)

    @property
    def shape(self) -> tuple[int, int]:
        """Numpy-style (height, width) shape."""
        return self.height, self.width

    @property
    def size(self) -> int:
        return self.width * self.height

    @property
    def flat_mask(self) -> NDArray[np.bool_]:
        return self.mask.reshape(-1)

    @property
    def feature_count(self) -> int:
        return int(np.count_nonzero(self.mask))

    @property
    def has_features(self) -> bool:
        return bool(self.mask.any())

    def is_feature(self, x: int, y: int) -> bool:
        return bool(self.mask[y, x])

    def index(self, x: int, y: int) -> int:
        """Flat row-major index of pixel (x, y)."""
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"Pixel ({x}, {y}) outside {self.width}x{self.height} raster")
        return y * self.width + x

    def coords(self, index: int) -> tuple[int, int]:
        """(x, y) coordinates of a flat index."""
        if not 0 <= index < self.size:
            raise IndexError(f"Index {index} outside raster of {self.size} pixels")
        return index % self.width, index // self.width

    def features(self) -> Iterator[tuple[int, int]]:
        """Iterate feature pixel coordinates in row-major order."""
        ys, xs = np.nonzero(self.mask)
        for x, y in zip(xs.tolist(), ys.tolist()):
            yield x, y

    def __repr__(self) -> str:
        return f"Raster(width={self.width}, height={self.height}, features={self.feature_count})"


def as_raster(
    samples: Raster | Sequence[Any] | ArrayLike,
    width: int | None = None,
    height: int | None = None,
    invert: bool = False,
    engine_name: str | None = None,
) -> Raster:
    """
    Coerce engine input into a Raster.

    A Raster passes through unchanged (``invert`` must then be False, since
    the predicate is already fixed). With ``width``/``height`` the input is a
    flat buffer; without them it must be a 2D array.
    """
    if isinstance(samples, Raster):
        if invert:
            raise ValueError("invert cannot be applied to an existing Raster; rebuild it with invert=True")
        if width is not None and height is not None and (width, height) != (samples.width, samples.height):
            raise ShapeMismatchError(samples.size, width, height, engine_name=engine_name)
        return samples

    if width is None and height is None:
        return Raster.from_array(samples, invert=invert, engine_name=engine_name)

    if width is None or height is None:
        raise TypeError("width and height must be given together")

    return Raster.from_samples(samples, width, height, invert=invert, engine_name=engine_name)
