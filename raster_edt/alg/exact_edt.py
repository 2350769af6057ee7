"""
Exact Euclidean distance transform (Saito-Toriwaki two-pass minimization).

For every pixel the engine finds the squared Euclidean distance to the
nearest feature pixel in two separable passes over squared distances:

Pass 1 (per column):
    colDist(x, y) = vertical distance from (x, y) to the nearest feature pixel
    in column x, found with a forward and a backward linear sweep. Columns
    without any feature pixel carry ``inf``.

Pass 2 (per row):
    g(x, y) = min over x' of [ colDist(x', y)^2 + (x - x')^2 ]

The final field is ``sqrt(g)``. Pass 2 is evaluated directly over all
candidate columns (O(width) per cell, O(n^3) for an n x n raster), vectorized
with numpy in bounded blocks.

Every intermediate value is an integer-valued float64 (sums of squares of
pixel offsets), so results are exact and independent of how the work is
partitioned: parallel and sequential runs are bit-identical.
"""

from __future__ import annotations

import time
from concurrent.futures import ThreadPoolExecutor, wait
from typing import TYPE_CHECKING, Any

import numpy as np

from raster_edt.config import ExactEDTConfig, resolve_config
from raster_edt.core.raster import UNREACHED, Raster, as_raster
from raster_edt.utils.logging import LoggedOperation, get_logger, log_transform_completion, log_transform_start
from raster_edt.utils.result import TransformResult

if TYPE_CHECKING:
    from collections.abc import Sequence

    from numpy.typing import ArrayLike, NDArray

logger = get_logger(__name__)

ENGINE_NAME = "ExactEDT"


def _column_pass(
    mask: NDArray[np.bool_],
    col_sq: NDArray[np.float64],
    col_row: NDArray[np.int64] | None,
    start: int,
    stop: int,
) -> None:
    """
    Pass 1 over columns [start, stop).

    Writes squared vertical distances into ``col_sq[:, start:stop]`` and, when
    tracking is enabled, the row of the feature pixel that produced them into
    ``col_row``. Ties between the feature above and below go to the one above.
    """
    block = mask[:, start:stop]
    height, ncols = block.shape

    forward = np.empty((height, ncols), dtype=np.float64)
    run = np.full(ncols, np.inf)
    if col_row is not None:
        forward_row = np.empty((height, ncols), dtype=np.int64)
        last = np.full(ncols, -1, dtype=np.int64)

    for y in range(height):
        run = np.where(block[y], 0.0, run + 1.0)
        forward[y] = run
        if col_row is not None:
            last = np.where(block[y], y, last)
            forward_row[y] = last

    run = np.full(ncols, np.inf)
    if col_row is not None:
        following = np.full(ncols, -1, dtype=np.int64)

    for y in range(height - 1, -1, -1):
        run = np.where(block[y], 0.0, run + 1.0)
        below = run < forward[y]
        dist = np.where(below, run, forward[y])
        col_sq[y, start:stop] = dist * dist
        if col_row is not None:
            following = np.where(block[y], y, following)
            col_row[y, start:stop] = np.where(below, following, forward_row[y])


def _row_pass(
    col_sq: NDArray[np.float64],
    col_row: NDArray[np.int64] | None,
    out: NDArray[np.float64],
    nearest_x: NDArray[np.int64] | None,
    nearest_y: NDArray[np.int64] | None,
    start: int,
    stop: int,
    max_block_elements: int,
) -> None:
    """
    Pass 2 over rows [start, stop).

    For each target column x the candidates ``col_sq[y, x'] + (x - x')^2``
    are materialized for a chunk of target columns at a time so the
    temporary stays under ``max_block_elements``. ``argmin`` keeps the first
    minimum, so ties resolve to the smallest candidate column.
    """
    rows = col_sq[start:stop]
    nrows, width = rows.shape
    sources = np.arange(width, dtype=np.float64)
    chunk = max(1, min(width, max_block_elements // max(1, nrows * width)))

    for a in range(0, width, chunk):
        b = min(a + chunk, width)
        offsets = np.arange(a, b, dtype=np.float64)[:, None] - sources[None, :]
        offsets *= offsets
        candidates = rows[:, None, :] + offsets[None, :, :]

        if nearest_x is None:
            out[start:stop, a:b] = candidates.min(axis=2)
            continue

        best = candidates.argmin(axis=2)
        values = np.take_along_axis(candidates, best[..., None], axis=2)[..., 0]
        out[start:stop, a:b] = values

        found = np.isfinite(values)
        row_index = np.arange(start, stop)[:, None]
        nearest_x[start:stop, a:b] = np.where(found, best, -1)
        nearest_y[start:stop, a:b] = np.where(found, col_row[row_index, best], -1)


def _partition(length: int, parts: int) -> list[tuple[int, int]]:
    """Split range(length) into at most ``parts`` contiguous non-empty spans."""
    parts = max(1, min(parts, length))
    bounds = np.linspace(0, length, parts + 1).astype(int)
    return [(int(lo), int(hi)) for lo, hi in zip(bounds[:-1], bounds[1:]) if hi > lo]


def _blocks(length: int, block_size: int) -> list[tuple[int, int]]:
    return [(lo, min(lo + block_size, length)) for lo in range(0, length, block_size)]


class ExactEDT:
    """
    Exact distance-transform engine.

    Each :meth:`solve` call owns its column buffer and output arrays; the
    engine keeps no state between calls, so one instance can serve many
    threads.

    Example:
        >>> engine = ExactEDT(parallel=True, max_workers=4)
        >>> result = engine.solve(samples, width, height)
        >>> result.as_image()
    """

    name = ENGINE_NAME

    def __init__(self, config: ExactEDTConfig | None = None, **overrides: Any):
        self.config = resolve_config(ExactEDTConfig, config, **overrides)

    def solve(
        self,
        samples: Raster | Sequence[Any] | ArrayLike,
        width: int | None = None,
        height: int | None = None,
    ) -> TransformResult:
        """
        Compute the exact distance field.

        Args:
            samples: Raster, flat row-major buffer (with width/height) or 2D array
            width: Raster width for flat buffers
            height: Raster height for flat buffers

        Returns:
            TransformResult with flat float64 distances (squared if configured)

        Raises:
            EmptyDimensionError: width or height is zero
            ShapeMismatchError: buffer length != width * height
        """
        config = self.config
        raster = as_raster(samples, width, height, invert=config.invert, engine_name=self.name)
        log_transform_start(logger, self.name, config.model_dump())

        start_time = time.perf_counter()
        if raster.has_features:
            field, nearest_x, nearest_y, workers = self._transform(raster)
        else:
            logger.debug("Raster has no feature pixels; every cell is unreached")
            field, nearest_x, nearest_y, workers = self._unreached(raster)

        if not config.return_squared:
            np.sqrt(field, out=field)
        execution_time = time.perf_counter() - start_time

        log_transform_completion(
            logger,
            self.name,
            raster.width,
            raster.height,
            execution_time,
            {"features": raster.feature_count, "workers": workers},
        )

        return TransformResult(
            distances=field.reshape(-1),
            width=raster.width,
            height=raster.height,
            method="exact",
            squared=config.return_squared,
            nearest_x=None if nearest_x is None else nearest_x.reshape(-1),
            nearest_y=None if nearest_y is None else nearest_y.reshape(-1),
            execution_time=execution_time,
            metadata={"parallel": config.parallel, "workers": workers, "feature_count": raster.feature_count},
        )

    def _unreached(self, raster: Raster):
        field = np.full(raster.shape, UNREACHED, dtype=np.float64)
        if not self.config.return_nearest:
            return field, None, None, 0
        missing = np.full(raster.shape, -1, dtype=np.int64)
        return field, missing, missing.copy(), 0

    def _transform(self, raster: Raster):
        config = self.config
        mask = raster.mask
        height, width = raster.shape

        col_sq = np.empty((height, width), dtype=np.float64)
        field = np.empty((height, width), dtype=np.float64)
        col_row = nearest_x = nearest_y = None
        if config.return_nearest:
            col_row = np.empty((height, width), dtype=np.int64)
            nearest_x = np.empty((height, width), dtype=np.int64)
            nearest_y = np.empty((height, width), dtype=np.int64)

        row_blocks = _blocks(height, config.block_size)

        def row_unit(span: tuple[int, int]) -> None:
            _row_pass(col_sq, col_row, field, nearest_x, nearest_y, span[0], span[1], config.max_block_elements)

        if not config.parallel:
            with LoggedOperation(logger, "column pass"):
                _column_pass(mask, col_sq, col_row, 0, width)
            with LoggedOperation(logger, f"row pass ({len(row_blocks)} blocks)"):
                for span in row_blocks:
                    row_unit(span)
            return field, nearest_x, nearest_y, 1

        workers = config.worker_count
        column_spans = _partition(width, workers)

        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="exact-edt") as executor:
            with LoggedOperation(logger, f"column pass ({len(column_spans)} units, {workers} workers)"):
                futures = [executor.submit(_column_pass, mask, col_sq, col_row, lo, hi) for lo, hi in column_spans]
                # Barrier: Pass 2 reads every column
                _join(futures)
            with LoggedOperation(logger, f"row pass ({len(row_blocks)} units, {workers} workers)"):
                _join([executor.submit(row_unit, span) for span in row_blocks])

        return field, nearest_x, nearest_y, workers


def _join(futures) -> None:
    """Wait for every future, then re-raise the first failure."""
    wait(futures)
    for future in futures:
        future.result()


def compute_exact(
    samples: Sequence[Any] | ArrayLike,
    width: int,
    height: int,
    parallel: bool = False,
    invert: bool = False,
    max_workers: int | None = None,
) -> NDArray[np.float64]:
    """
    Exact Euclidean distance transform of a flat row-major raster.

    Args:
        samples: width*height bool-like samples; non-zero marks a feature pixel
        width: Raster width (>= 1)
        height: Raster height (>= 1)
        parallel: Spread both passes over a thread pool (bit-identical output)
        invert: Treat zero samples as features instead
        max_workers: Pool size in parallel mode (default: CPU count)

    Returns:
        Flat float64 array of length width*height. Feature pixels are 0;
        every cell is ``inf`` when the raster has no feature pixel.

    Raises:
        ShapeMismatchError: len(samples) != width * height
        EmptyDimensionError: width or height is zero
    """
    engine = ExactEDT(parallel=parallel, invert=invert, max_workers=max_workers)
    return engine.solve(samples, width, height).distances


def compute_exact_squared(
    samples: Sequence[Any] | ArrayLike,
    width: int,
    height: int,
    parallel: bool = False,
    invert: bool = False,
    max_workers: int | None = None,
) -> NDArray[np.float64]:
    """Squared exact distance transform; same contract as :func:`compute_exact` without the square root."""
    engine = ExactEDT(parallel=parallel, invert=invert, max_workers=max_workers, return_squared=True)
    return engine.solve(samples, width, height).distances


def compute_nearest_feature(
    samples: Sequence[Any] | ArrayLike,
    width: int,
    height: int,
    parallel: bool = False,
    invert: bool = False,
    max_workers: int | None = None,
) -> tuple[NDArray[np.float64], NDArray[np.int64], NDArray[np.int64]]:
    """
    Exact distance transform plus the feature transform.

    Returns:
        ``(distances, nearest_x, nearest_y)``; the coordinate arrays hold the
        position of the nearest feature pixel for every cell, or -1 where no
        feature pixel exists.
    """
    engine = ExactEDT(parallel=parallel, invert=invert, max_workers=max_workers, return_nearest=True)
    result = engine.solve(samples, width, height)
    return result.distances, result.nearest_x, result.nearest_y
