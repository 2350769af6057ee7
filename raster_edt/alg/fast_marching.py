"""
Fast Marching approximation of the Euclidean distance transform.

The distance field is the viscosity solution of the Eikonal equation

    |grad T| = c(x, y),   T = 0 on feature pixels

with unit cost ``c = 1`` unless a cost map is given. Pixels move through
three states:

- FAR: no estimate yet
- TRIAL: tentative distance, held in the narrow band (a binary heap)
- FROZEN: final distance, never revisited

Feature pixels start FROZEN at 0 and seed their 4-neighbours into the band.
The engine then repeatedly freezes the TRIAL pixel with the smallest
tentative distance (ties go to the earliest heap insertion) and re-estimates
its non-frozen 4-neighbours with the first-order upwind solve

    (T - Tx)^2 + (T - Ty)^2 = c^2      if |Tx - Ty| < c
    T = min(Tx, Ty) + c                otherwise

where Tx and Ty are the smallest FROZEN values along each axis. With
``one_sided_at_features`` enabled, pixels touching a feature pixel take the
one-sided value instead, so a pixel between two diagonal feature pixels
gets c rather than c/sqrt(2).

The result is an approximation. On small random rasters the relative error
against the exact transform stays below 1 - 1/sqrt(2) (about 29%) per pixel
and a few percent on average. The worst pixels are underestimated between
two diagonal feature pixels or overestimated next to an isolated one.
"""

from __future__ import annotations

import heapq
import itertools
import math
import time
from typing import TYPE_CHECKING, Any

import numpy as np

from raster_edt.config import FastMarchingConfig, resolve_config
from raster_edt.core.raster import UNREACHED, Raster, as_raster
from raster_edt.hooks.base import FreezeEvent, StopMarching, as_hooks, is_stop_signal
from raster_edt.utils.exceptions import CallbackAbortedError, ConfigurationError
from raster_edt.utils.logging import get_logger, log_transform_completion, log_transform_start
from raster_edt.utils.result import TransformResult

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from numpy.typing import ArrayLike, NDArray

    from raster_edt.hooks.base import FastMarchingHooks

logger = get_logger(__name__)

ENGINE_NAME = "FastMarching"

FAR, TRIAL, FROZEN = 0, 1, 2


class FastMarching:
    """
    Fast Marching engine.

    Single-threaded by construction: every step depends on the globally
    smallest tentative distance. Each :meth:`solve` call owns its narrow band
    and buffers.

    Example:
        >>> engine = FastMarching(return_nearest=True)
        >>> result = engine.solve(samples, width, height, progress=my_hook)
    """

    name = ENGINE_NAME

    def __init__(self, config: FastMarchingConfig | None = None, **overrides: Any):
        self.config = resolve_config(FastMarchingConfig, config, **overrides)

    def solve(
        self,
        samples: Raster | Sequence[Any] | ArrayLike,
        width: int | None = None,
        height: int | None = None,
        progress: FastMarchingHooks | Callable[..., Any] | None = None,
        cost: ArrayLike | None = None,
    ) -> TransformResult:
        """
        Compute the approximate distance field.

        Args:
            samples: Raster, flat row-major buffer (with width/height) or 2D array
            width: Raster width for flat buffers
            height: Raster height for flat buffers
            progress: Hook object or ``callback(x, y, frozen_value, snapshot)``
                called after every freeze event
            cost: Optional per-pixel positive travel cost (flat or 2D)

        Returns:
            TransformResult with flat float64 distances

        Raises:
            EmptyDimensionError: width or height is zero
            ShapeMismatchError: buffer length != width * height
            ConfigurationError: cost map has the wrong size or non-positive values
            CallbackAbortedError: the progress hook asked to stop
        """
        raster = as_raster(samples, width, height, invert=self.config.invert, engine_name=self.name)
        costs = self._validate_cost(cost, raster)
        hooks = as_hooks(progress)
        log_transform_start(logger, self.name, self.config.model_dump())

        start_time = time.perf_counter()
        values, sources, steps = self._march(raster, costs, hooks)
        execution_time = time.perf_counter() - start_time

        log_transform_completion(
            logger,
            self.name,
            raster.width,
            raster.height,
            execution_time,
            {"features": raster.feature_count, "freeze_events": steps},
        )

        nearest_x = nearest_y = None
        if sources is not None:
            src = np.asarray(sources, dtype=np.int64)
            found = src >= 0
            nearest_x = np.where(found, src % raster.width, -1)
            nearest_y = np.where(found, src // raster.width, -1)

        result = TransformResult(
            distances=np.asarray(values, dtype=np.float64),
            width=raster.width,
            height=raster.height,
            method="fmm",
            nearest_x=nearest_x,
            nearest_y=nearest_y,
            execution_time=execution_time,
            metadata={
                "freeze_count": steps,
                "feature_count": raster.feature_count,
                "weighted": costs is not None,
            },
        )
        if hooks is not None:
            hooks.on_march_end(result)
        return result

    def _validate_cost(self, cost: ArrayLike | None, raster: Raster) -> list[float] | None:
        if cost is None:
            return None
        array = np.asarray(cost, dtype=np.float64)
        if array.size != raster.size:
            raise ConfigurationError(
                "cost",
                array.shape,
                reason=f"cost map needs {raster.size} values for a {raster.width}x{raster.height} raster",
                engine_name=self.name,
            )
        flat = array.reshape(-1)
        if not np.all(np.isfinite(flat)) or np.any(flat <= 0):
            raise ConfigurationError(
                "cost", cost, reason="cost values must be finite and strictly positive", engine_name=self.name
            )
        return flat.tolist()

    def _march(
        self,
        raster: Raster,
        costs: list[float] | None,
        hooks: FastMarchingHooks | None,
    ) -> tuple[list[float], list[int] | None, int]:
        width, height = raster.width, raster.height
        size = raster.size
        track = self.config.return_nearest
        log_every = self.config.log_every
        one_sided_at_features = self.config.one_sided_at_features

        is_feature = raster.flat_mask.tolist()
        values = [UNREACHED] * size
        state = [FAR] * size
        sources = [-1] * size if track else None
        band: list[tuple[float, int, int]] = []
        order = itertools.count()

        # Live read-only view handed to hooks
        field = snapshot = None
        if hooks is not None:
            field = np.full(size, UNREACHED, dtype=np.float64)
            snapshot = field.view()
            snapshot.flags.writeable = False

        def estimate(k: int) -> tuple[float, int]:
            """Upwind solve at pixel k from its FROZEN neighbours."""
            x = k % width
            tx = ty = UNREACHED
            sx = sy = -1
            if x > 0 and state[k - 1] == FROZEN:
                tx, sx = values[k - 1], k - 1
            if x + 1 < width and state[k + 1] == FROZEN and values[k + 1] < tx:
                tx, sx = values[k + 1], k + 1
            if k >= width and state[k - width] == FROZEN:
                ty, sy = values[k - width], k - width
            if k + width < size and state[k + width] == FROZEN and values[k + width] < ty:
                ty, sy = values[k + width], k + width

            c = 1.0 if costs is None else costs[k]
            nearer = sx if tx <= ty else sy
            low, high = (tx, ty) if tx <= ty else (ty, tx)
            if high - low >= c or (one_sided_at_features and low == 0.0):
                return low + c, nearer
            return (tx + ty + math.sqrt(2.0 * c * c - (tx - ty) ** 2)) / 2.0, nearer

        def relax(k: int) -> None:
            """Re-estimate the non-frozen 4-neighbours of pixel k."""
            x = k % width
            for n in (
                k - 1 if x > 0 else -1,
                k - width,
                k + 1 if x + 1 < width else -1,
                k + width if k + width < size else -1,
            ):
                if n < 0 or state[n] == FROZEN:
                    continue
                t, nearer = estimate(n)
                if state[n] == FAR or t < values[n]:
                    state[n] = TRIAL
                    values[n] = t
                    if sources is not None:
                        sources[n] = sources[nearer]
                    # Repositioning pushes a fresh entry; the old one goes stale
                    heapq.heappush(band, (t, next(order), n))

        def trial_pixels():
            for t, _, k in band:
                if state[k] == TRIAL and values[k] == t:
                    yield k % width, k // width

        features = [k for k in range(size) if is_feature[k]]
        for k in features:
            values[k] = 0.0
            state[k] = FROZEN
            if sources is not None:
                sources[k] = k
            if field is not None:
                field[k] = 0.0
        for k in features:
            relax(k)

        logger.debug(f"Seeded {len(band)} band pixels from {len(features)} feature pixels")
        if hooks is not None:
            hooks.on_march_start(raster)

        band_view = trial_pixels if self.config.snapshot_band else None
        steps = 0
        while band:
            t, _, k = heapq.heappop(band)
            if state[k] == FROZEN or t != values[k]:
                continue
            state[k] = FROZEN
            steps += 1
            relax(k)

            if log_every and steps % log_every == 0:
                logger.debug(f"Freeze {steps}: band={len(band)}, front distance={t:.4f}")

            if hooks is None:
                continue

            field[k] = t
            x, y = k % width, k // width
            event = FreezeEvent(
                x=x,
                y=y,
                value=t,
                step=steps,
                snapshot=snapshot,
                width=width,
                height=height,
                nearest=None if sources is None else (sources[k] % width, sources[k] // width),
                _band=band_view,
            )
            try:
                stop = is_stop_signal(hooks.on_freeze(event))
            except StopMarching:
                stop = True
            if stop:
                logger.warning(f"{self.name} stopped by progress hook after {steps} freeze events at ({x}, {y})")
                raise CallbackAbortedError(
                    partial_field=field.copy(),
                    freeze_count=steps,
                    stopped_at=(x, y),
                    engine_name=self.name,
                )

        return values, sources, steps


def compute_fmm(
    samples: Sequence[Any] | ArrayLike,
    width: int,
    height: int,
    progress: FastMarchingHooks | Callable[..., Any] | None = None,
    invert: bool = False,
    cost: ArrayLike | None = None,
) -> NDArray[np.float64]:
    """
    Fast Marching distance transform of a flat row-major raster.

    Args:
        samples: width*height bool-like samples; non-zero marks a feature pixel
        width: Raster width (>= 1)
        height: Raster height (>= 1)
        progress: Optional ``callback(x, y, frozen_value, snapshot)`` or hooks
            object; return "stop"/False (or raise StopMarching) to abort
        invert: Treat zero samples as features instead
        cost: Optional per-pixel positive travel cost

    Returns:
        Flat float64 array of length width*height; ``inf`` everywhere when
        the raster has no feature pixel.

    Raises:
        ShapeMismatchError: len(samples) != width * height
        EmptyDimensionError: width or height is zero
        CallbackAbortedError: the progress callback asked to stop
    """
    engine = FastMarching(invert=invert)
    return engine.solve(samples, width, height, progress=progress, cost=cost).distances


def compute_fmm_nearest(
    samples: Sequence[Any] | ArrayLike,
    width: int,
    height: int,
    progress: FastMarchingHooks | Callable[..., Any] | None = None,
    invert: bool = False,
    cost: ArrayLike | None = None,
) -> tuple[NDArray[np.float64], NDArray[np.int64], NDArray[np.int64]]:
    """Fast Marching transform plus the feature pixel each pixel's front came from."""
    engine = FastMarching(invert=invert, return_nearest=True)
    result = engine.solve(samples, width, height, progress=progress, cost=cost)
    return result.distances, result.nearest_x, result.nearest_y
