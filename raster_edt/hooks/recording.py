"""
Ready-made hooks for observing or bounding a Fast Marching run.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from .base import STOP, FastMarchingHooks

if TYPE_CHECKING:
    from numpy.typing import NDArray

    from raster_edt.core.raster import Raster

    from .base import FreezeEvent


class FrameRecorder(FastMarchingHooks):
    """
    Keep a copy of the partial field every ``every`` freeze events.

    Each frame is ``(step, field_2d, band)`` where ``band`` lists the
    narrow-band pixels at that moment (empty unless ``record_band``).
    """

    def __init__(self, every: int, record_band: bool = False, max_frames: int | None = None):
        if every < 1:
            raise ValueError(f"every must be >= 1, got {every}")
        self.every = every
        self.record_band = record_band
        self.max_frames = max_frames
        self.frames: list[tuple[int, NDArray[np.float64], list[tuple[int, int]]]] = []

    def on_march_start(self, raster: Raster) -> None:
        self.frames.clear()

    def on_freeze(self, event: FreezeEvent) -> None:
        if event.step % self.every:
            return None
        if self.max_frames is not None and len(self.frames) >= self.max_frames:
            return None
        band = list(event.trial_pixels()) if self.record_band else []
        self.frames.append((event.step, np.array(event.as_image()), band))
        return None


class StepLimit(FastMarchingHooks):
    """Stop the march after ``max_steps`` freeze events."""

    def __init__(self, max_steps: int):
        if max_steps < 1:
            raise ValueError(f"max_steps must be >= 1, got {max_steps}")
        self.max_steps = max_steps

    def on_freeze(self, event: FreezeEvent) -> str | None:
        return STOP if event.step >= self.max_steps else None


class DistanceLimit(FastMarchingHooks):
    """Stop once the wavefront freezes a pixel farther than ``max_distance``."""

    def __init__(self, max_distance: float):
        self.max_distance = max_distance

    def on_freeze(self, event: FreezeEvent) -> str | None:
        return STOP if event.value > self.max_distance else None
