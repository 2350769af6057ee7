"""
Progress hooks for the Fast Marching engine.

The engine reports every freeze event to a hook. A hook can observe the
partial distance field and the narrow band, and can stop the march
cooperatively by returning ``"stop"`` (or ``False``) or by raising
:class:`StopMarching`. The engine only looks at the answer right after a
freeze event, so a hook never sees a half-updated state.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    import numpy as np
    from numpy.typing import NDArray

    from raster_edt.core.raster import Raster
    from raster_edt.utils.result import TransformResult

CONTINUE = "continue"
STOP = "stop"


class StopMarching(Exception):
    """Raise from a hook to stop the march; the engine turns it into CallbackAbortedError."""


@dataclass(frozen=True)
class FreezeEvent:
    """
    One pixel leaving the narrow band with its final distance.

    Attributes:
        x: Column of the frozen pixel
        y: Row of the frozen pixel
        value: Its final distance
        step: 1-based count of freeze events so far
        snapshot: Read-only flat view of the field; frozen pixels hold their
            distance, all others ``inf``. The view is live and only
            meaningful while the hook runs; copy it to keep it.
        width: Raster width
        height: Raster height
        nearest: Coordinates of the feature pixel that seeded this pixel, when tracked
    """

    x: int
    y: int
    value: float
    step: int
    snapshot: NDArray[np.float64]
    width: int
    height: int
    nearest: tuple[int, int] | None = None
    _band: Callable[[], Iterator[tuple[int, int]]] | None = field(default=None, repr=False, compare=False)

    def trial_pixels(self) -> Iterator[tuple[int, int]]:
        """Iterate (x, y) of the pixels currently in the narrow band (the wavefront)."""
        if self._band is None:
            return iter(())
        return self._band()

    def as_image(self) -> NDArray[np.float64]:
        """Read-only (height, width) view of the snapshot."""
        return self.snapshot.reshape(self.height, self.width)


class FastMarchingHooks:
    """
    Base class for Fast Marching hooks.

    Override any method; all are optional.

    Example:
        class PrintHook(FastMarchingHooks):
            def on_freeze(self, event):
                print(event.x, event.y, event.value)
                return None

        FastMarching().solve(samples, width, height, progress=PrintHook())
    """

    def on_march_start(self, raster: Raster) -> None:
        """Called once after feature pixels are frozen and the band is seeded."""

    def on_freeze(self, event: FreezeEvent) -> str | bool | None:
        """
        Called after each freeze event.

        Returns:
            None, True or "continue" to keep marching; False or "stop" to abort
        """
        return None

    def on_march_end(self, result: TransformResult) -> None:
        """Called once with the completed result (not called after an abort)."""


class CallbackHooks(FastMarchingHooks):
    """Adapter for a plain ``callback(x, y, frozen_value, snapshot)`` function."""

    def __init__(self, callback: Callable[[int, int, float, Any], Any]):
        if not callable(callback):
            raise TypeError(f"progress callback must be callable, got {type(callback).__name__}")
        self.callback = callback

    def on_freeze(self, event: FreezeEvent) -> str | bool | None:
        return self.callback(event.x, event.y, event.value, event.snapshot)


class CompositeHooks(FastMarchingHooks):
    """Run several hooks in order; the march stops if any of them asks to."""

    def __init__(self, *hooks: FastMarchingHooks):
        self.hooks = [as_hooks(hook) for hook in hooks if hook is not None]

    def on_march_start(self, raster: Raster) -> None:
        for hook in self.hooks:
            hook.on_march_start(raster)

    def on_freeze(self, event: FreezeEvent) -> str | bool | None:
        signal = None
        for hook in self.hooks:
            if is_stop_signal(hook.on_freeze(event)):
                signal = STOP
        return signal

    def on_march_end(self, result: TransformResult) -> None:
        for hook in self.hooks:
            hook.on_march_end(result)


def as_hooks(progress: FastMarchingHooks | Callable[..., Any] | None) -> FastMarchingHooks | None:
    """Normalize a progress argument into a hooks object (or None)."""
    if progress is None or isinstance(progress, FastMarchingHooks):
        return progress
    return CallbackHooks(progress)


def is_stop_signal(signal: Any) -> bool:
    """Interpret a hook's return value."""
    if signal is None or signal is True:
        return False
    if signal is False:
        return True
    if isinstance(signal, str):
        lowered = signal.lower()
        if lowered == STOP:
            return True
        if lowered == CONTINUE:
            return False
    raise ValueError(f"Unrecognized hook control value {signal!r}; expected None, bool, 'continue' or 'stop'")
