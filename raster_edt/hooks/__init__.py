"""Progress hooks for the Fast Marching engine."""

from .base import (
    CONTINUE,
    STOP,
    CallbackHooks,
    CompositeHooks,
    FastMarchingHooks,
    FreezeEvent,
    StopMarching,
    as_hooks,
    is_stop_signal,
)
from .recording import DistanceLimit, FrameRecorder, StepLimit

__all__ = [
    "CONTINUE",
    "STOP",
    "CallbackHooks",
    "CompositeHooks",
    "DistanceLimit",
    "FastMarchingHooks",
    "FreezeEvent",
    "FrameRecorder",
    "StepLimit",
    "StopMarching",
    "as_hooks",
    "is_stop_signal",
]
