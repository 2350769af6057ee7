"""
Exception classes for raster_edt with helpful error messages and user guidance.

All failures surfaced by the transform engines are deterministic: either the
input raster is malformed (caught before any computation starts) or the
caller asked the Fast Marching engine to stop through its progress hook.
Nothing here is retried internally.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    import numpy as np
    from numpy.typing import NDArray


class RasterTransformError(Exception):
    """
    Base exception for distance-transform errors with context and suggestions.

    The formatted message carries:
    - Clear error description
    - Engine that raised it
    - Suggested action for resolution
    - Optional diagnostic data
    """

    def __init__(
        self,
        message: str,
        engine_name: str | None = None,
        suggested_action: str | None = None,
        error_code: str | None = None,
        diagnostic_data: dict[str, Any] | None = None,
    ):
        self.engine_name = engine_name or "raster_edt"
        self.suggested_action = suggested_action
        self.error_code = error_code
        self.diagnostic_data = diagnostic_data or {}

        full_message = f"[{self.engine_name}] {message}"

        if self.suggested_action:
            full_message += f"\nSuggestion: {self.suggested_action}"

        if self.error_code:
            full_message += f"\nError Code: {self.error_code}"

        if self.diagnostic_data:
            full_message += "\nDiagnostic Information:"
            for key, value in self.diagnostic_data.items():
                full_message += f"\n   - {key}: {value}"

        super().__init__(full_message)


class ShapeMismatchError(RasterTransformError, ValueError):
    """
    Exception raised when the samples do not describe a width x height raster.

    Either the flat buffer holds the wrong number of values, or a 2D array
    was passed whose shape is not (height, width).
    """

    def __init__(
        self,
        sample_count: int,
        width: int,
        height: int,
        engine_name: str | None = None,
        sample_shape: tuple[int, ...] | None = None,
    ):
        self.sample_count = sample_count
        self.width = width
        self.height = height
        self.sample_shape = sample_shape
        expected = width * height

        diagnostic_data = {
            "sample_count": sample_count,
            "width": width,
            "height": height,
            "expected_count": expected,
            "difference": sample_count - expected,
        }

        if sample_shape is not None:
            diagnostic_data["sample_shape"] = sample_shape
            message = f"Sample array has shape {sample_shape}, expected (height, width) = ({height}, {width})"
            suggested_action = "Pass a flat buffer, or a 2D array indexed [y, x]; use from_array to take its shape"
        else:
            message = f"Sample buffer holds {sample_count} values, expected {width}x{height}={expected}"
            suggested_action = _generate_shape_suggestions(sample_count, width, height)

        super().__init__(
            message=message,
            engine_name=engine_name,
            suggested_action=suggested_action,
            error_code="SHAPE_MISMATCH",
            diagnostic_data=diagnostic_data,
        )


class EmptyDimensionError(RasterTransformError, ValueError):
    """Exception raised when width or height is zero (or otherwise not a positive size)."""

    def __init__(self, width: Any, height: Any, engine_name: str | None = None):
        self.width = width
        self.height = height

        bad = [name for name, value in (("width", width), ("height", height)) if not _is_positive_int(value)]

        super().__init__(
            message=f"Raster dimensions must be positive integers, got width={width!r}, height={height!r}",
            engine_name=engine_name,
            suggested_action=f"Provide a positive integer for {' and '.join(bad) or 'both dimensions'}",
            error_code="EMPTY_DIMENSION",
            diagnostic_data={"invalid_dimensions": ", ".join(bad)},
        )


class CallbackAbortedError(RasterTransformError):
    """
    Exception raised when a Fast Marching progress hook requested an early stop.

    The distance field state at abort time travels with the exception in
    ``partial_field``. It is a copy flagged by ``partial = True`` and must not
    be treated as a completed transform: pixels not yet frozen hold ``inf``.
    """

    partial = True

    def __init__(
        self,
        partial_field: NDArray[np.float64],
        freeze_count: int,
        stopped_at: tuple[int, int] | None = None,
        engine_name: str | None = None,
    ):
        self.partial_field = partial_field
        self.freeze_count = freeze_count
        self.stopped_at = stopped_at

        diagnostic_data: dict[str, Any] = {"freeze_count": freeze_count}
        if stopped_at is not None:
            diagnostic_data["stopped_at"] = f"x={stopped_at[0]}, y={stopped_at[1]}"

        super().__init__(
            message=f"Progress hook stopped the march after {freeze_count} freeze events",
            engine_name=engine_name,
            suggested_action="Use partial_field only as a preview; rerun without stopping for a complete field",
            error_code="CALLBACK_ABORTED",
            diagnostic_data=diagnostic_data,
        )


class ConfigurationError(RasterTransformError):
    """Exception raised when an engine option or auxiliary input is invalid."""

    def __init__(
        self,
        parameter_name: str,
        provided_value: Any,
        reason: str | None = None,
        engine_name: str | None = None,
    ):
        diagnostic_data = {
            "parameter": parameter_name,
            "provided_value": _short_repr(provided_value),
            "provided_type": type(provided_value).__name__,
        }
        if reason:
            diagnostic_data["reason"] = reason

        super().__init__(
            message=f"Invalid configuration for parameter '{parameter_name}'",
            engine_name=engine_name,
            suggested_action=f"Check {parameter_name} value and try again",
            error_code="INVALID_CONFIGURATION",
            diagnostic_data=diagnostic_data,
        )


# Helper functions for generating specific suggestions


def _is_positive_int(value: Any) -> bool:
    try:
        return int(value) == value and int(value) > 0
    except (TypeError, ValueError):
        return False


def _short_repr(value: Any, limit: int = 60) -> str:
    text = repr(value)
    return text if len(text) <= limit else text[: limit - 3] + "..."


def _generate_shape_suggestions(sample_count: int, width: int, height: int) -> str:
    """Suggest the most likely fix for a sample buffer of the wrong length."""

    if sample_count == 0:
        return "The sample buffer is empty; pass the flattened raster"

    if height and sample_count % height == 0:
        return f"Buffer fits width={sample_count // height} for height={height}; check the width argument"

    if width and sample_count % width == 0:
        return f"Buffer fits height={sample_count // width} for width={width}; check the height argument"

    return f"Flatten the raster row-major into exactly {width * height} samples"


# Convenience functions for common validation scenarios


def validate_dimensions(width: Any, height: Any, engine_name: str | None = None) -> tuple[int, int]:
    """Validate raster dimensions and return them as ints."""
    if isinstance(width, bool) or isinstance(height, bool):
        raise EmptyDimensionError(width, height, engine_name=engine_name)
    if not (_is_positive_int(width) and _is_positive_int(height)):
        raise EmptyDimensionError(width, height, engine_name=engine_name)
    return int(width), int(height)


def validate_sample_count(sample_count: int, width: int, height: int, engine_name: str | None = None):
    """Validate that a sample buffer holds exactly width*height values."""
    if sample_count != width * height:
        raise ShapeMismatchError(sample_count, width, height, engine_name=engine_name)
