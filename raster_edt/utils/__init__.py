"""Shared utilities: error taxonomy, logging and result containers."""

from __future__ import annotations

from .exceptions import (
    CallbackAbortedError,
    ConfigurationError,
    EmptyDimensionError,
    RasterTransformError,
    ShapeMismatchError,
    validate_dimensions,
    validate_sample_count,
)
from .logging import configure_logging, get_logger
from .result import TransformResult

__all__ = [
    "CallbackAbortedError",
    "ConfigurationError",
    "EmptyDimensionError",
    "RasterTransformError",
    "ShapeMismatchError",
    "TransformResult",
    "configure_logging",
    "get_logger",
    "validate_dimensions",
    "validate_sample_count",
]
