"""
Logging utilities for raster_edt.

Usage:
    >>> from raster_edt.utils.logging import get_logger, configure_logging
    >>> logger = get_logger(__name__)
    >>> configure_logging(level="DEBUG")
    >>> logger.debug("Starting transform...")
"""

from __future__ import annotations

from .logger import (
    EDTFormatter,
    EDTLogger,
    LoggedOperation,
    configure_logging,
    get_logger,
    log_transform_completion,
    log_transform_start,
)

__all__ = [
    "EDTFormatter",
    "EDTLogger",
    "LoggedOperation",
    "configure_logging",
    "get_logger",
    "log_transform_completion",
    "log_transform_start",
]
