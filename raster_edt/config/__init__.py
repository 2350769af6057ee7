"""Pydantic configuration for the distance-transform engines."""

from .edt_configs import ExactEDTConfig, FastMarchingConfig, resolve_config

__all__ = ["ExactEDTConfig", "FastMarchingConfig", "resolve_config"]
