"""
Engine configuration classes.

This module provides configuration for both distance-transform engines:
- Exact EDT (two-pass squared-distance minimization)
- Fast Marching (narrow-band wavefront expansion)
"""

from __future__ import annotations

import os

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ExactEDTConfig(BaseModel):
    """
    Exact Euclidean distance transform configuration.

    Attributes
    ----------
    parallel : bool
        Distribute Pass 1 (columns) and Pass 2 (rows) over a thread pool
        (default: False). Output is bit-identical either way.
    max_workers : int | None
        Fixed worker pool size in parallel mode (default: None -> CPU count)
    block_size : int
        Maximum rows handled by one Pass 2 work unit (default: 64)
    max_block_elements : int
        Upper bound on the temporary (rows x width x width) candidate array
        evaluated at once in Pass 2 (default: 2**22)
    return_squared : bool
        Return squared distances and skip the final square root (default: False)
    return_nearest : bool
        Also compute the coordinates of the nearest feature pixel (default: False)
    invert : bool
        Treat zero samples as features (default: False)
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    parallel: bool = False
    max_workers: int | None = Field(default=None, ge=1)
    block_size: int = Field(default=64, ge=1)
    max_block_elements: int = Field(default=2**22, ge=1)
    return_squared: bool = False
    return_nearest: bool = False
    invert: bool = False

    @property
    def worker_count(self) -> int:
        """Resolved pool size used in parallel mode."""
        return self.max_workers or os.cpu_count() or 1


class FastMarchingConfig(BaseModel):
    """
    Fast Marching configuration.

    Attributes
    ----------
    invert : bool
        Treat zero samples as features (default: False)
    return_nearest : bool
        Track which feature pixel seeded each pixel (default: False)
    snapshot_band : bool
        Let freeze events enumerate the current narrow band (default: True)
    one_sided_at_features : bool
        Use the one-sided update for pixels touching a feature pixel, treating
        feature pixels as point sources (default: False, quadratic everywhere)
    log_every : int
        Emit a DEBUG progress line every N freeze events, 0 disables (default: 0)
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    invert: bool = False
    return_nearest: bool = False
    snapshot_band: bool = True
    one_sided_at_features: bool = False
    log_every: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def validate_logging_interval(self) -> FastMarchingConfig:
        """Keep progress logging from flooding output on tiny rasters."""
        if 0 < self.log_every < 16:
            raise ValueError("log_every must be 0 (disabled) or at least 16 freeze events")
        return self


def resolve_config(config_cls, config=None, **overrides):
    """
    Merge an optional config instance with keyword overrides.

    ``None`` overrides are ignored so that function signatures can default
    their keywords to None and defer to the config.
    """
    overrides = {key: value for key, value in overrides.items() if value is not None}
    if config is None:
        return config_cls(**overrides)
    if not isinstance(config, config_cls):
        raise TypeError(f"Expected {config_cls.__name__}, got {type(config).__name__}")
    if not overrides:
        return config
    return config_cls(**{**config.model_dump(), **overrides})
