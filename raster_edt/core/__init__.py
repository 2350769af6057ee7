"""Raster data model."""

from .raster import UNREACHED, Raster, as_raster

__all__ = ["UNREACHED", "Raster", "as_raster"]
