"""Distance-transform engines."""

from .exact_edt import ExactEDT, compute_exact, compute_exact_squared, compute_nearest_feature
from .fast_marching import FastMarching, compute_fmm, compute_fmm_nearest

__all__ = [
    "ExactEDT",
    "FastMarching",
    "compute_exact",
    "compute_exact_squared",
    "compute_fmm",
    "compute_fmm_nearest",
    "compute_nearest_feature",
]
