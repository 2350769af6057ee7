"""
Error statistics between two distance fields.

Used to report how far the Fast Marching approximation drifts from the
exact transform.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from numpy.typing import ArrayLike


def compare_fields(reference: ArrayLike, approximation: ArrayLike) -> dict[str, float | int]:
    """
    Compare an approximate field against a reference field.

    Pixels where both fields are zero or both are ``inf`` agree exactly and
    are left out of the relative error. A pixel finite in one field and
    infinite in the other counts in ``mismatched_reach``.

    Returns:
        Dictionary with max_abs_error, max_rel_error, mean_rel_error,
        compared (pixel count) and mismatched_reach
    """
    ref = np.asarray(reference, dtype=np.float64).reshape(-1)
    approx = np.asarray(approximation, dtype=np.float64).reshape(-1)
    if ref.shape != approx.shape:
        raise ValueError(f"Field sizes differ: {ref.size} vs {approx.size}")

    ref_finite = np.isfinite(ref)
    approx_finite = np.isfinite(approx)
    mismatched = int(np.count_nonzero(ref_finite != approx_finite))

    both = ref_finite & approx_finite
    abs_error = np.abs(ref[both] - approx[both])
    scale = np.maximum(np.abs(ref[both]), np.abs(approx[both]))
    nonzero = scale > 0
    rel_error = abs_error[nonzero] / scale[nonzero]

    return {
        "max_abs_error": float(abs_error.max()) if abs_error.size else 0.0,
        "max_rel_error": float(rel_error.max()) if rel_error.size else 0.0,
        "mean_rel_error": float(rel_error.mean()) if rel_error.size else 0.0,
        "compared": int(rel_error.size),
        "mismatched_reach": mismatched,
    }
