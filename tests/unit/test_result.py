#!/usr/bin/env python3
"""
Unit tests for raster_edt/utils/result.py and raster_edt/utils/comparison.py

Tests the TransformResult container and the field comparison statistics.
"""

import math

import pytest

import numpy as np

from raster_edt.alg import ExactEDT
from raster_edt.utils.comparison import compare_fields
from raster_edt.utils.result import TransformResult

# =============================================================================
# TransformResult
# =============================================================================


@pytest.fixture
def tracked_result():
    samples = [0, 0, 0, 0, 0, 0, 1, 0, 0]  # feature at (0, 2)
    return ExactEDT(return_nearest=True).solve(samples, 3, 3)


@pytest.mark.unit
def test_len_and_image(tracked_result):
    assert len(tracked_result) == 9
    image = tracked_result.as_image()
    assert image.shape == (3, 3)
    assert image[0, 2] == math.sqrt(8)


@pytest.mark.unit
def test_tuple_unpacking(tracked_result):
    distances, nearest_x, nearest_y = tracked_result
    assert distances is tracked_result.distances
    assert nearest_x.tolist() == [0] * 9
    assert nearest_y.tolist() == [2] * 9


@pytest.mark.unit
def test_nearest_feature_lookup(tracked_result):
    assert tracked_result.has_nearest
    assert tracked_result.nearest_feature(2, 0) == (0, 2)


@pytest.mark.unit
def test_nearest_feature_requires_tracking():
    result = ExactEDT().solve([1, 0], 2, 1)
    with pytest.raises(ValueError, match="nearest-feature tracking"):
        result.nearest_feature(0, 0)


@pytest.mark.unit
def test_nearest_feature_none_when_unreached():
    result = ExactEDT(return_nearest=True).solve([0, 0], 2, 1)
    assert result.nearest_feature(1, 0) is None
    assert not result.reached.any()


@pytest.mark.unit
def test_summary():
    result = TransformResult(
        distances=np.array([0.0, 1.0, 2.0, np.inf]), width=2, height=2, method="fmm", execution_time=0.5
    )
    summary = result.summary()

    assert summary["reached"] == 3
    assert summary["unreached"] == 1
    assert summary["max_distance"] == 2.0
    assert summary["mean_distance"] == 1.0
    assert summary["shape"] == (2, 2)


@pytest.mark.unit
def test_summary_without_reached_pixels():
    result = TransformResult(distances=np.full(4, np.inf), width=4, height=1, method="exact")
    assert math.isinf(result.summary()["max_distance"])


# =============================================================================
# compare_fields
# =============================================================================


@pytest.mark.unit
def test_identical_fields():
    field = np.array([0.0, 1.0, math.sqrt(2), np.inf])
    stats = compare_fields(field, field.copy())

    assert stats["max_abs_error"] == 0.0
    assert stats["max_rel_error"] == 0.0
    assert stats["mismatched_reach"] == 0
    assert stats["compared"] == 2


@pytest.mark.unit
def test_relative_error():
    stats = compare_fields([0.0, 2.0, 4.0], [0.0, 2.5, 4.0])

    assert stats["max_abs_error"] == pytest.approx(0.5)
    assert stats["max_rel_error"] == pytest.approx(0.2)
    assert stats["mean_rel_error"] == pytest.approx(0.1)


@pytest.mark.unit
def test_mismatched_reach_counted():
    stats = compare_fields([np.inf, 1.0], [3.0, 1.0])
    assert stats["mismatched_reach"] == 1
    assert stats["compared"] == 1


@pytest.mark.unit
def test_size_mismatch():
    with pytest.raises(ValueError, match="Field sizes differ"):
        compare_fields(np.zeros(4), np.zeros(5))
