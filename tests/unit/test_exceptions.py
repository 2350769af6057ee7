#!/usr/bin/env python3
"""
Unit tests for raster_edt/utils/exceptions.py

Tests the exception hierarchy:
- RasterTransformError (base exception and message formatting)
- ShapeMismatchError / EmptyDimensionError (input validation)
- CallbackAbortedError (cooperative abort with partial field)
- ConfigurationError (invalid engine options)
- Validation helpers
"""

import pytest

import numpy as np

from raster_edt.utils.exceptions import (
    CallbackAbortedError,
    ConfigurationError,
    EmptyDimensionError,
    RasterTransformError,
    ShapeMismatchError,
    validate_dimensions,
    validate_sample_count,
)

# =============================================================================
# Test RasterTransformError (Base Exception)
# =============================================================================


@pytest.mark.unit
def test_base_error_message_parts():
    error = RasterTransformError(
        "Something failed",
        engine_name="ExactEDT",
        suggested_action="Try again",
        error_code="ERR001",
        diagnostic_data={"pixels": 12, "stage": "row pass"},
    )

    text = str(error)
    assert text.startswith("[ExactEDT] Something failed")
    assert "Suggestion: Try again" in text
    assert "Error Code: ERR001" in text
    assert "Diagnostic Information" in text
    assert "pixels: 12" in text
    assert "stage: row pass" in text


@pytest.mark.unit
def test_base_error_defaults():
    error = RasterTransformError("plain")

    assert error.engine_name == "raster_edt"
    assert error.diagnostic_data == {}
    assert "Suggestion" not in str(error)
    assert "Error Code" not in str(error)


# =============================================================================
# Input validation errors
# =============================================================================


@pytest.mark.unit
def test_shape_mismatch_error():
    error = ShapeMismatchError(10, 3, 4, engine_name="FastMarching")

    assert isinstance(error, RasterTransformError)
    assert isinstance(error, ValueError)
    assert error.error_code == "SHAPE_MISMATCH"
    assert error.diagnostic_data["expected_count"] == 12
    assert error.diagnostic_data["difference"] == -2
    assert "[FastMarching]" in str(error)


@pytest.mark.unit
@pytest.mark.parametrize(
    "count,width,height,fragment",
    [
        (0, 3, 3, "empty"),
        (12, 3, 3, "width=4"),
        (15, 5, 4, "height=3"),
        (7, 3, 3, "exactly 9"),
    ],
)
def test_shape_mismatch_suggestions(count, width, height, fragment):
    assert fragment in ShapeMismatchError(count, width, height).suggested_action


@pytest.mark.unit
def test_shape_mismatch_for_2d_samples():
    """A wrongly shaped array is reported by shape even when the count matches."""
    error = ShapeMismatchError(12, 3, 4, sample_shape=(3, 4))

    assert error.diagnostic_data["difference"] == 0
    assert "shape (3, 4)" in str(error)
    assert "from_array" in error.suggested_action


@pytest.mark.unit
def test_empty_dimension_error_names_bad_dimension():
    error = EmptyDimensionError(0, 5)

    assert isinstance(error, ValueError)
    assert error.error_code == "EMPTY_DIMENSION"
    assert "width" in error.suggested_action
    assert "height" not in error.suggested_action


@pytest.mark.unit
@pytest.mark.parametrize("width,height", [(0, 1), (1, 0), (-3, 2), (2.5, 2), ("4", 4), (None, 3), (True, 3)])
def test_validate_dimensions_rejects(width, height):
    with pytest.raises(EmptyDimensionError):
        validate_dimensions(width, height)


@pytest.mark.unit
def test_validate_dimensions_normalizes():
    assert validate_dimensions(np.int64(4), 3.0) == (4, 3)


@pytest.mark.unit
def test_validate_sample_count():
    validate_sample_count(6, 3, 2)
    with pytest.raises(ShapeMismatchError):
        validate_sample_count(5, 3, 2, engine_name="ExactEDT")


# =============================================================================
# Abort and configuration errors
# =============================================================================


@pytest.mark.unit
def test_callback_aborted_error_carries_partial_field():
    partial = np.array([0.0, 1.0, np.inf])
    error = CallbackAbortedError(partial, freeze_count=1, stopped_at=(1, 0), engine_name="FastMarching")

    assert error.partial is True
    assert error.partial_field is partial
    assert error.freeze_count == 1
    assert error.stopped_at == (1, 0)
    assert error.error_code == "CALLBACK_ABORTED"
    assert "x=1, y=0" in str(error)
    assert not isinstance(error, ValueError)


@pytest.mark.unit
def test_configuration_error():
    error = ConfigurationError("cost", [1.0] * 100, reason="wrong size", engine_name="FastMarching")

    assert error.error_code == "INVALID_CONFIGURATION"
    assert error.diagnostic_data["parameter"] == "cost"
    assert error.diagnostic_data["provided_type"] == "list"
    assert error.diagnostic_data["reason"] == "wrong size"
    # long values are shortened in the message
    assert len(error.diagnostic_data["provided_value"]) <= 60


@pytest.mark.unit
def test_errors_catchable_as_base():
    for error in (
        ShapeMismatchError(1, 2, 2),
        EmptyDimensionError(0, 0),
        CallbackAbortedError(np.zeros(1), 0),
        ConfigurationError("x", 1),
    ):
        with pytest.raises(RasterTransformError):
            raise error
