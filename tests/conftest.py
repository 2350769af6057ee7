"""
Pytest configuration and shared fixtures for the raster_edt test suite.

This module provides common fixtures, markers and brute-force reference
implementations used across the suite.
"""

import math

import pytest

import numpy as np

from raster_edt.core.patterns import random_features

# =============================================================================
# Test Configuration
# =============================================================================


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated)")
    config.addinivalue_line("markers", "integration: Integration tests (slower, cross-component)")
    config.addinivalue_line("markers", "mathematical: Mathematical property validation tests")
    config.addinivalue_line("markers", "slow: Slow tests (may take >10 seconds)")


def pytest_collection_modifyitems(config, items):
    """Add markers based on test paths and names."""
    for item in items:
        test_path = str(item.fspath)

        if "/unit/" in test_path:
            item.add_marker(pytest.mark.unit)
        elif "/integration/" in test_path:
            item.add_marker(pytest.mark.integration)
        elif "/mathematical/" in test_path:
            item.add_marker(pytest.mark.mathematical)

        if "large" in item.name or "slow" in item.name:
            item.add_marker(pytest.mark.slow)


# =============================================================================
# Reference implementations
# =============================================================================


def brute_force_edt(mask: np.ndarray) -> np.ndarray:
    """O(n^4) nearest-feature scan returning a flat float64 field."""
    height, width = mask.shape
    features = [(x, y) for y in range(height) for x in range(width) if mask[y, x]]
    out = np.full(width * height, np.inf)
    for y in range(height):
        for x in range(width):
            if features:
                best = min((x - fx) ** 2 + (y - fy) ** 2 for fx, fy in features)
                out[y * width + x] = math.sqrt(best)
    return out


def point_distance_field(width: int, height: int, fx: int, fy: int) -> np.ndarray:
    """Exact distance map from a single point, flat row-major."""
    return np.array([math.sqrt((x - fx) ** 2 + (y - fy) ** 2) for y in range(height) for x in range(width)])


# =============================================================================
# Raster Fixtures
# =============================================================================


@pytest.fixture
def blob_mask():
    """Small blob whose background (zero pixels) is the feature set when inverted."""
    rows = [
        "0000000000",
        "0001111000",
        "0011111110",
        "0011111100",
        "0001111000",
    ]
    return np.array([[c == "1" for c in row] for row in rows])


@pytest.fixture
def random_masks():
    """Twenty reproducible 8x8 rasters with about 20% feature pixels."""
    return [random_features(8, 8, density=0.2, seed=seed) for seed in range(20)]


@pytest.fixture
def rectangular_mask():
    """Non-square raster with sparse features, for partitioning edge cases."""
    return random_features(37, 23, density=0.03, seed=7)


@pytest.fixture
def brute_force():
    return brute_force_edt


@pytest.fixture
def point_field():
    return point_distance_field
