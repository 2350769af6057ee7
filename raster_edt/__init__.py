from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("raster_edt")  # Matches the name in pyproject.toml
except PackageNotFoundError:
    # package is not installed
    __version__ = "0.0.0-dev"

from .alg import (  # noqa: E402
    ExactEDT,
    FastMarching,
    compute_exact,
    compute_exact_squared,
    compute_fmm,
    compute_fmm_nearest,
    compute_nearest_feature,
)
from .config import ExactEDTConfig, FastMarchingConfig  # noqa: E402
from .core import UNREACHED, Raster  # noqa: E402
from .hooks import FastMarchingHooks, FreezeEvent, StopMarching  # noqa: E402
from .utils import (  # noqa: E402
    CallbackAbortedError,
    ConfigurationError,
    EmptyDimensionError,
    RasterTransformError,
    ShapeMismatchError,
    TransformResult,
    configure_logging,
    get_logger,
)

__all__ = [
    "UNREACHED",
    "CallbackAbortedError",
    "ConfigurationError",
    "EmptyDimensionError",
    "ExactEDT",
    "ExactEDTConfig",
    "FastMarching",
    "FastMarchingConfig",
    "FastMarchingHooks",
    "FreezeEvent",
    "Raster",
    "RasterTransformError",
    "ShapeMismatchError",
    "StopMarching",
    "TransformResult",
    "__version__",
    "compute_exact",
    "compute_exact_squared",
    "compute_fmm",
    "compute_fmm_nearest",
    "compute_nearest_feature",
    "configure_logging",
    "get_logger",
]
