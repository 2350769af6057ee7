"""
Logging for raster_edt.

Every module asks ``get_logger`` for its logger. The manager attaches a stdout
handler (colored through colorlog) and, when requested, a plain-text file
handler. ``configure_logging`` re-applies the settings to every logger handed
out so far, so the CLI's ``--verbose`` flag reaches loggers created at import.
"""

from __future__ import annotations

import inspect
import logging
import sys
import threading
import time
from pathlib import Path
from typing import Any, ClassVar

import colorlog

_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_LEVEL_COLORS = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "red,bg_white",
}


class EDTFormatter(logging.Formatter):
    """Timestamp, logger name, level and message; optionally colored and located."""

    def __init__(self, use_colors: bool = False, include_location: bool = False):
        self.use_colors = use_colors
        self.include_location = include_location

        layout = "%(asctime)s - %(name)-20s - %(levelname)-8s - %(message)s"
        if include_location:
            layout += " [%(filename)s:%(lineno)d]"
        super().__init__(layout, datefmt=_DATE_FORMAT)

        self._colored = None
        if use_colors:
            self._colored = colorlog.ColoredFormatter(
                "%(log_color)s" + layout, datefmt=_DATE_FORMAT, log_colors=_LEVEL_COLORS
            )

    def format(self, record):
        if self._colored is not None:
            return self._colored.format(record)
        return super().format(record)


class EDTLogger:
    """
    Registry of the loggers handed out by ``get_logger`` and their shared settings.

    The parallel exact engine requests loggers from worker threads, so
    registration happens under a lock and each logger is set up once.
    """

    _lock: ClassVar[threading.Lock] = threading.Lock()
    _loggers: ClassVar[dict[str, logging.Logger]] = {}
    _level: ClassVar[int] = logging.INFO
    _use_colors: ClassVar[bool] = True
    _include_location: ClassVar[bool] = False
    _log_file: ClassVar[Path | None] = None

    @classmethod
    def configure(
        cls,
        level: str | int = "INFO",
        log_to_file: bool = False,
        log_file_path: str | Path | None = None,
        use_colors: bool = True,
        include_location: bool = False,
    ) -> None:
        with cls._lock:
            cls._level = getattr(logging, level.upper()) if isinstance(level, str) else level
            cls._use_colors = use_colors
            cls._include_location = include_location

            cls._log_file = None
            if log_to_file:
                cls._log_file = Path(log_file_path) if log_file_path is not None else Path.cwd() / "raster_edt.log"
                cls._log_file.parent.mkdir(parents=True, exist_ok=True)

            for logger in cls._loggers.values():
                cls._attach_handlers(logger)

    @classmethod
    def get_logger(cls, name: str) -> logging.Logger:
        logger = cls._loggers.get(name)
        if logger is not None:
            return logger

        with cls._lock:
            if name not in cls._loggers:
                logger = logging.getLogger(name)
                if not logger.handlers:
                    cls._attach_handlers(logger)
                cls._loggers[name] = logger
            return cls._loggers[name]

    @classmethod
    def _attach_handlers(cls, logger: logging.Logger) -> None:
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()

        logger.setLevel(cls._level)
        # Handlers bind sys.stdout at this point
        console = logging.StreamHandler(sys.stdout)
        console.setFormatter(EDTFormatter(use_colors=cls._use_colors, include_location=cls._include_location))
        logger.addHandler(console)

        if cls._log_file is not None:
            file_handler = logging.FileHandler(cls._log_file)
            file_handler.setFormatter(EDTFormatter(use_colors=False, include_location=cls._include_location))
            logger.addHandler(file_handler)

        logger.propagate = False


def get_logger(name: str | None = None) -> logging.Logger:
    """Return the logger for ``name``, defaulting to the calling module's ``__name__``."""
    if name is None:
        caller = inspect.currentframe().f_back
        name = caller.f_globals.get("__name__", "raster_edt") if caller is not None else "raster_edt"
    return EDTLogger.get_logger(name)


def configure_logging(
    level: str | int = "INFO",
    log_to_file: bool = False,
    log_file_path: str | Path | None = None,
    use_colors: bool = True,
    include_location: bool = False,
) -> None:
    """
    Apply logging settings to all raster_edt loggers.

    Args:
        level: Level name or number; DEBUG shows per-pass engine timings
        log_to_file: Also write records to a file
        log_file_path: Target file; ``raster_edt.log`` in the working directory if omitted
        use_colors: Color console records by level
        include_location: Append ``[file:line]`` to each record
    """
    EDTLogger.configure(
        level=level,
        log_to_file=log_to_file,
        log_file_path=log_file_path,
        use_colors=use_colors,
        include_location=include_location,
    )


def log_transform_start(logger: logging.Logger, engine_name: str, config: dict[str, Any]) -> None:
    logger.debug(f"Starting {engine_name}")
    logger.debug(f"Engine configuration: {config}")


def log_transform_completion(
    logger: logging.Logger,
    engine_name: str,
    width: int,
    height: int,
    execution_time: float,
    additional_info: dict[str, Any] | None = None,
) -> None:
    message = f"{engine_name} completed {width}x{height} raster in {execution_time:.4f}s"
    if additional_info:
        message += " (" + ", ".join(f"{key}: {value}" for key, value in additional_info.items()) + ")"
    logger.debug(message)


class LoggedOperation:
    """Time a block and log its start and end; failures are logged at ERROR and re-raised."""

    def __init__(self, logger: logging.Logger, operation_name: str, log_level: int = logging.DEBUG):
        self.logger = logger
        self.operation_name = operation_name
        self.log_level = log_level
        self.duration: float | None = None
        self._started = 0.0

    def __enter__(self):
        self.logger.log(self.log_level, f"Starting {self.operation_name}")
        self._started = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.duration = time.perf_counter() - self._started
        if exc_type is None:
            self.logger.log(self.log_level, f"Completed {self.operation_name} in {self.duration:.4f}s")
        else:
            self.logger.error(f"Failed {self.operation_name} after {self.duration:.4f}s: {exc_val}")
        return False
