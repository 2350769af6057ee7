"""
Unit tests for raster_edt.utils.logging.

Tests include:
- Thread safety of logger creation
- Handler reconfiguration
- Engine log lines at DEBUG level
- LoggedOperation timing
"""

from __future__ import annotations

import concurrent.futures
import logging

import pytest

import numpy as np

from raster_edt.alg import ExactEDT, FastMarching
from raster_edt.utils.exceptions import CallbackAbortedError
from raster_edt.utils.logging import LoggedOperation, configure_logging, get_logger
from raster_edt.utils.logging.logger import EDTFormatter, EDTLogger


@pytest.fixture(autouse=True)
def restore_logging():
    """Rebind handlers to the regular stdout once capsys has been torn down."""
    yield
    configure_logging(level="INFO", use_colors=True)


class TestLoggerCreation:
    """Test basic logger creation functionality."""

    def setup_method(self):
        for name in [k for k in EDTLogger._loggers if k.startswith("test.")]:
            del EDTLogger._loggers[name]
            logging.getLogger(name).handlers.clear()

    def test_get_logger_returns_logger(self):
        assert isinstance(get_logger("test.basic"), logging.Logger)

    def test_repeated_get_logger_returns_same_instance(self):
        assert get_logger("test.repeated") is get_logger("test.repeated")

    def test_get_logger_without_name_uses_module(self):
        assert get_logger().name == __name__

    def test_single_handler_no_propagation(self):
        logger = get_logger("test.handlers")
        assert len(logger.handlers) == 1
        assert logger.propagate is False

    def test_concurrent_logger_creation_no_duplicate_handlers(self):
        def create(thread_id: int) -> logging.Logger:
            return get_logger(f"test.thread_{thread_id % 3}")

        with concurrent.futures.ThreadPoolExecutor(max_workers=8) as executor:
            loggers = list(executor.map(create, range(30)))

        for logger in loggers:
            assert len(logger.handlers) == 1


class TestConfiguration:
    """Test global reconfiguration of cached loggers."""

    def test_level_applies_to_existing_loggers(self):
        configure_logging(level="DEBUG", use_colors=False)
        logger = get_logger("raster_edt.alg.exact_edt")
        assert logger.level == logging.DEBUG

    def test_file_logging(self, tmp_path):
        log_file = tmp_path / "logs" / "edt.log"
        configure_logging(level="INFO", log_to_file=True, log_file_path=log_file, use_colors=False)
        logger = get_logger("test.file")
        logger.info("written to file")
        for handler in logger.handlers:
            handler.flush()
        assert "written to file" in log_file.read_text()

    def test_file_logging_defaults_to_working_directory(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        configure_logging(level="INFO", log_to_file=True, use_colors=False)
        logger = get_logger("test.default_file")
        logger.info("default location")
        for handler in logger.handlers:
            handler.flush()
        assert "default location" in (tmp_path / "raster_edt.log").read_text()

    def test_formatter_location(self):
        record = logging.LogRecord("x", logging.INFO, "engine.py", 12, "hello", None, None)
        assert "[engine.py:12]" in EDTFormatter(include_location=True).format(record)
        assert "engine.py" not in EDTFormatter().format(record)


class TestEngineLogging:
    """Engines report start and completion at DEBUG level."""

    def test_exact_engine_logs(self, capsys):
        # handlers bind to sys.stdout when configured, so configure under capsys
        configure_logging(level="DEBUG", use_colors=False)
        ExactEDT(parallel=True, max_workers=2).solve(np.eye(4, dtype=bool))
        out = capsys.readouterr().out
        assert "Starting ExactEDT" in out
        assert "ExactEDT completed 4x4 raster" in out
        assert "column pass" in out

    def test_fast_marching_logs_abort_as_warning(self, capsys):
        configure_logging(level="WARNING", use_colors=False)
        with pytest.raises(CallbackAbortedError):
            FastMarching().solve(np.eye(3, dtype=bool), progress=lambda *args: "stop")
        out = capsys.readouterr().out
        assert "WARNING" in out
        assert "stopped by progress hook" in out

    def test_quiet_by_default(self, capsys):
        configure_logging(level="INFO", use_colors=False)
        ExactEDT().solve(np.eye(3, dtype=bool))
        assert capsys.readouterr().out == ""


class TestLoggedOperation:
    def test_records_duration(self, capsys):
        configure_logging(level="DEBUG", use_colors=False)
        logger = get_logger("test.operation")
        with LoggedOperation(logger, "sample work") as op:
            pass
        assert op.duration is not None and op.duration >= 0
        out = capsys.readouterr().out
        assert "Starting sample work" in out
        assert "Completed sample work" in out

    def test_failure_logged_and_reraised(self, capsys):
        configure_logging(level="INFO", use_colors=False)
        logger = get_logger("test.failing")
        with pytest.raises(RuntimeError):
            with LoggedOperation(logger, "failing work"):
                raise RuntimeError("broken")
        assert "Failed failing work" in capsys.readouterr().out
