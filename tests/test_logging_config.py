"""
Unit tests for rc_detail.logging_config module.

Tests:
- JSONFormatter output format
- ConsoleFormatter output format
- setup_logging configuration
- log_timing context manager
- timed decorator
- LogContext
"""

import json
import logging
import sys
from io import StringIO

import numpy as np
import pytest

from rc_detail.logging_config import (
    PACKAGE_LOGGER,
    ConsoleFormatter,
    JSONFormatter,
    LogContext,
    get_logger,
    log_timing,
    setup_logging,
    timed,
)


def _record(level=logging.INFO, msg="Message", name="test", **extra):
    record = logging.LogRecord(
        name=name,
        level=level,
        pathname="test.py",
        lineno=42,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJSONFormatter:
    """Tests for JSONFormatter class."""

    def test_basic_format(self):
        """Test basic JSON output format."""
        data = json.loads(JSONFormatter().format(_record(msg="Test message")))

        assert data["level"] == "INFO"
        assert data["logger"] == "test"
        assert data["message"] == "Test message"
        assert "timestamp" in data

    def test_extra_fields(self):
        """Test that extra fields are included."""
        data = json.loads(JSONFormatter().format(
            _record(outward_axis="+z", n_vertices=1122)
        ))

        assert data["outward_axis"] == "+z"
        assert data["n_vertices"] == 1122

    def test_numpy_values_serialized(self):
        """Test that numpy scalars and arrays become plain JSON values."""
        data = json.loads(JSONFormatter().format(
            _record(area=np.float64(0.25), corner=np.array([1.0, 2.0, 3.0]))
        ))

        assert data["area"] == 0.25
        assert data["corner"] == [1.0, 2.0, 3.0]

    def test_unserializable_extra_uses_str(self):
        """Test that arbitrary objects fall back to str()."""
        data = json.loads(JSONFormatter().format(_record(thing=object())))
        assert data["thing"].startswith("<object object")

    def test_mesh_summarized(self, unit_cube):
        """Test that a GeometryBuffer extra becomes its counts."""
        data = json.loads(JSONFormatter().format(_record(buffer=unit_cube)))
        assert data["buffer"] == {"n_vertices": 8, "n_triangles": 12}

    def test_extras_can_be_disabled(self):
        """Test include_extra=False."""
        data = json.loads(JSONFormatter(include_extra=False).format(_record(key="v")))
        assert "key" not in data

    def test_location_for_warning(self):
        """Test that location info is included for warnings."""
        data = json.loads(JSONFormatter().format(_record(level=logging.WARNING)))

        assert data["location"]["line"] == 42
        assert data["location"]["file"] == "test.py"

    def test_no_location_for_info(self):
        """Test that INFO records carry no location."""
        data = json.loads(JSONFormatter().format(_record(level=logging.INFO)))
        assert "location" not in data

    def test_exception_format(self):
        """Test that exceptions are formatted."""
        try:
            raise ValueError("Test error")
        except ValueError:
            record = logging.LogRecord(
                name="test",
                level=logging.ERROR,
                pathname="test.py",
                lineno=1,
                msg="Error occurred",
                args=(),
                exc_info=sys.exc_info(),
            )

        data = json.loads(JSONFormatter().format(record))

        assert "ValueError" in data["exception"]

    def test_unicode_message(self):
        """Test Unicode characters in messages."""
        data = json.loads(JSONFormatter().format(_record(msg="Ø 12 мм, ±0.5°")))
        assert data["message"] == "Ø 12 мм, ±0.5°"


class TestConsoleFormatter:
    """Tests for ConsoleFormatter class."""

    def test_basic_format(self):
        """Test basic console format."""
        formatter = ConsoleFormatter(use_colors=False)
        result = formatter.format(_record(name="rc_detail.shapes.wave_panel", msg="Wave panel built"))

        assert "INFO" in result
        assert "shapes.wave_panel" in result
        assert "rc_detail.shapes" not in result
        assert "Wave panel built" in result

    def test_extra_fields_shown(self):
        """Test that extra fields are shown inline."""
        formatter = ConsoleFormatter(use_colors=False, show_extra=True)
        result = formatter.format(_record(dot_spacing=0.095))

        assert "dot_spacing=0.095" in result

    def test_long_sequences_compacted(self):
        """Test that long arrays and lists are summarized."""
        formatter = ConsoleFormatter(use_colors=False)
        result = formatter.format(_record(
            positions=np.zeros(30), names=["a", "b", "c", "d"],
        ))

        assert "positions=[...30 values]" in result
        assert "names=[...4 items]" in result

    def test_mesh_summarized(self, unit_quad):
        """Test that a GeometryBuffer extra is shown as <vertices/triangles>."""
        result = ConsoleFormatter(use_colors=False).format(_record(buffer=unit_quad))
        assert "buffer=<4v/2t>" in result

    def test_colors_disabled(self):
        """Test that colors are not present when disabled."""
        result = ConsoleFormatter(use_colors=False).format(_record(level=logging.ERROR))
        assert "\033[" not in result

    def test_colors_enabled(self):
        """Test that the level is wrapped in ANSI codes."""
        result = ConsoleFormatter(use_colors=True).format(_record(level=logging.WARNING))
        assert "\033[33m" in result


class TestSetupLogging:
    """Tests for setup_logging function."""

    def test_returns_package_logger(self):
        """Test that setup returns the rc_detail logger."""
        logger = setup_logging(level=logging.DEBUG, console=False)

        assert isinstance(logger, logging.Logger)
        assert logger.name == PACKAGE_LOGGER
        assert logger.level == logging.DEBUG
        assert logger.propagate is False

    def test_console_handler_added(self):
        """Test that console handler is added."""
        logger = setup_logging(console=True)

        stream_handlers = [h for h in logger.handlers if isinstance(h, logging.StreamHandler)]
        assert len(stream_handlers) == 1

    def test_repeated_setup_does_not_duplicate_handlers(self):
        """Test that calling setup twice replaces handlers."""
        setup_logging(console=True)
        logger = setup_logging(console=True)
        assert len(logger.handlers) == 1

    def test_json_file_handler(self, tmp_path):
        """Test JSON file handler creation."""
        json_path = tmp_path / "rc_detail.log.json"
        logger = setup_logging(json_file=json_path, console=False)
        get_logger("rc_detail.shapes").info("Panel built", extra={"n_triangles": 240})

        for handler in logger.handlers:
            handler.flush()

        data = json.loads(json_path.read_text(encoding="utf-8").strip())
        assert data["message"] == "Panel built"
        assert data["n_triangles"] == 240


class TestGetLogger:
    """Tests for get_logger function."""

    def test_returns_logger(self):
        """Test that get_logger returns a named logger."""
        logger = get_logger("rc_detail.placement")
        assert logger.name == "rc_detail.placement"

    def test_same_logger_returned(self):
        """Test that same logger is returned for same name."""
        assert get_logger("test.module") is get_logger("test.module")


class TestLogTiming:
    """Tests for log_timing context manager."""

    @staticmethod
    def _capture(name):
        logger = logging.getLogger(name)
        logger.setLevel(logging.DEBUG)
        stream = StringIO()
        handler = logging.StreamHandler(stream)
        handler.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))
        logger.addHandler(handler)
        return logger, stream

    def test_logs_start_and_complete(self):
        """Test that start and complete messages are logged."""
        logger, stream = self._capture("timing_test_complete")

        with log_timing(logger, "building panels"):
            pass

        output = stream.getvalue()
        assert "Starting: building panels" in output
        assert "Completed: building panels" in output

    def test_timing_info_updated(self):
        """Test that timing_info dict is populated."""
        logger = logging.getLogger("timing_test_info")
        logger.addHandler(logging.NullHandler())

        with log_timing(logger, "operation") as timing_info:
            pass

        assert timing_info["elapsed_seconds"] >= 0

    def test_failure_logged_and_reraised(self):
        """Test that a failure is logged at the timing level and re-raised."""
        logger, stream = self._capture("timing_test_failure")

        with pytest.raises(ValueError):
            with log_timing(logger, "failing operation"):
                raise ValueError("Test error")

        output = stream.getvalue()
        assert "DEBUG: Failed: failing operation" in output
        assert "Test error" in output


class TestTimedDecorator:
    """Tests for timed decorator."""

    def test_function_executed(self):
        """Test that decorated function executes correctly."""
        @timed(logger=logging.getLogger("timed_test"))
        def add(a, b):
            return a + b

        assert add(2, 3) == 5

    def test_preserves_function_name(self):
        """Test that decorator preserves function name."""
        @timed()
        def my_function():
            pass

        assert my_function.__name__ == "my_function"

    def test_operation_name_logged(self):
        """Test that the operation name defaults to the function name."""
        logger, stream = TestLogTiming._capture("timed_test_name")

        @timed(logger=logger)
        def build_something():
            return 1

        build_something()
        assert "Completed: build_something" in stream.getvalue()

    def test_mesh_counts_in_completion_record(self, unit_cube):
        """Test that a returned mesh adds its counts to the record."""
        logger = logging.getLogger("timed_test_counts")
        logger.setLevel(logging.DEBUG)
        captured = []

        class CaptureHandler(logging.Handler):
            def emit(self, record):
                captured.append(record)

        logger.addHandler(CaptureHandler())

        @timed(logger=logger)
        def build_cube():
            return unit_cube

        assert build_cube() is unit_cube
        complete = [r for r in captured if r.event == "complete"]
        assert complete[0].n_vertices == 8
        assert complete[0].n_triangles == 12


class TestLogContext:
    """Tests for LogContext class."""

    def test_fields_added_to_records(self):
        """Test that context fields reach records from child loggers."""
        setup_logging(console=False)
        package_logger = get_logger(PACKAGE_LOGGER)
        captured = []

        class CaptureHandler(logging.Handler):
            def emit(self, record):
                captured.append(record)

        capture = CaptureHandler()
        package_logger.addHandler(capture)
        try:
            with LogContext(detail="end_anchorage", shape_id=7):
                get_logger("rc_detail.shapes.wave_panel").info("Test message")
        finally:
            package_logger.removeHandler(capture)

        assert len(captured) == 1
        assert captured[0].detail == "end_anchorage"
        assert captured[0].shape_id == 7

    def test_filter_removed_on_exit(self):
        """Test that fields are not added after the context closes."""
        setup_logging(console=False)
        package_logger = get_logger(PACKAGE_LOGGER)
        captured = []

        class CaptureHandler(logging.Handler):
            def emit(self, record):
                captured.append(record)

        capture = CaptureHandler()
        package_logger.addHandler(capture)
        try:
            with LogContext(detail="inside"):
                pass
            get_logger("rc_detail.placement").info("After")
        finally:
            package_logger.removeHandler(capture)

        assert not hasattr(captured[0], "detail")

    def test_context_current(self):
        """Test LogContext.current() returns active context."""
        assert LogContext.current() is None

        outer = LogContext(level="outer")
        with outer:
            inner = LogContext(level="inner")
            with inner:
                assert LogContext.current() is inner
            assert LogContext.current() is outer

        assert LogContext.current() is None
