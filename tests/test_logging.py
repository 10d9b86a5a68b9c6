"""Tests for torchcqt logging module."""

import io
import logging
import time

import pytest

from torchcqt.logging import (
    DEFAULT_DATE_FORMAT,
    DEFAULT_FORMAT,
    LogPerformance,
    disable_logging,
    enable_debug_logging,
    enable_logging,
    get_logger,
    log_performance,
)


@pytest.fixture(autouse=True)
def _reset_logging():
    yield
    disable_logging()


class TestLoggerConfiguration:
    """Tests for logger configuration functions."""

    def test_get_logger_root(self):
        """get_logger() should return torchcqt root logger."""
        assert get_logger().name == "torchcqt"

    def test_get_logger_child(self):
        """get_logger(name) should return child logger."""
        assert get_logger("filterbank").name == "torchcqt.filterbank"

    def test_enable_logging_default_level(self):
        enable_logging()
        assert get_logger().level == logging.INFO

    def test_enable_logging_custom_level(self):
        enable_logging(level="WARNING")
        assert get_logger().level == logging.WARNING

    def test_enable_debug_logging(self):
        enable_debug_logging()
        assert get_logger().level == logging.DEBUG

    def test_disable_logging(self):
        """disable_logging() should leave only a NullHandler."""
        enable_logging()
        disable_logging()
        logger = get_logger()
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0], logging.NullHandler)

    def test_enable_logging_custom_stream_and_format(self):
        stream = io.StringIO()
        enable_logging(level="INFO", format_string="%(levelname)s: %(message)s", stream=stream)
        get_logger().info("Test")
        assert "INFO: Test" in stream.getvalue()

    def test_null_handler_by_default(self):
        disable_logging()
        logger = logging.getLogger("torchcqt")
        assert any(isinstance(h, logging.NullHandler) for h in logger.handlers)

    def test_multiple_enable_calls_no_duplicate_handlers(self):
        enable_logging()
        enable_logging()
        enable_logging()
        stream_handlers = [
            h
            for h in get_logger().handlers
            if isinstance(h, logging.StreamHandler) and not isinstance(h, logging.NullHandler)
        ]
        assert len(stream_handlers) == 1

    def test_default_format_constants(self):
        assert "%(message)s" in DEFAULT_FORMAT
        assert DEFAULT_DATE_FORMAT


class TestPerformanceLogging:
    """Tests for performance logging utilities."""

    def test_log_performance_context_manager(self):
        stream = io.StringIO()
        enable_logging(level="INFO", stream=stream)

        with log_performance("test_operation"):
            pass

        assert "test_operation completed in" in stream.getvalue()

    def test_log_performance_returns_timing_info(self):
        with log_performance("test") as timing:
            time.sleep(0.01)

        assert timing["operation_name"] == "test"
        assert timing["elapsed_seconds"] >= 0.01

    def test_log_performance_records_time_on_error(self):
        with pytest.raises(ValueError), log_performance("failing") as timing:
            raise ValueError("boom")

        assert "elapsed_seconds" in timing

    def test_log_performance_custom_level(self):
        stream = io.StringIO()
        enable_logging(level="WARNING", stream=stream)

        with log_performance("test", level=logging.INFO):
            pass
        assert stream.getvalue() == ""

        with log_performance("test", level=logging.WARNING):
            pass
        assert "test completed in" in stream.getvalue()

    def test_log_performance_custom_logger(self):
        stream = io.StringIO()
        custom_logger = logging.getLogger("custom_test")
        handler = logging.StreamHandler(stream)
        handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
        custom_logger.addHandler(handler)
        custom_logger.setLevel(logging.INFO)

        try:
            with log_performance("operation", logger=custom_logger):
                pass
        finally:
            custom_logger.removeHandler(handler)

        output = stream.getvalue()
        assert "custom_test:" in output
        assert "operation completed in" in output

    def test_log_performance_decorator(self):
        stream = io.StringIO()
        enable_logging(level="INFO", stream=stream)

        @LogPerformance("decorated_func")
        def test_func():
            return 42

        assert test_func() == 42
        assert "decorated_func completed in" in stream.getvalue()

    def test_log_performance_decorator_auto_name(self):
        stream = io.StringIO()
        enable_logging(level="INFO", stream=stream)

        @LogPerformance()
        def my_function():
            pass

        my_function()
        assert "my_function completed in" in stream.getvalue()

    def test_log_performance_decorator_preserves_args(self):
        @LogPerformance()
        def add(a, b, c=0):
            return a + b + c

        assert add(1, 2) == 3
        assert add(1, 2, c=3) == 6
        assert add.__name__ == "add"


class TestLoggerHierarchy:
    """Tests for logger hierarchy behavior."""

    def test_child_loggers_inherit_level(self):
        enable_logging(level="DEBUG")
        assert get_logger("transform").getEffectiveLevel() == logging.DEBUG

    def test_child_logger_messages_propagate(self):
        stream = io.StringIO()
        enable_logging(level="INFO", stream=stream)

        get_logger("cache").info("Child message")

        output = stream.getvalue()
        assert "Child message" in output
        assert "torchcqt.cache" in output

    def test_performance_logger_hierarchy(self):
        perf_logger = logging.getLogger("torchcqt.performance")
        assert perf_logger.parent.name == "torchcqt"  # type: ignore[union-attr]

    def test_filterbank_build_is_logged_at_debug(self, small_params):
        from torchcqt import DerivedCache, build_filterbank

        stream = io.StringIO()
        enable_logging(level="DEBUG", format_string="%(name)s %(message)s", stream=stream)

        build_filterbank(small_params, cache=DerivedCache(), num_workers=1)

        output = stream.getvalue()
        assert "torchcqt.filterbank Built filterbank" in output
        assert "build_filterbank completed in" in output
        assert "Cache miss for phase_factors" in output


class TestImports:
    """Test that all exports are accessible."""

    def test_import_via_torchcqt(self):
        import torchcqt

        assert hasattr(torchcqt, "logging")
        assert hasattr(torchcqt.logging, "enable_debug_logging")
        assert hasattr(torchcqt.logging, "log_performance")
        assert hasattr(torchcqt.logging, "LogPerformance")
        assert hasattr(torchcqt.logging, "get_logger")
