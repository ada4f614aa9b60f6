"""Tests for logging configuration and formatters."""

import io
import json
import logging

import pytest

from dupfinder.logging import ComponentLoggerAdapter, get_logger
from dupfinder.logging.config import (
    ContextualFilter,
    JSONFormatter,
    KeyValueFormatter,
    configure_logging,
)
from dupfinder.logging.context import log_context


@pytest.fixture
def logger():
    """Create a test logger with no handlers."""
    test_logger = logging.getLogger("test_logger")
    test_logger.setLevel(logging.DEBUG)
    test_logger.handlers.clear()

    yield test_logger

    test_logger.handlers.clear()


@pytest.fixture
def restore_root_logger():
    """Put back the root logger's handlers and level after configure_logging."""
    root_logger = logging.getLogger()
    handlers = list(root_logger.handlers)
    level = root_logger.level

    yield root_logger

    root_logger.handlers[:] = handlers
    root_logger.setLevel(level)


def make_record(logger, message="Test message", extra=None):
    return logger.makeRecord("test", logging.INFO, "test.py", 1, message, (), None, extra=extra)


def test_json_formatter_basic(logger):
    """Test JSONFormatter produces valid JSON with mandatory fields."""
    log_obj = json.loads(JSONFormatter().format(make_record(logger)))

    assert log_obj["level"] == "INFO"
    assert log_obj["message"] == "Test message"
    assert log_obj["logger"] == "test"
    assert "timestamp" in log_obj


def test_json_formatter_with_extra_fields(logger):
    """Test JSONFormatter includes extra fields."""
    record = make_record(
        logger, extra={"event": "source.read.completed", "lines_read": 42, "had_errors": False}
    )

    log_obj = json.loads(JSONFormatter().format(record))

    assert log_obj["event"] == "source.read.completed"
    assert log_obj["lines_read"] == 42
    assert log_obj["had_errors"] is False


def test_json_formatter_non_ascii(logger):
    """Test that non-ASCII source names are written unescaped."""
    record = make_record(logger, extra={"source_id": "données.txt"})

    assert "données.txt" in JSONFormatter().format(record)


def test_contextual_filter_adds_static_fields(logger):
    """Test ContextualFilter adds static service and environment fields."""
    record = make_record(logger)

    ContextualFilter(service="test-service", environment="test").filter(record)

    assert record.service == "test-service"
    assert record.environment == "test"


def test_contextual_filter_adds_context_fields(logger):
    """Test ContextualFilter adds fields from log context."""
    with log_context(run_id="abc123", source_id="a.txt"):
        record = make_record(logger)
        ContextualFilter().filter(record)

    assert record.run_id == "abc123"
    assert record.source_id == "a.txt"


def test_contextual_filter_extra_wins_over_context(logger):
    """Test that per-call extras take priority over context fields."""
    with log_context(source_id="from-context"):
        record = make_record(logger, extra={"source_id": "from-call"})
        ContextualFilter().filter(record)

    assert record.source_id == "from-call"


def test_json_formatter_with_context(logger):
    """Test full pipeline: context + filter + JSON formatter."""
    with log_context(run_id="abc123", mode="multi-source"):
        record = make_record(logger, "Detection started", extra={"event": "detection.run.started"})
        ContextualFilter(service="dupfinder", environment="test").filter(record)
        log_obj = json.loads(JSONFormatter().format(record))

    assert log_obj["message"] == "Detection started"
    assert log_obj["event"] == "detection.run.started"
    assert log_obj["service"] == "dupfinder"
    assert log_obj["environment"] == "test"
    assert log_obj["run_id"] == "abc123"
    assert log_obj["mode"] == "multi-source"


def test_key_value_formatter_with_extras(logger):
    """Test KeyValueFormatter includes extra fields as key=value pairs."""
    formatter = KeyValueFormatter(
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    record = make_record(
        logger,
        extra={"event": "source.open.failed", "error": "No such file", "opened": False, "x": None},
    )

    output = formatter.format(record)

    assert "[INFO]" in output
    assert "Test message" in output
    assert "event=source.open.failed" in output
    assert 'error="No such file"' in output
    assert "opened=false" in output
    assert "x=null" in output


def test_key_value_formatter_skips_static_fields(logger):
    """Test that service and environment are left out of key-value lines."""
    formatter = KeyValueFormatter("%(message)s")
    record = make_record(logger)
    ContextualFilter().filter(record)

    assert formatter.format(record) == "Test message"


def test_timestamp_format_in_json(logger):
    """Test that JSON formatter produces an ISO-8601 UTC timestamp with milliseconds."""
    timestamp = json.loads(JSONFormatter().format(make_record(logger)))["timestamp"]

    assert timestamp.endswith("Z")
    assert "T" in timestamp
    assert len(timestamp) == 24  # 2026-01-05T10:30:00.123Z


def test_json_formatter_no_duplicate_fields(logger):
    """Test that standard record attributes are not repeated as extras."""
    log_obj = json.loads(JSONFormatter().format(make_record(logger, extra={"event": "x"})))

    assert "name" not in log_obj
    assert "msg" not in log_obj
    assert "event" in log_obj


def test_configure_logging_invalid_level():
    """Test configure_logging rejects invalid log level."""
    with pytest.raises(ValueError, match="Invalid log level"):
        configure_logging(level="INVALID")


def test_configure_logging_invalid_format():
    """Test configure_logging rejects invalid format type."""
    with pytest.raises(ValueError, match="Invalid log format"):
        configure_logging(format_type="invalid")


def test_configure_logging_json_format(restore_root_logger):
    """Test configure_logging installs a single JSON handler."""
    stream = io.StringIO()
    configure_logging(level="INFO", format_type="json", environment="test", stream=stream)

    assert len(restore_root_logger.handlers) == 1
    assert isinstance(restore_root_logger.handlers[0].formatter, JSONFormatter)

    logging.getLogger("dupfinder.test").info("hello", extra={"event": "test.event"})
    log_obj = json.loads(stream.getvalue().strip())
    assert log_obj["event"] == "test.event"
    assert log_obj["environment"] == "test"
    assert log_obj["service"] == "dupfinder"


def test_configure_logging_level(restore_root_logger):
    """Test that records below the configured level are dropped."""
    stream = io.StringIO()
    configure_logging(level="WARNING", format_type="key-value", stream=stream)

    logging.getLogger("dupfinder.test").info("quiet")
    logging.getLogger("dupfinder.test").warning("loud")

    output = stream.getvalue()
    assert "quiet" not in output
    assert "loud" in output
    assert isinstance(restore_root_logger.handlers[0].formatter, KeyValueFormatter)


class TestGetLogger:
    """Tests for get_logger and the component adapter."""

    def test_plain_logger(self):
        """Test that no component returns a plain Logger."""
        assert isinstance(get_logger("dupfinder.test"), logging.Logger)

    def test_component_merged_with_extra(self, caplog):
        """Test that the component is added and per-call extras are kept."""
        adapter = get_logger("dupfinder.test", component="reader")
        assert isinstance(adapter, ComponentLoggerAdapter)

        with caplog.at_level(logging.INFO):
            adapter.info("hello", extra={"event": "source.read.started"})

        (record,) = [r for r in caplog.records if r.name == "dupfinder.test"]
        assert record.component == "reader"
        assert record.event == "source.read.started"
