"""
Tests for structured JSON logging configuration.

Tests logging_config.py module functionality.
"""

import json
import logging
import sys

from promptbridge.logging_config import JSONFormatter, setup_logging


def make_record(level=logging.INFO, msg="Test message", exc_info=None) -> logging.LogRecord:
    record = logging.LogRecord(
        name="test_logger",
        level=level,
        pathname="test.py",
        lineno=42,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )
    record.module = "test_module"
    record.funcName = "test_function"
    return record


class TestJSONFormatter:
    """Test JSONFormatter class."""

    def test_basic_log_formatting(self):
        """Test that basic log record is formatted as JSON."""
        log_data = json.loads(JSONFormatter().format(make_record()))

        assert log_data["level"] == "INFO"
        assert log_data["logger"] == "test_logger"
        assert log_data["message"] == "Test message"
        assert log_data["module"] == "test_module"
        assert log_data["function"] == "test_function"
        assert log_data["line"] == 42
        assert log_data["timestamp"].endswith("Z")
        assert "provider" not in log_data

    def test_dispatch_context_included(self):
        """Test that provider, operation and model extras are included."""
        record = make_record()
        record.provider = "straico"
        record.operation = "chat_completions"
        record.model = "meta-llama/llama-3-70b-instruct"

        log_data = json.loads(JSONFormatter().format(record))

        assert log_data["provider"] == "straico"
        assert log_data["operation"] == "chat_completions"
        assert log_data["model"] == "meta-llama/llama-3-70b-instruct"

    def test_log_with_correlation_id(self):
        record = make_record()
        record.correlation_id = "test-correlation-123"

        log_data = json.loads(JSONFormatter().format(record))

        assert log_data["correlation_id"] == "test-correlation-123"

    def test_log_with_exception(self):
        """Test that exception info is included."""
        try:
            raise ValueError("Test error")
        except ValueError:
            exc_info = sys.exc_info()

        log_data = json.loads(
            JSONFormatter().format(make_record(logging.ERROR, "Error occurred", exc_info))
        )

        assert "ValueError" in log_data["exception"]
        assert "Test error" in log_data["exception"]


class TestSetupLogging:
    """Test setup_logging function."""

    def test_setup_logging_default(self):
        """Test that setup_logging configures root logger."""
        setup_logging(level="INFO")

        root_logger = logging.getLogger()
        assert root_logger.level == logging.INFO
        assert len(root_logger.handlers) == 1
        assert isinstance(root_logger.handlers[0].formatter, JSONFormatter)

    def test_setup_logging_plain_text(self):
        setup_logging(level="DEBUG", json_format=False)

        root_logger = logging.getLogger()
        assert root_logger.level == logging.DEBUG
        assert not isinstance(root_logger.handlers[0].formatter, JSONFormatter)

    def test_setup_logging_noisy_libraries_silenced(self):
        setup_logging(level="DEBUG")

        assert logging.getLogger("httpx").level == logging.WARNING
        assert logging.getLogger("httpcore").level == logging.WARNING

    def test_logging_produces_json(self, capfd):
        """Test that actual logging produces JSON output."""
        setup_logging(level="INFO")

        logging.getLogger("test_logger").info(
            "Dispatching", extra={"provider": "mock", "operation": "embeddings"}
        )

        lines = capfd.readouterr().out.strip().split("\n")
        log_data = json.loads(lines[-1])

        assert log_data["message"] == "Dispatching"
        assert log_data["provider"] == "mock"
        assert log_data["operation"] == "embeddings"
