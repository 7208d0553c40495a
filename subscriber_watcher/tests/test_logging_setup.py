"""Tests for logging setup."""

import json
import logging

import pytest

from subscriber_watcher.logging_setup import LOG_FILE_NAME, JsonFormatter, setup_logging


@pytest.fixture(autouse=True)
def restore_root_logger():
    """Restore root logger handlers after each test."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers = handlers
    root.setLevel(level)


class TestJsonFormatter:
    """Test JsonFormatter."""

    def test_format_includes_extra(self):
        """Test that extra fields are serialized."""
        record = logging.LogRecord("test", logging.INFO, __file__, 1, "count %d", (5,), None)
        record.channel_id = "UC123"

        data = json.loads(JsonFormatter().format(record))

        assert data["message"] == "count 5"
        assert data["level"] == "INFO"
        assert data["logger"] == "test"
        assert data["channel_id"] == "UC123"


class TestSetupLogging:
    """Test setup_logging."""

    def test_console_only(self):
        """Test that only a console handler is installed without a log path."""
        root = setup_logging("DEBUG")

        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1

    def test_json_file(self, tmp_path):
        """Test that a log path adds a JSON file handler."""
        root = setup_logging("INFO", tmp_path)
        logging.getLogger("subscriber_watcher.test").info("hello", extra={"count": 3})
        for handler in root.handlers:
            handler.flush()

        line = (tmp_path / LOG_FILE_NAME).read_text().strip().splitlines()[-1]
        data = json.loads(line)
        assert data["message"] == "hello"
        assert data["count"] == 3
