"""
Tests for logging setup.
"""

import json
import logging
import sys

import pytest
from rich.logging import RichHandler

from web_replay.config.settings import LoggingSettings
from web_replay.utils.logging import JsonLineFormatter, configure_logging, setup_logging


@pytest.fixture(autouse=True)
def restore_logging():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    quiet = {name: logging.getLogger(name).level for name in ("asyncio", "playwright")}
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
    for name, old in quiet.items():
        logging.getLogger(name).setLevel(old)


def make_record(message, *args):
    return logging.LogRecord("web_replay.replay", logging.INFO, __file__, 1, message, args, None)


class TestJsonLineFormatter:
    """Test the JSON file format."""

    def test_single_line_object(self):
        line = JsonLineFormatter().format(make_record('typed "%s"\ninto %s', "alice", "#username"))

        assert "\n" not in line
        entry = json.loads(line)
        assert entry["level"] == "INFO"
        assert entry["name"] == "web_replay.replay"
        assert entry["message"] == 'typed "alice"\ninto #username'
        assert "exception" not in entry

    def test_exception_included(self):
        try:
            raise ValueError("boom")
        except ValueError:
            record = logging.LogRecord(
                "web_replay", logging.ERROR, __file__, 1, "failed", None, sys.exc_info()
            )

        entry = json.loads(JsonLineFormatter().format(record))

        assert "ValueError: boom" in entry["exception"]


class TestSetupLogging:
    """Test handler configuration."""

    def test_console_only(self):
        setup_logging("WARNING")

        root = logging.getLogger()
        assert root.level == logging.WARNING
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0], RichHandler)

    def test_unknown_level_falls_back_to_info(self):
        setup_logging("chatty")
        assert logging.getLogger().level == logging.INFO

    def test_libraries_kept_quiet(self):
        setup_logging("DEBUG")

        assert logging.getLogger("playwright").level == logging.WARNING
        assert logging.getLogger("asyncio").level == logging.WARNING

    def test_json_file(self, tmp_path):
        log_file = tmp_path / "replay.log"
        setup_logging("INFO", log_file=str(log_file), json_format=True)

        logging.getLogger("web_replay.test").info("step %d done", 3)
        for handler in logging.getLogger().handlers:
            handler.flush()

        entry = json.loads(log_file.read_text(encoding="utf-8").strip())
        assert entry["message"] == "step 3 done"

    def test_text_file(self, tmp_path):
        log_file = tmp_path / "replay.log"
        setup_logging("INFO", log_file=str(log_file))

        logging.getLogger("web_replay.test").info("plain message")
        for handler in logging.getLogger().handlers:
            handler.flush()

        assert "INFO - plain message" in log_file.read_text(encoding="utf-8")


class TestConfigureLogging:
    """Test applying the logging settings section."""

    def test_settings_level(self):
        configure_logging(LoggingSettings(level="ERROR"))
        assert logging.getLogger().level == logging.ERROR

    def test_override_level(self, tmp_path):
        log_file = tmp_path / "out.log"
        configure_logging(LoggingSettings(level="ERROR", file=str(log_file)), "DEBUG")

        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert any(isinstance(h, logging.FileHandler) for h in root.handlers)
