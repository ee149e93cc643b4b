"""
Tests for logging setup: tags, STEP level and handlers.
"""

import logging
from pathlib import Path

from xrayr_setup.core.observability.logging_config import (
    STEP,
    ConsoleFormatter,
    _parse_level,
    setup_logging,
    step,
)


def _record(level: int, msg: str = "hello") -> logging.LogRecord:
    return logging.LogRecord("xrayr_setup.test", level, __file__, 1, msg, (), None)


class TestConsoleFormatter:
    def test_tags_without_colour(self):
        fmt = ConsoleFormatter("%(tag)s %(message)s", color=False)
        assert fmt.format(_record(logging.INFO)) == "[INFO] hello"
        assert fmt.format(_record(STEP)) == "[STEP] hello"
        assert fmt.format(_record(logging.WARNING)) == "[WARN] hello"
        assert fmt.format(_record(logging.ERROR)) == "[ERROR] hello"

    def test_colour_wraps_tag(self):
        fmt = ConsoleFormatter("%(tag)s %(message)s", color=True)
        line = fmt.format(_record(logging.WARNING))
        assert "\x1b[" in line
        assert line.endswith(" hello")


class TestParseLevel:
    def test_names(self):
        assert _parse_level("debug") == logging.DEBUG
        assert _parse_level("STEP") == STEP
        assert _parse_level("warning") == logging.WARNING

    def test_fallback(self):
        assert _parse_level(None) == logging.INFO
        assert _parse_level("loud") == logging.INFO


class TestSetupLogging:
    def test_console_handler(self):
        setup_logging(level="WARNING", color=False)
        root = logging.getLogger()
        assert len(root.handlers) == 1
        assert root.level == logging.WARNING

    def test_file_handler_level(self, tmp_path: Path):
        log_file = tmp_path / "setup.log"
        setup_logging(level="ERROR", log_file=str(log_file), log_file_level="DEBUG", color=False)
        root = logging.getLogger()
        assert root.level == logging.DEBUG

        logger = logging.getLogger("xrayr_setup.test")
        step(logger, "%d. %s...", 1, "Installing dependencies")
        for handler in root.handlers:
            handler.flush()
        assert "1. Installing dependencies..." in log_file.read_text()
        assert "STEP" in log_file.read_text()
        for handler in list(root.handlers):
            handler.close()

    def test_file_opened_on_first_record(self, tmp_path: Path):
        log_file = tmp_path / "setup.log"
        setup_logging(level="INFO", log_file=str(log_file), color=False)
        assert not log_file.exists()

        logging.getLogger("xrayr_setup.test").info("first line")
        assert log_file.exists()
        for handler in list(logging.getLogger().handlers):
            handler.close()
