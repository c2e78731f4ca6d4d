"""
Unit tests for the logging manager
"""

import logging

import pytest

from colibri.core.logging import LOGGER_NAME, LoggingManager


class TestLoggingManager:
    """Test cases for LoggingManager"""

    @pytest.fixture
    def manager(self):
        manager = LoggingManager()
        yield manager
        manager.close()

    def test_logger_before_setup(self, manager):
        assert manager.get_logger() is logging.getLogger(LOGGER_NAME)

    def test_console_only(self, manager):
        manager.setup_logging("WARNING")

        logger = manager.get_logger()
        assert logger.level == logging.WARNING
        assert manager.file_handler is None
        assert manager.console_handler in logger.handlers

    def test_file_logging(self, manager, tmp_path):
        log_file = tmp_path / "logs" / "colibri.log"
        manager.setup_logging("DEBUG", str(log_file), max_size="1KB", backup_count=1)

        manager.log_error(ValueError("boom"), {"url": "https://example.test/"})
        manager.file_handler.flush()

        content = log_file.read_text(encoding="utf-8")
        assert "Error: boom" in content
        assert "https://example.test/" in content
        assert manager.file_handler.maxBytes == 1024

    def test_parse_size(self, manager):
        assert manager._parse_size("10MB") == 10 * 1024 * 1024
        assert manager._parse_size("2kb") == 2048
        assert manager._parse_size("1GB") == 1024 ** 3
        assert manager._parse_size("512") == 512

    def test_close_removes_handlers(self, manager):
        manager.setup_logging("INFO")
        handler = manager.console_handler

        manager.close()

        assert handler not in logging.getLogger(LOGGER_NAME).handlers
        assert manager.console_handler is None
