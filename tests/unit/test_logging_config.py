"""
Unit tests for logging setup.
"""

import logging
from logging.handlers import RotatingFileHandler

import pytest
from unittest.mock import patch

from flatmatch.utils.logging_config import setup_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


class TestSetupLogging:
    """Test handler installation."""

    def test_console_and_file_handlers(self, tmp_path, restore_root_logger):
        log_file = tmp_path / "logs" / "flatmatch.log"
        setup_logging(debug=True, log_file=str(log_file))

        handlers = restore_root_logger.handlers
        assert len(handlers) == 2
        assert any(isinstance(h, RotatingFileHandler) for h in handlers)
        assert log_file.parent.is_dir()

    def test_console_only_without_log_file(self, restore_root_logger):
        setup_logging(debug=False, log_file=None)

        handlers = restore_root_logger.handlers
        assert len(handlers) == 1
        assert handlers[0].level == logging.INFO

    @patch("flatmatch.utils.logging_config.config")
    def test_debug_defaults_to_setting(self, mock_config, restore_root_logger):
        """Without an explicit flag the DEBUG setting picks the console level."""
        mock_config.DEBUG = True
        setup_logging(log_file=None)
        assert restore_root_logger.handlers[0].level == logging.DEBUG

        mock_config.DEBUG = False
        setup_logging(log_file=None)
        assert restore_root_logger.handlers[0].level == logging.INFO
