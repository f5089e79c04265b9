"""Logging setup for the matching core."""

from __future__ import annotations

import logging
import os
import sys
from logging.handlers import RotatingFileHandler

from flatmatch.config import config


LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
LOG_FILE_PATH = "logs/flatmatch.log"


def setup_logging(*, debug: bool | None = None, log_file: str | None = LOG_FILE_PATH) -> None:
    """Configure Python logging.

    - Console output at INFO+ (or DEBUG+ when debug=True) for operational logs.
      debug defaults to the DEBUG setting.
    - Rotating file output at DEBUG+ for deep diagnostics, skipped when
      log_file is None.
    - Consistent structured format for easier log parsing.
    """

    if debug is None:
        debug = config.DEBUG

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    formatter = logging.Formatter(LOG_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.DEBUG if debug else logging.INFO)
    console_handler.setFormatter(formatter)

    # Avoid duplicate handlers when a host reconfigures.
    root_logger.handlers.clear()
    root_logger.addHandler(console_handler)

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)

        file_handler = RotatingFileHandler(
            log_file, maxBytes=2_000_000, backupCount=5
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)


logger = logging.getLogger(__name__)
