"""
Logger module for handbook-pdf

This module provides a flexible logging interface that allows users to
drop in their own logger implementations.

Usage:
    from handbook_pdf.logger import Logger, ConsoleLogger

    logger = ConsoleLogger()
    logger.info("Application started", port=3000)

    # Or implement your own
    class MyCustomLogger(Logger):
        def info(self, message: str, **kwargs):
            ...
"""

import logging
import os

from .interface import Logger
from .console_logger import ConsoleLogger

_LEVEL = logging.getLevelName(os.environ.get("HANDBOOK_PDF_LOG_LEVEL", "INFO").upper())

# Shared logger instance for modules that just need basic console logging
session_logger: Logger = ConsoleLogger(level=_LEVEL if isinstance(_LEVEL, int) else logging.INFO)

__all__ = [
    "Logger",
    "ConsoleLogger",
    "session_logger",
]
