"""Console logger backed by the standard ``logging`` module."""

import logging
import sys
from typing import Any, Optional

from handbook_pdf.logger.interface import Logger

_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


class ConsoleLogger(Logger):
    """Writes ``message key=value ...`` lines to stderr."""

    def __init__(self, name: str = "handbook_pdf", level: Optional[int] = None):
        """
        Args:
            name: Name of the underlying stdlib logger
            level: Logging level; defaults to INFO
        """
        self._logger = logging.getLogger(name)
        if not self._logger.handlers:
            handler = logging.StreamHandler(sys.stderr)
            handler.setFormatter(logging.Formatter(_FORMAT))
            self._logger.addHandler(handler)
            self._logger.propagate = False
        self._logger.setLevel(level if level is not None else logging.INFO)

    @property
    def level(self) -> int:
        return self._logger.level

    def set_level(self, level: int) -> None:
        self._logger.setLevel(level)

    @staticmethod
    def _format(message: str, kwargs: dict) -> str:
        if not kwargs:
            return message
        context = " ".join(f"{key}={value}" for key, value in kwargs.items())
        return f"{message} {context}"

    def debug(self, message: str, **kwargs: Any) -> None:
        self._logger.debug(self._format(message, kwargs))

    def info(self, message: str, **kwargs: Any) -> None:
        self._logger.info(self._format(message, kwargs))

    def warning(self, message: str, **kwargs: Any) -> None:
        self._logger.warning(self._format(message, kwargs))

    def error(self, message: str, **kwargs: Any) -> None:
        self._logger.error(self._format(message, kwargs))

    def critical(self, message: str, **kwargs: Any) -> None:
        self._logger.critical(self._format(message, kwargs))
