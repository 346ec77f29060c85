"""Base exception classes for handbook-pdf.

Every error carries a stable ``code``, a human readable ``message`` and a
``details`` dict so callers can log or serialize it without string parsing.
"""

from typing import Any, Dict, Optional


class HandbookPdfError(Exception):
    """Base class for all handbook-pdf errors."""

    code = "HANDBOOK_PDF_ERROR"

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        self.details: Dict[str, Any] = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return {"error_code": self.code, "message": self.message, "details": self.details}

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"


class ConfigurationError(HandbookPdfError):
    """Raised when configuration values are missing or invalid."""

    code = "CONFIGURATION_ERROR"
