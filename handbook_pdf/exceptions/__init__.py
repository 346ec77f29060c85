"""Custom exceptions for the handbook rendering pipeline.

All exceptions carry a stable error code so the HTTP layer and CLI can
report the failure kind without parsing messages.
"""

from handbook_pdf.exceptions.base import HandbookPdfError, ConfigurationError
from handbook_pdf.exceptions.pipeline import (
    LaunchError,
    PageLoadError,
    NavigationTimeoutError,
    NoSectionsFoundError,
    CaptureError,
    MergeError,
    PersistError,
)

__all__ = [
    "HandbookPdfError",
    "ConfigurationError",
    "LaunchError",
    "PageLoadError",
    "NavigationTimeoutError",
    "NoSectionsFoundError",
    "CaptureError",
    "MergeError",
    "PersistError",
]
