"""Rendering pipeline errors.

One class per failure kind. The orchestrator classifies anything it catches
into one of these before surfacing it to the caller.
"""

from typing import Any, Dict, Optional

from handbook_pdf.exceptions.base import HandbookPdfError


class LaunchError(HandbookPdfError):
    """The browser engine could not be started."""

    code = "LAUNCH_ERROR"


class PageLoadError(HandbookPdfError):
    """Navigation returned a non-success response (or none at all)."""

    code = "PAGE_LOAD_ERROR"

    def __init__(self, url: str, status: Optional[int] = None, reason: Optional[str] = None):
        if status is None:
            message = f"Navigation to '{url}' returned no response"
        else:
            message = f"Navigation to '{url}' failed with HTTP status {status}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message, details={"url": url, "status": status})
        self.url = url
        self.status = status


class NavigationTimeoutError(HandbookPdfError):
    """Navigation, readiness wait or capture exceeded its configured ceiling."""

    code = "TIMEOUT"

    def __init__(self, message: str, timeout_ms: Optional[int] = None, **details: Any):
        super().__init__(message, details={"timeout_ms": timeout_ms, **details})
        self.timeout_ms = timeout_ms


class NoSectionsFoundError(HandbookPdfError):
    """The loaded document contains no section matching the selectors."""

    code = "NO_SECTIONS_FOUND"

    def __init__(self, container_selector: str, item_selector: str):
        super().__init__(
            f"No sections matching '{item_selector}' found inside '{container_selector}'",
            details={"container_selector": container_selector, "item_selector": item_selector},
        )


class CaptureError(HandbookPdfError):
    """Rendering a section to PDF failed."""

    code = "CAPTURE_ERROR"

    def __init__(
        self,
        message: str,
        section_index: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        merged = dict(details or {})
        if section_index is not None:
            merged["section_index"] = section_index
        super().__init__(message, details=merged)
        self.section_index = section_index


class MergeError(HandbookPdfError):
    """A fragment is not a valid single-page PDF, or the merge result is inconsistent."""

    code = "MERGE_ERROR"

    def __init__(self, message: str, fragment_index: Optional[int] = None):
        details = {} if fragment_index is None else {"fragment_index": fragment_index}
        super().__init__(message, details=details)
        self.fragment_index = fragment_index


class PersistError(HandbookPdfError):
    """The merged document could not be written to output storage."""

    code = "PERSIST_ERROR"
