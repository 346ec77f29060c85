"""Headless-browser rendering of handbook pages into merged PDFs."""

from handbook_pdf.rendering.session import BrowserSessionManager, RenderSession
from handbook_pdf.rendering.readiness import (
    AssetCompleteWaiter,
    NetworkIdleWaiter,
    ReadinessWaiter,
    navigate,
)
from handbook_pdf.rendering.sections import SectionSet, locate
from handbook_pdf.rendering.visibility import VisibilityState, isolate
from handbook_pdf.rendering.capture import capture_current, capture_section
from handbook_pdf.rendering.merger import count_pages, merge
from handbook_pdf.rendering.diagnostics import DiagnosticRecorder
from handbook_pdf.rendering.pipeline import HandbookPipeline, PipelineRun, PipelineState

__all__ = [
    "BrowserSessionManager",
    "RenderSession",
    "ReadinessWaiter",
    "NetworkIdleWaiter",
    "AssetCompleteWaiter",
    "navigate",
    "SectionSet",
    "locate",
    "VisibilityState",
    "isolate",
    "capture_current",
    "capture_section",
    "merge",
    "count_pages",
    "DiagnosticRecorder",
    "HandbookPipeline",
    "PipelineRun",
    "PipelineState",
]
