"""Handbook rendering pipeline.

Sequences session acquisition, navigation, section discovery, per-section
capture, merging and persistence for one request:

    IDLE -> SESSION_ACQUIRED -> NAVIGATED -> SECTIONS_LOCATED
         -> CAPTURING -> MERGED -> PERSISTED -> DONE

Any failure moves the run to FAILED. Diagnostics are recorded before the
browser session is released, and the session is released on every path.
A request either yields a complete, ordered PDF or raises one classified
``HandbookPdfError``.
"""

import asyncio
from enum import Enum
from typing import List, Optional

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from handbook_pdf.config import DIAGNOSTICS_SUBDIR, get_default_diagnostics_dir
from handbook_pdf.exceptions import (
    CaptureError,
    HandbookPdfError,
    LaunchError,
    MergeError,
    NavigationTimeoutError,
    PageLoadError,
)
from handbook_pdf.logger import Logger, session_logger
from handbook_pdf.models import GenerationRequest, OutputArtifact, RenderOptions
from handbook_pdf.rendering.capture import capture_section
from handbook_pdf.rendering.diagnostics import DiagnosticRecorder
from handbook_pdf.rendering.merger import count_pages, merge
from handbook_pdf.rendering.readiness import ReadinessWaiter, navigate
from handbook_pdf.rendering.sections import locate
from handbook_pdf.rendering.session import BrowserSessionManager, RenderSession
from handbook_pdf.storage import FileOutputStorage, OutputStorageBase, get_storage


class PipelineState(str, Enum):
    IDLE = "idle"
    SESSION_ACQUIRED = "session_acquired"
    NAVIGATED = "navigated"
    SECTIONS_LOCATED = "sections_located"
    CAPTURING = "capturing"
    MERGED = "merged"
    PERSISTED = "persisted"
    DONE = "done"
    FAILED = "failed"


def classify_error(error: BaseException, state: PipelineState, url: str) -> HandbookPdfError:
    """Map any exception raised while in ``state`` onto the error taxonomy."""
    if isinstance(error, HandbookPdfError):
        return error

    details = {"cause": type(error).__name__, "state": state.value}
    message = error.message if isinstance(error, PlaywrightError) else str(error)

    if state == PipelineState.IDLE:
        return LaunchError(f"Browser launch failed: {message}", details=details)
    if isinstance(error, (PlaywrightTimeoutError, asyncio.TimeoutError)):
        if state == PipelineState.SESSION_ACQUIRED:
            return NavigationTimeoutError(f"Timed out loading page: {message}", **details)
        return CaptureError(f"Timed out while rendering: {message}", details=details)
    if state == PipelineState.SESSION_ACQUIRED:
        error_obj = PageLoadError(url, reason=message)
        error_obj.details.update(details)
        return error_obj
    return CaptureError(f"Rendering failed: {message}", details=details)


class PipelineRun:
    """State of one generation request. Never shared between requests."""

    def __init__(
        self,
        request: GenerationRequest,
        options: RenderOptions,
        session_manager: BrowserSessionManager,
        storage: OutputStorageBase,
        recorder: DiagnosticRecorder,
        logger: Logger,
        waiter: Optional[ReadinessWaiter] = None,
    ):
        self.request = request
        self.options = options
        self.session_manager = session_manager
        self.storage = storage
        self.recorder = recorder
        self.logger = logger
        self.waiter = waiter
        self.state = PipelineState.IDLE
        self.history: List[PipelineState] = [PipelineState.IDLE]
        self.section_count = 0
        self.captured = 0
        self.artifact: Optional[OutputArtifact] = None
        self.error: Optional[HandbookPdfError] = None

    def _transition(self, state: PipelineState) -> None:
        self.logger.debug(
            "Pipeline transition",
            request_id=self.request.request_id,
            from_state=self.state.value,
            to_state=state.value,
        )
        self.state = state
        self.history.append(state)

    async def execute(self) -> OutputArtifact:
        """
        Run the pipeline to completion.

        Returns:
            OutputArtifact describing the persisted PDF

        Raises:
            HandbookPdfError: The classified failure; no artifact is written
        """
        request = self.request
        options = self.options
        session: Optional[RenderSession] = None

        self.logger.info(
            "Handbook generation started", request_id=request.request_id, url=request.source_url
        )
        try:
            session = await self.session_manager.acquire(options)
            self._transition(PipelineState.SESSION_ACQUIRED)
            self.recorder.attach(session.page)

            await navigate(session, request.source_url, options, self.logger, self.waiter)
            self._transition(PipelineState.NAVIGATED)
            await self.recorder.checkpoint("loaded", session.page, url=request.source_url)

            sections = await locate(
                session, options.container_selector, options.item_selector, self.logger
            )
            self.section_count = len(sections)
            self._transition(PipelineState.SECTIONS_LOCATED)

            self._transition(PipelineState.CAPTURING)
            fragments: List[bytes] = []
            for index in range(self.section_count):
                fragments.append(
                    await capture_section(session, sections, index, options, self.logger)
                )
                self.captured = index + 1
                if options.diagnose_sections:
                    await self.recorder.checkpoint(f"section-{index}", session.page, index=index)

            merged = merge(fragments)
            page_count = count_pages(merged)
            if page_count != self.section_count:
                raise MergeError(
                    f"Merged document has {page_count} pages for {self.section_count} sections"
                )
            self._transition(PipelineState.MERGED)

            self.artifact = self.storage.save_pdf(merged)
            self._transition(PipelineState.PERSISTED)
        except Exception as e:
            error = classify_error(e, self.state, request.source_url)
            error.details.setdefault("request_id", request.request_id)
            if self.recorder.enabled:
                error.details.setdefault("diagnostics", str(self.recorder.directory))
            self.error = error
            self._transition(PipelineState.FAILED)
            self.logger.error(
                "Handbook generation failed",
                request_id=request.request_id,
                error_code=error.code,
                error=error.message,
            )
            await self.recorder.record_failure(error, session.page if session else None)
            if error is e:
                raise
            raise error from e
        finally:
            if session is not None:
                await self.session_manager.release(session)

        if self.options.keep_diagnostics_on_success:
            self.recorder.flush()
        else:
            self.recorder.discard()

        self._transition(PipelineState.DONE)
        self.logger.info(
            "Handbook generation finished",
            request_id=request.request_id,
            sections=self.section_count,
            filename=self.artifact.filename,
        )
        return self.artifact


class HandbookPipeline:
    """Entry point of the core: ``generate(source_url) -> OutputArtifact``.

    Safe to share between concurrent requests: every call gets its own
    ``PipelineRun``, browser session and diagnostic recorder.
    """

    def __init__(
        self,
        options: Optional[RenderOptions] = None,
        storage: Optional[OutputStorageBase] = None,
        session_manager: Optional[BrowserSessionManager] = None,
        logger: Optional[Logger] = None,
        diagnostics_dir: Optional[str] = None,
        waiter: Optional[ReadinessWaiter] = None,
    ):
        """
        Args:
            options: Render options (defaults to ``RenderOptions.from_env()``)
            storage: Output storage (defaults to the global storage instance)
            session_manager: Browser session manager
            logger: Logger instance
            diagnostics_dir: Root for diagnostic bundles (defaults to the
                diagnostics subdirectory of a file storage's output dir)
            waiter: Readiness waiter overriding ``options.readiness_strategy``
        """
        self.logger: Logger = logger or session_logger
        self.options = options or RenderOptions.from_env()
        self.storage = storage or get_storage()
        self.session_manager = session_manager or BrowserSessionManager(self.logger)
        if diagnostics_dir is None:
            if isinstance(self.storage, FileOutputStorage):
                diagnostics_dir = str(self.storage.output_dir / DIAGNOSTICS_SUBDIR)
            else:
                diagnostics_dir = get_default_diagnostics_dir()
        self.diagnostics_dir = diagnostics_dir
        self.waiter = waiter

    def start(self, source_url: str) -> PipelineRun:
        request = GenerationRequest(source_url=source_url)
        recorder = DiagnosticRecorder(
            self.diagnostics_dir,
            request.request_id,
            logger=self.logger,
            enabled=self.options.diagnostics_enabled,
            persist_checkpoints=self.options.keep_diagnostics_on_success
            or self.options.diagnose_sections,
            snapshot_timeout_ms=self.options.diagnostic_timeout_ms,
        )
        return PipelineRun(
            request,
            self.options,
            self.session_manager,
            self.storage,
            recorder,
            self.logger,
            self.waiter,
        )

    async def generate(self, source_url: str) -> OutputArtifact:
        return await self.start(source_url).execute()
