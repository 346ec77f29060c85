"""Per-request diagnostic bundle.

One ``DiagnosticRecorder`` is created for each generation request and
discarded with it. It buffers console and network events from the page and
writes screenshots, HTML snapshots and logs into
``<diagnostics_dir>/<request_id>/``. Every write is best-effort: failures are
logged and swallowed so diagnostics never replace the pipeline's own error.
"""

import asyncio
import json
import shutil
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, List, Optional

from playwright.async_api import ConsoleMessage, Page, Request, Response

from handbook_pdf.exceptions import HandbookPdfError
from handbook_pdf.logger import Logger, session_logger

MAX_EVENTS = 1000
DEFAULT_SNAPSHOT_TIMEOUT_MS = 5_000


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class DiagnosticRecorder:
    """Collects forensic artifacts for one request."""

    def __init__(
        self,
        base_dir: str,
        request_id: str,
        logger: Optional[Logger] = None,
        enabled: bool = True,
        persist_checkpoints: bool = False,
        snapshot_timeout_ms: int = DEFAULT_SNAPSHOT_TIMEOUT_MS,
    ):
        """
        Args:
            base_dir: Diagnostics root; the bundle goes into a request_id subdirectory
            request_id: Identifier of the request being observed
            logger: Logger instance
            enabled: When False every method is a no-op
            persist_checkpoints: Write checkpoint screenshots/HTML as they happen
                instead of only noting them in the timeline
            snapshot_timeout_ms: Ceiling for each screenshot or HTML snapshot
        """
        self.directory = Path(base_dir) / request_id
        self.request_id = request_id
        self.logger: Logger = logger or session_logger
        self.enabled = enabled
        self.persist_checkpoints = persist_checkpoints
        self.snapshot_timeout_ms = snapshot_timeout_ms
        self.console: List[Dict[str, Any]] = []
        self.network: List[Dict[str, Any]] = []
        self.timeline: List[Dict[str, Any]] = []
        self.written: List[str] = []

    # ------------------------------------------------------------------
    # Event capture
    # ------------------------------------------------------------------

    def attach(self, page: Optional[Page]) -> None:
        if not self.enabled or page is None:
            return
        page.on("console", self._on_console)
        page.on("pageerror", self._on_page_error)
        page.on("request", self._on_request)
        page.on("response", self._on_response)
        page.on("requestfailed", self._on_request_failed)

    def _append(self, bucket: List[Dict[str, Any]], entry: Dict[str, Any]) -> None:
        if len(bucket) < MAX_EVENTS:
            entry["time"] = _now()
            bucket.append(entry)

    def _on_console(self, message: ConsoleMessage) -> None:
        self._append(self.console, {"type": message.type, "text": message.text})

    def _on_page_error(self, error: Any) -> None:
        self._append(self.console, {"type": "pageerror", "text": str(error)})

    def _on_request(self, request: Request) -> None:
        self._append(
            self.network,
            {
                "event": "request",
                "method": request.method,
                "url": request.url,
                "resource_type": request.resource_type,
            },
        )

    def _on_response(self, response: Response) -> None:
        self._append(
            self.network, {"event": "response", "status": response.status, "url": response.url}
        )

    def _on_request_failed(self, request: Request) -> None:
        self._append(
            self.network,
            {"event": "requestfailed", "url": request.url, "failure": request.failure},
        )

    # ------------------------------------------------------------------
    # Writers
    # ------------------------------------------------------------------

    def _ensure_dir(self) -> bool:
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            return True
        except OSError as e:
            self.logger.warning(
                "Diagnostic directory unavailable", path=str(self.directory), error=str(e)
            )
            return False

    def _write(self, name: str, data: Any) -> None:
        if not self._ensure_dir():
            return
        path = self.directory / name
        try:
            if isinstance(data, bytes):
                path.write_bytes(data)
            elif isinstance(data, str):
                path.write_text(data, encoding="utf-8")
            else:
                path.write_text(json.dumps(data, indent=2, default=str), encoding="utf-8")
            self.written.append(name)
        except (OSError, TypeError, ValueError) as e:
            self.logger.warning("Diagnostic write failed", artifact=name, error=str(e))

    async def _snapshot(self, name: str, page: Optional[Page]) -> None:
        if page is None:
            return
        await self._safe(
            f"{name}.png",
            lambda: page.screenshot(full_page=True, timeout=self.snapshot_timeout_ms),
        )
        await self._safe(f"{name}.html", page.content)

    async def _safe(self, artifact: str, produce: Callable[[], Awaitable[Any]]) -> None:
        try:
            data = await asyncio.wait_for(produce(), timeout=self.snapshot_timeout_ms / 1000)
        except Exception as e:
            self.logger.warning("Diagnostic capture failed", artifact=artifact, error=str(e))
            return
        self._write(artifact, data)

    # ------------------------------------------------------------------
    # Checkpoints
    # ------------------------------------------------------------------

    async def checkpoint(self, name: str, page: Optional[Page], **context: Any) -> None:
        """Note a pipeline checkpoint; snapshot the page when persisting eagerly."""
        if not self.enabled:
            return
        self.timeline.append({"checkpoint": name, "time": _now(), **context})
        if self.persist_checkpoints:
            await self._snapshot(name, page)

    async def record_failure(self, error: HandbookPdfError, page: Optional[Page]) -> None:
        """Write the error, a final page snapshot and all buffered logs."""
        if not self.enabled:
            return
        self.timeline.append({"checkpoint": "failure", "time": _now(), "error_code": error.code})
        self._write("error.json", {"request_id": self.request_id, **error.to_dict()})
        await self._snapshot("failure", page)
        self.flush()
        self.logger.info(
            "Diagnostic bundle written", path=str(self.directory), artifacts=len(self.written)
        )

    def flush(self) -> None:
        if not self.enabled:
            return
        console_lines = [f"{e['time']} [{e['type']}] {e['text']}" for e in self.console]
        self._write("console.log", "\n".join(console_lines) + ("\n" if console_lines else ""))
        self._write("network.json", self.network)
        self._write("timeline.json", self.timeline)

    def discard(self) -> None:
        """Remove anything written for this request."""
        if self.directory.exists():
            shutil.rmtree(self.directory, ignore_errors=True)
        self.written.clear()
