"""handbook-pdf Web Server - REST API for handbook PDF generation.

Endpoints:
- GET /ping                         Health check
- GET /print/handbook?targetUrl=... Generate a PDF and return its download link
- GET /output/{filename}            Download a generated PDF

The core pipeline's error kind is logged but never exposed to callers.
"""

from datetime import datetime
from typing import Optional

from fastapi import FastAPI, HTTPException, Query
from fastapi.responses import FileResponse, JSONResponse

from handbook_pdf.exceptions import HandbookPdfError
from handbook_pdf.logger import Logger, session_logger
from handbook_pdf.models import HandbookLinkOutput, RenderOptions
from handbook_pdf.rendering import HandbookPipeline
from handbook_pdf.storage import OutputStorageBase, get_storage

PRINT_MARKER = "print=true"


class HandbookWebServer:
    """FastAPI web server wrapping the handbook rendering pipeline."""

    def __init__(
        self,
        pipeline: Optional[HandbookPipeline] = None,
        storage: Optional[OutputStorageBase] = None,
        options: Optional[RenderOptions] = None,
        logger: Optional[Logger] = None,
    ):
        """
        Initialize the web server.

        Args:
            pipeline: Pipeline used for generation (built from storage/options if None)
            storage: Output storage serving generated files
            options: Render options for a default pipeline
            logger: Logger instance
        """
        self.app = FastAPI(
            title="handbook-pdf", description="Render handbook pages into downloadable PDFs"
        )
        self.logger: Logger = logger or session_logger
        self.storage = storage or (pipeline.storage if pipeline else get_storage())
        self.pipeline = pipeline or HandbookPipeline(
            options=options, storage=self.storage, logger=self.logger
        )

        self.logger.info(
            "handbook-pdf web server initialized",
            readiness=self.pipeline.options.readiness_strategy.value,
            navigation_timeout_ms=self.pipeline.options.navigation_timeout_ms,
        )
        self._setup_routes()

    def _setup_routes(self):
        """Set up all API routes."""

        @self.app.get("/ping")
        async def ping():
            """Health check endpoint."""
            current_time = datetime.now().isoformat()
            self.logger.debug("Ping request received", timestamp=current_time)
            return JSONResponse(
                content={"status": "ok", "timestamp": current_time, "service": "handbook-pdf"}
            )

        @self.app.get("/print/handbook")
        async def print_handbook(target_url: Optional[str] = Query(default=None, alias="targetUrl")):
            """Render the handbook at ``targetUrl`` and return a link to the PDF."""
            if not target_url or PRINT_MARKER not in target_url:
                self.logger.warning("Rejected handbook request", target_url=target_url)
                return JSONResponse(status_code=400, content={"error": "Invalid target URL."})

            try:
                artifact = await self.pipeline.generate(target_url)
            except HandbookPdfError as e:
                self.logger.error(
                    "PDF generation error",
                    target_url=target_url,
                    error_code=e.code,
                    error=e.message,
                    request_id=e.details.get("request_id"),
                )
                return JSONResponse(status_code=500, content={"error": "PDF generation failed."})

            output = HandbookLinkOutput(url=f"/output/{artifact.filename}")
            return JSONResponse(content=output.model_dump())

        @self.app.get("/output/{filename}")
        async def download(filename: str):
            """Serve a generated PDF."""
            if not self.storage.exists(filename):
                raise HTTPException(status_code=404, detail="Not found")
            return FileResponse(
                self.storage.get_path(filename), media_type="application/pdf", filename=filename
            )
