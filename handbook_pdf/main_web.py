import argparse
import sys

import uvicorn

from handbook_pdf.config import DEFAULT_WEB_HOST, Config
from handbook_pdf.config_docs import get_config_summary
from handbook_pdf.exceptions import HandbookPdfError
from handbook_pdf.logger import Logger, session_logger
from handbook_pdf.storage import FileOutputStorage
from handbook_pdf.web_server import HandbookWebServer

logger: Logger = session_logger

if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="handbook-pdf Web Server - handbook PDF REST API")
    parser.add_argument(
        "--host",
        type=str,
        default=DEFAULT_WEB_HOST,
        help=f"Host address to bind to (default: {DEFAULT_WEB_HOST})",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=Config.get_web_port(),
        help="Port number to listen on (default: 3000, or HANDBOOK_PDF_WEB_PORT / PORT env var)",
    )
    parser.add_argument(
        "--output-dir",
        type=str,
        default=None,
        help="Directory for generated PDFs (default: HANDBOOK_PDF_OUTPUT_DIR or data/output)",
    )
    args = parser.parse_args()

    try:
        storage = FileOutputStorage(args.output_dir)
        server = HandbookWebServer(storage=storage)
    except HandbookPdfError as e:
        logger.error("FATAL: Server initialization failed", error_code=e.code, error=e.message)
        sys.exit(1)

    logger.info("Configuration", **get_config_summary())

    try:
        logger.info("Starting web server", host=args.host, port=args.port)
        uvicorn.run(server.app, host=args.host, port=args.port)
        logger.info("Web server shutdown complete")
    except KeyboardInterrupt:
        logger.info("Web server stopped by user")
        sys.exit(0)
    except Exception as e:
        logger.error("Failed to start web server", error=str(e), error_type=type(e).__name__)
        sys.exit(1)
