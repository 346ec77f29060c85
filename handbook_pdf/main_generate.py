"""Generate a handbook PDF from the command line.

Prints the resulting artifact (or the classified error) as JSON on stdout.
"""

import argparse
import asyncio
import json
import sys

from handbook_pdf.exceptions import HandbookPdfError
from handbook_pdf.logger import Logger, session_logger
from handbook_pdf.models import ErrorResponse, ReadinessStrategy, RenderOptions
from handbook_pdf.rendering import HandbookPipeline
from handbook_pdf.storage import FileOutputStorage

logger: Logger = session_logger


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Render a handbook page into a single PDF")
    parser.add_argument("url", help="Handbook page URL")
    parser.add_argument("--output-dir", type=str, default=None, help="Directory for the PDF")
    parser.add_argument(
        "--readiness",
        choices=[strategy.value for strategy in ReadinessStrategy],
        default=None,
        help="Readiness strategy (default: HANDBOOK_PDF_READINESS_STRATEGY or asset-complete)",
    )
    parser.add_argument("--timeout-ms", type=int, default=None, help="Navigation timeout")
    parser.add_argument("--settle-ms", type=int, default=None, help="Settle delay per section")
    parser.add_argument(
        "--block",
        type=str,
        default=None,
        help="Comma-separated resource types to block (e.g. media,websocket)",
    )
    parser.add_argument(
        "--keep-diagnostics",
        action="store_true",
        help="Keep the diagnostic bundle even when generation succeeds",
    )
    return parser


def options_from_args(args: argparse.Namespace) -> RenderOptions:
    overrides = {}
    if args.readiness:
        overrides["readiness_strategy"] = args.readiness
    if args.timeout_ms is not None:
        overrides["navigation_timeout_ms"] = args.timeout_ms
    if args.settle_ms is not None:
        overrides["section_settle_delay_ms"] = args.settle_ms
    if args.block:
        overrides["blocked_resource_types"] = args.block
    if args.keep_diagnostics:
        overrides["keep_diagnostics_on_success"] = True
    return RenderOptions.from_env(**overrides)


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    try:
        options = options_from_args(args)
        pipeline = HandbookPipeline(options=options, storage=FileOutputStorage(args.output_dir))
        artifact = asyncio.run(pipeline.generate(args.url))
    except HandbookPdfError as e:
        error = ErrorResponse(error_code=e.code, message=e.message, details=e.details)
        print(json.dumps(error.model_dump(mode="json"), indent=2, default=str))
        return 1

    print(json.dumps(artifact.model_dump(), indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
