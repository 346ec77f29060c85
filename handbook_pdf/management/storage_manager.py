#!/usr/bin/env python3
"""Output Storage Management CLI

Command-line utility to manage generated handbook PDFs: list them, show
statistics, purge by age and prune by total size.
"""

import argparse
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

from handbook_pdf.config import Config
from handbook_pdf.logger import Logger, session_logger
from handbook_pdf.storage import FileOutputStorage


def resolve_output_dir(cli_dir: Optional[str], data_root: Optional[str] = None) -> str:
    """
    Resolve output directory with priority chain.

    Priority:
    1. CLI --data-root argument (output/ subdirectory)
    2. CLI --output-dir argument
    3. Config defaults (HANDBOOK_PDF_OUTPUT_DIR, then HANDBOOK_PDF_DATA_DIR/output)
    """
    if data_root:
        return str(Path(data_root) / "output")
    if cli_dir:
        return cli_dir
    return str(Config.get_output_dir())


def list_documents(args):
    """List stored PDFs"""
    logger: Logger = session_logger

    output_dir = resolve_output_dir(args.output_dir, args.data_root)

    try:
        storage = FileOutputStorage(output_dir)
        documents = storage.list_documents()

        if not documents:
            logger.info("No handbook PDFs stored", output_dir=output_dir)
            return 0

        logger.info(f"{len(documents)} handbook PDF(s):")

        if args.verbose:
            logger.info(f"{'Filename':<56} {'Size (bytes)':<12} {'Modified'}")
            logger.info("-" * 90)
            for filename in documents:
                stat = (Path(output_dir) / filename).stat()
                modified = datetime.fromtimestamp(stat.st_mtime).isoformat()[:19]
                logger.info(f"{filename:<56} {stat.st_size:<12} {modified}")
        else:
            for filename in documents:
                logger.info(filename)

        return 0

    except Exception as e:
        logger.error("Failed to list PDFs", output_dir=output_dir, error=str(e))
        return 1


def stats(args):
    """Show count and total size of stored PDFs"""
    logger: Logger = session_logger

    output_dir = resolve_output_dir(args.output_dir, args.data_root)

    try:
        storage = FileOutputStorage(output_dir)
        documents = storage.list_documents()
        total_size = storage.total_size()

        logger.info(
            "Output storage",
            documents=len(documents),
            size_bytes=total_size,
            size_mb=f"{total_size / (1024 * 1024):.2f}",
            output_dir=output_dir,
        )
        return 0

    except Exception as e:
        logger.error("Failed to read storage stats", output_dir=output_dir, error=str(e))
        return 1


def purge_documents(args):
    """Purge PDFs older than specified age"""
    logger: Logger = session_logger

    output_dir = resolve_output_dir(args.output_dir, args.data_root)

    try:
        storage = FileOutputStorage(output_dir)

        if args.age_days == 0:
            logger.warning("Purging ALL handbook PDFs", output_dir=output_dir)
            if not args.yes:
                answer = input("Delete every generated PDF? (yes/no): ")
                if answer.strip().lower() != "yes":
                    logger.info("Purge cancelled")
                    return 0

        deleted = storage.purge(age_days=args.age_days)
        logger.info("Purge completed", deleted=deleted, age_days=args.age_days)
        return 0

    except Exception as e:
        logger.error("Purge failed", output_dir=output_dir, error=str(e))
        return 1


def prune_size(args):
    """Delete oldest PDFs until the output directory is under ``args.max_mb``"""
    logger: Logger = session_logger

    output_dir = resolve_output_dir(args.output_dir, args.data_root)

    try:
        storage = FileOutputStorage(output_dir)
        max_bytes = args.max_mb * 1024 * 1024
        before = storage.total_size()
        if before <= max_bytes:
            logger.info("Storage within limit", size_bytes=before, max_mb=args.max_mb)
            return 0

        deleted = storage.prune_size(max_bytes)
        logger.info(
            "Prune completed",
            deleted=deleted,
            before_bytes=before,
            after_bytes=storage.total_size(),
            max_mb=args.max_mb,
        )
        return 0

    except Exception as e:
        logger.error("Prune failed", output_dir=output_dir, error=str(e))
        return 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="handbook-pdf Storage Manager - Manage generated PDFs",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m handbook_pdf.management.storage_manager list --verbose
  python -m handbook_pdf.management.storage_manager stats
  python -m handbook_pdf.management.storage_manager purge --age-days 7
  python -m handbook_pdf.management.storage_manager purge --age-days 0 --yes
  python -m handbook_pdf.management.storage_manager prune --max-mb 512

Environment Variables:
    HANDBOOK_PDF_DATA_DIR     Data root directory (contains output/)
    HANDBOOK_PDF_OUTPUT_DIR   Output directory override
        """,
    )
    parser.add_argument(
        "--data-root",
        type=str,
        default=None,
        help="Data root directory (contains output/). Defaults to the web server's resolution",
    )
    parser.add_argument(
        "--output-dir",
        type=str,
        default=None,
        help="Output directory path (default: HANDBOOK_PDF_OUTPUT_DIR or data/output)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Storage command")

    list_parser = subparsers.add_parser("list", help="List generated PDFs")
    list_parser.add_argument(
        "--verbose", "-v", action="store_true", help="Show detailed information"
    )

    subparsers.add_parser("stats", help="Show storage statistics")

    purge_parser = subparsers.add_parser("purge", help="Purge PDFs older than specified days")
    purge_parser.add_argument(
        "--age-days",
        type=int,
        default=1,
        help="Delete PDFs older than this many days (0 = delete all, default: 1)",
    )
    purge_parser.add_argument(
        "--yes",
        action="store_true",
        help="Do not ask for confirmation when --age-days is 0",
    )

    prune_parser = subparsers.add_parser("prune", help="Prune oldest PDFs down to a size limit")
    prune_parser.add_argument(
        "--max-mb", type=int, default=1024, help="Maximum output size in MiB (default: 1024)"
    )
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    commands = {
        "list": list_documents,
        "stats": stats,
        "purge": purge_documents,
        "prune": prune_size,
    }
    return commands[args.command](args)


if __name__ == "__main__":
    sys.exit(main())
