"""Housekeeper service: periodic output pruning for handbook-pdf.

Runs in a loop, removing generated PDFs older than a maximum age and then
pruning the oldest remaining ones to keep the output directory under a
configurable size limit.

Environment Variables:
    HANDBOOK_PDF_HOUSEKEEPING_INTERVAL_MINS  Check interval in minutes (default: 60)
    HANDBOOK_PDF_MAX_STORAGE_MB              Max output size in MiB   (default: 1024)
    HANDBOOK_PDF_MAX_AGE_DAYS                Max PDF age in days      (default: 1)
    HANDBOOK_PDF_OUTPUT_DIR                  Output directory override
"""

import os
import time
from argparse import Namespace

from handbook_pdf.config_docs import (
    DEFAULT_HOUSEKEEPING_INTERVAL_MINS,
    DEFAULT_MAX_AGE_DAYS,
    DEFAULT_MAX_STORAGE_MB,
)
from handbook_pdf.logger import session_logger as logger
from handbook_pdf.management.storage_manager import prune_size, purge_documents


def _parse_positive_int_env(name: str, default: int, minimum: int = 1) -> int:
    """Integer env var >= ``minimum``; anything else falls back to ``default``."""
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default

    try:
        value = int(raw)
        if value < minimum:
            raise ValueError(f"must be >= {minimum}")
        return value
    except ValueError:
        logger.warning(
            "housekeeper.env_ignored",
            variable=name,
            provided_value=raw,
            default_value=default,
        )
        return default


def run_cycle() -> int:
    """Run one purge + prune pass. Returns the worst command status."""
    max_mb = _parse_positive_int_env("HANDBOOK_PDF_MAX_STORAGE_MB", DEFAULT_MAX_STORAGE_MB)
    max_age_days = _parse_positive_int_env("HANDBOOK_PDF_MAX_AGE_DAYS", DEFAULT_MAX_AGE_DAYS)
    output_dir = os.environ.get("HANDBOOK_PDF_OUTPUT_DIR")

    logger.info(
        "housekeeper.output_cycle_start",
        max_mb=max_mb,
        max_age_days=max_age_days,
        output_dir=output_dir,
    )

    purge_args = Namespace(output_dir=output_dir, data_root=None, age_days=max_age_days, yes=True)
    prune_args = Namespace(output_dir=output_dir, data_root=None, max_mb=max_mb)
    return max(purge_documents(purge_args), prune_size(prune_args))


def main() -> None:
    logger.info("Starting handbook-pdf housekeeper service")

    while True:
        interval_mins = _parse_positive_int_env(
            "HANDBOOK_PDF_HOUSEKEEPING_INTERVAL_MINS", DEFAULT_HOUSEKEEPING_INTERVAL_MINS
        )

        try:
            result = run_cycle()
            if result != 0:
                logger.warning("housekeeper.output_cycle_incomplete", status=result)
            else:
                logger.info("housekeeper.output_cycle_done")
        except Exception as e:
            logger.error("housekeeper.output_cycle_error", error=str(e), cause=type(e).__name__)

        sleep_seconds = max(1, interval_mins * 60)
        logger.info("housekeeper.waiting", seconds=sleep_seconds)
        time.sleep(sleep_seconds)


if __name__ == "__main__":
    main()
