"""Centralized configuration documentation and defaults for handbook-pdf.

This module provides an overview of all configuration options and their
environment variable mappings.
"""

# =============================================================================
# ENVIRONMENT VARIABLES REFERENCE
# =============================================================================

# Data & Storage
# --------------
# HANDBOOK_PDF_DATA_DIR: Base directory for all generated data (default: ./data)
# HANDBOOK_PDF_OUTPUT_DIR: Where merged PDFs are written (default: {DATA_DIR}/output)
#   Diagnostic bundles land in {OUTPUT_DIR}/diagnostics/<request_id>/
#
# Web Server
# ----------
# HANDBOOK_PDF_WEB_PORT / PORT: Web server port (default: 3000)
#
# Rendering
# ---------
# HANDBOOK_PDF_NAVIGATION_TIMEOUT_MS: Navigation/readiness ceiling (default: 90000)
# HANDBOOK_PDF_READINESS_STRATEGY: "network-idle" or "asset-complete" (default: asset-complete)
# HANDBOOK_PDF_READINESS_RETRIES: Extra readiness attempts before failing (default: 2)
# HANDBOOK_PDF_SETTLE_DELAY_MS: Pause after each visibility change (default: 250)
# HANDBOOK_PDF_BLOCKED_RESOURCES: Comma-separated resource types to abort, e.g. "media,websocket"
# HANDBOOK_PDF_CHROMIUM_PATH: Explicit Chromium executable (default: Playwright's bundled build)
# HANDBOOK_PDF_CONTAINER_SELECTOR / HANDBOOK_PDF_ITEM_SELECTOR: Section selectors
# HANDBOOK_PDF_KEEP_DIAGNOSTICS: Keep the diagnostic bundle for successful runs too
# HANDBOOK_PDF_DIAGNOSTIC_TIMEOUT_MS: Ceiling for each diagnostic screenshot/HTML snapshot (default: 5000)
#
# Housekeeping
# ------------
# HANDBOOK_PDF_HOUSEKEEPING_INTERVAL_MINS: Check interval in minutes (default: 60)
# HANDBOOK_PDF_MAX_STORAGE_MB: Max output size in MiB (default: 1024)
# HANDBOOK_PDF_MAX_AGE_DAYS: Remove PDFs older than this many days (default: 1)
#
# Development
# -----------
# HANDBOOK_PDF_LOG_LEVEL: Logging verbosity (default: INFO)
# HANDBOOK_PDF_BROWSER_TESTS: Set to 1 to run tests that launch a real Chromium

# =============================================================================
# CONFIGURATION DEFAULTS
# =============================================================================

DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_HOUSEKEEPING_INTERVAL_MINS = 60
DEFAULT_MAX_STORAGE_MB = 1024
DEFAULT_MAX_AGE_DAYS = 1

# =============================================================================
# CONFIGURATION HELPER FUNCTIONS
# =============================================================================


def get_config_summary() -> dict:
    """Get a summary of current configuration from environment.

    Returns:
        Dictionary with current configuration values
    """
    import os

    from handbook_pdf.config import Config
    from handbook_pdf.models import RenderOptions

    options = RenderOptions.from_env()
    return {
        "data_dir": str(Config.get_data_dir()),
        "output_dir": str(Config.get_output_dir()),
        "diagnostics_dir": str(Config.get_diagnostics_dir()),
        "web_port": Config.get_web_port(),
        "log_level": os.environ.get("HANDBOOK_PDF_LOG_LEVEL", DEFAULT_LOG_LEVEL),
        "readiness_strategy": options.readiness_strategy.value,
        "navigation_timeout_ms": options.navigation_timeout_ms,
        "section_settle_delay_ms": options.section_settle_delay_ms,
        "blocked_resource_types": sorted(options.blocked_resource_types),
        "test_mode": Config.is_test_mode(),
    }
