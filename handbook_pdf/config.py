"""Runtime configuration for handbook-pdf.

Directories are resolved from environment variables on every call so tests
(and long-running processes) always see the current values. Test mode pins
the data directory to a temporary location.
"""

import os
from pathlib import Path
from typing import Optional

PROJECT_ROOT = Path(__file__).parent.parent

DEFAULT_WEB_PORT = 3000
DEFAULT_WEB_HOST = "0.0.0.0"
DIAGNOSTICS_SUBDIR = "diagnostics"


class Config:
    """Resolves data, output and diagnostics directories."""

    _test_data_dir: Optional[Path] = None

    @classmethod
    def set_test_mode(cls, data_dir: Path) -> None:
        """Route all directories under ``data_dir`` until ``clear_test_mode``."""
        cls._test_data_dir = Path(data_dir)

    @classmethod
    def clear_test_mode(cls) -> None:
        cls._test_data_dir = None

    @classmethod
    def is_test_mode(cls) -> bool:
        return cls._test_data_dir is not None

    @classmethod
    def get_data_dir(cls) -> Path:
        if cls._test_data_dir is not None:
            return cls._test_data_dir
        env_dir = os.environ.get("HANDBOOK_PDF_DATA_DIR")
        if env_dir:
            return Path(env_dir)
        return PROJECT_ROOT / "data"

    @classmethod
    def get_output_dir(cls) -> Path:
        if cls._test_data_dir is None:
            env_dir = os.environ.get("HANDBOOK_PDF_OUTPUT_DIR")
            if env_dir:
                return Path(env_dir)
        return cls.get_data_dir() / "output"

    @classmethod
    def get_diagnostics_dir(cls) -> Path:
        return cls.get_output_dir() / DIAGNOSTICS_SUBDIR

    @classmethod
    def get_web_port(cls) -> int:
        raw = os.environ.get("HANDBOOK_PDF_WEB_PORT") or os.environ.get("PORT")
        return int(raw) if raw else DEFAULT_WEB_PORT


def get_default_output_dir() -> str:
    return str(Config.get_output_dir())


def get_default_diagnostics_dir() -> str:
    return str(Config.get_diagnostics_dir())
