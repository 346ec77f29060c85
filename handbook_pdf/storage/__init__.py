"""Output storage module

Provides the abstract base class and the file implementation used for
merged handbook PDFs.
"""

from typing import Optional

from handbook_pdf.storage.base import OutputStorageBase
from handbook_pdf.storage.file_storage import FileOutputStorage

# Global storage instance
_storage: Optional[OutputStorageBase] = None


def get_storage(output_dir: Optional[str] = None) -> OutputStorageBase:
    """
    Get or create the global storage instance

    Args:
        output_dir: Output directory (only used on first call).
                    If None, uses configured default from handbook_pdf.config
    """
    global _storage
    if _storage is None:
        _storage = FileOutputStorage(output_dir)
    return _storage


def set_storage(storage: Optional[OutputStorageBase]) -> None:
    """Set a custom storage implementation or reset to None"""
    global _storage
    _storage = storage


def reset_storage() -> None:
    """Reset the global storage instance (useful for testing)"""
    global _storage
    _storage = None


__all__ = [
    "OutputStorageBase",
    "FileOutputStorage",
    "get_storage",
    "set_storage",
    "reset_storage",
]
