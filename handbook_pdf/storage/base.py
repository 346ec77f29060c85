"""Base storage interface for generated PDFs

Defines the abstract interface that all output storage implementations must follow.
"""

from abc import ABC, abstractmethod
from typing import List

from handbook_pdf.models import OutputArtifact


class OutputStorageBase(ABC):
    """Abstract base class for output storage implementations"""

    @abstractmethod
    def save_pdf(self, pdf_data: bytes) -> OutputArtifact:
        """
        Persist a merged PDF under a new unique name

        Args:
            pdf_data: Complete PDF bytes

        Returns:
            OutputArtifact with the generated filename and its storage path

        Raises:
            PersistError: If the write fails
        """
        pass

    @abstractmethod
    def get_path(self, filename: str) -> str:
        """
        Resolve a stored filename to its path

        Raises:
            ValueError: If the filename is not a valid output name
        """
        pass

    @abstractmethod
    def exists(self, filename: str) -> bool:
        pass

    @abstractmethod
    def delete_document(self, filename: str) -> bool:
        """
        Delete a stored PDF

        Returns:
            True if deleted, False if not found
        """
        pass

    @abstractmethod
    def list_documents(self) -> List[str]:
        """List stored PDF filenames, oldest first"""
        pass

    @abstractmethod
    def total_size(self) -> int:
        """Total size in bytes of stored PDFs"""
        pass

    @abstractmethod
    def purge(self, age_days: int = 0) -> int:
        """
        Delete PDFs older than the given age

        Args:
            age_days: Delete documents older than this many days. 0 means delete all.

        Returns:
            Number of documents deleted
        """
        pass
