"""File-based output storage

Writes merged PDFs into a flat directory as ``handbook-<uuid4>.pdf``. The
directory is append-only from the pipeline's point of view: every save picks a
fresh name, so concurrent requests never write the same path. Diagnostic
bundles live in a subdirectory and are ignored by listing and purging.
"""

import os
import re
import tempfile
import time
import uuid
from pathlib import Path
from typing import List, Optional

from handbook_pdf.config import get_default_output_dir
from handbook_pdf.exceptions import PersistError
from handbook_pdf.logger import Logger, session_logger
from handbook_pdf.models import OutputArtifact
from handbook_pdf.storage.base import OutputStorageBase

FILENAME_PREFIX = "handbook-"
FILENAME_PATTERN = re.compile(
    r"^handbook-[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}\.pdf$"
)


class FileOutputStorage(OutputStorageBase):
    """Flat-directory PDF storage with uuid-based filenames"""

    def __init__(self, output_dir: Optional[str] = None, logger: Optional[Logger] = None):
        """
        Initialize file storage

        Args:
            output_dir: Directory to store PDFs. If None, uses configured default
            logger: Logger instance (defaults to the shared console logger)
        """
        if output_dir is None:
            output_dir = get_default_output_dir()
        self.output_dir = Path(output_dir)
        self.logger: Logger = logger or session_logger

        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            self.logger.debug("Output storage initialized", directory=str(self.output_dir))
        except OSError as e:
            self.logger.error("Failed to create output directory", error=str(e))
            raise PersistError(
                f"Failed to create output directory: {e}",
                details={"output_dir": str(self.output_dir)},
            )

    @staticmethod
    def new_filename() -> str:
        return f"{FILENAME_PREFIX}{uuid.uuid4()}.pdf"

    def _validate(self, filename: str) -> None:
        if not FILENAME_PATTERN.match(filename):
            raise ValueError(f"Invalid output filename: {filename}")

    def save_pdf(self, pdf_data: bytes) -> OutputArtifact:
        filename = self.new_filename()
        filepath = self.output_dir / filename

        self.logger.debug("Saving PDF", filename=filename, size=len(pdf_data))

        tmp_path = None
        try:
            # Write then rename so a partially written file is never visible under its final name
            fd, tmp_path = tempfile.mkstemp(dir=self.output_dir, suffix=".tmp")
            with os.fdopen(fd, "wb") as f:
                f.write(pdf_data)
            os.replace(tmp_path, filepath)
        except OSError as e:
            self.logger.error("Failed to save PDF", filename=filename, error=str(e))
            if tmp_path and os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise PersistError(
                f"Failed to save PDF: {e}", details={"filename": filename}
            )

        self.logger.info("PDF saved", filename=filename, path=str(filepath), size=len(pdf_data))
        return OutputArtifact(filename=filename, filepath=str(filepath))

    def get_path(self, filename: str) -> str:
        self._validate(filename)
        return str(self.output_dir / filename)

    def exists(self, filename: str) -> bool:
        try:
            self._validate(filename)
        except ValueError:
            return False
        return (self.output_dir / filename).is_file()

    def delete_document(self, filename: str) -> bool:
        try:
            self._validate(filename)
        except ValueError:
            self.logger.warning("Invalid filename for deletion", filename=filename)
            return False

        filepath = self.output_dir / filename
        if not filepath.exists():
            return False
        filepath.unlink()
        self.logger.info("PDF deleted", filename=filename)
        return True

    def _pdf_files(self) -> List[Path]:
        files = [
            path
            for path in self.output_dir.iterdir()
            if path.is_file() and FILENAME_PATTERN.match(path.name)
        ]
        return sorted(files, key=lambda path: path.stat().st_mtime)

    def list_documents(self) -> List[str]:
        return [path.name for path in self._pdf_files()]

    def total_size(self) -> int:
        return sum(path.stat().st_size for path in self._pdf_files())

    def purge(self, age_days: int = 0) -> int:
        cutoff = time.time() - age_days * 86400
        deleted = 0
        for path in self._pdf_files():
            if age_days > 0 and path.stat().st_mtime >= cutoff:
                continue
            try:
                path.unlink()
                deleted += 1
            except OSError as e:
                self.logger.warning("Failed to delete PDF", filename=path.name, error=str(e))

        self.logger.info("Purge completed", deleted=deleted, age_days=age_days)
        return deleted

    def prune_size(self, max_bytes: int) -> int:
        """
        Delete oldest PDFs until the stored total is at or below ``max_bytes``

        Returns:
            Number of documents deleted
        """
        files = self._pdf_files()
        total = sum(path.stat().st_size for path in files)
        deleted = 0
        for path in files:
            if total <= max_bytes:
                break
            size = path.stat().st_size
            try:
                path.unlink()
            except OSError as e:
                self.logger.warning("Failed to delete PDF", filename=path.name, error=str(e))
                continue
            total -= size
            deleted += 1

        self.logger.info("Size prune completed", deleted=deleted, remaining_bytes=total)
        return deleted
