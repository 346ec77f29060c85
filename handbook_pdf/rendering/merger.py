"""Concatenate single-page PDF fragments with pypdf."""

from io import BytesIO
from typing import Sequence

from pypdf import PdfReader, PdfWriter

from handbook_pdf.exceptions import MergeError


def count_pages(pdf_data: bytes) -> int:
    """Number of pages in a PDF buffer."""
    return len(PdfReader(BytesIO(pdf_data)).pages)


def merge(fragments: Sequence[bytes]) -> bytes:
    """
    Append the single page of each fragment, in order, to a new document.

    Raises:
        MergeError: If there are no fragments, or any fragment is not a
            readable single-page PDF
    """
    if not fragments:
        raise MergeError("No fragments to merge")

    writer = PdfWriter()
    for index, fragment in enumerate(fragments):
        if not isinstance(fragment, (bytes, bytearray)) or not fragment:
            raise MergeError(f"Fragment {index} is empty or not a byte buffer", index)
        try:
            reader = PdfReader(BytesIO(fragment))
            page_count = len(reader.pages)
        except Exception as e:
            raise MergeError(f"Fragment {index} is not a valid PDF: {e}", index) from e
        if page_count != 1:
            raise MergeError(f"Fragment {index} has {page_count} pages, expected 1", index)
        writer.add_page(reader.pages[0])

    output = BytesIO()
    try:
        writer.write(output)
    except Exception as e:
        raise MergeError(f"Failed to write merged PDF: {e}") from e
    return output.getvalue()
