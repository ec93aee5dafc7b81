"""Utilities for extracting text from résumé PDF files."""
from __future__ import annotations

import io
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Iterable, Union

MAX_PDF_BYTES = 5 * 1024 * 1024
MIN_EXTRACTED_CHARS = 50


class PDFExtractionError(RuntimeError):
    """Raised when a PDF file cannot be processed.

    These failures come from the document itself (encrypted, scanned,
    corrupt or oversized) and should not be retried automatically.
    """


@dataclass(frozen=True)
class ExtractedDocument:
    """Plain text pulled out of an uploaded PDF."""

    text: str
    char_count: int
    page_count: int

    def as_dict(self) -> dict[str, object]:
        return {"text": self.text, "charCount": self.char_count, "pageCount": self.page_count}


def _coerce_path(path: Union[str, Path]) -> Path:
    if isinstance(path, Path):
        return path
    return Path(path)


def _read_pdf(stream: BinaryIO, source: str) -> tuple[str, int]:
    try:
        from pdfminer.high_level import extract_text  # type: ignore
        from pdfminer.pdfpage import PDFPage  # type: ignore
    except Exception as exc:  # pragma: no cover - import error is environment specific
        raise PDFExtractionError(
            "Failed to import pdfminer.six. Install it with 'pip install pdfminer.six'."
        ) from exc

    try:
        page_count = sum(1 for _ in PDFPage.get_pages(stream, check_extractable=False))
        stream.seek(0)
        text = extract_text(stream)
    except Exception as exc:
        raise PDFExtractionError(
            f"Failed to extract text from {source}. It may be encrypted or corrupt."
        ) from exc

    return text, page_count


def extract_text_from_pdf(path: Union[str, Path]) -> str:
    """Extract raw text from a PDF file.

    Parameters
    ----------
    path:
        Path to the PDF file. Strings are automatically converted to
        :class:`~pathlib.Path` objects.

    Returns
    -------
    str
        The extracted text.

    Raises
    ------
    PDFExtractionError
        If the file does not exist or cannot be parsed.
    """

    pdf_path = _coerce_path(path)
    if not pdf_path.exists():
        raise PDFExtractionError(f"PDF file not found: {pdf_path}")

    with pdf_path.open("rb") as pdf_file:
        text, _ = _read_pdf(pdf_file, str(pdf_path))

    if not text.strip():
        raise PDFExtractionError(f"No text could be extracted from {pdf_path}")

    return text


def extract_text_from_bytes(data: bytes, *, name: str = "upload") -> ExtractedDocument:
    """Extract text from an uploaded PDF held in memory.

    Raises
    ------
    PDFExtractionError
        If the upload is too large, unreadable, or yields fewer than
        :data:`MIN_EXTRACTED_CHARS` characters (typically a scanned or
        encrypted document).
    """

    if len(data) > MAX_PDF_BYTES:
        raise PDFExtractionError(
            f"File too large: {len(data) / 1024 / 1024:.1f} MB. Maximum is "
            f"{MAX_PDF_BYTES // (1024 * 1024)} MB."
        )

    text, page_count = _read_pdf(io.BytesIO(data), name)
    text = text.strip()
    if len(text) < MIN_EXTRACTED_CHARS:
        raise PDFExtractionError(
            "Could not extract readable text from this PDF. It may be image-based "
            "or encrypted. Try a text-based PDF."
        )

    return ExtractedDocument(text=text, char_count=len(text), page_count=page_count)


def batch_extract_text(paths: Iterable[Union[str, Path]]) -> dict[str, ExtractedDocument]:
    """Extract every résumé PDF in ``paths``, keyed by file stem.

    Each file goes through :func:`extract_text_from_bytes`, so the size and
    readable-text limits apply per document.
    """

    documents: dict[str, ExtractedDocument] = {}
    for path in paths:
        pdf_path = _coerce_path(path)
        if not pdf_path.exists():
            raise PDFExtractionError(f"PDF file not found: {pdf_path}")
        documents[pdf_path.stem] = extract_text_from_bytes(pdf_path.read_bytes(), name=pdf_path.name)
    return documents
