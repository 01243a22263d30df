"""Document enumeration and PDF text extraction."""

from __future__ import annotations

import logging
from pathlib import Path

from langchain_community.document_loaders import PyPDFLoader

from policy_rag.exceptions import DocumentExtractionError, IngestionError

logger = logging.getLogger(__name__)

PDF_SUFFIX = ".pdf"


def list_pdf_files(directory: str | Path) -> list[Path]:
    """Return the PDF files directly under *directory*, sorted by name.

    Sub-directories are not searched.  The suffix match is
    case-insensitive.

    Raises
    ------
    IngestionError
        If *directory* does not exist or is not a directory.
    """
    root = Path(directory)
    if not root.is_dir():
        raise IngestionError(f"Documents directory does not exist: {root}")
    return sorted(
        p for p in root.iterdir() if p.is_file() and p.suffix.lower() == PDF_SUFFIX
    )


def extract_pdf_text(path: str | Path) -> str:
    """Extract the plain text of a single PDF.

    Pages are concatenated in order, each followed by a blank line.  An
    image-only PDF yields whitespace, which callers treat as empty.
    """
    try:
        pages = PyPDFLoader(str(path)).load()
    except Exception as exc:
        raise DocumentExtractionError(f"PDF parsing error in {Path(path).name}: {exc}") from exc

    logger.debug("Extracted %d page(s) from %s", len(pages), path)
    return "".join(page.page_content + "\n\n" for page in pages)
