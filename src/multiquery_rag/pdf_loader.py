from __future__ import annotations

import logging
from pathlib import Path

import fitz  # PyMuPDF

from .errors import ConfigurationError
from .schema import Document

logger = logging.getLogger(__name__)


def load_pdf_documents(path: str | Path) -> list[Document]:
    """Extract one Document per non-empty page of a PDF file.

    Args:
        path: PDF file to read.

    Returns:
        Page documents in page order, with 1-based page numbers.

    Raises:
        ConfigurationError: If the file does not exist or cannot be opened.
    """
    pdf_path = Path(path)
    if not pdf_path.is_file():
        raise ConfigurationError(f"PDF file not found: {pdf_path}")

    try:
        pdf = fitz.open(pdf_path)
    except RuntimeError as exc:
        raise ConfigurationError(f"Could not open PDF {pdf_path}: {exc}") from exc

    documents: list[Document] = []
    with pdf:
        for page_index, page in enumerate(pdf):
            text = page.get_text("text").strip()
            if not text:
                continue
            documents.append(
                Document(
                    doc_id=f"{pdf_path.stem}-p{page_index + 1:04d}",
                    source=str(pdf_path),
                    page=page_index + 1,
                    text=text,
                )
            )

    logger.info("Loaded %d pages with text from %s", len(documents), pdf_path)
    return documents
