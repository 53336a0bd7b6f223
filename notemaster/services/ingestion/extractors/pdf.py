"""PDF extractor backed by PyMuPDF (fitz).

Reads the document from memory, extracts text page-by-page, and joins the
non-empty pages in page order with a blank line between them.
"""

from __future__ import annotations

import fitz  # PyMuPDF -- the "fitz" import name is a PyMuPDF convention
import structlog

from notemaster.models.documents import DocumentVariant
from notemaster.services.ingestion.extractors.base import DocumentExtractor
from notemaster.utils.errors import ExtractionError

logger = structlog.get_logger(logger_name=__name__)

_PAGE_SEPARATOR = "\n\n"


class PdfExtractor(DocumentExtractor):
    variant = DocumentVariant.PDF

    def extract(self, data: bytes, file_name: str) -> str:
        try:
            doc = fitz.open(stream=data, filetype="pdf")
        except (RuntimeError, ValueError) as exc:
            raise ExtractionError(
                message=f"Cannot open '{file_name}' as PDF: {exc}",
                provider_name="pdf",
            ) from exc

        pages: list[str] = []
        try:
            for page in doc:
                text = page.get_text("text")
                if text and text.strip():
                    pages.append(text.strip())
            page_count = len(doc)
        except RuntimeError as exc:
            raise ExtractionError(
                message=f"Failed to read pages of '{file_name}': {exc}",
                provider_name="pdf",
            ) from exc
        finally:
            doc.close()

        logger.debug(
            "pdf_pages_extracted",
            file_name=file_name,
            total_pages=page_count,
            text_pages=len(pages),
        )
        return _PAGE_SEPARATOR.join(pages)
