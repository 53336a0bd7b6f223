"""Word (.docx) extractor.

Reads the document with python-docx.  Each body paragraph becomes one line;
python-docx already renders ``w:tab`` as a tab and ``w:br`` / ``w:cr`` as a
newline inside ``Paragraph.text``.
"""

from __future__ import annotations

import io

import docx
import structlog

from notemaster.models.documents import DocumentVariant
from notemaster.services.ingestion.extractors.base import CONTAINER_ERRORS, DocumentExtractor
from notemaster.utils.errors import ExtractionError

logger = structlog.get_logger(logger_name=__name__)

# python-docx raises ValueError when the main part is not a Word body.
_DOCX_ERRORS = (*CONTAINER_ERRORS, ValueError)


class WordExtractor(DocumentExtractor):
    variant = DocumentVariant.WORD

    def extract(self, data: bytes, file_name: str) -> str:
        try:
            document = docx.Document(io.BytesIO(data))
            paragraphs = [p.text for p in document.paragraphs]
        except _DOCX_ERRORS as exc:
            raise ExtractionError(
                message=f"'{file_name}' is not a readable .docx document: {exc}",
                provider_name="word",
            ) from exc

        logger.debug("docx_extracted", file_name=file_name, paragraphs=len(paragraphs))
        return "\n".join(paragraphs)
