"""Plain-text extractor: a direct UTF-8 decode."""

from __future__ import annotations

from notemaster.models.documents import DocumentVariant
from notemaster.services.ingestion.extractors.base import DocumentExtractor
from notemaster.utils.errors import ExtractionError


class PlainTextExtractor(DocumentExtractor):
    variant = DocumentVariant.PLAIN_TEXT

    def extract(self, data: bytes, file_name: str) -> str:
        # utf-8-sig strips a leading byte-order mark when present.
        try:
            return data.decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise ExtractionError(
                message=f"'{file_name}' is not valid UTF-8 text: {exc.reason}",
                provider_name="plain_text",
            ) from exc
