"""Mime-type dispatch over the per-format extractors.

:class:`TextExtractor` owns one extractor per :class:`DocumentVariant` and
routes each call by declared mime type.  The allow-list check runs before
any byte of the payload is parsed; legacy binary Office formats are
rejected with a message telling the user which format to convert to.

Every successful extraction is normalised and must contain visible text.
"""

from __future__ import annotations

import structlog

from notemaster.models.documents import (
    LEGACY_MIME_TYPES,
    MIME_TYPE_VARIANTS,
    DocumentVariant,
)
from notemaster.services.ingestion.extractors import (
    DocumentExtractor,
    PdfExtractor,
    PlainTextExtractor,
    SlideDeckExtractor,
    WordExtractor,
)
from notemaster.utils.errors import ExtractionError, UnsupportedFormatError
from notemaster.utils.text_normalizer import has_visible_text, normalize_extracted_text

logger = structlog.get_logger(logger_name=__name__)


def resolve_variant(mime_type: str) -> DocumentVariant:
    """Map a declared mime type onto a :class:`DocumentVariant`.

    Parameters are compared case-insensitively and any ``;charset=...``
    suffix is ignored.

    Raises
    ------
    UnsupportedFormatError
        If *mime_type* is not in the allow-list.
    """
    base = (mime_type or "").split(";", 1)[0].strip().lower()
    if base in LEGACY_MIME_TYPES:
        raise UnsupportedFormatError(message=LEGACY_MIME_TYPES[base], mime_type=base)
    variant = MIME_TYPE_VARIANTS.get(base)
    if variant is None:
        raise UnsupportedFormatError(
            message=f"Unsupported file type: {mime_type or 'unknown'}",
            mime_type=base,
        )
    return variant


class TextExtractor:
    """Converts uploaded bytes into normalised text.

    Parameters
    ----------
    extractors:
        Optional override of the per-variant extractors (tests inject
        faulty ones).  Every :class:`DocumentVariant` must be covered.
    """

    def __init__(self, extractors: list[DocumentExtractor] | None = None) -> None:
        if extractors is None:
            extractors = [
                PlainTextExtractor(),
                PdfExtractor(),
                WordExtractor(),
                SlideDeckExtractor(),
            ]
        self._extractors: dict[DocumentVariant, DocumentExtractor] = {
            e.variant: e for e in extractors
        }
        missing = set(DocumentVariant) - set(self._extractors)
        if missing:
            raise ValueError(
                f"No extractor registered for: {sorted(v.value for v in missing)}"
            )

    def extract(self, data: bytes, mime_type: str, file_name: str) -> str:
        """Return the normalised text of *data*.

        Raises
        ------
        UnsupportedFormatError
            If *mime_type* is not accepted.
        ExtractionError
            If the payload is corrupt or yields no visible text.
        """
        variant = resolve_variant(mime_type)
        raw = self._extractors[variant].extract(data, file_name)
        text = normalize_extracted_text(raw)

        if not has_visible_text(text):
            raise ExtractionError(
                message=f"No text could be extracted from '{file_name}'",
                provider_name=variant.value,
            )

        logger.info(
            "text_extracted",
            file_name=file_name,
            variant=variant.value,
            size_bytes=len(data),
            text_length=len(text),
        )
        return text
