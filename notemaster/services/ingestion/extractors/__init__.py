"""Per-format extractors, one per :class:`DocumentVariant`."""

from notemaster.services.ingestion.extractors.base import DocumentExtractor
from notemaster.services.ingestion.extractors.pdf import PdfExtractor
from notemaster.services.ingestion.extractors.plain_text import PlainTextExtractor
from notemaster.services.ingestion.extractors.slide_deck import SlideDeckExtractor
from notemaster.services.ingestion.extractors.word import WordExtractor

__all__ = [
    "DocumentExtractor",
    "PdfExtractor",
    "PlainTextExtractor",
    "SlideDeckExtractor",
    "WordExtractor",
]
