"""Document ingestion pipeline: **extract -> chunk -> index**.

1. **Extract** (text_extractor.py / TextExtractor) -- mime-type dispatch to
   the per-format extractors in ``extractors/``, then normalisation and the
   empty-text check.

2. **Chunk** (chunker.py / TextChunker) -- recursive-separator splitting
   into bounded windows with exact overlap.

3. **Index** (indexer.py / Indexer) -- embeds every chunk with the single
   configured model and upserts the batch into the shared namespace.

:class:`IngestionService` runs the three stages and converts failures into
an :class:`~notemaster.models.rag.IngestionResult` envelope.
"""

from notemaster.services.ingestion.chunker import TextChunker, chunk_text, reassemble
from notemaster.services.ingestion.indexer import Indexer
from notemaster.services.ingestion.ingestion_service import IngestionService
from notemaster.services.ingestion.text_extractor import TextExtractor, resolve_variant

__all__ = [
    "Indexer",
    "IngestionService",
    "TextChunker",
    "TextExtractor",
    "chunk_text",
    "reassemble",
    "resolve_variant",
]
