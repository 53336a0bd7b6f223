"""Orchestrator for the ingestion path: **extract -> chunk -> index**.

:class:`IngestionService` coordinates the extractor, the chunker and the
indexer without any of them knowing about each other.  It fails closed:
the first error aborts the call and is returned as a failure envelope, and
nothing is written to the index unless every earlier stage succeeded.
"""

from __future__ import annotations

import asyncio
import time

import structlog

from notemaster.models.rag import IngestionResult
from notemaster.services.ingestion.chunker import TextChunker
from notemaster.services.ingestion.indexer import Indexer
from notemaster.services.ingestion.text_extractor import TextExtractor
from notemaster.utils.errors import NoteMasterError

logger = structlog.get_logger(logger_name=__name__)


class IngestionService:
    """Runs one uploaded document through the ingestion pipeline.

    Parameters
    ----------
    extractor:
        Converts raw bytes into normalised text.
    chunker:
        Splits the text into bounded, overlapping chunks.
    indexer:
        Embeds the chunks and upserts them in one batch.
    """

    def __init__(
        self,
        extractor: TextExtractor,
        chunker: TextChunker,
        indexer: Indexer,
    ) -> None:
        self._extractor = extractor
        self._chunker = chunker
        self._indexer = indexer

    async def ingest(
        self,
        data: bytes,
        mime_type: str,
        file_name: str,
        owner_id: str,
    ) -> IngestionResult:
        """Extract, chunk and index one document for *owner_id*.

        Returns
        -------
        IngestionResult
            ``success=True`` with the stored chunk count, or
            ``success=False`` with the error message and its type name.
        """
        if not owner_id:
            return IngestionResult(
                success=False, error="owner_id is required", error_type="ValueError"
            )

        start = time.monotonic()
        try:
            # Parsing and chunking are CPU-bound; keep them off the event loop.
            text = await asyncio.to_thread(self._extractor.extract, data, mime_type, file_name)
            chunks = await asyncio.to_thread(self._chunker.chunk, text, file_name=file_name)
            chunk_count = await self._indexer.index(chunks, owner_id, file_name)
        except NoteMasterError as exc:
            logger.warning(
                "ingestion_failed",
                owner_id=owner_id,
                file_name=file_name,
                mime_type=mime_type,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            return IngestionResult(
                success=False,
                error=exc.message,
                error_type=type(exc).__name__,
            )

        logger.info(
            "ingestion_complete",
            owner_id=owner_id,
            file_name=file_name,
            chunk_count=chunk_count,
            elapsed_ms=round((time.monotonic() - start) * 1000),
        )
        return IngestionResult(success=True, chunk_count=chunk_count)
