"""Embeds chunks and upserts them into the shared vector namespace.

One call embeds every chunk of a document with the configured model, tags
each vector with ``{ownerId, fileName, chunkIndex}``, and writes the whole
batch with a single upsert.  There is no retry and no partial commit: any
failure propagates to the caller.
"""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

import structlog

from notemaster.models.documents import TextChunk
from notemaster.models.rag import VectorMetadata, VectorRecord
from notemaster.utils.errors import EmbeddingProviderError

if TYPE_CHECKING:
    from notemaster.interfaces.embedding_provider import IEmbeddingProvider
    from notemaster.interfaces.vector_store_provider import IVectorStoreProvider

logger = structlog.get_logger(logger_name=__name__)


class Indexer:
    """Turns :class:`TextChunk` objects into stored :class:`VectorRecord` rows."""

    def __init__(
        self,
        embedding_provider: IEmbeddingProvider,
        vector_store: IVectorStoreProvider,
    ) -> None:
        self._embedding_provider = embedding_provider
        self._vector_store = vector_store

    async def index(self, chunks: list[TextChunk], owner_id: str, file_name: str) -> int:
        """Embed and upsert *chunks*; return the number of records written.

        Raises
        ------
        ValueError
            If *owner_id* is empty.
        EmbeddingProviderError
            If embedding fails or returns the wrong number of vectors.
        IndexUpsertError
            If the vector store rejects the batch.
        """
        if not owner_id:
            raise ValueError("owner_id is required to index chunks")
        if not chunks:
            return 0

        embeddings = await self._embedding_provider.embed([c.text for c in chunks])
        if len(embeddings) != len(chunks):
            raise EmbeddingProviderError(
                message=(
                    f"Expected {len(chunks)} embeddings, got {len(embeddings)}"
                ),
                provider_name=self._embedding_provider.get_provider_name(),
            )

        records = [
            VectorRecord(
                id=str(uuid.uuid4()),
                embedding=embedding,
                metadata=VectorMetadata(
                    owner_id=owner_id,
                    file_name=file_name,
                    chunk_index=chunk.chunk_index,
                ),
                text=chunk.text,
            )
            for chunk, embedding in zip(chunks, embeddings, strict=True)
        ]

        stored = await self._vector_store.upsert(records)
        logger.info(
            "chunks_indexed",
            owner_id=owner_id,
            file_name=file_name,
            chunk_count=stored,
            model=self._embedding_provider.get_model_name(),
        )
        return stored
