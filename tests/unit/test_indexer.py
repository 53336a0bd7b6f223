"""Unit tests for the Indexer: one embed call, one upsert, owner metadata."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from notemaster.interfaces.embedding_provider import IEmbeddingProvider
from notemaster.models.documents import TextChunk
from notemaster.services.ingestion.indexer import Indexer
from notemaster.utils.errors import EmbeddingProviderError, IndexUpsertError


def _chunks(n: int, file_name: str = "bio.txt") -> list[TextChunk]:
    return [
        TextChunk(text=f"chunk number {i}", file_name=file_name, chunk_index=i, start=i * 10)
        for i in range(n)
    ]


class TestIndexer:
    @pytest.mark.asyncio
    async def test_single_embed_and_single_upsert(
        self, indexer, mock_embedding_provider, mock_vector_store
    ) -> None:
        stored = await indexer.index(_chunks(4), "alice", "bio.txt")
        assert stored == 4
        assert len(mock_embedding_provider.calls) == 1
        assert mock_embedding_provider.calls[0] == [f"chunk number {i}" for i in range(4)]
        assert mock_vector_store.upsert_calls == 1

    @pytest.mark.asyncio
    async def test_metadata_tags_every_record(self, indexer, mock_vector_store) -> None:
        await indexer.index(_chunks(3), "alice", "bio.txt")
        records = sorted(mock_vector_store.records.values(), key=lambda r: r.metadata.chunk_index)
        assert [r.metadata.chunk_index for r in records] == [0, 1, 2]
        assert {r.metadata.owner_id for r in records} == {"alice"}
        assert {r.metadata.file_name for r in records} == {"bio.txt"}
        assert records[1].text == "chunk number 1"

    @pytest.mark.asyncio
    async def test_record_ids_unique(self, indexer, mock_vector_store) -> None:
        await indexer.index(_chunks(5), "alice", "bio.txt")
        await indexer.index(_chunks(5), "alice", "bio.txt")
        assert len(mock_vector_store.records) == 10

    @pytest.mark.asyncio
    async def test_wire_metadata_is_camel_case(self, indexer, mock_vector_store) -> None:
        await indexer.index(_chunks(1), "alice", "bio.txt")
        (record,) = mock_vector_store.records.values()
        dumped = record.model_dump(by_alias=True)
        assert dumped["metadata"] == {"ownerId": "alice", "fileName": "bio.txt", "chunkIndex": 0}
        assert "id" in dumped

    @pytest.mark.asyncio
    async def test_empty_chunks_writes_nothing(
        self, indexer, mock_embedding_provider, mock_vector_store
    ) -> None:
        assert await indexer.index([], "alice", "bio.txt") == 0
        assert mock_embedding_provider.calls == []
        assert mock_vector_store.upsert_calls == 0

    @pytest.mark.asyncio
    async def test_blank_owner_rejected(self, indexer) -> None:
        with pytest.raises(ValueError):
            await indexer.index(_chunks(1), "", "bio.txt")

    @pytest.mark.asyncio
    async def test_embedding_count_mismatch(self, mock_vector_store) -> None:
        embedder = MagicMock(spec=IEmbeddingProvider)
        embedder.embed = AsyncMock(return_value=[[0.1, 0.2]])
        embedder.get_provider_name.return_value = "mock"
        indexer = Indexer(embedding_provider=embedder, vector_store=mock_vector_store)
        with pytest.raises(EmbeddingProviderError, match="Expected 3"):
            await indexer.index(_chunks(3), "alice", "bio.txt")
        assert mock_vector_store.records == {}

    @pytest.mark.asyncio
    async def test_embedding_failure_propagates_without_upsert(self, mock_vector_store) -> None:
        embedder = MagicMock(spec=IEmbeddingProvider)
        embedder.embed = AsyncMock(
            side_effect=EmbeddingProviderError(message="rate limited", provider_name="openai")
        )
        indexer = Indexer(embedding_provider=embedder, vector_store=mock_vector_store)
        with pytest.raises(EmbeddingProviderError):
            await indexer.index(_chunks(2), "alice", "bio.txt")
        assert mock_vector_store.upsert_calls == 0

    @pytest.mark.asyncio
    async def test_upsert_failure_is_not_retried(self, mock_embedding_provider) -> None:
        store = MagicMock()
        store.upsert = AsyncMock(side_effect=IndexUpsertError(message="rejected"))
        indexer = Indexer(embedding_provider=mock_embedding_provider, vector_store=store)
        with pytest.raises(IndexUpsertError):
            await indexer.index(_chunks(2), "alice", "bio.txt")
        store.upsert.assert_awaited_once()
