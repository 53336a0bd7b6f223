"""ChromaDB vector store provider adapter.

Wraps `chromadb.PersistentClient` to implement :class:`IVectorStoreProvider`.
Every owner shares one collection (the namespace); tenants are separated by
the ``ownerId`` metadata key.  Uses cosine distance for similarity search.
"""

from __future__ import annotations

import os
from typing import Any

# Disable ChromaDB telemetry before importing chromadb.  ChromaDB's bundled
# PostHog client can clash with the installed posthog version.
os.environ["ANONYMIZED_TELEMETRY"] = "False"

import posthog

posthog.disabled = True

import chromadb
import structlog

from notemaster.interfaces.embedding_provider import IEmbeddingProvider
from notemaster.interfaces.vector_store_provider import IVectorStoreProvider
from notemaster.models.rag import RetrievedPassage, VectorMetadata, VectorRecord
from notemaster.utils.errors import (
    ConfigurationError,
    IndexDeleteError,
    IndexQueryError,
    IndexUpsertError,
)

logger = structlog.get_logger(logger_name=__name__)

_OWNER_KEY = "ownerId"
_FILE_KEY = "fileName"
_CHUNK_KEY = "chunkIndex"


class _NoopEmbeddingFunction(chromadb.EmbeddingFunction[list[str]]):
    """No-op embedding function that prevents ChromaDB from loading a model.

    Vectors always arrive pre-computed from the shared embedding provider,
    so ChromaDB's built-in embedding is never invoked.
    """

    def __call__(self, input: list[str]) -> list[list[float]]:
        raise NotImplementedError(
            "notemaster uses pre-computed embeddings; "
            "ChromaDB's built-in embedding should never be called."
        )

    def name(self) -> str:
        """Return function name (required by ChromaDB's EmbeddingFunction protocol)."""
        return "noop_precomputed"


class ChromaDBProvider(IVectorStoreProvider):
    """Vector store provider backed by ChromaDB with local persistence.

    The injected :class:`IEmbeddingProvider` is only consulted at startup to
    check that stored vectors have the dimension the configured model
    produces; callers pass pre-computed embeddings to every method.
    """

    def __init__(
        self,
        embedding_provider: IEmbeddingProvider,
        persist_directory: str = "./data/chromadb",
        collection_name: str = "notemaster",
        client: Any | None = None,
    ) -> None:
        self._embedding_provider = embedding_provider
        self._persist_directory = persist_directory
        self._collection_name = collection_name
        self._client = client or chromadb.PersistentClient(
            path=persist_directory,
            settings=chromadb.config.Settings(anonymized_telemetry=False),
        )
        # Collections created by an older ChromaDB with the default embedding
        # function reject a different one on open; fall back to the
        # persisted function in that case.
        try:
            self._collection = self._client.get_or_create_collection(
                name=collection_name,
                metadata={"hnsw:space": "cosine"},
                embedding_function=_NoopEmbeddingFunction(),
            )
        except ValueError:
            self._collection = self._client.get_or_create_collection(
                name=collection_name,
                metadata={"hnsw:space": "cosine"},
            )

        self._validate_embedding_dimensions()

    # ------------------------------------------------------------------
    # Startup validation
    # ------------------------------------------------------------------

    def _validate_embedding_dimensions(self) -> None:
        """Verify the embedding provider's dimension matches stored vectors.

        Peeks at a single stored vector.  A mismatch means the namespace was
        built with a different model and every query would compare
        incomparable vectors, so startup fails.
        """
        try:
            collection_count = self._collection.count()
            if collection_count == 0:
                return

            sample = self._collection.peek(limit=1)
            embeddings = sample.get("embeddings") if sample else None
            if embeddings is None or len(embeddings) == 0:
                return

            stored_dim = len(embeddings[0])
            expected_dim = self._embedding_provider.get_dimension()

            if stored_dim != expected_dim:
                logger.error(
                    "embedding_dimension_mismatch",
                    stored_dim=stored_dim,
                    expected_dim=expected_dim,
                    model=self._embedding_provider.get_model_name(),
                    provider=self._embedding_provider.get_provider_name(),
                )
                raise ConfigurationError(
                    message=(
                        f"Embedding dimension mismatch: namespace '{self._collection_name}' "
                        f"has {stored_dim}-dim vectors but model "
                        f"'{self._embedding_provider.get_model_name()}' produces "
                        f"{expected_dim}-dim vectors. Set EMBEDDING_MODEL to the model "
                        f"used to build the namespace."
                    ),
                    provider_name=self.get_provider_name(),
                )

            logger.info(
                "embedding_dimension_validated",
                dimension=stored_dim,
                namespace_records=collection_count,
            )
        except ConfigurationError:
            raise
        except Exception as exc:
            logger.warning("embedding_dimension_check_skipped", error=str(exc))

    # ------------------------------------------------------------------
    # IVectorStoreProvider implementation
    # ------------------------------------------------------------------

    async def upsert(self, records: list[VectorRecord]) -> int:
        """Upsert every record in one ChromaDB call.

        No pagination: a partially written batch would leave a document
        half-indexed, so the whole batch goes in a single request.
        """
        if not records:
            return 0

        try:
            self._collection.upsert(
                ids=[r.record_id for r in records],
                embeddings=[r.embedding for r in records],
                documents=[r.text for r in records],
                metadatas=[self._to_metadata(r.metadata) for r in records],
            )
        except Exception as exc:
            raise IndexUpsertError(
                message=f"ChromaDB upsert of {len(records)} records failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        logger.info(
            "chromadb_upsert",
            namespace=self._collection_name,
            count=len(records),
            owner_id=records[0].metadata.owner_id,
            file_name=records[0].metadata.file_name,
        )
        return len(records)

    async def query(
        self,
        embedding: list[float],
        owner_id: str,
        top_k: int = 5,
    ) -> list[RetrievedPassage]:
        """Similarity search restricted to *owner_id*'s records.

        The owner filter is applied by ChromaDB's ``where`` clause.  Any row
        that still comes back with a different owner is dropped and logged.
        """
        if not owner_id:
            return []

        try:
            if self._collection.count() == 0:
                return []

            results = self._collection.query(
                query_embeddings=[embedding],
                n_results=top_k,
                where={_OWNER_KEY: {"$eq": owner_id}},
                include=["documents", "metadatas", "distances"],
            )
        except Exception as exc:
            raise IndexQueryError(
                message=f"ChromaDB query failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        if not results["documents"] or not results["documents"][0]:
            logger.info("chromadb_query", owner_id=owner_id, results_count=0)
            return []

        documents = results["documents"][0]
        metadatas = results["metadatas"][0] if results["metadatas"] else [{}] * len(documents)
        distances = results["distances"][0] if results["distances"] else [0.0] * len(documents)

        passages: list[RetrievedPassage] = []
        for doc_text, meta, distance in zip(documents, metadatas, distances, strict=True):
            if (meta or {}).get(_OWNER_KEY) != owner_id:
                logger.warning(
                    "chromadb_owner_filter_leak",
                    expected_owner=owner_id,
                    found_owner=(meta or {}).get(_OWNER_KEY),
                )
                continue
            similarity = max(0.0, min(1.0, 1.0 - distance))
            passages.append(
                RetrievedPassage(
                    text=doc_text or "",
                    metadata=self._from_metadata(meta),
                    score=similarity,
                )
            )

        passages.sort(key=lambda p: p.score, reverse=True)
        passages = passages[:top_k]

        logger.info(
            "chromadb_query",
            owner_id=owner_id,
            raw_results=len(documents),
            results_count=len(passages),
            top_score=passages[0].score if passages else 0.0,
        )
        return passages

    async def delete_document(self, owner_id: str, file_name: str) -> int:
        """Delete all records for one owner's file."""
        where = self.document_filter(owner_id, file_name)
        try:
            existing = self._collection.get(where=where, include=[])
            count = len(existing["ids"]) if existing["ids"] else 0

            if count > 0:
                self._collection.delete(where=where)
        except Exception as exc:
            raise IndexDeleteError(
                message=f"ChromaDB delete for '{file_name}' failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        logger.info(
            "chromadb_delete_document",
            owner_id=owner_id,
            file_name=file_name,
            deleted_count=count,
        )
        return count

    async def count(self, owner_id: str | None = None) -> int:
        if owner_id is None:
            return self._collection.count()
        existing = self._collection.get(where={_OWNER_KEY: {"$eq": owner_id}}, include=[])
        return len(existing["ids"]) if existing["ids"] else 0

    def get_provider_name(self) -> str:
        return "chromadb"

    def is_available(self) -> bool:
        """Return ``True`` if the ChromaDB collection is accessible."""
        try:
            self._collection.count()
            return True
        except Exception:
            return False

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def document_filter(owner_id: str, file_name: str) -> dict[str, Any]:
        """Return the ``where`` clause matching one owner's file."""
        return {
            "$and": [
                {_OWNER_KEY: {"$eq": owner_id}},
                {_FILE_KEY: {"$eq": file_name}},
            ]
        }

    @staticmethod
    def _to_metadata(metadata: VectorMetadata) -> dict[str, str | int]:
        """Flatten metadata to ChromaDB's scalar-only value types."""
        return {
            _OWNER_KEY: metadata.owner_id,
            _FILE_KEY: metadata.file_name,
            _CHUNK_KEY: metadata.chunk_index,
        }

    @staticmethod
    def _from_metadata(meta: dict[str, Any]) -> VectorMetadata:
        return VectorMetadata(
            owner_id=meta[_OWNER_KEY],
            file_name=meta.get(_FILE_KEY, ""),
            chunk_index=int(meta.get(_CHUNK_KEY, 0)),
        )
