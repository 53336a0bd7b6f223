"""Owner-scoped semantic retrieval for generation consumers.

:class:`RetrievalService` embeds a free-text query with the same provider
(and therefore the same model) the indexer used, then asks the vector store
for the most similar records belonging to exactly one owner.

The owner filter is the only thing keeping tenants apart inside the shared
namespace, so an empty owner id is refused rather than searched.  No
matches is a successful, empty result; provider and index failures come
back as a failure envelope.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from notemaster.models.rag import RetrievalResult, RetrievedPassage
from notemaster.utils.errors import NoteMasterError

if TYPE_CHECKING:
    from notemaster.interfaces.embedding_provider import IEmbeddingProvider
    from notemaster.interfaces.vector_store_provider import IVectorStoreProvider

logger = structlog.get_logger(logger_name=__name__)

NO_CONTEXT_MESSAGE = "No relevant documents found."

_MIN_TOP_K = 1


class RetrievalService:
    """Retrieves an owner's most relevant passages for a query.

    Parameters
    ----------
    embedding_provider:
        Must be the same provider instance used for indexing.
    vector_store:
        The shared vector namespace.
    default_top_k / max_top_k:
        Result-count default and upper bound (lower bound is 1).
    """

    def __init__(
        self,
        embedding_provider: IEmbeddingProvider,
        vector_store: IVectorStoreProvider,
        default_top_k: int = 5,
        max_top_k: int = 20,
    ) -> None:
        self._embedding_provider = embedding_provider
        self._vector_store = vector_store
        self._default_top_k = default_top_k
        self._max_top_k = max_top_k

    async def retrieve(
        self,
        query: str,
        owner_id: str,
        top_k: int | None = None,
    ) -> RetrievalResult:
        """Return up to *top_k* passages owned by *owner_id*, most similar first."""
        k = self._default_top_k if top_k is None else top_k
        if not _MIN_TOP_K <= k <= self._max_top_k:
            return RetrievalResult(
                success=False,
                error=f"top_k must be between {_MIN_TOP_K} and {self._max_top_k}, got {k}",
                error_type="ValueError",
            )
        if not owner_id:
            return RetrievalResult(
                success=False, error="owner_id is required", error_type="ValueError"
            )
        if not query or not query.strip():
            return RetrievalResult(
                success=False, error="query must not be empty", error_type="ValueError"
            )

        try:
            embedding = await self._embedding_provider.embed_single(query)
            passages = await self._vector_store.query(embedding, owner_id=owner_id, top_k=k)
        except NoteMasterError as exc:
            logger.error(
                "retrieval_failed",
                owner_id=owner_id,
                top_k=k,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            return RetrievalResult(
                success=False, error=exc.message, error_type=type(exc).__name__
            )

        # The store already filters by owner; this is the last line before
        # passages reach a generation prompt.
        scoped = [p for p in passages if p.metadata.owner_id == owner_id]
        if len(scoped) != len(passages):
            logger.error(
                "retrieval_owner_mismatch_dropped",
                owner_id=owner_id,
                dropped=len(passages) - len(scoped),
            )

        logger.info(
            "retrieval_complete",
            owner_id=owner_id,
            query_length=len(query),
            top_k=k,
            results_count=len(scoped),
        )
        return RetrievalResult(success=True, results=scoped[:k])

    @staticmethod
    def format_context(passages: list[RetrievedPassage]) -> str:
        """Join passage texts with blank lines for a generation prompt."""
        if not passages:
            return NO_CONTEXT_MESSAGE
        return "\n\n".join(p.text for p in passages)
