"""Abstract base class for text-embedding service providers.

Defines the contract for generating embedding vectors from text.
Implementations wrap OpenAI ``text-embedding-3-large`` or a local Ollama
model such as ``nomic-embed-text``.  One provider instance is shared by
the indexer and the retriever so chunks and queries always land in the same
embedding space.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


# Concrete implementations (notemaster/providers/embedding/):
#   OpenAIEmbeddingProvider -- text-embedding-3-large (requires API key)
#   OllamaEmbeddingProvider -- nomic-embed-text or another Ollama model (local)
class IEmbeddingProvider(ABC):
    """Contract for text-embedding services used by the indexer and retriever."""

    @abstractmethod
    async def embed(self, texts: list[str]) -> list[list[float]]:
        """Generate embedding vectors for a batch of texts.

        Parameters
        ----------
        texts:
            One or more text strings to embed.  Implementations handle
            batching internally if the underlying API has a per-call limit.

        Returns
        -------
        list[list[float]]
            Embedding vectors corresponding positionally to *texts*.

        Raises
        ------
        notemaster.utils.errors.EmbeddingProviderError
            If the embedding API call fails.
        """

    @abstractmethod
    async def embed_single(self, text: str) -> list[float]:
        """Generate an embedding vector for a single text string (e.g. a query)."""

    @abstractmethod
    def get_dimension(self) -> int:
        """Return the dimensionality of the embedding vectors.

        Constant for the lifetime of the provider; must match the vectors
        already stored in the index.
        """

    @abstractmethod
    def get_model_name(self) -> str:
        """Return the model identifier used for every embedding call."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this embedding provider."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if the provider is configured and reachable."""
