"""Abstract base class for vector-store service providers.

Defines the contract for storing, searching and removing embedded chunks.
All owners share one namespace (collection); records are told apart only by
their ``ownerId`` metadata, so every search takes a mandatory owner id and
implementations must apply it as a hard equality filter.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from notemaster.models.rag import RetrievedPassage, VectorRecord


# Concrete implementation: ChromaDBProvider (notemaster/providers/vector_store/)
class IVectorStoreProvider(ABC):
    """Contract for the shared vector namespace.

    All methods are async to support network-backed stores without blocking
    the event loop.
    """

    @abstractmethod
    async def upsert(self, records: list[VectorRecord]) -> int:
        """Upsert *records* in a single batch.

        The batch either lands completely or the call raises; callers do not
        track partial success.

        Returns
        -------
        int
            The number of records written.

        Raises
        ------
        notemaster.utils.errors.IndexUpsertError
            If the store rejects the batch.
        """

    @abstractmethod
    async def query(
        self,
        embedding: list[float],
        owner_id: str,
        top_k: int = 5,
    ) -> list[RetrievedPassage]:
        """Return up to *top_k* records owned by *owner_id*, most similar first.

        Records belonging to any other owner must never be returned.  An
        empty list is a valid result.

        Raises
        ------
        notemaster.utils.errors.IndexQueryError
            If the similarity search fails.
        """

    @abstractmethod
    async def delete_document(self, owner_id: str, file_name: str) -> int:
        """Delete every record whose metadata matches *owner_id* and *file_name*.

        Returns
        -------
        int
            The number of records deleted.

        Raises
        ------
        notemaster.utils.errors.IndexDeleteError
            If the delete call fails.
        """

    @abstractmethod
    async def count(self, owner_id: str | None = None) -> int:
        """Return the number of stored records, optionally for one owner."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier, e.g. ``"chromadb"``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if the store is reachable."""
