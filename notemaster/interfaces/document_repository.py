"""Abstract base class for the relational store of :class:`SourceDocument` rows."""

from __future__ import annotations

from abc import ABC, abstractmethod

from notemaster.models.documents import SourceDocument


# Concrete implementation: SQLiteDocumentRepository
# (notemaster/providers/document_repository/)
class IDocumentRepository(ABC):
    """Contract for persisting uploaded-document records.

    Every method raises :class:`~notemaster.utils.errors.DocumentStoreError`
    when the underlying database call fails.
    """

    @abstractmethod
    async def initialize(self) -> None:
        """Create tables and indices if they do not exist."""

    @abstractmethod
    async def add(self, document: SourceDocument) -> SourceDocument:
        """Insert *document* and return it.

        At most one row may exist per ``(owner_id, file_name)``; a second
        insert raises :class:`~notemaster.utils.errors.DuplicateDocumentError`.
        """

    @abstractmethod
    async def set_chunk_count(self, document_id: str, chunk_count: int) -> None:
        """Record the number of indexed chunks once ingestion has finished."""

    @abstractmethod
    async def get(self, document_id: str) -> SourceDocument | None:
        """Return the row with *document_id*, or ``None``."""

    @abstractmethod
    async def list_for_owner(self, owner_id: str) -> list[SourceDocument]:
        """Return *owner_id*'s documents, newest first."""

    @abstractmethod
    async def delete(self, document_id: str) -> bool:
        """Delete the row.  Returns ``False`` when it did not exist."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier, e.g. ``"sqlite"``."""
