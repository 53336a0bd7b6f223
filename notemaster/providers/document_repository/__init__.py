"""Relational document store implementations."""

from notemaster.providers.document_repository.sqlite_document_repository import (
    SQLiteDocumentRepository,
)

__all__ = ["SQLiteDocumentRepository"]
