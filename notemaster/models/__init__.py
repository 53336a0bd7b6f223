"""Pydantic data models for documents, chunks, vector records and results."""

from notemaster.models.documents import (
    EXTENSION_MIME_TYPES,
    LEGACY_MIME_TYPES,
    MIME_TYPE_VARIANTS,
    DocumentVariant,
    SourceDocument,
    TextChunk,
    guess_mime_type,
)
from notemaster.models.rag import (
    DeletionIntent,
    DeletionResult,
    IngestionResult,
    RetrievalResult,
    RetrievedPassage,
    VectorMetadata,
    VectorRecord,
)

__all__ = [
    "EXTENSION_MIME_TYPES",
    "LEGACY_MIME_TYPES",
    "MIME_TYPE_VARIANTS",
    "DeletionIntent",
    "DeletionResult",
    "DocumentVariant",
    "IngestionResult",
    "RetrievalResult",
    "RetrievedPassage",
    "SourceDocument",
    "TextChunk",
    "VectorMetadata",
    "VectorRecord",
    "guess_mime_type",
]
