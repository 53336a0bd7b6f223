"""Pydantic request/response schemas for the NoteMaster API.

Ingestion, retrieval and deletion endpoints return the service envelopes
(:class:`~notemaster.models.rag.IngestionResult` and friends) unchanged, so
the wire shape is ``{success, chunkCount}`` / ``{success, results}`` /
``{success}``.  The models below cover the remaining request and response
bodies.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from notemaster.models.documents import SourceDocument


class SearchRequest(BaseModel):
    """Free-text query scoped to one owner."""

    query: str = Field(min_length=1)
    owner_id: str = Field(min_length=1)
    top_k: int | None = Field(default=None, description="1..max_top_k; server default when omitted")


class DocumentResponse(BaseModel):
    """One uploaded document as listed to its owner."""

    document_id: str
    file_name: str
    mime_type: str
    size_bytes: int
    chunk_count: int
    created_at: datetime

    @classmethod
    def from_document(cls, document: SourceDocument) -> DocumentResponse:
        return cls(
            document_id=document.document_id,
            file_name=document.file_name,
            mime_type=document.mime_type,
            size_bytes=document.size_bytes,
            chunk_count=document.chunk_count,
            created_at=document.created_at,
        )


class DocumentListResponse(BaseModel):
    owner_id: str
    documents: list[DocumentResponse] = Field(default_factory=list)


class HealthResponse(BaseModel):
    """Application health check response."""

    status: str
    version: str
    providers: dict[str, Any]


class ErrorResponse(BaseModel):
    """Standard error response body."""

    error: str
    detail: str | None = None
