"""Vector-index data models and the result envelopes returned to callers.

Defines Pydantic v2 models for the persisted :class:`VectorRecord`, the
passages returned by retrieval, the ingestion / retrieval / deletion result
envelopes, and the :class:`DeletionIntent` record logged before each
deletion step.  All models are frozen.

Wire names are camelCase (``ownerId``, ``chunkCount``) because the records
live in a store shared with other consumers and the envelopes are returned
as JSON; Python code constructs and reads them by their snake_case field
names (``populate_by_name``).
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

_CAMEL = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# VectorRecord -- one embedded chunk in the shared namespace.
# ---------------------------------------------------------------------------
class VectorMetadata(BaseModel):
    """Metadata stored alongside every vector.

    ``owner_id`` is the only thing separating tenants inside the shared
    namespace; retrieval always filters on it by equality.
    """

    model_config = _CAMEL

    owner_id: str = Field(min_length=1)
    file_name: str
    chunk_index: int = Field(ge=0)


class VectorRecord(BaseModel):
    """An embedded chunk as persisted in the vector index."""

    model_config = _CAMEL

    record_id: str = Field(alias="id")
    embedding: list[float]
    metadata: VectorMetadata
    text: str


# ---------------------------------------------------------------------------
# Retrieval
# ---------------------------------------------------------------------------
class RetrievedPassage(BaseModel):
    """A chunk returned by similarity search, most-similar-first ordering."""

    model_config = _CAMEL

    text: str
    metadata: VectorMetadata
    score: float = Field(default=0.0, ge=0.0, le=1.0)


class RetrievalResult(BaseModel):
    """Envelope for a retrieval call.

    An empty ``results`` list with ``success=True`` means "no grounding
    context available" and is not an error.
    """

    model_config = _CAMEL

    success: bool
    results: list[RetrievedPassage] = Field(default_factory=list)
    error: str | None = None
    error_type: str | None = None


# ---------------------------------------------------------------------------
# Ingestion
# ---------------------------------------------------------------------------
class IngestionResult(BaseModel):
    """Envelope for an ingestion call.

    ``error_type`` carries the exception class name on failure so callers can
    tell a user-actionable rejection (unsupported / unreadable file) from a
    transient provider failure.
    """

    model_config = _CAMEL

    success: bool
    chunk_count: int = Field(default=0, ge=0)
    error: str | None = None
    error_type: str | None = None
    document_id: str | None = None


# ---------------------------------------------------------------------------
# Deletion
# ---------------------------------------------------------------------------
class DeletionIntent(BaseModel):
    """What a deletion is about to remove, logged before each step.

    Gives an operator enough to reconcile orphaned blobs or vectors by hand
    when a best-effort step fails.
    """

    model_config = _CAMEL

    owner_id: str
    file_name: str
    blob_key: str | None = None
    vector_filter: dict[str, Any] = Field(default_factory=dict)
    document_id: str | None = None


class DeletionResult(BaseModel):
    """Envelope for a deletion call.

    ``success`` reflects the relational deletion only; secondary-store
    failures are listed in ``partial_failures`` for logging and never flip
    ``success`` to ``False``.
    """

    model_config = _CAMEL

    success: bool
    partial_failures: list[str] = Field(default_factory=list)
    error: str | None = None
    error_type: str | None = None
