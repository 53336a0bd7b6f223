"""Service layer: ingestion, retrieval, deletion and document management."""

from notemaster.services.deletion_service import DeletionService
from notemaster.services.document_service import DocumentService
from notemaster.services.retrieval_service import NO_CONTEXT_MESSAGE, RetrievalService

__all__ = [
    "DeletionService",
    "DocumentService",
    "NO_CONTEXT_MESSAGE",
    "RetrievalService",
]
