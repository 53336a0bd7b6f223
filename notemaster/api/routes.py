"""FastAPI routes for document upload, listing, deletion and search.

# Endpoint                                  Method  Description
# ---------------------------------------------------------------------
# /api/v1/documents                         POST    Upload -> extract -> chunk -> index
# /api/v1/documents?owner_id=               GET     List an owner's documents
# /api/v1/documents/{id}?owner_id=          DELETE  Remove blob, vectors and row
# /api/v1/search                            POST    Owner-scoped semantic search
# /api/v1/health                            GET     Health check + provider status

Services are resolved from ``app.state`` (populated by ``main.build_services``)
through ``Depends`` helpers and ``Annotated`` aliases.  The owner id comes
from the caller; session and auth handling live outside this service.
"""

from __future__ import annotations

from typing import Annotated, Any

import structlog
from fastapi import APIRouter, Depends, Form, HTTPException, Query, Request, UploadFile
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from notemaster.api.middleware import status_for_error
from notemaster.api.schemas import (
    DocumentListResponse,
    DocumentResponse,
    HealthResponse,
    SearchRequest,
)
from notemaster.config.settings import Settings
from notemaster.models.documents import guess_mime_type
from notemaster.models.rag import DeletionResult, IngestionResult, RetrievalResult
from notemaster.services.document_service import DocumentService
from notemaster.services.retrieval_service import RetrievalService
from notemaster.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

router = APIRouter(prefix="/api/v1")

# Uploads are read in 64 KB increments so oversized files are rejected
# before the whole payload is buffered.
_UPLOAD_CHUNK_SIZE = 64 * 1024

_VERSION = "0.1.0"


# ---------------------------------------------------------------------------
# Dependency injection helpers -- resolve singletons from app.state
# ---------------------------------------------------------------------------


def _get_document_service(request: Request) -> DocumentService:
    return request.app.state.document_service


def _get_retrieval_service(request: Request) -> RetrievalService:
    return request.app.state.retrieval_service


def _get_settings(request: Request) -> Settings:
    return request.app.state.settings


DocumentServiceDep = Annotated[DocumentService, Depends(_get_document_service)]
RetrievalServiceDep = Annotated[RetrievalService, Depends(_get_retrieval_service)]
SettingsDep = Annotated[Settings, Depends(_get_settings)]


def _envelope_response(result: BaseModel, status_code: int) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=result.model_dump(by_alias=True, mode="json"),
    )


# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------


@router.post(
    "/documents",
    response_model=IngestionResult,
    status_code=201,
    summary="Upload and index a document",
)
async def upload_document(
    file: UploadFile,
    owner_id: Annotated[str, Form(min_length=1)],
    documents: DocumentServiceDep,
    settings: SettingsDep,
) -> Any:
    """Store the file, extract and index its text, and record it for the owner."""
    buffer = bytearray()
    while True:
        chunk = await file.read(_UPLOAD_CHUNK_SIZE)
        if not chunk:
            break
        buffer.extend(chunk)
        if len(buffer) > settings.max_upload_bytes:
            raise HTTPException(
                status_code=413,
                detail=f"File too large: limit is {settings.max_upload_bytes} bytes",
            )

    file_name = file.filename or ""
    result = await documents.upload(
        data=bytes(buffer),
        file_name=file_name,
        mime_type=guess_mime_type(file_name, file.content_type),
        owner_id=owner_id,
    )
    if not result.success:
        return _envelope_response(result, status_for_error(result.error_type))
    return result


@router.get(
    "/documents",
    response_model=DocumentListResponse,
    summary="List an owner's documents, newest first",
)
async def list_documents(
    owner_id: Annotated[str, Query(min_length=1)],
    documents: DocumentServiceDep,
) -> DocumentListResponse:
    rows = await documents.list_documents(owner_id)
    return DocumentListResponse(
        owner_id=owner_id,
        documents=[DocumentResponse.from_document(d) for d in rows],
    )


@router.delete(
    "/documents/{document_id}",
    response_model=DeletionResult,
    summary="Delete a document from every store",
)
async def delete_document(
    document_id: str,
    owner_id: Annotated[str, Query(min_length=1)],
    documents: DocumentServiceDep,
) -> Any:
    result = await documents.delete(owner_id, document_id)
    if not result.success:
        return _envelope_response(result, status_for_error(result.error_type))
    return result


# ---------------------------------------------------------------------------
# Search
# ---------------------------------------------------------------------------


@router.post(
    "/search",
    response_model=RetrievalResult,
    summary="Semantic search over one owner's documents",
)
async def search(body: SearchRequest, retrieval: RetrievalServiceDep) -> Any:
    result = await retrieval.retrieve(body.query, body.owner_id, top_k=body.top_k)
    if not result.success:
        return _envelope_response(result, status_for_error(result.error_type))
    return result


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Application health check",
)
async def health_check(request: Request) -> HealthResponse:
    """Return application health, version, and provider availability."""
    providers: dict[str, Any] = {}
    embedding = getattr(request.app.state, "embedding_provider", None)
    vector_store = getattr(request.app.state, "vector_store", None)

    if embedding is not None:
        providers["embedding"] = embedding.get_provider_name()
        providers["embedding_model"] = embedding.get_model_name()
    if vector_store is not None:
        providers["vector_store"] = vector_store.is_available()
        if providers["vector_store"]:
            providers["vector_records"] = await vector_store.count()

    healthy = embedding is not None and providers.get("vector_store", False)
    return HealthResponse(
        status="healthy" if healthy else "unhealthy",
        version=_VERSION,
        providers=providers,
    )
