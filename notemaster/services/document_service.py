"""Upload, listing and deletion of an owner's documents.

:class:`DocumentService` is the entry point the HTTP and CLI layers call.
An upload reserves a :class:`SourceDocument` row, stores the original
bytes, runs the ingestion pipeline and finally records the chunk count.
If any step after the reservation fails, whatever was already written is
cleaned up best-effort and the failure envelope is returned, so a failed
upload leaves no row behind.
"""

from __future__ import annotations

import time
from pathlib import PurePosixPath
from typing import TYPE_CHECKING

import structlog

from notemaster.models.documents import SourceDocument
from notemaster.models.rag import DeletionResult, IngestionResult
from notemaster.services.ingestion.text_extractor import resolve_variant
from notemaster.utils.errors import (
    DocumentNotFoundError,
    NoteMasterError,
    UploadTooLargeError,
)

if TYPE_CHECKING:
    from notemaster.interfaces.blob_store import IBlobStore
    from notemaster.interfaces.document_repository import IDocumentRepository
    from notemaster.services.deletion_service import DeletionService
    from notemaster.services.ingestion.ingestion_service import IngestionService

logger = structlog.get_logger(logger_name=__name__)


def build_blob_key(owner_id: str, file_name: str, timestamp_ms: int | None = None) -> str:
    """Return ``<owner>/<timestamp>-<filename>`` for a new upload."""
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    return f"{owner_id}/{timestamp_ms}-{file_name}"


def clean_file_name(file_name: str) -> str:
    """Strip any directory components a client sent with the file name."""
    return PurePosixPath((file_name or "").replace("\\", "/")).name


class DocumentService:
    """Coordinates the blob store, ingestion, the document table and deletion."""

    def __init__(
        self,
        blob_store: IBlobStore,
        document_repository: IDocumentRepository,
        ingestion_service: IngestionService,
        deletion_service: DeletionService,
        max_upload_bytes: int = 25 * 1024 * 1024,
    ) -> None:
        self._blob_store = blob_store
        self._repository = document_repository
        self._ingestion = ingestion_service
        self._deletion = deletion_service
        self._max_upload_bytes = max_upload_bytes

    # ------------------------------------------------------------------
    # Upload
    # ------------------------------------------------------------------

    async def upload(
        self,
        data: bytes,
        file_name: str,
        mime_type: str,
        owner_id: str,
    ) -> IngestionResult:
        """Store, ingest and record one uploaded file.

        The row is inserted first with ``chunk_count=0`` and its
        ``(owner_id, file_name)`` key is unique, so only one of several
        concurrent uploads with the same name reaches indexing.
        """
        file_name = clean_file_name(file_name)
        if not owner_id or not file_name:
            return IngestionResult(
                success=False,
                error="owner_id and file_name are required",
                error_type="ValueError",
            )

        try:
            self._validate(data, file_name, mime_type)
            document = await self._repository.add(
                SourceDocument(
                    owner_id=owner_id,
                    file_name=file_name,
                    mime_type=mime_type,
                    size_bytes=len(data),
                    blob_key=build_blob_key(owner_id, file_name),
                )
            )
        except NoteMasterError as exc:
            return self._rejected(exc, owner_id, file_name, mime_type)

        try:
            await self._blob_store.put(document.blob_key, data, content_type=mime_type)
        except NoteMasterError as exc:
            await self._release(document)
            return self._rejected(exc, owner_id, file_name, mime_type)

        result = await self._ingestion.ingest(data, mime_type, file_name, owner_id)
        if not result.success:
            await self._discard_blob(document.blob_key)
            await self._release(document)
            return result

        try:
            await self._repository.set_chunk_count(document.document_id, result.chunk_count)
        except NoteMasterError as exc:
            logger.error(
                "upload_record_failed",
                owner_id=owner_id,
                file_name=file_name,
                error=str(exc),
            )
            await self._deletion.delete_document(
                owner_id,
                file_name,
                blob_key=document.blob_key,
                document_id=document.document_id,
            )
            return IngestionResult(
                success=False, error=exc.message, error_type=type(exc).__name__
            )

        logger.info(
            "upload_complete",
            owner_id=owner_id,
            document_id=document.document_id,
            file_name=file_name,
            chunk_count=result.chunk_count,
        )
        return result.model_copy(update={"document_id": document.document_id})

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def list_documents(self, owner_id: str) -> list[SourceDocument]:
        """Return *owner_id*'s documents, newest first."""
        return await self._repository.list_for_owner(owner_id)

    async def get_document(self, owner_id: str, document_id: str) -> SourceDocument:
        """Return the document, treating another owner's row as missing.

        Raises
        ------
        DocumentNotFoundError
            If no row with *document_id* belongs to *owner_id*.
        """
        document = await self._repository.get(document_id)
        if document is None or document.owner_id != owner_id:
            raise DocumentNotFoundError(message=f"Document {document_id} not found")
        return document

    # ------------------------------------------------------------------
    # Deletion
    # ------------------------------------------------------------------

    async def delete(self, owner_id: str, document_id: str) -> DeletionResult:
        """Delete a document by id across all three stores."""
        try:
            document = await self.get_document(owner_id, document_id)
        except NoteMasterError as exc:
            return DeletionResult(
                success=False, error=exc.message, error_type=type(exc).__name__
            )

        return await self._deletion.delete_document(
            owner_id=document.owner_id,
            file_name=document.file_name,
            blob_key=document.blob_key,
            document_id=document.document_id,
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _validate(self, data: bytes, file_name: str, mime_type: str) -> None:
        if len(data) > self._max_upload_bytes:
            raise UploadTooLargeError(
                message=(
                    f"'{file_name}' is {len(data)} bytes; "
                    f"the limit is {self._max_upload_bytes} bytes"
                )
            )
        # Rejects unsupported and legacy types before anything is stored.
        resolve_variant(mime_type)

    @staticmethod
    def _rejected(
        exc: NoteMasterError, owner_id: str, file_name: str, mime_type: str
    ) -> IngestionResult:
        logger.warning(
            "upload_rejected",
            owner_id=owner_id,
            file_name=file_name,
            mime_type=mime_type,
            error_type=type(exc).__name__,
            error=str(exc),
        )
        return IngestionResult(success=False, error=exc.message, error_type=type(exc).__name__)

    async def _release(self, document: SourceDocument) -> None:
        try:
            await self._repository.delete(document.document_id)
        except NoteMasterError as exc:
            logger.warning(
                "orphaned_document_row",
                document_id=document.document_id,
                owner_id=document.owner_id,
                file_name=document.file_name,
                error=str(exc),
            )

    async def _discard_blob(self, blob_key: str) -> None:
        try:
            await self._blob_store.delete(blob_key)
        except NoteMasterError as exc:
            logger.warning("orphaned_blob", blob_key=blob_key, error=str(exc))
