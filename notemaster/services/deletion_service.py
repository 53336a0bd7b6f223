"""Cross-store deletion of one document (blob, vectors, relational row).

There is no transaction spanning the three stores.  The blob and vector
removals are best-effort: a failure is logged as a
:class:`~notemaster.utils.errors.PartialDeletionFailure` and the next step
still runs.  The relational row is always deleted, so a user-initiated
delete never gets stuck on a secondary store.

Before each step a :class:`~notemaster.models.rag.DeletionIntent` is logged
with everything needed to reconcile an orphaned blob or vector set later.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from notemaster.models.rag import DeletionIntent, DeletionResult
from notemaster.utils.errors import NoteMasterError, PartialDeletionFailure

if TYPE_CHECKING:
    from notemaster.interfaces.blob_store import IBlobStore
    from notemaster.interfaces.document_repository import IDocumentRepository
    from notemaster.interfaces.vector_store_provider import IVectorStoreProvider

logger = structlog.get_logger(logger_name=__name__)


class DeletionService:
    """Removes a document from the blob store, the vector index and the database."""

    def __init__(
        self,
        blob_store: IBlobStore,
        vector_store: IVectorStoreProvider,
        document_repository: IDocumentRepository,
    ) -> None:
        self._blob_store = blob_store
        self._vector_store = vector_store
        self._repository = document_repository

    async def delete_document(
        self,
        owner_id: str,
        file_name: str,
        blob_key: str | None = None,
        document_id: str | None = None,
    ) -> DeletionResult:
        """Delete every trace of *file_name* for *owner_id*.

        ``success`` reflects only the relational deletion.  Blob and vector
        failures are reported in ``partial_failures`` and logged.
        """
        intent = DeletionIntent(
            owner_id=owner_id,
            file_name=file_name,
            blob_key=blob_key,
            vector_filter={"ownerId": owner_id, "fileName": file_name},
            document_id=document_id,
        )
        failures: list[PartialDeletionFailure] = []

        if blob_key:
            self._log_intent("blob", intent)
            try:
                await self._blob_store.delete(blob_key)
            except Exception as exc:
                failures.append(self._partial_failure("blob", intent, exc))

        self._log_intent("vector", intent)
        try:
            await self._vector_store.delete_document(owner_id, file_name)
        except Exception as exc:
            failures.append(self._partial_failure("vector", intent, exc))

        partial = [str(f) for f in failures]

        if document_id:
            self._log_intent("relational", intent)
            try:
                await self._repository.delete(document_id)
            except NoteMasterError as exc:
                logger.error(
                    "document_row_delete_failed",
                    document_id=document_id,
                    owner_id=owner_id,
                    error=str(exc),
                )
                return DeletionResult(
                    success=False,
                    partial_failures=partial,
                    error=exc.message,
                    error_type=type(exc).__name__,
                )

        logger.info(
            "document_deleted",
            owner_id=owner_id,
            file_name=file_name,
            document_id=document_id,
            partial_failures=len(partial),
        )
        return DeletionResult(success=True, partial_failures=partial)

    @staticmethod
    def _log_intent(step: str, intent: DeletionIntent) -> None:
        logger.info("deletion_intent", step=step, **intent.model_dump(by_alias=True))

    @staticmethod
    def _partial_failure(
        store: str, intent: DeletionIntent, exc: Exception
    ) -> PartialDeletionFailure:
        failure = PartialDeletionFailure(
            message=f"{store} deletion failed for '{intent.file_name}': {exc}",
            provider_name=getattr(exc, "provider_name", None),
            store=store,
        )
        logger.warning(
            "partial_deletion_failure",
            store=store,
            owner_id=intent.owner_id,
            file_name=intent.file_name,
            blob_key=intent.blob_key,
            document_id=intent.document_id,
            error=str(exc),
        )
        return failure
