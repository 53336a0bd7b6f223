"""SQLite-backed document repository.

Persists :class:`SourceDocument` rows to a local SQLite database at
``data/documents.db``.  Uses ``aiosqlite`` for async I/O.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

import aiosqlite
import structlog

from notemaster.interfaces.document_repository import IDocumentRepository
from notemaster.models.documents import SourceDocument
from notemaster.utils.errors import (
    DocumentNotFoundError,
    DocumentStoreError,
    DuplicateDocumentError,
)

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_DB_PATH = Path("data/documents.db")

_CREATE_TABLE_SQL = """\
CREATE TABLE IF NOT EXISTS documents (
    document_id  TEXT    PRIMARY KEY,
    owner_id     TEXT    NOT NULL,
    file_name    TEXT    NOT NULL,
    mime_type    TEXT    NOT NULL,
    size_bytes   INTEGER NOT NULL,
    blob_key     TEXT    NOT NULL,
    chunk_count  INTEGER NOT NULL DEFAULT 0,
    created_at   TEXT    NOT NULL
);
"""

_CREATE_INDICES_SQL = [
    "CREATE INDEX IF NOT EXISTS idx_documents_owner ON documents(owner_id);",
    "CREATE INDEX IF NOT EXISTS idx_documents_owner_created ON documents(owner_id, created_at);",
    "CREATE UNIQUE INDEX IF NOT EXISTS idx_documents_owner_file ON documents(owner_id, file_name);",
]

_INSERT_SQL = """\
INSERT INTO documents
    (document_id, owner_id, file_name, mime_type, size_bytes, blob_key, chunk_count, created_at)
VALUES (?, ?, ?, ?, ?, ?, ?, ?);
"""

_SELECT_COLUMNS = (
    "document_id, owner_id, file_name, mime_type, size_bytes, blob_key, chunk_count, created_at"
)


class SQLiteDocumentRepository(IDocumentRepository):
    """SQLite-backed persistence for uploaded-document records."""

    def __init__(self, db_path: str | Path = _DEFAULT_DB_PATH) -> None:
        self._db_path = Path(db_path)

    async def initialize(self) -> None:
        """Create the documents table and indices if they don't exist."""
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            async with aiosqlite.connect(str(self._db_path)) as db:
                await db.execute(_CREATE_TABLE_SQL)
                for idx_sql in _CREATE_INDICES_SQL:
                    await db.execute(idx_sql)
                await db.commit()
        except aiosqlite.Error as exc:
            raise DocumentStoreError(
                message=f"Failed to initialize document database: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        logger.info("document_db_initialized", path=str(self._db_path))

    async def add(self, document: SourceDocument) -> SourceDocument:
        try:
            async with aiosqlite.connect(str(self._db_path)) as db:
                await db.execute(
                    _INSERT_SQL,
                    (
                        document.document_id,
                        document.owner_id,
                        document.file_name,
                        document.mime_type,
                        document.size_bytes,
                        document.blob_key,
                        document.chunk_count,
                        document.created_at.isoformat(),
                    ),
                )
                await db.commit()
        except aiosqlite.IntegrityError as exc:
            raise DuplicateDocumentError(
                message=f"'{document.file_name}' is already uploaded; delete it first",
                provider_name=self.get_provider_name(),
            ) from exc
        except aiosqlite.Error as exc:
            raise DocumentStoreError(
                message=f"Failed to insert document '{document.file_name}': {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        logger.info(
            "document_recorded",
            document_id=document.document_id,
            owner_id=document.owner_id,
            file_name=document.file_name,
            chunk_count=document.chunk_count,
        )
        return document

    async def set_chunk_count(self, document_id: str, chunk_count: int) -> None:
        try:
            async with aiosqlite.connect(str(self._db_path)) as db:
                cursor = await db.execute(
                    "UPDATE documents SET chunk_count = ? WHERE document_id = ?",
                    (chunk_count, document_id),
                )
                await db.commit()
                updated = cursor.rowcount > 0
        except aiosqlite.Error as exc:
            raise DocumentStoreError(
                message=f"Failed to update document {document_id}: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        if not updated:
            raise DocumentNotFoundError(
                message=f"Document {document_id} not found",
                provider_name=self.get_provider_name(),
            )

    async def get(self, document_id: str) -> SourceDocument | None:
        try:
            async with aiosqlite.connect(str(self._db_path)) as db:
                db.row_factory = aiosqlite.Row
                cursor = await db.execute(
                    f"SELECT {_SELECT_COLUMNS} FROM documents WHERE document_id = ?",
                    (document_id,),
                )
                row = await cursor.fetchone()
        except aiosqlite.Error as exc:
            raise DocumentStoreError(
                message=f"Failed to load document {document_id}: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        return self._row_to_document(row) if row else None

    async def list_for_owner(self, owner_id: str) -> list[SourceDocument]:
        """Return all documents for an owner, newest first."""
        try:
            async with aiosqlite.connect(str(self._db_path)) as db:
                db.row_factory = aiosqlite.Row
                cursor = await db.execute(
                    f"SELECT {_SELECT_COLUMNS} FROM documents "
                    "WHERE owner_id = ? ORDER BY created_at DESC",
                    (owner_id,),
                )
                rows = await cursor.fetchall()
        except aiosqlite.Error as exc:
            raise DocumentStoreError(
                message=f"Failed to list documents: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        return [self._row_to_document(r) for r in rows]

    async def delete(self, document_id: str) -> bool:
        try:
            async with aiosqlite.connect(str(self._db_path)) as db:
                cursor = await db.execute(
                    "DELETE FROM documents WHERE document_id = ?",
                    (document_id,),
                )
                await db.commit()
                deleted = cursor.rowcount > 0
        except aiosqlite.Error as exc:
            raise DocumentStoreError(
                message=f"Failed to delete document {document_id}: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        logger.info("document_row_deleted", document_id=document_id, existed=deleted)
        return deleted

    def get_provider_name(self) -> str:
        return "sqlite"

    @staticmethod
    def _row_to_document(row: aiosqlite.Row) -> SourceDocument:
        data = dict(row)
        data["created_at"] = datetime.fromisoformat(data["created_at"])
        return SourceDocument(**data)
