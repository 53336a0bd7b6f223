"""Custom exception hierarchy for NoteMaster.

All application exceptions inherit from :class:`NoteMasterError`, which
carries an optional ``provider_name`` so error handlers can identify which
backing service (e.g. "openai", "chromadb", "sqlite") caused the failure.

The hierarchy is organized by pipeline path:

    NoteMasterError  (base -- catch-all for any NoteMaster error)
    +-- UnsupportedFormatError   (ingest: mime type not in the allow-list)
    +-- ExtractionError          (ingest: corrupt container / empty text)
    +-- EmbeddingProviderError   (ingest + retrieve: embedding API failure)
    +-- IndexUpsertError         (ingest: vector batch upsert failure)
    +-- IndexQueryError          (retrieve: similarity search failure)
    +-- IndexDeleteError         (delete: vector removal failure)
    +-- BlobStoreError           (upload / delete: blob store failure)
    +-- DocumentStoreError       (relational record failure)
    |   +-- DocumentNotFoundError    (unknown id or another owner's row)
    |   +-- DuplicateDocumentError   (same owner + file name already stored)
    +-- UploadTooLargeError      (upload: payload over the size limit)
    +-- PartialDeletionFailure   (delete: non-fatal, logged only)
    +-- ConfigurationError       (startup / missing config)

The write path fails closed on any of these, the read path surfaces them as
a failure envelope, and the delete path turns the secondary-store ones
into a logged :class:`PartialDeletionFailure`.
"""


class NoteMasterError(Exception):
    """Base exception for all NoteMaster errors.

    Every subclass carries a human-readable ``message`` and an optional
    ``provider_name`` identifying which external service triggered the
    error.  The ``__str__`` method prefixes the provider name in brackets
    for structured log output, e.g. ``[chromadb] query failed``.
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Extraction errors (write path, user-actionable)
# ---------------------------------------------------------------------------

class UnsupportedFormatError(NoteMasterError):
    """Raised when a declared mime type is not in the accepted allow-list.

    Raised before any parsing work is attempted.
    """

    def __init__(
        self,
        message: str = "Unsupported file type",
        provider_name: str | None = None,
        mime_type: str | None = None,
    ) -> None:
        self._mime_type = mime_type
        super().__init__(message=message, provider_name=provider_name)

    @property
    def mime_type(self) -> str | None:
        return self._mime_type


class ExtractionError(NoteMasterError):
    """Raised when text extraction fails.

    Covers corrupt containers, malformed markup, undecodable text, and
    extractions that yield no non-whitespace characters.
    """

    def __init__(
        self,
        message: str = "Text extraction failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Provider / store errors
# ---------------------------------------------------------------------------

class EmbeddingProviderError(NoteMasterError):
    """Raised when the embedding API call fails or returns unusable output."""

    def __init__(
        self,
        message: str = "Embedding provider call failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class IndexUpsertError(NoteMasterError):
    """Raised when the batched vector upsert fails.  Nothing is retried."""

    def __init__(
        self,
        message: str = "Vector index upsert failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class IndexQueryError(NoteMasterError):
    """Raised when a similarity search against the vector index fails."""

    def __init__(
        self,
        message: str = "Vector index query failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class IndexDeleteError(NoteMasterError):
    """Raised when removing vectors from the index fails."""

    def __init__(
        self,
        message: str = "Vector index delete failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class BlobStoreError(NoteMasterError):
    """Raised when storing, reading or deleting a blob fails."""

    def __init__(
        self,
        message: str = "Blob store operation failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class DocumentStoreError(NoteMasterError):
    """Raised when the relational document record cannot be read or written."""

    def __init__(
        self,
        message: str = "Document store operation failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class DocumentNotFoundError(DocumentStoreError):
    """Raised when a document id does not exist or belongs to another owner."""

    def __init__(
        self,
        message: str = "Document not found",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class DuplicateDocumentError(DocumentStoreError):
    """Raised when an owner uploads a second document with the same file name.

    Vectors are addressed by ``(ownerId, fileName)``, so two live documents
    with one name could not be deleted independently.
    """

    def __init__(
        self,
        message: str = "A document with this name already exists",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class UploadTooLargeError(NoteMasterError):
    """Raised when an upload exceeds ``max_upload_bytes``."""

    def __init__(
        self,
        message: str = "Upload exceeds the maximum allowed size",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class PartialDeletionFailure(NoteMasterError):
    """A secondary store (blob or vector) could not be cleaned up.

    Non-fatal: the deletion service logs it and carries on so the
    relational record is still removed.  ``store`` names the store that
    failed (``"blob"`` or ``"vector"``).
    """

    def __init__(
        self,
        message: str = "Secondary store deletion failed",
        provider_name: str | None = None,
        store: str = "unknown",
    ) -> None:
        self._store = store
        super().__init__(message=message, provider_name=provider_name)

    @property
    def store(self) -> str:
        return self._store


# ---------------------------------------------------------------------------
# Configuration errors
# ---------------------------------------------------------------------------

class ConfigurationError(NoteMasterError):
    """Raised when configuration is invalid or missing at startup."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
