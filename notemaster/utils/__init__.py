"""Utility modules for NoteMaster.

Available utility modules (re-exported here for convenience):

- **errors** -- Domain-specific exception hierarchy rooted at NoteMasterError;
  each pipeline stage raises its own subclass so services can apply the
  fail-closed / fail-open policy per path without broad ``except`` blocks.
- **logging** -- structlog setup with a dual-renderer pattern: coloured
  console output in development, structured JSON in production.
- **text_normalizer** -- Line-ending, control-character and blank-line
  cleanup applied to every extractor's output.
"""

from notemaster.utils.errors import (
    BlobStoreError,
    ConfigurationError,
    DocumentNotFoundError,
    DocumentStoreError,
    DuplicateDocumentError,
    EmbeddingProviderError,
    ExtractionError,
    IndexDeleteError,
    IndexQueryError,
    IndexUpsertError,
    NoteMasterError,
    PartialDeletionFailure,
    UnsupportedFormatError,
    UploadTooLargeError,
)
from notemaster.utils.logging import configure_logging, get_logger
from notemaster.utils.text_normalizer import has_visible_text, normalize_extracted_text

__all__ = [
    "BlobStoreError",
    "ConfigurationError",
    "DocumentNotFoundError",
    "DocumentStoreError",
    "DuplicateDocumentError",
    "EmbeddingProviderError",
    "ExtractionError",
    "IndexDeleteError",
    "IndexQueryError",
    "IndexUpsertError",
    "NoteMasterError",
    "PartialDeletionFailure",
    "UnsupportedFormatError",
    "UploadTooLargeError",
    "configure_logging",
    "get_logger",
    "has_visible_text",
    "normalize_extracted_text",
]
