"""Document-side data models: source documents, variants and text chunks.

Defines Pydantic v2 models for the uploaded :class:`SourceDocument` record
(the row kept in the relational store) and the transient :class:`TextChunk`
segments the chunker produces.  All models are frozen.

The accepted mime types form an explicit allow-list mapped onto the four
:class:`DocumentVariant` members; the extractor dispatcher refuses anything
else before it reads a single byte of the payload.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field


class DocumentVariant(str, Enum):
    """The document formats the extractor understands."""

    PLAIN_TEXT = "plain_text"
    PDF = "pdf"
    WORD = "word"
    SLIDE_DECK = "slide_deck"


# Accepted mime types -> variant.  Anything not listed is UnsupportedFormat.
MIME_TYPE_VARIANTS: dict[str, DocumentVariant] = {
    "text/plain": DocumentVariant.PLAIN_TEXT,
    "application/pdf": DocumentVariant.PDF,
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": (
        DocumentVariant.WORD
    ),
    "application/vnd.openxmlformats-officedocument.presentationml.presentation": (
        DocumentVariant.SLIDE_DECK
    ),
}

# Legacy binary Office formats get a specific rejection message.
LEGACY_MIME_TYPES: dict[str, str] = {
    "application/vnd.ms-powerpoint": (
        "Older PowerPoint (.ppt) files are not supported. Please convert to .pptx"
    ),
    "application/msword": (
        "Older Word (.doc) files are not supported. Please convert to .docx"
    ),
}

# Filename suffix -> mime type, used when a caller (e.g. the CLI) has no
# declared content type.
EXTENSION_MIME_TYPES: dict[str, str] = {
    ".txt": "text/plain",
    ".md": "text/plain",
    ".pdf": "application/pdf",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ".pptx": "application/vnd.openxmlformats-officedocument.presentationml.presentation",
    ".ppt": "application/vnd.ms-powerpoint",
    ".doc": "application/msword",
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# SourceDocument -- the relational record of one upload.
# ---------------------------------------------------------------------------
class SourceDocument(BaseModel):
    """An uploaded document owned by exactly one user.

    Created on successful upload, removed by the deletion service, otherwise
    immutable.  ``blob_key`` locates the original bytes in the blob store.
    """

    model_config = ConfigDict(frozen=True)

    document_id: str = Field(default_factory=lambda: uuid4().hex)
    owner_id: str = Field(min_length=1, description="Tenant that owns this document.")
    file_name: str = Field(min_length=1)
    mime_type: str
    size_bytes: int = Field(ge=0)
    blob_key: str = Field(description="Location of the original bytes in the blob store.")
    chunk_count: int = Field(default=0, ge=0)
    created_at: datetime = Field(default_factory=_utcnow)


# ---------------------------------------------------------------------------
# TextChunk -- transient segment handed from the chunker to the indexer.
# ---------------------------------------------------------------------------
class TextChunk(BaseModel):
    """A contiguous, bounded-size segment of a document's normalized text.

    ``start`` is the character offset of the segment in the chunked text, so
    ``text == source_text[start:start + len(text)]`` always holds.
    """

    model_config = ConfigDict(frozen=True)

    text: str
    file_name: str = ""
    chunk_index: int = Field(ge=0, description="Ordinal position in document order.")
    start: int = Field(default=0, ge=0)

    @property
    def end(self) -> int:
        return self.start + len(self.text)


def guess_mime_type(file_name: str, declared: str | None = None) -> str:
    """Return *declared* unless it is missing or generic, else guess by suffix.

    Returns ``""`` when the suffix is unknown; the extractor then rejects it.
    """
    if declared and declared != "application/octet-stream":
        return declared
    suffix = "." + file_name.rsplit(".", 1)[-1].lower() if "." in file_name else ""
    return EXTENSION_MIME_TYPES.get(suffix, declared or "")
