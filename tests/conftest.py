"""Shared pytest fixtures for the NoteMaster test suite."""

from __future__ import annotations

import hashlib
import io
import math
import re
import zipfile
from pathlib import Path
from typing import Any

import docx
import pytest

from notemaster.config.settings import Settings
from notemaster.interfaces.blob_store import IBlobStore
from notemaster.interfaces.document_repository import IDocumentRepository
from notemaster.interfaces.embedding_provider import IEmbeddingProvider
from notemaster.interfaces.vector_store_provider import IVectorStoreProvider
from notemaster.models.documents import SourceDocument
from notemaster.models.rag import RetrievedPassage, VectorRecord
from notemaster.services.deletion_service import DeletionService
from notemaster.services.document_service import DocumentService
from notemaster.services.ingestion.chunker import TextChunker
from notemaster.services.ingestion.indexer import Indexer
from notemaster.services.ingestion.ingestion_service import IngestionService
from notemaster.services.ingestion.text_extractor import TextExtractor
from notemaster.services.retrieval_service import RetrievalService
from notemaster.utils.errors import (
    BlobStoreError,
    DocumentNotFoundError,
    DuplicateDocumentError,
)

# ---------------------------------------------------------------------------
# Mime types
# ---------------------------------------------------------------------------

DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
PPTX_MIME = "application/vnd.openxmlformats-officedocument.presentationml.presentation"

# ---------------------------------------------------------------------------
# Deterministic embeddings
# ---------------------------------------------------------------------------

_EMBEDDING_DIM = 128
_WORD = re.compile(r"\w+")


def _hash_to_vector(text: str, dim: int = _EMBEDDING_DIM) -> list[float]:
    """Generate a deterministic fixed-length vector by hashing *text*.

    Each word adds a pseudo-random unit-ish vector, so texts sharing many
    words end up close in cosine space.  Same text, same vector.
    """
    values = [0.0] * dim
    for word in _WORD.findall(text.lower()) or [text]:
        raw = hashlib.sha256(word.encode("utf-8")).digest()
        while len(raw) < dim:
            raw += hashlib.sha256(raw).digest()
        for i, byte in enumerate(raw[:dim]):
            values[i] += (byte - 127.5) / 127.5
    magnitude = max(math.sqrt(sum(v * v for v in values)), 1e-10)
    return [v / magnitude for v in values]


class MockEmbeddingProvider(IEmbeddingProvider):
    """In-memory deterministic embedding provider for tests."""

    def __init__(self) -> None:
        self.calls: list[list[str]] = []

    async def embed(self, texts: list[str]) -> list[list[float]]:
        self.calls.append(list(texts))
        return [_hash_to_vector(t) for t in texts]

    async def embed_single(self, text: str) -> list[float]:
        return (await self.embed([text]))[0]

    def get_dimension(self) -> int:
        return _EMBEDDING_DIM

    def get_model_name(self) -> str:
        return "mock-embedding-model"

    def get_provider_name(self) -> str:
        return "mock-embedding"

    def is_available(self) -> bool:
        return True


class MockVectorStore(IVectorStoreProvider):
    """In-memory vector store backed by a dict of record id -> record.

    ``query`` applies the owner filter and ranks by cosine similarity, the
    same contract the ChromaDB adapter implements.
    """

    def __init__(self) -> None:
        self.records: dict[str, VectorRecord] = {}
        self.upsert_calls = 0

    async def upsert(self, records: list[VectorRecord]) -> int:
        self.upsert_calls += 1
        for record in records:
            self.records[record.record_id] = record
        return len(records)

    async def query(
        self,
        embedding: list[float],
        owner_id: str,
        top_k: int = 5,
    ) -> list[RetrievedPassage]:
        scored: list[tuple[float, VectorRecord]] = []
        for record in self.records.values():
            if record.metadata.owner_id != owner_id:
                continue
            dot = sum(a * b for a, b in zip(embedding, record.embedding, strict=False))
            scored.append((max(0.0, min(1.0, dot)), record))
        scored.sort(key=lambda pair: pair[0], reverse=True)
        return [
            RetrievedPassage(text=r.text, metadata=r.metadata, score=score)
            for score, r in scored[:top_k]
        ]

    async def delete_document(self, owner_id: str, file_name: str) -> int:
        doomed = [
            rid
            for rid, r in self.records.items()
            if r.metadata.owner_id == owner_id and r.metadata.file_name == file_name
        ]
        for rid in doomed:
            del self.records[rid]
        return len(doomed)

    async def count(self, owner_id: str | None = None) -> int:
        if owner_id is None:
            return len(self.records)
        return sum(1 for r in self.records.values() if r.metadata.owner_id == owner_id)

    def get_provider_name(self) -> str:
        return "mock-vector-store"

    def is_available(self) -> bool:
        return True


class MemoryBlobStore(IBlobStore):
    """Dict-backed blob store."""

    def __init__(self) -> None:
        self.blobs: dict[str, bytes] = {}

    async def put(self, key: str, data: bytes, content_type: str = "") -> str:
        self.blobs[key] = data
        return key

    async def get(self, key: str) -> bytes:
        if key not in self.blobs:
            raise BlobStoreError(message=f"missing {key}", provider_name="memory_blob")
        return self.blobs[key]

    async def delete(self, key: str) -> bool:
        return self.blobs.pop(key, None) is not None

    def get_provider_name(self) -> str:
        return "memory_blob"


class MemoryDocumentRepository(IDocumentRepository):
    """Dict-backed document repository."""

    def __init__(self) -> None:
        self.rows: dict[str, SourceDocument] = {}

    async def initialize(self) -> None:
        return None

    async def add(self, document: SourceDocument) -> SourceDocument:
        for row in self.rows.values():
            if (row.owner_id, row.file_name) == (document.owner_id, document.file_name):
                raise DuplicateDocumentError(
                    message=f"'{document.file_name}' is already uploaded",
                    provider_name="memory_repository",
                )
        self.rows[document.document_id] = document
        return document

    async def set_chunk_count(self, document_id: str, chunk_count: int) -> None:
        if document_id not in self.rows:
            raise DocumentNotFoundError(message=f"Document {document_id} not found")
        self.rows[document_id] = self.rows[document_id].model_copy(
            update={"chunk_count": chunk_count}
        )

    async def get(self, document_id: str) -> SourceDocument | None:
        return self.rows.get(document_id)

    async def list_for_owner(self, owner_id: str) -> list[SourceDocument]:
        owned = [d for d in self.rows.values() if d.owner_id == owner_id]
        return sorted(owned, key=lambda d: d.created_at, reverse=True)

    async def delete(self, document_id: str) -> bool:
        return self.rows.pop(document_id, None) is not None

    def get_provider_name(self) -> str:
        return "memory_repository"


# ---------------------------------------------------------------------------
# Fixture documents built in memory
# ---------------------------------------------------------------------------

_SLIDE_XML = (
    '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'
    '<p:sld xmlns:a="http://schemas.openxmlformats.org/drawingml/2006/main" '
    'xmlns:p="http://schemas.openxmlformats.org/presentationml/2006/main">'
    "<p:cSld><p:spTree>{shapes}</p:spTree></p:cSld></p:sld>"
)
_SHAPE_XML = "<p:sp><p:txBody><a:p><a:r><a:t>{text}</a:t></a:r></a:p></p:txBody></p:sp>"


def build_pptx(slides: dict[int, list[str]], order: list[int] | None = None) -> bytes:
    """Build a minimal .pptx zip.

    *slides* maps slide number -> text runs.  *order* sets the order the
    slide parts are written to the archive (defaults to ascending).
    """
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w") as archive:
        archive.writestr("[Content_Types].xml", "<Types/>")
        archive.writestr("ppt/presentation.xml", "<presentation/>")
        for number in order or sorted(slides):
            shapes = "".join(_SHAPE_XML.format(text=t) for t in slides[number])
            archive.writestr(f"ppt/slides/slide{number}.xml", _SLIDE_XML.format(shapes=shapes))
        archive.writestr("ppt/slides/_rels/slide1.xml.rels", "<Relationships/>")
    return buf.getvalue()


def build_docx(paragraphs: list[str]) -> bytes:
    """Build a .docx with one paragraph per entry using python-docx."""
    document = docx.Document()
    for text in paragraphs:
        document.add_paragraph(text)
    buf = io.BytesIO()
    document.save(buf)
    return buf.getvalue()


def replace_zip_entry(data: bytes, name: str, content: str) -> bytes:
    """Return a copy of the zip *data* with entry *name* swapped for *content*."""
    buf = io.BytesIO()
    with zipfile.ZipFile(io.BytesIO(data)) as source, zipfile.ZipFile(buf, "w") as target:
        for info in source.infolist():
            if info.filename != name:
                target.writestr(info, source.read(info.filename))
        target.writestr(name, content)
    return buf.getvalue()


def set_zip_compression_method(data: bytes, method: int) -> bytes:
    """Rewrite the compression method of every entry in the zip *data*.

    Patches both the local file headers and the central directory, so the
    archive still opens but its entries cannot be decompressed.
    """
    patched = bytearray(data)
    code = method.to_bytes(2, "little")
    for signature, offset in ((b"PK\x03\x04", 8), (b"PK\x01\x02", 10)):
        start = patched.find(signature)
        while start != -1:
            patched[start + offset : start + offset + 2] = code
            start = patched.find(signature, start + len(signature))
    return bytes(patched)


def build_pdf(pages: list[str]) -> bytes:
    """Build a PDF with one text page per entry using PyMuPDF."""
    import fitz

    doc = fitz.open()
    for text in pages:
        page = doc.new_page()
        if text:
            page.insert_text((72, 72), text, fontsize=11)
    data = doc.tobytes()
    doc.close()
    return data


# ---------------------------------------------------------------------------
# Service fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """Settings pointing every store at a temp directory."""
    return Settings(
        _env_file=None,
        openai_api_key="sk-test-key",
        chromadb_persist_dir=str(tmp_path / "chromadb"),
        blob_store_dir=str(tmp_path / "blobs"),
        document_db_path=str(tmp_path / "documents.db"),
        chunk_size=200,
        chunk_overlap=40,
    )


@pytest.fixture
def mock_embedding_provider() -> MockEmbeddingProvider:
    """Mock IEmbeddingProvider returning deterministic hash-based vectors."""
    return MockEmbeddingProvider()


@pytest.fixture
def mock_vector_store() -> MockVectorStore:
    """Mock IVectorStoreProvider backed by an in-memory dict."""
    return MockVectorStore()


@pytest.fixture
def memory_blob_store() -> MemoryBlobStore:
    return MemoryBlobStore()


@pytest.fixture
def memory_repository() -> MemoryDocumentRepository:
    return MemoryDocumentRepository()


@pytest.fixture
def indexer(mock_embedding_provider, mock_vector_store) -> Indexer:
    return Indexer(embedding_provider=mock_embedding_provider, vector_store=mock_vector_store)


@pytest.fixture
def ingestion_service(indexer) -> IngestionService:
    return IngestionService(
        extractor=TextExtractor(),
        chunker=TextChunker(chunk_size=200, overlap=40),
        indexer=indexer,
    )


@pytest.fixture
def retrieval_service(mock_embedding_provider, mock_vector_store) -> RetrievalService:
    return RetrievalService(
        embedding_provider=mock_embedding_provider,
        vector_store=mock_vector_store,
        default_top_k=5,
        max_top_k=20,
    )


@pytest.fixture
def deletion_service(memory_blob_store, mock_vector_store, memory_repository) -> DeletionService:
    return DeletionService(
        blob_store=memory_blob_store,
        vector_store=mock_vector_store,
        document_repository=memory_repository,
    )


@pytest.fixture
def document_service(
    memory_blob_store, memory_repository, ingestion_service, deletion_service
) -> DocumentService:
    return DocumentService(
        blob_store=memory_blob_store,
        document_repository=memory_repository,
        ingestion_service=ingestion_service,
        deletion_service=deletion_service,
        max_upload_bytes=1024 * 1024,
    )


@pytest.fixture
def sample_notes_text() -> str:
    """Multi-paragraph study notes used by chunker and pipeline tests."""
    return (
        "Cell division is the process by which a parent cell divides into two "
        "or more daughter cells. It usually occurs as part of a larger cell "
        "cycle. In eukaryotes, there are two distinct types of cell division: "
        "a vegetative division called mitosis, and a reproductive division "
        "called meiosis.\n\n"
        "Mitosis proceeds through prophase, prometaphase, metaphase, anaphase "
        "and telophase. During metaphase the chromosomes align along the "
        "metaphase plate. Dr. Flemming first described the process in 1882, "
        "naming it after the Greek word for thread.\n\n"
        "Meiosis halves the chromosome number and produces four genetically "
        "distinct haploid cells. Crossing over during prophase I exchanges "
        "segments between homologous chromosomes! Why does this matter? It "
        "increases genetic diversity in the offspring.\n\n"
        "Photosynthesis converts light energy into chemical energy stored in "
        "glucose. The light-dependent reactions occur in the thylakoid "
        "membranes, while the Calvin cycle runs in the stroma of the "
        "chloroplast."
    )


def owner_records(store: MockVectorStore, owner_id: str) -> list[Any]:
    return [r for r in store.records.values() if r.metadata.owner_id == owner_id]
