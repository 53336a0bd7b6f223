"""Public interface definitions for every backing store and external provider.

The ingestion, retrieval and deletion services talk to their collaborators
exclusively through the abstract base classes defined here.  Concrete
adapters live in ``notemaster/providers/`` and are wired together in
``notemaster/main.py``; tests inject in-memory fakes instead.

CONCRETE PROVIDER MAP:
    Interface               ->  Concrete implementations
    -----------------------------------------------------------------
    IEmbeddingProvider      ->  OpenAIEmbeddingProvider, OllamaEmbeddingProvider
    IVectorStoreProvider    ->  ChromaDBProvider
    IBlobStore              ->  LocalBlobStore
    IDocumentRepository     ->  SQLiteDocumentRepository
"""

from notemaster.interfaces.blob_store import IBlobStore
from notemaster.interfaces.document_repository import IDocumentRepository
from notemaster.interfaces.embedding_provider import IEmbeddingProvider
from notemaster.interfaces.vector_store_provider import IVectorStoreProvider

__all__ = [
    "IBlobStore",
    "IDocumentRepository",
    "IEmbeddingProvider",
    "IVectorStoreProvider",
]
