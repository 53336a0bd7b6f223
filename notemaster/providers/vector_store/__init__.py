"""Vector store provider implementations."""

from notemaster.providers.vector_store.chromadb_provider import ChromaDBProvider

__all__ = ["ChromaDBProvider"]
