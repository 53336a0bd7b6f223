"""Embedding provider implementations."""

from notemaster.providers.embedding.ollama_embedding_provider import OllamaEmbeddingProvider
from notemaster.providers.embedding.openai_embedding_provider import OpenAIEmbeddingProvider

__all__ = ["OllamaEmbeddingProvider", "OpenAIEmbeddingProvider"]
