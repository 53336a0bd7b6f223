"""Local embedding provider served by Ollama.

Talks to Ollama's OpenAI-compatible ``/v1`` endpoint, so no API key is
needed.  ``settings.embedding_model`` picks the model when it names one of
the embedding models Ollama serves; an OpenAI model name (the default) falls
back to ``nomic-embed-text``.
"""

from __future__ import annotations

import httpx
import openai
import structlog

from notemaster.config.settings import Settings
from notemaster.interfaces.embedding_provider import IEmbeddingProvider
from notemaster.utils.errors import EmbeddingProviderError

logger = structlog.get_logger(logger_name=__name__)

_OLLAMA_BATCH_LIMIT = 512
_DEFAULT_MODEL = "nomic-embed-text"

_MODEL_DIMENSIONS: dict[str, int] = {
    "nomic-embed-text": 768,
    "mxbai-embed-large": 1024,
    "snowflake-arctic-embed": 1024,
    "all-minilm": 384,
}


def resolve_ollama_model(configured: str) -> str:
    """Return *configured* if Ollama serves it, else the default model."""
    name = configured.split(":", 1)[0]
    return configured if name in _MODEL_DIMENSIONS else _DEFAULT_MODEL


class OllamaEmbeddingProvider(IEmbeddingProvider):
    """Embeds through a local Ollama server with one fixed model."""

    def __init__(self, settings: Settings) -> None:
        self._base_url = settings.ollama_base_url.rstrip("/")
        self._client = openai.AsyncOpenAI(base_url=f"{self._base_url}/v1", api_key="ollama")
        self._model = resolve_ollama_model(settings.embedding_model)
        self._dimension = _MODEL_DIMENSIONS[self._model.split(":", 1)[0]]

    async def embed(self, texts: list[str]) -> list[list[float]]:
        if not texts:
            return []

        vectors: list[list[float]] = []
        for start in range(0, len(texts), _OLLAMA_BATCH_LIMIT):
            batch = texts[start : start + _OLLAMA_BATCH_LIMIT]
            try:
                response = await self._client.embeddings.create(input=batch, model=self._model)
            except openai.APIError as exc:
                raise EmbeddingProviderError(
                    message=f"Ollama embedding call failed for {self._model}: {exc}",
                    provider_name=self.get_provider_name(),
                ) from exc
            if len(response.data) != len(batch):
                raise EmbeddingProviderError(
                    message=(
                        f"Ollama returned {len(response.data)} vectors "
                        f"for {len(batch)} inputs"
                    ),
                    provider_name=self.get_provider_name(),
                )
            vectors.extend(item.embedding for item in sorted(response.data, key=lambda i: i.index))
            logger.debug("ollama_embedding_batch", model=self._model, batch_size=len(batch))
        return vectors

    async def embed_single(self, text: str) -> list[float]:
        return (await self.embed([text]))[0]

    def get_dimension(self) -> int:
        return self._dimension

    def get_model_name(self) -> str:
        return self._model

    def get_provider_name(self) -> str:
        return "ollama_embedding"

    def is_available(self) -> bool:
        """Return ``True`` if the Ollama server answers ``/api/tags``."""
        if not self._base_url:
            return False
        try:
            response = httpx.get(f"{self._base_url}/api/tags", timeout=3.0)
        except httpx.HTTPError:
            return False
        return response.status_code == 200
