"""NoteMaster FastAPI application entry point.

Wires together all providers and services via dependency injection, loads
configuration from the environment / ``.env``, and configures structured
logging.  ``build_services`` is shared with the CLI so both surfaces run
exactly the same pipeline.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

import structlog
import uvicorn
from fastapi import FastAPI

from notemaster.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
)
from notemaster.api.routes import router as api_router
from notemaster.config.settings import Settings
from notemaster.interfaces.embedding_provider import IEmbeddingProvider
from notemaster.providers.blob_store.local_blob_store import LocalBlobStore
from notemaster.providers.document_repository.sqlite_document_repository import (
    SQLiteDocumentRepository,
)
from notemaster.providers.embedding.ollama_embedding_provider import OllamaEmbeddingProvider
from notemaster.providers.embedding.openai_embedding_provider import OpenAIEmbeddingProvider
from notemaster.providers.vector_store.chromadb_provider import ChromaDBProvider
from notemaster.services.deletion_service import DeletionService
from notemaster.services.document_service import DocumentService
from notemaster.services.ingestion.chunker import TextChunker
from notemaster.services.ingestion.indexer import Indexer
from notemaster.services.ingestion.ingestion_service import IngestionService
from notemaster.services.ingestion.text_extractor import TextExtractor
from notemaster.services.retrieval_service import RetrievalService
from notemaster.utils.errors import ConfigurationError
from notemaster.utils.logging import configure_logging, get_logger

# ---------------------------------------------------------------------------
# Module-level settings & logging
# ---------------------------------------------------------------------------

settings = Settings()

configure_logging(
    log_level=settings.log_level,
    json_output=(settings.app_env == "production"),
)
_logger: structlog.BoundLogger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Embedding provider selection
# ---------------------------------------------------------------------------


def _build_embedding_provider(app_settings: Settings) -> IEmbeddingProvider:
    """Select the embedding provider.

    Priority: OpenAI/OpenAI-compatible (if API key set) -> Ollama
    (if reachable).  The chosen provider is shared by indexing and
    retrieval.

    Raises
    ------
    ConfigurationError
        If neither provider is usable.
    """
    if app_settings.openai_api_key:
        return OpenAIEmbeddingProvider(settings=app_settings)

    provider = OllamaEmbeddingProvider(settings=app_settings)
    if provider.is_available():
        _logger.warning(
            "embedding_fallback_to_ollama",
            model=provider.get_model_name(),
            configured_model=app_settings.embedding_model,
        )
        return provider

    raise ConfigurationError(
        message=(
            "No embedding provider available: set OPENAI_API_KEY or run Ollama "
            f"at {app_settings.ollama_base_url}"
        ),
    )


# ---------------------------------------------------------------------------
# Full DI assembly
# ---------------------------------------------------------------------------


def build_services(
    app_settings: Settings,
    embedding_provider: IEmbeddingProvider | None = None,
) -> dict[str, Any]:
    """Construct every provider and service instance.

    Returns a flat dict of named components (stored on ``app.state`` by the
    web app, used directly by the CLI).
    """
    embedding = embedding_provider or _build_embedding_provider(app_settings)

    # -- Stores --
    vector_store = ChromaDBProvider(
        embedding_provider=embedding,
        persist_directory=app_settings.chromadb_persist_dir,
        collection_name=app_settings.vector_namespace,
    )
    blob_store = LocalBlobStore(root_dir=app_settings.blob_store_dir)
    document_repository = SQLiteDocumentRepository(db_path=app_settings.document_db_path)

    # -- Ingestion path --
    ingestion_service = IngestionService(
        extractor=TextExtractor(),
        chunker=TextChunker(
            chunk_size=app_settings.chunk_size,
            overlap=app_settings.chunk_overlap,
        ),
        indexer=Indexer(embedding_provider=embedding, vector_store=vector_store),
    )

    # -- Read + delete paths --
    retrieval_service = RetrievalService(
        embedding_provider=embedding,
        vector_store=vector_store,
        default_top_k=app_settings.retrieval_default_top_k,
        max_top_k=app_settings.retrieval_max_top_k,
    )
    deletion_service = DeletionService(
        blob_store=blob_store,
        vector_store=vector_store,
        document_repository=document_repository,
    )
    document_service = DocumentService(
        blob_store=blob_store,
        document_repository=document_repository,
        ingestion_service=ingestion_service,
        deletion_service=deletion_service,
        max_upload_bytes=app_settings.max_upload_bytes,
    )

    return {
        "settings": app_settings,
        "embedding_provider": embedding,
        "vector_store": vector_store,
        "blob_store": blob_store,
        "document_repository": document_repository,
        "ingestion_service": ingestion_service,
        "retrieval_service": retrieval_service,
        "deletion_service": deletion_service,
        "document_service": document_service,
    }


# ---------------------------------------------------------------------------
# Application lifespan (startup / shutdown)
# ---------------------------------------------------------------------------


@asynccontextmanager
async def _lifespan(application: FastAPI):  # noqa: ANN201
    """Initialise all providers and services on startup."""
    components = build_services(settings)

    for key, value in components.items():
        setattr(application.state, key, value)

    await components["document_repository"].initialize()

    _logger.info(
        "app_startup",
        version="0.1.0",
        environment=settings.app_env,
        embedding_provider=components["embedding_provider"].get_provider_name(),
        embedding_model=components["embedding_provider"].get_model_name(),
        namespace=settings.vector_namespace,
    )

    yield

    _logger.info("app_shutdown")


# ---------------------------------------------------------------------------
# FastAPI application factory
# ---------------------------------------------------------------------------


def create_app(*, use_lifespan: bool = True) -> FastAPI:
    """Build and configure the FastAPI application.

    ``use_lifespan=False`` skips provider assembly so tests can place their
    own services on ``app.state``.
    """
    application = FastAPI(
        title="NoteMaster API",
        version="0.1.0",
        description=(
            "Upload documents, index their text for semantic search, and "
            "retrieve owner-scoped passages to ground text generation."
        ),
        lifespan=_lifespan if use_lifespan else None,
    )

    # -- Middleware (last added = first executed) --
    application.add_middleware(ErrorHandlingMiddleware)
    application.add_middleware(RequestLoggingMiddleware)
    configure_cors(application)

    application.include_router(api_router)
    return application


app = create_app()

# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    uvicorn.run(
        "notemaster.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=(settings.app_env == "development"),
    )
