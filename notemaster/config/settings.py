"""Application settings loaded from environment variables via pydantic-settings.

pydantic-settings reads configuration from two sources, in priority order:

  1. **Environment variables** -- e.g. ``OPENAI_API_KEY=sk-abc123``
  2. **.env file** -- key=value lines in the project root ``.env`` file

Field ``openai_api_key`` maps to env var ``OPENAI_API_KEY`` and so on.
Defaults apply when neither source defines a value.

``embedding_model`` is the single model identifier used both when indexing
chunks and when embedding queries.  Vectors produced by different models are
not comparable, so changing it requires re-ingesting every document.
"""

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """NoteMaster application settings.

    Environment variables override defaults. Loaded from .env file when present.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # === Embedding providers ===
    # Empty key = "not configured"; assembly falls back to Ollama.
    openai_api_key: str = ""
    openai_base_url: str = ""
    embedding_model: str = "text-embedding-3-large"
    ollama_base_url: str = "http://localhost:11434"

    # === Vector store ===
    chromadb_persist_dir: str = "./data/chromadb"
    # One shared namespace for every owner; isolation is by ownerId filter.
    vector_namespace: str = "notemaster"

    # === Blob + relational stores ===
    blob_store_dir: str = "./data/blobs"
    document_db_path: str = "data/documents.db"

    # === Chunking (characters) ===
    chunk_size: int = Field(default=1000, gt=0)
    chunk_overlap: int = Field(default=200, ge=0)

    # === Retrieval ===
    retrieval_default_top_k: int = Field(default=5, ge=1)
    retrieval_max_top_k: int = Field(default=20, ge=1)

    # === Uploads ===
    max_upload_bytes: int = 25 * 1024 * 1024

    # === App Config ===
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    app_env: str = "development"
    log_level: str = "INFO"

    @model_validator(mode="after")
    def _check_chunk_window(self) -> "Settings":
        if self.chunk_overlap >= self.chunk_size:
            raise ValueError(
                f"chunk_overlap ({self.chunk_overlap}) must be smaller than "
                f"chunk_size ({self.chunk_size})"
            )
        if self.retrieval_default_top_k > self.retrieval_max_top_k:
            raise ValueError("retrieval_default_top_k cannot exceed retrieval_max_top_k")
        return self
