"""Application settings loaded from environment variables via pydantic-settings.

pydantic-settings reads configuration from two sources, in priority order:

  1. **Environment variables** -- e.g. ``OPENAI_API_KEY=sk-abc123``
  2. **.env file** -- key=value lines in the project root ``.env`` file

Field ``openai_api_key`` maps to env var ``OPENAI_API_KEY``.  Defaults are
used when neither source sets a value.
"""

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """vacancy-rag application settings.

    Environment variables override defaults. Loaded from .env file when present.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # === Model providers ===
    # Empty string = "not configured"; the factories in main.py fall
    # through to the local Ollama adapters.
    openai_api_key: str = ""
    openai_base_url: str = ""  # Custom base URL for OpenAI-compatible APIs
    openai_embedding_model: str = ""  # Defaults to text-embedding-3-small
    summary_model: str = "gpt-4o-mini"
    questions_model: str = "gpt-4o"
    ollama_base_url: str = "http://localhost:11434"
    ollama_text_model: str = "llama3.1"
    embedding_provider: str = "auto"  # auto | openai | nomic

    # === Provider call limits ===
    provider_timeout_seconds: float = 30.0
    provider_max_retries: int = 2
    extraction_timeout_seconds: float = 60.0
    embedding_max_chars: int = 8191

    # === Storage ===
    vector_store: str = "chromadb"  # chromadb | memory
    chromadb_persist_dir: str = "./data/chromadb"
    chromadb_collection: str = "position_document_chunks"
    sqlite_db_path: str = "data/vacancy_rag.db"

    # === Ingestion ===
    chunk_size: int = 1000
    chunk_overlap: int = 200
    document_preview_chars: int = 10000

    # === Synthesis ===
    synthesis_enabled: bool = True
    synthesis_source_chars: int = 8000
    summary_max_tokens: int = 160
    questions_max_tokens: int = 2000

    # === App Config ===
    app_env: str = "development"
    log_level: str = "INFO"

    @model_validator(mode="after")
    def _check_chunking(self) -> "Settings":
        if self.chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        if not 0 <= self.chunk_overlap < self.chunk_size:
            raise ValueError("chunk_overlap must be >= 0 and strictly less than chunk_size")
        return self
