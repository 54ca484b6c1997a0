"""Dependency wiring for vacancy-rag.

Selects concrete providers from :class:`Settings` and assembles the
ingestion, synthesis and search services.  Nothing here runs at import
time; callers (the CLI, tests, an embedding web app) build their own
component set with :func:`build_services`.
"""

from __future__ import annotations

from typing import Any

import structlog

from vacancy_rag.config.settings import Settings
from vacancy_rag.interfaces.embedding_provider import IEmbeddingProvider
from vacancy_rag.interfaces.llm_provider import ILLMProvider
from vacancy_rag.interfaces.vector_store_provider import IVectorStoreProvider
from vacancy_rag.providers.embedding.nomic_embedding_provider import NomicEmbeddingProvider
from vacancy_rag.providers.embedding.openai_embedding_provider import OpenAIEmbeddingProvider
from vacancy_rag.providers.llm.ollama_provider import OllamaLLMProvider
from vacancy_rag.providers.llm.openai_provider import OpenAILLMProvider
from vacancy_rag.providers.repository.sqlite_document_repository import SQLiteDocumentRepository
from vacancy_rag.providers.repository.sqlite_position_repository import SQLitePositionRepository
from vacancy_rag.providers.vector_store.memory_vector_store import InMemoryVectorStore
from vacancy_rag.services.extraction.text_extractor import TextExtractor
from vacancy_rag.services.ingestion.chunker import TextChunker
from vacancy_rag.services.ingestion.ingestion_service import IngestionService
from vacancy_rag.services.search_service import SimilaritySearchService
from vacancy_rag.services.synthesis.synthesizer import PositionSynthesizer
from vacancy_rag.utils.errors import ConfigurationError

logger = structlog.get_logger(logger_name=__name__)


# ---------------------------------------------------------------------------
# Provider selection
# ---------------------------------------------------------------------------


def build_llm_provider(app_settings: Settings) -> ILLMProvider:
    """Return OpenAI when an API key is set, otherwise the local Ollama adapter."""
    if app_settings.openai_api_key:
        return OpenAILLMProvider(settings=app_settings)
    return OllamaLLMProvider(settings=app_settings)


def build_embedding_provider(app_settings: Settings) -> IEmbeddingProvider:
    """Select the embedding provider named by ``EMBEDDING_PROVIDER``.

    ``auto`` picks OpenAI when an API key is set, then Nomic/Ollama if the
    server is reachable.

    Raises
    ------
    ConfigurationError
        If the requested provider is unknown or nothing is available.
    """
    choice = app_settings.embedding_provider.lower()

    if choice == "openai":
        if not app_settings.openai_api_key:
            raise ConfigurationError(
                message="EMBEDDING_PROVIDER=openai requires OPENAI_API_KEY",
            )
        return OpenAIEmbeddingProvider(settings=app_settings)
    if choice == "nomic":
        return NomicEmbeddingProvider(settings=app_settings)
    if choice != "auto":
        raise ConfigurationError(message=f"Unknown embedding provider: {choice!r}")

    if app_settings.openai_api_key:
        return OpenAIEmbeddingProvider(settings=app_settings)

    provider = NomicEmbeddingProvider(settings=app_settings)
    if provider.is_available():
        return provider

    raise ConfigurationError(
        message="No embedding provider available: set OPENAI_API_KEY or start Ollama",
    )


def build_vector_store(
    app_settings: Settings, embedding_provider: IEmbeddingProvider | None = None
) -> IVectorStoreProvider:
    """Return the vector store named by ``VECTOR_STORE``.

    With an *embedding_provider* the ChromaDB store checks its stored vector
    dimension against it at start-up.
    """
    backend = app_settings.vector_store.lower()
    if backend == "memory":
        return InMemoryVectorStore()
    if backend == "chromadb":
        # Deferred: importing chromadb is slow and touches the environment.
        from vacancy_rag.providers.vector_store.chromadb_provider import ChromaDBProvider

        return ChromaDBProvider(
            persist_directory=app_settings.chromadb_persist_dir,
            collection_name=app_settings.chromadb_collection,
            embedding_provider=embedding_provider,
        )
    raise ConfigurationError(message=f"Unknown vector store: {backend!r}")


# ---------------------------------------------------------------------------
# Full assembly
# ---------------------------------------------------------------------------


def build_services(
    app_settings: Settings,
    embedding_provider: IEmbeddingProvider | None = None,
    llm: ILLMProvider | None = None,
    vector_store: IVectorStoreProvider | None = None,
) -> dict[str, Any]:
    """Construct every provider and service for one application instance.

    Any provider passed in is used as-is instead of being selected from
    settings, which is how tests substitute fakes.

    Returns a flat dict of named components.  Call :func:`initialize_storage`
    before first use so the SQLite tables exist.
    """
    embedding_provider = embedding_provider or build_embedding_provider(app_settings)
    llm = llm or build_llm_provider(app_settings)
    vector_store = vector_store or build_vector_store(app_settings, embedding_provider)

    document_repository = SQLiteDocumentRepository(db_path=app_settings.sqlite_db_path)
    position_repository = SQLitePositionRepository(db_path=app_settings.sqlite_db_path)

    synthesizer = None
    if app_settings.synthesis_enabled:
        synthesizer = PositionSynthesizer(
            llm=llm,
            position_repository=position_repository,
            settings=app_settings,
        )

    ingestion_service = IngestionService(
        extractor=TextExtractor(),
        chunker=TextChunker(
            chunk_size=app_settings.chunk_size,
            overlap=app_settings.chunk_overlap,
        ),
        embedding_provider=embedding_provider,
        vector_store=vector_store,
        document_repository=document_repository,
        synthesizer=synthesizer,
        document_preview_chars=app_settings.document_preview_chars,
        extraction_timeout_seconds=app_settings.extraction_timeout_seconds,
    )
    search_service = SimilaritySearchService(
        embedding_provider=embedding_provider,
        vector_store=vector_store,
    )

    logger.info(
        "services_built",
        embedding_provider=embedding_provider.get_provider_name(),
        embedding_model=embedding_provider.get_model_name(),
        llm_provider=llm.get_provider_name(),
        vector_store=vector_store.get_provider_name(),
        synthesis_enabled=synthesizer is not None,
    )

    return {
        "embedding_provider": embedding_provider,
        "llm": llm,
        "vector_store": vector_store,
        "document_repository": document_repository,
        "position_repository": position_repository,
        "synthesizer": synthesizer,
        "ingestion_service": ingestion_service,
        "search_service": search_service,
    }


async def initialize_storage(components: dict[str, Any]) -> None:
    """Create the SQLite tables used by the repositories."""
    await components["document_repository"].initialize()
    await components["position_repository"].initialize()
