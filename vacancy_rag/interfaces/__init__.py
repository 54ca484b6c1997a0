"""Public interface definitions for all external collaborators.

Every model provider and store used by the ingestion pipeline is accessed
exclusively through the abstract base classes defined in this package.
Concrete adapters implement these interfaces and are injected at runtime
(see ``vacancy_rag/main.py``), so tests can substitute fakes without
touching module-level state.

CONCRETE PROVIDER MAP:
    Interface              ->  Concrete implementations (in vacancy_rag/providers/)
    -------------------------------------------------------------------------
    IEmbeddingProvider     ->  OpenAIEmbeddingProvider, NomicEmbeddingProvider
    ILLMProvider           ->  OpenAILLMProvider, OllamaLLMProvider
    IVectorStoreProvider   ->  ChromaDBProvider, InMemoryVectorStore
    IDocumentRepository    ->  SQLiteDocumentRepository
    IPositionRepository    ->  SQLitePositionRepository
"""

from vacancy_rag.interfaces.document_repository import IDocumentRepository
from vacancy_rag.interfaces.embedding_provider import IEmbeddingProvider
from vacancy_rag.interfaces.llm_provider import ILLMProvider
from vacancy_rag.interfaces.position_repository import IPositionRepository
from vacancy_rag.interfaces.vector_store_provider import IVectorStoreProvider

__all__ = [
    "IDocumentRepository",
    "IEmbeddingProvider",
    "ILLMProvider",
    "IPositionRepository",
    "IVectorStoreProvider",
]
