"""Vector store provider implementations.

ChromaDB is the persistent store; InMemoryVectorStore is a numpy-backed
stand-in for tests and throwaway runs.  Select one with VECTOR_STORE
(``chromadb`` or ``memory``); main.py does the wiring.
"""

from vacancy_rag.providers.vector_store.chromadb_provider import ChromaDBProvider
from vacancy_rag.providers.vector_store.memory_vector_store import InMemoryVectorStore

__all__ = ["ChromaDBProvider", "InMemoryVectorStore"]
