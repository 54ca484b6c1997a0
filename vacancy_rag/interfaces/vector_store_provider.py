"""Abstract base class for vector-store service providers.

Defines the contract for storing embedded document chunks and answering
position-scoped nearest-neighbour queries.  Implementations may wrap
ChromaDB (persistent, local), an in-memory numpy index, or any other
vector database.

Scoping is mandatory: a query for one position must never return chunks
belonging to another position's documents.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from vacancy_rag.models.document import ChunkMatch, DocumentChunk


# Concrete implementations: ChromaDBProvider, InMemoryVectorStore
# Located in: vacancy_rag/providers/vector_store/
class IVectorStoreProvider(ABC):
    """Contract for chunk + vector persistence and similarity search."""

    @abstractmethod
    async def append_chunk(self, chunk: DocumentChunk, embedding: list[float]) -> DocumentChunk:
        """Persist one chunk with its embedding vector.

        Synchronous per call: when this returns the chunk is durable and
        visible to :meth:`nearest_chunks`.

        Raises
        ------
        vacancy_rag.utils.errors.RepositoryError
            If the store rejects the write (including a dimension mismatch).
        """

    @abstractmethod
    async def nearest_chunks(
        self,
        position_id: str,
        query_embedding: list[float],
        top_k: int = 10,
        embedding_model: str | None = None,
    ) -> list[ChunkMatch]:
        """Return the *top_k* chunks nearest to *query_embedding*.

        Parameters
        ----------
        position_id:
            Only chunks of documents owned by this position are considered.
        query_embedding:
            The query vector, produced by the same embedding model as the
            stored chunks.
        top_k:
            Maximum number of results.
        embedding_model:
            When given, chunks embedded with any other model are ignored.

        Returns
        -------
        list[ChunkMatch]
            Zero or more matches in non-decreasing distance order.
        """

    @abstractmethod
    async def count_chunks(self, document_id: str) -> int:
        """Return the number of stored chunks for *document_id*."""

    @abstractmethod
    async def list_chunks(self, document_id: str) -> list[DocumentChunk]:
        """Return the stored chunks of *document_id* ordered by ``sequence``."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier, e.g. ``"chromadb"``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if the store is accessible."""
