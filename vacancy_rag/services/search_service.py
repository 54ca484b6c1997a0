"""Position-scoped semantic search over stored document chunks.

Embeds the query with the same provider used at ingestion time and asks
the vector store for the nearest chunks of one position.  The provider's
model name is passed along so vectors from a different embedding model are
never compared against the query.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from vacancy_rag.interfaces.embedding_provider import IEmbeddingProvider
    from vacancy_rag.interfaces.vector_store_provider import IVectorStoreProvider
    from vacancy_rag.models.document import ChunkMatch

logger = structlog.get_logger(logger_name=__name__)


class SimilaritySearchService:
    """Nearest-neighbour search within a position's documents."""

    def __init__(
        self,
        embedding_provider: IEmbeddingProvider,
        vector_store: IVectorStoreProvider,
    ) -> None:
        self._embedding_provider = embedding_provider
        self._vector_store = vector_store

    async def search(self, position_id: str, query_text: str, top_k: int = 10) -> list[ChunkMatch]:
        """Return up to *top_k* chunks of *position_id* nearest to *query_text*.

        An empty or whitespace-only query returns ``[]`` without calling the
        embedding provider.

        Raises
        ------
        ValueError
            If *top_k* is less than 1.
        vacancy_rag.utils.errors.EmbeddingError
            If the query cannot be embedded.
        """
        if top_k < 1:
            raise ValueError(f"top_k must be >= 1, got {top_k}")
        if not query_text or not query_text.strip():
            return []

        query_embedding = await self._embedding_provider.embed_single(query_text)
        matches = await self._vector_store.nearest_chunks(
            position_id,
            query_embedding,
            top_k=top_k,
            embedding_model=self._embedding_provider.get_model_name(),
        )

        logger.info(
            "similarity_search",
            position_id=position_id,
            query_length=len(query_text),
            top_k=top_k,
            results_count=len(matches),
        )
        return matches
