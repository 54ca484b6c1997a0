"""In-memory vector store using numpy cosine distance.

Used for tests and the ``VECTOR_STORE=memory`` setting.  Nothing survives a
restart.  Vectors are normalised once on insert so a query is a single
matrix-vector product.
"""

from __future__ import annotations

import asyncio

import numpy as np
import structlog

from vacancy_rag.interfaces.vector_store_provider import IVectorStoreProvider
from vacancy_rag.models.document import ChunkMatch, DocumentChunk
from vacancy_rag.utils.errors import RepositoryError

logger = structlog.get_logger(logger_name=__name__)


class InMemoryVectorStore(IVectorStoreProvider):
    """Brute-force cosine search over chunks held in process memory."""

    def __init__(self) -> None:
        self._chunks: list[DocumentChunk] = []
        self._vectors: list[np.ndarray] = []
        self._dimension: int | None = None
        self._lock = asyncio.Lock()

    async def append_chunk(self, chunk: DocumentChunk, embedding: list[float]) -> DocumentChunk:
        vector = np.asarray(embedding, dtype=np.float32)
        if vector.ndim != 1 or vector.size == 0:
            raise RepositoryError(
                message=f"Invalid embedding for chunk {chunk.chunk_id}",
                provider_name=self.get_provider_name(),
            )

        async with self._lock:
            if self._dimension is None:
                self._dimension = int(vector.size)
            elif vector.size != self._dimension:
                raise RepositoryError(
                    message=(
                        f"Embedding dimension {vector.size} does not match "
                        f"stored dimension {self._dimension}"
                    ),
                    provider_name=self.get_provider_name(),
                )
            if any(c.chunk_id == chunk.chunk_id for c in self._chunks):
                raise RepositoryError(
                    message=f"Duplicate chunk id {chunk.chunk_id}",
                    provider_name=self.get_provider_name(),
                )
            self._chunks.append(chunk)
            self._vectors.append(_normalise(vector))

        return chunk

    async def nearest_chunks(
        self,
        position_id: str,
        query_embedding: list[float],
        top_k: int = 10,
        embedding_model: str | None = None,
    ) -> list[ChunkMatch]:
        if top_k < 1:
            return []

        candidates = [
            (chunk, vector)
            for chunk, vector in zip(self._chunks, self._vectors, strict=True)
            if chunk.position_id == position_id
            and (not embedding_model or chunk.embedding_model == embedding_model)
        ]
        if not candidates:
            return []

        query = _normalise(np.asarray(query_embedding, dtype=np.float32))
        if query.size != self._dimension:
            raise RepositoryError(
                message=(
                    f"Query dimension {query.size} does not match "
                    f"stored dimension {self._dimension}"
                ),
                provider_name=self.get_provider_name(),
            )

        matrix = np.vstack([vector for _, vector in candidates])
        distances = np.clip(1.0 - matrix @ query, 0.0, 2.0)
        # Stable sort keeps equal distances in insertion order.
        order = np.argsort(distances, kind="stable")[:top_k]

        return [
            ChunkMatch(
                chunk_id=candidates[i][0].chunk_id,
                document_id=candidates[i][0].document_id,
                sequence=candidates[i][0].sequence,
                content=candidates[i][0].content,
                distance=float(distances[i]),
            )
            for i in order
        ]

    async def count_chunks(self, document_id: str) -> int:
        return sum(1 for c in self._chunks if c.document_id == document_id)

    async def list_chunks(self, document_id: str) -> list[DocumentChunk]:
        return sorted(
            (c for c in self._chunks if c.document_id == document_id),
            key=lambda c: c.sequence,
        )

    def get_provider_name(self) -> str:
        return "memory"

    def is_available(self) -> bool:
        return True


def _normalise(vector: np.ndarray) -> np.ndarray:
    norm = float(np.linalg.norm(vector))
    if norm == 0.0:
        return vector
    return vector / norm
