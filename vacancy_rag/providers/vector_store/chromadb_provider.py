"""ChromaDB vector store provider adapter.

Wraps ``chromadb.PersistentClient`` to implement :class:`IVectorStoreProvider`.
Uses cosine distance for similarity search.  Fully local, no external
service required.

Each chunk is one ChromaDB record: the id is the chunk id, the document is
the chunk text, and the metadata carries ``document_id``, ``position_id``,
``sequence``, ``embedding_model`` and ``created_at`` so queries can be
scoped with a ``where`` filter.
"""

from __future__ import annotations

import os
from datetime import datetime
from typing import Any

# ANONYMIZED_TELEMETRY must be set before chromadb is imported.
os.environ["ANONYMIZED_TELEMETRY"] = "False"

import chromadb
import structlog

from vacancy_rag.interfaces.embedding_provider import IEmbeddingProvider
from vacancy_rag.interfaces.vector_store_provider import IVectorStoreProvider
from vacancy_rag.models.document import ChunkMatch, DocumentChunk
from vacancy_rag.utils.errors import EmbeddingModelMismatchError, RepositoryError

logger = structlog.get_logger(logger_name=__name__)


class _NoopEmbeddingFunction(chromadb.EmbeddingFunction[list[str]]):
    """No-op embedding function that prevents ChromaDB from loading a model.

    Vectors are always computed by an :class:`IEmbeddingProvider` and passed
    in explicitly, so ChromaDB's default ONNX model is never needed.
    """

    def __call__(self, input: list[str]) -> list[list[float]]:
        raise NotImplementedError(
            "vacancy-rag uses pre-computed embeddings; "
            "ChromaDB's built-in embedding should never be called."
        )

    def name(self) -> str:
        """Return function name (required by ChromaDB's EmbeddingFunction protocol)."""
        return "noop_precomputed"


class ChromaDBProvider(IVectorStoreProvider):
    """Vector store provider backed by ChromaDB with local persistence.

    When an :class:`IEmbeddingProvider` is supplied, the stored vectors are
    checked against it at start-up and a mismatch raises
    :class:`EmbeddingModelMismatchError`.
    """

    def __init__(
        self,
        persist_directory: str = "./data/chromadb",
        collection_name: str = "position_document_chunks",
        embedding_provider: IEmbeddingProvider | None = None,
    ) -> None:
        self._embedding_provider = embedding_provider
        self._persist_directory = persist_directory
        self._collection_name = collection_name
        self._client = chromadb.PersistentClient(
            path=persist_directory,
            settings=chromadb.config.Settings(anonymized_telemetry=False),
        )
        # Collections persisted with a different embedding function reject
        # the no-op one; reopen with whatever was persisted.
        try:
            self._collection = self._client.get_or_create_collection(
                name=collection_name,
                metadata={"hnsw:space": "cosine"},
                embedding_function=_NoopEmbeddingFunction(),
            )
        except ValueError:
            self._collection = self._client.get_or_create_collection(
                name=collection_name,
                metadata={"hnsw:space": "cosine"},
            )

        if embedding_provider is not None:
            self._validate_embedding_dimensions(embedding_provider)

    # ------------------------------------------------------------------
    # Startup validation
    # ------------------------------------------------------------------

    def _validate_embedding_dimensions(self, embedding_provider: IEmbeddingProvider) -> None:
        """Verify the provider's dimension matches the vectors already stored.

        Peeks at a single stored vector.  A mismatch means every query would
        compare vectors from different models.
        """
        try:
            collection_count = self._collection.count()
            if collection_count == 0:
                return

            sample = self._collection.peek(limit=1)
            embeddings = sample.get("embeddings") if sample else None
            if embeddings is None or len(embeddings) == 0:
                return

            stored_dim = len(embeddings[0])
            expected_dim = embedding_provider.get_dimension()

            if stored_dim != expected_dim:
                logger.error(
                    "embedding_dimension_mismatch",
                    stored_dim=stored_dim,
                    expected_dim=expected_dim,
                    provider=embedding_provider.get_provider_name(),
                )
                raise EmbeddingModelMismatchError(
                    message=(
                        f"Embedding dimension mismatch: collection has {stored_dim}-dim "
                        f"vectors but provider '{embedding_provider.get_provider_name()}' "
                        f"produces {expected_dim}-dim vectors. "
                        f"Set OPENAI_EMBEDDING_MODEL to the model used to build the store."
                    ),
                    provider_name=self.get_provider_name(),
                )

            logger.info(
                "embedding_dimension_validated",
                dimension=stored_dim,
                stored_chunks=collection_count,
            )
        except EmbeddingModelMismatchError:
            raise
        except Exception as exc:
            logger.warning("embedding_dimension_check_skipped", error=str(exc))

    # ------------------------------------------------------------------
    # IVectorStoreProvider implementation
    # ------------------------------------------------------------------

    async def append_chunk(self, chunk: DocumentChunk, embedding: list[float]) -> DocumentChunk:
        """Store one chunk and its vector.  Visible to queries on return."""
        if not embedding:
            raise RepositoryError(
                message=f"Refusing to store chunk {chunk.chunk_id} without an embedding",
                provider_name=self.get_provider_name(),
            )
        try:
            self._collection.add(
                ids=[chunk.chunk_id],
                embeddings=[embedding],
                documents=[chunk.content],
                metadatas=[self._chunk_to_metadata(chunk)],
            )
        except Exception as exc:
            raise RepositoryError(
                message=f"ChromaDB append_chunk failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        logger.debug(
            "chromadb_append_chunk",
            chunk_id=chunk.chunk_id,
            document_id=chunk.document_id,
            sequence=chunk.sequence,
        )
        return chunk

    async def nearest_chunks(
        self,
        position_id: str,
        query_embedding: list[float],
        top_k: int = 10,
        embedding_model: str | None = None,
    ) -> list[ChunkMatch]:
        """Return the *top_k* chunks of *position_id* nearest the query vector."""
        if top_k < 1:
            return []

        try:
            total = self._collection.count()
            if total == 0:
                return []

            results = self._collection.query(
                query_embeddings=[query_embedding],
                n_results=min(top_k, total),
                where=self._scope_filter(position_id, embedding_model),
                include=["documents", "metadatas", "distances"],
            )
        except Exception as exc:
            raise RepositoryError(
                message=f"ChromaDB query failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        if not results["ids"] or not results["ids"][0]:
            return []

        ids = results["ids"][0]
        documents = results["documents"][0] if results["documents"] else [""] * len(ids)
        metadatas = results["metadatas"][0] if results["metadatas"] else [{}] * len(ids)
        distances = results["distances"][0] if results["distances"] else [0.0] * len(ids)

        matches = [
            ChunkMatch(
                chunk_id=chunk_id,
                document_id=str(meta.get("document_id", "")),
                sequence=int(meta.get("sequence", 0)),
                content=text or "",
                # Cosine distance can come back as a tiny negative float.
                distance=max(0.0, float(distance)),
            )
            for chunk_id, text, meta, distance in zip(
                ids, documents, metadatas, distances, strict=True
            )
        ]
        matches.sort(key=lambda m: m.distance)

        logger.info(
            "chromadb_query",
            position_id=position_id,
            embedding_model=embedding_model,
            results_count=len(matches),
            top_distance=matches[0].distance if matches else None,
        )
        return matches

    async def count_chunks(self, document_id: str) -> int:
        try:
            existing = self._collection.get(
                where={"document_id": document_id},
                include=["metadatas"],
            )
        except Exception as exc:
            raise RepositoryError(
                message=f"ChromaDB count failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        return len(existing["ids"]) if existing["ids"] else 0

    async def list_chunks(self, document_id: str) -> list[DocumentChunk]:
        try:
            existing = self._collection.get(
                where={"document_id": document_id},
                include=["documents", "metadatas"],
            )
        except Exception as exc:
            raise RepositoryError(
                message=f"ChromaDB get failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        ids = existing["ids"] or []
        documents = existing["documents"] or [""] * len(ids)
        metadatas = existing["metadatas"] or [{}] * len(ids)
        chunks = [
            self._metadata_to_chunk(chunk_id, meta, text)
            for chunk_id, text, meta in zip(ids, documents, metadatas, strict=True)
        ]
        return sorted(chunks, key=lambda c: c.sequence)

    def get_provider_name(self) -> str:
        return "chromadb"

    def is_available(self) -> bool:
        """Return ``True`` if the ChromaDB collection is accessible."""
        try:
            self._collection.count()
            return True
        except Exception:
            return False

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _scope_filter(position_id: str, embedding_model: str | None) -> dict[str, Any]:
        """Build the ChromaDB ``where`` clause for a position-scoped query."""
        if not embedding_model:
            return {"position_id": position_id}
        return {
            "$and": [
                {"position_id": position_id},
                {"embedding_model": embedding_model},
            ]
        }

    @staticmethod
    def _chunk_to_metadata(chunk: DocumentChunk) -> dict[str, str | int]:
        return {
            "document_id": chunk.document_id,
            "position_id": chunk.position_id,
            "sequence": chunk.sequence,
            "embedding_model": chunk.embedding_model,
            "created_at": chunk.created_at.isoformat(),
        }

    @staticmethod
    def _metadata_to_chunk(chunk_id: str, meta: dict[str, Any], text: str | None) -> DocumentChunk:
        kwargs: dict[str, Any] = {
            "chunk_id": chunk_id,
            "document_id": str(meta.get("document_id", "")),
            "position_id": str(meta.get("position_id", "")),
            "sequence": int(meta.get("sequence", 0)),
            "content": text or "",
            "embedding_model": str(meta.get("embedding_model", "")),
        }
        created_at = meta.get("created_at")
        if created_at:
            kwargs["created_at"] = datetime.fromisoformat(str(created_at))
        return DocumentChunk(**kwargs)
