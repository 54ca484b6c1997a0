"""Orchestrator for the position document ingestion pipeline.

Pipeline stages: **extract -> document -> chunk -> embed + store -> count -> synthesize**.

The :class:`IngestionService` coordinates its collaborators (text
extractor, chunker, embedding provider, vector store, document repository,
synthesizer) without any of them knowing about each other.  All of them
are injected, so providers can be swapped (e.g. OpenAI -> Ollama, ChromaDB
-> in-memory) without changing this class.

Failure semantics:

- Extraction fails -> nothing is written; the error propagates.
- Extraction succeeds with blank text -> a Document with zero chunks.
- Embedding or storage fails on chunk *k*, or the count write fails ->
  chunks ``0..k-1`` stay stored, the document is marked ``partial`` with no
  chunk count, and the error propagates.
- Synthesis fails -> logged; ingestion still succeeds.
"""

from __future__ import annotations

import asyncio
import time
import uuid
from typing import TYPE_CHECKING, Any

import structlog

from vacancy_rag.models.document import DocumentChunk, DocumentStatus, IngestionResult
from vacancy_rag.services.extraction.text_extractor import TextExtractor
from vacancy_rag.services.ingestion.chunker import TextChunker
from vacancy_rag.utils.errors import ExtractionError, RepositoryError

if TYPE_CHECKING:
    from vacancy_rag.interfaces.document_repository import IDocumentRepository
    from vacancy_rag.interfaces.embedding_provider import IEmbeddingProvider
    from vacancy_rag.interfaces.vector_store_provider import IVectorStoreProvider
    from vacancy_rag.models.position import SynthesisReport
    from vacancy_rag.services.synthesis.synthesizer import PositionSynthesizer

logger = structlog.get_logger(logger_name=__name__)


class IngestionService:
    """Turns one uploaded document into a Document row plus embedded chunks.

    Parameters
    ----------
    extractor:
        Converts uploaded bytes to plain text.
    chunker:
        Splits the text into overlapping windows.
    embedding_provider:
        Generates one vector per chunk.
    vector_store:
        Stores each chunk with its vector.
    document_repository:
        Owns the Document row (preview, status, chunk count).
    synthesizer:
        Optional; when absent the synthesis stage is skipped.
    document_preview_chars:
        Length of the text preview stored on the Document.
    extraction_timeout_seconds:
        Upper bound on the extraction worker thread.
    """

    def __init__(
        self,
        extractor: TextExtractor,
        chunker: TextChunker,
        embedding_provider: IEmbeddingProvider,
        vector_store: IVectorStoreProvider,
        document_repository: IDocumentRepository,
        synthesizer: PositionSynthesizer | None = None,
        document_preview_chars: int = 10_000,
        extraction_timeout_seconds: float = 60.0,
    ) -> None:
        self._extractor = extractor
        self._chunker = chunker
        self._embedding_provider = embedding_provider
        self._vector_store = vector_store
        self._documents = document_repository
        self._synthesizer = synthesizer
        self._preview_chars = document_preview_chars
        self._extraction_timeout = extraction_timeout_seconds

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def ingest(
        self,
        buffer: bytes,
        file_name: str,
        mime_type: str,
        position_id: str,
        params: dict[str, Any] | None = None,
        run_synthesis: bool = True,
    ) -> IngestionResult:
        """Ingest one uploaded document for *position_id*.

        A readable upload with no text yields a Document with zero chunks;
        synthesis still runs for it.

        Returns
        -------
        IngestionResult
            Document id, persisted chunk count, status and synthesis report.

        Raises
        ------
        ExtractionError
            The document could not be read; no Document row was created.
        EmbeddingError, RepositoryError
            A chunk could not be embedded or stored, or the chunk count
            could not be recorded.  The Document is left ``partial`` with
            the chunks stored before the failure.
        """
        start = time.monotonic()

        with structlog.contextvars.bound_contextvars(position_id=position_id):
            text = await self._extract(buffer, mime_type, file_name)

            document = await self._documents.create_document(
                position_id=position_id,
                file_name=file_name,
                mime_type=mime_type,
                preview_text=text[: self._preview_chars],
            )
            document_id = document.document_id

            with structlog.contextvars.bound_contextvars(document_id=document_id):
                pieces = self._chunker.split(text)
                stored = await self._store_chunks(document_id, position_id, pieces)

                if params:
                    await self._documents.set_training_params(document_id, params)

                report: SynthesisReport | None = None
                if run_synthesis and self._synthesizer is not None:
                    report = await self._run_synthesis(position_id, text)

                elapsed = time.monotonic() - start
                logger.info(
                    "ingestion_complete",
                    file_name=file_name,
                    chunks=stored,
                    synthesized=report is not None,
                    elapsed_s=round(elapsed, 2),
                )

        return IngestionResult(
            document_id=document_id,
            chunk_count=stored,
            status=DocumentStatus.READY,
            synthesis=report,
            elapsed_seconds=round(elapsed, 3),
        )

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    async def _extract(self, buffer: bytes, mime_type: str, file_name: str) -> str:
        try:
            text = await asyncio.wait_for(
                asyncio.to_thread(self._extractor.extract, buffer, mime_type, file_name),
                timeout=self._extraction_timeout,
            )
        except asyncio.TimeoutError as exc:
            logger.error(
                "extraction_timeout",
                file_name=file_name,
                timeout_s=self._extraction_timeout,
            )
            raise ExtractionError(
                message=f"Extraction timed out after {self._extraction_timeout:g}s",
            ) from exc
        except ExtractionError as exc:
            logger.error("extraction_failed", file_name=file_name, error=str(exc))
            raise

        if not text.strip():
            logger.warning("extraction_empty", file_name=file_name, mime_type=mime_type)
        return text

    async def _store_chunks(self, document_id: str, position_id: str, pieces: list[str]) -> int:
        """Embed and append each piece in order, then record the count.

        Any failure marks the document ``partial`` before it propagates.
        """
        model_name = self._embedding_provider.get_model_name()
        stored = 0
        try:
            for sequence, piece in enumerate(pieces):
                vector = await self._embedding_provider.embed_single(piece)
                chunk = DocumentChunk(
                    chunk_id=str(uuid.uuid4()),
                    document_id=document_id,
                    position_id=position_id,
                    sequence=sequence,
                    content=piece,
                    embedding_model=model_name,
                )
                await self._vector_store.append_chunk(chunk, vector)
                stored += 1
            await self._documents.set_chunk_count(document_id, stored)
        except Exception as exc:
            logger.error(
                "ingestion_partial",
                persisted=stored,
                total=len(pieces),
                error=str(exc),
                error_type=type(exc).__name__,
            )
            try:
                await self._documents.mark_partial(document_id)
            except RepositoryError as mark_exc:
                logger.error("mark_partial_failed", error=str(mark_exc))
            raise
        return stored

    async def _run_synthesis(self, position_id: str, text: str) -> SynthesisReport | None:
        try:
            return await self._synthesizer.synthesize(position_id, text)
        except Exception as exc:  # noqa: BLE001
            logger.warning(
                "synthesis_failed",
                error=str(exc),
                detail="Document and chunks are stored; synthesis skipped.",
            )
            return None
