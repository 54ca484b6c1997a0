"""Document ingestion and retrieval data models.

Defines Pydantic v2 models for uploaded documents, their embedded chunks,
nearest-neighbour search results, and the per-upload ingestion report.
All models use frozen config; status changes produce new instances via
``model_copy(update={...})`` or are re-read from the repository.

Ingestion overview:
    1. EXTRACT: the uploaded bytes are converted to plain text.
    2. DOCUMENT: a Document row is created holding a bounded text preview.
    3. CHUNK: the full text is split into overlapping windows.
    4. EMBED + STORE: each window becomes a DocumentChunk with a vector.
    5. COUNT: the Document's chunk_count is set once every chunk is stored.

See vacancy_rag/services/ingestion/ for the pipeline and
vacancy_rag/providers/vector_store/ for the nearest-neighbour stores.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from vacancy_rag.models.position import SynthesisReport


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)  # noqa: UP017


# ---------------------------------------------------------------------------
# DocumentStatus -- lifecycle marker for one upload.
# ---------------------------------------------------------------------------
class DocumentStatus(str, Enum):  # noqa: UP042: StrEnum requires Python 3.11+
    """Ingestion state of a Document.

    PROCESSING -> READY    every chunk embedded and stored, chunk_count set
    PROCESSING -> PARTIAL  a chunk failed; earlier chunks remain stored and
                           chunk_count stays unset
    """

    PROCESSING = "processing"
    READY = "ready"
    PARTIAL = "partial"


# ---------------------------------------------------------------------------
# Document -- one uploaded file attached to a position.
# ---------------------------------------------------------------------------
class Document(BaseModel):
    """An uploaded document owned by a position.

    Only derived text is kept: ``content`` is a bounded preview used as LLM
    context without re-reading the whole file.  The original bytes live in
    external storage referenced by ``file_name``.
    """

    model_config = ConfigDict(frozen=True)

    document_id: str = Field(description="Unique identifier generated at creation.")
    position_id: str = Field(description="Owning position; the retrieval scope key.")
    file_name: str = Field(description="Reference to the externally stored original.")
    file_type: str = Field(description="Declared MIME type used to select the extractor.")
    content: str = Field(default="", description="Bounded preview of the extracted text.")
    chunk_count: int | None = Field(
        default=None,
        ge=0,
        description="Number of stored chunks; unset until chunk persistence completes.",
    )
    status: DocumentStatus = DocumentStatus.PROCESSING
    training_params: dict[str, Any] | None = Field(
        default=None,
        description="Opaque ingestion options, persisted only when supplied.",
    )
    uploaded_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)


# ---------------------------------------------------------------------------
# DocumentChunk -- the unit of embedding and retrieval.
# ---------------------------------------------------------------------------
class DocumentChunk(BaseModel):
    """A window of a document's extracted text, stored alongside its vector.

    ``position_id`` is denormalised from the owning Document so that vector
    stores can scope nearest-neighbour queries without a join.  ``sequence``
    is the chunk's index in the source text, so ordering never depends on
    insertion order.
    """

    model_config = ConfigDict(frozen=True)

    chunk_id: str = Field(description="Unique identifier (UUID) for this chunk.")
    document_id: str = Field(description="Owning document.")
    position_id: str = Field(description="Position that owns the parent document.")
    sequence: int = Field(ge=0, description="0-based index of this chunk in the source text.")
    content: str = Field(description="The chunk's text.")
    embedding_model: str = Field(
        default="",
        description="Identifier of the embedding model that produced the stored vector.",
    )
    created_at: datetime = Field(default_factory=_utcnow)


# ---------------------------------------------------------------------------
# ChunkMatch -- one nearest-neighbour search hit.
# ---------------------------------------------------------------------------
class ChunkMatch(BaseModel):
    """A stored chunk returned by a similarity search with its distance.

    Distances are non-negative and smaller means more similar; results are
    always returned nearest first.
    """

    model_config = ConfigDict(frozen=True)

    chunk_id: str
    document_id: str
    sequence: int = Field(ge=0)
    content: str
    distance: float = Field(ge=0.0, description="Cosine distance to the query vector.")


# ---------------------------------------------------------------------------
# IngestionResult -- what the upload caller gets back.
# ---------------------------------------------------------------------------
class IngestionResult(BaseModel):
    """Outcome of one ``IngestionService.ingest`` call.

    Keeps "document and chunks persisted" apart from "summary and questions
    generated", because the two can diverge: ``synthesis`` is ``None`` when
    the synthesis step was skipped or crashed.
    """

    model_config = ConfigDict(frozen=True)

    document_id: str
    chunk_count: int = Field(default=0, ge=0, description="Chunks actually persisted.")
    status: DocumentStatus = DocumentStatus.READY
    synthesis: SynthesisReport | None = None
    elapsed_seconds: float = Field(default=0.0, ge=0.0)
