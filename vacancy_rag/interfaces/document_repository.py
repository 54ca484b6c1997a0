"""Abstract base class for Document row persistence.

The document repository owns the Document record (preview text, status,
chunk count, training params).  Chunk rows and their vectors live in the
vector store; together the two make up the document/chunk persistence
layer the ingestion pipeline writes to.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from vacancy_rag.models.document import Document


# Concrete implementation: SQLiteDocumentRepository (vacancy_rag/providers/repository/)
class IDocumentRepository(ABC):
    """Contract for creating and updating Document rows.

    All methods raise :class:`~vacancy_rag.utils.errors.RepositoryError`
    on storage failure.
    """

    @abstractmethod
    async def initialize(self) -> None:
        """Create tables and indices if they don't exist."""

    @abstractmethod
    async def create_document(
        self,
        position_id: str,
        file_name: str,
        mime_type: str,
        preview_text: str,
    ) -> Document:
        """Insert a new Document in ``processing`` state and return it."""

    @abstractmethod
    async def set_chunk_count(self, document_id: str, count: int) -> None:
        """Record the final chunk count and mark the document ``ready``."""

    @abstractmethod
    async def mark_partial(self, document_id: str) -> None:
        """Mark the document ``partial``; the chunk count stays unset."""

    @abstractmethod
    async def set_training_params(self, document_id: str, params: dict[str, Any]) -> None:
        """Persist ingestion options.  A no-op when *params* is empty."""

    @abstractmethod
    async def get_document(self, document_id: str) -> Document | None:
        """Return the document, or ``None`` if it doesn't exist."""

    @abstractmethod
    async def list_documents(self, position_id: str) -> list[Document]:
        """Return the documents of a position, newest first."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this repository."""
